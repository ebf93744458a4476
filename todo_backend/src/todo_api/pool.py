from __future__ import annotations

import logging

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.pool import QueuePool

from .errors import StartupError
from .settings import Settings

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
def create_pool(settings: Settings) -> Engine:
    """
    Build the connection pool for the configured store and verify it can
    reach the store.

    The returned Engine owns a QueuePool bounded by
    ``pool_size + max_overflow`` connections. A checkout on a saturated pool
    blocks for up to ``pool_timeout`` seconds and then raises
    ``sqlalchemy.exc.TimeoutError``; retries are left to the caller.

    The engine is an explicit handle: whoever calls this function owns it and
    must call ``dispose_pool`` on shutdown.

    Raises:
        StartupError: the URL is malformed or the store cannot be reached.
    """
    try:
        url = make_url(settings.database_url)
    except ArgumentError as e:
        raise StartupError(f"Malformed DATABASE_URL: {e}") from e

    is_sqlite = url.get_backend_name() == "sqlite"

    # pysqlite connections are handed across worker threads by the pool
    connect_args: dict = {"check_same_thread": False} if is_sqlite else {}

    try:
        engine = create_engine(
            url,
            poolclass=QueuePool,
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
            pool_timeout=settings.pool_timeout,
            pool_pre_ping=True,  # Enable connection health checks
            echo=False,
            connect_args=connect_args,
        )
    except (ArgumentError, ImportError) as e:
        raise StartupError(f"Could not build connection pool for {url!r}: {e}") from e

    if is_sqlite:
        _use_explicit_sqlite_transactions(engine)

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        engine.dispose()
        raise StartupError(f"Could not connect to {url!r}: {e}") from e

    logger.info(
        "Connection pool ready for %r (size=%d, overflow=%d, timeout=%ss)",
        url,
        settings.pool_size,
        settings.max_overflow,
        settings.pool_timeout,
    )
    return engine


def _use_explicit_sqlite_transactions(engine: Engine) -> None:
    """
    Make pysqlite emit BEGIN when SQLAlchemy opens a transaction, so DDL run
    by the migrations is rolled back together with its ledger row.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):  # noqa: ANN001
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):  # noqa: ANN001
        conn.exec_driver_sql("BEGIN")


# PUBLIC_INTERFACE
def dispose_pool(engine: Engine) -> None:
    """Close every pooled connection. Connections checked out elsewhere are closed on return."""
    engine.dispose()
    logger.info("Connection pool for %r disposed", engine.url)
