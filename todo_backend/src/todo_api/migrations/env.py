"""
Alembic environment for the todos schema.

Driven programmatically by todo_api.migrate.MigrationRunner, which hands
over an open connection through ``config.attributes["connection"]``. When
run without one (e.g. the alembic CLI), a connection is built from the
``sqlalchemy.url`` option.
"""

from alembic import context
from sqlalchemy import engine_from_config, pool

from todo_api.db import metadata

config = context.config

target_metadata = metadata


def run_migrations_offline() -> None:
    """Emit the migration SQL without a live connection."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def _run_with_connection(connection) -> None:  # noqa: ANN001
    context.configure(connection=connection, target_metadata=target_metadata)

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connection = config.attributes.get("connection")
    if connection is not None:
        _run_with_connection(connection)
        return

    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        _run_with_connection(connection)


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
