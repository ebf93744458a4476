"""
Startup migration step.

Applies the Alembic revisions shipped in ``todo_api/migrations`` against the
pooled engine. Alembic's version table inside the target store is the ledger
of applied revisions, so running again with nothing pending is a no-op.
"""
from __future__ import annotations

import logging
import os
from typing import List, Optional

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy.engine import Engine

from .errors import StartupError

logger = logging.getLogger(__name__)

DEFAULT_SCRIPT_LOCATION = os.path.join(os.path.dirname(os.path.abspath(__file__)), "migrations")


# PUBLIC_INTERFACE
class MigrationRunner:
    """
    Apply pending schema migrations, in authored order, exactly once.

    All pending revisions are applied inside one transaction: either every
    revision and its ledger entry is committed or the store is rolled back.
    """

    def __init__(self, engine: Engine, script_location: Optional[str] = None) -> None:
        self._engine = engine
        self._config = Config()
        self._config.set_main_option("script_location", script_location or DEFAULT_SCRIPT_LOCATION)
        self._config.set_main_option(
            "sqlalchemy.url", engine.url.render_as_string(hide_password=False).replace("%", "%%")
        )

    def revisions(self) -> List[str]:
        """All known revision ids, oldest first."""
        script = ScriptDirectory.from_config(self._config)
        return [s.revision for s in reversed(list(script.walk_revisions()))]

    def current(self) -> Optional[str]:
        """Revision recorded in the store's ledger, or None on a fresh store."""
        with self._engine.connect() as conn:
            return MigrationContext.configure(conn).get_current_revision()

    def pending(self) -> List[str]:
        """Revisions not yet applied, in the order they will run."""
        ordered = self.revisions()
        current = self.current()
        if current is None:
            return ordered
        if current not in ordered:
            raise StartupError(f"Store is at unknown schema revision {current!r}")
        return ordered[ordered.index(current) + 1:]

    def run(self) -> List[str]:
        """
        Apply every pending revision and return the ids that were applied.

        Raises:
            StartupError: the ledger cannot be read or any revision fails.
        """
        try:
            to_apply = self.pending()
            if not to_apply:
                logger.info("No pending migrations")
                return []

            with self._engine.begin() as conn:
                self._config.attributes["connection"] = conn
                try:
                    command.upgrade(self._config, "head")
                finally:
                    self._config.attributes.pop("connection", None)
        except StartupError:
            raise
        except Exception as e:
            logger.error("Unable to apply pending migrations: %s", e)
            raise StartupError(f"Migration failed: {e}") from e

        logger.info("Successfully applied migrations: %s", ", ".join(to_apply))
        return to_apply
