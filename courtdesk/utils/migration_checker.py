"""
Migration Checker Utility

Prüft beim App-Start ob Alembic-Migrationen ausstehen und führt diese automatisch aus.
"""
import logging
from pathlib import Path
from typing import Optional, Tuple

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy.exc import SQLAlchemyError

from courtdesk.config import settings
from courtdesk.database import engine

logger = logging.getLogger(__name__)

ALEMBIC_INI = Path(settings.base_dir) / "alembic.ini"


def _alembic_config() -> Config:
    config = Config(str(ALEMBIC_INI))
    config.set_main_option("script_location", str(Path(settings.base_dir) / "migrations"))
    config.set_main_option("sqlalchemy.url", settings.database_url)
    config.attributes["skip_logging_config"] = True
    return config


def check_migrations_pending() -> Tuple[bool, Optional[str]]:
    """
    Prüft ob Alembic-Migrationen ausstehen.

    Returns:
        Tuple (has_pending, current_version)
        - has_pending: True wenn Migrationen ausstehen
        - current_version: Aktuelle DB-Version (oder None)
    """
    try:
        script = ScriptDirectory.from_config(_alembic_config())
        head_version = script.get_current_head()

        with engine.connect() as connection:
            current_version = MigrationContext.configure(connection).get_current_revision()

        if current_version:
            logger.info(f"Current DB version: {current_version}")

        return current_version != head_version, current_version

    except SQLAlchemyError as e:
        logger.error(f"Fehler beim Prüfen der Migrationen: {e}", exc_info=True)
        return False, None


def run_migrations() -> bool:
    """
    Führt ausstehende Alembic-Migrationen aus.

    Returns:
        True bei Erfolg, False bei Fehler
    """
    try:
        logger.info("Führe Alembic-Migrationen aus...")
        command.upgrade(_alembic_config(), "head")
        logger.info("Migrationen erfolgreich ausgeführt")
        return True
    except SQLAlchemyError as e:
        logger.error(f"Migrationen fehlgeschlagen: {e}", exc_info=True)
        return False


def check_and_run_migrations(auto_upgrade: bool = True) -> None:
    """
    Prüft und führt Migrationen aus (wenn auto_upgrade=True).

    Args:
        auto_upgrade: Wenn True, werden Migrationen automatisch ausgeführt

    Raises:
        RuntimeError: Wenn Migrationen fehlschlagen und auto_upgrade=True
    """
    logger.info("Prüfe Alembic-Migrationen...")

    if not ALEMBIC_INI.exists():
        logger.warning(f"Keine alembic.ini unter {ALEMBIC_INI} gefunden, Prüfung übersprungen")
        return

    has_pending, current_version = check_migrations_pending()

    if not has_pending:
        logger.info("Datenbank ist auf dem neuesten Stand")
        return

    logger.warning("Ausstehende Migrationen gefunden!")
    if current_version:
        logger.warning(f"   Aktuelle Version: {current_version}")

    if auto_upgrade:
        if not run_migrations():
            error_msg = (
                "Migrations-Upgrade fehlgeschlagen! "
                "Bitte manuell ausführen: alembic upgrade head"
            )
            logger.error(error_msg)
            raise RuntimeError(error_msg)
    else:
        logger.warning("Auto-Upgrade ist deaktiviert. Bitte manuell ausführen: alembic upgrade head")
