"""Logging-Konfiguration: Konsole plus optionale rotierende Log-Datei"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Mindest-Level der Bibliotheks-Logger im Normalbetrieb
LIBRARY_LOG_LEVELS: Dict[str, int] = {
    'sqlalchemy.engine': logging.WARNING,
    'sqlalchemy.pool': logging.WARNING,
    'alembic': logging.WARNING,
    # Zugriffe protokolliert uvicorn.access, Validierungsfehler loggt courtdesk.main selbst
    'uvicorn.access': logging.WARNING,
    'uvicorn.error': logging.INFO,
    # Überschrittene Limits landen als WARNING, Details darunter nicht
    'slowapi': logging.WARNING,
}


def library_log_levels(debug: bool) -> Dict[str, int]:
    """Level je Bibliotheks-Logger; im Debug-Modus werden SQL-Statements geloggt"""
    levels = dict(LIBRARY_LOG_LEVELS)
    if debug:
        levels['sqlalchemy.engine'] = logging.INFO
    return levels


def setup_logging(debug: bool = False, log_file: Optional[str] = "logs/courtdesk.log") -> None:
    """
    Konfiguriert Root-Logger und Bibliotheks-Logger.

    Args:
        debug: DEBUG-Level und SQL-Ausgabe, sonst INFO
        log_file: Pfad zur Log-Datei (10 MB, 5 Backups); None = nur Konsole
    """
    level = logging.DEBUG if debug else logging.INFO
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=log_path,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        if isinstance(handler, RotatingFileHandler):
            handler.close()
    for handler in handlers:
        handler.setLevel(level)
        root_logger.addHandler(handler)

    for name, library_level in library_log_levels(debug).items():
        logging.getLogger(name).setLevel(library_level)

    root_logger.info(
        f"Logging initialisiert (Level: {logging.getLevelName(level)}, "
        f"Datei: {Path(log_file).absolute() if log_file else '-'})"
    )
