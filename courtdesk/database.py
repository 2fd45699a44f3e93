"""Datenbank-Setup und Session-Management"""
from contextlib import contextmanager
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

from courtdesk.config import settings


def _is_sqlite(database_url: str) -> bool:
    return database_url.startswith("sqlite")


def _is_in_memory(database_url: str) -> bool:
    return database_url in ("sqlite://", "sqlite:///:memory:")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite prüft Fremdschlüssel (und ON DELETE CASCADE) nur mit diesem Pragma"""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str) -> Engine:
    """
    Erstellt die Engine für SQLite (Datei oder In-Memory) oder PostgreSQL.

    SQL-Ausgabe steuert das Logging (sqlalchemy.engine), nicht echo.
    """
    engine_kwargs = {"pool_pre_ping": True}

    if _is_sqlite(database_url):
        engine_kwargs["connect_args"] = {
            "check_same_thread": False,  # notwendig für FastAPI
            "timeout": 30,  # Warte bis zu 30 Sekunden auf DB-Lock
        }
        # In-Memory: alle Sessions müssen dieselbe Verbindung teilen
        if _is_in_memory(database_url):
            engine_kwargs["poolclass"] = StaticPool

    new_engine = create_engine(database_url, **engine_kwargs)

    if _is_sqlite(database_url):
        event.listen(new_engine, "connect", _enable_sqlite_foreign_keys)

    return new_engine


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI-Dependency: eine Session pro Anfrage, danach geschlossen"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session):
    """
    Commit bei Erfolg, Rollback bei jeder Exception (die weitergereicht wird).

    Verwendung:
        with transaction(db):
            payment.status = "completed"
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def init_db():
    """
    Legt fehlende Tabellen an. Bestehende Installationen verwaltet Alembic
    (`alembic upgrade head`), siehe courtdesk.utils.migration_checker.
    """
    from courtdesk.models import club, club_settings, reservation, payment  # noqa: F401
    Base.metadata.create_all(bind=engine)
