"""
Datetime Utilities für konsistentes Zeit-Handling

- Timestamps (created_at, approved_at, ...): UTC
- Business Dates (Reservierungsdatum, Fälligkeit): lokales Kalenderdatum
"""
from datetime import datetime, date, timedelta, timezone


def utcnow() -> datetime:
    """
    Gibt die aktuelle UTC-Zeit zurück (timezone-aware).

    Ersetzt datetime.utcnow() (deprecated in Python 3.12).
    """
    return datetime.now(timezone.utc)


def today() -> date:
    """Gibt das aktuelle lokale Datum zurück."""
    return date.today()


def payment_due_date(reservation_date: date) -> date:
    """Zahlungen für eine Platzbuchung sind bis Ende des Folgetags fällig."""
    return reservation_date + timedelta(days=1)


# Für SQLAlchemy default Funktionen
def get_utc_timestamp() -> datetime:
    """
    Wrapper für utcnow() zur Verwendung in SQLAlchemy Column defaults.

    Verwendung:
        created_at = Column(DateTime, default=get_utc_timestamp)
    """
    return utcnow()
