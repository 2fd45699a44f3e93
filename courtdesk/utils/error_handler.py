"""Error Handler Utility - Zentralisierte Fehlerbehandlung für die JSON-API"""
import logging
from typing import Optional
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, DataError, OperationalError

logger = logging.getLogger(__name__)

# Typisierte Übergangsfehler (TransitionFailure-Werte) -> HTTP-Status
TRANSITION_STATUS_CODES = {
    "not_found": 404,
    "forbidden": 403,
    "invalid_state": 409,
    "missing_reason": 400,
}


def handle_db_exception(
    e: Exception,
    operation: str,
    db_session=None
) -> HTTPException:
    """
    Zentralisierte Fehlerbehandlung mit Logging und Error-Codes

    Args:
        e: Die aufgetretene Exception
        operation: Beschreibung der Operation (für Logging)
        db_session: Datenbank-Session für Rollback (optional)

    Returns:
        HTTPException mit Status-Code und {"error": ..., "message": ...} als Detail
    """
    if db_session:
        try:
            db_session.rollback()
        except Exception as rollback_error:
            logger.error(f"Rollback failed: {rollback_error}")

    if isinstance(e, ValueError):
        logger.warning(f"{operation}: Invalid input - {str(e)}")
        status_code = 400
        error_code = "invalid_input"
        error_message = str(e) or "Ungültige Eingabe. Bitte überprüfen Sie Ihre Daten."

    elif isinstance(e, IntegrityError):
        logger.error(f"{operation}: Database integrity error - {str(e)}", exc_info=True)
        status_code = 409
        error_code = "db_integrity"
        error_message = "Datenbankfehler: Diese Daten verletzen eine Integritätsbedingung."

    elif isinstance(e, DataError):
        logger.error(f"{operation}: Invalid data - {str(e)}", exc_info=True)
        status_code = 400
        error_code = "invalid_data"
        error_message = "Ungültige Daten. Bitte überprüfen Sie Ihre Eingaben."

    elif isinstance(e, OperationalError):
        logger.error(f"{operation}: Database operational error - {str(e)}", exc_info=True)
        status_code = 503
        error_code = "db_error"
        error_message = "Datenbankverbindungsfehler. Bitte versuchen Sie es später erneut."

    else:
        logger.exception(f"{operation}: Unexpected error - {str(e)}")
        status_code = 500
        error_code = "unexpected"
        error_message = "Ein unerwarteter Fehler ist aufgetreten. Bitte kontaktieren Sie den Administrator."

    return HTTPException(
        status_code=status_code,
        detail={"error": error_code, "message": error_message}
    )


def raise_for_transition(result, operation: Optional[str] = None) -> None:
    """
    Wirft eine HTTPException, falls ein Statusübergang fehlgeschlagen ist.

    Args:
        result: Ergebnis von PaymentTransitions
        operation: Beschreibung der Operation (für Logging)

    Raises:
        HTTPException: 404, 403, 409 oder 400 je nach Fehlerart
    """
    if result.ok:
        return

    status_code = TRANSITION_STATUS_CODES.get(result.failure.value, 400)
    if operation:
        logger.info(f"{operation} abgelehnt ({result.failure.value}): {result.message}")
    raise HTTPException(
        status_code=status_code,
        detail={"error": result.failure.value, "message": result.message}
    )
