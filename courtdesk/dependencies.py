"""Dependencies für FastAPI - expliziter Request-Kontext (Verein, Benutzer, Rolle)"""
from dataclasses import dataclass
from typing import Optional
from fastapi import Request, HTTPException, status

ADMIN_ROLES = ("admin", "treasurer")


@dataclass(frozen=True)
class ClubContext:
    """Wer handelt in welchem Verein? Wird pro Anfrage aufgebaut und durchgereicht."""
    club_id: int
    user_id: str
    role: str = "member"

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES


def _lookup(request: Request, session_key: str, header: str) -> Optional[str]:
    """Wert aus der Session, alternativ aus dem Header (API-Clients ohne Cookie)"""
    value = request.session.get(session_key) if "session" in request.scope else None
    if value is None:
        value = request.headers.get(header)
    return value


def get_club_context(request: Request) -> ClubContext:
    """
    Baut den ClubContext für die aktuelle Anfrage.

    Args:
        request: FastAPI Request-Objekt mit Session

    Returns:
        ClubContext

    Raises:
        HTTPException (401): Wenn kein Verein oder Benutzer gesetzt ist
    """
    club_id = _lookup(request, "club_id", "X-Club-Id")
    user_id = _lookup(request, "user_id", "X-User-Id")
    role = _lookup(request, "role", "X-Club-Role") or "member"

    if not club_id or not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Kein Verein ausgewählt. Bitte melden Sie sich an."
        )

    try:
        club_id = int(club_id)
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Ungültige Vereins-ID"
        )

    return ClubContext(club_id=club_id, user_id=str(user_id), role=str(role).lower())


def require_admin(context: ClubContext) -> ClubContext:
    """
    Prüft, ob der Benutzer Admin oder Kassenwart des Vereins ist.

    Raises:
        HTTPException (403): Wenn die Rolle nicht ausreicht
    """
    if not context.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Nur Admins oder Kassenwarte dürfen diese Aktion ausführen."
        )
    return context
