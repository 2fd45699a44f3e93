"""Clubs Router - Vereinseinstellungen (Preise & Öffnungszeiten)"""
import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from courtdesk.database import get_db, transaction
from courtdesk.dependencies import ClubContext, get_club_context, require_admin
from courtdesk.models import Club, ClubSettings
from courtdesk.schemas import ClubSettingsUpdate, ClubSettingsResponse
from courtdesk.services.pricing_calculator import PricingCalculator
from courtdesk.utils.error_handler import handle_db_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clubs", tags=["clubs"])


def _settings_response(club_id: int, club_settings) -> ClubSettingsResponse:
    """Antwort aus dem Datensatz, sonst aus den Standardwerten"""
    if club_settings is None:
        pricing = PricingCalculator.pricing_from_settings(None)
        return ClubSettingsResponse(
            club_id=club_id,
            pricing_model=pricing.pricing_model,
            peak_hour_fee=float(pricing.peak_hour_fee),
            off_peak_hour_fee=float(pricing.off_peak_hour_fee),
            fixed_hourly_fee=float(pricing.fixed_hourly_fee),
            fixed_daily_fee=float(pricing.fixed_daily_fee),
            guest_fee=float(pricing.guest_fee),
            peak_hours=sorted(pricing.peak_hours),
            operating_start=pricing.operating_start,
            operating_end=pricing.operating_end,
            currency=pricing.currency,
        )
    return ClubSettingsResponse.model_validate(club_settings)


@router.get("/settings", response_model=ClubSettingsResponse)
async def get_settings(
    db: Session = Depends(get_db),
    context: ClubContext = Depends(get_club_context)
):
    """Aktuelle Preis-Einstellungen des Vereins"""
    club_settings = db.query(ClubSettings).filter(ClubSettings.club_id == context.club_id).first()
    return _settings_response(context.club_id, club_settings)


@router.put("/settings", response_model=ClubSettingsResponse)
async def update_settings(
    data: ClubSettingsUpdate,
    db: Session = Depends(get_db),
    context: ClubContext = Depends(get_club_context)
):
    """Preis-Einstellungen anlegen oder aktualisieren (nur Admin/Kassenwart)"""
    require_admin(context)

    club = db.query(Club).filter(Club.id == context.club_id).first()
    if not club:
        raise HTTPException(status_code=404, detail="Verein nicht gefunden")

    try:
        with transaction(db):
            club_settings = db.query(ClubSettings).filter(ClubSettings.club_id == club.id).first()
            if club_settings is None:
                club_settings = ClubSettings(club_id=club.id)
                db.add(club_settings)

            for field, value in data.model_dump().items():
                setattr(club_settings, field, value)
            club_settings.updated_by = context.user_id

        db.refresh(club_settings)
        logger.info(
            f"Einstellungen von Verein {club.id} aktualisiert durch {context.user_id} "
            f"(Modell: {club_settings.pricing_model})"
        )
        return _settings_response(club.id, club_settings)

    except Exception as e:
        raise handle_db_exception(e, "Updating club settings", db)
