"""Reservations (Platzbuchungen) Router"""
import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from courtdesk.database import get_db, transaction
from courtdesk.dependencies import ClubContext, get_club_context, require_admin
from courtdesk.models import Reservation
from courtdesk.models.reservation import RESERVATION_STATUSES
from courtdesk.schemas import ReservationCreate, ReservationResponse, dump_roster
from courtdesk.services.payment_synchronizer import PaymentSynchronizer
from courtdesk.services.pricing_calculator import PricingCalculator
from courtdesk.utils.error_handler import handle_db_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reservations", tags=["reservations"])


def _get_reservation(db: Session, reservation_id: int, context: ClubContext) -> Reservation:
    reservation = db.query(Reservation).filter(
        Reservation.id == reservation_id,
        Reservation.club_id == context.club_id
    ).first()
    if not reservation:
        raise HTTPException(status_code=404, detail="Reservierung nicht gefunden")
    return reservation


@router.post("", response_model=ReservationResponse, status_code=201)
async def create_reservation(
    data: ReservationCreate,
    db: Session = Depends(get_db),
    context: ClubContext = Depends(get_club_context)
):
    """
    Legt eine Buchung an und erzeugt die Zahlungen der Mitglieder.

    Buchung und Zahlungen werden gemeinsam gespeichert: schlägt die
    Preisberechnung fehl, bleibt nichts zurück.
    """
    try:
        pricing = PricingCalculator.get_pricing_for_club(db, context.club_id)
        PricingCalculator.validate_operating_hours(pricing, data.time_slot, data.end_time_slot)

        reservation = Reservation(
            club_id=context.club_id,
            user_id=context.user_id,
            date=data.date,
            time_slot=data.time_slot,
            end_time_slot=data.end_time_slot,
            players=dump_roster(data.players),
            status="pending",
        )
        db.add(reservation)
        db.flush()

        PaymentSynchronizer(db).sync_reservation(reservation, pricing=pricing)
        db.refresh(reservation)

        logger.info(
            f"Reservierung {reservation.id} erstellt: {reservation.date} "
            f"{reservation.time_slot_display}, {reservation.total_fee} {pricing.currency}"
        )
        return ReservationResponse.from_reservation(reservation)

    except Exception as e:
        raise handle_db_exception(e, "Creating reservation", db)


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    context: ClubContext = Depends(get_club_context)
):
    """Buchung mit Zahlungen und aggregiertem Zahlungsstatus"""
    return ReservationResponse.from_reservation(_get_reservation(db, reservation_id, context))


@router.post("/{reservation_id}/sync-payments", response_model=ReservationResponse)
async def sync_payments(
    reservation_id: int,
    db: Session = Depends(get_db),
    context: ClubContext = Depends(get_club_context)
):
    """Zahlungen einer Buchung neu abgleichen (idempotent, nur Admin/Kassenwart)"""
    require_admin(context)
    reservation = _get_reservation(db, reservation_id, context)

    try:
        payments = PaymentSynchronizer(db).sync_reservation(reservation)
        db.refresh(reservation)
        logger.info(f"Reservierung {reservation.id} abgeglichen: {len(payments)} Zahlungen")
        return ReservationResponse.from_reservation(reservation)

    except Exception as e:
        raise handle_db_exception(e, "Syncing reservation payments", db)


@router.put("/{reservation_id}/status", response_model=ReservationResponse)
async def update_reservation_status(
    reservation_id: int,
    status: str,
    db: Session = Depends(get_db),
    context: ClubContext = Depends(get_club_context)
):
    """Buchungsstatus ändern (z.B. confirmed, cancelled, no-show)"""
    require_admin(context)
    if status not in RESERVATION_STATUSES:
        raise HTTPException(status_code=400, detail=f"Ungültiger Status: {status}")

    reservation = _get_reservation(db, reservation_id, context)
    try:
        with transaction(db):
            reservation.status = status
        db.refresh(reservation)
        logger.info(f"Reservierung {reservation.id}: Status -> {status} durch {context.user_id}")
        return ReservationResponse.from_reservation(reservation)

    except Exception as e:
        raise handle_db_exception(e, "Updating reservation status", db)
