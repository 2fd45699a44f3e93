"""Payments (Zahlungen) Router"""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from courtdesk.database import get_db
from courtdesk.dependencies import ClubContext, get_club_context, require_admin
from courtdesk.models import Payment
from courtdesk.schemas import PaymentResponse, PaymentCancel, PaymentUnrecord, MembershipFeeCreate
from courtdesk.services.membership_fees import record_membership_fee
from courtdesk.services.payment_transitions import PaymentTransitions
from courtdesk.services.pricing_calculator import PricingCalculator
from courtdesk.services.reconciliation_report import ReconciliationReportBuilder
from courtdesk.utils.datetime_utils import today
from courtdesk.utils.error_handler import handle_db_exception, raise_for_transition

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


@router.get("", response_model=List[PaymentResponse])
async def list_payments(
    db: Session = Depends(get_db),
    context: ClubContext = Depends(get_club_context),
    status: Optional[str] = None,
    user_id: Optional[str] = None,
    reservation_id: Optional[int] = None
):
    """Liste aller Zahlungen des Vereins mit Filter"""
    query = db.query(Payment).filter(Payment.club_id == context.club_id)

    if status:
        query = query.filter(Payment.status == status)
    if user_id:
        query = query.filter(Payment.user_id == user_id)
    if reservation_id:
        query = query.filter(Payment.reservation_id == reservation_id)

    return query.order_by(Payment.id.desc()).all()


@router.get("/calculate")
async def calculate_fees(
    db: Session = Depends(get_db),
    context: ClubContext = Depends(get_club_context),
    start_slot: int = Query(..., ge=0, le=23),
    end_slot: Optional[int] = Query(None, ge=1, le=24),
    duration: int = Query(1, ge=1, le=12),
    member_count: int = Query(1, ge=0),
    guest_count: int = Query(0, ge=0)
):
    """Preisvorschau für eine Buchung (ohne zu speichern)"""
    if end_slot is None:
        end_slot = start_slot + duration

    try:
        pricing = PricingCalculator.get_pricing_for_club(db, context.club_id)
        PricingCalculator.validate_operating_hours(pricing, start_slot, end_slot)
        return PricingCalculator.calculate_breakdown_for_reservation(
            pricing, start_slot, end_slot, member_count, guest_count
        )
    except Exception as e:
        raise handle_db_exception(e, "Calculating fees")


@router.get("/overdue", response_model=List[PaymentResponse])
async def list_overdue_payments(
    db: Session = Depends(get_db),
    context: ClubContext = Depends(get_club_context)
):
    """Offene Zahlungen mit überschrittener Fälligkeit"""
    payments = db.query(Payment).filter(
        Payment.club_id == context.club_id,
        Payment.status == "pending"
    ).all()
    return ReconciliationReportBuilder.list_overdue(payments, today())


@router.post("/membership-fee", response_model=PaymentResponse, status_code=201)
async def create_membership_fee(
    data: MembershipFeeCreate,
    db: Session = Depends(get_db),
    context: ClubContext = Depends(get_club_context)
):
    """Mitgliedsbeitrag erfassen (nur Admin/Kassenwart)"""
    require_admin(context)
    try:
        return record_membership_fee(
            db,
            context,
            user_id=data.user_id,
            membership_year=data.membership_year,
            payment_method=data.payment_method,
            amount=data.amount,
            reference=data.reference,
        )
    except Exception as e:
        raise handle_db_exception(e, "Recording membership fee", db)


@router.put("/{payment_id}/approve", response_model=PaymentResponse)
async def approve_payment(
    payment_id: int,
    db: Session = Depends(get_db),
    context: ClubContext = Depends(get_club_context)
):
    """Zahlung freigeben (pending -> completed)"""
    result = PaymentTransitions(db).approve(payment_id, context)
    raise_for_transition(result, f"Freigabe von Zahlung {payment_id}")
    return result.payment


@router.put("/{payment_id}/record", response_model=PaymentResponse)
async def record_payment(
    payment_id: int,
    db: Session = Depends(get_db),
    context: ClubContext = Depends(get_club_context)
):
    """Zahlung erfassen (completed -> record)"""
    result = PaymentTransitions(db).record(payment_id, context)
    raise_for_transition(result, f"Erfassung von Zahlung {payment_id}")
    return result.payment


@router.put("/{payment_id}/cancel", response_model=PaymentResponse)
async def cancel_payment(
    payment_id: int,
    data: Optional[PaymentCancel] = None,
    db: Session = Depends(get_db),
    context: ClubContext = Depends(get_club_context)
):
    """Zahlung stornieren (completed -> failed | refunded)"""
    data = data or PaymentCancel()
    result = PaymentTransitions(db).cancel(
        payment_id, context, new_status=data.new_status, reason=data.reason
    )
    raise_for_transition(result, f"Storno von Zahlung {payment_id}")
    return result.payment


@router.put("/{payment_id}/unrecord", response_model=PaymentResponse)
async def unrecord_payment(
    payment_id: int,
    data: Optional[PaymentUnrecord] = None,
    db: Session = Depends(get_db),
    context: ClubContext = Depends(get_club_context)
):
    """Erfassung zurücknehmen (record -> completed, mit Begründung)"""
    reason = data.reason if data else None
    result = PaymentTransitions(db).unrecord(payment_id, context, reason)
    raise_for_transition(result, f"Korrektur von Zahlung {payment_id}")
    return result.payment
