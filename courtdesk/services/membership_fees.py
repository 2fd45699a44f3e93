"""Mitgliedsbeiträge erfassen"""
import logging
from typing import Optional
from sqlalchemy.orm import Session

from courtdesk.database import transaction
from courtdesk.dependencies import ClubContext
from courtdesk.models.club_settings import ClubSettings
from courtdesk.models.payment import Payment
from courtdesk.utils.datetime_utils import utcnow, today
from courtdesk.utils.money import Number, is_valid_amount, round_money

logger = logging.getLogger(__name__)

MEMBERSHIP_FEE = "membership_fee"


def record_membership_fee(
    db: Session,
    context: ClubContext,
    user_id: str,
    membership_year: int,
    payment_method: str,
    amount: Optional[Number] = None,
    reference: Optional[str] = None
) -> Payment:
    """
    Erfasst einen Jahresbeitrag direkt mit Status 'record'.

    Ohne Betrag wird der Jahresbeitrag aus den Vereinseinstellungen verwendet.

    Raises:
        ValueError: Bei ungültigem Betrag oder wenn der Beitrag für das Jahr
            bereits erfasst wurde
    """
    existing = db.query(Payment).filter(
        Payment.club_id == context.club_id,
        Payment.user_id == user_id,
        Payment.payment_type == MEMBERSHIP_FEE,
        Payment.membership_year == membership_year,
        Payment.status.in_(("pending", "completed", "record"))
    ).first()
    if existing:
        raise ValueError(f"Mitgliedsbeitrag {membership_year} für {user_id} ist bereits erfasst")

    club_settings = db.query(ClubSettings).filter(ClubSettings.club_id == context.club_id).first()
    if amount is None:
        amount = club_settings.annual_membership_fee if club_settings else 1000
    if not is_valid_amount(amount):
        raise ValueError(f"Ungültiger Betrag: {amount}")

    payment = Payment(
        club_id=context.club_id,
        user_id=user_id,
        payment_type=MEMBERSHIP_FEE,
        amount=round_money(amount),
        currency=club_settings.currency if club_settings else "PHP",
        payment_method=payment_method,
        status="record",
        description=f"Mitgliedsbeitrag {membership_year}",
        reference=reference,
        due_date=today(),
        paid_date=today(),
        membership_year=membership_year,
        recorded_by=context.user_id,
        recorded_at=utcnow(),
        payment_metadata={"membership_year": membership_year},
    )

    with transaction(db):
        db.add(payment)
        db.flush()

    logger.info(f"Mitgliedsbeitrag {membership_year} für {user_id} erfasst: {payment.amount}")
    return payment
