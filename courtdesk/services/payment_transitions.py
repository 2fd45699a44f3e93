"""Statusübergänge für Zahlungen (Freigeben, Erfassen, Stornieren, Erfassung zurücknehmen)

    pending --approve--> completed --record--> record
                         completed --cancel--> failed | refunded
                         record --unrecord--> completed

Ungültige Übergänge werden nicht als Exception, sondern als
TransitionResult mit Fehlerart zurückgegeben.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from sqlalchemy.orm import Session

from courtdesk.database import transaction
from courtdesk.dependencies import ClubContext
from courtdesk.models.payment import Payment
from courtdesk.services.payment_synchronizer import refresh_payment_status
from courtdesk.utils.datetime_utils import utcnow, today

logger = logging.getLogger(__name__)

CANCEL_STATUSES = ("failed", "refunded")


class TransitionFailure(str, Enum):
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    INVALID_STATE = "invalid_state"
    MISSING_REASON = "missing_reason"


@dataclass(frozen=True)
class TransitionResult:
    """Ergebnis eines Statusübergangs"""
    payment: Optional[Payment]
    failure: Optional[TransitionFailure] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, payment: Payment, message: str) -> "TransitionResult":
        return cls(payment=payment, message=message)

    @classmethod
    def failed(
        cls,
        failure: TransitionFailure,
        message: str,
        payment: Optional[Payment] = None
    ) -> "TransitionResult":
        return cls(payment=payment, failure=failure, message=message)


class PaymentTransitions:
    """Admin-Aktionen auf Zahlungen mit Audit-Trail"""

    def __init__(self, db: Session):
        self.db = db

    def approve(self, payment_id: int, context: ClubContext) -> TransitionResult:
        """pending -> completed"""
        payment, failure = self._load(payment_id, context, expected="pending", action="freigegeben")
        if failure:
            return failure

        with transaction(self.db):
            payment.status = "completed"
            payment.approved_by = context.user_id
            payment.approved_at = utcnow()
            if payment.paid_date is None:
                payment.paid_date = today()
            self._refresh_reservation(payment)

        logger.info(f"Zahlung {payment.id} freigegeben von {context.user_id}")
        return TransitionResult.success(payment, "Zahlung freigegeben")

    def record(self, payment_id: int, context: ClubContext) -> TransitionResult:
        """completed -> record"""
        payment, failure = self._load(payment_id, context, expected="completed", action="erfasst")
        if failure:
            return failure

        with transaction(self.db):
            payment.status = "record"
            payment.recorded_by = context.user_id
            payment.recorded_at = utcnow()
            self._refresh_reservation(payment)

        logger.info(f"Zahlung {payment.id} erfasst von {context.user_id}")
        return TransitionResult.success(payment, "Zahlung erfasst")

    def cancel(
        self,
        payment_id: int,
        context: ClubContext,
        new_status: str = "refunded",
        reason: Optional[str] = None
    ) -> TransitionResult:
        """completed -> failed | refunded"""
        if new_status not in CANCEL_STATUSES:
            return TransitionResult.failed(
                TransitionFailure.INVALID_STATE,
                f"Stornostatus muss einer von {', '.join(CANCEL_STATUSES)} sein"
            )

        payment, failure = self._load(payment_id, context, expected="completed", action="storniert")
        if failure:
            return failure

        with transaction(self.db):
            payment.status = new_status
            payment.cancelled_by = context.user_id
            payment.cancelled_at = utcnow()
            if reason:
                payment.correction_reason = reason.strip()
            self._refresh_reservation(payment)

        logger.info(f"Zahlung {payment.id} storniert ({new_status}) von {context.user_id}")
        return TransitionResult.success(payment, f"Zahlung storniert ({new_status})")

    def unrecord(self, payment_id: int, context: ClubContext, reason: Optional[str]) -> TransitionResult:
        """record -> completed (Korrektur, Begründung erforderlich)"""
        if not reason or not reason.strip():
            return TransitionResult.failed(
                TransitionFailure.MISSING_REASON,
                "Für das Zurücknehmen einer Erfassung ist eine Begründung erforderlich"
            )

        payment, failure = self._load(payment_id, context, expected="record", action="zurückgenommen")
        if failure:
            return failure

        with transaction(self.db):
            payment.status = "completed"
            payment.recorded_by = None
            payment.recorded_at = None
            payment.correction_reason = reason.strip()
            self._refresh_reservation(payment)

        logger.warning(f"Erfassung von Zahlung {payment.id} zurückgenommen von {context.user_id}: {reason}")
        return TransitionResult.success(payment, "Erfassung zurückgenommen")

    def _load(self, payment_id: int, context: ClubContext, expected: str, action: str):
        """Lädt die Zahlung und prüft Rolle und Ausgangsstatus"""
        if not context.is_admin:
            return None, TransitionResult.failed(
                TransitionFailure.FORBIDDEN,
                "Nur Admins oder Kassenwarte dürfen Zahlungen bearbeiten"
            )

        payment = self.db.query(Payment).filter(
            Payment.id == payment_id,
            Payment.club_id == context.club_id
        ).first()
        if not payment:
            return None, TransitionResult.failed(
                TransitionFailure.NOT_FOUND,
                f"Zahlung {payment_id} nicht gefunden"
            )

        if payment.status != expected:
            return payment, TransitionResult.failed(
                TransitionFailure.INVALID_STATE,
                f"Zahlung mit Status '{payment.status}' kann nicht {action} werden "
                f"(erwartet: '{expected}')",
                payment=payment
            )

        return payment, None

    def _refresh_reservation(self, payment: Payment) -> None:
        if payment.reservation is not None:
            self.db.flush()
            refresh_payment_status(payment.reservation)
