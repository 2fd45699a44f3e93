"""Synchronisiert die Zahlungen einer Platzbuchung mit dem berechneten Preis"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple
from sqlalchemy.orm import Session

from courtdesk.config import settings
from courtdesk.database import transaction
from courtdesk.models.payment import Payment
from courtdesk.models.reservation import (
    Reservation,
    PAYMENT_STATUS_PAID,
    PAYMENT_STATUS_PARTIAL,
    PAYMENT_STATUS_UNPAID,
)
from courtdesk.schemas.player import Player
from courtdesk.services.pricing_calculator import (
    PricingCalculator,
    PricingConfig,
    FeeBreakdown,
    PRICING_FIXED_DAILY,
)
from courtdesk.utils.datetime_utils import payment_due_date, today, utcnow
from courtdesk.utils.money import is_valid_amount, round_money

logger = logging.getLogger(__name__)

COURT_USAGE = "court_usage"

# Zahlungen, die eine bereits bezahlte Tagesgebühr belegen
DAILY_FEE_STATUSES = ("pending", "completed", "record")


class PaymentSyncError(ValueError):
    """Buchung ist inkonsistent, es wurden keine Zahlungen geschrieben"""


@dataclass(frozen=True)
class MemberCharge:
    """Geplante Zahlung für ein Mitglied (noch nicht gespeichert)"""
    user_id: str
    player_name: str
    player_user_id: Optional[str]
    occurrence: int
    is_reserver: bool
    daily_fee_covered: bool
    amount: Decimal

    @property
    def key(self) -> Tuple[str, str, int]:
        """Gleichnamige Mitglieder ohne Konto werden über ihre Reihenfolge unterschieden"""
        return self.user_id, self.player_name, self.occurrence


def compute_payment_status(payments: Iterable[Payment]) -> str:
    """
    Aggregierter Zahlungsstatus einer Buchung.

    paid: alle Zahlungen completed/record, keine pending
    partial: mindestens eine Zahlung bezahlt
    unpaid: sonst (auch ohne Zahlungen)
    """
    paid = [p.is_paid for p in payments]
    if not paid:
        return PAYMENT_STATUS_UNPAID
    if all(paid):
        return PAYMENT_STATUS_PAID
    if any(paid):
        return PAYMENT_STATUS_PARTIAL
    return PAYMENT_STATUS_UNPAID


def refresh_payment_status(reservation: Reservation) -> str:
    """Setzt reservation.payment_status anhand der zugehörigen Zahlungen"""
    new_status = compute_payment_status(reservation.payments)
    if reservation.payment_status != new_status:
        logger.info(
            f"Reservation {reservation.id}: Zahlungsstatus {reservation.payment_status} -> {new_status}"
        )
        reservation.payment_status = new_status
    return new_status


class PaymentSynchronizer:
    """
    Erzeugt bzw. aktualisiert genau eine Zahlung pro Mitglied einer Buchung.

    Bereits bezahlte, erfasste oder stornierte Zahlungen werden nie
    verändert, ein erneuter Lauf ist daher idempotent.
    """

    def __init__(
        self,
        db: Session,
        payment_method: Optional[str] = None,
        currency: Optional[str] = None
    ):
        self.db = db
        self.payment_method = payment_method or settings.default_payment_method
        self.currency = currency

    def sync_reservation(
        self,
        reservation: Reservation,
        pricing: Optional[PricingConfig] = None
    ) -> List[Payment]:
        """
        Berechnet den Preis der Buchung und gleicht die Zahlungen ab.

        Args:
            reservation: Gespeicherte Buchung (mit ID)
            pricing: Optional Preis-Konfiguration, sonst aus der DB geladen

        Returns:
            Liste der Zahlungen der Buchung (eine pro Mitglied)

        Raises:
            PricingValidationError: Ungültige Buchung (z.B. keine Mitglieder)
            PaymentSyncError: Berechneter Betrag negativ oder nicht endlich
        """
        if pricing is None:
            pricing = PricingCalculator.get_pricing_for_club(self.db, reservation.club_id)

        players = reservation.player_list
        members = [p for p in players if p.is_member]
        guest_count = sum(1 for p in players if p.is_guest)

        breakdown = PricingCalculator.calculate_fees(
            pricing,
            reservation.time_slot,
            reservation.end_time_slot,
            member_count=len(members),
            guest_count=guest_count,
        )

        charges = self._plan_charges(reservation, pricing, members, breakdown)

        # Erst alles prüfen, dann schreiben: keine halben Zahlungssätze
        for charge in charges:
            if not is_valid_amount(charge.amount):
                raise PaymentSyncError(
                    f"Ungültiger Betrag {charge.amount} für {charge.player_name} "
                    f"(Reservation {reservation.id})"
                )

        existing = self._existing_payments(reservation)
        currency = self.currency or pricing.currency

        with transaction(self.db):
            for charge in charges:
                payment = existing.get(charge.key)
                if payment is None:
                    payment = self._create_payment(reservation, charge, breakdown, players, guest_count, currency)
                    self.db.add(payment)
                    reservation.payments.append(payment)
                    logger.info(
                        f"Zahlung erstellt: {payment.amount} {currency} ({payment.status}) "
                        f"für {charge.player_name} (Reservation {reservation.id})"
                    )
                elif payment.status == "pending":
                    self._update_pending(payment, reservation, charge, breakdown, players, guest_count)
                else:
                    logger.debug(
                        f"Zahlung {payment.id} ist {payment.status} - bleibt unverändert"
                    )

            planned_keys = {charge.key for charge in charges}
            for key, payment in existing.items():
                if key not in planned_keys and payment.status == "pending":
                    logger.warning(
                        f"Zahlung {payment.id} gehört zu keinem Mitglied der Reservation "
                        f"{reservation.id} mehr - bitte manuell prüfen"
                    )

            reservation.total_fee = breakdown.total_fee
            self.db.flush()
            refresh_payment_status(reservation)

        return list(reservation.payments)

    def _plan_charges(
        self,
        reservation: Reservation,
        pricing: PricingConfig,
        members: List[Player],
        breakdown: FeeBreakdown
    ) -> List[MemberCharge]:
        reserver_index = self._reserver_index(reservation, members)

        charges = []
        seen: Dict[Tuple[str, str], int] = {}
        for index, member in enumerate(members):
            # Mitglieder ohne Benutzerkonto werden dem Reservierer belastet
            charge_user = member.user_id or reservation.user_id
            is_reserver = index == reserver_index
            occurrence = seen.get((charge_user, member.name), 0)
            seen[(charge_user, member.name)] = occurrence + 1

            daily_fee_covered = False
            if pricing.pricing_model == PRICING_FIXED_DAILY and member.user_id:
                daily_fee_covered = self.has_paid_daily_fee(
                    reservation.club_id, member.user_id, reservation
                )

            amount = PricingCalculator.calculate_member_amount(
                breakdown, is_reserver=is_reserver, daily_fee_covered=daily_fee_covered
            )
            charges.append(MemberCharge(
                user_id=charge_user,
                player_name=member.name,
                player_user_id=member.user_id,
                occurrence=occurrence,
                is_reserver=is_reserver,
                daily_fee_covered=daily_fee_covered,
                amount=amount,
            ))
        return charges

    @staticmethod
    def _reserver_index(reservation: Reservation, members: List[Player]) -> int:
        """Position des Reservierers unter den Mitgliedern (Fallback: erstes Mitglied)"""
        for index, member in enumerate(members):
            if member.user_id and member.user_id == reservation.user_id:
                return index
        return 0

    def has_paid_daily_fee(self, club_id: int, user_id: str, reservation: Reservation) -> bool:
        """
        Hat das Mitglied am selben Tag schon eine Tagesgebühr (aus einer
        anderen Buchung) offen oder bezahlt?
        """
        candidates = (
            self.db.query(Payment)
            .join(Reservation, Payment.reservation_id == Reservation.id)
            .filter(
                Payment.club_id == club_id,
                Payment.user_id == user_id,
                Payment.payment_type == COURT_USAGE,
                Payment.status.in_(DAILY_FEE_STATUSES),
                Reservation.date == reservation.date,
                Reservation.id != reservation.id,
            )
            .all()
        )
        for payment in candidates:
            metadata = payment.payment_metadata or {}
            # Zahlungen, die selbst schon von einer Tagesgebühr befreit waren, zählen nicht
            if metadata.get("daily_fee_covered"):
                continue
            # Stellvertretend übernommene Zahlungen (Mitglied ohne Konto) sind nicht die eigene Tagesgebühr
            if metadata.get("player_user_id", payment.user_id) != user_id:
                continue
            return True
        return False

    @staticmethod
    def _existing_payments(reservation: Reservation) -> Dict[Tuple[str, str, int], Payment]:
        existing = {}
        for payment in reservation.payments:
            if payment.payment_type != COURT_USAGE:
                continue
            metadata = payment.payment_metadata or {}
            key = (payment.user_id, metadata.get("player_name"), metadata.get("player_occurrence", 0))
            existing.setdefault(key, payment)
        return existing

    def _create_payment(
        self,
        reservation: Reservation,
        charge: MemberCharge,
        breakdown: FeeBreakdown,
        players: List[Player],
        guest_count: int,
        currency: str
    ) -> Payment:
        # Beträge von 0 gelten direkt als erfasst (nichts zu kassieren)
        is_free = charge.amount == 0
        return Payment(
            club_id=reservation.club_id,
            user_id=charge.user_id,
            reservation_id=reservation.id,
            payment_type=COURT_USAGE,
            amount=charge.amount,
            currency=currency,
            payment_method=self.payment_method,
            status="record" if is_free else "pending",
            description=self._description(reservation, charge),
            due_date=payment_due_date(reservation.date),
            paid_date=today() if is_free else None,
            recorded_at=utcnow() if is_free else None,
            payment_metadata=self._metadata(reservation, charge, breakdown, players, guest_count),
        )

    def _update_pending(
        self,
        payment: Payment,
        reservation: Reservation,
        charge: MemberCharge,
        breakdown: FeeBreakdown,
        players: List[Player],
        guest_count: int
    ) -> None:
        old_amount = payment.amount
        payment.amount = charge.amount
        payment.description = self._description(reservation, charge)
        payment.due_date = payment_due_date(reservation.date)
        payment.payment_metadata = self._metadata(reservation, charge, breakdown, players, guest_count)
        if charge.amount == 0:
            payment.status = "record"
            payment.paid_date = today()
            payment.recorded_at = utcnow()
            logger.info(f"Zahlung {payment.id} ist auf 0 gefallen und wurde erfasst")

        if round_money(old_amount) != charge.amount:
            logger.info(f"Zahlung {payment.id} aktualisiert: {old_amount} -> {charge.amount}")

    @staticmethod
    def _description(reservation: Reservation, charge: MemberCharge) -> str:
        slot = f"{reservation.date.isoformat()} {reservation.time_slot_display}"
        if charge.daily_fee_covered:
            return f"Platzbuchung (Tagesgebühr bereits bezahlt) - {slot}"
        if charge.is_reserver:
            return f"Platzbuchung (Reservierer) - {slot}"
        return f"Platzbuchung - {slot}"

    @staticmethod
    def _metadata(
        reservation: Reservation,
        charge: MemberCharge,
        breakdown: FeeBreakdown,
        players: List[Player],
        guest_count: int
    ) -> dict:
        return {
            "player_name": charge.player_name,
            "player_user_id": charge.player_user_id,
            "player_occurrence": charge.occurrence,
            "time_slot": reservation.time_slot,
            "end_time_slot": reservation.end_time_slot,
            "date": reservation.date.isoformat(),
            "player_count": len(players),
            "member_count": len(players) - guest_count,
            "guest_count": guest_count,
            "is_reserver": charge.is_reserver,
            "member_share": float(breakdown.member_share),
            "guest_fees": float(breakdown.total_guest_fee) if charge.is_reserver else 0.0,
            "daily_fee_covered": charge.daily_fee_covered,
        }
