"""Preisberechnungs-Service für Platzbuchungen"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Dict, Any, Iterable, FrozenSet
from sqlalchemy.orm import Session

from courtdesk.utils.money import Number, to_decimal, round_money

logger = logging.getLogger(__name__)

PRICING_VARIABLE = "variable"
PRICING_FIXED_HOURLY = "fixed-hourly"
PRICING_FIXED_DAILY = "fixed-daily"


class PricingValidationError(ValueError):
    """Ungültige Eingabe für die Preisberechnung (keine Mitglieder, negative Gebühren, ...)"""


@dataclass(frozen=True)
class PricingConfig:
    """Preis-Konfiguration eines Vereins (Kopie der ClubSettings, unveränderlich)"""
    pricing_model: str = PRICING_VARIABLE
    peak_hour_fee: Decimal = Decimal("150")
    off_peak_hour_fee: Decimal = Decimal("100")
    fixed_hourly_fee: Decimal = Decimal("125")
    fixed_daily_fee: Decimal = Decimal("500")
    guest_fee: Decimal = Decimal("70")
    peak_hours: FrozenSet[int] = field(default_factory=lambda: frozenset({5, 18, 19, 20, 21}))
    operating_start: int = 5
    operating_end: int = 22
    currency: str = "PHP"


DEFAULT_PRICING = PricingConfig()


@dataclass(frozen=True)
class FeeBreakdown:
    """Ergebnis der Preisberechnung (auf Cent gerundet)"""
    total_base_fee: Decimal
    total_guest_fee: Decimal
    member_share: Decimal

    @property
    def total_fee(self) -> Decimal:
        return self.total_base_fee + self.total_guest_fee

    def to_dict(self) -> Dict[str, float]:
        return {
            "total_base_fee": float(self.total_base_fee),
            "total_guest_fee": float(self.total_guest_fee),
            "member_share": float(self.member_share),
            "total_fee": float(self.total_fee),
        }


class PricingCalculator:
    """Service für die Berechnung der Platzgebühren"""

    @staticmethod
    def calculate_fees(
        pricing: PricingConfig,
        start_slot: int,
        end_slot: int,
        member_count: int,
        guest_count: int = 0
    ) -> FeeBreakdown:
        """
        Berechnet Grundgebühr, Gastgebühr und Anteil pro Mitglied.

        Args:
            pricing: Preis-Konfiguration des Vereins
            start_slot: Startstunde (inklusive)
            end_slot: Endstunde (exklusive)
            member_count: Anzahl Mitglieder (muss > 0 sein)
            guest_count: Anzahl Gäste

        Returns:
            FeeBreakdown mit total_base_fee, total_guest_fee, member_share

        Raises:
            PricingValidationError: Bei ungültigen Eingaben
        """
        PricingCalculator._validate_inputs(pricing, start_slot, end_slot, member_count, guest_count)

        duration_hours = end_slot - start_slot
        guests = Decimal(guest_count)

        if pricing.pricing_model == PRICING_FIXED_DAILY:
            # Tagesgebühr: jedes Mitglied zahlt den vollen Tagessatz, Gäste einmal pro Tag
            total_base_fee = pricing.fixed_daily_fee * member_count
            total_guest_fee = guests * pricing.guest_fee
            member_share = pricing.fixed_daily_fee

        elif pricing.pricing_model == PRICING_FIXED_HOURLY:
            total_base_fee = pricing.fixed_hourly_fee * duration_hours
            total_guest_fee = guests * pricing.guest_fee * duration_hours
            member_share = total_base_fee / member_count

        else:
            # Variable Preise: jede Stunde einzeln nach Peak/Off-Peak
            total_base_fee = Decimal("0")
            total_guest_fee = Decimal("0")
            for hour in range(start_slot, end_slot):
                total_base_fee += PricingCalculator.hourly_base_fee(pricing, hour)
                total_guest_fee += guests * pricing.guest_fee
            member_share = total_base_fee / member_count

        breakdown = FeeBreakdown(
            total_base_fee=round_money(total_base_fee),
            total_guest_fee=round_money(total_guest_fee),
            member_share=round_money(member_share),
        )
        logger.debug(
            f"Preis ({pricing.pricing_model}) {start_slot}-{end_slot} Uhr, "
            f"{member_count} Mitglieder, {guest_count} Gäste: {breakdown}"
        )
        return breakdown

    @staticmethod
    def calculate_member_amount(
        breakdown: FeeBreakdown,
        is_reserver: bool,
        daily_fee_covered: bool = False
    ) -> Decimal:
        """
        Betrag, den ein einzelnes Mitglied für die Buchung schuldet.

        Gastgebühren werden nicht aufgeteilt, sondern komplett dem
        reservierenden Mitglied berechnet. Ist die Tagesgebühr für diesen
        Tag bereits bezahlt, entfällt der Grundanteil.
        """
        base_amount = Decimal("0") if daily_fee_covered else breakdown.member_share
        guest_amount = breakdown.total_guest_fee if is_reserver else Decimal("0")
        return round_money(base_amount + guest_amount)

    @staticmethod
    def is_peak_hour(pricing: PricingConfig, hour: int) -> bool:
        return hour in pricing.peak_hours

    @staticmethod
    def hourly_base_fee(pricing: PricingConfig, hour: int) -> Decimal:
        """Grundgebühr für eine einzelne Stunde im variablen Modell"""
        if PricingCalculator.is_peak_hour(pricing, hour):
            return pricing.peak_hour_fee
        return pricing.off_peak_hour_fee

    @staticmethod
    def validate_operating_hours(pricing: PricingConfig, start_slot: int, end_slot: int) -> None:
        """
        Prüft, ob eine Buchung innerhalb der Öffnungszeiten liegt.

        `operating_end` ist die Schließstunde: letzter buchbarer Start ist
        operating_end - 1, die Buchung darf höchstens bis operating_end + 1 reichen.

        Raises:
            PricingValidationError: Wenn die Buchung außerhalb liegt
        """
        if start_slot < pricing.operating_start:
            raise PricingValidationError(
                f"Platz öffnet um {pricing.operating_start}:00. Gewählte Zeit: {start_slot}:00"
            )
        if start_slot >= pricing.operating_end:
            raise PricingValidationError(
                f"Platz schließt um {pricing.operating_end}:00. "
                f"Letzter buchbarer Start ist {pricing.operating_end - 1}:00. Gewählte Zeit: {start_slot}:00"
            )
        if end_slot > pricing.operating_end + 1:
            raise PricingValidationError(
                f"Buchung {start_slot}:00-{end_slot}:00 endet nach Schließung ({pricing.operating_end}:00)"
            )

    @staticmethod
    def _validate_inputs(
        pricing: PricingConfig,
        start_slot: int,
        end_slot: int,
        member_count: int,
        guest_count: int
    ) -> None:
        if pricing.pricing_model not in (PRICING_VARIABLE, PRICING_FIXED_HOURLY, PRICING_FIXED_DAILY):
            raise PricingValidationError(f"Unbekanntes Preismodell: {pricing.pricing_model}")

        if member_count <= 0:
            raise PricingValidationError("Eine Buchung braucht mindestens ein Mitglied")
        if guest_count < 0:
            raise PricingValidationError("Anzahl Gäste darf nicht negativ sein")

        # Buchungen über Mitternacht werden nicht unterstützt
        if not (0 <= start_slot <= 23) or not (1 <= end_slot <= 24):
            raise PricingValidationError(f"Ungültiger Zeitslot: {start_slot}-{end_slot}")
        if end_slot <= start_slot:
            raise PricingValidationError(
                f"Endzeit ({end_slot}:00) muss nach Startzeit ({start_slot}:00) liegen"
            )

        fees = {
            "peak_hour_fee": pricing.peak_hour_fee,
            "off_peak_hour_fee": pricing.off_peak_hour_fee,
            "fixed_hourly_fee": pricing.fixed_hourly_fee,
            "fixed_daily_fee": pricing.fixed_daily_fee,
            "guest_fee": pricing.guest_fee,
        }
        for name, value in fees.items():
            if not isinstance(value, Decimal) or not value.is_finite() or value < 0:
                raise PricingValidationError(f"Ungültige Gebühr {name}: {value}")

    @staticmethod
    def build_config(
        pricing_model: str = PRICING_VARIABLE,
        peak_hour_fee: Number = 150,
        off_peak_hour_fee: Number = 100,
        fixed_hourly_fee: Number = 125,
        fixed_daily_fee: Number = 500,
        guest_fee: Number = 70,
        peak_hours: Optional[Iterable[int]] = None,
        operating_start: int = 5,
        operating_end: int = 22,
        currency: str = "PHP"
    ) -> PricingConfig:
        """Erzeugt eine PricingConfig aus Rohwerten (int/float/Decimal)"""
        return PricingConfig(
            pricing_model=pricing_model or PRICING_VARIABLE,
            peak_hour_fee=to_decimal(peak_hour_fee),
            off_peak_hour_fee=to_decimal(off_peak_hour_fee),
            fixed_hourly_fee=to_decimal(fixed_hourly_fee),
            fixed_daily_fee=to_decimal(fixed_daily_fee),
            guest_fee=to_decimal(guest_fee),
            peak_hours=frozenset(peak_hours) if peak_hours else DEFAULT_PRICING.peak_hours,
            operating_start=operating_start,
            operating_end=operating_end,
            currency=currency,
        )

    @staticmethod
    def pricing_from_settings(club_settings) -> PricingConfig:
        """
        Erstellt die PricingConfig aus einem ClubSettings-Datensatz.

        Fehlende Werte (oder fehlende Einstellungen) fallen auf die
        Standardwerte zurück.
        """
        if club_settings is None:
            return DEFAULT_PRICING

        def pick(value, default):
            return default if value is None else value

        d = DEFAULT_PRICING
        return PricingCalculator.build_config(
            pricing_model=pick(club_settings.pricing_model, d.pricing_model),
            peak_hour_fee=pick(club_settings.peak_hour_fee, d.peak_hour_fee),
            off_peak_hour_fee=pick(club_settings.off_peak_hour_fee, d.off_peak_hour_fee),
            fixed_hourly_fee=pick(club_settings.fixed_hourly_fee, d.fixed_hourly_fee),
            fixed_daily_fee=pick(club_settings.fixed_daily_fee, d.fixed_daily_fee),
            guest_fee=pick(club_settings.guest_fee, d.guest_fee),
            peak_hours=club_settings.peak_hours or None,
            operating_start=pick(club_settings.operating_start, d.operating_start),
            operating_end=pick(club_settings.operating_end, d.operating_end),
            currency=pick(club_settings.currency, d.currency),
        )

    @staticmethod
    def get_pricing_for_club(db: Session, club_id: int) -> PricingConfig:
        """
        Lädt die Preis-Konfiguration eines Vereins aus der Datenbank.

        Args:
            db: Datenbank-Session
            club_id: ID des Vereins

        Returns:
            PricingConfig (Standardwerte, falls keine Einstellungen existieren)
        """
        # Lazy imports to avoid circular dependencies
        from courtdesk.models.club_settings import ClubSettings

        club_settings = db.query(ClubSettings).filter(ClubSettings.club_id == club_id).first()
        if not club_settings:
            logger.warning(f"Keine Einstellungen für Verein {club_id} gefunden, verwende Standardwerte")
            return DEFAULT_PRICING

        return PricingCalculator.pricing_from_settings(club_settings)

    @staticmethod
    def calculate_breakdown_for_reservation(
        pricing: PricingConfig,
        start_slot: int,
        end_slot: int,
        member_count: int,
        guest_count: int = 0
    ) -> Dict[str, Any]:
        """
        Berechnet die Gebühren mit detaillierter Aufschlüsselung (Vorschau).

        Returns:
            Dictionary mit Stunden-Aufschlüsselung, Summen und Betrag des Reservierers
        """
        breakdown = PricingCalculator.calculate_fees(
            pricing, start_slot, end_slot, member_count, guest_count
        )

        hours = []
        for hour in range(start_slot, end_slot):
            is_peak = PricingCalculator.is_peak_hour(pricing, hour)
            entry = {"hour": hour, "is_peak": is_peak}
            if pricing.pricing_model == PRICING_VARIABLE:
                entry["base_fee"] = float(PricingCalculator.hourly_base_fee(pricing, hour))
            hours.append(entry)

        reserver_amount = PricingCalculator.calculate_member_amount(breakdown, is_reserver=True)

        return {
            "pricing_model": pricing.pricing_model,
            "start_slot": start_slot,
            "end_slot": end_slot,
            "duration_hours": end_slot - start_slot,
            "member_count": member_count,
            "guest_count": guest_count,
            "hours": hours,
            **breakdown.to_dict(),
            "reserver_amount": float(reserver_amount),
            "other_member_amount": float(breakdown.member_share),
            "currency": pricing.currency,
        }

