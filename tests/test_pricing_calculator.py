"""Tests für PricingCalculator Service"""
import pytest
from decimal import Decimal

from courtdesk.services.pricing_calculator import (
    PricingCalculator,
    PricingValidationError,
    DEFAULT_PRICING,
)


@pytest.fixture
def variable_pricing():
    """Variables Modell, Peak 18-21 Uhr"""
    return PricingCalculator.build_config(
        pricing_model="variable",
        peak_hour_fee=150,
        off_peak_hour_fee=100,
        guest_fee=70,
        peak_hours=[18, 19, 20, 21],
    )


@pytest.fixture
def hourly_pricing():
    return PricingCalculator.build_config(pricing_model="fixed-hourly", fixed_hourly_fee=125, guest_fee=70)


@pytest.fixture
def daily_pricing():
    return PricingCalculator.build_config(pricing_model="fixed-daily", fixed_daily_fee=500, guest_fee=70)


@pytest.mark.unit
class TestCalculateFees:
    """Unit-Tests für die drei Preismodelle"""

    def test_variable_peak_booking_with_guest(self, variable_pricing):
        """Test: 18-20 Uhr (2 Peak-Stunden), 2 Mitglieder, 1 Gast"""
        breakdown = PricingCalculator.calculate_fees(variable_pricing, 18, 20, member_count=2, guest_count=1)

        assert breakdown.total_base_fee == Decimal("300.00")
        assert breakdown.total_guest_fee == Decimal("140.00")
        assert breakdown.member_share == Decimal("150.00")
        assert breakdown.total_fee == Decimal("440.00")

    def test_reserver_pays_guest_fees(self, variable_pricing):
        """Test: Reservierer zahlt Anteil + alle Gastgebühren, andere nur den Anteil"""
        breakdown = PricingCalculator.calculate_fees(variable_pricing, 18, 20, member_count=2, guest_count=1)

        assert PricingCalculator.calculate_member_amount(breakdown, is_reserver=True) == Decimal("290.00")
        assert PricingCalculator.calculate_member_amount(breakdown, is_reserver=False) == Decimal("150.00")

    def test_variable_mixed_peak_and_off_peak(self, variable_pricing):
        """Test: 16-19 Uhr = 2x Off-Peak + 1x Peak"""
        breakdown = PricingCalculator.calculate_fees(variable_pricing, 16, 19, member_count=2)

        # 100 + 100 + 150 = 350
        assert breakdown.total_base_fee == Decimal("350.00")
        assert breakdown.total_guest_fee == Decimal("0.00")
        assert breakdown.member_share == Decimal("175.00")

    def test_fixed_hourly(self, hourly_pricing):
        """Test: Stundenpreis unabhängig von der Uhrzeit, Gäste pro Stunde"""
        breakdown = PricingCalculator.calculate_fees(hourly_pricing, 9, 11, member_count=2, guest_count=1)

        assert breakdown.total_base_fee == Decimal("250.00")
        assert breakdown.total_guest_fee == Decimal("140.00")
        assert breakdown.member_share == Decimal("125.00")
        # Anteil x Mitglieder ergibt wieder die Grundgebühr
        assert breakdown.member_share * 2 == breakdown.total_base_fee

    def test_fixed_daily(self, daily_pricing):
        """Test: Tagesgebühr pro Mitglied, Gäste einmal pro Tag"""
        breakdown = PricingCalculator.calculate_fees(daily_pricing, 8, 11, member_count=3, guest_count=2)

        assert breakdown.total_base_fee == Decimal("1500.00")
        assert breakdown.total_guest_fee == Decimal("140.00")
        assert breakdown.member_share == Decimal("500.00")

    def test_single_member_carries_full_base_fee(self, variable_pricing):
        """Test: Grenzfall ein Mitglied - Anteil = Grundgebühr"""
        breakdown = PricingCalculator.calculate_fees(variable_pricing, 20, 22, member_count=1)

        # 20, 21 sind Peak-Stunden
        assert breakdown.total_base_fee == Decimal("300.00")
        assert breakdown.member_share == breakdown.total_base_fee

    def test_share_rounded_to_cents(self, hourly_pricing):
        """Test: 125 / 3 wird auf 41.67 gerundet"""
        breakdown = PricingCalculator.calculate_fees(hourly_pricing, 9, 10, member_count=3)
        assert breakdown.member_share == Decimal("41.67")

    def test_rounding_is_half_up(self):
        """Test: 0.05 / 2 = 0.025 -> 0.03 (kaufmännisch, nicht Banker's Rounding)"""
        pricing = PricingCalculator.build_config(
            pricing_model="variable",
            off_peak_hour_fee=Decimal("0.05"),
            peak_hours=[18],
        )
        breakdown = PricingCalculator.calculate_fees(pricing, 9, 10, member_count=2)
        assert breakdown.member_share == Decimal("0.03")

    def test_to_dict_returns_floats(self, variable_pricing):
        breakdown = PricingCalculator.calculate_fees(variable_pricing, 18, 20, member_count=2, guest_count=1)
        assert breakdown.to_dict() == {
            "total_base_fee": 300.0,
            "total_guest_fee": 140.0,
            "member_share": 150.0,
            "total_fee": 440.0,
        }


@pytest.mark.unit
class TestPricingValidation:
    """Ungültige Eingaben werden mit PricingValidationError abgelehnt"""

    def test_no_members(self, variable_pricing):
        with pytest.raises(PricingValidationError):
            PricingCalculator.calculate_fees(variable_pricing, 18, 20, member_count=0, guest_count=2)

    def test_negative_guests(self, variable_pricing):
        with pytest.raises(PricingValidationError):
            PricingCalculator.calculate_fees(variable_pricing, 18, 20, member_count=1, guest_count=-1)

    def test_end_before_start(self, variable_pricing):
        with pytest.raises(PricingValidationError):
            PricingCalculator.calculate_fees(variable_pricing, 20, 18, member_count=1)

    def test_zero_duration(self, variable_pricing):
        with pytest.raises(PricingValidationError):
            PricingCalculator.calculate_fees(variable_pricing, 18, 18, member_count=1)

    def test_slot_out_of_range(self, variable_pricing):
        with pytest.raises(PricingValidationError):
            PricingCalculator.calculate_fees(variable_pricing, 23, 25, member_count=1)

    def test_negative_fee(self):
        pricing = PricingCalculator.build_config(peak_hour_fee=-10)
        with pytest.raises(PricingValidationError):
            PricingCalculator.calculate_fees(pricing, 18, 19, member_count=1)

    def test_nan_fee(self):
        pricing = PricingCalculator.build_config(guest_fee=float("nan"))
        with pytest.raises(PricingValidationError):
            PricingCalculator.calculate_fees(pricing, 9, 10, member_count=1)

    def test_infinite_fee(self):
        pricing = PricingCalculator.build_config(fixed_daily_fee=float("inf"), pricing_model="fixed-daily")
        with pytest.raises(PricingValidationError):
            PricingCalculator.calculate_fees(pricing, 9, 10, member_count=1)

    def test_unknown_pricing_model(self):
        pricing = PricingCalculator.build_config(pricing_model="per-minute")
        with pytest.raises(PricingValidationError):
            PricingCalculator.calculate_fees(pricing, 9, 10, member_count=1)

    def test_validation_error_is_value_error(self, variable_pricing):
        """Test: Router behandeln PricingValidationError wie ValueError"""
        with pytest.raises(ValueError):
            PricingCalculator.calculate_fees(variable_pricing, 18, 20, member_count=0)


@pytest.mark.unit
class TestMemberAmount:

    def test_daily_fee_covered_drops_base_share(self, daily_pricing):
        """Test: bereits bezahlte Tagesgebühr -> nur noch Gastgebühren (Reservierer)"""
        breakdown = PricingCalculator.calculate_fees(daily_pricing, 8, 10, member_count=2, guest_count=1)

        assert PricingCalculator.calculate_member_amount(
            breakdown, is_reserver=False, daily_fee_covered=True
        ) == Decimal("0.00")
        assert PricingCalculator.calculate_member_amount(
            breakdown, is_reserver=True, daily_fee_covered=True
        ) == Decimal("70.00")


@pytest.mark.unit
class TestOperatingHours:
    """Öffnungszeiten 5-22 Uhr"""

    def test_within_hours(self):
        PricingCalculator.validate_operating_hours(DEFAULT_PRICING, 5, 7)
        PricingCalculator.validate_operating_hours(DEFAULT_PRICING, 21, 23)

    def test_before_opening(self):
        with pytest.raises(PricingValidationError):
            PricingCalculator.validate_operating_hours(DEFAULT_PRICING, 4, 6)

    def test_start_at_closing(self):
        with pytest.raises(PricingValidationError):
            PricingCalculator.validate_operating_hours(DEFAULT_PRICING, 22, 23)

    def test_ends_too_late(self):
        with pytest.raises(PricingValidationError):
            PricingCalculator.validate_operating_hours(DEFAULT_PRICING, 21, 24)


@pytest.mark.unit
class TestPricingConfig:

    def test_defaults_without_settings(self):
        assert PricingCalculator.pricing_from_settings(None) == DEFAULT_PRICING
        assert DEFAULT_PRICING.pricing_model == "variable"
        assert DEFAULT_PRICING.peak_hours == frozenset({5, 18, 19, 20, 21})
        assert DEFAULT_PRICING.currency == "PHP"

    def test_pricing_from_settings_row(self, sample_settings):
        pricing = PricingCalculator.pricing_from_settings(sample_settings)
        assert pricing.peak_hours == frozenset({18, 19, 20, 21})
        assert pricing.peak_hour_fee == Decimal("150")
        assert pricing.guest_fee == Decimal("70")

    def test_get_pricing_for_club_without_settings(self, db_session, sample_club):
        assert PricingCalculator.get_pricing_for_club(db_session, sample_club.id) == DEFAULT_PRICING

    def test_get_pricing_for_club_with_settings(self, db_session, sample_settings):
        pricing = PricingCalculator.get_pricing_for_club(db_session, sample_settings.club_id)
        assert pricing.peak_hours == frozenset({18, 19, 20, 21})

    def test_breakdown_preview(self, variable_pricing):
        """Test: Vorschau mit Stunden-Aufschlüsselung"""
        result = PricingCalculator.calculate_breakdown_for_reservation(
            variable_pricing, 17, 19, member_count=2, guest_count=1
        )

        assert result["duration_hours"] == 2
        assert result["hours"] == [
            {"hour": 17, "is_peak": False, "base_fee": 100.0},
            {"hour": 18, "is_peak": True, "base_fee": 150.0},
        ]
        assert result["total_base_fee"] == 250.0
        assert result["total_guest_fee"] == 140.0
        assert result["member_share"] == 125.0
        assert result["reserver_amount"] == 265.0
        assert result["other_member_amount"] == 125.0
        assert result["currency"] == "PHP"
