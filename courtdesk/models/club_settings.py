"""ClubSettings (Vereinseinstellungen: Preise & Öffnungszeiten) Model"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric, JSON, CheckConstraint
from sqlalchemy.orm import relationship

from courtdesk.database import Base
from courtdesk.utils.datetime_utils import get_utc_timestamp

PRICING_MODELS = ("variable", "fixed-hourly", "fixed-daily")

DEFAULT_PEAK_HOURS = [5, 18, 19, 20, 21]


class ClubSettings(Base):
    """
    Preis- und Öffnungszeiten-Konfiguration eines Vereins.

    Wird vom Preisrechner nur gelesen, nie verändert.
    """
    __tablename__ = "club_settings"
    __table_args__ = (
        CheckConstraint("peak_hour_fee >= 0", name="ck_club_settings_peak_fee"),
        CheckConstraint("off_peak_hour_fee >= 0", name="ck_club_settings_off_peak_fee"),
        CheckConstraint("fixed_hourly_fee >= 0", name="ck_club_settings_hourly_fee"),
        CheckConstraint("fixed_daily_fee >= 0", name="ck_club_settings_daily_fee"),
        CheckConstraint("guest_fee >= 0", name="ck_club_settings_guest_fee"),
    )

    id = Column(Integer, primary_key=True, index=True)
    club_id = Column(Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)

    # Preismodell
    pricing_model = Column(String(20), nullable=False, default="variable")  # siehe PRICING_MODELS
    peak_hour_fee = Column(Numeric(10, 2), nullable=False, default=150)
    off_peak_hour_fee = Column(Numeric(10, 2), nullable=False, default=100)
    fixed_hourly_fee = Column(Numeric(10, 2), nullable=False, default=125)
    fixed_daily_fee = Column(Numeric(10, 2), nullable=False, default=500)
    guest_fee = Column(Numeric(10, 2), nullable=False, default=70)
    peak_hours = Column(JSON, nullable=False, default=lambda: list(DEFAULT_PEAK_HOURS))

    # Öffnungszeiten (volle Stunden, 0-23)
    operating_start = Column(Integer, nullable=False, default=5)
    operating_end = Column(Integer, nullable=False, default=22)

    # Mitgliedsbeitrag
    currency = Column(String(3), nullable=False, default="PHP")
    annual_membership_fee = Column(Numeric(10, 2), nullable=False, default=1000)

    # Audit
    updated_by = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=get_utc_timestamp, nullable=False)
    updated_at = Column(DateTime, default=get_utc_timestamp, onupdate=get_utc_timestamp, nullable=False)

    # Beziehungen
    club = relationship("Club", back_populates="settings")

    def __repr__(self):
        return f"<ClubSettings club={self.club_id} model={self.pricing_model}>"
