"""Reservation (Platzbuchung) Model"""
from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, Numeric, JSON, CheckConstraint
from sqlalchemy.orm import relationship

from courtdesk.database import Base
from courtdesk.utils.datetime_utils import get_utc_timestamp

RESERVATION_STATUSES = ("pending", "confirmed", "cancelled", "completed", "no-show")

# Aggregierter Zahlungsstatus einer Buchung
PAYMENT_STATUS_UNPAID = "unpaid"
PAYMENT_STATUS_PARTIAL = "partial"
PAYMENT_STATUS_PAID = "paid"


class Reservation(Base):
    """
    Repräsentiert eine Platzbuchung (ein Zeitblock an einem Tag).

    `players` wird versioniert als JSON gespeichert, siehe
    courtdesk.schemas.player.normalize_players.
    """
    __tablename__ = "reservations"
    __table_args__ = (
        CheckConstraint("end_time_slot > time_slot", name="ck_reservations_slot_range"),
        CheckConstraint("total_fee >= 0", name="ck_reservations_total_fee"),
    )

    id = Column(Integer, primary_key=True, index=True)
    club_id = Column(Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(100), nullable=False, index=True)  # reservierendes Mitglied

    date = Column(Date, nullable=False, index=True)
    time_slot = Column(Integer, nullable=False)  # Startstunde (0-23)
    end_time_slot = Column(Integer, nullable=False)  # exklusiv

    players = Column(JSON, nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)
    payment_status = Column(String(20), nullable=False, default=PAYMENT_STATUS_UNPAID, index=True)
    total_fee = Column(Numeric(10, 2), nullable=False, default=0)

    # Timestamps
    created_at = Column(DateTime, default=get_utc_timestamp, nullable=False)
    updated_at = Column(DateTime, default=get_utc_timestamp, onupdate=get_utc_timestamp, nullable=False)

    # Beziehungen
    club = relationship("Club", back_populates="reservations")
    payments = relationship("Payment", back_populates="reservation", order_by="Payment.id")

    @property
    def time_slot_display(self) -> str:
        return f"{self.time_slot}:00-{self.end_time_slot}:00"

    @property
    def player_list(self):
        """Spieler im aktuellen Format (Altformat wird beim Lesen migriert)"""
        from courtdesk.schemas.player import normalize_players
        return normalize_players(self.players, reserver_user_id=self.user_id)

    def __repr__(self):
        return f"<Reservation {self.date} {self.time_slot_display} club={self.club_id}>"
