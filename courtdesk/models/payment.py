"""Payment (Zahlung) Model"""
from sqlalchemy import Column, Integer, String, Date, DateTime, Text, ForeignKey, Numeric, JSON, CheckConstraint
from sqlalchemy.orm import relationship

from courtdesk.database import Base
from courtdesk.utils.datetime_utils import get_utc_timestamp

PAYMENT_STATUSES = ("pending", "completed", "record", "failed", "refunded")
PAID_STATUSES = ("completed", "record")
PAYMENT_METHODS = ("cash", "bank_transfer", "e_wallet")
PAYMENT_TYPES = ("court_usage", "membership_fee", "manual")


class Payment(Base):
    """
    Zahlungsverpflichtung eines Mitglieds (Platzbuchung, Mitgliedsbeitrag
    oder manuelle Buchung).

    Zahlungen bilden das Kassenbuch des Vereins und werden nie gelöscht,
    nur über Statusübergänge verändert.
    """
    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_payments_amount_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    club_id = Column(Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(100), nullable=False, index=True)
    reservation_id = Column(Integer, ForeignKey("reservations.id"), nullable=True, index=True)

    payment_type = Column(String(20), nullable=False, default="court_usage", index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="PHP")
    payment_method = Column(String(20), nullable=False, default="cash")  # cash, bank_transfer, e_wallet
    status = Column(String(20), nullable=False, default="pending", index=True)
    description = Column(String(300), nullable=True)
    reference = Column(String(200), nullable=True)  # Referenznummer, Transaktions-ID

    due_date = Column(Date, nullable=True)
    paid_date = Column(Date, nullable=True, index=True)
    membership_year = Column(Integer, nullable=True)

    # Zeitslot, Datum, Spieler-/Gästezahl, Reservierer ja/nein, ...
    payment_metadata = Column("metadata", JSON, nullable=False, default=dict)

    # Audit-Trail
    approved_by = Column(String(100), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    recorded_by = Column(String(100), nullable=True)
    recorded_at = Column(DateTime, nullable=True)
    cancelled_by = Column(String(100), nullable=True)
    cancelled_at = Column(DateTime, nullable=True)
    correction_reason = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=get_utc_timestamp, nullable=False)
    updated_at = Column(DateTime, default=get_utc_timestamp, onupdate=get_utc_timestamp, nullable=False)

    # Beziehungen
    club = relationship("Club", back_populates="payments")
    reservation = relationship("Reservation", back_populates="payments")

    @property
    def is_paid(self) -> bool:
        return self.status in PAID_STATUSES

    @property
    def report_date(self):
        """Datum, unter dem die Zahlung in Berichten erscheint"""
        if self.paid_date:
            return self.paid_date
        if self.due_date:
            return self.due_date
        return self.created_at.date() if self.created_at else None

    def __repr__(self):
        return f"<Payment {self.amount} {self.currency} {self.status} user={self.user_id}>"
