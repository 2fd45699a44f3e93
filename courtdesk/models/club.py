"""Club (Verein) Model"""
from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.orm import relationship

from courtdesk.database import Base
from courtdesk.utils.datetime_utils import get_utc_timestamp


class Club(Base):
    """
    Repräsentiert einen Verein (Mandant). Alle Reservierungen und Zahlungen
    gehören genau einem Verein.
    """
    __tablename__ = "clubs"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, index=True)
    code = Column(String(20), unique=True, nullable=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=get_utc_timestamp, nullable=False)
    updated_at = Column(DateTime, default=get_utc_timestamp, onupdate=get_utc_timestamp, nullable=False)

    # Beziehungen
    settings = relationship("ClubSettings", back_populates="club", cascade="all, delete-orphan", uselist=False)
    reservations = relationship("Reservation", back_populates="club", cascade="all, delete-orphan")
    payments = relationship("Payment", back_populates="club", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Club {self.name} ({self.code})>"
