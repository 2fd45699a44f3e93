"""Pydantic Schemas für Reservierungen"""
from datetime import date
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator

from courtdesk.schemas.player import Player


class ReservationCreate(BaseModel):
    """Schema für das Erstellen einer Buchung"""
    date: date
    time_slot: int = Field(..., ge=0, le=23)
    duration: Optional[int] = Field(None, ge=1, le=12)
    end_time_slot: Optional[int] = Field(None, ge=1, le=24)
    players: List[Player] = Field(..., min_length=1)

    @model_validator(mode='after')
    def resolve_end_slot(self):
        """Endzeit aus Dauer ableiten, Reihenfolge und Mitglieder prüfen"""
        if self.end_time_slot is None:
            self.end_time_slot = self.time_slot + (self.duration or 1)
        elif self.duration is not None and self.end_time_slot != self.time_slot + self.duration:
            raise ValueError("Dauer und Endzeit widersprechen sich")
        if self.end_time_slot <= self.time_slot:
            raise ValueError("Endzeit muss nach der Startzeit liegen")
        if self.end_time_slot > 24:
            raise ValueError("Buchungen über Mitternacht sind nicht möglich")
        if not any(p.is_member for p in self.players):
            raise ValueError("Mindestens ein Spieler muss Mitglied sein")
        return self


class PaymentSummary(BaseModel):
    """Kurzform einer Zahlung innerhalb einer Buchung"""
    id: int
    user_id: str
    amount: float
    status: str
    description: Optional[str] = None

    class Config:
        from_attributes = True


class ReservationResponse(BaseModel):
    """Schema für die Antwort"""
    id: int
    club_id: int
    user_id: str
    date: date
    time_slot: int
    end_time_slot: int
    players: List[Player]
    status: str
    payment_status: str
    total_fee: float
    payments: List[PaymentSummary] = []

    @classmethod
    def from_reservation(cls, reservation) -> "ReservationResponse":
        return cls(
            id=reservation.id,
            club_id=reservation.club_id,
            user_id=reservation.user_id,
            date=reservation.date,
            time_slot=reservation.time_slot,
            end_time_slot=reservation.end_time_slot,
            players=reservation.player_list,
            status=reservation.status,
            payment_status=reservation.payment_status,
            total_fee=float(reservation.total_fee or 0),
            payments=[PaymentSummary.model_validate(p) for p in reservation.payments],
        )
