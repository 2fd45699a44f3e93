"""Pydantic Schemas für Payment"""
from datetime import date, datetime
from typing import Any, Dict, Literal, Optional
from pydantic import BaseModel, Field

PaymentMethod = Literal["cash", "bank_transfer", "e_wallet"]


class PaymentResponse(BaseModel):
    """Schema für die Antwort"""
    id: int
    club_id: int
    user_id: str
    reservation_id: Optional[int] = None
    payment_type: str
    amount: float
    currency: str
    payment_method: str
    status: str
    description: Optional[str] = None
    reference: Optional[str] = None
    due_date: Optional[date] = None
    paid_date: Optional[date] = None
    membership_year: Optional[int] = None
    metadata: Dict[str, Any] = Field(default_factory=dict, validation_alias="payment_metadata")
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    recorded_by: Optional[str] = None
    recorded_at: Optional[datetime] = None
    cancelled_by: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    correction_reason: Optional[str] = None

    class Config:
        from_attributes = True


class PaymentCancel(BaseModel):
    """Stornieren einer freigegebenen Zahlung"""
    new_status: Literal["failed", "refunded"] = "refunded"
    reason: Optional[str] = Field(None, max_length=500)


class PaymentUnrecord(BaseModel):
    """Erfassung zurücknehmen (Begründung wird im Service geprüft)"""
    reason: Optional[str] = Field(None, max_length=500)


class MembershipFeeCreate(BaseModel):
    """Erfassen eines Mitgliedsbeitrags"""
    user_id: str = Field(..., min_length=1, max_length=100)
    membership_year: int = Field(..., ge=2000, le=2100)
    amount: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    payment_method: PaymentMethod = "cash"
    reference: Optional[str] = Field(None, max_length=200)
