"""Pydantic Schemas für Vereinseinstellungen (Preise & Öffnungszeiten)"""
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, field_validator, model_validator

PricingModel = Literal["variable", "fixed-hourly", "fixed-daily"]


class ClubSettingsBase(BaseModel):
    """Basis-Schema für Vereinseinstellungen"""
    pricing_model: PricingModel = "variable"
    peak_hour_fee: float = Field(150, ge=0, allow_inf_nan=False)
    off_peak_hour_fee: float = Field(100, ge=0, allow_inf_nan=False)
    fixed_hourly_fee: float = Field(125, ge=0, allow_inf_nan=False)
    fixed_daily_fee: float = Field(500, ge=0, allow_inf_nan=False)
    guest_fee: float = Field(70, ge=0, allow_inf_nan=False)
    peak_hours: List[int] = Field(default_factory=lambda: [5, 18, 19, 20, 21])
    operating_start: int = Field(5, ge=0, le=23)
    operating_end: int = Field(22, ge=0, le=23)
    currency: str = Field("PHP", min_length=3, max_length=3)
    annual_membership_fee: float = Field(1000, ge=0, allow_inf_nan=False)

    @field_validator('peak_hours')
    @classmethod
    def validate_peak_hours(cls, v: List[int]) -> List[int]:
        """Stunden zwischen 0 und 23, sortiert und ohne Duplikate"""
        for hour in v:
            if hour < 0 or hour > 23:
                raise ValueError("Peak-Stunden müssen zwischen 0 und 23 liegen")
        return sorted(set(v))

    @field_validator('currency')
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode='after')
    def check_operating_hours(self):
        if self.operating_end <= self.operating_start:
            raise ValueError("Schließzeit muss nach der Öffnungszeit liegen")
        return self


class ClubSettingsUpdate(ClubSettingsBase):
    """Schema für das Aktualisieren der Einstellungen"""
    pass


class ClubSettingsResponse(ClubSettingsBase):
    """Schema für die Antwort"""
    id: Optional[int] = None
    club_id: int

    class Config:
        from_attributes = True
