"""Pydantic Schemas für Validierung"""
from courtdesk.schemas.player import Player, LegacyRoster, PlayerRoster, normalize_players, dump_roster
from courtdesk.schemas.club_settings import ClubSettingsUpdate, ClubSettingsResponse
from courtdesk.schemas.reservation import ReservationCreate, ReservationResponse
from courtdesk.schemas.payment import PaymentResponse, PaymentCancel, PaymentUnrecord, MembershipFeeCreate

__all__ = [
    "Player",
    "LegacyRoster",
    "PlayerRoster",
    "normalize_players",
    "dump_roster",
    "ClubSettingsUpdate",
    "ClubSettingsResponse",
    "ReservationCreate",
    "ReservationResponse",
    "PaymentResponse",
    "PaymentCancel",
    "PaymentUnrecord",
    "MembershipFeeCreate",
]
