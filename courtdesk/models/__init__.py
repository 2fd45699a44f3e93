"""SQLAlchemy Models für den Court-Desk"""
from courtdesk.models.club import Club
from courtdesk.models.club_settings import ClubSettings
from courtdesk.models.reservation import Reservation
from courtdesk.models.payment import Payment

__all__ = [
    "Club",
    "ClubSettings",
    "Reservation",
    "Payment",
]
