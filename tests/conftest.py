"""Pytest Fixtures und Test-Konfiguration"""
import pytest
from sqlalchemy.orm import sessionmaker, Session
from datetime import date

from courtdesk.database import Base, build_engine, get_db
from courtdesk.dependencies import ClubContext
from courtdesk.models import Club, ClubSettings, Reservation, Payment
from courtdesk.schemas.player import Player, dump_roster
from courtdesk.services.pricing_calculator import PricingCalculator


@pytest.fixture(scope="function")
def db_session() -> Session:
    """
    Erstellt eine temporäre In-Memory-SQLite-Datenbank für Tests
    Jeder Test bekommt eine frische, isolierte Datenbank
    """
    engine = build_engine("sqlite:///:memory:")

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def sample_club(db_session: Session) -> Club:
    """Erstellt einen Beispiel-Verein"""
    club = Club(name="TC Grün-Weiß", code="TCGW2026", is_active=True)
    db_session.add(club)
    db_session.commit()
    db_session.refresh(club)
    return club


@pytest.fixture
def sample_settings(db_session: Session, sample_club: Club) -> ClubSettings:
    """Variables Preismodell mit Peak-Stunden 18-21 Uhr"""
    club_settings = ClubSettings(
        club_id=sample_club.id,
        pricing_model="variable",
        peak_hour_fee=150,
        off_peak_hour_fee=100,
        fixed_hourly_fee=125,
        fixed_daily_fee=500,
        guest_fee=70,
        peak_hours=[18, 19, 20, 21],
        operating_start=5,
        operating_end=22,
        currency="PHP",
        annual_membership_fee=1000,
    )
    db_session.add(club_settings)
    db_session.commit()
    db_session.refresh(club_settings)
    return club_settings


@pytest.fixture
def pricing(sample_settings: ClubSettings):
    return PricingCalculator.pricing_from_settings(sample_settings)


@pytest.fixture
def admin_context(sample_club: Club) -> ClubContext:
    return ClubContext(club_id=sample_club.id, user_id="kassenwart", role="treasurer")


@pytest.fixture
def member_context(sample_club: Club) -> ClubContext:
    return ClubContext(club_id=sample_club.id, user_id="anna", role="member")


@pytest.fixture
def make_reservation(db_session: Session, sample_club: Club):
    """Factory: speichert eine Buchung (ohne Zahlungen)"""
    def _make(
        players,
        user_id: str = "anna",
        day: date = date(2026, 5, 4),
        time_slot: int = 18,
        end_time_slot: int = 20
    ) -> Reservation:
        reservation = Reservation(
            club_id=sample_club.id,
            user_id=user_id,
            date=day,
            time_slot=time_slot,
            end_time_slot=end_time_slot,
            players=dump_roster(players) if players_are_models(players) else players,
            status="confirmed",
        )
        db_session.add(reservation)
        db_session.commit()
        db_session.refresh(reservation)
        return reservation

    return _make


def players_are_models(players) -> bool:
    return isinstance(players, list) and any(isinstance(p, Player) for p in players)


@pytest.fixture
def two_members_one_guest():
    """Anna (Reserviererin), Ben (Mitglied), Carla (Gast)"""
    return [
        Player(name="Anna", user_id="anna", is_member=True, is_guest=False),
        Player(name="Ben", user_id="ben", is_member=True, is_guest=False),
        Player(name="Carla", is_member=False, is_guest=True),
    ]


@pytest.fixture
def make_payment(db_session: Session, sample_club: Club):
    """Factory: speichert eine einzelne Zahlung"""
    def _make(status: str = "pending", amount=100, **kwargs) -> Payment:
        values = {
            "club_id": sample_club.id,
            "user_id": "anna",
            "payment_type": "court_usage",
            "amount": amount,
            "currency": "PHP",
            "payment_method": "cash",
            "status": status,
            "due_date": date(2026, 5, 5),
            "payment_metadata": {},
        }
        values.update(kwargs)
        payment = Payment(**values)
        db_session.add(payment)
        db_session.commit()
        db_session.refresh(payment)
        return payment

    return _make


@pytest.fixture
def client(db_session: Session, sample_club: Club):
    """FastAPI TestClient mit In-Memory-Datenbank (ohne Lifespan)"""
    from fastapi.testclient import TestClient
    from courtdesk.main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(sample_club: Club) -> dict:
    return {"X-Club-Id": str(sample_club.id), "X-User-Id": "kassenwart", "X-Club-Role": "treasurer"}


@pytest.fixture
def member_headers(sample_club: Club) -> dict:
    return {"X-Club-Id": str(sample_club.id), "X-User-Id": "anna", "X-Club-Role": "member"}
