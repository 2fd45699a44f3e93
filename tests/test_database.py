"""Tests für Engine-Aufbau und Transaktionen"""
import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from courtdesk.database import build_engine, transaction
from courtdesk.models import Club, Payment


@pytest.mark.unit
class TestBuildEngine:

    def test_sqlite_enforces_foreign_keys(self):
        engine = build_engine("sqlite:///:memory:")
        with engine.connect() as connection:
            assert connection.execute(text("PRAGMA foreign_keys")).scalar() == 1
        engine.dispose()

    def test_in_memory_shares_one_connection(self):
        engine = build_engine("sqlite://")
        with engine.begin() as connection:
            connection.execute(text("CREATE TABLE court_slots (id INTEGER)"))
        with engine.connect() as connection:
            assert connection.execute(text("SELECT COUNT(*) FROM court_slots")).scalar() == 0
        engine.dispose()


@pytest.mark.integration
class TestTransaction:

    def test_commit_on_success(self, db_session):
        with transaction(db_session):
            db_session.add(Club(name="TC Blau-Rot", code="TCBR2026"))

        assert db_session.query(Club).filter(Club.code == "TCBR2026").count() == 1

    def test_rollback_on_error(self, db_session, sample_club):
        """Test: Zahlung für unbekannten Verein scheitert am Fremdschlüssel, nichts bleibt übrig"""
        with pytest.raises(IntegrityError):
            with transaction(db_session):
                db_session.add(Payment(club_id=sample_club.id + 100, user_id="anna", amount=10))
                db_session.flush()

        assert db_session.query(Payment).count() == 0
