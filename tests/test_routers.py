"""Tests für die HTTP-Schnittstelle (FastAPI TestClient)"""
import pytest

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

BOOKING = {
    "date": "2026-05-04",
    "time_slot": 18,
    "duration": 2,
    "players": [
        {"name": "Anna", "user_id": "anna"},
        {"name": "Ben", "user_id": "ben"},
        {"name": "Carla", "is_member": False, "is_guest": True},
    ],
}


@pytest.fixture
def booking(client, sample_settings, member_headers):
    """Legt die Standard-Buchung über die API an"""
    response = client.post("/reservations", json=BOOKING, headers=member_headers)
    assert response.status_code == 201
    return response.json()


def payment_of(booking_json, user_id):
    return next(p for p in booking_json["payments"] if p["user_id"] == user_id)


@pytest.mark.integration
class TestHealthAndContext:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_missing_context(self, client):
        response = client.get("/payments")
        assert response.status_code == 401

    def test_invalid_club_id(self, client):
        response = client.get("/payments", headers={"X-Club-Id": "abc", "X-User-Id": "anna"})
        assert response.status_code == 400


@pytest.mark.integration
class TestClubSettings:

    def test_defaults_without_settings(self, client, member_headers):
        response = client.get("/clubs/settings", headers=member_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["pricing_model"] == "variable"
        assert data["peak_hour_fee"] == 150.0
        assert data["peak_hours"] == [5, 18, 19, 20, 21]

    def test_update_as_admin(self, client, admin_headers):
        payload = {
            "pricing_model": "fixed-hourly",
            "fixed_hourly_fee": 200,
            "guest_fee": 50,
            "peak_hours": [21, 18, 18],
            "currency": "php",
        }
        response = client.put("/clubs/settings", json=payload, headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["pricing_model"] == "fixed-hourly"
        assert data["fixed_hourly_fee"] == 200.0
        assert data["peak_hours"] == [18, 21]
        assert data["currency"] == "PHP"

    def test_update_as_member_forbidden(self, client, member_headers):
        response = client.put("/clubs/settings", json={"pricing_model": "fixed-daily"}, headers=member_headers)
        assert response.status_code == 403

    def test_negative_fee_rejected(self, client, admin_headers):
        response = client.put("/clubs/settings", json={"guest_fee": -1}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "validation"

    def test_invalid_peak_hour_rejected(self, client, admin_headers):
        response = client.put("/clubs/settings", json={"peak_hours": [18, 24]}, headers=admin_headers)
        assert response.status_code == 400


@pytest.mark.integration
class TestReservations:

    def test_create_reservation_creates_payments(self, booking):
        assert booking["total_fee"] == 440.0
        assert booking["end_time_slot"] == 20
        assert booking["payment_status"] == "unpaid"
        assert len(booking["payments"]) == 2
        assert payment_of(booking, "anna")["amount"] == 290.0
        assert payment_of(booking, "ben")["amount"] == 150.0

    def test_get_reservation(self, client, booking, member_headers):
        response = client.get(f"/reservations/{booking['id']}", headers=member_headers)
        assert response.status_code == 200
        assert response.json()["players"][2]["is_guest"] is True

    def test_unknown_reservation(self, client, member_headers):
        assert client.get("/reservations/999", headers=member_headers).status_code == 404

    def test_guests_only_rejected(self, client, sample_settings, member_headers):
        payload = dict(BOOKING, players=[{"name": "Carla", "is_member": False, "is_guest": True}])
        response = client.post("/reservations", json=payload, headers=member_headers)
        assert response.status_code == 400

    def test_duration_end_mismatch_rejected(self, client, sample_settings, member_headers):
        payload = dict(BOOKING, duration=1, end_time_slot=21)
        response = client.post("/reservations", json=payload, headers=member_headers)

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "validation"

    def test_outside_operating_hours_rejected(self, client, sample_settings, member_headers):
        payload = dict(BOOKING, time_slot=3, duration=1)
        response = client.post("/reservations", json=payload, headers=member_headers)

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "invalid_input"
        assert client.get("/payments", headers=member_headers).json() == []

    def test_sync_payments_is_idempotent(self, client, booking, admin_headers):
        response = client.post(f"/reservations/{booking['id']}/sync-payments", headers=admin_headers)

        assert response.status_code == 200
        ids_before = sorted(p["id"] for p in booking["payments"])
        assert sorted(p["id"] for p in response.json()["payments"]) == ids_before

    def test_sync_payments_requires_admin(self, client, booking, member_headers):
        response = client.post(f"/reservations/{booking['id']}/sync-payments", headers=member_headers)
        assert response.status_code == 403

    def test_update_status(self, client, booking, admin_headers):
        response = client.put(
            f"/reservations/{booking['id']}/status", params={"status": "confirmed"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "confirmed"

        response = client.put(
            f"/reservations/{booking['id']}/status", params={"status": "vanished"}, headers=admin_headers
        )
        assert response.status_code == 400


@pytest.mark.integration
class TestPaymentEndpoints:

    def test_calculate_preview(self, client, sample_settings, member_headers):
        response = client.get(
            "/payments/calculate",
            params={"start_slot": 18, "duration": 2, "member_count": 2, "guest_count": 1},
            headers=member_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total_base_fee"] == 300.0
        assert data["reserver_amount"] == 290.0

    def test_calculate_without_members(self, client, sample_settings, member_headers):
        response = client.get(
            "/payments/calculate", params={"start_slot": 18, "member_count": 0}, headers=member_headers
        )
        assert response.status_code == 400

    def test_list_filtered(self, client, booking, member_headers):
        response = client.get("/payments", params={"user_id": "ben"}, headers=member_headers)
        assert [p["user_id"] for p in response.json()] == ["ben"]

    def test_approve_record_unrecord_flow(self, client, booking, admin_headers):
        payment_id = payment_of(booking, "anna")["id"]

        response = client.put(f"/payments/{payment_id}/approve", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        assert response.json()["approved_by"] == "kassenwart"

        response = client.put(f"/payments/{payment_id}/record", headers=admin_headers)
        assert response.json()["status"] == "record"

        response = client.put(f"/payments/{payment_id}/unrecord", json={}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "missing_reason"

        response = client.put(
            f"/payments/{payment_id}/unrecord", json={"reason": "Doppelt erfasst"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        assert response.json()["correction_reason"] == "Doppelt erfasst"

        reservation = client.get(f"/reservations/{booking['id']}", headers=admin_headers).json()
        assert reservation["payment_status"] == "partial"

    def test_invalid_transition_is_conflict(self, client, booking, admin_headers):
        payment_id = payment_of(booking, "ben")["id"]
        response = client.put(f"/payments/{payment_id}/record", headers=admin_headers)

        assert response.status_code == 409
        assert response.json()["detail"]["error"] == "invalid_state"

    def test_member_cannot_approve(self, client, booking, member_headers):
        payment_id = payment_of(booking, "ben")["id"]
        response = client.put(f"/payments/{payment_id}/approve", headers=member_headers)
        assert response.status_code == 403

    def test_unknown_payment(self, client, admin_headers):
        response = client.put("/payments/999/approve", headers=admin_headers)
        assert response.status_code == 404

    def test_cancel(self, client, booking, admin_headers):
        payment_id = payment_of(booking, "ben")["id"]
        client.put(f"/payments/{payment_id}/approve", headers=admin_headers)

        response = client.put(
            f"/payments/{payment_id}/cancel",
            json={"new_status": "refunded", "reason": "Regen"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["status"] == "refunded"
        assert response.json()["cancelled_by"] == "kassenwart"

    def test_overdue(self, client, booking, member_headers):
        """Buchung am 2026-05-04 ist seit dem 2026-05-05 fällig"""
        response = client.get("/payments/overdue", headers=member_headers)
        assert response.status_code == 200
        assert len(response.json()) == 2

    def test_membership_fee(self, client, sample_settings, admin_headers):
        payload = {"user_id": "anna", "membership_year": 2026}
        response = client.post("/payments/membership-fee", json=payload, headers=admin_headers)

        assert response.status_code == 201
        assert response.json()["amount"] == 1000.0
        assert response.json()["status"] == "record"

        duplicate = client.post("/payments/membership-fee", json=payload, headers=admin_headers)
        assert duplicate.status_code == 400


@pytest.mark.integration
class TestReportEndpoints:

    def test_reconciliation(self, client, booking, admin_headers):
        payment_id = payment_of(booking, "anna")["id"]
        client.put(f"/payments/{payment_id}/approve", headers=admin_headers)

        response = client.get("/reports/reconciliation", headers=admin_headers)

        assert response.status_code == 200
        summary = response.json()["summary"]
        assert summary["total_payments"] == 1
        assert summary["total_amount"] == 290.0
        assert summary["pending_payments"] == 1
        assert summary["total_service_fees"] == 58.0
        assert summary["total_court_revenue"] == 232.0

    def test_reconciliation_requires_admin(self, client, member_headers):
        assert client.get("/reports/reconciliation", headers=member_headers).status_code == 403

    def test_reconciliation_invalid_range(self, client, admin_headers):
        response = client.get(
            "/reports/reconciliation",
            params={"start_date": "2026-06-01", "end_date": "2026-05-01"},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_export(self, client, booking, admin_headers):
        response = client.get("/reports/reconciliation/export", headers=admin_headers)

        assert response.status_code == 200
        assert response.headers["content-type"] == XLSX_MEDIA_TYPE
        assert response.content[:2] == b"PK"

    def test_court_usage(self, client, booking, admin_headers):
        payment_id = payment_of(booking, "ben")["id"]
        client.put(f"/payments/{payment_id}/approve", headers=admin_headers)
        client.put(f"/payments/{payment_id}/record", headers=admin_headers)

        response = client.get("/reports/court-usage", headers=admin_headers)

        assert response.status_code == 200
        rows = response.json()
        assert len(rows) == 1
        assert rows[0]["user_id"] == "ben"
        assert rows[0]["total"] == 150.0
