# tests/test_vehicles_api.py
"""End-to-end tests for the vehicle board and status transitions over HTTP."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from unittest.mock import patch
from app.errors import InternalError
from conftest import VIN, auth_headers

NEW_VEHICLE = {"vin": VIN, "year": 2019, "make": "Toyota", "model": "Camry", "current_location": "Intake"}


def check_in(client, headers, **overrides):
    resp = client.post("/api/v1/vehicles", json={**NEW_VEHICLE, **overrides}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestVehicleBoard:
    def test_requires_session(self, client):
        assert client.get("/api/v1/vehicles").status_code == 401

    def test_user_role_cannot_check_in(self, client, tech):
        resp = client.post("/api/v1/vehicles", json=NEW_VEHICLE, headers=auth_headers(tech))
        assert resp.status_code == 401

    def test_check_in_records_event(self, client, manager):
        headers = auth_headers(manager)
        created = check_in(client, headers)

        assert created["status"] == "PENDING"
        detail = client.get(f"/api/v1/vehicles/{VIN}", headers=headers).json()
        assert [e["event_type"] for e in detail["timeline_events"]] == ["CHECK_IN"]

    def test_vin_lookup_is_case_insensitive(self, client, manager):
        headers = auth_headers(manager)
        created = check_in(client, headers, vin=VIN.lower())

        assert created["vin"] == VIN
        resp = client.get(f"/api/v1/vehicles/{VIN.lower()}", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["id"] == created["id"]

    def test_duplicate_vin_conflicts(self, client, manager):
        headers = auth_headers(manager)
        check_in(client, headers)
        resp = client.post("/api/v1/vehicles", json=NEW_VEHICLE, headers=headers)
        assert resp.status_code == 409

    def test_bad_vin_rejected(self, client, manager):
        resp = client.post("/api/v1/vehicles", json={**NEW_VEHICLE, "vin": "SHORT"}, headers=auth_headers(manager))
        assert resp.status_code == 400
        assert resp.json()["code"] == "VALIDATION_ERROR"

    def test_update_then_read_back(self, client, manager):
        headers = auth_headers(manager)
        check_in(client, headers)

        resp = client.put(f"/api/v1/vehicles/{VIN}", json={"make": "Honda"}, headers=headers)
        assert resp.status_code == 200

        assert client.get(f"/api/v1/vehicles/{VIN}", headers=headers).json()["make"] == "Honda"

    def test_location_change_recorded(self, client, manager):
        headers = auth_headers(manager)
        check_in(client, headers)

        client.put(f"/api/v1/vehicles/{VIN}", json={"current_location": "Body Shop"}, headers=headers)

        events = client.get(f"/api/v1/vehicles/{VIN}/timeline", headers=headers).json()
        assert events[0]["event_type"] == "LOCATION_CHANGE"
        assert events[0]["description"] == "Location changed from Intake to Body Shop."

    def test_null_for_required_field_rejected(self, client, manager):
        headers = auth_headers(manager)
        check_in(client, headers)

        for field in ("make", "priority"):
            resp = client.put(f"/api/v1/vehicles/{VIN}", json={field: None}, headers=headers)
            assert resp.status_code == 400, field
            assert resp.json()["code"] == "VALIDATION_ERROR"

        vehicle = client.get(f"/api/v1/vehicles/{VIN}", headers=headers).json()
        assert vehicle["make"] == "Toyota"
        assert vehicle["priority"] == "MEDIUM"

    def test_update_unknown_vehicle(self, client, manager):
        resp = client.put("/api/v1/vehicles/ZZZZZZZZZZZZZZZZZ", json={"make": "Honda"}, headers=auth_headers(manager))
        assert resp.status_code == 404

    def test_delete(self, client, admin, manager):
        check_in(client, auth_headers(manager))

        assert client.delete(f"/api/v1/vehicles/{VIN}", headers=auth_headers(manager)).status_code == 401
        assert client.delete(f"/api/v1/vehicles/{VIN}", headers=auth_headers(admin)).status_code == 200
        assert client.get(f"/api/v1/vehicles/{VIN}", headers=auth_headers(admin)).status_code == 404

    def test_delete_unknown_vehicle(self, client, admin):
        assert client.delete("/api/v1/vehicles/ZZZZZZZZZZZZZZZZZ", headers=auth_headers(admin)).status_code == 404

    def test_store_failure_is_generic_500(self, client, manager):
        with patch("app.services.timeline_service.TimelineRecorder.record",
                   side_effect=InternalError("Could not record timeline event")):
            resp = client.post("/api/v1/vehicles", json=NEW_VEHICLE, headers=auth_headers(manager))

        assert resp.status_code == 500
        assert resp.json() == {"detail": "Internal server error"}

    def test_list_filters_and_pages(self, client, manager):
        headers = auth_headers(manager)
        check_in(client, headers, vin="1HGCM82633A000001", make="Honda", model="Civic")
        check_in(client, headers, vin="1HGCM82633A000002", make="Honda", model="Accord")
        check_in(client, headers, vin="1HGCM82633A000003", make="Ford", model="F-150", status="IN_PROGRESS")

        page = client.get("/api/v1/vehicles?limit=2", headers=headers).json()
        assert page["total"] == 3
        assert len(page["data"]) == 2

        hondas = client.get("/api/v1/vehicles?make=honda", headers=headers).json()
        assert hondas["total"] == 2

        busy = client.get("/api/v1/vehicles?status=IN_PROGRESS", headers=headers).json()
        assert [v["model"] for v in busy["data"]] == ["F-150"]

        found = client.get("/api/v1/vehicles?search=civ", headers=headers).json()
        assert found["total"] == 1


class TestStatusTransitions:
    def test_completed_stamps_completed_at_once(self, client, manager):
        headers = auth_headers(manager)
        check_in(client, headers)

        done = client.post(f"/api/v1/vehicles/{VIN}/status", json={"status": "COMPLETED"}, headers=headers)
        assert done.status_code == 200
        body = done.json()
        assert body["previous_status"] == "PENDING"
        assert body["vehicle"]["status"] == "COMPLETED"
        assert body["event"]["description"] == "Status changed from PENDING to COMPLETED."
        stamp = body["vehicle"]["completed_at"]
        assert stamp is not None

        reopened = client.post(f"/api/v1/vehicles/{VIN}/status", json={"status": "IN_PROGRESS"}, headers=headers)
        assert reopened.json()["vehicle"]["completed_at"] == stamp

    def test_any_status_may_follow_any_other(self, client, manager):
        headers = auth_headers(manager)
        check_in(client, headers, status="COMPLETED")

        resp = client.post(f"/api/v1/vehicles/{VIN}/status", json={"status": "PENDING"}, headers=headers)

        assert resp.status_code == 200
        assert resp.json()["vehicle"]["status"] == "PENDING"

    def test_repeated_status_records_again(self, client, manager):
        headers = auth_headers(manager)
        check_in(client, headers)

        for _ in range(2):
            resp = client.post(f"/api/v1/vehicles/{VIN}/status", json={"status": "ON_HOLD"}, headers=headers)
            assert resp.status_code == 200

        events = client.get(f"/api/v1/vehicles/{VIN}/timeline?event_type=STATUS_CHANGE", headers=headers).json()
        assert len(events) == 2
        assert resp.json()["status_changed"] is False

    def test_invalid_status_rejected(self, client, manager):
        headers = auth_headers(manager)
        check_in(client, headers)

        resp = client.post(f"/api/v1/vehicles/{VIN}/status", json={"status": "SOLD"}, headers=headers)

        assert resp.status_code == 400
        events = client.get(f"/api/v1/vehicles/{VIN}/timeline", headers=headers).json()
        assert [e["event_type"] for e in events] == ["CHECK_IN"]

    def test_unknown_vehicle(self, client, manager):
        resp = client.post("/api/v1/vehicles/ZZZZZZZZZZZZZZZZZ/status", json={"status": "COMPLETED"},
                           headers=auth_headers(manager))
        assert resp.status_code == 404

    def test_assignee_may_move_own_vehicle(self, client, manager, tech, make_user):
        check_in(client, auth_headers(manager), assigned_to_id=tech.id)
        other = make_user("other@example.com")

        denied = client.post(f"/api/v1/vehicles/{VIN}/status", json={"status": "IN_PROGRESS"},
                             headers=auth_headers(other))
        allowed = client.post(f"/api/v1/vehicles/{VIN}/status", json={"status": "IN_PROGRESS"},
                              headers=auth_headers(tech))

        assert denied.status_code == 401
        assert allowed.status_code == 200
        assert allowed.json()["event"]["user_id"] == tech.id

    def test_assignee_notified_and_inbox_populated(self, client, manager, tech):
        check_in(client, auth_headers(manager), assigned_to_id=tech.id)

        resp = client.post(f"/api/v1/vehicles/{VIN}/status", json={"status": "COMPLETED"},
                           headers=auth_headers(manager))

        assert resp.json()["notifications_sent"] == 1
        assert resp.json()["partial_success"] is False
        inbox = client.get("/api/notifications", headers=auth_headers(tech)).json()
        assert [n["type"] for n in inbox] == ["VEHICLE_COMPLETED", "NEW_VEHICLE_CHECK_IN"]
        assert all(n["status"] == "SENT" for n in inbox)

    def test_status_change_through_update(self, client, manager):
        headers = auth_headers(manager)
        check_in(client, headers)

        resp = client.put(f"/api/v1/vehicles/{VIN}", json={"status": "IN_PROGRESS", "mileage": 42000},
                          headers=headers)

        assert resp.json()["status"] == "IN_PROGRESS"
        assert resp.json()["mileage"] == 42000
        events = client.get(f"/api/v1/vehicles/{VIN}/timeline", headers=headers).json()
        assert events[0]["event_type"] == "STATUS_CHANGE"


class TestTimelineEndpoints:
    def test_manual_event_and_feed(self, client, manager):
        headers = auth_headers(manager)
        check_in(client, headers)

        resp = client.post(f"/api/v1/vehicles/{VIN}/timeline",
                           json={"event_type": "NOTE", "description": "Waiting on tires."}, headers=headers)
        assert resp.status_code == 201
        assert resp.json()["department"] == "Intake"

        feed = client.get("/api/v1/timeline", headers=headers).json()
        assert feed["total"] == 2
        assert feed["data"][0]["vin"] == VIN
        assert feed["data"][0]["event_type"] == "NOTE"

    def test_user_role_cannot_add_events(self, client, manager, tech):
        check_in(client, auth_headers(manager))
        resp = client.post(f"/api/v1/vehicles/{VIN}/timeline", json={"event_type": "NOTE"},
                           headers=auth_headers(tech))
        assert resp.status_code == 401
