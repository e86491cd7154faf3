# tests/test_webhooks_api.py
"""Tests for the inbound recon webhook."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import json
from app.config import settings
from app.models.timeline_event import TimelineEvent
from app.services.webhook_service import compute_signature, verify_signature
from conftest import VIN

URL = "/api/webhooks/recon"


def event_count(db):
    db.expire_all()
    return db.query(TimelineEvent).count()


class TestReconWebhook:
    def test_full_update_creates_three_events(self, client, db, make_vehicle):
        make_vehicle(status="IN_PROGRESS", current_location="Intake")

        resp = client.post(URL, json={
            "vin": VIN.lower(),
            "status": "ready_for_sale",
            "currentLocation": "Lot",
            "eventType": "DETAIL_COMPLETE",
            "description": "Final detail done.",
        })

        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["received"] is True
        assert body["vin"] == VIN
        assert body["status"] == "READY_FOR_SALE"
        assert body["events_created"] == 3

        types = [e.event_type for e in db.query(TimelineEvent).order_by(TimelineEvent.id).all()]
        assert types == ["LOCATION_CHANGE", "STATUS_CHANGE", "DETAIL_COMPLETE"]

    def test_assignee_by_email(self, client, make_vehicle, tech):
        make_vehicle()

        resp = client.post(URL, json={"vin": VIN, "assignedToEmail": "TECH@example.com"})

        assert resp.status_code == 200
        assert resp.json()["events_created"] == 1

    def test_missing_vin_is_bad_request(self, client, db):
        resp = client.post(URL, json={"status": "COMPLETED"})
        assert resp.status_code == 400
        assert event_count(db) == 0

    def test_unknown_vin_is_not_found_and_writes_nothing(self, client, db):
        resp = client.post(URL, json={"vin": "ZZZZZZZZZZZZZZZZZ", "status": "COMPLETED", "eventType": "NOTE"})
        assert resp.status_code == 404
        assert event_count(db) == 0

    def test_unknown_assignee_writes_nothing(self, client, db, make_vehicle):
        make_vehicle()
        resp = client.post(URL, json={"vin": VIN, "currentLocation": "Lot", "assignedToEmail": "ghost@example.com"})
        assert resp.status_code == 404
        assert event_count(db) == 0

    def test_invalid_status_writes_nothing(self, client, db, make_vehicle):
        make_vehicle()
        resp = client.post(URL, json={"vin": VIN, "currentLocation": "Lot", "status": "SOLD"})
        assert resp.status_code == 400
        assert event_count(db) == 0

    def test_body_must_be_json_object(self, client):
        assert client.post(URL, content=b"not json", headers={"Content-Type": "application/json"}).status_code == 400
        assert client.post(URL, json=["vin"]).status_code == 400


class TestWebhookSignature:
    def test_signature_helpers(self):
        signature = compute_signature(b'{"vin":"X"}', "1700000000", "s3cret")
        assert signature.startswith("sha256=")
        assert verify_signature(b'{"vin":"X"}', signature, "1700000000", "s3cret")
        assert not verify_signature(b'{"vin":"Y"}', signature, "1700000000", "s3cret")

    def test_bad_signature_rejected(self, client, make_vehicle, monkeypatch):
        monkeypatch.setattr(settings, "WEBHOOK_SECRET", "s3cret")
        make_vehicle()
        raw = json.dumps({"vin": VIN, "status": "COMPLETED"}).encode()

        resp = client.post(URL, content=raw, headers={
            "Content-Type": "application/json",
            "X-Recon-Timestamp": "1700000000",
            "X-Recon-Signature": "sha256=deadbeef",
        })

        assert resp.status_code == 401

    def test_good_signature_accepted(self, client, make_vehicle, monkeypatch):
        monkeypatch.setattr(settings, "WEBHOOK_SECRET", "s3cret")
        make_vehicle()
        raw = json.dumps({"vin": VIN, "status": "COMPLETED"}).encode()

        resp = client.post(URL, content=raw, headers={
            "Content-Type": "application/json",
            "X-Recon-Timestamp": "1700000000",
            "X-Recon-Signature": compute_signature(raw, "1700000000", "s3cret"),
        })

        assert resp.status_code == 200
        assert resp.json()["status"] == "COMPLETED"
