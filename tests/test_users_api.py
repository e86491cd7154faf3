# tests/test_users_api.py
"""End-to-end tests for user administration."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from app.models.notification import Notification
from app.models.vehicle import Vehicle
from conftest import auth_headers

NEW_USER = {"name": "Sam", "email": "Sam@Example.com", "password": "password123", "role": "manager"}


class TestUserAdmin:
    def test_admin_only(self, client, manager):
        assert client.get("/api/users", headers=auth_headers(manager)).status_code == 401
        assert client.post("/api/users", json=NEW_USER, headers=auth_headers(manager)).status_code == 401

    def test_create_and_list(self, client, admin):
        resp = client.post("/api/users", json=NEW_USER, headers=auth_headers(admin))

        assert resp.status_code == 201
        assert resp.json()["email"] == "sam@example.com"
        assert resp.json()["role"] == "MANAGER"

        users = client.get("/api/users", headers=auth_headers(admin)).json()
        assert {u["email"] for u in users} == {"admin@example.com", "sam@example.com"}

        login = client.post("/api/auth/login", json={"email": "sam@example.com", "password": "password123"})
        assert login.status_code == 200

    def test_create_duplicate_email(self, client, admin):
        resp = client.post("/api/users", json={**NEW_USER, "email": "ADMIN@example.com"},
                           headers=auth_headers(admin))
        assert resp.status_code == 409

    def test_create_invalid_role(self, client, admin):
        resp = client.post("/api/users", json={**NEW_USER, "role": "OWNER"}, headers=auth_headers(admin))
        assert resp.status_code == 400

    def test_update(self, client, admin, tech):
        resp = client.put(f"/api/users/{tech.id}", json={"role": "MANAGER", "department": "Detail"},
                          headers=auth_headers(admin))
        assert resp.status_code == 200
        assert resp.json()["role"] == "MANAGER"
        assert resp.json()["department"] == "Detail"
        assert resp.json()["email"] == "tech@example.com"

    def test_update_email_taken(self, client, admin, tech):
        resp = client.put(f"/api/users/{tech.id}", json={"email": "admin@example.com"},
                          headers=auth_headers(admin))
        assert resp.status_code == 409

    def test_update_null_email_rejected(self, client, admin, tech):
        resp = client.put(f"/api/users/{tech.id}", json={"email": None}, headers=auth_headers(admin))
        assert resp.status_code == 400

    def test_update_unknown_user(self, client, admin):
        assert client.put("/api/users/999", json={"name": "x"}, headers=auth_headers(admin)).status_code == 404


class TestUserDelete:
    def test_delete_unassigns_vehicles_and_drops_inbox(self, client, db, admin, tech, make_vehicle):
        make_vehicle(assigned_to_id=tech.id)
        db.add(Notification(user_id=tech.id, type="SYSTEM_ALERT", message="hello"))
        db.commit()
        tech_id = tech.id

        resp = client.delete(f"/api/users/{tech_id}", headers=auth_headers(admin))

        assert resp.status_code == 200
        db.expire_all()
        assert db.query(Vehicle).first().assigned_to_id is None
        assert db.query(Notification).filter(Notification.user_id == tech_id).count() == 0
        assert client.put(f"/api/users/{tech_id}", json={"name": "x"},
                          headers=auth_headers(admin)).status_code == 404

    def test_cannot_delete_self(self, client, admin):
        resp = client.delete(f"/api/users/{admin.id}", headers=auth_headers(admin))
        assert resp.status_code == 400

    def test_delete_unknown_user(self, client, admin):
        assert client.delete("/api/users/999", headers=auth_headers(admin)).status_code == 404


class TestSetPassword:
    def test_admin_sets_any_password(self, client, admin, tech):
        resp = client.put(f"/api/users/{tech.id}/password", json={"password": "reset-by-admin"},
                          headers=auth_headers(admin))
        assert resp.status_code == 200
        login = client.post("/api/auth/login", json={"email": "tech@example.com", "password": "reset-by-admin"})
        assert login.status_code == 200

    def test_user_sets_own_password_only(self, client, tech, manager):
        own = client.put(f"/api/users/{tech.id}/password", json={"password": "my-new-pass"},
                         headers=auth_headers(tech))
        other = client.put(f"/api/users/{manager.id}/password", json={"password": "my-new-pass"},
                           headers=auth_headers(tech))
        assert own.status_code == 200
        assert other.status_code == 401

    def test_short_password_rejected(self, client, admin, tech):
        resp = client.put(f"/api/users/{tech.id}/password", json={"password": "short"},
                          headers=auth_headers(admin))
        assert resp.status_code == 400
