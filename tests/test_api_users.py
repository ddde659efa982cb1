"""Integration tests for the /users endpoints and the request gate."""

from typing import Optional

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

from expense_tracker.core.app_factory import create_application
from expense_tracker.domain.models import User
from expense_tracker.presentation.api.dependencies import (
    get_optional_user,
    require_full_account,
    require_guest,
    require_verified_email,
)

from conftest import TEST_PASSWORD


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def full_account(test_client):
    return test_client.post(
        "/auth/register", json={"name": "Sam Smith", "email": "sam@example.com", "password": TEST_PASSWORD}
    ).json()


@pytest.fixture
def guest_account(test_client):
    return test_client.post("/auth/guest").json()


@pytest.fixture
def gate_client(settings):
    app = create_application(settings)

    @app.get("/_gate/guest")
    def guest_only(user: User = Depends(require_guest)):
        return {"id": user.id}

    @app.get("/_gate/full")
    def full_only(user: User = Depends(require_full_account)):
        return {"id": user.id}

    @app.get("/_gate/verified")
    def verified_only(user: User = Depends(require_verified_email)):
        return {"id": user.id}

    @app.get("/_gate/optional")
    def optional(user: Optional[User] = Depends(get_optional_user)):
        return {"id": user.id if user else None}

    with TestClient(app) as client:
        yield client


class TestProfile:
    def test_get_profile(self, test_client, full_account):
        response = test_client.get("/users/profile", headers=_auth(full_account["tokens"]["accessToken"]))

        assert response.status_code == 200
        assert response.json()["user"]["name"] == "Sam Smith"
        assert "passwordHash" not in response.json()["user"]

    def test_update_profile(self, test_client, full_account):
        response = test_client.put(
            "/users/profile",
            headers=_auth(full_account["tokens"]["accessToken"]),
            json={
                "name": "Samuel Smith",
                "phone": "+14155550100",
                "dateOfBirth": "1988-02-29",
                "gender": "male",
                "address": {"city": "Austin", "zipCode": "73301"},
            },
        )

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["name"] == "Samuel Smith"
        assert user["phone"] == "+14155550100"
        assert user["dateOfBirth"] == "1988-02-29"
        assert user["gender"] == "male"
        assert user["address"]["city"] == "Austin"
        assert user["address"]["zipCode"] == "73301"

    def test_invalid_phone(self, test_client, full_account):
        response = test_client.put(
            "/users/profile", headers=_auth(full_account["tokens"]["accessToken"]), json={"phone": "abc"}
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "phone"

    def test_update_preferences(self, test_client, full_account):
        response = test_client.put(
            "/users/preferences",
            headers=_auth(full_account["tokens"]["accessToken"]),
            json={"currency": "EUR", "theme": "dark", "notifications": {"push": False}},
        )

        assert response.status_code == 200
        preferences = response.json()["user"]["preferences"]
        assert preferences["currency"] == "EUR"
        assert preferences["theme"] == "dark"
        assert preferences["notifications"] == {"email": True, "push": False, "sms": False}

    def test_invalid_preference_value(self, test_client, full_account):
        response = test_client.put(
            "/users/preferences", headers=_auth(full_account["tokens"]["accessToken"]), json={"theme": "neon"}
        )

        assert response.status_code == 400
        assert response.json()["kind"] == "ValidationError"


class TestPasswordAndAccount:
    def test_change_password(self, test_client, full_account):
        response = test_client.put(
            "/users/password",
            headers=_auth(full_account["tokens"]["accessToken"]),
            json={
                "currentPassword": TEST_PASSWORD,
                "newPassword": "changed-password",
                "confirmPassword": "changed-password",
            },
        )

        assert response.status_code == 200
        login = test_client.post("/auth/login", json={"email": "sam@example.com", "password": "changed-password"})
        assert login.status_code == 200

    def test_guest_cannot_change_password(self, test_client, guest_account):
        response = test_client.put(
            "/users/password",
            headers=_auth(guest_account["tokens"]["accessToken"]),
            json={"currentPassword": "x", "newPassword": "changed-password", "confirmPassword": "changed-password"},
        )

        assert response.status_code == 403
        assert response.json()["kind"] == "Forbidden"

    def test_delete_account_deactivates(self, test_client, full_account):
        token = full_account["tokens"]["accessToken"]

        response = test_client.request(
            "DELETE", "/users/account", headers=_auth(token), json={"password": TEST_PASSWORD}
        )

        assert response.status_code == 200
        assert test_client.get("/auth/me", headers=_auth(token)).status_code == 401
        login = test_client.post("/auth/login", json={"email": "sam@example.com", "password": TEST_PASSWORD})
        assert login.status_code == 403
        assert login.json()["kind"] == "AccountDeactivated"

    def test_delete_account_requires_password(self, test_client, full_account):
        response = test_client.request("DELETE", "/users/account", headers=_auth(full_account["tokens"]["accessToken"]))

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "password"


class TestUpgradeGuest:
    def test_upgrade_guest(self, test_client, guest_account, sent_emails):
        response = test_client.post(
            "/users/upgrade-guest",
            headers=_auth(guest_account["tokens"]["accessToken"]),
            json={"name": "Now Registered", "email": "registered@example.com", "password": "real-password"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["user"]["id"] == guest_account["user"]["id"]
        assert data["user"]["isGuest"] is False
        assert data["user"]["isEmailVerified"] is False
        assert sent_emails.verification.call_count == 1
        login = test_client.post("/auth/login", json={"email": "registered@example.com", "password": "real-password"})
        assert login.status_code == 200

    def test_full_account_cannot_upgrade(self, test_client, full_account):
        response = test_client.post(
            "/users/upgrade-guest",
            headers=_auth(full_account["tokens"]["accessToken"]),
            json={"name": "Sam Smith", "email": "other@example.com", "password": "real-password"},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Account is already upgraded"


class TestRequestGate:
    def _register(self, client):
        return client.post(
            "/auth/register", json={"name": "Gate User", "email": "gate@example.com", "password": TEST_PASSWORD}
        ).json()

    def test_guest_and_full_account_guards(self, gate_client):
        full = self._register(gate_client)["tokens"]["accessToken"]
        guest = gate_client.post("/auth/guest").json()["tokens"]["accessToken"]

        assert gate_client.get("/_gate/guest", headers=_auth(guest)).status_code == 200
        assert gate_client.get("/_gate/guest", headers=_auth(full)).status_code == 403
        assert gate_client.get("/_gate/full", headers=_auth(full)).status_code == 200
        assert gate_client.get("/_gate/full", headers=_auth(guest)).status_code == 403

    def test_verified_email_guard(self, gate_client):
        full = self._register(gate_client)["tokens"]["accessToken"]
        guest = gate_client.post("/auth/guest").json()["tokens"]["accessToken"]

        response = gate_client.get("/_gate/verified", headers=_auth(full))
        assert response.status_code == 403
        assert response.json()["kind"] == "Forbidden"
        assert gate_client.get("/_gate/verified", headers=_auth(guest)).status_code == 200

    def test_optional_user_never_fails(self, gate_client):
        full = self._register(gate_client)

        assert gate_client.get("/_gate/optional").json() == {"id": None}
        assert gate_client.get("/_gate/optional", headers=_auth("garbage")).json() == {"id": None}
        authed = gate_client.get("/_gate/optional", headers=_auth(full["tokens"]["accessToken"]))
        assert authed.json() == {"id": full["user"]["id"]}
