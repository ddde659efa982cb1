"""Integration tests for the /auth endpoints."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch
from urllib.parse import parse_qs, urlparse

import jwt

from expense_tracker.domain.errors import EmailDeliveryError
from expense_tracker.domain.models import ExternalIdentity, OAuthProvider

from conftest import TEST_ACCESS_SECRET, TEST_PASSWORD

PRIVATE_USER_FIELDS = {
    "password",
    "passwordHash",
    "googleId",
    "facebookId",
    "emailVerificationTokenHash",
    "emailVerificationExpiresAt",
    "passwordResetTokenHash",
    "passwordResetExpiresAt",
    "failedLoginCount",
    "lockedUntil",
}


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _register(client, email="Jane.Doe@Example.com", password=TEST_PASSWORD):
    return client.post("/auth/register", json={"name": "Jane Doe", "email": email, "password": password})


class TestRegisterAndLogin:
    def test_register_returns_sanitized_user_and_tokens(self, test_client):
        response = _register(test_client)

        assert response.status_code == 201
        data = response.json()
        assert data["user"]["email"] == "jane.doe@example.com"
        assert data["user"]["isEmailVerified"] is False
        assert data["user"]["preferences"]["currency"] == "INR"
        assert data["tokens"]["accessToken"]
        assert data["tokens"]["refreshToken"]
        assert not PRIVATE_USER_FIELDS & set(data["user"])

    def test_register_validation_error_shape(self, test_client):
        response = test_client.post("/auth/register", json={"email": "jane@example.com", "password": "short"})

        assert response.status_code == 400
        body = response.json()
        assert body["status"] == "error"
        assert body["kind"] == "ValidationError"
        assert any(error["field"] == "name" for error in body["errors"])

    def test_short_password_is_rejected(self, test_client):
        response = _register(test_client, password="short")

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "password"

    def test_duplicate_email(self, test_client):
        _register(test_client)
        response = _register(test_client, email="JANE.DOE@example.com")

        assert response.status_code == 400
        assert response.json()["kind"] == "DuplicateEmail"

    def test_login(self, test_client):
        _register(test_client)

        response = test_client.post("/auth/login", json={"email": "jane.doe@example.com", "password": TEST_PASSWORD})

        assert response.status_code == 200
        assert response.json()["user"]["email"] == "jane.doe@example.com"
        assert response.json()["user"]["lastLoginAt"] is not None

    def test_invalid_credentials_do_not_reveal_accounts(self, test_client):
        _register(test_client)

        unknown = test_client.post("/auth/login", json={"email": "ghost@example.com", "password": TEST_PASSWORD})
        wrong = test_client.post("/auth/login", json={"email": "jane.doe@example.com", "password": "wrong-pass"})

        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json() == wrong.json()
        assert unknown.json()["kind"] == "InvalidCredentials"

    def test_account_locks_after_repeated_failures(self, test_client):
        _register(test_client)
        for _ in range(5):
            test_client.post("/auth/login", json={"email": "jane.doe@example.com", "password": "wrong-pass"})

        response = test_client.post("/auth/login", json={"email": "jane.doe@example.com", "password": TEST_PASSWORD})

        assert response.status_code == 403
        assert response.json()["kind"] == "AccountLocked"
        assert "try again later" in response.json()["message"].lower()


class TestGuestAndSession:
    def test_guest_access_creates_distinct_usable_accounts(self, test_client):
        first = test_client.post("/auth/guest", json={"guestData": {"currency": "USD"}})
        second = test_client.post("/auth/guest")

        assert first.status_code == second.status_code == 201
        assert first.json()["user"]["id"] != second.json()["user"]["id"]
        assert first.json()["user"]["preferences"]["currency"] == "USD"
        for response in (first, second):
            me = test_client.get("/auth/me", headers=_auth(response.json()["tokens"]["accessToken"]))
            assert me.status_code == 200
            assert me.json()["user"]["isGuest"] is True

    def test_me_requires_token(self, test_client):
        response = test_client.get("/auth/me")

        assert response.status_code == 401
        assert response.json()["kind"] == "Unauthorized"

    def test_me_rejects_garbage_token(self, test_client):
        response = test_client.get("/auth/me", headers=_auth("garbage"))

        assert response.status_code == 401
        assert response.json()["kind"] == "InvalidToken"

    def test_me_rejects_expired_token_as_expired(self, test_client):
        user = _register(test_client).json()["user"]
        issued = datetime.now(tz=timezone.utc) - timedelta(hours=2)
        expired = jwt.encode(
            {
                "userId": user["id"],
                "email": user["email"],
                "isGuest": False,
                "type": "access",
                "iat": issued,
                "exp": issued + timedelta(hours=1),
            },
            TEST_ACCESS_SECRET,
            algorithm="HS256",
        )

        response = test_client.get("/auth/me", headers=_auth(expired))

        assert response.status_code == 401
        assert response.json()["kind"] == "TokenExpired"

    def test_refresh_rotates_tokens(self, test_client):
        tokens = _register(test_client).json()["tokens"]

        response = test_client.post("/auth/refresh", json={"refreshToken": tokens["refreshToken"]})

        assert response.status_code == 200
        new_tokens = response.json()["tokens"]
        assert new_tokens["refreshToken"] != tokens["refreshToken"]
        assert test_client.get("/auth/me", headers=_auth(new_tokens["accessToken"])).status_code == 200

    def test_refresh_rejects_access_token(self, test_client):
        tokens = _register(test_client).json()["tokens"]

        response = test_client.post("/auth/refresh", json={"refreshToken": tokens["accessToken"]})

        assert response.status_code == 401
        assert response.json()["kind"] == "InvalidToken"

    def test_logout(self, test_client):
        tokens = _register(test_client).json()["tokens"]

        response = test_client.post("/auth/logout", headers=_auth(tokens["accessToken"]))

        assert response.status_code == 200
        assert response.json()["message"]


class TestResetAndVerification:
    def test_forgot_password_response_is_identical(self, test_client, sent_emails):
        _register(test_client)

        known = test_client.post("/auth/forgot-password", json={"email": "jane.doe@example.com"})
        unknown = test_client.post("/auth/forgot-password", json={"email": "ghost@example.com"})

        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()
        assert sent_emails.reset.call_count == 1

    def test_reset_password_flow(self, test_client, sent_emails):
        _register(test_client)
        test_client.post("/auth/forgot-password", json={"email": "jane.doe@example.com"})
        token = sent_emails.reset.call_args.args[2]

        response = test_client.post("/auth/reset-password", json={"token": token, "newPassword": "fresh-password"})
        assert response.status_code == 200
        assert response.json()["tokens"]["accessToken"]

        reused = test_client.post("/auth/reset-password", json={"token": token, "newPassword": "other-password"})
        assert reused.status_code == 400
        assert reused.json()["kind"] == "InvalidOrExpiredToken"

        login = test_client.post("/auth/login", json={"email": "jane.doe@example.com", "password": "fresh-password"})
        assert login.status_code == 200

    def test_reset_email_failure_is_a_bad_gateway(self, test_client, sent_emails):
        _register(test_client)
        sent_emails.reset.side_effect = EmailDeliveryError()

        response = test_client.post("/auth/forgot-password", json={"email": "jane.doe@example.com"})

        assert response.status_code == 502
        assert response.json()["kind"] == "UpstreamFailure"
        assert response.json()["retryable"] is True

    def test_verify_email(self, test_client, sent_emails):
        access_token = _register(test_client).json()["tokens"]["accessToken"]
        token = sent_emails.verification.call_args.args[2]

        response = test_client.get("/auth/verify-email", params={"token": token})
        assert response.status_code == 200

        me = test_client.get("/auth/me", headers=_auth(access_token))
        assert me.json()["user"]["isEmailVerified"] is True

        again = test_client.get("/auth/verify-email", params={"token": token})
        assert again.status_code == 400
        assert again.json()["kind"] == "InvalidOrExpiredToken"

    def test_verify_email_without_token(self, test_client):
        response = test_client.get("/auth/verify-email")

        assert response.status_code == 400
        assert response.json()["kind"] == "InvalidOrExpiredToken"

    def test_resend_verification(self, test_client, sent_emails):
        _register(test_client)
        sent_emails.verification.reset_mock()

        known = test_client.post("/auth/resend-verification", json={"email": "jane.doe@example.com"})
        unknown = test_client.post("/auth/resend-verification", json={"email": "ghost@example.com"})

        assert known.json() == unknown.json()
        assert sent_emails.verification.call_count == 1


class TestOAuth:
    def test_google_redirects_to_provider_with_state(self, test_client):
        response = test_client.get("/auth/google", follow_redirects=False)

        assert response.status_code == 307
        location = urlparse(response.headers["location"])
        assert location.netloc == "accounts.google.com"
        assert parse_qs(location.query)["state"][0]

    def test_unconfigured_provider(self, test_client):
        response = test_client.get("/auth/facebook", follow_redirects=False)

        assert response.status_code == 404
        assert response.json()["kind"] == "NotFound"

    def test_callback_redirects_with_tokens(self, test_client):
        start = test_client.get("/auth/google", follow_redirects=False)
        state = parse_qs(urlparse(start.headers["location"]).query)["state"][0]
        identity = ExternalIdentity(
            provider=OAuthProvider.GOOGLE,
            provider_id="google-77",
            email="oauth@example.com",
            display_name="OAuth Person",
            avatar_url=None,
            email_verified=True,
        )

        with patch(
            "expense_tracker.services.oauth_providers.GoogleOAuthClient.fetch_identity", return_value=identity
        ):
            response = test_client.get(
                "/auth/google/callback", params={"code": "auth-code", "state": state}, follow_redirects=False
            )

        assert response.status_code == 307
        location = urlparse(response.headers["location"])
        assert location.path == "/auth/callback"
        access_token = parse_qs(location.query)["accessToken"][0]
        me = test_client.get("/auth/me", headers=_auth(access_token))
        assert me.json()["user"]["email"] == "oauth@example.com"
        assert me.json()["user"]["isEmailVerified"] is True

    def test_callback_with_forged_state_fails(self, test_client):
        response = test_client.get(
            "/auth/google/callback", params={"code": "auth-code", "state": "forged"}, follow_redirects=False
        )

        assert response.status_code == 307
        assert response.headers["location"] == "http://frontend.test/auth/error?message=oauth_failed"


def test_health(test_client):
    response = test_client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
