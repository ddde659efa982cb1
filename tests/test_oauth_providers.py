"""Tests for OAuth provider clients and profile normalisation."""

from unittest.mock import MagicMock, patch
from urllib.parse import parse_qs, urlparse

import pytest
import requests

from expense_tracker.domain.errors import UpstreamFailure
from expense_tracker.domain.models import OAuthProvider
from expense_tracker.services.oauth_providers import (
    FacebookOAuthClient,
    GoogleOAuthClient,
    normalize_facebook_profile,
    normalize_google_profile,
)


def _response(payload, ok=True, status_code=200):
    response = MagicMock()
    response.ok = ok
    response.status_code = status_code
    response.json.return_value = payload
    return response


@pytest.fixture
def google_client():
    return GoogleOAuthClient("google-id", "google-secret", redirect_uri="http://api.test/auth/google/callback")


@pytest.fixture
def facebook_client():
    return FacebookOAuthClient("fb-id", "fb-secret", redirect_uri="http://api.test/auth/facebook/callback")


class TestNormalisation:
    def test_google_profile(self):
        identity = normalize_google_profile(
            {
                "iss": "https://accounts.google.com",
                "sub": "1234",
                "email": "person@example.com",
                "name": "Person",
                "picture": "https://example.com/p.png",
                "email_verified": True,
            }
        )

        assert identity.provider is OAuthProvider.GOOGLE
        assert identity.provider_id == "1234"
        assert identity.email == "person@example.com"
        assert identity.avatar_url == "https://example.com/p.png"
        assert identity.email_verified is True

    def test_google_rejects_foreign_issuer(self):
        with pytest.raises(UpstreamFailure):
            normalize_google_profile({"iss": "https://evil.example.com", "sub": "1"})

    def test_facebook_profile_builds_name_and_avatar(self):
        identity = normalize_facebook_profile(
            {
                "id": 987,
                "first_name": "Ada",
                "last_name": "Lovelace",
                "email": "ada@example.com",
                "picture": {"data": {"url": "https://example.com/ada.jpg"}},
            }
        )

        assert identity.provider_id == "987"
        assert identity.display_name == "Ada Lovelace"
        assert identity.avatar_url == "https://example.com/ada.jpg"
        assert identity.email_verified is True

    def test_facebook_profile_without_email(self):
        identity = normalize_facebook_profile({"id": "5", "name": "No Mail"})

        assert identity.email is None
        assert identity.email_verified is False
        assert identity.avatar_url is None


class TestClients:
    def test_authorization_url_carries_state(self, google_client):
        url = google_client.authorization_url("state-value")
        query = parse_qs(urlparse(url).query)

        assert url.startswith(GoogleOAuthClient.authorize_endpoint)
        assert query["state"] == ["state-value"]
        assert query["client_id"] == ["google-id"]
        assert query["redirect_uri"] == ["http://api.test/auth/google/callback"]
        assert query["response_type"] == ["code"]

    def test_enabled_requires_credentials(self):
        assert not GoogleOAuthClient(None, None, redirect_uri="http://api.test/cb").enabled
        assert FacebookOAuthClient("id", "secret", redirect_uri="http://api.test/cb").enabled

    def test_facebook_fetch_identity(self, facebook_client):
        responses = [
            _response({"access_token": "fb-access"}),
            _response({"id": "42", "name": "Graph User", "email": "graph@example.com"}),
        ]
        with patch("expense_tracker.services.oauth_providers.requests.request", side_effect=responses) as request:
            identity = facebook_client.fetch_identity("auth-code")

        assert identity.provider_id == "42"
        assert identity.email == "graph@example.com"
        token_call, profile_call = request.call_args_list
        assert token_call.kwargs["data"]["code"] == "auth-code"
        assert profile_call.kwargs["params"]["access_token"] == "fb-access"
        assert profile_call.kwargs["timeout"] == facebook_client.timeout_seconds

    def test_google_fetch_identity_verifies_id_token(self, google_client):
        claims = {"iss": "accounts.google.com", "sub": "g-1", "email": "g@example.com", "name": "G"}
        with patch(
            "expense_tracker.services.oauth_providers.requests.request",
            return_value=_response({"id_token": "raw-id-token"}),
        ), patch(
            "expense_tracker.services.oauth_providers.id_token.verify_oauth2_token", return_value=claims
        ) as verify:
            identity = google_client.fetch_identity("auth-code")

        assert identity.provider_id == "g-1"
        assert verify.call_args.args[0] == "raw-id-token"
        assert verify.call_args.args[2] == "google-id"

    def test_google_invalid_id_token(self, google_client):
        with patch(
            "expense_tracker.services.oauth_providers.requests.request",
            return_value=_response({"id_token": "raw-id-token"}),
        ), patch(
            "expense_tracker.services.oauth_providers.id_token.verify_oauth2_token",
            side_effect=ValueError("Token used too late"),
        ):
            with pytest.raises(UpstreamFailure):
                google_client.fetch_identity("auth-code")

    def test_timeout_becomes_upstream_failure(self, google_client):
        with patch(
            "expense_tracker.services.oauth_providers.requests.request",
            side_effect=requests.Timeout("slow"),
        ):
            with pytest.raises(UpstreamFailure) as excinfo:
                google_client.fetch_identity("auth-code")
        assert excinfo.value.retryable is True

    def test_error_status_becomes_upstream_failure(self, facebook_client):
        with patch(
            "expense_tracker.services.oauth_providers.requests.request",
            return_value=_response({"error": "bad code"}, ok=False, status_code=400),
        ):
            with pytest.raises(UpstreamFailure):
                facebook_client.fetch_identity("bad-code")
