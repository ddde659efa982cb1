"""OAuth provider clients (Google, Facebook) and profile normalisation.

Each client performs the authorization-code exchange for its provider and
returns an :class:`ExternalIdentity`, so the authentication service never
sees provider-specific payload shapes.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Protocol
from urllib.parse import urlencode

import requests
from google.auth import exceptions as google_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from ..domain.errors import UpstreamFailure
from ..domain.models import ExternalIdentity, OAuthProvider

logger = logging.getLogger(__name__)

GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


def normalize_google_profile(idinfo: Mapping[str, Any]) -> ExternalIdentity:
    """Map verified Google ID token claims to an ExternalIdentity."""
    if idinfo.get("iss") not in GOOGLE_ISSUERS:
        raise UpstreamFailure("Google sign-in returned an unexpected issuer")
    return ExternalIdentity(
        provider=OAuthProvider.GOOGLE,
        provider_id=str(idinfo["sub"]),
        email=(idinfo.get("email") or None),
        display_name=idinfo.get("name"),
        avatar_url=idinfo.get("picture"),
        # Google only hands out addresses it has verified unless told otherwise.
        email_verified=bool(idinfo.get("email_verified", True)),
    )


def normalize_facebook_profile(profile: Mapping[str, Any]) -> ExternalIdentity:
    """Map a Graph API ``/me`` payload to an ExternalIdentity."""
    display_name = profile.get("name")
    if not display_name:
        display_name = " ".join(
            part for part in (profile.get("first_name"), profile.get("last_name")) if part
        ) or None
    picture = (profile.get("picture") or {}).get("data") or {}
    email = profile.get("email") or None
    return ExternalIdentity(
        provider=OAuthProvider.FACEBOOK,
        provider_id=str(profile["id"]),
        email=email,
        display_name=display_name,
        avatar_url=picture.get("url"),
        # Facebook only returns an email once the user has confirmed it.
        email_verified=email is not None,
    )


class OAuthClient(Protocol):
    provider: OAuthProvider

    @property
    def enabled(self) -> bool:
        ...

    def authorization_url(self, state: str) -> str:
        ...

    def fetch_identity(self, code: str) -> ExternalIdentity:
        ...


class _BoundedGoogleRequest(google_requests.Request):
    """google-auth transport that applies our timeout to certificate fetches."""

    def __init__(self, timeout_seconds: float) -> None:
        super().__init__()
        self._timeout_seconds = timeout_seconds

    def __call__(self, url, method="GET", body=None, headers=None, timeout=None, **kwargs):
        return super().__call__(
            url,
            method=method,
            body=body,
            headers=headers,
            timeout=timeout or self._timeout_seconds,
            **kwargs,
        )


class _BaseOAuthClient:
    provider: OAuthProvider
    authorize_endpoint: str
    token_endpoint: str
    scope: str

    def __init__(
        self,
        client_id: Optional[str],
        client_secret: Optional[str],
        redirect_uri: str,
        timeout_seconds: float = 10.0,
    ) -> None:
        self.client_id = client_id or ""
        self.client_secret = client_secret or ""
        self.redirect_uri = redirect_uri
        self.timeout_seconds = timeout_seconds

    @property
    def enabled(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": self.scope,
            "state": state,
        }
        return f"{self.authorize_endpoint}?{urlencode(params)}"

    def _request_json(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = requests.request(method, url, timeout=self.timeout_seconds, **kwargs)
        except requests.Timeout as exc:
            logger.warning("%s OAuth request timed out: %s", self.provider.value, url)
            raise UpstreamFailure(f"{self.provider.value.title()} did not respond in time") from exc
        except requests.RequestException as exc:
            logger.warning("%s OAuth request failed: %s", self.provider.value, exc)
            raise UpstreamFailure(f"Unable to reach {self.provider.value.title()}") from exc
        if not response.ok:
            logger.warning(
                "%s OAuth request to %s returned HTTP %s", self.provider.value, url, response.status_code
            )
            raise UpstreamFailure(f"{self.provider.value.title()} sign-in failed")
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamFailure(f"{self.provider.value.title()} returned an invalid response") from exc

    def _exchange_code(self, code: str) -> Dict[str, Any]:
        return self._request_json(
            "POST",
            self.token_endpoint,
            data={
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": self.redirect_uri,
                "grant_type": "authorization_code",
            },
        )


class GoogleOAuthClient(_BaseOAuthClient):
    provider = OAuthProvider.GOOGLE
    authorize_endpoint = "https://accounts.google.com/o/oauth2/v2/auth"
    token_endpoint = "https://oauth2.googleapis.com/token"
    scope = "openid email profile"

    def fetch_identity(self, code: str) -> ExternalIdentity:
        token_response = self._exchange_code(code)
        raw_id_token = token_response.get("id_token")
        if not raw_id_token:
            raise UpstreamFailure("Google did not return an ID token")
        try:
            idinfo = id_token.verify_oauth2_token(
                raw_id_token,
                _BoundedGoogleRequest(self.timeout_seconds),
                self.client_id,
            )
        except google_exceptions.TransportError as exc:
            raise UpstreamFailure("Unable to reach Google") from exc
        except ValueError as exc:
            logger.warning("Rejected Google ID token: %s", exc)
            raise UpstreamFailure("Google sign-in failed") from exc
        return normalize_google_profile(idinfo)


class FacebookOAuthClient(_BaseOAuthClient):
    provider = OAuthProvider.FACEBOOK
    authorize_endpoint = "https://www.facebook.com/v18.0/dialog/oauth"
    token_endpoint = "https://graph.facebook.com/v18.0/oauth/access_token"
    profile_endpoint = "https://graph.facebook.com/v18.0/me"
    scope = "email"
    profile_fields = "id,name,first_name,last_name,email,picture.type(large)"

    def fetch_identity(self, code: str) -> ExternalIdentity:
        token_response = self._exchange_code(code)
        access_token = token_response.get("access_token")
        if not access_token:
            raise UpstreamFailure("Facebook did not return an access token")
        profile = self._request_json(
            "GET",
            self.profile_endpoint,
            params={"fields": self.profile_fields, "access_token": access_token},
        )
        if "id" not in profile:
            raise UpstreamFailure("Facebook returned an incomplete profile")
        return normalize_facebook_profile(profile)
