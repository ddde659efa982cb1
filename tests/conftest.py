"""Pytest fixtures and configuration for ExpenseTracker API tests."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from expense_tracker.application.services.account_service import AccountService
from expense_tracker.application.services.analytics_service import AnalyticsService
from expense_tracker.application.services.auth_service import AuthPolicy, AuthService
from expense_tracker.application.services.category_service import CategoryService
from expense_tracker.application.services.transaction_service import TransactionService
from expense_tracker.core.app_factory import create_application
from expense_tracker.core.config import Settings
from expense_tracker.infrastructure.persistence.sqlite import SQLitePersistence
from expense_tracker.services.email_service import EmailService
from expense_tracker.services.passwords import PasswordHasher
from expense_tracker.services.token_issuer import TokenIssuer

TEST_ACCESS_SECRET = "test-access-secret-0123456789abcdef"
TEST_REFRESH_SECRET = "test-refresh-secret-0123456789abcdef"
TEST_PASSWORD = "Sup3r-Secret!"


class FakeClock:
    """Controllable replacement for the service clock."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture
def clock():
    return FakeClock(datetime.now(tz=timezone.utc))


@pytest.fixture
def password_hasher():
    # Minimum bcrypt cost keeps the suite fast.
    return PasswordHasher(rounds=4)


@pytest.fixture
def persistence(tmp_path, password_hasher):
    store = SQLitePersistence(tmp_path / "users.db", password_hasher=password_hasher)
    try:
        yield store
    finally:
        store.close()


@pytest.fixture
def token_issuer():
    return TokenIssuer(TEST_ACCESS_SECRET, TEST_REFRESH_SECRET)


@pytest.fixture
def email_service():
    return MagicMock(spec=EmailService)


@pytest.fixture
def auth_service(persistence, token_issuer, email_service, password_hasher, clock):
    return AuthService(
        persistence,
        token_issuer,
        email_service,
        password_hasher=password_hasher,
        policy=AuthPolicy(),
        clock=clock,
    )


@pytest.fixture
def account_service(persistence, auth_service, password_hasher):
    return AccountService(persistence, auth_service, password_hasher=password_hasher)


@pytest.fixture
def transaction_service(persistence, clock):
    return TransactionService(persistence, persistence, clock=clock)


@pytest.fixture
def category_service(persistence):
    return CategoryService(persistence, persistence)


@pytest.fixture
def analytics_service(persistence, clock):
    return AnalyticsService(persistence, clock=clock)


@pytest.fixture
def registered(auth_service):
    """A freshly registered full account."""
    return auth_service.register("Test User", "Test.User@Example.com", TEST_PASSWORD)


@pytest.fixture
def settings(tmp_path, monkeypatch):
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "api.db"))
    monkeypatch.setenv("JWT_SECRET", TEST_ACCESS_SECRET)
    monkeypatch.setenv("JWT_REFRESH_SECRET", TEST_REFRESH_SECRET)
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    monkeypatch.setenv("FRONTEND_URL", "http://frontend.test")
    monkeypatch.setenv("GOOGLE_CLIENT_ID", "google-client-id")
    monkeypatch.setenv("GOOGLE_CLIENT_SECRET", "google-client-secret")
    for key in ("SMTP_HOST", "SMTP_USERNAME", "SMTP_FROM_EMAIL", "FACEBOOK_APP_ID", "FACEBOOK_APP_SECRET"):
        monkeypatch.delenv(key, raising=False)
    return Settings()


@pytest.fixture
def test_client(settings):
    app = create_application(settings)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def sent_emails(test_client):
    """Capture account emails sent by the running application."""
    email_service = test_client.app.state.container.email_service
    with patch.object(email_service, "send_verification_email") as verification, patch.object(
        email_service, "send_password_reset_email"
    ) as reset:
        yield SimpleNamespace(verification=verification, reset=reset)
