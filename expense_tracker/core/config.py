import os
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


class Settings:
    """Centralised application configuration sourced from environment variables."""

    def __init__(self) -> None:
        load_dotenv()
        self.app_env = os.getenv("APP_ENV", "development").lower()
        self.database_path = Path(os.getenv("DATABASE_PATH", "data/expense_tracker.db")).resolve()

        self.jwt_secret = os.getenv("JWT_SECRET", "change-me")
        self.jwt_refresh_secret = os.getenv("JWT_REFRESH_SECRET", "change-me-refresh")
        self.jwt_algorithm = os.getenv("JWT_ALGORITHM", "HS256")
        self.jwt_access_expire_minutes = self._get_int("JWT_ACCESS_EXPIRE_MINUTES", default=7 * 24 * 60)
        self.jwt_refresh_expire_days = self._get_int("JWT_REFRESH_EXPIRE_DAYS", default=30)

        self.bcrypt_rounds = self._get_int("BCRYPT_ROUNDS", default=12)
        self.password_min_length = self._get_int("PASSWORD_MIN_LENGTH", default=8)
        self.max_login_attempts = self._get_int("MAX_LOGIN_ATTEMPTS", default=5)
        self.lock_time_minutes = self._get_int("LOCK_TIME_MINUTES", default=120)
        self.email_verification_expire_hours = self._get_int("EMAIL_VERIFICATION_EXPIRE_HOURS", default=24)
        self.password_reset_expire_minutes = self._get_int("PASSWORD_RESET_EXPIRE_MINUTES", default=10)

        self.frontend_url = os.getenv("FRONTEND_URL", "http://localhost:3000")
        self.oauth_callback_base_url = os.getenv("OAUTH_CALLBACK_BASE_URL", "http://localhost:8000")
        self.http_timeout_seconds = self._get_int("HTTP_TIMEOUT_SECONDS", default=10)
        self.api_host = os.getenv("API_HOST", "127.0.0.1")
        self.api_port = self._get_int("API_PORT", default=8000)

        self.smtp_host = os.getenv("SMTP_HOST")
        self.smtp_port = self._get_int("SMTP_PORT", default=587)
        self.smtp_username = os.getenv("SMTP_USERNAME")
        self.smtp_password = os.getenv("SMTP_PASSWORD")
        self.smtp_from_email = os.getenv("SMTP_FROM_EMAIL")
        self.smtp_from_name = os.getenv("SMTP_FROM_NAME", "ExpenseTracker Pro")

        self.google_client_id = os.getenv("GOOGLE_CLIENT_ID")
        self.google_client_secret = os.getenv("GOOGLE_CLIENT_SECRET")
        self.facebook_app_id = os.getenv("FACEBOOK_APP_ID")
        self.facebook_app_secret = os.getenv("FACEBOOK_APP_SECRET")

        origins = os.getenv("CORS_ALLOW_ORIGINS")
        if origins:
            self.cors_allow_origins = [item.strip() for item in origins.split(",") if item.strip()]
        else:
            self.cors_allow_origins = [self.frontend_url]

        if self.is_production:
            self._require_secret("JWT_SECRET", self.jwt_secret)
            self._require_secret("JWT_REFRESH_SECRET", self.jwt_refresh_secret)

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def access_token_ttl(self) -> timedelta:
        return timedelta(minutes=self.jwt_access_expire_minutes)

    @property
    def refresh_token_ttl(self) -> timedelta:
        return timedelta(days=self.jwt_refresh_expire_days)

    @property
    def lock_time(self) -> timedelta:
        return timedelta(minutes=self.lock_time_minutes)

    @property
    def email_verification_ttl(self) -> timedelta:
        return timedelta(hours=self.email_verification_expire_hours)

    @property
    def password_reset_ttl(self) -> timedelta:
        return timedelta(minutes=self.password_reset_expire_minutes)

    @staticmethod
    def _require_secret(key: str, value: str) -> None:
        if not os.getenv(key) or value.startswith("change-me"):
            raise RuntimeError(f"Missing required environment variable: {key}")

    @staticmethod
    def _get_int(key: str, default: Optional[int] = None) -> int:
        value = os.getenv(key)
        if value is None:
            if default is None:
                raise RuntimeError(f"Missing required environment variable: {key}")
            return default
        try:
            return int(value)
        except ValueError as exc:
            raise RuntimeError(f"Environment variable {key} must be an integer") from exc
