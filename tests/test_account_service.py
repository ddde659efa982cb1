"""Tests for profile, preference and account lifecycle changes."""

from datetime import date

import pytest

from expense_tracker.domain.errors import (
    AccountDeactivated,
    DuplicateEmail,
    InvalidCredentials,
    ValidationError,
)
from expense_tracker.domain.models import Currency, Gender, Language

from conftest import TEST_PASSWORD


class TestProfile:
    def test_update_profile_fields(self, account_service, registered):
        updated = account_service.update_profile(
            registered.user,
            name="  Renamed User ",
            phone="+919876543210",
            date_of_birth=date(1990, 5, 17),
            gender=Gender.FEMALE,
            address={"city": "Mumbai", "zip_code": "400001"},
        )

        assert updated.name == "Renamed User"
        assert updated.phone == "+919876543210"
        assert updated.date_of_birth == date(1990, 5, 17)
        assert updated.gender is Gender.FEMALE
        assert updated.address.city == "Mumbai"
        assert updated.address.zip_code == "400001"

    def test_address_changes_are_merged(self, account_service, registered):
        user = account_service.update_profile(registered.user, address={"city": "Mumbai", "country": "IN"})
        user = account_service.update_profile(user, address={"city": "Delhi"})

        assert user.address.city == "Delhi"
        assert user.address.country == "IN"

    @pytest.mark.parametrize(
        "changes",
        [{"name": "X"}, {"phone": "0123"}, {"gender": "robot"}, {"date_of_birth": "yesterday"}, {"email": "a@b.c"}],
    )
    def test_invalid_profile_changes(self, account_service, registered, changes):
        with pytest.raises(ValidationError):
            account_service.update_profile(registered.user, **changes)


class TestPreferences:
    def test_update_preferences_merges_notifications(self, account_service, registered):
        updated = account_service.update_preferences(
            registered.user, currency="USD", language="fr", notifications={"sms": True}
        )

        assert updated.preferences.currency is Currency.USD
        assert updated.preferences.language is Language.FR
        assert updated.preferences.notifications.sms is True
        assert updated.preferences.notifications.email is True

    def test_invalid_currency(self, account_service, registered):
        with pytest.raises(ValidationError):
            account_service.update_preferences(registered.user, currency="BTC")


class TestChangePassword:
    def test_change_password(self, account_service, auth_service, registered):
        account_service.change_password(registered.user, TEST_PASSWORD, "new-password-1", "new-password-1")

        auth_service.login("test.user@example.com", "new-password-1")
        with pytest.raises(InvalidCredentials):
            auth_service.login("test.user@example.com", TEST_PASSWORD)

    def test_wrong_current_password(self, account_service, registered):
        with pytest.raises(ValidationError) as excinfo:
            account_service.change_password(registered.user, "not-it", "new-password-1", "new-password-1")
        assert excinfo.value.errors[0]["field"] == "currentPassword"

    def test_confirmation_mismatch(self, account_service, registered):
        with pytest.raises(ValidationError) as excinfo:
            account_service.change_password(registered.user, TEST_PASSWORD, "new-password-1", "new-password-2")
        assert excinfo.value.errors[0]["field"] == "confirmPassword"


class TestDeactivate:
    def test_deactivation_blocks_login(self, account_service, auth_service, persistence, registered):
        account_service.deactivate(registered.user, TEST_PASSWORD)

        assert persistence.get_by_id(registered.user.id).is_active is False
        with pytest.raises(AccountDeactivated):
            auth_service.login("test.user@example.com", TEST_PASSWORD)

    def test_password_is_required_for_password_accounts(self, account_service, registered):
        with pytest.raises(ValidationError):
            account_service.deactivate(registered.user)
        with pytest.raises(ValidationError):
            account_service.deactivate(registered.user, "wrong-password")

    def test_guest_can_deactivate_without_password(self, account_service, auth_service, persistence):
        guest = auth_service.guest_access().user

        account_service.deactivate(guest)

        assert persistence.get_by_id(guest.id).is_active is False


class TestUpgradeGuest:
    def test_upgrade_turns_guest_into_unverified_account(
        self, account_service, auth_service, token_issuer, email_service
    ):
        guest = auth_service.guest_access({"currency": "USD"}).user

        result = account_service.upgrade_guest(guest, "Real Name", "Real@Example.com", "real-password")

        assert result.user.id == guest.id
        assert result.user.is_guest is False
        assert result.user.email == "real@example.com"
        assert result.user.is_email_verified is False
        assert result.user.preferences.currency is Currency.USD
        assert token_issuer.verify(result.tokens.access_token).is_guest is False
        email_service.send_verification_email.assert_called_once()
        auth_service.login("real@example.com", "real-password")

    def test_full_accounts_cannot_upgrade(self, account_service, registered):
        with pytest.raises(ValidationError, match="already upgraded"):
            account_service.upgrade_guest(registered.user, "Name", "new@example.com", "real-password")

    def test_upgrade_to_taken_email(self, account_service, auth_service, registered):
        guest = auth_service.guest_access().user

        with pytest.raises(DuplicateEmail):
            account_service.upgrade_guest(guest, "Name", "test.user@example.com", "real-password")
