"""Tests for shared categories and default seeding."""

from datetime import date

import pytest

from expense_tracker.domain.errors import NotFound, ValidationError
from expense_tracker.domain.models import CategoryType, TransactionType


@pytest.fixture
def custom(category_service):
    return category_service.create(name="Pets", color="#abc", type="expense", description="Vet and food")


class TestDefaults:
    def test_initialize_seeds_once(self, category_service, persistence):
        first = category_service.initialize_defaults()
        second = category_service.initialize_defaults()

        assert len(first) == 14
        assert {category.id for category in first} == {category.id for category in second}
        assert persistence.count_categories() == 14
        assert all(category.is_default for category in first)

    def test_initialize_skips_non_empty_store(self, category_service, custom):
        assert category_service.initialize_defaults() == []


class TestListing:
    def test_type_filter_includes_both(self, category_service):
        category_service.initialize_defaults()
        shared = category_service.create(name="Refunds", color="#123456", type="both")

        income = category_service.list("income")

        assert {category.type for category in income} == {CategoryType.INCOME, CategoryType.BOTH}
        assert shared.id in {category.id for category in income}
        assert income[0].is_default is True

    def test_inactive_categories_are_hidden(self, category_service, custom):
        category_service.deactivate(custom.id)

        assert custom.id not in {category.id for category in category_service.list()}
        assert category_service.activate(custom.id).is_active is True

    def test_unknown_type(self, category_service):
        with pytest.raises(ValidationError):
            category_service.list("transfer")


class TestChanges:
    def test_create(self, custom):
        assert custom.icon == "fas fa-tag"
        assert custom.type is CategoryType.EXPENSE
        assert custom.is_default is False

    @pytest.mark.parametrize(
        "values, field",
        [
            ({"name": "", "color": "#fff", "type": "expense"}, "name"),
            ({"name": "x" * 51, "color": "#fff", "type": "expense"}, "name"),
            ({"name": "Pets", "color": "red", "type": "expense"}, "color"),
            ({"name": "Pets", "color": "#fff", "type": "transfer"}, "type"),
        ],
    )
    def test_create_validation(self, category_service, values, field):
        with pytest.raises(ValidationError) as excinfo:
            category_service.create(**values)
        assert excinfo.value.errors[0]["field"] == field

    def test_names_are_unique_ignoring_case(self, category_service, custom):
        with pytest.raises(ValidationError) as excinfo:
            category_service.create(name="PETS", color="#fff", type="expense")
        assert excinfo.value.errors[0]["field"] == "name"

        other = category_service.create(name="Garden", color="#fff", type="expense")
        with pytest.raises(ValidationError):
            category_service.update(other.id, name="pets")

    def test_update(self, category_service, custom):
        updated = category_service.update(custom.id, name="Pet Care", color="#000000", description=None)

        assert updated.name == "Pet Care"
        assert updated.color == "#000000"
        assert updated.description is None
        assert updated.type is CategoryType.EXPENSE

    def test_defaults_cannot_be_deleted_or_deactivated(self, category_service):
        default = category_service.initialize_defaults()[0]

        with pytest.raises(ValidationError):
            category_service.delete(default.id)
        with pytest.raises(ValidationError):
            category_service.deactivate(default.id)

    def test_categories_in_use_cannot_be_deleted(self, category_service, transaction_service, registered, custom):
        transaction_service.create(
            registered.user, type="expense", amount=40, category="pets", description="Vet", date=date(2024, 3, 1)
        )

        with pytest.raises(ValidationError) as excinfo:
            category_service.delete(custom.id)
        assert "1 transactions" in excinfo.value.message

    def test_delete(self, category_service, custom):
        category_service.delete(custom.id)

        with pytest.raises(NotFound):
            category_service.get(custom.id)


def test_stats_cover_only_the_callers_transactions(
    category_service, transaction_service, auth_service, registered, custom
):
    other = auth_service.register("Other User", "other@example.com", "other-password").user
    for user, amount in ((registered.user, 40), (registered.user, 60), (other, 500)):
        transaction_service.create(user, type="expense", amount=amount, category="Pets", description="Vet")

    category, totals = category_service.stats(registered.user, custom.id)

    assert category.id == custom.id
    assert totals[TransactionType.EXPENSE].total == 100
    assert totals[TransactionType.EXPENSE].count == 2
    assert totals[TransactionType.INCOME].count == 0
