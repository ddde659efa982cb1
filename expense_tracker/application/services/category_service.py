from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from ...domain.errors import DuplicateKey, NotFound, ValidationError
from ...domain.models import Category, CategoryType, TypeTotals, TransactionType, User, default_categories
from ...domain.ports.persistence import CategoryRepository, TransactionRepository
from ...domain.validation import validate_hex_color, validate_text

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 200
DEFAULT_ICON = "fas fa-tag"


class CategoryService:
    """Shared categories: listing, custom category management and default seeding."""

    def __init__(self, categories: CategoryRepository, transactions: TransactionRepository) -> None:
        self._categories = categories
        self._transactions = transactions

    def initialize_defaults(self) -> List[Category]:
        """Seed the default categories into an empty store and return them."""
        if self._categories.count_categories() == 0:
            for category in default_categories():
                category.id = str(uuid.uuid4())
                self._categories.insert_category(category)
            logger.info("Default categories initialized")
        return self._categories.list_categories(active_only=False, defaults_only=True)

    def list(self, category_type: Optional[str] = None) -> List[Category]:
        return self._categories.list_categories(_category_type(category_type) if category_type else None)

    def get(self, category_id: str) -> Category:
        category = self._categories.get_category(category_id)
        if category is None:
            raise NotFound("Category not found")
        return category

    def create(
        self,
        name: str,
        color: str,
        type: str,
        icon: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Category:
        candidate = Category(
            id=str(uuid.uuid4()),
            name=validate_text(name, "name", "Category name", NAME_MAX_LENGTH),
            color=validate_hex_color(color),
            type=_category_type(type),
            icon=(icon or "").strip() or DEFAULT_ICON,
            description=validate_text(description, "description", "Description", DESCRIPTION_MAX_LENGTH, False),
        )
        if self._categories.find_category_by_name(candidate.name):
            raise _duplicate_name()
        try:
            category = self._categories.insert_category(candidate)
        except DuplicateKey as exc:
            raise _duplicate_name() from exc
        logger.info("Created category %s (%s)", category.id, category.name)
        return category

    def update(self, category_id: str, **changes: Any) -> Category:
        category = self.get(category_id)
        fields: Dict[str, Any] = {}
        if "name" in changes:
            fields["name"] = validate_text(changes["name"], "name", "Category name", NAME_MAX_LENGTH)
            existing = self._categories.find_category_by_name(fields["name"])
            if existing is not None and existing.id != category.id:
                raise _duplicate_name()
        if "color" in changes:
            fields["color"] = validate_hex_color(changes["color"])
        if changes.get("type") is not None:
            fields["type"] = _category_type(changes["type"])
        if changes.get("icon"):
            fields["icon"] = changes["icon"].strip()
        if "description" in changes:
            fields["description"] = validate_text(
                changes["description"], "description", "Description", DESCRIPTION_MAX_LENGTH, False
            )
        if not fields:
            return category
        try:
            return self._categories.update_category(category.id, **fields)
        except DuplicateKey as exc:
            raise _duplicate_name() from exc

    def delete(self, category_id: str) -> None:
        category = self.get(category_id)
        if category.is_default:
            raise ValidationError("Default categories cannot be deleted")
        in_use = self._transactions.count_transactions_in_category(category.name)
        if in_use:
            raise ValidationError(f"Cannot delete category with {in_use} transactions. Deactivate instead.")
        self._categories.delete_category(category.id)
        logger.info("Deleted category %s", category.id)

    def deactivate(self, category_id: str) -> Category:
        category = self.get(category_id)
        if category.is_default:
            raise ValidationError("Default categories cannot be deactivated")
        return self._categories.update_category(category.id, is_active=False)

    def activate(self, category_id: str) -> Category:
        return self._categories.update_category(self.get(category_id).id, is_active=True)

    def popular(self, limit: int = 10) -> List[Category]:
        return self._categories.popular_categories(max(limit, 1))

    def stats(self, user: User, category_id: str) -> Tuple[Category, Dict[TransactionType, TypeTotals]]:
        """Totals of ``user``'s own transactions filed under the category."""
        category = self.get(category_id)
        return category, self._transactions.totals_by_type(user.id, category=category.name)


def _category_type(value: Any) -> CategoryType:
    try:
        return CategoryType(str(value).lower())
    except ValueError as exc:
        raise ValidationError.for_field("type", "Type must be income, expense, or both") from exc


def _duplicate_name() -> ValidationError:
    return ValidationError.for_field("name", "Category with this name already exists")
