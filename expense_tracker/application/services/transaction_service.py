from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from ...domain.errors import NotFound, ValidationError
from ...domain.models import (
    Transaction,
    TransactionFilter,
    TransactionPage,
    TransactionStatus,
    TransactionSummary,
    TransactionType,
    User,
    utcnow,
)
from ...domain.ports.persistence import CategoryRepository, TransactionRepository
from ...domain.validation import validate_amount, validate_text

logger = logging.getLogger(__name__)

CATEGORY_MAX_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 500
NOTES_MAX_LENGTH = 1000
TAG_MAX_LENGTH = 30
SUMMARY_CATEGORY_LIMIT = 10


class TransactionService:
    """CRUD and summary statistics over the signed-in user's transactions."""

    def __init__(
        self,
        transactions: TransactionRepository,
        categories: CategoryRepository,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._transactions = transactions
        self._categories = categories
        self._clock = clock

    def list(
        self,
        user: User,
        filters: Optional[TransactionFilter] = None,
        page: int = 1,
        limit: int = 10,
    ) -> TransactionPage:
        filters = filters or TransactionFilter()
        _check_range(filters.start_date, filters.end_date)
        return self._transactions.list_transactions(user.id, filters, max(page, 1), max(limit, 1))

    def create(
        self,
        user: User,
        type: str,
        amount: Any,
        category: str,
        description: str,
        date: Optional[date] = None,
        tags: Optional[Iterable[str]] = None,
        notes: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Transaction:
        """
        Record an income or expense for ``user``.

        Args:
            type: ``income`` or ``expense``
            amount: Positive amount, rounded to two decimals
            category: Category name (free text, at most 50 characters)
            description: 1-500 characters
            date: Calendar day of the transaction, today when omitted

        Raises:
            ValidationError: If a field is malformed
        """
        candidate = Transaction(
            id=str(uuid.uuid4()),
            user_id=user.id,
            type=_transaction_type(type),
            amount=validate_amount(amount),
            category=validate_text(category, "category", "Category", CATEGORY_MAX_LENGTH),
            description=validate_text(description, "description", "Description", DESCRIPTION_MAX_LENGTH),
            date=date or self._clock().date(),
            tags=_clean_tags(tags),
            notes=validate_text(notes, "notes", "Notes", NOTES_MAX_LENGTH, required=False),
            status=_transaction_status(status) if status else TransactionStatus.ACTIVE,
        )
        transaction = self._transactions.insert_transaction(candidate)
        self._categories.increment_category_usage(transaction.category)
        logger.info("Recorded %s transaction %s for %s", transaction.type.value, transaction.id, user.id)
        return transaction

    def get(self, user: User, transaction_id: str) -> Transaction:
        transaction = self._transactions.get_transaction(user.id, transaction_id)
        if transaction is None:
            raise NotFound("Transaction not found")
        return transaction

    def update(self, user: User, transaction_id: str, **changes: Any) -> Transaction:
        fields: Dict[str, Any] = {}
        if changes.get("type") is not None:
            fields["type"] = _transaction_type(changes["type"])
        if changes.get("amount") is not None:
            fields["amount"] = validate_amount(changes["amount"])
        if "category" in changes:
            fields["category"] = validate_text(changes["category"], "category", "Category", CATEGORY_MAX_LENGTH)
        if "description" in changes:
            fields["description"] = validate_text(
                changes["description"], "description", "Description", DESCRIPTION_MAX_LENGTH
            )
        if changes.get("date") is not None:
            fields["date"] = changes["date"]
        if "tags" in changes:
            fields["tags"] = _clean_tags(changes["tags"])
        if "notes" in changes:
            fields["notes"] = validate_text(changes["notes"], "notes", "Notes", NOTES_MAX_LENGTH, required=False)
        if changes.get("status") is not None:
            fields["status"] = _transaction_status(changes["status"])

        transaction = self._transactions.update_transaction(user.id, transaction_id, **fields)
        if transaction is None:
            raise NotFound("Transaction not found")
        return transaction

    def delete(self, user: User, transaction_id: str) -> None:
        if not self._transactions.delete_transaction(user.id, transaction_id):
            raise NotFound("Transaction not found")
        logger.info("Deleted transaction %s for %s", transaction_id, user.id)

    def summary(
        self, user: User, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> TransactionSummary:
        """Income/expense totals and the top expense categories, optionally within a date range."""
        _check_range(start_date, end_date)
        totals = self._transactions.totals_by_type(user.id, start_date=start_date, end_date=end_date)
        breakdown = self._transactions.totals_by_category(
            user.id,
            TransactionType.EXPENSE,
            start_date=start_date,
            end_date=end_date,
            limit=SUMMARY_CATEGORY_LIMIT,
        )
        return TransactionSummary(
            income=totals[TransactionType.INCOME],
            expense=totals[TransactionType.EXPENSE],
            category_breakdown=breakdown,
        )


def _transaction_type(value: Any) -> TransactionType:
    try:
        return TransactionType(str(value).lower())
    except ValueError as exc:
        raise ValidationError.for_field("type", "Type must be income or expense") from exc


def _transaction_status(value: Any) -> TransactionStatus:
    try:
        return TransactionStatus(str(value).lower())
    except ValueError as exc:
        raise ValidationError.for_field("status", "Status must be active, cancelled or pending") from exc


def _clean_tags(tags: Optional[Iterable[str]]) -> List[str]:
    cleaned = []
    for tag in tags or []:
        value = validate_text(tag, "tags", "Tag", TAG_MAX_LENGTH, required=False)
        if value and value not in cleaned:
            cleaned.append(value)
    return cleaned


def _check_range(start_date: Optional[date], end_date: Optional[date]) -> None:
    if start_date and end_date and start_date > end_date:
        raise ValidationError.for_field("startDate", "Start date must be on or before end date")
