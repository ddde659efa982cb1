from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Protocol

from ..models import (
    Category,
    CategoryTotal,
    CategoryType,
    MonthlyTotal,
    OAuthProvider,
    Transaction,
    TransactionFilter,
    TransactionPage,
    TransactionType,
    TypeTotals,
    User,
)


class UserRepository(Protocol):
    """Durable storage for user accounts.

    Implementations enforce uniqueness of ``email``, ``google_id`` and
    ``facebook_id`` and raise :class:`~expense_tracker.domain.errors.DuplicateKey`
    on collision. Passwords passed to ``insert``/``update`` are hashed before
    they are written.
    """

    def get_by_id(self, user_id: str) -> Optional[User]:
        ...

    def find_by_email(self, email: str) -> Optional[User]:
        ...

    def find_by_oauth_id(self, provider: OAuthProvider, provider_id: str) -> Optional[User]:
        ...

    def find_by_password_reset_hash(self, token_hash: str, now: datetime) -> Optional[User]:
        ...

    def find_by_verification_hash(self, token_hash: str, now: datetime) -> Optional[User]:
        ...

    def insert(self, user: User, password: Optional[str] = None) -> User:
        ...

    def update(self, user_id: str, **fields: Any) -> User:
        ...

    def record_failed_login(
        self,
        user_id: str,
        max_attempts: int,
        lock_until: datetime,
        now: datetime,
    ) -> User:
        ...

    def reset_login_attempts(self, user_id: str, now: datetime) -> User:
        ...


class TransactionRepository(Protocol):
    """Per-user income and expense records.

    Every lookup and write is scoped by ``user_id``; a record owned by another
    account behaves exactly like a missing one.
    """

    def insert_transaction(self, transaction: Transaction) -> Transaction:
        ...

    def get_transaction(self, user_id: str, transaction_id: str) -> Optional[Transaction]:
        ...

    def list_transactions(
        self, user_id: str, filters: TransactionFilter, page: int, limit: int
    ) -> TransactionPage:
        ...

    def update_transaction(self, user_id: str, transaction_id: str, **fields: Any) -> Optional[Transaction]:
        ...

    def delete_transaction(self, user_id: str, transaction_id: str) -> bool:
        ...

    def totals_by_type(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category: Optional[str] = None,
    ) -> Dict[TransactionType, TypeTotals]:
        ...

    def totals_by_category(
        self,
        user_id: str,
        transaction_type: TransactionType,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 10,
    ) -> List[CategoryTotal]:
        ...

    def monthly_totals(
        self, user_id: str, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> List[MonthlyTotal]:
        ...

    def count_transactions_in_category(self, category: str) -> int:
        ...


class CategoryRepository(Protocol):
    """Categories shared by every account. Names are unique, case-insensitively."""

    def count_categories(self) -> int:
        ...

    def insert_category(self, category: Category) -> Category:
        ...

    def get_category(self, category_id: str) -> Optional[Category]:
        ...

    def find_category_by_name(self, name: str) -> Optional[Category]:
        ...

    def list_categories(
        self,
        category_type: Optional[CategoryType] = None,
        active_only: bool = True,
        defaults_only: bool = False,
    ) -> List[Category]:
        ...

    def popular_categories(self, limit: int) -> List[Category]:
        ...

    def update_category(self, category_id: str, **fields: Any) -> Category:
        ...

    def delete_category(self, category_id: str) -> None:
        ...

    def increment_category_usage(self, name: str) -> None:
        ...


class PersistenceGateway(UserRepository, TransactionRepository, CategoryRepository, Protocol):
    """Composite gateway combining every persistence concern used by the app."""

    def close(self) -> None:
        ...
