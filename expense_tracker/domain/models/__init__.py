"""Domain models for the ExpenseTracker API."""

from .category import Category, CategoryType, default_categories
from .identity import AuthResult, ExternalIdentity, TokenClaims, TokenPair
from .transaction import (
    CategoryTotal,
    Dashboard,
    MonthlyTotal,
    Transaction,
    TransactionFilter,
    TransactionPage,
    TransactionStatus,
    TransactionSummary,
    TransactionType,
    TypeTotals,
)
from .user import (
    Address,
    Currency,
    Gender,
    Language,
    NotificationSettings,
    OAuthProvider,
    Preferences,
    Theme,
    User,
    utcnow,
)

__all__ = [
    "Address",
    "AuthResult",
    "Category",
    "CategoryTotal",
    "CategoryType",
    "Currency",
    "Dashboard",
    "ExternalIdentity",
    "Gender",
    "Language",
    "MonthlyTotal",
    "NotificationSettings",
    "OAuthProvider",
    "Preferences",
    "Theme",
    "TokenClaims",
    "TokenPair",
    "Transaction",
    "TransactionFilter",
    "TransactionPage",
    "TransactionStatus",
    "TransactionSummary",
    "TransactionType",
    "TypeTotals",
    "User",
    "default_categories",
    "utcnow",
]
