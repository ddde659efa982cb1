"""Income/expense records and the aggregates computed over them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from .user import utcnow


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class TransactionStatus(str, Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"
    PENDING = "pending"


@dataclass(slots=True)
class Transaction:
    id: str
    user_id: str
    type: TransactionType
    amount: float
    category: str
    description: str
    date: date
    tags: List[str] = field(default_factory=list)
    notes: Optional[str] = None
    status: TransactionStatus = TransactionStatus.ACTIVE
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass(slots=True)
class TransactionFilter:
    type: Optional[TransactionType] = None
    category: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass(slots=True)
class TransactionPage:
    items: List[Transaction]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return -(-self.total // self.limit) if self.limit else 0


@dataclass(slots=True)
class TypeTotals:
    """Sum, count and mean of the amounts of one transaction type."""

    total: float = 0.0
    count: int = 0
    average: float = 0.0


@dataclass(slots=True)
class CategoryTotal:
    category: str
    total: float
    count: int
    average: float = 0.0
    percentage: Optional[float] = None


@dataclass(slots=True)
class MonthlyTotal:
    year: int
    month: int
    type: TransactionType
    total: float
    count: int


@dataclass(slots=True)
class TransactionSummary:
    income: TypeTotals
    expense: TypeTotals
    category_breakdown: List[CategoryTotal] = field(default_factory=list)

    @property
    def balance(self) -> float:
        return round(self.income.total - self.expense.total, 2)


@dataclass(slots=True)
class Dashboard:
    period: str
    start_date: date
    end_date: date
    summary: TransactionSummary
    monthly: List[MonthlyTotal] = field(default_factory=list)
