"""Pydantic schemas for transaction and analytics endpoints."""

from datetime import date, datetime
from typing import List, Optional

from ....domain.models import (
    CategoryTotal,
    Dashboard,
    MonthlyTotal,
    Transaction,
    TransactionPage,
    TransactionStatus,
    TransactionSummary,
    TransactionType,
    TypeTotals,
)
from .user_schemas import CamelModel

# Alias so a field named `date` with a default does not shadow its own type.
Day = date


class TransactionCreateRequest(CamelModel):
    type: str
    amount: float
    category: str
    description: str
    date: Optional[Day] = None
    tags: Optional[List[str]] = None
    notes: Optional[str] = None
    status: Optional[str] = None


class TransactionUpdateRequest(CamelModel):
    """Partial update. Omitted fields are left untouched."""

    type: Optional[str] = None
    amount: Optional[float] = None
    category: Optional[str] = None
    description: Optional[str] = None
    date: Optional[Day] = None
    tags: Optional[List[str]] = None
    notes: Optional[str] = None
    status: Optional[str] = None


class TransactionResponse(CamelModel):
    id: str
    type: TransactionType
    amount: float
    category: str
    description: str
    date: date
    tags: List[str]
    notes: Optional[str] = None
    status: TransactionStatus
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, transaction: Transaction) -> "TransactionResponse":
        return cls(
            id=transaction.id,
            type=transaction.type,
            amount=transaction.amount,
            category=transaction.category,
            description=transaction.description,
            date=transaction.date,
            tags=list(transaction.tags),
            notes=transaction.notes,
            status=transaction.status,
            created_at=transaction.created_at,
            updated_at=transaction.updated_at,
        )


class TransactionEnvelope(CamelModel):
    transaction: TransactionResponse


class PaginationSchema(CamelModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int


class TransactionListResponse(CamelModel):
    transactions: List[TransactionResponse]
    pagination: PaginationSchema

    @classmethod
    def from_page(cls, page: TransactionPage) -> "TransactionListResponse":
        return cls(
            transactions=[TransactionResponse.from_domain(item) for item in page.items],
            pagination=PaginationSchema(
                current_page=page.page,
                total_pages=page.total_pages,
                total_items=page.total,
                items_per_page=page.limit,
            ),
        )


class CategoryTotalSchema(CamelModel):
    category: str
    total: float
    count: int
    average: float
    percentage: Optional[float] = None

    @classmethod
    def from_domain(cls, item: CategoryTotal) -> "CategoryTotalSchema":
        return cls(
            category=item.category,
            total=item.total,
            count=item.count,
            average=item.average,
            percentage=item.percentage,
        )


class SummarySchema(CamelModel):
    total_income: float
    total_expense: float
    balance: float
    income_count: int
    expense_count: int
    income_average: float
    expense_average: float

    @classmethod
    def from_domain(cls, summary: TransactionSummary) -> "SummarySchema":
        return cls(
            total_income=summary.income.total,
            total_expense=summary.expense.total,
            balance=summary.balance,
            income_count=summary.income.count,
            expense_count=summary.expense.count,
            income_average=summary.income.average,
            expense_average=summary.expense.average,
        )


class TransactionSummaryResponse(CamelModel):
    summary: SummarySchema
    category_breakdown: List[CategoryTotalSchema]

    @classmethod
    def from_domain(cls, summary: TransactionSummary) -> "TransactionSummaryResponse":
        return cls(
            summary=SummarySchema.from_domain(summary),
            category_breakdown=[CategoryTotalSchema.from_domain(item) for item in summary.category_breakdown],
        )


class TypeTotalsSchema(CamelModel):
    total: float
    count: int
    average: float

    @classmethod
    def from_domain(cls, totals: TypeTotals) -> "TypeTotalsSchema":
        return cls(total=totals.total, count=totals.count, average=totals.average)


class MonthlyTotalSchema(CamelModel):
    year: int
    month: int
    type: TransactionType
    total: float
    count: int

    @classmethod
    def from_domain(cls, item: MonthlyTotal) -> "MonthlyTotalSchema":
        return cls(year=item.year, month=item.month, type=item.type, total=item.total, count=item.count)


class TrendsSchema(CamelModel):
    monthly: List[MonthlyTotalSchema]


class DashboardResponse(CamelModel):
    period: str
    start_date: date
    end_date: date
    summary: SummarySchema
    trends: TrendsSchema
    categories: List[CategoryTotalSchema]

    @classmethod
    def from_domain(cls, dashboard: Dashboard) -> "DashboardResponse":
        return cls(
            period=dashboard.period,
            start_date=dashboard.start_date,
            end_date=dashboard.end_date,
            summary=SummarySchema.from_domain(dashboard.summary),
            trends=TrendsSchema(monthly=[MonthlyTotalSchema.from_domain(item) for item in dashboard.monthly]),
            categories=[CategoryTotalSchema.from_domain(item) for item in dashboard.summary.category_breakdown],
        )
