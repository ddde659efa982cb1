from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Callable

from ...domain.models import Dashboard, TransactionSummary, TransactionType, User, utcnow
from ...domain.ports.persistence import TransactionRepository

logger = logging.getLogger(__name__)

DEFAULT_PERIOD = "month"
DASHBOARD_CATEGORY_LIMIT = 10


def period_start(period: str, today: date) -> date:
    """First day covered by a dashboard period; unknown periods fall back to the current month."""
    if period == "week":
        return today - timedelta(days=7)
    if period == "year":
        return today.replace(month=1, day=1)
    return today.replace(day=1)


class AnalyticsService:
    """Dashboard aggregation over a user's transactions."""

    def __init__(self, transactions: TransactionRepository, clock: Callable[[], datetime] = utcnow) -> None:
        self._transactions = transactions
        self._clock = clock

    def dashboard(self, user: User, period: str = DEFAULT_PERIOD) -> Dashboard:
        if period not in ("week", "month", "year"):
            logger.debug("Unknown dashboard period %r, using %s", period, DEFAULT_PERIOD)
            period = DEFAULT_PERIOD
        today = self._clock().date()
        start = period_start(period, today)

        totals = self._transactions.totals_by_type(user.id, start_date=start, end_date=today)
        categories = self._transactions.totals_by_category(
            user.id, TransactionType.EXPENSE, start_date=start, end_date=today, limit=DASHBOARD_CATEGORY_LIMIT
        )
        expense_total = totals[TransactionType.EXPENSE].total
        for category in categories:
            category.percentage = round(category.total / expense_total * 100, 2) if expense_total > 0 else 0.0

        return Dashboard(
            period=period,
            start_date=start,
            end_date=today,
            summary=TransactionSummary(
                income=totals[TransactionType.INCOME],
                expense=totals[TransactionType.EXPENSE],
                category_breakdown=categories,
            ),
            monthly=self._transactions.monthly_totals(user.id, start_date=start, end_date=today),
        )
