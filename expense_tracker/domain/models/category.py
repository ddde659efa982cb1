"""Shared transaction categories."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .user import utcnow


class CategoryType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    BOTH = "both"


@dataclass(slots=True)
class Category:
    id: str
    name: str
    color: str
    type: CategoryType
    icon: str = "fas fa-tag"
    description: Optional[str] = None
    is_default: bool = False
    is_active: bool = True
    usage_count: int = 0
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


def default_categories() -> List[Category]:
    """Categories seeded into an empty store."""
    seeds = [
        ("Food & Dining", "fas fa-utensils", "#f59e0b", CategoryType.EXPENSE),
        ("Transportation", "fas fa-car", "#3b82f6", CategoryType.EXPENSE),
        ("Shopping", "fas fa-shopping-bag", "#8b5cf6", CategoryType.EXPENSE),
        ("Bills & Utilities", "fas fa-file-invoice", "#ef4444", CategoryType.EXPENSE),
        ("Entertainment", "fas fa-film", "#10b981", CategoryType.EXPENSE),
        ("Health & Fitness", "fas fa-heartbeat", "#f97316", CategoryType.EXPENSE),
        ("Education", "fas fa-graduation-cap", "#06b6d4", CategoryType.EXPENSE),
        ("Travel", "fas fa-plane", "#84cc16", CategoryType.EXPENSE),
        ("Other", "fas fa-ellipsis-h", "#6b7280", CategoryType.EXPENSE),
        ("Salary", "fas fa-money-bill-wave", "#22c55e", CategoryType.INCOME),
        ("Freelance", "fas fa-laptop-code", "#eab308", CategoryType.INCOME),
        ("Investments", "fas fa-chart-line", "#06b6d4", CategoryType.INCOME),
        ("Gifts", "fas fa-gift", "#f472b6", CategoryType.INCOME),
        ("Business", "fas fa-briefcase", "#8b5cf6", CategoryType.INCOME),
    ]
    return [
        Category(id="", name=name, icon=icon, color=color, type=category_type, is_default=True)
        for name, icon, color, category_type in seeds
    ]
