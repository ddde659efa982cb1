"""Pydantic schemas for category endpoints."""

from datetime import datetime
from typing import Dict, List, Optional

from ....domain.models import Category, CategoryType, TransactionType, TypeTotals
from .transaction_schemas import TypeTotalsSchema
from .user_schemas import CamelModel


class CategoryCreateRequest(CamelModel):
    name: str
    color: str
    type: str
    icon: Optional[str] = None
    description: Optional[str] = None


class CategoryUpdateRequest(CamelModel):
    name: Optional[str] = None
    color: Optional[str] = None
    type: Optional[str] = None
    icon: Optional[str] = None
    description: Optional[str] = None


class CategoryResponse(CamelModel):
    id: str
    name: str
    icon: str
    color: str
    type: CategoryType
    description: Optional[str] = None
    is_default: bool
    is_active: bool
    usage_count: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, category: Category) -> "CategoryResponse":
        return cls(
            id=category.id,
            name=category.name,
            icon=category.icon,
            color=category.color,
            type=category.type,
            description=category.description,
            is_default=category.is_default,
            is_active=category.is_active,
            usage_count=category.usage_count,
            created_at=category.created_at,
            updated_at=category.updated_at,
        )


class CategoryEnvelope(CamelModel):
    category: CategoryResponse


class CategoryListResponse(CamelModel):
    categories: List[CategoryResponse]

    @classmethod
    def from_domain(cls, categories: List[Category]) -> "CategoryListResponse":
        return cls(categories=[CategoryResponse.from_domain(category) for category in categories])


class CategoryStatsResponse(CamelModel):
    category: CategoryResponse
    stats: Dict[TransactionType, TypeTotalsSchema]

    @classmethod
    def from_domain(cls, category: Category, totals: Dict[TransactionType, TypeTotals]) -> "CategoryStatsResponse":
        return cls(
            category=CategoryResponse.from_domain(category),
            stats={kind: TypeTotalsSchema.from_domain(value) for kind, value in totals.items()},
        )
