"""Category routes. Reads are public; changes need a full account."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ....application.services.category_service import CategoryService
from ....core.dependencies import get_category_service
from ....domain.models import User
from ..dependencies import get_current_user, require_full_account
from ..schemas.auth import MessageResponse
from ..schemas.category_schemas import (
    CategoryCreateRequest,
    CategoryEnvelope,
    CategoryListResponse,
    CategoryResponse,
    CategoryStatsResponse,
    CategoryUpdateRequest,
)

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("", response_model=CategoryListResponse)
def list_categories(
    type: Optional[str] = None,
    category_service: CategoryService = Depends(get_category_service),
) -> CategoryListResponse:
    return CategoryListResponse.from_domain(category_service.list(type))


@router.post("", response_model=CategoryEnvelope, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CategoryCreateRequest,
    user: User = Depends(require_full_account),
    category_service: CategoryService = Depends(get_category_service),
) -> CategoryEnvelope:
    category = category_service.create(**payload.model_dump())
    return CategoryEnvelope(category=CategoryResponse.from_domain(category))


@router.get("/stats/popular", response_model=CategoryListResponse)
def popular_categories(
    limit: int = Query(10, ge=1, le=50),
    category_service: CategoryService = Depends(get_category_service),
) -> CategoryListResponse:
    return CategoryListResponse.from_domain(category_service.popular(limit))


@router.post("/initialize", response_model=CategoryListResponse)
def initialize_categories(
    user: User = Depends(require_full_account),
    category_service: CategoryService = Depends(get_category_service),
) -> CategoryListResponse:
    return CategoryListResponse.from_domain(category_service.initialize_defaults())


@router.get("/{category_id}", response_model=CategoryEnvelope)
def get_category(
    category_id: str,
    category_service: CategoryService = Depends(get_category_service),
) -> CategoryEnvelope:
    return CategoryEnvelope(category=CategoryResponse.from_domain(category_service.get(category_id)))


@router.get("/{category_id}/stats", response_model=CategoryStatsResponse)
def category_stats(
    category_id: str,
    user: User = Depends(get_current_user),
    category_service: CategoryService = Depends(get_category_service),
) -> CategoryStatsResponse:
    category, totals = category_service.stats(user, category_id)
    return CategoryStatsResponse.from_domain(category, totals)


@router.put("/{category_id}", response_model=CategoryEnvelope)
def update_category(
    category_id: str,
    payload: CategoryUpdateRequest,
    user: User = Depends(require_full_account),
    category_service: CategoryService = Depends(get_category_service),
) -> CategoryEnvelope:
    category = category_service.update(category_id, **payload.model_dump(exclude_unset=True))
    return CategoryEnvelope(category=CategoryResponse.from_domain(category))


@router.delete("/{category_id}", response_model=MessageResponse)
def delete_category(
    category_id: str,
    user: User = Depends(require_full_account),
    category_service: CategoryService = Depends(get_category_service),
) -> MessageResponse:
    category_service.delete(category_id)
    return MessageResponse(message="Category deleted successfully")


@router.patch("/{category_id}/deactivate", response_model=CategoryEnvelope)
def deactivate_category(
    category_id: str,
    user: User = Depends(require_full_account),
    category_service: CategoryService = Depends(get_category_service),
) -> CategoryEnvelope:
    return CategoryEnvelope(category=CategoryResponse.from_domain(category_service.deactivate(category_id)))


@router.patch("/{category_id}/activate", response_model=CategoryEnvelope)
def activate_category(
    category_id: str,
    user: User = Depends(require_full_account),
    category_service: CategoryService = Depends(get_category_service),
) -> CategoryEnvelope:
    return CategoryEnvelope(category=CategoryResponse.from_domain(category_service.activate(category_id)))
