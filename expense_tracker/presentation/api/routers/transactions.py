"""Transaction routes scoped to the signed-in user."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ....application.services.transaction_service import TransactionService
from ....core.dependencies import get_transaction_service
from ....domain.models import TransactionFilter, TransactionType, User
from ..dependencies import get_current_user
from ..schemas.auth import MessageResponse
from ..schemas.transaction_schemas import (
    TransactionCreateRequest,
    TransactionEnvelope,
    TransactionListResponse,
    TransactionResponse,
    TransactionSummaryResponse,
    TransactionUpdateRequest,
)

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.get("", response_model=TransactionListResponse)
def list_transactions(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    type: Optional[TransactionType] = None,
    category: Optional[str] = None,
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    user: User = Depends(get_current_user),
    transaction_service: TransactionService = Depends(get_transaction_service),
) -> TransactionListResponse:
    filters = TransactionFilter(type=type, category=category, start_date=start_date, end_date=end_date)
    return TransactionListResponse.from_page(transaction_service.list(user, filters, page=page, limit=limit))


@router.post("", response_model=TransactionEnvelope, status_code=status.HTTP_201_CREATED)
def create_transaction(
    payload: TransactionCreateRequest,
    user: User = Depends(get_current_user),
    transaction_service: TransactionService = Depends(get_transaction_service),
) -> TransactionEnvelope:
    transaction = transaction_service.create(user, **payload.model_dump())
    return TransactionEnvelope(transaction=TransactionResponse.from_domain(transaction))


@router.get("/stats/summary", response_model=TransactionSummaryResponse)
def transaction_summary(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    user: User = Depends(get_current_user),
    transaction_service: TransactionService = Depends(get_transaction_service),
) -> TransactionSummaryResponse:
    summary = transaction_service.summary(user, start_date=start_date, end_date=end_date)
    return TransactionSummaryResponse.from_domain(summary)


@router.get("/{transaction_id}", response_model=TransactionEnvelope)
def get_transaction(
    transaction_id: str,
    user: User = Depends(get_current_user),
    transaction_service: TransactionService = Depends(get_transaction_service),
) -> TransactionEnvelope:
    transaction = transaction_service.get(user, transaction_id)
    return TransactionEnvelope(transaction=TransactionResponse.from_domain(transaction))


@router.put("/{transaction_id}", response_model=TransactionEnvelope)
def update_transaction(
    transaction_id: str,
    payload: TransactionUpdateRequest,
    user: User = Depends(get_current_user),
    transaction_service: TransactionService = Depends(get_transaction_service),
) -> TransactionEnvelope:
    transaction = transaction_service.update(user, transaction_id, **payload.model_dump(exclude_unset=True))
    return TransactionEnvelope(transaction=TransactionResponse.from_domain(transaction))


@router.delete("/{transaction_id}", response_model=MessageResponse)
def delete_transaction(
    transaction_id: str,
    user: User = Depends(get_current_user),
    transaction_service: TransactionService = Depends(get_transaction_service),
) -> MessageResponse:
    transaction_service.delete(user, transaction_id)
    return MessageResponse(message="Transaction deleted successfully")
