"""Transaction API routes."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db
from app.core.exceptions import ValidationError
from app.models.transaction import TransactionType
from app.models.user import User
from app.schemas.transaction import TransactionCreate, TransactionResponse
from app.services.transaction_service import TransactionService

router = APIRouter()


@router.get("", response_model=list[TransactionResponse])
async def list_transactions(
    date_from: date | None = None,
    date_to: date | None = None,
    type: TransactionType | None = None,
    category_id: int | None = None,
    limit: int | None = Query(None, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the user's transactions, newest first."""
    if date_from and date_to and date_from > date_to:
        raise ValidationError("date_from must be on or before date_to")

    service = TransactionService(db)
    return await service.list_transactions(
        current_user,
        date_from=date_from,
        date_to=date_to,
        txn_type=type,
        category_id=category_id,
        limit=limit,
    )


@router.post("", response_model=TransactionResponse, status_code=201)
async def create_transaction(
    data: TransactionCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Record an income or an expense."""
    service = TransactionService(db)
    return await service.create_transaction(data, current_user)


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = TransactionService(db)
    return await service.get_transaction(transaction_id, current_user)


@router.delete("/{transaction_id}", status_code=204)
async def delete_transaction(
    transaction_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Soft-delete a transaction."""
    service = TransactionService(db)
    await service.delete_transaction(transaction_id, current_user)
