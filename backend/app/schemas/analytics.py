"""Analytics schemas."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel

from app.schemas.transaction import TransactionResponse


class MonthlyTotalItem(BaseModel):
    month: str  # "Jan", "Feb", etc.
    period: str  # "2026-01", "2026-02", etc.
    income: Decimal
    expense: Decimal
    balance: Decimal

    model_config = {"from_attributes": True}


class MonthlyOverviewResponse(BaseModel):
    months: int
    as_of: date
    data: list[MonthlyTotalItem]


class CategoryTotalItem(BaseModel):
    category_id: int | None
    name: str
    value: Decimal
    color: str
    percentage: float

    model_config = {"from_attributes": True}


class CategoryBreakdownResponse(BaseModel):
    data: list[CategoryTotalItem]
    total: Decimal


class PeriodSummaryResponse(BaseModel):
    date_from: date
    date_to: date
    income: Decimal
    expense: Decimal
    balance: Decimal
    transaction_count: int


class RecentTransactionsResponse(BaseModel):
    data: list[TransactionResponse]
