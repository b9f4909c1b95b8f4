"""Analytics API routes — dashboard aggregates."""

from calendar import monthrange
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db
from app.config import settings
from app.core.exceptions import ValidationError
from app.models.user import User
from app.schemas.analytics import (
    CategoryBreakdownResponse,
    MonthlyOverviewResponse,
    PeriodSummaryResponse,
    RecentTransactionsResponse,
)
from app.services.analytics_service import AnalyticsService

router = APIRouter()


def _check_range(date_from: date | None, date_to: date | None) -> None:
    if date_from and date_to and date_from > date_to:
        raise ValidationError("date_from must be on or before date_to")


def _check_window(as_of: date, months: int) -> None:
    # Months elapsed since January of year 1
    if as_of.year * 12 + as_of.month - 13 < months - 1:
        raise ValidationError("Window starts before year 1; use a later as_of or fewer months")


@router.get("/monthly", response_model=MonthlyOverviewResponse)
async def monthly_overview(
    months: int = Query(settings.default_month_window, ge=1, le=60),
    as_of: date | None = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Income, expense and balance per month, ending at the month of ``as_of``.

    ``as_of`` defaults to today. Months without transactions are returned with
    zero totals.
    """
    as_of = as_of or date.today()
    _check_window(as_of, months)
    service = AnalyticsService(db)
    return await service.monthly_overview(current_user, months, as_of)


@router.get("/by-category", response_model=CategoryBreakdownResponse)
async def by_category(
    date_from: date | None = None,
    date_to: date | None = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Expenses broken down by category (including uncategorized), largest first."""
    _check_range(date_from, date_to)
    service = AnalyticsService(db)
    return await service.by_category(current_user, date_from=date_from, date_to=date_to)


@router.get("/summary", response_model=PeriodSummaryResponse)
async def period_summary(
    date_from: date | None = None,
    date_to: date | None = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Total income, expense and balance; defaults to the current month."""
    today = date.today()
    date_from = date_from or today.replace(day=1)
    date_to = date_to or today.replace(day=monthrange(today.year, today.month)[1])
    _check_range(date_from, date_to)
    service = AnalyticsService(db)
    return await service.period_summary(current_user, date_from, date_to)


@router.get("/recent", response_model=RecentTransactionsResponse)
async def recent_transactions(
    limit: int = Query(settings.recent_transactions_limit, ge=1, le=50),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Latest transactions, newest first."""
    service = AnalyticsService(db)
    return await service.recent(current_user, limit)
