"""Analytics service — monthly overview, category breakdown, recent activity."""

from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.services.aggregation import (
    MonthlyTotal,
    compute_category_totals,
    compute_monthly_totals,
    compute_period_summary,
    month_window,
)
from app.services.transaction_service import TransactionService, serialize_transaction


def _monthly_item(bucket: MonthlyTotal) -> dict:
    # period, month and balance are properties, not dataclass fields
    return {
        "month": bucket.month,
        "period": bucket.period,
        "income": bucket.income,
        "expense": bucket.expense,
        "balance": bucket.balance,
    }


class AnalyticsService:
    """Loads a user's transactions and hands them to the aggregation engine."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.transactions = TransactionService(db)

    async def monthly_overview(self, user: User, months: int, as_of: date) -> dict:
        """Income, expense and balance for each of the last ``months`` months."""
        # Only the window is fetched; the engine would drop the rest anyway
        start, end = month_window(as_of, months)
        rows = await self.transactions.fetch_transactions(user, date_from=start, date_to=end)
        return {
            "months": months,
            "as_of": as_of,
            "data": [_monthly_item(m) for m in compute_monthly_totals(rows, months, as_of)],
        }

    async def by_category(
        self,
        user: User,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> dict:
        """Expense totals per category, largest first."""
        rows = await self.transactions.fetch_transactions(
            user, date_from=date_from, date_to=date_to
        )
        summary = compute_category_totals(rows)
        return {"data": summary.buckets, "total": summary.total}

    async def period_summary(self, user: User, date_from: date, date_to: date) -> dict:
        rows = await self.transactions.fetch_transactions(
            user, date_from=date_from, date_to=date_to
        )
        summary = compute_period_summary(rows)
        return {
            "date_from": date_from,
            "date_to": date_to,
            "income": summary.income,
            "expense": summary.expense,
            "balance": summary.balance,
            "transaction_count": summary.transaction_count,
        }

    async def recent(self, user: User, limit: int) -> dict:
        rows = await self.transactions.fetch_transactions(user, limit=limit)
        return {"data": [serialize_transaction(txn) for txn in rows]}
