"""Aggregation engine — monthly totals and expense totals per category.

Everything here is pure: no database, no clock. Callers load the transactions
and pass the reference ("as of") date explicitly, so the same input always
yields the same buckets.

Inputs only need to look like a transaction (``amount``, ``type``, ``date``
and an optional ``category`` with ``id``, ``name`` and ``color``); ORM rows
and plain objects both work.
"""

import calendar
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Protocol

from app.models.transaction import TransactionType

UNCATEGORIZED_NAME = "Uncategorized"
UNCATEGORIZED_COLOR = "#CBD5E1"

ZERO = Decimal("0")


class CategoryLike(Protocol):
    id: int
    name: str
    color: str | None


class TransactionLike(Protocol):
    amount: Decimal
    type: str
    date: date
    category: CategoryLike | None


@dataclass
class MonthlyTotal:
    """Income/expense sums for one calendar month.

    ``balance`` is derived on read, so it always equals ``income - expense``.
    """

    year: int
    month_number: int
    income: Decimal = ZERO
    expense: Decimal = ZERO

    @property
    def period(self) -> str:
        return f"{self.year:04d}-{self.month_number:02d}"

    @property
    def month(self) -> str:
        # Short month name for the current LC_TIME locale ("Jan", "Feb", ...)
        return calendar.month_abbr[self.month_number]

    @property
    def balance(self) -> Decimal:
        return self.income - self.expense

    def add(self, txn_type: str, amount: Decimal) -> None:
        if txn_type == TransactionType.INCOME:
            self.income += amount
        elif txn_type == TransactionType.EXPENSE:
            self.expense += amount


@dataclass
class CategoryTotal:
    category_id: int | None
    name: str
    color: str
    value: Decimal = ZERO
    percentage: float = 0.0


@dataclass
class CategorySummary:
    buckets: list[CategoryTotal] = field(default_factory=list)
    total: Decimal = ZERO


@dataclass
class PeriodSummary:
    income: Decimal = ZERO
    expense: Decimal = ZERO
    transaction_count: int = 0

    @property
    def balance(self) -> Decimal:
        return self.income - self.expense


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def _as_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps floats from dragging their binary noise into the sums
    return Decimal(str(value))


def month_window(as_of: date, month_count: int) -> tuple[date, date]:
    """Return the closed ``[start, end]`` range covering ``month_count`` months.

    ``end`` is the last day of the as-of month, ``start`` the first day of the
    month ``month_count - 1`` months earlier.
    """
    if month_count < 1:
        raise ValueError("month_count must be a positive integer")

    first_index = as_of.year * 12 + (as_of.month - 1) - (month_count - 1)
    start = date(first_index // 12, first_index % 12 + 1, 1)
    end = date(as_of.year, as_of.month, calendar.monthrange(as_of.year, as_of.month)[1])
    return start, end


def _empty_buckets(start: date, month_count: int) -> dict[tuple[int, int], MonthlyTotal]:
    buckets: dict[tuple[int, int], MonthlyTotal] = {}
    index = start.year * 12 + (start.month - 1)
    for offset in range(month_count):
        year, month0 = divmod(index + offset, 12)
        buckets[(year, month0 + 1)] = MonthlyTotal(year=year, month_number=month0 + 1)
    return buckets


def compute_monthly_totals(
    transactions: Iterable[TransactionLike],
    month_count: int,
    as_of: date,
) -> list[MonthlyTotal]:
    """Sum income and expense per month for the ``month_count`` months ending at ``as_of``.

    Every month of the window gets a bucket, even when no transaction falls in
    it. Transactions dated outside the window are ignored. Buckets come back
    in chronological order whatever the input order.
    """
    start, end = month_window(_as_date(as_of), month_count)
    buckets = _empty_buckets(start, month_count)

    for txn in transactions:
        txn_date = _as_date(txn.date)
        if txn_date < start or txn_date > end:
            continue
        bucket = buckets.get((txn_date.year, txn_date.month))
        if bucket is None:
            continue
        bucket.add(txn.type, _as_decimal(txn.amount))

    return [buckets[key] for key in sorted(buckets)]


def compute_category_totals(transactions: Iterable[TransactionLike]) -> CategorySummary:
    """Sum expenses per category, largest first.

    Groups on the category id; transactions without a category share the
    "Uncategorized" bucket. Name and color come from the category itself.
    Equal values keep the order in which their category was first seen.
    """
    groups: dict[int | None, CategoryTotal] = {}

    for txn in transactions:
        if txn.type != TransactionType.EXPENSE:
            continue
        category = getattr(txn, "category", None)
        key = category.id if category is not None else None
        bucket = groups.get(key)
        if bucket is None:
            if category is None:
                bucket = CategoryTotal(
                    category_id=None, name=UNCATEGORIZED_NAME, color=UNCATEGORIZED_COLOR
                )
            else:
                bucket = CategoryTotal(
                    category_id=category.id,
                    name=category.name,
                    color=category.color or UNCATEGORIZED_COLOR,
                )
            groups[key] = bucket
        bucket.value += _as_decimal(txn.amount)

    if not groups:
        return CategorySummary()

    # sorted() is stable, reverse=True included
    buckets = sorted(groups.values(), key=lambda b: b.value, reverse=True)
    total = sum((b.value for b in buckets), ZERO)
    for bucket in buckets:
        bucket.percentage = round(float(bucket.value / total * 100), 1) if total else 0.0

    return CategorySummary(buckets=buckets, total=total)


def compute_period_summary(transactions: Iterable[TransactionLike]) -> PeriodSummary:
    """Total income and expense over an already-filtered set of transactions."""
    summary = PeriodSummary()
    for txn in transactions:
        amount = _as_decimal(txn.amount)
        if txn.type == TransactionType.INCOME:
            summary.income += amount
        elif txn.type == TransactionType.EXPENSE:
            summary.expense += amount
        summary.transaction_count += 1
    return summary
