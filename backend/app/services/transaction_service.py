"""Transaction management service."""

from datetime import date, datetime, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import NotFoundError
from app.models.category import Category
from app.models.transaction import Transaction, TransactionType
from app.models.user import User
from app.schemas.transaction import TransactionCreate

logger = structlog.get_logger()


def serialize_transaction(txn: Transaction) -> dict:
    """Flatten a transaction (with its category loaded) for API responses."""
    category = txn.category
    return {
        "id": txn.id,
        "date": txn.date,
        "description": txn.description,
        "amount": txn.amount,
        "type": txn.type,
        "category_id": txn.category_id,
        "category_name": category.name if category else None,
        "category_color": category.color if category else None,
        "notes": txn.notes,
        "created_at": txn.created_at,
        "updated_at": txn.updated_at,
    }


class TransactionService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def fetch_transactions(
        self,
        user: User,
        date_from: date | None = None,
        date_to: date | None = None,
        txn_type: TransactionType | None = None,
        category_id: int | None = None,
        limit: int | None = None,
    ) -> list[Transaction]:
        """Return the user's transactions (categories loaded), newest first.

        Date bounds are inclusive.
        """
        query = (
            select(Transaction)
            .options(selectinload(Transaction.category))
            .where(
                Transaction.user_id == user.id,
                Transaction.deleted_at.is_(None),
            )
        )

        # Apply filters
        if date_from:
            query = query.where(Transaction.date >= date_from)
        if date_to:
            query = query.where(Transaction.date <= date_to)
        if txn_type:
            query = query.where(Transaction.type == TransactionType(txn_type).value)
        if category_id:
            query = query.where(Transaction.category_id == category_id)

        query = query.order_by(Transaction.date.desc(), Transaction.id.desc())
        if limit:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_transactions(self, user: User, **filters) -> list[dict]:
        """List transactions with filters, serialized for the API."""
        transactions = await self.fetch_transactions(user, **filters)
        return [serialize_transaction(txn) for txn in transactions]

    async def create_transaction(self, data: TransactionCreate, user: User) -> dict:
        """Create a transaction; the id and timestamps are assigned by the database."""
        if data.category_id is not None:
            await self._get_user_category(data.category_id, user)

        txn = Transaction(
            user_id=user.id,
            date=data.date,
            description=data.description,
            amount=data.amount,
            type=TransactionType(data.type).value,
            category_id=data.category_id,
            notes=data.notes,
        )
        self.db.add(txn)
        await self.db.flush()

        txn = await self._get_user_transaction(txn.id, user)
        logger.info(
            "transaction_created",
            user_id=user.id,
            transaction_id=txn.id,
            type=txn.type,
            amount=str(txn.amount),
        )
        return serialize_transaction(txn)

    async def get_transaction(self, transaction_id: int, user: User) -> dict:
        """Get a specific transaction."""
        txn = await self._get_user_transaction(transaction_id, user)
        return serialize_transaction(txn)

    async def delete_transaction(self, transaction_id: int, user: User) -> None:
        """Soft-delete a transaction."""
        txn = await self._get_user_transaction(transaction_id, user)
        txn.deleted_at = datetime.now(timezone.utc)
        await self.db.flush()
        logger.info("transaction_deleted", user_id=user.id, transaction_id=transaction_id)

    async def _get_user_transaction(self, transaction_id: int, user: User) -> Transaction:
        """Fetch a live transaction owned by the user.

        Another user's transaction is reported as missing rather than forbidden.
        """
        result = await self.db.execute(
            select(Transaction)
            .options(selectinload(Transaction.category))
            .where(
                Transaction.id == transaction_id,
                Transaction.user_id == user.id,
                Transaction.deleted_at.is_(None),
            )
            .execution_options(populate_existing=True)
        )
        txn = result.scalar_one_or_none()
        if not txn:
            raise NotFoundError("Transaction")
        return txn

    async def _get_user_category(self, category_id: int, user: User) -> Category:
        result = await self.db.execute(
            select(Category).where(Category.id == category_id, Category.user_id == user.id)
        )
        category = result.scalar_one_or_none()
        if not category:
            raise NotFoundError("Category")
        return category
