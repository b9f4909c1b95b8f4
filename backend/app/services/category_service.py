"""Category management service."""

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AlreadyExistsError, NotFoundError
from app.models.category import Category
from app.models.transaction import Transaction
from app.models.user import User
from app.schemas.category import CategoryCreate, CategoryUpdate

logger = structlog.get_logger()

# Seeded for every new account: (name, color, icon)
DEFAULT_CATEGORIES: list[tuple[str, str, str]] = [
    ("Food", "#4CAF50", "utensils"),
    ("Transportation", "#2196F3", "car"),
    ("Entertainment", "#E91E63", "film"),
    ("Utilities", "#673AB7", "bolt"),
    ("Housing", "#FF5722", "home"),
    ("Health", "#00BCD4", "heart"),
    ("Education", "#9C27B0", "book"),
    ("Other", "#607D8B", "folder"),
]


class CategoryService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_categories(self, user: User) -> list[Category]:
        """List the user's categories by name."""
        result = await self.db.execute(
            select(Category).where(Category.user_id == user.id).order_by(Category.name)
        )
        return list(result.scalars().all())

    async def provision_defaults(self, user: User) -> list[Category]:
        """Create the default category set for a freshly created user."""
        categories = [
            Category(user_id=user.id, name=name, color=color, icon=icon)
            for name, color, icon in DEFAULT_CATEGORIES
        ]
        self.db.add_all(categories)
        await self.db.flush()
        return categories

    async def get_category(self, category_id: int, user: User) -> Category:
        return await self._get_user_category(category_id, user)

    async def create_category(self, data: CategoryCreate, user: User) -> Category:
        """Create a custom user category."""
        await self._ensure_name_available(data.name, user)

        category = Category(user_id=user.id, name=data.name, icon=data.icon, color=data.color)
        self.db.add(category)
        await self.db.flush()
        await self.db.refresh(category)
        return category

    async def update_category(self, category_id: int, data: CategoryUpdate, user: User) -> Category:
        category = await self._get_user_category(category_id, user)
        update_data = data.model_dump(exclude_unset=True)

        if update_data.get("name") is None:
            update_data.pop("name", None)
        elif update_data["name"] != category.name:
            await self._ensure_name_available(update_data["name"], user)

        for key, value in update_data.items():
            setattr(category, key, value)
        await self.db.flush()
        await self.db.refresh(category)
        return category

    async def delete_category(self, category_id: int, user: User) -> None:
        """Delete a user category; its transactions become uncategorized."""
        category = await self._get_user_category(category_id, user)
        detached = await self.db.execute(
            update(Transaction)
            .where(Transaction.category_id == category.id)
            .values(category_id=None)
        )
        await self.db.delete(category)
        await self.db.flush()
        logger.info(
            "category_deleted",
            user_id=user.id,
            category_id=category_id,
            detached_transactions=detached.rowcount,
        )

    async def _ensure_name_available(self, name: str, user: User) -> None:
        result = await self.db.execute(
            select(Category.id).where(Category.user_id == user.id, Category.name == name)
        )
        if result.scalar_one_or_none() is not None:
            raise AlreadyExistsError("Category")

    async def _get_user_category(self, category_id: int, user: User) -> Category:
        """Fetch a category and verify it belongs to the user."""
        result = await self.db.execute(
            select(Category).where(Category.id == category_id, Category.user_id == user.id)
        )
        category = result.scalar_one_or_none()
        if not category:
            raise NotFoundError("Category")
        return category
