"""SQLAlchemy models."""

from app.models.base import Base
from app.models.category import Category
from app.models.transaction import Transaction, TransactionType
from app.models.user import User, UserSettings

__all__ = [
    "Base",
    "User",
    "UserSettings",
    "Category",
    "Transaction",
    "TransactionType",
]
