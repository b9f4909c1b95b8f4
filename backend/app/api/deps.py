"""Shared API dependencies."""

from app.core.database import get_db
from app.core.security import get_current_user
from app.services.identity_provider import get_identity_provider

__all__ = ["get_db", "get_current_user", "get_identity_provider"]
