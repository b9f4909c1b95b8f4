"""Authentication API routes.

Login, logout and token refresh happen in Keycloak. The backend creates
accounts (identity in Keycloak + local profile) and validates access tokens.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db, get_identity_provider
from app.models.user import User
from app.schemas.user import RegisterResponse, UserRegister, UserResponse
from app.services.identity_provider import KeycloakAdminClient
from app.services.user_service import UserService

router = APIRouter()


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    data: UserRegister,
    db: AsyncSession = Depends(get_db),
    identity: KeycloakAdminClient = Depends(get_identity_provider),
):
    """Create an account with default settings and categories.

    409 when the email is already in use, 502 when Keycloak fails.
    """
    service = UserService(db)
    user = await service.register(data, identity)
    return {"user": user}


@router.get("/me", response_model=UserResponse)
async def auth_me(user: User = Depends(get_current_user)):
    """Return the current authenticated user (auto-provisions on first call)."""
    return user
