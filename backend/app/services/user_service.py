"""User accounts: registration, provisioning, profile and settings."""

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AlreadyExistsError
from app.models.user import User, UserSettings
from app.schemas.user import UserRegister, UserSettingsUpdate, UserUpdate
from app.services.category_service import CategoryService
from app.services.identity_provider import KeycloakAdminClient

logger = structlog.get_logger()


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_keycloak_id(self, keycloak_id: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.keycloak_id == keycloak_id)
        )
        return result.scalar_one_or_none()

    async def email_taken(self, email: str) -> bool:
        result = await self.db.execute(select(User.id).where(User.email == email))
        return result.scalar_one_or_none() is not None

    async def provision(self, keycloak_id: str, email: str, full_name: str) -> User:
        """Create the local user with default settings and categories."""
        user = User(keycloak_id=keycloak_id, email=email, full_name=full_name or email)
        self.db.add(user)
        await self.db.flush()

        self.db.add(UserSettings(user_id=user.id))
        await CategoryService(self.db).provision_defaults(user)
        await self.db.flush()
        await self.db.refresh(user)

        logger.info("user_provisioned", user_id=user.id, keycloak_id=keycloak_id, email=email)
        return user

    async def register(self, data: UserRegister, identity: KeycloakAdminClient) -> User:
        """Create the identity in Keycloak, then the local account.

        Failures are reported as-is; nothing is retried.
        """
        if await self.email_taken(data.email):
            raise AlreadyExistsError(detail="Email already in use")

        keycloak_id = await identity.create_user(
            email=data.email,
            full_name=data.full_name,
            password=data.password,
        )
        return await self.provision(keycloak_id, data.email, data.full_name)

    async def update_profile(self, user: User, data: UserUpdate) -> User:
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        for key, value in update_data.items():
            setattr(user, key, value)
        await self.db.flush()
        await self.db.refresh(user)
        return user

    async def get_settings(self, user: User) -> UserSettings:
        """Return the user's settings, creating the defaults if missing."""
        result = await self.db.execute(
            select(UserSettings).where(UserSettings.user_id == user.id)
        )
        user_settings = result.scalar_one_or_none()
        if user_settings is None:
            user_settings = UserSettings(user_id=user.id)
            self.db.add(user_settings)
            await self.db.flush()
            await self.db.refresh(user_settings)
        return user_settings

    async def update_settings(self, user: User, data: UserSettingsUpdate) -> UserSettings:
        user_settings = await self.get_settings(user)
        for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(user_settings, key, value)
        await self.db.flush()
        await self.db.refresh(user_settings)
        return user_settings
