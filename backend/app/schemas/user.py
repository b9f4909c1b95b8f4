"""User schemas for request/response validation."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, field_validator


class UserRegister(BaseModel):
    full_name: str
    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters long")
        return v

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v: str) -> str:
        if len(v.strip()) < 2:
            raise ValueError("Name must be at least 2 characters long")
        return v.strip()


class UserResponse(BaseModel):
    id: int
    email: str
    full_name: str
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class UserUpdate(BaseModel):
    full_name: str | None = None

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v: str | None) -> str | None:
        if v is not None and len(v.strip()) < 2:
            raise ValueError("Name must be at least 2 characters long")
        return v.strip() if v is not None else v


class RegisterResponse(BaseModel):
    """Returned on successful account creation."""

    user: UserResponse
    message: str = "User registered successfully"
    is_new_user: bool = True


class UserSettingsResponse(BaseModel):
    theme: str
    currency: str
    notifications_enabled: bool

    model_config = {"from_attributes": True}


class UserSettingsUpdate(BaseModel):
    theme: Literal["light", "dark"] | None = None
    currency: str | None = Field(None, pattern="^[A-Z]{3}$")
    notifications_enabled: bool | None = None
