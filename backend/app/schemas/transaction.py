"""Transaction schemas for request/response validation."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from app.models.transaction import TransactionType


class TransactionCreate(BaseModel):
    date: date
    description: str = Field(min_length=1, max_length=500)
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    type: TransactionType = TransactionType.EXPENSE
    category_id: int | None = None
    notes: str | None = None

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Description must not be blank")
        return v.strip()


class TransactionResponse(BaseModel):
    id: int
    date: date
    description: str
    amount: Decimal
    type: TransactionType
    category_id: int | None = None
    category_name: str | None = None
    category_color: str | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
