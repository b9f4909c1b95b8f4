"""Category schemas."""

from pydantic import BaseModel, Field, field_validator

HEX_COLOR = "^#[0-9A-Fa-f]{6}$"


def _clean_name(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Name must not be blank")
    return v


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    icon: str | None = Field(None, max_length=50)
    color: str | None = Field(None, pattern=HEX_COLOR)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _clean_name(v)


class CategoryUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    icon: str | None = Field(None, max_length=50)
    color: str | None = Field(None, pattern=HEX_COLOR)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        return _clean_name(v)


class CategoryResponse(BaseModel):
    id: int
    name: str
    icon: str | None
    color: str | None

    model_config = {"from_attributes": True}
