"""Category data models for ExecuTask."""

from typing import Optional

from pydantic import Field, field_validator

from executask.models.base import ApiModel, Record
from executask.models.constants import (
    CATEGORY_DESCRIPTION_MAX_LENGTH,
    CATEGORY_NAME_MAX_LENGTH,
    DEFAULT_CATEGORY_COLOR,
)

HEX_COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"


class Category(Record):
    """A user-owned label that todos may reference."""

    user_id: str = Field(..., description="Owning principal")
    name: str
    color: str = DEFAULT_CATEGORY_COLOR
    description: Optional[str] = None
    icon: Optional[str] = None


class CreateCategoryPayload(ApiModel):
    name: str = Field(..., min_length=1, max_length=CATEGORY_NAME_MAX_LENGTH)
    color: str = Field(DEFAULT_CATEGORY_COLOR, pattern=HEX_COLOR_PATTERN)
    description: Optional[str] = Field(None, max_length=CATEGORY_DESCRIPTION_MAX_LENGTH)
    icon: Optional[str] = Field(None, max_length=50)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class UpdateCategoryPayload(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=CATEGORY_NAME_MAX_LENGTH)
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    description: Optional[str] = Field(None, max_length=CATEGORY_DESCRIPTION_MAX_LENGTH)
    icon: Optional[str] = Field(None, max_length=50)

    @field_validator("name", "color")
    @classmethod
    def _not_null(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("must not be null")
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v
