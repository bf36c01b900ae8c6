"""Shared building blocks for ExecuTask data models."""

from datetime import datetime, timezone
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime to naive UTC (the storage convention).

    Naive values are assumed to already be UTC.
    """
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class ApiModel(BaseModel):
    """Base for every model that crosses the HTTP boundary (camelCase on the wire)."""

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
        populate_by_name = True
        alias_generator = to_camel


class Record(ApiModel):
    """Fields shared by every persisted entity.

    Assigned exclusively by the data-access layer.
    """

    id: str = Field(..., description="Unique identifier (UUID v4)")
    created_at: datetime = Field(..., description="Creation timestamp (UTC)")
    updated_at: datetime = Field(..., description="Last modification timestamp (UTC)")


class Page(ApiModel, Generic[T]):
    """One page of a paginated listing."""

    data: List[T]
    page: int
    limit: int
    total: int
    total_pages: int
