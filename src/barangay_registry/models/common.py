"""Shared pydantic base classes for registry entities."""

import math
from datetime import datetime, timezone
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utc_now() -> datetime:
    """Current UTC time, timezone aware."""
    return datetime.now(timezone.utc)


class RegistryModel(BaseModel):
    """Base for every stored entity.

    Attributes are snake_case in Python; aliases are the camelCase field
    names written to the Redis hash. Either spelling is accepted on input.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(description="Type-prefixed identifier, e.g. hh:<uuid>")
    category_tags: list[str] = Field(default_factory=list, alias="categoryTags")
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    updated_at: datetime = Field(default_factory=utc_now, alias="updatedAt")

    @field_validator("category_tags", mode="before")
    @classmethod
    def _tags_default(cls, v):
        return [] if v is None else v


T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One page of a paginated listing."""

    model_config = ConfigDict(populate_by_name=True)

    items: list[T]
    total: int
    page: int
    limit: int
    total_pages: int = Field(alias="totalPages")

    @classmethod
    def build(cls, items: list[T], total: int, page: int, limit: int) -> "Page[T]":
        return cls(
            items=items,
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit),
        )
