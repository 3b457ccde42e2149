from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RegionBase(SQLModel):
    name: str = Field(max_length=50, min_length=1)
    # Short code such as "SEL" or "BUS"
    code: str = Field(max_length=10, min_length=1)
    description: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
    )


class Region(RegionBase, table=True):
    """
    Geographical region used to group and filter boxes.

    Notes:
    - `code` is unique at DB level and re-checked by the region store so
      the admin form gets a readable message instead of an IntegrityError.
    - A region cannot be deleted while any HyroxBox still points at it.
    """

    __tablename__ = "regions"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=50, index=True)
    code: str = Field(max_length=10, unique=True, index=True)

    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)


class RegionCreate(RegionBase):
    """Payload accepted by the admin create form."""


class RegionUpdate(SQLModel):
    """Partial update; only fields that were sent are applied."""

    name: Optional[str] = Field(default=None, max_length=50, min_length=1)
    code: Optional[str] = Field(default=None, max_length=10, min_length=1)
    description: Optional[str] = None
