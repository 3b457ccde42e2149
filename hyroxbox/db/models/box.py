from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel

from .region import utcnow


class HyroxBoxBase(SQLModel):
    name: str = Field(max_length=100, min_length=1)
    description: Optional[str] = Field(
        default=None, sa_column=Column(Text, nullable=True)
    )
    address: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    contact_info: Optional[str] = Field(default=None, max_length=100)
    instagram_id: Optional[str] = Field(default=None, max_length=255)

    # Prices are whole currency units (KRW), no minor units
    price: Optional[int] = Field(default=None, ge=0)
    non_member_price: Optional[int] = Field(default=None, ge=0)

    # Higher is more popular; drives the default listing order
    popularity: int = Field(default=0)

    # Comma-delimited free text, e.g. "SkiErg, Sled, Rowing"
    features: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    naver_map_url: Optional[str] = Field(default=None, max_length=512)

    region_id: int = Field(foreign_key="regions.id")


class HyroxBox(HyroxBoxBase, table=True):
    """
    A training facility listed on the site.

    Notes:
    - Many boxes per region (`region_id` is NOT unique; an older schema
      had a unique FK, see db/migrations.py).
    - Deleting a box never cascades anywhere; it is the leaf entity.
    """

    __tablename__ = "hyroxbox"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100, index=True)
    popularity: int = Field(default=0, nullable=False, index=True)
    region_id: int = Field(foreign_key="regions.id", index=True, nullable=False)

    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)

    @property
    def feature_list(self) -> List[str]:
        if not self.features:
            return []
        return [f.strip() for f in self.features.split(",") if f.strip()]


class HyroxBoxCreate(HyroxBoxBase):
    """Payload accepted by the admin create form."""


class HyroxBoxUpdate(SQLModel):
    """Partial update; only fields that were sent are applied."""

    name: Optional[str] = Field(default=None, max_length=100, min_length=1)
    description: Optional[str] = None
    address: Optional[str] = None
    contact_info: Optional[str] = Field(default=None, max_length=100)
    instagram_id: Optional[str] = Field(default=None, max_length=255)
    price: Optional[int] = Field(default=None, ge=0)
    non_member_price: Optional[int] = Field(default=None, ge=0)
    popularity: Optional[int] = None
    features: Optional[str] = None
    naver_map_url: Optional[str] = Field(default=None, max_length=512)
    region_id: Optional[int] = None
