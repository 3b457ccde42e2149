"""
Region store: CRUD on the `regions` table.

Rules:
- `code` must be unique; checked before insert and before an update that
  actually changes the code.
- A region cannot be deleted while any HyroxBox still references it.

The existence checks and the following write are separate statements and
are not wrapped in one transaction.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlmodel import Session, select

from hyroxbox.core.errors import (
    DuplicateRegionCodeError,
    RegionInUseError,
    RegionNotFoundError,
)
from hyroxbox.db.models import HyroxBox, Region, RegionCreate, RegionUpdate
from hyroxbox.db.models.region import utcnow

log = logging.getLogger(__name__)


def list_regions(session: Session) -> List[Region]:
    """All regions ordered by name."""
    return list(session.exec(select(Region).order_by(Region.name)).all())


def get_region(session: Session, region_id: int) -> Optional[Region]:
    return session.get(Region, region_id)


def list_regions_with_box_count(session: Session) -> List[Tuple[Region, int]]:
    """
    Return (region, box_count) pairs ordered by region name.

    Uses a LEFT JOIN so regions without boxes are reported with 0.
    """
    stmt = (
        select(Region, func.count(HyroxBox.id))
        .outerjoin(HyroxBox, HyroxBox.region_id == Region.id)
        .group_by(Region.id)
        .order_by(Region.name)
    )
    return [(region, int(count or 0)) for region, count in session.exec(stmt).all()]


def _code_taken(session: Session, code: str) -> bool:
    return session.exec(select(Region.id).where(Region.code == code).limit(1)).first() is not None


def create_region(session: Session, data: RegionCreate) -> Region:
    if _code_taken(session, data.code):
        log.warning("Rejected region create: code %r already exists", data.code)
        raise DuplicateRegionCodeError()

    region = Region.model_validate(data)
    region.updated_at = utcnow()
    session.add(region)
    session.commit()
    session.refresh(region)

    log.info("Created region id=%s code=%s", region.id, region.code)
    return region


def update_region(session: Session, region_id: int, data: RegionUpdate) -> Region:
    region = session.get(Region, region_id)
    if not region:
        raise RegionNotFoundError()

    changes = data.model_dump(exclude_unset=True)
    # name/code are NOT NULL; an explicit None means "leave as is"
    for key in ("name", "code"):
        if key in changes and changes[key] is None:
            changes.pop(key)

    new_code = changes.get("code")
    if new_code and new_code != region.code and _code_taken(session, new_code):
        log.warning(
            "Rejected region update id=%s: code %r already exists", region_id, new_code
        )
        raise DuplicateRegionCodeError()

    region.sqlmodel_update(changes)
    region.updated_at = utcnow()
    session.add(region)
    session.commit()
    session.refresh(region)

    log.info("Updated region id=%s fields=%s", region.id, sorted(changes))
    return region


def delete_region(session: Session, region_id: int) -> None:
    region = session.get(Region, region_id)
    if not region:
        raise RegionNotFoundError()

    has_boxes = (
        session.exec(
            select(HyroxBox.id).where(HyroxBox.region_id == region_id).limit(1)
        ).first()
        is not None
    )
    if has_boxes:
        log.warning("Rejected region delete id=%s: boxes still reference it", region_id)
        raise RegionInUseError()

    session.delete(region)
    session.commit()
    log.info("Deleted region id=%s", region_id)


def count_regions(session: Session) -> int:
    return int(session.exec(select(func.count(Region.id))).one())
