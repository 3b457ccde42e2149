"""
Box store: CRUD and filtered listing on the `hyroxbox` table.

Listing joins the owning region for display, applies an optional region
filter and an optional case-insensitive substring search over
name/address/features, and orders by popularity (highest first).
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple, Union

from sqlalchemy import func, or_
from sqlmodel import Session, select

from hyroxbox.core.errors import BoxNotFoundError, InvalidRegionReferenceError
from hyroxbox.db.models import HyroxBox, HyroxBoxCreate, HyroxBoxUpdate, Region
from hyroxbox.db.models.region import utcnow

log = logging.getLogger(__name__)

BoxRow = Tuple[HyroxBox, Optional[Region]]

# Columns that cannot be NULL; an explicit None in an update is ignored
_REQUIRED_FIELDS = ("name", "popularity", "region_id")


def _normalize_region_ids(
    region_ids: Union[int, Iterable[int], None],
) -> List[int]:
    if region_ids is None:
        return []
    if isinstance(region_ids, int):
        return [region_ids]
    return sorted({int(r) for r in region_ids})


def list_boxes(
    session: Session,
    region_ids: Union[int, Iterable[int], None] = None,
    search: Optional[str] = None,
    offset: int = 0,
    limit: Optional[int] = None,
) -> List[BoxRow]:
    """
    Return (box, region) rows ordered by popularity descending.

    - `region_ids`: one id or several; boxes in any of them match.
    - `search`: case-insensitive substring of name, address or features.
    - `offset`/`limit`: plain SQL paging; the public listing fetches
      everything and slices in memory instead.
    """
    stmt = select(HyroxBox, Region).outerjoin(Region, Region.id == HyroxBox.region_id)

    ids = _normalize_region_ids(region_ids)
    if ids:
        stmt = stmt.where(HyroxBox.region_id.in_(ids))  # type: ignore[attr-defined]

    term = (search or "").strip()
    if term:
        stmt = stmt.where(
            or_(
                HyroxBox.name.icontains(term, autoescape=True),  # type: ignore[attr-defined]
                HyroxBox.address.icontains(term, autoescape=True),  # type: ignore[union-attr]
                HyroxBox.features.icontains(term, autoescape=True),  # type: ignore[union-attr]
            )
        )

    stmt = stmt.order_by(HyroxBox.popularity.desc(), HyroxBox.id)  # type: ignore[attr-defined]

    if offset:
        stmt = stmt.offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)

    return [(box, region) for box, region in session.exec(stmt).all()]


def get_box(session: Session, box_id: int) -> Optional[BoxRow]:
    stmt = (
        select(HyroxBox, Region)
        .outerjoin(Region, Region.id == HyroxBox.region_id)
        .where(HyroxBox.id == box_id)
        .limit(1)
    )
    row = session.exec(stmt).first()
    if row is None:
        return None
    box, region = row
    return box, region


def _ensure_region_exists(session: Session, region_id: int) -> None:
    if session.get(Region, region_id) is None:
        log.warning("Rejected box write: region id=%s does not exist", region_id)
        raise InvalidRegionReferenceError()


def create_box(session: Session, data: HyroxBoxCreate) -> HyroxBox:
    _ensure_region_exists(session, data.region_id)

    box = HyroxBox.model_validate(data)
    box.updated_at = utcnow()
    session.add(box)
    session.commit()
    session.refresh(box)

    log.info("Created box id=%s region_id=%s", box.id, box.region_id)
    return box


def update_box(session: Session, box_id: int, data: HyroxBoxUpdate) -> HyroxBox:
    box = session.get(HyroxBox, box_id)
    if not box:
        raise BoxNotFoundError()

    changes = data.model_dump(exclude_unset=True)
    for key in _REQUIRED_FIELDS:
        if key in changes and changes[key] is None:
            changes.pop(key)

    new_region_id = changes.get("region_id")
    if new_region_id is not None and new_region_id != box.region_id:
        _ensure_region_exists(session, new_region_id)

    box.sqlmodel_update(changes)
    box.updated_at = utcnow()
    session.add(box)
    session.commit()
    session.refresh(box)

    log.info("Updated box id=%s fields=%s", box.id, sorted(changes))
    return box


def delete_box(session: Session, box_id: int) -> None:
    box = session.get(HyroxBox, box_id)
    if not box:
        raise BoxNotFoundError()

    session.delete(box)
    session.commit()
    log.info("Deleted box id=%s", box_id)


def count_boxes(session: Session, region_id: Optional[int] = None) -> int:
    stmt = select(func.count(HyroxBox.id))
    if region_id:
        stmt = stmt.where(HyroxBox.region_id == region_id)
    return int(session.exec(stmt).one())
