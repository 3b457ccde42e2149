"""
Public page routes.

Listing page (`/`):
- Filters come from the query string (regions, search, page).
- All matching boxes are fetched, then sliced in memory for the page.
- Regions are loaded separately for the sidebar filter.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request
from fastapi.responses import HTMLResponse
from sqlmodel import Session

from hyroxbox.core.config import get_settings
from hyroxbox.core.deps import get_current_user_optional, get_session, templates
from hyroxbox.core.pagination import paginate
from hyroxbox.services import box_store, region_store
from hyroxbox.services.auth_provider import AuthUser
from hyroxbox.services.listing import MAX_ID, ListingQuery

router = APIRouter()


# ------------------------------ Listing page ------------------------------
@router.get("/", response_class=HTMLResponse)
def index_page(
    request: Request,
    session: Session = Depends(get_session),
    user: Optional[AuthUser] = Depends(get_current_user_optional),
    # Raw strings so malformed values are ignored instead of 422
    regions: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    page: Optional[str] = Query(None),
):
    """
    Render the box directory with sidebar filters and pagination.

    Page size comes from settings (8 by default); a page past the end is
    clamped to the last page.
    """
    query = ListingQuery.from_params(regions=regions, search=search, page=page)

    rows = box_store.list_boxes(
        session, region_ids=query.region_ids, search=query.search or None
    )
    all_regions = region_store.list_regions(session)

    result = paginate(rows, page=query.page, page_size=get_settings().PAGE_SIZE)
    query.page = result.page

    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "user": user,
            "query": query,
            "page": result,
            "regions": all_regions,
            "selected_region_ids": set(query.region_ids),
        },
    )


# ------------------------------ Box detail ------------------------------
@router.get("/boxes/{box_id}", response_class=HTMLResponse)
def box_detail_page(
    request: Request,
    box_id: int = Path(..., le=MAX_ID),
    session: Session = Depends(get_session),
    user: Optional[AuthUser] = Depends(get_current_user_optional),
):
    """Single box card with its full description."""
    row = box_store.get_box(session, box_id)
    if row is None:
        raise HTTPException(status_code=404, detail="HyroxBox not found")

    box, region = row
    return templates.TemplateResponse(
        request,
        "box_detail.html",
        {"user": user, "box": box, "region": region},
    )
