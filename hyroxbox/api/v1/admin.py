"""
Admin endpoints:

- Dashboard (box/region totals, boxes per region).
- Region management (list, create, update, delete).
- HyroxBox management (list, create, update, delete).

Mutations are plain form POSTs. The admin pages submit them via fetch with
`X-Requested-With: XMLHttpRequest` and get JSON back; a regular form submit
is redirected to the list page instead. Store rejections are returned with
their message unchanged so the page can show it as-is.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Form, HTTPException, Path, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from pydantic import ValidationError
from sqlmodel import Session

from hyroxbox.core.deps import get_current_user, get_session, require_admin, templates
from hyroxbox.core.errors import StoreError
from hyroxbox.db.models import (
    HyroxBox,
    HyroxBoxCreate,
    HyroxBoxUpdate,
    Region,
    RegionCreate,
    RegionUpdate,
)
from hyroxbox.services import box_store, region_store
from hyroxbox.services.auth_provider import AuthUser
from hyroxbox.services.listing import MAX_ID

router = APIRouter()

# Global flag controlling visibility in Swagger docs
INCLUDE_IN_SCHEMA: bool = False


# ----------------------------- Helpers -----------------------------


def _is_ajax(request: Request) -> bool:
    """Detect if request came from frontend fetch (AJAX)."""
    return request.headers.get("X-Requested-With") == "XMLHttpRequest"


def _fail(request: Request, message: str, status_code: int = 400):
    """JSON error for AJAX callers, HTTPException for plain form posts."""
    if _is_ajax(request):
        return JSONResponse(
            status_code=status_code, content={"ok": False, "error": message}
        )
    raise HTTPException(status_code=status_code, detail=message)


def _validation_message(exc: ValidationError) -> str:
    first = exc.errors()[0]
    field = ".".join(str(p) for p in first.get("loc", ()))
    return f"{field}: {first.get('msg')}" if field else str(first.get("msg"))


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _parse_optional_int(value: Optional[str], label: str) -> Optional[int]:
    """
    Parse an optional whole-number form field.

    Raises:
        ValueError with a readable message if the value is not an integer
        or does not fit a 64-bit column.
    """
    value = _blank_to_none(value)
    if value is None:
        return None
    try:
        parsed = int(value)
    except ValueError:
        raise ValueError(f"{label} must be a whole number")
    if not -MAX_ID - 1 <= parsed <= MAX_ID:
        raise ValueError(f"{label} is out of range")
    return parsed


def _region_payload(region: Region) -> dict[str, Any]:
    return region.model_dump(mode="json")


def _box_payload(box: HyroxBox, region: Optional[Region] = None) -> dict[str, Any]:
    payload = box.model_dump(mode="json")
    payload["region_name"] = region.name if region else None
    return payload


# --------------------------- Admin dashboard ---------------------------


@router.get("/admin", response_class=HTMLResponse, include_in_schema=INCLUDE_IN_SCHEMA)
def admin_dashboard(
    request: Request,
    session: Session = Depends(get_session),
    current: AuthUser = Depends(get_current_user),
):
    """
    Render admin dashboard: totals, average boxes per region, per-region counts.
    """
    require_admin(current)

    total_boxes = box_store.count_boxes(session)
    total_regions = region_store.count_regions(session)
    regions_with_count = region_store.list_regions_with_box_count(session)

    average = f"{total_boxes / total_regions:.1f}" if total_regions > 0 else "0"

    context = {
        "user": current,
        "stats": {
            "boxes": total_boxes,
            "regions": total_regions,
            "average": average,
        },
        "regions_with_count": regions_with_count,
    }
    return templates.TemplateResponse(request, "admin/dashboard.html", context)


# ------------------------------ Regions ------------------------------


@router.get(
    "/admin/regions", response_class=HTMLResponse, include_in_schema=INCLUDE_IN_SCHEMA
)
def admin_regions_page(
    request: Request,
    session: Session = Depends(get_session),
    current: AuthUser = Depends(get_current_user),
):
    """Region table with create/edit modal and delete confirmation."""
    require_admin(current)

    regions = region_store.list_regions(session)
    return templates.TemplateResponse(
        request,
        "admin/regions.html",
        {
            "user": current,
            "regions": regions,
            "regions_json": [_region_payload(r) for r in regions],
        },
    )


@router.post("/admin/regions/create", include_in_schema=INCLUDE_IN_SCHEMA)
def admin_create_region(
    request: Request,
    name: str = Form(...),
    code: str = Form(...),
    description: str = Form(""),
    session: Session = Depends(get_session),
    current: AuthUser = Depends(get_current_user),
):
    """
    Create a new region (admin-only).

    - Non-AJAX -> redirect.
    - AJAX     -> JSON with new region payload.
    """
    require_admin(current)

    try:
        data = RegionCreate(
            name=name.strip(),
            code=code.strip(),
            description=_blank_to_none(description),
        )
    except ValidationError as exc:
        return _fail(request, _validation_message(exc))

    try:
        region = region_store.create_region(session, data)
    except StoreError as exc:
        return _fail(request, exc.message, exc.status_code)

    if not _is_ajax(request):
        return RedirectResponse(url="/admin/regions", status_code=303)
    return JSONResponse({"ok": True, "region": _region_payload(region)})


@router.post("/admin/regions/{region_id}/update", include_in_schema=INCLUDE_IN_SCHEMA)
def admin_update_region(
    request: Request,
    region_id: int = Path(..., le=MAX_ID),
    name: str = Form(...),
    code: str = Form(...),
    description: str = Form(""),
    session: Session = Depends(get_session),
    current: AuthUser = Depends(get_current_user),
):
    """Update name/code/description of a region (admin-only)."""
    require_admin(current)

    try:
        data = RegionUpdate(
            name=name.strip(),
            code=code.strip(),
            description=_blank_to_none(description),
        )
    except ValidationError as exc:
        return _fail(request, _validation_message(exc))

    try:
        region = region_store.update_region(session, region_id, data)
    except StoreError as exc:
        return _fail(request, exc.message, exc.status_code)

    if not _is_ajax(request):
        return RedirectResponse(url="/admin/regions", status_code=303)
    return JSONResponse({"ok": True, "region": _region_payload(region)})


@router.post("/admin/regions/{region_id}/delete", include_in_schema=INCLUDE_IN_SCHEMA)
def admin_delete_region(
    request: Request,
    region_id: int = Path(..., le=MAX_ID),
    session: Session = Depends(get_session),
    current: AuthUser = Depends(get_current_user),
):
    """
    Hard-delete a region (admin-only).

    Safety rules:
    - You cannot delete a region that still has boxes.
    """
    require_admin(current)

    try:
        region_store.delete_region(session, region_id)
    except StoreError as exc:
        return _fail(request, exc.message, exc.status_code)

    if not _is_ajax(request):
        return RedirectResponse(url="/admin/regions", status_code=303)
    return JSONResponse({"ok": True})


# ------------------------------ Boxes ------------------------------


def _box_form_values(
    name: str,
    region_id: str,
    description: str,
    address: str,
    contact_info: str,
    instagram_id: str,
    price: str,
    non_member_price: str,
    popularity: str,
    features: str,
    naver_map_url: str,
) -> dict[str, Any]:
    """
    Normalize raw box form fields into model kwargs.

    Raises:
        ValueError for non-integer numbers or a missing region.
    """
    parsed_region = _parse_optional_int(region_id, "Region")
    if parsed_region is None:
        raise ValueError("Region is required")

    return {
        "name": name.strip(),
        "region_id": parsed_region,
        "description": _blank_to_none(description),
        "address": _blank_to_none(address),
        "contact_info": _blank_to_none(contact_info),
        "instagram_id": _blank_to_none(instagram_id),
        "price": _parse_optional_int(price, "Price"),
        "non_member_price": _parse_optional_int(non_member_price, "Non-member price"),
        "popularity": _parse_optional_int(popularity, "Popularity") or 0,
        "features": _blank_to_none(features),
        "naver_map_url": _blank_to_none(naver_map_url),
    }


@router.get(
    "/admin/boxes", response_class=HTMLResponse, include_in_schema=INCLUDE_IN_SCHEMA
)
def admin_boxes_page(
    request: Request,
    session: Session = Depends(get_session),
    current: AuthUser = Depends(get_current_user),
):
    """Box table (client-side search) with create/edit modal and delete confirmation."""
    require_admin(current)

    rows = box_store.list_boxes(session)
    regions = region_store.list_regions(session)

    return templates.TemplateResponse(
        request,
        "admin/boxes.html",
        {
            "user": current,
            "rows": rows,
            "regions": regions,
            "boxes_json": [_box_payload(box, region) for box, region in rows],
        },
    )


@router.post("/admin/boxes/create", include_in_schema=INCLUDE_IN_SCHEMA)
def admin_create_box(
    request: Request,
    name: str = Form(...),
    region_id: str = Form(""),
    description: str = Form(""),
    address: str = Form(""),
    contact_info: str = Form(""),
    instagram_id: str = Form(""),
    price: str = Form(""),
    non_member_price: str = Form(""),
    popularity: str = Form(""),
    features: str = Form(""),
    naver_map_url: str = Form(""),
    session: Session = Depends(get_session),
    current: AuthUser = Depends(get_current_user),
):
    """Create a new box (admin-only); the region must exist."""
    require_admin(current)

    try:
        values = _box_form_values(
            name, region_id, description, address, contact_info, instagram_id,
            price, non_member_price, popularity, features, naver_map_url,
        )
        data = HyroxBoxCreate(**values)
    except ValidationError as exc:
        return _fail(request, _validation_message(exc))
    except ValueError as exc:
        return _fail(request, str(exc))

    try:
        box = box_store.create_box(session, data)
    except StoreError as exc:
        return _fail(request, exc.message, exc.status_code)

    if not _is_ajax(request):
        return RedirectResponse(url="/admin/boxes", status_code=303)

    region = region_store.get_region(session, box.region_id)
    return JSONResponse({"ok": True, "box": _box_payload(box, region)})


@router.post("/admin/boxes/{box_id}/update", include_in_schema=INCLUDE_IN_SCHEMA)
def admin_update_box(
    request: Request,
    box_id: int = Path(..., le=MAX_ID),
    name: str = Form(...),
    region_id: str = Form(""),
    description: str = Form(""),
    address: str = Form(""),
    contact_info: str = Form(""),
    instagram_id: str = Form(""),
    price: str = Form(""),
    non_member_price: str = Form(""),
    popularity: str = Form(""),
    features: str = Form(""),
    naver_map_url: str = Form(""),
    session: Session = Depends(get_session),
    current: AuthUser = Depends(get_current_user),
):
    """Update a box (admin-only); a changed region must exist."""
    require_admin(current)

    try:
        values = _box_form_values(
            name, region_id, description, address, contact_info, instagram_id,
            price, non_member_price, popularity, features, naver_map_url,
        )
        data = HyroxBoxUpdate(**values)
    except ValidationError as exc:
        return _fail(request, _validation_message(exc))
    except ValueError as exc:
        return _fail(request, str(exc))

    try:
        box = box_store.update_box(session, box_id, data)
    except StoreError as exc:
        return _fail(request, exc.message, exc.status_code)

    if not _is_ajax(request):
        return RedirectResponse(url="/admin/boxes", status_code=303)

    region = region_store.get_region(session, box.region_id)
    return JSONResponse({"ok": True, "box": _box_payload(box, region)})


@router.post("/admin/boxes/{box_id}/delete", include_in_schema=INCLUDE_IN_SCHEMA)
def admin_delete_box(
    request: Request,
    box_id: int = Path(..., le=MAX_ID),
    session: Session = Depends(get_session),
    current: AuthUser = Depends(get_current_user),
):
    """Hard-delete a box (admin-only)."""
    require_admin(current)

    try:
        box_store.delete_box(session, box_id)
    except StoreError as exc:
        return _fail(request, exc.message, exc.status_code)

    if not _is_ajax(request):
        return RedirectResponse(url="/admin/boxes", status_code=303)
    return JSONResponse({"ok": True})
