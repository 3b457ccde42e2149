from hyroxbox.core.config import get_settings
from hyroxbox.db.models import HyroxBox, Region
from hyroxbox.services import box_store, region_store

from .conftest import make_box

AJAX = {"X-Requested-With": "XMLHttpRequest"}


def _box_form(region_id, **overrides):
    form = {
        "name": "Hyrox Gangnam",
        "region_id": str(region_id),
        "description": "",
        "address": "서울 강남구",
        "contact_info": "",
        "instagram_id": "hyrox_gangnam",
        "price": "250000",
        "non_member_price": "",
        "popularity": "",
        "features": "SkiErg, Sled",
        "naver_map_url": "",
    }
    form.update(overrides)
    return form


# ------------------------------ access ------------------------------


def test_admin_requires_login(anon_client):
    res = anon_client.get("/admin", follow_redirects=False)
    assert res.status_code == 303
    assert res.headers["location"] == "/auth/login?next=/admin"


def test_admin_ajax_requires_login(anon_client):
    res = anon_client.post("/admin/regions/create", data={"name": "x", "code": "X"}, headers=AJAX)
    assert res.status_code == 401
    assert res.json() == {"ok": False, "error": "Not logged in"}


def test_admin_allow_list(client, monkeypatch):
    monkeypatch.setattr(get_settings(), "ADMIN_EMAILS", "boss@example.com")
    res = client.get("/admin", headers=AJAX)
    assert res.status_code == 403

    monkeypatch.setattr(get_settings(), "ADMIN_EMAILS", "Admin@Example.com, boss@example.com")
    assert client.get("/admin").status_code == 200


# ------------------------------ dashboard ------------------------------


def test_dashboard_stats(client, session, seoul, busan):
    make_box(session, seoul, "A")
    make_box(session, seoul, "B")
    make_box(session, busan, "C")

    res = client.get("/admin")
    assert res.status_code == 200
    assert '<strong id="stat-boxes">3</strong>' in res.text
    assert '<strong id="stat-regions">2</strong>' in res.text
    assert '<strong id="stat-average">1.5</strong>' in res.text


def test_dashboard_without_regions(client):
    res = client.get("/admin")
    assert res.status_code == 200
    assert '<strong id="stat-average">0</strong>' in res.text
    assert "등록된 지역이 없습니다" in res.text


# ------------------------------ regions ------------------------------


def test_regions_page_lists_regions(client, seoul):
    res = client.get("/admin/regions")
    assert res.status_code == 200
    assert "서울" in res.text
    assert "SEL" in res.text


def test_create_region_ajax(client, session):
    res = client.post(
        "/admin/regions/create",
        data={"name": "서울", "code": "SEL", "description": ""},
        headers=AJAX,
    )
    assert res.status_code == 200
    body = res.json()
    assert body["ok"] is True
    assert body["region"]["code"] == "SEL"
    assert body["region"]["description"] is None
    assert region_store.count_regions(session) == 1


def test_create_region_form_post_redirects(client):
    res = client.post(
        "/admin/regions/create",
        data={"name": "부산", "code": "BUS"},
        follow_redirects=False,
    )
    assert res.status_code == 303
    assert res.headers["location"] == "/admin/regions"


def test_create_region_duplicate_code(client, seoul):
    res = client.post(
        "/admin/regions/create", data={"name": "Other", "code": "SEL"}, headers=AJAX
    )
    assert res.status_code == 400
    assert res.json() == {"ok": False, "error": "Region code already exists"}


def test_create_region_too_long_code(client, session):
    res = client.post(
        "/admin/regions/create",
        data={"name": "Seoul", "code": "X" * 11},
        headers=AJAX,
    )
    assert res.status_code == 400
    assert res.json()["ok"] is False
    assert region_store.count_regions(session) == 0


def test_update_region(client, session, seoul):
    res = client.post(
        f"/admin/regions/{seoul.id}/update",
        data={"name": "서울특별시", "code": "SEL", "description": "capital"},
        headers=AJAX,
    )
    assert res.status_code == 200
    assert res.json()["region"]["name"] == "서울특별시"

    session.refresh(seoul)
    assert seoul.description == "capital"


def test_update_missing_region(client):
    res = client.post(
        "/admin/regions/999/update", data={"name": "x", "code": "X"}, headers=AJAX
    )
    assert res.status_code == 404
    assert res.json()["error"] == "Region not found"


def test_delete_region(client, session, seoul):
    res = client.post(f"/admin/regions/{seoul.id}/delete", headers=AJAX)
    assert res.json() == {"ok": True}
    assert region_store.get_region(session, seoul.id) is None


def test_delete_region_in_use(client, session, seoul):
    make_box(session, seoul, "Box")

    res = client.post(f"/admin/regions/{seoul.id}/delete", headers=AJAX)
    assert res.status_code == 400
    assert res.json()["error"] == (
        "Cannot delete region with associated HyroxBoxes. "
        "Please delete or reassign them first."
    )
    assert session.get(Region, seoul.id) is not None


# ------------------------------ boxes ------------------------------


def test_boxes_page(client, session, seoul):
    make_box(session, seoul, "Hyrox Gangnam", price=250000)

    res = client.get("/admin/boxes")
    assert res.status_code == 200
    assert "Hyrox Gangnam" in res.text
    assert "250,000원" in res.text


def test_create_box_ajax(client, session, seoul):
    res = client.post("/admin/boxes/create", data=_box_form(seoul.id), headers=AJAX)
    assert res.status_code == 200
    box = res.json()["box"]
    assert box["name"] == "Hyrox Gangnam"
    assert box["region_name"] == "서울"
    assert box["price"] == 250000
    assert box["popularity"] == 0
    assert box["contact_info"] is None
    assert box_store.count_boxes(session) == 1


def test_create_box_requires_region(client, session):
    res = client.post("/admin/boxes/create", data=_box_form(""), headers=AJAX)
    assert res.status_code == 400
    assert res.json()["error"] == "Region is required"


def test_create_box_unknown_region(client, session):
    res = client.post("/admin/boxes/create", data=_box_form(404), headers=AJAX)
    assert res.status_code == 400
    assert res.json()["error"] == "Region not found"
    assert box_store.count_boxes(session) == 0


def test_create_box_rejects_non_numeric_price(client, seoul):
    res = client.post(
        "/admin/boxes/create", data=_box_form(seoul.id, price="cheap"), headers=AJAX
    )
    assert res.status_code == 400
    assert res.json()["error"] == "Price must be a whole number"


def test_create_box_rejects_negative_price(client, session, seoul):
    res = client.post(
        "/admin/boxes/create", data=_box_form(seoul.id, price="-1"), headers=AJAX
    )
    assert res.status_code == 400
    assert res.json()["ok"] is False
    assert box_store.count_boxes(session) == 0


def test_update_box(client, session, seoul, busan):
    box = make_box(session, seoul, "Old", popularity=5)

    res = client.post(
        f"/admin/boxes/{box.id}/update",
        data=_box_form(busan.id, name="Moved", popularity="12"),
        headers=AJAX,
    )
    assert res.status_code == 200
    payload = res.json()["box"]
    assert payload["region_name"] == "부산"
    assert payload["popularity"] == 12

    session.refresh(box)
    assert box.name == "Moved"
    assert box.region_id == busan.id


def test_update_missing_box(client, seoul):
    res = client.post("/admin/boxes/999/update", data=_box_form(seoul.id), headers=AJAX)
    assert res.status_code == 404
    assert res.json()["error"] == "HyroxBox not found"


def test_delete_box(client, session, seoul):
    box = make_box(session, seoul, "Gone")

    res = client.post(f"/admin/boxes/{box.id}/delete", headers=AJAX)
    assert res.json() == {"ok": True}
    assert session.get(HyroxBox, box.id) is None


def test_delete_box_form_post_redirects(client, session, seoul):
    box = make_box(session, seoul, "Gone")

    res = client.post(f"/admin/boxes/{box.id}/delete", follow_redirects=False)
    assert res.status_code == 303
    assert res.headers["location"] == "/admin/boxes"


def test_create_box_oversized_region_id(client, session, seoul):
    res = client.post(
        "/admin/boxes/create",
        data=_box_form("99999999999999999999"),
        headers=AJAX,
    )
    assert res.status_code == 400
    assert res.json()["error"] == "Region is out of range"
    assert box_store.count_boxes(session) == 0


def test_update_box_oversized_path_id(client, seoul):
    res = client.post(
        "/admin/boxes/99999999999999999999/update",
        data=_box_form(seoul.id),
        headers=AJAX,
    )
    assert res.status_code == 422
    assert res.json()["ok"] is False
