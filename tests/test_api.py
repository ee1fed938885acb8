"""Tests for the HTTP API."""

from fastapi.testclient import TestClient

from ucsc_menu.api.app import create_app
from tests.conftest import FakeMenuSiteClient

ADMIN_HEADERS = {"X-Admin-Token": "admin-token"}


def test_health(container) -> None:
    with TestClient(create_app(container, background_refresh=False)) as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_list_locations(container) -> None:
    with TestClient(create_app(container, background_refresh=False)) as client:
        every = client.get("/locations")
        some = client.get("/locations", params=[("ids", "20"), ("ids", "40")])

    assert every.status_code == 200
    assert len(every.json()) == 14
    assert every.json()[0] == {
        "id": "40",
        "name": "College Nine/John R. Lewis Dining Hall",
        "url": (
            "https://nutrition.sa.ucsc.edu/shortmenu.aspx?sName=UC+Santa+Cruz+Dining"
            "&locationNum=40&locationName=College+Nine/John+R.+Lewis+Dining+Hall&naFlag=1"
        ),
    }
    assert [location["id"] for location in some.json()] == ["40", "20"]


def test_location_detail(container) -> None:
    with TestClient(create_app(container, background_refresh=False)) as client:
        response = client.get("/locations/40")
        missing = client.get("/locations/99")

    assert response.status_code == 200
    data = response.json()
    assert [menu["date"] for menu in data["menus"]] == ["2024-04-05", "2024-04-06"]
    breakfast = data["menus"][0]["meals"][0]
    assert breakfast["meal_type"] == "BREAKFAST"
    assert breakfast["sections"][0]["food_items"][0] == {
        "name": "Cream Cheese pck",
        "allergens": ["Gluten Friendly", "Milk", "Vegetarian"],
        "price": "$1.00",
    }
    assert breakfast["sections"][1]["food_items"][0]["price"] is None
    assert missing.status_code == 404


def test_location_menus_with_filters(container) -> None:
    with TestClient(create_app(container, background_refresh=False)) as client:
        response = client.get(
            "/locations/40/menus",
            params={"name_contains": "muffin", "start": "2024-04-06"},
        )
        missing = client.get("/locations/99/menus")

    assert response.status_code == 200
    menus = response.json()["menus"]
    assert [menu["date"] for menu in menus] == ["2024-04-06"]
    names = [
        item["name"]
        for meal in menus[0]["meals"]
        for section in meal["sections"]
        for item in section["food_items"]
    ]
    assert names == ["Blueberry Muffin", "Pumpkin Muffin"]
    assert missing.status_code == 404


def test_menus_across_locations(container) -> None:
    with TestClient(create_app(container, background_refresh=False)) as client:
        response = client.get(
            "/menus",
            params=[
                ("ids", "05"),
                ("ids", "40"),
                ("meal_type", "late night"),
                ("contains_all", "vegan,gluten_friendly"),
                ("end", "2024-04-05"),
            ],
        )

    assert response.status_code == 200
    data = response.json()
    assert [location["id"] for location in data] == ["40", "05"]
    meals = data[0]["menus"][0]["meals"]
    assert [meal["meal_type"] for meal in meals] == ["LATE_NIGHT"]
    assert meals[0]["sections"][0]["food_items"][0]["name"] == "French Fries"


def test_menus_rejects_bad_filters(container) -> None:
    with TestClient(create_app(container, background_refresh=False)) as client:
        bad_allergen = client.get("/menus", params={"excludes_all": "kale"})
        bad_meal = client.get("/menus", params={"meal_type": "brunch"})
        bad_date = client.get("/menus", params={"start": "yesterday"})

    assert bad_allergen.status_code == 422
    assert bad_meal.status_code == 422
    assert bad_date.status_code == 422


def test_reads_before_load_return_503(container) -> None:
    container.store.snapshot = None
    container.site_client.landing_page = None

    with TestClient(create_app(container, background_refresh=False)) as client:
        response = client.get("/locations")
        status = client.get("/admin/status", headers=ADMIN_HEADERS)

    assert response.status_code == 503
    assert status.json() == {"state": "cold"}


def test_request_refresh(container) -> None:
    site_client = container.site_client
    assert isinstance(site_client, FakeMenuSiteClient)

    with TestClient(create_app(container, background_refresh=False)) as client:
        response = client.patch("/request-refresh", headers=ADMIN_HEADERS)
        status = client.get("/admin/status", headers=ADMIN_HEADERS)

    assert response.status_code == 201
    assert response.json()["refreshed"] is True
    assert len(site_client.requests) == 14 * 2
    assert len(container.store.saves) == 1
    assert status.json()["state"] == "warm"
    assert status.json()["locations"] == 14
    assert status.json()["needs_refresh"] is False
    assert site_client.closed


def test_request_refresh_failure_returns_503(container) -> None:
    container.site_client.landing_page = None

    with TestClient(create_app(container, background_refresh=False)) as client:
        response = client.patch("/request-refresh", headers=ADMIN_HEADERS)
        still_served = client.get("/locations")

    assert response.status_code == 503
    assert still_served.status_code == 200
    assert len(still_served.json()) == 14


def test_admin_token_required(container) -> None:
    with TestClient(create_app(container, background_refresh=False)) as client:
        missing = client.patch("/request-refresh")
        wrong = client.get("/admin/status", headers={"X-Admin-Token": "nope"})

    assert missing.status_code == 401
    assert wrong.status_code == 401
    assert container.store.saves == []


def test_admin_routes_open_without_configured_token(container) -> None:
    container.settings.admin_token = None

    with TestClient(create_app(container, background_refresh=False)) as client:
        response = client.get("/admin/status")

    assert response.status_code == 200
    assert response.json()["state"] == "warm"
