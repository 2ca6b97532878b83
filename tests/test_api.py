import pytest
from fastapi.testclient import TestClient

from conftest import FakeCatalog, FakeRecommendationService, make_product

from storefront.api.deps import get_auth_client, get_registry, get_shelf_service
from storefront.errors import ServiceUnavailable
from storefront.main import app
from storefront.services.session_registry import SessionRegistry
from storefront.services.shelf_service import ShelfService

CATALOG = [
    make_product("1", "Red Shoe", category="footwear", external_id="p1"),
    make_product("2", "Blue Shoe", category="footwear", external_id="p2"),
    make_product("3", "Red Hat", category="accessories", external_id="p3"),
]

ACCOUNTS = {"good-token": {"_id": "u-1", "email": "a@b.c", "name": "Ann"}}


class FakeAuthClient:
    def __init__(self, token=None):
        self.token = token

    async def me(self):
        if self.token not in ACCOUNTS:
            raise ServiceUnavailable("auth", "HTTP 401", 401)
        return dict(ACCOUNTS[self.token])


@pytest.fixture
def api():
    service = FakeRecommendationService(cart={("p1", "p3"): [CATALOG[1]]})
    catalog = FakeCatalog(CATALOG)
    registry = SessionRegistry(
        recommendation_client_factory=lambda token=None: service,
        catalog_client_factory=lambda token=None: catalog,
    )
    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_shelf_service] = lambda: ShelfService(catalog)
    app.dependency_overrides[get_auth_client] = lambda: FakeAuthClient
    with TestClient(app) as client:
        yield client, service, catalog
    app.dependency_overrides.clear()


def test_root_and_health(api):
    client, _, _ = api
    assert client.get("/").json()["status"] == "running"
    assert client.get("/health/").json() == {"status": "healthy"}


def test_guest_key_survives_requests(api):
    client, _, _ = api
    first = client.get("/visitor/").json()
    second = client.get("/visitor/").json()

    assert first["visitor_key"].startswith("guest_")
    assert first == second
    assert first["authenticated"] is False


def test_login_and_logout(api):
    client, _, _ = api
    guest = client.get("/visitor/").json()["visitor_key"]

    logged_in = client.post("/visitor/login", json={"token": "good-token"}).json()
    assert logged_in == {"visitor_key": "u-1", "authenticated": True}
    assert client.get("/visitor/").json()["visitor_key"] == "u-1"

    logged_out = client.post("/visitor/logout").json()
    assert logged_out["visitor_key"] == guest


def test_login_ignores_posted_account_id(api):
    client, _, _ = api
    body = client.post("/visitor/login", json={"_id": "someone-else", "token": "good-token"}).json()
    assert body["visitor_key"] == "u-1"


def test_login_with_rejected_token_is_401(api):
    client, _, _ = api
    guest = client.get("/visitor/").json()["visitor_key"]

    resp = client.post("/visitor/login", json={"_id": "u-1", "token": "forged"})

    assert resp.status_code == 401
    assert client.get("/visitor/").json() == {"visitor_key": guest, "authenticated": False}


def test_login_without_token_is_400(api):
    client, _, _ = api
    assert client.post("/visitor/login", json={"_id": "u-1"}).status_code == 400


def test_end_session_drops_cached_recommendations(api):
    client, service, _ = api
    client.post("/recommendations/cart", json={"cart_external_ids": ["p1", "p3"]})

    assert "ended" in client.post("/visitor/session/end").json()
    client.post("/recommendations/cart", json={"cart_external_ids": ["p1", "p3"]})

    assert service.calls == [("cart", ("p1", "p3")), ("cart", ("p1", "p3"))]


def test_shelves_grouped_by_category(api):
    client, _, _ = api
    body = client.get("/shelves/").json()

    assert body["kind"] == "grouped"
    assert body["empty"] is False
    assert list(body["shelves"]) == ["footwear", "accessories"]
    assert {p["_id"] for p in body["shelves"]["footwear"]} == {"1", "2"}


def test_shelves_search(api):
    client, _, _ = api
    body = client.get("/shelves/", params={"q": "red"}).json()

    assert body["kind"] == "flat"
    assert body["tier"] == "exact"
    assert [p["name"] for p in body["products"]] == ["Red Shoe", "Red Hat"]


def test_shelves_category_filter(api):
    client, _, _ = api
    body = client.get("/shelves/", params={"category": "accessories"}).json()
    assert list(body["shelves"]) == ["accessories"]


def test_catalog_failure_is_retryable_503(api, catalog_down):
    client, _, catalog = api
    catalog.error = catalog_down

    resp = client.get("/shelves/")

    assert resp.status_code == 503
    assert resp.json() == {"error": "Failed to load products.", "retryable": True}
    assert client.get("/shelves/categories").status_code == 503


def test_categories(api):
    client, _, _ = api
    assert client.get("/shelves/categories").json() == {"categories": ["footwear", "accessories"]}


def test_cart_recommendations_are_cached_per_session(api):
    client, service, _ = api

    first = client.post("/recommendations/cart", json={"cart_external_ids": ["p3", "p1"]}).json()
    second = client.post("/recommendations/cart", json={"cart_external_ids": ["p1", "p3"]}).json()

    assert first["tier"] == "cart"
    assert first["discarded"] is False
    assert [p["externalId"] for p in first["products"]] == ["p2"]
    assert second == first
    assert service.calls == [("cart", ("p1", "p3"))]


def test_product_page_falls_back_to_catalog(api):
    client, _, _ = api
    body = client.post(
        "/recommendations/product",
        json={"focus_product_external_id": "p2", "focus_product_id": "2"},
    ).json()

    assert body["tier"] == "product"
    assert [p["_id"] for p in body["products"]] == ["1", "3"]


def test_nothing_to_recommend_is_empty_not_error(api):
    client, _, _ = api
    resp = client.post("/recommendations/home", json={})

    assert resp.status_code == 200
    assert resp.json() == {"tier": "empty", "products": [], "discarded": False}
