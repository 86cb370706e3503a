from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient

from darah_server import http_server
from darah_server.config import Settings


@pytest.fixture
def client(storefront):
    http_server.configure(storefront, Settings(whatsapp_number=storefront.whatsapp_number))
    with TestClient(http_server.app) as test_client:
        yield test_client
    http_server.configure(None)


def test_health(client):
    assert client.get("/health").json() == {"ok": True, "status": "healthy"}


def test_first_request_issues_session_cookie(client):
    response = client.get("/cart")

    assert response.status_code == 200
    assert "darah_session" in response.cookies
    assert response.json() == {
        "ok": True,
        "cart": {"lines": [], "subtotal": "0.00", "taxes": "0.00", "total": "0.00", "item_count": 0},
    }


def test_add_and_read_cart(client):
    client.post("/cart/add", json={"item_id": "r1"})
    response = client.post("/cart/add", json={"item_id": "r1"})

    cart = response.json()["cart"]
    assert cart["lines"][0]["quantity"] == 2
    assert cart["subtotal"] == "200.00"
    assert client.get("/cart").json()["cart"]["item_count"] == 2


def test_add_beyond_stock_is_conflict(client):
    client.post("/cart/add", json={"item_id": "r1"})
    client.post("/cart/add", json={"item_id": "r1"})

    response = client.post("/cart/add", json={"item_id": "r1"})

    assert response.status_code == 409
    assert response.json()["ok"] is False
    assert response.json()["code"] == "insufficient_stock"
    assert client.get("/cart").json()["cart"]["lines"][0]["quantity"] == 2


def test_add_unavailable_item(client):
    response = client.post("/cart/add", json={"item_id": "off"})

    assert response.status_code == 409
    assert response.json()["code"] == "item_unavailable"


def test_update_errors(client):
    client.post("/cart/add", json={"item_id": "r1"})

    not_in_cart = client.post("/cart/update", json={"item_id": "ghost", "quantity": 3})
    negative = client.post("/cart/update", json={"item_id": "r1", "quantity": -2})

    assert not_in_cart.status_code == 404
    assert not_in_cart.json()["code"] == "not_in_cart"
    assert negative.status_code == 400
    assert negative.json()["code"] == "invalid_quantity"


def test_update_remove_and_clear(client):
    client.post("/cart/add", json={"item_id": "b1"})
    client.post("/cart/add", json={"item_id": "c1"})

    updated = client.post("/cart/update", json={"item_id": "b1", "quantity": 3}).json()["cart"]
    assert updated["lines"][0]["line_total"] == "239.70"

    removed = client.post("/cart/remove", json={"item_id": "b1"}).json()["cart"]
    assert [line["item_id"] for line in removed["lines"]] == ["c1"]

    cleared = client.post("/cart/clear").json()["cart"]
    assert cleared["lines"] == []


def test_carts_are_per_session(client, storefront):
    client.post("/cart/add", json={"item_id": "r1"})

    with TestClient(http_server.app) as other:
        assert other.get("/cart").json()["cart"]["lines"] == []


def test_deactivated_item_disappears(client, inventory):
    client.post("/cart/add", json={"item_id": "r1"})
    client.post("/cart/add", json={"item_id": "c1"})
    inventory.set_active("c1", False)

    cart = client.get("/cart").json()["cart"]

    assert [line["item_id"] for line in cart["lines"]] == ["r1"]
    assert cart["total"] == "100.00"


def test_checkout_link(client):
    client.post("/cart/add", json={"item_id": "c1"})

    response = client.post("/checkout-link", json={"note": "Entrega em Porto Alegre"})

    body = response.json()
    assert response.status_code == 200
    parsed = urlparse(body["url"])
    assert parsed.path == "/5551999999999"
    assert parse_qs(parsed.query)["text"] == [body["message"]]
    assert "Colar Pérola (Colares) - Qtd: 1" in body["message"]
    assert "Entrega em Porto Alegre" in body["message"]


def test_checkout_without_body(client):
    client.post("/cart/add", json={"item_id": "b1"})

    assert client.post("/checkout-link").json()["ok"] is True


def test_checkout_empty_cart(client):
    response = client.post("/checkout-link")

    assert response.status_code == 400
    assert response.json()["code"] == "empty_cart"


def test_products_grouped_by_category(client):
    categories = client.get("/products").json()["categories"]

    names = [category["name"] for category in categories]
    assert names == ["Anéis", "Colares", "Brincos", "Pulseiras"]
    bracelets = categories[-1]["items"]
    assert [(item["id"], item["purchasable"]) for item in bracelets] == [("zero", False)]


def test_camel_case_item_id_is_accepted(client):
    client.post("/cart/add", json={"itemId": "r1"})
    added = client.post("/cart/add", json={"itemId": "r1"})
    assert added.status_code == 200
    assert added.json()["cart"]["lines"][0]["quantity"] == 2

    updated = client.post("/cart/update", json={"itemId": "r1", "quantity": 1})
    assert updated.status_code == 200
    assert updated.json()["cart"]["lines"][0]["quantity"] == 1

    removed = client.post("/cart/remove", json={"itemId": "r1"})
    assert removed.json()["cart"]["lines"] == []


def test_malformed_body_uses_error_envelope(client):
    missing = client.post("/cart/add", json={"id": "r1"})
    fractional = client.post("/cart/update", json={"item_id": "r1", "quantity": 2.5})

    for response in (missing, fractional):
        assert response.status_code == 422
        body = response.json()
        assert body["ok"] is False
        assert body["code"] == "invalid_request"
        assert body["error"].startswith("Invalid request:")
