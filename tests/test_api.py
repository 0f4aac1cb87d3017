"""HTTP tests for the /api routes via TestClient."""

import asyncio
from decimal import Decimal

import pytest
from conftest import FailingPaymentEngine, prepare_database
from fastapi.testclient import TestClient
from sqlalchemy.pool import NullPool

from tableside.database import build_engine, build_session_factory
from tableside.main import app
from tableside.services.order_service import OrderPlacementEngine


@pytest.fixture()
def session_factory(database_url):
    engine = build_engine(database_url, poolclass=NullPool)
    asyncio.run(prepare_database(engine))
    yield build_session_factory(engine)
    asyncio.run(engine.dispose())


@pytest.fixture()
def client(session_factory):
    app.state.session_factory = session_factory
    app.state.placement_engine = OrderPlacementEngine(session_factory)
    return TestClient(app)


def _add(client, table_id=1, menu_id=1, quantity=1):
    response = client.post(
        "/api/cart/add",
        json={"table_id": table_id, "menu_id": menu_id, "quantity": quantity},
    )
    assert response.status_code == 200
    return response


def _place(client, table_id=1, payment_mode="cash"):
    return client.post(
        "/api/order/place",
        json={"table_id": table_id, "payment_mode": payment_mode},
    )


class TestHealthAndMetrics:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_request_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_is_generated(self, client):
        response = client.get("/health")
        assert response.headers["X-Request-ID"]

    def test_metrics_exposed(self, client):
        _add(client)
        _place(client)
        response = client.get("/metrics/")
        assert response.status_code == 200
        assert "order_placements_total" in response.text
        assert "http_requests_total" in response.text


class TestMenuEndpoint:
    def test_lists_available_items(self, client):
        response = client.get("/api/menu")
        assert response.status_code == 200
        assert [item["id"] for item in response.json()] == [2, 1]


class TestCartEndpoints:
    def test_add_returns_cart(self, client):
        response = _add(client, menu_id=1, quantity=2)
        body = response.json()
        assert body["message"] == "Item added to cart successfully"
        assert body["cart"][0]["menu_id"] == 1
        assert body["cart"][0]["quantity"] == 2
        assert Decimal(body["cart"][0]["line_total"]) == Decimal("200")

    def test_add_unknown_menu_item(self, client):
        response = client.post("/api/cart/add", json={"table_id": 1, "menu_id": 99})
        assert response.status_code == 404

    def test_add_unknown_table(self, client):
        response = client.post("/api/cart/add", json={"table_id": 999, "menu_id": 1})
        assert response.status_code == 404
        assert response.json()["detail"] == "Table 999 does not exist"

    def test_add_zero_quantity_rejected(self, client):
        response = client.post(
            "/api/cart/add", json={"table_id": 1, "menu_id": 1, "quantity": 0}
        )
        assert response.status_code == 422

    def test_get_cart(self, client):
        _add(client, menu_id=1)
        _add(client, menu_id=2)
        response = client.get("/api/cart/1")
        assert response.status_code == 200
        assert sorted(line["menu_id"] for line in response.json()) == [1, 2]

    def test_update_to_zero_removes_line(self, client):
        _add(client, menu_id=1, quantity=2)
        response = client.put(
            "/api/cart/update", json={"table_id": 1, "menu_id": 1, "quantity": 0}
        )
        assert response.status_code == 200
        assert response.json()["cart"] == []
        assert client.get("/api/cart/1").json() == []

    def test_update_missing_line(self, client):
        response = client.put(
            "/api/cart/update", json={"table_id": 1, "menu_id": 1, "quantity": 3}
        )
        assert response.status_code == 404

    def test_remove_line(self, client):
        _add(client, menu_id=1)
        response = client.delete("/api/cart/remove/1/1")
        assert response.status_code == 200
        assert response.json() == {"message": "Item removed from cart", "cart": []}

    def test_remove_missing_line(self, client):
        response = client.delete("/api/cart/remove/1/2")
        assert response.status_code == 404


class TestPlaceOrderEndpoint:
    def test_place_order(self, client):
        _add(client, menu_id=1, quantity=2)
        _add(client, menu_id=2, quantity=1)

        response = _place(client)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Order placed successfully"
        assert Decimal(body["total_amount"]) == Decimal("250")
        assert client.get("/api/cart/1").json() == []

    def test_empty_cart(self, client):
        response = _place(client)
        assert response.status_code == 400
        assert response.json()["detail"] == "Cart is empty for table 1"

    def test_non_positive_table_rejected(self, client):
        response = _place(client, table_id=0)
        assert response.status_code == 422

    def test_unknown_table(self, client):
        response = _place(client, table_id=21)
        assert response.status_code == 404

    def test_blank_payment_mode(self, client):
        _add(client)
        assert _place(client, payment_mode="").status_code == 422
        assert _place(client, payment_mode="   ").status_code == 422

    def test_failure_is_reported_generically(self, client, session_factory):
        app.state.placement_engine = FailingPaymentEngine(session_factory)
        _add(client, menu_id=1, quantity=2)

        response = _place(client)

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to place order"
        assert len(client.get("/api/cart/1").json()) == 1
        assert client.get("/api/orders/1").json() == []


class TestOrderHistoryEndpoints:
    def test_list_orders_newest_first(self, client):
        _add(client, menu_id=1)
        first = _place(client, payment_mode="cash").json()
        _add(client, menu_id=2)
        second = _place(client, payment_mode="upi").json()

        response = client.get("/api/orders/1")

        assert response.status_code == 200
        orders = response.json()
        assert [o["order_id"] for o in orders] == [second["order_id"], first["order_id"]]
        assert orders[0]["payment_method"] == "upi"
        assert orders[0]["payment_status"] == "pending"

    def test_list_orders_unknown_table(self, client):
        assert client.get("/api/orders/500").status_code == 404

    def test_get_order(self, client):
        _add(client, menu_id=1, quantity=2)
        order_id = _place(client).json()["order_id"]

        response = client.get(f"/api/order/{order_id}")

        assert response.status_code == 200
        body = response.json()
        assert body["items"][0]["item_name"] == "Masala Dosa"
        assert body["items"][0]["quantity"] == 2
        assert Decimal(body["payment"]["amount"]) == Decimal("200")

    def test_get_unknown_order(self, client):
        response = client.get("/api/order/9999")
        assert response.status_code == 404
        assert response.json()["detail"] == "Order not found"


class TestQuantityLimits:
    def test_add_above_limit_rejected(self, client):
        response = client.post(
            "/api/cart/add", json={"table_id": 1, "menu_id": 1, "quantity": 1001}
        )
        assert response.status_code == 422
        assert client.get("/api/cart/1").json() == []

    def test_update_above_limit_rejected(self, client):
        _add(client, menu_id=1)
        response = client.put(
            "/api/cart/update",
            json={"table_id": 1, "menu_id": 1, "quantity": 2_147_483_648},
        )
        assert response.status_code == 422
        assert client.get("/api/cart/1").json()[0]["quantity"] == 1

    def test_limit_itself_is_accepted(self, client):
        response = _add(client, menu_id=2, quantity=1000)
        assert response.json()["cart"][0]["quantity"] == 1000
