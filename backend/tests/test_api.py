from fastapi.testclient import TestClient

from backend.app.api.deps import get_storage
from backend.app.main import app


def _post_order(client, item_id, size="M", qty=None, **extra):
    body = {"customerName": "Hina", "phone": "87 00 00 00", "itemId": item_id, "size": size, **extra}
    if qty is not None:
        body["qty"] = qty
    return client.post("/api/orders", json=body)


def test_health(client):
    res = client.get("/api")
    assert res.status_code == 200
    assert res.json() == {"ok": True, "message": "Orders API is running"}


def test_order_scenario(client, make_stock):
    make_stock({"M": 5}, stock_id="stk-1")

    # 1) création M x2 -> 3 restants
    res = _post_order(client, "stk-1", qty=2)
    assert res.status_code == 200
    body = res.json()
    assert body["ok"] is True
    order_id = body["order"]["id"]
    assert body["order"]["itemId"] == "stk-1"
    assert body["order"]["customerName"] == "Hina"
    assert body["stocks"][0]["sizes"] == {"M": 3}

    # 2) M x10 -> refus avec le disponible
    res = _post_order(client, "stk-1", qty=10)
    assert res.status_code == 400
    assert res.json() == {"error": "not enough stock", "available": 3}

    # 3) qty 2 -> 4
    res = client.put(f"/api/orders/{order_id}", json={"qty": 4})
    assert res.status_code == 200
    assert res.json()["order"]["qty"] == 4
    assert res.json()["stocks"][0]["sizes"] == {"M": 1}

    # 4) suppression -> stock restauré
    res = client.delete(f"/api/orders/{order_id}")
    assert res.status_code == 200
    assert "order" not in res.json()
    assert res.json()["stocks"][0]["sizes"] == {"M": 5}
    assert client.get("/api/orders").json() == []


def test_two_identical_posts_on_last_unit(client, make_stock):
    make_stock({"M": 1}, stock_id="stk-1")

    first = _post_order(client, "stk-1", qty=1)
    second = _post_order(client, "stk-1", qty=1)

    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json() == {"error": "not enough stock", "available": 0}


def test_order_errors(client, make_stock):
    make_stock({"M": 1}, stock_id="stk-1")

    assert _post_order(client, "stk-1", size="").json() == {"error": "missing fields"}
    res = _post_order(client, "ghost")
    assert res.status_code == 400
    assert res.json() == {"error": "stock item not found"}

    res = client.put("/api/orders/nope", json={"qty": 2})
    assert res.status_code == 404
    assert res.json() == {"error": "order not found"}

    res = client.delete("/api/orders/nope")
    assert res.status_code == 404


def test_malformed_order_payload(client, make_stock):
    make_stock({"M": 1}, stock_id="stk-1")

    res = _post_order(client, "stk-1", qty="lots")

    assert res.status_code == 400
    assert res.json()["error"] == "invalid payload"


def test_stock_crud(client):
    res = client.post("/api/stocks", json={"category": "hoodie", "name": "Hoodie blanc", "sizes": {"M": 2}})
    assert res.status_code == 200
    stock = res.json()["stock"]
    assert stock["sizes"] == {"M": 2}
    assert stock["createdAt"]

    res = client.put(f"/api/stocks/{stock['id']}", json={"sizes": {"M": 2, "L": 4}})
    assert res.json()["stock"]["sizes"] == {"M": 2, "L": 4}
    assert res.json()["stock"]["name"] == "Hoodie blanc"

    assert [s["id"] for s in client.get("/api/stocks").json()] == [stock["id"]]

    assert client.delete(f"/api/stocks/{stock['id']}").json() == {"ok": True}
    assert client.get("/api/stocks").json() == []


def test_stock_validation(client):
    res = client.post("/api/stocks", json={"name": "Sans catégorie"})
    assert res.status_code == 400
    assert res.json() == {"error": "category and name required"}

    res = client.post("/api/stocks", json={"category": "hoodie", "name": "X", "sizes": {"M": -1}})
    assert res.status_code == 400

    assert client.put("/api/stocks/nope", json={"name": "X"}).status_code == 404
    assert client.delete("/api/stocks/nope").json() == {"error": "stock not found"}


def test_category_delete_cascades(client, make_stock):
    res = client.post("/api/categories", json={"name": "Tee Shirt", "sizes": ["S", "M"]})
    assert res.status_code == 200
    assert res.json()["category"]["slug"] == "tee-shirt"

    doomed = make_stock({"M": 3}, category="tee-shirt")
    kept = make_stock({"M": 3}, category="hoodie")
    assert _post_order(client, doomed, qty=1).status_code == 200
    assert _post_order(client, kept, qty=1).status_code == 200

    res = client.delete("/api/categories/tee-shirt")
    assert res.status_code == 200
    assert res.json()["ok"] is True

    assert client.get("/api/categories").json() == []
    assert [s["id"] for s in client.get("/api/stocks").json()] == [kept]
    assert [o["itemId"] for o in client.get("/api/orders").json()] == [kept]


def test_category_duplicates_and_validation(client):
    assert client.post("/api/categories", json={"name": "Hoodie"}).status_code == 200

    res = client.post("/api/categories", json={"name": "hoodie"})
    assert res.status_code == 400
    assert res.json() == {"error": "category exists"}

    res = client.post("/api/categories", json={"sizes": ["M"]})
    assert res.json() == {"error": "name required"}


class _BrokenStorage:
    def list_stocks(self):
        raise RuntimeError("disk unavailable")


def test_unexpected_error_is_a_generic_500():
    app.dependency_overrides[get_storage] = lambda: _BrokenStorage()
    try:
        res = TestClient(app, raise_server_exceptions=False).get("/api/stocks")
    finally:
        app.dependency_overrides.clear()

    assert res.status_code == 500
    assert res.json() == {"error": "server error"}
