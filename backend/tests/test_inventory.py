from sqlalchemy import text


def test_overview_summarises_stock(make_product, client):
    make_product(sku="A", weight=10, current_rate=6000, stock_quantity=2, min_stock_level=1)
    make_product(sku="B", weight=5, current_rate=6000, stock_quantity=0)
    make_product(sku="C", weight=2, current_rate=5000, stock_quantity=1, min_stock_level=3, status="inactive")

    response = client.get("/api/inventory")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["summary"] == {
        "total_products": 3,
        "active_products": 2,
        "total_units": 3,
        "stock_value": 130000,
        "low_stock_count": 1,
        "out_of_stock_count": 1,
    }
    statuses = {row["sku"]: row["stock_status"] for row in data["products"]}
    assert statuses == {"A": "in_stock", "B": "out_of_stock", "C": "low_stock"}
    assert client.get("/api/inventory/overview").json()["data"]["summary"] == data["summary"]


def test_low_stock_lists_active_products_at_or_below_minimum(make_product, client):
    make_product(sku="OK", stock_quantity=10, min_stock_level=2)
    make_product(sku="EDGE", stock_quantity=2, min_stock_level=2)
    make_product(sku="EMPTY", stock_quantity=0)
    make_product(sku="OFF", stock_quantity=0, status="inactive")

    body = client.get("/api/inventory/low-stock").json()

    assert body["count"] == 2
    assert [p["sku"] for p in body["data"]] == ["EMPTY", "EDGE"]


def test_adjust_in_and_out(make_product, client):
    product = make_product(stock_quantity=0)

    added = client.post(
        "/api/inventory/adjust",
        json={"product_id": product["id"], "transaction_type": "in", "quantity": 5, "reason": "New stock received"},
    )
    removed = client.post(
        "/api/inventory/adjust",
        json={"product_id": product["id"], "transaction_type": "out", "quantity": 2},
    )

    assert added.status_code == 200
    assert added.json()["data"]["product"]["stock_quantity"] == 5
    assert removed.json()["data"]["product"]["stock_quantity"] == 3
    movement = removed.json()["data"]["transaction"]
    assert (movement["previous_stock"], movement["new_stock"]) == (5, 3)
    assert movement["reference_type"] == "adjustment"
    assert movement["reason"] == "Manual adjustment"


def test_adjust_out_cannot_go_negative(make_product, client):
    product = make_product(stock_quantity=1)

    response = client.post(
        "/api/inventory/adjust",
        json={"product_id": product["id"], "transaction_type": "out", "quantity": 2},
    )

    assert response.status_code == 400
    assert response.json()["available"] == 1
    assert client.get(f"/api/products/{product['id']}").json()["data"]["stock_quantity"] == 1
    assert client.get("/api/inventory/transactions").json()["count"] == 0


def test_adjust_validation(make_product, client):
    product = make_product()

    zero = client.post("/api/inventory/adjust", json={"product_id": product["id"], "transaction_type": "in", "quantity": 0})
    sideways = client.post(
        "/api/inventory/adjust", json={"product_id": product["id"], "transaction_type": "sideways", "quantity": 1}
    )
    missing = client.post("/api/inventory/adjust", json={"product_id": 999, "transaction_type": "in", "quantity": 1})

    assert zero.status_code == 400
    assert sideways.status_code == 400
    assert missing.status_code == 404


def test_transactions_filters_and_limit(make_product, client):
    first = make_product(stock_quantity=0)
    second = make_product(stock_quantity=0)
    for product in (first, second, first):
        client.post(
            "/api/inventory/adjust",
            json={"product_id": product["id"], "transaction_type": "in", "quantity": 1},
        )

    everything = client.get("/api/inventory/transactions").json()
    only_first = client.get("/api/inventory/transactions", params={"product_id": first["id"]}).json()
    newest = client.get("/api/inventory/transactions", params={"limit": 1}).json()
    outgoing = client.get("/api/inventory/transactions", params={"transaction_type": "out"}).json()

    assert everything["count"] == 3
    assert only_first["count"] == 2
    assert newest["count"] == 1
    assert newest["data"][0]["product_id"] == first["id"]
    assert newest["data"][0]["new_stock"] == 2
    assert outgoing["count"] == 0


def test_transaction_date_filters_include_midnight(make_product, client):
    product = make_product(stock_quantity=0)
    client.post("/api/inventory/adjust", json={"product_id": product["id"], "transaction_type": "in", "quantity": 2})
    with client.app.state.database.session() as db:
        db.execute(text("UPDATE stock_transactions SET created_at = '2026-03-07 00:00:00'"))
        db.commit()

    that_day = {"start_date": "2026-03-07", "end_date": "2026-03-07"}
    day_before = {"start_date": "2026-03-06", "end_date": "2026-03-06"}

    assert client.get("/api/inventory/transactions", params=that_day).json()["count"] == 1
    assert client.get("/api/inventory/transactions", params=day_before).json()["count"] == 0
