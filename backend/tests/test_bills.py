import re
from datetime import datetime, timedelta, timezone

from app.services import billing_service


def test_bill_gets_number_and_deducts_stock(make_product, client, document_payload, line):
    product = make_product(stock_quantity=3)

    response = client.post("/api/bills", json=document_payload(line(product, 2), total_amount=121000))

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Bill created successfully"
    bill = body["data"]
    assert re.fullmatch(r"BILL-\d{4}-\d{6}", bill["bill_number"])
    assert bill["bill_type"] == "bill"
    assert bill["subtotal"] == 121000
    assert bill["total_amount"] == 121000
    assert client.get(f"/api/products/{product['id']}").json()["data"]["stock_quantity"] == 1

    movement = client.get("/api/inventory/transactions", params={"reference_type": "bill"}).json()["data"][0]
    assert movement["reference_id"] == bill["id"]
    assert (movement["previous_stock"], movement["new_stock"]) == (3, 1)


def test_consecutive_bills_get_distinct_numbers(make_product, client, document_payload, line):
    product = make_product(stock_quantity=10)

    numbers = {
        client.post("/api/bills", json=document_payload(line(product))).json()["data"]["bill_number"]
        for _ in range(3)
    }

    assert len(numbers) == 3


def test_free_form_lines_do_not_touch_stock(client, document_payload):
    item = {"product_name": "Polishing service", "quantity": 1, "total": 250}

    response = client.post("/api/bills", json=document_payload(item, total_amount=250))

    assert response.status_code == 201
    assert response.json()["data"]["items"][0]["product_id"] is None
    assert response.json()["data"]["items"][0]["total"] == 250
    assert client.get("/api/inventory/transactions").json()["count"] == 0


def test_exchange_bill(make_product, client, document_payload, line):
    product = make_product(stock_quantity=2)

    response = client.post(
        "/api/bills",
        json=document_payload(
            line(product),
            bill_type="exchange",
            old_gold_weight=5,
            old_gold_purity="22K",
            old_gold_rate=5000,
            total_amount=35500,
        ),
    )

    assert response.status_code == 201
    bill = response.json()["data"]
    assert re.fullmatch(r"EXCH-\d{4}-\d{6}", bill["bill_number"])
    assert bill["bill_type"] == "exchange"
    assert bill["old_gold_value"] == 25000
    assert bill["exchange_difference"] == 60500 - 25000

    exchanges = client.get("/api/bills", params={"bill_type": "exchange"}).json()
    regular = client.get("/api/bills", params={"bill_type": "bill"}).json()
    assert [b["id"] for b in exchanges["data"]] == [bill["id"]]
    assert regular["count"] == 0


def test_exchange_bill_needs_old_material(make_product, client, document_payload, line):
    product = make_product()

    response = client.post("/api/bills", json=document_payload(line(product), bill_type="exchange"))

    assert response.status_code == 400
    assert "old_gold" in response.json()["error"]


def test_list_filters(make_product, make_customer, client, document_payload, line):
    product = make_product(stock_quantity=10)
    customer = make_customer()
    client.post("/api/bills", json=document_payload(line(product), customer_id=customer["id"]))
    client.post("/api/bills", json=document_payload(line(product), payment_status="paid"))

    today = datetime.now(timezone.utc).date()
    yesterday = today - timedelta(days=1)

    assert client.get("/api/bills").json()["count"] == 2
    assert client.get("/api/bills", params={"customer_id": customer["id"]}).json()["count"] == 1
    assert client.get("/api/bills", params={"payment_status": "paid"}).json()["count"] == 1
    assert client.get("/api/bills", params={"start_date": today.isoformat()}).json()["count"] == 2
    assert client.get("/api/bills", params={"end_date": yesterday.isoformat()}).json()["count"] == 0
    assert client.get("/api/bills", params={"search": "BILL-"}).json()["count"] == 2


def test_payment_update(make_product, client, document_payload, line):
    product = make_product()
    bill = client.post("/api/bills", json=document_payload(line(product))).json()["data"]

    response = client.patch(f"/api/bills/{bill['id']}/payment", json={"payment_status": "partial", "amount_paid": 1000})

    assert response.status_code == 200
    assert response.json()["message"] == "Bill payment updated successfully"
    assert response.json()["data"]["payment_status"] == "partial"
    assert response.json()["data"]["payment_method"] == "cash"


def test_delete_bill_keeps_stock_sold(make_product, client, document_payload, line):
    product = make_product(stock_quantity=4)
    bill = client.post("/api/bills", json=document_payload(line(product, 3))).json()["data"]

    response = client.delete(f"/api/bills/{bill['id']}")

    assert response.status_code == 200
    assert response.json()["message"] == "Bill deleted successfully"
    assert client.get(f"/api/bills/{bill['id']}").status_code == 404
    assert client.get(f"/api/products/{product['id']}").json()["data"]["stock_quantity"] == 1
    assert client.delete(f"/api/bills/{bill['id']}").status_code == 404


def test_calculate_draft(client):
    response = client.post(
        "/api/bills/calculate",
        json={
            "items": [{"weight": 10, "rate": 6000, "making_charge": 500, "quantity": 2}],
            "discount_percentage": 10,
            "tax_percentage": 3,
            "old_gold_weight": 4,
            "old_gold_rate": 5000,
        },
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["item_totals"] == [121000]
    assert data["subtotal"] == 121000
    assert data["discount_amount"] == 12100
    assert data["tax_amount"] == 3267
    assert data["total_amount"] == 112167
    assert data["old_gold_value"] == 20000
    assert data["exchange_difference"] == 101000
    assert client.get("/api/bills").json()["count"] == 0


def test_exchange_bill_can_owe_the_customer(make_product, client, document_payload, line):
    product = make_product(stock_quantity=1)

    response = client.post(
        "/api/bills",
        json=document_payload(
            line(product),
            bill_type="exchange",
            old_gold_weight=20,
            old_gold_rate=6000,
            total_amount=-59500,
        ),
    )

    assert response.status_code == 201, response.json()
    bill = response.json()["data"]
    assert bill["total_amount"] == -59500
    assert bill["old_gold_value"] == 120000
    assert bill["exchange_difference"] == -59500


def test_plain_bill_total_cannot_be_negative(make_product, client, document_payload, line):
    product = make_product()

    response = client.post("/api/bills", json=document_payload(line(product), total_amount=-1))

    assert response.status_code == 400
    assert "total_amount" in response.json()["error"]


def test_number_taken_at_insert_is_retried(make_product, client, document_payload, line, monkeypatch):
    product = make_product(stock_quantity=5)
    first = client.post("/api/bills", json=document_payload(line(product))).json()["data"]

    allocate = billing_service._allocate_number
    attempts = []

    def clashing_once(db, kind, bump=0):
        attempts.append(bump)
        if len(attempts) == 1:
            return first["bill_number"]
        return allocate(db, kind, bump)

    monkeypatch.setattr(billing_service, "_allocate_number", clashing_once)
    response = client.post("/api/bills", json=document_payload(line(product)))

    assert response.status_code == 201
    second = response.json()["data"]
    assert second["bill_number"] != first["bill_number"]
    assert attempts == [0, 1]
    assert client.get("/api/bills").json()["count"] == 2
    assert client.get(f"/api/products/{product['id']}").json()["data"]["stock_quantity"] == 3


def test_number_clash_that_never_clears_is_a_conflict(make_product, client, document_payload, line, monkeypatch):
    product = make_product(stock_quantity=5)
    first = client.post("/api/bills", json=document_payload(line(product))).json()["data"]
    monkeypatch.setattr(billing_service, "_allocate_number", lambda db, kind, bump=0: first["bill_number"])

    response = client.post("/api/bills", json=document_payload(line(product)))

    assert response.status_code == 409
    assert client.get("/api/bills").json()["count"] == 1
    assert client.get(f"/api/products/{product['id']}").json()["data"]["stock_quantity"] == 4
