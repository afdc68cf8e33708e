def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "OK"
    assert body["version"] == "1.0.0"
    assert body["uptime"] >= 0
    assert body["timestamp"].endswith("+00:00")


def test_default_settings_are_seeded(client):
    body = client.get("/api/settings").json()

    keys = {row["key"] for row in body["data"]}
    assert {
        "company_name",
        "company_address",
        "company_phone",
        "gst_number",
        "currency",
        "default_tax_percentage",
        "low_stock_threshold",
    } <= keys
    assert body["count"] == len(body["data"])


def test_get_setting_by_key(client):
    assert client.get("/api/settings/company_name").json()["data"]["value"] == "Vannamiyal Thangamaligai"
    assert client.get("/api/settings/default_tax_percentage").json()["data"]["value"] == "3"

    missing = client.get("/api/settings/no_such_key")
    assert missing.status_code == 404
    assert missing.json()["success"] is False


def test_stock_check_can_be_disabled(app_factory):
    client = app_factory(ENFORCE_STOCK_CHECK=False)
    product = client.post(
        "/api/products",
        json={"name": "Stud", "category": "Earrings", "sku": "ST1", "weight": 1, "purity": "22K",
              "current_rate": 6000, "stock_quantity": 1},
    ).json()["data"]

    response = client.post(
        "/api/invoices",
        json={
            "customer_name": "Counter",
            "items": [{"product_id": product["id"], "product_name": "Stud", "weight": 1, "rate": 6000, "quantity": 3}],
            "total_amount": 18000,
            "payment_method": "cash",
        },
    )

    assert response.status_code == 201
    assert client.get(f"/api/products/{product['id']}").json()["data"]["stock_quantity"] == 0
