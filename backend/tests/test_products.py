def test_create_product_starts_with_zero_stock(client):
    response = client.post(
        "/api/products",
        json={
            "name": "Gold Chain 22K",
            "category": "Chains",
            "sku": "GC100",
            "weight": 15.5,
            "purity": "22K",
            "current_rate": 6500,
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["data"]["sku"] == "GC100"
    assert body["data"]["stock_quantity"] == 0
    assert body["data"]["weight"] == 15.5
    assert body["data"]["status"] == "active"
    assert isinstance(body["data"]["id"], int)


def test_create_product_reports_missing_fields(client):
    response = client.post("/api/products", json={"name": "Loose Stone"})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"].startswith("Missing required fields:")
    for field in ("category", "sku", "weight", "purity", "current_rate"):
        assert field in body["error"]


def test_create_product_rejects_non_positive_weight(make_product, client):
    response = client.post(
        "/api/products",
        json={"name": "Air", "category": "Rings", "sku": "AIR1", "weight": 0, "purity": "22K", "current_rate": 1},
    )
    assert response.status_code == 400
    assert "weight" in response.json()["error"]


def test_duplicate_sku_is_a_conflict(make_product, client):
    make_product(sku="DUP1")

    response = client.post(
        "/api/products",
        json={"name": "Other", "category": "Rings", "sku": "DUP1", "weight": 2, "purity": "18K", "current_rate": 5000},
    )

    assert response.status_code == 409
    assert "DUP1" in response.json()["error"]


def test_search_is_case_insensitive_and_newest_first(make_product, client):
    make_product(name="Gold Chain 22K", sku="GC001")
    make_product(name="Silver Ring", sku="SR001")
    make_product(name="Rope CHAIN", sku="RC001")

    response = client.get("/api/products", params={"search": "chain"})

    body = response.json()
    assert response.status_code == 200
    assert body["count"] == 2
    assert [p["sku"] for p in body["data"]] == ["RC001", "GC001"]


def test_search_matches_sku_and_barcode(make_product, client):
    make_product(name="Bangle", sku="BG777", barcode="8901234567890")
    make_product(name="Anklet", sku="AK001")

    assert [p["sku"] for p in client.get("/api/products", params={"search": "bg7"}).json()["data"]] == ["BG777"]
    assert [p["sku"] for p in client.get("/api/products", params={"search": "45678"}).json()["data"]] == ["BG777"]


def test_list_filters_by_category_and_status(make_product, client):
    make_product(category="Chains", product_category="Women")
    make_product(category="Rings", product_category="Men", status="inactive")

    chains = client.get("/api/products", params={"category": "Chains"}).json()
    inactive = client.get("/api/products", params={"status": "inactive"}).json()
    women = client.get("/api/products", params={"product_category": "Women"}).json()

    assert chains["count"] == 1 and chains["data"][0]["category"] == "Chains"
    assert inactive["count"] == 1 and inactive["data"][0]["status"] == "inactive"
    assert women["count"] == 1 and women["data"][0]["product_category"] == "Women"


def test_get_product_and_not_found(make_product, client):
    product = make_product()

    assert client.get(f"/api/products/{product['id']}").json()["data"]["name"] == product["name"]

    missing = client.get("/api/products/9999")
    assert missing.status_code == 404
    assert missing.json() == {"success": False, "error": "Product not found"}


def test_barcode_lookup(make_product, client):
    make_product(sku="BC1", barcode="1234567890123")

    found = client.get("/api/products/barcode/1234567890123")
    missing = client.get("/api/products/barcode/000")

    assert found.status_code == 200
    assert found.json()["data"]["sku"] == "BC1"
    assert missing.status_code == 404


def test_patch_applies_allowed_fields_and_ignores_unknown(make_product, client):
    product = make_product(stock_quantity=0)

    response = client.patch(
        f"/api/products/{product['id']}",
        json={"current_rate": 6200, "stock_quantity": 7, "favourite_colour": "gold"},
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["current_rate"] == 6200
    assert data["stock_quantity"] == 7
    assert "favourite_colour" not in data

    transactions = client.get("/api/inventory/transactions", params={"product_id": product["id"]}).json()["data"]
    assert len(transactions) == 1
    assert transactions[0]["reference_type"] == "product_update"
    assert transactions[0]["transaction_type"] == "in"
    assert (transactions[0]["previous_stock"], transactions[0]["new_stock"]) == (0, 7)


def test_put_is_accepted_as_update(make_product, client):
    product = make_product()

    response = client.put(f"/api/products/{product['id']}", json={"name": "Renamed Ring"})

    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Renamed Ring"


def test_update_without_known_fields_is_rejected(make_product, client):
    product = make_product()

    response = client.patch(f"/api/products/{product['id']}", json={"unknown": 1})

    assert response.status_code == 400
    assert response.json()["error"] == "No fields to update"


def test_update_unknown_product(client):
    response = client.patch("/api/products/424242", json={"name": "Ghost"})
    assert response.status_code == 404


def test_update_unknown_product_with_no_known_fields(client):
    response = client.patch("/api/products/9999", json={"unknown": 1})

    assert response.status_code == 404
    assert response.json()["error"] == "Product not found"


def test_delete_unreferenced_product(make_product, client):
    product = make_product()

    response = client.delete(f"/api/products/{product['id']}")

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Product deleted successfully"}
    assert client.get(f"/api/products/{product['id']}").status_code == 404


def test_delete_referenced_product_needs_cascade(make_product, client, document_payload, line):
    product = make_product(stock_quantity=5)
    bill = client.post("/api/bills", json=document_payload(line(product))).json()["data"]

    refused = client.delete(f"/api/products/{product['id']}")

    assert refused.status_code == 400
    body = refused.json()
    assert body["success"] is False
    assert "1 bill(s) and 0 invoice(s)" in body["error"]
    assert body["references"] == {"bills": 1, "invoices": 0, "stock_transactions": 1}
    assert client.get(f"/api/products/{product['id']}").status_code == 200

    forced = client.delete(f"/api/products/{product['id']}", params={"cascade": "true"})

    assert forced.status_code == 200
    assert "1 bill references" in forced.json()["message"]
    assert client.get(f"/api/products/{product['id']}").status_code == 404
    items = client.get(f"/api/bills/{bill['id']}").json()["data"]["items"]
    assert items[0]["product_id"] is None
    assert items[0]["product_name"] == product["name"]


def test_unknown_route_uses_envelope(client):
    response = client.get("/api/nowhere")

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Route not found: GET /api/nowhere"}
