import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app


@pytest.fixture
def app_factory(tmp_path):
    """Build a client against a fresh SQLite file; keyword arguments override settings."""
    clients = []

    def _make(**overrides):
        values = {
            "DATABASE_PATH": str(tmp_path / f"billing-{len(clients)}.db"),
            "DATABASE_URL": None,
            "LOG_LEVEL": "WARNING",
        }
        values.update(overrides)
        test_client = TestClient(create_app(Settings(**values)))
        test_client.__enter__()
        clients.append(test_client)
        return test_client

    yield _make

    for test_client in clients:
        test_client.__exit__(None, None, None)


@pytest.fixture
def client(app_factory):
    return app_factory()


@pytest.fixture
def make_product(client):
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        payload = {
            "name": f"Gold Ring {counter['n']}",
            "category": "Rings",
            "sku": f"GR{counter['n']:03d}",
            "weight": 10,
            "purity": "22K",
            "current_rate": 6000,
            "making_charge": 500,
            "stock_quantity": 5,
        }
        payload.update(overrides)
        response = client.post("/api/products", json=payload)
        assert response.status_code == 201, response.json()
        return response.json()["data"]

    return _make


@pytest.fixture
def make_customer(client):
    def _make(**overrides):
        payload = {"name": "Rajesh Kumar", "phone": "+91 9876543210"}
        payload.update(overrides)
        response = client.post("/api/customers", json=payload)
        assert response.status_code == 201, response.json()
        return response.json()["data"]

    return _make


def line_for(product, quantity=1):
    return {
        "product_id": product["id"],
        "product_name": product["name"],
        "weight": product["weight"],
        "rate": product["current_rate"],
        "making_charge": product["making_charge"],
        "quantity": quantity,
    }


@pytest.fixture
def document_payload():
    """Bill/invoice body for the given lines with totals left to the server."""

    def _make(*items, **overrides):
        payload = {
            "customer_name": "Walk-in Customer",
            "customer_phone": "9000000000",
            "items": list(items),
            "total_amount": 0,
            "payment_method": "cash",
        }
        payload.update(overrides)
        return payload

    return _make


@pytest.fixture
def line():
    return line_for
