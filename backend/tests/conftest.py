"""
Pytest fixtures for POS Bengkel backend tests.

Provides the application on an in-memory database, a clean database per test,
the test client and small factories that create entities through the API.
"""

import pytest

from pos_bengkel import create_app
from pos_bengkel.config import TestConfig
from pos_bengkel.extensions import db

API = "/api/v1"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app, db_session):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    # Clear all data but keep schema
    for table in reversed(db.metadata.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()

    yield db.session

    # Cleanup after test
    db.session.rollback()


class Api:
    """Thin JSON helper over the test client; every call returns (status_code, envelope)."""

    def __init__(self, client):
        self.client = client

    def _call(self, method, path, body=None, **kwargs):
        response = getattr(self.client, method)(f"{API}{path}", json=body, **kwargs)
        return response.status_code, response.get_json()

    def get(self, path, **kwargs):
        return self._call("get", path, **kwargs)

    def post(self, path, body=None, **kwargs):
        return self._call("post", path, body, **kwargs)

    def put(self, path, body=None, **kwargs):
        return self._call("put", path, body, **kwargs)

    def delete(self, path, **kwargs):
        return self._call("delete", path, **kwargs)

    def create(self, path, body):
        status, envelope = self.post(path, body)
        assert status == 201, envelope
        return envelope["data"]


@pytest.fixture
def api(client):
    return Api(client)


@pytest.fixture
def outlet(api):
    return api.create("/outlets", {"name": "Bengkel Pusat", "branch_type": "main", "city": "Bandung"})


@pytest.fixture
def customer(api):
    return api.create("/customers", {"name": "Budi Santoso", "phone_number": "081234567890"})


@pytest.fixture
def vehicle(api, customer):
    return api.create("/customer-vehicles", {
        "customer_id": customer["customer_id"],
        "plate_number": "D 1234 AB",
        "brand": "Honda",
        "model": "Vario 125",
        "production_year": 2019,
    })


@pytest.fixture
def make_product(api):
    """Factory: make_product(sku, stock_qty=0, **fields) -> product dict."""
    def _make(sku, stock_qty=0, **fields):
        body = {"sku": sku, "name": f"Part {sku}", "price": "25000", "stock_qty": stock_qty}
        body.update(fields)
        return api.create("/products", body)
    return _make


@pytest.fixture
def product(make_product):
    return make_product("SKU-OIL", stock_qty=10, barcode="8990001", name="Oil Filter", price="50000")
