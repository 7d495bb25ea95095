# Overview: The uniform resource contract exercised over representative aggregates.

"""
Create/Get/Update/Delete/List/Search behave identically for every aggregate
registered in pos_bengkel.resources; these tests walk the contract over
customers, vehicles and suppliers, plus the customer scenarios.
"""

from datetime import datetime

import pytest

from pos_bengkel.models import Customer
from pos_bengkel.resources import RESOURCES


class TestCreateAndGet:
    def test_create_then_get_returns_same_fields(self, api):
        body = {
            "name": "Siti Rahma",
            "phone_number": "0811-2233-4455",
            "email": "siti@example.com",
            "address": "Jl. Braga 12",
        }
        created = api.create("/customers", body)

        status, envelope = api.get(f"/customers/{created['customer_id']}")
        assert status == 200
        assert envelope["message"] == "Customer retrieved successfully"
        fetched = envelope["data"]
        assert fetched == created
        assert fetched["name"] == "Siti Rahma"
        assert fetched["phone_number"] == "081122334455"
        assert fetched["email"] == "siti@example.com"
        assert fetched["address"] == "Jl. Braga 12"
        assert fetched["created_at"].endswith("Z")

    def test_scenario_customer_phone_is_normalized_and_looked_up(self, api, client):
        status, envelope = api.post("/customers", {"name": "Alice", "phone": "+62-812-0000-0001"})
        assert status == 201
        customer = envelope["data"]
        assert customer["phone_number"] == "+6281200000001"
        assert isinstance(customer["customer_id"], int)

        # '+' unescaped in a query string decodes to a space
        response = client.get("/api/v1/customers/phone?phone_number=+6281200000001")
        assert response.status_code == 200
        assert response.get_json()["data"]["customer_id"] == customer["customer_id"]

        response = client.get("/api/v1/customers/phone?phone_number=%2B6281200000001")
        assert response.get_json()["data"]["customer_id"] == customer["customer_id"]

    def test_unknown_field_rejected(self, api):
        status, body = api.post("/customers", {"name": "Joko", "phone_number": "0812345678", "vip": True})
        assert status == 400
        assert body["error"] == "Unknown field: vip"

    def test_server_fields_not_writable(self, api):
        status, body = api.post("/customers", {
            "name": "Joko",
            "phone_number": "0812345678",
            "created_at": "2020-01-01T00:00:00Z",
        })
        assert status == 400
        assert body["error"] == "Field not allowed: created_at"

    @pytest.mark.parametrize("phone", ["12345", "0812-abc-999", "+62 812 +1"])
    def test_invalid_phone(self, api, phone):
        status, body = api.post("/customers", {"name": "Joko", "phone_number": phone})
        assert status == 400
        assert "phone_number" in body["error"]

    def test_name_length_rule(self, api):
        status, body = api.post("/customers", {"name": "J", "phone_number": "0812345678"})
        assert status == 400
        assert body["error"] == "name must be between 2 and 255 characters"

    def test_missing_parent_reference(self, api):
        status, body = api.post("/customer-vehicles", {
            "customer_id": 999999,
            "plate_number": "B 1 XX",
            "brand": "Toyota",
            "model": "Avanza",
            "production_year": 2015,
        })
        assert status == 400
        assert body["message"] == "Failed to create customer vehicle"
        assert body["error"] == "customer_id 999999 does not exist"

    def test_get_missing(self, api):
        status, body = api.get("/customers/999999")
        assert status == 404
        assert body["status"] == "error"
        assert body["message"] == "Customer not found"


class TestUpdate:
    def test_partial_update_merges(self, api, customer):
        customer_id = customer["customer_id"]
        status, body = api.put(f"/customers/{customer_id}", {"address": "Jl. Dago 45"})
        assert status == 200
        assert body["message"] == "Customer updated successfully"

        _, envelope = api.get(f"/customers/{customer_id}")
        fetched = envelope["data"]
        assert fetched["address"] == "Jl. Dago 45"
        assert fetched["name"] == customer["name"]
        assert fetched["phone_number"] == customer["phone_number"]

    def test_null_clears_nullable_field(self, api, customer):
        customer_id = customer["customer_id"]
        api.put(f"/customers/{customer_id}", {"email": "budi@example.com"})
        status, body = api.put(f"/customers/{customer_id}", {"email": None})
        assert status == 200
        assert body["data"]["email"] is None

    def test_null_on_required_field_rejected(self, api, customer):
        status, body = api.put(f"/customers/{customer['customer_id']}", {"name": None})
        assert status == 400
        assert body["error"] == "name cannot be null"

    def test_update_touches_updated_at_even_when_unchanged(self, api, customer, db_session):
        stored = db_session.get(Customer, customer["customer_id"])
        stored.updated_at = datetime(2020, 1, 1)
        db_session.commit()

        status, body = api.put(f"/customers/{customer['customer_id']}", {"name": customer["name"]})
        assert status == 200
        assert body["data"]["updated_at"] != "2020-01-01T00:00:00Z"

        db_session.refresh(stored)
        assert stored.updated_at > datetime(2020, 1, 1)

        status, _ = api.put(f"/customers/{customer['customer_id']}", {})
        assert status == 200

    def test_update_missing(self, api):
        status, body = api.put("/customers/999999", {"address": "x"})
        assert status == 404
        assert body["message"] == "Customer not found"

    def test_update_to_taken_unique_value(self, api, customer):
        other = api.create("/customers", {"name": "Rina", "phone_number": "089900001111"})
        status, body = api.put(f"/customers/{other['customer_id']}", {"phone_number": customer["phone_number"]})
        assert status == 409
        assert body["message"] == "Failed to update customer"

    def test_update_vehicle_to_missing_owner(self, api, vehicle):
        status, body = api.put(f"/customer-vehicles/{vehicle['vehicle_id']}", {"customer_id": 999999})
        assert status == 400
        assert body["error"] == "customer_id 999999 does not exist"


class TestDelete:
    def test_delete_then_read_is_not_found(self, api):
        supplier = api.create("/suppliers", {"name": "PT Sumber Oli"})
        supplier_id = supplier["supplier_id"]

        status, _ = api.delete(f"/suppliers/{supplier_id}")
        assert status == 200
        assert api.get(f"/suppliers/{supplier_id}")[0] == 404
        assert api.delete(f"/suppliers/{supplier_id}")[0] == 404
        assert api.put(f"/suppliers/{supplier_id}", {"name": "Again"})[0] == 404

    def test_scenario_children_listed_and_delete_refused(self, api, customer):
        customer_id = customer["customer_id"]
        first = api.create("/customer-vehicles", {
            "customer_id": customer_id, "plate_number": "D 1 AA", "brand": "Honda",
            "model": "Beat", "production_year": 2018,
        })
        second = api.create("/customer-vehicles", {
            "customer_id": customer_id, "plate_number": "D 2 BB", "brand": "Yamaha",
            "model": "NMAX", "production_year": 2021,
        })

        status, body = api.get(f"/customers/{customer_id}/vehicles")
        assert status == 200
        assert [v["vehicle_id"] for v in body["data"]] == [first["vehicle_id"], second["vehicle_id"]]

        status, body = api.delete(f"/customers/{customer_id}")
        assert status == 409
        assert body["message"] == "Failed to delete customer"
        assert "customer_vehicles" in body["error"]
        assert api.get(f"/customers/{customer_id}")[0] == 200

    def test_children_of_missing_parent(self, api):
        status, body = api.get("/customers/999999/vehicles")
        assert status == 404
        assert body["message"] == "Customer not found"


class TestListAndSearch:
    def test_small_set_returns_everything(self, api):
        for i in range(3):
            api.create("/suppliers", {"name": f"Supplier {i}"})
        status, body = api.get("/suppliers")
        assert status == 200
        assert body["message"] == "Suppliers retrieved successfully"
        assert [s["name"] for s in body["data"]] == ["Supplier 0", "Supplier 1", "Supplier 2"]

    def test_pages_in_insertion_order(self, api):
        ids = [api.create("/suppliers", {"name": f"Supplier {i:02d}"})["supplier_id"] for i in range(23)]

        _, first = api.get("/suppliers")
        _, second = api.get("/suppliers?page=2")
        _, third = api.get("/suppliers?page=3&limit=10")
        assert [s["supplier_id"] for s in first["data"]] == ids[:10]
        assert [s["supplier_id"] for s in second["data"]] == ids[10:20]
        assert [s["supplier_id"] for s in third["data"]] == ids[20:]

        _, beyond = api.get("/suppliers?page=9")
        assert beyond["data"] == []

    @pytest.mark.parametrize("path", [
        "/customers?page=4294967295&limit=4294967295",
        "/customers/search?q=a&page=4294967295&limit=4294967295",
        "/outlets/status?status=active&page=4294967295&limit=4294967295",
    ])
    def test_largest_page_is_empty_not_an_error(self, api, customer, path):
        status, body = api.get(path)
        assert status == 200
        assert body["data"] == []

    def test_custom_limit(self, api):
        for i in range(5):
            api.create("/suppliers", {"name": f"Supplier {i}"})
        _, body = api.get("/suppliers?limit=2&page=2")
        assert [s["name"] for s in body["data"]] == ["Supplier 2", "Supplier 3"]

    def test_empty_query_rejected(self, api):
        status, body = api.get("/customers/search?q=")
        assert status == 400
        assert body["message"] == "Failed to search customers"
        assert body["error"] == "Search query is required"

        status, _ = api.get("/customers/search?q=%20%20")
        assert status == 400

    def test_search_is_case_insensitive_substring(self, api, customer):
        api.create("/customers", {"name": "Dewi Lestari", "phone_number": "085711112222"})

        status, body = api.get("/customers/search?q=SANTO")
        assert status == 200
        assert body["message"] == "Customers search completed successfully"
        assert [c["customer_id"] for c in body["data"]] == [customer["customer_id"]]

        _, by_phone = api.get("/customers/search?q=0857")
        assert [c["name"] for c in by_phone["data"]] == ["Dewi Lestari"]

    def test_search_wildcards_are_literal(self, api, customer):
        _, body = api.get("/customers/search?q=%25")
        assert body["data"] == []

    def test_vehicle_search_and_plate_lookup(self, api, vehicle):
        _, body = api.get("/customer-vehicles/search?q=vario")
        assert [v["vehicle_id"] for v in body["data"]] == [vehicle["vehicle_id"]]

        status, body = api.get("/customer-vehicles/plate?plate_number=D%201234%20AB")
        assert status == 200
        assert body["data"]["vehicle_id"] == vehicle["vehicle_id"]

        status, body = api.get("/customer-vehicles/plate?plate_number=Z%209%20ZZ")
        assert status == 404
        assert body["message"] == "Customer vehicle not found"

    def test_lookup_requires_value(self, api):
        status, body = api.get("/customers/phone")
        assert status == 400
        assert body["error"] == "phone_number is required"


class TestUniqueSecondaryKeys:
    def test_distinct_values_succeed_duplicates_conflict(self, api):
        api.create("/customers", {"name": "Andi", "phone_number": "081300000001"})
        api.create("/customers", {"name": "Andi", "phone_number": "081300000002"})

        status, body = api.post("/customers", {"name": "Andi", "phone_number": "0813-0000-0001"})
        assert status == 409
        assert body["error"] == "customer with phone_number '081300000001' already exists"

    def test_every_registered_resource_is_routed(self, app):
        rules = {rule.rule for rule in app.url_map.iter_rules()}
        for spec in RESOURCES.values():
            assert f"/api/v1/{spec.collection}" in rules
            assert f"/api/v1/{spec.collection}/<id>" in rules
