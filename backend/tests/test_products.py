# Overview: Pytest coverage for product stock, secondary keys and low-stock queries.

import pytest


class TestProductCreation:
    def test_scenario_create_and_adjust(self, api):
        status, envelope = api.post("/products", {
            "sku": "SKU-1",
            "barcode": "B1",
            "name": "Oil Filter",
            "price": "50000",
            "stock_qty": 10,
            "usage_status": "new",
        })
        assert status == 201
        product = envelope["data"]
        assert product["price"] == "50000.00"
        assert product["stock_qty"] == 10
        product_id = product["product_id"]

        status, body = api.post(f"/products/{product_id}/stock", {"quantity": -3})
        assert status == 200
        assert body["message"] == "Product stock updated successfully"
        assert body["data"]["stock_qty"] == 7
        assert api.get(f"/products/{product_id}")[1]["data"]["stock_qty"] == 7

        status, body = api.post(f"/products/{product_id}/stock", {"quantity": -100})
        assert status == 400
        assert body["status"] == "error"
        assert body["error"].startswith("invariant: insufficient stock")
        assert api.get(f"/products/{product_id}")[1]["data"]["stock_qty"] == 7

    def test_scenario_duplicate_sku(self, api, make_product):
        make_product("SKU-1", barcode="B1")
        status, body = api.post("/products", {"sku": "SKU-1", "barcode": "B2", "name": "Oil Filter", "price": "1"})
        assert status == 409
        assert body["status"] == "error"
        assert body["message"] == "Failed to create product"
        assert body["error"] == "product with sku 'SKU-1' already exists"

    def test_duplicate_barcode(self, api, make_product):
        make_product("SKU-1", barcode="B1")
        status, _ = api.post("/products", {"sku": "SKU-2", "barcode": "B1", "name": "Oil Filter", "price": "1"})
        assert status == 409

    def test_products_without_barcode_coexist(self, make_product):
        first = make_product("SKU-A")
        second = make_product("SKU-B")
        assert first["barcode"] is None and second["barcode"] is None

    @pytest.mark.parametrize("price", ["-1", "12.345", "abc", True, "NaN"])
    def test_invalid_price(self, api, price):
        status, body = api.post("/products", {"sku": "SKU-X", "name": "Busi", "price": price})
        assert status == 400
        assert body["message"] == "Failed to create product"

    def test_float_price_is_exact(self, make_product):
        product = make_product("SKU-F", price=0.1)
        assert product["price"] == "0.10"

    def test_negative_opening_stock(self, api):
        status, body = api.post("/products", {"sku": "SKU-N", "name": "Busi", "price": "1", "stock_qty": -1})
        assert status == 400
        assert body["error"] == "stock_qty must be >= 0"

    def test_usage_status_enum(self, api):
        status, body = api.post("/products", {"sku": "SKU-U", "name": "Busi", "price": "1", "usage_status": "broken"})
        assert status == 400
        assert body["error"].startswith("usage_status must be one of")

    def test_opening_stock_recorded_in_ledger(self, api, product):
        status, body = api.get(f"/products/{product['product_id']}/stock-movements")
        assert status == 200
        assert [(m["delta"], m["stock_after"], m["reason"]) for m in body["data"]] == [(10, 10, "opening")]


class TestStockAdjustment:
    @pytest.mark.parametrize("k", [0, 1, 7, 10])
    def test_within_stock_succeeds(self, api, product, k):
        product_id = product["product_id"]
        if k == 0:
            status, body = api.post(f"/products/{product_id}/stock", {"quantity": 0})
            assert status == 400
            assert body["error"] == "quantity must be non-zero"
            return
        status, body = api.post(f"/products/{product_id}/stock", {"quantity": -k})
        assert status == 200
        assert body["data"]["stock_qty"] == 10 - k

    @pytest.mark.parametrize("k", [11, 50, 4294967295])
    def test_beyond_stock_fails_and_leaves_stock(self, api, product, k):
        product_id = product["product_id"]
        status, body = api.post(f"/products/{product_id}/stock", {"quantity": -k})
        assert status == 400
        assert body["message"] == "Failed to update product stock"
        assert api.get(f"/products/{product_id}")[1]["data"]["stock_qty"] == 10

    def test_receipt_increases_stock_and_writes_ledger(self, api, product):
        product_id = product["product_id"]
        status, body = api.post(f"/products/{product_id}/stock", {"quantity": 5, "note": "PO-17"})
        assert status == 200
        assert body["data"]["stock_qty"] == 15

        _, ledger = api.get(f"/products/{product_id}/stock-movements")
        last = ledger["data"][-1]
        assert (last["delta"], last["stock_after"], last["reason"], last["note"]) == (5, 15, "adjustment", "PO-17")

    def test_failed_adjustment_writes_no_ledger_row(self, api, product):
        product_id = product["product_id"]
        api.post(f"/products/{product_id}/stock", {"quantity": -11})
        _, ledger = api.get(f"/products/{product_id}/stock-movements")
        assert len(ledger["data"]) == 1

    def test_missing_product(self, api):
        status, body = api.post("/products/999999/stock", {"quantity": 1})
        assert status == 404
        assert body["message"] == "Product not found"

    @pytest.mark.parametrize("payload, error", [
        ({}, "Missing required fields: quantity"),
        ({"quantity": 1.5}, "quantity must be an integer, not a decimal"),
        ({"quantity": "2"}, None),
        ({"quantity": 1, "reason": "x"}, "Unknown field: reason"),
        ({"quantity": 1, "note": 5}, "note must be a string"),
    ])
    def test_payload_validation(self, api, product, payload, error):
        status, body = api.post(f"/products/{product['product_id']}/stock", payload)
        if error is None:
            assert status == 200
            assert body["data"]["stock_qty"] == 12
        else:
            assert status == 400
            assert body["error"] == error

    def test_stock_not_writable_through_update(self, api, product):
        status, body = api.put(f"/products/{product['product_id']}", {"stock_qty": 99})
        assert status == 400
        assert body["error"] == "Field cannot be updated: stock_qty"

    def test_update_other_fields(self, api, product):
        status, body = api.put(f"/products/{product['product_id']}", {"price": "55000.50", "shelf_location": "R2-B"})
        assert status == 200
        assert body["data"]["price"] == "55000.50"
        assert body["data"]["shelf_location"] == "R2-B"
        assert body["data"]["stock_qty"] == 10


class TestProductQueries:
    def test_low_stock_returns_exactly_matching(self, api, make_product):
        low = make_product("SKU-L1", stock_qty=2)
        edge = make_product("SKU-L2", stock_qty=5)
        make_product("SKU-H1", stock_qty=6)
        empty = make_product("SKU-L0")

        status, body = api.get("/products/low-stock")
        assert status == 200
        assert {p["product_id"] for p in body["data"]} == {low["product_id"], edge["product_id"], empty["product_id"]}

        _, body = api.get("/products/low-stock?threshold=2")
        assert {p["product_id"] for p in body["data"]} == {low["product_id"], empty["product_id"]}

        _, body = api.get("/products/low-stock?threshold=0")
        assert [p["product_id"] for p in body["data"]] == [empty["product_id"]]

    def test_low_stock_bad_threshold(self, api):
        status, body = api.get("/products/low-stock?threshold=-1")
        assert status == 400
        assert body["message"] == "Failed to retrieve low stock products"

    def test_sku_and_barcode_lookup(self, api, product):
        status, body = api.get("/products/sku?sku=SKU-OIL")
        assert status == 200
        assert body["data"]["product_id"] == product["product_id"]

        _, body = api.get("/products/barcode?barcode=8990001")
        assert body["data"]["product_id"] == product["product_id"]

        status, body = api.get("/products/sku?sku=NOPE")
        assert status == 404
        assert body["message"] == "Product not found"

    def test_usage_status_filter(self, api, make_product):
        make_product("SKU-N1")
        used = make_product("SKU-U1", usage_status="used")

        status, body = api.get("/products/usage-status?usage_status=used")
        assert status == 200
        assert [p["product_id"] for p in body["data"]] == [used["product_id"]]

        status, body = api.get("/products/usage-status?usage_status=melted")
        assert status == 400

    def test_search(self, api, product, make_product):
        make_product("SKU-BUSI", name="Busi NGK")
        _, body = api.get("/products/search?q=oil")
        assert [p["product_id"] for p in body["data"]] == [product["product_id"]]

    def test_products_by_category_and_supplier(self, api, make_product):
        category = api.create("/categories", {"name": "Filter"})
        supplier = api.create("/suppliers", {"name": "PT Astra Otoparts"})
        linked = make_product("SKU-C1", category_id=category["category_id"], supplier_id=supplier["supplier_id"])
        make_product("SKU-C2")

        _, by_category = api.get(f"/categories/{category['category_id']}/products")
        _, by_supplier = api.get(f"/suppliers/{supplier['supplier_id']}/products")
        assert [p["product_id"] for p in by_category["data"]] == [linked["product_id"]]
        assert [p["product_id"] for p in by_supplier["data"]] == [linked["product_id"]]

        status, _ = api.delete(f"/categories/{category['category_id']}")
        assert status == 409

    def test_delete_product_removes_ledger(self, api, product):
        product_id = product["product_id"]
        status, _ = api.delete(f"/products/{product_id}")
        assert status == 200
        assert api.get(f"/products/{product_id}/stock-movements")[0] == 404
