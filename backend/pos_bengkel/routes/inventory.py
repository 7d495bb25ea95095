# Overview: Inventory context routes; products, categories, suppliers, unit types and stock.

"""
Besides the generic resource routes:

    GET  /products/low-stock?threshold=5     stock_qty <= threshold
    POST /products/<id>/stock                {"quantity": signed int, "note"?: str}
    GET  /products/<id>/stock-movements      stock ledger, oldest first
"""

from flask import Blueprint, request

from ..errors import DomainError, NotFoundError, ValidationError
from ..resources import get_resource
from .resource import INVALID_BODY, dump, json_body, parse_id, register_resource, usecases
from .responses import fail, success

inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/v1")

for _name in ("category", "supplier", "unit_type", "product"):
    register_resource(inventory_bp, _name)

PRODUCT = get_resource("product")


@inventory_bp.get("/products/low-stock")
def low_stock_products():
    try:
        products = usecases().products.low_stock(request.args.get("threshold"))
    except DomainError as e:
        return fail("Failed to retrieve low stock products", e)
    return success("Low stock products retrieved successfully", dump(products))


@inventory_bp.post("/products/<id>/stock")
def adjust_product_stock(id):
    try:
        product_id = parse_id(id)
    except ValidationError as e:
        return fail(PRODUCT.msg_invalid_id(), e)
    try:
        payload = json_body()
    except ValidationError as e:
        return fail(INVALID_BODY, e)
    try:
        product = usecases().products.adjust_stock(product_id, payload)
    except NotFoundError as e:
        return fail(PRODUCT.msg_not_found(), e)
    except DomainError as e:
        return fail("Failed to update product stock", e)
    return success("Product stock updated successfully", product.to_dict())


@inventory_bp.get("/products/<id>/stock-movements")
def product_stock_movements(id):
    try:
        product_id = parse_id(id)
    except ValidationError as e:
        return fail(PRODUCT.msg_invalid_id(), e)
    try:
        movements = usecases().products.movements(product_id)
    except NotFoundError as e:
        return fail(PRODUCT.msg_not_found(), e)
    except DomainError as e:
        return fail("Failed to retrieve stock movements", e)
    return success("Stock movements retrieved successfully", dump(movements))
