# Overview: Customer context routes; customers and their vehicles.

from flask import Blueprint

from .resource import register_resource

customer_bp = Blueprint("customer", __name__, url_prefix="/api/v1")

register_resource(customer_bp, "customer")
register_resource(customer_bp, "customer_vehicle")
