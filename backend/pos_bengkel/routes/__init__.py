from .system import system_bp
from .foundation import foundation_bp
from .customers import customer_bp
from .inventory import inventory_bp
from .service import service_bp
from .financial import financial_bp

BLUEPRINTS = (system_bp, foundation_bp, customer_bp, inventory_bp, service_bp, financial_bp)

__all__ = ["BLUEPRINTS"]
