from .foundation import Outlet, User, Role, Permission, RolePermission
from .customers import Customer, CustomerVehicle
from .inventory import Category, Supplier, UnitType, Product, StockMovement
from .services import ServiceCategory, Service, ServiceJob, ServiceDetail, ServiceJobHistory
from .financial import PaymentMethod, Transaction, TransactionItem, CashFlow

__all__ = [
    'Outlet', 'User', 'Role', 'Permission', 'RolePermission',
    'Customer', 'CustomerVehicle',
    'Category', 'Supplier', 'UnitType', 'Product', 'StockMovement',
    'ServiceCategory', 'Service', 'ServiceJob', 'ServiceDetail', 'ServiceJobHistory',
    'PaymentMethod', 'Transaction', 'TransactionItem', 'CashFlow',
]
