# Overview: Registration table for every aggregate served through the generic resource pipeline.

"""
Each ResourceSpec declares, once, what differs between aggregates:

- the model and the name of its id on the wire (`customer_id`, `vehicle_id`, ...)
- the validation policy and the per-aggregate rule function
- secondary-unique lookups (`/products/sku?sku=...`)
- non-unique filters (`/transactions/status?status=...`)
- searchable fields (`/customers/search?q=...`)
- parents, which produce children routes (`/customers/<id>/vehicles`)

Repositories, usecases and routes are generic over this table; only the
behaviour that cannot be declared (stock, sales posting, passwords, ...) lives
in dedicated usecases.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from .models import (
    CashFlow,
    Category,
    Customer,
    CustomerVehicle,
    Outlet,
    PaymentMethod,
    Permission,
    Product,
    Role,
    Service,
    ServiceCategory,
    ServiceDetail,
    ServiceJob,
    Supplier,
    Transaction,
    UnitType,
    User,
)
from .models.financial import CASH_FLOW_KINDS, PAYMENT_KINDS, TRANSACTION_STATUSES, TRANSACTION_TYPES
from .models.foundation import OUTLET_STATUSES
from .models.inventory import USAGE_STATUSES
from .models.services import SERVICE_DETAIL_ITEM_TYPES, SERVICE_JOB_STATUSES
from .validation import (
    ModelValidationPolicy,
    enforce_rules_cash_flow,
    enforce_rules_named,
    enforce_rules_product,
    enforce_rules_service,
    enforce_rules_service_detail,
    enforce_rules_transaction,
    enforce_rules_user,
    enforce_rules_vehicle,
    normalize_phone,
)


@dataclass(frozen=True)
class Lookup:
    """Secondary-unique key served at /<collection>/<path>?<param>=value."""
    path: str
    field: str
    params: tuple[str, ...]
    normalize: Optional[Callable[[str], str]] = None


@dataclass(frozen=True)
class Filter:
    """Non-unique equality filter served at /<collection>/<path>?<param>=value."""
    path: str
    field: str
    params: tuple[str, ...]
    choices: tuple[str, ...] = ()


@dataclass(frozen=True)
class Parent:
    """Foreign parent: GET /<parent collection>/<id>/<segment> lists the children."""
    field: str
    resource: str
    segment: str


@dataclass(frozen=True)
class ResourceSpec:
    name: str
    label: str
    plural: str
    collection: str
    model: type
    id_key: str
    policy: ModelValidationPolicy
    rules: Optional[Callable[[dict], None]] = None
    lookups: tuple[Lookup, ...] = ()
    filters: tuple[Filter, ...] = ()
    search_fields: tuple[str, ...] = ()
    parents: tuple[Parent, ...] = ()

    # Messages rendered in the envelope
    @property
    def noun(self) -> str:
        return self.label.lower()

    @property
    def plural_noun(self) -> str:
        return self.plural.lower()

    def msg_created(self) -> str:
        return f"{self.label} created successfully"

    def msg_retrieved(self) -> str:
        return f"{self.label} retrieved successfully"

    def msg_listed(self) -> str:
        return f"{self.plural} retrieved successfully"

    def msg_searched(self) -> str:
        return f"{self.plural} search completed successfully"

    def msg_updated(self) -> str:
        return f"{self.label} updated successfully"

    def msg_deleted(self) -> str:
        return f"{self.label} deleted successfully"

    def msg_not_found(self) -> str:
        return f"{self.label} not found"

    def msg_invalid_id(self) -> str:
        return f"Invalid {self.noun} ID"

    def msg_failed(self, verb: str, many: bool = False) -> str:
        return f"Failed to {verb} {self.plural_noun if many else self.noun}"


def _policy(
    writable: str,
    required: str,
    *,
    create_only: str = "",
    extra: str = "",
    aliases: Optional[dict] = None,
    enums: Optional[dict] = None,
) -> ModelValidationPolicy:
    return ModelValidationPolicy(
        writable_fields=frozenset(writable.split()),
        required_on_create=frozenset(required.split()),
        create_only=frozenset(create_only.split()),
        extra_fields=frozenset(extra.split()),
        aliases=aliases or {},
        enums=enums or {},
    )


_SPECS = (
    # Foundation
    ResourceSpec(
        name="user",
        label="User",
        plural="Users",
        collection="users",
        model=User,
        id_key="user_id",
        policy=_policy("name email outlet_id", "name email", extra="password"),
        rules=enforce_rules_user,
        lookups=(Lookup("email", "email", ("email",)),),
        parents=(Parent("outlet_id", "outlet", "users"),),
    ),
    ResourceSpec(
        name="outlet",
        label="Outlet",
        plural="Outlets",
        collection="outlets",
        model=Outlet,
        id_key="outlet_id",
        policy=_policy(
            "name branch_type city address phone_number status",
            "name branch_type city",
            aliases={"outlet_name": "name", "phone": "phone_number"},
            enums={"status": OUTLET_STATUSES},
        ),
        rules=enforce_rules_named,
        filters=(Filter("status", "status", ("status",), OUTLET_STATUSES),),
    ),
    ResourceSpec(
        name="role",
        label="Role",
        plural="Roles",
        collection="roles",
        model=Role,
        id_key="role_id",
        policy=_policy("name", "name"),
        lookups=(Lookup("name", "name", ("name",)),),
    ),
    ResourceSpec(
        name="permission",
        label="Permission",
        plural="Permissions",
        collection="permissions",
        model=Permission,
        id_key="permission_id",
        policy=_policy("name", "name"),
        lookups=(Lookup("name", "name", ("name",)),),
    ),
    # Customer
    ResourceSpec(
        name="customer",
        label="Customer",
        plural="Customers",
        collection="customers",
        model=Customer,
        id_key="customer_id",
        policy=_policy(
            "name phone_number email address",
            "name phone_number",
            aliases={"phone": "phone_number"},
        ),
        rules=enforce_rules_named,
        lookups=(Lookup("phone", "phone_number", ("phone_number", "phone"), normalize_phone),),
        search_fields=("name", "phone_number", "email"),
    ),
    ResourceSpec(
        name="customer_vehicle",
        label="Customer vehicle",
        plural="Customer vehicles",
        collection="customer-vehicles",
        model=CustomerVehicle,
        id_key="vehicle_id",
        policy=_policy(
            "customer_id plate_number brand model type production_year color chassis_number engine_number notes",
            "customer_id plate_number brand model production_year",
            aliases={"plate": "plate_number", "make": "brand", "year": "production_year"},
        ),
        rules=enforce_rules_vehicle,
        lookups=(Lookup("plate", "plate_number", ("plate_number", "plate")),),
        search_fields=("plate_number", "brand", "model", "chassis_number", "engine_number"),
        parents=(Parent("customer_id", "customer", "vehicles"),),
    ),
    # Inventory
    ResourceSpec(
        name="category",
        label="Category",
        plural="Categories",
        collection="categories",
        model=Category,
        id_key="category_id",
        policy=_policy("name description", "name"),
        rules=enforce_rules_named,
    ),
    ResourceSpec(
        name="supplier",
        label="Supplier",
        plural="Suppliers",
        collection="suppliers",
        model=Supplier,
        id_key="supplier_id",
        policy=_policy(
            "name contact_person_name phone_number email address",
            "name",
            aliases={"supplier_name": "name", "phone": "phone_number"},
        ),
        rules=enforce_rules_named,
        search_fields=("name", "contact_person_name", "phone_number", "email"),
    ),
    ResourceSpec(
        name="unit_type",
        label="Unit type",
        plural="Unit types",
        collection="unit-types",
        model=UnitType,
        id_key="unit_type_id",
        policy=_policy("name abbreviation", "name"),
    ),
    ResourceSpec(
        name="product",
        label="Product",
        plural="Products",
        collection="products",
        model=Product,
        id_key="product_id",
        policy=_policy(
            "sku barcode name description category_id supplier_id unit_type_id price cost_price "
            "stock_qty usage_status low_stock_threshold shelf_location is_active",
            "sku name price",
            create_only="stock_qty",
            enums={"usage_status": USAGE_STATUSES},
        ),
        rules=enforce_rules_product,
        lookups=(
            Lookup("sku", "sku", ("sku",)),
            Lookup("barcode", "barcode", ("barcode",)),
        ),
        filters=(Filter("usage-status", "usage_status", ("usage_status", "status"), USAGE_STATUSES),),
        search_fields=("name", "sku", "barcode", "description"),
        parents=(
            Parent("category_id", "category", "products"),
            Parent("supplier_id", "supplier", "products"),
        ),
    ),
    # Service
    ResourceSpec(
        name="service_category",
        label="Service category",
        plural="Service categories",
        collection="service-categories",
        model=ServiceCategory,
        id_key="service_category_id",
        policy=_policy("name description", "name"),
        rules=enforce_rules_named,
    ),
    ResourceSpec(
        name="service",
        label="Service",
        plural="Services",
        collection="services",
        model=Service,
        id_key="service_id",
        policy=_policy(
            "code name category_id price duration description",
            "code name category_id price",
            aliases={"service_code": "code", "service_category_id": "category_id", "fee": "price"},
        ),
        rules=enforce_rules_service,
        lookups=(Lookup("code", "code", ("service_code", "code")),),
        search_fields=("name", "code", "description"),
        parents=(Parent("category_id", "service_category", "services"),),
    ),
    ResourceSpec(
        name="service_job",
        label="Service job",
        plural="Service jobs",
        collection="service-jobs",
        model=ServiceJob,
        id_key="service_job_id",
        policy=_policy(
            "job_code customer_id vehicle_id outlet_id technician_id problem_description "
            "technician_notes status received_at down_payment grand_total",
            "job_code customer_id vehicle_id outlet_id problem_description",
            enums={"status": SERVICE_JOB_STATUSES},
        ),
        lookups=(Lookup("code", "job_code", ("job_code", "code")),),
        filters=(Filter("status", "status", ("status",), SERVICE_JOB_STATUSES),),
        parents=(
            Parent("customer_id", "customer", "service-jobs"),
            Parent("vehicle_id", "customer_vehicle", "service-jobs"),
        ),
    ),
    ResourceSpec(
        name="service_detail",
        label="Service detail",
        plural="Service details",
        collection="service-details",
        model=ServiceDetail,
        id_key="detail_id",
        policy=_policy(
            "service_job_id item_type item_id description serial_number_used quantity price_per_item cost_per_item",
            "service_job_id item_type item_id description quantity price_per_item",
            enums={"item_type": SERVICE_DETAIL_ITEM_TYPES},
        ),
        rules=enforce_rules_service_detail,
        parents=(Parent("service_job_id", "service_job", "details"),),
    ),
    # Financial
    ResourceSpec(
        name="payment_method",
        label="Payment method",
        plural="Payment methods",
        collection="payment-methods",
        model=PaymentMethod,
        id_key="payment_method_id",
        policy=_policy("name kind is_active", "name kind", enums={"kind": PAYMENT_KINDS}),
    ),
    ResourceSpec(
        name="transaction",
        label="Transaction",
        plural="Transactions",
        collection="transactions",
        model=Transaction,
        id_key="transaction_id",
        policy=_policy(
            "invoice_no customer_id outlet_id user_id payment_method_id transaction_type status "
            "total occurred_at notes",
            "invoice_no outlet_id",
            create_only="items",
            extra="items",
            aliases={"invoice_number": "invoice_no", "transaction_date": "occurred_at"},
            enums={"status": TRANSACTION_STATUSES, "transaction_type": TRANSACTION_TYPES},
        ),
        rules=enforce_rules_transaction,
        lookups=(Lookup("invoice", "invoice_no", ("invoice_number", "invoice_no")),),
        filters=(Filter("status", "status", ("status",), TRANSACTION_STATUSES),),
        parents=(
            Parent("customer_id", "customer", "transactions"),
            Parent("outlet_id", "outlet", "transactions"),
        ),
    ),
    ResourceSpec(
        name="cash_flow",
        label="Cash flow",
        plural="Cash flows",
        collection="cash-flows",
        model=CashFlow,
        id_key="cash_flow_id",
        policy=_policy(
            "kind amount occurred_at source notes outlet_id user_id ref_transaction_id",
            "kind amount source",
            aliases={"type": "kind", "flow_type": "kind", "date": "occurred_at"},
            enums={"kind": CASH_FLOW_KINDS},
        ),
        rules=enforce_rules_cash_flow,
        filters=(Filter("type", "kind", ("type", "kind"), CASH_FLOW_KINDS),),
    ),
)

RESOURCES: dict[str, ResourceSpec] = {spec.name: spec for spec in _SPECS}


def get_resource(name: str) -> ResourceSpec:
    return RESOURCES[name]


def children_of(parent_name: str) -> list[tuple[ResourceSpec, Parent]]:
    """(child spec, parent declaration) pairs whose parent is `parent_name`, in registration order."""
    return [
        (spec, parent)
        for spec in _SPECS
        for parent in spec.parents
        if parent.resource == parent_name
    ]
