from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow
from ..types import Money, money_str
from .base import TimestampMixin

USAGE_STATUSES = ("new", "used", "refurbished", "damaged")


class Category(TimestampMixin, db.Model):
    __tablename__ = "categories"
    __table_args__ = (
        db.UniqueConstraint("name", name="uq_categories_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)

    def to_dict(self) -> dict:
        return {
            "category_id": self.id,
            "name": self.name,
            "description": self.description,
            **self.timestamps(),
        }


class Supplier(TimestampMixin, db.Model):
    __tablename__ = "suppliers"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    contact_person_name = db.Column(db.String(255), nullable=True)
    phone_number = db.Column(db.String(32), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    address = db.Column(db.Text, nullable=True)

    def to_dict(self) -> dict:
        return {
            "supplier_id": self.id,
            "name": self.name,
            "contact_person_name": self.contact_person_name,
            "phone_number": self.phone_number,
            "email": self.email,
            "address": self.address,
            **self.timestamps(),
        }


class UnitType(TimestampMixin, db.Model):
    __tablename__ = "unit_types"
    __table_args__ = (
        db.UniqueConstraint("name", name="uq_unit_types_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False)
    abbreviation = db.Column(db.String(16), nullable=True)

    def to_dict(self) -> dict:
        return {
            "unit_type_id": self.id,
            "name": self.name,
            "abbreviation": self.abbreviation,
            **self.timestamps(),
        }


class Product(TimestampMixin, db.Model):
    """
    Sellable spare part or consumable.

    SKU and barcode each identify one product. stock_qty is never negative: the
    CHECK constraint backs up the conditional UPDATE used by stock adjustment,
    and stock_qty is not writable through the generic update path.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.UniqueConstraint("sku", name="uq_products_sku"),
        db.UniqueConstraint("barcode", name="uq_products_barcode"),
        db.CheckConstraint("stock_qty >= 0", name="ck_products_stock_qty_non_negative"),
        db.Index("ix_products_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sku = db.Column(db.String(64), nullable=False)
    barcode = db.Column(db.String(64), nullable=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)

    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True, index=True)
    supplier_id = db.Column(db.Integer, db.ForeignKey("suppliers.id"), nullable=True, index=True)
    unit_type_id = db.Column(db.Integer, db.ForeignKey("unit_types.id"), nullable=True, index=True)

    price = db.Column(Money, nullable=False)
    cost_price = db.Column(Money, nullable=True)
    stock_qty = db.Column(db.Integer, nullable=False, default=0)
    usage_status = db.Column(db.String(16), nullable=False, default="new")
    low_stock_threshold = db.Column(db.Integer, nullable=True)
    shelf_location = db.Column(db.String(64), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    category = db.relationship("Category", backref=db.backref("products", lazy=True))
    supplier = db.relationship("Supplier", backref=db.backref("products", lazy=True))
    unit_type = db.relationship("UnitType")

    def to_dict(self) -> dict:
        return {
            "product_id": self.id,
            "sku": self.sku,
            "barcode": self.barcode,
            "name": self.name,
            "description": self.description,
            "category_id": self.category_id,
            "supplier_id": self.supplier_id,
            "unit_type_id": self.unit_type_id,
            "price": money_str(self.price),
            "cost_price": money_str(self.cost_price),
            "stock_qty": self.stock_qty,
            "usage_status": self.usage_status,
            "low_stock_threshold": self.low_stock_threshold,
            "shelf_location": self.shelf_location,
            "is_active": self.is_active,
            **self.timestamps(),
        }


class StockMovement(db.Model):
    """
    Append-only stock ledger.

    One row per successful adjustment, written in the same DB transaction as
    the conditional stock update. stock_after is the quantity the UPDATE left
    behind, so the ledger replays to the current stock_qty.
    """
    __tablename__ = "stock_movements"
    __table_args__ = (
        db.Index("ix_stock_movements_product", "product_id", "id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    delta = db.Column(db.Integer, nullable=False)
    stock_after = db.Column(db.Integer, nullable=False)

    # adjustment | sale
    reason = db.Column(db.String(32), nullable=False, default="adjustment")
    note = db.Column(db.Text, nullable=True)
    transaction_id = db.Column(db.Integer, db.ForeignKey("transactions.id", ondelete="SET NULL"), nullable=True)

    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "stock_movement_id": self.id,
            "product_id": self.product_id,
            "delta": self.delta,
            "stock_after": self.stock_after,
            "reason": self.reason,
            "note": self.note,
            "transaction_id": self.transaction_id,
            "occurred_at": to_utc_z(self.occurred_at),
        }
