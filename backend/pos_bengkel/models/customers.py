from __future__ import annotations

from ..extensions import db
from .base import TimestampMixin


class Customer(TimestampMixin, db.Model):
    """
    Workshop customer.

    phone_number is stored normalized (digits with an optional leading '+') and
    is the exact-match lookup key, so it carries a unique index.
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.UniqueConstraint("phone_number", name="uq_customers_phone_number"),
        db.Index("ix_customers_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    phone_number = db.Column(db.String(32), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    address = db.Column(db.Text, nullable=True)

    def to_dict(self) -> dict:
        return {
            "customer_id": self.id,
            "name": self.name,
            "phone_number": self.phone_number,
            "email": self.email,
            "address": self.address,
            **self.timestamps(),
        }


class CustomerVehicle(TimestampMixin, db.Model):
    """A vehicle owned by exactly one customer. Deleting the customer is refused while vehicles exist."""
    __tablename__ = "customer_vehicles"
    __table_args__ = (
        db.UniqueConstraint("plate_number", name="uq_customer_vehicles_plate_number"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id", ondelete="RESTRICT"), nullable=False, index=True)
    plate_number = db.Column(db.String(32), nullable=False)
    brand = db.Column(db.String(128), nullable=False)
    model = db.Column(db.String(128), nullable=False)
    type = db.Column(db.String(64), nullable=True)
    production_year = db.Column(db.Integer, nullable=False)
    color = db.Column(db.String(64), nullable=True)
    chassis_number = db.Column(db.String(64), nullable=True)
    engine_number = db.Column(db.String(64), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    customer = db.relationship("Customer", backref=db.backref("vehicles", lazy=True, order_by="CustomerVehicle.id"))

    def to_dict(self) -> dict:
        return {
            "vehicle_id": self.id,
            "customer_id": self.customer_id,
            "plate_number": self.plate_number,
            "brand": self.brand,
            "model": self.model,
            "type": self.type,
            "production_year": self.production_year,
            "color": self.color,
            "chassis_number": self.chassis_number,
            "engine_number": self.engine_number,
            "notes": self.notes,
            **self.timestamps(),
        }
