from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow
from ..types import Money, money_str
from .base import TimestampMixin

PAYMENT_KINDS = ("cash", "card", "transfer", "e-wallet")
TRANSACTION_STATUSES = ("pending", "success", "failed")
TRANSACTION_TYPES = ("sale", "service", "purchase")
CASH_FLOW_KINDS = ("inflow", "outflow")


class PaymentMethod(TimestampMixin, db.Model):
    __tablename__ = "payment_methods"
    __table_args__ = (
        db.UniqueConstraint("name", name="uq_payment_methods_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    kind = db.Column(db.String(16), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    def to_dict(self) -> dict:
        return {
            "payment_method_id": self.id,
            "name": self.name,
            "kind": self.kind,
            "is_active": self.is_active,
            **self.timestamps(),
        }


class Transaction(TimestampMixin, db.Model):
    """
    Sales/service/purchase document header.

    invoice_no is the externally visible identifier and never changes after
    creation. Line items are owned by the transaction and go with it.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        db.UniqueConstraint("invoice_no", name="uq_transactions_invoice_no"),
        db.Index("ix_transactions_occurred_at", "occurred_at"),
        db.Index("ix_transactions_status", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    invoice_no = db.Column(db.String(255), nullable=False)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=True, index=True)
    outlet_id = db.Column(db.Integer, db.ForeignKey("outlets.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    payment_method_id = db.Column(db.Integer, db.ForeignKey("payment_methods.id"), nullable=True)

    transaction_type = db.Column(db.String(16), nullable=False, default="sale")
    status = db.Column(db.String(16), nullable=False, default="pending")
    total = db.Column(Money, nullable=False, default=0)
    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    notes = db.Column(db.Text, nullable=True)

    items = db.relationship(
        "TransactionItem",
        backref="transaction",
        order_by="TransactionItem.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy=True,
    )

    def to_dict(self) -> dict:
        return {
            "transaction_id": self.id,
            "invoice_no": self.invoice_no,
            "customer_id": self.customer_id,
            "outlet_id": self.outlet_id,
            "user_id": self.user_id,
            "payment_method_id": self.payment_method_id,
            "transaction_type": self.transaction_type,
            "status": self.status,
            "total": money_str(self.total),
            "occurred_at": to_utc_z(self.occurred_at),
            "notes": self.notes,
            **self.timestamps(),
        }


class TransactionItem(db.Model):
    __tablename__ = "transaction_items"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id = db.Column(db.Integer, primary_key=True)
    transaction_id = db.Column(db.Integer, db.ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(Money, nullable=False)
    line_total = db.Column(Money, nullable=False)

    def to_dict(self) -> dict:
        return {
            "transaction_item_id": self.id,
            "transaction_id": self.transaction_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "unit_price": money_str(self.unit_price),
            "line_total": money_str(self.line_total),
        }


class CashFlow(TimestampMixin, db.Model):
    """Money in or out of an outlet. amount is always positive; kind carries the sign."""
    __tablename__ = "cash_flows"
    __table_args__ = (
        db.CheckConstraint("amount > 0", name="ck_cash_flows_amount_positive"),
        db.Index("ix_cash_flows_kind", "kind"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    kind = db.Column(db.String(16), nullable=False)
    amount = db.Column(Money, nullable=False)
    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    source = db.Column(db.String(255), nullable=False)
    notes = db.Column(db.Text, nullable=True)
    outlet_id = db.Column(db.Integer, db.ForeignKey("outlets.id"), nullable=True, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    ref_transaction_id = db.Column(db.Integer, db.ForeignKey("transactions.id"), nullable=True, index=True)

    def to_dict(self) -> dict:
        return {
            "cash_flow_id": self.id,
            "kind": self.kind,
            "amount": money_str(self.amount),
            "occurred_at": to_utc_z(self.occurred_at),
            "source": self.source,
            "notes": self.notes,
            "outlet_id": self.outlet_id,
            "user_id": self.user_id,
            "ref_transaction_id": self.ref_transaction_id,
            **self.timestamps(),
        }
