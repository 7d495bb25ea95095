from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow
from ..types import Money, money_str
from .base import TimestampMixin

SERVICE_JOB_STATUSES = ("queued", "in_progress", "completed", "picked_up", "complained")
# Statuses that still hold a place in the outlet queue
QUEUE_STATUSES = ("queued", "in_progress")
SERVICE_DETAIL_ITEM_TYPES = ("service", "product")


class ServiceCategory(TimestampMixin, db.Model):
    __tablename__ = "service_categories"
    __table_args__ = (
        db.UniqueConstraint("name", name="uq_service_categories_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)

    def to_dict(self) -> dict:
        return {
            "service_category_id": self.id,
            "name": self.name,
            "description": self.description,
            **self.timestamps(),
        }


class Service(TimestampMixin, db.Model):
    """Catalog entry for billable workshop labour, identified externally by its code."""
    __tablename__ = "services"
    __table_args__ = (
        db.UniqueConstraint("code", name="uq_services_code"),
        db.Index("ix_services_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    category_id = db.Column(db.Integer, db.ForeignKey("service_categories.id"), nullable=False, index=True)
    price = db.Column(Money, nullable=False)
    # minutes
    duration = db.Column(db.Integer, nullable=True)
    description = db.Column(db.Text, nullable=True)

    category = db.relationship("ServiceCategory", backref=db.backref("services", lazy=True))

    def to_dict(self) -> dict:
        return {
            "service_id": self.id,
            "code": self.code,
            "name": self.name,
            "category_id": self.category_id,
            "price": money_str(self.price),
            "duration": self.duration,
            "description": self.description,
            **self.timestamps(),
        }


class ServiceJob(TimestampMixin, db.Model):
    """
    A vehicle checked in for work.

    The vehicle must belong to the job's customer; that cross-field rule lives
    in the usecase since it needs both rows.
    """
    __tablename__ = "service_jobs"
    __table_args__ = (
        db.UniqueConstraint("job_code", name="uq_service_jobs_job_code"),
        db.Index("ix_service_jobs_status", "status"),
        db.Index("ix_service_jobs_outlet_queue", "outlet_id", "queue_number"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    job_code = db.Column(db.String(64), nullable=False)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)
    vehicle_id = db.Column(db.Integer, db.ForeignKey("customer_vehicles.id"), nullable=False, index=True)
    outlet_id = db.Column(db.Integer, db.ForeignKey("outlets.id"), nullable=False, index=True)
    technician_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    problem_description = db.Column(db.Text, nullable=False)
    technician_notes = db.Column(db.Text, nullable=True)
    # Position in the outlet's queue for the day it was received, 1-based
    queue_number = db.Column(db.Integer, nullable=False, default=0)
    status = db.Column(db.String(16), nullable=False, default="queued")
    received_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    picked_up_at = db.Column(db.DateTime(timezone=True), nullable=True)

    down_payment = db.Column(Money, nullable=False, default=0)
    grand_total = db.Column(Money, nullable=False, default=0)

    details = db.relationship(
        "ServiceDetail",
        backref="service_job",
        order_by="ServiceDetail.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy=True,
    )
    histories = db.relationship(
        "ServiceJobHistory",
        order_by="ServiceJobHistory.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy=True,
    )

    def to_dict(self) -> dict:
        return {
            "service_job_id": self.id,
            "job_code": self.job_code,
            "queue_number": self.queue_number,
            "customer_id": self.customer_id,
            "vehicle_id": self.vehicle_id,
            "outlet_id": self.outlet_id,
            "technician_id": self.technician_id,
            "problem_description": self.problem_description,
            "technician_notes": self.technician_notes,
            "status": self.status,
            "received_at": to_utc_z(self.received_at),
            "picked_up_at": to_utc_z(self.picked_up_at),
            "down_payment": money_str(self.down_payment),
            "grand_total": money_str(self.grand_total),
            **self.timestamps(),
        }


class ServiceDetail(TimestampMixin, db.Model):
    """
    A billable line on a service job: labour from the catalog or a part.

    item_id points at a service or a product depending on item_type, so it
    carries no foreign key; the usecase checks it.
    """
    __tablename__ = "service_details"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_service_details_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    service_job_id = db.Column(
        db.Integer, db.ForeignKey("service_jobs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_type = db.Column(db.String(16), nullable=False)
    item_id = db.Column(db.Integer, nullable=False)
    description = db.Column(db.String(255), nullable=False)
    serial_number_used = db.Column(db.String(255), nullable=True)
    quantity = db.Column(db.Integer, nullable=False)
    price_per_item = db.Column(Money, nullable=False)
    cost_per_item = db.Column(Money, nullable=False, default=0)

    def to_dict(self) -> dict:
        return {
            "detail_id": self.id,
            "service_job_id": self.service_job_id,
            "item_type": self.item_type,
            "item_id": self.item_id,
            "description": self.description,
            "serial_number_used": self.serial_number_used,
            "quantity": self.quantity,
            "price_per_item": money_str(self.price_per_item),
            "cost_per_item": money_str(self.cost_per_item),
            **self.timestamps(),
        }


class ServiceJobHistory(db.Model):
    """Append-only trail of a job: one row when it is received and one per status change."""
    __tablename__ = "service_job_histories"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id = db.Column(db.Integer, primary_key=True)
    service_job_id = db.Column(
        db.Integer, db.ForeignKey("service_jobs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    status = db.Column(db.String(16), nullable=False)
    notes = db.Column(db.Text, nullable=True)
    changed_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "history_id": self.id,
            "service_job_id": self.service_job_id,
            "user_id": self.user_id,
            "status": self.status,
            "notes": self.notes,
            "changed_at": to_utc_z(self.changed_at),
        }
