from __future__ import annotations

from ..extensions import db
from .base import TimestampMixin

OUTLET_STATUSES = ("active", "inactive")


class Outlet(TimestampMixin, db.Model):
    """A physical workshop branch."""
    __tablename__ = "outlets"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    branch_type = db.Column(db.String(64), nullable=False)
    city = db.Column(db.String(128), nullable=False)
    address = db.Column(db.Text, nullable=True)
    phone_number = db.Column(db.String(32), nullable=True)
    status = db.Column(db.String(16), nullable=False, default="active")

    def to_dict(self) -> dict:
        return {
            "outlet_id": self.id,
            "name": self.name,
            "branch_type": self.branch_type,
            "city": self.city,
            "address": self.address,
            "phone_number": self.phone_number,
            "status": self.status,
            **self.timestamps(),
        }


class User(TimestampMixin, db.Model):
    """
    Staff account.

    The password is write-only: only its bcrypt hash is persisted and it never
    appears in to_dict().
    """
    __tablename__ = "users"
    __table_args__ = (
        db.UniqueConstraint("email", name="uq_users_email"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    outlet_id = db.Column(db.Integer, db.ForeignKey("outlets.id"), nullable=True, index=True)

    outlet = db.relationship("Outlet", backref=db.backref("users", lazy=True))

    def to_dict(self) -> dict:
        return {
            "user_id": self.id,
            "name": self.name,
            "email": self.email,
            "outlet_id": self.outlet_id,
            **self.timestamps(),
        }


class RolePermission(db.Model):
    """Role <-> Permission join row; owned by both sides, removed with either."""
    __tablename__ = "role_permissions"

    role_id = db.Column(db.Integer, db.ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True)
    permission_id = db.Column(db.Integer, db.ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True)


class Permission(TimestampMixin, db.Model):
    __tablename__ = "permissions"
    __table_args__ = (
        db.UniqueConstraint("name", name="uq_permissions_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)

    def to_dict(self) -> dict:
        return {
            "permission_id": self.id,
            "name": self.name,
            **self.timestamps(),
        }


class Role(TimestampMixin, db.Model):
    __tablename__ = "roles"
    __table_args__ = (
        db.UniqueConstraint("name", name="uq_roles_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)

    permissions = db.relationship(
        "Permission",
        secondary="role_permissions",
        order_by="Permission.id",
        lazy="selectin",
        passive_deletes=True,
    )

    def to_dict(self) -> dict:
        return {
            "role_id": self.id,
            "name": self.name,
            "permissions": [p.to_dict() for p in self.permissions],
            **self.timestamps(),
        }
