from __future__ import annotations

from typing import Any

from ..errors import ValidationError
from ..models import Permission
from ..validation import parse_int
from .resource_service import ResourceService


class RoleService(ResourceService):
    """Roles plus replacement of their permission set."""

    def permissions(self, role_id: int) -> list:
        return list(self.repo.get(role_id).permissions)

    def set_permissions(self, role_id: int, payload: Any):
        """
        Replace a role's permissions with exactly `permission_ids`.

        All ids must exist; the join rows are rewritten in one transaction.
        """
        if not isinstance(payload, dict) or set(payload) != {"permission_ids"}:
            raise ValidationError("body must be {\"permission_ids\": [...]}")
        raw_ids = payload["permission_ids"]
        if not isinstance(raw_ids, list):
            raise ValidationError("permission_ids must be a list")
        ids = sorted({parse_int("permission_ids", v) for v in raw_ids})

        with self.repos.atomic():
            role = self.repo.get(role_id)
            found = self.repos["permission"].all_where(Permission.id.in_(ids)) if ids else []
            unknown = set(ids) - {p.id for p in found}
            if unknown:
                raise ValidationError(f"unknown permission_ids: {', '.join(str(i) for i in sorted(unknown))}")
            role.permissions = sorted(found, key=lambda p: p.id)
            self.repo.update(role, {})
        return role
