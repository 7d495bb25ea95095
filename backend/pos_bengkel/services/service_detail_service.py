from __future__ import annotations

from typing import Any

from ..errors import ValidationError
from .resource_service import ResourceService


class ServiceDetailService(ResourceService):
    """Lines on a service job; item_id must name an existing service or product per item_type."""

    def _check_item(self, item_type: str, item_id: int) -> None:
        repo = self.repos["service"] if item_type == "service" else self.repos.products
        if repo.find(item_id) is None:
            raise ValidationError(f"item_id {item_id} does not exist as a {item_type}")

    def create(self, payload: Any):
        patch = self.validate(payload, partial=False)
        with self.repos.atomic():
            values = self.columns(patch)
            self.check_references(values)
            self._check_item(values["item_type"], values["item_id"])
            detail = self.repo.add(values)
        return detail

    def update(self, entity_id: int, payload: Any):
        patch = self.validate(payload, partial=True)
        with self.repos.atomic():
            detail = self.repo.get(entity_id)
            values = self.columns(patch)
            self.check_references(values)
            if "item_type" in values or "item_id" in values:
                self._check_item(
                    values.get("item_type", detail.item_type),
                    values.get("item_id", detail.item_id),
                )
            self.repo.update(detail, values)
        return detail
