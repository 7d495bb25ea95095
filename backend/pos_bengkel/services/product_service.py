# backend/pos_bengkel/services/product_service.py
"""
Products Service

Stock is only ever changed through ProductRepository.adjust_stock(), a
conditional UPDATE that refuses to drive stock_qty below zero. The opening
quantity given on create is recorded as the first ledger row.
"""
from __future__ import annotations

import logging
from typing import Any

from ..errors import ValidationError
from ..validation import parse_int
from .concurrency import run_with_retry
from .resource_service import ResourceService

logger = logging.getLogger(__name__)

DEFAULT_LOW_STOCK_THRESHOLD = 5


class ProductService(ResourceService):
    @property
    def repo(self):
        return self.repos.products

    def create(self, payload: Any):
        patch = self.validate(payload, partial=False)
        opening = patch.pop("stock_qty", None) or 0
        with self.repos.atomic():
            values = self.columns(patch)
            self.check_references(values)
            product = self.repo.add(values)
            if opening:
                self.repo.adjust_stock(product.id, opening, reason="opening")
        return product

    def adjust_stock(self, product_id: int, payload: Any):
        """
        Apply {"quantity": <signed int>, "note"?: str} to a product's stock.

        Raises:
            ValidationError: quantity missing, zero or not an integer
            NotFoundError: product does not exist
            InvariantError: stock would go below zero (stock unchanged)
        """
        if not isinstance(payload, dict):
            raise ValidationError("request body must be a JSON object")
        unknown = set(payload) - {"quantity", "note"}
        if unknown:
            raise ValidationError(f"Unknown field: {sorted(unknown)[0]}")
        if payload.get("quantity") is None:
            raise ValidationError("Missing required fields: quantity")
        delta = parse_int("quantity", payload["quantity"], signed=True)
        if delta == 0:
            raise ValidationError("quantity must be non-zero")
        note = payload.get("note")
        if note is not None and not isinstance(note, str):
            raise ValidationError("note must be a string")

        def _op():
            with self.repos.atomic():
                movement = self.repo.adjust_stock(product_id, delta, note=note)
            return movement

        movement = run_with_retry(_op)
        logger.info(
            "stock adjusted product_id=%s delta=%s stock_after=%s",
            product_id,
            delta,
            movement.stock_after,
        )
        return self.repo.get(product_id)

    def low_stock(self, threshold: Any = None) -> list:
        if threshold is None or (isinstance(threshold, str) and not threshold.strip()):
            value = DEFAULT_LOW_STOCK_THRESHOLD
        else:
            value = parse_int("threshold", threshold)
        return self.repo.low_stock(value)

    def movements(self, product_id: int) -> list:
        self.repo.get(product_id)
        return self.repo.movements(product_id)
