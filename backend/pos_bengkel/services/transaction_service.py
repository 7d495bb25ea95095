# backend/pos_bengkel/services/transaction_service.py
"""
Transactions Service

A transaction is a header plus optional line items. A sale is *posted* when it
is (or becomes) status=success with transaction_type=sale: each line takes
stock out through the conditional stock update, writing a ledger row with
reason "sale", and one inflow cash flow for the total is recorded. Posting
happens inside the same database transaction as the header write, so either
everything lands or nothing does.

invoice_no is immutable after creation.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Optional

from ..errors import NotFoundError, ValidationError
from ..models import Transaction, TransactionItem
from ..time_utils import end_of_day, is_date_only, parse_iso_datetime
from ..types import CENT
from ..validation import bounded_total, parse_int, parse_money
from .concurrency import run_with_retry
from .resource_service import ResourceService

logger = logging.getLogger(__name__)

ITEM_FIELDS = {"product_id", "quantity", "unit_price"}


def _is_posted(txn: Transaction) -> bool:
    return txn.status == "success" and txn.transaction_type == "sale"


def parse_items(raw: Any) -> list[dict]:
    """Validate `items` into [{product_id, quantity, unit_price|None}, ...]."""
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValidationError("items must be a list")

    items = []
    for idx, line in enumerate(raw):
        key = f"items[{idx}]"
        if not isinstance(line, dict):
            raise ValidationError(f"{key} must be an object")
        unknown = set(line) - ITEM_FIELDS
        if unknown:
            raise ValidationError(f"Unknown field: {key}.{sorted(unknown)[0]}")
        if line.get("product_id") is None or line.get("quantity") is None:
            raise ValidationError(f"{key} requires product_id and quantity")
        quantity = parse_int(f"{key}.quantity", line["quantity"])
        if quantity <= 0:
            raise ValidationError(f"{key}.quantity must be > 0")
        unit_price = line.get("unit_price")
        items.append({
            "product_id": parse_int(f"{key}.product_id", line["product_id"]),
            "quantity": quantity,
            "unit_price": None if unit_price is None else parse_money(f"{key}.unit_price", unit_price),
        })
    return items


class TransactionService(ResourceService):
    def create(self, payload: Any):
        patch = self.validate(payload, partial=False)
        items = parse_items(patch.get("items"))

        def _op():
            with self.repos.atomic():
                values = self.columns(patch)
                self.check_references(values)
                lines = self._price_lines(items)
                if lines:
                    computed = bounded_total("total", sum((line.line_total for line in lines), Decimal("0")))
                    if values.get("total") is not None and values["total"] != computed:
                        raise ValidationError(f"total {values['total']} does not match items total {computed}")
                    values["total"] = computed

                txn = self.repo.add(values)
                txn.items.extend(lines)
                self.repo.update(txn, {})
                if _is_posted(txn):
                    self._post_sale(txn)
            return txn

        txn = run_with_retry(_op)
        logger.info("transaction created transaction_id=%s status=%s", txn.id, txn.status)
        return txn

    def update(self, entity_id: int, payload: Any):
        patch = self.validate(payload, partial=True)

        def _op():
            with self.repos.atomic():
                txn = self.repo.get(entity_id)
                values = self.columns(patch)

                invoice_no = values.pop("invoice_no", None)
                if invoice_no is not None and invoice_no != txn.invoice_no:
                    raise ValidationError("invoice_no cannot be changed")

                was_posted = _is_posted(txn)
                if was_posted:
                    for key in ("status", "transaction_type", "total"):
                        if key in values and values[key] != getattr(txn, key):
                            raise ValidationError(f"{key} of a posted sale cannot be changed")
                elif txn.items and values.get("total") is not None:
                    computed = sum((i.line_total for i in txn.items), Decimal("0")).quantize(CENT)
                    if values["total"] != computed:
                        raise ValidationError(f"total {values['total']} does not match items total {computed}")

                self.check_references(values)
                self.repo.update(txn, values)
                if not was_posted and _is_posted(txn):
                    self._post_sale(txn)
            return txn

        return run_with_retry(_op)

    def items(self, entity_id: int) -> list:
        return list(self.repo.get(entity_id).items)

    def date_range(self, start_raw: Optional[str], end_raw: Optional[str]) -> list:
        """
        Transactions with start <= occurred_at <= end.

        Both bounds accept RFC 3339 or YYYY-MM-DD; a date-only end bound covers
        that whole day.
        """
        if not start_raw or not end_raw:
            raise ValidationError("start_date and end_date are required")
        try:
            start = parse_iso_datetime(start_raw)
        except ValueError:
            raise ValidationError("Invalid start date format")
        try:
            end = parse_iso_datetime(end_raw)
        except ValueError:
            raise ValidationError("Invalid end date format")
        if start is None or end is None:
            raise ValidationError("start_date and end_date are required")
        if is_date_only(end_raw):
            end = end_of_day(end)
        if start > end:
            raise ValidationError("start_date must not be after end_date")
        return self.repo.all_where(Transaction.occurred_at >= start, Transaction.occurred_at <= end)

    # ---- internals ---------------------------------------------------------

    def _price_lines(self, items: list[dict]) -> list[TransactionItem]:
        lines = []
        for idx, item in enumerate(items):
            try:
                product = self.repos.products.get(item["product_id"])
            except NotFoundError:
                raise ValidationError(f"items[{idx}].product_id {item['product_id']} does not exist")
            unit_price = item["unit_price"] if item["unit_price"] is not None else product.price
            lines.append(TransactionItem(
                product_id=product.id,
                quantity=item["quantity"],
                unit_price=unit_price,
                line_total=bounded_total(f"items[{idx}] line total", unit_price * item["quantity"]),
            ))
        return lines

    def _post_sale(self, txn: Transaction) -> None:
        for line in txn.items:
            self.repos.products.adjust_stock(
                line.product_id,
                -line.quantity,
                reason="sale",
                note=f"invoice {txn.invoice_no}",
                transaction_id=txn.id,
            )
        if txn.total and txn.total > 0:
            self.repos["cash_flow"].add({
                "kind": "inflow",
                "amount": txn.total,
                "occurred_at": txn.occurred_at,
                "source": f"sale {txn.invoice_no}",
                "outlet_id": txn.outlet_id,
                "user_id": txn.user_id,
                "ref_transaction_id": txn.id,
            })
        logger.info("sale posted transaction_id=%s lines=%s total=%s", txn.id, len(txn.items), txn.total)
