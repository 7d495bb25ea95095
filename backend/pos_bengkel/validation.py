from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Mapping

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .errors import ValidationError
from .time_utils import parse_iso_datetime
from .types import CENT, MAX_MONEY, Money, to_decimal

# All identifiers on the wire are unsigned 32-bit integers
MAX_UINT32 = 2**32 - 1

EMAIL_RE = re.compile(r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)+$")
PHONE_RE = re.compile(r"^\+?\d{8,20}$")


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    - create_only: writable on POST, rejected on PUT
    - extra_fields: accepted keys that are not columns (handled by the usecase)
    - aliases: alternate input names -> canonical field name
    - enums: field -> allowed values
    """
    writable_fields: frozenset[str]
    required_on_create: frozenset[str] = frozenset()
    create_only: frozenset[str] = frozenset()
    extra_fields: frozenset[str] = frozenset()
    aliases: Mapping[str, str] = field(default_factory=dict)
    enums: Mapping[str, tuple[str, ...]] = field(default_factory=dict)


def normalize_phone(value: str) -> str:
    """Strip spaces and hyphens, keep a single leading '+'."""
    cleaned = re.sub(r"[\s\-]", "", value)
    if not PHONE_RE.match(cleaned):
        raise ValidationError("phone_number must be 8-20 digits with an optional leading +")
    return cleaned


def normalize_email(value: str) -> str:
    if not EMAIL_RE.match(value):
        raise ValidationError("email must be a valid email address")
    return value


# Applied after type coercion, by canonical field name
FIELD_NORMALIZERS: dict[str, Callable[[str], str]] = {
    "phone_number": normalize_phone,
    "email": normalize_email,
}


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Money before Integer: stored as BIGINT minor units but accepted as decimal text
    if isinstance(coltype, Money):
        return parse_money(col.key, value)

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        return parse_int(col.key, value)

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        raise ValidationError(f"{col.key} must be a boolean")

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an RFC 3339 datetime")
            if dt is None:
                raise ValidationError(f"{col.key} must be an RFC 3339 datetime")
            return dt
        raise ValidationError(f"{col.key} must be a datetime")

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        if isinstance(value, (dict, list)):
            raise ValidationError(f"{col.key} must be a string")
        return str(value).strip()

    return value


def parse_money(key: str, value: Any) -> Decimal:
    """Exact, non-negative amount with at most two fraction digits."""
    try:
        amount = to_decimal(value)
    except ValueError:
        raise ValidationError(f"{key} must be a decimal amount")
    if amount < 0:
        raise ValidationError(f"{key} must be >= 0")
    # bounded before quantize, which raises past the context precision
    if amount > MAX_MONEY:
        raise ValidationError(f"{key} is too large")
    if amount != amount.quantize(CENT):
        raise ValidationError(f"{key} must have at most 2 decimal places")
    return amount.quantize(CENT)


def bounded_total(key: str, amount: Decimal) -> Decimal:
    """Quantize a computed amount, rejecting one past the money column's range."""
    # checked before quantize, which raises past the context precision
    if amount > MAX_MONEY:
        raise ValidationError(f"{key} is too large")
    return amount.quantize(CENT)


def parse_int(key: str, value: Any, *, signed: bool = False) -> int:
    """Strict integer parsing shared by payload fields and path/query values."""
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be an integer")
    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{key} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if "e" in stripped.lower():
            raise ValidationError(f"{key} must be a plain integer (scientific notation not allowed)")
        if "." in stripped:
            raise ValidationError(f"{key} must be an integer (no decimals)")
        try:
            result = int(stripped)
        except ValueError:
            raise ValidationError(f"{key} must be an integer")
    elif isinstance(value, float):
        raise ValidationError(f"{key} must be an integer, not a decimal")
    else:
        raise ValidationError(f"{key} must be an integer")

    if not signed and result < 0:
        raise ValidationError(f"{key} must be >= 0")
    if abs(result) > MAX_UINT32:
        raise ValidationError(f"{key} is out of range")
    return result


def _resolve_aliases(payload: dict, aliases: Mapping[str, str]) -> dict:
    # Canonical keys win over their aliases
    resolved = {k: v for k, v in payload.items() if k not in aliases}
    for k, v in payload.items():
        if k in aliases:
            resolved.setdefault(aliases[k], v)
    return resolved


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: Any,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields, create_only, extra_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict keyed by canonical field names.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys; absent keys are untouched,
    explicit null clears a nullable field)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("request body must be a JSON object")

    payload = _resolve_aliases(payload, policy.aliases)
    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    allowed = policy.writable_fields | policy.extra_fields
    for k in payload.keys():
        if k not in allowed:
            if k in cols:
                raise ValidationError(f"Field not allowed: {k}")
            raise ValidationError(f"Unknown field: {k}")
        if partial and k in policy.create_only:
            raise ValidationError(f"Field cannot be updated: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        if k in policy.extra_fields:
            patch[k] = raw
            continue

        col = cols[k]

        # NULL handling
        if raw is None:
            if not col.nullable or k in policy.required_on_create:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        if isinstance(col.type, (String, Text)) and val == "":
            if not col.nullable or k in policy.required_on_create:
                raise ValidationError(f"{k} cannot be blank")
            # optional text cleared with an empty string
            patch[k] = None
            continue

        if k in policy.enums and val not in policy.enums[k]:
            raise ValidationError(f"{k} must be one of: {', '.join(policy.enums[k])}")

        if k in FIELD_NORMALIZERS and isinstance(val, str):
            val = FIELD_NORMALIZERS[k](val)

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    if not partial:
        missing = sorted(f for f in policy.required_on_create if patch.get(f) is None)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    return patch


def _check_length(patch: dict, key: str, lo: int, hi: int) -> None:
    val = patch.get(key)
    if isinstance(val, str) and not (lo <= len(val) <= hi):
        raise ValidationError(f"{key} must be between {lo} and {hi} characters")


def _check_range(patch: dict, key: str, lo: int, hi: int | None = None) -> None:
    val = patch.get(key)
    if val is None:
        return
    if val < lo or (hi is not None and val > hi):
        bound = f"between {lo} and {hi}" if hi is not None else f">= {lo}"
        raise ValidationError(f"{key} must be {bound}")


def enforce_rules_named(patch: dict) -> None:
    """Customers, categories and the other name-keyed masters."""
    _check_length(patch, "name", 2, 255)


def enforce_rules_user(patch: dict) -> None:
    _check_length(patch, "name", 2, 255)
    password = patch.get("password")
    if "password" in patch:
        if not isinstance(password, str) or len(password) < 8:
            raise ValidationError("password must be a string of at least 8 characters")
        if len(password.encode("utf-8")) > 72:
            raise ValidationError("password must be at most 72 bytes")


def enforce_rules_vehicle(patch: dict) -> None:
    _check_length(patch, "plate_number", 2, 32)
    _check_range(patch, "production_year", 1900, 2100)


def enforce_rules_product(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    _check_length(patch, "name", 2, 255)
    _check_length(patch, "sku", 1, 64)
    _check_range(patch, "stock_qty", 0)
    _check_range(patch, "low_stock_threshold", 0)


def enforce_rules_service(patch: dict) -> None:
    _check_length(patch, "name", 2, 255)
    _check_range(patch, "duration", 0)


def enforce_rules_service_detail(patch: dict) -> None:
    quantity = patch.get("quantity")
    if quantity is not None and quantity <= 0:
        raise ValidationError("quantity must be > 0")


def enforce_rules_transaction(patch: dict) -> None:
    _check_length(patch, "invoice_no", 3, 255)


def enforce_rules_cash_flow(patch: dict) -> None:
    amount = patch.get("amount")
    if isinstance(amount, Decimal) and amount <= 0:
        raise ValidationError("amount must be > 0")
