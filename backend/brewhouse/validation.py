from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeMeta


# Maximum price: 9,999,999.99. Keeps Numeric(19, 2) far from overflow and
# rejects nonsensical catalog prices.
MAX_PRICE = Decimal("9999999.99")

# Deliberately loose: one "@", no whitespace, a dot in the domain.
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Numeric(19, 2) leaves 17 digits before the decimal point.
MAX_INTEGER_DIGITS = 17

# SQLite INTEGER is a signed 64-bit value.
MAX_DB_INT = 2 ** 63 - 1


class ValidationError(ValueError):
    """
    400-level input problem.

    `fields` maps a field path (e.g. "items[0].quantity") to its message
    when the failure can be pinned to specific fields.
    """

    def __init__(self, message: str, fields: dict[str, str] | None = None):
        super().__init__(message)
        self.fields = fields or {}


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate UPC or email)."""


class NotFoundError(LookupError):
    """404-level: the addressed entity does not exist."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def coerce_decimal(key: str, value: Any, *, scale: int = 2) -> Decimal:
    """
    Parse a fixed-point amount from JSON input.

    Floats go through str() so 12.5 becomes Decimal("12.5") rather than its
    binary expansion. More than `scale` fractional digits is an error, not a
    rounding.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be a decimal number", fields={key: "must be a decimal number"})
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"{key} must be a decimal number", fields={key: "must be a decimal number"})
    if not amount.is_finite():
        raise ValidationError(f"{key} must be a finite number", fields={key: "must be a finite number"})
    if amount != 0 and amount.adjusted() >= MAX_INTEGER_DIGITS:
        raise ValidationError(
            f"{key} allows at most {MAX_INTEGER_DIGITS} digits before the decimal point",
            fields={key: f"allows at most {MAX_INTEGER_DIGITS} digits before the decimal point"},
        )
    if amount.as_tuple().exponent < -scale:
        raise ValidationError(
            f"{key} allows at most {scale} decimal places",
            fields={key: f"allows at most {scale} decimal places"},
        )
    try:
        return amount.quantize(Decimal(1).scaleb(-scale))
    except InvalidOperation:
        raise ValidationError(f"{key} is out of range", fields={key: "is out of range"})


def _check_int_range(key: str, value: int) -> int:
    if abs(value) > MAX_DB_INT:
        raise ValidationError(f"{key} is out of range", fields={key: "is out of range"})
    return value


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        # Already an int (but not bool which is a subclass of int)
        if isinstance(value, int) and not isinstance(value, bool):
            return _check_int_range(col.key, value)
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValidationError(f"{col.key} must be an integer", fields={col.key: "must be an integer"})
            if 'e' in stripped.lower() or '.' in stripped:
                raise ValidationError(f"{col.key} must be a plain integer", fields={col.key: "must be a plain integer"})
            try:
                parsed = int(stripped)
            except ValueError:
                raise ValidationError(f"{col.key} must be an integer", fields={col.key: "must be an integer"})
            return _check_int_range(col.key, parsed)
        raise ValidationError(f"{col.key} must be an integer", fields={col.key: "must be an integer"})

    # Fixed-point money columns
    if isinstance(coltype, Numeric):
        return coerce_decimal(col.key, value, scale=coltype.scale or 0)

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    # Default: leave as-is
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if f not in payload)
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}",
                fields={f: "is required" for f in missing},
            )

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}", fields={k: "is not allowed"})
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}", fields={k: "is unknown"})

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        # NULL handling
        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null", fields={k: "cannot be null"})
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank", fields={k: "cannot be blank"})

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(
                    f"{k} exceeds max length {col.type.length}",
                    fields={k: f"exceeds max length {col.type.length}"},
                )

        patch[k] = val

    return patch


def pop_expected_version(payload: dict) -> int | None:
    """
    Remove and validate an optional client-supplied `version` from a write
    payload. The version is a concurrency token, not a writable field.
    """
    if not isinstance(payload, dict) or "version" not in payload:
        return None
    raw = payload.pop("version")
    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 1:
        raise ValidationError("version must be a positive integer", fields={"version": "must be a positive integer"})
    return raw


def enforce_rules_beer(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    if "price" in patch and patch["price"] is not None:
        price = patch["price"]
        if price <= 0:
            raise ValidationError("price must be > 0", fields={"price": "must be > 0"})
        if price > MAX_PRICE:
            raise ValidationError(f"price cannot exceed {MAX_PRICE}", fields={"price": f"cannot exceed {MAX_PRICE}"})

    if "quantity_on_hand" in patch and patch["quantity_on_hand"] is not None:
        if patch["quantity_on_hand"] < 0:
            raise ValidationError("quantity_on_hand must be >= 0", fields={"quantity_on_hand": "must be >= 0"})


def enforce_rules_customer(patch: dict) -> None:
    if patch.get("email") == "":
        patch["email"] = None
    email = patch.get("email")
    if email:
        if not EMAIL_RE.match(email):
            raise ValidationError("email must be a valid email address", fields={"email": "must be a valid email address"})
        patch["email"] = email.lower()


def in_id_range(value: int) -> bool:
    """True when `value` fits an integer primary key column."""
    return 0 < value <= MAX_DB_INT
