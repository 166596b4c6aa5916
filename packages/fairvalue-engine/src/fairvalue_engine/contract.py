"""
Data Contract
=============

Shape and validation rules for the financial record a provider returns.

Providers speak JSON with camelCase keys (``currentPrice``,
``avgDividend5Years``, ...).  Nothing downstream trusts that payload
directly: ``validate_record()`` turns it into a frozen ``FinancialRecord``
or raises ``ValidationError`` naming the first offending field.

Optional fields are ``None`` when the provider did not send them.  A present
zero stays zero, and an empty ``dividendHistory`` list stays an empty tuple,
so "no data" and "zero value" never collapse into each other.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

# Wire names, in the order they are checked.
REQUIRED_FIELDS: Tuple[str, ...] = (
    "ticker",
    "name",
    "currency",
    "currentPrice",
    "eps",
    "bvps",
    "avgDividend5Years",
)
OPTIONAL_FIELDS: Tuple[str, ...] = (
    "dividendYield",
    "region",
    "lastUpdated",
    "nextDividendDate",
    "payoutFrequency",
    "dividendHistory",
)


class ValidationError(ValueError):
    """A raw record is missing a required field or violates a constraint."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


@dataclass(frozen=True)
class DividendPayment:
    date: str
    amount: float
    type: Optional[str] = None


@dataclass(frozen=True)
class FinancialRecord:
    """A validated per-ticker snapshot. Safe to value: ``current_price > 0``."""

    ticker: str
    name: str
    currency: str
    current_price: float
    eps: float
    bvps: float
    avg_dividend_5_years: float
    dividend_yield: Optional[float] = None
    region: Optional[str] = None
    last_updated: Optional[str] = None
    next_dividend_date: Optional[str] = None
    payout_frequency: Optional[str] = None
    dividend_history: Optional[Tuple[DividendPayment, ...]] = None


def _is_number(value: Any) -> bool:
    # bool is an int subclass; a provider sending `true` for a price is broken.
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _require_string(raw: Mapping[str, Any], key: str) -> str:
    value = raw.get(key)
    if value is None:
        raise ValidationError(key, "missing")
    if not isinstance(value, str):
        raise ValidationError(key, "must be a string")
    value = value.strip()
    if not value:
        raise ValidationError(key, "must not be empty")
    return value


def _require_number(raw: Mapping[str, Any], key: str) -> float:
    value = raw.get(key)
    if value is None:
        raise ValidationError(key, "missing")
    return _check_number(value, key)


def _check_number(value: Any, key: str) -> float:
    if not _is_number(value):
        raise ValidationError(key, "must be a number")
    try:
        value = float(value)
    except OverflowError:
        # JSON integers are unbounded; too large for a float is not finite.
        raise ValidationError(key, "must be finite")
    if not math.isfinite(value):
        raise ValidationError(key, "must be finite")
    return value


def _optional_string(raw: Mapping[str, Any], key: str) -> Optional[str]:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(key, "must be a string")
    return value


def _optional_history(raw: Mapping[str, Any]) -> Optional[Tuple[DividendPayment, ...]]:
    value = raw.get("dividendHistory")
    if value is None:
        return None
    if not isinstance(value, (list, tuple)):
        raise ValidationError("dividendHistory", "must be a list")

    payments = []
    for index, item in enumerate(value):
        prefix = f"dividendHistory[{index}]"
        if not isinstance(item, Mapping):
            raise ValidationError(prefix, "must be an object")

        date = item.get("date")
        if not isinstance(date, str) or not date.strip():
            raise ValidationError(f"{prefix}.date", "missing")

        amount = item.get("amount")
        if amount is None:
            raise ValidationError(f"{prefix}.amount", "missing")
        amount = _check_number(amount, f"{prefix}.amount")
        if amount < 0:
            raise ValidationError(f"{prefix}.amount", "must be non-negative")

        kind = item.get("type")
        if kind is not None and not isinstance(kind, str):
            raise ValidationError(f"{prefix}.type", "must be a string")

        payments.append(DividendPayment(date=date.strip(), amount=amount, type=kind or None))
    return tuple(payments)


def validate_record(raw: Any) -> FinancialRecord:
    """
    Validate a loosely-typed provider record and build a ``FinancialRecord``.

    Required fields are checked in ``REQUIRED_FIELDS`` order, then optional
    fields in ``OPTIONAL_FIELDS`` order; the first failure wins.

    Raises
    ------
    ValidationError
        With ``field`` set to the wire name of the offending field.
    """
    if not isinstance(raw, Mapping):
        raise ValidationError("<record>", "must be a JSON object")

    ticker = _require_string(raw, "ticker").upper()
    name = _require_string(raw, "name")
    currency = _require_string(raw, "currency")

    current_price = _require_number(raw, "currentPrice")
    if current_price <= 0:
        raise ValidationError("currentPrice", "must be positive")

    eps = _require_number(raw, "eps")
    bvps = _require_number(raw, "bvps")

    avg_dividend = _require_number(raw, "avgDividend5Years")
    if avg_dividend < 0:
        raise ValidationError("avgDividend5Years", "must be non-negative")

    dividend_yield = raw.get("dividendYield")
    if dividend_yield is not None:
        dividend_yield = _check_number(dividend_yield, "dividendYield")

    return FinancialRecord(
        ticker=ticker,
        name=name,
        currency=currency,
        current_price=current_price,
        eps=eps,
        bvps=bvps,
        avg_dividend_5_years=avg_dividend,
        dividend_yield=dividend_yield,
        region=_optional_string(raw, "region"),
        last_updated=_optional_string(raw, "lastUpdated"),
        next_dividend_date=_optional_string(raw, "nextDividendDate"),
        payout_frequency=_optional_string(raw, "payoutFrequency"),
        dividend_history=_optional_history(raw),
    )


def record_to_wire(record: FinancialRecord) -> Dict[str, Any]:
    """camelCase form of a record. Absent optional fields are left out."""
    wire: Dict[str, Any] = {
        "ticker": record.ticker,
        "name": record.name,
        "currency": record.currency,
        "currentPrice": record.current_price,
        "eps": record.eps,
        "bvps": record.bvps,
        "avgDividend5Years": record.avg_dividend_5_years,
    }
    optional = {
        "dividendYield": record.dividend_yield,
        "region": record.region,
        "lastUpdated": record.last_updated,
        "nextDividendDate": record.next_dividend_date,
        "payoutFrequency": record.payout_frequency,
    }
    wire.update({k: v for k, v in optional.items() if v is not None})
    if record.dividend_history is not None:
        wire["dividendHistory"] = [
            {k: v for k, v in (("date", p.date), ("amount", p.amount), ("type", p.type)) if v is not None}
            for p in record.dividend_history
        ]
    return wire
