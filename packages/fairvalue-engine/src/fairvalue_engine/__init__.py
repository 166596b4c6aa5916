"""
FairValue Engine
================

Pure Bazin / Graham fair-value engine with zero external dependencies.

Public API:
- ``FinancialRecord`` / ``DividendPayment`` / ``ValuationResult`` -- data contracts
- ``validate_record(raw)`` -- turn a provider payload into a ``FinancialRecord``
- ``compute_valuation(record)`` -- fair prices and upsides
- ``diagnose(upside_bazin, upside_graham)`` / ``indicator_label(fair, price)``
"""

from fairvalue_engine.contract import (
    OPTIONAL_FIELDS,
    REQUIRED_FIELDS,
    DividendPayment,
    FinancialRecord,
    ValidationError,
    record_to_wire,
    validate_record,
)
from fairvalue_engine.engine import (
    BAZIN_TARGET_YIELD,
    GRAHAM_MULTIPLIER,
    GRAHAM_NOT_APPLICABLE_UPSIDE,
    Diagnosis,
    IndicatorLabel,
    ValuationResult,
    bazin_fair_price,
    compute_valuation,
    diagnose,
    graham_fair_price,
    graham_upside,
    indicator_label,
    is_undervalued,
    upside,
)

__all__ = [
    "BAZIN_TARGET_YIELD",
    "GRAHAM_MULTIPLIER",
    "GRAHAM_NOT_APPLICABLE_UPSIDE",
    "OPTIONAL_FIELDS",
    "REQUIRED_FIELDS",
    "Diagnosis",
    "DividendPayment",
    "FinancialRecord",
    "IndicatorLabel",
    "ValidationError",
    "ValuationResult",
    "bazin_fair_price",
    "compute_valuation",
    "diagnose",
    "graham_fair_price",
    "graham_upside",
    "indicator_label",
    "is_undervalued",
    "record_to_wire",
    "upside",
    "validate_record",
]
