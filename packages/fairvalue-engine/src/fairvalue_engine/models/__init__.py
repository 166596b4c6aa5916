"""
Convenience re-exports of data models.

Models are defined in ``fairvalue_engine.contract`` and
``fairvalue_engine.engine`` and re-exported here for consumers who prefer
``from fairvalue_engine.models import FinancialRecord``.
"""

from fairvalue_engine.contract import DividendPayment, FinancialRecord, ValidationError
from fairvalue_engine.engine import Diagnosis, IndicatorLabel, ValuationResult

__all__ = [
    "Diagnosis",
    "DividendPayment",
    "FinancialRecord",
    "IndicatorLabel",
    "ValidationError",
    "ValuationResult",
]
