"""
Valuation Engine
================

Pure fair-value formulas over a validated ``FinancialRecord``:

- No I/O
- No provider coupling
- Deterministic: identical records give identical results

API surface area (stable):
- `bazin_fair_price(avg_dividend)` -- price at which the trailing 5-year
  average dividend is a 6% yield
- `graham_fair_price(eps, bvps)` -- sqrt(22.5 * EPS * BVPS), 0.0 when not applicable
- `upside(fair_price, current_price)`
- `diagnose(upside_bazin, upside_graham)`
- `indicator_label(fair_price, current_price)`
- `compute_valuation(record)`
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from math import isfinite, sqrt

from .contract import FinancialRecord, ValidationError

# Fixed policy constants. Not configurable.
BAZIN_TARGET_YIELD: float = 0.06
GRAHAM_MULTIPLIER: float = 22.5  # P/E ceiling 15 x P/B ceiling 1.5

# Reported as Graham upside when the formula is not applicable.
GRAHAM_NOT_APPLICABLE_UPSIDE: float = -100.0


class Diagnosis(str, Enum):
    STRONG_BUY = "StrongBuy"
    INCOME_FOCUS = "IncomeFocus"
    CAUTION = "Caution"


class IndicatorLabel(str, Enum):
    OPPORTUNITY = "Opportunity"
    OVERVALUED = "Overvalued"


def bazin_fair_price(avg_dividend_5_years: float) -> float:
    return avg_dividend_5_years / BAZIN_TARGET_YIELD


def graham_fair_price(eps: float, bvps: float) -> float:
    """Graham number. Returns the 0.0 sentinel unless both EPS and BVPS are positive."""
    if eps > 0 and bvps > 0:
        return sqrt(GRAHAM_MULTIPLIER * eps * bvps)
    return 0.0


def upside(fair_price: float, current_price: float) -> float:
    """Percentage difference between a fair-value estimate and the market price."""
    return (fair_price / current_price - 1) * 100


def graham_upside(graham_price: float, current_price: float) -> float:
    if graham_price > 0:
        return upside(graham_price, current_price)
    return GRAHAM_NOT_APPLICABLE_UPSIDE


def diagnose(upside_bazin: float, upside_graham: float) -> Diagnosis:
    """
    Three-way classifier over the sign of the two upsides.

    Zero is "not positive": a Bazin upside of exactly 0 is CAUTION.
    """
    if upside_bazin > 0 and upside_graham > 0:
        return Diagnosis.STRONG_BUY
    if upside_bazin > 0:
        return Diagnosis.INCOME_FOCUS
    return Diagnosis.CAUTION


def is_undervalued(fair_price: float, current_price: float) -> bool:
    return fair_price > current_price


def indicator_label(fair_price: float, current_price: float) -> IndicatorLabel:
    # Per-formula label; ignores the other formula's signal.
    if is_undervalued(fair_price, current_price):
        return IndicatorLabel.OPPORTUNITY
    return IndicatorLabel.OVERVALUED


@dataclass(frozen=True)
class ValuationResult:
    bazin_fair_price: float
    graham_fair_price: float
    upside_bazin: float
    upside_graham: float

    @property
    def graham_applicable(self) -> bool:
        return self.graham_fair_price > 0

    @property
    def diagnosis(self) -> Diagnosis:
        return diagnose(self.upside_bazin, self.upside_graham)


def compute_valuation(record: FinancialRecord) -> ValuationResult:
    """
    Derive Bazin and Graham fair prices and their upsides.

    Total over validated records of ordinary magnitude.  A record built by
    hand with a non-positive price is rejected, and so are finite inputs
    extreme enough to overflow a fair price or upside to infinity.
    """
    price = record.current_price
    if not price > 0:
        raise ValidationError("currentPrice", "must be positive")

    bazin = bazin_fair_price(record.avg_dividend_5_years)
    if not isfinite(bazin):
        raise ValidationError("avgDividend5Years", "out of range")
    graham = graham_fair_price(record.eps, record.bvps)
    if not isfinite(graham):
        raise ValidationError("eps", "out of range: EPS x BVPS overflows")

    result = ValuationResult(
        bazin_fair_price=bazin,
        graham_fair_price=graham,
        upside_bazin=upside(bazin, price),
        upside_graham=graham_upside(graham, price),
    )
    if not (isfinite(result.upside_bazin) and isfinite(result.upside_graham)):
        raise ValidationError("currentPrice", "out of range")
    return result
