from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from fairvalue_engine import Diagnosis, IndicatorLabel


class CalculationRequest(BaseModel):
    """Request body for the offline valuation endpoint."""

    record: Dict[str, Any] = Field(..., description="Raw financial record using the provider's camelCase field names")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "record": {
                    "ticker": "BBAS3.SA",
                    "name": "Banco do Brasil S.A.",
                    "currency": "BRL",
                    "currentPrice": 30.0,
                    "eps": 3.0,
                    "bvps": 20.0,
                    "avgDividend5Years": 2.4,
                    "dividendYield": 8.5,
                    "payoutFrequency": "Quarterly",
                    "dividendHistory": [{"date": "2024-09-10", "amount": 0.65, "type": "Dividend"}],
                }
            }
        }
    )


class StockSummary(BaseModel):
    ticker: str
    name: str
    currency: str
    region: Optional[str] = None
    current_price: float = Field(..., description="Market price")
    eps: float = Field(..., description="Earnings per share")
    bvps: float = Field(..., description="Book value per share")
    dividend_yield: Optional[float] = Field(None, description="Current dividend yield, percent")
    avg_dividend_5_years: float = Field(..., description="Average annual dividend over the last 5 years")
    last_updated: Optional[str] = None


class DividendPaymentItem(BaseModel):
    date: str
    amount: float
    type: Optional[str] = None


class DividendMonitor(BaseModel):
    next_payment: str = Field(..., description="Next expected payment date, or a placeholder")
    payout_frequency: str
    history: List[DividendPaymentItem] = Field(default_factory=list, description="Most recent payments, newest first")
    history_message: Optional[str] = Field(None, description="Shown instead of the history when none was found")


class ValuationFigures(BaseModel):
    bazin_fair_price: float
    graham_fair_price: float = Field(..., description="0.0 when Graham's formula is not applicable")
    upside_bazin: float
    upside_graham: float = Field(..., description="-100 when Graham's formula is not applicable")
    graham_applicable: bool


class IndicatorCard(BaseModel):
    title: str
    formula: str
    description: str
    fair_price: float
    upside: float
    label: IndicatorLabel
    undervalued: bool
    gauge_width: float = Field(..., description="Bar width in percent, clamped to [5, 100]")


class ChartPoint(BaseModel):
    name: str
    value: float
    kind: str


class DiagnosisView(BaseModel):
    code: Diagnosis
    title: str
    message: str


class SourceLink(BaseModel):
    label: str
    uri: str


class AnalysisResponse(BaseModel):
    stock: StockSummary
    dividends: DividendMonitor
    valuation: ValuationFigures
    indicators: List[IndicatorCard]
    price_chart: List[ChartPoint]
    dividend_chart: List[ChartPoint]
    diagnosis: DiagnosisView
    sources: List[SourceLink]
    disclaimer: str


class PopularTickersResponse(BaseModel):
    tickers: List[str]
