"""
Presentation view model.

Turns an ``Analysis`` into the ``AnalysisResponse`` a page renders: the two
indicator cards, the price and dividend comparison series, the dividend
monitor, the diagnosis text and the citation links.  No formatting of
numbers happens here; that is left to the client.
"""

from typing import Iterable, List
from urllib.parse import urlparse

from fairvalue_engine import Diagnosis, FinancialRecord, indicator_label, is_undervalued, upside
from fairvalue_service.api.schemas import (
    AnalysisResponse,
    ChartPoint,
    DiagnosisView,
    DividendMonitor,
    DividendPaymentItem,
    IndicatorCard,
    SourceLink,
    StockSummary,
    ValuationFigures,
)
from fairvalue_service.connectors.base import GroundingSource
from fairvalue_service.services.valuation import Analysis

MAX_HISTORY_ITEMS = 3

NEXT_PAYMENT_FALLBACK = "To be announced"
FREQUENCY_FALLBACK = "N/A"
NO_HISTORY_MESSAGE = "No recent dividend data found by the search providers."

DISCLAIMER = (
    "This application is an analytical aid. Data comes from search engines and AI "
    "and may contain inaccuracies. Always validate against the companies' official "
    "investor relations documents."
)

POPULAR_TICKERS = ["PETR4.SA", "VALE3.SA", "BBAS3.SA", "ITSA4.SA", "MC.PA", "ASML.AS", "SAP.DE", "LVMH.PA"]


def gauge_width(fair_price: float, current_price: float) -> float:
    return min(max(fair_price / current_price * 50, 5.0), 100.0)


def _card(title: str, formula: str, description: str, fair_price: float, current_price: float) -> IndicatorCard:
    # The card's own upside is plain arithmetic, even for the Graham 0-sentinel.
    return IndicatorCard(
        title=title,
        formula=formula,
        description=description,
        fair_price=fair_price,
        upside=upside(fair_price, current_price),
        label=indicator_label(fair_price, current_price),
        undervalued=is_undervalued(fair_price, current_price),
        gauge_width=gauge_width(fair_price, current_price),
    )


def build_indicators(analysis: Analysis) -> List[IndicatorCard]:
    record, valuation = analysis.record, analysis.valuation
    return [
        _card(
            "Bazin Valuation",
            "Avg (5Y) / 0.06",
            f"Computed from the average dividend of the last 5 years "
            f"({record.currency} {record.avg_dividend_5_years:.2f}). "
            f"Finds the price at which that amount would be a 6% yield.",
            valuation.bazin_fair_price,
            record.current_price,
        ),
        _card(
            "Graham Formula",
            "√(22.5 × EPS × BVPS)",
            "Conservative intrinsic value based on earnings per share and book value per share.",
            valuation.graham_fair_price,
            record.current_price,
        ),
    ]


def build_dividend_monitor(record: FinancialRecord) -> DividendMonitor:
    history = list(record.dividend_history or ())[:MAX_HISTORY_ITEMS]
    return DividendMonitor(
        next_payment=record.next_dividend_date or NEXT_PAYMENT_FALLBACK,
        payout_frequency=record.payout_frequency or FREQUENCY_FALLBACK,
        history=[DividendPaymentItem(date=p.date, amount=p.amount, type=p.type) for p in history],
        history_message=None if history else NO_HISTORY_MESSAGE,
    )


def diagnosis_message(code: Diagnosis, record: FinancialRecord) -> str:
    if code is Diagnosis.STRONG_BUY:
        return (
            f"Full analysis complete: {record.ticker} shows an excellent margin of safety in both "
            f"classic models. The 5-year dividend average ({record.currency} "
            f"{record.avg_dividend_5_years:.2f}) supports the Bazin thesis."
        )
    if code is Diagnosis.INCOME_FOCUS:
        return (
            "Income focus: the Bazin model points to an attractive yield based on the 5-year "
            "history, but the equity may be overvalued according to Graham. Watch the average price."
        )
    return (
        "The models suggest caution. Monitoring dividends is vital here to make sure the "
        "investment thesis stays intact."
    )


def build_source_links(sources: Iterable[GroundingSource]) -> List[SourceLink]:
    links = []
    for source in sources:
        if not source.uri:
            continue
        label = source.title or urlparse(source.uri).netloc or source.uri
        links.append(SourceLink(label=label, uri=source.uri))
    return links


def build_analysis_view(analysis: Analysis) -> AnalysisResponse:
    record, valuation = analysis.record, analysis.valuation
    code = valuation.diagnosis
    current_dividend = record.current_price * ((record.dividend_yield or 0.0) / 100)

    return AnalysisResponse(
        stock=StockSummary(
            ticker=record.ticker,
            name=record.name,
            currency=record.currency,
            region=record.region,
            current_price=record.current_price,
            eps=record.eps,
            bvps=record.bvps,
            dividend_yield=record.dividend_yield,
            avg_dividend_5_years=record.avg_dividend_5_years,
            last_updated=record.last_updated,
        ),
        dividends=build_dividend_monitor(record),
        valuation=ValuationFigures(
            bazin_fair_price=valuation.bazin_fair_price,
            graham_fair_price=valuation.graham_fair_price,
            upside_bazin=valuation.upside_bazin,
            upside_graham=valuation.upside_graham,
            graham_applicable=valuation.graham_applicable,
        ),
        indicators=build_indicators(analysis),
        price_chart=[
            ChartPoint(name="Market", value=record.current_price, kind="current"),
            ChartPoint(name="Fair (Bazin)", value=valuation.bazin_fair_price, kind="bazin"),
            ChartPoint(name="Fair (Graham)", value=valuation.graham_fair_price, kind="graham"),
        ],
        dividend_chart=[
            ChartPoint(name="Average (5Y)", value=record.avg_dividend_5_years, kind="average"),
            ChartPoint(name="Current (est.)", value=current_dividend, kind="current"),
        ],
        diagnosis=DiagnosisView(code=code, title="Diagnosis", message=diagnosis_message(code, record)),
        sources=build_source_links(analysis.sources),
        disclaimer=DISCLAIMER,
    )
