import asyncio
import logging
from typing import Any, Dict, Optional

import pandas as pd
import yfinance as yf

from .base import Acquisition, AcquisitionError, BaseConnector, ConnectorFactory, GroundingSource, to_record

logger = logging.getLogger(__name__)

HISTORY_LENGTH = 3
AVERAGE_YEARS = 5

# Payments in the trailing 365 days -> label
PAYOUT_FREQUENCIES = {12: "Monthly", 4: "Quarterly", 2: "Semiannual", 1: "Annual"}


def _naive(series: pd.Series) -> pd.Series:
    if series.empty:
        return series
    index = pd.DatetimeIndex(series.index)
    if index.tz is not None:
        index = index.tz_localize(None)
    return pd.Series(series.to_numpy(dtype=float), index=index).sort_index()


def average_annual_dividend(dividends: pd.Series, today: pd.Timestamp, years: int = AVERAGE_YEARS) -> float:
    """Mean of yearly totals over the last ``years`` complete calendar years. Years without payments count as zero."""
    if dividends.empty:
        return 0.0
    window = dividends[(dividends.index.year < today.year) & (dividends.index.year >= today.year - years)]
    if window.empty:
        return 0.0
    return float(window.sum()) / years


def payout_frequency(dividends: pd.Series, today: pd.Timestamp) -> Optional[str]:
    if dividends.empty:
        return None
    recent = dividends[(dividends.index > today - pd.Timedelta(days=365)) & (dividends.index <= today)]
    if recent.empty:
        return None
    return PAYOUT_FREQUENCIES.get(len(recent), "Irregular")


def recent_payments(dividends: pd.Series, count: int = HISTORY_LENGTH) -> list:
    """Newest first."""
    latest = dividends.iloc[-count:].iloc[::-1]
    return [
        {"date": ts.strftime("%Y-%m-%d"), "amount": float(amount), "type": "Dividend"}
        for ts, amount in latest.items()
    ]


def build_raw_record(ticker: str, info: Dict[str, Any], dividends: pd.Series, today: pd.Timestamp) -> Dict[str, Any]:
    """
    Map yfinance ``info`` and ``dividends`` into the provider wire shape.

    Fields Yahoo does not report are left out so the data contract can
    name them.
    """
    dividends = _naive(dividends)
    price = info.get("currentPrice") or info.get("regularMarketPrice")

    raw: Dict[str, Any] = {
        "ticker": info.get("symbol") or ticker,
        "name": info.get("longName") or info.get("shortName"),
        "currency": info.get("currency"),
        "currentPrice": price,
        "eps": info.get("trailingEps"),
        "bvps": info.get("bookValue"),
        "avgDividend5Years": average_annual_dividend(dividends, today),
        "region": info.get("country"),
        "lastUpdated": today.strftime("%Y-%m-%d"),
        "dividendHistory": recent_payments(dividends),
    }

    rate = info.get("dividendRate")
    if rate is not None and price:
        raw["dividendYield"] = float(rate) / float(price) * 100

    frequency = payout_frequency(dividends, today)
    if frequency:
        raw["payoutFrequency"] = frequency

    ex_date = info.get("exDividendDate")
    if ex_date:
        ex_ts = pd.Timestamp(ex_date, unit="s")
        if ex_ts.normalize() >= today.normalize():
            raw["nextDividendDate"] = ex_ts.strftime("%Y-%m-%d")

    return {k: v for k, v in raw.items() if v is not None}


class YahooFinanceConnector(BaseConnector):
    """Connector for fetching data from Yahoo Finance."""

    def _fetch_raw(self, ticker: str) -> Dict[str, Any]:
        stock = yf.Ticker(ticker)
        info = stock.info or {}
        dividends = stock.dividends
        if dividends is None:
            dividends = pd.Series(dtype=float)
        return build_raw_record(ticker, info, dividends, pd.Timestamp.today().normalize())

    async def fetch(self, ticker: str) -> Acquisition:
        try:
            raw = await asyncio.to_thread(self._fetch_raw, ticker)
        except Exception as e:
            logger.warning(f"Yahoo Finance lookup failed for {ticker}: {e}")
            raise AcquisitionError.provider_unavailable(ticker, str(e)) from e

        record = to_record(raw)
        source = GroundingSource(title="Yahoo Finance", uri=f"https://finance.yahoo.com/quote/{record.ticker}")
        return Acquisition(record=record, sources=(source,))


# Register the connector
ConnectorFactory.register("yahoo", YahooFinanceConnector)
