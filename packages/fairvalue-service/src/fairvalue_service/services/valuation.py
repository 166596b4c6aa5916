"""
Valuation Service
=================

Thin orchestration layer: fetch a record via a Connector, run it through
the engine, and hand back everything the presentation layer needs.

All validation and computation logic lives in **fairvalue_engine** so there
is exactly one source of truth.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Tuple

from fairvalue_engine import FinancialRecord, ValidationError, ValuationResult, compute_valuation, validate_record
from fairvalue_service.connectors.base import AcquisitionError, BaseConnector, GroundingSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Analysis:
    record: FinancialRecord
    valuation: ValuationResult
    sources: Tuple[GroundingSource, ...] = ()


def normalize_ticker(ticker: str) -> str:
    symbol = (ticker or "").strip().upper()
    if not symbol:
        raise ValueError("Ticker must not be empty.")
    return symbol


class ValuationService:
    def __init__(self, connector: BaseConnector):
        self.connector = connector

    async def analyze(self, ticker: str) -> Analysis:
        """
        Orchestrates one ticker lookup.

        1. Normalize the ticker.
        2. Fetch a validated record from the Connector (raises AcquisitionError).
        3. Run the engine. Provider figures too extreme to value are InvalidData.
        """
        symbol = normalize_ticker(ticker)
        acquisition = await self.connector.fetch(symbol)
        try:
            valuation = compute_valuation(acquisition.record)
        except ValidationError as e:
            logger.warning(f"Provider record for {symbol} cannot be valued: {e}")
            raise AcquisitionError.invalid_data(e) from e
        logger.info(
            f"Valued {symbol}: bazin={valuation.bazin_fair_price:.2f} "
            f"graham={valuation.graham_fair_price:.2f} diagnosis={valuation.diagnosis.value}"
        )
        return Analysis(record=acquisition.record, valuation=valuation, sources=acquisition.sources)

    @staticmethod
    def calculate(raw: Mapping[str, Any]) -> Analysis:
        """Value a caller-supplied raw record without any network call."""
        record = validate_record(raw)
        return Analysis(record=record, valuation=compute_valuation(record))
