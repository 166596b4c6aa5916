"""
API Router: all endpoint definitions for the fair-value service.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request

from fairvalue_engine import ValidationError
from fairvalue_service.api.schemas import AnalysisResponse, CalculationRequest, PopularTickersResponse
from fairvalue_service.connectors import AcquisitionError, AcquisitionErrorKind, ConnectorFactory
from fairvalue_service.services.presentation import POPULAR_TICKERS, build_analysis_view
from fairvalue_service.services.valuation import ValuationService
from fairvalue_service.utils.json import sanitize_for_json

logger = logging.getLogger(__name__)
router = APIRouter()

ACQUISITION_STATUS = {
    AcquisitionErrorKind.PROVIDER_UNAVAILABLE: 503,
    AcquisitionErrorKind.MALFORMED_RESPONSE: 502,
    AcquisitionErrorKind.INVALID_DATA: 502,
}


def acquisition_http_error(error: AcquisitionError) -> HTTPException:
    return HTTPException(
        status_code=ACQUISITION_STATUS[error.kind],
        detail={
            "kind": error.kind.value,
            "message": str(error),
            "field": error.field,
            "retryable": True,
        },
    )


@router.get(
    "/tickers/popular",
    summary="Popular Tickers",
    description="Suggested tickers for the landing view.",
    response_model=PopularTickersResponse,
)
def popular_tickers():
    return PopularTickersResponse(tickers=POPULAR_TICKERS)


@router.get(
    "/analysis/{ticker}",
    summary="Analyze Ticker",
    description="Fetches financial data for the ticker from the selected source and computes Bazin and Graham fair values.",
    response_description="Stock summary, dividend monitor, fair-value cards, chart series, diagnosis and sources.",
)
async def analyze_ticker(
    ticker: str,
    request: Request,
    source: Optional[str] = Query(None, description="Data source connector"),
):
    source = source or request.app.state.settings.default_source
    try:
        connector = ConnectorFactory.get_connector(source)
        service = ValuationService(connector)
        analysis = await service.analyze(ticker)
        return sanitize_for_json(build_analysis_view(analysis).model_dump())
    except AcquisitionError as e:
        logger.warning(f"Acquisition failed for {ticker}: {e.kind.value} {e}")
        raise acquisition_http_error(e)
    except ValueError as e:
        logger.warning(f"Bad Request for {ticker}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Internal Error analyzing {ticker}: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post(
    "/valuation/calculate",
    summary="Calculate Valuation",
    description="Validates a caller-supplied financial record and computes fair values. No data source is contacted.",
    response_description="Same payload as the analysis endpoint, without sources.",
)
def calculate_valuation(request: CalculationRequest):
    try:
        analysis = ValuationService.calculate(request.record)
        return sanitize_for_json(build_analysis_view(analysis).model_dump())
    except ValidationError as e:
        logger.warning(f"Invalid record: {e}")
        raise HTTPException(status_code=400, detail={"field": e.field, "reason": e.reason})
    except Exception as e:
        logger.error(f"Internal Error valuing record: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")
