"""
Tests for the FastAPI application: root, middleware, endpoints, error mapping, JSON compliance.
"""

import logging
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from fairvalue_engine import Diagnosis, ValidationError, validate_record
from fairvalue_service.app import app, create_app
from fairvalue_service.config import Settings
from fairvalue_service.connectors import Acquisition, AcquisitionError, GroundingSource
from fairvalue_service.services.presentation import POPULAR_TICKERS
from fairvalue_service.utils.json import sanitize_for_json

client = TestClient(app)


def mock_connector(result=None, error=None):
    connector = MagicMock()
    connector.fetch = AsyncMock(return_value=result, side_effect=error)
    return connector


# ---------------------------------------------------------------------------
# Root & basic endpoints
# ---------------------------------------------------------------------------


def test_read_root():
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "FairValue API is running"}


def test_404():
    response = client.get("/non-existent")
    assert response.status_code == 404
    assert response.json() == {"detail": "Not Found"}


def test_docs():
    response = client.get("/docs")
    assert response.status_code == 200


def test_openapi():
    response = client.get("/openapi.json")
    assert response.status_code == 200
    assert "/analysis/{ticker}" in response.json()["paths"]


def test_popular_tickers():
    response = client.get("/tickers/popular")
    assert response.status_code == 200
    assert response.json() == {"tickers": POPULAR_TICKERS}


# ---------------------------------------------------------------------------
# Logging middleware
# ---------------------------------------------------------------------------


def test_logging_middleware(caplog):
    """Test that requests are logged."""
    with caplog.at_level(logging.INFO):
        client.get("/")

    assert any("Incoming request: GET /" in record.message for record in caplog.records), (
        "Request was not logged by middleware"
    )


def test_middleware_internal_error():
    """Middleware should catch unhandled exceptions from routes without try/except."""

    test_app = create_app()

    @test_app.get("/error")
    def error_route():
        raise RuntimeError("Middleware specific crash")

    test_client = TestClient(test_app)
    response = test_client.get("/error")
    assert response.status_code == 500
    assert response.json() == {"detail": "Internal Server Error"}


# ---------------------------------------------------------------------------
# Analysis endpoint
# ---------------------------------------------------------------------------


def test_analyze_ticker(raw_record):
    acquisition = Acquisition(
        record=validate_record(raw_record),
        sources=(GroundingSource("Status Invest", "https://statusinvest.com.br/acoes/bbas3"),),
    )

    with patch("fairvalue_service.api.router.ConnectorFactory.get_connector") as mock_factory:
        connector = mock_connector(result=acquisition)
        mock_factory.return_value = connector

        response = client.get("/analysis/bbas3.sa?source=claude")

    assert response.status_code == 200
    mock_factory.assert_called_with("claude")
    connector.fetch.assert_awaited_once_with("BBAS3.SA")

    data = response.json()
    assert data["stock"]["ticker"] == "BBAS3.SA"
    assert data["valuation"]["bazin_fair_price"] == pytest.approx(40.0)
    assert data["valuation"]["graham_fair_price"] == pytest.approx(36.742, abs=1e-3)
    assert data["diagnosis"]["code"] == "StrongBuy"
    assert [card["label"] for card in data["indicators"]] == ["Opportunity", "Opportunity"]
    assert data["sources"] == [{"label": "Status Invest", "uri": "https://statusinvest.com.br/acoes/bbas3"}]


def test_analyze_uses_default_source(raw_record):
    yahoo_client = TestClient(create_app(Settings(default_source="yahoo")))

    with patch("fairvalue_service.api.router.ConnectorFactory.get_connector") as mock_factory:
        mock_factory.return_value = mock_connector(result=Acquisition(record=validate_record(raw_record)))
        response = yahoo_client.get("/analysis/BBAS3.SA")

    assert response.status_code == 200
    mock_factory.assert_called_with("yahoo")


def test_settings_are_read_once_at_startup(raw_record, monkeypatch):
    settings_client = TestClient(create_app(Settings(default_source="yahoo")))
    monkeypatch.setenv("FAIRVALUE_MAX_TOKENS", "lots")

    with patch("fairvalue_service.api.router.ConnectorFactory.get_connector") as mock_factory:
        mock_factory.return_value = mock_connector(result=Acquisition(record=validate_record(raw_record)))
        response = settings_client.get("/analysis/BBAS3.SA")

    assert response.status_code == 200
    mock_factory.assert_called_with("yahoo")


def test_bad_environment_fails_at_startup(monkeypatch):
    monkeypatch.setenv("FAIRVALUE_TIMEOUT", "-1")
    with pytest.raises(ValueError, match="timeout"):
        create_app()


def test_analyze_extreme_provider_figures(raw_record):
    raw_record.update({"eps": 1e200, "bvps": 1e200})
    with patch("fairvalue_service.api.router.ConnectorFactory.get_connector") as mock_factory:
        mock_factory.return_value = mock_connector(result=Acquisition(record=validate_record(raw_record)))
        response = client.get("/analysis/BBAS3.SA")

    assert response.status_code == 502
    assert response.json()["detail"]["kind"] == "InvalidData"
    assert response.json()["detail"]["field"] == "eps"


@pytest.mark.parametrize(
    "error,status,kind",
    [
        (AcquisitionError.provider_unavailable("BBAS3.SA", "timeout"), 503, "ProviderUnavailable"),
        (AcquisitionError.malformed_response("no JSON object in response body"), 502, "MalformedResponse"),
    ],
)
def test_analyze_acquisition_errors(error, status, kind):
    with patch("fairvalue_service.api.router.ConnectorFactory.get_connector") as mock_factory:
        mock_factory.return_value = mock_connector(error=error)
        response = client.get("/analysis/BBAS3.SA")

    assert response.status_code == status
    detail = response.json()["detail"]
    assert detail["kind"] == kind
    assert detail["retryable"] is True
    assert detail["field"] is None


def test_analyze_invalid_data_names_field():
    error = AcquisitionError.invalid_data(ValidationError("eps", "missing"))
    with patch("fairvalue_service.api.router.ConnectorFactory.get_connector") as mock_factory:
        mock_factory.return_value = mock_connector(error=error)
        response = client.get("/analysis/BBAS3.SA")

    assert response.status_code == 502
    detail = response.json()["detail"]
    assert detail["kind"] == "InvalidData"
    assert detail["field"] == "eps"


def test_analyze_unknown_source():
    response = client.get("/analysis/BBAS3.SA?source=nope")
    assert response.status_code == 400
    assert "nope" in response.json()["detail"]


def test_analyze_blank_ticker():
    with patch("fairvalue_service.api.router.ConnectorFactory.get_connector") as mock_factory:
        connector = mock_connector()
        mock_factory.return_value = connector
        response = client.get("/analysis/%20%20")

    assert response.status_code == 400
    connector.fetch.assert_not_called()


def test_analyze_internal_error():
    with patch("fairvalue_service.api.router.ConnectorFactory.get_connector") as mock_factory:
        mock_factory.side_effect = Exception("Boom")
        response = client.get("/analysis/BBAS3.SA")

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal Server Error"}


# ---------------------------------------------------------------------------
# Offline calculation endpoint
# ---------------------------------------------------------------------------


def test_calculate_valuation(raw_record):
    response = client.post("/valuation/calculate", json={"record": raw_record})
    assert response.status_code == 200

    data = response.json()
    assert data["valuation"]["upside_bazin"] == pytest.approx(33.33, abs=0.01)
    assert data["dividends"]["payout_frequency"] == "Quarterly"
    assert len(data["dividends"]["history"]) == 3
    assert data["sources"] == []


def test_calculate_graham_not_applicable(loss_making_record):
    response = client.post("/valuation/calculate", json={"record": loss_making_record})
    assert response.status_code == 200

    valuation = response.json()["valuation"]
    assert valuation["graham_fair_price"] == 0.0
    assert valuation["upside_graham"] == -100.0
    assert valuation["graham_applicable"] is False
    assert response.json()["diagnosis"]["code"] == "Caution"


def test_calculate_invalid_record(raw_record):
    raw_record["currentPrice"] = 0
    response = client.post("/valuation/calculate", json={"record": raw_record})
    assert response.status_code == 400
    assert response.json()["detail"] == {"field": "currentPrice", "reason": "must be positive"}


def test_calculate_missing_field(raw_record):
    del raw_record["avgDividend5Years"]
    response = client.post("/valuation/calculate", json={"record": raw_record})
    assert response.status_code == 400
    assert response.json()["detail"]["field"] == "avgDividend5Years"


def test_calculate_extreme_dividend(raw_record):
    raw_record["avgDividend5Years"] = 1e308
    response = client.post("/valuation/calculate", json={"record": raw_record})
    assert response.status_code == 400
    assert response.json()["detail"] == {"field": "avgDividend5Years", "reason": "out of range"}


def test_calculate_wrong_body():
    response = client.post("/valuation/calculate", json={"wrong_key": "AAPL"})
    assert response.status_code == 422


def test_calculate_internal_error(raw_record):
    with patch("fairvalue_service.api.router.ValuationService.calculate") as mock_calculate:
        mock_calculate.side_effect = RuntimeError("Boom")
        response = client.post("/valuation/calculate", json={"record": raw_record})

    assert response.status_code == 500


# ---------------------------------------------------------------------------
# JSON compliance (NaN / Infinity sanitization)
# ---------------------------------------------------------------------------


def test_sanitize_for_json():
    data = {"a": float("nan"), "b": [float("inf"), 1.5], "c": (Diagnosis.CAUTION,), "d": {"e": float("-inf")}}
    assert sanitize_for_json(data) == {"a": None, "b": [None, 1.5], "c": ["Caution"], "d": {"e": None}}
