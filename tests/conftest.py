"""
Shared fixtures: raw provider records in the camelCase wire shape.
"""

import pytest


@pytest.fixture
def raw_record():
    """Reference case: Bazin 40.00, Graham 36.74, both above a 30.00 price."""
    return {
        "ticker": "bbas3.sa",
        "name": "Banco do Brasil S.A.",
        "currency": "BRL",
        "currentPrice": 30.0,
        "eps": 3.0,
        "bvps": 20.0,
        "avgDividend5Years": 2.4,
        "dividendYield": 8.5,
        "region": "Brazil",
        "lastUpdated": "2024-10-01",
        "nextDividendDate": "2024-12-12",
        "payoutFrequency": "Quarterly",
        "dividendHistory": [
            {"date": "2024-09-10", "amount": 0.65, "type": "Dividend"},
            {"date": "2024-06-11", "amount": 0.55, "type": "Interest on equity"},
            {"date": "2024-03-12", "amount": 0.60, "type": "Dividend"},
        ],
    }


@pytest.fixture
def loss_making_record():
    """Negative EPS and no dividends: both models fail, diagnosis is Caution."""
    return {
        "ticker": "LOSS3.SA",
        "name": "Loss Making Co",
        "currency": "BRL",
        "currentPrice": 5.0,
        "eps": -1.5,
        "bvps": 10.0,
        "avgDividend5Years": 0.0,
    }
