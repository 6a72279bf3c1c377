from __future__ import annotations

import dataclasses

import pytest

from simulation import Configuration

# 100k over a year at 6%: installment 8606.64, total 103279.68
BASE = Configuration(
    loan_total=100_000.0,
    loan_duration=12,
    loan_interest=6.0,
    invest_interest=0.0,
    prefer_loan_duration=0,
    measure_duration=12,
    monthly_available=0.0,
)


@pytest.fixture
def make_config():
    """Factory: BASE with any fields overridden."""
    def _make(**overrides) -> Configuration:
        return dataclasses.replace(BASE, **overrides)
    return _make


@pytest.fixture
def small_form():
    return {
        "loan_total": "100000",
        "loan_interest": "6",
        "loan_duration": "12",
        "invest_interest": "3",
        "prefer_loan_duration": "12",
        "measure_duration": "18",
        "monthly_available": "15000",
    }
