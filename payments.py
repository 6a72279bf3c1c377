"""
Fixed-installment loan arithmetic.

Thin wrappers around numpy-financial that take the annual rate as a
percentage and return positive amounts. Callers must not pass a
duration or principal <= 0; the results are undefined there.
"""

from __future__ import annotations

import numpy_financial as npf


def monthly_rate(annual_percent: float) -> float:
    """Annual percentage rate -> monthly fraction (8.81 -> 0.00734...)."""
    return annual_percent / 100 / 12


def installment(rate: float, duration: int, principal: float) -> float:
    """Fixed monthly payment that repays ``principal`` over ``duration`` months.

    PMT = P * r / (1 - (1 + r)^-n), or P / n when r == 0.
    """
    return float(-npf.pmt(monthly_rate(rate), duration, principal))


def principal_portion(
    period: int,
    rate: float,
    duration: int,
    principal: float,
) -> float:
    """Principal part of the installment due at 1-based ``period``.

    Equals the installment minus that period's interest, i.e.
    P * r * (1 + r)^(k-1) / ((1 + r)^n - 1) for r > 0.
    """
    return float(-npf.ppmt(monthly_rate(rate), period, duration, principal))
