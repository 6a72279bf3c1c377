import math

import pytest

from payments import installment, monthly_rate, principal_portion


def test_monthly_rate():
    assert monthly_rate(12) == pytest.approx(0.01)
    assert monthly_rate(0) == 0.0


def test_installment_known_case():
    # 100k over 12 months at 6%/yr
    assert installment(6, 12, 100_000) == pytest.approx(8606.64, abs=0.01)


def test_installment_matches_annuity_formula():
    r = 0.0881 / 12
    n = 284
    p = 322_830.96
    expected = p * r / (1 - (1 + r) ** -n)
    assert math.isclose(installment(8.81, n, p), expected, rel_tol=1e-9)


def test_installment_zero_rate_is_straight_line():
    assert installment(0, 10, 1_000) == pytest.approx(100.0)


def test_first_principal_portion_is_installment_minus_interest():
    pmt = installment(6, 12, 100_000)
    assert principal_portion(1, 6, 12, 100_000) == pytest.approx(pmt - 500.0)


def test_principal_portion_closed_form():
    r = 0.005
    n = 12
    p = 100_000
    k = 5
    expected = p * r * (1 + r) ** (k - 1) / ((1 + r) ** n - 1)
    assert principal_portion(k, 6, n, p) == pytest.approx(expected, rel=1e-10)


def test_principal_portions_increase_and_sum_to_principal():
    portions = [principal_portion(k, 6, 12, 100_000) for k in range(1, 13)]
    assert all(b > a for a, b in zip(portions, portions[1:]))
    assert sum(portions) == pytest.approx(100_000, abs=1e-6)


def test_principal_portion_zero_rate():
    assert principal_portion(3, 0, 4, 1_000) == pytest.approx(250.0)


def test_single_period_principal_is_whole_balance():
    assert principal_portion(1, 8.81, 1, 1234.56) == pytest.approx(1234.56)
