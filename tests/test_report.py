import base64

import matplotlib.pyplot as plt
from matplotlib.colors import to_rgba
import pytest

import report
from cli import compute_display_data, generate_verdict_text
from simulation import prepayment_table, run_simulation


@pytest.fixture
def scenario(make_config):
    config = make_config(monthly_available=15_000, prefer_loan_duration=12,
                         invest_interest=3.0, measure_duration=18)
    result = run_simulation(config)
    d = compute_display_data(config, result, prepayment_table(config))
    return config, result, d


def test_amount_formatter():
    assert report._amount_fmt(2_500_000, None) == "2.5M"
    assert report._amount_fmt(12_345, None) == "12k"
    assert report._amount_fmt(-750, None) == "-750"


def test_web_charts_are_png(scenario):
    images = report.get_web_charts(*scenario)
    assert len(images) == 3
    for img in images:
        assert base64.b64decode(img).startswith(b"\x89PNG")


def test_loan_chart_limits_to_loan_duration(scenario):
    config, result, _ = scenario
    fig = report.chart_loan(config, result)
    try:
        assert fig.axes[0].get_xlim() == (0.5, 12.5)
    finally:
        plt.close(fig)


def test_prepayment_chart_has_one_bar_per_level(scenario):
    _, _, d = scenario
    fig = report.chart_prepayment(d["prepayment"])
    try:
        assert len(fig.axes[0].patches) == len(d["prepayment"].rows)
    finally:
        plt.close(fig)


def test_generate_pdf(scenario, tmp_path):
    config, result, d = scenario
    target = tmp_path / "report.pdf"
    path = report.generate_pdf(config, result, d, generate_verdict_text(d), str(target))
    assert path == str(target)
    assert target.read_bytes()[:4] == b"%PDF"


def test_fund_bars_follow_loan_state_at_zero_interest(make_config):
    config = make_config(loan_interest=0.0, monthly_available=9_000, measure_duration=14)
    result = run_simulation(config)
    fig = report.chart_investment(config, result)
    try:
        bars = fig.axes[0].patches[:14]
        open_colour = to_rgba(report.EMERALD, 0.6)
        closed_colour = to_rgba(report.AMBER, 0.6)
        assert [b.get_facecolor() for b in bars[:12]] == [open_colour] * 12
        assert [b.get_facecolor() for b in bars[12:]] == [closed_colour] * 2
    finally:
        plt.close(fig)
