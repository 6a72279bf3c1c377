import pytest

import cli
from simulation import prepayment_table, run_simulation


def _display(config):
    return cli.compute_display_data(config, run_simulation(config), prepayment_table(config))


def _feed(monkeypatch, answers):
    it = iter(answers)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(it))


# ─── Formatting ──────────────────────────────────────────────────────

def test_fmt():
    assert cli.fmt(1234.5) == "1,234.50"
    assert cli.fmt(-0.004) == "-0.00"
    assert cli.fmt(1_000_000, 0) == "1,000,000"


def test_pct():
    assert cli.pct(12.5) == "+12.50%"
    assert cli.pct(-3.0) == "-3.00%"
    assert cli.pct(0.0) == "0.00%"


# ─── Display data and verdict ────────────────────────────────────────

def test_no_prepayment_verdict(make_config):
    d = _display(make_config(monthly_available=10_000))
    assert d["winner"] == "none"
    assert d["payoff_month"] == 12
    assert d["months_early"] == 0
    assert cli.generate_verdict_text(d).startswith("No extra payments are made")


def test_prepay_wins_when_loan_costs_more(make_config):
    d = _display(make_config(monthly_available=15_000, prefer_loan_duration=12,
                             invest_interest=1.0))
    assert d["winner"] == "prepay"
    assert d["months_early"] == 5
    assert d["adv_abs"] > 0
    text = cli.generate_verdict_text(d)
    assert "Prepaying for 12 months wins" in text
    assert "closes 5 months early" in text


def test_invest_wins_when_returns_are_higher(make_config):
    d = _display(make_config(loan_interest=1.0, invest_interest=30.0,
                             monthly_available=15_000, prefer_loan_duration=12))
    assert d["winner"] == "invest"
    assert d["best_level"] == 0
    text = cli.generate_verdict_text(d)
    assert text.startswith("Investing wins")
    assert "0 months of prepayment ends with the largest fund" in text


def test_display_totals_add_up(make_config):
    config = make_config(monthly_available=15_000, prefer_loan_duration=6)
    d = _display(config)
    assert d["surplus"] == pytest.approx(15_000 - d["loan_monthly"])
    assert d["loan_saved_abs"] == pytest.approx(d["total_loan_expected"] - d["total_loan_paid"])
    assert d["invest_result"] == pytest.approx(d["total_invested"] + d["total_invest_interest"])


# ─── Box drawing ─────────────────────────────────────────────────────

def test_box_lines_have_fixed_width():
    assert len(cli._box_line("x" * 200)) == cli.W
    assert len(cli._box_row("Label", "1.00")) == cli.W
    assert len(cli._box_bottom()) == cli.W


def test_wrap_respects_width():
    lines = cli._wrap("word " * 60, width=20)
    assert all(len(line) <= 20 for line in lines)
    assert " ".join(lines) == ("word " * 60).strip()


# ─── Interactive run ─────────────────────────────────────────────────

ANSWERS = ["100000", "12", "6", "1", "15000", "", "12"]


def test_collect_inputs(monkeypatch):
    _feed(monkeypatch, ANSWERS)
    config = cli.collect_inputs()
    assert config.loan_total == 100_000
    assert config.loan_duration == 12
    assert config.measure_duration == 12
    assert config.prefer_loan_duration == 12
    assert config.monthly_available == 15_000


def test_collect_inputs_retries_bad_values(monkeypatch, capsys):
    _feed(monkeypatch, ["lots", "-5"] + ANSWERS)
    config = cli.collect_inputs()
    out = capsys.readouterr().out
    assert "Invalid number" in out
    assert "Must be at least 0" in out
    assert config.loan_total == 100_000


def test_run_cli_without_pdf(monkeypatch, capsys):
    _feed(monkeypatch, ANSWERS)
    cli.run_cli(pdf_path=None, show_schedule=True)
    out = capsys.readouterr().out
    assert "PREPAYING WINS" in out
    assert "HOW LONG SHOULD YOU PREPAY?" in out
    assert "Months left" in out
    assert "Charts available in the web app" in out


def test_run_cli_writes_pdf(monkeypatch, capsys, tmp_path):
    _feed(monkeypatch, ANSWERS)
    target = tmp_path / "out.pdf"
    cli.run_cli(pdf_path=str(target))
    assert target.read_bytes().startswith(b"%PDF")
    assert f"Saved to {target}" in capsys.readouterr().out
