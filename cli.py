"""
CLI interface and shared display-data computation for the
loan prepayment vs invest simulator.
"""

from __future__ import annotations

import sys
from typing import Any, Dict, List, Optional

import config as cfg
from simulation import (
    TABLE_COLUMNS,
    Configuration,
    PrepaymentResult,
    SimulationResult,
    parse_config,
    prepayment_table,
    run_simulation,
)
import report


# ═══════════════════════════════════════════════════════════════════
# Formatting helpers
# ═══════════════════════════════════════════════════════════════════

def fmt(val: float, decimals: int = 2) -> str:
    """Format number as X,XXX.XX."""
    return f"{val:,.{decimals}f}"


def pct(val: float, decimals: int = 2) -> str:
    sign = "+" if val > 0 else ""
    return f"{sign}{val:.{decimals}f}%"


# ═══════════════════════════════════════════════════════════════════
# Input collection (CLI)
# ═══════════════════════════════════════════════════════════════════

def _strip_number(s: str) -> str:
    """Remove thousands separators, spaces and percent signs."""
    return s.replace(",", "").replace(" ", "").replace("%", "")


def _prompt_float(
    label: str,
    default: str,
    min_val: float | None = None,
    max_val: float | None = None,
) -> float:
    while True:
        raw = input(f"  {label} [{default}]: ").strip() or default
        try:
            val = float(_strip_number(raw)) if raw else 0.0
            if min_val is not None and val < min_val:
                print(f"    Must be at least {min_val}")
                continue
            if max_val is not None and val > max_val:
                print(f"    Must be at most {max_val}")
                continue
            return val
        except ValueError:
            print("    Invalid number, try again.")


def _prompt_int(
    label: str,
    default: str,
    min_val: int | None = None,
    max_val: int | None = None,
) -> int:
    while True:
        raw = input(f"  {label} [{default or 'auto'}]: ").strip() or default
        try:
            val = int(_strip_number(raw)) if raw else 0
            if min_val is not None and val < min_val:
                print(f"    Must be at least {min_val}")
                continue
            if max_val is not None and val > max_val:
                print(f"    Must be at most {max_val}")
                continue
            return val
        except ValueError:
            print("    Invalid whole number, try again.")


def collect_inputs() -> Configuration:
    """Prompt the user for all simulation parameters."""
    print("\n  Enter your details (press Enter for defaults):\n")
    d = cfg.DEFAULT_FORM

    raw = {
        "loan_total": _prompt_float("Loan amount", d["loan_total"], 0),
        "loan_duration": _prompt_int("Loan duration (months)", d["loan_duration"], 1, cfg.MAX_MONTHS),
        "loan_interest": _prompt_float("Annual loan interest %", d["loan_interest"], 0, 100),
        "invest_interest": _prompt_float("Annual investment return %", d["invest_interest"], 0, 100),
        "monthly_available": _prompt_float("Money available each month", d["monthly_available"], 0),
        "measure_duration": _prompt_int("Months to simulate (blank = loan duration)",
                                        d["measure_duration"], 0, cfg.MAX_MONTHS),
        "prefer_loan_duration": _prompt_int("Months of extra loan payments",
                                            d["prefer_loan_duration"], 0, cfg.MAX_MONTHS),
    }
    return parse_config(raw)


# ═══════════════════════════════════════════════════════════════════
# Shared display-data computation (used by CLI and web app)
# ═══════════════════════════════════════════════════════════════════

def compute_display_data(
    config: Configuration,
    result: SimulationResult,
    table: PrepaymentResult,
) -> Dict[str, Any]:
    """Extract every metric needed for the output sections."""
    payoff = result.payoff_month
    total_extra = float(result.series("loan_additional").sum())
    total_invested = float(result.series("invest_add").sum())
    total_invest_interest = float(result.series("invest_interest").sum())

    # ── Verdict ─────────────────────────────────────────────────
    if config.prefer_loan_duration == 0:
        winner = "none"
    elif result.invest_result > result.invest_max:
        winner = "prepay"
    else:
        winner = "invest"
    adv_abs = abs(result.invest_result - result.invest_max)

    return {
        # Inputs echo
        "loan_total": config.loan_total,
        "loan_duration": config.loan_duration,
        "loan_interest": config.loan_interest,
        "invest_interest": config.invest_interest,
        "monthly_available": config.monthly_available,
        "prefer_loan_duration": config.prefer_loan_duration,
        "months": config.months_to_simulate,
        # Loan
        "loan_monthly": result.loan_monthly,
        "surplus": config.monthly_available - result.loan_monthly,
        "total_loan_expected": result.total_loan_expected,
        "total_loan_paid": result.total_loan_paid,
        "loan_saved_abs": result.total_loan_expected - result.total_loan_paid,
        "loan_saved_pct": result.loan_saved_pct,
        "payoff_month": payoff,
        "months_early": (config.loan_duration - payoff) if payoff is not None else 0,
        "total_extra": total_extra,
        "total_interest_saved": result.total_interest_saved,
        # Investment
        "total_invested": total_invested,
        "total_invest_interest": total_invest_interest,
        "invest_result": result.invest_result,
        "invest_max": result.invest_max,
        "invest_pct": result.invest_pct,
        # Verdict
        "winner": winner,
        "adv_abs": adv_abs,
        # Comparison table
        "prepayment": table,
        "best_level": table.best_level,
    }


def generate_verdict_text(d: Dict[str, Any]) -> str:
    """Build a 1-3 sentence plain-English verdict."""
    months = d["months"]
    best = d["best_level"]

    if d["winner"] == "none":
        text = (
            f"No extra payments are made: the loan runs its full "
            f"{d['loan_duration']} months at {fmt(d['loan_monthly'])}/mo "
            f"and the rest of the budget goes into the fund, which ends "
            f"at {fmt(d['invest_result'])} after {months} months."
        )
    elif d["winner"] == "prepay":
        text = (
            f"Prepaying for {d['prefer_loan_duration']} months wins by "
            f"{fmt(d['adv_abs'])}. The loan costs {fmt(d['loan_saved_abs'])} "
            f"less than the plain schedule"
        )
        if d["payoff_month"] is not None and d["months_early"] > 0:
            text += f" and closes {d['months_early']} months early"
        text += (
            f", and the freed installments invested from then on end at "
            f"{fmt(d['invest_result'])} against {fmt(d['invest_max'])}."
        )
    else:
        text = (
            f"Investing wins by {fmt(d['adv_abs'])}. Prepaying for "
            f"{d['prefer_loan_duration']} months saves "
            f"{fmt(d['loan_saved_abs'])} on the loan, but the money held "
            f"back from the fund would have earned more at "
            f"{d['invest_interest']:.2f}% than the {d['loan_interest']:.2f}% "
            f"loan costs."
        )

    if best != d["prefer_loan_duration"]:
        text += f" Of the lengths compared, {best} months of prepayment ends with the largest fund."
    return text


# ═══════════════════════════════════════════════════════════════════
# Box-drawing CLI output
# ═══════════════════════════════════════════════════════════════════

W = 78  # box width (characters)
H = "═"


def _box_top(title: str) -> str:
    inner = W - 2
    return (
        f"╔{H * inner}╗\n"
        f"║  {title:<{inner - 2}}║\n"
        f"╠{H * inner}╣"
    )


def _box_line(text: str = "") -> str:
    inner = W - 4
    if len(text) > inner:
        text = text[:inner]
    return f"║  {text:<{inner}}║"


def _box_row(label: str, value: str, lw: int = 38) -> str:
    return _box_line(f"{label:<{lw}}{value}")


def _box_bottom() -> str:
    return f"╚{H * (W - 2)}╝"


def _wrap(text: str, width: int = W - 6) -> List[str]:
    lines: List[str] = []
    line = ""
    for word in text.split():
        if len(line) + len(word) + 1 <= width:
            line = f"{line} {word}" if line else word
        else:
            lines.append(line)
            line = word
    if line:
        lines.append(line)
    return lines


def _print_section(title: str, rows: List[str]) -> None:
    """Print a titled box with content rows."""
    print(_box_top(title))
    for r in rows:
        print(r)
    print(_box_bottom())
    print()


# ═══════════════════════════════════════════════════════════════════
# CLI Section Printers
# ═══════════════════════════════════════════════════════════════════

def _print_inputs(d: Dict[str, Any]) -> None:
    rows = [
        _box_row("Loan amount", fmt(d["loan_total"])),
        _box_row("Loan duration", f"{d['loan_duration']} months"),
        _box_row("Loan interest", f"{d['loan_interest']:.2f}%"),
        _box_row("Investment return", f"{d['invest_interest']:.2f}%"),
        _box_line(),
        _box_row("Available each month", fmt(d["monthly_available"])),
        _box_row("Months of extra payments", str(d["prefer_loan_duration"])),
        _box_row("Months simulated", str(d["months"])),
    ]
    _print_section("YOUR INPUTS", rows)


def _print_loan(d: Dict[str, Any]) -> None:
    rows = [
        _box_row("Monthly installment", fmt(d["loan_monthly"])),
        _box_row("Surplus over installment", fmt(d["surplus"])),
        _box_line(),
        _box_row("Total without extra payments", fmt(d["total_loan_expected"])),
        _box_row("Total with extra payments", fmt(d["total_loan_paid"])),
    ]
    if d["loan_saved_pct"] < 0:
        rows.append(_box_row("  Difference", f"{fmt(-d['loan_saved_abs'])} ({pct(d['loan_saved_pct'])})"))
    rows.append(_box_row("Extra principal paid", fmt(d["total_extra"])))
    rows.append(_box_line())
    if d["payoff_month"] is not None:
        rows.append(_box_row("Loan closes in month", str(d["payoff_month"])))
        if d["months_early"] > 0:
            rows.append(_box_row("  Months early", str(d["months_early"])))
    else:
        rows.append(_box_row("Loan closes in month", "-"))
    _print_section("THE LOAN", rows)


def _print_investment(d: Dict[str, Any]) -> None:
    rows = [
        _box_row("Contributions", fmt(d["total_invested"])),
        _box_row("Interest earned", fmt(d["total_invest_interest"])),
        _box_line(),
        _box_row("Fund without extra payments", fmt(d["invest_max"])),
        _box_row("Fund with extra payments", fmt(d["invest_result"])),
    ]
    if abs(d["invest_pct"]) > 0.01:
        rows.append(_box_row("  Difference", pct(d["invest_pct"])))
    if d["invest_result"] < 0:
        rows.append(_box_line())
        rows.extend(_box_line(line) for line in _wrap(
            "WARNING: the monthly budget does not cover the installment; "
            "the shortfall is drawn from the fund, which ends negative."
        ))
    _print_section("THE INVESTMENT FUND", rows)


def _print_verdict(d: Dict[str, Any]) -> None:
    labels = {"prepay": "PREPAYING WINS", "invest": "INVESTING WINS",
              "none": "NO EXTRA PAYMENTS"}
    rows = [_box_row("Result", labels[d["winner"]])]
    if d["winner"] != "none":
        rows.append(_box_row("Advantage", fmt(d["adv_abs"])))
    rows.append(_box_line())
    rows.extend(_box_line(line) for line in _wrap(generate_verdict_text(d)))
    _print_section("THE VERDICT", rows)


def _print_prepayment_table(d: Dict[str, Any]) -> None:
    table: PrepaymentResult = d["prepayment"]

    h1 = f"{'Months':>6}  {'Closes':>6}  {'Loan paid':>14}  {'Fund':>14}  {'vs baseline':>14}"
    rows = [_box_line(h1), _box_line("─" * (W - 6))]
    for r in table.rows:
        marker = " <<" if r.prefer_loan_duration == table.best_level else ""
        closes = str(r.payoff_month) if r.payoff_month is not None else "-"
        rows.append(_box_line(
            f"{r.prefer_loan_duration:>6}  {closes:>6}  "
            f"{fmt(r.total_loan_paid):>14}  {fmt(r.invest_result):>14}  "
            f"{fmt(r.advantage):>14}{marker}"
        ))
    rows.append(_box_line())
    rows.append(_box_line(f"Largest fund: {table.best_level} months of extra payments."))
    _print_section("HOW LONG SHOULD YOU PREPAY?", rows)


def print_schedule(result: SimulationResult) -> None:
    """Print every MonthlyRecord as a fixed-width table."""
    widths = [5] + [13] * (len(TABLE_COLUMNS) - 1)
    print("  ".join(f"{c:>{w}}" for c, w in zip(TABLE_COLUMNS, widths)))
    print("-" * (sum(widths) + 2 * (len(widths) - 1)))
    for rec in result.monthly_data:
        cells = []
        for value, w in zip(rec.as_row(), widths):
            cells.append(f"{value:>{w}}" if isinstance(value, int) else f"{value:>{w},.2f}")
        print("  ".join(cells))
    print()


def _print_report(pdf_path: str | None) -> None:
    rows = []
    if pdf_path:
        rows.append(_box_line(f"PDF report saved to: {pdf_path}"))
    else:
        rows.append(_box_line("Charts available in the web app:"))
        rows.append(_box_line("  python main.py  (opens localhost:5000)"))
    _print_section("CHARTS", rows)


# ═══════════════════════════════════════════════════════════════════
# Main CLI entry point
# ═══════════════════════════════════════════════════════════════════

def run_cli(
    pdf_path: Optional[str] = cfg.PDF_PATH,
    show_schedule: bool = False,
) -> None:
    """Run the full CLI workflow."""
    # Ensure box-drawing characters render on Windows
    try:
        sys.stdout.reconfigure(encoding="utf-8")
    except (AttributeError, OSError, ValueError):
        pass
    print()
    print("=" * W)
    print("  Loan Prepayment vs Invest Simulator")
    print("=" * W)

    config = collect_inputs()

    print(f"\n  Simulating {config.months_to_simulate} months...")
    result = run_simulation(config)
    table = prepayment_table(config)
    print("  Done.")

    d = compute_display_data(config, result, table)

    print()
    _print_inputs(d)
    _print_loan(d)
    _print_investment(d)
    _print_verdict(d)
    _print_prepayment_table(d)

    if show_schedule:
        print_schedule(result)

    if pdf_path:
        print("  Generating PDF report...")
        pdf_path = report.generate_pdf(config, result, d, generate_verdict_text(d), pdf_path)
        print(f"  Saved to {pdf_path}\n")

    _print_report(pdf_path)


if __name__ == "__main__":
    run_cli()
