"""
PDF report generation and reusable chart rendering for the
loan prepayment vs invest simulator.

Provides:
  - Multi-page PDF report (generate_pdf)
  - Base64-encoded chart images for web embedding (get_web_charts)
  - Individual chart renderers reusable by both CLI and web
"""

from __future__ import annotations

import base64
import io
from typing import Any, Dict, List

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.lines import Line2D
from matplotlib.patches import Patch
from matplotlib.ticker import FuncFormatter
import numpy as np

import config as cfg
from simulation import (
    TABLE_COLUMNS,
    Configuration,
    PrepaymentResult,
    SimulationResult,
)

# ═══════════════════════════════════════════════════════════════════
# Style constants
# ═══════════════════════════════════════════════════════════════════

BG = "#0a101f"
CARD = "#131b2e"
TEXT = "#f1f5f9"
TEXT2 = "#cbd5e1"
INDIGO = "#818cf8"
EMERALD = "#34d399"
AMBER = "#fbbf24"
RED = "#f87171"
SKY = "#60a5fa"
SLATE = "#94a3b8"
BORDER = "#1e293b"

A4W, A4H = 8.27, 11.69
WEB_W, WEB_H = 10, 6


# ═══════════════════════════════════════════════════════════════════
# Axis formatters
# ═══════════════════════════════════════════════════════════════════

def _amount_fmt(x, _):
    if abs(x) >= 1e6:
        return f"{x / 1e6:.1f}M"
    if abs(x) >= 1e3:
        return f"{x / 1e3:.0f}k"
    return f"{x:.0f}"


AMOUNT_FMT = FuncFormatter(_amount_fmt)


# ═══════════════════════════════════════════════════════════════════
# Style helpers
# ═══════════════════════════════════════════════════════════════════

def _style(fig, *axes):
    """Apply dark theme to figure and all axes."""
    fig.patch.set_facecolor(BG)
    for ax in axes:
        ax.set_facecolor(CARD)
        ax.tick_params(colors=TEXT, labelsize=8)
        ax.xaxis.label.set_color(TEXT)
        ax.yaxis.label.set_color(TEXT)
        ax.title.set_color(TEXT)
        for spine in ax.spines.values():
            spine.set_color(BORDER)
        ax.grid(True, axis="y", alpha=0.15, color=SLATE)


def _legend(ax, loc="upper left", handles=None):
    ax.legend(handles=handles, loc=loc, fontsize=8, facecolor=CARD,
              edgecolor=BORDER, labelcolor=TEXT)


# ═══════════════════════════════════════════════════════════════════
# Loan chart: stacked interest/principal per month
# ═══════════════════════════════════════════════════════════════════

def chart_loan(config: Configuration, result: SimulationResult,
               figsize=(WEB_W, WEB_H)) -> plt.Figure:
    fig, ax = plt.subplots(figsize=figsize, constrained_layout=True)
    _style(fig, ax)

    months = result.series("month")
    interest = result.series("loan_interest")
    principal = result.series("loan_principal")

    ax.bar(months, interest, width=1.0, color=RED, alpha=0.6,
           label="Interest")
    ax.bar(months, principal, width=1.0, bottom=interest, color=SKY,
           alpha=0.6, label="Principal")

    ax.set_xlim(0.5, config.loan_duration + 0.5)
    ax.yaxis.set_major_formatter(AMOUNT_FMT)
    ax.set_xlabel("Month")
    ax.set_ylabel("Regular installment")
    ax.set_title("Loan: Interest and Principal per Month", fontsize=12, pad=10)

    payoff = result.payoff_month
    if payoff is not None and payoff < config.loan_duration:
        ax.axvline(payoff + 0.5, color=AMBER, linewidth=1, linestyle=":")
        ax.annotate(f"Closed (month {payoff})",
                    xy=(payoff + 0.5, result.loan_monthly),
                    fontsize=8, color=AMBER,
                    xytext=(6, -14), textcoords="offset points")
    _legend(ax, loc="upper right")
    return fig


# ═══════════════════════════════════════════════════════════════════
# Investment chart: fund balance per month
# ═══════════════════════════════════════════════════════════════════

def chart_investment(config: Configuration, result: SimulationResult,
                     figsize=(WEB_W, WEB_H)) -> plt.Figure:
    fig, ax = plt.subplots(figsize=figsize, constrained_layout=True)
    _style(fig, ax)

    months = result.series("month")
    balance = result.series("invest_new_total")
    colors = [EMERALD if rec.loan_active else AMBER
              for rec in result.monthly_data]

    ax.bar(months, balance, width=1.0, color=colors, alpha=0.6)
    ax.axhline(result.invest_max, color=INDIGO, linewidth=1.2,
               linestyle="--")

    ax.set_xlim(0.5, len(months) + 0.5)
    ax.yaxis.set_major_formatter(AMOUNT_FMT)
    ax.set_xlabel("Month")
    ax.set_ylabel("Fund balance")
    ax.set_title("Investment Fund Balance", fontsize=12, pad=10)
    _legend(ax, handles=[
        Patch(color=EMERALD, alpha=0.6, label="Loan still open"),
        Patch(color=AMBER, alpha=0.6, label="Loan closed"),
        Line2D([], [], color=INDIGO, linestyle="--",
                   label="Without extra payments (final)"),
    ])
    return fig


# ═══════════════════════════════════════════════════════════════════
# Prepayment comparison: final fund per prepayment length
# ═══════════════════════════════════════════════════════════════════

def chart_prepayment(table: PrepaymentResult,
                     figsize=(WEB_W, WEB_H - 1)) -> plt.Figure:
    fig, ax = plt.subplots(figsize=figsize, constrained_layout=True)
    _style(fig, ax)

    levels = [r.prefer_loan_duration for r in table.rows]
    funds = [r.invest_result for r in table.rows]
    baseline = table.rows[0].invest_max

    x = np.arange(len(levels))
    colors = [AMBER if lvl == table.best_level else INDIGO for lvl in levels]
    ax.bar(x, funds, 0.6, color=colors, edgecolor=BORDER, linewidth=0.5)
    ax.axhline(baseline, color=EMERALD, linewidth=1.2, linestyle="--",
               label="Without extra payments")

    ax.set_xticks(x)
    ax.set_xticklabels([str(lvl) for lvl in levels], fontsize=8)
    ax.yaxis.set_major_formatter(AMOUNT_FMT)
    ax.set_xlabel("Months of extra payments")
    ax.set_ylabel("Final fund balance")
    ax.set_title("Fund by Length of Prepayment Phase", fontsize=12, pad=10)

    best_idx = levels.index(table.best_level)
    ax.annotate(
        "Best", xy=(best_idx, funds[best_idx]),
        fontsize=9, color=AMBER, fontweight="bold",
        xytext=(0, 12), textcoords="offset points", ha="center",
        arrowprops=dict(arrowstyle="->", color=AMBER, lw=1.2),
    )
    _legend(ax, loc="lower right")
    return fig


# ═══════════════════════════════════════════════════════════════════
# Page 1: Summary (text only, dark background)
# ═══════════════════════════════════════════════════════════════════

def _page_summary(d: Dict[str, Any], verdict_text: str) -> plt.Figure:
    fig = plt.figure(figsize=(A4W, A4H))
    fig.patch.set_facecolor(BG)

    fig.text(0.50, 0.93, "Loan Prepayment vs Invest",
             ha="center", fontsize=18, color=TEXT, fontweight="bold")
    fig.text(0.50, 0.91, "Monthly Simulation Report",
             ha="center", fontsize=11, color=TEXT2)

    sections = [
        ("Your Parameters", TEXT, [
            f"Loan: {d['loan_total']:,.2f}  |  {d['loan_duration']} months  |  "
            f"{d['loan_interest']:.2f}% per year",
            f"Available each month: {d['monthly_available']:,.2f}  |  "
            f"Investment return: {d['invest_interest']:.2f}%",
            f"Months of extra payments: {d['prefer_loan_duration']}  |  "
            f"Months simulated: {d['months']}",
        ]),
        ("The Loan", INDIGO, [
            f"Monthly installment: {d['loan_monthly']:,.2f}",
            f"Total without extra payments: {d['total_loan_expected']:,.2f}",
            f"Total with extra payments: {d['total_loan_paid']:,.2f} "
            f"({d['loan_saved_pct']:.2f}%)",
            "Closes in month: "
            + (str(d["payoff_month"]) if d["payoff_month"] is not None else "-"),
        ]),
        ("The Investment Fund", EMERALD, [
            f"Without extra payments: {d['invest_max']:,.2f}",
            f"With extra payments: {d['invest_result']:,.2f} "
            f"({d['invest_pct']:+.2f}%)",
            f"Contributions: {d['total_invested']:,.2f}  |  "
            f"Interest earned: {d['total_invest_interest']:,.2f}",
        ]),
    ]

    y = 0.86
    for title, color, lines in sections:
        fig.text(0.08, y, title, fontsize=13, color=color, fontweight="bold")
        y -= 0.028
        for line in lines:
            fig.text(0.10, y, line, fontsize=9.5, color=TEXT2)
            y -= 0.024
        y -= 0.025

    fig.text(0.08, y, "The Verdict", fontsize=13, color=TEXT,
             fontweight="bold")
    y -= 0.03
    words = verdict_text.split()
    line = ""
    for word in words:
        if len(line) + len(word) + 1 <= 85:
            line = f"{line} {word}" if line else word
        else:
            fig.text(0.10, y, line, fontsize=9, color=TEXT2)
            y -= 0.022
            line = word
    if line:
        fig.text(0.10, y, line, fontsize=9, color=TEXT2)

    fig.text(0.50, 0.03,
             "This is not financial advice. Returns are assumed constant.",
             ha="center", fontsize=8, color=SLATE, style="italic")
    return fig


# ═══════════════════════════════════════════════════════════════════
# Table pages: the monthly schedule
# ═══════════════════════════════════════════════════════════════════

def _page_table(result: SimulationResult, start: int, stop: int) -> plt.Figure:
    fig = plt.figure(figsize=(A4W, A4H))
    fig.patch.set_facecolor(BG)
    ax = fig.add_axes([0.03, 0.03, 0.94, 0.92])
    ax.set_facecolor(BG)
    ax.axis("off")
    fig.text(0.50, 0.965, f"Monthly Schedule (months {start + 1}-{stop})",
             ha="center", fontsize=11, color=TEXT, fontweight="bold")

    records = result.monthly_data[start:stop]
    cells = [
        [str(v) if isinstance(v, int) else f"{v:,.2f}" for v in rec.as_row()]
        for rec in records
    ]
    table = ax.table(cellText=cells, colLabels=TABLE_COLUMNS,
                     loc="upper center", cellLoc="right")
    table.auto_set_font_size(False)
    table.set_fontsize(5.5)
    table.scale(1, 1.15)

    for (row, _col), cell in table.get_celld().items():
        cell.set_edgecolor(BORDER)
        if row == 0:
            cell.set_facecolor(BG)
            cell.set_text_props(fontweight="bold", color=SLATE)
        else:
            closed = not records[row - 1].loan_active
            cell.set_facecolor("#1f1a05" if closed else CARD)
            cell.set_text_props(color=TEXT)
    return fig


# ═══════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════

def figure_to_base64(fig: plt.Figure) -> str:
    """Convert a matplotlib figure to a base64-encoded PNG string."""
    buf = io.BytesIO()
    fig.savefig(buf, format="png", facecolor=fig.get_facecolor(),
                dpi=110, bbox_inches="tight")
    buf.seek(0)
    b64 = base64.b64encode(buf.read()).decode()
    buf.close()
    return b64


def generate_pdf(
    config: Configuration,
    result: SimulationResult,
    d: Dict[str, Any],
    verdict_text: str,
    path: str = cfg.PDF_PATH,
) -> str:
    """Generate the full PDF report. Returns the file path."""
    half = (A4W, A4H * 0.45)
    pages = [
        _page_summary(d, verdict_text),
        chart_loan(config, result, figsize=half),
        chart_investment(config, result, figsize=half),
        chart_prepayment(d["prepayment"], figsize=half),
    ]
    n = len(result.monthly_data)
    step = cfg.TABLE_ROWS_PER_PAGE
    for start in range(0, n, step):
        pages.append(_page_table(result, start, min(start + step, n)))

    with PdfPages(path) as pdf:
        for fig in pages:
            pdf.savefig(fig, facecolor=fig.get_facecolor())
    for fig in pages:
        plt.close(fig)
    return path


def get_web_charts(
    config: Configuration,
    result: SimulationResult,
    d: Dict[str, Any],
) -> List[str]:
    """Return base64-encoded PNG chart images for web embedding.

    Returns 3 charts:
      [0] Loan interest/principal per month
      [1] Investment fund balance per month
      [2] Final fund by prepayment length
    """
    chart_figs = [
        chart_loan(config, result),
        chart_investment(config, result),
        chart_prepayment(d["prepayment"]),
    ]

    images = [figure_to_base64(f) for f in chart_figs]
    for f in chart_figs:
        plt.close(f)
    return images
