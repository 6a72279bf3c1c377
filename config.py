"""
Constants for the loan prepayment vs invest simulator.

Monetary values are unit-less (whatever currency the loan is in).
Rates are annual percentages, durations are months.
"""

# ── Form defaults ────────────────────────────────────────────────────
# Raw strings, exactly as a user would type them. An empty string
# means "not set" and is coerced to zero (measure duration is then
# clamped up to the loan duration).
DEFAULT_FORM = {
    "loan_total": "322830.96",
    "loan_interest": "8.81",
    "loan_duration": "284",
    "invest_interest": "8.81",
    "prefer_loan_duration": "0",
    "measure_duration": "",
    "monthly_available": "10000",
}

# Fields that must be whole months, and their upper bound
INT_FIELDS = ("loan_duration", "prefer_loan_duration", "measure_duration")
MAX_MONTHS = 1200

# ── Engine tolerances ────────────────────────────────────────────────
CONSERVATION_TOL = 1e-6    # abs. tolerance for the monthly budget check
BALANCE_EPS = 1e-6         # residual balances below this are cleared

# ── Prepayment comparison table ──────────────────────────────────────
# Months of extra payments to compare; the full loan duration is
# always appended.
PREPAYMENT_LEVELS = [0, 6, 12, 24, 36, 60, 120]

# ── Output ───────────────────────────────────────────────────────────
PDF_PATH = "prepayment_report.pdf"
TABLE_ROWS_PER_PAGE = 45
WEB_HOST = "127.0.0.1"
WEB_PORT = 5000
