"""
Month-by-month engine for the loan prepayment vs invest simulator.

Each month a fixed budget (plus whatever was left over last month)
first covers the regular loan installment. While the prepayment phase
lasts, the surplus is spent greedily on extra principal: whole future
installments' principal parts, taken in schedule order, for as long as
they fit in the budget. Each one shortens the loan by a month. Money
that does not buy a whole period is carried forward, and once the loan
is closed or the prepayment phase is over it is moved into an
investment account that compounds monthly.

Everything here is a pure function of ``Configuration``.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

import numpy as np

import config as cfg
from payments import installment, monthly_rate, principal_portion

logger = logging.getLogger(__name__)


# ─── Data Classes ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class Configuration:
    """Inputs for one simulation run."""

    loan_total: float            # principal borrowed
    loan_duration: int           # months
    loan_interest: float         # annual %, e.g. 8.81
    invest_interest: float       # annual %
    prefer_loan_duration: int    # months during which extra payments are made
    measure_duration: int        # months to simulate (clamped to >= loan_duration)
    monthly_available: float     # money available each month, installment included

    def __post_init__(self) -> None:
        for name in ("loan_total", "loan_interest", "invest_interest", "monthly_available"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ValueError(f"{name} must be a finite number")
            if value < 0:
                raise ValueError(f"{name} must not be negative")
        for name in ("loan_duration", "prefer_loan_duration", "measure_duration"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be a whole number of months")
            if value < 0:
                raise ValueError(f"{name} must not be negative")
            if value > cfg.MAX_MONTHS:
                raise ValueError(f"{name} must be at most {cfg.MAX_MONTHS} months")
        if self.loan_duration < 1:
            raise ValueError("Loan duration must be at least 1 month")

    @property
    def months_to_simulate(self) -> int:
        return max(self.measure_duration, self.loan_duration)


@dataclass(frozen=True)
class MonthlyRecord:
    """State of the loan and the investment account after one month."""

    month: int                   # 1-based
    available_total: float       # budget + carry from last month
    loan_principal: float        # regular installment, principal part
    loan_interest: float         # regular installment, interest part
    loan_additional: float       # extra principal paid this month
    loan_new_total: float        # balance after this month
    loan_new_duration: int       # months left after this month
    additional_unused: float     # carried to next month
    loan_saved: float            # sum of (installment - extra payment)
    invest_add: float            # moved into the investment account
    invest_interest: float       # earned on last month's balance
    invest_new_total: float      # investment balance after this month
    loan_active: bool = True     # loan was open at the start of the month

    def as_row(self) -> List[Any]:
        """Table cells: month, then every amount rounded to 2 decimals."""
        return [
            self.month,
            round(self.available_total, 2),
            round(self.loan_principal, 2),
            round(self.loan_interest, 2),
            round(self.loan_additional, 2),
            round(self.loan_new_total, 2),
            self.loan_new_duration,
            round(self.loan_saved, 2),
            round(self.invest_add, 2),
            round(self.invest_interest, 2),
            round(self.invest_new_total, 2),
        ]


TABLE_COLUMNS = [
    "Month", "Available", "Principal", "Interest", "Extra",
    "Balance", "Months left", "Saved", "Invested", "Inv. interest",
    "Inv. balance",
]


@dataclass(frozen=True)
class SimulationResult:
    """Schedule plus the summary figures shown next to it."""

    monthly_data: tuple[MonthlyRecord, ...] = field(repr=False)
    total_loan_expected: float   # installment * loan duration
    total_loan_paid: float       # regular + extra payments actually made
    loan_monthly: float          # the fixed installment
    invest_result: float         # final investment balance
    invest_max: float            # baseline: invest the surplus, never prepay

    @property
    def loan_saved_pct(self) -> float:
        """Change in total paid vs the plain schedule, in % (negative = saved)."""
        if self.total_loan_expected == 0:
            return 0.0
        return -(1 - self.total_loan_paid / self.total_loan_expected) * 100

    @property
    def invest_pct(self) -> float:
        """Final investment balance vs the baseline, in %."""
        if self.invest_max == 0:
            return 0.0
        return -(1 - self.invest_result / self.invest_max) * 100

    @property
    def payoff_month(self) -> Optional[int]:
        for rec in self.monthly_data:
            if rec.loan_active and rec.loan_new_total <= 0:
                return rec.month
        return None

    @property
    def total_interest_saved(self) -> float:
        return sum(rec.loan_saved for rec in self.monthly_data)

    def series(self, name: str) -> np.ndarray:
        """One MonthlyRecord field across all months, as an array."""
        return np.array([getattr(rec, name) for rec in self.monthly_data], dtype=float)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "monthly_data": [dataclasses.asdict(rec) for rec in self.monthly_data],
            "total_loan_expected": self.total_loan_expected,
            "total_loan_paid": self.total_loan_paid,
            "loan_monthly": self.loan_monthly,
            "invest_result": self.invest_result,
            "invest_max": self.invest_max,
            "loan_saved_pct": self.loan_saved_pct,
            "invest_pct": self.invest_pct,
            "payoff_month": self.payoff_month,
        }


# ─── Input Parsing ────────────────────────────────────────────────────

def _coerce_number(name: str, value: Any) -> float:
    """Empty or missing -> 0; strips thousands separators and '%'."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    text = str(value).replace(",", "").replace("%", "").replace(" ", "")
    if not text:
        return 0.0
    try:
        return float(text)
    except ValueError:
        raise ValueError(f"{name}: {value!r} is not a number") from None


def parse_config(raw: Mapping[str, Any]) -> Configuration:
    """Build a Configuration from raw form values.

    Missing and empty values count as zero. The measure duration is
    clamped up to the loan duration so the whole loan is always
    simulated.
    """
    values: Dict[str, Any] = {}
    for f in dataclasses.fields(Configuration):
        number = _coerce_number(f.name, raw.get(f.name))
        if f.name in cfg.INT_FIELDS:
            if not number.is_integer():
                raise ValueError(f"{f.name} must be a whole number of months")
            values[f.name] = int(number)
        else:
            values[f.name] = number
    values["measure_duration"] = max(values["loan_duration"], values["measure_duration"])
    return Configuration(**values)


# ─── Core Simulation ──────────────────────────────────────────────────

def _extra_principals(
    available: float,
    rate: float,
    duration: int,
    balance: float,
) -> List[float]:
    """Principal parts of the next installments that fit in ``available``.

    Periods are taken in order from the schedule of ``balance`` over
    ``duration`` months. If the last one taken pushes the total over
    ``available`` it is dropped again, so the budget is never exceeded.
    At most ``duration`` periods are taken.
    """
    if balance <= 0 or duration <= 0:
        return []

    principals: List[float] = []
    paid = 0.0
    for period in range(1, duration + 1):
        if paid >= available:
            break
        amount = principal_portion(period, rate, duration, balance)
        if not amount > 0:
            break
        principals.append(amount)
        paid += amount

    if principals and sum(principals) > available:
        principals.pop()
    return principals


def _regular_installment(config: Configuration) -> float:
    if config.loan_total <= 0:
        return 0.0
    return installment(config.loan_interest, config.loan_duration, config.loan_total)


def invest_max(config: Configuration) -> float:
    """Investment balance if the surplus over the installment is invested
    every month and nothing is ever prepaid."""
    rate = monthly_rate(config.invest_interest)
    loan_monthly = _regular_installment(config)
    val = 0.0
    for _ in range(config.months_to_simulate):
        val = val + rate * val + config.monthly_available - loan_monthly
    return val


def run_simulation(config: Configuration) -> SimulationResult:
    """Simulate ``config.months_to_simulate`` months of loan and investment."""
    loan_monthly = _regular_installment(config)
    invest_rate = monthly_rate(config.invest_interest)

    balance = float(config.loan_total)
    duration = config.loan_duration
    invest_total = 0.0
    carried = 0.0

    records: List[MonthlyRecord] = []

    # ── Month loop ────────────────────────────────────────────────
    for month in range(1, config.months_to_simulate + 1):
        available_total = config.monthly_available + carried
        prepaying = month <= config.prefer_loan_duration

        loan_active = balance > 0
        loan_principal = 0.0
        loan_interest = 0.0
        loan_additional = 0.0
        loan_saved = 0.0
        new_balance = 0.0
        new_duration = 0
        unused = available_total

        if loan_active:
            loan_principal = principal_portion(1, config.loan_interest, duration, balance)
            loan_interest = loan_monthly - loan_principal

            principals = _extra_principals(
                available_total - loan_monthly,
                config.loan_interest,
                duration - 1,
                balance - loan_principal,
            ) if prepaying else []

            loan_additional = sum(principals)
            unused = available_total - loan_monthly - loan_additional
            loan_saved = sum(loan_monthly - p for p in principals)

            new_balance = max(balance - loan_principal - loan_additional, 0.0)
            new_duration = max(duration - 1 - len(principals), 0)
            # A cleared balance and an exhausted schedule close the loan together
            if new_duration == 0 or new_balance < cfg.BALANCE_EPS:
                new_balance, new_duration = 0.0, 0

        # Loan closed or prepayment phase over: divert leftovers
        invest_add = 0.0
        if new_duration == 0 or not prepaying:
            invest_add = unused
            unused = 0.0

        spent = (loan_monthly if loan_active else 0.0) + loan_additional
        if not math.isclose(available_total, spent + unused + invest_add,
                            rel_tol=1e-9, abs_tol=cfg.CONSERVATION_TOL):
            raise RuntimeError(
                f"Month {month}: budget {available_total!r} not fully "
                f"allocated ({spent!r} loan, {unused!r} carried, {invest_add!r} invested)"
            )

        invest_interest = invest_rate * invest_total
        invest_new_total = invest_total + invest_add + invest_interest

        records.append(MonthlyRecord(
            month=month,
            available_total=available_total,
            loan_principal=loan_principal,
            loan_interest=loan_interest,
            loan_additional=loan_additional,
            loan_new_total=new_balance,
            loan_new_duration=new_duration,
            additional_unused=unused,
            loan_saved=loan_saved,
            invest_add=invest_add,
            invest_interest=invest_interest,
            invest_new_total=invest_new_total,
            loan_active=loan_active,
        ))

        balance = new_balance
        duration = new_duration
        invest_total = invest_new_total
        carried = unused

    result = SimulationResult(
        monthly_data=tuple(records),
        total_loan_expected=loan_monthly * config.loan_duration,
        total_loan_paid=sum(
            r.loan_principal + r.loan_interest + r.loan_additional for r in records
        ),
        loan_monthly=loan_monthly,
        invest_result=records[-1].invest_new_total,
        invest_max=invest_max(config),
    )
    logger.debug(
        "Simulated %d months: payoff month %s, paid %.2f of %.2f, invested %.2f",
        len(records), result.payoff_month, result.total_loan_paid,
        result.total_loan_expected, result.invest_result,
    )
    return result


# ─── Prepayment Comparison ────────────────────────────────────────────

@dataclass
class PrepaymentRow:
    """One row of the prepayment comparison table."""

    prefer_loan_duration: int
    payoff_month: Optional[int]
    total_loan_paid: float
    interest_saved: float        # vs the plain schedule
    invest_result: float
    invest_max: float
    advantage: float             # invest_result - invest_max


@dataclass
class PrepaymentResult:
    """Output of the prepayment comparison table."""

    rows: list[PrepaymentRow]
    best_level: int              # prepayment months with the largest fund


def _default_levels(config: Configuration) -> List[int]:
    levels = {lvl for lvl in cfg.PREPAYMENT_LEVELS if lvl <= config.loan_duration}
    levels.add(config.loan_duration)
    return sorted(levels)


def prepayment_table(
    config: Configuration,
    levels: Optional[Iterable[int]] = None,
) -> PrepaymentResult:
    """Re-run the simulation for several prepayment-phase lengths.

    Parameters
    ----------
    config : Configuration
        Base inputs. ``prefer_loan_duration`` is overridden per level.
    levels : iterable of int, optional
        Months of extra payments to compare. Defaults to
        ``cfg.PREPAYMENT_LEVELS`` up to the loan duration, plus the
        loan duration itself.

    Returns
    -------
    PrepaymentResult
        Rows in ascending level order and the level that ends with the
        largest investment balance (the shorter one on a tie).
    """
    chosen = sorted(set(levels)) if levels is not None else _default_levels(config)
    if not chosen:
        raise ValueError("At least one prepayment level is required")

    rows: list[PrepaymentRow] = []
    for level in chosen:
        res = run_simulation(dataclasses.replace(config, prefer_loan_duration=level))
        rows.append(PrepaymentRow(
            prefer_loan_duration=level,
            payoff_month=res.payoff_month,
            total_loan_paid=res.total_loan_paid,
            interest_saved=res.total_loan_expected - res.total_loan_paid,
            invest_result=res.invest_result,
            invest_max=res.invest_max,
            advantage=res.invest_result - res.invest_max,
        ))

    best = max(rows, key=lambda r: (r.invest_result, -r.prefer_loan_duration))
    return PrepaymentResult(rows=rows, best_level=best.prefer_loan_duration)
