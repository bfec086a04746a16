"""Derived ratios computed from the numbers a user types into the analysis form."""
from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

# Revolving-credit limit assumed when the user supplies a credit score.
NOTIONAL_CREDIT_LIMIT = 5000.0


@dataclass(frozen=True, slots=True)
class FinancialMetrics:
    income: float
    expenses: float
    debt: float
    credit_score: Optional[float]
    disposable_income: float
    debt_to_income_ratio: float
    credit_utilization: float


def _divide(numerator: float, denominator: float) -> float:
    """IEEE-754 division: x/0 is +/-inf and 0/0 is nan instead of raising."""
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)
    return numerator / denominator


def _round1(value: float) -> float:
    """One decimal place, ties away from zero, on the exact binary value."""
    if not math.isfinite(value):
        return value
    return float(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def compute_metrics(
    income: float,
    expenses: float,
    debt: float,
    credit_score: Optional[float] = None,
) -> FinancialMetrics:
    """Compute disposable income, debt-to-income and credit utilization.

    Debt-to-income uses *annual* income (``income * 12``) as denominator.
    Credit utilization assumes a fixed 5,000 limit when a credit score is
    known (capped at 100) and falls back to ``income * 2`` as the limit
    otherwise, without a cap. A credit score of 0 counts as not supplied.
    Zero income yields inf/nan rather than an exception; callers validate.
    """
    disposable_income = income - expenses
    debt_to_income_ratio = _round1(_divide(debt, income * 12) * 100)

    if credit_score:
        credit_utilization = _round1(min(_divide(debt, NOTIONAL_CREDIT_LIMIT) * 100, 100))
    else:
        credit_utilization = _round1(_divide(debt, income * 2) * 100)

    return FinancialMetrics(
        income=income,
        expenses=expenses,
        debt=debt,
        credit_score=credit_score or None,
        disposable_income=disposable_income,
        debt_to_income_ratio=debt_to_income_ratio,
        credit_utilization=credit_utilization,
    )


__all__ = ["FinancialMetrics", "NOTIONAL_CREDIT_LIMIT", "compute_metrics"]
