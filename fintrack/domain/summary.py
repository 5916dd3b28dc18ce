"""Financial overview - balance, outstanding debt and debt-to-income health"""

from datetime import date
from decimal import Decimal
from typing import Iterable, List, Sequence

from fintrack.domain.models import Debt, Expense, FinancialSummary, Income
from fintrack.utils.date_utils import month_bounds


def _total(amounts: Iterable[Decimal]) -> Decimal:
    return sum(amounts, Decimal("0"))


def debt_to_income_ratio(monthly_debt: Decimal, salary_income: Decimal) -> float:
    """
    Monthly debt obligations as a percentage of salary income.

    - No salary but debt due: 100% (treated as fully leveraged)
    - No salary and no debt: 0%
    """
    if salary_income > 0:
        return round(float(monthly_debt / salary_income * 100), 2)
    if monthly_debt > 0:
        return 100.0
    return 0.0


def classify_health(
    ratio: float,
    warning_threshold: float = 30.0,
    critical_threshold: float = 50.0,
) -> str:
    """
    Map a debt-to-income percentage to a health band.

    - below warning_threshold: healthy
    - below critical_threshold: warning
    - otherwise: critical
    """
    if ratio < warning_threshold:
        return "healthy"
    elif ratio < critical_threshold:
        return "warning"
    else:
        return "critical"


def debts_due_in_month(debts: Sequence[Debt], month_start: date, month_end: date) -> List[Debt]:
    """Unpaid debts falling due inside the month, earliest first"""
    due = [d for d in debts if not d.paid and month_start <= d.due_date <= month_end]
    return sorted(due, key=lambda d: d.due_date)


def debts_after_month(debts: Sequence[Debt], month_end: date) -> List[Debt]:
    """Unpaid debts falling due after the month ends, earliest first"""
    upcoming = [d for d in debts if not d.paid and d.due_date > month_end]
    return sorted(upcoming, key=lambda d: d.due_date)


def summarize_finances(
    incomes: Sequence[Income],
    expenses: Sequence[Expense],
    debts: Sequence[Debt],
    month: date,
    warning_threshold: float = 30.0,
    critical_threshold: float = 50.0,
) -> FinancialSummary:
    """
    Main entry point: build the monthly overview.

    Incomes and expenses only count when dated inside the month of `month`;
    debts are the user's full debt list. Balance subtracts every paid debt
    since paying a debt moves money out of the account.
    """
    month_start, month_end = month_bounds(month)

    in_month_incomes = [i for i in incomes if month_start <= i.date <= month_end]
    in_month_expenses = [e for e in expenses if month_start <= e.date <= month_end]

    total_income = _total(i.amount for i in in_month_incomes)
    salary_income = _total(i.amount for i in in_month_incomes if i.category == "salary")
    total_expense = _total(abs(e.amount) for e in in_month_expenses)
    paid_debt = _total(d.amount for d in debts if d.paid)

    due_this_month = debts_due_in_month(debts, month_start, month_end)
    monthly_debt = _total(d.amount for d in due_this_month)

    ratio = debt_to_income_ratio(monthly_debt, salary_income)

    return FinancialSummary(
        month_start=month_start,
        month_end=month_end,
        total_income=total_income,
        salary_income=salary_income,
        total_expense=total_expense,
        paid_debt=paid_debt,
        balance=total_income - total_expense - paid_debt,
        total_debt=_total(d.amount for d in debts if not d.paid),
        monthly_debt=monthly_debt,
        debt_to_income_ratio=ratio,
        health_status=classify_health(ratio, warning_threshold, critical_threshold),
        debts_due_this_month=due_this_month,
        upcoming_debts=debts_after_month(debts, month_end),
    )
