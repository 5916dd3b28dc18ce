"""GET /v1/summary - Balance and debt-to-income overview"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fintrack.api.v1.schemas import DebtSchema, SummaryResponse
from fintrack.api.v1.entries import MONTH_PATTERN
from fintrack.api.dependencies import get_current_user
from fintrack.config import settings
from fintrack.domain.models import AuthenticatedUser, Debt
from fintrack.domain.summary import summarize_finances
from fintrack.infrastructure.database.session import get_db
from fintrack.infrastructure.database.repositories import DebtRepository, ExpenseRepository, IncomeRepository
from fintrack.utils.date_utils import month_bounds, parse_month

router = APIRouter()


def debt_to_schema(debt: Debt) -> DebtSchema:
    return DebtSchema(
        id=debt.id,
        amount=debt.amount,
        due_date=debt.due_date,
        note=debt.note,
        paid=debt.paid,
        installment_amount=debt.installment_amount,
    )


@router.get("/summary", response_model=SummaryResponse)
def get_summary(
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN, description="YYYY-MM, defaults to current month"),
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
):
    """
    Monthly financial overview.

    Returns:
        Balance, outstanding debt, debt-to-income ratio with health band,
        debts due this month and debts due later
    """
    month_start = parse_month(month) if month else date.today()
    start, end = month_bounds(month_start)

    incomes = [r.to_domain() for r in IncomeRepository(db).list_incomes(user.uid, start, end)]
    expenses = [r.to_domain() for r in ExpenseRepository(db).list_expenses(user.uid, start, end)]
    debts = [r.to_domain() for r in DebtRepository(db).list_debts(user.uid)]

    summary = summarize_finances(
        incomes,
        expenses,
        debts,
        month_start,
        warning_threshold=settings.dti_warning_threshold,
        critical_threshold=settings.dti_critical_threshold,
    )

    return SummaryResponse(
        month=summary.month_start.strftime("%Y-%m"),
        currency=settings.currency_code,
        total_income=summary.total_income,
        salary_income=summary.salary_income,
        total_expense=summary.total_expense,
        paid_debt=summary.paid_debt,
        balance=summary.balance,
        total_debt=summary.total_debt,
        monthly_debt=summary.monthly_debt,
        debt_to_income_ratio=summary.debt_to_income_ratio,
        health_status=summary.health_status,
        debts_due_this_month=[debt_to_schema(d) for d in summary.debts_due_this_month],
        upcoming_debts=[debt_to_schema(d) for d in summary.upcoming_debts],
    )
