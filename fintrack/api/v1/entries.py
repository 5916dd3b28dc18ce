"""Income and expense endpoints"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from fintrack.api.v1.schemas import EntryListResponse, EntryResponse, ExpenseRequest, IncomeRequest
from fintrack.api.dependencies import get_current_user, get_request_id
from fintrack.domain.models import AuthenticatedUser
from fintrack.infrastructure.database.session import get_db
from fintrack.infrastructure.database.repositories import ExpenseRepository, IncomeRepository
from fintrack.infrastructure.observability.metrics import entry_counter
from fintrack.utils.date_utils import month_bounds, parse_month

router = APIRouter()

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


def clean_note(note: Optional[str]) -> Optional[str]:
    """Blank notes are stored as null"""
    if note is None:
        return None
    return note.strip() or None


def month_range(month: Optional[str]) -> Tuple[Optional[date], Optional[date]]:
    if month is None:
        return None, None
    return month_bounds(parse_month(month))


def to_entry_response(record) -> EntryResponse:
    return EntryResponse(
        id=str(record.id),
        amount=record.amount,
        date=record.date,
        category=record.category,
        note=record.note,
    )


def to_entry_list(records: List) -> EntryListResponse:
    return EntryListResponse(
        entries=[to_entry_response(r) for r in records],
        total=sum((r.amount for r in records), Decimal("0")),
    )


@router.post("/incomes", response_model=EntryResponse, status_code=201)
def create_income(
    request_body: IncomeRequest,
    request: Request,
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
):
    """Record an income; salary incomes feed the debt-to-income ratio"""
    try:
        record = IncomeRepository(db).create_income(
            user_id=user.uid,
            amount=request_body.amount,
            income_date=request_body.date or date.today(),
            category=request_body.category,
            note=clean_note(request_body.note),
        )
        db.commit()
    except Exception as e:
        db.rollback()
        logging.error(f"Failed to add income: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Internal server error")

    entry_counter.labels(kind="income").inc()
    return to_entry_response(record)


@router.get("/incomes", response_model=EntryListResponse)
def list_incomes(
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN, description="YYYY-MM"),
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
):
    start, end = month_range(month)
    return to_entry_list(IncomeRepository(db).list_incomes(user.uid, start, end))


@router.post("/expenses", response_model=EntryResponse, status_code=201)
def create_expense(
    request_body: ExpenseRequest,
    request: Request,
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
):
    try:
        record = ExpenseRepository(db).create_expense(
            user_id=user.uid,
            amount=request_body.amount,
            expense_date=request_body.date or date.today(),
            category=request_body.category,
            note=clean_note(request_body.note),
        )
        db.commit()
    except Exception as e:
        db.rollback()
        logging.error(f"Failed to add expense: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Internal server error")

    entry_counter.labels(kind="expense").inc()
    return to_entry_response(record)


@router.get("/expenses", response_model=EntryListResponse)
def list_expenses(
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN, description="YYYY-MM"),
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
):
    start, end = month_range(month)
    return to_entry_list(ExpenseRepository(db).list_expenses(user.uid, start, end))
