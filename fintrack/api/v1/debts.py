"""Debt endpoints - installment creation, listing, marking paid"""

import time
import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from fintrack.api.v1.schemas import (
    DebtCreatedResponse,
    DebtListResponse,
    DebtRequest,
    DebtSchema,
    InstallmentSchema,
)
from fintrack.api.dependencies import get_current_user, get_request_id, parse_uuid
from fintrack.config import settings
from fintrack.infrastructure.database.models import DebtRecord
from fintrack.infrastructure.database.session import get_db
from fintrack.infrastructure.database.repositories import DebtRepository
from fintrack.domain.installments import plan_installments
from fintrack.domain.exceptions import DebtNotFoundError, InvalidAmountError, InvalidTenorError
from fintrack.domain.models import AuthenticatedUser
from fintrack.infrastructure.observability.metrics import debt_paid_counter, record_debt_created
from fintrack.infrastructure.observability.logging import log_debt_created

router = APIRouter()


def to_debt_schema(record: DebtRecord) -> DebtSchema:
    return DebtSchema(
        id=str(record.id),
        amount=record.amount,
        due_date=record.due_date,
        note=record.note,
        paid=record.paid,
        installment_amount=record.installment_amount,
    )


def paginate(records: List[DebtRecord], limit: int) -> DebtListResponse:
    """Build a page from `limit + 1` fetched rows; the extra row only signals has_more"""
    has_more = len(records) > limit
    page = records[:limit]
    return DebtListResponse(
        debts=[to_debt_schema(r) for r in page],
        has_more=has_more,
        next_cursor=str(page[-1].id) if has_more and page else None,
    )


def list_debt_page(
    repo: DebtRepository,
    user_id: str,
    limit: int,
    cursor: Optional[str],
    unpaid_only: bool = False,
    due_from: Optional[date] = None,
) -> DebtListResponse:
    after = parse_uuid(cursor, "cursor") if cursor else None
    try:
        records = repo.list_debts(
            user_id,
            unpaid_only=unpaid_only,
            due_from=due_from,
            limit=limit + 1,
            after=after,
        )
    except DebtNotFoundError:
        raise HTTPException(status_code=400, detail="Unknown cursor")
    return paginate(records, limit)


@router.post("/debts", response_model=DebtCreatedResponse, status_code=201)
def create_debt(
    request_body: DebtRequest,
    request: Request,
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
):
    """
    Record a debt, split into monthly installments.

    Flow:
    1. Plan installments (amounts sum exactly to the total)
    2. Persist one debt record per installment, in order
    3. Commit once, so a failed write leaves no partial batch
    """
    start_time = time.time()
    request_id = get_request_id(request)
    start_date = request_body.start_date or date.today()

    try:
        # 1. Plan installments
        installments = plan_installments(
            request_body.total_amount,
            request_body.tenor,
            start_date,
            request_body.note.strip(),
            precision=settings.currency_precision,
        )

        # 2. Persist each installment as its own debt
        debt_repo = DebtRepository(db)
        debt_ids = []
        for inst in installments:
            debt_id = debt_repo.create_debt_record(
                user_id=user.uid,
                amount=inst.amount,
                due_date=inst.due_date,
                note=inst.sequence_label,
                paid=False,
                installment_amount=inst.amount,
                installment_number=inst.installment_number,
                total_installments=inst.total_installments,
            )
            debt_ids.append(str(debt_id))

        # 3. All-or-nothing
        db.commit()

        duration_ms = (time.time() - start_time) * 1000
        record_debt_created(request_body.tenor)
        log_debt_created(request_id, user.uid, request_body.total_amount, request_body.tenor, duration_ms)

        return DebtCreatedResponse(
            total_amount=request_body.total_amount,
            tenor=request_body.tenor,
            debt_ids=debt_ids,
            installments=[
                InstallmentSchema(
                    debt_id=debt_id,
                    amount=inst.amount,
                    due_date=inst.due_date,
                    sequence_label=inst.sequence_label,
                    installment_number=inst.installment_number,
                    total_installments=inst.total_installments,
                )
                for debt_id, inst in zip(debt_ids, installments)
            ],
        )

    except (InvalidTenorError, InvalidAmountError) as e:
        db.rollback()
        logging.warning(f"Invalid debt request: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Debt creation failed, batch rolled back: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/debts", response_model=DebtListResponse)
def list_debts(
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
):
    """All debts, paid and unpaid, earliest due first"""
    records = DebtRepository(db).list_debts(user.uid)
    return DebtListResponse(debts=[to_debt_schema(r) for r in records])


@router.get("/debts/upcoming", response_model=DebtListResponse)
def list_upcoming_debts(
    limit: int = Query(settings.upcoming_debts_limit, ge=1, le=100),
    cursor: Optional[str] = Query(None, description="next_cursor from the previous page"),
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
):
    """Unpaid debts due today or later, earliest due first"""
    return list_debt_page(
        DebtRepository(db),
        user.uid,
        limit,
        cursor,
        unpaid_only=True,
        due_from=date.today(),
    )


@router.get("/debts/{debt_id}", response_model=DebtSchema)
def get_debt(
    debt_id: str,
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
):
    try:
        record = DebtRepository(db).get_debt(user.uid, parse_uuid(debt_id, "debt ID"))
    except DebtNotFoundError:
        raise HTTPException(status_code=404, detail="Debt not found")
    return to_debt_schema(record)


@router.post("/debts/{debt_id}/paid", response_model=DebtSchema)
def mark_debt_paid(
    debt_id: str,
    request: Request,
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
):
    """Mark a debt installment as paid (idempotent)"""
    debt_uuid = parse_uuid(debt_id, "debt ID")
    debt_repo = DebtRepository(db)

    try:
        already_paid = debt_repo.get_debt(user.uid, debt_uuid).paid
        record = debt_repo.mark_paid(user.uid, debt_uuid)
        db.commit()
    except DebtNotFoundError:
        db.rollback()
        raise HTTPException(status_code=404, detail="Debt not found")

    if not already_paid:
        debt_paid_counter.inc()
        logging.info(
            "Debt marked paid",
            extra={"request_id": get_request_id(request), "user_id": user.uid, "debt_id": debt_id},
        )
    return to_debt_schema(record)


@router.delete("/debts/{debt_id}", status_code=204)
def delete_debt(
    debt_id: str,
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
):
    debt_uuid = parse_uuid(debt_id, "debt ID")
    try:
        DebtRepository(db).delete_debt(user.uid, debt_uuid)
        db.commit()
    except DebtNotFoundError:
        db.rollback()
        raise HTTPException(status_code=404, detail="Debt not found")
    return Response(status_code=204)
