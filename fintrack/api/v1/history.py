"""GET /v1/history - Paginated debt history"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fintrack.api.v1.schemas import DebtListResponse
from fintrack.api.v1.debts import list_debt_page
from fintrack.api.dependencies import get_current_user
from fintrack.config import settings
from fintrack.domain.models import AuthenticatedUser
from fintrack.infrastructure.database.session import get_db
from fintrack.infrastructure.database.repositories import DebtRepository

router = APIRouter()


@router.get("/history", response_model=DebtListResponse)
def get_history(
    limit: int = Query(settings.history_page_size, ge=1, le=100),
    cursor: Optional[str] = Query(None, description="next_cursor from the previous page"),
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
):
    """
    Retrieve the user's debt history, one page at a time.

    Returns:
        Debts ordered by due date with has_more / next_cursor for the next page
    """
    return list_debt_page(DebtRepository(db), user.uid, limit, cursor)
