"""Data access layer for users, incomes, expenses and debts"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import List, Optional, Type

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from fintrack.domain.exceptions import DebtNotFoundError
from fintrack.domain.models import AuthenticatedUser
from fintrack.infrastructure.database.models import DebtRecord, ExpenseRecord, IncomeRecord, User


class UserRepository:
    """Repository for user profiles"""

    def __init__(self, db: Session):
        self.db = db

    def upsert_user(self, user: AuthenticatedUser) -> User:
        """Create the profile on first sign-in, refresh it on later ones"""
        db_user = self.db.get(User, user.uid)
        if db_user is None:
            db_user = User(uid=user.uid)
            self.db.add(db_user)

        db_user.email = user.email
        db_user.display_name = user.display_name
        db_user.last_login_at = datetime.now(timezone.utc)
        self.db.flush()
        return db_user


class _EntryRepository:
    """Shared create/list logic for dated money entries"""

    model: Type = None

    def __init__(self, db: Session):
        self.db = db

    def _create(self, user_id: str, amount: Decimal, entry_date: date, category: str, note: Optional[str]):
        record = self.model(
            user_id=user_id,
            amount=amount,
            date=entry_date,
            category=category,
            note=note,
        )
        self.db.add(record)
        self.db.flush()  # Get ID without committing
        return record

    def _list(self, user_id: str, start: Optional[date] = None, end: Optional[date] = None) -> list:
        query = self.db.query(self.model).filter(self.model.user_id == user_id)
        if start is not None:
            query = query.filter(self.model.date >= start)
        if end is not None:
            query = query.filter(self.model.date <= end)
        return query.order_by(self.model.date.desc(), self.model.created_at.desc()).all()


class IncomeRepository(_EntryRepository):
    """Repository for incomes"""

    model = IncomeRecord

    def create_income(
        self,
        user_id: str,
        amount: Decimal,
        income_date: date,
        category: str = "salary",
        note: Optional[str] = None,
    ) -> IncomeRecord:
        return self._create(user_id, amount, income_date, category, note)

    def list_incomes(self, user_id: str, start: Optional[date] = None, end: Optional[date] = None) -> List[IncomeRecord]:
        """Incomes newest first, optionally restricted to [start, end]"""
        return self._list(user_id, start, end)


class ExpenseRepository(_EntryRepository):
    """Repository for expenses"""

    model = ExpenseRecord

    def create_expense(
        self,
        user_id: str,
        amount: Decimal,
        expense_date: date,
        category: str,
        note: Optional[str] = None,
    ) -> ExpenseRecord:
        return self._create(user_id, amount, expense_date, category, note)

    def list_expenses(self, user_id: str, start: Optional[date] = None, end: Optional[date] = None) -> List[ExpenseRecord]:
        """Expenses newest first, optionally restricted to [start, end]"""
        return self._list(user_id, start, end)


class DebtRepository:
    """Repository for debts and debt installments"""

    def __init__(self, db: Session):
        self.db = db

    def create_debt_record(
        self,
        user_id: str,
        amount: Decimal,
        due_date: date,
        note: Optional[str],
        paid: bool = False,
        installment_amount: Optional[Decimal] = None,
        installment_number: int = 1,
        total_installments: int = 1,
    ) -> uuid.UUID:
        """Persist one debt record and return its generated ID (flushed, not committed)"""
        record = DebtRecord(
            user_id=user_id,
            amount=amount,
            due_date=due_date,
            note=note,
            paid=paid,
            installment_amount=installment_amount if installment_amount is not None else amount,
            installment_number=installment_number,
            total_installments=total_installments,
        )
        self.db.add(record)
        self.db.flush()
        return record.id

    def get_debt(self, user_id: str, debt_id: uuid.UUID) -> DebtRecord:
        """
        Fetch a debt owned by the user.

        Raises:
            DebtNotFoundError: Unknown ID or owned by someone else
        """
        record = (
            self.db.query(DebtRecord)
            .filter(DebtRecord.id == debt_id, DebtRecord.user_id == user_id)
            .first()
        )
        if record is None:
            raise DebtNotFoundError(f"Debt {debt_id} not found")
        return record

    def mark_paid(self, user_id: str, debt_id: uuid.UUID) -> DebtRecord:
        """Set the paid flag; paying an already paid debt is a no-op"""
        record = self.get_debt(user_id, debt_id)
        record.paid = True
        self.db.flush()
        return record

    def delete_debt(self, user_id: str, debt_id: uuid.UUID) -> None:
        record = self.get_debt(user_id, debt_id)
        self.db.delete(record)
        self.db.flush()

    def list_debts(
        self,
        user_id: str,
        unpaid_only: bool = False,
        due_from: Optional[date] = None,
        limit: Optional[int] = None,
        after: Optional[uuid.UUID] = None,
    ) -> List[DebtRecord]:
        """
        Debts ordered by due date ascending (ID breaks ties).

        Pagination is keyset-based: `after` is the ID of the last debt of the
        previous page, and results continue strictly after it.
        """
        query = self.db.query(DebtRecord).filter(DebtRecord.user_id == user_id)

        if unpaid_only:
            query = query.filter(DebtRecord.paid.is_(False))
        if due_from is not None:
            query = query.filter(DebtRecord.due_date >= due_from)
        if after is not None:
            cursor = self.get_debt(user_id, after)
            query = query.filter(
                or_(
                    DebtRecord.due_date > cursor.due_date,
                    and_(DebtRecord.due_date == cursor.due_date, DebtRecord.id > cursor.id),
                )
            )

        query = query.order_by(DebtRecord.due_date.asc(), DebtRecord.id.asc())
        if limit is not None:
            query = query.limit(limit)
        return query.all()
