"""SQLAlchemy ORM models for users and their money records"""

import uuid
from sqlalchemy import Column, Boolean, DateTime, Date, Integer, Numeric, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

from fintrack.domain.models import Debt, Expense, Income

Base = declarative_base()

# Wide enough for zero-decimal currencies with large nominal amounts
Money = Numeric(20, 4, asdecimal=True)


class User(Base):
    """Profile of a user signed in through the identity provider"""

    __tablename__ = "app_user"

    uid = Column(Text, primary_key=True)
    email = Column(Text, nullable=True)
    display_name = Column(Text, nullable=False)
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class IncomeRecord(Base):
    """Income entry"""

    __tablename__ = "income"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    amount = Column(Money, nullable=False)
    date = Column(Date, nullable=False, index=True)
    category = Column(Text, nullable=False, default="salary")
    note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def to_domain(self) -> Income:
        return Income(
            id=str(self.id),
            amount=self.amount,
            date=self.date,
            category=self.category,
            note=self.note,
        )


class ExpenseRecord(Base):
    """Expense entry"""

    __tablename__ = "expense"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    amount = Column(Money, nullable=False)
    date = Column(Date, nullable=False, index=True)
    category = Column(Text, nullable=False)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def to_domain(self) -> Expense:
        return Expense(
            id=str(self.id),
            amount=self.amount,
            date=self.date,
            category=self.category,
            note=self.note,
        )


class DebtRecord(Base):
    """Debt obligation; one row per installment"""

    __tablename__ = "debt"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    amount = Column(Money, nullable=False)
    due_date = Column(Date, nullable=False, index=True)
    note = Column(Text, nullable=True)
    paid = Column(Boolean, nullable=False, default=False)
    installment_amount = Column(Money, nullable=True)
    installment_number = Column(Integer, nullable=False, default=1)
    total_installments = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def to_domain(self) -> Debt:
        return Debt(
            id=str(self.id),
            amount=self.amount,
            due_date=self.due_date,
            paid=self.paid,
            note=self.note,
            installment_amount=self.installment_amount,
        )
