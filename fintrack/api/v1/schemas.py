"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field
import datetime as dt
from decimal import Decimal
from typing import List, Literal, Optional
from fintrack.config import settings


IncomeCategory = Literal["salary", "bonus", "freelance", "investment", "other"]

ExpenseCategory = Literal[
    "Food & Drinks",
    "Shopping",
    "Transportation",
    "Housing",
    "Bills",
    "Entertainment",
    "Health",
    "Education",
    "Other",
]


class IncomeRequest(BaseModel):
    """Request body for POST /v1/incomes"""

    amount: Decimal = Field(..., gt=0, description="Income amount")
    date: Optional[dt.date] = Field(None, description="Defaults to today")
    category: IncomeCategory = "salary"
    note: Optional[str] = Field(None, max_length=500)


class ExpenseRequest(BaseModel):
    """Request body for POST /v1/expenses"""

    amount: Decimal = Field(..., gt=0, description="Expense amount")
    date: Optional[dt.date] = Field(None, description="Defaults to today")
    category: ExpenseCategory
    note: Optional[str] = Field(None, max_length=500)


class EntryResponse(BaseModel):
    """A recorded income or expense"""

    id: str
    amount: Decimal
    date: dt.date
    category: str
    note: Optional[str] = None


class EntryListResponse(BaseModel):
    """Response for GET /v1/incomes and GET /v1/expenses"""

    entries: List[EntryResponse]
    total: Decimal


class DebtRequest(BaseModel):
    """Request body for POST /v1/debts"""

    model_config = ConfigDict(str_strip_whitespace=True)

    total_amount: Decimal = Field(..., gt=0, description="Total debt to split")
    tenor: int = Field(1, le=settings.max_tenor, description="Number of monthly installments")
    start_date: Optional[dt.date] = Field(None, description="First due date, defaults to today")
    note: str = Field(..., min_length=1, max_length=500)


class InstallmentSchema(BaseModel):
    """Single installment of a planned debt"""

    debt_id: str
    amount: Decimal
    due_date: dt.date
    sequence_label: str
    installment_number: int
    total_installments: int


class DebtCreatedResponse(BaseModel):
    """Response for POST /v1/debts"""

    total_amount: Decimal
    tenor: int
    debt_ids: List[str]
    installments: List[InstallmentSchema]


class DebtSchema(BaseModel):
    """Persisted debt record"""

    id: str
    amount: Decimal
    due_date: dt.date
    note: Optional[str] = None
    paid: bool
    installment_amount: Optional[Decimal] = None


class DebtListResponse(BaseModel):
    """Response for debt listings; pass next_cursor back as `cursor` for the next page"""

    debts: List[DebtSchema]
    has_more: bool = False
    next_cursor: Optional[str] = None


class SummaryResponse(BaseModel):
    """Response for GET /v1/summary"""

    month: str
    currency: str
    total_income: Decimal
    salary_income: Decimal
    total_expense: Decimal
    paid_debt: Decimal
    balance: Decimal
    total_debt: Decimal
    monthly_debt: Decimal
    debt_to_income_ratio: float
    health_status: str
    debts_due_this_month: List[DebtSchema]
    upcoming_debts: List[DebtSchema]


class SessionResponse(BaseModel):
    """Response for POST /v1/auth/session"""

    uid: str
    email: Optional[str] = None
    display_name: str
