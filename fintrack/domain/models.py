"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional


@dataclass(frozen=True)
class Installment:
    """Single scheduled payment of a larger debt"""

    amount: Decimal
    due_date: date
    sequence_label: str
    installment_index: int  # zero-based
    total_installments: int

    @property
    def installment_number(self) -> int:
        return self.installment_index + 1


@dataclass
class Income:
    """Money received by the user"""

    amount: Decimal
    date: date
    category: str = "salary"
    note: Optional[str] = None
    id: Optional[str] = None


@dataclass
class Expense:
    """Money spent by the user"""

    amount: Decimal
    date: date
    category: str
    note: Optional[str] = None
    id: Optional[str] = None


@dataclass
class Debt:
    """Persisted debt obligation, usually one installment of a batch"""

    amount: Decimal
    due_date: date
    paid: bool = False
    note: Optional[str] = None
    installment_amount: Optional[Decimal] = None
    id: Optional[str] = None


@dataclass
class AuthenticatedUser:
    """Identity asserted by the identity provider"""

    uid: str
    email: Optional[str]
    display_name: str
    expires_at: Optional[datetime] = None


@dataclass
class FinancialSummary:
    """Monthly overview shown on the home screen"""

    month_start: date
    month_end: date
    total_income: Decimal
    salary_income: Decimal
    total_expense: Decimal
    paid_debt: Decimal
    balance: Decimal
    total_debt: Decimal
    monthly_debt: Decimal
    debt_to_income_ratio: float  # percent
    health_status: str  # healthy | warning | critical
    debts_due_this_month: List[Debt] = field(default_factory=list)
    upcoming_debts: List[Debt] = field(default_factory=list)
