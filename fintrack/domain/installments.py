"""Installment plan generation for multi-month debts"""

from datetime import date
from typing import List

from fintrack.domain.exceptions import InvalidAmountError, InvalidTenorError
from fintrack.domain.models import Installment
from fintrack.utils.date_utils import add_months
from fintrack.utils.money import Number, fits_precision, to_decimal, truncate


def installment_label(base_note: str, index: int, tenor: int) -> str:
    """Label a single installment: "Laptop loan, 2/3", or the bare note for a one-off debt"""
    if tenor == 1:
        return base_note
    return f"{base_note}, {index + 1}/{tenor}"


def plan_installments(
    total_amount: Number,
    tenor: int,
    start_date: date,
    base_note: str,
    precision: int = 2,
) -> List[Installment]:
    """
    Split a debt into `tenor` monthly installments.

    Requirements:
    - Base installment is total / tenor truncated to the currency's minor unit
    - Last installment absorbs the rounding remainder, so amounts sum to the total exactly
    - Installment i is due `i` calendar months after start_date (month-end clamped)

    Args:
        total_amount: Total debt, must be positive and representable at `precision`
        tenor: Number of monthly installments (>= 1)
        start_date: Due date of the first installment
        base_note: Free-text note copied into every label
        precision: Currency minor-unit digits (2 for cents, 0 for IDR/JPY-style)

    Raises:
        InvalidTenorError: tenor < 1, or a due date would fall past year 9999
        InvalidAmountError: total <= 0 or finer than `precision`

    Example:
        1000 over 3 months -> [333.33, 333.33, 333.34]
    """
    if tenor < 1:
        raise InvalidTenorError(f"Tenor must be at least 1, got {tenor}")

    try:
        total = to_decimal(total_amount)
    except ValueError as e:
        raise InvalidAmountError(str(e)) from e

    if not total.is_finite() or total <= 0:
        raise InvalidAmountError(f"Debt amount must be positive, got {total_amount}")
    if not fits_precision(total, precision):
        raise InvalidAmountError(f"Debt amount {total} has more than {precision} decimal places")

    base_amount = truncate(total / tenor, precision)
    last_amount = total - base_amount * (tenor - 1)

    installments = []
    for i in range(tenor):
        # Last installment absorbs remainder to ensure exact total
        amount = last_amount if i == tenor - 1 else base_amount

        try:
            due_date = add_months(start_date, i)
        except (ValueError, OverflowError) as e:
            raise InvalidTenorError(f"Tenor {tenor} runs past the last representable date") from e

        installments.append(
            Installment(
                amount=amount,
                due_date=due_date,
                sequence_label=installment_label(base_note, i, tenor),
                installment_index=i,
                total_installments=tenor,
            )
        )

    return installments
