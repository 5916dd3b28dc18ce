"""Date manipulation utilities"""

import calendar
from datetime import date
from typing import Tuple

from dateutil.relativedelta import relativedelta


def add_months(from_date: date, months: int) -> date:
    """
    Advance a date by calendar months.

    Days past the end of the target month clamp to its last day,
    e.g. 2024-01-31 + 1 month -> 2024-02-29.
    """
    return from_date + relativedelta(months=months)


def month_bounds(day: date) -> Tuple[date, date]:
    """First and last day (inclusive) of the month containing `day`"""
    last_day = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last_day)


def parse_month(value: str) -> date:
    """Parse a `YYYY-MM` string into the first day of that month"""
    year, month = value.split("-")
    return date(int(year), int(month), 1)
