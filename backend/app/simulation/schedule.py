"""Installment due-date schedule."""
from __future__ import annotations

from datetime import date, datetime

from dateutil.relativedelta import relativedelta

from app.errors import ValidationError

# Capped at 28 so every month has the due day
MAX_DUE_DATE_DAY = 28


def validate_due_date_day(due_date_day: int) -> None:
    if not 1 <= due_date_day <= MAX_DUE_DATE_DAY:
        raise ValidationError(f"Due date day must be between 1 and {MAX_DUE_DATE_DAY}")


def installment_due_dates(start: date | datetime, due_date_day: int, tenor_months: int) -> list[date]:
    """Due date of installment i = start advanced i calendar months, on ``due_date_day``.

    relativedelta clamps to the end of shorter months (Jan 31 + 1 month is
    Feb 28/29) before the day is forced, so no month is ever skipped.
    """
    validate_due_date_day(due_date_day)
    base = start.date() if isinstance(start, datetime) else start
    return [
        (base + relativedelta(months=i)).replace(day=due_date_day)
        for i in range(1, tenor_months + 1)
    ]
