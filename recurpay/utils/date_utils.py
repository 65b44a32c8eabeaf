"""Calendar month arithmetic for billing dates"""

import calendar
from datetime import date


def days_in_month(year: int, month: int) -> int:
    """Number of days in the given month"""
    return calendar.monthrange(year, month)[1]


def add_months(from_date: date, months: int) -> date:
    """
    Move a date by whole calendar months (negative goes back).

    The day is clamped to the last day of the target month,
    e.g. Jan 31 + 1 month -> Feb 28 (or 29).
    """
    month_index = from_date.month - 1 + months
    year = from_date.year + month_index // 12
    month = month_index % 12 + 1
    day = min(from_date.day, days_in_month(year, month))
    return date(year, month, day)


def snap_to_day(value: date, day_of_month: int) -> date:
    """Set the day of month, using the month's last day when it is shorter"""
    return value.replace(day=min(day_of_month, days_in_month(value.year, value.month)))


def next_billing_date(previous: date, day_of_month: int) -> date:
    """One month after `previous`, anchored to the billing day"""
    return snap_to_day(add_months(previous, 1), day_of_month)


def next_payment_date_for_day(day_of_month: int, today: date | None = None) -> date:
    """
    First due date for a billing day, counted from today.

    The current month is used unless its billing day has already passed.
    """
    if today is None:
        today = date.today()

    target = today
    if today.day > day_of_month:
        target = add_months(today.replace(day=1), 1)
    return snap_to_day(target, day_of_month)
