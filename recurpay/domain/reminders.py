"""Selection of clients due for a payment reminder"""

from datetime import date
from typing import Iterable, List
from recurpay.domain.models import Client, PaymentReminder, STATUS_ACTIVE

DEFAULT_WINDOW_DAYS = 5


def days_until_due(due_date: date, today: date) -> int:
    """Whole days from today to the due date (negative once overdue)"""
    return (due_date - today).days


def reminder_urgency(days: int) -> str:
    """Classify how pressing a reminder is"""
    if days < 0:
        return "overdue"
    elif days == 0:
        return "due_today"
    elif days == 1:
        return "due_tomorrow"
    else:
        return "due_soon"


def select_payment_reminders(
    clients: Iterable[Client],
    today: date | None = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> List[PaymentReminder]:
    """
    Active clients with an amount due within +/- window_days of today.

    Sorted by due date so overdue clients come first.
    """
    if today is None:
        today = date.today()

    reminders = []
    for client in clients:
        if client.status != STATUS_ACTIVE or client.payment_amount <= 0:
            continue

        days = days_until_due(client.next_payment_date, today)
        if -window_days <= days <= window_days:
            reminders.append(
                PaymentReminder(
                    client_id=client.id,
                    email=client.email,
                    full_name=client.full_name,
                    payment_amount=client.payment_amount,
                    due_date=client.next_payment_date,
                    days_until_due=days,
                    urgency=reminder_urgency(days),
                )
            )

    return sorted(reminders, key=lambda r: r.due_date)
