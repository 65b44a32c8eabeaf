"""Unit tests for reminder selection"""

from datetime import date, timedelta
from decimal import Decimal
from recurpay.domain.models import Client
from recurpay.domain.reminders import days_until_due, reminder_urgency, select_payment_reminders

TODAY = date(2025, 3, 10)


def make_client(client_id: str, days: int, amount: str = "50000", status: str = "active") -> Client:
    return Client(
        id=client_id,
        first_name="Cliente",
        last_name=client_id,
        email=f"{client_id}@mail.com",
        payment_amount=Decimal(amount),
        next_payment_date=TODAY + timedelta(days=days),
        status=status,
    )


def test_days_until_due():
    assert days_until_due(date(2025, 3, 15), TODAY) == 5
    assert days_until_due(TODAY, TODAY) == 0
    assert days_until_due(date(2025, 3, 1), TODAY) == -9


def test_reminder_urgency():
    assert reminder_urgency(-3) == "overdue"
    assert reminder_urgency(0) == "due_today"
    assert reminder_urgency(1) == "due_tomorrow"
    assert reminder_urgency(4) == "due_soon"


def test_select_reminders_within_window():
    clients = [
        make_client("soon", 3),
        make_client("late", -5),
        make_client("too-late", -6),
        make_client("far", 6),
        make_client("today", 0),
    ]

    reminders = select_payment_reminders(clients, today=TODAY)

    assert [r.client_id for r in reminders] == ["late", "today", "soon"]
    assert [r.urgency for r in reminders] == ["overdue", "due_today", "due_soon"]
    assert reminders[0].full_name == "Cliente late"


def test_select_reminders_skips_inactive_and_zero_amount():
    clients = [
        make_client("done", 1, status="completed"),
        make_client("defaulted", 1, status="defaulted"),
        make_client("free", 1, amount="0"),
        make_client("due", 1),
    ]

    reminders = select_payment_reminders(clients, today=TODAY)

    assert [r.client_id for r in reminders] == ["due"]
    assert reminders[0].urgency == "due_tomorrow"


def test_custom_window():
    clients = [make_client("a", 2), make_client("b", 3)]
    assert [r.client_id for r in select_payment_reminders(clients, today=TODAY, window_days=2)] == ["a"]
