"""Unit tests for pending installments and plan classification"""

import pytest
from datetime import date
from decimal import Decimal
from recurpay.domain.installments import classify_plan, pending_installments
from recurpay.domain.models import Client


def test_completed_client_has_no_pending_installments(financed_client, recurring_client, single_payment_client):
    for client in (financed_client, recurring_client, single_payment_client):
        client.status = "completed"
        assert pending_installments(client, [], today=date(2025, 3, 1)) == []


def test_financing_plan_lists_remaining_installments(financed_client):
    """2 of 6 paid -> installments 3..6"""
    financed_client.payments_made_count = 2
    installments = pending_installments(financed_client, [], today=date(2025, 3, 1))

    assert [i.number for i in installments] == [3, 4, 5, 6]
    assert [i.due_date for i in installments] == [
        date(2025, 3, 15),
        date(2025, 4, 15),
        date(2025, 5, 15),
        date(2025, 6, 15),
    ]
    assert all(i.amount == Decimal("192780.00") for i in installments)
    assert installments[0].description == "Cuota 3 de 6"
    assert installments[-1].description == "Cuota 6 de 6"


def test_financing_plan_fully_paid_has_nothing_pending(financed_client):
    financed_client.payments_made_count = 6
    assert pending_installments(financed_client, [], today=date(2025, 3, 1)) == []


def test_billing_day_31_clamps_to_short_months(financed_client):
    financed_client.payment_day_of_month = 31
    financed_client.next_payment_date = date(2025, 3, 31)
    financed_client.payments_made_count = 2

    installments = pending_installments(financed_client, [], today=date(2025, 3, 1))

    assert [i.due_date for i in installments] == [
        date(2025, 3, 31),
        date(2025, 4, 30),  # 30-day month, no roll into May
        date(2025, 5, 31),
        date(2025, 6, 30),
    ]


def test_billing_day_returns_after_february(financed_client):
    financed_client.payment_day_of_month = 30
    financed_client.next_payment_date = date(2025, 1, 30)
    financed_client.financing_plan = 3

    installments = pending_installments(financed_client, [], today=date(2025, 1, 1))

    assert [i.due_date for i in installments] == [date(2025, 1, 30), date(2025, 2, 28), date(2025, 3, 30)]


def test_overdue_only_after_due_date(financed_client):
    financed_client.payments_made_count = 4
    installments = pending_installments(financed_client, [], today=date(2025, 3, 15))
    assert [i.status for i in installments] == ["pending", "pending"]

    installments = pending_installments(financed_client, [], today=date(2025, 4, 20))
    assert [i.status for i in installments] == ["overdue", "overdue"]

    installments = pending_installments(financed_client, [], today=date(2025, 3, 16))
    assert [i.status for i in installments] == ["overdue", "pending"]


def test_recurring_service_has_one_next_payment(recurring_client):
    """No contract value, 50,000 entered directly"""
    recurring_client.payments_made_count = 7
    installments = pending_installments(recurring_client, [], today=date(2025, 3, 1))

    assert len(installments) == 1
    assert installments[0].number == 8
    assert installments[0].amount == Decimal("50000")
    assert installments[0].due_date == date(2025, 3, 5)
    assert installments[0].status == "pending"
    assert installments[0].description == "Próximo pago mensual"


def test_single_payment_pending_until_validated(single_payment_client, make_payment):
    installments = pending_installments(
        single_payment_client,
        [make_payment(date(2025, 3, 18), "595000", status="pending")],
        today=date(2025, 3, 25),
    )

    assert len(installments) == 1
    assert installments[0].number == 1
    assert installments[0].amount == Decimal("595000")
    assert installments[0].status == "overdue"
    assert installments[0].description == "Pago único completo"


def test_single_payment_satisfied_by_validated_payment(single_payment_client, make_payment):
    history = [
        make_payment(date(2025, 3, 10), "595000", status="rejected"),
        make_payment(date(2025, 3, 18), "595000", status="validated"),
    ]
    assert pending_installments(single_payment_client, history, today=date(2025, 3, 1)) == []


def test_legacy_payment_without_status_counts_as_validated(single_payment_client, make_payment):
    history = [make_payment(date(2025, 3, 18), "595000", status=None)]
    assert pending_installments(single_payment_client, history, today=date(2025, 3, 1)) == []


def test_rejected_payments_do_not_advance_financing(financed_client, make_payment):
    history = [make_payment(date(2025, 3, 10), "192780", status="rejected")]
    installments = pending_installments(financed_client, history, today=date(2025, 3, 1))

    assert [i.number for i in installments] == [1, 2, 3, 4, 5, 6]


@pytest.mark.parametrize(
    "contract_value,financing_plan,expected",
    [
        ("0", 0, "recurring"),
        ("500000", 0, "single_payment"),
        ("999999.99", 0, "single_payment"),
        ("1000000", 0, "recurring"),
        ("3000000", 0, "recurring"),
        ("500000", 3, "financing"),
        ("1000000", 12, "financing"),
    ],
)
def test_classify_plan(contract_value, financing_plan, expected):
    client = Client(
        next_payment_date=date(2025, 1, 1),
        contract_value=Decimal(contract_value),
        financing_plan=financing_plan,
    )
    assert classify_plan(client) == expected


def test_single_payment_threshold_is_configurable(single_payment_client):
    assert classify_plan(single_payment_client, single_payment_threshold=Decimal("400000")) == "recurring"

    installments = pending_installments(
        single_payment_client,
        [],
        today=date(2025, 3, 1),
        single_payment_threshold=Decimal("400000"),
    )
    assert installments[0].description == "Próximo pago mensual"


def test_today_defaults_to_current_date(recurring_client):
    recurring_client.next_payment_date = date(2000, 1, 5)
    installments = pending_installments(recurring_client, [])
    assert installments[0].status == "overdue"
