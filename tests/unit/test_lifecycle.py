"""Unit tests for applying validated payments to a client"""

import pytest
from datetime import date
from recurpay.domain.exceptions import PaymentStateError
from recurpay.domain.lifecycle import apply_validated_payment, ensure_billable, ensure_reviewable, review_outcome
from recurpay.domain.models import PaymentRecord
from decimal import Decimal


def test_financing_payment_advances_count_and_date(financed_client):
    advance = apply_validated_payment(financed_client)

    assert advance.payments_made_count == 1
    assert advance.next_payment_date == date(2025, 4, 15)
    assert advance.status == "active"


def test_last_financing_payment_completes_plan(financed_client):
    financed_client.payments_made_count = 5
    advance = apply_validated_payment(financed_client)

    assert advance.payments_made_count == 6
    assert advance.status == "completed"


def test_payment_count_never_exceeds_plan(financed_client):
    financed_client.payments_made_count = 6
    advance = apply_validated_payment(financed_client)

    assert advance.payments_made_count == 6
    assert advance.status == "completed"


def test_single_payment_completes_contract(single_payment_client):
    advance = apply_validated_payment(single_payment_client)

    assert advance.payments_made_count == 1
    assert advance.status == "completed"


def test_recurring_service_stays_active(recurring_client):
    recurring_client.payments_made_count = 11
    advance = apply_validated_payment(recurring_client)

    assert advance.payments_made_count == 12
    assert advance.next_payment_date == date(2025, 4, 5)
    assert advance.status == "active"


def test_advance_returns_to_billing_day_after_short_month(recurring_client):
    recurring_client.payment_day_of_month = 31
    recurring_client.next_payment_date = date(2025, 1, 31)

    advance = apply_validated_payment(recurring_client)
    assert advance.next_payment_date == date(2025, 2, 28)

    recurring_client.next_payment_date = advance.next_payment_date
    assert apply_validated_payment(recurring_client).next_payment_date == date(2025, 3, 31)


def test_defaulted_client_keeps_status_until_plan_done(financed_client):
    financed_client.status = "defaulted"
    assert apply_validated_payment(financed_client).status == "defaulted"


def test_completed_client_cannot_take_payments(financed_client):
    financed_client.status = "completed"
    with pytest.raises(PaymentStateError):
        apply_validated_payment(financed_client)


@pytest.mark.parametrize("status", ["validated", "rejected", None])
def test_only_pending_payments_are_reviewable(status):
    payment = PaymentRecord(payment_date=date(2025, 3, 1), amount_paid=Decimal("1000"), status=status)
    with pytest.raises(PaymentStateError):
        ensure_reviewable(payment)


def test_review_outcome():
    assert review_outcome("validate") == "validated"
    assert review_outcome("reject") == "rejected"
    with pytest.raises(ValueError):
        review_outcome("approve")


def test_open_client_with_amount_is_billable(financed_client):
    ensure_billable(financed_client)


def test_completed_or_zero_amount_client_is_not_billable(financed_client, recurring_client):
    financed_client.status = "completed"
    with pytest.raises(PaymentStateError):
        ensure_billable(financed_client)

    recurring_client.payment_amount = Decimal("0")
    with pytest.raises(PaymentStateError):
        ensure_billable(recurring_client)
