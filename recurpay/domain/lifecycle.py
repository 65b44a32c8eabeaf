"""Client payment lifecycle: applying validated payments"""

from decimal import Decimal
from recurpay.domain.exceptions import PaymentStateError
from recurpay.domain.installments import SINGLE_PAYMENT_THRESHOLD, classify_plan
from recurpay.domain.models import (
    Client,
    ClientAdvance,
    PaymentRecord,
    PAYMENT_PENDING,
    PAYMENT_REJECTED,
    PAYMENT_VALIDATED,
    PLAN_FINANCING,
    PLAN_SINGLE_PAYMENT,
    STATUS_COMPLETED,
)
from recurpay.utils.date_utils import next_billing_date


def apply_validated_payment(
    client: Client,
    single_payment_threshold: Decimal = SINGLE_PAYMENT_THRESHOLD,
) -> ClientAdvance:
    """
    Advance a client after one of its payments is validated.

    The payment count goes up by one and the next due date moves one month
    forward on the billing day. Financing plans complete when the count
    reaches the term, single-payment contracts after their only payment.
    Recurring services stay open.
    """
    if client.status == STATUS_COMPLETED:
        raise PaymentStateError(f"Client {client.id} has already completed its plan")

    shape = classify_plan(client, single_payment_threshold)
    count = client.payments_made_count + 1
    status = client.status

    if shape == PLAN_FINANCING:
        count = min(count, client.financing_plan)
        if count >= client.financing_plan:
            status = STATUS_COMPLETED
    elif shape == PLAN_SINGLE_PAYMENT:
        status = STATUS_COMPLETED

    return ClientAdvance(
        payments_made_count=count,
        next_payment_date=next_billing_date(client.next_payment_date, client.payment_day_of_month),
        status=status,
    )


def ensure_reviewable(payment: PaymentRecord) -> None:
    """Only payments awaiting review can be validated or rejected"""
    if payment.status != PAYMENT_PENDING:
        raise PaymentStateError(f"Payment {payment.id} is {payment.status or PAYMENT_VALIDATED}, not {PAYMENT_PENDING}")


def review_outcome(action: str) -> str:
    """Map a review action to the payment status it produces"""
    if action == "validate":
        return PAYMENT_VALIDATED
    if action == "reject":
        return PAYMENT_REJECTED
    raise ValueError(f"Unknown review action: {action}")


def ensure_billable(client: Client) -> None:
    """Payments can only be registered directly against an open plan with an amount due"""
    if client.status == STATUS_COMPLETED:
        raise PaymentStateError(f"Client {client.id} has already completed its plan")
    if client.payment_amount <= 0:
        raise PaymentStateError(f"Client {client.id} has no payment amount to register")
