"""Installment schedules for financed, single-payment and recurring clients"""

from datetime import date
from decimal import Decimal
from typing import List, Sequence
from recurpay.domain.models import (
    Client,
    PaymentProgress,
    PaymentRecord,
    PendingInstallment,
    ScheduledInstallment,
    PLAN_FINANCING,
    PLAN_RECURRING,
    PLAN_SINGLE_PAYMENT,
    STATUS_COMPLETED,
    ZERO,
)
from recurpay.utils.date_utils import add_months, next_billing_date

# Contracts below this value without a financing plan are billed once.
SINGLE_PAYMENT_THRESHOLD = Decimal("1000000")

# Open-ended recurring plans are projected over a year in the full schedule
RECURRING_PROJECTION_INSTALLMENTS = 12


def classify_plan(client: Client, single_payment_threshold: Decimal = SINGLE_PAYMENT_THRESHOLD) -> str:
    """Return the plan shape: financing, single_payment or recurring"""
    if client.financing_plan and client.financing_plan > 0:
        return PLAN_FINANCING
    if client.contract_value and 0 < client.contract_value < single_payment_threshold:
        return PLAN_SINGLE_PAYMENT
    return PLAN_RECURRING


def validated_payments(history: Sequence[PaymentRecord]) -> List[PaymentRecord]:
    """Validated payments ordered by payment date (oldest first)"""
    return sorted((p for p in history if p.is_validated), key=lambda p: p.payment_date)


def installment_status(due_date: date, today: date) -> str:
    return "overdue" if today > due_date else "pending"


def pending_installments(
    client: Client,
    history: Sequence[PaymentRecord],
    today: date | None = None,
    single_payment_threshold: Decimal = SINGLE_PAYMENT_THRESHOLD,
) -> List[PendingInstallment]:
    """
    Forward-looking installments still owed by a client.

    - Completed clients owe nothing
    - Financing plan: installments paymentsMade+1..plan, monthly from
      next_payment_date, day snapped to the billing day
    - Single payment: one installment until a validated payment exists
    - Recurring: the next monthly payment only

    Every installment carries the flat payment_amount.
    """
    if client.status == STATUS_COMPLETED:
        return []

    if today is None:
        today = date.today()

    shape = classify_plan(client, single_payment_threshold)
    amount = client.payment_amount

    if shape == PLAN_SINGLE_PAYMENT:
        if any(p.is_validated for p in history):
            return []
        return [
            PendingInstallment(
                number=1,
                due_date=client.next_payment_date,
                amount=amount,
                status=installment_status(client.next_payment_date, today),
                description="Pago único completo",
            )
        ]

    if shape == PLAN_RECURRING:
        number = client.payments_made_count + 1
        return [
            PendingInstallment(
                number=number,
                due_date=client.next_payment_date,
                amount=amount,
                status=installment_status(client.next_payment_date, today),
                description="Próximo pago mensual",
            )
        ]

    installments = []
    due_date = client.next_payment_date
    for number in range(client.payments_made_count + 1, client.financing_plan + 1):
        installments.append(
            PendingInstallment(
                number=number,
                due_date=due_date,
                amount=amount,
                status=installment_status(due_date, today),
                description=f"Cuota {number} de {client.financing_plan}",
            )
        )
        due_date = next_billing_date(due_date, client.payment_day_of_month)

    return installments


def _schedule_terms(client: Client, single_payment_threshold: Decimal) -> tuple[int, Decimal, Decimal]:
    """(number of installments, nominal amount, total to pay) for the full schedule"""
    shape = classify_plan(client, single_payment_threshold)
    breakdown = client.breakdown

    if shape == PLAN_FINANCING:
        total = breakdown.total_with_interest or breakdown.amount_to_finance or ZERO
        return client.financing_plan, client.payment_amount, total
    if shape == PLAN_SINGLE_PAYMENT:
        amount = breakdown.total_with_iva or client.contract_value
        return 1, amount, amount

    count = RECURRING_PROJECTION_INSTALLMENTS
    return count, client.payment_amount, client.payment_amount * count


def full_installment_schedule(
    client: Client,
    history: Sequence[PaymentRecord],
    today: date | None = None,
    single_payment_threshold: Decimal = SINGLE_PAYMENT_THRESHOLD,
) -> List[ScheduledInstallment]:
    """
    Reconstruct paid and upcoming installments of a client's contract.

    Historical due dates are inferred by walking back one month from
    next_payment_date per validated payment; validated payments are then
    matched to installments 1..N in payment-date order. The match assumes
    payments were made in due-date order, so out-of-order payments are
    attributed to the wrong installment.
    """
    if not client.financing_plan and not client.contract_value:
        return []

    if today is None:
        today = date.today()

    count, amount, remaining = _schedule_terms(client, single_payment_threshold)
    payments = validated_payments(history)

    due_date = client.next_payment_date
    for _ in payments:
        due_date = add_months(due_date, -1)

    schedule = []
    for number in range(1, count + 1):
        if number > 1:
            due_date = next_billing_date(due_date, client.payment_day_of_month)

        payment = payments[number - 1] if number <= len(payments) else None
        if payment is not None:
            status = "paid"
            remaining -= payment.amount_paid
        else:
            status = installment_status(due_date, today)

        schedule.append(
            ScheduledInstallment(
                number=number,
                due_date=due_date,
                amount=amount,
                status=status,
                remaining_balance=max(ZERO, remaining),
                payment=payment,
            )
        )

    return schedule


def payment_progress(
    client: Client,
    history: Sequence[PaymentRecord],
    single_payment_threshold: Decimal = SINGLE_PAYMENT_THRESHOLD,
) -> PaymentProgress:
    """
    Installments and amounts paid so far against the plan total.

    Extra validated payments (duplicates, legacy records) still count as paid,
    but the percentage stops at 100.
    """
    payments = validated_payments(history)
    paid_count = len(payments)
    paid_amount = sum((p.amount_paid for p in payments), ZERO)

    shape = classify_plan(client, single_payment_threshold)
    if shape == PLAN_FINANCING:
        total_count = client.financing_plan
        total_amount = client.breakdown.total_with_interest or client.payment_amount * total_count
    elif shape == PLAN_SINGLE_PAYMENT:
        total_count = 1
        total_amount = client.breakdown.total_with_iva or client.contract_value
    else:
        total_count = RECURRING_PROJECTION_INSTALLMENTS
        total_amount = client.payment_amount * total_count

    percentage = min(100.0, paid_count / total_count * 100) if total_count > 0 else 0.0

    return PaymentProgress(
        total_installments=total_count,
        paid_installments=paid_count,
        remaining_installments=max(0, total_count - paid_count),
        total_amount=total_amount,
        paid_amount=paid_amount,
        remaining_amount=max(ZERO, total_amount - paid_amount),
        progress_percentage=round(percentage, 2),
    )
