"""Pending installments, full schedule and progress for a client"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from recurpay.api.dependencies import parse_uuid
from recurpay.api.v1.schemas import (
    PendingInstallmentSchema,
    PendingInstallmentsResponse,
    ProgressResponse,
    ScheduledInstallmentSchema,
    ScheduleResponse,
)
from recurpay.config import settings
from recurpay.domain.exceptions import ClientNotFoundError
from recurpay.domain.installments import (
    classify_plan,
    full_installment_schedule,
    payment_progress,
    pending_installments,
)
from recurpay.domain.models import ZERO
from recurpay.infrastructure.database.repositories import (
    ClientRepository,
    PaymentRepository,
    client_to_domain,
    payment_to_domain,
)
from recurpay.infrastructure.database.session import get_db
from recurpay.infrastructure.observability.metrics import record_overdue

router = APIRouter()


def load_client_snapshot(client_id: str, db: Session):
    """Client and its payment history as domain objects, 404 when unknown"""
    client_uuid = parse_uuid(client_id)
    try:
        row = ClientRepository(db).get_client(client_uuid)
    except ClientNotFoundError:
        raise HTTPException(status_code=404, detail="Client not found")

    history = [payment_to_domain(p) for p in PaymentRepository(db).list_for_client(client_uuid)]
    return client_to_domain(row), history


@router.get("/clients/{client_id}/installments/pending", response_model=PendingInstallmentsResponse)
def get_pending_installments(
    client_id: str,
    as_of: Optional[date] = Query(None, description="Evaluate overdue status on this date (default today)"),
    db: Session = Depends(get_db),
):
    """Installments still owed, flagged pending or overdue"""
    client, history = load_client_snapshot(client_id, db)
    installments = pending_installments(
        client,
        history,
        today=as_of,
        single_payment_threshold=settings.single_payment_threshold,
    )
    record_overdue(installments)

    return PendingInstallmentsResponse(
        client_id=client.id,
        plan_shape=classify_plan(client, settings.single_payment_threshold),
        total_pending=sum((i.amount for i in installments), ZERO),
        overdue_count=sum(1 for i in installments if i.status == "overdue"),
        installments=[
            PendingInstallmentSchema(
                number=i.number,
                due_date=i.due_date,
                amount=i.amount,
                status=i.status,
                description=i.description,
            )
            for i in installments
        ],
    )


@router.get("/clients/{client_id}/installments/schedule", response_model=ScheduleResponse)
def get_installment_schedule(
    client_id: str,
    as_of: Optional[date] = Query(None, description="Evaluate overdue status on this date (default today)"),
    db: Session = Depends(get_db),
):
    """
    Paid and upcoming installments of the whole contract.

    Historical due dates are reconstructed from the number of validated
    payments, assuming they were paid in order.
    """
    client, history = load_client_snapshot(client_id, db)
    schedule = full_installment_schedule(
        client,
        history,
        today=as_of,
        single_payment_threshold=settings.single_payment_threshold,
    )

    return ScheduleResponse(
        client_id=client.id,
        plan_shape=classify_plan(client, settings.single_payment_threshold),
        installments=[
            ScheduledInstallmentSchema(
                number=i.number,
                due_date=i.due_date,
                amount=i.amount,
                status=i.status,
                remaining_balance=i.remaining_balance,
                payment_id=i.payment.id if i.payment else None,
                amount_paid=i.payment.amount_paid if i.payment else None,
            )
            for i in schedule
        ],
    )


@router.get("/clients/{client_id}/progress", response_model=ProgressResponse)
def get_payment_progress(client_id: str, db: Session = Depends(get_db)):
    client, history = load_client_snapshot(client_id, db)
    progress = payment_progress(client, history, settings.single_payment_threshold)
    return ProgressResponse(
        client_id=client.id,
        total_installments=progress.total_installments,
        paid_installments=progress.paid_installments,
        remaining_installments=progress.remaining_installments,
        total_amount=progress.total_amount,
        paid_amount=progress.paid_amount,
        remaining_amount=progress.remaining_amount,
        progress_percentage=progress.progress_percentage,
    )
