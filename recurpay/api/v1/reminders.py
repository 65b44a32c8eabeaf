"""GET /v1/reminders/due - clients the reminder job should contact"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from recurpay.api.v1.schemas import ReminderSchema, RemindersResponse
from recurpay.config import settings
from recurpay.domain.models import STATUS_ACTIVE
from recurpay.domain.reminders import select_payment_reminders
from recurpay.infrastructure.database.repositories import ClientRepository, client_to_domain
from recurpay.infrastructure.database.session import get_db

router = APIRouter()


@router.get("/reminders/due", response_model=RemindersResponse)
def get_due_reminders(
    as_of: Optional[date] = Query(None, description="Reference date (default today)"),
    db: Session = Depends(get_db),
):
    """
    Active clients with a payment due within the reminder window.

    Returns:
        Reminders sorted by due date, each with an urgency used for the email subject
    """
    today = as_of or date.today()
    clients = [client_to_domain(row) for row in ClientRepository(db).list_clients(status=STATUS_ACTIVE)]
    reminders = select_payment_reminders(clients, today=today, window_days=settings.reminder_window_days)

    return RemindersResponse(
        as_of=today,
        window_days=settings.reminder_window_days,
        reminders=[
            ReminderSchema(
                client_id=r.client_id,
                email=r.email,
                full_name=r.full_name,
                payment_amount=r.payment_amount,
                due_date=r.due_date,
                days_until_due=r.days_until_due,
                urgency=r.urgency,
            )
            for r in reminders
        ],
    )
