"""Payment proof submission, admin review and direct registration"""

import logging
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from recurpay.api.dependencies import get_request_id, parse_uuid
from recurpay.api.v1.schemas import (
    PaymentListResponse,
    PaymentRegistration,
    PaymentReviewResponse,
    PaymentSchema,
    PaymentSubmission,
    RejectionRequest,
)
from recurpay.config import settings
from recurpay.domain.exceptions import ClientNotFoundError, PaymentNotFoundError, PaymentStateError
from recurpay.domain.lifecycle import (
    apply_validated_payment,
    ensure_billable,
    ensure_reviewable,
    review_outcome,
)
from recurpay.domain.models import PAYMENT_VALIDATED, STATUS_COMPLETED
from recurpay.infrastructure.database.models import PaymentRecordRow
from recurpay.infrastructure.database.repositories import (
    ClientRepository,
    PaymentRepository,
    client_to_domain,
    payment_to_domain,
)
from recurpay.infrastructure.database.session import get_db
from recurpay.infrastructure.observability.logging import log_payment_decision
from recurpay.infrastructure.observability.metrics import (
    payment_registered_counter,
    payment_review_counter,
    payment_submitted_counter,
)

router = APIRouter()


def payment_schema(row: PaymentRecordRow) -> PaymentSchema:
    return PaymentSchema(
        payment_id=str(row.id),
        client_id=str(row.client_id),
        payment_date=row.payment_date,
        amount_paid=row.amount_paid,
        status=row.status or PAYMENT_VALIDATED,
        notes=row.notes,
        rejection_reason=row.rejection_reason,
        recorded_at=row.recorded_at.isoformat(),
    )


@router.post("/clients/{client_id}/payments", response_model=PaymentSchema, status_code=201)
def submit_payment(
    client_id: str,
    body: PaymentSubmission,
    request: Request,
    db: Session = Depends(get_db),
):
    """Submit a payment for admin validation; it counts only once validated"""
    request_id = get_request_id(request)
    client_uuid = parse_uuid(client_id)

    try:
        client_row = ClientRepository(db).get_client(client_uuid)
        if client_row.status == STATUS_COMPLETED:
            raise PaymentStateError("Client has already completed its plan")

        row = PaymentRepository(db).create_payment(
            client_id=client_uuid,
            payment_date=body.payment_date,
            amount_paid=body.amount_paid,
            notes=body.notes,
        )
        db.commit()
        db.refresh(row)

    except ClientNotFoundError:
        db.rollback()
        raise HTTPException(status_code=404, detail="Client not found")

    except PaymentStateError as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(e))

    payment_submitted_counter.inc()
    logging.info(
        "Payment submitted",
        extra={"request_id": request_id, "client_id": client_id, "payment_id": str(row.id), "step": "payment_submitted"},
    )
    return payment_schema(row)


@router.get("/clients/{client_id}/payments", response_model=PaymentListResponse)
def list_client_payments(client_id: str, db: Session = Depends(get_db)):
    """Full payment history (all review states), ordered by payment date"""
    client_uuid = parse_uuid(client_id)
    try:
        ClientRepository(db).get_client(client_uuid)
    except ClientNotFoundError:
        raise HTTPException(status_code=404, detail="Client not found")

    rows = PaymentRepository(db).list_for_client(client_uuid)
    return PaymentListResponse(payments=[payment_schema(row) for row in rows])


@router.post("/clients/{client_id}/payments/register", response_model=PaymentReviewResponse, status_code=201)
def register_payment(
    client_id: str,
    request: Request,
    body: Optional[PaymentRegistration] = None,
    db: Session = Depends(get_db),
):
    """
    Admin shortcut: record the client's payment amount as an already validated
    payment and advance the client in the same transaction.

    Refused (409) for completed clients and clients with nothing to bill.
    """
    request_id = get_request_id(request)
    client_uuid = parse_uuid(client_id)
    body = body or PaymentRegistration()
    clients = ClientRepository(db)
    payments = PaymentRepository(db)

    try:
        client_row = clients.get_client(client_uuid)
        client = client_to_domain(client_row)
        ensure_billable(client)
        advance = apply_validated_payment(client, settings.single_payment_threshold)

        row = payments.create_payment(
            client_id=client_uuid,
            payment_date=body.payment_date or date.today(),
            amount_paid=client.payment_amount,
            notes=body.notes,
        )
        payments.set_status(row, PAYMENT_VALIDATED)
        clients.apply_advance(client_row, advance)
        db.commit()
        db.refresh(row)
        db.refresh(client_row)

    except ClientNotFoundError:
        db.rollback()
        raise HTTPException(status_code=404, detail="Client not found")

    except PaymentStateError as e:
        db.rollback()
        logging.warning(f"Payment registration refused: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    payment_registered_counter.inc()
    log_payment_decision(
        request_id,
        str(client_row.id),
        str(row.id),
        "registered",
        client_row.payments_made_count,
        client_row.status,
    )

    return PaymentReviewResponse(
        payment=payment_schema(row),
        payments_made_count=client_row.payments_made_count,
        next_payment_date=client_row.next_payment_date,
        client_status=client_row.status,
    )


@router.get("/payments/pending", response_model=PaymentListResponse)
def list_pending_payments(db: Session = Depends(get_db)):
    """Submissions waiting for admin review"""
    rows = PaymentRepository(db).list_pending()
    return PaymentListResponse(payments=[payment_schema(row) for row in rows])


def _review_payment(payment_id: str, action: str, request: Request, db: Session, reason: str | None = None):
    """
    Validate or reject a pending payment.

    Validation advances the client (payment count, next due date, completion)
    in the same transaction as the status change.
    """
    request_id = get_request_id(request)
    payment_uuid = parse_uuid(payment_id, entity="payment")
    payments = PaymentRepository(db)
    clients = ClientRepository(db)

    try:
        row = payments.get_payment(payment_uuid)
        ensure_reviewable(payment_to_domain(row))
        client_row = clients.get_client(row.client_id)

        outcome = review_outcome(action)
        if outcome == PAYMENT_VALIDATED:
            advance = apply_validated_payment(client_to_domain(client_row), settings.single_payment_threshold)
            clients.apply_advance(client_row, advance)

        payments.set_status(row, outcome, reason)
        db.commit()
        db.refresh(row)
        db.refresh(client_row)

    except (PaymentNotFoundError, ClientNotFoundError) as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except PaymentStateError as e:
        db.rollback()
        logging.warning(f"Payment review refused: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error reviewing payment: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    payment_review_counter.labels(outcome=outcome).inc()
    log_payment_decision(
        request_id,
        str(client_row.id),
        str(row.id),
        outcome,
        client_row.payments_made_count,
        client_row.status,
        reason,
    )

    return PaymentReviewResponse(
        payment=payment_schema(row),
        payments_made_count=client_row.payments_made_count,
        next_payment_date=client_row.next_payment_date,
        client_status=client_row.status,
    )


@router.post("/payments/{payment_id}/validate", response_model=PaymentReviewResponse)
def validate_payment(payment_id: str, request: Request, db: Session = Depends(get_db)):
    return _review_payment(payment_id, "validate", request, db)


@router.post("/payments/{payment_id}/reject", response_model=PaymentReviewResponse)
def reject_payment(payment_id: str, body: RejectionRequest, request: Request, db: Session = Depends(get_db)):
    """Reject a submission; the client's schedule is left untouched"""
    return _review_payment(payment_id, "reject", request, db, reason=body.reason)
