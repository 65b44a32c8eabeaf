"""CRUD for clients; every write recomputes the financing breakdown"""

import logging
from dataclasses import asdict
from decimal import Decimal
from typing import Dict, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from recurpay.api.dependencies import get_financing_options, get_request_id, parse_uuid
from recurpay.api.v1.financing import terms_from_schema
from recurpay.api.v1.schemas import (
    ClientListResponse,
    ClientPayload,
    ClientResponse,
    ClientStatus,
    FinancingBreakdownSchema,
    SelfRegistrationPayload,
)
from recurpay.config import settings
from recurpay.domain.exceptions import ClientNotFoundError, DuplicateClientEmailError
from recurpay.domain.installments import classify_plan
from recurpay.domain.models import ContractTerms, FinancingOption, ZERO
from recurpay.infrastructure.database.models import ClientRecord
from recurpay.infrastructure.database.repositories import ClientRepository, client_to_domain
from recurpay.infrastructure.database.session import get_db
from recurpay.infrastructure.observability.logging import log_client_event
from recurpay.infrastructure.observability.metrics import record_client_created

router = APIRouter()


def client_response(row: ClientRecord) -> ClientResponse:
    breakdown = client_to_domain(row).breakdown
    return ClientResponse(
        client_id=str(row.id),
        first_name=row.first_name,
        last_name=row.last_name,
        email=row.email,
        phone_number=row.phone_number,
        payment_method=row.payment_method,
        contract_value=row.contract_value,
        apply_iva=row.apply_iva,
        down_payment_percentage=row.down_payment_percentage,
        financing_plan=row.financing_plan,
        breakdown=FinancingBreakdownSchema(**asdict(breakdown)),
        payment_amount=row.payment_amount,
        payment_day_of_month=row.payment_day_of_month,
        next_payment_date=row.next_payment_date,
        payments_made_count=row.payments_made_count,
        status=row.status,
        created_at=row.created_at.isoformat(),
    )


def _validate_plan(contract_value: Decimal, financing_plan: int, financing_options: Dict[int, FinancingOption]) -> None:
    if financing_plan > 0:
        if contract_value <= 0:
            raise HTTPException(status_code=422, detail="A contract value is required for financing")
        if financing_plan not in financing_options:
            raise HTTPException(status_code=422, detail=f"Unknown financing plan: {financing_plan} months")


def _validate_payload(body: ClientPayload, financing_options: Dict[int, FinancingOption]) -> None:
    """Form-level rules the calculator itself does not enforce"""
    _validate_plan(body.contract_value, body.financing_plan, financing_options)
    if body.contract_value <= 0 and not body.payment_amount:
        raise HTTPException(status_code=422, detail="A recurring payment amount is required without a contract value")


def _persist_new_client(db: Session, request_id: str, step: str, **fields) -> ClientResponse:
    """Create, commit and report a client; 409 when the email is taken"""
    try:
        row = ClientRepository(db).create_client(**fields)
        db.commit()
        db.refresh(row)

    except DuplicateClientEmailError as e:
        db.rollback()
        logging.warning(f"Duplicate client email: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error creating client: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_client_created(classify_plan(client_to_domain(row), settings.single_payment_threshold))
    log_client_event(request_id, str(row.id), step, row.status, row.payment_amount, row.financing_plan)
    return client_response(row)


@router.post("/clients", response_model=ClientResponse, status_code=201)
def create_client(
    body: ClientPayload,
    request: Request,
    db: Session = Depends(get_db),
    financing_options: Dict[int, FinancingOption] = Depends(get_financing_options),
):
    """
    Register a client.

    Flow:
    1. Check form rules (financing needs a contract value, recurring needs an amount)
    2. Compute the financing breakdown and payment amount
    3. Persist client with the breakdown cached on the record
    """
    _validate_payload(body, financing_options)

    return _persist_new_client(
        db,
        get_request_id(request),
        "client_created",
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        phone_number=body.phone_number,
        terms=terms_from_schema(body),
        payment_day_of_month=body.payment_day_of_month,
        financing_options=financing_options,
        payment_amount=body.payment_amount,
        next_payment_date=body.next_payment_date,
        payment_method=body.payment_method,
        status=body.status,
    )


@router.post("/clients/self-register", response_model=ClientResponse, status_code=201)
def self_register_client(
    body: SelfRegistrationPayload,
    request: Request,
    db: Session = Depends(get_db),
    financing_options: Dict[int, FinancingOption] = Depends(get_financing_options),
):
    """
    Client-facing registration.

    No down payment is taken and the first due date follows the billing day.
    Without a contract value there is nothing to bill, so the client starts
    completed.
    """
    _validate_plan(body.contract_value, body.financing_plan, financing_options)

    return _persist_new_client(
        db,
        get_request_id(request),
        "client_self_registered",
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        phone_number=body.phone_number,
        terms=ContractTerms(
            contract_value=body.contract_value,
            apply_iva=body.apply_iva,
            down_payment_percentage=ZERO,
            financing_plan_key=body.financing_plan,
        ),
        payment_day_of_month=body.payment_day_of_month,
        financing_options=financing_options,
    )


@router.get("/clients", response_model=ClientListResponse)
def list_clients(
    status: Optional[ClientStatus] = Query(None, description="Filter by lifecycle status"),
    db: Session = Depends(get_db),
):
    """Clients, newest first"""
    rows = ClientRepository(db).list_clients(status=status)
    return ClientListResponse(clients=[client_response(row) for row in rows])


@router.get("/clients/{client_id}", response_model=ClientResponse)
def get_client(client_id: str, db: Session = Depends(get_db)):
    try:
        row = ClientRepository(db).get_client(parse_uuid(client_id))
    except ClientNotFoundError:
        raise HTTPException(status_code=404, detail="Client not found")
    return client_response(row)


@router.put("/clients/{client_id}", response_model=ClientResponse)
def update_client(
    client_id: str,
    body: ClientPayload,
    request: Request,
    db: Session = Depends(get_db),
    financing_options: Dict[int, FinancingOption] = Depends(get_financing_options),
):
    """Replace a client's details; the financing breakdown is recomputed before saving"""
    request_id = get_request_id(request)
    client_uuid = parse_uuid(client_id)
    _validate_payload(body, financing_options)

    try:
        row = ClientRepository(db).update_client(
            client_uuid,
            first_name=body.first_name,
            last_name=body.last_name,
            email=body.email,
            phone_number=body.phone_number,
            terms=terms_from_schema(body),
            payment_day_of_month=body.payment_day_of_month,
            financing_options=financing_options,
            payment_amount=body.payment_amount,
            next_payment_date=body.next_payment_date,
            payment_method=body.payment_method,
            status=body.status,
        )
        db.commit()
        db.refresh(row)

    except ClientNotFoundError:
        db.rollback()
        raise HTTPException(status_code=404, detail="Client not found")

    except DuplicateClientEmailError as e:
        db.rollback()
        logging.warning(f"Duplicate client email: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error updating client: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    log_client_event(request_id, str(row.id), "client_updated", row.status, row.payment_amount, row.financing_plan)
    return client_response(row)


@router.delete("/clients/{client_id}", status_code=204)
def delete_client(client_id: str, request: Request, db: Session = Depends(get_db)):
    """Delete a client and its payment history"""
    request_id = get_request_id(request)
    try:
        ClientRepository(db).delete_client(parse_uuid(client_id))
        db.commit()
    except ClientNotFoundError:
        db.rollback()
        raise HTTPException(status_code=404, detail="Client not found")

    logging.info("Client deleted", extra={"request_id": request_id, "client_id": client_id})
    return Response(status_code=204)
