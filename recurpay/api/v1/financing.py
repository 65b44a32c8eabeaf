"""Financing plan catalog and contract quotes"""

import logging
from dataclasses import asdict
from typing import Dict
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from recurpay.api.dependencies import get_financing_options, get_request_id
from recurpay.api.v1.schemas import (
    ContractTermsSchema,
    FinancingBreakdownSchema,
    FinancingOptionSchema,
    FinancingOptionsPayload,
    FinancingQuoteResponse,
)
from recurpay.domain.financing import compute_financing
from recurpay.domain.models import ContractTerms, FinancingOption
from recurpay.infrastructure.database.repositories import FinancingSettingsRepository
from recurpay.infrastructure.database.session import get_db
from recurpay.infrastructure.observability.metrics import record_financing_quote

router = APIRouter()


def terms_from_schema(body: ContractTermsSchema) -> ContractTerms:
    return ContractTerms(
        contract_value=body.contract_value,
        apply_iva=body.apply_iva,
        down_payment_percentage=body.down_payment_percentage,
        financing_plan_key=body.financing_plan,
    )


def options_payload(options: Dict[int, FinancingOption]) -> FinancingOptionsPayload:
    return FinancingOptionsPayload(
        plans=[
            FinancingOptionSchema(months=months, label=option.label, rate=option.rate)
            for months, option in sorted(options.items())
        ]
    )


@router.post("/financing/quote", response_model=FinancingQuoteResponse)
def quote_financing(
    body: ContractTermsSchema,
    financing_options: Dict[int, FinancingOption] = Depends(get_financing_options),
):
    """
    Compute the financing breakdown for contract terms without saving anything.

    Unknown plans are not rejected: they quote a zero installment.
    """
    breakdown = compute_financing(terms_from_schema(body), financing_options)
    record_financing_quote(body.financing_plan)
    return FinancingQuoteResponse(terms=body, breakdown=FinancingBreakdownSchema(**asdict(breakdown)))


@router.get("/financing/options", response_model=FinancingOptionsPayload)
def list_financing_options(financing_options: Dict[int, FinancingOption] = Depends(get_financing_options)):
    """Current financing catalog (defaults when none has been saved)"""
    return options_payload(financing_options)


@router.put("/financing/options", response_model=FinancingOptionsPayload)
def replace_financing_options(
    body: FinancingOptionsPayload,
    request: Request,
    db: Session = Depends(get_db),
):
    """Replace the catalog; existing clients keep the figures cached on them"""
    request_id = get_request_id(request)
    months = [plan.months for plan in body.plans]
    if len(months) != len(set(months)):
        raise HTTPException(status_code=422, detail="Duplicate financing term")

    try:
        options = FinancingSettingsRepository(db).replace_options(
            (plan.months, plan.label, plan.rate) for plan in body.plans
        )
        db.commit()
    except Exception as e:
        db.rollback()
        logging.error(f"Failed to save financing options: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    logging.info("Financing options updated", extra={"request_id": request_id, "plans": sorted(options)})
    return options_payload(options)
