"""Dependency injection for FastAPI endpoints"""

import uuid
from typing import Dict
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session
from recurpay.domain.models import FinancingOption
from recurpay.infrastructure.database.repositories import FinancingSettingsRepository
from recurpay.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def parse_uuid(value: str, entity: str = "client") -> uuid.UUID:
    """Path id to UUID, 400 when malformed"""
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {entity} ID format")


def get_financing_options(db: Session = Depends(get_db)) -> Dict[int, FinancingOption]:
    """Financing catalog for the calculator, read per request"""
    return FinancingSettingsRepository(db).get_options()
