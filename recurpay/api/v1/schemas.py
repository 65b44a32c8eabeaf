"""Pydantic schemas for API request/response validation"""

from datetime import date
from decimal import Decimal
from typing import List, Literal, Optional
from pydantic import BaseModel, EmailStr, Field

ClientStatus = Literal["active", "completed", "defaulted", "pending_approval"]


class ContractTermsSchema(BaseModel):
    """Contract inputs shared by quotes and client writes"""

    contract_value: Decimal = Field(Decimal("0"), ge=0, description="Contract value before IVA; 0 for recurring services")
    apply_iva: bool = True
    down_payment_percentage: Decimal = Field(Decimal("0"), ge=0, le=100)
    financing_plan: int = Field(0, ge=0, description="Term in months; 0 means no financing")


class FinancingBreakdownSchema(BaseModel):
    iva_rate: Decimal
    iva_amount: Decimal
    total_with_iva: Decimal
    down_payment: Decimal
    amount_to_finance: Decimal
    interest_rate_applied: Decimal
    interest_amount: Decimal
    total_with_interest: Decimal
    monthly_installment: Decimal


class FinancingQuoteResponse(BaseModel):
    """Response for POST /v1/financing/quote"""

    terms: ContractTermsSchema
    breakdown: FinancingBreakdownSchema


class FinancingOptionSchema(BaseModel):
    months: int = Field(..., ge=0)
    label: str = Field(..., min_length=1)
    rate: Decimal = Field(..., ge=0, le=1, description="Decimal fraction, 0.05 for 5%")


class FinancingOptionsPayload(BaseModel):
    """Body and response of /v1/financing/options"""

    plans: List[FinancingOptionSchema]


class ClientPayload(ContractTermsSchema):
    """Request body for POST /v1/clients and PUT /v1/clients/{id}"""

    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    phone_number: str = Field(..., min_length=7, max_length=15, pattern=r"^\+?[0-9\s\-()]+$")
    payment_method: Optional[str] = None
    payment_day_of_month: int = Field(..., ge=1, le=31)
    payment_amount: Optional[Decimal] = Field(None, gt=0, description="Recurring amount when there is no contract value")
    next_payment_date: Optional[date] = None
    status: Optional[ClientStatus] = None


class SelfRegistrationPayload(BaseModel):
    """Request body for POST /v1/clients/self-register (no down payment)"""

    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    phone_number: str = Field(..., min_length=7, max_length=15, pattern=r"^\+?[0-9\s\-()]+$")
    contract_value: Decimal = Field(Decimal("0"), ge=0)
    apply_iva: bool = True
    financing_plan: int = Field(0, ge=0)
    payment_day_of_month: int = Field(..., ge=1, le=31)


class ClientResponse(BaseModel):
    client_id: str
    first_name: str
    last_name: str
    email: str
    phone_number: str
    payment_method: Optional[str] = None
    contract_value: Decimal
    apply_iva: bool
    down_payment_percentage: Decimal
    financing_plan: int
    breakdown: FinancingBreakdownSchema
    payment_amount: Decimal
    payment_day_of_month: int
    next_payment_date: date
    payments_made_count: int
    status: ClientStatus
    created_at: str


class ClientListResponse(BaseModel):
    clients: List[ClientResponse]


class PendingInstallmentSchema(BaseModel):
    number: int
    due_date: date
    amount: Decimal
    status: Literal["pending", "overdue"]
    description: str


class PendingInstallmentsResponse(BaseModel):
    """Response for GET /v1/clients/{id}/installments/pending"""

    client_id: str
    plan_shape: str
    total_pending: Decimal
    overdue_count: int
    installments: List[PendingInstallmentSchema]


class PaymentSchema(BaseModel):
    payment_id: str
    client_id: str
    payment_date: date
    amount_paid: Decimal
    status: str
    notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    recorded_at: str


class ScheduledInstallmentSchema(BaseModel):
    number: int
    due_date: date
    amount: Decimal
    status: Literal["paid", "pending", "overdue"]
    remaining_balance: Decimal
    payment_id: Optional[str] = None
    amount_paid: Optional[Decimal] = None


class ScheduleResponse(BaseModel):
    """Response for GET /v1/clients/{id}/installments/schedule"""

    client_id: str
    plan_shape: str
    installments: List[ScheduledInstallmentSchema]


class ProgressResponse(BaseModel):
    """Response for GET /v1/clients/{id}/progress"""

    client_id: str
    total_installments: int
    paid_installments: int
    remaining_installments: int
    total_amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    progress_percentage: float


class PaymentSubmission(BaseModel):
    """Request body for POST /v1/clients/{id}/payments"""

    payment_date: date
    amount_paid: Decimal = Field(..., gt=0)
    notes: Optional[str] = Field(None, max_length=500)


class PaymentRegistration(BaseModel):
    """Optional body for POST /v1/clients/{id}/payments/register; the amount is the client's payment amount"""

    payment_date: Optional[date] = Field(None, description="Defaults to today")
    notes: Optional[str] = Field(None, max_length=500)


class PaymentListResponse(BaseModel):
    payments: List[PaymentSchema]


class RejectionRequest(BaseModel):
    """Request body for POST /v1/payments/{id}/reject"""

    reason: str = Field(..., min_length=1, max_length=500)


class PaymentReviewResponse(BaseModel):
    """Response for payment validate/reject"""

    payment: PaymentSchema
    payments_made_count: int
    next_payment_date: date
    client_status: ClientStatus


class ReminderSchema(BaseModel):
    client_id: str
    email: str
    full_name: str
    payment_amount: Decimal
    due_date: date
    days_until_due: int
    urgency: Literal["overdue", "due_today", "due_tomorrow", "due_soon"]


class RemindersResponse(BaseModel):
    """Response for GET /v1/reminders/due"""

    as_of: date
    window_days: int
    reminders: List[ReminderSchema]
