"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

ZERO = Decimal("0")

# Client lifecycle
STATUS_ACTIVE = "active"
STATUS_COMPLETED = "completed"
STATUS_DEFAULTED = "defaulted"
STATUS_PENDING_APPROVAL = "pending_approval"
CLIENT_STATUSES = (STATUS_ACTIVE, STATUS_COMPLETED, STATUS_DEFAULTED, STATUS_PENDING_APPROVAL)

# Payment record review states
PAYMENT_PENDING = "pending"
PAYMENT_VALIDATED = "validated"
PAYMENT_REJECTED = "rejected"

# Plan shapes
PLAN_FINANCING = "financing"
PLAN_SINGLE_PAYMENT = "single_payment"
PLAN_RECURRING = "recurring"


@dataclass(frozen=True)
class FinancingOption:
    """Entry of the financing plan catalog, keyed by term in months"""

    rate: Decimal  # decimal fraction, 0.08 == 8%
    label: str


@dataclass
class ContractTerms:
    """Contract inputs for the financing calculator"""

    contract_value: Decimal = ZERO
    apply_iva: bool = True
    down_payment_percentage: Decimal = ZERO
    financing_plan_key: int = 0


@dataclass
class FinancingBreakdown:
    """Derived contract figures; only monthly_installment is rounded"""

    iva_rate: Decimal = ZERO
    iva_amount: Decimal = ZERO
    total_with_iva: Decimal = ZERO
    down_payment: Decimal = ZERO
    amount_to_finance: Decimal = ZERO
    interest_rate_applied: Decimal = ZERO
    interest_amount: Decimal = ZERO
    total_with_interest: Decimal = ZERO
    monthly_installment: Decimal = ZERO


@dataclass
class Client:
    """Snapshot of a client and its denormalized contract figures"""

    next_payment_date: date
    payment_amount: Decimal = ZERO
    payment_day_of_month: int = 1
    contract_value: Decimal = ZERO
    apply_iva: bool = True
    down_payment_percentage: Decimal = ZERO
    financing_plan: int = 0
    breakdown: FinancingBreakdown = field(default_factory=FinancingBreakdown)
    payments_made_count: int = 0
    status: str = STATUS_ACTIVE
    id: Optional[str] = None
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    created_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass
class PaymentRecord:
    """Payment submitted by or registered for a client"""

    payment_date: date
    amount_paid: Decimal
    status: Optional[str] = PAYMENT_PENDING  # None on records predating proof validation
    recorded_at: Optional[datetime] = None
    id: Optional[str] = None

    @property
    def is_validated(self) -> bool:
        return self.status is None or self.status == PAYMENT_VALIDATED


@dataclass
class PendingInstallment:
    """Upcoming obligation, recomputed on every read"""

    number: int
    due_date: date
    amount: Decimal
    status: str  # "pending" or "overdue"
    description: str


@dataclass
class ScheduledInstallment:
    """Installment of the reconstructed full schedule"""

    number: int
    due_date: date
    amount: Decimal
    status: str  # "paid", "pending" or "overdue"
    remaining_balance: Decimal
    payment: Optional[PaymentRecord] = None


@dataclass
class PaymentProgress:
    """Aggregate progress of a client's plan"""

    total_installments: int
    paid_installments: int
    remaining_installments: int
    total_amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    progress_percentage: float


@dataclass
class ClientAdvance:
    """Client fields after a validated payment is applied"""

    payments_made_count: int
    next_payment_date: date
    status: str


@dataclass
class PaymentReminder:
    """Client whose payment falls inside the reminder window"""

    client_id: Optional[str]
    email: str
    full_name: str
    payment_amount: Decimal
    due_date: date
    days_until_due: int
    urgency: str
