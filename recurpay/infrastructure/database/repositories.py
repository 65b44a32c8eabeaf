"""Data access layer for clients, payments and financing settings"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from sqlalchemy.orm import Session
from recurpay.infrastructure.database.models import ClientRecord, PaymentRecordRow, FinancingPlanSetting
from recurpay.domain.exceptions import ClientNotFoundError, DuplicateClientEmailError, PaymentNotFoundError
from recurpay.domain.financing import (
    DEFAULT_FINANCING_OPTIONS,
    compute_financing,
    resolve_initial_status,
    resolve_payment_amount,
    to_amount,
)
from recurpay.domain.models import (
    Client,
    ClientAdvance,
    ContractTerms,
    FinancingBreakdown,
    FinancingOption,
    PaymentRecord,
    PAYMENT_PENDING,
    STATUS_ACTIVE,
    STATUS_COMPLETED,
)
from recurpay.utils.date_utils import next_payment_date_for_day


def client_to_domain(row: ClientRecord) -> Client:
    """Map an ORM row onto the domain snapshot used by the schedule functions"""
    return Client(
        id=str(row.id),
        first_name=row.first_name,
        last_name=row.last_name,
        email=row.email,
        contract_value=row.contract_value,
        apply_iva=row.apply_iva,
        down_payment_percentage=row.down_payment_percentage,
        financing_plan=row.financing_plan,
        breakdown=FinancingBreakdown(
            iva_rate=row.iva_rate,
            iva_amount=row.iva_amount,
            total_with_iva=row.total_with_iva,
            down_payment=row.down_payment,
            amount_to_finance=row.amount_to_finance,
            interest_rate_applied=row.financing_interest_rate_applied,
            interest_amount=row.financing_interest_amount,
            total_with_interest=row.total_amount_with_interest,
            monthly_installment=row.payment_amount if row.contract_value > 0 else Decimal("0"),
        ),
        payment_amount=row.payment_amount,
        payment_day_of_month=row.payment_day_of_month,
        next_payment_date=row.next_payment_date,
        payments_made_count=row.payments_made_count,
        status=row.status,
        created_at=row.created_at,
    )


def payment_to_domain(row: PaymentRecordRow) -> PaymentRecord:
    return PaymentRecord(
        id=str(row.id),
        payment_date=row.payment_date,
        amount_paid=row.amount_paid,
        status=row.status,
        recorded_at=row.recorded_at,
    )


class ClientRepository:
    """Repository for clients; contract figures are recomputed on every write"""

    def __init__(self, db: Session):
        self.db = db

    def _ensure_unique_email(self, email: str, client_id: uuid.UUID | None = None) -> None:
        existing = self.db.query(ClientRecord).filter(ClientRecord.email == email).first()
        if existing is not None and existing.id != client_id:
            raise DuplicateClientEmailError(f"Email {email} is already registered for another client")

    def _apply_terms(
        self,
        row: ClientRecord,
        terms: ContractTerms,
        financing_options: Dict[int, FinancingOption],
        supplied_amount: Optional[Decimal],
    ) -> FinancingBreakdown:
        """Recompute the breakdown and cache it on the row"""
        breakdown = compute_financing(terms, financing_options)

        row.contract_value = to_amount(terms.contract_value)
        row.apply_iva = terms.apply_iva
        row.down_payment_percentage = to_amount(terms.down_payment_percentage)
        row.financing_plan = terms.financing_plan_key or 0
        row.iva_rate = breakdown.iva_rate
        row.iva_amount = breakdown.iva_amount
        row.total_with_iva = breakdown.total_with_iva
        row.down_payment = breakdown.down_payment
        row.amount_to_finance = breakdown.amount_to_finance
        row.financing_interest_rate_applied = breakdown.interest_rate_applied
        row.financing_interest_amount = breakdown.interest_amount
        row.total_amount_with_interest = breakdown.total_with_interest
        row.payment_amount = resolve_payment_amount(terms, breakdown, supplied_amount)
        return breakdown

    @staticmethod
    def _close_paid_plan(row: ClientRecord) -> None:
        """A financing plan with every installment paid cannot stay active"""
        if row.status == STATUS_ACTIVE and 0 < row.financing_plan <= row.payments_made_count:
            row.status = STATUS_COMPLETED

    def create_client(
        self,
        first_name: str,
        last_name: str,
        email: str,
        phone_number: str,
        terms: ContractTerms,
        payment_day_of_month: int,
        financing_options: Dict[int, FinancingOption],
        payment_amount: Optional[Decimal] = None,
        next_payment_date: Optional[date] = None,
        payment_method: Optional[str] = None,
        status: Optional[str] = None,
    ) -> ClientRecord:
        """Persist a new client with its computed financing figures"""
        self._ensure_unique_email(email)

        row = ClientRecord(
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone_number=phone_number,
            payment_method=payment_method,
            payment_day_of_month=payment_day_of_month,
            next_payment_date=next_payment_date or next_payment_date_for_day(payment_day_of_month),
            payments_made_count=0,
        )
        breakdown = self._apply_terms(row, terms, financing_options, payment_amount)
        row.status = status or resolve_initial_status(terms, breakdown, row.payment_amount)
        self._close_paid_plan(row)

        self.db.add(row)
        self.db.flush()  # Get ID without committing
        return row

    def update_client(
        self,
        client_id: uuid.UUID,
        first_name: str,
        last_name: str,
        email: str,
        phone_number: str,
        terms: ContractTerms,
        payment_day_of_month: int,
        financing_options: Dict[int, FinancingOption],
        payment_amount: Optional[Decimal] = None,
        next_payment_date: Optional[date] = None,
        payment_method: Optional[str] = None,
        status: Optional[str] = None,
    ) -> ClientRecord:
        """
        Replace a client's details and terms.

        Creation date and payment count are kept. Without an explicit status,
        an active or completed client is re-derived from the new terms. Either
        way, an active financing plan whose term is already covered by the
        payments made is completed.
        """
        row = self.get_client(client_id)
        if email != row.email:
            self._ensure_unique_email(email, client_id)

        row.first_name = first_name
        row.last_name = last_name
        row.email = email
        row.phone_number = phone_number
        row.payment_method = payment_method
        row.payment_day_of_month = payment_day_of_month
        if next_payment_date is not None:
            row.next_payment_date = next_payment_date

        breakdown = self._apply_terms(row, terms, financing_options, payment_amount)

        if status is not None:
            row.status = status
        elif row.status in (STATUS_ACTIVE, STATUS_COMPLETED):
            row.status = resolve_initial_status(terms, breakdown, row.payment_amount)
        self._close_paid_plan(row)

        self.db.flush()
        return row

    def get_client(self, client_id: uuid.UUID) -> ClientRecord:
        row = self.db.query(ClientRecord).filter(ClientRecord.id == client_id).first()
        if row is None:
            raise ClientNotFoundError(f"Client {client_id} not found")
        return row

    def list_clients(self, status: Optional[str] = None) -> List[ClientRecord]:
        """Clients, newest first"""
        query = self.db.query(ClientRecord)
        if status is not None:
            query = query.filter(ClientRecord.status == status)
        return query.order_by(ClientRecord.created_at.desc()).all()

    def delete_client(self, client_id: uuid.UUID) -> None:
        row = self.get_client(client_id)
        self.db.delete(row)
        self.db.flush()

    def apply_advance(self, row: ClientRecord, advance: ClientAdvance) -> ClientRecord:
        row.payments_made_count = advance.payments_made_count
        row.next_payment_date = advance.next_payment_date
        row.status = advance.status
        self.db.flush()
        return row


class PaymentRepository:
    """Repository for payment records"""

    def __init__(self, db: Session):
        self.db = db

    def create_payment(
        self,
        client_id: uuid.UUID,
        payment_date: date,
        amount_paid: Decimal,
        notes: Optional[str] = None,
        status: str = PAYMENT_PENDING,
    ) -> PaymentRecordRow:
        row = PaymentRecordRow(
            client_id=client_id,
            payment_date=payment_date,
            amount_paid=amount_paid,
            notes=notes,
            status=status,
        )
        self.db.add(row)
        self.db.flush()
        return row

    def get_payment(self, payment_id: uuid.UUID) -> PaymentRecordRow:
        row = self.db.query(PaymentRecordRow).filter(PaymentRecordRow.id == payment_id).first()
        if row is None:
            raise PaymentNotFoundError(f"Payment {payment_id} not found")
        return row

    def list_for_client(self, client_id: uuid.UUID) -> List[PaymentRecordRow]:
        """Payment history ordered by payment date"""
        return (
            self.db.query(PaymentRecordRow)
            .filter(PaymentRecordRow.client_id == client_id)
            .order_by(PaymentRecordRow.payment_date.asc(), PaymentRecordRow.recorded_at.asc())
            .all()
        )

    def list_pending(self) -> List[PaymentRecordRow]:
        """Payments awaiting admin review, oldest submission first"""
        return (
            self.db.query(PaymentRecordRow)
            .filter(PaymentRecordRow.status == PAYMENT_PENDING)
            .order_by(PaymentRecordRow.recorded_at.asc())
            .all()
        )

    def set_status(self, row: PaymentRecordRow, status: str, reason: Optional[str] = None) -> PaymentRecordRow:
        row.status = status
        row.rejection_reason = reason
        row.reviewed_at = datetime.now(timezone.utc)
        self.db.flush()
        return row


class FinancingSettingsRepository:
    """Financing plan catalog with a built-in fallback"""

    def __init__(self, db: Session):
        self.db = db

    def get_options(self) -> Dict[int, FinancingOption]:
        """
        Current catalog keyed by months.

        Falls back to the default catalog when nothing is stored; the
        no-financing entry (0 months, 0%) is always present.
        """
        rows = self.db.query(FinancingPlanSetting).order_by(FinancingPlanSetting.months).all()
        if not rows:
            return dict(DEFAULT_FINANCING_OPTIONS)

        options = {row.months: FinancingOption(rate=row.rate, label=row.label) for row in rows}
        options.setdefault(0, DEFAULT_FINANCING_OPTIONS[0])
        return options

    def replace_options(self, options: Iterable[tuple[int, str, Decimal]]) -> Dict[int, FinancingOption]:
        """Replace the stored catalog with (months, label, rate) entries"""
        self.db.query(FinancingPlanSetting).delete()
        for months, label, rate in options:
            self.db.add(FinancingPlanSetting(months=months, label=label, rate=rate))
        self.db.flush()
        return self.get_options()
