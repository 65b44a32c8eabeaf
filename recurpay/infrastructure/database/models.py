"""SQLAlchemy ORM models for clients, payments and financing settings"""

import uuid
from decimal import Decimal
from sqlalchemy import Column, String, Boolean, Numeric, DateTime, Date, Integer, ForeignKey, Text, Uuid
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func
from sqlalchemy.types import TypeDecorator

Base = declarative_base()

Money = Numeric(18, 4)
Rate = Numeric(8, 6)


class ExactDecimal(TypeDecorator):
    """
    Decimal stored without a fixed scale.

    Contract terms and the unrounded breakdown figures must read back exactly
    as computed. PostgreSQL gets an unconstrained NUMERIC; SQLite has no exact
    numeric type, so the value is kept as its decimal string.
    """

    impl = Numeric
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(64))
        return dialect.type_descriptor(Numeric(asdecimal=True))

    def process_bind_param(self, value, dialect):
        if value is None or dialect.name != "sqlite":
            return value
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, Decimal):
            return value
        return Decimal(value)


class ClientRecord(Base):
    """Client with contract terms and the financing breakdown cached on write"""

    __tablename__ = "clients"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(Text, nullable=False, unique=True, index=True)
    phone_number = Column(String(20), nullable=False)
    payment_method = Column(Text, nullable=True)

    # Contract terms
    contract_value = Column(ExactDecimal, nullable=False, default=0)
    apply_iva = Column(Boolean, nullable=False, default=True)
    down_payment_percentage = Column(ExactDecimal, nullable=False, default=0)
    financing_plan = Column(Integer, nullable=False, default=0)

    # Denormalized breakdown
    iva_rate = Column(Rate, nullable=False, default=0)
    iva_amount = Column(ExactDecimal, nullable=False, default=0)
    total_with_iva = Column(ExactDecimal, nullable=False, default=0)
    down_payment = Column(ExactDecimal, nullable=False, default=0)
    amount_to_finance = Column(ExactDecimal, nullable=False, default=0)
    financing_interest_rate_applied = Column(Rate, nullable=False, default=0)
    financing_interest_amount = Column(ExactDecimal, nullable=False, default=0)
    total_amount_with_interest = Column(ExactDecimal, nullable=False, default=0)

    # Billing
    payment_amount = Column(Money, nullable=False, default=0)
    payment_day_of_month = Column(Integer, nullable=False)
    next_payment_date = Column(Date, nullable=False)
    payments_made_count = Column(Integer, nullable=False, default=0)
    status = Column(Text, nullable=False, default="active", index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    payments = relationship(
        "PaymentRecordRow",
        back_populates="client",
        cascade="all, delete-orphan",
        order_by="PaymentRecordRow.payment_date",
    )


class PaymentRecordRow(Base):
    """Proof-of-payment submission awaiting or past admin review"""

    __tablename__ = "payment_records"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    client_id = Column(Uuid(as_uuid=True), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    payment_date = Column(Date, nullable=False)
    amount_paid = Column(Money, nullable=False)
    status = Column(Text, nullable=True, default="pending")  # NULL on legacy rows, read as validated
    notes = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    recorded_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    client = relationship("ClientRecord", back_populates="payments")


class FinancingPlanSetting(Base):
    """Admin-configurable interest rate per financing term"""

    __tablename__ = "financing_plan_settings"

    months = Column(Integer, primary_key=True, autoincrement=False)
    label = Column(Text, nullable=False)
    rate = Column(Rate, nullable=False, default=0)
