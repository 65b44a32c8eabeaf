"""Financing calculator - contract value to IVA, down payment, interest and installment"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Mapping
from recurpay.domain.models import (
    ContractTerms,
    FinancingBreakdown,
    FinancingOption,
    STATUS_ACTIVE,
    STATUS_COMPLETED,
    ZERO,
)

IVA_RATE = Decimal("0.19")

DEFAULT_FINANCING_OPTIONS: Dict[int, FinancingOption] = {
    0: FinancingOption(rate=Decimal("0"), label="Sin financiación"),
    3: FinancingOption(rate=Decimal("0.05"), label="3 meses"),
    6: FinancingOption(rate=Decimal("0.08"), label="6 meses"),
    9: FinancingOption(rate=Decimal("0.10"), label="9 meses"),
    12: FinancingOption(rate=Decimal("0.12"), label="12 meses"),
}

CENTS = Decimal("0.01")
HUNDRED = Decimal("100")


def to_amount(value) -> Decimal:
    """Coerce a numeric input to a non-negative Decimal (None/negative -> 0)"""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        # str() keeps floats like 0.08 from expanding to their binary value
        value = Decimal(str(value))
    return value if value > 0 else ZERO


def round2(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_financing(
    terms: ContractTerms,
    financing_options: Mapping[int, FinancingOption] = DEFAULT_FINANCING_OPTIONS,
) -> FinancingBreakdown:
    """
    Derive the financial breakdown of a contract.

    Steps:
    1. No contract value -> all zeros; the caller supplies the recurring amount
    2. IVA (19%) on the contract value when enabled
    3. Down payment as a percentage of the IVA-inclusive total
    4. Financed amount = total - down payment (never negative)
    5. Plan 0 -> single payment of the IVA-inclusive total
    6. Known plan with something to finance -> flat interest once on the
       financed amount, split evenly over the term (rounded to cents)
    7. Anything else -> zero installment (nothing left to finance or unknown plan)

    Interest is applied once, not compounded per period. Only the installment
    is rounded, so installment * months can differ from total_with_interest
    by a few cents.
    """
    contract_value = to_amount(terms.contract_value)
    if contract_value <= 0:
        return FinancingBreakdown(total_with_iva=contract_value)

    iva_rate = IVA_RATE if terms.apply_iva else ZERO
    iva_amount = contract_value * iva_rate
    total_with_iva = contract_value + iva_amount

    percentage = min(to_amount(terms.down_payment_percentage), HUNDRED)
    down_payment = total_with_iva * (percentage / HUNDRED)
    amount_to_finance = max(ZERO, total_with_iva - down_payment)

    breakdown = FinancingBreakdown(
        iva_rate=iva_rate,
        iva_amount=iva_amount,
        total_with_iva=total_with_iva,
        down_payment=down_payment,
        amount_to_finance=amount_to_finance,
    )

    plan_key = terms.financing_plan_key or 0
    if plan_key == 0:
        breakdown.monthly_installment = total_with_iva
        return breakdown

    option = financing_options.get(plan_key)
    if option is None or plan_key < 0 or amount_to_finance <= 0:
        return breakdown

    rate = to_amount(option.rate)
    breakdown.interest_rate_applied = rate
    breakdown.interest_amount = amount_to_finance * rate
    breakdown.total_with_interest = amount_to_finance + breakdown.interest_amount
    breakdown.monthly_installment = round2(breakdown.total_with_interest / Decimal(plan_key))
    return breakdown


def resolve_payment_amount(
    terms: ContractTerms,
    breakdown: FinancingBreakdown,
    supplied_amount=None,
) -> Decimal:
    """
    Authoritative periodic amount for a client.

    Contracts take the calculator's figure; recurring services (no contract
    value) keep the amount entered directly.
    """
    if to_amount(terms.contract_value) > 0:
        return breakdown.monthly_installment
    return to_amount(supplied_amount)


def resolve_initial_status(
    terms: ContractTerms,
    breakdown: FinancingBreakdown,
    payment_amount: Decimal,
) -> str:
    """Lifecycle status a client starts in after its terms are (re)computed"""
    if to_amount(terms.contract_value) > 0:
        # Fully covered by the down payment at signing
        return STATUS_COMPLETED if breakdown.amount_to_finance <= 0 else STATUS_ACTIVE
    return STATUS_ACTIVE if payment_amount > 0 else STATUS_COMPLETED
