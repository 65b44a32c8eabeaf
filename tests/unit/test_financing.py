"""Unit tests for the financing calculator"""

import pytest
from decimal import Decimal
from recurpay.domain.financing import (
    DEFAULT_FINANCING_OPTIONS,
    compute_financing,
    resolve_initial_status,
    resolve_payment_amount,
)
from recurpay.domain.models import ContractTerms, FinancingOption


def test_compute_financing_reference_contract():
    """1,000,000 + IVA, 10% down, 6 months at 8%"""
    terms = ContractTerms(
        contract_value=Decimal("1000000"),
        apply_iva=True,
        down_payment_percentage=Decimal("10"),
        financing_plan_key=6,
    )
    breakdown = compute_financing(terms, DEFAULT_FINANCING_OPTIONS)

    assert breakdown.iva_rate == Decimal("0.19")
    assert breakdown.iva_amount == Decimal("190000")
    assert breakdown.total_with_iva == Decimal("1190000")
    assert breakdown.down_payment == Decimal("119000")
    assert breakdown.amount_to_finance == Decimal("1071000")
    assert breakdown.interest_rate_applied == Decimal("0.08")
    assert breakdown.interest_amount == Decimal("85680")
    assert breakdown.total_with_interest == Decimal("1156680")
    assert breakdown.monthly_installment == Decimal("192780.00")


@pytest.mark.parametrize("value", ["1", "123456.78", "2500000", "999999.99"])
def test_iva_is_exactly_nineteen_percent(value):
    contract_value = Decimal(value)
    breakdown = compute_financing(ContractTerms(contract_value=contract_value, apply_iva=True))

    assert breakdown.iva_amount == contract_value * Decimal("0.19")
    assert breakdown.total_with_iva == contract_value * Decimal("1.19")


def test_without_iva_total_is_contract_value():
    breakdown = compute_financing(ContractTerms(contract_value=Decimal("800000"), apply_iva=False))

    assert breakdown.iva_rate == 0
    assert breakdown.iva_amount == 0
    assert breakdown.total_with_iva == Decimal("800000")


def test_zero_contract_short_circuits_to_zeros():
    """No contract -> recurring service, nothing is derived"""
    terms = ContractTerms(
        contract_value=Decimal("0"),
        apply_iva=True,
        down_payment_percentage=Decimal("50"),
        financing_plan_key=12,
    )
    breakdown = compute_financing(terms)

    assert all(value == 0 for value in vars(breakdown).values())


def test_no_financing_bills_total_once():
    terms = ContractTerms(contract_value=Decimal("500000"), apply_iva=True, financing_plan_key=0)
    breakdown = compute_financing(terms)

    assert breakdown.monthly_installment == Decimal("595000")
    assert breakdown.interest_rate_applied == 0
    assert breakdown.interest_amount == 0
    assert breakdown.total_with_interest == 0


def test_installment_rounds_to_cents_and_keeps_residual():
    """110,000 over 9 months -> 12,222.22; the 2 cent gap is not corrected"""
    terms = ContractTerms(contract_value=Decimal("100000"), apply_iva=False, financing_plan_key=9)
    breakdown = compute_financing(terms)

    assert breakdown.total_with_interest == Decimal("110000")
    assert breakdown.monthly_installment == Decimal("12222.22")
    assert breakdown.monthly_installment * 9 == Decimal("109999.98")


def test_installment_rounds_half_up():
    options = {3: FinancingOption(rate=Decimal("0"), label="3 meses")}
    terms = ContractTerms(contract_value=Decimal("100.05"), apply_iva=False, financing_plan_key=3)

    # 100.05 / 3 = 33.35
    assert compute_financing(terms, options).monthly_installment == Decimal("33.35")

    terms.contract_value = Decimal("0.05")
    # 0.05 / 3 = 0.01666.. -> 0.02
    assert compute_financing(terms, options).monthly_installment == Decimal("0.02")


def test_rates_given_as_floats_use_their_decimal_text():
    options = {6: FinancingOption(rate=0.08, label="6 meses")}
    terms = ContractTerms(contract_value=Decimal("1000000"), apply_iva=False, financing_plan_key=6)

    breakdown = compute_financing(terms, options)

    assert breakdown.interest_rate_applied == Decimal("0.08")
    assert breakdown.interest_amount == Decimal("80000")


def test_unknown_plan_degrades_to_zero_installment():
    terms = ContractTerms(contract_value=Decimal("1000000"), apply_iva=True, financing_plan_key=24)
    breakdown = compute_financing(terms, DEFAULT_FINANCING_OPTIONS)

    assert breakdown.amount_to_finance == Decimal("1190000")
    assert breakdown.interest_amount == 0
    assert breakdown.monthly_installment == 0


def test_full_down_payment_leaves_nothing_to_finance():
    terms = ContractTerms(
        contract_value=Decimal("1000000"),
        apply_iva=True,
        down_payment_percentage=Decimal("100"),
        financing_plan_key=6,
    )
    breakdown = compute_financing(terms)

    assert breakdown.down_payment == Decimal("1190000")
    assert breakdown.amount_to_finance == 0
    assert breakdown.monthly_installment == 0
    assert resolve_initial_status(terms, breakdown, breakdown.monthly_installment) == "completed"


def test_negative_and_missing_inputs_are_treated_as_zero():
    terms = ContractTerms(
        contract_value=Decimal("200000"),
        apply_iva=False,
        down_payment_percentage=None,
        financing_plan_key=3,
    )
    breakdown = compute_financing(terms)
    assert breakdown.down_payment == 0
    assert breakdown.amount_to_finance == Decimal("200000")

    assert all(value == 0 for value in vars(compute_financing(ContractTerms(contract_value=Decimal("-5")))).values())


def test_down_payment_percentage_is_capped_at_hundred():
    terms = ContractTerms(contract_value=Decimal("100000"), apply_iva=False, down_payment_percentage=Decimal("150"))
    breakdown = compute_financing(terms)

    assert breakdown.down_payment == Decimal("100000")
    assert breakdown.amount_to_finance == 0


def test_payment_amount_comes_from_calculator_for_contracts():
    terms = ContractTerms(contract_value=Decimal("1000000"), down_payment_percentage=Decimal("10"), financing_plan_key=6)
    breakdown = compute_financing(terms)

    assert resolve_payment_amount(terms, breakdown, supplied_amount=Decimal("1")) == Decimal("192780.00")


def test_payment_amount_is_supplied_for_recurring_services():
    terms = ContractTerms(contract_value=Decimal("0"))
    breakdown = compute_financing(terms)

    assert resolve_payment_amount(terms, breakdown, supplied_amount=Decimal("50000")) == Decimal("50000")
    assert resolve_payment_amount(terms, breakdown) == 0


def test_initial_status():
    recurring = ContractTerms(contract_value=Decimal("0"))
    assert resolve_initial_status(recurring, compute_financing(recurring), Decimal("50000")) == "active"
    assert resolve_initial_status(recurring, compute_financing(recurring), Decimal("0")) == "completed"

    financed = ContractTerms(contract_value=Decimal("1000000"), financing_plan_key=6)
    breakdown = compute_financing(financed)
    assert resolve_initial_status(financed, breakdown, breakdown.monthly_installment) == "active"
