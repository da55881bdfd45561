"""Recompute orchestration and input transitions.

:func:`recalculate` turns one :class:`~homecalc.models.InputSnapshot` into a
:class:`~homecalc.models.ResultsBundle`.  The action models describe every way
the inputs can change; :func:`transition` applies one and recomputes.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, Union

from pydantic import BaseModel, ConfigDict

from .calculators import (
    calculate_affordability,
    calculate_extra_payments,
    calculate_piti,
    calculate_pmi_timeline,
    calculate_rent_vs_buy,
    calculate_tax_benefits,
    calculate_upfront_costs,
    calculate_year1_interest,
    generate_amortization_schedule,
)
from .models import DEFAULT_INPUTS, InputSnapshot, ResultsBundle
from .presets import DEFAULT_TAX_YEAR, MORTGAGE_INTEREST_LOAN_CAP
from .taxes import (
    estimate_state_tax,
    federal_marginal_rate,
    federal_standard_deduction,
    homestead_savings,
    salt_cap,
    state_marginal_rate,
)

logger = logging.getLogger(__name__)

_YEAR_PREFIX = re.compile(r"\s*([+-]?\d+)")


def _parse_year(value: str) -> int:
    # Leading integer only, so "2024.5" and "2024 (est)" read as 2024.
    match = _YEAR_PREFIX.match(str(value))
    if match is None:
        logger.debug("unparsable tax year %r, using %s", value, DEFAULT_TAX_YEAR)
        return DEFAULT_TAX_YEAR
    return int(match.group(1)) or DEFAULT_TAX_YEAR


def effective_down_payment_percent(inputs: InputSnapshot) -> float:
    if inputs.down_payment_mode == "amount" and inputs.purchase_price > 0:
        return inputs.down_payment_amount / inputs.purchase_price * 100
    return inputs.down_payment_percent


def recalculate(inputs: InputSnapshot) -> ResultsBundle:
    """Derive every result from ``inputs`` in one pass."""

    dp_pct = effective_down_payment_percent(inputs)
    year = _parse_year(inputs.tax_year)
    logger.debug(
        "recalculate price=%s dp=%.2f%% rate=%s state=%s year=%s",
        inputs.purchase_price, dp_pct, inputs.interest_rate, inputs.selected_state, year,
    )

    piti = calculate_piti(
        inputs.purchase_price,
        dp_pct,
        inputs.interest_rate,
        inputs.loan_term,
        inputs.property_tax_rate,
        mello_roos=inputs.mello_roos,
        insurance=inputs.insurance,
        hoa=inputs.hoa,
        pmi_rate=inputs.pmi_rate,
        maintenance=inputs.maintenance,
        utilities=inputs.utilities,
        extra_monthly=inputs.extra_monthly,
        lump_sum=inputs.lump_sum,
    )

    upfront = calculate_upfront_costs(
        inputs.purchase_price,
        piti.loan_amount,
        piti.down_payment,
        piti.effective_lump_sum,
        inputs.interest_rate,
        inputs.insurance,
        piti.monthly_property_tax,
        piti.monthly_insurance,
        inputs.hoa,
    )

    year1_interest = calculate_year1_interest(
        piti.effective_loan_amount, inputs.interest_rate, piti.monthly_pi, inputs.extra_monthly
    )

    income = inputs.annual_income
    status = inputs.filing_status
    state = inputs.selected_state
    federal_rate = federal_marginal_rate(income, status, year)
    state_rate = state_marginal_rate(income, status, state, year)
    state_tax = estimate_state_tax(income, status, state, year)
    homestead = homestead_savings(state, inputs.purchase_price, inputs.property_tax_rate)
    std_deduction = federal_standard_deduction(status, year)

    tax = calculate_tax_benefits(
        year1_interest,
        piti.effective_loan_amount,
        inputs.purchase_price,
        inputs.property_tax_rate,
        state_tax,
        federal_rate,
        state_rate,
        std_deduction,
        salt_cap(year, income),
        homestead_savings=homestead,
    )

    amortization = generate_amortization_schedule(
        inputs.purchase_price,
        piti.effective_loan_amount,
        piti.effective_lump_sum,
        piti.down_payment,
        inputs.interest_rate,
        inputs.loan_term,
        inputs.appreciation,
        inputs.extra_monthly,
        piti.monthly_pi,
        loan_type=inputs.loan_type,
        arm_adjustment=inputs.arm_adjustment,
        arm_cap=inputs.arm_cap,
        deductible_loan=min(piti.effective_loan_amount, MORTGAGE_INTEREST_LOAN_CAP),
        deductible_salt=tax.deductible_salt,
        standard_deduction=std_deduction,
        itemized_without_home=tax.itemized_without_home,
        would_itemize_without_home=tax.would_itemize_without_home,
        federal_rate=tax.federal_rate,
        state_rate=tax.state_rate,
        homestead_savings=homestead,
    )

    affordability = calculate_affordability(
        income,
        inputs.interest_rate,
        inputs.loan_term,
        inputs.property_tax_rate,
        inputs.insurance,
        hoa=inputs.hoa,
        pmi_rate=inputs.pmi_rate,
        maintenance=inputs.maintenance,
        utilities=inputs.utilities,
        down_payment_percent=dp_pct,
        down_payment_mode=inputs.down_payment_mode,
        down_payment_amount=inputs.down_payment_amount if inputs.down_payment_mode == "amount" else None,
    )

    rent_vs_buy = calculate_rent_vs_buy(
        inputs.rent_amount,
        inputs.rent_increase,
        inputs.invest_return,
        piti.down_payment,
        piti.true_monthly_cost,
        [entry.total_equity for entry in amortization],
    )

    extra_payments = calculate_extra_payments(
        piti.loan_amount,
        inputs.interest_rate,
        inputs.loan_term,
        extra_monthly=inputs.extra_monthly,
        lump_sum=inputs.lump_sum,
    )

    pmi = calculate_pmi_timeline(
        piti.loan_amount,
        inputs.purchase_price,
        piti.monthly_pi,
        inputs.interest_rate,
        inputs.appreciation,
        dp_pct,
        extra_monthly=inputs.extra_monthly,
        pmi_rate=inputs.pmi_rate,
    )

    return ResultsBundle(
        piti=piti,
        upfront_costs=upfront,
        amortization=amortization,
        affordability=affordability,
        rent_vs_buy=rent_vs_buy,
        tax_benefits=tax,
        extra_payments=extra_payments,
        pmi_timeline=pmi,
        year1_interest=year1_interest,
        federal_tax_rate=federal_rate,
        state_tax_rate=state_rate,
        state_income_tax=state_tax,
    )


# --- actions ----------------------------------------------------------------


class _Action(BaseModel):
    model_config = ConfigDict(frozen=True)


class SetInput(_Action):
    field: str
    value: Any


class SetStateCounty(_Action):
    """Pick a state and county; the county's rate becomes the property tax rate."""

    state: str
    county: str
    tax_rate: float


class LoadScenario(_Action):
    inputs: InputSnapshot


class LoadFromUrl(_Action):
    # Partial inputs decoded from a shared link.
    params: Dict[str, Any]


class Reset(_Action):
    pass


Action = Union[SetInput, SetStateCounty, LoadScenario, LoadFromUrl, Reset]


def _merge(inputs: InputSnapshot, updates: Dict[str, Any]) -> InputSnapshot:
    unknown = sorted(set(updates) - set(InputSnapshot.model_fields))
    if unknown:
        raise ValueError(f"Unknown input field(s): {', '.join(unknown)}")
    return InputSnapshot.model_validate({**inputs.model_dump(), **updates})


def apply_action(inputs: InputSnapshot, action: Action) -> InputSnapshot:
    """Return the inputs that result from ``action``.  ``inputs`` is untouched."""

    if isinstance(action, SetInput):
        return _merge(inputs, {action.field: action.value})
    if isinstance(action, SetStateCounty):
        return _merge(
            inputs,
            {
                "selected_state": action.state,
                "selected_county": action.county,
                "property_tax_rate": action.tax_rate,
            },
        )
    if isinstance(action, LoadScenario):
        return action.inputs
    if isinstance(action, LoadFromUrl):
        return _merge(inputs, action.params)
    if isinstance(action, Reset):
        return DEFAULT_INPUTS
    raise TypeError(f"Unsupported action: {type(action).__name__}")


class CalculatorState(BaseModel):
    model_config = ConfigDict(frozen=True)

    inputs: InputSnapshot
    results: ResultsBundle


def transition(state: CalculatorState, action: Action) -> CalculatorState:
    inputs = apply_action(state.inputs, action)
    return CalculatorState(inputs=inputs, results=recalculate(inputs))


def initial_state() -> CalculatorState:
    return CalculatorState(inputs=DEFAULT_INPUTS, results=recalculate(DEFAULT_INPUTS))
