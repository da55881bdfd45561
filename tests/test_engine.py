import math

import pytest
from pydantic import ValidationError

from homecalc.engine import (
    CalculatorState,
    LoadFromUrl,
    LoadScenario,
    Reset,
    SetInput,
    SetStateCounty,
    apply_action,
    initial_state,
    recalculate,
    transition,
)
from homecalc.models import DEFAULT_INPUTS, InputSnapshot


def test_initial_state_defaults():
    state = initial_state()
    assert state.inputs == DEFAULT_INPUTS
    res = state.results
    assert res.piti.loan_amount == 640000
    assert len(res.amortization) == 10
    assert len(res.rent_vs_buy.year_data) == 10
    assert res.affordability.max_purchase_price == 1572000
    assert res.federal_tax_rate == 32
    assert res.state_tax_rate == 9.3
    assert res.pmi_timeline.has_pmi is False
    assert res.tax_benefits.homestead_savings == pytest.approx(77)


def test_recalculate_is_deterministic():
    assert recalculate(DEFAULT_INPUTS) == recalculate(DEFAULT_INPUTS)


def test_results_are_wired_together():
    res = recalculate(DEFAULT_INPUTS)
    assert res.year1_interest == res.tax_benefits.total_interest_year1
    assert res.state_income_tax == pytest.approx(res.tax_benefits.total_salt - res.tax_benefits.annual_property_tax)
    assert [r.buyer_wealth for r in res.rent_vs_buy.year_data] == [
        math.floor(e.total_equity + 0.5) for e in res.amortization
    ]
    assert res.upfront_costs.total_cash_needed > res.piti.down_payment


def test_amount_mode_derives_percent():
    inputs = InputSnapshot(down_payment_mode="amount", down_payment_amount=80000)
    res = recalculate(inputs)
    assert res.piti.down_payment_percent == pytest.approx(10)
    assert res.piti.monthly_pmi > 0
    assert res.pmi_timeline.has_pmi is True
    assert res.affordability.max_purchase_price != recalculate(DEFAULT_INPUTS).affordability.max_purchase_price


def test_amount_mode_with_zero_price_keeps_percent():
    inputs = InputSnapshot(purchase_price=0, down_payment_mode="amount", down_payment_percent=15)
    assert recalculate(inputs).piti.down_payment_percent == 15


def test_unparsable_tax_year_uses_2025():
    bad = InputSnapshot(tax_year="next year")
    assert recalculate(bad).tax_benefits == recalculate(InputSnapshot(tax_year="2025")).tax_benefits


def test_tax_year_reads_leading_integer():
    assert recalculate(InputSnapshot(tax_year="2024.5")).tax_benefits == recalculate(InputSnapshot(tax_year="2024")).tax_benefits
    assert recalculate(InputSnapshot(tax_year=" 2024 (est)")).tax_benefits.salt_cap == 10000


def test_extreme_rate_does_not_raise():
    res = recalculate(InputSnapshot(interest_rate=9000))
    assert abs(res.piti.monthly_pi - 640000 * 7.5) < 1e-3
    assert len(res.amortization) == 10



def test_extra_payments_flow_through():
    res = recalculate(InputSnapshot(extra_monthly=500))
    assert res.extra_payments.has_extra_payments is True
    assert res.extra_payments.months_saved > 60
    assert res.piti.baseline_monthly_pi == res.piti.monthly_pi


def test_set_input_is_pure():
    updated = apply_action(DEFAULT_INPUTS, SetInput(field="purchase_price", value=900000))
    assert updated.purchase_price == 900000
    assert DEFAULT_INPUTS.purchase_price == 800000


def test_set_input_unknown_field():
    with pytest.raises(ValueError):
        apply_action(DEFAULT_INPUTS, SetInput(field="bogus", value=1))


def test_set_input_revalidates():
    with pytest.raises(ValidationError):
        apply_action(DEFAULT_INPUTS, SetInput(field="loan_type", value="9"))


def test_snapshot_is_frozen():
    with pytest.raises(ValidationError):
        DEFAULT_INPUTS.purchase_price = 1


def test_set_state_county():
    updated = apply_action(DEFAULT_INPUTS, SetStateCounty(state="TX", county="Harris", tax_rate=1.97))
    assert updated.selected_state == "TX"
    assert updated.selected_county == "Harris"
    assert updated.property_tax_rate == 1.97


def test_load_scenario_replaces_inputs():
    scenario = InputSnapshot(purchase_price=500000, loan_type="7")
    assert apply_action(DEFAULT_INPUTS, LoadScenario(inputs=scenario)) == scenario


def test_load_from_url_merges():
    updated = apply_action(DEFAULT_INPUTS, LoadFromUrl(params={"purchase_price": 650000, "loan_type": "5"}))
    assert updated.purchase_price == 650000
    assert updated.loan_type == "5"
    assert updated.interest_rate == DEFAULT_INPUTS.interest_rate


def test_load_from_url_rejects_unknown():
    with pytest.raises(ValueError):
        apply_action(DEFAULT_INPUTS, LoadFromUrl(params={"nope": 1}))


def test_reset():
    changed = InputSnapshot(purchase_price=1)
    assert apply_action(changed, Reset()) == DEFAULT_INPUTS


def test_transition_recomputes():
    state = initial_state()
    nxt = transition(state, SetStateCounty(state="TX", county="Harris", tax_rate=1.97))
    assert isinstance(nxt, CalculatorState)
    assert nxt.results == recalculate(nxt.inputs)
    assert nxt.results.state_tax_rate == 0
    assert nxt.results.state_income_tax == 0
    assert state.inputs.selected_state == "CA"
