from __future__ import annotations

import math
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .presets import (
    DEFAULT_ANNUAL_INCOME,
    DEFAULT_APPRECIATION_RATE,
    DEFAULT_ARM_ADJUSTMENT,
    DEFAULT_ARM_CAP,
    DEFAULT_COUNTY,
    DEFAULT_DOWN_PAYMENT_PERCENT,
    DEFAULT_INSURANCE,
    DEFAULT_INTEREST_RATE,
    DEFAULT_INVEST_RETURN,
    DEFAULT_LOAN_TERM,
    DEFAULT_MAINTENANCE_RATE,
    DEFAULT_PMI_RATE,
    DEFAULT_PROPERTY_TAX_RATE,
    DEFAULT_PURCHASE_PRICE,
    DEFAULT_RENT,
    DEFAULT_RENT_INCREASE,
    DEFAULT_STATE,
    DEFAULT_TAX_YEAR,
    DEFAULT_UTILITIES,
)

FilingStatus = Literal["single", "married_jointly", "head_of_household"]
LoanType = Literal["fixed", "3", "5", "7", "10"]
DownPaymentMode = Literal["percent", "amount"]


class Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# --- inputs -----------------------------------------------------------------


class InputSnapshot(Frozen):
    """Everything the user has entered.  Rates are percents (``6.5`` = 6.5%)."""

    selected_state: str = DEFAULT_STATE
    selected_county: str = DEFAULT_COUNTY
    purchase_price: float = DEFAULT_PURCHASE_PRICE
    down_payment_mode: DownPaymentMode = "percent"
    down_payment_percent: float = DEFAULT_DOWN_PAYMENT_PERCENT
    down_payment_amount: float = DEFAULT_PURCHASE_PRICE * DEFAULT_DOWN_PAYMENT_PERCENT / 100
    interest_rate: float = DEFAULT_INTEREST_RATE
    loan_term: int = DEFAULT_LOAN_TERM
    loan_type: LoanType = "fixed"
    arm_adjustment: float = DEFAULT_ARM_ADJUSTMENT
    arm_cap: float = DEFAULT_ARM_CAP
    property_tax_rate: float = DEFAULT_PROPERTY_TAX_RATE
    mello_roos: float = 0.0
    insurance: float = DEFAULT_INSURANCE
    hoa: float = 0.0
    pmi_rate: float = DEFAULT_PMI_RATE
    maintenance: float = DEFAULT_MAINTENANCE_RATE
    utilities: float = DEFAULT_UTILITIES
    tax_year: str = str(DEFAULT_TAX_YEAR)
    filing_status: FilingStatus = "married_jointly"
    annual_income: float = DEFAULT_ANNUAL_INCOME
    appreciation: float = DEFAULT_APPRECIATION_RATE
    extra_monthly: float = 0.0
    lump_sum: float = 0.0
    rent_amount: float = DEFAULT_RENT
    rent_increase: float = DEFAULT_RENT_INCREASE
    invest_return: float = DEFAULT_INVEST_RETURN


DEFAULT_INPUTS = InputSnapshot()


# --- results ----------------------------------------------------------------


class PITIResult(Frozen):
    monthly_pi: float
    baseline_monthly_pi: float
    monthly_property_tax: float
    monthly_mello_roos: float
    monthly_insurance: float
    monthly_hoa: float
    monthly_pmi: float
    monthly_maintenance: float
    monthly_utilities: float
    monthly_piti: float
    true_monthly_cost: float
    loan_amount: float
    effective_loan_amount: float
    effective_lump_sum: float
    down_payment: float
    down_payment_percent: float


class UpfrontCostsResult(Frozen):
    # Insertion order is display order.
    closing_costs: Dict[str, float]
    total_closing_costs: float
    escrow_reserve: float
    total_cash_needed: float


class AmortizationEntry(Frozen):
    year: int
    home_value: float
    remaining_mortgage: float
    equity_from_payments: float
    appreciation_gain: float
    total_equity: float
    cumulative_tax_savings: float
    total_wealth_impact: float
    year_interest: float
    year_principal: float
    rate: float
    monthly_payment: float


class WealthBuildingResult(Frozen):
    schedule: List[AmortizationEntry]
    home_value_10: float
    equity_10: float
    wealth_impact_10: float


class AffordabilityResult(Frozen):
    max_purchase_price: float
    target_piti: float
    gross_monthly_income: float
    used_fallback_income: bool


class RentVsBuyYearData(Frozen):
    year: int
    rent: float
    cumulative_rent: float
    buy_cost: float
    cumulative_buy: float
    buyer_wealth: float
    renter_wealth: float


class RentVsBuyResult(Frozen):
    year_data: List[RentVsBuyYearData]
    break_even_year: Optional[int] = None
    total_rent_cost: float
    total_buy_cost: float


class TaxBenefitsResult(Frozen):
    total_interest_year1: float
    deductible_interest: float
    annual_property_tax: float
    deductible_property_tax: float
    deductible_state_income: float
    total_salt: float
    deductible_salt: float
    salt_cap: float
    itemized_with_home: float
    itemized_without_home: float
    standard_deduction: float
    should_itemize: bool
    would_itemize_without_home: bool
    federal_tax_savings: float
    state_tax_savings: float
    annual_tax_savings: float
    homestead_savings: float
    total_annual_tax_benefit: float
    monthly_tax_savings: float
    federal_rate: float
    state_rate: float


class ExtraPaymentsResult(Frozen):
    interest_saved: float
    months_saved: int
    original_months: int
    new_months: int
    has_extra_payments: bool


class PMITimelineResult(Frozen):
    has_pmi: bool
    monthly_pmi: float
    auto_removal_month: Optional[int] = None
    request_removal_month: Optional[int] = None
    total_pmi_paid_until_auto: float
    saved_by_requesting: float
    auto_removal_year: str
    request_removal_year: str


class ResultsBundle(Frozen):
    piti: PITIResult
    upfront_costs: UpfrontCostsResult
    amortization: List[AmortizationEntry]
    affordability: AffordabilityResult
    rent_vs_buy: RentVsBuyResult
    tax_benefits: TaxBenefitsResult
    extra_payments: ExtraPaymentsResult
    pmi_timeline: PMITimelineResult
    year1_interest: float
    federal_tax_rate: float
    state_tax_rate: float
    state_income_tax: float


# --- reference tables -------------------------------------------------------


class TaxBracket(Frozen):
    min: float
    max: float = math.inf
    rate: float

    @field_validator("max", mode="before")
    @classmethod
    def _open_ended(cls, v):
        # The top bracket is stored as ``null`` in the JSON tables.
        return math.inf if v is None else v


class StandardDeductionByStatus(Frozen):
    single: float
    married_jointly: float
    head_of_household: float


class SaltPhaseout(Frozen):
    threshold: float
    rate: float
    floor: float


class TaxYearData(Frozen):
    federal: Dict[FilingStatus, List[TaxBracket]]
    standard_deduction: StandardDeductionByStatus
    salt_cap: float
    salt_phaseout: Optional[SaltPhaseout] = None
    ss_wage_base: float
    max_401k: float


class Surtax(Frozen):
    threshold: float
    rate: float


_NO_DEDUCTION = StandardDeductionByStatus(single=0, married_jointly=0, head_of_household=0)


class NoIncomeTax(Frozen):
    type: Literal["none"]


class FlatTax(Frozen):
    type: Literal["flat"]
    rate: float
    std_ded: StandardDeductionByStatus = _NO_DEDUCTION
    supplemental_rate: float = 0.0
    note: Optional[str] = None
    surtax: Optional[Surtax] = None


class ProgressiveTax(Frozen):
    type: Literal["progressive"]
    supplemental_rate: float = 0.0
    brackets: Dict[int, Dict[FilingStatus, List[TaxBracket]]] = Field(default_factory=dict)
    std_ded: Dict[int, StandardDeductionByStatus] = Field(default_factory=dict)
    top_rate: float = 0.0
    note: Optional[str] = None
    surtax: Optional[Surtax] = None


class EffectiveTax(Frozen):
    """Income tax approximated by effective rates at five income points."""

    type: Literal["effective"]
    rates: List[float] = Field(min_length=5, max_length=5)
    top_rate: float
    supplemental_rate: float = 0.0
    std_ded: StandardDeductionByStatus = _NO_DEDUCTION
    note: Optional[str] = None


StateTaxConfig = Annotated[
    Union[NoIncomeTax, FlatTax, ProgressiveTax, EffectiveTax],
    Field(discriminator="type"),
]


class StateMeta(Frozen):
    name: str
    avg_property_tax: float
    homestead_exemption: float = 0.0
    homestead_type: Literal["none", "assessed_value", "market_value", "credit", "equity"] = "none"
    sdi_rate: float = 0.0
    sdi_cap: Optional[float] = None
    note: Optional[str] = None


class County(Frozen):
    name: str = Field(min_length=1)
    rate: float = Field(gt=0)
