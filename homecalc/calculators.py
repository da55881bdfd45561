from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Sequence, Tuple

from .models import (
    AffordabilityResult,
    AmortizationEntry,
    ExtraPaymentsResult,
    PITIResult,
    PMITimelineResult,
    RentVsBuyResult,
    RentVsBuyYearData,
    TaxBenefitsResult,
    UpfrontCostsResult,
    WealthBuildingResult,
)
from .presets import (
    AFFORDABILITY_ITERATIONS,
    AFFORDABILITY_MAX_PRICE,
    AFFORDABILITY_MIN_PRICE,
    AFFORDABILITY_ROUNDING,
    APPRAISAL_FEE,
    CREDIT_REPORT_FEE,
    DEFAULT_PMI_RATE,
    ESCROW_FEE_RATE,
    ESCROW_RESERVE_MONTHS,
    EXTRA_PAYMENT_TOLERANCE,
    FALLBACK_ANNUAL_INCOME,
    FRONT_END_DTI_RATIO,
    HOA_TRANSFER_FEE,
    HOME_INSPECTION_FEE,
    LOAN_ORIGINATION_RATE,
    MORTGAGE_INTEREST_LOAN_CAP,
    NOTARY_FEES,
    PEST_INSPECTION_FEE,
    PMI_AUTO_REMOVAL_LTV,
    PMI_MAX_MONTHS,
    PMI_REQUEST_REMOVAL_LTV,
    PMI_REQUIRED_THRESHOLD,
    PREPAID_INTEREST_DAYS,
    PREPAID_PROPERTY_TAX_MONTHS,
    RECORDING_FEES,
    SCHEDULE_YEARS,
    TITLE_INSURANCE_RATE,
)


def nz(x, default=0.0):
    """Return a float for ``x`` or a fallback value.

    Inputs arrive from forms and shared links where a blank field shows up as
    ``None`` or ``NaN``.  Treating those as zero keeps the math from breaking
    while the user is still typing.
    """

    try:
        if x is None or (isinstance(x, float) and math.isnan(x)):
            return default
        return float(x)
    except (TypeError, ValueError):
        return default


def round_half_up(x) -> float:
    """Round to whole dollars with halves going up (``2.5 -> 3``, ``-2.5 -> -2``)."""
    return float(math.floor(nz(x) + 0.5))


def monthly_payment(principal, annual_rate_pct, term_years):
    """Calculate the fully amortizing monthly payment for a loan.

    ``principal`` is the starting loan amount, ``annual_rate_pct`` is the
    nominal yearly interest rate (e.g. ``6.5`` for 6.5%), and ``term_years`` is
    the amortization period in years.  A non-positive term pays nothing.
    """

    L = nz(principal)
    r = nz(annual_rate_pct) / 100 / 12
    n = nz(term_years) * 12
    if n <= 0:
        return 0.0
    if abs(r) < 1e-9:
        return L / n
    if 1 + r <= 0:
        return 0.0
    try:
        discount = (1 + r) ** (-n)
    except OverflowError:
        return 0.0
    return (r * L) / (1 - discount)


def _pay_month(balance: float, monthly_rate: float, payment: float, extra: float = 0.0) -> Tuple[float, float]:
    """Split one month's payment into ``(interest, principal)``.

    Extra principal never takes the balance below zero and never goes
    negative when the scheduled payment already covers the balance.
    """

    interest = balance * monthly_rate
    scheduled = payment - interest
    extra_principal = max(min(extra, balance - scheduled), 0.0)
    principal = min(scheduled + extra_principal, balance)
    return interest, principal


def calculate_piti(
    purchase_price,
    down_payment_percent,
    interest_rate,
    loan_term,
    property_tax_rate,
    mello_roos=0.0,
    insurance=0.0,
    hoa=0.0,
    pmi_rate=0.0,
    maintenance=0.0,
    utilities=0.0,
    extra_monthly=0.0,
    lump_sum=0.0,
) -> PITIResult:
    """Monthly housing cost breakdown.

    A lump sum lowers the balance the P&I is computed on.  PMI is charged on
    the loan before the lump sum whenever the down payment is under 20%.
    """

    price = nz(purchase_price)
    dp_pct = nz(down_payment_percent)
    extra = nz(extra_monthly)
    down_payment = price * (dp_pct / 100)
    loan = price - down_payment

    effective_lump = min(nz(lump_sum), loan)
    effective_loan = loan - effective_lump

    pi = monthly_payment(effective_loan, interest_rate, loan_term)
    if effective_lump > 0 or extra > 0:
        baseline_pi = monthly_payment(loan, interest_rate, loan_term)
    else:
        baseline_pi = pi

    tax = price * nz(property_tax_rate) / 100 / 12
    mello = nz(mello_roos) / 12
    ins = nz(insurance) / 12
    hoa_m = nz(hoa)
    pmi = loan * nz(pmi_rate) / 100 / 12 if dp_pct < PMI_REQUIRED_THRESHOLD else 0.0
    maint = price * nz(maintenance) / 100 / 12
    utils = nz(utilities)

    piti = pi + tax + mello + ins + pmi + hoa_m
    return PITIResult(
        monthly_pi=pi,
        baseline_monthly_pi=baseline_pi,
        monthly_property_tax=tax,
        monthly_mello_roos=mello,
        monthly_insurance=ins,
        monthly_hoa=hoa_m,
        monthly_pmi=pmi,
        monthly_maintenance=maint,
        monthly_utilities=utils,
        monthly_piti=piti,
        true_monthly_cost=piti + maint + utils + extra,
        loan_amount=loan,
        effective_loan_amount=effective_loan,
        effective_lump_sum=effective_lump,
        down_payment=down_payment,
        down_payment_percent=dp_pct,
    )


def calculate_upfront_costs(
    purchase_price,
    loan_amount,
    down_payment,
    effective_lump_sum,
    interest_rate,
    insurance,
    monthly_property_tax,
    monthly_insurance,
    hoa,
) -> UpfrontCostsResult:
    price = nz(purchase_price)
    loan = nz(loan_amount)
    closing = {
        "Loan Origination (0.75%)": loan * LOAN_ORIGINATION_RATE,
        "Appraisal Fee": APPRAISAL_FEE,
        "Credit Report": CREDIT_REPORT_FEE,
        "Title Insurance": price * TITLE_INSURANCE_RATE,
        "Escrow Fee": price * ESCROW_FEE_RATE,
        "Recording Fees": RECORDING_FEES,
        "Notary Fees": NOTARY_FEES,
        "Home Inspection": HOME_INSPECTION_FEE,
        "Pest Inspection": PEST_INSPECTION_FEE,
        f"Prepaid Interest ({PREPAID_INTEREST_DAYS} days)": loan * nz(interest_rate) / 100 / 365 * PREPAID_INTEREST_DAYS,
        f"Prepaid Property Tax ({PREPAID_PROPERTY_TAX_MONTHS} mo)": nz(monthly_property_tax) * PREPAID_PROPERTY_TAX_MONTHS,
        "Prepaid Insurance (12 mo)": nz(insurance),
    }
    if nz(hoa) > 0:
        closing["HOA Transfer Fee"] = HOA_TRANSFER_FEE

    total = sum(closing.values())
    escrow = nz(monthly_property_tax) * ESCROW_RESERVE_MONTHS + nz(monthly_insurance) * ESCROW_RESERVE_MONTHS
    return UpfrontCostsResult(
        closing_costs=closing,
        total_closing_costs=total,
        escrow_reserve=escrow,
        total_cash_needed=nz(down_payment) + total + escrow + nz(effective_lump_sum),
    )


def calculate_year1_interest(effective_loan_amount, interest_rate, monthly_pi, extra_monthly=0.0):
    """Interest paid over the first 12 months, extra principal included."""

    balance = nz(effective_loan_amount)
    rate = nz(interest_rate) / 100 / 12
    total = 0.0
    for _ in range(12):
        if balance <= 0:
            break
        interest, principal = _pay_month(balance, rate, nz(monthly_pi), nz(extra_monthly))
        total += interest
        balance = max(balance - principal, 0.0)
    return total


def _payoff(balance: float, monthly_rate: float, payment: float, extra: float, max_months: float) -> Tuple[float, int]:
    total_interest = 0.0
    months = 0
    while balance > EXTRA_PAYMENT_TOLERANCE and months < max_months:
        months += 1
        interest, principal = _pay_month(balance, monthly_rate, payment, extra)
        total_interest += interest
        balance = max(balance - principal, 0.0)
    return total_interest, months


def calculate_extra_payments(loan_amount, interest_rate, loan_term, extra_monthly=0.0, lump_sum=0.0) -> ExtraPaymentsResult:
    """Compare payoff with and without extra principal.

    The lump sum is applied at origination and the P&I is recomputed on the
    reduced balance over the full term, so a lump sum alone saves interest
    but usually no months.
    """

    loan = nz(loan_amount)
    extra = nz(extra_monthly)
    rate = nz(interest_rate) / 100 / 12
    max_months = nz(loan_term) * 12
    effective_lump = min(nz(lump_sum), loan)

    base_interest, base_months = _payoff(
        loan, rate, monthly_payment(loan, interest_rate, loan_term), 0.0, max_months
    )
    if not (extra > 0 or effective_lump > 0):
        return ExtraPaymentsResult(
            interest_saved=0.0,
            months_saved=0,
            original_months=base_months,
            new_months=base_months,
            has_extra_payments=False,
        )

    effective_loan = loan - effective_lump
    new_interest, new_months = _payoff(
        effective_loan, rate, monthly_payment(effective_loan, interest_rate, loan_term), extra, max_months
    )
    return ExtraPaymentsResult(
        interest_saved=base_interest - new_interest,
        months_saved=base_months - new_months,
        original_months=base_months,
        new_months=new_months,
        has_extra_payments=True,
    )


def _years_label(month: Optional[int]) -> str:
    if not month:
        return "N/A"
    years = (Decimal(month) / Decimal(12)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return str(years)


def calculate_pmi_timeline(
    loan_amount,
    purchase_price,
    monthly_pi,
    interest_rate,
    appreciation_rate,
    down_payment_percent,
    extra_monthly=0.0,
    pmi_rate=DEFAULT_PMI_RATE,
) -> PMITimelineResult:
    """When PMI drops off.

    Auto-cancellation happens once the balance reaches 78% of the original
    price.  Borrowers may request removal earlier, once the balance is at or
    below 80% of the appreciated value.
    """

    if nz(down_payment_percent) >= PMI_REQUIRED_THRESHOLD:
        return PMITimelineResult(
            has_pmi=False,
            monthly_pmi=0.0,
            auto_removal_month=None,
            request_removal_month=None,
            total_pmi_paid_until_auto=0.0,
            saved_by_requesting=0.0,
            auto_removal_year="N/A",
            request_removal_year="N/A",
        )

    price = nz(purchase_price)
    loan = nz(loan_amount)
    extra = nz(extra_monthly)
    pmi_pct = nz(pmi_rate) or DEFAULT_PMI_RATE
    rate = nz(interest_rate) / 100 / 12
    growth = 1 + nz(appreciation_rate) / 100
    monthly_pmi = loan * (pmi_pct / 100 / 12)
    auto_balance = price * PMI_AUTO_REMOVAL_LTV

    balance = loan
    month = 0
    total_paid = 0.0
    auto_month = None
    request_month = None
    while month < PMI_MAX_MONTHS and balance > 0:
        month += 1
        _, principal = _pay_month(balance, rate, nz(monthly_pi), extra)
        balance = max(balance - principal, 0.0)

        if balance > auto_balance:
            total_paid += monthly_pmi
        elif auto_month is None:
            auto_month = month

        current_value = price * growth ** (month / 12)
        if request_month is None and current_value > 0 and balance / current_value * 100 <= PMI_REQUEST_REMOVAL_LTV:
            request_month = month

        if auto_month and request_month:
            break

    saved = (auto_month - request_month) * monthly_pmi if auto_month and request_month else 0.0
    return PMITimelineResult(
        has_pmi=True,
        monthly_pmi=monthly_pmi,
        auto_removal_month=auto_month,
        request_removal_month=request_month,
        total_pmi_paid_until_auto=total_paid,
        saved_by_requesting=saved,
        auto_removal_year=_years_label(auto_month),
        request_removal_year=_years_label(request_month),
    )


def calculate_affordability(
    annual_income,
    interest_rate,
    loan_term,
    property_tax_rate,
    insurance,
    hoa=0.0,
    pmi_rate=0.0,
    maintenance=0.0,
    utilities=0.0,
    down_payment_percent=20.0,
    down_payment_mode="percent",
    down_payment_amount=None,
) -> AffordabilityResult:
    """Largest purchase price whose monthly cost fits 28% of gross income.

    Binary search over whole-dollar prices.  Without an income the search
    runs against a $150,000 salary and flags the result.
    """

    income = nz(annual_income)
    used_fallback = income <= 0
    gross_monthly = (FALLBACK_ANNUAL_INCOME if used_fallback else income) / 12
    target = gross_monthly * FRONT_END_DTI_RATIO

    def monthly_cost(price):
        if down_payment_mode == "amount":
            dp = nz(down_payment_amount)
        else:
            dp = price * (nz(down_payment_percent) / 100)
        loan = price - dp
        dp_pct = dp / price * 100 if price > 0 else 0.0
        pmi = loan * (nz(pmi_rate) / 100) / 12 if dp_pct < PMI_REQUIRED_THRESHOLD else 0.0
        return (
            monthly_payment(loan, interest_rate, loan_term)
            + price * nz(property_tax_rate) / 100 / 12
            + nz(insurance) / 12
            + pmi
            + nz(hoa)
            + price * nz(maintenance) / 100 / 12
            + nz(utilities)
        )

    lo, hi = AFFORDABILITY_MIN_PRICE, AFFORDABILITY_MAX_PRICE
    for _ in range(AFFORDABILITY_ITERATIONS):
        mid = round_half_up((lo + hi) / 2)
        if monthly_cost(mid) <= target:
            lo = mid
        else:
            hi = mid

    rounded = round_half_up(lo / AFFORDABILITY_ROUNDING) * AFFORDABILITY_ROUNDING
    max_price = min(max(rounded, AFFORDABILITY_MIN_PRICE), AFFORDABILITY_MAX_PRICE)
    return AffordabilityResult(
        max_purchase_price=max_price,
        target_piti=target,
        gross_monthly_income=gross_monthly,
        used_fallback_income=used_fallback,
    )


def calculate_tax_benefits(
    total_interest_year1,
    effective_loan_amount,
    purchase_price,
    property_tax_rate,
    state_income_tax,
    federal_tax_rate,
    state_tax_rate,
    standard_deduction,
    salt_cap,
    homestead_savings=0.0,
) -> TaxBenefitsResult:
    """Year-one tax effect of owning versus renting.

    Mortgage interest is deductible on the first $750,000 of the loan.  SALT
    (state income plus property tax) is capped, with the cap filled by state
    income tax first.  Federal savings compare itemizing with the home against
    the better of the standard deduction or a renter's itemized SALT.
    """

    loan = nz(effective_loan_amount)
    interest = nz(total_interest_year1)
    std = nz(standard_deduction)
    cap = nz(salt_cap)
    state_tax = nz(state_income_tax)

    deductible_loan = min(loan, MORTGAGE_INTEREST_LOAN_CAP)
    deductible_interest = interest * (deductible_loan / loan) if loan > 0 else 0.0

    property_tax = nz(purchase_price) * nz(property_tax_rate) / 100
    total_salt = state_tax + property_tax
    deductible_salt = min(total_salt, cap)
    deductible_property_tax = min(property_tax, max(0.0, cap - state_tax))

    itemized_with_home = deductible_interest + deductible_salt
    itemized_without_home = min(state_tax, cap)
    should_itemize = itemized_with_home > std
    would_itemize_without_home = itemized_without_home > std

    federal_rate = nz(federal_tax_rate) / 100
    state_rate = nz(state_tax_rate) / 100
    federal_savings = 0.0
    state_savings = 0.0
    if should_itemize:
        baseline = itemized_without_home if would_itemize_without_home else std
        federal_savings = max(0.0, itemized_with_home - baseline) * federal_rate
        state_savings = deductible_interest * state_rate

    annual = federal_savings + state_savings
    total = annual + nz(homestead_savings)
    return TaxBenefitsResult(
        total_interest_year1=interest,
        deductible_interest=deductible_interest,
        annual_property_tax=property_tax,
        deductible_property_tax=deductible_property_tax,
        deductible_state_income=deductible_salt - deductible_property_tax,
        total_salt=total_salt,
        deductible_salt=deductible_salt,
        salt_cap=cap,
        itemized_with_home=itemized_with_home,
        itemized_without_home=itemized_without_home,
        standard_deduction=std,
        should_itemize=should_itemize,
        would_itemize_without_home=would_itemize_without_home,
        federal_tax_savings=federal_savings,
        state_tax_savings=state_savings,
        annual_tax_savings=annual,
        homestead_savings=nz(homestead_savings),
        total_annual_tax_benefit=total,
        monthly_tax_savings=total / 12,
        federal_rate=federal_rate,
        state_rate=state_rate,
    )


def generate_amortization_schedule(
    purchase_price,
    effective_loan_amount,
    effective_lump_sum,
    down_payment,
    interest_rate,
    loan_term,
    appreciation,
    extra_monthly,
    monthly_pi,
    loan_type="fixed",
    arm_adjustment=0.0,
    arm_cap=0.0,
    deductible_loan=0.0,
    deductible_salt=0.0,
    standard_deduction=0.0,
    itemized_without_home=0.0,
    would_itemize_without_home=False,
    federal_rate=0.0,
    state_rate=0.0,
    homestead_savings=0.0,
) -> List[AmortizationEntry]:
    """Year-by-year equity and wealth for the first ten years.

    ARM loans keep the start rate for ``int(loan_type)`` years, then step up
    by ``arm_adjustment`` each year up to ``arm_cap`` with the payment
    re-amortized over the remaining term.  Tax savings are recomputed from
    each year's interest.  ``federal_rate`` and ``state_rate`` are decimals.
    """

    price = nz(purchase_price)
    loan = nz(effective_loan_amount)
    lump = nz(effective_lump_sum)
    extra = nz(extra_monthly)
    term = nz(loan_term)
    growth = 1 + nz(appreciation) / 100
    std = nz(standard_deduction)

    is_arm = loan_type != "fixed"
    fixed_years = int(loan_type) if is_arm else term
    rate = nz(interest_rate)
    payment = nz(monthly_pi)
    balance = loan
    loan_ref = loan if loan > 0 else 1.0
    deduction_without_home = nz(itemized_without_home) if would_itemize_without_home else std

    cumulative_tax = 0.0
    schedule: List[AmortizationEntry] = []
    for year in range(1, SCHEDULE_YEARS + 1):
        if is_arm and year > fixed_years:
            rate = min(rate + nz(arm_adjustment), nz(arm_cap))
            payment = monthly_payment(max(balance, 0.0), rate, term - year + 1)

        monthly_rate = rate / 100 / 12
        year_interest = 0.0
        year_principal = 0.0
        for _ in range(12):
            if balance <= 0:
                break
            interest, principal = _pay_month(balance, monthly_rate, payment, extra)
            year_interest += interest
            year_principal += principal
            balance = max(balance - principal, 0.0)

        home_value = price * growth ** year
        appreciation_gain = home_value - price
        equity_from_payments = loan - balance + lump
        total_equity = nz(down_payment) + equity_from_payments + appreciation_gain

        deductible_interest = (
            year_interest * (min(nz(deductible_loan), loan) / loan_ref) if loan > 0 else 0.0
        )
        itemized = deductible_interest + nz(deductible_salt)
        federal = state = 0.0
        if itemized > std:
            federal = max(0.0, itemized - deduction_without_home) * nz(federal_rate)
            state = deductible_interest * nz(state_rate)
        cumulative_tax += federal + state + nz(homestead_savings)

        schedule.append(
            AmortizationEntry(
                year=year,
                home_value=home_value,
                remaining_mortgage=balance,
                equity_from_payments=equity_from_payments,
                appreciation_gain=appreciation_gain,
                total_equity=total_equity,
                cumulative_tax_savings=cumulative_tax,
                total_wealth_impact=total_equity + cumulative_tax,
                year_interest=year_interest,
                year_principal=year_principal,
                rate=rate,
                monthly_payment=payment + extra,
            )
        )
    return schedule


def calculate_wealth_building(*args, **kwargs) -> WealthBuildingResult:
    """:func:`generate_amortization_schedule` plus the year-ten summary."""

    schedule = generate_amortization_schedule(*args, **kwargs)
    last = schedule[-1]
    return WealthBuildingResult(
        schedule=schedule,
        home_value_10=last.home_value,
        equity_10=last.total_equity,
        wealth_impact_10=last.total_wealth_impact,
    )


def calculate_rent_vs_buy(
    rent_amount,
    rent_increase,
    invest_return,
    down_payment,
    true_monthly_cost,
    equity_by_year: Sequence[float],
) -> RentVsBuyResult:
    """Ten-year renter portfolio versus buyer equity.

    The renter invests the down payment plus any monthly gap between the
    buyer's cost and rent.  Buying breaks even in the first year the buyer's
    equity exceeds the renter's portfolio.
    """

    rent = nz(rent_amount)
    rent_growth = 1 + nz(rent_increase) / 100
    returns = 1 + nz(invest_return) / 100
    cost = nz(true_monthly_cost)
    equity = list(equity_by_year)

    cumulative_rent = 0.0
    cumulative_buy = 0.0
    portfolio = nz(down_payment)
    break_even = None
    rows: List[RentVsBuyYearData] = []
    for year in range(1, SCHEDULE_YEARS + 1):
        current_rent = rent * rent_growth ** (year - 1)
        yearly_rent = current_rent * 12
        cumulative_rent += yearly_rent
        portfolio = portfolio * returns + max(0.0, cost - current_rent) * 12
        cumulative_buy += cost * 12

        if year - 1 < len(equity):
            buyer = nz(equity[year - 1])
        elif equity:
            buyer = nz(equity[-1])
        else:
            buyer = 0.0

        if break_even is None and buyer > portfolio:
            break_even = year

        rows.append(
            RentVsBuyYearData(
                year=year,
                rent=round_half_up(yearly_rent),
                cumulative_rent=round_half_up(cumulative_rent),
                buy_cost=round_half_up(cost * 12),
                cumulative_buy=round_half_up(cumulative_buy),
                buyer_wealth=round_half_up(buyer),
                renter_wealth=round_half_up(portfolio),
            )
        )

    return RentVsBuyResult(
        year_data=rows,
        break_even_year=break_even,
        total_rent_cost=round_half_up(cumulative_rent),
        total_buy_cost=round_half_up(cumulative_buy),
    )
