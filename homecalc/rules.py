from __future__ import annotations
from typing import Literal, List, Dict, Any
from pydantic import BaseModel, Field

from .models import InputSnapshot, ResultsBundle
from .presets import MORTGAGE_INTEREST_LOAN_CAP


class RuleResult(BaseModel):
    code: str
    severity: Literal["info", "warn", "critical"]
    message: str
    context: Dict[str, Any] = Field(default_factory=dict)


def evaluate_rules(inputs: InputSnapshot, results: ResultsBundle) -> List[RuleResult]:
    res: List[RuleResult] = []

    afford = results.affordability
    if afford.used_fallback_income:
        res.append(
            RuleResult(
                code="INCOME_FALLBACK",
                severity="warn",
                message="No income entered; affordability assumes a $150,000 salary.",
                context={"assumed_annual_income": afford.gross_monthly_income * 12},
            )
        )

    if inputs.purchase_price > afford.max_purchase_price:
        res.append(
            RuleResult(
                code="OVER_BUDGET",
                severity="warn",
                message="Purchase price exceeds the 28% affordability limit.",
                context={
                    "purchase_price": inputs.purchase_price,
                    "max_purchase_price": afford.max_purchase_price,
                    "overage": inputs.purchase_price - afford.max_purchase_price,
                },
            )
        )

    pmi = results.pmi_timeline
    if pmi.has_pmi:
        res.append(
            RuleResult(
                code="PMI_REQUIRED",
                severity="info",
                message="Down payment under 20%; PMI applies until removal.",
                context={
                    "monthly_pmi": pmi.monthly_pmi,
                    "request_removal_year": pmi.request_removal_year,
                    "auto_removal_year": pmi.auto_removal_year,
                },
            )
        )

    loan = results.piti.effective_loan_amount
    if loan > MORTGAGE_INTEREST_LOAN_CAP:
        res.append(
            RuleResult(
                code="MORTGAGE_INTEREST_CAP",
                severity="info",
                message="Mortgage interest is deductible only on the first $750,000 of the loan.",
                context={"loan": loan, "cap": MORTGAGE_INTEREST_LOAN_CAP},
            )
        )

    tax = results.tax_benefits
    if tax.total_salt > tax.salt_cap:
        res.append(
            RuleResult(
                code="SALT_CAPPED",
                severity="info",
                message="State and local taxes exceed the SALT deduction cap.",
                context={"total_salt": tax.total_salt, "salt_cap": tax.salt_cap},
            )
        )

    start_rate = inputs.interest_rate
    resets = [e for e in results.amortization if e.rate != start_rate]
    if inputs.loan_type != "fixed" and resets:
        first = resets[0]
        res.append(
            RuleResult(
                code="ARM_RESET_IN_WINDOW",
                severity="warn",
                message="Adjustable rate resets within the 10-year projection.",
                context={
                    "first_reset_year": first.year,
                    "rate": first.rate,
                    "monthly_payment": first.monthly_payment,
                    "final_rate": results.amortization[-1].rate,
                },
            )
        )

    if results.rent_vs_buy.break_even_year is None:
        res.append(
            RuleResult(
                code="RENT_NO_BREAK_EVEN",
                severity="info",
                message="Renting and investing stays ahead of buying for all 10 years.",
            )
        )

    return res


def has_blocking(res: List[RuleResult]) -> bool:
    return any(r.severity == "critical" for r in res)
