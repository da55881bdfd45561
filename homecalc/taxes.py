"""Federal and state tax lookups used by the recompute step.

Rates come back as percents (``24`` for the 24% bracket).  Unknown state
codes behave like states without an income tax.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .calculators import round_half_up
from .models import (
    EffectiveTax,
    FilingStatus,
    FlatTax,
    ProgressiveTax,
    TaxBracket,
    TaxYearData,
)
from .presets import EFFECTIVE_TAX_THRESHOLDS, FALLBACK_FEDERAL_RATE, FALLBACK_STATE_TOP_RATE
from .reference import latest_tax_year, nearest_year, state_meta, state_tax_configs, tax_years

logger = logging.getLogger(__name__)


def tax_year_data(year: int) -> TaxYearData:
    """Federal tables for ``year``, or the latest year on file."""
    tables = tax_years()
    if year in tables:
        return tables[year]
    latest = latest_tax_year()
    logger.debug("no federal tables for %s, using %s", year, latest)
    return tables[latest]


def salt_cap(year: int, magi: float) -> float:
    data = tax_year_data(year)
    cap = data.salt_cap
    phaseout = data.salt_phaseout
    if phaseout is not None and magi > phaseout.threshold:
        reduction = (magi - phaseout.threshold) * phaseout.rate
        cap = max(phaseout.floor, cap - reduction)
    return cap


def federal_standard_deduction(filing_status: FilingStatus, year: int) -> float:
    std = tax_year_data(year).standard_deduction
    return getattr(std, filing_status, None) or std.married_jointly


def _bracket_rate(brackets: List[TaxBracket], income: float) -> Optional[float]:
    for bracket in brackets:
        if bracket.min <= income < bracket.max:
            return bracket.rate
    return None


def federal_marginal_rate(income: float, filing_status: Optional[FilingStatus], year: int) -> float:
    federal = tax_year_data(year).federal
    brackets = federal.get(filing_status) or federal["married_jointly"]
    rate = _bracket_rate(brackets, income)
    return FALLBACK_FEDERAL_RATE if rate is None else rate


def state_brackets(state: str, year: int) -> Optional[Dict[str, List[TaxBracket]]]:
    """Bracket table for a progressive state, falling back to the nearest year."""
    config = state_tax_configs().get(state)
    if not isinstance(config, ProgressiveTax) or not config.brackets:
        return None
    return config.brackets[nearest_year(config.brackets, year)]


def state_standard_deduction(state: str, filing_status: FilingStatus, year: int) -> float:
    config = state_tax_configs().get(state)
    if isinstance(config, ProgressiveTax):
        if not config.std_ded:
            return 0.0
        std = config.std_ded[nearest_year(config.std_ded, year)]
    elif isinstance(config, (FlatTax, EffectiveTax)):
        std = config.std_ded
    else:
        return 0.0
    return getattr(std, filing_status, 0.0) or 0.0


def state_marginal_rate(income: float, filing_status: FilingStatus, state: str, year: int) -> float:
    config = state_tax_configs().get(state)
    if isinstance(config, FlatTax):
        return config.rate
    if isinstance(config, EffectiveTax):
        return config.top_rate
    if not isinstance(config, ProgressiveTax):
        return 0.0
    table = state_brackets(state, year)
    if table is None:
        return config.top_rate
    brackets = table.get(filing_status) or table["married_jointly"]
    rate = _bracket_rate(brackets, income)
    if rate is None:
        return config.top_rate or FALLBACK_STATE_TOP_RATE
    return rate


def _effective_rate(taxable: float, rates: List[float]) -> float:
    thresholds = EFFECTIVE_TAX_THRESHOLDS
    if taxable <= thresholds[0]:
        return rates[0] * (taxable / thresholds[0])
    if taxable >= thresholds[-1]:
        return rates[-1]
    for i in range(len(thresholds) - 1):
        lo, hi = thresholds[i], thresholds[i + 1]
        if lo <= taxable < hi:
            pct = (taxable - lo) / (hi - lo)
            return rates[i] + pct * (rates[i + 1] - rates[i])
    return 0.0


def estimate_state_tax(income: float, filing_status: FilingStatus, state: str, year: int) -> float:
    """Estimated annual state income tax in whole dollars."""

    config = state_tax_configs().get(state)
    if not isinstance(config, (FlatTax, EffectiveTax, ProgressiveTax)):
        return 0.0

    taxable = max(0.0, income - state_standard_deduction(state, filing_status, year))

    if isinstance(config, FlatTax):
        tax = taxable * (config.rate / 100)
        if config.surtax and income > config.surtax.threshold:
            tax += (income - config.surtax.threshold) * (config.surtax.rate / 100)
        return round_half_up(tax)

    if isinstance(config, EffectiveTax):
        if taxable <= 0:
            return 0.0
        return round_half_up(taxable * (_effective_rate(taxable, config.rates) / 100))

    table = state_brackets(state, year)
    if table is None:
        return 0.0
    brackets = table.get(filing_status) or table["married_jointly"]
    tax = 0.0
    remaining = taxable
    for bracket in brackets:
        if remaining <= 0:
            break
        portion = min(remaining, bracket.max - bracket.min)
        tax += portion * (bracket.rate / 100)
        remaining -= portion
    if config.surtax and income > config.surtax.threshold:
        tax += (income - config.surtax.threshold) * (config.surtax.rate / 100)
    return round_half_up(tax)


def homestead_savings(state: str, purchase_price: float, property_tax_rate: float) -> float:
    """Annual property tax saved by the state's homestead exemption."""
    meta = state_meta().get(state)
    if meta is None or not meta.homestead_exemption or meta.homestead_type == "none":
        return 0.0
    if meta.homestead_type == "credit":
        return meta.homestead_exemption
    if meta.homestead_type == "equity":
        # Protects equity from creditors, no tax effect.
        return 0.0
    exemption = min(meta.homestead_exemption, purchase_price)
    return exemption * (property_tax_rate / 100)
