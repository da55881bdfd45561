"""pandas views of result sequences for charts and exports."""
from __future__ import annotations

from typing import Iterable, Optional

import pandas as pd

from .models import AmortizationEntry, RentVsBuyResult, RentVsBuyYearData, UpfrontCostsResult


def amortization_frame(entries: Optional[Iterable[AmortizationEntry]]) -> pd.DataFrame:
    """One row per projection year, columns in :class:`AmortizationEntry` order."""

    rows = [e.model_dump() for e in entries or []]
    return pd.DataFrame(rows, columns=list(AmortizationEntry.model_fields))


def rent_vs_buy_frame(result: Optional[RentVsBuyResult]) -> pd.DataFrame:
    rows = [y.model_dump() for y in result.year_data] if result is not None else []
    return pd.DataFrame(rows, columns=list(RentVsBuyYearData.model_fields))


def closing_costs_frame(upfront: Optional[UpfrontCostsResult]) -> pd.DataFrame:
    """Closing cost line items in display order, plus a ``Total`` row."""

    if upfront is None or not upfront.closing_costs:
        return pd.DataFrame(columns=["Item", "Amount"])
    out = pd.DataFrame(list(upfront.closing_costs.items()), columns=["Item", "Amount"])
    total = pd.DataFrame([{"Item": "Total", "Amount": upfront.total_closing_costs}])
    return pd.concat([out, total], ignore_index=True)
