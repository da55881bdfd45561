"""Read-only reference tables shipped with the package.

Tables live as JSON under ``homecalc/data`` and are validated into the
models in :mod:`homecalc.models` the first time they are needed.  Point
``HOMECALC_REFERENCE_DIR`` at another directory holding the same four files
to swap in updated tables without reinstalling.
"""
from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import TypeAdapter

from .models import County, StateMeta, StateTaxConfig, TaxYearData

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent / "data"
REFERENCE_DIR_ENV = "HOMECALC_REFERENCE_DIR"

_TAX_YEARS = TypeAdapter(Dict[int, TaxYearData])
_STATE_TAX = TypeAdapter(Dict[str, StateTaxConfig])
_STATE_META = TypeAdapter(Dict[str, StateMeta])
_COUNTIES = TypeAdapter(Dict[str, List[County]])


def reference_dir() -> Path:
    override = os.environ.get(REFERENCE_DIR_ENV)
    return Path(override) if override else DATA_DIR


def _read(directory: Path, name: str):
    path = directory / name
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


@lru_cache()
def _tax_years(directory: Path) -> Mapping[int, TaxYearData]:
    return MappingProxyType(_TAX_YEARS.validate_python(_read(directory, "federal.json")))


@lru_cache()
def _state_tax(directory: Path) -> Mapping[str, StateTaxConfig]:
    return MappingProxyType(_STATE_TAX.validate_python(_read(directory, "states.json")))


@lru_cache()
def _state_meta(directory: Path) -> Mapping[str, StateMeta]:
    return MappingProxyType(_STATE_META.validate_python(_read(directory, "state_meta.json")))


@lru_cache()
def _counties(directory: Path) -> Mapping[str, Tuple[County, ...]]:
    raw = _COUNTIES.validate_python(_read(directory, "counties.json"))
    return MappingProxyType({code: tuple(rows) for code, rows in raw.items()})


def tax_years() -> Mapping[int, TaxYearData]:
    """Federal tables keyed by tax year."""
    return _tax_years(reference_dir())


def state_tax_configs() -> Mapping[str, StateTaxConfig]:
    """Income tax configuration keyed by two-letter state code."""
    return _state_tax(reference_dir())


def state_meta() -> Mapping[str, StateMeta]:
    return _state_meta(reference_dir())


def counties() -> Mapping[str, Tuple[County, ...]]:
    return _counties(reference_dir())


def counties_for(state: str) -> List[County]:
    return list(counties().get(state, ()))


def default_county(state: str) -> Optional[County]:
    rows = counties().get(state, ())
    return rows[0] if rows else None


def latest_tax_year() -> int:
    return max(tax_years())


def nearest_year(years: Iterable[int], year: int) -> Optional[int]:
    """Pick the table year closest to ``year``.

    An exact match wins.  Otherwise the smallest absolute distance wins and a
    tie goes to the earlier year.  Returns ``None`` when ``years`` is empty.
    """

    ordered = sorted(years)
    if not ordered:
        return None
    if year in ordered:
        return year
    best = ordered[0]
    for candidate in ordered[1:]:
        if abs(candidate - year) < abs(best - year):
            best = candidate
    logger.debug("no table for %s, using nearest year %s", year, best)
    return best


def clear_cache() -> None:
    """Drop loaded tables so the next lookup re-reads the reference directory."""
    for loader in (_tax_years, _state_tax, _state_meta, _counties):
        loader.cache_clear()
