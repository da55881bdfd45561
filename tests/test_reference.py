import json
import math
import shutil

import pytest
from pydantic import ValidationError

from homecalc import reference
from homecalc.models import EffectiveTax, FlatTax, ProgressiveTax
from homecalc.reference import (
    counties,
    counties_for,
    default_county,
    nearest_year,
    state_meta,
    state_tax_configs,
    tax_years,
)

ALL_STATES = sorted(
    "AL AK AZ AR CA CO CT DE DC FL GA HI ID IL IN IA KS KY LA ME MD MA MI MN MS MO MT NE NV NH "
    "NJ NM NY NC ND OH OK OR PA RI SC SD TN TX UT VT VA WA WV WI WY".split()
)


def test_every_state_present():
    assert sorted(state_tax_configs()) == ALL_STATES
    assert sorted(state_meta()) == ALL_STATES
    assert sorted(counties()) == ALL_STATES


def test_state_config_shapes():
    for cfg in state_tax_configs().values():
        if isinstance(cfg, FlatTax):
            assert cfg.rate > 0
        if isinstance(cfg, ProgressiveTax):
            assert cfg.brackets
        if isinstance(cfg, EffectiveTax):
            assert len(cfg.rates) == 5


def test_state_meta_fields():
    for meta in state_meta().values():
        assert meta.name
        assert meta.avg_property_tax > 0


def test_counties():
    for code in ALL_STATES:
        rows = counties_for(code)
        assert rows
        assert all(c.name and c.rate > 0 for c in rows)
    assert default_county("CA").name == "Los Angeles"
    assert counties_for("ZZ") == []
    assert default_county("ZZ") is None


def test_federal_tables():
    years = tax_years()
    assert sorted(years) == [2024, 2025, 2026]
    assert [years[y].salt_cap for y in (2024, 2025, 2026)] == [10000, 40000, 40400]
    for data in years.values():
        for brackets in data.federal.values():
            assert brackets[0].min == 0
            assert math.isinf(brackets[-1].max)
            for prev, cur in zip(brackets, brackets[1:]):
                assert cur.min == prev.max
            assert all(b.rate > 0 for b in brackets)
        assert data.standard_deduction.single > 0


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        tax_years()[2030] = tax_years()[2025]


def test_nearest_year():
    assert nearest_year([2024, 2025, 2026], 2025) == 2025
    assert nearest_year([2024, 2026], 2025) == 2024
    assert nearest_year([2026, 2024], 2025) == 2024
    assert nearest_year([2024, 2025, 2026], 2030) == 2026
    assert nearest_year([2024, 2025, 2026], 2001) == 2024
    assert nearest_year([], 2025) is None


def _copy_tables(tmp_path):
    for path in reference.DATA_DIR.glob("*.json"):
        shutil.copy(path, tmp_path / path.name)
    return tmp_path


def test_reference_dir_override(tmp_path, monkeypatch):
    d = _copy_tables(tmp_path)
    raw = json.loads((d / "federal.json").read_text())
    raw["2025"]["salt_cap"] = 12345
    (d / "federal.json").write_text(json.dumps(raw))
    monkeypatch.setenv(reference.REFERENCE_DIR_ENV, str(d))
    assert tax_years()[2025].salt_cap == 12345
    monkeypatch.delenv(reference.REFERENCE_DIR_ENV)
    assert tax_years()[2025].salt_cap == 40000


def test_malformed_table_raises(tmp_path, monkeypatch):
    d = _copy_tables(tmp_path)
    (d / "states.json").write_text(json.dumps({"XX": {"type": "bogus"}}))
    monkeypatch.setenv(reference.REFERENCE_DIR_ENV, str(d))
    with pytest.raises(ValidationError):
        state_tax_configs()


def test_missing_table_raises(tmp_path, monkeypatch):
    monkeypatch.setenv(reference.REFERENCE_DIR_ENV, str(tmp_path))
    reference.clear_cache()
    with pytest.raises(FileNotFoundError):
        counties()
