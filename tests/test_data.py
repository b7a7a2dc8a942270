"""Tests for validators, deal storage, the sector taxonomy and formatters."""

import dataclasses
import json

import pytest

from ppa_modeler.data.libraries import SectorTaxonomy
from ppa_modeler.data.storage import load_deal, save_deal
from ppa_modeler.data.validators import (
    ValidationError,
    require_valid_parameters,
    validate_capacity,
    validate_cuf,
    validate_discount,
    validate_generation_baseline,
    validate_parameters,
    validate_ppa_term,
    validate_rate,
)
from ppa_modeler.models.credit_risk import CreditProfile
from ppa_modeler.models.project import Deal, ProjectionParameters, Weekday
from ppa_modeler.utils.formatters import (
    format_currency,
    format_currency_exact,
    format_millions,
    format_percent,
    format_year,
)


# ---- Validators ----

class TestValidators:
    def test_capacity(self):
        assert validate_capacity(11300)[0]
        assert not validate_capacity(0)[0]
        valid, msg = validate_capacity(200_000)
        assert valid and msg.startswith("Warning")

    def test_ppa_term(self):
        assert validate_ppa_term(1)[0]
        assert validate_ppa_term(25)[0]
        assert not validate_ppa_term(0)[0]
        assert not validate_ppa_term(26)[0]
        assert not validate_ppa_term(12.5)[0]

    def test_rates_and_percents(self):
        assert not validate_rate(0, "Peak rate")[0]
        assert not validate_discount(101)[0]
        assert not validate_cuf(-1)[0]
        assert validate_cuf(100)[0]

    def test_generation_baseline_warning(self):
        valid, msg = validate_generation_baseline(3000)
        assert valid and "outside" in msg

    def test_defaults_valid(self):
        is_valid, messages = validate_parameters(ProjectionParameters())
        assert is_valid
        assert messages == []

    def test_zero_cuf_warning(self):
        params = ProjectionParameters(cuf_peak_percent=0, cuf_off_peak_percent=0)
        is_valid, messages = validate_parameters(params)
        assert is_valid
        assert any("Both CUFs" in m for m in messages)

    def test_require_valid_lists_every_field(self):
        """All bad fields are reported together."""
        params = ProjectionParameters(capacity_kwp=-1, ppa_term_years=30, peak_rate=0)
        with pytest.raises(ValidationError) as excinfo:
            require_valid_parameters(params)
        assert set(excinfo.value.errors) == {"capacity_kwp", "ppa_term_years", "peak_rate"}
        assert isinstance(excinfo.value, ValueError)

    def test_require_valid_returns_params(self):
        params = ProjectionParameters()
        assert require_valid_parameters(params) is params


# ---- Storage ----

class TestStorage:
    def test_save_load_roundtrip(self, tmp_path):
        """A saved deal loads back equal."""
        deal = Deal(
            name="Rayong Plant 2",
            account_name="Siam Widgets Co",
            sector="Financial Services",
            industry="Banking",
            sub_industry="Commercial banks",
            operating_days=[Weekday.MON, Weekday.SAT],
            parameters=ProjectionParameters(capacity_kwp=5000, ppa_term_years=12),
            credit=CreditProfile(years_in_business=22, ownership="MNC / Listed"),
        )
        path = tmp_path / "deals" / "rayong.json"
        save_deal(deal, str(path))
        assert path.exists()
        assert load_deal(str(path)) == deal

    def test_load_partial_file_uses_defaults(self, tmp_path):
        path = tmp_path / "partial.json"
        path.write_text(json.dumps({"name": "Partial", "parameters": {"ppa_term_years": 10.0}}))
        deal = load_deal(str(path))
        assert deal.parameters.ppa_term_years == 10
        assert deal.parameters.capacity_kwp == 11300
        assert deal.operating_days == [Weekday.MON, Weekday.TUE, Weekday.WED,
                                       Weekday.THU, Weekday.FRI]

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_deal(str(tmp_path / "missing.json"))

    def test_load_bad_weekday(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"operating_days": ["Mon", "Caturday"]}))
        with pytest.raises(ValueError):
            load_deal(str(path))

    def test_load_numeric_strings_are_coerced(self, tmp_path):
        """Quoted numbers load as floats so validation can compare them."""
        path = tmp_path / "quoted.json"
        path.write_text(json.dumps({"parameters": {"capacity_kwp": "11300", "ppa_term_years": "12"}}))
        params = load_deal(str(path)).parameters
        assert params.capacity_kwp == 11300.0
        assert isinstance(params.capacity_kwp, float)
        assert params.ppa_term_years == 12
        assert isinstance(params.ppa_term_years, int)
        assert validate_parameters(params)[0]

    def test_load_non_numeric_parameter(self, tmp_path):
        path = tmp_path / "text.json"
        path.write_text(json.dumps({"parameters": {"capacity_kwp": "large"}}))
        with pytest.raises(ValueError):
            load_deal(str(path))

    def test_load_fractional_term_rejected(self, tmp_path):
        """A 15.7-year term is an error, not a silent 15."""
        path = tmp_path / "fraction.json"
        path.write_text(json.dumps({"parameters": {"ppa_term_years": 15.7}}))
        with pytest.raises(ValueError, match="whole number"):
            load_deal(str(path))

    def test_parameters_snapshot(self):
        """Parameters are immutable; changes produce a new record."""
        params = ProjectionParameters()
        with pytest.raises(dataclasses.FrozenInstanceError):
            params.capacity_kwp = 1
        assert dataclasses.replace(params, capacity_kwp=1).capacity_kwp == 1


# ---- Taxonomy ----

class TestTaxonomy:
    def test_packaged_library_loads(self):
        taxonomy = SectorTaxonomy()
        assert taxonomy.get_library_names() == ["Thai Sector Taxonomy"]
        assert len(taxonomy.entries) == 181
        assert taxonomy.get_library_metadata("Thai Sector Taxonomy")["version"] == "2024.1"

    def test_hierarchy_queries(self):
        taxonomy = SectorTaxonomy()
        assert "Financial Services" in taxonomy.get_sectors()
        assert "Banking" in taxonomy.get_industries("Financial Services")
        names = [e.sub_industry for e in taxonomy.get_sub_industries("Banking")]
        assert names == sorted(names)
        assert "Commercial banks" in names

    def test_get_entry(self):
        entry = SectorTaxonomy().get_entry("Rice cultivation")
        assert entry.points == 2
        assert SectorTaxonomy().get_entry("Nonexistent") is None

    def test_bad_file_skipped(self, tmp_path):
        """Malformed library files are skipped, good ones still load."""
        (tmp_path / "a_bad.json").write_text("{not json")
        (tmp_path / "b_good.json").write_text(json.dumps({
            "name": "Custom",
            "entries": [{"sector": "S", "industry": "I", "sub_industry": "X",
                         "score": 2, "points": 4}],
        }))
        taxonomy = SectorTaxonomy(str(tmp_path))
        assert taxonomy.get_library_names() == ["Custom"]
        assert taxonomy.find(sector="S").points == 4

    def test_missing_directory(self, tmp_path):
        taxonomy = SectorTaxonomy(str(tmp_path / "nope"))
        assert taxonomy.entries == []


# ---- Formatters ----

class TestFormatters:
    def test_currency_abbreviation(self):
        assert format_currency(1_234_567, 1) == "฿1.2M"
        assert format_currency(2_500_000_000, 1) == "฿2.5B"
        assert format_currency(950) == "฿950"
        assert format_currency(-33_900_000, 1, "THB ") == "THB -33.9M"

    def test_exact_and_millions(self):
        assert format_currency_exact(1234567) == "฿1,234,567"
        assert format_millions(123_456_789) == "123M"
        assert format_millions(-33_900_000) == "-34M"

    def test_percent_and_year(self):
        assert format_percent(18) == "18.0%"
        assert format_percent(28.571, 0) == "29%"
        assert format_year(None) == "Not achieved"
        assert format_year(7) == "Year 7"
