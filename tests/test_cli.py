"""Tests for the ppa_cli command-line entry point."""

import json

import pytest

from ppa_cli import apply_overrides, build_parser, main
from ppa_modeler.models.credit_risk import CreditProfile
from ppa_modeler.models.project import Deal, Weekday


class TestExitCodes:
    def test_default_run(self, capsys):
        assert main([]) == 0
        out = capsys.readouterr().out
        assert "30-YEAR PROJECTION" in out
        assert "฿300,000" in out
        assert "ANALYSIS COMPLETE" in out

    def test_quiet_run_prints_nothing(self, capsys):
        assert main(["--quiet"]) == 0
        assert capsys.readouterr().out == ""

    def test_invalid_parameters(self, capsys):
        """Out-of-domain inputs list every bad field and exit 2."""
        assert main(["--ppa-term", "30", "--capacity", "-5"]) == 2
        err = capsys.readouterr().err
        assert "ppa_term_years" in err
        assert "capacity_kwp" in err

    def test_missing_load_file(self, tmp_path, capsys):
        assert main(["--load", str(tmp_path / "missing.json"), "--quiet"]) == 1
        assert "Error loading deal" in capsys.readouterr().err

    def test_bad_weekday_is_usage_error(self):
        with pytest.raises(SystemExit) as excinfo:
            main(["--days", "Mon,Funday"])
        assert excinfo.value.code == 2

    def test_methodology(self, capsys):
        assert main(["--methodology"]) == 0
        assert "KEY FORMULAS" in capsys.readouterr().out

    def test_sensitivity(self, capsys):
        assert main(["--sensitivity", "--quiet"]) == 0
        assert "BREAK-EVEN YEAR" in capsys.readouterr().out


class TestFiles:
    def test_save_then_load(self, tmp_path):
        path = tmp_path / "deal.json"
        assert main(["--capacity", "5000", "--name", "Saved", "--save", str(path), "--quiet"]) == 0
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["name"] == "Saved"
        assert data["parameters"]["capacity_kwp"] == 5000
        assert main(["--load", str(path), "--quiet"]) == 0

    def test_load_quoted_numbers(self, tmp_path):
        """String-typed numbers in a scenario file run like real numbers."""
        path = tmp_path / "quoted.json"
        path.write_text(json.dumps({"parameters": {"capacity_kwp": "11300"}}))
        assert main(["--load", str(path), "--quiet"]) == 0

    def test_load_fractional_term(self, tmp_path, capsys):
        path = tmp_path / "fraction.json"
        path.write_text(json.dumps({"parameters": {"ppa_term_years": 15.7}}))
        assert main(["--load", str(path), "--quiet"]) == 1
        assert "Error loading deal" in capsys.readouterr().err

    def test_report_and_excel(self, tmp_path):
        pdf = tmp_path / "deal.pdf"
        xlsx = tmp_path / "deal.xlsx"
        assert main(["--report", str(pdf), "--excel", str(xlsx), "--quiet"]) == 0
        assert pdf.stat().st_size > 0
        assert xlsx.stat().st_size > 0


class TestOverrides:
    def test_schedule_applies_cuf_proposal(self):
        args = build_parser().parse_args(["--schedule", "7 Days"])
        deal = apply_overrides(Deal(), args)
        assert deal.parameters.cuf_peak_percent == 99
        assert deal.parameters.cuf_off_peak_percent == 95

    def test_explicit_cuf_wins_over_schedule(self):
        args = build_parser().parse_args(["--schedule", "7 Days", "--cuf-off-peak", "30"])
        deal = apply_overrides(Deal(), args)
        assert deal.parameters.cuf_off_peak_percent == 30
        assert deal.parameters.cuf_peak_percent == 99

    def test_days_and_credit(self):
        args = build_parser().parse_args([
            "--days", "Sat,Mon", "--ownership", "MNC / Listed", "--financials",
        ])
        deal = apply_overrides(Deal(), args)
        assert deal.operating_days == [Weekday.MON, Weekday.SAT]
        assert deal.credit.ownership == "MNC / Listed"
        assert deal.credit.financials_available is True

    def test_no_financials_clears_loaded_flag(self):
        deal = Deal(credit=CreditProfile(financials_available=True))
        args = build_parser().parse_args(["--no-financials"])
        assert apply_overrides(deal, args).credit.financials_available is False

    def test_unset_options_keep_loaded_values(self):
        deal = Deal(name="Loaded")
        args = build_parser().parse_args([])
        assert apply_overrides(deal, args) == Deal(name="Loaded")
