"""Unit tests for the 30-year PPA projection engine.

Tests cover the year-by-year recurrence, phase split, major maintenance,
summary derivation, break-even detection, the CUF proposal heuristic, the
savings NPV and the sensitivity grid. Each test verifies against
hand-computed values.
"""

import dataclasses
import math

import numpy as np
import pytest

from ppa_modeler.models.calculations import (
    calculate_savings_npv,
    calculate_sensitivity,
    find_break_even_year,
    project,
    propose_cuf,
    summarize,
)
from ppa_modeler.models.project import (
    MAJOR_MAINTENANCE_COST,
    PROJECTION_YEARS,
    Phase,
    ProjectionParameters,
    ProjectionSummary,
    Weekday,
)


def _default_params(**overrides) -> ProjectionParameters:
    """11.3 MWp, 15-year PPA, 18% discount, 99/15 CUF."""
    return dataclasses.replace(ProjectionParameters(), **overrides)


# ---- Year 1 (no escalation) ----

class TestYearOne:
    def test_generation_split(self):
        """Year-1 peak/off-peak energy = 11300*1592*0.975 x share x CUF."""
        records, _ = project(_default_params())
        gen1 = 11300 * 1592 * 0.975
        assert records[0].peak_generation == pytest.approx(gen1 * 0.67 * 0.99)
        assert records[0].off_peak_generation == pytest.approx(gen1 * 0.33 * 0.15)

    def test_savings_use_unescalated_tariffs(self):
        """Year-1 savings = (peak x 4.18 + off-peak x 2.60) x 18%."""
        records, _ = project(_default_params())
        gen1 = 11300 * 1592 * 0.975
        expected = (gen1 * 0.67 * 0.99 * 4.18 + gen1 * 0.33 * 0.15 * 2.60) * 0.18
        assert records[0].annual_savings == pytest.approx(expected, rel=1e-12)
        assert records[0].phase is Phase.PPA_PHASE

    def test_energy_cost_recorded(self):
        """Energy cost is the grid value of consumed energy."""
        records, _ = project(_default_params())
        r = records[0]
        assert r.energy_cost == pytest.approx(r.peak_generation * 4.18 + r.off_peak_generation * 2.60)


# ---- Escalation and degradation ----

class TestRecurrence:
    def test_thirty_records_ascending(self):
        """The projection always has 30 years numbered 1..30."""
        records, _ = project(_default_params())
        assert len(records) == PROJECTION_YEARS
        assert [r.year for r in records] == list(range(1, 31))

    def test_year_two_degradation_and_tariff(self):
        """Year 2 applies 0.5% degradation and 1% tariff escalation."""
        records, _ = project(_default_params())
        gen2 = 11300 * 1592 * 0.975 * 0.995
        peak2 = gen2 * 0.67 * 0.99
        off2 = gen2 * 0.33 * 0.15
        assert records[1].peak_generation == pytest.approx(peak2)
        assert records[1].energy_cost == pytest.approx(peak2 * 4.18 * 1.01 + off2 * 2.60 * 1.01)

    def test_generation_strictly_decreasing(self):
        """Consumed energy falls every year with fixed CUFs."""
        records, _ = project(_default_params())
        peaks = [r.peak_generation for r in records]
        assert all(b < a for a, b in zip(peaks, peaks[1:]))

    def test_om_escalates_from_year_two(self):
        """Year-16 O&M = 300,000 x 1.03^15 when charged after handover."""
        records, _ = project(_default_params())
        assert records[15].phase is Phase.CLIENT_OWNED
        assert records[15].om_cost == pytest.approx(300000 * 1.03 ** 15)

    def test_deterministic(self):
        """Two runs on the same parameters are identical."""
        params = _default_params()
        assert project(params) == project(params)


# ---- Phases and maintenance ----

class TestPhases:
    def test_phase_boundary(self):
        """Last PPA year is the term, the next is Client Owned."""
        records, _ = project(_default_params(ppa_term_years=12))
        assert records[11].phase is Phase.PPA_PHASE
        assert records[12].phase is Phase.CLIENT_OWNED

    def test_ppa_years_carry_no_om(self):
        """O&M and maintenance are the investor's during the PPA."""
        records, _ = project(_default_params())
        for r in records[:15]:
            assert r.om_cost == 0.0
            assert r.maintenance_cost == 0.0
            assert r.annual_savings == pytest.approx(r.energy_cost * 0.18)

    def test_client_owned_savings(self):
        """Year 16 savings = energy cost - escalated O&M."""
        records, _ = project(_default_params())
        r = records[15]
        assert r.annual_savings == pytest.approx(r.energy_cost - 300000 * 1.03 ** 15)

    def test_maintenance_every_tenth_client_year(self):
        """Years 20 and 30 carry the 33.9M overhaul, year 25 does not."""
        records, _ = project(_default_params())
        assert records[19].maintenance_cost == MAJOR_MAINTENANCE_COST
        assert records[29].maintenance_cost == MAJOR_MAINTENANCE_COST
        assert records[24].maintenance_cost == 0.0
        r = records[19]
        assert r.annual_savings == pytest.approx(r.energy_cost - r.om_cost - 33_900_000)

    def test_no_maintenance_in_ppa_year_ten(self):
        """Year 10 falls inside a 15-year PPA so no overhaul is charged."""
        records, _ = project(_default_params())
        assert records[9].maintenance_cost == 0.0

    def test_short_term_maintenance_years(self):
        """Overhauls follow the absolute year: 10/20/30 after a 5-year PPA, 30 after 22."""
        records, _ = project(_default_params(ppa_term_years=5))
        assert [r.year for r in records if r.maintenance_cost] == [10, 20, 30]
        assert records[9].phase is Phase.CLIENT_OWNED
        records, _ = project(_default_params(ppa_term_years=22))
        assert [r.year for r in records if r.maintenance_cost] == [30]

    def test_maintenance_override(self):
        """A capacity-scaled overhaul charge replaces the default."""
        records, _ = project(_default_params(major_maintenance_cost=3000 * 5000))
        assert records[19].maintenance_cost == 15_000_000

    def test_full_term_ppa(self):
        """A 30-year PPA has no post-handover savings."""
        result = project(_default_params(ppa_term_years=30))
        assert all(r.phase is Phase.PPA_PHASE for r in result.records)
        assert result.summary.post_handover_total == 0.0
        assert result.summary.break_even_year == 1

    def test_cumulative_consistency(self):
        """Cumulative savings are the running sum of annual savings."""
        records, _ = project(_default_params(ppa_term_years=8))
        running = 0.0
        for r in records:
            running += r.annual_savings
            assert math.isclose(r.cumulative_savings, running, rel_tol=1e-12)


# ---- Summary and break-even ----

class TestSummary:
    def test_summary_totals(self):
        """Phase totals add up to the 30-year total; average is /30."""
        result = project(_default_params())
        s = result.summary
        assert s.total_30_year_savings == result.records[-1].cumulative_savings
        assert s.ppa_phase_total + s.post_handover_total == pytest.approx(s.total_30_year_savings)
        assert s.average_annual_savings == pytest.approx(s.total_30_year_savings / 30)

    def test_summarize_empty(self):
        """No records give an all-zero summary."""
        assert summarize([]) == ProjectionSummary()

    def test_break_even_year_one(self):
        """A discounted PPA saves money from year 1."""
        assert project(_default_params()).summary.break_even_year == 1

    def test_break_even_at_handover(self):
        """With no discount, savings start the year after handover."""
        summary = project(_default_params(discount_percent=0, ppa_term_years=5)).summary
        assert summary.break_even_year == 6

    def test_break_even_never(self):
        """Zero discount and crushing O&M never break even."""
        summary = project(_default_params(
            discount_percent=0, ppa_term_years=25, om_base_annual_cost=1e9,
        )).summary
        assert summary.break_even_year is None
        assert find_break_even_year([]) is None

    def test_result_unpacks(self):
        """ProjectionResult unpacks as (records, summary)."""
        result = project(_default_params())
        records, summary = result
        assert records is result.records
        assert summary is result.summary

    def test_to_dict(self):
        """Serialized records carry the phase label."""
        data = project(_default_params()).to_dict()
        assert len(data["records"]) == 30
        assert data["records"][0]["phase"] == "PPA Phase"
        assert data["records"][-1]["phase"] == "Client Owned"
        assert data["summary"]["break_even_year"] == 1


# ---- CUF proposal ----

class TestProposeCUF:
    def test_schedule_labels(self):
        assert propose_cuf("7 Days") == (99.0, 95.0)
        assert propose_cuf("6 Days") == (99.0, 45.0)
        assert propose_cuf("5 Days") == (99.0, 15.0)

    def test_fewer_days_use_five_day_proposal(self):
        """Three operating days fall back to the 5-day proposal."""
        assert propose_cuf(3) == (99.0, 15.0)

    def test_weekday_list(self):
        """Duplicate weekdays count once."""
        assert propose_cuf(list(Weekday)) == (99.0, 95.0)
        assert propose_cuf(["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "sat"]) == (99.0, 45.0)

    def test_unknown_label_raises(self):
        with pytest.raises(ValueError):
            propose_cuf("8 Days")


# ---- NPV ----

class TestSavingsNPV:
    def test_zero_rate_is_total(self):
        """At 0% the NPV equals the 30-year total."""
        records, summary = project(_default_params())
        assert calculate_savings_npv(records, 0.0) == pytest.approx(summary.total_30_year_savings)

    def test_discounts_from_year_one(self):
        """Year t savings are discounted by (1+r)^t."""
        records, _ = project(_default_params())
        expected = sum(r.annual_savings / 1.07 ** r.year for r in records)
        assert calculate_savings_npv(records, 0.07) == pytest.approx(expected)


# ---- Sensitivity ----

class TestSensitivity:
    def test_grid_shape_and_base_cell(self):
        """Grid cells match direct projections."""
        params = _default_params()
        grid = calculate_sensitivity(params, [10, 18], [10, 15, 20])
        assert grid["total"].shape == (2, 3)
        base = project(params).summary.total_30_year_savings
        assert grid["total"][1, 1] == pytest.approx(base)

    def test_break_even_nan_when_never(self):
        """Unreached break-even is NaN in the grid."""
        params = _default_params(om_base_annual_cost=1e9)
        grid = calculate_sensitivity(params, [0, 18], [25])
        assert np.isnan(grid["break_even"][0, 0])
        assert grid["break_even"][1, 0] == 1
