"""Tests for counterparty credit scrutiny scoring."""

import pytest

from ppa_modeler.data.libraries import SectorTaxonomy, TaxonomyEntry
from ppa_modeler.models.credit_risk import (
    CreditProfile,
    assess_credit,
    get_verdict,
    score_credit,
)


@pytest.fixture(scope="module")
def taxonomy():
    return SectorTaxonomy()


class TestScoring:
    def test_default_profile_unknown_sector(self):
        """30 base + 0 longevity + 5 private + 15 tier-1 + 0 debt + 5 payment = 55."""
        assert score_credit(CreditProfile()) == 55

    def test_taxonomy_points_set_base(self):
        """A 5-point sector starts at 50 instead of 30."""
        entry = TaxonomyEntry("Financial Services", "Banking", "Commercial banks", 1, 5)
        assert score_credit(CreditProfile(), entry) == 75

    def test_clamped_to_100(self):
        profile = CreditProfile(
            years_in_business=25, financials_available=True, debt_level="Low",
            estate_type="Tier-1 Estate (Amata/WHA)", ownership="MNC / Listed",
            payment_history="Excellent",
        )
        entry = TaxonomyEntry("s", "i", "x", 1, 5)
        assert score_credit(profile, entry) == 100

    def test_clamped_to_zero(self):
        profile = CreditProfile(
            years_in_business=1, debt_level="High", estate_type="Standalone Site",
            ownership="Startup / SME", payment_history="Poor",
        )
        assert score_credit(profile) == 0

    def test_longevity_steps(self):
        """Longevity bonus: >20 +10, >10 +7, >5 +5, <2 -5."""
        base = score_credit(CreditProfile(years_in_business=3))
        assert score_credit(CreditProfile(years_in_business=21)) == base + 10
        assert score_credit(CreditProfile(years_in_business=11)) == base + 7
        assert score_credit(CreditProfile(years_in_business=6)) == base + 5
        assert score_credit(CreditProfile(years_in_business=10)) == base
        assert score_credit(CreditProfile(years_in_business=1)) == base - 5

    def test_invalid_choice_raises(self):
        with pytest.raises(ValueError):
            CreditProfile(ownership="Government")
        with pytest.raises(ValueError):
            CreditProfile(years_in_business=-1)


class TestVerdict:
    def test_thresholds(self):
        assert get_verdict(85).label == "AAA / AA - PRIME"
        assert get_verdict(84).label == "A / BBB - BANKABLE"
        assert get_verdict(65).label == "A / BBB - BANKABLE"
        assert get_verdict(64).label == "BB - SPECULATIVE"
        assert get_verdict(45).label == "BB - SPECULATIVE"
        assert get_verdict(44).label == "C - HIGH RISK"

    def test_requirement_text(self):
        assert get_verdict(100).requirement == "Standard PPA. No Deposit Required."
        assert "Bank Guarantee" in get_verdict(0).requirement


class TestAssessCredit:
    def test_sub_industry_match(self, taxonomy):
        result = assess_credit(CreditProfile(), taxonomy, sub_industry="Commercial banks")
        assert result.taxonomy_entry.industry == "Banking"
        assert result.score == 75
        assert result.verdict.label == "A / BBB - BANKABLE"

    def test_sector_fallback(self, taxonomy):
        """An unknown sub-industry falls back to the sector's first entry."""
        result = assess_credit(
            CreditProfile(), taxonomy, sector="Financial Services", sub_industry="Unknown"
        )
        assert result.taxonomy_entry.sector == "Financial Services"

    def test_unmatched_sector(self, taxonomy):
        result = assess_credit(CreditProfile(), taxonomy, sector="Other Industrial")
        assert result.taxonomy_entry is None
        assert result.score == 55
        assert result.to_dict()["taxonomy_entry"] is None

    def test_without_taxonomy(self):
        result = assess_credit(CreditProfile(), sub_industry="Commercial banks")
        assert result.taxonomy_entry is None
        assert result.verdict.label == "BB - SPECULATIVE"
