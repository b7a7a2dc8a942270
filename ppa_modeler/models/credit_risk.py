"""Counterparty credit scrutiny scoring for PPA underwriting.

A PPA investor is exposed to the offtaker for the whole contract term, so
every deal is screened on the client's sector, longevity, ownership,
location, leverage and payment record. The score (0-100) maps to a verdict
that sets the security package required before signing.

Scoring:
    base  = taxonomy priority points x 10  (30 when the sector is unknown)
    score = base + longevity + ownership + estate + financial overlay + payment
    score is clamped to [0, 100].
"""

from dataclasses import dataclass
from typing import Optional

from ppa_modeler.data.libraries import SectorTaxonomy, TaxonomyEntry


UNMATCHED_BASE_SCORE = 30

OWNERSHIP_ADJUSTMENTS = {
    "MNC / Listed": 15,
    "JV with MNC": 10,
    "Private Thai Co": 5,
    "Startup / SME": -5,
}

ESTATE_ADJUSTMENTS = {
    "Tier-1 Estate (Amata/WHA)": 15,
    "Tier-2 Estate": 10,
    "Industrial Zone": 5,
    "Standalone Site": 0,
}

DEBT_ADJUSTMENTS = {
    "Low": 5,
    "Medium": 0,
    "High": -15,  # over-leverage penalty
}

PAYMENT_ADJUSTMENTS = {
    "Excellent": 10,
    "Good": 5,
    "Fair": 0,
    "Poor": -10,
}

FINANCIALS_BONUS = 5


@dataclass
class CreditProfile:
    """Underwriting inputs for the offtaker.

    Attributes:
        years_in_business: Operating history of the client entity.
        financials_available: Audited financial statements were provided.
        debt_level: "Low" (D/E < 1), "Medium" (D/E 1-2) or "High" (D/E > 2).
        estate_type: Site location class, see ESTATE_ADJUSTMENTS.
        ownership: Ownership structure, see OWNERSHIP_ADJUSTMENTS.
        payment_history: "Excellent", "Good", "Fair" or "Poor".
    """

    years_in_business: float = 10
    financials_available: bool = False
    debt_level: str = "Medium"
    estate_type: str = "Tier-1 Estate (Amata/WHA)"
    ownership: str = "Private Thai Co"
    payment_history: str = "Good"

    def __post_init__(self):
        if self.years_in_business < 0:
            raise ValueError(f"years_in_business must be >= 0, got {self.years_in_business}")
        if self.debt_level not in DEBT_ADJUSTMENTS:
            raise ValueError(
                f"debt_level must be one of {list(DEBT_ADJUSTMENTS)}, got {self.debt_level!r}"
            )
        if self.estate_type not in ESTATE_ADJUSTMENTS:
            raise ValueError(
                f"estate_type must be one of {list(ESTATE_ADJUSTMENTS)}, got {self.estate_type!r}"
            )
        if self.ownership not in OWNERSHIP_ADJUSTMENTS:
            raise ValueError(
                f"ownership must be one of {list(OWNERSHIP_ADJUSTMENTS)}, got {self.ownership!r}"
            )
        if self.payment_history not in PAYMENT_ADJUSTMENTS:
            raise ValueError(
                f"payment_history must be one of {list(PAYMENT_ADJUSTMENTS)}, "
                f"got {self.payment_history!r}"
            )

    def to_dict(self) -> dict:
        return {
            "years_in_business": self.years_in_business,
            "financials_available": self.financials_available,
            "debt_level": self.debt_level,
            "estate_type": self.estate_type,
            "ownership": self.ownership,
            "payment_history": self.payment_history,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CreditProfile":
        return cls(**dict(data))


@dataclass(frozen=True)
class CreditVerdict:
    """Underwriting verdict and the security package it requires."""

    label: str
    requirement: str


@dataclass(frozen=True)
class CreditAssessment:
    """Score, verdict and the taxonomy entry the base score came from."""

    score: int
    verdict: CreditVerdict
    taxonomy_entry: Optional[TaxonomyEntry] = None

    def to_dict(self) -> dict:
        entry = self.taxonomy_entry
        return {
            "score": self.score,
            "verdict": self.verdict.label,
            "requirement": self.verdict.requirement,
            "taxonomy_entry": entry.to_dict() if entry else None,
        }


def _longevity_adjustment(years: float) -> int:
    if years > 20:
        return 10
    if years > 10:
        return 7
    if years > 5:
        return 5
    if years < 2:
        return -5
    return 0


def score_credit(profile: CreditProfile, taxonomy_entry: Optional[TaxonomyEntry] = None) -> int:
    """Compute the credit scrutiny score for a counterparty.

    Args:
        profile: Underwriting inputs.
        taxonomy_entry: Sector classification of the client, or None when
            the sector is not in the taxonomy.

    Returns:
        Integer score in [0, 100]; higher is a stronger credit.
    """
    score = taxonomy_entry.points * 10 if taxonomy_entry else UNMATCHED_BASE_SCORE
    score += _longevity_adjustment(profile.years_in_business)
    score += OWNERSHIP_ADJUSTMENTS[profile.ownership]
    score += ESTATE_ADJUSTMENTS[profile.estate_type]
    if profile.financials_available:
        score += FINANCIALS_BONUS
    score += DEBT_ADJUSTMENTS[profile.debt_level]
    score += PAYMENT_ADJUSTMENTS[profile.payment_history]
    return min(max(score, 0), 100)


def get_verdict(score: float) -> CreditVerdict:
    """Map a credit score to the investor verdict."""
    if score >= 85:
        return CreditVerdict("AAA / AA - PRIME", "Standard PPA. No Deposit Required.")
    if score >= 65:
        return CreditVerdict("A / BBB - BANKABLE", "Require 3-month Security Deposit.")
    if score >= 45:
        return CreditVerdict("BB - SPECULATIVE", "6-month Deposit + Parent Co. Guarantee.")
    return CreditVerdict("C - HIGH RISK", "Reject or 12-month Bank Guarantee Required.")


def assess_credit(
    profile: CreditProfile,
    taxonomy: Optional[SectorTaxonomy] = None,
    sector: str = "",
    industry: str = "",
    sub_industry: str = "",
) -> CreditAssessment:
    """Score a counterparty and return the verdict.

    The taxonomy entry is matched by sub-industry first, then industry,
    then sector.

    Args:
        profile: Underwriting inputs.
        taxonomy: Loaded sector taxonomy; None scores as an unknown sector.
        sector: Client sector name.
        industry: Client industry name.
        sub_industry: Client sub-industry name.

    Returns:
        CreditAssessment with score, verdict and matched taxonomy entry.
    """
    entry = None
    if taxonomy is not None:
        entry = taxonomy.find(sector=sector, industry=industry, sub_industry=sub_industry)
    score = score_credit(profile, entry)
    return CreditAssessment(score=score, verdict=get_verdict(score), taxonomy_entry=entry)
