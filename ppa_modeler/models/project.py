"""Data models for the PPA Deal Modeler.

Defines the input parameter record for the 30-year investment projection,
the per-year and summary output records, the curtailment result, and the
Deal container that groups everything an opportunity's "Math", "Tech" and
"Risk" views need. All models support JSON serialization via
to_dict()/from_dict() methods.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from ppa_modeler.models.credit_risk import CreditProfile


# Projection horizon and fixed technical constants
PROJECTION_YEARS = 30
BASELINE_GENERATION_PER_KWP = 1592.0  # kWh/kWp/year
FIRST_YEAR_DEGRADATION = 0.025
ANNUAL_DEGRADATION = 0.005
PEAK_SHARE = 0.67
OFF_PEAK_SHARE = 0.33
TARIFF_ESCALATION = 0.01
OM_ESCALATION = 0.03
MAJOR_MAINTENANCE_COST = 33_900_000.0
MAJOR_MAINTENANCE_INTERVAL = 10

# Curtailment constants
SOLAR_HOURS_PER_DAY = 4.5
DAYS_PER_WEEK = 7


class Phase(Enum):
    """Ownership phase of a projection year."""

    PPA_PHASE = "PPA Phase"
    CLIENT_OWNED = "Client Owned"


class Grade(Enum):
    """Bankability grade derived from the curtailment score."""

    A = "A"
    B = "B"
    C = "C"

    @property
    def label(self) -> str:
        return _GRADE_LABELS[self]


_GRADE_LABELS = {
    Grade.A: "A - High Yield",
    Grade.B: "B - Medium Yield",
    Grade.C: "C - High Risk",
}


class Weekday(Enum):
    """Facility operating day."""

    MON = "Mon"
    TUE = "Tue"
    WED = "Wed"
    THU = "Thu"
    FRI = "Fri"
    SAT = "Sat"
    SUN = "Sun"

    @classmethod
    def parse(cls, value) -> "Weekday":
        """Parse a weekday from an enum member, short name or full name.

        Accepts "Mon", "mon", "Monday", "MONDAY" and so on.

        Raises:
            ValueError: If the value does not name a weekday.
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for day in cls:
            if text in (day.value.lower(), _FULL_DAY_NAMES[day]):
                return day
        raise ValueError(f"Unknown weekday: {value!r}")


_FULL_DAY_NAMES = {
    Weekday.MON: "monday",
    Weekday.TUE: "tuesday",
    Weekday.WED: "wednesday",
    Weekday.THU: "thursday",
    Weekday.FRI: "friday",
    Weekday.SAT: "saturday",
    Weekday.SUN: "sunday",
}

WORKING_WEEK = [Weekday.MON, Weekday.TUE, Weekday.WED, Weekday.THU, Weekday.FRI]


@dataclass(frozen=True)
class ProjectionParameters:
    """Inputs for one 30-year PPA projection.

    The record is a snapshot: a new instance is built for every
    recalculation. No range checks are applied here; see
    ppa_modeler.data.validators for boundary validation.

    Attributes:
        capacity_kwp: Installed nameplate capacity in kWp.
        ppa_term_years: Years the investor owns and operates the system (1-25).
        om_base_annual_cost: Year-1 operations & maintenance cost.
        peak_rate: Grid tariff during peak hours (currency/kWh).
        off_peak_rate: Grid tariff during off-peak hours (currency/kWh).
        discount_percent: Client discount vs. grid tariff during the PPA (0-100).
        cuf_peak_percent: Share of peak generation the client consumes (0-100).
        cuf_off_peak_percent: Share of off-peak generation the client consumes (0-100).
        baseline_generation_per_kwp: Annual yield per kWp before degradation.
        major_maintenance_cost: Overhaul charge applied every 10th year
            after handover.
    """

    capacity_kwp: float = 11300.0
    ppa_term_years: int = 15
    om_base_annual_cost: float = 300000.0
    peak_rate: float = 4.18
    off_peak_rate: float = 2.60
    discount_percent: float = 18.0
    cuf_peak_percent: float = 99.0
    cuf_off_peak_percent: float = 15.0
    baseline_generation_per_kwp: float = BASELINE_GENERATION_PER_KWP
    major_maintenance_cost: float = MAJOR_MAINTENANCE_COST

    def to_dict(self) -> dict:
        return {
            "capacity_kwp": self.capacity_kwp,
            "ppa_term_years": self.ppa_term_years,
            "om_base_annual_cost": self.om_base_annual_cost,
            "peak_rate": self.peak_rate,
            "off_peak_rate": self.off_peak_rate,
            "discount_percent": self.discount_percent,
            "cuf_peak_percent": self.cuf_peak_percent,
            "cuf_off_peak_percent": self.cuf_off_peak_percent,
            "baseline_generation_per_kwp": self.baseline_generation_per_kwp,
            "major_maintenance_cost": self.major_maintenance_cost,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProjectionParameters":
        """Build parameters from a JSON mapping, coercing numeric fields.

        Raises:
            ValueError: If a field is not numeric, or the PPA term is not
                a whole number of years.
        """
        known = cls.__dataclass_fields__
        kwargs = {k: float(v) for k, v in dict(data).items() if k in known}
        if "ppa_term_years" in kwargs:
            term = kwargs["ppa_term_years"]
            if not term.is_integer():
                raise ValueError(f"ppa_term_years must be a whole number of years, got {term:g}")
            kwargs["ppa_term_years"] = int(term)
        return cls(**kwargs)


@dataclass(frozen=True)
class YearRecord:
    """Projection output for a single year.

    Attributes:
        year: Projection year, 1..30.
        peak_generation: Consumed peak-window energy (kWh).
        off_peak_generation: Consumed off-peak energy (kWh).
        annual_savings: Client savings for the year; negative in a
            Client Owned year that carries a major overhaul.
        cumulative_savings: Running total of annual_savings through this year.
        phase: PPA Phase while year <= PPA term, Client Owned afterwards.
        energy_cost: Grid cost of the consumed energy at escalated tariffs.
        om_cost: Escalated O&M charged to the client (0 during the PPA).
        maintenance_cost: Major overhaul charged this year (0 during the PPA).
    """

    year: int
    peak_generation: float
    off_peak_generation: float
    annual_savings: float
    cumulative_savings: float
    phase: Phase
    energy_cost: float = 0.0
    om_cost: float = 0.0
    maintenance_cost: float = 0.0

    def to_dict(self) -> dict:
        return {
            "year": self.year,
            "peak_generation": self.peak_generation,
            "off_peak_generation": self.off_peak_generation,
            "annual_savings": self.annual_savings,
            "cumulative_savings": self.cumulative_savings,
            "phase": self.phase.value,
            "energy_cost": self.energy_cost,
            "om_cost": self.om_cost,
            "maintenance_cost": self.maintenance_cost,
        }


@dataclass(frozen=True)
class ProjectionSummary:
    """Headline statistics derived from the 30 year records.

    Attributes:
        total_30_year_savings: Cumulative savings at year 30.
        ppa_phase_total: Sum of annual savings over PPA Phase years.
        post_handover_total: Sum of annual savings over Client Owned years.
        average_annual_savings: total_30_year_savings / 30.
        break_even_year: First year with positive cumulative savings, or None.
    """

    total_30_year_savings: float = 0.0
    ppa_phase_total: float = 0.0
    post_handover_total: float = 0.0
    average_annual_savings: float = 0.0
    break_even_year: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "total_30_year_savings": self.total_30_year_savings,
            "ppa_phase_total": self.ppa_phase_total,
            "post_handover_total": self.post_handover_total,
            "average_annual_savings": self.average_annual_savings,
            "break_even_year": self.break_even_year,
        }


@dataclass(frozen=True)
class ProjectionResult:
    """Year records plus summary; unpacks as ``records, summary``."""

    records: Tuple[YearRecord, ...]
    summary: ProjectionSummary

    def __iter__(self) -> Iterator:
        return iter((self.records, self.summary))

    def to_dict(self) -> dict:
        return {
            "records": [r.to_dict() for r in self.records],
            "summary": self.summary.to_dict(),
        }


@dataclass(frozen=True)
class CurtailmentResult:
    """Solar utilization and bankability for an operating schedule.

    Attributes:
        operating_days: Distinct operating days, ordered Mon..Sun.
        curtailment_percent: Share of the weekly solar window left unused (0-100).
        bankability_score: 100 - curtailment_percent.
        grade: A (> 90), B (> 70) or C.
    """

    operating_days: Tuple[Weekday, ...]
    curtailment_percent: float
    bankability_score: float
    grade: Grade

    def to_dict(self) -> dict:
        return {
            "operating_days": [d.value for d in self.operating_days],
            "curtailment_percent": self.curtailment_percent,
            "bankability_score": self.bankability_score,
            "grade": self.grade.value,
            "grade_label": self.grade.label,
        }


@dataclass
class Deal:
    """Container for a PPA opportunity under evaluation.

    Groups the projection parameters with the facility schedule and the
    counterparty data used for risk screening. Results are not stored;
    they are recomputed from the inputs on demand.

    Attributes:
        name: Deal name (e.g., "Rayong Plant 2 Rooftop").
        account_name: Client legal entity.
        sector: Sector from the sector taxonomy.
        industry: Industry within the sector.
        sub_industry: Sub-industry within the industry.
        operating_days: Days per week the facility consumes daytime load.
        parameters: Financial and technical projection inputs.
        credit: Counterparty underwriting inputs.
    """

    name: str = ""
    account_name: str = ""
    sector: str = "Other Industrial"
    industry: str = ""
    sub_industry: str = ""
    operating_days: List[Weekday] = field(default_factory=lambda: list(WORKING_WEEK))
    parameters: ProjectionParameters = field(default_factory=ProjectionParameters)
    credit: CreditProfile = field(default_factory=CreditProfile)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "account_name": self.account_name,
            "sector": self.sector,
            "industry": self.industry,
            "sub_industry": self.sub_industry,
            "operating_days": [d.value for d in self.operating_days],
            "parameters": self.parameters.to_dict(),
            "credit": self.credit.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Deal":
        return cls(
            name=data.get("name", ""),
            account_name=data.get("account_name", ""),
            sector=data.get("sector", "Other Industrial"),
            industry=data.get("industry", ""),
            sub_industry=data.get("sub_industry", ""),
            operating_days=[
                Weekday.parse(d) for d in data.get("operating_days", [d.value for d in WORKING_WEEK])
            ],
            parameters=ProjectionParameters.from_dict(data.get("parameters", {})),
            credit=CreditProfile.from_dict(data.get("credit", {})),
        )
