"""30-year PPA investment projection engine.

Models an investor build-own-transfer deal: the investor operates the
rooftop system for the PPA term and sells energy to the client at a
discount to the grid tariff; at handover the client takes ownership and
keeps the full energy value minus O&M and periodic major maintenance.

The projection is a sequential recurrence: each year's tariff, O&M cost
and generation are derived from the previous year's escalated or degraded
values, so years are computed in order with no rounding between them.
"""

import dataclasses
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
import numpy_financial as npf

from ppa_modeler.models.project import (
    ANNUAL_DEGRADATION,
    FIRST_YEAR_DEGRADATION,
    MAJOR_MAINTENANCE_INTERVAL,
    OFF_PEAK_SHARE,
    OM_ESCALATION,
    PEAK_SHARE,
    PROJECTION_YEARS,
    TARIFF_ESCALATION,
    Phase,
    ProjectionParameters,
    ProjectionResult,
    ProjectionSummary,
    Weekday,
    YearRecord,
)

logger = logging.getLogger(__name__)


# Operating schedule -> (peak CUF %, off-peak CUF %)
CUF_PROPOSALS = {
    7: (99.0, 95.0),
    6: (99.0, 45.0),
    5: (99.0, 15.0),
}

SCHEDULE_LABELS = ("5 Days", "6 Days", "7 Days")


def project(params: ProjectionParameters) -> ProjectionResult:
    r"""Project 30 years of generation, cost and client savings.

    For each year t = 1..30:

        G_t = G_{t-1} \cdot (1 - d_t),   G_0 = kWp \cdot Y,
              d_1 = 2.5\%, d_t = 0.5\% thereafter

        E^{peak}_t = 0.67 \cdot G_t \cdot CUF_{peak}
        E^{off}_t  = 0.33 \cdot G_t \cdot CUF_{off}

        Tariffs escalate 1%/yr and O&M 3%/yr from year 2.

        Cost_t = E^{peak}_t \cdot T^{peak}_t + E^{off}_t \cdot T^{off}_t

        S_t = Cost_t \cdot discount                      (t <= PPA term)
        S_t = Cost_t - OM_t - M_t                        (t >  PPA term)

    where M_t is the major-maintenance charge in years divisible by 10.

    The function is pure: it performs no validation and returns freshly
    allocated records on every call.

    Args:
        params: Projection inputs.

    Returns:
        ProjectionResult with 30 YearRecords (ascending) and the summary.
    """
    yearly_generation = params.capacity_kwp * params.baseline_generation_per_kwp
    peak_tariff = params.peak_rate
    off_peak_tariff = params.off_peak_rate
    om_cost = params.om_base_annual_cost
    cumulative = 0.0
    records: List[YearRecord] = []

    for year in range(1, PROJECTION_YEARS + 1):
        if year == 1:
            yearly_generation *= 1 - FIRST_YEAR_DEGRADATION
        else:
            yearly_generation *= 1 - ANNUAL_DEGRADATION

        peak_gen = yearly_generation * PEAK_SHARE * (params.cuf_peak_percent / 100)
        off_peak_gen = yearly_generation * OFF_PEAK_SHARE * (params.cuf_off_peak_percent / 100)

        if year > 1:
            peak_tariff *= 1 + TARIFF_ESCALATION
            off_peak_tariff *= 1 + TARIFF_ESCALATION
            om_cost *= 1 + OM_ESCALATION

        energy_cost = peak_gen * peak_tariff + off_peak_gen * off_peak_tariff

        if year <= params.ppa_term_years:
            phase = Phase.PPA_PHASE
            charged_om = 0.0
            maintenance = 0.0
            savings = energy_cost * (params.discount_percent / 100)
        else:
            phase = Phase.CLIENT_OWNED
            charged_om = om_cost
            maintenance = (
                params.major_maintenance_cost if year % MAJOR_MAINTENANCE_INTERVAL == 0 else 0.0
            )
            savings = energy_cost - charged_om - maintenance

        cumulative += savings
        records.append(YearRecord(
            year=year,
            peak_generation=peak_gen,
            off_peak_generation=off_peak_gen,
            annual_savings=savings,
            cumulative_savings=cumulative,
            phase=phase,
            energy_cost=energy_cost,
            om_cost=charged_om,
            maintenance_cost=maintenance,
        ))

    summary = summarize(records)
    logger.debug(
        "Projected %d years: total=%.0f break_even=%s",
        len(records), summary.total_30_year_savings, summary.break_even_year,
    )
    return ProjectionResult(records=tuple(records), summary=summary)


def find_break_even_year(records: Sequence[YearRecord]) -> Optional[int]:
    """Return the first year whose cumulative savings are positive.

    Args:
        records: Year records in ascending order.

    Returns:
        1-based year, or None if cumulative savings never turn positive.
    """
    for index, record in enumerate(records, start=1):
        if record.cumulative_savings > 0:
            return index
    return None


def summarize(records: Sequence[YearRecord]) -> ProjectionSummary:
    """Derive headline statistics from a full set of year records.

    Args:
        records: The 30 year records of a projection, ascending.

    Returns:
        ProjectionSummary. An empty sequence yields an all-zero summary.
    """
    if not records:
        return ProjectionSummary()
    total = records[-1].cumulative_savings
    ppa_total = sum(r.annual_savings for r in records if r.phase is Phase.PPA_PHASE)
    post_total = sum(r.annual_savings for r in records if r.phase is Phase.CLIENT_OWNED)
    return ProjectionSummary(
        total_30_year_savings=total,
        ppa_phase_total=ppa_total,
        post_handover_total=post_total,
        average_annual_savings=total / PROJECTION_YEARS,
        break_even_year=find_break_even_year(records),
    )


def propose_cuf(schedule: Union[str, int, Iterable]) -> Tuple[float, float]:
    """Propose peak/off-peak capacity utilization for an operating schedule.

    Facilities that run through the weekend consume far more of the
    off-peak (weekend) generation; peak utilization stays at 99%.

    Args:
        schedule: A schedule label ("5 Days", "6 Days", "7 Days"), a day
            count, or an iterable of weekdays.

    Returns:
        (cuf_peak_percent, cuf_off_peak_percent). Five or fewer days
        give (99, 15).

    Raises:
        ValueError: If a label is not one of SCHEDULE_LABELS.
    """
    if isinstance(schedule, str):
        if schedule not in SCHEDULE_LABELS:
            raise ValueError(f"schedule must be one of {list(SCHEDULE_LABELS)}, got {schedule!r}")
        days = int(schedule.split()[0])
    elif isinstance(schedule, int):
        days = schedule
    else:
        days = len({Weekday.parse(d) for d in schedule})
    return CUF_PROPOSALS[min(max(days, 5), 7)]


def calculate_savings_npv(records: Sequence[YearRecord], discount_rate: float) -> float:
    r"""Present value of the client's annual savings stream.

    Formula:
        PV = \sum_{t=1}^{30} \frac{S_t}{(1+r)^t}

    Args:
        records: Year records in ascending order.
        discount_rate: Annual discount rate as decimal (e.g., 0.07 for 7%).

    Returns:
        Present value in the projection's currency.
    """
    # numpy_financial.npv discounts from t=0, so year 0 carries no cash flow.
    cash_flows = [0.0] + [r.annual_savings for r in records]
    return float(npf.npv(discount_rate, cash_flows))


def calculate_sensitivity(
    params: ProjectionParameters,
    discount_levels: Sequence[float],
    term_levels: Sequence[int],
) -> Dict[str, np.ndarray]:
    """Grid of 30-year savings and break-even years over discount x PPA term.

    Args:
        params: Base parameters; every other input is held fixed.
        discount_levels: Client discount percentages for the rows.
        term_levels: PPA terms in years for the columns.

    Returns:
        Dict with "discount_levels" and "term_levels" axes, "total"
        (30-year savings) and "break_even" (year, NaN when never reached)
        matrices of shape (len(discount_levels), len(term_levels)).
    """
    discounts = np.asarray(discount_levels, dtype=float)
    terms = np.asarray(term_levels, dtype=int)
    total = np.zeros((len(discounts), len(terms)))
    break_even = np.full((len(discounts), len(terms)), np.nan)

    for i, discount in enumerate(discounts):
        for j, term in enumerate(terms):
            scenario = dataclasses.replace(
                params, discount_percent=float(discount), ppa_term_years=int(term)
            )
            summary = project(scenario).summary
            total[i, j] = summary.total_30_year_savings
            if summary.break_even_year is not None:
                break_even[i, j] = summary.break_even_year

    return {
        "discount_levels": discounts,
        "term_levels": terms,
        "total": total,
        "break_even": break_even,
    }
