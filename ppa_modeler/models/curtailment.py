"""Load and curtailment analysis for PPA bankability screening.

A PPA investor is paid only for energy the client consumes. Solar output
on days the facility is closed is curtailed (or exported at no value), so
the operating schedule is the first-order yield risk of a rooftop deal.

    Weekly solar window = 7 days x 4.5 productive hours = 31.5
    Utilized window     = operating days x 4.5
    Curtailment         = (window - utilized) / window x 100
    Bankability score   = 100 - curtailment
"""

import logging
from typing import Iterable, List

from ppa_modeler.models.project import (
    DAYS_PER_WEEK,
    SOLAR_HOURS_PER_DAY,
    CurtailmentResult,
    Grade,
    Weekday,
)

logger = logging.getLogger(__name__)

GRADE_A_THRESHOLD = 90.0
GRADE_B_THRESHOLD = 70.0
CURTAILMENT_WARNING_PERCENT = 10.0


def parse_weekdays(names: Iterable) -> List[Weekday]:
    """Parse weekday names into distinct Weekday members ordered Mon..Sun.

    Raises:
        ValueError: If any name is not a weekday.
    """
    selected = {Weekday.parse(name) for name in names}
    return [day for day in Weekday if day in selected]


def grade_bankability(score: float) -> Grade:
    """Grade a bankability score: > 90 is A, > 70 is B, otherwise C."""
    if score > GRADE_A_THRESHOLD:
        return Grade.A
    if score > GRADE_B_THRESHOLD:
        return Grade.B
    return Grade.C


def analyze_curtailment(operating_days: Iterable) -> CurtailmentResult:
    """Compute curtailment and bankability for an operating schedule.

    An empty schedule is valid and yields 100% curtailment (grade C).

    Args:
        operating_days: Weekday members or names; duplicates count once.

    Returns:
        CurtailmentResult for the schedule.
    """
    days = parse_weekdays(operating_days)
    total_window = DAYS_PER_WEEK * SOLAR_HOURS_PER_DAY
    utilized_window = len(days) * SOLAR_HOURS_PER_DAY
    curtailment = (total_window - utilized_window) / total_window * 100
    score = 100 - curtailment
    grade = grade_bankability(score)
    logger.debug("Curtailment for %d days: %.2f%% (grade %s)", len(days), curtailment, grade.value)
    return CurtailmentResult(
        operating_days=tuple(days),
        curtailment_percent=curtailment,
        bankability_score=score,
        grade=grade,
    )


def curtailment_warnings(result: CurtailmentResult) -> List[str]:
    """Qualitative risk warnings for a curtailment result.

    Returns:
        Warning messages for display; empty when the schedule is
        effectively fully utilized.
    """
    warnings = []
    if result.curtailment_percent > CURTAILMENT_WARNING_PERCENT:
        warnings.append(
            "Investor yield is reduced because the facility is closed on weekends. "
            "Consider a smaller system or adding BESS to capture the extra "
            f"{result.curtailment_percent:.0f}% production."
        )
    if result.grade is Grade.C:
        warnings.append(
            f"Bankability score {result.bankability_score:.0f}/100 is high risk; "
            "the deal is unlikely to clear investment committee as sized."
        )
    return warnings
