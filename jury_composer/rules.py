"""
Eligibility rules for committee members.

Everything here is a pure function of its arguments: history and streaks are
re-derived from the procedure list on every call and nothing is cached.
"""

import numpy as np
from typing import Iterable, List, Optional

from .models import (
    JuryRequirements,
    Procedure,
    Professor,
    ProfessorAvailability,
    WorkloadStats,
)
from .utils import DateLike, days_between, parse_date

# Gap that breaks a run of consecutive participations. Independent of
# JuryRequirements.min_days_between_participations.
STREAK_GAP_DAYS = 30


def get_participation_history(professor: Professor,
                              procedures: Iterable[Procedure]) -> List[Procedure]:
    """
    Procedures the professor served on, oldest first.

    Procedures on the same date keep their input order.
    """
    participations = [proc for proc in procedures if proc.has_member(professor.id)]
    return sorted(participations, key=lambda proc: parse_date(proc.date))


def calculate_consecutive_participations(professor: Professor,
                                         procedures: Iterable[Procedure]) -> int:
    """
    Length of the most recent run of participations with no gap over 30 days.

    Returns:
        0 without history, otherwise at least 1
    """
    history = get_participation_history(professor, procedures)
    if not history:
        return 0

    consecutive_count = 1
    for i in range(len(history) - 1, 0, -1):
        if days_between(history[i - 1].date, history[i].date) > STREAK_GAP_DAYS:
            break
        consecutive_count += 1

    return consecutive_count


def is_professor_available(professor: Professor,
                           target_date: DateLike,
                           requirements: JuryRequirements,
                           procedures: Iterable[Procedure]) -> ProfessorAvailability:
    """
    Decide whether a professor may serve on a committee on the target date.

    The cooldown on ``professor.last_date`` is checked first, then the cap on
    consecutive participations.

    Args:
        professor: Candidate member
        target_date: Date of the procedure being staffed
        requirements: Thresholds to apply
        procedures: Known procedures, used to derive the streak

    Returns:
        ProfessorAvailability with a reason when the professor is rejected

    Raises:
        InvalidDate: If target_date (or a date it is compared with) is invalid
    """
    last_date = professor.last_date
    minimum = requirements.min_days_between_participations

    if last_date:
        days_since_last = days_between(last_date, target_date)
        if days_since_last < minimum:
            return ProfessorAvailability(
                professor=professor,
                is_available=False,
                reason=f"Last participation was {days_since_last} days ago (minimum: {minimum})",
                last_participation_date=last_date,
                consecutive_count=0,
            )
    else:
        # Fail on a bad target date even when there is no cooldown to check
        parse_date(target_date)

    consecutive_count = calculate_consecutive_participations(professor, procedures)
    cap = requirements.max_consecutive_participations
    if consecutive_count >= cap:
        return ProfessorAvailability(
            professor=professor,
            is_available=False,
            reason=f"Maximum consecutive participations reached ({consecutive_count}/{cap})",
            last_participation_date=last_date,
            consecutive_count=consecutive_count,
        )

    return ProfessorAvailability(
        professor=professor,
        is_available=True,
        last_participation_date=last_date,
        consecutive_count=consecutive_count,
    )


def calculate_professor_workload(professor: Professor,
                                 procedures: Iterable[Procedure],
                                 year: Optional[int] = None) -> WorkloadStats:
    """
    Summarize how often a professor has served.

    Args:
        professor: Professor to report on
        procedures: Known procedures
        year: Restrict ``participations_in_year`` to this calendar year

    Returns:
        WorkloadStats; the average gap is 0.0 with fewer than two participations
    """
    history = get_participation_history(professor, procedures)

    if year is None:
        participations_in_year = len(history)
    else:
        participations_in_year = sum(1 for proc in history if parse_date(proc.date).year == year)

    average_days = 0.0
    if len(history) > 1:
        gaps = [days_between(prev.date, curr.date) for prev, curr in zip(history, history[1:])]
        average_days = float(np.mean(gaps))

    return WorkloadStats(
        total_participations=len(history),
        participations_in_year=participations_in_year,
        average_days_between_participations=average_days,
        last_participation_date=history[-1].date if history else None,
    )
