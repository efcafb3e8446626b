"""
Candidate filtering, ordering and committee composition.
"""

import unicodedata
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .models import (
    JuryComposition,
    JuryRequirements,
    Procedure,
    Professor,
    ProfessorAvailability,
    ProfessorFilter,
    ProfessorTitle,
    SortCriteria,
)
from .rules import is_professor_available
from .utils import DateLike, parse_date


def filter_professors(professors: Iterable[Professor],
                      professor_filter: Optional[ProfessorFilter] = None) -> List[Professor]:
    """
    Keep the professors matching every criterion set on the filter.

    Unset criteria match everything. Rating and distance bounds are inclusive.
    """
    candidates = list(professors)
    if professor_filter is None:
        return candidates

    f = professor_filter
    if f.title is not None:
        candidates = [p for p in candidates if p.title == f.title]
    if f.university is not None:
        candidates = [p for p in candidates if p.university == f.university]
    if f.min_rating is not None:
        candidates = [p for p in candidates if p.rating >= f.min_rating]
    if f.max_rating is not None:
        candidates = [p for p in candidates if p.rating <= f.max_rating]
    if f.max_distance is not None:
        candidates = [p for p in candidates if p.km <= f.max_distance]
    if f.exclude_ids:
        candidates = [p for p in candidates if p.id not in f.exclude_ids]
    return candidates


def _name_key(name: str) -> Tuple[str, str]:
    """Accent- and case-insensitive primary key; the decomposed name breaks ties."""
    decomposed = unicodedata.normalize('NFKD', name).casefold()
    base = ''.join(c for c in decomposed if not unicodedata.combining(c))
    return base, decomposed


def _last_participation_key(professor: Professor) -> int:
    if not professor.last_date:
        return 0
    return parse_date(professor.last_date).toordinal()


_SORT_KEYS = {
    SortCriteria.DISTANCE: lambda p: p.km,
    SortCriteria.LAST_PARTICIPATION: _last_participation_key,
    SortCriteria.PARTICIPATION_COUNT: lambda p: p.count,
    SortCriteria.RATING: lambda p: p.rating,
    SortCriteria.NAME: lambda p: _name_key(p.name),
}


def sort_professors(professors: Iterable[Professor],
                    criteria: Union[SortCriteria, str] = SortCriteria.DISTANCE,
                    ascending: bool = True) -> List[Professor]:
    """
    Return a sorted copy of the professors.

    The sort is stable in both directions: professors with equal keys keep
    their input order whether ``ascending`` is True or False.

    Args:
        professors: Professors to sort
        criteria: SortCriteria member or its value ("distance", "name", ...)
        ascending: Sort direction

    Returns:
        New list; the input is left untouched
    """
    key = _SORT_KEYS[SortCriteria(criteria)]
    # sorted(reverse=True) preserves the order of equal elements
    return sorted(professors, key=key, reverse=not ascending)


def get_available_professors(professors: Iterable[Professor],
                             target_date: DateLike,
                             requirements: JuryRequirements,
                             procedures: Sequence[Procedure],
                             professor_filter: Optional[ProfessorFilter] = None
                             ) -> List[ProfessorAvailability]:
    """
    Evaluate every professor passing the filter against the target date.

    Returns:
        One ProfessorAvailability per filtered professor, available or not
    """
    return [
        is_professor_available(professor, target_date, requirements, procedures)
        for professor in filter_professors(professors, professor_filter)
    ]


def create_jury_composition(professors: Iterable[Professor],
                            procedures: Sequence[Procedure],
                            target_date: DateLike,
                            requirements: JuryRequirements,
                            home_university: str) -> JuryComposition:
    """
    Select a committee for a procedure on the target date.

    Available professors are split by title; each rank is filled closest-first
    up to its quota. Shortfalls are reported in ``errors`` and external members
    beyond ``max_distance_for_external`` in ``warnings``. The composition is
    returned even when it is under quota.

    Args:
        professors: Candidate pool, already filtered by the caller
        procedures: Known procedures, used for the eligibility rules
        target_date: Date of the procedure
        requirements: Quotas and thresholds
        home_university: Affiliation of the procedure; other affiliations are
                         external

    Returns:
        A fresh JuryComposition
    """
    errors = []
    warnings = []

    available = [
        availability.professor
        for availability in get_available_professors(professors, target_date, requirements, procedures)
        if availability.is_available
    ]

    professors_list = [p for p in available if p.title == ProfessorTitle.PROFESSOR]
    associates_list = [p for p in available if p.title == ProfessorTitle.ASSOCIATE_PROFESSOR]

    if len(professors_list) < requirements.professor_count:
        errors.append(
            f"Insufficient professors available: "
            f"{len(professors_list)}/{requirements.professor_count}"
        )
    if len(associates_list) < requirements.associate_professor_count:
        errors.append(
            f"Insufficient associate professors available: "
            f"{len(associates_list)}/{requirements.associate_professor_count}"
        )

    selected_professors = sort_professors(professors_list, SortCriteria.DISTANCE)[:requirements.professor_count]
    selected_associates = sort_professors(associates_list, SortCriteria.DISTANCE)[:requirements.associate_professor_count]

    all_members = selected_professors + selected_associates
    internal_members = [p for p in all_members if p.university == home_university]
    external_members = [p for p in all_members if p.university != home_university]

    distant_external = [p for p in external_members if p.km > requirements.max_distance_for_external]
    if distant_external:
        warnings.append(
            f"{len(distant_external)} external members exceed maximum distance "
            f"({requirements.max_distance_for_external:g}km)"
        )

    return JuryComposition(
        professors=tuple(selected_professors),
        associate_professors=tuple(selected_associates),
        external_members=tuple(external_members),
        internal_members=tuple(internal_members),
        all_members=tuple(all_members),
        errors=tuple(errors),
        warnings=tuple(warnings),
    )
