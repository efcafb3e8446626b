"""
Value records exchanged between the ingestion layer, the composition engine
and the presentation layer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Generic, Iterator, List, Optional, Tuple, TypeVar

MAX_MEMBER_SLOTS = 7


def _normalise(text: str) -> str:
    return text.replace('_', '').replace(' ', '').upper()


class _LabelledEnum(Enum):
    """Closed enumeration parsed from its label or its member name."""

    @classmethod
    def from_label(cls, label: str):
        """
        Resolve a raw table value to a member.

        Args:
            label: Label as written in the input ("професор") or member name
                   ("PROFESSOR", case-insensitive)

        Raises:
            ValueError: If the value names no member
        """
        text = str(label).strip()
        for member in cls:
            if text == member.value or _normalise(text) == _normalise(member.name):
                return member
        raise ValueError(f'Invalid {cls.__name__} "{text}"')


class ProfessorTitle(_LabelledEnum):
    PROFESSOR = 'професор'
    ASSOCIATE_PROFESSOR = 'доцент'


class ProcedureType(_LabelledEnum):
    DOCTORAL_DEFENSE = 'доктор'
    ASSOCIATE_PROFESSOR_PROMOTION = 'доцент'
    DOCTOR_OF_SCIENCE = 'ДН'
    PROFESSOR_PROMOTION = 'професор'


class SortCriteria(Enum):
    DISTANCE = 'distance'
    LAST_PARTICIPATION = 'lastParticipation'
    PARTICIPATION_COUNT = 'participationCount'
    RATING = 'scienceRating'
    NAME = 'name'


@dataclass(frozen=True)
class Professor:
    """A potential committee member."""
    id: int
    title: ProfessorTitle
    name: str
    rating: float
    university: str
    km: float
    count: int = 0
    pre_last_date: Optional[str] = None
    last_date: Optional[str] = None

    def __post_init__(self):
        if self.id <= 0:
            raise ValueError(f"Professor id must be positive, got {self.id}")
        if not isinstance(self.title, ProfessorTitle):
            raise ValueError(f"Unknown professor title {self.title!r}")
        if self.km < 0:
            raise ValueError(f"Invalid distance {self.km}")
        if self.count < 0:
            raise ValueError(f"Invalid participation count {self.count}")


@dataclass(frozen=True)
class Procedure:
    """A scheduled procedure with up to seven committee slots."""
    id: int
    date: str
    procedure_type: ProcedureType
    members: Tuple[Optional[int], ...] = ()

    def __post_init__(self):
        if len(self.members) > MAX_MEMBER_SLOTS:
            raise ValueError(
                f"Procedure {self.id} has {len(self.members)} member slots "
                f"(maximum: {MAX_MEMBER_SLOTS})"
            )
        object.__setattr__(self, 'members', tuple(self.members))

    @property
    def member_ids(self) -> Tuple[int, ...]:
        """Ids of the assigned members; empty slots and zero are skipped."""
        return tuple(m for m in self.members if m is not None and m > 0)

    def has_member(self, professor_id: int) -> bool:
        return professor_id in self.member_ids


@dataclass(frozen=True)
class JuryRequirements:
    """Quotas and eligibility thresholds for one committee."""
    professor_count: int = 3
    associate_professor_count: int = 2
    max_consecutive_participations: int = 3
    min_days_between_participations: int = 30
    max_distance_for_external: float = 100

    def __post_init__(self):
        if self.professor_count < 0:
            raise ValueError("professor_count must be >= 0")
        if self.associate_professor_count < 0:
            raise ValueError("associate_professor_count must be >= 0")
        if self.max_consecutive_participations < 1:
            raise ValueError("max_consecutive_participations must be >= 1")
        if self.min_days_between_participations < 0:
            raise ValueError("min_days_between_participations must be >= 0")
        if self.max_distance_for_external < 0:
            raise ValueError("max_distance_for_external must be >= 0")


DEFAULT_JURY_REQUIREMENTS = JuryRequirements()


@dataclass(frozen=True)
class ProfessorAvailability:
    professor: Professor
    is_available: bool
    reason: Optional[str] = None
    last_participation_date: Optional[str] = None
    consecutive_count: int = 0


@dataclass(frozen=True)
class JuryComposition:
    """
    Result of one allocation.

    ``all_members`` is ``professors + associate_professors``; the internal and
    external lists partition it by affiliation.
    """
    professors: Tuple[Professor, ...] = ()
    associate_professors: Tuple[Professor, ...] = ()
    external_members: Tuple[Professor, ...] = ()
    internal_members: Tuple[Professor, ...] = ()
    all_members: Tuple[Professor, ...] = ()
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    @property
    def is_complete(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class ProfessorFilter:
    title: Optional[ProfessorTitle] = None
    university: Optional[str] = None
    min_rating: Optional[float] = None
    max_rating: Optional[float] = None
    max_distance: Optional[float] = None
    exclude_ids: Optional[FrozenSet[int]] = None


@dataclass(frozen=True)
class WorkloadStats:
    total_participations: int
    participations_in_year: int
    average_days_between_participations: float
    last_participation_date: Optional[str]


T = TypeVar('T')


@dataclass
class LoadResult(Generic[T]):
    """Records parsed from one table plus the row diagnostics."""
    data: List[T] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def __iter__(self) -> Iterator:
        # Allows ``records, errors, warnings = result``
        return iter((self.data, self.errors, self.warnings))

    @property
    def ok(self) -> bool:
        return not self.errors
