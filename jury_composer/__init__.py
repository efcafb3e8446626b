"""
Jury Composer Package

Eligibility rules and committee composition for academic procedures
(doctoral defenses and promotions): cooldowns, consecutive-participation
caps, rank quotas and the internal/external split.
"""

from .models import (
    DEFAULT_JURY_REQUIREMENTS,
    JuryComposition,
    JuryRequirements,
    LoadResult,
    Procedure,
    ProcedureType,
    Professor,
    ProfessorAvailability,
    ProfessorFilter,
    ProfessorTitle,
    SortCriteria,
    WorkloadStats,
)
from .rules import (
    STREAK_GAP_DAYS,
    calculate_consecutive_participations,
    calculate_professor_workload,
    get_participation_history,
    is_professor_available,
)
from .selection import (
    create_jury_composition,
    filter_professors,
    get_available_professors,
    sort_professors,
)
from .session import JurySession
from .utils import (
    InvalidDate,
    days_between,
    validate_csv_file,
    validate_excel_file
)

__version__ = '1.0.0'
__author__ = 'Jury Composer Team'

__all__ = [
    'DEFAULT_JURY_REQUIREMENTS',
    'InvalidDate',
    'JuryComposition',
    'JuryRequirements',
    'JurySession',
    'LoadResult',
    'Procedure',
    'ProcedureType',
    'Professor',
    'ProfessorAvailability',
    'ProfessorFilter',
    'ProfessorTitle',
    'STREAK_GAP_DAYS',
    'SortCriteria',
    'WorkloadStats',
    'calculate_consecutive_participations',
    'calculate_professor_workload',
    'create_jury_composition',
    'days_between',
    'filter_professors',
    'get_available_professors',
    'get_participation_history',
    'is_professor_available',
    'sort_professors',
    'validate_csv_file',
    'validate_excel_file'
]
