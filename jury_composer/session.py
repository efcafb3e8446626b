import io
import threading
import numpy as np
import pandas as pd
from dataclasses import fields, replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from . import loader
from .models import (
    DEFAULT_JURY_REQUIREMENTS,
    JuryComposition,
    JuryRequirements,
    LoadResult,
    Procedure,
    Professor,
    ProfessorAvailability,
    ProfessorFilter,
    ProfessorTitle,
    WorkloadStats,
)
from .rules import calculate_professor_workload
from .selection import create_jury_composition, get_available_professors
from .utils import DateLike, parse_date


class JurySession:
    """
    Holds a loaded professors/procedures dataset and the active requirements.

    The composition engine itself is stateless; this class owns the data it
    is fed. Collections are replaced wholesale under one lock (a workbook load
    swaps both tables together), and every engine call works on a single
    snapshot of professors, procedures and requirements.
    """

    def __init__(self,
                 requirements: Optional[JuryRequirements] = None,
                 home_university: Optional[str] = None):
        """
        Initialize the session.

        Args:
            requirements: Committee requirements (defaults to 3/2/3/30/100)
            home_university: Default affiliation used by compose()
        """
        self.home_university = home_university

        self._lock = threading.RLock()
        self._requirements = requirements or DEFAULT_JURY_REQUIREMENTS
        self._professors: List[Professor] = []
        self._procedures: List[Procedure] = []
        self._errors: List[str] = []
        self._warnings: List[str] = []

    # Loading
    def load_professors_csv(self, content: str) -> LoadResult[Professor]:
        """Load professors from CSV text."""
        return self._store_professors(loader.load_professors_csv(io.StringIO(content)))

    def load_procedures_csv(self, content: str) -> LoadResult[Procedure]:
        """Load procedures from CSV text."""
        return self._store_procedures(loader.load_procedures_csv(io.StringIO(content)))

    def load_professors_file(self, source: str) -> LoadResult[Professor]:
        """
        Load professors from a CSV file or URL.

        Args:
            source: Path or URL of the CSV file
        """
        print(f"Reading professors from {source}...")
        return self._store_professors(loader.load_professors_csv(source))

    def load_procedures_file(self, source: str) -> LoadResult[Procedure]:
        """
        Load procedures from a CSV file or URL.

        Args:
            source: Path or URL of the CSV file
        """
        print(f"Reading procedures from {source}...")
        return self._store_procedures(loader.load_procedures_csv(source))

    def load_workbook(self, filename: str) -> Tuple[LoadResult[Professor], LoadResult[Procedure]]:
        """
        Read professors and procedures from an Excel workbook.

        Args:
            filename: Path to the Excel file with 'Professors' and 'Procedures' sheets
        """
        print(f"Reading jury data from {filename}...")
        professors_result, procedures_result = loader.load_workbook(filename)
        with self._lock:
            self._store_professors(professors_result)
            self._store_procedures(procedures_result)
            summary = self.get_data_summary()
        print(f"[{summary['professor_count']} professors, {summary['procedure_count']} procedures]")
        return professors_result, procedures_result

    def _store_professors(self, result: LoadResult[Professor]) -> LoadResult[Professor]:
        with self._lock:
            if result.ok:
                self._professors = list(result.data)
            self._errors.extend(result.errors)
            self._warnings.extend(result.warnings)
        return result

    def _store_procedures(self, result: LoadResult[Procedure]) -> LoadResult[Procedure]:
        with self._lock:
            if result.ok:
                self._procedures = list(result.data)
            self._errors.extend(result.errors)
            self._warnings.extend(result.warnings)
        return result

    # Data access
    @property
    def requirements(self) -> JuryRequirements:
        with self._lock:
            return self._requirements

    @requirements.setter
    def requirements(self, requirements: JuryRequirements) -> None:
        with self._lock:
            self._requirements = requirements

    @property
    def professors(self) -> List[Professor]:
        with self._lock:
            return list(self._professors)

    @property
    def procedures(self) -> List[Procedure]:
        with self._lock:
            return list(self._procedures)

    @property
    def errors(self) -> List[str]:
        with self._lock:
            return list(self._errors)

    @property
    def warnings(self) -> List[str]:
        with self._lock:
            return list(self._warnings)

    def clear(self) -> None:
        """Drop all loaded data and diagnostics."""
        with self._lock:
            self._professors = []
            self._procedures = []
            self._errors = []
            self._warnings = []

    def is_data_loaded(self) -> bool:
        with self._lock:
            return bool(self._professors or self._procedures)

    def get_data_summary(self) -> Dict[str, int]:
        with self._lock:
            return {
                'professor_count': len(self._professors),
                'procedure_count': len(self._procedures),
                'error_count': len(self._errors),
                'warning_count': len(self._warnings),
            }

    def update_requirements(self, **kwargs) -> None:
        """
        Update committee requirements.

        Args:
            **kwargs: JuryRequirements fields to update
                     (professor_count, associate_professor_count,
                      max_consecutive_participations,
                      min_days_between_participations, max_distance_for_external)
        """
        known = {f.name for f in fields(JuryRequirements)}
        updates = {}
        for key, value in kwargs.items():
            if key in known:
                updates[key] = value
                print(f"Updated {key} to {value}")
            else:
                print(f"Warning: Unknown requirement '{key}'")
        with self._lock:
            self._requirements = replace(self._requirements, **updates)

    def _snapshot(self) -> Tuple[List[Professor], List[Procedure], JuryRequirements]:
        """Professors, procedures and requirements taken under one lock."""
        with self._lock:
            return list(self._professors), list(self._procedures), self._requirements

    # Engine
    def available_professors(self,
                             target_date: DateLike,
                             professor_filter: Optional[ProfessorFilter] = None) -> List[ProfessorAvailability]:
        """Availability of every (filtered) professor on the target date."""
        professors, procedures, requirements = self._snapshot()
        return get_available_professors(professors, target_date, requirements, procedures, professor_filter)

    def compose(self, target_date: DateLike, home_university: Optional[str] = None) -> JuryComposition:
        """
        Compose a committee for a procedure on the target date.

        Args:
            target_date: Date of the procedure
            home_university: Affiliation of the procedure; defaults to the
                             session's home_university

        Returns:
            JuryComposition
        """
        home = home_university if home_university is not None else self.home_university
        if home is None:
            raise ValueError("No home university given. Pass home_university or set it on the session.")
        professors, procedures, requirements = self._snapshot()
        if not professors:
            raise ValueError("No professor data loaded. Please load professors first.")

        return create_jury_composition(professors, procedures, target_date, requirements, home)

    def workload(self, year: Optional[int] = None) -> Dict[int, WorkloadStats]:
        """Workload statistics keyed by professor id."""
        professors, procedures, _ = self._snapshot()
        return {
            professor.id: calculate_professor_workload(professor, procedures, year)
            for professor in professors
        }

    # Reporting
    def summarize_procedures(self) -> Dict[str, Any]:
        """
        Summarize the loaded procedures.

        Returns:
            Dictionary containing summary statistics
        """
        professors, procedures, _ = self._snapshot()
        if not professors and not procedures:
            raise ValueError("No data loaded. Please load professors and procedures first.")

        by_type: Dict[str, int] = {}
        for proc in procedures:
            by_type[proc.procedure_type.value] = by_type.get(proc.procedure_type.value, 0) + 1

        return {
            'total_professors': len(professors),
            'full_professors': sum(1 for p in professors if p.title == ProfessorTitle.PROFESSOR),
            'total_procedures': len(procedures),
            'procedures_by_type': by_type,
            'average_members': float(np.mean([len(p.member_ids) for p in procedures])) if procedures else 0.0,
            'procedure_weeks': self._summarize_by_week(procedures),
        }

    def print_summary(self) -> None:
        """Print a formatted summary of the loaded data."""
        summary = self.summarize_procedures()

        print("\nJURY DATA SUMMARY")
        print("=" * 50)
        print(f"Total Professors: {summary['total_professors']} ({summary['full_professors']} full professors)")
        print(f"Total Procedures: {summary['total_procedures']}")
        print(f"Average Members per Procedure: {summary['average_members']:.1f}")
        for procedure_type, count in summary['procedures_by_type'].items():
            print(f"  {procedure_type}: {count}")

        print("\nPROCEDURE DISTRIBUTION BY WEEK")
        print("-" * 50)
        for week_info in summary['procedure_weeks']:
            print(f"Week {week_info['week'][1]} of {week_info['week'][0]}: {week_info['total']} procedure(s)")
            for day, count in week_info['days'].items():
                print(f"  {day}: {count} procedure(s)")

    def print_composition(self, composition: JuryComposition, home_university: Optional[str] = None) -> None:
        """Print a composition in a readable format."""
        home = home_university if home_university is not None else self.home_university
        requirements = self.requirements

        print("\nJURY COMPOSITION")
        print("=" * 80)
        print(f"Professors: {len(composition.professors)}/{requirements.professor_count}")
        print(f"Associate Professors: {len(composition.associate_professors)}/{requirements.associate_professor_count}")
        print(f"External Members: {len(composition.external_members)}")
        print(f"Internal Members: {len(composition.internal_members)}")

        print("\nMember | Title | University | Km | Role")
        print("-" * 80)
        for member in composition.all_members:
            role = "Internal" if member.university == home else "External"
            print(f"{member.name:24} | {member.title.value:9} | {member.university:30} | "
                  f"{member.km:6.0f} | {role}")

        for error in composition.errors:
            print(f"Error: {error}")
        for warning in composition.warnings:
            print(f"Warning: {warning}")

    def print_workload(self, year: Optional[int] = None) -> None:
        """Print workload statistics for every professor."""
        professors, procedures, _ = self._snapshot()

        print("\nWORKLOAD ANALYSIS")
        print("=" * 80)
        print("Professor | Total | In Year | Avg Days | Last Participation")
        print("-" * 80)
        for professor in professors:
            stats = calculate_professor_workload(professor, procedures, year)
            print(f"{professor.name:24} | {stats.total_participations:5} | "
                  f"{stats.participations_in_year:7} | "
                  f"{stats.average_days_between_participations:8.1f} | "
                  f"{stats.last_participation_date or 'Never'}")

    def write_composition_to_file(self, composition: JuryComposition,
                                  filename: str = 'jury_composition.xlsx',
                                  home_university: Optional[str] = None) -> None:
        """
        Write a composition to an Excel file.

        Members go to the 'Members' sheet; errors and warnings to 'Diagnostics'.

        Args:
            composition: Composition to export
            filename: Output filename
            home_university: Affiliation used for the Internal/External column
        """
        home = home_university if home_university is not None else self.home_university

        member_data = []
        for member in composition.all_members:
            member_data.append({
                'ID': member.id,
                'Title': member.title.value,
                'Names': member.name,
                'Science': member.rating,
                'University': member.university,
                'Km': member.km,
                'Role': 'Internal' if member.university == home else 'External',
            })
        diagnostics = (
            [{'Level': 'Error', 'Message': message} for message in composition.errors]
            + [{'Level': 'Warning', 'Message': message} for message in composition.warnings]
        )

        members_df = pd.DataFrame(member_data, columns=['ID', 'Title', 'Names', 'Science', 'University', 'Km', 'Role'])
        diagnostics_df = pd.DataFrame(diagnostics, columns=['Level', 'Message'])

        with pd.ExcelWriter(filename, engine='openpyxl') as writer:
            members_df.to_excel(writer, sheet_name='Members', index=False)
            diagnostics_df.to_excel(writer, sheet_name='Diagnostics', index=False)
        print(f"\nComposition saved to '{filename}'")

    # Private helper methods
    def _summarize_by_week(self, procedures: List[Procedure]) -> List[Dict]:
        """Summarize procedures by week and day."""
        week_summary = {}
        for proc in procedures:
            proc_date = parse_date(proc.date)
            week = self._get_week(proc_date)
            day = proc_date.date()

            if week not in week_summary:
                week_summary[week] = {"total": 0, "days": {}}
            week_summary[week]["total"] += 1

            if day not in week_summary[week]["days"]:
                week_summary[week]["days"][day] = 0
            week_summary[week]["days"][day] += 1

        result = []
        for week in sorted(week_summary):
            result.append({
                'week': week,
                'total': week_summary[week]["total"],
                'days': dict(sorted(week_summary[week]["days"].items()))
            })
        return result

    @staticmethod
    def _get_week(value: datetime) -> Tuple[int, int]:
        """Get the ISO year and week number of a date."""
        iso = value.isocalendar()
        return (iso[0], iso[1])
