"""
Tests for reading professor and procedure tables.
"""

import io

import pandas as pd
import pytest

from jury_composer import loader
from jury_composer.models import ProcedureType, ProfessorTitle
from jury_composer.sample_data import PROCEDURES_CSV, PROFESSORS_CSV

PROFESSOR_HEADER = 'ID,Title,Names,Science,University,Km,Count,Pre-last date,Last date\n'
PROCEDURE_HEADER = 'ID,Date,Procedure,M1,M2,M3,M4,M5,M6,M7\n'


def load_professors(rows: str):
    return loader.load_professors_csv(io.StringIO(PROFESSOR_HEADER + rows))


def load_procedures(rows: str):
    return loader.load_procedures_csv(io.StringIO(PROCEDURE_HEADER + rows))


class TestProfessorsCsv:

    def test_sample_data(self):
        result = loader.load_professors_csv(io.StringIO(PROFESSORS_CSV))

        assert result.errors == []
        assert result.warnings == []
        assert [p.id for p in result.data] == [1, 2, 3, 4, 5]
        first = result.data[0]
        assert first.title == ProfessorTitle.PROFESSOR
        assert first.name == 'Иван Петров'
        assert first.rating == 4.7
        assert first.university == 'Софийски университет'
        assert first.km == 0
        assert first.count == 5
        assert first.pre_last_date == '2023-01-15'
        assert first.last_date == '2023-06-20'

    def test_result_unpacks(self):
        records, errors, warnings = load_professors('1,доцент,A,4.8,U,10,1,null,null\n')
        assert records[0].title == ProfessorTitle.ASSOCIATE_PROFESSOR
        assert records[0].last_date is None
        assert errors == [] and warnings == []

    def test_english_title_names_accepted(self):
        result = load_professors('1,Professor,A,4.8,U,10,1,,\n2,associate_professor,B,4.8,U,10,1,,\n')
        assert [p.title for p in result.data] == [ProfessorTitle.PROFESSOR, ProfessorTitle.ASSOCIATE_PROFESSOR]

    def test_invalid_rows_are_dropped(self):
        result = load_professors(
            'x,професор,A,4.7,U,0,1,null,null\n'
            '2,асистент,B,4.7,U,0,1,null,null\n'
            '3,професор,C,high,U,0,1,null,null\n'
            '4,професор,D,4.7,U,-5,1,null,null\n'
            '5,професор,E,4.7,U,0,1,null,null\n'
        )

        assert [p.id for p in result.data] == [5]
        assert result.errors == [
            'Line 2: Invalid ID',
            'Line 3: Invalid title "асистент"',
            'Line 4: Invalid science rating "high"',
            'Line 5: Invalid distance -5.0',
        ]

    def test_soft_warnings_keep_row(self):
        result = load_professors(
            '1,професор,A,5.5,U,0,1,null,null\n'
            '2,професор,B,4.7,U,1500,1,null,null\n'
            '3,професор,C,4.7,U,0,1,2023-02-30,2023-06-01\n'
        )

        assert [p.id for p in result.data] == [1, 2, 3]
        assert result.errors == []
        assert result.warnings[0] == 'Line 2: Science rating 5.5 is outside expected range (4.6-4.9)'
        assert result.warnings[1].startswith('Line 3: Distance 1500km')
        assert result.warnings[2] == 'Line 4: Invalid date format "2023-02-30" in Pre-last date'
        assert result.data[2].pre_last_date is None
        assert result.data[2].last_date == '2023-06-01'

    def test_blank_rows_skipped(self):
        result = load_professors('1,професор,A,4.7,U,0,1,null,null\n,,,,,,,,\n')
        assert len(result.data) == 1
        assert result.errors == []

    def test_extra_fields_are_ignored(self):
        result = load_professors(
            '1,професор,A,4.7,U,0,1,null,null\n'
            '2,доцент,B,4.8,U,10,1,null,2023-06-01,unexpected\n'
            '3,доцент,C,4.8,U,20,1,null,null\n'
        )

        assert [p.id for p in result.data] == [1, 2, 3]
        assert result.data[1].last_date == '2023-06-01'
        assert result.errors == []
        assert result.warnings == ['Row with ID "2" has 10 fields; extra fields ignored']

    def test_dates_normalised_to_utc_day(self):
        result = load_professors(
            '1,професор,A,4.7,U,0,1,2023-01-15T10:00:00Z,2023-06-20T23:30:00-02:00\n'
        )
        assert result.data[0].pre_last_date == '2023-01-15'
        assert result.data[0].last_date == '2023-06-21'

    def test_line_numbers_count_blank_lines(self):
        result = load_professors('1,професор,A,4.7,U,0,1,null,null\n\nx,професор,B,4.7,U,0,1,null,null\n')
        assert result.errors == ['Line 4: Invalid ID']

    def test_insufficient_columns(self):
        result = loader.load_professors_csv(io.StringIO('ID,Title\n1,професор\n'))
        assert result.data == []
        assert result.errors == ['Insufficient columns (expected 9, got 2)']

    def test_unreadable_source(self, tmp_path):
        result = loader.load_professors_csv(str(tmp_path / 'missing.csv'))
        assert result.data == []
        assert result.errors[0].startswith('Failed to load professors file:')


class TestProceduresCsv:

    def test_sample_data(self):
        result = loader.load_procedures_csv(io.StringIO(PROCEDURES_CSV))

        assert result.errors == []
        assert len(result.data) == 5
        first = result.data[0]
        assert first.date == '2023-06-20'
        assert first.procedure_type == ProcedureType.DOCTORAL_DEFENSE
        assert first.members == (1, 2, 3, 4, 5, None, None)
        assert first.member_ids == (1, 2, 3, 4, 5)
        assert result.data[3].procedure_type == ProcedureType.DOCTOR_OF_SCIENCE

    def test_member_columns_are_optional(self):
        result = loader.load_procedures_csv(io.StringIO('ID,Date,Procedure,M1\n1,2023-01-01,професор,4\n'))
        assert result.data[0].member_ids == (4,)
        assert result.data[0].procedure_type == ProcedureType.PROFESSOR_PROMOTION

    def test_invalid_rows_are_dropped(self):
        result = load_procedures(
            '1,2023-01-01,магистър,1,,,,,,\n'
            '2,01/02/2023,доктор,1,,,,,,\n'
            '3,2023-01-03,доктор,abc,,,,,,\n'
            '4,2023-01-04,доктор,1,2,,,,,\n'
        )

        assert [p.id for p in result.data] == [4]
        assert result.errors == [
            'Line 2: Invalid procedure type "магистър"',
            'Line 3: Invalid date format "01/02/2023"',
            'Line 4: Invalid member ID "abc" in M1',
        ]

    def test_zero_member_is_empty_slot(self):
        result = load_procedures('1,2023-01-01,доктор,0,7,,,,,\n')
        assert result.data[0].members[:2] == (None, 7)
        assert result.data[0].member_ids == (7,)
        assert result.warnings == ['Line 2: Member ID 0 in M1 treated as an empty slot']


class TestWorkbook:

    def test_load_workbook(self, tmp_path):
        path = tmp_path / 'jury.xlsx'
        professors = pd.read_csv(io.StringIO(PROFESSORS_CSV), dtype=str)
        procedures = pd.read_csv(io.StringIO(PROCEDURES_CSV), dtype=str)
        with pd.ExcelWriter(path, engine='openpyxl') as writer:
            professors.to_excel(writer, sheet_name='Professors', index=False)
            procedures.to_excel(writer, sheet_name='Procedures', index=False)

        professors_result, procedures_result = loader.load_workbook(str(path))

        assert professors_result.errors == []
        assert procedures_result.errors == []
        assert len(professors_result.data) == 5
        assert procedures_result.data[0].member_ids == (1, 2, 3, 4, 5)

    def test_missing_workbook(self, tmp_path):
        professors_result, procedures_result = loader.load_workbook(str(tmp_path / 'none.xlsx'))
        assert professors_result.errors[0].startswith('Failed to load workbook:')
        assert procedures_result.errors == professors_result.errors


@pytest.mark.parametrize('label, expected', [
    ('доктор', ProcedureType.DOCTORAL_DEFENSE),
    ('доцент', ProcedureType.ASSOCIATE_PROFESSOR_PROMOTION),
    ('ДН', ProcedureType.DOCTOR_OF_SCIENCE),
    ('ProfessorPromotion', ProcedureType.PROFESSOR_PROMOTION),
])
def test_procedure_type_labels(label, expected):
    assert ProcedureType.from_label(label) == expected


def test_unknown_title_is_rejected():
    with pytest.raises(ValueError):
        ProfessorTitle.from_label('')
