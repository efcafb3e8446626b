"""Shared fixtures for the Jury Composer tests."""

import io

import pytest

from jury_composer import loader
from jury_composer.models import (
    JuryRequirements,
    Procedure,
    ProcedureType,
    Professor,
    ProfessorTitle,
)
from jury_composer.sample_data import PROCEDURES_CSV, PROFESSORS_CSV


def make_professor(id, title=ProfessorTitle.PROFESSOR, name=None, rating=4.7,
                   university='Home University', km=0, count=0,
                   pre_last_date=None, last_date=None):
    return Professor(
        id=id,
        title=title,
        name=name or f'Professor {id}',
        rating=rating,
        university=university,
        km=km,
        count=count,
        pre_last_date=pre_last_date,
        last_date=last_date,
    )


def make_procedure(id, date, *members, procedure_type=ProcedureType.DOCTORAL_DEFENSE):
    return Procedure(id=id, date=date, procedure_type=procedure_type, members=tuple(members))


@pytest.fixture
def requirements():
    return JuryRequirements(
        professor_count=2,
        associate_professor_count=2,
        max_consecutive_participations=3,
        min_days_between_participations=30,
        max_distance_for_external=200,
    )


@pytest.fixture
def sample_professors():
    return loader.load_professors_csv(io.StringIO(PROFESSORS_CSV)).data


@pytest.fixture
def sample_procedures():
    return loader.load_procedures_csv(io.StringIO(PROCEDURES_CSV)).data
