"""
Reading professor and procedure tables into records.

Every loader is stateless and returns a LoadResult holding the records that
parsed cleanly plus row-indexed errors (row dropped) and warnings (row kept).
"""

import pandas as pd
from typing import List, Optional, Tuple

from .models import (
    MAX_MEMBER_SLOTS,
    LoadResult,
    Procedure,
    ProcedureType,
    Professor,
    ProfessorTitle,
)
from .utils import PROCEDURE_COLUMNS, PROFESSOR_COLUMNS, REQUIRED_PROCEDURE_COLUMNS

RATING_RANGE = (4.6, 4.9)
MAX_PLAUSIBLE_DISTANCE_KM = 1000

# Spreadsheet row of the first data line (the header is line 1)
_FIRST_DATA_LINE = 2

_NULL_MARKERS = {'', 'null', 'none', 'nan'}


def _is_null(value) -> bool:
    return str(value).strip().lower() in _NULL_MARKERS


def _to_dates(column: pd.Series) -> pd.Series:
    """Coerce an ISO date column to naive UTC timestamps; unparseable cells become NaT."""
    return pd.to_datetime(column, format='ISO8601', errors='coerce', utc=True).dt.tz_localize(None)


def _prepare_frame(frame: pd.DataFrame, columns: List[str], required: int) -> Tuple[Optional[pd.DataFrame], List[str]]:
    """Rename columns positionally and turn every cell into a stripped string."""
    if len(frame.columns) < required:
        return None, [f"Insufficient columns (expected {required}, got {len(frame.columns)})"]

    width = min(len(frame.columns), len(columns))
    prepared = frame.iloc[:, :width].copy()
    prepared.columns = columns[:width]
    prepared = prepared.fillna('').astype(str)
    for column in prepared.columns:
        prepared[column] = prepared[column].str.strip()
    return prepared, []


def _as_int(value) -> Optional[int]:
    """Whole number from a numeric cell, or None."""
    if pd.isna(value) or not float(value).is_integer():
        return None
    return int(value)


def _is_blank_row(row: pd.Series) -> bool:
    return all(cell == '' for cell in row)


def parse_professors(frame: pd.DataFrame) -> LoadResult[Professor]:
    """
    Convert a professors table into Professor records.

    Args:
        frame: Table with columns ID, Title, Names, Science, University, Km,
               Count, Pre-last date, Last date (matched by position)

    Returns:
        LoadResult with the parsed professors
    """
    result = LoadResult()
    prepared, errors = _prepare_frame(frame, PROFESSOR_COLUMNS, len(PROFESSOR_COLUMNS))
    if prepared is None:
        result.errors.extend(errors)
        return result

    ids = pd.to_numeric(prepared['ID'], errors='coerce')
    ratings = pd.to_numeric(prepared['Science'], errors='coerce')
    distances = pd.to_numeric(prepared['Km'], errors='coerce')
    counts = pd.to_numeric(prepared['Count'], errors='coerce')
    date_columns = {column: _to_dates(prepared[column]) for column in ('Pre-last date', 'Last date')}

    for position, (_, row) in enumerate(prepared.iterrows()):
        line = position + _FIRST_DATA_LINE
        if _is_blank_row(row):
            continue

        professor_id = _as_int(ids.iloc[position])
        if professor_id is None:
            result.errors.append(f"Line {line}: Invalid ID")
            continue

        try:
            title = ProfessorTitle.from_label(row['Title'])
        except ValueError:
            result.errors.append(f'Line {line}: Invalid title "{row["Title"]}"')
            continue

        rating = ratings.iloc[position]
        km = distances.iloc[position]
        count = _as_int(counts.iloc[position])
        if pd.isna(rating):
            result.errors.append(f'Line {line}: Invalid science rating "{row["Science"]}"')
            continue
        if pd.isna(km):
            result.errors.append(f'Line {line}: Invalid distance "{row["Km"]}"')
            continue
        if count is None:
            result.errors.append(f'Line {line}: Invalid participation count "{row["Count"]}"')
            continue

        dates = {}
        for column, values in date_columns.items():
            value = values.iloc[position]
            if pd.isna(value):
                if not _is_null(row[column]):
                    result.warnings.append(f'Line {line}: Invalid date format "{row[column]}" in {column}')
                dates[column] = None
            else:
                dates[column] = value.date().isoformat()

        try:
            professor = Professor(
                id=professor_id,
                title=title,
                name=row['Names'],
                rating=float(rating),
                university=row['University'],
                km=float(km),
                count=count,
                pre_last_date=dates['Pre-last date'],
                last_date=dates['Last date'],
            )
        except ValueError as e:
            result.errors.append(f"Line {line}: {e}")
            continue

        low, high = RATING_RANGE
        if not low <= professor.rating <= high:
            result.warnings.append(
                f"Line {line}: Science rating {professor.rating} is outside expected range ({low}-{high})"
            )
        if professor.km > MAX_PLAUSIBLE_DISTANCE_KM:
            result.warnings.append(
                f"Line {line}: Distance {professor.km:g}km is outside expected range (0-{MAX_PLAUSIBLE_DISTANCE_KM})"
            )

        result.data.append(professor)

    return result


def parse_procedures(frame: pd.DataFrame) -> LoadResult[Procedure]:
    """
    Convert a procedures table into Procedure records.

    Args:
        frame: Table with columns ID, Date, Procedure and up to seven member
               columns M1..M7 (matched by position)

    Returns:
        LoadResult with the parsed procedures
    """
    result = LoadResult()
    prepared, errors = _prepare_frame(frame, PROCEDURE_COLUMNS, len(REQUIRED_PROCEDURE_COLUMNS))
    if prepared is None:
        result.errors.extend(errors)
        return result

    ids = pd.to_numeric(prepared['ID'], errors='coerce')
    dates = _to_dates(prepared['Date'])
    member_columns = [col for col in PROCEDURE_COLUMNS[3:] if col in prepared.columns]

    for position, (_, row) in enumerate(prepared.iterrows()):
        line = position + _FIRST_DATA_LINE
        if _is_blank_row(row):
            continue

        procedure_id = _as_int(ids.iloc[position])
        if procedure_id is None:
            result.errors.append(f"Line {line}: Invalid ID")
            continue

        try:
            procedure_type = ProcedureType.from_label(row['Procedure'])
        except ValueError:
            result.errors.append(f'Line {line}: Invalid procedure type "{row["Procedure"]}"')
            continue

        procedure_date = dates.iloc[position]
        if pd.isna(procedure_date):
            result.errors.append(f'Line {line}: Invalid date format "{row["Date"]}"')
            continue

        members = []
        bad_member = None
        for column in member_columns:
            value = row[column]
            if _is_null(value):
                members.append(None)
                continue
            member_id = _as_int(pd.to_numeric(value, errors='coerce'))
            if member_id == 0:
                result.warnings.append(f"Line {line}: Member ID 0 in {column} treated as an empty slot")
                members.append(None)
                continue
            if member_id is None or member_id < 0:
                bad_member = (column, value)
                break
            members.append(member_id)

        if bad_member is not None:
            result.errors.append(f'Line {line}: Invalid member ID "{bad_member[1]}" in {bad_member[0]}')
            continue

        result.data.append(Procedure(
            id=procedure_id,
            date=procedure_date.date().isoformat(),
            procedure_type=procedure_type,
            members=tuple(members[:MAX_MEMBER_SLOTS]),
        ))

    return result


def _read_csv(source, width: int) -> Tuple[pd.DataFrame, List[str]]:
    """
    Read a CSV as strings, cutting rows longer than the header.

    The header is read as an ordinary row so that an overlong first data row
    is not taken for an index column.

    Returns:
        Tuple of (frame, warnings about truncated rows)
    """
    truncated = []

    def truncate(fields: List[str]) -> List[str]:
        truncated.append(f'Row with ID "{fields[0].strip()}" has {len(fields)} fields; extra fields ignored')
        return fields[:width]

    rows = pd.read_csv(source, header=None, dtype=str, keep_default_na=False, skipinitialspace=True,
                       skip_blank_lines=False, engine='python', on_bad_lines=truncate)
    frame = rows.iloc[1:].reset_index(drop=True)
    frame.columns = rows.iloc[0].tolist()
    return frame, truncated


def load_professors_csv(source) -> LoadResult[Professor]:
    """
    Load professors from a CSV path, URL or buffer.

    Read failures are reported in the result instead of being raised.
    """
    try:
        frame, truncated = _read_csv(source, len(PROFESSOR_COLUMNS))
    except Exception as e:
        return LoadResult(errors=[f"Failed to load professors file: {str(e)}"])
    result = parse_professors(frame)
    result.warnings[:0] = truncated
    return result


def load_procedures_csv(source) -> LoadResult[Procedure]:
    """
    Load procedures from a CSV path, URL or buffer.

    Read failures are reported in the result instead of being raised.
    """
    try:
        frame, truncated = _read_csv(source, len(PROCEDURE_COLUMNS))
    except Exception as e:
        return LoadResult(errors=[f"Failed to load procedures file: {str(e)}"])
    result = parse_procedures(frame)
    result.warnings[:0] = truncated
    return result


def load_workbook(filename: str) -> Tuple[LoadResult[Professor], LoadResult[Procedure]]:
    """
    Load both tables from an Excel workbook with sheets 'Professors' and
    'Procedures'.

    Args:
        filename: Path to the Excel file

    Returns:
        Tuple of (professors_result, procedures_result)
    """
    try:
        sheets = pd.read_excel(filename, sheet_name=['Professors', 'Procedures'], dtype=str)
    except Exception as e:
        message = f"Failed to load workbook: {str(e)}"
        return LoadResult(errors=[message]), LoadResult(errors=[message])

    return parse_professors(sheets['Professors']), parse_procedures(sheets['Procedures'])
