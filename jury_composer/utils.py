"""
Utility functions for the Jury Composer.
"""

import math
import os
import pandas as pd
from datetime import date, datetime
from typing import List, Sequence, Tuple, Union

DateLike = Union[str, date, datetime]

PROFESSOR_COLUMNS = [
    'ID', 'Title', 'Names', 'Science', 'University', 'Km', 'Count',
    'Pre-last date', 'Last date',
]
PROCEDURE_COLUMNS = ['ID', 'Date', 'Procedure'] + [f'M{i}' for i in range(1, 8)]

# Procedures only need the first three columns; member slots may be absent
REQUIRED_PROCEDURE_COLUMNS = PROCEDURE_COLUMNS[:3]


class InvalidDate(ValueError):
    """Raised when a value does not parse to a calendar date."""


def parse_date(value: DateLike) -> datetime:
    """
    Parse an ISO date (optionally with a time) into a naive UTC datetime.

    Args:
        value: ISO formatted string, date or datetime

    Raises:
        InvalidDate: If the value is not a valid calendar date
    """
    if isinstance(value, date):
        parsed = pd.Timestamp(value)
    elif isinstance(value, str):
        try:
            parsed = pd.to_datetime(value.strip(), format='ISO8601')
        except ValueError:
            raise InvalidDate(f'Invalid date "{value}"') from None
    else:
        raise InvalidDate(f'Invalid date {value!r}')

    if pd.isna(parsed):
        raise InvalidDate(f'Invalid date "{value}"')
    if parsed.tzinfo is not None:
        parsed = parsed.tz_convert('UTC').tz_localize(None)
    return parsed.to_pydatetime()


def is_valid_date(value: DateLike) -> bool:
    """Check whether a value parses to a calendar date."""
    try:
        parse_date(value)
    except InvalidDate:
        return False
    return True


def days_between(date1: DateLike, date2: DateLike) -> int:
    """
    Absolute number of days between two dates, rounding partial days up.

    Args:
        date1: First date
        date2: Second date

    Returns:
        Number of days, never negative

    Raises:
        InvalidDate: If either input is not a valid date
    """
    delta = abs(parse_date(date2) - parse_date(date1))
    return math.ceil(delta.total_seconds() / 86400)


def _missing_columns(columns: Sequence[str], required: Sequence[str]) -> List[str]:
    present = {str(col).strip().lower() for col in columns}
    return [col for col in required if col.lower() not in present]


def validate_excel_file(filename: str) -> Tuple[bool, List[str]]:
    """
    Validate that the Excel file has all required sheets and columns.

    Args:
        filename: Path to the Excel file

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors = []

    try:
        excel_file = pd.ExcelFile(filename)

        required_sheets = ['Professors', 'Procedures']
        missing_sheets = [sheet for sheet in required_sheets
                          if sheet not in excel_file.sheet_names]

        if missing_sheets:
            errors.append(f"Missing required sheets: {', '.join(missing_sheets)}")

        if 'Professors' in excel_file.sheet_names:
            professors_df = pd.read_excel(excel_file, sheet_name='Professors')
            missing_cols = _missing_columns(professors_df.columns, PROFESSOR_COLUMNS)
            if missing_cols:
                errors.append(f"Professors sheet missing columns: {', '.join(missing_cols)}")

        if 'Procedures' in excel_file.sheet_names:
            procedures_df = pd.read_excel(excel_file, sheet_name='Procedures')
            missing_cols = _missing_columns(procedures_df.columns, REQUIRED_PROCEDURE_COLUMNS)
            if missing_cols:
                errors.append(f"Procedures sheet missing columns: {', '.join(missing_cols)}")

    except FileNotFoundError:
        errors.append(f"File not found: {filename}")
    except Exception as e:
        errors.append(f"Error reading file: {str(e)}")

    return len(errors) == 0, errors


def validate_csv_file(filename: str, required_columns: Sequence[str]) -> Tuple[bool, List[str]]:
    """
    Validate that a CSV file exists and has enough columns.

    CSV columns are read by position, so only the column count is checked;
    localised header names are accepted.

    Args:
        filename: Path to the CSV file
        required_columns: Leading columns the file must provide

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors = []

    if not os.path.exists(filename):
        return False, [f"File not found: {filename}"]

    try:
        header = pd.read_csv(filename, nrows=0, dtype=str)
        if len(header.columns) < len(required_columns):
            errors.append(
                f"{os.path.basename(filename)}: insufficient columns "
                f"(expected {len(required_columns)}, got {len(header.columns)})"
            )
    except pd.errors.EmptyDataError:
        errors.append(f"File is empty: {filename}")
    except Exception as e:
        errors.append(f"Error reading file: {str(e)}")

    return len(errors) == 0, errors
