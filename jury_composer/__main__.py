# jury_composer/__main__.py

"""
Main script for running the Jury Composer.

Usage:
    python -m jury_composer PROFESSORS.csv PROCEDURES.csv --date 2023-09-15 --home UNIVERSITY [options]
    python -m jury_composer --workbook jury_data.xlsx --date 2023-09-15 --home UNIVERSITY [options]
    python -m jury_composer --example
"""

import argparse
import sys
from .models import JuryRequirements
from .sample_data import HOME_UNIVERSITY, PROCEDURES_CSV, PROFESSORS_CSV, TARGET_DATE
from .session import JurySession
from .utils import (
    PROFESSOR_COLUMNS,
    REQUIRED_PROCEDURE_COLUMNS,
    is_valid_date,
    validate_csv_file,
    validate_excel_file
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Jury Composer - Select eligible committee members for academic procedures'
    )

    # Input files
    parser.add_argument('professors_file', nargs='?',
                        help='CSV file containing professors')
    parser.add_argument('procedures_file', nargs='?',
                        help='CSV file containing procedures')
    parser.add_argument('-w', '--workbook',
                        help='Excel file with Professors and Procedures sheets (instead of CSV files)')

    # Procedure
    parser.add_argument('--date',
                        help='Date of the procedure to staff (YYYY-MM-DD)')
    parser.add_argument('--home',
                        help='Home university of the procedure')

    # Requirements
    parser.add_argument('--professors',
                        type=int,
                        default=3,
                        help='Required number of professors (default: 3)')

    parser.add_argument('--associates',
                        type=int,
                        default=2,
                        help='Required number of associate professors (default: 2)')

    parser.add_argument('--max-consecutive',
                        type=int,
                        default=3,
                        help='Maximum consecutive participations (default: 3)')

    parser.add_argument('--min-days',
                        type=int,
                        default=30,
                        help='Minimum days between participations (default: 30)')

    parser.add_argument('--max-distance',
                        type=float,
                        default=100,
                        help='Maximum distance in km for external members (default: 100)')

    # Additional options
    parser.add_argument('-o', '--output',
                        help='Write the composition to this Excel file')

    parser.add_argument('--workload',
                        action='store_true',
                        help='Print workload statistics for every professor')

    parser.add_argument('--year',
                        type=int,
                        help='Year used by --workload')

    parser.add_argument('--validate-only',
                        action='store_true',
                        help='Only validate the input files without composing')

    parser.add_argument('--example',
                        action='store_true',
                        help='Run the built-in example dataset')

    return parser


def _validate_inputs(args, parser) -> None:
    if args.workbook:
        print(f"Validating input file: {args.workbook}")
        is_valid, errors = validate_excel_file(args.workbook)
    elif args.professors_file and args.procedures_file:
        print(f"Validating input files: {args.professors_file}, {args.procedures_file}")
        _, professor_errors = validate_csv_file(args.professors_file, PROFESSOR_COLUMNS)
        _, procedure_errors = validate_csv_file(args.procedures_file, REQUIRED_PROCEDURE_COLUMNS)
        errors = professor_errors + procedure_errors
        is_valid = not errors
    else:
        parser.error('provide PROFESSORS and PROCEDURES files or --workbook')

    if not is_valid:
        print("Input file validation failed:")
        for error in errors:
            print(f"  - {error}")
        sys.exit(1)

    print("Input file validation successful.")


def _print_load_diagnostics(session: JurySession) -> None:
    for error in session.errors:
        print(f"  Error: {error}")
    for warning in session.warnings:
        print(f"  Warning: {warning}")


def main(argv=None):
    """Main function to run the composer from command line."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.example:
        run_example()
        return

    _validate_inputs(args, parser)

    if args.validate_only:
        sys.exit(0)

    compose = bool(args.date and args.home)
    if not compose and (args.date or args.home or not args.workload):
        parser.error('--date and --home are required to compose a jury')
    if compose and not is_valid_date(args.date):
        parser.error(f'invalid --date "{args.date}"')

    try:
        session = JurySession(
            requirements=JuryRequirements(
                professor_count=args.professors,
                associate_professor_count=args.associates,
                max_consecutive_participations=args.max_consecutive,
                min_days_between_participations=args.min_days,
                max_distance_for_external=args.max_distance
            ),
            home_university=args.home
        )

        # Read input data
        if args.workbook:
            session.load_workbook(args.workbook)
        else:
            session.load_professors_file(args.professors_file)
            session.load_procedures_file(args.procedures_file)

        _print_load_diagnostics(session)

        if session.errors:
            print("\nLoading failed - fix the rows listed above.")
            sys.exit(1)

        # Print summary
        session.print_summary()

        if args.workload:
            session.print_workload(args.year)

        if compose:
            composition = session.compose(args.date)
            session.print_composition(composition)

            if args.output:
                session.write_composition_to_file(composition, args.output)

            if not composition.is_complete:
                print("\nComposition is incomplete.")
                print("Consider:")
                print("  - Lowering the required number of members")
                print("  - Relaxing --min-days or --max-consecutive")
                print("  - Adding professors to the candidate pool")
                sys.exit(2)

    except Exception as e:
        print(f"\nError during composition: {str(e)}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


def run_example():
    """Run an example composition on the built-in dataset."""
    print("Running example composition...")

    session = JurySession(
        requirements=JuryRequirements(
            professor_count=2,
            associate_professor_count=2,
            max_consecutive_participations=3,
            min_days_between_participations=30,
            max_distance_for_external=200
        ),
        home_university=HOME_UNIVERSITY
    )

    session.load_professors_csv(PROFESSORS_CSV)
    session.load_procedures_csv(PROCEDURES_CSV)
    session.print_summary()

    composition = session.compose(TARGET_DATE)
    session.print_composition(composition)
    session.print_workload()


if __name__ == '__main__':
    main()
