"""Write the Enrollments demo workbook used by `python sheet_normalizer.py demo`.

The sheet is deliberately not in 1NF: course fees carry a currency symbol and
the language column can list several values in one cell. After 1NF the composite key (Course, Languages)
exposes the partial dependency Course -> CourseFee_Amount.

Usage:

1. Run this script once to write `output/demo_enrollments.xlsx`, or let the
   `demo` mode of the normalizer write it for you.
2. Run `python sheet_normalizer.py output/demo_enrollments.xlsx`.
"""
from __future__ import annotations

import argparse
from pathlib import Path

from openpyxl import Workbook


DEMO_HEADER = ["Course", "Student", "CourseFee", "Languages"]
DEMO_ROWS = [
    ["Math", "Melisa", "500 €", "English"],
    ["Physics", "Melisa", "600 €", "English, German"],
    ["Math", "John", "500 €", "German"],
    ["Biology", "Melisa", "500 €", "English"],
]


def build_workbook(path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Enrollments"
    sheet.append(DEMO_HEADER)
    for row in DEMO_ROWS:
        sheet.append(row)
    workbook.save(path)
    print(f"[INFO] Demo workbook written to {path}")
    return path


def main() -> None:
    parser = argparse.ArgumentParser(description="Write the Enrollments demo workbook.")
    parser.add_argument(
        "--path",
        default="output/demo_enrollments.xlsx",
        help="Target workbook path (default: %(default)s)",
    )
    args = parser.parse_args()
    build_workbook(Path(args.path))


if __name__ == "__main__":
    main()
