"""
Course data validator.

Checks the course catalog for prerequisite problems before it is deployed:
dangling prerequisite edges, prerequisite cycles, and prerequisite_logic
strings the parser cannot read. Importable for tests and runnable as a
standalone CLI.

Usage:
    python scripts/validate_catalog.py
    python scripts/validate_catalog.py --path path/to/workbook.xlsx
    python scripts/validate_catalog.py --strict
"""

import argparse
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "backend"))

from config import DATA_PATH  # noqa: E402
from data_loader import find_catalog_issues, load_catalog  # noqa: E402
from errors import CyclicPrerequisite, DanglingReference  # noqa: E402


class ValidationResult:
    """Collects errors and warnings for a single catalog validation run."""

    def __init__(self, data_path: str):
        self.data_path = data_path
        self.errors: list[str] = []
        self.warnings: list[str] = []

    def error(self, msg: str) -> None:
        self.errors.append(msg)

    def warn(self, msg: str) -> None:
        self.warnings.append(msg)

    @property
    def passed(self) -> bool:
        return len(self.errors) == 0

    def summary(self) -> str:
        status = "PASS" if self.passed else "FAIL"
        lines = [f"[{status}] Catalog '{self.data_path}'"]
        for e in self.errors:
            lines.append(f"  [ERROR] {e}")
        for w in self.warnings:
            lines.append(f"  [WARN]  {w}")
        if self.passed and not self.warnings:
            lines.append("  All checks passed.")
        return "\n".join(lines)


def validate_catalog(catalog: dict, data_path: str, strict: bool = False) -> ValidationResult:
    """
    Dangling edges and unparseable prerequisite text are warnings; cycles
    are errors. With strict=True the first dangling edge or cycle is raised.
    """
    result = ValidationResult(data_path)

    for issue in find_catalog_issues(catalog):
        if strict:
            raise issue
        if isinstance(issue, DanglingReference):
            result.warn(str(issue))
        elif isinstance(issue, CyclicPrerequisite):
            result.error(str(issue))

    for code in catalog.get("unsupported", []):
        result.warn(f"{code} has a prerequisite_logic string that cannot be parsed")

    return result


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Validate course catalog prerequisites.")
    parser.add_argument("--path", default=DATA_PATH, help="CSV directory or .xlsx workbook")
    parser.add_argument("--strict", action="store_true", help="raise on the first integrity issue")
    args = parser.parse_args(argv)

    catalog = load_catalog(args.path)
    result = validate_catalog(catalog, args.path, strict=args.strict)
    print(result.summary())
    return 0 if result.passed else 1


if __name__ == "__main__":
    raise SystemExit(main())
