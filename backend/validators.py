"""
Plan validation helpers: credit load per term and prerequisite ordering
across terms. No Flask or data-loader imports.

Ordering checks use each course's flat direct-prerequisite list, not its
AND/OR tree, so a course with "A or B" needs both A and B placed earlier
here even though either one makes it eligible. The two checks answer
different questions and are kept separate.
"""

import sys
from typing import Callable, Dict, List

from config import FETCH_WORKERS
from data_source import fetch_concurrently
from errors import FetchFailure
from models import CreditLoad, Semester


def semester_credits(semester: Semester) -> int:
    """Sum of credit hours in the term; unset hours count as the default."""
    return sum(course.effective_credits for course in semester.courses)


def classify_credit_load(semester: Semester) -> CreditLoad:
    """
    Underloaded when 0 < total < min_credits, Overloaded above max_credits,
    Normal otherwise. An empty term is Normal.
    """
    total = semester_credits(semester)
    if 0 < total < semester.min_credits:
        return CreditLoad.UNDERLOADED
    if total > semester.max_credits:
        return CreditLoad.OVERLOADED
    return CreditLoad.NORMAL


def _earlier_course_codes(semesters: List[Semester], index: int) -> set:
    codes = set()
    for semester in semesters[:index]:
        for course in semester.courses:
            codes.add(course.course_code)
    return codes


def _semester_index(semesters: List[Semester], semester_id: str) -> int:
    for i, semester in enumerate(semesters):
        if semester.id == semester_id:
            return i
    return -1


def validate_placement(
    course_code: str,
    semester_id: str,
    semesters: List[Semester],
    direct_prereqs_of: Callable[[str], List[str]],
) -> Dict:
    """
    Checks that every direct prerequisite of `course_code` is placed in a
    term before `semester_id`, by position in the plan.

    Returns {"is_valid": bool, "missing": [codes]}. A failed lookup or an
    unknown semester id is reported as valid.
    """
    try:
        prereqs = direct_prereqs_of(course_code)
    except FetchFailure as exc:
        print(f"[WARN] Error validating prerequisites for {course_code}: {exc}", file=sys.stderr)
        return {"is_valid": True, "missing": []}

    if not prereqs:
        return {"is_valid": True, "missing": []}

    index = _semester_index(semesters, semester_id)
    if index < 0:
        print(f"[WARN] Unknown semester {semester_id!r}; skipping prerequisite check", file=sys.stderr)
        return {"is_valid": True, "missing": []}

    earlier = _earlier_course_codes(semesters, index)
    missing = [p for p in prereqs if p not in earlier]
    return {"is_valid": not missing, "missing": missing}


def validate_plan(
    semesters: List[Semester],
    direct_prereqs_of: Callable[[str], List[str]],
    max_workers: int = FETCH_WORKERS,
) -> List[Dict]:
    """
    Runs validate_placement() for every placed course, fetching the
    prerequisite lists concurrently.

    Each item:
      {"instance_id": str, "course_code": str, "semester_id": str, "missing": [str]}

    Only invalid placements are returned.
    """
    codes = [c.course_code for s in semesters for c in s.courses]
    prereq_lists, failures = fetch_concurrently(codes, direct_prereqs_of, max_workers)
    for code, exc in failures.items():
        print(f"[WARN] Error validating prerequisites for {code}: {exc}", file=sys.stderr)

    issues: List[Dict] = []
    for semester in semesters:
        for course in semester.courses:
            code = course.course_code
            if code in failures:
                continue
            check = validate_placement(code, semester.id, semesters, lambda _c, _p=prereq_lists[code]: _p)
            if not check["is_valid"]:
                issues.append({
                    "instance_id": course.instance_id,
                    "course_code": code,
                    "semester_id": semester.id,
                    "missing": check["missing"],
                })
    return issues
