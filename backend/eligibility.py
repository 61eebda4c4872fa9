import sys
import threading
from typing import Callable, Iterable

from config import FETCH_WORKERS
from data_source import fetch_concurrently
from evaluator import build_prereq_check_string, prereqs_satisfied
from inference import infer_implied_completed, infer_implied_completed_with_provenance
from models import Course
from normalizer import dept_and_number
from prereq_tree import And, Leaf, Or, PrereqNode, tree_course_codes


def sort_courses(courses: Iterable[Course]) -> list[Course]:
    """Display order: department alphabetically, then course number."""
    return sorted(courses, key=lambda c: (dept_and_number(c.course_code), c.course_code))


def get_eligible_courses(
    courses: Iterable[Course],
    completed: Iterable[str],
    prereq_tree_of: Callable[[str], PrereqNode | None],
    direct_prereqs_of: Callable[[str], list[str]],
    max_workers: int = FETCH_WORKERS,
) -> list[Course]:
    """
    Returns catalog courses the student may take next.

    Eligible = not completed (explicitly or by one-hop inference) AND the
    prerequisite tree is satisfied by the implied-completed set. A course
    whose tree cannot be fetched, or has no tree, counts as satisfied.

    The result follows catalog iteration order, which is not a contract;
    callers that display it sort with sort_courses().
    """
    implied = infer_implied_completed(completed, direct_prereqs_of, max_workers)

    candidates = [c for c in courses if c.course_code not in implied]
    trees, failures = fetch_concurrently(
        (c.course_code for c in candidates), prereq_tree_of, max_workers
    )
    for code, exc in failures.items():
        print(f"[WARN] Prerequisite tree unavailable for {code}; treating as satisfied: {exc}", file=sys.stderr)

    eligible: list[Course] = []
    for course in candidates:
        code = course.course_code
        if code in failures:
            eligible.append(course)
            continue
        if prereqs_satisfied(trees.get(code), implied, course_code=code):
            eligible.append(course)
    return eligible


def _missing_from(node: PrereqNode | None, source: set) -> list[str]:
    if node is None:
        return []
    if isinstance(node, Leaf):
        return [] if node.course_code in source else [node.course_code]
    if isinstance(node, And):
        missing: list[str] = []
        for child in node.children:
            for code in _missing_from(child, source):
                if code not in missing:
                    missing.append(code)
        return missing
    if isinstance(node, Or):
        if prereqs_satisfied(node, source):
            return []
        return tree_course_codes(node)
    raise TypeError(f"Not a prerequisite node: {node!r}")


def check_can_take(
    requested_code: str,
    courses: Iterable[Course],
    completed: Iterable[str],
    prereq_tree_of: Callable[[str], PrereqNode | None],
    direct_prereqs_of: Callable[[str], list[str]],
    max_workers: int = FETCH_WORKERS,
) -> dict:
    """
    Returns a can-take assessment for a specific requested course.

    Returns:
    {
      "can_take": bool,
      "why_not": str | None,
      "missing_prereqs": [str],
      "prereq_check": str,            # human-readable prereq label
      "assumptions": [dict],          # one-hop inferences that were applied
    }
    """
    ordered_completed = list(dict.fromkeys(completed))
    completed_set = set(ordered_completed)
    catalog_codes = {c.course_code for c in courses}
    if requested_code not in catalog_codes:
        return {
            "can_take": False,
            "why_not": f"{requested_code} is not in the course catalog.",
            "missing_prereqs": [],
            "prereq_check": "",
            "assumptions": [],
        }

    implied, assumptions = infer_implied_completed_with_provenance(
        ordered_completed, direct_prereqs_of, max_workers
    )
    if requested_code in implied:
        return {
            "can_take": False,
            "why_not": f"You have already completed {requested_code}.",
            "missing_prereqs": [],
            "prereq_check": "",
            "assumptions": assumptions,
        }

    trees, failures = fetch_concurrently([requested_code], prereq_tree_of, max_workers)
    if failures:
        print(
            f"[WARN] Prerequisite tree unavailable for {requested_code}; treating as satisfied: "
            f"{failures[requested_code]}",
            file=sys.stderr,
        )
        return {
            "can_take": True,
            "why_not": None,
            "missing_prereqs": [],
            "prereq_check": "Prerequisites could not be checked",
            "assumptions": assumptions,
        }

    tree = trees.get(requested_code)
    check = build_prereq_check_string(tree, completed_set, implied - completed_set)
    if prereqs_satisfied(tree, implied, course_code=requested_code):
        return {
            "can_take": True,
            "why_not": None,
            "missing_prereqs": [],
            "prereq_check": check,
            "assumptions": assumptions,
        }

    missing = _missing_from(tree, implied)
    why_not = f"Missing prerequisite(s): {', '.join(missing)}." if missing else "Prerequisites not satisfied."
    return {
        "can_take": False,
        "why_not": why_not,
        "missing_prereqs": missing,
        "prereq_check": check,
        "assumptions": assumptions,
    }


class EligibilityRequests:
    """
    Issues increasing request ids so a slow, older eligibility computation
    cannot overwrite the result of a newer one.

    For embedding callers that run overlapping computations for one student
    (an interactive planner re-checking on every edit). The HTTP endpoints
    are stateless per request and do not use it.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._latest = 0

    def begin(self) -> int:
        with self._lock:
            self._latest += 1
            return self._latest

    def is_current(self, request_id: int) -> bool:
        with self._lock:
            return request_id == self._latest

    def accept(self, request_id: int, result):
        """Returns `result` when `request_id` is the newest issued id, else None."""
        if not self.is_current(request_id):
            print(f"[INFO] Discarding stale eligibility result #{request_id}")
            return None
        return result
