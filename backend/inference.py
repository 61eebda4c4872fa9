"""
Implied-completion inference.

A course whose direct prerequisite list has exactly one entry implies that
prerequisite was completed too. The rule is applied once, to the explicitly
completed courses only; implied courses are never fed back in.
"""

import sys
from typing import Callable, Iterable

from config import FETCH_WORKERS
from data_source import fetch_concurrently


def infer_implied_completed_with_provenance(
    completed: Iterable[str],
    direct_prereqs_of: Callable[[str], list[str]],
    max_workers: int = FETCH_WORKERS,
) -> tuple[set[str], list[dict]]:
    """
    Returns (implied_completed, assumption_rows).

    assumption_rows item shape:
      {"source_completed": str, "assumed_prereq": str}

    Only prereqs not already explicitly completed produce a row. Lookups
    that fail are logged and contribute nothing.
    """
    ordered_completed = list(dict.fromkeys(completed))
    completed_set = set(ordered_completed)

    prereq_lists, failures = fetch_concurrently(ordered_completed, direct_prereqs_of, max_workers)
    for code, exc in failures.items():
        print(f"[WARN] Could not get prerequisites for {code}: {exc}", file=sys.stderr)

    implied = set(completed_set)
    assumption_rows: list[dict] = []
    for source_course in ordered_completed:
        prereqs = prereq_lists.get(source_course) or []
        if len(prereqs) != 1:
            continue
        single = prereqs[0]
        if single not in completed_set and single not in implied:
            assumption_rows.append({
                "source_completed": source_course,
                "assumed_prereq": single,
            })
        implied.add(single)

    return implied, assumption_rows


def infer_implied_completed(
    completed: Iterable[str],
    direct_prereqs_of: Callable[[str], list[str]],
    max_workers: int = FETCH_WORKERS,
) -> set[str]:
    implied, _ = infer_implied_completed_with_provenance(completed, direct_prereqs_of, max_workers)
    return implied
