"""
Course data read contracts and the catalog-backed implementation.

Every planner computation reads course data through these four calls:
  get_all_courses()                    → [Course]
  get_course_prerequisites(code)       → {"prerequisites": [{"courseCode": ...}]} | None
  get_course_prerequisite_tree(code)   → wire tree | {} | None
  get_prerequisite_relationships()     → {code: [direct prereq codes]}

A lookup that cannot be served raises FetchFailure. Callers are expected to
fail open on it.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Protocol

from config import FETCH_WORKERS
from errors import FetchFailure
from models import Course
from prereq_tree import PrereqNode, tree_from_wire, tree_to_wire


class CourseDataSource(Protocol):
    def get_all_courses(self) -> list[Course]: ...

    def get_course_prerequisites(self, course_code: str) -> dict | None: ...

    def get_course_prerequisite_tree(self, course_code: str) -> dict | None: ...

    def get_prerequisite_relationships(self) -> dict[str, list[str]]: ...


class CatalogDataSource:
    """Serves the read contracts from a catalog built by data_loader.load_catalog()."""

    def __init__(self, catalog: dict):
        self._catalog = catalog

    @property
    def catalog_codes(self) -> set[str]:
        return self._catalog["catalog_codes"]

    def get_all_courses(self) -> list[Course]:
        return list(self._catalog["courses"])

    def get_course(self, course_code: str) -> Course | None:
        return self._catalog["courses_by_code"].get(course_code)

    def get_course_prerequisites(self, course_code: str) -> dict | None:
        if course_code not in self.catalog_codes:
            return None
        direct = self._catalog["direct_prereqs"].get(course_code, [])
        return {"prerequisites": [{"courseCode": code} for code in direct]}

    def get_course_prerequisite_tree(self, course_code: str) -> dict | None:
        if course_code not in self.catalog_codes:
            return None
        return tree_to_wire(self._catalog["prereq_trees"].get(course_code))

    def get_prerequisite_relationships(self) -> dict[str, list[str]]:
        catalog_codes = self.catalog_codes
        relationships: dict[str, list[str]] = {}
        for code, prereqs in self._catalog["direct_prereqs"].items():
            if code not in catalog_codes:
                continue
            kept = [p for p in prereqs if p in catalog_codes]
            if kept:
                relationships[code] = kept
        return relationships


def direct_prereqs_lookup(source: CourseDataSource) -> Callable[[str], list[str]]:
    """Adapts get_course_prerequisites() to code → [direct prereq codes]."""
    def _lookup(course_code: str) -> list[str]:
        try:
            data = source.get_course_prerequisites(course_code)
        except FetchFailure:
            raise
        except Exception as exc:
            raise FetchFailure(course_code, str(exc)) from exc
        if not data:
            return []
        return [
            str(p.get("courseCode"))
            for p in data.get("prerequisites") or []
            if p.get("courseCode")
        ]
    return _lookup


def prereq_tree_lookup(source: CourseDataSource) -> Callable[[str], PrereqNode | None]:
    """Adapts get_course_prerequisite_tree() to code → decoded tree."""
    def _lookup(course_code: str) -> PrereqNode | None:
        try:
            raw = source.get_course_prerequisite_tree(course_code)
        except FetchFailure:
            raise
        except Exception as exc:
            raise FetchFailure(course_code, str(exc)) from exc
        try:
            return tree_from_wire(raw)
        except ValueError as exc:
            raise FetchFailure(course_code, f"malformed prerequisite tree: {exc}") from exc
    return _lookup


def fetch_concurrently(
    course_codes: Iterable[str],
    fetch: Callable[[str], object],
    max_workers: int = FETCH_WORKERS,
) -> tuple[dict, dict[str, FetchFailure]]:
    """
    Runs `fetch` for every code on a thread pool and joins the results.

    Returns (results, failures): results maps code → fetched value for
    lookups that succeeded, failures maps code → FetchFailure for the rest.
    Any other exception propagates.
    """
    codes = list(dict.fromkeys(course_codes))
    results: dict = {}
    failures: dict[str, FetchFailure] = {}
    if not codes:
        return results, failures

    workers = max(1, min(max_workers, len(codes)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {code: pool.submit(fetch, code) for code in codes}
        for code, future in futures.items():
            try:
                results[code] = future.result()
            except FetchFailure as exc:
                failures[code] = exc
    return results, failures
