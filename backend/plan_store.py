import sys
import uuid
from typing import Callable, Iterable

from config import DEGREE_CREDIT_TARGET, HISTORY_LIMIT, PLAN_PATH
from eligibility import sort_courses
from errors import MalformedPersistedState
from history import HistoryManager
from models import Course, CreditLoad, PlacedCourse, PlanFilter, Semester, TermDate
from plan_storage import InMemoryPlanStorage, JsonFilePlanStorage, PlanStorage, decode_plan, encode_plan
from semesters import generate_semesters, next_term
from validators import classify_credit_load, semester_credits


def _new_instance_id(course_code: str) -> str:
    return f"{course_code}-{uuid.uuid4().hex}"


class DegreePlanStore:
    """
    Holds the student's term-by-term plan.

    The store is Uninitialized until set_setup_dates() generates the terms.
    Every change to the terms is recorded in history (so it can be undone)
    and then written through the storage port. Unknown semester or instance
    ids make an operation a no-op.
    """

    def __init__(
        self,
        storage: PlanStorage | None = None,
        history_limit: int = HISTORY_LIMIT,
    ):
        self.storage = storage if storage is not None else InMemoryPlanStorage()
        self.history = HistoryManager(history_limit)
        self.semesters: list[Semester] = []
        self.filter = PlanFilter()
        self.setup_dates: tuple[TermDate, TermDate] | None = None
        self.load()

    # ── State ──────────────────────────────────────────────────────────────

    @property
    def is_setup_complete(self) -> bool:
        return self.setup_dates is not None

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def to_dict(self) -> dict:
        return encode_plan(self.semesters, self.filter, self.setup_dates)

    def get_semester(self, semester_id: str) -> Semester | None:
        for semester in self.semesters:
            if semester.id == semester_id:
                return semester
        return None

    # ── Persistence ────────────────────────────────────────────────────────

    def _reset(self) -> None:
        self.semesters = []
        self.filter = PlanFilter()
        self.setup_dates = None
        self.history.clear()

    def load(self) -> None:
        """
        Replace in-memory state with the stored plan; bad data is discarded.
        Storage that cannot be read at all raises, so nothing overwrites it.
        """
        self._reset()
        try:
            raw = self.storage.read()
            if raw is None:
                return
            semesters, plan_filter, setup_dates = decode_plan(raw)
        except MalformedPersistedState as exc:
            print(f"[WARN] Failed to load planner data; starting fresh: {exc}", file=sys.stderr)
            return

        self.filter = plan_filter
        if setup_dates is None:
            return
        self.setup_dates = setup_dates
        self.semesters = semesters

    def _save(self) -> None:
        self.storage.write(self.to_dict())

    def _commit(self, mutate: Callable[[], bool]) -> bool:
        """
        Applies `mutate` and records it. `mutate` returns False when it
        changed nothing, in which case history and storage are untouched.
        """
        if len(self.history) == 0:
            self.history.push(self.semesters)
        if not mutate():
            return False
        self.history.push(self.semesters)
        self._save()
        return True

    # ── Setup ──────────────────────────────────────────────────────────────

    def set_setup_dates(self, start: TermDate, grad: TermDate) -> None:
        """
        Generates the terms from start through graduation, replacing any
        plan. History restarts from the generated plan.
        """
        self.setup_dates = (start, grad)
        self.semesters = generate_semesters(start, grad)
        self.history.clear()
        self.history.push(self.semesters)
        self._save()

    # ── Semesters ──────────────────────────────────────────────────────────

    def add_semester(self) -> Semester | None:
        """
        Appends the regular term after the last one (never Summer). With every
        term removed, the plan restarts at its setup start term. Returns None,
        changing nothing, until set_setup_dates() has run.
        """
        if not self.is_setup_complete:
            return None
        if self.semesters:
            last = self.semesters[-1]
            season, year = next_term(last.season, last.year)
        else:
            start, _ = self.setup_dates
            season, year = start.season, start.year
        semester = Semester(season=season, year=year)

        def _apply() -> bool:
            self.semesters = self.semesters + [semester]
            return True
        self._commit(_apply)
        return semester

    def remove_semester(self, semester_id: str) -> bool:
        def _apply() -> bool:
            kept = [s for s in self.semesters if s.id != semester_id]
            if len(kept) == len(self.semesters):
                return False
            self.semesters = kept
            return True
        return self._commit(_apply)

    # ── Courses ────────────────────────────────────────────────────────────

    def place_course(self, course: Course, semester_id: str) -> PlacedCourse | None:
        """Adds a new placement of `course` to the end of the term."""
        semester = self.get_semester(semester_id)
        if semester is None:
            return None
        placed = PlacedCourse(
            instance_id=_new_instance_id(course.course_code),
            course_code=course.course_code,
            credit_hours=course.credits or None,
            course_name=course.course_name,
        )

        def _apply() -> bool:
            semester.courses.append(placed)
            return True
        self._commit(_apply)
        return placed

    def remove_course(self, instance_id: str, semester_id: str) -> bool:
        semester = self.get_semester(semester_id)
        if semester is None:
            return False

        def _apply() -> bool:
            kept = [c for c in semester.courses if c.instance_id != instance_id]
            if len(kept) == len(semester.courses):
                return False
            semester.courses = kept
            return True
        return self._commit(_apply)

    def move_course(
        self,
        instance_id: str,
        from_semester_id: str,
        to_semester_id: str,
        target_index: int,
    ) -> bool:
        """
        Moves one placement between terms (or within a term) in a single
        step. Nothing changes unless both terms and the placement exist.
        """
        source = self.get_semester(from_semester_id)
        dest = self.get_semester(to_semester_id)
        if source is None or dest is None:
            return False
        position = next(
            (i for i, c in enumerate(source.courses) if c.instance_id == instance_id),
            None,
        )
        if position is None:
            return False

        def _apply() -> bool:
            placed = source.courses.pop(position)
            index = max(0, min(int(target_index), len(dest.courses)))
            dest.courses.insert(index, placed)
            return True
        return self._commit(_apply)

    def get_semester_credits(self, semester_id: str) -> int:
        semester = self.get_semester(semester_id)
        if semester is None:
            return 0
        return semester_credits(semester)

    def get_credit_load(self, semester_id: str) -> CreditLoad | None:
        semester = self.get_semester(semester_id)
        if semester is None:
            return None
        return classify_credit_load(semester)

    def placed_course_codes(self) -> set[str]:
        return {c.course_code for s in self.semesters for c in s.courses}

    def total_credits(self) -> int:
        return sum(semester_credits(s) for s in self.semesters)

    def credit_progress(self, target: int = DEGREE_CREDIT_TARGET) -> float:
        """Share of the degree credit target covered by the plan, capped at 1."""
        if target <= 0:
            return 1.0
        return min(self.total_credits() / target, 1.0)

    # ── History ────────────────────────────────────────────────────────────

    def undo(self) -> bool:
        snapshot = self.history.undo()
        if snapshot is None:
            return False
        self.semesters = snapshot
        self._save()
        return True

    def redo(self) -> bool:
        snapshot = self.history.redo()
        if snapshot is None:
            return False
        self.semesters = snapshot
        self._save()
        return True

    # ── Catalog filter ─────────────────────────────────────────────────────

    def set_filter(self, department=None, search=None, credit_hours=None) -> None:
        if department is not None:
            self.filter.department = str(department)
        if search is not None:
            self.filter.search = str(search)
        if credit_hours is not None:
            self.filter.credit_hours = str(credit_hours)
        self._save()

    def set_search(self, search: str) -> None:
        self.set_filter(search=search)

    def filtered_courses(self, courses: Iterable[Course]) -> list[Course]:
        """Catalog courses matching the active filter, in display order."""
        search = self.filter.search.strip().lower()
        department = self.filter.department.strip().upper()
        credit_hours = self.filter.credit_hours.strip()

        def _matches(course: Course) -> bool:
            if search and search not in course.course_code.lower() and search not in course.course_name.lower():
                return False
            if department and not course.course_code.upper().startswith(department):
                return False
            if credit_hours and str(course.credits) != credit_hours:
                return False
            return True

        return sort_courses(c for c in courses if _matches(c))


def open_plan_store(path: str = PLAN_PATH, history_limit: int = HISTORY_LIMIT) -> DegreePlanStore:
    """Plan store persisted to a JSON file (PLAN_PATH by default)."""
    store = DegreePlanStore(JsonFilePlanStorage(path), history_limit)
    state = "ready" if store.is_setup_complete else "awaiting setup"
    print(f"[INFO] Plan store opened from {path} ({len(store.semesters)} terms, {state})")
    return store
