"""
Planner error taxonomy.

None of these is fatal: callers degrade to a permissive or inert default.
FetchFailure and MalformedPersistedState are raised and caught inside the
backend; DanglingReference and CyclicPrerequisite only surface from the
strict catalog check.
"""


class PlannerError(Exception):
    """Base class for planner errors."""


class FetchFailure(PlannerError):
    """A course data lookup failed."""

    def __init__(self, course_code: str | None, reason: str = ""):
        self.course_code = course_code
        self.reason = reason
        target = course_code or "catalog"
        super().__init__(f"Fetch failed for {target}: {reason}" if reason else f"Fetch failed for {target}")


class MalformedPersistedState(PlannerError):
    """Stored plan data could not be decoded."""


class DanglingReference(PlannerError):
    """A prerequisite edge names a course missing from the catalog."""

    def __init__(self, course_code: str, prereq_code: str):
        self.course_code = course_code
        self.prereq_code = prereq_code
        super().__init__(f"{course_code} lists unknown prerequisite {prereq_code}")


class CyclicPrerequisite(PlannerError):
    """A course appears in its own prerequisite chain."""

    def __init__(self, course_code: str):
        self.course_code = course_code
        super().__init__(f"{course_code} is its own prerequisite")
