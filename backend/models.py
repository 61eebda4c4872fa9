"""
Planner data models.

Course is read-only catalog data. TermDate, PlacedCourse, Semester and
PlanFilter make up a degree plan and round-trip through the persisted plan
JSON with camelCase keys.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from config import DEFAULT_CREDIT_HOURS, MAX_CREDITS, MIN_CREDITS

SEASONS = ("Spring", "Summer", "Fall")
SEASON_RANK = {season: rank for rank, season in enumerate(SEASONS)}


def season_for_month(month: int) -> str:
    """January-May is Spring, June-July is Summer, everything else Fall."""
    if 1 <= month <= 5:
        return "Spring"
    if 6 <= month <= 7:
        return "Summer"
    return "Fall"


def semester_id(season: str, year: int) -> str:
    return f"{season.lower()}-{year}"


class CreditLoad(Enum):
    UNDERLOADED = "underloaded"
    NORMAL = "normal"
    OVERLOADED = "overloaded"


@dataclass(frozen=True)
class Course:
    course_code: str
    course_name: str = ""
    course_description: str = ""
    credits: int = 0
    prerequisite_logic: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "courseCode": self.course_code,
            "courseName": self.course_name,
            "courseDescription": self.course_description,
            "credits": self.credits,
            "prerequisiteLogic": self.prerequisite_logic,
        }


@dataclass(frozen=True)
class TermDate:
    month: int
    year: int

    @property
    def season(self) -> str:
        return season_for_month(self.month)

    def to_dict(self) -> dict:
        return {"month": self.month, "year": self.year, "season": self.season}

    @classmethod
    def from_dict(cls, raw: dict) -> "TermDate":
        return cls(month=int(raw["month"]), year=int(raw["year"]))


@dataclass
class PlacedCourse:
    """One placement of a course in a plan. instance_id is never reused."""
    instance_id: str
    course_code: str
    credit_hours: Optional[int] = None
    course_name: str = ""

    @property
    def effective_credits(self) -> int:
        return self.credit_hours or DEFAULT_CREDIT_HOURS

    def to_dict(self) -> dict:
        return {
            "instanceId": self.instance_id,
            "courseCode": self.course_code,
            "creditHours": self.credit_hours,
            "courseName": self.course_name,
        }

    @classmethod
    def from_dict(cls, raw: dict) -> "PlacedCourse":
        credit_hours = raw.get("creditHours")
        return cls(
            instance_id=str(raw["instanceId"]),
            course_code=str(raw["courseCode"]),
            credit_hours=int(credit_hours) if credit_hours is not None else None,
            course_name=str(raw.get("courseName") or ""),
        )


@dataclass
class Semester:
    season: str
    year: int
    courses: list[PlacedCourse] = field(default_factory=list)
    min_credits: int = MIN_CREDITS
    max_credits: int = MAX_CREDITS

    @property
    def id(self) -> str:
        return semester_id(self.season, self.year)

    @property
    def label(self) -> str:
        return f"{self.season} {self.year}"

    @property
    def ordinal(self) -> tuple[int, int]:
        return (self.year, SEASON_RANK[self.season])

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "season": self.season,
            "year": self.year,
            "courses": [c.to_dict() for c in self.courses],
            "minCredits": self.min_credits,
            "maxCredits": self.max_credits,
        }

    @classmethod
    def from_dict(cls, raw: dict) -> "Semester":
        season = str(raw["season"])
        if season not in SEASON_RANK:
            raise ValueError(f"Unknown season: {season!r}")
        courses = raw.get("courses") or []
        if not isinstance(courses, list):
            raise ValueError("Semester courses must be a list")
        return cls(
            season=season,
            year=int(raw["year"]),
            courses=[PlacedCourse.from_dict(c) for c in courses],
            min_credits=int(raw.get("minCredits", MIN_CREDITS)),
            max_credits=int(raw.get("maxCredits", MAX_CREDITS)),
        )


@dataclass
class PlanFilter:
    department: str = ""
    search: str = ""
    credit_hours: str = ""

    def to_dict(self) -> dict:
        return {
            "department": self.department,
            "search": self.search,
            "creditHours": self.credit_hours,
        }

    @classmethod
    def from_dict(cls, raw: dict | None) -> "PlanFilter":
        raw = raw or {}
        return cls(
            department=str(raw.get("department") or ""),
            search=str(raw.get("search") or ""),
            credit_hours=str(raw.get("creditHours") or ""),
        )
