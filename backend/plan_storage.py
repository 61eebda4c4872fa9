"""
Durable storage for the degree plan.

Stored shape:
  {
    "semesters": [Semester.to_dict(), ...],
    "filter": {"department": str, "search": str, "creditHours": str},
    "setupDates": {"startDate": {...}, "gradDate": {...}} | null,
    "isSetupComplete": bool
  }

Writes are last-write-wins; there is no coordination between sessions.
"""

import json
import os
import sys
import tempfile
from typing import Protocol

from errors import MalformedPersistedState
from models import PlanFilter, Semester, TermDate


class PlanStorage(Protocol):
    def read(self) -> dict | None: ...

    def write(self, data: dict) -> None: ...


class JsonFilePlanStorage:
    def __init__(self, path: str):
        self.path = path

    def read(self) -> dict | None:
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                return json.load(fh)
        except ValueError as exc:
            raise MalformedPersistedState(f"Could not read {self.path}: {exc}") from exc
        except OSError as exc:
            # An unreadable file is not a malformed plan.
            print(f"[WARN] Plan file {self.path} is unreadable: {exc}", file=sys.stderr)
            raise

    def write(self, data: dict) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


class InMemoryPlanStorage:
    """Keeps the plan in memory and records every write."""

    def __init__(self, initial: dict | None = None):
        self.data = initial
        self.writes: list[dict] = []

    def read(self) -> dict | None:
        return json.loads(json.dumps(self.data)) if self.data is not None else None

    def write(self, data: dict) -> None:
        snapshot = json.loads(json.dumps(data))
        self.data = snapshot
        self.writes.append(snapshot)


def encode_plan(
    semesters: list[Semester],
    plan_filter: PlanFilter,
    setup_dates: tuple[TermDate, TermDate] | None,
) -> dict:
    return {
        "semesters": [s.to_dict() for s in semesters],
        "filter": plan_filter.to_dict(),
        "setupDates": (
            {"startDate": setup_dates[0].to_dict(), "gradDate": setup_dates[1].to_dict()}
            if setup_dates else None
        ),
        "isSetupComplete": setup_dates is not None,
    }


def decode_plan(raw) -> tuple[list[Semester], PlanFilter, tuple[TermDate, TermDate] | None]:
    """Raises MalformedPersistedState if `raw` does not match the stored shape."""
    try:
        if not isinstance(raw, dict):
            raise TypeError(f"Plan must be an object, got {type(raw).__name__}")
        semesters_raw = raw.get("semesters") or []
        if not isinstance(semesters_raw, list):
            raise TypeError("semesters must be a list")
        semesters = [Semester.from_dict(s) for s in semesters_raw]
        plan_filter = PlanFilter.from_dict(raw.get("filter"))
        dates_raw = raw.get("setupDates")
        setup_dates = None
        if dates_raw:
            setup_dates = (
                TermDate.from_dict(dates_raw["startDate"]),
                TermDate.from_dict(dates_raw["gradDate"]),
            )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise MalformedPersistedState(f"Stored plan is malformed: {exc}") from exc

    ids = [s.id for s in semesters]
    if len(ids) != len(set(ids)):
        raise MalformedPersistedState("Stored plan has duplicate semester ids")
    return semesters, plan_filter, setup_dates
