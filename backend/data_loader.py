import os
import sys

import pandas as pd

from errors import CyclicPrerequisite, DanglingReference, PlannerError
from models import Course
from normalizer import normalize_code
from prereq_parser import parse_prereq_logic
from prereq_tree import tree_course_codes

COURSE_COLUMNS = ["course_code", "course_name", "course_description", "credits", "prerequisite_logic"]

_COURSE_RENAMES = {
    "courseCode": "course_code",
    "courseName": "course_name",
    "courseDescription": "course_description",
    "prerequisiteLogic": "prerequisite_logic",
    "prereq_logic": "prerequisite_logic",
    "prerequisites": "prerequisite_logic",
    "description": "course_description",
    "title": "course_name",
}
_EDGE_RENAMES = {
    "courseCode": "course_code",
    "prereqCode": "prereq_code",
    "prerequisite_code": "prereq_code",
    "prerequisite": "prereq_code",
}


def _read_tables(data_path: str) -> tuple[pd.DataFrame, pd.DataFrame | None]:
    """Reads courses (+ optional prerequisite edges) from a CSV directory or a workbook."""
    if os.path.isdir(data_path):
        courses_df = pd.read_csv(os.path.join(data_path, "courses.csv"), dtype=str)
        edges_path = os.path.join(data_path, "prerequisites.csv")
        edges_df = pd.read_csv(edges_path, dtype=str) if os.path.exists(edges_path) else None
        return courses_df, edges_df

    xl = pd.ExcelFile(data_path)
    courses_df = xl.parse("courses", dtype=str)
    edges_df = xl.parse("prerequisites", dtype=str) if "prerequisites" in xl.sheet_names else None
    return courses_df, edges_df


def _normalize_courses_df(courses_df: pd.DataFrame) -> pd.DataFrame:
    courses_df = courses_df.rename(
        columns={k: v for k, v in _COURSE_RENAMES.items() if k in courses_df.columns and v not in courses_df.columns}
    ).copy()
    if "course_code" not in courses_df.columns:
        raise ValueError("courses table has no course_code column")
    for col in COURSE_COLUMNS:
        if col not in courses_df.columns:
            courses_df[col] = None

    raw_codes = courses_df["course_code"].fillna("").astype(str).str.strip()
    courses_df["course_code"] = [normalize_code(c) or c for c in raw_codes]
    courses_df = courses_df[courses_df["course_code"] != ""]

    courses_df["course_name"] = courses_df["course_name"].fillna("").astype(str).str.strip()
    courses_df["course_description"] = courses_df["course_description"].fillna("").astype(str).str.strip()
    courses_df["credits"] = pd.to_numeric(courses_df["credits"], errors="coerce").fillna(0).astype(int)
    courses_df["prerequisite_logic"] = courses_df["prerequisite_logic"].fillna("").astype(str).str.strip()

    dupes = courses_df[courses_df.duplicated("course_code", keep="first")]["course_code"].tolist()
    if dupes:
        print(f"[WARN] {len(dupes)} duplicate course code(s) ignored: {sorted(set(dupes))}", file=sys.stderr)
        courses_df = courses_df.drop_duplicates("course_code", keep="first")
    return courses_df[COURSE_COLUMNS].reset_index(drop=True)


def _edges_to_direct_map(edges_df: pd.DataFrame) -> dict[str, list[str]]:
    edges_df = edges_df.rename(
        columns={k: v for k, v in _EDGE_RENAMES.items() if k in edges_df.columns and v not in edges_df.columns}
    )
    if not {"course_code", "prereq_code"}.issubset(edges_df.columns):
        raise ValueError("prerequisites table needs course_code and prereq_code columns")

    direct: dict[str, list[str]] = {}
    for _, row in edges_df.iterrows():
        if pd.isna(row["course_code"]) or pd.isna(row["prereq_code"]):
            continue
        code = str(row["course_code"]).strip()
        prereq = str(row["prereq_code"]).strip()
        code = normalize_code(code) or code
        prereq = normalize_code(prereq) or prereq
        if not code or not prereq:
            continue
        bucket = direct.setdefault(code, [])
        if prereq not in bucket:
            bucket.append(prereq)
    return direct


def find_catalog_issues(catalog: dict) -> list[PlannerError]:
    """
    Data integrity problems in a loaded catalog:
      DanglingReference:  a prerequisite edge naming a course not in the catalog
      CyclicPrerequisite: a course that is reachable from its own prerequisites
    """
    catalog_codes = catalog["catalog_codes"]
    direct = catalog["direct_prereqs"]
    issues: list[PlannerError] = []

    for code in sorted(direct):
        for prereq in direct[code]:
            if code not in catalog_codes or prereq not in catalog_codes:
                issues.append(DanglingReference(code, prereq))

    on_cycle: set[str] = set()
    state: dict[str, int] = {}  # 1 = on stack, 2 = done

    def _visit(code: str, stack: list[str]) -> None:
        state[code] = 1
        stack.append(code)
        for prereq in direct.get(code, []):
            if state.get(prereq) == 1:
                on_cycle.update(stack[stack.index(prereq):])
            elif prereq not in state:
                _visit(prereq, stack)
        stack.pop()
        state[code] = 2

    for code in sorted(direct):
        if code not in state:
            _visit(code, [])

    for code in sorted(on_cycle):
        issues.append(CyclicPrerequisite(code))
    return issues


def load_catalog(data_path: str) -> dict:
    """Load and parse the course data (CSV directory or workbook). Raises on file/schema errors."""
    courses_raw, edges_raw = _read_tables(data_path)
    courses_df = _normalize_courses_df(courses_raw)

    courses: list[Course] = []
    prereq_trees: dict = {}
    unsupported: list[str] = []
    for row in courses_df.itertuples(index=False):
        logic = row.prerequisite_logic or None
        try:
            tree = parse_prereq_logic(logic)
        except ValueError:
            tree = None
            unsupported.append(row.course_code)
        prereq_trees[row.course_code] = tree
        courses.append(Course(
            course_code=row.course_code,
            course_name=row.course_name,
            course_description=row.course_description,
            credits=int(row.credits),
            prerequisite_logic=logic,
        ))

    if edges_raw is not None:
        direct_prereqs = _edges_to_direct_map(edges_raw)
        _map_source = "prerequisites table"
    else:
        direct_prereqs = {
            code: tree_course_codes(tree) for code, tree in prereq_trees.items() if tree is not None
        }
        _map_source = "derived:prerequisite_logic"
    print(f"[INFO] Direct prerequisite source: {_map_source}")

    catalog = {
        "courses_df": courses_df,
        "courses": courses,
        "courses_by_code": {c.course_code: c for c in courses},
        "catalog_codes": {c.course_code for c in courses},
        "prereq_trees": prereq_trees,
        "direct_prereqs": direct_prereqs,
        "unsupported": unsupported,
    }

    # ── Startup data integrity checks ──────────────────────────────────────
    if unsupported:
        print(
            f"[WARN] {len(unsupported)} course(s) have unsupported prerequisite format "
            f"(treated as no prerequisites): {sorted(unsupported)}",
            file=sys.stderr,
        )
    issues = find_catalog_issues(catalog)
    dangling = [i for i in issues if isinstance(i, DanglingReference)]
    cyclic = [i for i in issues if isinstance(i, CyclicPrerequisite)]
    if dangling:
        print(f"[WARN] {len(dangling)} prerequisite edge(s) reference courses not in the catalog", file=sys.stderr)
    if cyclic:
        print(
            f"[WARN] {len(cyclic)} course(s) sit on a prerequisite cycle: {[i.course_code for i in cyclic]}",
            file=sys.stderr,
        )

    return catalog
