import sys
import os

import pandas as pd
import pytest

# Add backend/ to path so tests can import backend modules directly
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

# Add scripts/ to path so tests can import script modules directly
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "scripts"))


@pytest.fixture
def write_catalog(tmp_path):
    """
    Writes a course data directory and returns its path.

    courses: [(code, prerequisite_logic)] or full row dicts
    edges:   optional [(course_code, prereq_code)] for prerequisites.csv
    """
    def _write(courses, edges=None):
        rows = []
        for item in courses:
            if isinstance(item, dict):
                rows.append(item)
            else:
                code, logic = item
                rows.append({
                    "course_code": code,
                    "course_name": f"Course {code}",
                    "course_description": "",
                    "credits": 3,
                    "prerequisite_logic": logic or "",
                })
        data_dir = tmp_path / "data"
        data_dir.mkdir(exist_ok=True)
        pd.DataFrame(rows).to_csv(data_dir / "courses.csv", index=False)
        if edges is not None:
            pd.DataFrame(edges, columns=["course_code", "prereq_code"]).to_csv(
                data_dir / "prerequisites.csv", index=False
            )
        return str(data_dir)
    return _write
