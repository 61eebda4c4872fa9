import json

import pytest
from errors import MalformedPersistedState
from models import PlacedCourse, PlanFilter, Semester, TermDate
from plan_storage import InMemoryPlanStorage, JsonFilePlanStorage, decode_plan, encode_plan


def sample_plan():
    semesters = [
        Semester("Fall", 2024, courses=[PlacedCourse("CSC 1051-a1", "CSC 1051", 4, "Algorithms and Data Structures I")]),
        Semester("Spring", 2025),
    ]
    return semesters, PlanFilter(department="CSC"), (TermDate(8, 2024), TermDate(5, 2025))


class TestEncodePlan:
    def test_shape(self):
        data = encode_plan(*sample_plan())
        assert set(data) == {"semesters", "filter", "setupDates", "isSetupComplete"}
        assert data["isSetupComplete"] is True
        assert data["filter"] == {"department": "CSC", "search": "", "creditHours": ""}
        assert data["semesters"][0]["id"] == "fall-2024"
        assert data["semesters"][0]["courses"][0] == {
            "instanceId": "CSC 1051-a1",
            "courseCode": "CSC 1051",
            "creditHours": 4,
            "courseName": "Algorithms and Data Structures I",
        }

    def test_no_setup_dates(self):
        data = encode_plan([], PlanFilter(), None)
        assert data["setupDates"] is None
        assert data["isSetupComplete"] is False


class TestDecodePlan:
    def test_decodes_encoded(self):
        semesters, plan_filter, dates = decode_plan(json.loads(json.dumps(encode_plan(*sample_plan()))))
        assert [s.id for s in semesters] == ["fall-2024", "spring-2025"]
        assert semesters[0].courses[0].credit_hours == 4
        assert plan_filter.department == "CSC"
        assert dates == (TermDate(8, 2024), TermDate(5, 2025))

    @pytest.mark.parametrize("raw", [
        [],
        "plan",
        {"semesters": "fall"},
        {"semesters": [{"year": 2024}]},
        {"semesters": [{"season": "Fall", "year": "soon"}]},
        {"semesters": [{"season": "Fall", "year": 2024, "courses": [{"courseCode": "CSC 1051"}]}]},
        {"semesters": [], "setupDates": {"startDate": {"month": 8, "year": 2024}}},
    ])
    def test_malformed(self, raw):
        with pytest.raises(MalformedPersistedState):
            decode_plan(raw)

    def test_duplicate_semester_ids(self):
        raw = {"semesters": [{"season": "Fall", "year": 2024}, {"season": "Fall", "year": 2024}]}
        with pytest.raises(MalformedPersistedState):
            decode_plan(raw)


class TestJsonFilePlanStorage:
    def test_missing_file_reads_none(self, tmp_path):
        assert JsonFilePlanStorage(str(tmp_path / "absent.json")).read() is None

    def test_write_then_read(self, tmp_path):
        storage = JsonFilePlanStorage(str(tmp_path / "nested" / "plan.json"))
        storage.write({"semesters": []})
        assert storage.read() == {"semesters": []}

    def test_no_temp_files_left(self, tmp_path):
        storage = JsonFilePlanStorage(str(tmp_path / "plan.json"))
        storage.write({"a": 1})
        storage.write({"a": 2})
        assert [p.name for p in tmp_path.iterdir()] == ["plan.json"]

    def test_bad_json_raises(self, tmp_path):
        path = tmp_path / "plan.json"
        path.write_text("[unterminated", encoding="utf-8")
        with pytest.raises(MalformedPersistedState):
            JsonFilePlanStorage(str(path)).read()

    def test_unreadable_file_is_not_malformed(self, tmp_path, capsys):
        with pytest.raises(OSError):
            JsonFilePlanStorage(str(tmp_path)).read()
        assert "unreadable" in capsys.readouterr().err


class TestInMemoryPlanStorage:
    def test_reads_are_copies(self):
        storage = InMemoryPlanStorage({"semesters": []})
        data = storage.read()
        data["semesters"].append("x")
        assert storage.read() == {"semesters": []}

    def test_records_writes(self):
        storage = InMemoryPlanStorage()
        storage.write({"n": 1})
        storage.write({"n": 2})
        assert storage.writes == [{"n": 1}, {"n": 2}]
        assert storage.read() == {"n": 2}
