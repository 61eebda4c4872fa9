import threading

import pytest
from data_loader import load_catalog
from data_source import (
    CatalogDataSource,
    direct_prereqs_lookup,
    fetch_concurrently,
    prereq_tree_lookup,
)
from errors import FetchFailure
from prereq_tree import And, Leaf


@pytest.fixture
def source(write_catalog):
    path = write_catalog([
        ("CSC 1051", None),
        ("CSC 1052", "CSC 1051"),
        ("CSC 1300", None),
        ("CSC 1700", "CSC 1052; CSC 1300"),
        ("CSC 4800", "CSC 9999"),
    ])
    return CatalogDataSource(load_catalog(path))


class TestCatalogDataSource:
    def test_get_all_courses(self, source):
        assert {c.course_code for c in source.get_all_courses()} == {
            "CSC 1051", "CSC 1052", "CSC 1300", "CSC 1700", "CSC 4800",
        }

    def test_get_course(self, source):
        assert source.get_course("CSC 1052").course_name == "Course CSC 1052"
        assert source.get_course("CSC 0000") is None

    def test_prerequisites(self, source):
        assert source.get_course_prerequisites("CSC 1700") == {
            "prerequisites": [{"courseCode": "CSC 1052"}, {"courseCode": "CSC 1300"}],
        }
        assert source.get_course_prerequisites("CSC 1051") == {"prerequisites": []}
        assert source.get_course_prerequisites("CSC 0000") is None

    def test_prerequisite_tree(self, source):
        assert source.get_course_prerequisite_tree("CSC 1052") == {"type": "COURSE", "courseCode": "CSC 1051"}
        assert source.get_course_prerequisite_tree("CSC 1051") == {}
        assert source.get_course_prerequisite_tree("CSC 0000") is None

    def test_relationships_drop_unknown_codes(self, source):
        assert source.get_prerequisite_relationships() == {
            "CSC 1052": ["CSC 1051"],
            "CSC 1700": ["CSC 1052", "CSC 1300"],
        }


class TestLookups:
    def test_direct_prereqs_lookup(self, source):
        lookup = direct_prereqs_lookup(source)
        assert lookup("CSC 1700") == ["CSC 1052", "CSC 1300"]
        assert lookup("CSC 0000") == []

    def test_prereq_tree_lookup(self, source):
        lookup = prereq_tree_lookup(source)
        assert lookup("CSC 1700") == And((Leaf("CSC 1052"), Leaf("CSC 1300")))
        assert lookup("CSC 1051") is None

    def test_errors_become_fetch_failures(self):
        class Broken:
            def get_course_prerequisites(self, code):
                raise ConnectionError("reset")

            def get_course_prerequisite_tree(self, code):
                return {"type": "NAND"}

        with pytest.raises(FetchFailure) as direct_err:
            direct_prereqs_lookup(Broken())("CSC 1051")
        assert direct_err.value.course_code == "CSC 1051"
        with pytest.raises(FetchFailure, match="malformed"):
            prereq_tree_lookup(Broken())("CSC 1051")


class TestFetchConcurrently:
    def test_results_and_failures(self):
        def fetch(code):
            if code == "BAD 1000":
                raise FetchFailure(code, "nope")
            return code.lower()

        results, failures = fetch_concurrently(["CSC 1051", "BAD 1000", "CSC 1051"], fetch)
        assert results == {"CSC 1051": "csc 1051"}
        assert list(failures) == ["BAD 1000"]

    def test_empty(self):
        assert fetch_concurrently([], lambda c: c) == ({}, {})

    def test_runs_in_parallel(self):
        barrier = threading.Barrier(3, timeout=5)

        def fetch(code):
            barrier.wait()
            return code

        results, _ = fetch_concurrently(["A 100", "B 100", "C 100"], fetch, max_workers=3)
        assert len(results) == 3

    def test_other_errors_propagate(self):
        def fetch(code):
            raise KeyError(code)

        with pytest.raises(KeyError):
            fetch_concurrently(["CSC 1051"], fetch)
