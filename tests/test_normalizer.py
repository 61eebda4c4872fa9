import pytest
from normalizer import dept_and_number, normalize_code, normalize_completed


class TestNormalizeCode:
    def test_canonical(self):
        assert normalize_code("CSC 1051") == "CSC 1051"

    def test_lowercase(self):
        assert normalize_code("csc1051") == "CSC 1051"

    def test_hyphen(self):
        assert normalize_code("CSC-1051") == "CSC 1051"

    def test_spaces_around_hyphen(self):
        assert normalize_code("MAT - 1500") == "MAT 1500"

    def test_lab_suffix(self):
        assert normalize_code("ece 2042l") == "ECE 2042L"

    def test_three_digit_number(self):
        assert normalize_code("CS 101") == "CS 101"

    def test_invalid_no_digits(self):
        assert normalize_code("CSC") is None

    def test_invalid_garbage(self):
        assert normalize_code("asdfasdf") is None

    def test_invalid_empty(self):
        assert normalize_code("") is None

    def test_invalid_none(self):
        assert normalize_code(None) is None


class TestDeptAndNumber:
    def test_split(self):
        assert dept_and_number("CSC 1051") == ("CSC", 1051)

    def test_numeric_not_lexical_order(self):
        codes = ["CSC 4170", "CSC 990", "CSC 1051"]
        assert sorted(codes, key=dept_and_number) == ["CSC 990", "CSC 1051", "CSC 4170"]


class TestNormalizeCompleted:
    CATALOG = {"CSC 1051", "CSC 1052", "MAT 1500"}

    def test_list_input(self):
        result = normalize_completed(["csc1051", "MAT 1500"], self.CATALOG)
        assert result["valid"] == ["CSC 1051", "MAT 1500"]
        assert result["invalid"] == []
        assert result["not_in_catalog"] == []

    def test_comma_separated_string(self):
        result = normalize_completed("CSC 1051, CSC-1052", self.CATALOG)
        assert set(result["valid"]) == {"CSC 1051", "CSC 1052"}

    def test_invalid_code(self):
        result = normalize_completed("asdfasdf, CSC 1051", self.CATALOG)
        assert "asdfasdf" in result["invalid"]
        assert "CSC 1051" in result["valid"]

    def test_not_in_catalog(self):
        result = normalize_completed(["CSC 9999"], self.CATALOG)
        assert result["not_in_catalog"] == ["CSC 9999"]
        assert result["valid"] == []

    def test_deduplication(self):
        result = normalize_completed(["CSC 1051", "csc1051", "CSC-1051"], self.CATALOG)
        assert result["valid"] == ["CSC 1051"]

    @pytest.mark.parametrize("empty", [None, "", []])
    def test_empty_input(self, empty):
        assert normalize_completed(empty, self.CATALOG) == {"valid": [], "invalid": [], "not_in_catalog": []}
