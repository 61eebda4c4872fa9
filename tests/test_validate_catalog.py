import pytest
from data_loader import load_catalog
from errors import CyclicPrerequisite, DanglingReference
from validate_catalog import main, validate_catalog


class TestValidateCatalog:
    def test_clean_catalog_passes(self, write_catalog):
        path = write_catalog([("CSC 1051", None), ("CSC 1052", "CSC 1051")])
        result = validate_catalog(load_catalog(path), path)
        assert result.passed
        assert result.warnings == []
        assert "All checks passed." in result.summary()

    def test_dangling_is_warning(self, write_catalog):
        path = write_catalog([("CSC 1052", "CSC 1051")])
        result = validate_catalog(load_catalog(path), path)
        assert result.passed
        assert result.warnings == ["CSC 1052 lists unknown prerequisite CSC 1051"]

    def test_cycle_is_error(self, write_catalog):
        path = write_catalog([("CSC 1000", "CSC 2000"), ("CSC 2000", "CSC 1000")])
        result = validate_catalog(load_catalog(path), path)
        assert not result.passed
        assert len(result.errors) == 2
        assert "[FAIL]" in result.summary()

    def test_unsupported_is_warning(self, write_catalog):
        path = write_catalog([("CSC 4790", "Senior standing")])
        result = validate_catalog(load_catalog(path), path)
        assert result.passed
        assert any("CSC 4790" in w for w in result.warnings)

    def test_strict_raises(self, write_catalog):
        path = write_catalog([("CSC 1052", "CSC 1051")])
        with pytest.raises(DanglingReference):
            validate_catalog(load_catalog(path), path, strict=True)

    def test_strict_raises_on_cycle(self, write_catalog):
        path = write_catalog([("CSC 4000", "CSC 4000")])
        with pytest.raises(CyclicPrerequisite):
            validate_catalog(load_catalog(path), path, strict=True)


class TestMain:
    def test_exit_codes(self, write_catalog, capsys):
        ok_path = write_catalog([("CSC 1051", None)])
        assert main(["--path", ok_path]) == 0
        assert "[PASS]" in capsys.readouterr().out

    def test_exit_code_on_cycle(self, write_catalog):
        path = write_catalog([("CSC 4000", "CSC 4000")])
        assert main(["--path", path]) == 1
