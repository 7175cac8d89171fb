"""Tests for baseline persistence."""

from unittest.mock import patch

import pytest

from sgp30_exporter.sensor.baseline import BaselineStore
from sgp30_exporter.sensor.models import CalibrationBaseline


@pytest.fixture
def store(tmp_path):
    return BaselineStore(tmp_path / "sgp30_baseline.txt")


class TestCalibrationBaseline:
    """Tests for the baseline value object."""

    def test_rejects_out_of_range_words(self):
        with pytest.raises(ValueError, match="16-bit"):
            CalibrationBaseline(0x10000, 0)
        with pytest.raises(ValueError, match="16-bit"):
            CalibrationBaseline(0, -1)

    def test_from_words(self):
        assert CalibrationBaseline.from_words([0x8973, 0x8AAE]) == CalibrationBaseline(
            0x8973, 0x8AAE
        )


class TestSave:
    """Tests for writing the baseline record."""

    def test_writes_single_line_record(self, store):
        assert store.save(CalibrationBaseline(35187, 35502)) is True
        assert store.path.read_text() == "35187 35502\n"

    def test_overwrites_previous_record(self, store):
        store.save(CalibrationBaseline(1, 2))
        store.save(CalibrationBaseline(3, 4))
        assert store.path.read_text() == "3 4\n"

    def test_write_failure_is_not_raised(self, tmp_path, caplog):
        store = BaselineStore(tmp_path / "missing-dir" / "baseline.txt")
        assert store.save(CalibrationBaseline(1, 2)) is False
        assert "Could not save baseline" in caplog.text

    def test_permission_error_is_not_raised(self, store):
        with patch("pathlib.Path.open", side_effect=PermissionError("denied")):
            assert store.save(CalibrationBaseline(1, 2)) is False


class TestLoad:
    """Tests for reading the baseline record."""

    @pytest.mark.parametrize(
        "baseline",
        [
            CalibrationBaseline(0, 0),
            CalibrationBaseline(0x8973, 0x8AAE),
            CalibrationBaseline(0xFFFF, 0xFFFF),
            CalibrationBaseline(1, 0xFFFF),
        ],
    )
    def test_round_trip(self, store, baseline):
        store.save(baseline)
        assert store.load() == baseline

    def test_missing_file(self, store, caplog):
        assert store.load() is None
        assert "starting uncalibrated" in caplog.text

    def test_empty_file(self, store):
        store.path.write_text("")
        assert store.load() is None

    @pytest.mark.parametrize(
        "content",
        ["abc def\n", "12 x\n", "1.5 2\n", "-1 2\n", "70000 1\n", "1\n", "1 2 3\n"],
    )
    def test_invalid_content(self, store, content):
        store.path.write_text(content)
        assert store.load() is None

    def test_tolerates_extra_whitespace(self, store):
        store.path.write_text("  100\t200  \n\n")
        assert store.load() == CalibrationBaseline(100, 200)

    def test_undecodable_file(self, store):
        store.path.write_bytes(b"\xff\xfe\x00")
        assert store.load() is None

    def test_path_is_directory(self, tmp_path):
        assert BaselineStore(tmp_path).load() is None
