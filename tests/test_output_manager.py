"""Tests for core.output_manager.OutputManager."""

import csv
import os
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from core.errors import ExportWriteError
from core.output_manager import OutputManager, TIMESTAMP_FORMAT

FIXED_NOW = datetime(2026, 10, 17, 14, 30, 15, 482913, tzinfo=timezone.utc)


@pytest.fixture()
def manager(tmp_path):
    return OutputManager(str(tmp_path / "dumps"), retention_days=0, now=lambda: FIXED_NOW)


def _read(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.reader(f))


class TestBuildFilename:
    def test_user_type_label(self, manager):
        assert manager.build_filename("all") == "20261017T143015.482913Z_all_users.csv"
        assert manager.build_filename("guild") == "20261017T143015.482913Z_guild_users.csv"

    def test_label_is_sanitized(self, manager):
        assert manager.build_filename("role_a|b") == "20261017T143015.482913Z_role_a_b_users.csv"

    def test_same_second_runs_get_distinct_names(self, tmp_path):
        times = iter([
            datetime(2026, 10, 17, 9, 0, 0, 120000, tzinfo=timezone.utc),
            datetime(2026, 10, 17, 9, 0, 0, 870000, tzinfo=timezone.utc),
        ])
        manager = OutputManager(str(tmp_path / "dumps"), now=lambda: next(times))

        first = manager.write_csv([{"email": "a@example.com"}], "all")
        second = manager.write_csv([{"email": "b@example.com"}], "all")

        assert first != second
        assert sorted(os.listdir(tmp_path / "dumps")) == [
            "20261017T090000.120000Z_all_users.csv",
            "20261017T090000.870000Z_all_users.csv",
        ]
        assert _read(first)[1] == ["a@example.com"]


class TestWriteCsv:
    def test_header_from_first_row(self, manager):
        rows = [{"email": "a@example.com", "name": "A"}, {"email": "b@example.com", "name": "B"}]
        path = manager.write_csv(rows, "all")

        assert os.path.basename(path) == "20261017T143015.482913Z_all_users.csv"
        assert _read(path) == [["email", "name"], ["a@example.com", "A"], ["b@example.com", "B"]]

    def test_empty_rows_write_fieldnames_header(self, manager):
        path = manager.write_csv([], "ap", fieldnames=["email", "name"])
        assert _read(path) == [["email", "name"]]

    def test_utf8_content(self, manager):
        path = manager.write_csv([{"name": "Zoë Ångström"}], "all")
        assert _read(path)[1] == ["Zoë Ångström"]

    def test_write_failure_raises_export_write_error(self, manager):
        with patch("core.output_manager.open", side_effect=PermissionError("read-only"), create=True):
            with pytest.raises(ExportWriteError, match="read-only"):
                manager.write_csv([{"a": 1}], "all")


class TestCleanup:
    def _touch(self, directory, name):
        directory.mkdir(parents=True, exist_ok=True)
        (directory / name).write_text("x")

    def test_retention_zero_keeps_everything(self, tmp_path):
        dumps = tmp_path / "dumps"
        self._touch(dumps, "20200101T000000Z_all_users.csv")
        manager = OutputManager(str(dumps), retention_days=0, now=lambda: FIXED_NOW)
        assert manager.cleanup_old_exports() == 0
        assert (dumps / "20200101T000000Z_all_users.csv").exists()

    def test_deletes_only_old_export_files(self, tmp_path):
        dumps = tmp_path / "dumps"
        old = (FIXED_NOW - timedelta(days=40)).strftime(TIMESTAMP_FORMAT)
        recent = (FIXED_NOW - timedelta(days=2)).strftime(TIMESTAMP_FORMAT)
        self._touch(dumps, f"{old}_guild_users.csv")
        self._touch(dumps, f"{recent}_guild_users.csv")
        self._touch(dumps, "notes.csv")

        manager = OutputManager(str(dumps), retention_days=30, now=lambda: FIXED_NOW)

        assert manager.cleanup_old_exports() == 1
        assert sorted(os.listdir(dumps)) == sorted([f"{recent}_guild_users.csv", "notes.csv"])

    def test_missing_directory(self, tmp_path):
        manager = OutputManager(str(tmp_path / "nope"), retention_days=30)
        assert manager.cleanup_old_exports() == 0
