from __future__ import annotations

import calendar
import io
import logging
import os
import stat
import time
from pathlib import Path
from types import SimpleNamespace

import pytest

from common.base.colors import ANSI_COLORS, ColorScheme
from file import lister
from file.lister import (
    DisplayRecord,
    EntryMetadataError,
    FatalIOError,
    FileKind,
    format_date,
    format_time,
    list_directory,
    list_directory_plain,
    print_listing,
    render_record,
    to_utc,
)

# 2023-03-05 09:03:00 UTC
SCENARIO_TS = calendar.timegm((2023, 3, 5, 9, 3, 0, 0, 0, 0))


def _make_scenario(root: Path) -> None:
    report = root / "report.txt"
    report.write_bytes(b"x" * 120)
    git_dir = root / ".git"
    git_dir.mkdir()
    os.utime(report, (SCENARIO_TS, SCENARIO_TS))
    os.utime(git_dir, (SCENARIO_TS, SCENARIO_TS))


def _by_name(records):
    return {record.name: record for record in records}


@pytest.mark.parametrize(
    ("name", "is_dir", "expected"),
    [
        ("notes.txt", False, FileKind.REGULAR),
        ("src", True, FileKind.DIRECTORY),
        (".bashrc", False, FileKind.HIDDEN_REGULAR),
        (".git", True, FileKind.HIDDEN_DIRECTORY),
        (".", True, FileKind.HIDDEN_DIRECTORY),
        ("..hidden", False, FileKind.HIDDEN_REGULAR),
        ("not.hidden", False, FileKind.REGULAR),
    ],
)
def test_classify(name: str, is_dir: bool, expected: FileKind) -> None:
    kind = FileKind.classify(name, is_dir)
    assert kind is expected
    assert kind.is_hidden == name.startswith(".")
    assert kind.is_directory == is_dir


def test_format_is_unpadded() -> None:
    moment = to_utc(SCENARIO_TS)
    assert format_date(moment) == "5 March"
    assert format_time(moment) == "9:3"


def test_format_midnight_and_fractional_seconds() -> None:
    moment = to_utc(calendar.timegm((2024, 12, 31, 0, 0, 59, 0, 0, 0)) + 0.999)
    assert format_date(moment) == "31 December"
    assert format_time(moment) == "0:0"


@pytest.fixture
def shifted_timezone(monkeypatch):
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "Asia/Kolkata")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def test_formatting_ignores_local_timezone(shifted_timezone) -> None:
    moment = to_utc(SCENARIO_TS)
    assert (format_date(moment), format_time(moment)) == ("5 March", "9:3")


def test_scenario_records(tmp_path: Path) -> None:
    _make_scenario(tmp_path)

    records = _by_name(list_directory(tmp_path))

    assert set(records) == {"report.txt", ".git"}
    report = records["report.txt"]
    assert report.kind is FileKind.REGULAR
    assert report.size_bytes == 120
    assert render_record(report, color=False) == "report.txt 5 March 9:3 120"

    git = records[".git"]
    assert git.kind is FileKind.HIDDEN_DIRECTORY
    assert git.size_bytes == os.lstat(tmp_path / ".git").st_size
    assert render_record(git, color=False) == f".git 5 March 9:3 {git.size_bytes}"


def test_one_record_per_entry(tmp_path: Path) -> None:
    for idx in range(5):
        (tmp_path / f"file{idx}.dat").write_text("data", encoding="utf-8")
    (tmp_path / "nested").mkdir()
    (tmp_path / "nested" / "deep.txt").write_text("not listed", encoding="utf-8")

    records = list_directory(tmp_path)

    assert len(records) == len(os.listdir(tmp_path)) == 6
    assert "deep.txt" not in {record.name for record in records}


def test_empty_directory(tmp_path: Path) -> None:
    assert list_directory(tmp_path) == []


def test_listing_is_repeatable(tmp_path: Path) -> None:
    _make_scenario(tmp_path)
    (tmp_path / "b.bin").write_bytes(b"\0" * 7)

    first = list_directory(tmp_path)
    second = list_directory(tmp_path)

    assert set(first) == set(second)
    assert len(first) == len(second) == 3


def test_unreadable_entry_becomes_placeholder(tmp_path: Path, monkeypatch, caplog) -> None:
    _make_scenario(tmp_path)
    (tmp_path / "gone.txt").write_text("bye", encoding="utf-8")
    real_read_stat = lister._read_stat

    def _flaky(entry):
        if entry.name == "gone.txt":
            raise FileNotFoundError(2, "No such file or directory", entry.name)
        return real_read_stat(entry)

    monkeypatch.setattr(lister, "_read_stat", _flaky)

    with caplog.at_level(logging.WARNING, logger="dirlist"):
        records = list_directory(tmp_path)

    assert len(records) == 3
    assert DisplayRecord.placeholder() in records
    assert "gone.txt" not in {record.name for record in records}
    assert {"report.txt", ".git"} <= {record.name for record in records}
    assert any("gone.txt" in message for message in caplog.messages)


def test_placeholder_shape() -> None:
    placeholder = DisplayRecord.placeholder()
    assert placeholder.name == ""
    assert placeholder.modified_date == ""
    assert placeholder.modified_time == ""
    assert placeholder.size_bytes == 0
    assert placeholder.kind is FileKind.REGULAR
    assert render_record(placeholder, color=False) == "   0"


def test_missing_directory_is_fatal(tmp_path: Path) -> None:
    missing = tmp_path / "does-not-exist"

    with pytest.raises(FatalIOError) as excinfo:
        list_directory(missing)

    assert isinstance(excinfo.value.__cause__, FileNotFoundError)
    assert excinfo.value.path == str(missing)
    assert str(missing) in str(excinfo.value)


def test_file_path_is_fatal(tmp_path: Path) -> None:
    target = tmp_path / "plain.txt"
    target.write_text("x", encoding="utf-8")

    with pytest.raises(FatalIOError):
        list_directory(target)


def test_colour_grouping() -> None:
    scheme = ColorScheme(directory="blue", file="white", timestamp="green")
    directory = DisplayRecord("src", FileKind.DIRECTORY, "5 March", "9:3", 4096)
    hidden_file = DisplayRecord(".env", FileKind.HIDDEN_REGULAR, "5 March", "9:3", 12)

    dir_line = render_record(directory, scheme=scheme)
    file_line = render_record(hidden_file, scheme=scheme)

    assert dir_line.startswith(f"{ANSI_COLORS['blue']}src")
    assert file_line.startswith(f"{ANSI_COLORS['white']}.env")
    for line in (dir_line, file_line):
        assert f"{ANSI_COLORS['green']}5 March" in line
        assert f"{ANSI_COLORS['green']}9:3" in line
    assert f"{ANSI_COLORS['blue']}4096" in dir_line
    assert f"{ANSI_COLORS['blue']}12" in file_line


def test_render_without_colour_has_no_escapes() -> None:
    record = DisplayRecord("src", FileKind.DIRECTORY, "1 January", "23:59", 0)
    line = render_record(record, color=False)
    assert "\033[" not in line
    assert line == "src 1 January 23:59 0"


def test_plain_mode_lines(tmp_path: Path) -> None:
    _make_scenario(tmp_path)

    lines = list_directory_plain(tmp_path)

    assert sorted(lines) == sorted([
        "report.txt, March 5, 2023, 120",
        f".git, March 5, 2023, {os.lstat(tmp_path / '.git').st_size}",
    ])


def test_plain_mode_aborts_on_unreadable_entry(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "locked").write_text("x", encoding="utf-8")

    def _denied(entry):
        raise PermissionError(13, "Permission denied", entry.name)

    monkeypatch.setattr(lister, "_read_stat", _denied)

    with pytest.raises(EntryMetadataError) as excinfo:
        list_directory_plain(tmp_path)

    assert excinfo.value.name == "locked"
    assert isinstance(excinfo.value.__cause__, PermissionError)


def test_plain_mode_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(FatalIOError):
        list_directory_plain(tmp_path / "nope")


def test_print_listing_writes_one_line_each() -> None:
    buffer = io.StringIO()
    print_listing(["a 1 January 0:0 1", "b 2 February 1:1 2"], stream=buffer)
    assert buffer.getvalue() == "a 1 January 0:0 1\nb 2 February 1:1 2\n"


def _far_future_stat(entry):
    return SimpleNamespace(st_mtime=1e20, st_size=1, st_mode=stat.S_IFREG | 0o644)


def test_out_of_range_mtime_becomes_placeholder(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "future.txt").write_text("x", encoding="utf-8")
    monkeypatch.setattr(lister, "_read_stat", _far_future_stat)

    assert list_directory(tmp_path) == [DisplayRecord.placeholder()]


def test_plain_mode_out_of_range_mtime_is_entry_error(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "future.txt").write_text("x", encoding="utf-8")
    monkeypatch.setattr(lister, "_read_stat", _far_future_stat)

    with pytest.raises(EntryMetadataError) as excinfo:
        list_directory_plain(tmp_path)

    assert excinfo.value.name == "future.txt"
    assert "future.txt" in str(excinfo.value)


def test_symlink_to_directory_is_not_followed(tmp_path: Path) -> None:
    (tmp_path / "target").mkdir()
    try:
        os.symlink(tmp_path / "target", tmp_path / "link", target_is_directory=True)
    except (OSError, NotImplementedError):
        pytest.skip("symlinks are not supported here")

    records = _by_name(list_directory(tmp_path))

    assert records["target"].kind is FileKind.DIRECTORY
    assert records["link"].kind is FileKind.REGULAR
    assert records["link"].size_bytes == os.lstat(tmp_path / "link").st_size
