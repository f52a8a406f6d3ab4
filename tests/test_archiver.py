"""Tests for the zip archiver and job log writers."""
from __future__ import annotations

import zipfile
from datetime import datetime
from pathlib import Path

import pytest

from notes_backup.archiver import CompressionLevel, ZipArchiver
from notes_backup.job_log import FileJobLog

from helpers import make_source


@pytest.mark.parametrize("level, compress_type", [
    (CompressionLevel.OPTIMAL, zipfile.ZIP_DEFLATED),
    (CompressionLevel.FASTEST, zipfile.ZIP_DEFLATED),
    (CompressionLevel.NO_COMPRESSION, zipfile.ZIP_STORED),
])
def test_compression_levels(tmp_path: Path, level, compress_type):
    source = make_source(tmp_path / "src", {"notes.txt": "hello " * 1000})
    dest = tmp_path / "out.zip"

    ZipArchiver().compress(source, dest, level)

    with zipfile.ZipFile(dest) as archive:
        assert archive.getinfo("notes.txt").compress_type == compress_type
        assert archive.read("notes.txt") == ("hello " * 1000).encode()


def test_empty_source_gives_empty_archive(tmp_path: Path):
    source = make_source(tmp_path / "src", {})
    dest = tmp_path / "out.zip"

    ZipArchiver().compress(source, dest)

    with zipfile.ZipFile(dest) as archive:
        assert archive.namelist() == []


def test_missing_destination_folder_raises(tmp_path: Path):
    source = make_source(tmp_path / "src", {"a.txt": "a"})

    with pytest.raises(OSError):
        ZipArchiver().compress(source, tmp_path / "nowhere" / "out.zip")


def test_file_job_log_appends_timestamped_lines(tmp_path: Path):
    path = tmp_path / "job.log"
    log = FileJobLog(clock=lambda: datetime(2024, 3, 7, 8, 5, 9))

    log.append(path, "first")
    log.append(path, "second")

    assert path.read_text(encoding="utf-8").splitlines() == [
        "2024-03-07 08:05:09 - first",
        "2024-03-07 08:05:09 - second",
    ]
