"""Tests for IO operations: fingerprint, backup, atomic write, sidecar lock."""

from __future__ import annotations

import os
from pathlib import Path

import portalocker
import pytest

from xlshift.io.fileops import (
    LOCK_SUFFIX,
    WorkbookLock,
    atomic_write,
    backup,
    check_lock,
    fingerprint,
    lock_path_for,
)


def test_fingerprint(data_workbook: Path):
    fp = fingerprint(data_workbook)
    assert fp.startswith("sha256:")
    assert len(fp) == 71  # sha256: + 64 hex chars
    assert fingerprint(data_workbook) == fp


def test_backup(data_workbook: Path):
    bak_path = backup(data_workbook)
    assert Path(bak_path).exists()
    assert ".bak" in bak_path
    assert Path(bak_path).read_bytes() == data_workbook.read_bytes()


def test_atomic_write(tmp_path: Path):
    target = tmp_path / "output.xlsx"
    atomic_write(target, b"test data content")
    assert target.read_bytes() == b"test data content"


def test_atomic_write_overwrites_and_leaves_no_temp(tmp_path: Path):
    target = tmp_path / "output.xlsx"
    target.write_bytes(b"old content")
    atomic_write(target, b"new content")
    assert target.read_bytes() == b"new content"
    assert [p.name for p in tmp_path.iterdir()] == ["output.xlsx"]


class TestWorkbookLock:
    def test_lock_path(self, data_workbook: Path):
        expected = data_workbook.parent / (data_workbook.name + LOCK_SUFFIX)
        assert lock_path_for(data_workbook) == expected.resolve()
        assert WorkbookLock(data_workbook).lock_path == expected.resolve()

    def test_acquire_release_and_reacquire(self, data_workbook: Path):
        with WorkbookLock(data_workbook):
            assert lock_path_for(data_workbook).exists()
        with WorkbookLock(data_workbook):
            pass

    def test_lock_file_records_holder(self, data_workbook: Path):
        with WorkbookLock(data_workbook):
            pass
        content = lock_path_for(data_workbook).read_text()
        assert f"pid={os.getpid()}" in content
        assert "time=" in content

    def test_second_lock_fails_fast(self, data_workbook: Path):
        with WorkbookLock(data_workbook):
            with pytest.raises(portalocker.LockException):
                with WorkbookLock(data_workbook, timeout=0):
                    pass

    def test_second_lock_times_out(self, data_workbook: Path):
        with WorkbookLock(data_workbook):
            with pytest.raises(portalocker.LockException):
                with WorkbookLock(data_workbook, timeout=0.05):
                    pass


class TestCheckLock:
    def test_no_lock_file(self, data_workbook: Path):
        result = check_lock(data_workbook)
        assert result["locked"] is False
        assert result["lock_file"].endswith(LOCK_SUFFIX)

    def test_stale_lock_file(self, data_workbook: Path):
        with WorkbookLock(data_workbook):
            pass
        assert check_lock(data_workbook)["locked"] is False

    def test_held_lock(self, data_workbook: Path):
        with WorkbookLock(data_workbook):
            result = check_lock(data_workbook)
        assert result["locked"] is True
        assert result["holder"]["pid"] == str(os.getpid())
