"""File operations: fingerprinting, backup, atomic write, locking."""

from __future__ import annotations

import hashlib
import os
import shutil
import tempfile
import time
from datetime import datetime, timezone
from io import TextIOWrapper
from pathlib import Path

import portalocker

LOCK_SUFFIX = ".xlshift.lock"


def fingerprint(path: str | Path) -> str:
    """SHA-256 of the file contents, prefixed with ``sha256:``."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return f"sha256:{h.hexdigest()}"


def backup(path: str | Path) -> str:
    """Copy the workbook to ``<stem>.<UTC timestamp>.bak<suffix>``. Returns the copy's path."""
    path = Path(path)
    ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    backup_path = path.parent / f"{path.stem}.{ts}.bak{path.suffix}"
    shutil.copy2(path, backup_path)
    return str(backup_path)


def atomic_write(target: str | Path, data: bytes) -> None:
    """Write data next to target, fsync, then rename over it."""
    target = Path(target)
    fd, tmp_path = tempfile.mkstemp(
        dir=target.parent, suffix=target.suffix, prefix=".xlshift_tmp_"
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        shutil.move(tmp_path, target)
    except Exception:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def lock_path_for(workbook_path: str | Path) -> Path:
    p = Path(workbook_path).resolve()
    return p.parent / (p.name + LOCK_SUFFIX)


class WorkbookLock:
    """Exclusive sidecar lock held across a load-edit-save cycle.

    The lock lives in ``<file>.xlshift.lock``. It guards the file on disk
    only; the in-memory sheet is never shared between processes. A crashed
    holder leaves an unlocked (stale) sidecar that the next process can take.
    """

    def __init__(self, workbook_path: str | Path, *, timeout: float = 0) -> None:
        self.workbook_path = Path(workbook_path).resolve()
        self.timeout = timeout
        self._lock_path = lock_path_for(self.workbook_path)
        self._lock_file: TextIOWrapper | None = None

    @property
    def lock_path(self) -> Path:
        return self._lock_path

    def __enter__(self) -> "WorkbookLock":
        self._lock_file = open(self._lock_path, "a+")  # noqa: SIM115
        try:
            _acquire(self._lock_file, self.timeout)
        except portalocker.LockException:
            self._lock_file.close()
            self._lock_file = None
            raise
        _write_holder(self._lock_file)
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        if self._lock_file is not None:
            try:
                portalocker.unlock(self._lock_file)
            finally:
                self._lock_file.close()
                self._lock_file = None


_LOCK_FLAGS = portalocker.LOCK_EX | portalocker.LOCK_NB


def _acquire(fh: TextIOWrapper, timeout: float) -> None:
    """Take the lock on ``fh``, polling until ``timeout`` seconds have passed."""
    deadline = time.monotonic() + max(timeout, 0)
    interval = min(0.1, max(0.01, timeout / 20))
    while True:
        try:
            portalocker.lock(fh, _LOCK_FLAGS)
            return
        except portalocker.LockException:
            if time.monotonic() >= deadline:
                raise
            time.sleep(interval)


def _write_holder(fh: TextIOWrapper) -> None:
    fh.seek(0)
    fh.truncate()
    fh.write(f"pid={os.getpid()}\n")
    fh.write(f"time={datetime.now(timezone.utc).isoformat()}\n")
    fh.flush()


def read_holder(lock_path: str | Path) -> dict[str, str]:
    """Parse the ``key=value`` lines a lock holder writes into the sidecar."""
    try:
        text = Path(lock_path).read_text()
    except OSError:
        # Windows refuses reads of a byte-range locked file
        return {}
    holder: dict[str, str] = {}
    for line in text.strip().splitlines():
        key, sep, value = line.partition("=")
        if sep:
            holder[key.strip()] = value.strip()
    return holder


def check_lock(path: str | Path) -> dict:
    """Probe the sidecar lock. Returns ``locked``, ``lock_file`` and, when held, ``holder``."""
    lock_path = lock_path_for(path)
    status: dict = {"locked": False, "lock_file": str(lock_path)}
    if not lock_path.exists():
        return status

    with open(lock_path, "a+") as fh:
        try:
            portalocker.lock(fh, _LOCK_FLAGS)
        except portalocker.LockException:
            status.update(locked=True, holder=read_holder(lock_path))
        else:
            portalocker.unlock(fh)
    return status
