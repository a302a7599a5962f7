"""Exit code and error code mapping regression tests."""

from __future__ import annotations

import portalocker
import pytest

from xlshift.contracts.common import (
    CellCollisionError,
    MalformedReferenceError,
    MissingCellError,
    SheetNotFoundError,
    UnboundedRangeError,
    WorkbookCorruptError,
)
from xlshift.engine.dispatcher import (
    error_code_for,
    error_details_for,
    error_envelope,
    exit_code_for,
    output_json,
    success_envelope,
)


def test_exit_code_success():
    assert exit_code_for(success_envelope("x", {})) == 0


@pytest.mark.parametrize(
    "code, expected",
    [
        ("ERR_RANGE_INVALID", 10),
        ("ERR_RANGE_UNBOUNDED", 10),
        ("ERR_MISSING_CELL", 10),
        ("ERR_INVALID_ARGUMENT", 10),
        ("ERR_SHEET_NOT_FOUND", 10),
        ("ERR_CELL_COLLISION", 40),
        ("ERR_WORKBOOK_NOT_FOUND", 50),
        ("ERR_WORKBOOK_CORRUPT", 50),
        ("ERR_LOCK_HELD", 50),
        ("ERR_INTERNAL", 90),
        ("ERR_SOMETHING_NEW", 90),
    ],
)
def test_exit_code_classes(code: str, expected: int):
    assert exit_code_for(error_envelope("x", code, "msg")) == expected


@pytest.mark.parametrize(
    "exc, code",
    [
        (MalformedReferenceError("A0"), "ERR_RANGE_INVALID"),
        (UnboundedRangeError("B:B"), "ERR_RANGE_UNBOUNDED"),
        (CellCollisionError("A1", "B1"), "ERR_CELL_COLLISION"),
        (MissingCellError("A1"), "ERR_MISSING_CELL"),
        (SheetNotFoundError("Nope"), "ERR_SHEET_NOT_FOUND"),
        (WorkbookCorruptError("bad"), "ERR_WORKBOOK_CORRUPT"),
        (FileNotFoundError("gone"), "ERR_WORKBOOK_NOT_FOUND"),
        (portalocker.LockException("held"), "ERR_LOCK_HELD"),
        (ValueError("bad index"), "ERR_INVALID_ARGUMENT"),
        (RuntimeError("boom"), "ERR_INTERNAL"),
    ],
)
def test_error_code_for(exc: BaseException, code: str):
    assert error_code_for(exc) == code


def test_error_details():
    assert error_details_for(CellCollisionError("A1", "B1")) == {"source": "A1", "target": "B1"}
    assert error_details_for(MissingCellError("C3")) == {"ref": "C3"}
    assert error_details_for(ValueError("x")) is None


def test_output_json_shape():
    text = output_json(error_envelope("row.insert", "ERR_RANGE_INVALID", "bad"))
    assert '"ok": false' in text
    assert '"code": "ERR_RANGE_INVALID"' in text
