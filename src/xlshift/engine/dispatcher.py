"""Response envelope helpers, exception-to-error-code mapping and exit codes."""

from __future__ import annotations

import sys
from typing import Any

import orjson
import portalocker

from xlshift.contracts.common import (
    CellCollisionError,
    ErrorDetail,
    MalformedReferenceError,
    Metrics,
    MissingCellError,
    ResponseEnvelope,
    SheetNotFoundError,
    Target,
    UnboundedRangeError,
    WorkbookCorruptError,
)

EXIT_CODES = {
    "success": 0,
    "validation": 10,
    "conflict": 40,
    "io": 50,
    "internal": 90,
}

VALIDATION_CODE_MARKERS = (
    "RANGE",
    "INDEX",
    "MISSING_",
    "INVALID_ARGUMENT",
    "SHEET_NOT_FOUND",
)

CONFLICT_CODE_MARKERS = ("COLLISION",)

IO_CODE_MARKERS = ("WORKBOOK_NOT_FOUND", "CORRUPT", "LOCK")


def success_envelope(
    command: str,
    result: Any,
    *,
    target: Target | None = None,
    changes: list | None = None,
    warnings: list | None = None,
    duration_ms: int = 0,
) -> ResponseEnvelope:
    return ResponseEnvelope(
        ok=True,
        command=command,
        target=target or Target(),
        result=result,
        changes=changes or [],
        warnings=warnings or [],
        metrics=Metrics(duration_ms=duration_ms),
    )


def error_envelope(
    command: str,
    code: str,
    message: str,
    *,
    target: Target | None = None,
    details: dict | None = None,
    duration_ms: int = 0,
) -> ResponseEnvelope:
    return ResponseEnvelope(
        ok=False,
        command=command,
        target=target or Target(),
        errors=[ErrorDetail(code=code, message=message, details=details)],
        metrics=Metrics(duration_ms=duration_ms),
    )


def error_code_for(exc: BaseException) -> str:
    """Map an exception raised by the engine or the file layer to an error code."""
    # Order matters: several of these also subclass ValueError / KeyError.
    if isinstance(exc, MalformedReferenceError):
        return "ERR_RANGE_INVALID"
    if isinstance(exc, UnboundedRangeError):
        return "ERR_RANGE_UNBOUNDED"
    if isinstance(exc, CellCollisionError):
        return "ERR_CELL_COLLISION"
    if isinstance(exc, MissingCellError):
        return "ERR_MISSING_CELL"
    if isinstance(exc, SheetNotFoundError):
        return "ERR_SHEET_NOT_FOUND"
    if isinstance(exc, WorkbookCorruptError):
        return "ERR_WORKBOOK_CORRUPT"
    if isinstance(exc, FileNotFoundError):
        return "ERR_WORKBOOK_NOT_FOUND"
    if isinstance(exc, portalocker.LockException):
        return "ERR_LOCK_HELD"
    if isinstance(exc, ValueError):
        return "ERR_INVALID_ARGUMENT"
    return "ERR_INTERNAL"


def error_details_for(exc: BaseException) -> dict | None:
    if isinstance(exc, CellCollisionError):
        return {"source": exc.source, "target": exc.target}
    if isinstance(exc, (MalformedReferenceError, MissingCellError)):
        return {"ref": str(exc.ref)}
    return None


def output_json(envelope: ResponseEnvelope) -> str:
    """Serialize envelope to JSON string using orjson."""
    data = envelope.model_dump(mode="json")
    return orjson.dumps(data, option=orjson.OPT_INDENT_2).decode()


def print_response(envelope: ResponseEnvelope) -> None:
    sys.stdout.write(output_json(envelope) + "\n")


def exit_code_for(envelope: ResponseEnvelope) -> int:
    """Determine exit code from envelope errors."""
    if envelope.ok:
        return EXIT_CODES["success"]
    if not envelope.errors:
        return EXIT_CODES["internal"]
    code = envelope.errors[0].code.upper()
    if any(marker in code for marker in CONFLICT_CODE_MARKERS):
        return EXIT_CODES["conflict"]
    if any(marker in code for marker in IO_CODE_MARKERS):
        return EXIT_CODES["io"]
    if any(marker in code for marker in VALIDATION_CODE_MARKERS):
        return EXIT_CODES["validation"]
    return EXIT_CODES["internal"]
