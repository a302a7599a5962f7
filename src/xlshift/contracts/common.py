"""Common Pydantic models and exceptions: response envelope, errors, warnings, metrics."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class XlShiftError(Exception):
    """Base class for every error raised by xlshift."""


class MalformedReferenceError(XlShiftError, ValueError):
    """Raised when a string does not parse as a cell or range reference."""

    def __init__(self, ref: Any, reason: str | None = None) -> None:
        self.ref = ref
        msg = f"Invalid reference: {ref!r}"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)


class MissingCellError(XlShiftError, KeyError):
    """Raised when reading or moving a cell that is not populated."""

    def __init__(self, ref: str) -> None:
        self.ref = ref
        super().__init__(f"Cell not populated: {ref}")

    def __str__(self) -> str:
        return self.args[0]


class CellCollisionError(XlShiftError, ValueError):
    """Raised when a guarded move would overwrite a populated cell."""

    def __init__(self, source: str, target: str) -> None:
        self.source = source
        self.target = target
        super().__init__(f"Cannot move {source} to {target}: target cell is populated")


class UnboundedRangeError(XlShiftError, ValueError):
    """Raised when an operation needs a bounded axis but the range leaves it open."""


class SheetNotFoundError(XlShiftError, KeyError):
    """Raised when a workbook has no sheet with the requested name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Sheet not found: {name}")

    def __str__(self) -> str:
        return self.args[0]


class WorkbookCorruptError(XlShiftError):
    """Raised when a workbook file cannot be parsed."""


class Target(BaseModel):
    """Identifies the target workbook/sheet/reference for a command."""

    file: str | None = None
    sheet: str | None = None
    ref: str | None = None


class WarningDetail(BaseModel):
    """Structured warning."""

    code: str
    message: str
    path: str | None = None


class ErrorDetail(BaseModel):
    """Structured error."""

    code: str
    message: str
    details: dict[str, Any] | None = None


class Metrics(BaseModel):
    """Execution metrics."""

    duration_ms: int = 0


class ChangeRecord(BaseModel):
    """Describes a single structural change made (or projected) by a command."""

    type: str
    target: str
    before: Any | None = None
    after: Any | None = None
    impact: dict[str, Any] | None = None
    warnings: list[WarningDetail] = Field(default_factory=list)


class ResponseEnvelope(BaseModel):
    """Standard response envelope returned by every command."""

    ok: bool = True
    command: str = ""
    target: Target = Field(default_factory=Target)
    result: Any = None
    changes: list[ChangeRecord] = Field(default_factory=list)
    warnings: list[WarningDetail] = Field(default_factory=list)
    errors: list[ErrorDetail] = Field(default_factory=list)
    metrics: Metrics = Field(default_factory=Metrics)
