"""Pydantic models for responses, plus the exception taxonomy."""

from xlshift.contracts.common import (
    CellCollisionError,
    ChangeRecord,
    ErrorDetail,
    MalformedReferenceError,
    Metrics,
    MissingCellError,
    ResponseEnvelope,
    SheetNotFoundError,
    Target,
    UnboundedRangeError,
    WarningDetail,
    WorkbookCorruptError,
    XlShiftError,
)
from xlshift.contracts.responses import (
    AddressResult,
    ContainmentResult,
    NamedRangeMeta,
    SheetMeta,
    WorkbookMeta,
)

__all__ = [
    "AddressResult",
    "CellCollisionError",
    "ChangeRecord",
    "ContainmentResult",
    "ErrorDetail",
    "MalformedReferenceError",
    "Metrics",
    "MissingCellError",
    "NamedRangeMeta",
    "ResponseEnvelope",
    "SheetMeta",
    "SheetNotFoundError",
    "Target",
    "UnboundedRangeError",
    "WarningDetail",
    "WorkbookCorruptError",
    "WorkbookMeta",
    "XlShiftError",
]
