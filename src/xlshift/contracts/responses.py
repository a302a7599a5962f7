"""Command-specific result models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SheetMeta(BaseModel):
    """Metadata for a single worksheet."""

    name: str
    index: int
    extent: str | None = None
    cell_count: int = 0


class NamedRangeMeta(BaseModel):
    """Metadata for a defined name."""

    name: str
    scope: str = "workbook"  # workbook or sheet name
    ref: str = ""


class WorkbookMeta(BaseModel):
    """Metadata returned by ``wb inspect``."""

    path: str
    fingerprint: str
    sheets: list[SheetMeta] = Field(default_factory=list)
    names: list[NamedRangeMeta] = Field(default_factory=list)


class AddressResult(BaseModel):
    """Decoded form of a cell or range reference (zero-based, ``None`` = unbounded)."""

    ref: str
    kind: str
    start_col: int | None = None
    start_row: int | None = None
    end_col: int | None = None
    end_row: int | None = None
    width: float | None = None
    height: float | None = None


class ContainmentResult(BaseModel):
    """Result of ``range contains`` / ``range overlaps``."""

    parent: str
    child: str
    populated: bool
    geometric: bool
    child_cells: int = 0
