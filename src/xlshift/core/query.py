"""Read-side helpers over a sheet: cell enumeration, extent, values, workbook lookups."""

from __future__ import annotations

from typing import Any

from xlshift.contracts.common import MissingCellError, SheetNotFoundError
from xlshift.core.address import Coordinate, RangeAddress, decode_cell, encode_range
from xlshift.core.predicates import in_range, is_cell_ref
from xlshift.core.sheet import Cell, Sheet, Workbook, classify_value


def get_sheet(workbook: Workbook, name: str) -> Sheet:
    """Look up a sheet by name and stamp the name onto it."""
    try:
        sheet = workbook.sheets[name]
    except KeyError:
        raise SheetNotFoundError(name) from None
    sheet.name = name
    return sheet


def get_names(workbook: Workbook) -> dict[str, str]:
    """Defined names of the workbook (a copy; the workbook is not modified)."""
    return dict(workbook.names)


def get_sheet_range(sheet: Sheet) -> str | None:
    """Declared extent of the sheet, e.g. ``"A1:D9"``."""
    return sheet.ref


def get_cell_refs(sheet: Sheet) -> list[str]:
    """Every populated cell reference, in the sheet's insertion order."""
    return [ref for ref in sheet.keys() if is_cell_ref(ref)]


def get_range_cell_refs(sheet: Sheet, range_ref: str) -> list[str]:
    """Populated cell references that fall inside ``range_ref``."""
    inside = in_range(range_ref)
    return [ref for ref in get_cell_refs(sheet) if inside(ref)]


def get_cell(sheet: Sheet, ref: str) -> Cell:
    try:
        return sheet[ref]
    except KeyError:
        raise MissingCellError(ref) from None


def get_cell_value(sheet: Sheet, ref: str) -> Any:
    """Raw value of a populated cell; raises MissingCellError when absent."""
    return get_cell(sheet, ref).value


def set_cell_value(sheet: Sheet, ref: str, value: Any) -> Sheet:
    """Assign a value, tagging it via :func:`classify_value` unless it is already a Cell."""
    sheet[ref] = classify_value(value)
    return sheet


def update_range(sheet: Sheet) -> Sheet:
    """Set ``sheet.ref`` to the smallest range enclosing every populated cell.

    An empty sheet keeps whatever extent it had.
    """
    coords = [decode_cell(ref) for ref in get_cell_refs(sheet)]
    if not coords:
        return sheet
    start = Coordinate(min(c.col for c in coords), min(c.row for c in coords))
    end = Coordinate(max(c.col for c in coords), max(c.row for c in coords))
    sheet.ref = encode_range(RangeAddress(start, end))
    return sheet
