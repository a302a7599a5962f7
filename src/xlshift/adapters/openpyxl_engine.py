"""Bridge between openpyxl worksheets and the in-memory :class:`Sheet` model."""

from __future__ import annotations

from typing import Any

from openpyxl.cell.cell import MergedCell
from openpyxl.workbook import Workbook as OpenpyxlWorkbook
from openpyxl.worksheet.formula import ArrayFormula, DataTableFormula
from openpyxl.worksheet.worksheet import Worksheet

from xlshift.contracts.common import ChangeRecord, WarningDetail
from xlshift.core.query import update_range
from xlshift.core.sheet import Cell, CellType, Sheet, Workbook, classify_value


def _to_cell(value: Any) -> Cell:
    if isinstance(value, ArrayFormula):
        return Cell(type=CellType.TEXT, value=value.text, raw=value)
    if isinstance(value, DataTableFormula):
        return Cell(type=CellType.TEXT, value=f"{{=TABLE({value.ref})}}", raw=value)
    try:
        return classify_value(value)
    except TypeError:
        # Unknown storage objects are shown as text and written back unchanged
        return Cell(type=CellType.TEXT, value=str(value), raw=value)


def _to_value(cell: Cell) -> Any:
    if cell.raw is not None:
        return cell.raw
    if cell.type is CellType.EMPTY:
        return None
    return cell.value


def sheet_from_worksheet(ws: Worksheet) -> Sheet:
    """Read every non-empty cell of ``ws`` in row-major order."""
    sheet = Sheet(name=ws.title)
    for row in ws.iter_rows():
        for cell in row:
            if cell.value is None:
                continue
            sheet.cells[cell.coordinate] = _to_cell(cell.value)
    return update_range(sheet)


def sheet_to_worksheet(sheet: Sheet, ws: Worksheet) -> ChangeRecord:
    """Replace the values of ``ws`` with the sheet's cell population.

    Existing values are blanked first; cell styles stay at their grid position.
    Cells that land inside a merged range cannot be written and are reported
    as warnings.
    """
    cleared = 0
    for row in ws.iter_rows():
        for cell in row:
            if cell.value is not None and not isinstance(cell, MergedCell):
                cell.value = None
                cleared += 1

    written = 0
    warnings: list[WarningDetail] = []
    for ref, record in sheet.cells.items():
        target = ws[ref]
        if isinstance(target, MergedCell):
            warnings.append(WarningDetail(
                code="WARN_MERGED_CELL_SKIPPED",
                message=f"{ws.title}!{ref} is covered by a merged range; value not written",
                path=ref,
            ))
            continue
        target.value = _to_value(record)
        written += 1

    return ChangeRecord(
        type="sheet.store",
        target=ws.title,
        after={"extent": sheet.ref, "cells": written},
        impact={"cells": written, "cleared": cleared},
        warnings=warnings,
    )


def named_ranges(wb: OpenpyxlWorkbook) -> list[tuple[str, str, str]]:
    """Every defined name as ``(name, scope, reference text)``.

    Scope is ``"workbook"`` or the title of the sheet the name is local to.
    """
    out: list[tuple[str, str, str]] = []
    for dn in wb.defined_names.values():
        scope = "workbook" if dn.localSheetId is None else wb.sheetnames[dn.localSheetId]
        out.append((dn.name, scope, str(dn.attr_text)))
    for ws in wb.worksheets:
        for dn in ws.defined_names.values():
            out.append((dn.name, ws.title, str(dn.attr_text)))
    return out


def defined_names(wb: OpenpyxlWorkbook) -> dict[str, str]:
    """Workbook-scoped defined names as ``{name: reference text}``."""
    return {name: ref for name, scope, ref in named_ranges(wb) if scope == "workbook"}


def workbook_from_openpyxl(wb: OpenpyxlWorkbook) -> Workbook:
    sheets = {ws.title: sheet_from_worksheet(ws) for ws in wb.worksheets}
    return Workbook(sheets=sheets, names=defined_names(wb))
