"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest
from openpyxl import Workbook
from openpyxl.workbook.defined_name import DefinedName

from xlshift.core.sheet import Sheet


@pytest.fixture()
def data_workbook(tmp_path: Path) -> Path:
    """A workbook with a small block of data on 'Data' and a sparse 'Notes' sheet.

    Data:
        A1 Name   B1 Value
        A2 Alpha  B2 100
        A3 Beta   B3 200
        C5 True
    """
    wb = Workbook()
    ws = wb.active
    ws.title = "Data"
    ws["A1"] = "Name"
    ws["B1"] = "Value"
    ws["A2"] = "Alpha"
    ws["B2"] = 100
    ws["A3"] = "Beta"
    ws["B3"] = 200
    ws["C5"] = True

    notes = wb.create_sheet("Notes")
    notes["D4"] = "note"

    wb.defined_names["Values"] = DefinedName("Values", attr_text="Data!$B$2:$B$3")

    path = tmp_path / "data.xlsx"
    wb.save(str(path))
    wb.close()
    return path


@pytest.fixture()
def two_columns() -> Sheet:
    """Columns A and B both populated on rows 1-5."""
    cells = {}
    for row in range(1, 6):
        cells[f"A{row}"] = row
        cells[f"B{row}"] = row * 10
    return Sheet(cells, name="Grid", ref="A1:B5")
