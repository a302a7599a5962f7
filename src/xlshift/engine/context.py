"""WorkbookContext: loads a workbook file and moves sheets in and out of the model."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path

import openpyxl
from openpyxl.workbook import Workbook as OpenpyxlWorkbook
from openpyxl.worksheet.worksheet import Worksheet

from xlshift.adapters.openpyxl_engine import (
    named_ranges,
    sheet_from_worksheet,
    sheet_to_worksheet,
    workbook_from_openpyxl,
)
from xlshift.contracts.common import ChangeRecord, SheetNotFoundError, Target, WorkbookCorruptError
from xlshift.contracts.responses import NamedRangeMeta, SheetMeta, WorkbookMeta
from xlshift.core.sheet import Sheet, Workbook
from xlshift.io.fileops import atomic_write, fingerprint


class WorkbookContext:
    """Wraps an openpyxl workbook loaded from disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).resolve()
        if not self.path.exists():
            raise FileNotFoundError(f"Workbook not found: {self.path}")
        self.fp = fingerprint(self.path)
        try:
            self.wb: OpenpyxlWorkbook = openpyxl.load_workbook(str(self.path))
        except Exception as e:
            raise WorkbookCorruptError(f"Cannot open workbook {self.path}: {e}") from e

    def target(self, **overrides: str | None) -> Target:
        t = Target(file=str(self.path))
        for k, v in overrides.items():
            if v is not None:
                setattr(t, k, v)
        return t

    def get_worksheet(self, name: str) -> Worksheet:
        if name not in self.wb.sheetnames:
            raise SheetNotFoundError(name)
        return self.wb[name]

    def load_sheet(self, name: str) -> Sheet:
        return sheet_from_worksheet(self.get_worksheet(name))

    def store_sheet(self, sheet: Sheet) -> ChangeRecord:
        if sheet.name is None:
            raise ValueError("Sheet has no name; cannot locate its worksheet")
        return sheet_to_worksheet(sheet, self.get_worksheet(sheet.name))

    def to_workbook(self) -> Workbook:
        return workbook_from_openpyxl(self.wb)

    def get_workbook_meta(self) -> WorkbookMeta:
        book = self.to_workbook()
        sheets = [
            SheetMeta(name=title, index=idx, extent=sheet.ref, cell_count=len(sheet))
            for idx, (title, sheet) in enumerate(book.sheets.items())
        ]
        names = [
            NamedRangeMeta(name=name, scope=scope, ref=ref)
            for name, scope, ref in named_ranges(self.wb)
        ]
        return WorkbookMeta(
            path=str(self.path),
            fingerprint=self.fp,
            sheets=sheets,
            names=names,
        )

    def save(self, path: str | Path | None = None) -> bytes:
        """Serialize to bytes, and write atomically when a path is given."""
        buf = BytesIO()
        self.wb.save(buf)
        data = buf.getvalue()
        if path:
            atomic_write(path, data)
        return data

    def close(self) -> None:
        self.wb.close()
