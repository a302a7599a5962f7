"""Tests for structural edits: relocation, insert/delete of rows and columns, block copies."""

from __future__ import annotations

import pytest

from xlshift.contracts.common import (
    CellCollisionError,
    MalformedReferenceError,
    MissingCellError,
    UnboundedRangeError,
)
from xlshift.core.address import MAX_ROWS
from xlshift.core.mutation import (
    clear_cell,
    copy_range_down,
    copy_range_end,
    delete_column,
    delete_row,
    insert_cell_shift_down,
    insert_cell_shift_end,
    insert_column,
    insert_row,
    move_cell,
    move_cell_by,
    rel,
    rel_cell,
    rel_range,
)
from xlshift.core.sheet import Cell, Sheet


def values(sheet: Sheet) -> dict[str, object]:
    return {ref: sheet[ref].value for ref in sheet}


# ---------------------------------------------------------------------------
# Relative references
# ---------------------------------------------------------------------------
class TestRelative:
    def test_rel_cell(self):
        assert rel_cell((1, 2), "B7") == "C9"
        assert rel_cell((-1, -6), "B7") == "A1"

    def test_rel_cell_off_grid(self):
        with pytest.raises(MalformedReferenceError):
            rel_cell((-2, 0), "B7")

    def test_rel_range_bounded(self):
        assert rel_range((1, 1), "B7:D9") == "C8:E10"

    def test_rel_range_row_span_ignores_column_delta(self):
        assert rel_range((1, 0), "2:5") == "2:5"
        assert rel_range((0, 1), "2:5") == "3:6"

    def test_rel_range_column_span_ignores_row_delta(self):
        assert rel_range((1, 1), "B:D") == "C:E"

    def test_rel_dispatch(self):
        assert rel((1, 0), "A1") == "B1"
        assert rel((1, 0), "A1:B2") == "B1:C2"
        assert rel((1, 0), "!ref") == "!ref"


# ---------------------------------------------------------------------------
# Cell relocation
# ---------------------------------------------------------------------------
class TestMoveCell:
    def test_move(self):
        sheet = Sheet({"A1": 1})
        move_cell(sheet, "C3", "A1")
        assert values(sheet) == {"C3": 1}

    def test_move_overwrites_by_default(self):
        sheet = Sheet({"A1": 1, "B1": 2})
        move_cell(sheet, "B1", "A1")
        assert values(sheet) == {"B1": 1}

    def test_guarded_move_raises_on_collision(self):
        sheet = Sheet({"A1": 1, "B1": 2})
        with pytest.raises(CellCollisionError) as exc_info:
            move_cell(sheet, "B1", "A1", overwrite=False)
        assert (exc_info.value.source, exc_info.value.target) == ("A1", "B1")
        assert values(sheet) == {"A1": 1, "B1": 2}

    def test_move_missing_source(self):
        with pytest.raises(MissingCellError):
            move_cell(Sheet(), "B1", "A1")

    def test_move_onto_itself_is_noop(self):
        sheet = Sheet({"A1": 1})
        move_cell(sheet, "$A$1", "a1", overwrite=False)
        assert values(sheet) == {"A1": 1}

    def test_move_keeps_record(self):
        cell = Cell.text("=SUM(A1:A3)")
        sheet = Sheet({"A4": cell})
        move_cell_by(sheet, (0, 1), "A4")
        assert sheet["A5"] is cell

    def test_clear_cell(self):
        sheet = Sheet({"A1": 1})
        clear_cell(sheet, "A1")
        clear_cell(sheet, "A1")
        assert len(sheet) == 0


# ---------------------------------------------------------------------------
# Row / column insertion and deletion
# ---------------------------------------------------------------------------
class TestRows:
    def test_insert_then_delete_row(self):
        sheet = Sheet({"B2": "x"})
        insert_row(sheet, 1)
        assert sheet.keys() == ["B3"]
        assert sheet.ref == "B3:B3"
        delete_row(sheet, 1)
        assert sheet.keys() == ["B2"]
        assert sheet.ref == "B2:B2"

    def test_insert_and_delete_first_row(self):
        sheet = Sheet({"B2": "x"})
        insert_row(sheet, 0)
        assert sheet.keys() == ["B3"]
        assert sheet.ref == "B3:B3"
        delete_row(sheet, 0)
        assert sheet.keys() == ["B2"]
        assert sheet.ref == "B2:B2"

    def test_insert_row_keeps_rows_above(self):
        sheet = Sheet({"A1": 1, "A2": 2})
        insert_row(sheet, 1)
        assert values(sheet) == {"A1": 1, "A3": 2}
        assert sheet.ref == "A1:A3"

    def test_insert_row_shifts_whole_block(self, two_columns: Sheet):
        insert_row(two_columns, 0)
        assert sorted(two_columns.keys()) == sorted(
            [f"{col}{row}" for col in "AB" for row in range(2, 7)]
        )
        assert two_columns["A2"].value == 1
        assert two_columns["B6"].value == 50
        assert two_columns.ref == "A2:B6"

    def test_delete_row_drops_line(self, two_columns: Sheet):
        delete_row(two_columns, 2)
        assert [two_columns[f"A{r}"].value for r in range(1, 5)] == [1, 2, 4, 5]
        assert "A5" not in two_columns
        assert two_columns.ref == "A1:B4"

    def test_delete_row_past_data_is_noop(self, two_columns: Sheet):
        before = values(two_columns)
        delete_row(two_columns, 50)
        assert values(two_columns) == before

    def test_negative_index(self):
        with pytest.raises(ValueError, match="Row index"):
            insert_row(Sheet(), -1)
        with pytest.raises(ValueError, match="Column index"):
            delete_column(Sheet(), -1)

    def test_insert_row_off_grid_moves_nothing(self):
        last = f"A{MAX_ROWS}"
        sheet = Sheet({"A1": 1, last: 2})
        with pytest.raises(MalformedReferenceError):
            insert_row(sheet, 0)
        assert values(sheet) == {"A1": 1, last: 2}


class TestColumns:
    def test_insert_column(self):
        sheet = Sheet({"A1": 1, "B1": 2})
        insert_column(sheet, 0)
        assert values(sheet) == {"B1": 1, "C1": 2}
        assert sheet.ref == "B1:C1"

    def test_delete_column(self):
        sheet = Sheet({"A1": "a", "B1": "b", "C1": "c"})
        delete_column(sheet, 1)
        assert values(sheet) == {"A1": "a", "B1": "c"}
        assert sheet.ref == "A1:B1"

    def test_insert_then_delete_column(self, two_columns: Sheet):
        before = values(two_columns)
        insert_column(two_columns, 1)
        assert two_columns["C3"].value == 30
        assert "B3" not in two_columns
        delete_column(two_columns, 1)
        assert values(two_columns) == before


# ---------------------------------------------------------------------------
# Single-cell insertion
# ---------------------------------------------------------------------------
class TestInsertCell:
    def test_shift_down_only_moves_one_column(self, two_columns: Sheet):
        insert_cell_shift_down(two_columns, "A2")
        assert "A2" not in two_columns
        assert [two_columns[f"A{r}"].value for r in (1, 3, 4, 5, 6)] == [1, 2, 3, 4, 5]
        assert [two_columns[f"B{r}"].value for r in range(1, 6)] == [10, 20, 30, 40, 50]
        assert two_columns.ref == "A1:B6"

    def test_shift_end_only_moves_one_row(self):
        sheet = Sheet({"A1": 1, "B1": 2, "C1": 3, "B2": 4})
        insert_cell_shift_end(sheet, "B1")
        assert values(sheet) == {"A1": 1, "C1": 2, "D1": 3, "B2": 4}
        assert sheet.ref == "A1:D2"

    def test_shift_down_at_empty_position(self):
        sheet = Sheet({"A1": 1})
        insert_cell_shift_down(sheet, "C3")
        assert values(sheet) == {"A1": 1}


# ---------------------------------------------------------------------------
# Block copies
# ---------------------------------------------------------------------------
class TestCopyRange:
    def test_copy_down(self):
        sheet = Sheet({"A1": 1, "B1": 2, "A2": 3, "B4": "stale"})
        copy_range_down(sheet, "A1:B2")
        assert values(sheet) == {"A1": 1, "B1": 2, "A2": 3, "A3": 1, "B3": 2, "A4": 3}
        assert "B4" not in sheet
        assert sheet.ref == "A1:B4"

    def test_copy_end(self):
        sheet = Sheet({"A1": 1, "A2": 2, "B2": "stale"})
        copy_range_end(sheet, "A1:A2")
        assert values(sheet) == {"A1": 1, "A2": 2, "B1": 1, "B2": 2}
        assert sheet.ref == "A1:B2"

    def test_copy_leaves_source_intact(self, two_columns: Sheet):
        copy_range_down(two_columns, "A1:B2")
        assert two_columns["A1"].value == 1
        assert two_columns["A3"].value == 1
        assert two_columns["B4"].value == 20
        assert two_columns["A5"].value == 5

    def test_copy_down_whole_column_is_unbounded(self):
        with pytest.raises(UnboundedRangeError):
            copy_range_down(Sheet({"B1": 1}), "B:B")

    def test_copy_end_whole_row_is_unbounded(self):
        with pytest.raises(UnboundedRangeError):
            copy_range_end(Sheet({"B2": 1}), "2:3")
