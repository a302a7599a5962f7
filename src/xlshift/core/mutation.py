"""Structural edits: relative references, cell relocation, row/column insert and delete.

All operations mutate the sheet in place and return it. Relocation is applied
one cell at a time with no rollback: if a reference fails to decode or a shift
runs off the grid part-way through, the cells already moved stay moved.
Callers that need atomicity should work on a copy.

Formula text, merged ranges, styles and row/column dimensions are not touched.
"""

from __future__ import annotations

from xlshift.contracts.common import CellCollisionError, MissingCellError, UnboundedRangeError
from xlshift.core.address import (
    Coordinate,
    RangeAddress,
    decode_cell,
    decode_range,
    encode_cell,
    encode_range,
    range_height,
    range_width,
)
from xlshift.core.ordering import (
    Comparator,
    sort_bottom_top,
    sort_end_start,
    sort_start_end,
    sort_top_bottom,
    sorted_refs,
)
from xlshift.core.predicates import (
    RefKind,
    and_,
    classify_ref,
    is_after,
    is_at_col,
    is_at_row,
    is_below,
    or_,
)
from xlshift.core.query import get_cell_refs, get_range_cell_refs, update_range
from xlshift.core.sheet import Sheet, canonical_ref

Delta = tuple[int, int]


def rel_cell(delta: Delta, ref: str) -> str:
    """Cell reference offset by ``(d_col, d_row)``."""
    dc, dr = delta
    col, row = decode_cell(ref)
    return encode_cell(Coordinate(col + dc, row + dr))


def rel_range(delta: Delta, ref: str) -> str:
    """Range reference offset by ``(d_col, d_row)``; unbounded axes are left alone."""
    dc, dr = delta
    start, end = decode_range(ref)
    if start.col is not None:
        start, end = start._replace(col=start.col + dc), end._replace(col=end.col + dc)
    if start.row is not None:
        start, end = start._replace(row=start.row + dr), end._replace(row=end.row + dr)
    return encode_range(RangeAddress(start, end))


def rel(delta: Delta, ref: str) -> str:
    """Offset a cell or range reference; special references pass through unchanged."""
    kind = classify_ref(ref)
    if kind is RefKind.RANGE:
        return rel_range(delta, ref)
    if kind is RefKind.CELL:
        return rel_cell(delta, ref)
    return ref


def move_cell(sheet: Sheet, to: str, from_: str, *, overwrite: bool = True) -> Sheet:
    """Move the record at ``from_`` to ``to`` and leave ``from_`` blank.

    Whatever sits at ``to`` is replaced unless ``overwrite`` is False, in which
    case an occupied target raises :class:`CellCollisionError`. Formulas that
    point at either cell are not updated.
    """
    src = canonical_ref(from_)
    dst = canonical_ref(to)
    if src not in sheet.cells:
        raise MissingCellError(from_)
    if src == dst:
        return sheet
    if not overwrite and dst in sheet.cells:
        raise CellCollisionError(src, dst)
    sheet.cells[dst] = sheet.cells.pop(src)
    return sheet


def move_cell_by(sheet: Sheet, delta: Delta, ref: str, *, overwrite: bool = True) -> Sheet:
    return move_cell(sheet, rel_cell(delta, ref), ref, overwrite=overwrite)


def clear_cell(sheet: Sheet, ref: str) -> Sheet:
    """Remove a cell; clearing an empty position is a no-op."""
    sheet.pop(ref, None)
    return sheet


def _check_index(index: int, what: str) -> None:
    if index < 0:
        raise ValueError(f"{what} index must be >= 0, got {index}")


def _shift(sheet: Sheet, refs: list[str], delta: Delta) -> Sheet:
    for ref in refs:
        move_cell_by(sheet, delta, ref)
    return update_range(sheet)


def insert_row(sheet: Sheet, index: int) -> Sheet:
    """Open a blank row at ``index`` (zero-based), pushing that row and everything below down one."""
    _check_index(index, "Row")
    moving = or_(is_below(index), is_at_row(index))
    affected = [r for r in get_cell_refs(sheet) if moving(r)]
    return _shift(sheet, sorted_refs(affected, sort_bottom_top), (0, 1))


def insert_column(sheet: Sheet, index: int) -> Sheet:
    """Open a blank column at ``index`` (zero-based), pushing it and everything after it right one."""
    _check_index(index, "Column")
    moving = or_(is_after(index), is_at_col(index))
    affected = [r for r in get_cell_refs(sheet) if moving(r)]
    return _shift(sheet, sorted_refs(affected, sort_end_start), (1, 0))


def insert_cell_shift_down(sheet: Sheet, ref: str) -> Sheet:
    """Open a blank cell at ``ref`` by pushing the rest of its column down one."""
    col, row = decode_cell(ref)
    below = and_(or_(is_below(row), is_at_row(row)), is_at_col(col))
    affected = [r for r in get_cell_refs(sheet) if below(r)]
    return _shift(sheet, sorted_refs(affected, sort_bottom_top), (0, 1))


def insert_cell_shift_end(sheet: Sheet, ref: str) -> Sheet:
    """Open a blank cell at ``ref`` by pushing the rest of its row right one."""
    col, row = decode_cell(ref)
    after = and_(or_(is_after(col), is_at_col(col)), is_at_row(row))
    affected = [r for r in get_cell_refs(sheet) if after(r)]
    return _shift(sheet, sorted_refs(affected, sort_end_start), (1, 0))


def delete_row(sheet: Sheet, index: int) -> Sheet:
    """Drop row ``index`` and pull everything below it up one."""
    _check_index(index, "Row")
    for ref in [r for r in get_cell_refs(sheet) if is_at_row(index)(r)]:
        clear_cell(sheet, ref)
    affected = [r for r in get_cell_refs(sheet) if is_below(index)(r)]
    return _shift(sheet, sorted_refs(affected, sort_top_bottom), (0, -1))


def delete_column(sheet: Sheet, index: int) -> Sheet:
    """Drop column ``index`` and pull everything after it left one."""
    _check_index(index, "Column")
    for ref in [r for r in get_cell_refs(sheet) if is_at_col(index)(r)]:
        clear_cell(sheet, ref)
    affected = [r for r in get_cell_refs(sheet) if is_after(index)(r)]
    return _shift(sheet, sorted_refs(affected, sort_start_end), (-1, 0))


def _copy_block(sheet: Sheet, range_ref: str, delta: Delta, order: Comparator) -> Sheet:
    target_range = rel_range(delta, range_ref)
    for ref in get_range_cell_refs(sheet, target_range):
        clear_cell(sheet, ref)
    for ref in sorted_refs(get_range_cell_refs(sheet, range_ref), order):
        sheet.cells[rel_cell(delta, ref)] = sheet.cells[ref]
    return update_range(sheet)


def copy_range_down(sheet: Sheet, range_ref: str) -> Sheet:
    """Paste the range's contents into the same-sized block directly beneath it.

    Positions in the target block that are blank in the source end up blank.
    Whole-column ranges have no "beneath" and raise UnboundedRangeError.
    """
    if decode_range(range_ref).start.row is None:
        raise UnboundedRangeError(f"Cannot copy whole-column range {range_ref} downwards")
    return _copy_block(sheet, range_ref, (0, int(range_height(range_ref))), sort_bottom_top)


def copy_range_end(sheet: Sheet, range_ref: str) -> Sheet:
    """Paste the range's contents into the same-sized block directly after it."""
    if decode_range(range_ref).start.col is None:
        raise UnboundedRangeError(f"Cannot copy whole-row range {range_ref} to the end")
    return _copy_block(sheet, range_ref, (int(range_width(range_ref)), 0), sort_end_start)
