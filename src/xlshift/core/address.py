"""A1 reference codec: cell and range references to zero-based coordinates and back.

Coordinates are ``(col, row)`` pairs of zero-based ints. An axis that a range
leaves open (whole rows ``"2:5"`` or whole columns ``"B:D"``) is ``None``
(``UNBOUNDED``) on both ends rather than a negative sentinel.
"""

from __future__ import annotations

import math
import re
from typing import NamedTuple

from openpyxl.utils import column_index_from_string, get_column_letter

from xlshift.contracts.common import MalformedReferenceError

UNBOUNDED = None

# Excel grid limits
MAX_COLUMNS = 16384
MAX_ROWS = 1048576

RANGE_SEPARATOR = ":"

# Row digits are capped at 7 (MAX_ROWS has 7) so int() never sees huge strings
_CELL_RE = re.compile(r"^\$?([A-Za-z]{1,3})\$?([0-9]{1,7})$")
_ROW_SPAN_RE = re.compile(r"^\$?([0-9]{1,7}):\$?([0-9]{1,7})$")
_COL_RE = re.compile(r"^\$?([A-Za-z]{1,3})$")
_COL_SPAN_RE = re.compile(r"^\$?([A-Za-z]{1,3}):\$?([A-Za-z]{1,3})$")


class Coordinate(NamedTuple):
    """Zero-based column and row; either may be ``UNBOUNDED``."""

    col: int | None
    row: int | None

    @property
    def bounded(self) -> bool:
        return self.col is not None and self.row is not None


class RangeAddress(NamedTuple):
    """Inclusive rectangular span between two coordinates."""

    start: Coordinate
    end: Coordinate

    @property
    def is_row_range(self) -> bool:
        """True for whole-row spans (``"2:5"``): columns are unconstrained."""
        return self.start.col is None

    @property
    def is_column_range(self) -> bool:
        """True for whole-column spans (``"B:D"``): rows are unconstrained."""
        return self.start.row is None


class RangeSize(NamedTuple):
    width: float
    height: float


def _col_index(letters: str, ref: str) -> int:
    try:
        idx = column_index_from_string(letters.upper())
    except ValueError as e:
        raise MalformedReferenceError(ref, str(e)) from e
    if idx > MAX_COLUMNS:
        raise MalformedReferenceError(ref, f"column {letters.upper()} is past the last column")
    return idx - 1


def _row_index(digits: str, ref: str) -> int:
    row = int(digits)
    if row < 1 or row > MAX_ROWS:
        raise MalformedReferenceError(ref, f"row {row} is outside 1..{MAX_ROWS}")
    return row - 1


def _col_letters(col: int | None) -> str:
    if col is None or col < 0 or col >= MAX_COLUMNS:
        raise MalformedReferenceError(col, "column index out of range")
    return get_column_letter(col + 1)


def _row_digits(row: int | None) -> str:
    if row is None or row < 0 or row >= MAX_ROWS:
        raise MalformedReferenceError(row, "row index out of range")
    return str(row + 1)


def decode_cell(ref: str) -> Coordinate:
    """Parse ``"B7"`` into ``Coordinate(col=1, row=6)``."""
    if not isinstance(ref, str):
        raise MalformedReferenceError(ref, "not a string")
    m = _CELL_RE.match(ref.strip())
    if not m:
        raise MalformedReferenceError(ref)
    return Coordinate(_col_index(m.group(1), ref), _row_index(m.group(2), ref))


def decode_col(letters: str) -> int:
    """Parse a bare column label (``"B"``, ``"$AA"``) into its zero-based index."""
    if not isinstance(letters, str):
        raise MalformedReferenceError(letters, "not a string")
    m = _COL_RE.match(letters.strip())
    if not m:
        raise MalformedReferenceError(letters, "expected column letters")
    return _col_index(m.group(1), letters)


def encode_cell(coord: Coordinate | tuple[int, int]) -> str:
    """Render a bounded coordinate in canonical A1 form."""
    col, row = coord
    try:
        return f"{_col_letters(col)}{_row_digits(row)}"
    except MalformedReferenceError as e:
        raise MalformedReferenceError(tuple(coord), str(e)) from e


def decode_range(ref: str) -> RangeAddress:
    """Parse a range reference.

    Accepts bounded ranges (``"B7:D9"``), single cells (``"B7"``), whole-row
    spans (``"2:5"``) and whole-column spans (``"B:D"``). Ends are normalised
    so that ``start <= end`` on every bounded axis.
    """
    if not isinstance(ref, str):
        raise MalformedReferenceError(ref, "not a string")
    text = ref.strip()

    m = _ROW_SPAN_RE.match(text)
    if m:
        r1, r2 = sorted((_row_index(m.group(1), ref), _row_index(m.group(2), ref)))
        return RangeAddress(Coordinate(UNBOUNDED, r1), Coordinate(UNBOUNDED, r2))

    m = _COL_SPAN_RE.match(text)
    if m:
        c1, c2 = sorted((_col_index(m.group(1), ref), _col_index(m.group(2), ref)))
        return RangeAddress(Coordinate(c1, UNBOUNDED), Coordinate(c2, UNBOUNDED))

    parts = text.split(RANGE_SEPARATOR)
    if len(parts) == 1:
        cell = decode_cell(parts[0])
        return RangeAddress(cell, cell)
    if len(parts) != 2:
        raise MalformedReferenceError(ref)
    try:
        a, b = decode_cell(parts[0]), decode_cell(parts[1])
    except MalformedReferenceError as e:
        raise MalformedReferenceError(ref, str(e)) from e
    return RangeAddress(
        Coordinate(min(a.col, b.col), min(a.row, b.row)),
        Coordinate(max(a.col, b.col), max(a.row, b.row)),
    )


def encode_range(addr: RangeAddress) -> str:
    """Inverse of :func:`decode_range`; an unbounded axis is left out of the text."""
    start, end = addr
    if start.col is None and start.row is None:
        raise MalformedReferenceError(tuple(addr), "both axes unbounded")
    if start.col is None:
        return f"{_row_digits(start.row)}:{_row_digits(end.row)}"
    if start.row is None:
        return f"{_col_letters(start.col)}:{_col_letters(end.col)}"
    return f"{encode_cell(start)}:{encode_cell(end)}"


def is_valid_cell_ref(ref: str) -> bool:
    try:
        decode_cell(ref)
    except MalformedReferenceError:
        return False
    return True


def range_width(ref: str) -> float:
    """Number of columns spanned, or ``math.inf`` for a whole-row span."""
    if RANGE_SEPARATOR not in ref:
        decode_cell(ref)
        return 1
    r = decode_range(ref)
    if r.start.col is None:
        return math.inf
    return 1 + r.end.col - r.start.col


def range_height(ref: str) -> float:
    """Number of rows spanned, or ``math.inf`` for a whole-column span."""
    if RANGE_SEPARATOR not in ref:
        decode_cell(ref)
        return 1
    r = decode_range(ref)
    if r.start.row is None:
        return math.inf
    return 1 + r.end.row - r.start.row


def range_size(ref: str) -> RangeSize:
    return RangeSize(range_width(ref), range_height(ref))


def _axis_within(p_lo: int | None, p_hi: int | None, c_lo: int | None, c_hi: int | None) -> bool:
    if p_lo is None:
        return True
    if c_lo is None:
        return False
    return p_lo <= c_lo and c_hi <= p_hi


def _axis_intersects(a_lo: int | None, a_hi: int | None, b_lo: int | None, b_hi: int | None) -> bool:
    if a_lo is None or b_lo is None:
        return True
    return a_lo <= b_hi and b_lo <= a_hi


def range_within(parent: str, child: str) -> bool:
    """Geometric containment: every grid position of ``child`` lies in ``parent``."""
    p, c = decode_range(parent), decode_range(child)
    return (
        _axis_within(p.start.col, p.end.col, c.start.col, c.end.col)
        and _axis_within(p.start.row, p.end.row, c.start.row, c.end.row)
    )


def ranges_intersect(a: str, b: str) -> bool:
    """Geometric overlap: the two spans share at least one grid position."""
    ra, rb = decode_range(a), decode_range(b)
    return (
        _axis_intersects(ra.start.col, ra.end.col, rb.start.col, rb.end.col)
        and _axis_intersects(ra.start.row, ra.end.row, rb.start.row, rb.end.row)
    )
