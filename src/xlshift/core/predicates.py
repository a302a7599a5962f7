"""Reference classification and composable predicates over references."""

from __future__ import annotations

from enum import Enum
from typing import Callable

from xlshift.core.address import RANGE_SEPARATOR, decode_cell, decode_range

SPECIAL_MARKER = "!"

Predicate = Callable[[str], bool]


class RefKind(str, Enum):
    SPECIAL = "special"
    RANGE = "range"
    CELL = "cell"


def not_(predicate: Predicate) -> Predicate:
    """Invert a predicate."""
    return lambda ref: not predicate(ref)


def and_(p1: Predicate, p2: Predicate) -> Predicate:
    return lambda ref: p1(ref) and p2(ref)


def or_(p1: Predicate, p2: Predicate) -> Predicate:
    return lambda ref: p1(ref) or p2(ref)


def is_special_ref(ref: str) -> bool:
    """Sheet-level metadata keys such as ``!ref`` or ``!name``."""
    return ref.startswith(SPECIAL_MARKER)


def is_range_ref(ref: str) -> bool:
    return not is_special_ref(ref) and RANGE_SEPARATOR in ref


is_cell_ref: Predicate = not_(or_(is_special_ref, is_range_ref))


def classify_ref(ref: str) -> RefKind:
    """Classify a sheet key; special wins over range, range over cell."""
    if is_special_ref(ref):
        return RefKind.SPECIAL
    if RANGE_SEPARATOR in ref:
        return RefKind.RANGE
    return RefKind.CELL


# Position predicates. Thresholds are zero-based; the argument must be a
# cell reference (a range raises MalformedReferenceError from the codec).

def is_above(row: int) -> Predicate:
    return lambda ref: decode_cell(ref).row < row


def is_at_row(row: int) -> Predicate:
    return lambda ref: decode_cell(ref).row == row


def is_below(row: int) -> Predicate:
    return lambda ref: decode_cell(ref).row > row


def is_before(col: int) -> Predicate:
    return lambda ref: decode_cell(ref).col < col


def is_at_col(col: int) -> Predicate:
    return lambda ref: decode_cell(ref).col == col


def is_after(col: int) -> Predicate:
    return lambda ref: decode_cell(ref).col > col


def in_range(range_ref: str) -> Predicate:
    """Predicate: the cell lies inside ``range_ref``.

    An axis the range leaves unbounded always matches, so ``"2:5"`` filters on
    rows only and ``"B:D"`` on columns only. The range is decoded once, up front.
    """
    r = decode_range(range_ref)

    def check(ref: str) -> bool:
        a = decode_cell(ref)
        return (
            (r.start.col is None or r.start.col <= a.col <= r.end.col)
            and (r.start.row is None or r.start.row <= a.row <= r.end.row)
        )

    return check
