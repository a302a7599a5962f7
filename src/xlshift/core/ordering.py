"""Direction-aware comparators that sequence in-place relocation.

Cells are moved one at a time onto keys that may still be occupied, so the
processing order decides whether a move clobbers a cell that has not moved
yet. Insertion shifts away from the insertion point and must start from the
far end (bottom-to-top, end-to-start); deletion shifts towards it and must
start from the near end (top-to-bottom, start-to-end).
"""

from __future__ import annotations

from functools import cmp_to_key
from typing import Callable, Iterable

from xlshift.core.address import decode_cell

Comparator = Callable[[str, str], int]

_AXES = {"c": 0, "r": 1}


def sort_dim(axis: str, reverse: bool = False) -> Comparator:
    """Three-way comparator over cell references on one axis (``"c"`` or ``"r"``)."""
    if axis not in _AXES:
        raise ValueError(f"Unknown axis {axis!r}; expected 'c' or 'r'")
    idx = _AXES[axis]

    def compare(ref_a: str, ref_b: str) -> int:
        a = decode_cell(ref_a)[idx]
        b = decode_cell(ref_b)[idx]
        if a == b:
            return 0
        return -1 if (a < b) != reverse else 1

    return compare


def sort_row(reverse: bool = False) -> Comparator:
    return sort_dim("r", reverse)


def sort_col(reverse: bool = False) -> Comparator:
    return sort_dim("c", reverse)


sort_bottom_top = sort_row(True)
sort_top_bottom = sort_row(False)
sort_end_start = sort_col(True)
sort_start_end = sort_col(False)


def sorted_refs(refs: Iterable[str], comparator: Comparator) -> list[str]:
    """Stable sort of references with a three-way comparator."""
    return sorted(refs, key=cmp_to_key(comparator))
