"""Tests for relocation ordering comparators."""

from __future__ import annotations

import pytest

from xlshift.core.ordering import (
    sort_bottom_top,
    sort_col,
    sort_dim,
    sort_end_start,
    sort_row,
    sort_start_end,
    sort_top_bottom,
    sorted_refs,
)

REFS = ["B2", "A3", "C1", "A1"]


def test_sort_dim_three_way():
    cmp = sort_dim("r")
    assert cmp("A1", "A2") == -1
    assert cmp("A2", "A1") == 1
    assert cmp("A1", "Z1") == 0


def test_sort_dim_reverse():
    cmp = sort_dim("c", reverse=True)
    assert cmp("A1", "B1") == 1
    assert cmp("B1", "A1") == -1


def test_sort_dim_unknown_axis():
    with pytest.raises(ValueError, match="Unknown axis"):
        sort_dim("z")


def test_sort_row_and_col_helpers():
    assert sort_row()("A1", "A2") == sort_dim("r")("A1", "A2")
    assert sort_col(True)("A1", "B1") == sort_dim("c", True)("A1", "B1")


def test_named_orders():
    assert sorted_refs(REFS, sort_top_bottom) == ["C1", "A1", "B2", "A3"]
    assert sorted_refs(REFS, sort_bottom_top) == ["A3", "B2", "C1", "A1"]
    assert sorted_refs(REFS, sort_start_end) == ["A3", "A1", "B2", "C1"]
    assert sorted_refs(REFS, sort_end_start) == ["C1", "B2", "A3", "A1"]


def test_sorted_refs_does_not_mutate_input():
    refs = list(REFS)
    sorted_refs(refs, sort_bottom_top)
    assert refs == REFS
