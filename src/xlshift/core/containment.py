"""Range containment and overlap measured over a sheet's populated cells.

Both queries only look at cells that exist inside the child range, so a child
range with no populated cells is contained by anything and overlaps nothing.
For the purely geometric reading use
:func:`xlshift.core.address.range_within` and
:func:`xlshift.core.address.ranges_intersect`.
"""

from __future__ import annotations

from xlshift.core.predicates import in_range
from xlshift.core.query import get_range_cell_refs
from xlshift.core.sheet import Sheet


def contains(sheet: Sheet, parent_range: str, child_range: str) -> bool:
    """True when every populated cell of ``child_range`` also lies in ``parent_range``."""
    inside = in_range(parent_range)
    return all(inside(ref) for ref in get_range_cell_refs(sheet, child_range))


def overlaps(sheet: Sheet, parent_range: str, child_range: str) -> bool:
    """True when at least one populated cell of ``child_range`` lies in ``parent_range``."""
    inside = in_range(parent_range)
    return any(inside(ref) for ref in get_range_cell_refs(sheet, child_range))
