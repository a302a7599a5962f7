"""Address algebra and structural mutation engine."""

from xlshift.core.address import (
    UNBOUNDED,
    Coordinate,
    RangeAddress,
    RangeSize,
    decode_cell,
    decode_col,
    decode_range,
    encode_cell,
    encode_range,
    is_valid_cell_ref,
    range_height,
    range_size,
    range_width,
    range_within,
    ranges_intersect,
)
from xlshift.core.containment import contains, overlaps
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
from xlshift.core.predicates import (
    RefKind,
    and_,
    classify_ref,
    in_range,
    is_above,
    is_after,
    is_at_col,
    is_at_row,
    is_before,
    is_below,
    is_cell_ref,
    is_range_ref,
    is_special_ref,
    not_,
    or_,
)
from xlshift.core.query import (
    get_cell,
    get_cell_refs,
    get_cell_value,
    get_names,
    get_range_cell_refs,
    get_sheet,
    get_sheet_range,
    set_cell_value,
    update_range,
)
from xlshift.core.sheet import Cell, CellType, Sheet, Workbook, classify_value

__all__ = [
    "UNBOUNDED",
    "Cell",
    "CellType",
    "Coordinate",
    "RangeAddress",
    "RangeSize",
    "RefKind",
    "Sheet",
    "Workbook",
    "and_",
    "classify_ref",
    "classify_value",
    "clear_cell",
    "contains",
    "copy_range_down",
    "copy_range_end",
    "decode_cell",
    "decode_col",
    "decode_range",
    "delete_column",
    "delete_row",
    "encode_cell",
    "encode_range",
    "get_cell",
    "get_cell_refs",
    "get_cell_value",
    "get_names",
    "get_range_cell_refs",
    "get_sheet",
    "get_sheet_range",
    "in_range",
    "insert_cell_shift_down",
    "insert_cell_shift_end",
    "insert_column",
    "insert_row",
    "is_above",
    "is_after",
    "is_at_col",
    "is_at_row",
    "is_before",
    "is_below",
    "is_cell_ref",
    "is_range_ref",
    "is_special_ref",
    "is_valid_cell_ref",
    "move_cell",
    "move_cell_by",
    "not_",
    "or_",
    "overlaps",
    "range_height",
    "range_size",
    "range_width",
    "range_within",
    "ranges_intersect",
    "rel",
    "rel_cell",
    "rel_range",
    "set_cell_value",
    "sort_bottom_top",
    "sort_col",
    "sort_dim",
    "sort_end_start",
    "sort_row",
    "sort_start_end",
    "sort_top_bottom",
    "sorted_refs",
    "update_range",
]
