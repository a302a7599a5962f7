"""In-memory sheet and workbook model.

A :class:`Sheet` maps A1 cell references to :class:`Cell` records. Sheet-level
metadata (the declared extent and the sheet name) are explicit attributes
instead of ``!``-prefixed keys; :meth:`Sheet.to_mapping` and
:meth:`Sheet.from_mapping` convert to and from the legacy string-keyed form.

Iteration order is insertion order. Cells written by a relocation are
re-inserted, so after a structural edit the moved cells come last.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from xlshift.core.address import decode_cell, encode_cell, is_valid_cell_ref

EXTENT_KEY = "!ref"
NAME_KEY = "!name"


class CellType(str, Enum):
    """Storage tag of a cell value."""

    NUMBER = "n"
    BOOLEAN = "b"
    TEXT = "s"
    DATETIME = "d"
    EMPTY = "z"


class Cell(BaseModel):
    """Tagged cell value. Immutable; relocation moves the record as-is.

    ``raw`` holds the storage object for values with no plain Python form
    (array and data-table formulas). ``value`` then carries the display text
    and ``raw`` is what gets written back.
    """

    model_config = ConfigDict(frozen=True)

    type: CellType
    value: Any = None
    raw: Any = Field(default=None, exclude=True, repr=False)

    @classmethod
    def number(cls, value: int | float) -> "Cell":
        return cls(type=CellType.NUMBER, value=value)

    @classmethod
    def boolean(cls, value: bool) -> "Cell":
        return cls(type=CellType.BOOLEAN, value=value)

    @classmethod
    def text(cls, value: str) -> "Cell":
        return cls(type=CellType.TEXT, value=value)

    @classmethod
    def date_time(cls, value: date | datetime | time | timedelta) -> "Cell":
        return cls(type=CellType.DATETIME, value=value)

    @classmethod
    def empty(cls) -> "Cell":
        return cls(type=CellType.EMPTY, value="")


def classify_value(value: Any) -> Cell:
    """Build a :class:`Cell` from a raw Python value.

    Dispatch is on the concrete type; ``bool`` is checked before ``int``.
    Formulas are plain text (``"=SUM(A1:A3)"``): they are stored, never
    evaluated or rewritten.
    """
    if isinstance(value, Cell):
        return value
    if value is None:
        return Cell.empty()
    if isinstance(value, bool):
        return Cell.boolean(value)
    if isinstance(value, (int, float)):
        return Cell.number(value)
    if isinstance(value, str):
        return Cell.text(value)
    if isinstance(value, (datetime, date, time, timedelta)):
        return Cell.date_time(value)
    raise TypeError(f"Unsupported cell value type: {type(value).__name__}")


def canonical_ref(ref: str) -> str:
    """Uppercase, ``$``-free form of a cell reference."""
    return encode_cell(decode_cell(ref))


class Sheet:
    """Cell population of one worksheet plus its declared extent."""

    def __init__(
        self,
        cells: Mapping[str, Any] | None = None,
        *,
        name: str | None = None,
        ref: str | None = None,
    ) -> None:
        self.name = name
        self.ref = ref
        self.cells: dict[str, Cell] = {}
        for key, value in (cells or {}).items():
            self[key] = value

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Sheet":
        """Build a sheet from the legacy form (``{"!ref": ..., "B7": ...}``).

        Special keys other than ``!ref`` and ``!name`` are ignored. Values may
        be :class:`Cell` instances, ``{"t": ..., "v": ...}`` dicts, or raw values.
        """
        sheet = cls(name=data.get(NAME_KEY), ref=data.get(EXTENT_KEY))
        for key, value in data.items():
            if key.startswith("!"):
                continue
            if isinstance(value, Mapping) and "t" in value:
                value = Cell(type=CellType(value["t"]), value=value.get("v"))
            sheet[key] = value
        return sheet

    def to_mapping(self) -> dict[str, Any]:
        """Legacy string-keyed form with ``!ref``/``!name`` special keys."""
        out: dict[str, Any] = {}
        if self.ref is not None:
            out[EXTENT_KEY] = self.ref
        if self.name is not None:
            out[NAME_KEY] = self.name
        for key, cell in self.cells.items():
            out[key] = {"t": cell.type.value, "v": cell.value}
        return out

    def _key(self, ref: str) -> str:
        if ref in self.cells:
            return ref
        return canonical_ref(ref)

    def __setitem__(self, ref: str, value: Any) -> None:
        self.cells[canonical_ref(ref)] = classify_value(value)

    def __getitem__(self, ref: str) -> Cell:
        return self.cells[self._key(ref)]

    def __delitem__(self, ref: str) -> None:
        del self.cells[self._key(ref)]

    def __contains__(self, ref: object) -> bool:
        if not isinstance(ref, str):
            return False
        if ref in self.cells:
            return True
        return is_valid_cell_ref(ref) and canonical_ref(ref) in self.cells

    def __iter__(self) -> Iterator[str]:
        return iter(list(self.cells))

    def __len__(self) -> int:
        return len(self.cells)

    def keys(self) -> list[str]:
        return list(self.cells)

    def pop(self, ref: str, default: Any = None) -> Cell | None:
        return self.cells.pop(self._key(ref), default)

    def __repr__(self) -> str:
        return f"Sheet(name={self.name!r}, ref={self.ref!r}, cells={len(self.cells)})"


class Workbook:
    """Named sheets plus the workbook's defined names (name -> range reference)."""

    def __init__(
        self,
        sheets: Mapping[str, Sheet] | None = None,
        names: Mapping[str, str] | None = None,
    ) -> None:
        self.sheets: dict[str, Sheet] = dict(sheets or {})
        self.names: dict[str, str] = dict(names or {})

    @property
    def sheetnames(self) -> list[str]:
        return list(self.sheets)

    def __repr__(self) -> str:
        return f"Workbook(sheets={self.sheetnames!r}, names={len(self.names)})"
