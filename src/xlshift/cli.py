"""Typer CLI application: structural edits on workbook files."""

from __future__ import annotations

import math
import sys
from contextlib import nullcontext
from typing import Annotated, Any, Callable, NoReturn, Optional

import portalocker
import typer

import xlshift
from xlshift.contracts.common import ChangeRecord, Target, WarningDetail, XlShiftError
from xlshift.contracts.responses import AddressResult, ContainmentResult
from xlshift.core.address import decode_col, decode_range, range_size, range_within, ranges_intersect
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
    rel,
)
from xlshift.core.predicates import RefKind, classify_ref
from xlshift.core.query import get_cell, get_range_cell_refs
from xlshift.core.sheet import Sheet
from xlshift.engine.dispatcher import (
    error_code_for,
    error_details_for,
    error_envelope,
    exit_code_for,
    print_response,
    success_envelope,
)
from xlshift.observe.events import EventEmitter, Timer

# ---------------------------------------------------------------------------
# App & subcommand groups
# ---------------------------------------------------------------------------

_MAIN_HELP = """\
Structural editing for Excel workbooks (.xlsx): insert and delete rows,
columns and cells with correct relocation of the surviving cells.

**Every command** returns a JSON `ResponseEnvelope`:
`{"ok": bool, "command": "...", "result": {...}, "changes": [...], "errors": [...], "metrics": {"duration_ms": N}}`

**Ref syntax:** cells `B7`, ranges `B7:D9`, whole rows `2:5`, whole columns `B:D`.
Rows on the command line are 1-based as in Excel; columns are letters.

**Not handled:** formula text, merged ranges, styles and row heights stay where they are.

**Exit codes:** 0=success, 10=validation, 40=conflict, 50=io, 90=internal
"""

_ROW_EPILOG = """\
**Examples:**

`xlshift row insert -f data.xlsx -s Sheet1 --row 3`: blank row 3, old row 3 becomes row 4

`xlshift row delete -f data.xlsx -s Sheet1 --row 3 --backup`
"""

_COL_EPILOG = """\
**Examples:**

`xlshift col insert -f data.xlsx -s Sheet1 --col C`

`xlshift col delete -f data.xlsx -s Sheet1 --col B --dry-run`
"""

_CELL_EPILOG = """\
**Examples:**

`xlshift cell insert -f data.xlsx -s Sheet1 --ref B2 --shift down`

`xlshift cell move -f data.xlsx -s Sheet1 --from A1 --to D4 --no-overwrite`

`xlshift cell clear -f data.xlsx -s Sheet1 --ref B2`
"""

_RANGE_EPILOG = """\
**Examples:**

`xlshift range contains -f data.xlsx -s Sheet1 --parent A1:D10 --child B2:C3`

`xlshift range copy -f data.xlsx -s Sheet1 --ref A1:C2 --direction down`

Containment is judged over the populated cells of the child range; the
`geometric` field of the result gives the grid-only answer.
"""

app = typer.Typer(
    name="xlshift",
    help=_MAIN_HELP,
    no_args_is_help=True,
    rich_markup_mode="markdown",
)
wb_app = typer.Typer(name="wb", help="Workbook inspection and lock status.", no_args_is_help=True)
sheet_app = typer.Typer(name="sheet", help="Sheet extent and cell listing.", no_args_is_help=True)
ref_app = typer.Typer(name="ref", help="Decode and shift references (no file needed).", no_args_is_help=True)
row_app = typer.Typer(
    name="row", help="Insert and delete whole rows.",
    epilog=_ROW_EPILOG, no_args_is_help=True, rich_markup_mode="markdown",
)
col_app = typer.Typer(
    name="col", help="Insert and delete whole columns.",
    epilog=_COL_EPILOG, no_args_is_help=True, rich_markup_mode="markdown",
)
cell_app = typer.Typer(
    name="cell", help="Insert, move, clear and read single cells.",
    epilog=_CELL_EPILOG, no_args_is_help=True, rich_markup_mode="markdown",
)
range_app = typer.Typer(
    name="range", help="Range containment, overlap and copy.",
    epilog=_RANGE_EPILOG, no_args_is_help=True, rich_markup_mode="markdown",
)

app.add_typer(wb_app)
app.add_typer(sheet_app)
app.add_typer(ref_app)
app.add_typer(row_app)
app.add_typer(col_app)
app.add_typer(cell_app)
app.add_typer(range_app)

_state: dict[str, Any] = {"events": False, "lock_timeout": 0.0}


@app.callback(invoke_without_command=True)
def main_callback(
    version: Annotated[
        bool, typer.Option("--version", "-V", help="Print version and exit.", is_eager=True)
    ] = False,
    events: Annotated[
        bool, typer.Option("--events", envvar="XLSHIFT_EVENTS", help="Emit NDJSON lifecycle events on stderr.")
    ] = False,
    lock_timeout: Annotated[
        float, typer.Option("--lock-timeout", envvar="XLSHIFT_LOCK_TIMEOUT", help="Seconds to wait for the workbook lock (0 = fail fast).")
    ] = 0.0,
) -> None:
    if version:
        typer.echo(xlshift.__version__)
        raise typer.Exit()
    _state["events"] = events
    _state["lock_timeout"] = lock_timeout


FilePath = Annotated[str, typer.Option("--file", "-f", help="Path to .xlsx workbook file")]
SheetName = Annotated[str, typer.Option("--sheet", "-s", help="Worksheet name")]
DryRun = Annotated[bool, typer.Option("--dry-run", help="Preview changes without writing to disk")]
Backup = Annotated[bool, typer.Option("--backup", help="Create timestamped .bak copy before writing")]

_RECOVERABLE = (XlShiftError, ValueError, OSError, portalocker.LockException)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _emit(envelope, code=None) -> NoReturn:
    print_response(envelope)
    raise typer.Exit(code if code is not None else exit_code_for(envelope))


def _emit_exception(command: str, exc: BaseException, target: Target, emitter: EventEmitter | None = None) -> NoReturn:
    code = error_code_for(exc)
    if emitter is not None:
        emitter.emit("command.error", {"code": code, "message": str(exc)})
    _emit(error_envelope(command, code, str(exc), target=target, details=error_details_for(exc)))


def _row_index(row: int) -> int:
    if row < 1:
        raise ValueError(f"Rows are 1-based; got {row}")
    return row - 1


def _col_index(col: str) -> int:
    return decode_col(col)


def _load_ctx(file: str):
    from xlshift.engine.context import WorkbookContext
    return WorkbookContext(file)


def _run_mutation(
    command: str,
    file: str,
    sheet_name: str,
    target_ref: str,
    edit: Callable[[Sheet], Any],
    *,
    dry_run: bool,
    backup: bool,
) -> None:
    """Load one sheet, apply ``edit`` to it, write it back and report the change."""
    emitter = EventEmitter(command, enabled=_state["events"])
    target = Target(file=file, sheet=sheet_name, ref=target_ref)
    emitter.emit("command.start", {"file": file, "sheet": sheet_name, "ref": target_ref})

    backup_path = None
    try:
        lock = nullcontext() if dry_run else _workbook_lock(file)
        with Timer() as t, lock:
            ctx = _load_ctx(file)
            try:
                sheet = ctx.load_sheet(sheet_name)
                before_extent, before_count = sheet.ref, len(sheet)
                emitter.emit("sheet.loaded", {"extent": before_extent, "cells": before_count})

                edit(sheet)
                emitter.emit("sheet.mutated", {"extent": sheet.ref, "cells": len(sheet)})

                stored = ctx.store_sheet(sheet)
                if not dry_run:
                    if backup:
                        from xlshift.io.fileops import backup as make_backup
                        backup_path = make_backup(file)
                    ctx.save(file)
                    emitter.emit("workbook.saved", {"file": file, "backup_path": backup_path})
            finally:
                ctx.close()
    except _RECOVERABLE as e:
        _emit_exception(command, e, target, emitter)
        return

    change = ChangeRecord(
        type=command,
        target=f"{sheet_name}!{target_ref}",
        before={"extent": before_extent, "cells": before_count},
        after={"extent": sheet.ref, "cells": len(sheet)},
        impact=stored.impact,
        warnings=stored.warnings,
    )
    result = {"dry_run": dry_run, "backup_path": backup_path, "extent": sheet.ref}
    env = success_envelope(command, result, target=target, changes=[change], duration_ms=t.elapsed_ms)
    _emit(env)


def _workbook_lock(file: str):
    from xlshift.io.fileops import WorkbookLock
    return WorkbookLock(file, timeout=_state["lock_timeout"])


def _read_sheet(command: str, file: str, sheet_name: str, target: Target) -> Sheet:
    try:
        ctx = _load_ctx(file)
        try:
            return ctx.load_sheet(sheet_name)
        finally:
            ctx.close()
    except _RECOVERABLE as e:
        _emit_exception(command, e, target)


# ---------------------------------------------------------------------------
# xlshift version
# ---------------------------------------------------------------------------
@app.command()
def version():
    """Print the xlshift version."""
    _emit(success_envelope("version", {"version": xlshift.__version__}))


# ---------------------------------------------------------------------------
# xlshift wb
# ---------------------------------------------------------------------------
@wb_app.command("inspect")
def wb_inspect(file: FilePath):
    """List sheets with their extents and cell counts, plus defined names and fingerprint.

    Example: `xlshift wb inspect -f data.xlsx`
    """
    target = Target(file=file)
    with Timer() as t:
        try:
            ctx = _load_ctx(file)
        except _RECOVERABLE as e:
            _emit_exception("wb.inspect", e, target)
            return
        meta = ctx.get_workbook_meta()
        ctx.close()
    _emit(success_envelope("wb.inspect", meta.model_dump(), target=target, duration_ms=t.elapsed_ms))


@wb_app.command("lock-status")
def wb_lock_status(file: FilePath):
    """Check whether another xlshift process holds the workbook lock."""
    from xlshift.io.fileops import check_lock

    with Timer() as t:
        result = check_lock(file)
    _emit(success_envelope("wb.lock_status", result, target=Target(file=file), duration_ms=t.elapsed_ms))


# ---------------------------------------------------------------------------
# xlshift sheet extent
# ---------------------------------------------------------------------------
@sheet_app.command("extent")
def sheet_extent(
    file: FilePath,
    sheet: SheetName,
    within: Annotated[Optional[str], typer.Option("--within", help="Only list cells inside this range")] = None,
):
    """Report the sheet's occupied extent and populated cell references."""
    target = Target(file=file, sheet=sheet, ref=within)
    with Timer() as t:
        model = _read_sheet("sheet.extent", file, sheet, target)
        try:
            refs = get_range_cell_refs(model, within) if within else model.keys()
        except _RECOVERABLE as e:
            _emit_exception("sheet.extent", e, target)
            return
    result = {"sheet": sheet, "extent": model.ref, "cell_count": len(model), "cells": refs}
    _emit(success_envelope("sheet.extent", result, target=target, duration_ms=t.elapsed_ms))


# ---------------------------------------------------------------------------
# xlshift ref
# ---------------------------------------------------------------------------
@ref_app.command("decode")
def ref_decode(ref: Annotated[str, typer.Option("--ref", help="Cell or range reference")]):
    """Decode a reference into zero-based coordinates (null = unbounded axis).

    Example: `xlshift ref decode --ref 2:5`
    """
    target = Target(ref=ref)
    try:
        kind = classify_ref(ref)
        if kind is RefKind.SPECIAL:
            raise ValueError(f"{ref} is a special (metadata) key, not a reference")
        start, end = decode_range(ref)
        size = range_size(ref)
    except _RECOVERABLE as e:
        _emit_exception("ref.decode", e, target)
        return
    result = AddressResult(
        ref=ref,
        kind=kind.value,
        start_col=start.col,
        start_row=start.row,
        end_col=end.col,
        end_row=end.row,
        width=None if math.isinf(size.width) else size.width,
        height=None if math.isinf(size.height) else size.height,
    )
    _emit(success_envelope("ref.decode", result.model_dump(), target=target))


@ref_app.command("shift")
def ref_shift(
    ref: Annotated[str, typer.Option("--ref", help="Cell or range reference")],
    cols: Annotated[int, typer.Option("--cols", help="Column offset")] = 0,
    rows: Annotated[int, typer.Option("--rows", help="Row offset")] = 0,
):
    """Offset a reference; unbounded axes of whole-row/column ranges are left alone.

    Example: `xlshift ref shift --ref B2:C3 --cols 1 --rows 2`
    """
    target = Target(ref=ref)
    try:
        shifted = rel((cols, rows), ref)
    except _RECOVERABLE as e:
        _emit_exception("ref.shift", e, target)
        return
    _emit(success_envelope("ref.shift", {"ref": ref, "shifted": shifted}, target=target))


# ---------------------------------------------------------------------------
# xlshift row / col
# ---------------------------------------------------------------------------
@row_app.command("insert")
def row_insert(
    file: FilePath,
    sheet: SheetName,
    row: Annotated[int, typer.Option("--row", help="1-based row to open")],
    dry_run: DryRun = False,
    backup: Backup = False,
):
    """Insert a blank row; that row and everything below move down one. Mutating."""
    try:
        idx = _row_index(row)
    except ValueError as e:
        _emit_exception("row.insert", e, Target(file=file, sheet=sheet))
    _run_mutation("row.insert", file, sheet, f"{row}:{row}",
                  lambda s: insert_row(s, idx), dry_run=dry_run, backup=backup)


@row_app.command("delete")
def row_delete(
    file: FilePath,
    sheet: SheetName,
    row: Annotated[int, typer.Option("--row", help="1-based row to remove")],
    dry_run: DryRun = False,
    backup: Backup = False,
):
    """Delete a row; its cells are dropped and everything below moves up one. Mutating."""
    try:
        idx = _row_index(row)
    except ValueError as e:
        _emit_exception("row.delete", e, Target(file=file, sheet=sheet))
    _run_mutation("row.delete", file, sheet, f"{row}:{row}",
                  lambda s: delete_row(s, idx), dry_run=dry_run, backup=backup)


@col_app.command("insert")
def col_insert(
    file: FilePath,
    sheet: SheetName,
    col: Annotated[str, typer.Option("--col", help="Column letter to open (e.g. C)")],
    dry_run: DryRun = False,
    backup: Backup = False,
):
    """Insert a blank column; that column and everything after it move right one. Mutating."""
    try:
        idx = _col_index(col)
    except _RECOVERABLE as e:
        _emit_exception("col.insert", e, Target(file=file, sheet=sheet, ref=col))
        return
    _run_mutation("col.insert", file, sheet, f"{col.upper()}:{col.upper()}",
                  lambda s: insert_column(s, idx), dry_run=dry_run, backup=backup)


@col_app.command("delete")
def col_delete(
    file: FilePath,
    sheet: SheetName,
    col: Annotated[str, typer.Option("--col", help="Column letter to remove (e.g. B)")],
    dry_run: DryRun = False,
    backup: Backup = False,
):
    """Delete a column; its cells are dropped and everything after it moves left one. Mutating."""
    try:
        idx = _col_index(col)
    except _RECOVERABLE as e:
        _emit_exception("col.delete", e, Target(file=file, sheet=sheet, ref=col))
        return
    _run_mutation("col.delete", file, sheet, f"{col.upper()}:{col.upper()}",
                  lambda s: delete_column(s, idx), dry_run=dry_run, backup=backup)


# ---------------------------------------------------------------------------
# xlshift cell
# ---------------------------------------------------------------------------
@cell_app.command("insert")
def cell_insert(
    file: FilePath,
    sheet: SheetName,
    ref: Annotated[str, typer.Option("--ref", help="Cell to open (e.g. B2)")],
    shift: Annotated[str, typer.Option("--shift", help="'down' (shift column) or 'end' (shift row)")] = "down",
    dry_run: DryRun = False,
    backup: Backup = False,
):
    """Insert a blank cell, shifting the rest of its column down or its row right. Mutating."""
    if shift not in ("down", "end"):
        _emit(error_envelope("cell.insert", "ERR_INVALID_ARGUMENT", "--shift must be 'down' or 'end'",
                             target=Target(file=file, sheet=sheet, ref=ref)))
        return
    edit = insert_cell_shift_down if shift == "down" else insert_cell_shift_end
    _run_mutation("cell.insert", file, sheet, ref,
                  lambda s: edit(s, ref), dry_run=dry_run, backup=backup)


@cell_app.command("move")
def cell_move(
    file: FilePath,
    sheet: SheetName,
    source: Annotated[str, typer.Option("--from", help="Cell to move")],
    dest: Annotated[str, typer.Option("--to", help="Destination cell")],
    no_overwrite: Annotated[bool, typer.Option("--no-overwrite", help="Fail instead of replacing a populated destination")] = False,
    dry_run: DryRun = False,
    backup: Backup = False,
):
    """Move one cell's value; the source is left blank. Formulas are not rewritten. Mutating."""
    _run_mutation("cell.move", file, sheet, f"{source}->{dest}",
                  lambda s: move_cell(s, dest, source, overwrite=not no_overwrite),
                  dry_run=dry_run, backup=backup)


@cell_app.command("clear")
def cell_clear(
    file: FilePath,
    sheet: SheetName,
    ref: Annotated[str, typer.Option("--ref", help="Cell to clear")],
    dry_run: DryRun = False,
    backup: Backup = False,
):
    """Clear one cell without shifting anything. Clearing a blank cell is a no-op. Mutating."""
    _run_mutation("cell.clear", file, sheet, ref,
                  lambda s: clear_cell(s, ref), dry_run=dry_run, backup=backup)


@cell_app.command("get")
def cell_get(
    file: FilePath,
    sheet: SheetName,
    ref: Annotated[str, typer.Option("--ref", help="Cell to read")],
):
    """Read one cell's tagged value. A blank cell is an ERR_MISSING_CELL error."""
    target = Target(file=file, sheet=sheet, ref=ref)
    with Timer() as t:
        model = _read_sheet("cell.get", file, sheet, target)
        try:
            cell = get_cell(model, ref)
        except _RECOVERABLE as e:
            _emit_exception("cell.get", e, target)
            return
    result = {"ref": ref, "type": cell.type.value, "value": cell.value}
    _emit(success_envelope("cell.get", result, target=target, duration_ms=t.elapsed_ms))


# ---------------------------------------------------------------------------
# xlshift range
# ---------------------------------------------------------------------------
def _containment(command: str, file: str, sheet: str, parent: str, child: str, populated_check, geometric_check):
    target = Target(file=file, sheet=sheet, ref=f"{parent} / {child}")
    with Timer() as t:
        model = _read_sheet(command, file, sheet, target)
        try:
            result = ContainmentResult(
                parent=parent,
                child=child,
                populated=populated_check(model, parent, child),
                geometric=geometric_check(parent, child),
                child_cells=len(get_range_cell_refs(model, child)),
            )
        except _RECOVERABLE as e:
            _emit_exception(command, e, target)
            return
    warnings = []
    if result.child_cells == 0:
        warnings.append(WarningDetail(
            code="WARN_EMPTY_CHILD_RANGE",
            message=f"{child} has no populated cells; the populated answer is vacuous",
        ))
    _emit(success_envelope(command, result.model_dump(), target=target,
                           warnings=warnings, duration_ms=t.elapsed_ms))


@range_app.command("contains")
def range_contains(
    file: FilePath,
    sheet: SheetName,
    parent: Annotated[str, typer.Option("--parent", help="Enclosing range")],
    child: Annotated[str, typer.Option("--child", help="Range tested for containment")],
):
    """Does every populated cell of the child range lie inside the parent range?"""
    _containment("range.contains", file, sheet, parent, child, contains, range_within)


@range_app.command("overlaps")
def range_overlaps(
    file: FilePath,
    sheet: SheetName,
    parent: Annotated[str, typer.Option("--parent", help="Reference range")],
    child: Annotated[str, typer.Option("--child", help="Range tested for overlap")],
):
    """Does any populated cell of the child range lie inside the parent range?"""
    _containment("range.overlaps", file, sheet, parent, child, overlaps, ranges_intersect)


@range_app.command("copy")
def range_copy(
    file: FilePath,
    sheet: SheetName,
    ref: Annotated[str, typer.Option("--ref", help="Source range")],
    direction: Annotated[str, typer.Option("--direction", help="'down' or 'end'")] = "down",
    dry_run: DryRun = False,
    backup: Backup = False,
):
    """Paste a range into the same-sized block directly below it or after it. Mutating."""
    if direction not in ("down", "end"):
        _emit(error_envelope("range.copy", "ERR_INVALID_ARGUMENT", "--direction must be 'down' or 'end'",
                             target=Target(file=file, sheet=sheet, ref=ref)))
        return
    edit = copy_range_down if direction == "down" else copy_range_end
    _run_mutation("range.copy", file, sheet, ref,
                  lambda s: edit(s, ref), dry_run=dry_run, backup=backup)


# ---------------------------------------------------------------------------
# Entrypoint (for `python -m xlshift`)
# ---------------------------------------------------------------------------
def main() -> None:
    try:
        app()
    except SystemExit:
        raise
    except Exception as exc:
        # Unhandled exceptions still produce a JSON envelope on stdout.
        print_response(error_envelope("unknown", "ERR_INTERNAL", str(exc)))
        sys.exit(90)


if __name__ == "__main__":
    main()
