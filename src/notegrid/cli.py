"""Command-line interface for notegrid blobs stored as JSON files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click

from notegrid import __version__
from notegrid.config import load_config
from notegrid.formulas.refs import parse_cell_ref
from notegrid.grid import Grid
from notegrid.logging.events import set_log_dir
from notegrid.session import GridSession


@click.group()
@click.version_option(version=__version__, prog_name="notegrid")
@click.option(
    "--project",
    "project_dir",
    default=".",
    type=click.Path(exists=True, file_okay=False),
    help="Directory holding notegrid.yaml.",
)
@click.pass_context
def main(ctx: click.Context, project_dir: str) -> None:
    """notegrid -- evaluate formula grids embedded in notes."""
    try:
        config = load_config(Path(project_dir))
    except (ValueError, OSError) as e:
        raise click.ClickException(f"Invalid configuration: {e}")
    if config["log_dir"] is not None:
        set_log_dir(config["log_dir"], fsync=bool(config["logging_fsync"]))
    ctx.obj = config


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------


def _load_session(ctx: click.Context, blob_path: str) -> GridSession:
    path = Path(blob_path)
    blob = path.read_text() if path.exists() else None
    config = ctx.obj
    return GridSession(
        blob,
        default_rows=config["default_rows"],
        default_cols=config["default_cols"],
    )


def _save(blob_path: str, blob: dict[str, Any]) -> None:
    Path(blob_path).write_text(json.dumps(blob, indent=2) + "\n")


def _parse_cell(addr: str) -> tuple[int, int]:
    ref = parse_cell_ref(addr)
    if ref is None:
        raise click.ClickException(f"Invalid cell address: {addr!r}")
    return ref.row, ref.col


def _echo_grid(rows: list[list[str]]) -> None:
    widths = [max(len(row[c]) for row in rows) for c in range(len(rows[0]))]
    for row in rows:
        click.echo("  ".join(v.ljust(w) for v, w in zip(row, widths)).rstrip())


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@main.command()
@click.argument("blob_path", type=click.Path(dir_okay=False))
@click.option("--rows", type=click.IntRange(min=1), default=None, help="Number of rows.")
@click.option("--cols", type=click.IntRange(min=1), default=None, help="Number of columns.")
@click.option("--force", is_flag=True, help="Overwrite an existing file.")
@click.pass_context
def new(ctx: click.Context, blob_path: str, rows: int | None, cols: int | None, force: bool) -> None:
    """Write an empty grid to BLOB_PATH."""
    if Path(blob_path).exists() and not force:
        raise click.ClickException(f"{blob_path} already exists (use --force to overwrite)")
    grid = Grid.empty(rows or ctx.obj["default_rows"], cols or ctx.obj["default_cols"])
    _save(blob_path, grid.to_blob())
    click.echo(f"Created {grid.n_rows}x{grid.n_cols} grid at {blob_path}")


@main.command()
@click.argument("blob_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--raw", is_flag=True, help="Show raw cell text instead of values.")
@click.pass_context
def show(ctx: click.Context, blob_path: str, raw: bool) -> None:
    """Print the grid in BLOB_PATH."""
    session = _load_session(ctx, blob_path)
    rows = session.grid.values if raw else session.display_grid()
    _echo_grid(rows)


@main.command()
@click.argument("blob_path", type=click.Path(exists=True, dir_okay=False))
@click.argument("cell")
@click.pass_context
def get(ctx: click.Context, blob_path: str, cell: str) -> None:
    """Print the display value of CELL (e.g. B3)."""
    row, col = _parse_cell(cell)
    session = _load_session(ctx, blob_path)
    click.echo(session.get_display_value(row, col))


@main.command("set")
@click.argument("blob_path", type=click.Path(dir_okay=False))
@click.argument("cell")
@click.argument("value")
@click.pass_context
def set_cell(ctx: click.Context, blob_path: str, cell: str, value: str) -> None:
    """Set CELL to VALUE (a literal or a formula starting with '=')."""
    row, col = _parse_cell(cell)
    session = _load_session(ctx, blob_path)
    if session.grid.get(row, col) is None:
        raise click.ClickException(
            f"{cell.upper()} is outside the {session.grid.n_rows}x{session.grid.n_cols} grid"
        )
    session.set_cell(row, col, value)
    _save(blob_path, session.to_blob())
    click.echo(f"{cell.upper()} = {session.get_display_value(row, col)}")


def _structure_command(name: str, method: str, help_text: str) -> None:
    @main.command(name, help=help_text)
    @click.argument("blob_path", type=click.Path(dir_okay=False))
    @click.pass_context
    def _command(ctx: click.Context, blob_path: str) -> None:
        session = _load_session(ctx, blob_path)
        changed = getattr(session, method)()
        _save(blob_path, session.to_blob())
        grid = session.grid
        suffix = "" if changed else " (unchanged)"
        click.echo(f"{grid.n_rows}x{grid.n_cols}{suffix}")


_structure_command("add-row", "add_row", "Append an empty row.")
_structure_command("remove-row", "remove_row", "Remove the last row.")
_structure_command("add-col", "add_column", "Append an empty column.")
_structure_command("remove-col", "remove_column", "Remove the last column.")


@main.command()
@click.argument("blob_path", type=click.Path(exists=True, dir_okay=False))
@click.argument("out_path", type=click.Path(dir_okay=False))
@click.option("--raw", is_flag=True, help="Export raw cell text instead of values.")
@click.pass_context
def export(ctx: click.Context, blob_path: str, out_path: str, raw: bool) -> None:
    """Export the grid in BLOB_PATH to a CSV file."""
    session = _load_session(ctx, blob_path)
    df = session.grid.to_frame(display=not raw)
    df.write_csv(out_path)
    click.echo(f"Wrote {df.height} rows to {out_path}")


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@main.command("events")
@click.option("--level", default=None, type=click.Choice(["info", "warning"]), help="Filter by level.")
@click.option("--type", "event_type", default=None, help="Filter by event type.")
@click.option("--limit", default=100, type=int, help="Maximum events to show.")
@click.pass_context
def events_cmd(ctx: click.Context, level: str | None, event_type: str | None, limit: int) -> None:
    """Show the structured event log configured in notegrid.yaml."""
    from notegrid.logging.sink import EventSink

    log_dir = ctx.obj["log_dir"]
    if log_dir is None:
        raise click.ClickException("No log_dir configured in notegrid.yaml")
    events = EventSink(log_dir).read_events(level=level, event_type=event_type, limit=limit)

    if not events:
        click.echo("No events found.")
        return

    for evt in events:
        ts = evt.get("ts", "")
        lvl = evt.get("level", "").upper()
        etype = evt.get("event_type", "")
        msg = evt.get("message", "")
        err = evt.get("error_code")
        line = f"[{ts}] {lvl:7s} {etype}: {msg}"
        if err:
            line += f"  ({err})"
        click.echo(line)


if __name__ == "__main__":
    main()
