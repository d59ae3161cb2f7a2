"""rd-compare - side-by-side annotated comparison of redump captures."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import TextIO

import click

from rd_compare.export import WordTable
from rd_compare.render import HtmlRenderer
from rd_compare.session import CompareSession


def render_session(session: CompareSession, out: TextIO, table: WordTable | None = None) -> int:
    """Render every row of `session` to `out`. Returns the number of rows."""
    renderer = HtmlRenderer(out)
    renderer.begin()
    n = 0
    for row in session.rows():
        renderer.row(row)
        if table is not None:
            table.add(row)
        n += 1
    renderer.end()
    return n


def compare_dumps(
    dumps: list[Path],
    output: Path | None = None,
    table_path: Path | None = None,
) -> int:
    """Compare `dumps`, writing HTML to `output` or stdout. Returns the number of rows.

    Inputs are opened before the report file, so an unreadable dump leaves
    nothing behind.
    """
    with CompareSession(dumps) as session:
        table = WordTable([ctx.name for ctx in session.contexts]) if table_path else None
        if output is not None:
            with open(output, "w", encoding="utf-8") as f:
                n = render_session(session, f, table)
        else:
            n = render_session(session, sys.stdout, table)

    if table is not None and not table.write(table_path):
        click.echo(f"No cmdstream words; {table_path} not written", err=True)
    return n


@click.command()
@click.argument("dumps", nargs=-1, required=True, type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Write the HTML report here instead of stdout",
)
@click.option(
    "--table",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also write per-word classifications as a parquet table",
)
def main(dumps: tuple[Path, ...], output: Path | None, table: Path | None) -> None:
    """Compare two or more redump captures record by record."""
    try:
        compare_dumps(list(dumps), output, table)
    except Exception as e:
        # Fail closed with a single-line reason, no stack trace.
        sys.stdout.flush()
        click.echo(f"FATAL: {e}", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
