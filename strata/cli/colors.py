"""
Strata CLI — styled output primitives built on Click.

All output degrades gracefully on non-colour terminals (click.style
handles NO_COLOR / TERM=dumb).
"""

from __future__ import annotations

from typing import Sequence

import click


_CHECK = "✓"
_CROSS = "✗"
_L_H = "─"


def success(message: str) -> None:
    """Print success message in green."""
    click.echo(click.style(message, fg="green"))


def error(message: str) -> None:
    """Print error message in red (stderr)."""
    click.echo(click.style(message, fg="red"), err=True)


def info(message: str) -> None:
    """Print info message in cyan."""
    click.echo(click.style(message, fg="cyan"))


def table(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    *,
    header_fg: str = "cyan",
    indent: int = 2,
) -> None:
    """
    Print a minimal aligned table.

        VERB    PATH               OPERATION
        ─────── ────────────────── ─────────────────
        GET     /api/users         UsersController.index
    """
    prefix = " " * indent
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row[: len(headers)]):
            widths[i] = max(widths[i], len(str(cell)))
    widths = [w + 2 for w in widths]

    hdr = "".join(h.ljust(widths[i]) for i, h in enumerate(headers))
    click.echo(f"{prefix}{click.style(hdr.rstrip(), fg=header_fg, bold=True)}")
    click.echo(f"{prefix}{click.style(' '.join(_L_H * (w - 1) for w in widths), dim=True)}")

    for row in rows:
        line = "".join(str(cell).ljust(widths[i]) for i, cell in enumerate(row[: len(headers)]))
        click.echo(f"{prefix}{line.rstrip()}")
