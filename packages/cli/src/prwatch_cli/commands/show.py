"""show command — print the PR dashboard once."""

from __future__ import annotations

import click
from rich.console import Console

from prwatch_core.gh.base import PrSourceError
from prwatch_core.registry import render_row
from prwatch_core.rows import build_rows


@click.command("show")
@click.option("--branch", default=None, help="Branch whose PR to show. Defaults to the current branch.")
@click.pass_context
def show_cmd(ctx, branch: str | None):
    """Print the branch's pull request status without watching it."""
    from prwatch_cli.cli import build_source, resolve_branch

    console: Console = ctx.obj["console"]
    branch = resolve_branch(branch)
    source = build_source(ctx.obj["config"])

    try:
        record = source.fetch_initial(branch)
    except PrSourceError as e:
        raise click.ClickException(str(e))

    for spec in build_rows(record):
        console.print(render_row(spec))
