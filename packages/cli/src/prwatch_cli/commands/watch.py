"""watch command — live PR dashboard until every check has finished."""

from __future__ import annotations

import time

import click
from rich.console import Console
from rich.markup import escape

from prwatch_core.gh.base import BasePrSource, PrSourceError
from prwatch_core.models import StatusRecord
from prwatch_core.scheduler import ExitStatus, run_until_complete
from prwatch_core.utils.git import GitError, first_commit_message, main_branch_name, merge_base, push_branch


def format_elapsed(seconds: float) -> str:
    minutes = seconds / 60
    if minutes < 1:
        return f"{int(seconds)}s"
    return f"{minutes:.1f} min"


def create_pull_request(source: BasePrSource, branch: str, config: dict, console: Console) -> StatusRecord:
    """Push ``branch`` and open a PR titled after its first commit."""
    base = main_branch_name()
    title, body = first_commit_message(merge_base(base, branch), head=branch)
    push_branch(branch, config["remote"])

    kind = "draft pull request" if config["draft"] else "pull request"
    console.print(f"[cyan]Creating {kind} {escape(branch)} → {base}: {escape(title)}[/cyan]")
    return source.create(branch, title, body, base=base, draft=config["draft"])


@click.command("watch")
@click.option("--branch", default=None, help="Branch whose PR to watch. Defaults to the current branch.")
@click.option(
    "--draft/--no-draft",
    default=None,
    help="Create the PR as a draft when it does not exist yet. Overrides config file.",
)
@click.option("--no-create", is_flag=True, help="Don't create the PR if it doesn't exist yet.")
@click.option("--open", "open_browser", is_flag=True, help="Also open the PR in a browser.")
@click.option(
    "--interval",
    type=float,
    default=None,
    help="Minimum seconds between refreshes of the PR. Overrides config file.",
)
@click.pass_context
def watch_cmd(
    ctx,
    branch: str | None,
    draft: bool | None,
    no_create: bool,
    open_browser: bool,
    interval: float | None,
):
    """Show a live view of the branch's pull request until its checks finish.

    Creates the pull request first (pushing the branch) unless it already
    exists or --no-create is given.
    """
    from prwatch_cli.cli import build_source, resolve_branch

    config = dict(ctx.obj["config"])
    console: Console = ctx.obj["console"]
    for key, value in {"draft": draft, "refresh_interval": interval}.items():
        if value is not None:
            config[key] = value
    create = config["create"] and not no_create

    branch = resolve_branch(branch)
    source = build_source(config)

    initial = None
    if create or open_browser:
        try:
            initial = source.find(branch)
            if initial is None and create:
                initial = create_pull_request(source, branch, config, console)
        except (PrSourceError, GitError) as e:
            raise click.ClickException(str(e))
        if initial is not None and open_browser:
            click.launch(initial.url)

    started = time.monotonic()
    status = run_until_complete(
        branch,
        source,
        console=console,
        tick_interval=float(config["tick_interval"]),
        initial=initial,
    )
    if status is not ExitStatus.SUCCESS:
        ctx.exit(int(status))

    console.print(f":sparkles: Done in {format_elapsed(time.monotonic() - started)}")
