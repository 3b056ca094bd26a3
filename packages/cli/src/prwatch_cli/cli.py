"""CLI entry point for prwatch.

Commands:
  watch  — live dashboard for the current branch's PR until its checks finish
  show   — print the PR dashboard once and exit
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from prwatch_cli.commands.show import show_cmd
from prwatch_cli.commands.watch import watch_cmd


def _build_console(color: str) -> Console:
    if color == "always":
        return Console(force_terminal=True)
    if color == "never":
        return Console(no_color=True, highlight=False)
    return Console()


def configure_logging(console: Console, verbose: bool = False) -> None:
    """Send log records through the dashboard's console so they print above the live rows."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False, show_time=verbose)],
        force=True,
    )


def resolve_branch(branch: str | None) -> str:
    """Return ``branch`` or, when not given, the current git branch."""
    if branch:
        return branch
    from prwatch_core.utils.git import GitError, current_branch_name

    try:
        return current_branch_name()
    except GitError as e:
        raise click.UsageError(f"Could not determine the current branch: {e}")


def build_source(config: dict):
    """Instantiate the configured PR source from .prwatch.yml settings.

    Source selection:
      source: gh  → GhCliSource     (default; uses the gh CLI session)
      source: api → GithubApiSource (requires a GitHub token; repo from config or git remote)
    """
    interval = float(config["refresh_interval"])

    if config["source"] == "api":
        from prwatch_core.gh.pull_request import GithubApiSource
        from prwatch_core.utils.git import GitError, remote_repo_name

        token = config.get("github_token")
        if not token:
            raise click.UsageError("No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.")
        repo = config.get("repo")
        if not repo:
            try:
                repo = remote_repo_name(config["remote"])
            except GitError as e:
                raise click.UsageError(f"{e} Set 'repo: owner/name' in .prwatch.yml.")
        return GithubApiSource(repo, token=token, min_interval=interval)

    from prwatch_core.gh.gh_cli import GhCliSource

    return GhCliSource(min_interval=interval)


@click.group()
@click.version_option(
    version=importlib.metadata.version("prwatch"),
    prog_name="prwatch",
)
@click.option(
    "--config",
    "config_path",
    default=".prwatch.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRWATCH_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
@click.option(
    "--color",
    type=click.Choice(["auto", "always", "never"]),
    default="auto",
    show_default=True,
    help="Colorize the output.",
)
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool, color: str):
    """Watch the pull request for the current git branch until its checks finish."""
    from prwatch_core.config import load_config
    from prwatch_cli.auth import gh_session_token

    ctx.ensure_object(dict)

    console = _build_console(color)
    configure_logging(console, verbose)

    try:
        config = load_config(config_path)
    except ValueError as e:
        raise click.UsageError(str(e))

    # GITHUB_TOKEN comes from load_config; otherwise borrow the gh session for the api source.
    if config["source"] == "api" and not config.get("github_token"):
        config["github_token"] = gh_session_token()

    ctx.obj["config"] = config
    ctx.obj["console"] = console


main.add_command(watch_cmd)
main.add_command(show_cmd)
