from __future__ import annotations

import typer

from breezy import __version__
from breezy.cli.context import CLIContext, build_context, exit_with
from breezy.core.errors import exit_code_for_kind
from breezy.core.inputs import RunSettings, SettingsOverrides
from breezy.core.result import Err
from breezy.forge.github import ForgeClient, GitHubClient
from breezy.forge.http import RealHttpClient
from breezy.forge.timeouts import API_TIMEOUT_SECONDS
from breezy.release.reconcile import reconcile


app = typer.Typer(
    add_completion=False,
    rich_markup_mode="rich",
    help="Keep one rolling draft release per branch up to date.",
)


def make_forge(settings: RunSettings) -> ForgeClient:
    return GitHubClient(
        RealHttpClient(timeout=API_TIMEOUT_SECONDS),
        token=settings.token,
        owner=settings.owner,
        repo=settings.repo,
    )


def run_reconcile(ctx: CLIContext) -> None:
    result = reconcile(
        ctx.settings,
        ctx.config,
        make_forge(ctx.settings),
        ctx.console,
        repo_root=ctx.repo_root,
    )
    if isinstance(result, Err):
        err = result.error
        exit_with(ctx.console, err.message, code=exit_code_for_kind(err.kind), hint=err.hint)


@app.command()
def run(
    directory: str | None = typer.Option(
        None, "--directory", help="Sub-project directory (relative) for monorepos."
    ),
    tag_prefix: str | None = typer.Option(None, "--tag-prefix", help="Tag prefix (default: v)."),
    config_file: str | None = typer.Option(
        None, "--config-file", help="Path to breezy.yml (default: auto-discovery)."
    ),
    language: str | None = typer.Option(
        None, "--language", help="Archetypes to try in order, e.g. 'rust,node'."
    ),
    token: str | None = typer.Option(None, "--token", help="GitHub token (default: GITHUB_TOKEN)."),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Report planned changes without modifying releases."
    ),
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    """Reconcile the draft release for the current branch."""
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    ctx = build_context(
        SettingsOverrides(
            directory=directory,
            tag_prefix=tag_prefix,
            config_file=config_file,
            language=language,
            token=token,
            dry_run=dry_run,
        )
    )
    run_reconcile(ctx)


def main() -> None:
    app()
