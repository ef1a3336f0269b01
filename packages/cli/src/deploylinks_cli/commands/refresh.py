"""refresh command — update the deployment links of one pull request."""

from __future__ import annotations

import logging
import subprocess
from typing import Optional

import click
from github import Github
from rich.console import Console

from deploylinks_core.ci.appveyor import AppVeyorClient
from deploylinks_core.gh.issues import split_repo_name
from deploylinks_core.handlers import Capabilities, execute, refresh_links
from deploylinks_core.snapshots import SnapshotClient
from deploylinks_store.dryrun import DryRunCommentStore
from deploylinks_store.github import GithubCommentStore

console = Console()
logger = logging.getLogger(__name__)


def _token_from_gh_cli() -> Optional[str]:
    """Token of the current `gh auth login` session, or None."""
    try:
        result = subprocess.run(["gh", "auth", "token"], capture_output=True, text=True, timeout=5, check=True)
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("No token from gh CLI: %s", e)
        return None
    return result.stdout.strip() or None


@click.command("refresh")
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option("--pr", "pr_number", type=int, required=True, help="Pull request number.")
@click.option(
    "--dry-run",
    "-n",
    "dry_run",
    is_flag=True,
    help="Print the updated comment instead of saving it.",
)
@click.pass_context
def refresh_cmd(ctx, repo: str, pr_number: int, dry_run: bool):
    """Point the deployment comment of a PR at its newest snapshots.

    The same thing the `/refresh links` PR comment does, run with your own
    GitHub credentials (GITHUB_TOKEN or the gh CLI session).
    """
    from deploylinks_core.config import load_config

    config = load_config(ctx.obj["config_path"])
    try:
        owner, name = split_repo_name(repo)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--repo")

    token = config.get("github_token") or _token_from_gh_cli()
    if not token:
        raise click.UsageError("No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.")

    store = GithubCommentStore(Github(token))
    if dry_run:
        store = DryRunCommentStore(store)

    caps = Capabilities(
        comments=store,
        ci=AppVeyorClient(config["appveyor_url"]),
        snapshots=SnapshotClient(config["snapshots_url"]),
        config=config,
    )
    intents = refresh_links(owner, name, pr_number, caps)
    if not intents:
        console.print(f"[yellow]Nothing to update on {repo}#{pr_number}.[/yellow]")
        return

    execute(intents, store)
    if dry_run:
        for _, _, _, comment_id, body in store.updated:
            console.print(f"[bold]Comment {comment_id} would become:[/bold]\n")
            console.print(body, markup=False, highlight=False, emoji=False)
    else:
        console.print(f"[green]Updated deployment links on {repo}#{pr_number}.[/green]")
