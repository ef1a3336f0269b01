"""CLI entry point for deploylinks.

Commands:
  serve    — run the webhook server (GitHub App deliveries and snapshot pingbacks)
  refresh  — update the deployment links on one pull request by hand
  stats    — extract translation stats from a local build log
"""

from __future__ import annotations

import importlib.metadata

import click

from deploylinks_cli.commands.refresh import refresh_cmd
from deploylinks_cli.commands.serve import serve_cmd
from deploylinks_cli.commands.stats import stats_cmd


@click.group()
@click.version_option(
    version=importlib.metadata.version("deploylinks"),
    prog_name="deploylinks",
)
@click.option(
    "--config",
    "config_path",
    default=".deploylinks.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="DEPLOYLINKS_CONFIG",
)
@click.pass_context
def main(ctx: click.Context, config_path: str):
    """Keeps test build links and translation stats on pull requests up to date."""
    ctx.ensure_object(dict)
    # Loaded by the commands that need it: reading credentials can fail.
    ctx.obj["config_path"] = config_path


main.add_command(serve_cmd)
main.add_command(refresh_cmd)
main.add_command(stats_cmd)
