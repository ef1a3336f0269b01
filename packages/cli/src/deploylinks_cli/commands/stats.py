"""stats command — translation stats from a local build log."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from deploylinks_core.translations import extract_translation_stats, render_translation_table

console = Console()


@click.command("stats")
@click.argument("log_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--markdown", is_flag=True, help="Print the markdown section posted on PRs instead of a table.")
def stats_cmd(log_file: str, markdown: bool):
    """Show the translation stats found in a downloaded AppVeyor log.

    Useful for checking what the bot would post for a build without
    touching the pull request.
    """
    with open(log_file, encoding="utf-8", errors="replace") as f:
        stats = extract_translation_stats(f.read())

    if not stats:
        console.print("[yellow]No translation stats found in this log.[/yellow]")
        return

    if markdown:
        console.print(render_translation_table(stats), markup=False, highlight=False, emoji=False, end="")
        return

    table = Table(title="Translation stats", show_header=True)
    table.add_column("Language", style="bold")
    table.add_column("Translated", justify="right")
    table.add_column("Untranslated", justify="right")
    table.add_column("% done", justify="right")
    for language in sorted(stats):
        stat = stats[language]
        style = "green" if stat.percentage == 100 else "yellow" if stat.percentage >= 50 else "red"
        table.add_row(
            language,
            str(stat.translated),
            str(stat.untranslated),
            f"[{style}]{stat.percentage}%[/{style}]",
        )
    console.print(table)
