"""serve command — run the webhook server."""

from __future__ import annotations

import logging

import click
from rich.console import Console

console = Console()


@click.command("serve")
@click.option("--host", default=None, help="Interface to bind. Overrides config file.")
@click.option("--port", type=int, default=None, help="Port to listen on. Overrides config file.")
@click.pass_context
def serve_cmd(ctx, host: str | None, port: int | None):
    """Run the webhook server.

    \b
    Required environment variables:
      GITHUB_APP_ID                  GitHub App id
      GITHUB_APP_PRIVATE_KEY         PEM private key (or GITHUB_APP_PRIVATE_KEY_PATH)
      WEBHOOK_SECRET                 secret configured on the App's webhook
    """
    from deploylinks_core.config import load_config
    from deploylinks_server.app import create_app

    config = load_config(ctx.obj["config_path"])
    if host is not None:
        config["host"] = host
    if port is not None:
        config["port"] = port

    if not config.get("github_app_id") or not config.get("github_app_private_key"):
        raise click.UsageError("GITHUB_APP_ID and GITHUB_APP_PRIVATE_KEY (or GITHUB_APP_PRIVATE_KEY_PATH) must be set.")
    if not config.get("webhook_secret"):
        console.print("[yellow]WEBHOOK_SECRET is not set: every webhook delivery will be rejected.[/yellow]")

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    app = create_app(config)
    console.print(f"Listening on [bold]{config['host']}:{config['port']}[/bold]")
    app.run(host=config["host"], port=config["port"], debug=False)
