import os
from pathlib import Path
from typing import Optional

import yaml

from deploylinks_core.ci.appveyor import DEFAULT_APPVEYOR_URL
from deploylinks_core.comment import (
    DEFAULT_BOT_LOGIN,
    DEFAULT_PROJECT_NAME,
    DEFAULT_TRANSLATION_PR_TITLE,
)
from deploylinks_core.snapshots import DEFAULT_SNAPSHOTS_URL

DEFAULT_CONFIG: dict = {
    "bot_login": DEFAULT_BOT_LOGIN,
    "project_name": DEFAULT_PROJECT_NAME,
    "translation_pr_title": DEFAULT_TRANSLATION_PR_TITLE,
    "refresh_command": "/refresh links",
    "appveyor_url": DEFAULT_APPVEYOR_URL,
    "snapshots_url": DEFAULT_SNAPSHOTS_URL,
    "webhook_path": "/",
    "host": "0.0.0.0",
    "port": 3000,
}


def load_config(config_path: str = ".deploylinks.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .deploylinks.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Credentials only ever come from the environment
    config["github_app_id"] = os.environ.get("GITHUB_APP_ID")
    config["github_app_private_key"] = load_private_key()
    config["webhook_secret"] = os.environ.get("WEBHOOK_SECRET")
    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config


def load_private_key() -> Optional[str]:
    """
    Return the GitHub App private key.

    GITHUB_APP_PRIVATE_KEY holds the PEM itself and wins over
    GITHUB_APP_PRIVATE_KEY_PATH, which points at a PEM file.
    """
    key = os.environ.get("GITHUB_APP_PRIVATE_KEY")
    if key:
        return key

    key_path = os.environ.get("GITHUB_APP_PRIVATE_KEY_PATH")
    if key_path:
        p = Path(key_path)
        if not p.exists():
            raise FileNotFoundError(f"GitHub App private key not found: {key_path}")
        return p.read_text()

    return None
