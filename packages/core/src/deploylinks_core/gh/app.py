"""GitHub App authentication.

The app authenticates as itself (JWT signed with its private key) to find
installations, then mints an installation-scoped client per repository.
One GithubApp is created per process and shared by every request.
"""

from __future__ import annotations

import logging

from github import Auth, Github, GithubIntegration

logger = logging.getLogger(__name__)


class GithubApp:
    def __init__(self, app_id: int | str, private_key: str):
        self._integration = GithubIntegration(auth=Auth.AppAuth(int(app_id), private_key))

    def get_installation_id(self, owner: str, repo: str) -> int:
        """Installation id for owner/repo.

        Raises github.UnknownObjectException when the app is not installed
        there and github.GithubException for anything else GitHub rejects.
        """
        return self._integration.get_repo_installation(owner, repo).id

    def installation_client(self, installation_id: int) -> Github:
        logger.debug("Minting client for installation %s", installation_id)
        return self._integration.get_github_for_installation(installation_id)
