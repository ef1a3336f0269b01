"""Client for the snapshot hosting service (make.mudlet.org/snapshots)."""

from __future__ import annotations

import logging

import requests

from deploylinks_core.links import ArtifactLink, parse_artifact_links, rank_latest_links

logger = logging.getLogger(__name__)

DEFAULT_SNAPSHOTS_URL = "https://make.mudlet.org/snapshots"


class SnapshotClient:
    def __init__(self, base_url: str = DEFAULT_SNAPSHOTS_URL, session: requests.Session | None = None):
        self._base_url = base_url.rstrip("/")
        self._session = session or requests.Session()

    def get_all_links(self, pr_number: int) -> list[ArtifactLink]:
        """Every artifact uploaded for the PR, unranked.

        The service answers with an error object instead of a list when it
        knows nothing about the PR; that is treated as no links.
        """
        response = self._session.get(f"{self._base_url}/json.php", params={"prid": pr_number})
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            logger.info("Unexpected snapshot payload for PR #%s: %r", pr_number, payload)
            return []
        entries = payload.get("data")
        if not isinstance(entries, list):
            logger.info("No snapshot list for PR #%s", pr_number)
            return []
        return parse_artifact_links(entries)

    def get_latest_links(self, pr_number: int) -> list[ArtifactLink]:
        return rank_latest_links(self.get_all_links(pr_number))
