"""AppVeyor REST client: build lookup, job logs and translation stats."""

from __future__ import annotations

import logging
import re
from typing import Optional

import requests

from deploylinks_core.translations import TranslationStat, extract_translation_stats

logger = logging.getLogger(__name__)

DEFAULT_APPVEYOR_URL = "https://ci.appveyor.com/api"

_BUILD_ID_RE = re.compile(r"/builds/(\d+)")


def build_id_from_target_url(target_url: str | None) -> Optional[str]:
    """Pull the numeric build id out of a commit status target URL."""
    match = _BUILD_ID_RE.search(target_url or "")
    return match.group(1) if match else None


class AppVeyorClient:
    """Thin wrapper over the public AppVeyor project API.

    HTTP and JSON errors are not caught here; they propagate to whoever
    runs the handler.
    """

    def __init__(self, base_url: str = DEFAULT_APPVEYOR_URL, session: requests.Session | None = None):
        self._base_url = base_url.rstrip("/")
        self._session = session or requests.Session()

    def get_build(self, owner: str, repo: str, build_id: str) -> dict:
        # AppVeyor project slugs are lowercase even when the GitHub repo is not.
        url = f"{self._base_url}/projects/{owner}/{repo.lower()}/builds/{build_id}"
        response = self._session.get(url)
        response.raise_for_status()
        return response.json()["build"]

    def get_pull_request_number(self, owner: str, repo: str, build_id: str) -> Optional[int]:
        """Return the PR a build ran for, or None for branch builds."""
        pr_id = self.get_build(owner, repo, build_id).get("pullRequestId")
        if pr_id in (None, ""):
            return None
        return int(pr_id)

    def get_passed_jobs(self, owner: str, repo: str, build_id: str) -> list[dict]:
        jobs = self.get_build(owner, repo, build_id).get("jobs") or []
        return [job for job in jobs if job.get("status") == "success"]

    def get_job_log(self, job_id: str) -> str:
        response = self._session.get(f"{self._base_url}/buildjobs/{job_id}/log")
        response.raise_for_status()
        return response.text

    def get_translation_stats(self, owner: str, repo: str, build_id: str) -> dict[str, TranslationStat]:
        """Stats from the log of the first successful job; {} when no job passed."""
        passed_jobs = self.get_passed_jobs(owner, repo, build_id)
        if not passed_jobs:
            logger.info("Build %s has no successful jobs", build_id)
            return {}
        log = self.get_job_log(passed_jobs[0]["jobId"])
        return extract_translation_stats(log)
