"""Snapshot link ranking.

The snapshot service returns every artifact ever uploaded for a PR. Only
the newest one per platform belongs in the deployment comment.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

PLATFORMS = ("windows", "linux", "osx")

# The snapshot service labels macOS builds "macos"; the comment uses "osx".
_PLATFORM_ALIASES = {"macos": "osx"}


@dataclass(frozen=True)
class ArtifactLink:
    platform: str
    url: str
    # As sent by the snapshot service: a timestamp string or an epoch number.
    creation_time: Any


def normalize_platform(platform: str) -> str:
    return _PLATFORM_ALIASES.get(platform, platform)


def parse_artifact_links(entries) -> list[ArtifactLink]:
    """Convert raw snapshot entries into ArtifactLinks with normalized platforms.

    Entries that are not mappings or lack a platform/url are skipped.
    """
    links = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        platform = entry.get("platform")
        url = entry.get("url")
        if not platform or not url:
            continue
        links.append(
            ArtifactLink(
                platform=normalize_platform(platform),
                url=url,
                creation_time=entry.get("creation_time"),
            )
        )
    return links


def _recency(link: ArtifactLink):
    # Links without a creation time rank below any dated one.
    return (link.creation_time is not None, link.creation_time if link.creation_time is not None else 0)


def rank_latest_links(links) -> list[ArtifactLink]:
    """Return the most recent link per platform, in windows/linux/osx order.

    Anything that is not a list (an error payload from upstream) ranks to an
    empty result. Ties on creation_time keep upstream order.
    """
    if not isinstance(links, list):
        return []

    buckets: dict[str, list[ArtifactLink]] = {platform: [] for platform in PLATFORMS}
    for link in links:
        platform = normalize_platform(link.platform)
        bucket = buckets.get(platform)
        if bucket is not None:
            bucket.append(replace(link, platform=platform))

    latest = []
    for platform in PLATFORMS:
        bucket = sorted(buckets[platform], key=_recency, reverse=True)
        if bucket:
            latest.append(bucket[0])
    return latest
