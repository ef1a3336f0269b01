"""The deployment comment: template, locator and region editor.

The comment body is plain markdown owned by GitHub. Internally it is handled
as a DeploymentComment, an ordered list of regions:

  - TextRegion  — text the bot never touches, kept verbatim
  - LinkLine    — one ``- <platform>: <value>`` line per platform
  - StatsBlock  — ``## Translation stats`` up to the next heading or the end

Text patterns are only used by DeploymentComment.parse(); everything else
works on regions, and str() of an unedited document is the original body.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, Union

from deploylinks_core.links import PLATFORMS
from deploylinks_core.translations import TRANSLATION_STATS_HEADING

DEFAULT_BOT_LOGIN = "add-deployment-links[bot]"
DEFAULT_PROJECT_NAME = "Mudlet"
DEFAULT_TRANSLATION_PR_TITLE = "New Crowdin updates"

PENDING_LINK = "(download pending, check back soon!)"
PENDING_STATS = "calculation pending, check back soon!"

_LINK_LINE_RE = re.compile(r"^- (?P<platform>%s): (?P<value>.+)$" % "|".join(PLATFORMS))


class _Comment(Protocol):
    author: str
    body: str


def comment_template(
    title: str,
    translation_pr_title: str = DEFAULT_TRANSLATION_PR_TITLE,
    project_name: str = DEFAULT_PROJECT_NAME,
) -> str:
    """Body of a freshly opened PR's deployment comment.

    The translation stats section is only added for translation sync PRs,
    recognised by their exact title. Other PRs never get one.
    """
    body = (
        f"Hey there! Thanks for helping {project_name} improve. :star2:\n\n"
        "## Test versions\n\n"
        "You can directly test the changes here:\n"
        f"- linux: {PENDING_LINK}\n"
        f"- osx: {PENDING_LINK}\n"
        f"- windows: {PENDING_LINK}\n\n"
        "No need to install anything - just unzip and run.\n"
        "Let us know if it works well, and if it doesn't, please give details.\n"
    )
    if title == translation_pr_title:
        body += f"\n{TRANSLATION_STATS_HEADING}\n\n{PENDING_STATS}\n\n"
    return body


def find_deployment_comment(comments: Iterable[_Comment], bot_login: str = DEFAULT_BOT_LOGIN):
    """Return the first comment written by the bot, or None."""
    for comment in comments:
        if comment.author == bot_login:
            return comment
    return None


# ---------------------------------------------------------------------------
# Regions
# ---------------------------------------------------------------------------


@dataclass
class TextRegion:
    text: str

    def __str__(self) -> str:
        return self.text


@dataclass
class LinkLine:
    platform: str
    value: str
    newline: str = "\n"

    def __str__(self) -> str:
        return f"- {self.platform}: {self.value}{self.newline}"


@dataclass
class StatsBlock:
    text: str

    def __str__(self) -> str:
        return self.text


Region = Union[TextRegion, LinkLine, StatsBlock]


def _split_lines(body: str) -> list[tuple[str, str]]:
    """Split into (content, line ending) pairs; concatenating them gives body back."""
    pieces = body.split("\n")
    lines = []
    for piece in pieces[:-1]:
        if piece.endswith("\r"):
            lines.append((piece[:-1], "\r\n"))
        else:
            lines.append((piece, "\n"))
    if pieces[-1]:
        lines.append((pieces[-1], ""))
    return lines


class DeploymentComment:
    """Structured view of a deployment comment body."""

    def __init__(self, regions: list[Region]):
        self.regions = regions

    @classmethod
    def parse(cls, body: str) -> DeploymentComment:
        regions: list[Region] = []
        text: list[str] = []
        stats: list[str] | None = None

        def flush_text():
            if text:
                regions.append(TextRegion("".join(text)))
                text.clear()

        for content, newline in _split_lines(body):
            if stats is not None:
                if not content.startswith("#"):
                    stats.append(content + newline)
                    continue
                regions.append(StatsBlock("".join(stats)))
                stats = None

            if content.startswith(TRANSLATION_STATS_HEADING):
                flush_text()
                stats = [content + newline]
                continue

            match = _LINK_LINE_RE.match(content)
            if match:
                flush_text()
                regions.append(LinkLine(match.group("platform"), match.group("value"), newline))
            else:
                text.append(content + newline)

        if stats is not None:
            regions.append(StatsBlock("".join(stats)))
        flush_text()
        return cls(regions)

    def __str__(self) -> str:
        return "".join(str(region) for region in self.regions)

    def set_link(self, platform: str, url: str) -> bool:
        """Point the platform's line at url. Returns False when there is no such line."""
        for region in self.regions:
            if isinstance(region, LinkLine) and region.platform == platform:
                region.value = url
                return True
        return False

    def replace_translation_stats(self, rendered: str) -> bool:
        """Swap the stats block for rendered. Returns False when there is no block."""
        replaced = False
        for i, region in enumerate(self.regions):
            if isinstance(region, StatsBlock):
                self.regions[i] = StatsBlock(rendered)
                replaced = True
        return replaced


def update_link(body: str, platform: str, url: str) -> str:
    document = DeploymentComment.parse(body)
    document.set_link(platform, url)
    return str(document)


def replace_translation_table(body: str, rendered: str) -> str:
    document = DeploymentComment.parse(body)
    document.replace_translation_stats(rendered)
    return str(document)
