"""Deployment comment orchestration.

Every trigger is handled by one or more handler functions with the shape
``handler(event, caps) -> list[Intent]``. Handlers read GitHub, AppVeyor and
the snapshot service through the Capabilities bundle and describe the
comment writes they want; execute() performs them. handle() runs the
handlers for an event one after another, executing each handler's intents
before the next one starts, so later handlers see earlier writes.

Missing upstream data (no PR number, no comment, no links, no stats) ends a
handler early with a log line and no intents. Network errors propagate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from deploylinks_core.ci.appveyor import build_id_from_target_url
from deploylinks_core.comment import DeploymentComment, comment_template, find_deployment_comment
from deploylinks_core.config import DEFAULT_CONFIG
from deploylinks_core.events import (
    CreateComment,
    Event,
    Intent,
    IssueCommentEvent,
    PullRequestEvent,
    StatusEvent,
    UpdateComment,
)
from deploylinks_core.translations import render_translation_table

logger = logging.getLogger(__name__)


@dataclass
class Capabilities:
    """What a handler may talk to.

    comments is a comment store (list_comments/create_comment/update_comment),
    ci an AppVeyorClient and snapshots a SnapshotClient.
    """

    comments: object
    ci: object
    snapshots: object
    config: dict = field(default_factory=lambda: dict(DEFAULT_CONFIG))
    log: logging.Logger = logger

    def setting(self, key: str):
        return self.config.get(key, DEFAULT_CONFIG[key])


Handler = Callable[[Event, Capabilities], "list[Intent]"]


def execute(intents: list[Intent], store) -> None:
    for intent in intents:
        if isinstance(intent, CreateComment):
            store.create_comment(intent.owner, intent.repo, intent.number, intent.body)
        elif isinstance(intent, UpdateComment):
            store.update_comment(intent.owner, intent.repo, intent.number, intent.comment_id, intent.body)
        else:
            raise TypeError(f"Unknown intent: {intent!r}")


def _locate_comment(owner: str, repo: str, number: int, caps: Capabilities):
    caps.log.info("Retrieving comments for %s/%s#%s", owner, repo, number)
    comments = caps.comments.list_comments(owner, repo, number)
    return find_deployment_comment(comments, caps.setting("bot_login"))


# ---------------------------------------------------------------------------
# Links
# ---------------------------------------------------------------------------


def refresh_links(owner: str, repo: str, number: Optional[int], caps: Capabilities) -> list[Intent]:
    """Point every platform line at the newest snapshot for the PR."""
    if number is None:
        return []

    caps.log.info("Refreshing deployment links for %s/%s#%s", owner, repo, number)
    links = caps.snapshots.get_latest_links(number)
    if not links:
        caps.log.info("No snapshots for #%s yet, nothing to update", number)
        return []

    comment = _locate_comment(owner, repo, number, caps)
    if comment is None:
        caps.log.info("Couldn't find our comment on #%s, aborting", number)
        return []

    document = DeploymentComment.parse(comment.body)
    for link in links:
        document.set_link(link.platform, link.url)

    body = str(document)
    if body == comment.body:
        caps.log.info("Deployment links on #%s already up to date", number)
        return []
    caps.log.debug("New deployment body:\n%s", body)
    return [UpdateComment(owner, repo, number, comment.id, body)]


# ---------------------------------------------------------------------------
# Triggers
# ---------------------------------------------------------------------------


def on_pull_request(event: PullRequestEvent, caps: Capabilities) -> list[Intent]:
    # Only "opened": edits and pushes to the same PR must not add comments.
    if event.action != "opened":
        return []
    body = comment_template(
        event.title,
        translation_pr_title=caps.setting("translation_pr_title"),
        project_name=caps.setting("project_name"),
    )
    return [CreateComment(event.owner, event.repo, event.number, body)]


def is_relevant_status(context: str) -> bool:
    return "pr" in context or "appveyor" in context


def _pull_request_for_status(event: StatusEvent, caps: Capabilities) -> Optional[int]:
    build_id = build_id_from_target_url(event.target_url)
    if build_id is None:
        caps.log.info("No build id in status target URL %r", event.target_url)
        return None
    return caps.ci.get_pull_request_number(event.owner, event.repo, build_id)


def on_status_translation_stats(event: StatusEvent, caps: Capabilities) -> list[Intent]:
    if not is_relevant_status(event.context):
        return []

    number = _pull_request_for_status(event, caps)
    if number is None:
        return []

    build_id = build_id_from_target_url(event.target_url)
    caps.log.info("Getting translation stats from build %s", build_id)
    stats = caps.ci.get_translation_stats(event.owner, event.repo, build_id)
    if not stats:
        caps.log.info("No translation stats found, aborting")
        return []

    comment = _locate_comment(event.owner, event.repo, number, caps)
    if comment is None:
        caps.log.info("Couldn't find our comment, aborting")
        return []

    document = DeploymentComment.parse(comment.body)
    if not document.replace_translation_stats(render_translation_table(stats)):
        # Only translation sync PRs are created with a stats section.
        caps.log.info("Comment on #%s has no translation stats section", number)
        return []

    body = str(document)
    if body == comment.body:
        return []
    return [UpdateComment(event.owner, event.repo, number, comment.id, body)]


def on_status_links(event: StatusEvent, caps: Capabilities) -> list[Intent]:
    if not is_relevant_status(event.context):
        return []
    # The PR number is looked up again rather than shared with the stats
    # handler; each handler stands on its own.
    return refresh_links(event.owner, event.repo, _pull_request_for_status(event, caps), caps)


def on_issue_comment(event: IssueCommentEvent, caps: Capabilities) -> list[Intent]:
    if event.action != "created":
        return []
    if event.body != caps.setting("refresh_command"):
        return []
    return refresh_links(event.owner, event.repo, event.number, caps)


def is_actionable(event: Event, config: dict) -> bool:
    """Whether any handler would act on event, checked before an installation client is minted."""
    if isinstance(event, PullRequestEvent):
        return event.action == "opened"
    if isinstance(event, StatusEvent):
        return is_relevant_status(event.context)
    if isinstance(event, IssueCommentEvent):
        refresh_command = config.get("refresh_command", DEFAULT_CONFIG["refresh_command"])
        return event.action == "created" and event.body == refresh_command
    return False


def handlers_for(event: Event) -> list[Handler]:
    if isinstance(event, PullRequestEvent):
        return [on_pull_request]
    if isinstance(event, StatusEvent):
        return [on_status_translation_stats, on_status_links]
    if isinstance(event, IssueCommentEvent):
        return [on_issue_comment]
    return []


def handle(event: Event, caps: Capabilities) -> None:
    for handler in handlers_for(event):
        execute(handler(event, caps), caps.comments)
