"""Typed webhook events and the write intents handlers produce.

Handlers never write to GitHub themselves. They return CreateComment and
UpdateComment intents which handlers.execute() applies to a comment store.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

PULL_REQUEST = "pull_request"
STATUS = "status"
ISSUE_COMMENT = "issue_comment"
PING = "ping"


@dataclass(frozen=True)
class PullRequestEvent:
    owner: str
    repo: str
    number: int
    action: str
    title: str


@dataclass(frozen=True)
class StatusEvent:
    owner: str
    repo: str
    context: str
    target_url: Optional[str]


@dataclass(frozen=True)
class IssueCommentEvent:
    owner: str
    repo: str
    number: int
    action: str
    body: str


Event = Union[PullRequestEvent, StatusEvent, IssueCommentEvent]


@dataclass(frozen=True)
class CreateComment:
    owner: str
    repo: str
    number: int
    body: str


@dataclass(frozen=True)
class UpdateComment:
    owner: str
    repo: str
    number: int
    comment_id: int
    body: str


Intent = Union[CreateComment, UpdateComment]


def _repository(payload: dict) -> tuple[str, str]:
    repository = payload["repository"]
    return repository["owner"]["login"], repository["name"]


def parse_event(event_type: str, payload: dict) -> Optional[Event]:
    """Build a typed event from a GitHub webhook payload.

    Returns None for event types the bot does not handle. Raises KeyError
    when a handled event is missing a required field.
    """
    if event_type == PULL_REQUEST:
        owner, repo = _repository(payload)
        pull_request = payload["pull_request"]
        return PullRequestEvent(
            owner=owner,
            repo=repo,
            number=pull_request["number"],
            action=payload.get("action", ""),
            title=pull_request.get("title") or "",
        )
    if event_type == STATUS:
        owner, repo = _repository(payload)
        return StatusEvent(
            owner=owner,
            repo=repo,
            context=payload.get("context") or "",
            target_url=payload.get("target_url"),
        )
    if event_type == ISSUE_COMMENT:
        owner, repo = _repository(payload)
        return IssueCommentEvent(
            owner=owner,
            repo=repo,
            number=payload["issue"]["number"],
            action=payload.get("action", ""),
            body=payload["comment"].get("body") or "",
        )
    return None
