"""GithubCommentStore — issue comments through PyGithub.

The Github client passed in is already authenticated, either as an app
installation (webhook server) or with a personal token (CLI).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from deploylinks_core.gh.issues import get_issue
from deploylinks_store.base import BaseCommentStore
from deploylinks_store.models import CommentRecord

if TYPE_CHECKING:
    from github import Github

logger = logging.getLogger(__name__)


class GithubCommentStore(BaseCommentStore):
    def __init__(self, gh: Github):
        self._gh = gh

    def list_comments(self, owner: str, repo: str, number: int) -> list[CommentRecord]:
        issue = get_issue(self._gh, owner, repo, number)
        return [self._to_record(c) for c in issue.get_comments()]

    def create_comment(self, owner: str, repo: str, number: int, body: str) -> CommentRecord:
        issue = get_issue(self._gh, owner, repo, number)
        comment = issue.create_comment(body)
        logger.info("Created comment %s on %s/%s#%s", comment.id, owner, repo, number)
        return self._to_record(comment)

    def update_comment(self, owner: str, repo: str, number: int, comment_id: int, body: str) -> None:
        issue = get_issue(self._gh, owner, repo, number)
        logger.info("Updating comment %s on %s/%s#%s", comment_id, owner, repo, number)
        issue.get_comment(comment_id).edit(body)

    @staticmethod
    def _to_record(comment) -> CommentRecord:
        user = comment.user
        return CommentRecord(
            id=comment.id,
            author=user.login if user is not None else "",
            body=comment.body or "",
        )
