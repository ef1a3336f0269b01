"""Dry-run store — reads from a real store, never writes.

Writes are recorded instead so the CLI can show what would have been
posted.
"""

from __future__ import annotations

from deploylinks_store.base import BaseCommentStore
from deploylinks_store.models import CommentRecord


class DryRunCommentStore(BaseCommentStore):
    def __init__(self, source: BaseCommentStore):
        self._source = source
        self.created: list[tuple[str, str, int, str]] = []
        self.updated: list[tuple[str, str, int, int, str]] = []

    def list_comments(self, owner: str, repo: str, number: int) -> list[CommentRecord]:
        return self._source.list_comments(owner, repo, number)

    def create_comment(self, owner: str, repo: str, number: int, body: str) -> CommentRecord:
        self.created.append((owner, repo, number, body))
        return CommentRecord(id=0, author="", body=body)  # intentionally never posted

    def update_comment(self, owner: str, repo: str, number: int, comment_id: int, body: str) -> None:
        self.updated.append((owner, repo, number, comment_id, body))
