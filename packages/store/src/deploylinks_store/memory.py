"""In-memory comment store.

Holds comments per (owner, repo, number) in a dict. Lets the handlers
and the server run end to end without GitHub.
"""

from __future__ import annotations

import itertools

from deploylinks_core.comment import DEFAULT_BOT_LOGIN
from deploylinks_store.base import BaseCommentStore
from deploylinks_store.models import CommentRecord


class InMemoryCommentStore(BaseCommentStore):
    def __init__(self, author: str = DEFAULT_BOT_LOGIN):
        self._author = author
        self._comments: dict[tuple[str, str, int], list[CommentRecord]] = {}
        self._ids = itertools.count(1)

    def add(self, owner: str, repo: str, number: int, author: str, body: str) -> CommentRecord:
        """Seed a comment written by someone other than the store's author."""
        record = CommentRecord(id=next(self._ids), author=author, body=body)
        self._comments.setdefault((owner, repo, number), []).append(record)
        return record

    def list_comments(self, owner: str, repo: str, number: int) -> list[CommentRecord]:
        # Copies, so callers editing a record do not touch the stored one.
        return [CommentRecord(c.id, c.author, c.body) for c in self._comments.get((owner, repo, number), [])]

    def create_comment(self, owner: str, repo: str, number: int, body: str) -> CommentRecord:
        return self.add(owner, repo, number, self._author, body)

    def update_comment(self, owner: str, repo: str, number: int, comment_id: int, body: str) -> None:
        for comment in self._comments.get((owner, repo, number), []):
            if comment.id == comment_id:
                comment.body = body
                return
        raise KeyError(f"No comment {comment_id} on {owner}/{repo}#{number}")
