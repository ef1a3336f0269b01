"""Abstract comment store interface.

The deployment comment is the bot's only state, and it lives on GitHub.
Handlers depend on BaseCommentStore rather than on PyGithub so they can be
driven by an in-memory store in tests and a read-only one in dry runs.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from deploylinks_store.models import CommentRecord


class BaseCommentStore(ABC):
    """CRUD over the comments of one issue or pull request.

    No caching: every list_comments() call reflects the current upstream
    state, and update_comment() overwrites whatever is there.
    """

    @abstractmethod
    def list_comments(self, owner: str, repo: str, number: int) -> list[CommentRecord]:
        """Return the issue's comments in upstream (chronological) order."""

    @abstractmethod
    def create_comment(self, owner: str, repo: str, number: int, body: str) -> CommentRecord:
        """Post a new comment and return it."""

    @abstractmethod
    def update_comment(self, owner: str, repo: str, number: int, comment_id: int, body: str) -> None:
        """Replace the body of an existing comment."""
