"""Comment data model.

Decoupled from PyGithub so handlers and tests work with plain values.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class CommentRecord:
    """Transient copy of an issue comment, valid only for one handler run."""

    id: int
    author: str
    body: str
