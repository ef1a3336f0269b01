"""Tests for deploylinks-store implementations."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from deploylinks_store.dryrun import DryRunCommentStore
from deploylinks_store.github import GithubCommentStore
from deploylinks_store.memory import InMemoryCommentStore
from deploylinks_store.models import CommentRecord


def _gh_comment(id, login, body):
    comment = MagicMock()
    comment.id = id
    comment.user.login = login
    comment.body = body
    return comment


# ---------------------------------------------------------------------------
# GithubCommentStore
# ---------------------------------------------------------------------------


class TestGithubCommentStore:
    def _store(self):
        gh = MagicMock()
        issue = gh.get_repo.return_value.get_issue.return_value
        return GithubCommentStore(gh), gh, issue

    def test_list_comments_maps_records_in_order(self):
        store, gh, issue = self._store()
        issue.get_comments.return_value = [
            _gh_comment(1, "someone", "hi"),
            _gh_comment(2, "add-deployment-links[bot]", "links"),
        ]

        records = store.list_comments("Mudlet", "Mudlet", 12)

        gh.get_repo.assert_called_with("Mudlet/Mudlet")
        gh.get_repo.return_value.get_issue.assert_called_with(12)
        assert records == [
            CommentRecord(id=1, author="someone", body="hi"),
            CommentRecord(id=2, author="add-deployment-links[bot]", body="links"),
        ]

    def test_list_comments_handles_ghost_user_and_empty_body(self):
        store, _, issue = self._store()
        ghost = _gh_comment(3, "", None)
        ghost.user = None
        issue.get_comments.return_value = [ghost]
        assert store.list_comments("o", "r", 1) == [CommentRecord(id=3, author="", body="")]

    def test_create_comment(self):
        store, _, issue = self._store()
        issue.create_comment.return_value = _gh_comment(10, "add-deployment-links[bot]", "body")

        record = store.create_comment("o", "r", 1, "body")

        issue.create_comment.assert_called_once_with("body")
        assert record.id == 10

    def test_update_comment_edits_by_id(self):
        store, _, issue = self._store()
        store.update_comment("o", "r", 1, 10, "new body")
        issue.get_comment.assert_called_once_with(10)
        issue.get_comment.return_value.edit.assert_called_once_with("new body")


# ---------------------------------------------------------------------------
# InMemoryCommentStore
# ---------------------------------------------------------------------------


class TestInMemoryCommentStore:
    def test_create_and_list(self):
        store = InMemoryCommentStore()
        created = store.create_comment("o", "r", 1, "hello")
        assert store.list_comments("o", "r", 1) == [created]
        assert created.author == "add-deployment-links[bot]"

    def test_comments_are_per_issue(self):
        store = InMemoryCommentStore()
        store.create_comment("o", "r", 1, "one")
        assert store.list_comments("o", "r", 2) == []

    def test_preserves_order(self):
        store = InMemoryCommentStore()
        store.add("o", "r", 1, "someone", "first")
        store.create_comment("o", "r", 1, "second")
        assert [c.body for c in store.list_comments("o", "r", 1)] == ["first", "second"]

    def test_update(self):
        store = InMemoryCommentStore()
        created = store.create_comment("o", "r", 1, "old")
        store.update_comment("o", "r", 1, created.id, "new")
        assert store.list_comments("o", "r", 1)[0].body == "new"

    def test_listed_records_are_copies(self):
        store = InMemoryCommentStore()
        store.create_comment("o", "r", 1, "old")
        store.list_comments("o", "r", 1)[0].body = "changed"
        assert store.list_comments("o", "r", 1)[0].body == "old"

    def test_update_unknown_comment_raises(self):
        with pytest.raises(KeyError):
            InMemoryCommentStore().update_comment("o", "r", 1, 99, "x")


# ---------------------------------------------------------------------------
# DryRunCommentStore
# ---------------------------------------------------------------------------


class TestDryRunCommentStore:
    def test_reads_from_source(self):
        source = InMemoryCommentStore()
        source.create_comment("o", "r", 1, "body")
        assert DryRunCommentStore(source).list_comments("o", "r", 1)[0].body == "body"

    def test_writes_are_recorded_not_applied(self):
        source = InMemoryCommentStore()
        created = source.create_comment("o", "r", 1, "body")
        store = DryRunCommentStore(source)

        store.update_comment("o", "r", 1, created.id, "new")
        store.create_comment("o", "r", 1, "another")

        assert store.updated == [("o", "r", 1, created.id, "new")]
        assert store.created == [("o", "r", 1, "another")]
        assert [c.body for c in source.list_comments("o", "r", 1)] == ["body"]
