"""Tests for event parsing and the deployment comment handlers."""

import logging
import types
from unittest.mock import MagicMock

import pytest

from deploylinks_core.comment import PENDING_LINK, comment_template
from deploylinks_core.events import (
    CreateComment,
    IssueCommentEvent,
    PullRequestEvent,
    StatusEvent,
    UpdateComment,
    parse_event,
)
from deploylinks_core.handlers import (
    Capabilities,
    execute,
    handle,
    handlers_for,
    is_actionable,
    is_relevant_status,
    on_issue_comment,
    on_pull_request,
    on_status_links,
    on_status_translation_stats,
    refresh_links,
)
from deploylinks_core.links import ArtifactLink
from deploylinks_core.translations import TranslationStat

BOT = "add-deployment-links[bot]"
TARGET_URL = "https://ci.appveyor.com/project/Mudlet/Mudlet/builds/555"
LINKS = [
    ArtifactLink("windows", "https://x/win.zip", "2024-01-02 00:00:00"),
    ArtifactLink("linux", "https://x/linux.zip", "2024-01-02 00:00:00"),
]


class StubStore:
    """Comment store over a plain list, recording writes."""

    def __init__(self, comments=()):
        self.comments = [types.SimpleNamespace(**c) for c in comments]
        self.created = []
        self.updated = []

    def list_comments(self, owner, repo, number):
        return [types.SimpleNamespace(**vars(c)) for c in self.comments]

    def create_comment(self, owner, repo, number, body):
        self.created.append((owner, repo, number, body))

    def update_comment(self, owner, repo, number, comment_id, body):
        self.updated.append((owner, repo, number, comment_id, body))
        for c in self.comments:
            if c.id == comment_id:
                c.body = body


def _caps(store=None, links=LINKS, stats=None, pr_number=42):
    ci = MagicMock()
    ci.get_pull_request_number.return_value = pr_number
    ci.get_translation_stats.return_value = stats or {}
    snapshots = MagicMock()
    snapshots.get_latest_links.return_value = links
    return Capabilities(comments=store or StubStore(), ci=ci, snapshots=snapshots, log=logging.getLogger("test"))


def _bot_comment(title="Fix things", id=7):
    return {"id": id, "author": BOT, "body": comment_template(title)}


# ---------------------------------------------------------------------------
# parse_event
# ---------------------------------------------------------------------------


class TestParseEvent:
    REPOSITORY = {"name": "Mudlet", "owner": {"login": "Mudlet"}}

    def test_pull_request(self):
        payload = {
            "action": "opened",
            "pull_request": {"number": 12, "title": "New Crowdin updates"},
            "repository": self.REPOSITORY,
        }
        assert parse_event("pull_request", payload) == PullRequestEvent("Mudlet", "Mudlet", 12, "opened", "New Crowdin updates")

    def test_status(self):
        payload = {"context": "continuous-integration/appveyor/pr", "target_url": TARGET_URL, "repository": self.REPOSITORY}
        assert parse_event("status", payload) == StatusEvent("Mudlet", "Mudlet", "continuous-integration/appveyor/pr", TARGET_URL)

    def test_issue_comment(self):
        payload = {
            "action": "created",
            "issue": {"number": 3},
            "comment": {"body": "/refresh links"},
            "repository": self.REPOSITORY,
        }
        assert parse_event("issue_comment", payload) == IssueCommentEvent("Mudlet", "Mudlet", 3, "created", "/refresh links")

    def test_unhandled_event_type(self):
        assert parse_event("push", {}) is None

    def test_missing_field_raises(self):
        with pytest.raises(KeyError):
            parse_event("pull_request", {"repository": self.REPOSITORY})


# ---------------------------------------------------------------------------
# pull_request
# ---------------------------------------------------------------------------


class TestOnPullRequest:
    def test_opened_creates_comment(self):
        intents = on_pull_request(PullRequestEvent("o", "r", 5, "opened", "Fix"), _caps())
        assert intents == [CreateComment("o", "r", 5, comment_template("Fix"))]

    def test_translation_pr_gets_stats_section(self):
        [intent] = on_pull_request(PullRequestEvent("o", "r", 5, "opened", "New Crowdin updates"), _caps())
        assert "## Translation stats" in intent.body

    @pytest.mark.parametrize("action", ["edited", "synchronize", "reopened", "closed"])
    def test_other_actions_ignored(self, action):
        assert on_pull_request(PullRequestEvent("o", "r", 5, action, "Fix"), _caps()) == []


# ---------------------------------------------------------------------------
# refresh_links
# ---------------------------------------------------------------------------


class TestRefreshLinks:
    def test_updates_comment_with_latest_links(self):
        store = StubStore([{"id": 1, "author": "someone", "body": "hi"}, _bot_comment()])
        [intent] = refresh_links("o", "r", 42, _caps(store))
        assert isinstance(intent, UpdateComment)
        assert intent.comment_id == 7
        assert "- windows: https://x/win.zip\n" in intent.body
        assert "- linux: https://x/linux.zip\n" in intent.body
        assert f"- osx: {PENDING_LINK}\n" in intent.body

    def test_undefined_pr_number_is_noop(self):
        caps = _caps(StubStore([_bot_comment()]))
        assert refresh_links("o", "r", None, caps) == []
        caps.snapshots.get_latest_links.assert_not_called()

    def test_no_links_is_noop(self):
        assert refresh_links("o", "r", 42, _caps(StubStore([_bot_comment()]), links=[])) == []

    def test_missing_comment_is_noop(self):
        store = StubStore([{"id": 1, "author": "someone", "body": comment_template("x")}])
        assert refresh_links("o", "r", 42, _caps(store)) == []

    def test_unchanged_body_is_noop(self):
        store = StubStore([_bot_comment()])
        caps = _caps(store)
        execute(refresh_links("o", "r", 42, caps), store)
        assert refresh_links("o", "r", 42, caps) == []

    def test_uses_configured_bot_login(self):
        store = StubStore([{"id": 3, "author": "my-bot[bot]", "body": comment_template("x")}])
        caps = _caps(store)
        caps.config = {"bot_login": "my-bot[bot]"}
        assert len(refresh_links("o", "r", 42, caps)) == 1


# ---------------------------------------------------------------------------
# status
# ---------------------------------------------------------------------------


class TestStatusHandlers:
    @pytest.mark.parametrize(
        "context,relevant",
        [
            ("continuous-integration/appveyor/pr", True),
            ("appveyor", True),
            ("ci/pr-check", True),
            ("continuous-integration/travis-ci/push", False),
            ("AppVeyor", False),
        ],
    )
    def test_is_relevant_status(self, context, relevant):
        assert is_relevant_status(context) is relevant

    def test_irrelevant_context_does_nothing(self):
        caps = _caps(StubStore([_bot_comment()]))
        event = StatusEvent("o", "r", "travis-ci/push", TARGET_URL)
        assert on_status_translation_stats(event, caps) == []
        assert on_status_links(event, caps) == []
        caps.ci.get_pull_request_number.assert_not_called()

    def test_stats_replace_translation_section(self):
        store = StubStore([_bot_comment("New Crowdin updates")])
        caps = _caps(store, stats={"de_DE": TranslationStat(120, 3, 97)})
        event = StatusEvent("Mudlet", "Mudlet", "appveyor/pr", TARGET_URL)

        [intent] = on_status_translation_stats(event, caps)

        caps.ci.get_pull_request_number.assert_called_once_with("Mudlet", "Mudlet", "555")
        caps.ci.get_translation_stats.assert_called_once_with("Mudlet", "Mudlet", "555")
        assert intent.number == 42
        assert "|de_DE|120|3|97|" in intent.body
        assert "calculation pending" not in intent.body

    def test_no_successful_jobs_leaves_comment_alone(self):
        store = StubStore([_bot_comment("New Crowdin updates")])
        caps = _caps(store, stats={}, links=[])
        handle(StatusEvent("o", "r", "appveyor/pr", TARGET_URL), caps)
        assert store.updated == []
        assert store.created == []

    def test_stats_skipped_for_non_translation_pr(self):
        caps = _caps(StubStore([_bot_comment("Fix")]), stats={"de_DE": TranslationStat(1, 1, 50)})
        assert on_status_translation_stats(StatusEvent("o", "r", "appveyor/pr", TARGET_URL), caps) == []

    def test_stats_abort_without_comment(self):
        caps = _caps(StubStore([]), stats={"de_DE": TranslationStat(1, 1, 50)})
        assert on_status_translation_stats(StatusEvent("o", "r", "appveyor/pr", TARGET_URL), caps) == []

    def test_branch_build_without_pr_is_noop(self):
        caps = _caps(StubStore([_bot_comment()]), pr_number=None)
        event = StatusEvent("o", "r", "appveyor/pr", TARGET_URL)
        assert on_status_translation_stats(event, caps) == []
        assert on_status_links(event, caps) == []

    def test_target_url_without_build_id_is_noop(self):
        caps = _caps(StubStore([_bot_comment()]))
        event = StatusEvent("o", "r", "appveyor/pr", "https://example.org/")
        assert on_status_links(event, caps) == []
        caps.ci.get_pull_request_number.assert_not_called()

    def test_links_resolve_pr_independently(self):
        caps = _caps(StubStore([_bot_comment("New Crowdin updates")]), stats={"de_DE": TranslationStat(1, 1, 50)})
        handle(StatusEvent("o", "r", "appveyor/pr", TARGET_URL), caps)
        assert caps.ci.get_pull_request_number.call_count == 2

    def test_status_writes_stats_then_links_on_top(self):
        store = StubStore([_bot_comment("New Crowdin updates")])
        caps = _caps(store, stats={"de_DE": TranslationStat(120, 3, 97)})

        handle(StatusEvent("o", "r", "appveyor/pr", TARGET_URL), caps)

        assert len(store.updated) == 2
        final = store.comments[0].body
        assert "|de_DE|120|3|97|" in final
        assert "- windows: https://x/win.zip\n" in final

    def test_ci_errors_propagate(self):
        caps = _caps(StubStore([_bot_comment()]))
        caps.ci.get_pull_request_number.side_effect = RuntimeError("appveyor down")
        with pytest.raises(RuntimeError):
            handle(StatusEvent("o", "r", "appveyor/pr", TARGET_URL), caps)


# ---------------------------------------------------------------------------
# issue_comment
# ---------------------------------------------------------------------------


class TestOnIssueComment:
    def test_refresh_command(self):
        caps = _caps(StubStore([_bot_comment()]))
        intents = on_issue_comment(IssueCommentEvent("o", "r", 9, "created", "/refresh links"), caps)
        assert len(intents) == 1
        caps.snapshots.get_latest_links.assert_called_once_with(9)

    @pytest.mark.parametrize("body", ["/refresh links please", " /refresh links", "/Refresh links", "hello"])
    def test_other_bodies_ignored(self, body):
        caps = _caps(StubStore([_bot_comment()]))
        assert on_issue_comment(IssueCommentEvent("o", "r", 9, "created", body), caps) == []

    def test_edited_comment_ignored(self):
        caps = _caps(StubStore([_bot_comment()]))
        assert on_issue_comment(IssueCommentEvent("o", "r", 9, "edited", "/refresh links"), caps) == []


# ---------------------------------------------------------------------------
# dispatch
# ---------------------------------------------------------------------------


class TestDispatch:
    def test_handlers_for(self):
        assert handlers_for(PullRequestEvent("o", "r", 1, "opened", "")) == [on_pull_request]
        assert handlers_for(StatusEvent("o", "r", "", None)) == [on_status_translation_stats, on_status_links]
        assert handlers_for(IssueCommentEvent("o", "r", 1, "created", "")) == [on_issue_comment]

    @pytest.mark.parametrize(
        "event, expected",
        [
            (PullRequestEvent("o", "r", 1, "opened", ""), True),
            (PullRequestEvent("o", "r", 1, "synchronize", ""), False),
            (StatusEvent("o", "r", "continuous-integration/appveyor/branch", None), True),
            (StatusEvent("o", "r", "codecov/patch", None), False),
            (IssueCommentEvent("o", "r", 1, "created", "/refresh links"), True),
            (IssueCommentEvent("o", "r", 1, "edited", "/refresh links"), False),
            (IssueCommentEvent("o", "r", 1, "created", "LGTM"), False),
        ],
    )
    def test_is_actionable(self, event, expected):
        assert is_actionable(event, {}) is expected

    def test_is_actionable_uses_configured_command(self):
        event = IssueCommentEvent("o", "r", 1, "created", "/links")
        assert is_actionable(event, {"refresh_command": "/links"})

    def test_execute_applies_intents(self):
        store = StubStore()
        execute([CreateComment("o", "r", 1, "body"), UpdateComment("o", "r", 1, 5, "new")], store)
        assert store.created == [("o", "r", 1, "body")]
        assert store.updated == [("o", "r", 1, 5, "new")]

    def test_execute_rejects_unknown_intent(self):
        with pytest.raises(TypeError):
            execute(["delete everything"], StubStore())

    def test_opened_pr_creates_comment(self):
        store = StubStore()
        handle(PullRequestEvent("o", "r", 1, "opened", "New Crowdin updates"), _caps(store))
        assert len(store.created) == 1
        assert "## Translation stats" in store.created[0][3]
