"""
HTTP entry points for the deployment links bot.

Routes:
  POST <webhook_path>   GitHub App webhook deliveries (pull_request, status,
                        issue_comment)
  POST /snapshots/new   pingback from the snapshot service when new builds
                        were uploaded, ?owner=&repo= with a JSON list of PRs
  GET  /health          configuration check

Requests are answered straight away; the comment work runs in the
background through the dispatch callable (a daemon thread by default).
"""

import hashlib
import hmac
import logging
import threading
from functools import partial
from typing import Callable, Optional

from flask import Flask, jsonify, request
from github import GithubException, UnknownObjectException

from deploylinks_core.ci.appveyor import AppVeyorClient
from deploylinks_core.events import PING, parse_event
from deploylinks_core.gh.app import GithubApp
from deploylinks_core.handlers import Capabilities, execute, handle, is_actionable, refresh_links
from deploylinks_core.snapshots import SnapshotClient
from deploylinks_store.github import GithubCommentStore

logger = logging.getLogger(__name__)

Job = Callable[[], None]


def run_in_background(job: Job) -> None:
    """Run job on a daemon thread, logging anything it raises."""
    thread = threading.Thread(target=_run_logged, args=(job,), daemon=True)
    thread.start()


def _run_logged(job: Job) -> None:
    try:
        job()
    except Exception:
        logger.exception("Background job failed")


def verify_signature(secret: Optional[str], payload_body: bytes, signature_header: Optional[str]) -> bool:
    """Check GitHub's X-Hub-Signature-256 header.

    Fails closed: without a configured secret every delivery is rejected.
    """
    if not secret:
        logger.error("WEBHOOK_SECRET not set, rejecting webhook")
        return False

    if not signature_header or "=" not in signature_header:
        logger.error("No signature header provided")
        return False

    hash_algorithm, github_signature = signature_header.split("=", 1)
    if hash_algorithm != "sha256":
        logger.error("Unsupported hash algorithm: %s", hash_algorithm)
        return False

    mac = hmac.new(secret.encode(), msg=payload_body, digestmod=hashlib.sha256)
    return hmac.compare_digest(mac.hexdigest(), github_signature)


def parse_pr_numbers(body) -> list[int]:
    """PR numbers from a pingback body; anything that is not a number is dropped."""
    if not isinstance(body, list):
        logger.warning("Pingback body is not a list: %r", body)
        return []
    numbers = []
    for value in body:
        if isinstance(value, bool):
            logger.warning("Ignoring PR number %r", value)
        elif isinstance(value, int):
            numbers.append(value)
        elif isinstance(value, str) and value.isdigit():
            numbers.append(int(value))
        else:
            logger.warning("Ignoring PR number %r", value)
    return numbers


def create_app(
    config: dict,
    github_app: Optional[GithubApp] = None,
    dispatch: Optional[Callable[[Job], None]] = None,
    capabilities_factory: Optional[Callable] = None,
) -> Flask:
    """Build the Flask app.

    github_app defaults to one built from the configured App id and private
    key. capabilities_factory turns an installation client into the
    Capabilities handed to the handlers.
    """
    app = Flask(__name__)

    if github_app is None and config.get("github_app_id") and config.get("github_app_private_key"):
        github_app = GithubApp(config["github_app_id"], config["github_app_private_key"])
    dispatch = dispatch or run_in_background

    def default_capabilities(gh):
        return Capabilities(
            comments=GithubCommentStore(gh),
            ci=AppVeyorClient(config["appveyor_url"]),
            snapshots=SnapshotClient(config["snapshots_url"]),
            config=config,
            log=app.logger,
        )

    make_capabilities = capabilities_factory or default_capabilities

    def run_event(event, installation_id):
        caps = make_capabilities(github_app.installation_client(installation_id))
        handle(event, caps)

    def refresh_pull_requests(owner, repo, installation_id, numbers):
        caps = make_capabilities(github_app.installation_client(installation_id))
        for number in numbers:
            # Best effort: one PR failing must not stop the others.
            try:
                execute(refresh_links(owner, repo, number, caps), caps.comments)
            except Exception:
                app.logger.exception("Refreshing links for %s/%s#%s failed", owner, repo, number)

    @app.route(config.get("webhook_path", "/"), methods=["POST"])
    def webhook():
        signature = request.headers.get("X-Hub-Signature-256")
        if not verify_signature(config.get("webhook_secret"), request.get_data(), signature):
            app.logger.error("Invalid webhook signature")
            return jsonify({"error": "Invalid signature"}), 401

        event_type = request.headers.get("X-GitHub-Event")
        if not event_type:
            return jsonify({"error": "Missing X-GitHub-Event header"}), 400
        if event_type == PING:
            return jsonify({"message": "Ping received!"}), 200

        payload = request.get_json(silent=True)
        if not payload:
            return jsonify({"error": "Missing or invalid JSON payload"}), 400

        try:
            event = parse_event(event_type, payload)
        except (KeyError, TypeError) as e:
            app.logger.error("Malformed %s payload: %s", event_type, e)
            return jsonify({"error": f"Malformed {event_type} payload"}), 400
        if event is None:
            return jsonify({"message": f"Event {event_type} received but not processed"}), 200
        if not is_actionable(event, config):
            app.logger.debug("Nothing to do for %s event on %s/%s", event_type, event.owner, event.repo)
            return jsonify({"message": f"Event {event_type} received but not processed"}), 200

        installation_id = (payload.get("installation") or {}).get("id")
        if installation_id is None:
            return jsonify({"error": "Missing installation"}), 400
        if github_app is None:
            return jsonify({"error": "GitHub App is not configured"}), 500

        app.logger.info("Received %s event for %s/%s", event_type, event.owner, event.repo)
        dispatch(partial(run_event, event, installation_id))
        return jsonify({"message": "Webhook accepted, processing in background"}), 202

    @app.route("/snapshots/new", methods=["POST"])
    def new_snapshots():
        owner = request.args.get("owner")
        repo = request.args.get("repo")
        if owner is None or repo is None:
            return "Bad Request: missing parameters", 400
        if github_app is None:
            return "GitHub App is not configured", 500

        try:
            installation_id = github_app.get_installation_id(owner, repo)
        except UnknownObjectException:
            return "app not installed to given owner and repository", 404
        except GithubException as e:
            app.logger.error("Installation lookup for %s/%s failed: %s", owner, repo, e)
            return f"Unknown response from GitHub API: {e.status}", 500
        except Exception as e:
            app.logger.error("Installation lookup for %s/%s failed: %s", owner, repo, e)
            return "Unknown response from GitHub API: unknown", 500

        numbers = parse_pr_numbers(request.get_json(force=True, silent=True))
        app.logger.info("New snapshots for %s/%s: %s", owner, repo, numbers)
        dispatch(partial(refresh_pull_requests, owner, repo, installation_id, numbers))
        return "", 204

    @app.route("/health", methods=["GET"])
    def health():
        status = {
            "status": "ok",
            "github_app_configured": github_app is not None,
            "webhook_secret_set": bool(config.get("webhook_secret")),
        }
        return jsonify(status), 200

    return app
