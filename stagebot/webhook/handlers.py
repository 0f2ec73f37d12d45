"""Handle GitHub webhook events.

Parses the payload into an event model and hands it to the matching
reconcile_* function. Each delivery is handled on its own; a failure is
logged here and never leaks into the handling of other deliveries.
"""

import logging
from typing import Any, Dict

from stagebot.adapters.base import ControlPlaneAdapter
from stagebot.adapters.github import GitHubAdapter
from stagebot.engine import (
    ExecutionResult,
    reconcile_deployment_status,
    reconcile_pull_request_closed,
    reconcile_pull_request_opened,
    reconcile_push,
)
from stagebot.events import parse_deployment_status, parse_pull_request, parse_push

_LOGGER_NAME = "stagebot.webhook.handlers"

DEPLOY_ACTIONS = ("opened", "synchronize", "reopened")


class WebhookSetupError(Exception):
    """Raised when the bot cannot talk to GitHub (no token)."""

    pass


def _make_adapter(config: Any) -> ControlPlaneAdapter:
    token = getattr(config, "github_token_resolved", None)
    if not token:
        raise WebhookSetupError("No GitHub token configured (github.token or GITHUB_TOKEN)")
    return GitHubAdapter(
        token=token,
        api_url=getattr(config.github, "api_url", "https://api.github.com"),
    )


def dispatch_github_event(
    config: Any,
    event: str,
    payload: Dict[str, Any],
    adapter: ControlPlaneAdapter | None = None,
    log: logging.Logger | None = None,
) -> ExecutionResult | None:
    """Route one event to its reconciler; errors propagate.

    Returns None for events and actions that are not handled.
    """
    logger = log or logging.getLogger(_LOGGER_NAME)
    action = payload.get("action")

    if event == "ping":
        logger.info("Ping received (zen: %s)", payload.get("zen", ""))
        return None

    if event == "pull_request":
        if action not in DEPLOY_ACTIONS and action != "closed":
            logger.debug("Ignoring pull_request.%s", action)
            return None
        pr_event = parse_pull_request(payload)
        if pr_event is None:
            return None
        identity = config.identity
        client = adapter or _make_adapter(config)
        if action == "closed":
            return reconcile_pull_request_closed(client, identity, pr_event, log=logger)
        return reconcile_pull_request_opened(client, identity, pr_event, log=logger)

    if event == "deployment_status":
        if action not in (None, "created"):
            logger.debug("Ignoring deployment_status.%s", action)
            return None
        status_event = parse_deployment_status(payload)
        if status_event is None:
            return None
        client = adapter or _make_adapter(config)
        return reconcile_deployment_status(client, config.identity, status_event, log=logger)

    if event == "push":
        push_event = parse_push(payload)
        if push_event is None:
            return None
        client = adapter or _make_adapter(config)
        return reconcile_push(client, config.identity, push_event, log=logger)

    logger.debug("Ignoring event %s", event)
    return None


def handle_github_event(
    config: Any,
    event: str,
    payload: Dict[str, Any],
    adapter: ControlPlaneAdapter | None = None,
    log: logging.Logger | None = None,
) -> ExecutionResult | None:
    """Handle a GitHub webhook event.

    Supported events:
    - pull_request (opened, synchronize, reopened): deploy the pr-<n> stage.
    - pull_request (closed): tear down the pr-<n> stage.
    - deployment_status (created): report success/failure on check run and comment.
    - push: deploy a static stage when the branch is mapped in the repo config.

    Failures are logged and swallowed; redeliver the webhook (or push again)
    to retry.
    """
    logger = log or logging.getLogger(_LOGGER_NAME)
    try:
        return dispatch_github_event(config, event, payload, adapter=adapter, log=logger)
    except Exception as e:
        logger.exception("Failed to handle %s.%s: %s", event, payload.get("action") or "-", e)
        return None
