"""Webhook server and handlers for GitHub events."""

from stagebot.webhook.handlers import dispatch_github_event, handle_github_event
from stagebot.webhook.server import run_webhook_server

__all__ = ["dispatch_github_event", "handle_github_event", "run_webhook_server"]
