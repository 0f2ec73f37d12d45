"""Minimal webhook HTTP server for GitHub events.

Serves a health check and the webhook path. When a webhook secret is
configured, deliveries must carry a matching X-Hub-Signature-256 header.
"""

import hashlib
import hmac
import json
import logging
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any
from urllib.parse import parse_qs

from stagebot.config import AppConfig

LOG = logging.getLogger("stagebot.webhook")

SIGNATURE_HEADER = "X-Hub-Signature-256"


def verify_signature(secret: str, body: bytes, signature: str | None) -> bool:
    """Check a sha256=<hex> signature of the raw body against the secret."""
    if not signature or not signature.startswith("sha256="):
        return False
    expected = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(f"sha256={expected}", signature)


class WebhookHandler(BaseHTTPRequestHandler):
    """Handle GET /health and POST /webhook/github."""

    config: AppConfig

    def do_GET(self) -> None:
        if self.path == "/health" or self.path == "/":
            self._send_json(200, {"status": "ok", "service": "stagebot"})
            return
        self.send_response(404)
        self.end_headers()

    def do_POST(self) -> None:
        if self.path == self.config.github.webhook_path:
            self._handle_github_webhook()
            return
        self.send_response(404)
        self.end_headers()

    def _send_json(self, status: int, data: dict) -> None:
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.end_headers()
        self.wfile.write(json.dumps(data).encode())

    def _parse_webhook_body(self, body: bytes) -> dict:
        """Parse webhook body as JSON.

        Supports raw JSON and application/x-www-form-urlencoded (payload=...).
        """
        if not body:
            return {}
        content_type = self.headers.get("Content-Type", "")
        if "application/x-www-form-urlencoded" in content_type:
            parsed = parse_qs(body.decode("utf-8", errors="replace"), keep_blank_values=True)
            raw = (parsed.get("payload") or [None])[0]
            if raw is None:
                return {}
            return json.loads(raw)
        return json.loads(body.decode())

    def _handle_github_webhook(self) -> None:
        length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(length) if length else b""
        secret = self.config.webhook_secret_resolved
        if secret and not verify_signature(secret, body, self.headers.get(SIGNATURE_HEADER)):
            LOG.warning("Rejected webhook delivery %s: bad signature", self.headers.get("X-GitHub-Delivery", "-"))
            self._send_json(401, {"error": "invalid signature"})
            return
        try:
            payload = self._parse_webhook_body(body)
        except json.JSONDecodeError:
            LOG.warning("Invalid webhook JSON (delivery %s)", self.headers.get("X-GitHub-Delivery", "-"))
            self._send_json(400, {"error": "invalid json"})
            return
        event = self.headers.get("X-GitHub-Event", "")
        LOG.info(
            "Webhook event: %s.%s (delivery %s)",
            event,
            payload.get("action") or "-",
            self.headers.get("X-GitHub-Delivery", "-"),
        )
        from stagebot.webhook.handlers import handle_github_event

        handle_github_event(self.config, event, payload)
        self._send_json(200, {"received": True})

    def log_message(self, format: str, *args: Any) -> None:
        LOG.debug(format, *args)


def run_webhook_server(config: AppConfig) -> None:
    """Run HTTP server for webhooks and health check."""
    host = config.webhook.host
    port = config.webhook.port
    WebhookHandler.config = config
    server = HTTPServer((host, port), WebhookHandler)
    LOG.info("Webhook server listening on %s:%s", host, port)
    server.serve_forever()
