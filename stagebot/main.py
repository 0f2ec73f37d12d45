"""Stagebot entry point.

Two commands: serve (webhook server, default) and replay (handle one stored
webhook delivery, e.g. to re-run a failed deployment by hand).
Usage: stagebot [serve] | stagebot replay --event push --payload delivery.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from stagebot.config import ConfigError, load_config
from stagebot.logging import StagebotLogging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI with optional subcommand (serve | replay)."""
    argv = argv if argv is not None else sys.argv[1:]
    sub = "serve"
    rest = list(argv)
    if argv and not argv[0].startswith("-"):
        if argv[0] in ("serve", "replay"):
            sub = argv[0]
            rest = argv[1:]

    parser = argparse.ArgumentParser(
        prog="stagebot",
        description="Stagebot - deploy PRs and mapped branches to SST stages from GitHub webhooks",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only load and validate config, then exit",
    )
    if sub == "replay":
        parser.add_argument("--event", required=True, help="X-GitHub-Event name (e.g. push, pull_request)")
        parser.add_argument("--payload", type=Path, required=True, help="Path to the delivery JSON body")
    parsed = parser.parse_args(rest)
    parsed.subcommand = sub
    return parsed


def _replay(config, event: str, payload_path: Path) -> int:
    from stagebot.webhook.handlers import dispatch_github_event

    log = logging.getLogger("stagebot.replay")
    payload = json.loads(payload_path.read_text())
    try:
        result = dispatch_github_event(config, event, payload, log=log)
    except Exception as e:
        log.exception("Replay of %s failed: %s", event, e)
        return 1
    if result is None:
        log.info("Event %s.%s not handled", event, payload.get("action") or "-")
        return 0
    return 0 if result.ok else 1


def main(argv: list[str] | None = None) -> int:
    """Entry point: dispatch to serve or replay."""
    args = parse_args(argv)

    config_path = args.config
    if not config_path.is_file() and config_path == Path("config.yaml"):
        if Path("config.example.yaml").is_file():
            config_path = Path("config.example.yaml")
            logging.basicConfig(level=logging.INFO)
            logging.getLogger("stagebot").warning("config.yaml not found, using config.example.yaml")

    config = load_config(config_path)
    StagebotLogging(config.logging).setup()

    try:
        identity = config.identity
    except ConfigError as e:
        logging.getLogger("stagebot").error("%s", e)
        return 2

    if args.check:
        print("Config OK:", config.app.name, "app", identity.app_id, config.github.api_url)
        return 0

    if args.subcommand == "replay":
        return _replay(config, args.event, args.payload)

    from stagebot.webhook.server import run_webhook_server

    logging.getLogger("stagebot").info("Starting %s (app %s)", config.app.name, identity.app_id)
    try:
        run_webhook_server(config)
    except KeyboardInterrupt:
        return 0
    except Exception as e:
        logging.getLogger("stagebot.server").exception("Fatal error: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
