"""Tests for webhook payload parsing."""

from stagebot.events import NULL_SHA, parse_deployment_status, parse_pull_request, parse_push

REPOSITORY = {"id": 99, "name": "shop", "full_name": "acme/shop", "owner": {"login": "acme"}}


def test_parse_pull_request() -> None:
    payload = {
        "action": "synchronize",
        "pull_request": {"number": 7, "head": {"sha": "abc123", "ref": "feature/cart"}, "merged": False},
        "repository": REPOSITORY,
    }
    event = parse_pull_request(payload)
    assert event is not None
    assert event.action == "synchronize"
    assert event.number == 7
    assert event.head_ref == "feature/cart"
    assert event.repo.full_name == "acme/shop"
    assert event.repo.id == 99


def test_parse_pull_request_missing_head_returns_none() -> None:
    payload = {"action": "opened", "pull_request": {"number": 7}, "repository": REPOSITORY}
    assert parse_pull_request(payload) is None


def test_parse_pull_request_missing_repository_returns_none() -> None:
    payload = {"action": "opened", "pull_request": {"number": 7, "head": {"sha": "a", "ref": "b"}}}
    assert parse_pull_request(payload) is None


def test_parse_deployment_status_prefers_log_url() -> None:
    payload = {
        "action": "created",
        "deployment": {"environment": "pr-7", "sha": "abc123"},
        "deployment_status": {"state": "failure", "log_url": "https://logs", "target_url": "https://target"},
        "repository": REPOSITORY,
    }
    event = parse_deployment_status(payload)
    assert event.environment == "pr-7"
    assert event.state == "failure"
    assert event.log_url == "https://logs"


def test_parse_deployment_status_falls_back_to_target_url() -> None:
    payload = {
        "deployment": {"environment": "prod", "sha": "abc123"},
        "deployment_status": {"state": "success", "target_url": "https://target"},
        "repository": REPOSITORY,
    }
    assert parse_deployment_status(payload).log_url == "https://target"


def test_parse_push() -> None:
    event = parse_push({"ref": "refs/heads/main", "after": "def456", "repository": REPOSITORY})
    assert event.ref == "refs/heads/main"
    assert not event.is_branch_deletion


def test_parse_push_branch_deletion() -> None:
    event = parse_push({"ref": "refs/heads/main", "after": NULL_SHA, "deleted": True, "repository": REPOSITORY})
    assert event.is_branch_deletion


def test_parse_push_missing_ref_returns_none() -> None:
    assert parse_push({"after": "def456", "repository": REPOSITORY}) is None
