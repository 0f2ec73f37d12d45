"""Shared fixtures: repo, app identity, and a mocked control-plane adapter."""

from datetime import datetime, timezone
from typing import Any
from unittest.mock import Mock

import pytest

from stagebot.adapters.base import ControlPlaneAdapter
from stagebot.models import AppIdentity, CheckRun, Comment, RepoRef

APP_ID = 4242
NOW = datetime(2026, 10, 18, 15, 5, tzinfo=timezone.utc)


@pytest.fixture
def repo() -> RepoRef:
    return RepoRef(owner="acme", name="shop", id=99)


@pytest.fixture
def identity() -> AppIdentity:
    return AppIdentity(app_id=APP_ID)


@pytest.fixture
def adapter() -> Mock:
    """Adapter with 'nothing exists yet' defaults."""
    mock = Mock(spec=ControlPlaneAdapter)
    mock.get_file_content.return_value = None
    mock.list_issue_comments.return_value = []
    mock.list_check_runs_for_ref.return_value = []
    mock.list_deployments.return_value = []
    mock.get_environment_variable.return_value = None
    mock.create_comment.side_effect = lambda repo, number, body: make_comment(1001, body=body)
    mock.create_check_run.side_effect = lambda repo, **kw: make_check_run(501, head_sha=kw["head_sha"])
    mock.delete_environment.return_value = True
    return mock


def make_comment(id: int, app_id: int | None = APP_ID, body: str = "status", **kwargs: Any) -> Comment:
    kwargs.setdefault("created_at", datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc))
    return Comment(id=id, body=body, author="stagebot[bot]", app_id=app_id, **kwargs)


def make_check_run(id: int, status: str = "in_progress", head_sha: str = "abc123", **kwargs: Any) -> CheckRun:
    kwargs.setdefault("started_at", datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc))
    return CheckRun(id=id, name="SST - pr-7", head_sha=head_sha, status=status, app_id=APP_ID, **kwargs)


def mutating_calls(adapter: Mock) -> list[str]:
    """Names of adapter methods called that change remote state."""
    names = (
        "create_comment",
        "update_comment",
        "create_check_run",
        "update_check_run",
        "create_or_update_environment",
        "delete_environment",
        "create_workflow_dispatch",
    )
    return [name for name in names if getattr(adapter, name).called]
