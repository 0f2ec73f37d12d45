"""Tests for applying plans (ordering and failure policy)."""

from unittest.mock import Mock

import pytest

from stagebot.adapters.base import GitPlatformError
from stagebot.engine.actions import (
    CheckRunOutput,
    CreateCheckRun,
    DeleteEnvironment,
    DispatchWorkflow,
    UpsertComment,
    UpsertEnvironment,
)
from stagebot.engine.executor import execute_plan
from stagebot.engine.planner import Plan

OUTPUT = CheckRunOutput(title="T", summary="S")
FAILED = CheckRunOutput(title="SST - pr-7", summary="Deployment to **pr-7** could not be started.")


def _opened_plan() -> Plan:
    return Plan(
        actions=[
            UpsertComment(issue_number=7, body="started"),
            UpsertEnvironment(environment="pr-7"),
            CreateCheckRun(name="SST - pr-7", head_sha="abc123", output=OUTPUT),
            DispatchWorkflow(workflow_id="sst.yml", ref="feature", inputs={"stage": "pr-7", "action": "deploy"}),
        ],
        on_failure=FAILED,
    )


def test_applies_all_actions_in_order(adapter: Mock, repo) -> None:
    result = execute_plan(adapter, repo, _opened_plan())

    assert result.ok
    assert len(result.applied) == 4
    assert result.check_run_id == 501
    called = [c[0] for c in adapter.method_calls]
    assert called == ["create_comment", "create_or_update_environment", "create_check_run", "create_workflow_dispatch"]
    adapter.create_workflow_dispatch.assert_called_once_with(
        repo, "sst.yml", "feature", {"stage": "pr-7", "action": "deploy"}
    )


def test_dispatch_failure_marks_created_check_run_failed(adapter: Mock, repo) -> None:
    adapter.create_workflow_dispatch.side_effect = GitPlatformError("422: No ref found", status_code=422)

    result = execute_plan(adapter, repo, _opened_plan())

    assert not result.ok
    assert isinstance(result.failed, DispatchWorkflow)
    adapter.update_check_run.assert_called_once_with(
        repo,
        501,
        conclusion="failure",
        title=FAILED.title,
        summary=FAILED.summary,
        details_url=None,
    )


def test_failure_before_check_run_stops_without_marking(adapter: Mock, repo) -> None:
    adapter.create_or_update_environment.side_effect = GitPlatformError("403: Forbidden", status_code=403)

    result = execute_plan(adapter, repo, _opened_plan())

    assert isinstance(result.failed, UpsertEnvironment)
    adapter.create_check_run.assert_not_called()
    adapter.create_workflow_dispatch.assert_not_called()
    adapter.update_check_run.assert_not_called()


def test_failure_marking_check_run_is_logged_not_raised(adapter: Mock, repo) -> None:
    adapter.create_workflow_dispatch.side_effect = GitPlatformError("500", status_code=500)
    adapter.update_check_run.side_effect = GitPlatformError("500", status_code=500)

    result = execute_plan(adapter, repo, _opened_plan())

    assert isinstance(result.failed, DispatchWorkflow)


def test_without_failure_policy_error_propagates(adapter: Mock, repo) -> None:
    adapter.delete_environment.side_effect = GitPlatformError("500", status_code=500)
    plan = Plan(
        actions=[
            DeleteEnvironment(environment="pr-7"),
            DispatchWorkflow(workflow_id="sst.yml", ref="main", inputs={"stage": "pr-7", "action": "remove"}),
        ]
    )
    with pytest.raises(GitPlatformError):
        execute_plan(adapter, repo, plan)
    adapter.create_workflow_dispatch.assert_not_called()


def test_continue_on_error_is_skipped(adapter: Mock, repo) -> None:
    adapter.create_workflow_dispatch.side_effect = GitPlatformError("404: workflow not found", status_code=404)
    plan = Plan(
        actions=[
            DeleteEnvironment(environment="pr-7"),
            DispatchWorkflow(
                workflow_id="sst.yml",
                ref="main",
                inputs={"stage": "pr-7", "action": "remove"},
                continue_on_error=True,
            ),
        ]
    )
    result = execute_plan(adapter, repo, plan)

    assert result.ok
    assert len(result.applied) == 1
    assert len(result.skipped) == 1


def test_existing_comment_is_updated_not_created(adapter: Mock, repo) -> None:
    plan = Plan(actions=[UpsertComment(issue_number=7, comment_id=55, body="new body")])
    execute_plan(adapter, repo, plan)
    adapter.update_comment.assert_called_once_with(repo, 55, "new body")
    adapter.create_comment.assert_not_called()
