"""
Reconcile one webhook event against GitHub.

Each reconcile_* function observes the remote state the event needs (repo
config, status comment, check run, deployments, outputs), asks the planner
what to do, and applies the plan. No state survives between calls; a
repeated delivery observes what the previous one left behind and converges
on the same comment and check run.
"""

import logging
from datetime import datetime

from stagebot.adapters.base import ControlPlaneAdapter, GitPlatformError
from stagebot.engine.executor import ExecutionResult, execute_plan
from stagebot.engine.planner import (
    Plan,
    StageKind,
    deployment_stage_kind,
    noop,
    parse_deployment_outputs,
    plan_ephemeral_deployment_status,
    plan_pull_request_closed,
    plan_pull_request_opened,
    plan_push,
    plan_static_deployment_status,
)
from stagebot.events import DeploymentStatusEvent, PullRequestEvent, PushEvent
from stagebot.locator import find_in_progress_check_run, find_status_comment
from stagebot.models import AppIdentity, DeploymentOutputs, RepoRef
from stagebot.repo_config import resolve_repo_config
from stagebot.stages import pr_number_from_stage, pr_stage

OUTPUTS_VARIABLE = "SST_OUTPUTS"

_LOGGER_NAME = "stagebot.engine.reconciler"


def _apply(
    adapter: ControlPlaneAdapter,
    repo: RepoRef,
    plan: Plan,
    logger: logging.Logger,
) -> ExecutionResult:
    if plan.is_empty:
        logger.info("%s: nothing to do (%s)", repo.full_name, plan.reason)
        return ExecutionResult()
    return execute_plan(adapter, repo, plan, log=logger)


def reconcile_pull_request_opened(
    adapter: ControlPlaneAdapter,
    identity: AppIdentity,
    event: PullRequestEvent,
    log: logging.Logger | None = None,
    now: datetime | None = None,
) -> ExecutionResult:
    """PR opened or synchronized: post status, create environment and check run, dispatch deploy."""
    logger = log or logging.getLogger(_LOGGER_NAME)
    config = resolve_repo_config(adapter, event.repo)
    comment = find_status_comment(adapter, event.repo, event.number, identity)
    plan = plan_pull_request_opened(event, config, comment, now=now)
    result = _apply(adapter, event.repo, plan, logger)
    if result.ok:
        logger.info("PR #%s: deployment of %s triggered", event.number, pr_stage(event.number))
    return result


def reconcile_deployment_status(
    adapter: ControlPlaneAdapter,
    identity: AppIdentity,
    event: DeploymentStatusEvent,
    log: logging.Logger | None = None,
    now: datetime | None = None,
) -> ExecutionResult:
    """Deployment finished: complete the check run and, for PR stages, update the status comment."""
    logger = log or logging.getLogger(_LOGGER_NAME)
    repo = event.repo
    config = resolve_repo_config(adapter, repo)

    kind = deployment_stage_kind(event, config)
    if kind is None:
        return _apply(adapter, repo, noop(f"deployment status {event.state} for {event.environment}"), logger)

    check_run = find_in_progress_check_run(adapter, repo, event.sha, identity)
    if kind is StageKind.STATIC:
        return _apply(adapter, repo, plan_static_deployment_status(event, check_run), logger)

    pr_number = pr_number_from_stage(event.environment)
    if pr_number is None:
        return _apply(adapter, repo, noop(f"{event.environment} is not a pull request stage"), logger)
    comment = find_status_comment(adapter, repo, pr_number, identity)

    outputs: DeploymentOutputs | None = None
    if event.state == "success" and check_run is not None and comment is not None:
        try:
            raw = adapter.get_environment_variable(repo, event.environment, OUTPUTS_VARIABLE)
        except GitPlatformError as e:
            logger.warning("%s: cannot read %s for %s - %s", repo.full_name, OUTPUTS_VARIABLE, event.environment, e)
            raw = None
        else:
            if raw is None:
                logger.warning("%s: %s not set for %s", repo.full_name, OUTPUTS_VARIABLE, event.environment)
        outputs = parse_deployment_outputs(raw)

    plan = plan_ephemeral_deployment_status(event, config, check_run, comment, outputs=outputs, now=now)
    return _apply(adapter, repo, plan, logger)


def reconcile_pull_request_closed(
    adapter: ControlPlaneAdapter,
    identity: AppIdentity,
    event: PullRequestEvent,
    log: logging.Logger | None = None,
) -> ExecutionResult:
    """PR closed: delete the environment and dispatch teardown, if it was ever deployed."""
    logger = log or logging.getLogger(_LOGGER_NAME)
    stage = pr_stage(event.number)
    deployments = adapter.list_deployments(event.repo, environment=stage, per_page=1)
    if not deployments:
        return _apply(adapter, event.repo, noop(f"no deployment recorded for {stage}"), logger)
    logger.info("PR #%s %s: tearing down %s", event.number, "merged" if event.merged else "closed", stage)
    config = resolve_repo_config(adapter, event.repo)
    plan = plan_pull_request_closed(event, config, deployments[0])
    return _apply(adapter, event.repo, plan, logger)


def reconcile_push(
    adapter: ControlPlaneAdapter,
    identity: AppIdentity,
    event: PushEvent,
    log: logging.Logger | None = None,
) -> ExecutionResult:
    """Push to a static stage branch: dispatch deploy and start a new check run."""
    logger = log or logging.getLogger(_LOGGER_NAME)
    config = resolve_repo_config(adapter, event.repo)
    return _apply(adapter, event.repo, plan_push(event, config), logger)
