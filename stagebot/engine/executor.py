"""Apply a Plan to the control plane, in order."""

import logging
from typing import List

from pydantic import BaseModel, Field

from stagebot.adapters.base import ControlPlaneAdapter, GitPlatformError
from stagebot.engine.actions import Action, CheckRunOutput, CompleteCheckRun, CreateCheckRun
from stagebot.engine.planner import Plan
from stagebot.models import RepoRef


class ExecutionResult(BaseModel):
    """What happened when a plan was applied."""

    applied: List[Action] = Field(default_factory=list)
    skipped: List[Action] = Field(default_factory=list)
    failed: Action | None = None
    check_run_id: int | None = None

    @property
    def ok(self) -> bool:
        return self.failed is None


def _mark_not_started(
    adapter: ControlPlaneAdapter,
    repo: RepoRef,
    check_run_id: int,
    output: CheckRunOutput,
    logger: logging.Logger,
) -> None:
    action = CompleteCheckRun(check_run_id=check_run_id, conclusion="failure", output=output)
    try:
        action.apply(adapter, repo)
    except GitPlatformError as e:
        logger.error("%s: could not mark check run %s failed - %s", repo.full_name, check_run_id, e)


def execute_plan(
    adapter: ControlPlaneAdapter,
    repo: RepoRef,
    plan: Plan,
    log: logging.Logger | None = None,
) -> ExecutionResult:
    """Run each action of the plan against the adapter.

    The first failing action stops the plan unless it is marked
    continue_on_error. With plan.on_failure set, the check run created
    earlier in the plan is completed as failed and the error is logged;
    otherwise the GitPlatformError is re-raised.
    """
    logger = log or logging.getLogger("stagebot.engine.executor")
    result = ExecutionResult()

    for action in plan.actions:
        try:
            outcome = action.apply(adapter, repo)
        except GitPlatformError as e:
            if action.continue_on_error:
                logger.warning("%s: %s failed, continuing - %s", repo.full_name, action.describe(), e)
                result.skipped.append(action)
                continue
            result.failed = action
            if plan.on_failure is None:
                raise
            logger.error("%s: %s failed - %s", repo.full_name, action.describe(), e)
            if result.check_run_id is not None:
                _mark_not_started(adapter, repo, result.check_run_id, plan.on_failure, logger)
            return result
        if isinstance(action, CreateCheckRun):
            result.check_run_id = outcome
        logger.info("%s: %s", repo.full_name, action.describe())
        result.applied.append(action)

    return result
