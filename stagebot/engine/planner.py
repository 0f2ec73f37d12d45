"""Decide which API calls an event needs, given freshly observed remote state.

Every function here is pure: (event, repo config, located state) -> Plan.
Nothing is read or written; the reconciler does the lookups and hands the
results in, and the executor applies the plan.
"""

import json
import logging
from datetime import datetime
from enum import Enum
from typing import Annotated, List

from pydantic import BaseModel, Field, ValidationError

from stagebot.comments import render_failure, render_started, render_success
from stagebot.engine.actions import (
    AnyAction,
    CheckRunOutput,
    CompleteCheckRun,
    CreateCheckRun,
    DeleteEnvironment,
    DispatchWorkflow,
    UpsertComment,
    UpsertEnvironment,
)
from stagebot.events import DeploymentStatusEvent, PullRequestEvent, PushEvent
from stagebot.models import CheckRun, Comment, Deployment, DeploymentOutputs
from stagebot.repo_config import RepoConfig
from stagebot.stages import branch_from_ref, check_run_name, is_pr_stage, pr_number_from_stage, pr_stage

LOG = logging.getLogger("stagebot.engine.planner")

DEPLOY = "deploy"
REMOVE = "remove"
TERMINAL_STATES = ("success", "failure")


class StageKind(str, Enum):
    EPHEMERAL = "ephemeral"
    STATIC = "static"


class Plan(BaseModel):
    """Ordered actions for one event.

    on_failure: if set, a failing action completes the check run created
    earlier in the plan with this output instead of raising.
    """

    actions: List[Annotated[AnyAction, Field(discriminator="kind")]] = Field(default_factory=list)
    on_failure: CheckRunOutput | None = None
    reason: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.actions


def noop(reason: str) -> Plan:
    return Plan(reason=reason)


def in_progress_output(stage: str) -> CheckRunOutput:
    return CheckRunOutput(title="Deployment in Progress", summary=f"Deployment to **{stage}** is in progress.")


def not_started_output(stage: str) -> CheckRunOutput:
    return CheckRunOutput(title=check_run_name(stage), summary=f"Deployment to **{stage}** could not be started.")


def outcome_output(stage: str, state: str) -> CheckRunOutput:
    if state == "success":
        return CheckRunOutput(title="Deployment Successful", summary=f"Deployment to **{stage}** was successful.")
    return CheckRunOutput(title="Deployment Failed", summary=f"Deployment to **{stage}** failed.")


def parse_deployment_outputs(raw: str | None) -> DeploymentOutputs:
    """Parse SST_OUTPUTS; anything missing or malformed gives no outputs."""
    if not raw:
        return DeploymentOutputs()
    try:
        return DeploymentOutputs.model_validate(json.loads(raw))
    except (ValueError, ValidationError) as e:
        LOG.warning("Malformed deployment outputs, rendering without URLs: %s", e)
        return DeploymentOutputs()


def plan_pull_request_opened(
    event: PullRequestEvent,
    config: RepoConfig,
    status_comment: Comment | None,
    now: datetime | None = None,
) -> Plan:
    """Comment, environment, check run, then dispatch the deploy workflow."""
    stage = pr_stage(event.number)
    return Plan(
        actions=[
            UpsertComment(
                issue_number=event.number,
                comment_id=status_comment.id if status_comment else None,
                body=render_started(stage, config.sst_workspace, now=now),
            ),
            UpsertEnvironment(environment=stage),
            CreateCheckRun(name=check_run_name(stage), head_sha=event.head_sha, output=in_progress_output(stage)),
            DispatchWorkflow(
                workflow_id=config.workflow_id,
                ref=event.head_ref,
                inputs={"stage": stage, "action": DEPLOY},
            ),
        ],
        on_failure=not_started_output(stage),
    )


def deployment_stage_kind(event: DeploymentStatusEvent, config: RepoConfig) -> StageKind | None:
    """Which lifecycle the status belongs to, or None if it is not ours to report."""
    if event.state not in TERMINAL_STATES:
        return None
    if is_pr_stage(event.environment):
        return StageKind.EPHEMERAL
    if config.is_static_stage(event.environment):
        return StageKind.STATIC
    return None


def plan_static_deployment_status(event: DeploymentStatusEvent, check_run: CheckRun | None) -> Plan:
    if check_run is None:
        return noop(f"no in-progress check run for {event.environment} on {event.sha}")
    return Plan(
        actions=[
            CompleteCheckRun(
                check_run_id=check_run.id,
                conclusion=event.state,
                output=outcome_output(event.environment, event.state),
                details_url=event.log_url,
            ),
        ]
    )


def plan_ephemeral_deployment_status(
    event: DeploymentStatusEvent,
    config: RepoConfig,
    check_run: CheckRun | None,
    status_comment: Comment | None,
    outputs: DeploymentOutputs | None = None,
    now: datetime | None = None,
) -> Plan:
    """Complete the check run and overwrite the status comment with the outcome."""
    if check_run is None or status_comment is None:
        return noop(f"no status comment or check run to update for {event.environment}")
    stage = event.environment
    if event.state == "success":
        body = render_success(stage, (outputs or DeploymentOutputs()).urls)
    else:
        body = render_failure(stage, event.log_url or "", config.sst_workspace, now=now)
    return Plan(
        actions=[
            CompleteCheckRun(
                check_run_id=check_run.id,
                conclusion=event.state,
                output=outcome_output(stage, event.state),
                details_url=event.log_url,
            ),
            UpsertComment(
                issue_number=pr_number_from_stage(stage) or 0,
                comment_id=status_comment.id,
                body=body,
            ),
        ]
    )


def plan_pull_request_closed(
    event: PullRequestEvent,
    config: RepoConfig,
    latest_deployment: Deployment | None,
) -> Plan:
    """Delete the environment and dispatch teardown on the default branch."""
    stage = pr_stage(event.number)
    if latest_deployment is None:
        return noop(f"no deployment recorded for {stage}")
    return Plan(
        actions=[
            DeleteEnvironment(environment=stage),
            # The PR branch may already be deleted (squash merge)
            DispatchWorkflow(
                workflow_id=config.workflow_id,
                ref=config.default_branch,
                inputs={"stage": stage, "action": REMOVE},
                continue_on_error=True,
            ),
        ]
    )


def plan_push(event: PushEvent, config: RepoConfig) -> Plan:
    """Deploy a static stage and start a fresh check run for the pushed commit."""
    branch = branch_from_ref(event.ref)
    stage = config.stage_for_branch(branch)
    if stage is None:
        return noop(f"{branch} is not a static stage branch")
    if event.is_branch_deletion:
        return noop(f"{branch} was deleted")
    return Plan(
        actions=[
            DispatchWorkflow(
                workflow_id=config.workflow_id,
                ref=event.ref,
                inputs={"stage": stage, "action": DEPLOY},
            ),
            CreateCheckRun(name=check_run_name(stage), head_sha=event.after, output=in_progress_output(stage)),
        ]
    )
