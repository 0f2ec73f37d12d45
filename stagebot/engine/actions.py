"""Side-effecting API operations the planner emits.

Each action is an immutable description of one call; `apply` performs it
against a ControlPlaneAdapter. Updates are overwrites by id, so applying
the same action twice leaves the same remote state.
"""

from typing import Any, Dict, Literal, Union

from pydantic import BaseModel, ConfigDict

from stagebot.adapters.base import ControlPlaneAdapter
from stagebot.models import RepoRef


class CheckRunOutput(BaseModel):
    """Title and summary shown on a check run."""

    model_config = ConfigDict(frozen=True)

    title: str
    summary: str


class Action(BaseModel):
    """Base for planned operations."""

    model_config = ConfigDict(frozen=True)

    # Log and carry on instead of aborting the plan
    continue_on_error: bool = False

    def apply(self, adapter: ControlPlaneAdapter, repo: RepoRef) -> Any:
        raise NotImplementedError(type(self).__name__)

    def describe(self) -> str:
        return type(self).__name__


class UpsertComment(Action):
    """Update the status comment if located, else create it."""

    kind: Literal["upsert_comment"] = "upsert_comment"
    issue_number: int
    comment_id: int | None = None
    body: str

    def apply(self, adapter: ControlPlaneAdapter, repo: RepoRef) -> int:
        if self.comment_id is not None:
            adapter.update_comment(repo, self.comment_id, self.body)
            return self.comment_id
        return adapter.create_comment(repo, self.issue_number, self.body).id

    def describe(self) -> str:
        verb = f"update comment {self.comment_id}" if self.comment_id is not None else "create comment"
        return f"{verb} on #{self.issue_number}"


class UpsertEnvironment(Action):
    kind: Literal["upsert_environment"] = "upsert_environment"
    environment: str

    def apply(self, adapter: ControlPlaneAdapter, repo: RepoRef) -> None:
        adapter.create_or_update_environment(repo, self.environment)

    def describe(self) -> str:
        return f"create or update environment {self.environment}"


class DeleteEnvironment(Action):
    """Delete an environment; one that is already gone is fine."""

    kind: Literal["delete_environment"] = "delete_environment"
    environment: str

    def apply(self, adapter: ControlPlaneAdapter, repo: RepoRef) -> bool:
        return adapter.delete_environment(repo, self.environment)

    def describe(self) -> str:
        return f"delete environment {self.environment}"


class CreateCheckRun(Action):
    kind: Literal["create_check_run"] = "create_check_run"
    name: str
    head_sha: str
    output: CheckRunOutput

    def apply(self, adapter: ControlPlaneAdapter, repo: RepoRef) -> int:
        run = adapter.create_check_run(
            repo,
            name=self.name,
            head_sha=self.head_sha,
            title=self.output.title,
            summary=self.output.summary,
        )
        return run.id

    def describe(self) -> str:
        return f"create check run '{self.name}' on {self.head_sha[:7]}"


class CompleteCheckRun(Action):
    kind: Literal["complete_check_run"] = "complete_check_run"
    check_run_id: int
    conclusion: Literal["success", "failure"]
    output: CheckRunOutput
    details_url: str | None = None

    def apply(self, adapter: ControlPlaneAdapter, repo: RepoRef) -> None:
        adapter.update_check_run(
            repo,
            self.check_run_id,
            conclusion=self.conclusion,
            title=self.output.title,
            summary=self.output.summary,
            details_url=self.details_url,
        )

    def describe(self) -> str:
        return f"complete check run {self.check_run_id} ({self.conclusion})"


class DispatchWorkflow(Action):
    kind: Literal["dispatch_workflow"] = "dispatch_workflow"
    workflow_id: str
    ref: str
    inputs: Dict[str, str]

    def apply(self, adapter: ControlPlaneAdapter, repo: RepoRef) -> None:
        adapter.create_workflow_dispatch(repo, self.workflow_id, self.ref, dict(self.inputs))

    def describe(self) -> str:
        return f"dispatch {self.workflow_id} on {self.ref} with {self.inputs}"


AnyAction = Union[
    UpsertComment,
    UpsertEnvironment,
    DeleteEnvironment,
    CreateCheckRun,
    CompleteCheckRun,
    DispatchWorkflow,
]
