"""Event schemas for the GitHub webhooks the reconciler handles.

Processed events:
- pull_request: opened, synchronize, reopened (deploy), closed (destroy)
- deployment_status: created (report outcome)
- push: to a branch mapped to a static stage (deploy)

Parsers return None for payloads missing required fields; the caller logs
and skips them.
"""

import logging
from typing import Any, Dict

from pydantic import BaseModel, ValidationError

from stagebot.models import RepoRef

LOG = logging.getLogger("stagebot.events")

NULL_SHA = "0" * 40


class PullRequestEvent(BaseModel):
    """pull_request webhook."""

    action: str
    repo: RepoRef
    number: int
    head_sha: str
    head_ref: str
    merged: bool = False


class DeploymentStatusEvent(BaseModel):
    """deployment_status webhook (action=created)."""

    repo: RepoRef
    environment: str
    sha: str
    state: str
    log_url: str | None = None


class PushEvent(BaseModel):
    """push webhook."""

    repo: RepoRef
    ref: str
    after: str
    deleted: bool = False

    @property
    def is_branch_deletion(self) -> bool:
        return self.deleted or self.after == NULL_SHA


def _repo_from_payload(payload: Dict[str, Any]) -> RepoRef:
    repo = payload.get("repository") or {}
    owner = repo.get("owner") or {}
    return RepoRef(owner=owner.get("login") or "", name=repo.get("name") or "", id=repo.get("id"))


def _require_repo(repo: RepoRef, event: str) -> bool:
    if not repo.owner or not repo.name:
        LOG.warning("%s payload missing repository owner/name", event)
        return False
    return True


def parse_pull_request(payload: Dict[str, Any]) -> PullRequestEvent | None:
    repo = _repo_from_payload(payload)
    if not _require_repo(repo, "pull_request"):
        return None
    pull = payload.get("pull_request") or {}
    head = pull.get("head") or {}
    try:
        return PullRequestEvent(
            action=payload.get("action") or "",
            repo=repo,
            number=pull.get("number"),
            head_sha=head.get("sha"),
            head_ref=head.get("ref"),
            merged=bool(pull.get("merged")),
        )
    except ValidationError as e:
        LOG.warning("Failed to parse pull_request payload: %s", e)
        return None


def parse_deployment_status(payload: Dict[str, Any]) -> DeploymentStatusEvent | None:
    repo = _repo_from_payload(payload)
    if not _require_repo(repo, "deployment_status"):
        return None
    deployment = payload.get("deployment") or {}
    status = payload.get("deployment_status") or {}
    try:
        return DeploymentStatusEvent(
            repo=repo,
            environment=deployment.get("environment"),
            sha=deployment.get("sha"),
            state=status.get("state"),
            log_url=status.get("log_url") or status.get("target_url"),
        )
    except ValidationError as e:
        LOG.warning("Failed to parse deployment_status payload: %s", e)
        return None


def parse_push(payload: Dict[str, Any]) -> PushEvent | None:
    repo = _repo_from_payload(payload)
    if not _require_repo(repo, "push"):
        return None
    try:
        return PushEvent(
            repo=repo,
            ref=payload.get("ref"),
            after=payload.get("after"),
            deleted=bool(payload.get("deleted")),
        )
    except ValidationError as e:
        LOG.warning("Failed to parse push payload: %s", e)
        return None
