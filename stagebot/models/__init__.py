"""Data models for GitHub resources the reconciler reads (Pydantic)."""

from stagebot.models.check_run import CheckRun
from stagebot.models.comment import Comment
from stagebot.models.deployment import Deployment, DeploymentOutputs
from stagebot.models.repo import AppIdentity, RepoRef

__all__ = ["AppIdentity", "CheckRun", "Comment", "Deployment", "DeploymentOutputs", "RepoRef"]
