"""Control-plane adapters (base and GitHub implementation)."""

from stagebot.adapters.base import ContentDecodeError, ControlPlaneAdapter, GitPlatformError, NotFoundError
from stagebot.adapters.github import GitHubAdapter

__all__ = ["ContentDecodeError", "ControlPlaneAdapter", "GitPlatformError", "GitHubAdapter", "NotFoundError"]
