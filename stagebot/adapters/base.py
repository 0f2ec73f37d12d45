"""Abstract base for the control-plane adapter.

Expected absence (no such file, environment or variable) is reported as a
return value (None / False), never as an exception. Every other API failure
raises GitPlatformError so callers can tell "not there" from "broken".
"""

from abc import ABC, abstractmethod
from typing import Dict, List

from stagebot.models import CheckRun, Comment, Deployment, RepoRef


class GitPlatformError(Exception):
    """Raised when a Git platform API call fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(GitPlatformError):
    """Raised on 404 where absence is not an expected outcome."""

    pass


class ContentDecodeError(GitPlatformError):
    """Raised when a file exists but its content is not UTF-8 text."""

    pass


class ControlPlaneAdapter(ABC):
    """Calls the reconciler needs from the hosting platform (GitHub)."""

    @abstractmethod
    def list_issue_comments(self, repo: RepoRef, issue_number: int) -> List[Comment]:
        """First page of comments on an issue or PR, oldest first."""
        ...

    @abstractmethod
    def create_comment(self, repo: RepoRef, issue_number: int, body: str) -> Comment:
        """Post a comment on an issue or PR."""
        ...

    @abstractmethod
    def update_comment(self, repo: RepoRef, comment_id: int, body: str) -> Comment:
        """Replace the body of an existing comment."""
        ...

    @abstractmethod
    def list_check_runs_for_ref(self, repo: RepoRef, ref: str, app_id: int | None = None) -> List[CheckRun]:
        """First page of check runs for a commit, optionally filtered by app."""
        ...

    @abstractmethod
    def create_check_run(
        self,
        repo: RepoRef,
        name: str,
        head_sha: str,
        title: str,
        summary: str,
    ) -> CheckRun:
        """Create an in-progress check run."""
        ...

    @abstractmethod
    def update_check_run(
        self,
        repo: RepoRef,
        check_run_id: int,
        conclusion: str,
        title: str,
        summary: str,
        details_url: str | None = None,
    ) -> CheckRun:
        """Complete a check run with the given conclusion."""
        ...

    @abstractmethod
    def create_or_update_environment(self, repo: RepoRef, environment_name: str) -> None:
        """Create the deployment environment, or leave it as is."""
        ...

    @abstractmethod
    def delete_environment(self, repo: RepoRef, environment_name: str) -> bool:
        """Delete an environment. Returns False if it was already gone."""
        ...

    @abstractmethod
    def list_deployments(self, repo: RepoRef, environment: str, per_page: int = 30) -> List[Deployment]:
        """Deployments for an environment, newest first."""
        ...

    @abstractmethod
    def create_workflow_dispatch(
        self,
        repo: RepoRef,
        workflow_id: str,
        ref: str,
        inputs: Dict[str, str],
    ) -> None:
        """Trigger a workflow_dispatch run."""
        ...

    @abstractmethod
    def get_environment_variable(self, repo: RepoRef, environment_name: str, name: str) -> str | None:
        """Value of an environment variable, or None if it is not set."""
        ...

    @abstractmethod
    def get_file_content(self, repo: RepoRef, path: str, ref: str | None = None) -> str | None:
        """Decoded text of a repository file, or None if it does not exist.

        Raises ContentDecodeError when the file is not UTF-8 text.
        """
        ...
