"""GitHub API adapter."""

import base64
import binascii
from datetime import datetime, timezone
from typing import Any, Dict, List
from urllib.parse import quote

import requests

from stagebot.adapters.base import ContentDecodeError, ControlPlaneAdapter, GitPlatformError, NotFoundError
from stagebot.models import CheckRun, Comment, Deployment, RepoRef

# Single page; the locator works on the first page only
PAGE_SIZE = 100


def _parse_iso(s: str) -> datetime:
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _comment_from_api(data: Dict[str, Any]) -> Comment:
    user = data.get("user") or {}
    app = data.get("performed_via_github_app") or {}
    created = _parse_iso(data["created_at"])
    updated = _parse_iso(data.get("updated_at") or data["created_at"])
    return Comment(
        id=data["id"],
        body=data.get("body") or "",
        author=user.get("login", ""),
        app_id=app.get("id"),
        created_at=created,
        updated_at=updated,
    )


def _check_run_from_api(data: Dict[str, Any]) -> CheckRun:
    app = data.get("app") or {}
    started = data.get("started_at")
    return CheckRun(
        id=data["id"],
        name=data.get("name") or "",
        head_sha=data.get("head_sha") or "",
        status=data.get("status", "queued"),
        conclusion=data.get("conclusion"),
        started_at=_parse_iso(started) if started else None,
        app_id=app.get("id"),
        details_url=data.get("details_url"),
    )


def _deployment_from_api(data: Dict[str, Any]) -> Deployment:
    created = data.get("created_at")
    return Deployment(
        id=data["id"],
        environment=data.get("environment") or "",
        sha=data.get("sha") or "",
        ref=data.get("ref") or "",
        created_at=_parse_iso(created) if created else None,
    )


class GitHubAdapter(ControlPlaneAdapter):
    """GitHub REST API implementation."""

    def __init__(self, token: str, api_url: str = "https://api.github.com") -> None:
        self._api_url = api_url.rstrip("/")
        self._session = requests.Session()
        self._session.headers["Authorization"] = f"token {token}"
        self._session.headers["Accept"] = "application/vnd.github+json"

    def _request(
        self,
        method: str,
        path: str,
        params: Dict[str, Any] | None = None,
        json: Dict[str, Any] | None = None,
    ) -> requests.Response:
        url = f"{self._api_url}{path}" if path.startswith("/") else f"{self._api_url}/{path}"
        try:
            resp = self._session.request(method, url, params=params, json=json, timeout=30)
        except requests.RequestException as e:
            raise GitPlatformError(f"{method} {path}: {e}") from e
        if resp.status_code >= 400:
            msg = resp.text or resp.reason or str(resp.status_code)
            try:
                msg = resp.json().get("message", msg)
            except (ValueError, AttributeError):
                pass
            error_cls = NotFoundError if resp.status_code == 404 else GitPlatformError
            raise error_cls(f"{resp.status_code}: {msg}", status_code=resp.status_code)
        return resp

    def _json(self, resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise GitPlatformError(f"Invalid JSON from {resp.url}: {e}", status_code=resp.status_code) from e

    def list_issue_comments(self, repo: RepoRef, issue_number: int) -> List[Comment]:
        resp = self._request(
            "GET",
            f"/repos/{repo.full_name}/issues/{issue_number}/comments",
            params={"per_page": PAGE_SIZE},
        )
        data = self._json(resp) or []
        return [_comment_from_api(d) for d in data]

    def create_comment(self, repo: RepoRef, issue_number: int, body: str) -> Comment:
        resp = self._request(
            "POST",
            f"/repos/{repo.full_name}/issues/{issue_number}/comments",
            json={"body": body},
        )
        return _comment_from_api(self._json(resp))

    def update_comment(self, repo: RepoRef, comment_id: int, body: str) -> Comment:
        resp = self._request(
            "PATCH",
            f"/repos/{repo.full_name}/issues/comments/{comment_id}",
            json={"body": body},
        )
        return _comment_from_api(self._json(resp))

    def list_check_runs_for_ref(self, repo: RepoRef, ref: str, app_id: int | None = None) -> List[CheckRun]:
        params: Dict[str, Any] = {"per_page": PAGE_SIZE}
        if app_id is not None:
            params["app_id"] = app_id
        resp = self._request("GET", f"/repos/{repo.full_name}/commits/{ref}/check-runs", params=params)
        data = self._json(resp) or {}
        return [_check_run_from_api(d) for d in data.get("check_runs") or []]

    def create_check_run(
        self,
        repo: RepoRef,
        name: str,
        head_sha: str,
        title: str,
        summary: str,
    ) -> CheckRun:
        resp = self._request(
            "POST",
            f"/repos/{repo.full_name}/check-runs",
            json={
                "name": name,
                "head_sha": head_sha,
                "status": "in_progress",
                "started_at": _utc_now_iso(),
                "output": {"title": title, "summary": summary},
            },
        )
        return _check_run_from_api(self._json(resp))

    def update_check_run(
        self,
        repo: RepoRef,
        check_run_id: int,
        conclusion: str,
        title: str,
        summary: str,
        details_url: str | None = None,
    ) -> CheckRun:
        payload: Dict[str, Any] = {
            "status": "completed",
            "conclusion": conclusion,
            "completed_at": _utc_now_iso(),
            "output": {"title": title, "summary": summary},
        }
        if details_url:
            payload["details_url"] = details_url
        resp = self._request("PATCH", f"/repos/{repo.full_name}/check-runs/{check_run_id}", json=payload)
        return _check_run_from_api(self._json(resp))

    def create_or_update_environment(self, repo: RepoRef, environment_name: str) -> None:
        self._request("PUT", f"/repos/{repo.full_name}/environments/{quote(environment_name, safe='')}")

    def delete_environment(self, repo: RepoRef, environment_name: str) -> bool:
        try:
            self._request("DELETE", f"/repos/{repo.full_name}/environments/{quote(environment_name, safe='')}")
        except NotFoundError:
            return False
        return True

    def list_deployments(self, repo: RepoRef, environment: str, per_page: int = 30) -> List[Deployment]:
        resp = self._request(
            "GET",
            f"/repos/{repo.full_name}/deployments",
            params={"environment": environment, "per_page": per_page},
        )
        data = self._json(resp) or []
        return [_deployment_from_api(d) for d in data]

    def create_workflow_dispatch(
        self,
        repo: RepoRef,
        workflow_id: str,
        ref: str,
        inputs: Dict[str, str],
    ) -> None:
        self._request(
            "POST",
            f"/repos/{repo.full_name}/actions/workflows/{workflow_id}/dispatches",
            json={"ref": ref, "inputs": inputs},
        )

    def get_environment_variable(self, repo: RepoRef, environment_name: str, name: str) -> str | None:
        path = f"/repos/{repo.full_name}/environments/{quote(environment_name, safe='')}/variables/{name}"
        try:
            resp = self._request("GET", path)
        except NotFoundError:
            return None
        return (self._json(resp) or {}).get("value")

    def get_file_content(self, repo: RepoRef, path: str, ref: str | None = None) -> str | None:
        params = {"ref": ref} if ref else None
        try:
            resp = self._request("GET", f"/repos/{repo.full_name}/contents/{path}", params=params)
        except NotFoundError:
            return None
        data = self._json(resp)
        # A directory listing comes back as a list
        if not isinstance(data, dict) or data.get("type", "file") != "file":
            return None
        content = data.get("content") or ""
        try:
            return base64.b64decode(content).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ContentDecodeError(f"Cannot decode {path}: {e}") from e
