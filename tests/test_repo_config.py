"""Tests for per-repository config resolution."""

import base64
import logging
from unittest.mock import Mock, patch

import pytest
from pydantic import ValidationError

from stagebot.adapters.base import ContentDecodeError, GitPlatformError
from stagebot.adapters.github import GitHubAdapter
from stagebot.repo_config import (
    CONFIG_PATHS,
    DEFAULT_REPO_CONFIG,
    RepoConfig,
    deep_merge,
    default_repo_config,
    resolve_repo_config,
)


def _files(adapter: Mock, files: dict) -> None:
    adapter.get_file_content.side_effect = lambda repo, path, ref=None: files.get(path)


def test_no_file_returns_defaults(adapter: Mock, repo) -> None:
    config = resolve_repo_config(adapter, repo)
    assert config == default_repo_config()
    assert config.workflow_id == "sst.yml"
    assert config.default_branch == "main"
    assert config.branch_mappings == {"staging": "staging", "main": "prod"}
    assert [c.args[1] for c in adapter.get_file_content.call_args_list] == list(CONFIG_PATHS)


def test_override_only_workflow_id(adapter: Mock, repo) -> None:
    _files(adapter, {"sst-config.yml": "workflowId: deploy.yml\n"})
    config = resolve_repo_config(adapter, repo)
    assert config.workflow_id == "deploy.yml"
    assert config.model_dump(exclude={"workflow_id"}) == default_repo_config().model_dump(exclude={"workflow_id"})


def test_first_found_path_wins(adapter: Mock, repo) -> None:
    _files(
        adapter,
        {
            "sst-config.yaml": "sstWorkspace: first\n",
            ".github/sst-config.yml": "sstWorkspace: second\n",
        },
    )
    assert resolve_repo_config(adapter, repo).sst_workspace == "first"
    requested = [c.args[1] for c in adapter.get_file_content.call_args_list]
    assert requested == ["sst-config.yml", "sst-config.yaml"]


def test_branch_mappings_merge_key_by_key(adapter: Mock, repo) -> None:
    _files(adapter, {".github/sst-config.yaml": "branchMappings:\n  main: production\n  qa: qa\n"})
    config = resolve_repo_config(adapter, repo)
    assert config.branch_mappings == {"staging": "staging", "main": "production", "qa": "qa"}
    assert config.stage_for_branch("qa") == "qa"
    assert config.is_static_stage("production")
    assert not config.is_static_stage("prod")


def test_invalid_yaml_falls_through(adapter: Mock, repo) -> None:
    """An unparsable file is skipped; the next candidate is tried."""
    _files(
        adapter,
        {
            "sst-config.yml": "workflowId: [unclosed\n",
            ".github/sst-config.yml": "workflowId: next.yml\n",
        },
    )
    assert resolve_repo_config(adapter, repo).workflow_id == "next.yml"


@pytest.mark.parametrize("text", ["- a\n- b\n", "branchMappings: nope\n", "workflowId: [unclosed\n"])
def test_unusable_file_gives_defaults(adapter: Mock, repo, text: str) -> None:
    _files(adapter, {"sst-config.yml": text})
    assert resolve_repo_config(adapter, repo) == default_repo_config()


def test_empty_file_gives_defaults(adapter: Mock, repo) -> None:
    _files(adapter, {"sst-config.yml": ""})
    assert resolve_repo_config(adapter, repo) == default_repo_config()
    assert adapter.get_file_content.call_count == 1


def test_non_utf8_file_falls_through(adapter: Mock, repo, caplog: pytest.LogCaptureFixture) -> None:
    def content(repo, path, ref=None):
        if path == "sst-config.yml":
            raise ContentDecodeError("Cannot decode sst-config.yml: 'utf-8' codec can't decode byte 0xff")
        return "workflowId: next.yml\n" if path == "sst-config.yaml" else None

    adapter.get_file_content.side_effect = content
    with caplog.at_level(logging.WARNING, logger="stagebot.repo_config"):
        assert resolve_repo_config(adapter, repo).workflow_id == "next.yml"
    assert "Ignoring sst-config.yml" in caplog.text


def test_non_utf8_body_from_github_gives_defaults(repo) -> None:
    gh = GitHubAdapter(token="tok")
    resp = Mock(status_code=200)
    resp.json.return_value = {"type": "file", "content": base64.b64encode(b"workflowId: \xff\xfe\n").decode()}
    with patch.object(gh._session, "request", return_value=resp):
        assert resolve_repo_config(gh, repo) == default_repo_config()


def test_only_non_utf8_file_gives_defaults(adapter: Mock, repo) -> None:
    adapter.get_file_content.side_effect = ContentDecodeError("Cannot decode")
    assert resolve_repo_config(adapter, repo) == default_repo_config()
    assert adapter.get_file_content.call_count == len(CONFIG_PATHS)


def test_api_failure_propagates(adapter: Mock, repo) -> None:
    """Only 'not found' is tolerated; other failures surface for a retry."""
    adapter.get_file_content.side_effect = GitPlatformError("500: boom", status_code=500)
    with pytest.raises(GitPlatformError):
        resolve_repo_config(adapter, repo)


def test_deep_merge_does_not_mutate_inputs() -> None:
    base = {"a": {"x": 1}, "b": 2}
    merged = deep_merge(base, {"a": {"y": 3}, "b": 4})
    assert merged == {"a": {"x": 1, "y": 3}, "b": 4}
    assert base == {"a": {"x": 1}, "b": 2}


def test_repo_config_is_frozen() -> None:
    config = RepoConfig.model_validate(DEFAULT_REPO_CONFIG)
    with pytest.raises(ValidationError):
        config.workflow_id = "other.yml"
