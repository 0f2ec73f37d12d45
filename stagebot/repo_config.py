"""Per-repository config: defaults overlaid with an optional YAML file.

The file is looked up in the target repository at a fixed list of paths;
the first one that exists and parses wins. Its mapping is deep-merged over
DEFAULT_REPO_CONFIG (scalars replaced, mappings merged key by key).

Example .github/sst-config.yml:

    sstWorkspace: acme
    workflowId: deploy.yml
    branchMappings:
      main: production
"""

import logging
from typing import Any, Dict

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from stagebot.adapters.base import ContentDecodeError, ControlPlaneAdapter
from stagebot.models import RepoRef

LOG = logging.getLogger("stagebot.repo_config")

CONFIG_PATHS = (
    "sst-config.yml",
    "sst-config.yaml",
    ".github/sst-config.yml",
    ".github/sst-config.yaml",
)

DEFAULT_REPO_CONFIG: Dict[str, Any] = {
    "sstWorkspace": "default",
    "defaultBranch": "main",
    "workflowId": "sst.yml",
    "branchMappings": {
        "staging": "staging",
        "main": "prod",
    },
}


class RepoConfig(BaseModel):
    """Effective config for one repository, resolved once per event."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    sst_workspace: str = Field(alias="sstWorkspace")
    default_branch: str = Field(alias="defaultBranch")
    workflow_id: str = Field(alias="workflowId")
    branch_mappings: Dict[str, str] = Field(default_factory=dict, alias="branchMappings")

    def stage_for_branch(self, branch: str) -> str | None:
        """Static stage mapped to a branch, or None for feature branches."""
        return self.branch_mappings.get(branch)

    def is_static_stage(self, stage: str) -> bool:
        return stage in self.branch_mappings.values()


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Return base with override merged in; nested dicts merge recursively."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def default_repo_config() -> RepoConfig:
    return RepoConfig.model_validate(DEFAULT_REPO_CONFIG)


def _parse_override(path: str, text: str) -> RepoConfig | None:
    """Parse a config file and merge it over defaults; None if unusable."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        LOG.warning("Ignoring %s: invalid YAML - %s", path, e)
        return None
    if data is None:
        data = {}
    if not isinstance(data, dict):
        LOG.warning("Ignoring %s: expected a mapping, got %s", path, type(data).__name__)
        return None
    try:
        return RepoConfig.model_validate(deep_merge(DEFAULT_REPO_CONFIG, data))
    except ValidationError as e:
        LOG.warning("Ignoring %s: %s", path, e)
        return None


def resolve_repo_config(adapter: ControlPlaneAdapter, repo: RepoRef) -> RepoConfig:
    """Resolve the effective config for a repository.

    Missing, undecodable and unparsable files fall through to the next
    path, and then to the defaults. Any other API failure raises GitPlatformError.
    """
    for path in CONFIG_PATHS:
        try:
            text = adapter.get_file_content(repo, path)
        except ContentDecodeError as e:
            LOG.warning("Ignoring %s: %s", path, e)
            continue
        if text is None:
            continue
        config = _parse_override(path, text)
        if config is not None:
            LOG.debug("Loaded %s from %s", path, repo.full_name)
            return config
    return default_repo_config()
