"""Configuration loading from YAML and environment.

Secrets (tokens, webhook secret) are taken from environment variables or
from files (Docker secrets). Never put real tokens in config files committed
to the repo.

This is the process-level config of the bot itself. Per-repository settings
(workflow id, branch mappings) live in the target repo and are resolved per
event by stagebot.repo_config.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from stagebot.models import AppIdentity


def _read_secret(env_key: str, file_env_key: str) -> str | None:
    """Read secret from env var or from file path in env (e.g. Docker
    secrets)."""
    value = _current_env.get(env_key)
    if value:
        return value.strip()
    file_path = _current_env.get(file_env_key)
    if file_path:
        return Path(file_path).read_text().strip()
    return None


# Injected by load_config so secret resolution can read env/file
_current_env: dict[str, str] = {}


class ConfigError(Exception):
    """Raised when the loaded configuration cannot be used."""

    pass


class AppIdentityConfig(BaseSettings):
    """GitHub App identity of this bot."""

    model_config = SettingsConfigDict(env_prefix="APP_", extra="ignore")

    id: int | None = Field(default=None, description="GitHub App id (env APP_ID)")
    name: str = Field(default="stagebot", description="Display name shown at startup and by --check")


class GitHubConfig(BaseSettings):
    """GitHub API and webhook settings."""

    model_config = SettingsConfigDict(env_prefix="GITHUB_", extra="ignore")

    token: str | None = Field(default=None, description="Installation token; use env or secret file")
    api_url: str = Field(default="https://api.github.com", description="API base URL")
    webhook_path: str = Field(default="/webhook/github", description="Webhook URL path")
    webhook_secret: str = Field(default="", description="Secret for X-Hub-Signature-256 verification")


class WebhookConfig(BaseSettings):
    """Webhook server settings."""

    model_config = SettingsConfigDict(env_prefix="WEBHOOK_", extra="ignore")

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8000, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    app: AppIdentityConfig = Field(default_factory=AppIdentityConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    webhook: WebhookConfig = Field(default_factory=WebhookConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def github_token_resolved(self) -> str | None:
        """Resolve GitHub token from config, env or Docker secret file."""
        t = self.github.token
        if t and not t.startswith("${"):
            return t
        return _read_secret("GITHUB_TOKEN", "GITHUB_TOKEN_FILE")

    @property
    def webhook_secret_resolved(self) -> str:
        """Resolve webhook secret from config, env or Docker secret file."""
        s = self.github.webhook_secret
        if s and not s.startswith("${"):
            return s
        return _read_secret("WEBHOOK_SECRET", "WEBHOOK_SECRET_FILE") or ""

    @property
    def identity(self) -> AppIdentity:
        """Immutable app identity passed into every handler call."""
        if self.app.id is None:
            raise ConfigError("GitHub App id is not configured (app.id or APP_ID)")
        return AppIdentity(app_id=self.app.id)


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with os.environ."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file and environment.

    Secrets: GITHUB_TOKEN or GITHUB_TOKEN_FILE, WEBHOOK_SECRET or WEBHOOK_SECRET_FILE.
    """
    global _current_env
    import os

    _current_env = dict(os.environ)

    path = config_path or Path("config.yaml")
    if not path.is_file():
        return AppConfig()

    raw = yaml.safe_load(path.read_text()) or {}
    raw = _substitute_env(raw)

    # Env wins over YAML for the app id (set by the hosting platform)
    app_raw = raw.get("app") or {}
    if _current_env.get("APP_ID"):
        app_raw = {**app_raw, "id": _current_env.get("APP_ID")}

    return AppConfig(
        app=AppIdentityConfig(**app_raw),
        github=GitHubConfig(**(raw.get("github") or {})),
        webhook=WebhookConfig(**(raw.get("webhook") or {})),
        logging=LoggingConfig(**(raw.get("logging") or {})),
    )
