"""Repository reference and app identity."""

from pydantic import BaseModel, ConfigDict


class RepoRef(BaseModel):
    """Repository from a webhook payload."""

    model_config = ConfigDict(frozen=True)

    owner: str
    name: str
    id: int | None = None

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


class AppIdentity(BaseModel):
    """GitHub App identity of this bot; comments and check runs it owns carry this id."""

    model_config = ConfigDict(frozen=True)

    app_id: int
