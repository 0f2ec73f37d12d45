"""Deployments and the outputs a deploy workflow publishes."""

from datetime import datetime
from typing import Dict

from pydantic import BaseModel, Field


class Deployment(BaseModel):
    """Deployment record for an environment."""

    id: int
    environment: str
    sha: str = ""
    ref: str = ""
    created_at: datetime | None = None


class DeploymentOutputs(BaseModel):
    """Named URLs published by the deploy workflow in SST_OUTPUTS.

    A name mapped to None is an output the stack declares but has not
    produced a URL for.
    """

    urls: Dict[str, str | None] = Field(default_factory=dict)
