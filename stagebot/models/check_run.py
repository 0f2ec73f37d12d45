"""Check run on a commit."""

from datetime import datetime

from pydantic import BaseModel


class CheckRun(BaseModel):
    """Check run as returned by the checks API."""

    id: int
    name: str
    head_sha: str
    status: str
    conclusion: str | None = None
    started_at: datetime | None = None
    app_id: int | None = None
    details_url: str | None = None

    @property
    def in_progress(self) -> bool:
        return self.status == "in_progress"
