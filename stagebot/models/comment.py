"""Comment on an issue or PR."""

from datetime import datetime

from pydantic import BaseModel


class Comment(BaseModel):
    """Issue comment; app_id is set when posted by a GitHub App."""

    id: int
    body: str
    author: str = ""
    app_id: int | None = None
    created_at: datetime
    updated_at: datetime | None = None
