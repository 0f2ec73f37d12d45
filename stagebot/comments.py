"""Markdown bodies for the PR status comment.

All functions are pure: same inputs (and `now`) give the same text.
"""

from datetime import datetime, timezone
from typing import Mapping

CONSOLE_URL = "https://console.sst.dev"


def format_timestamp(now: datetime) -> str:
    """E.g. October 18, 2026 3:05pm."""
    hour = now.hour % 12 or 12
    suffix = "am" if now.hour < 12 else "pm"
    return f"{now:%B} {now.day}, {now.year} {hour}:{now:%M}{suffix}"


def console_url(workspace: str) -> str:
    return f"{CONSOLE_URL}/{workspace}"


def _now(now: datetime | None) -> datetime:
    return now if now is not None else datetime.now(timezone.utc)


def render_started(stage: str, workspace: str, now: datetime | None = None) -> str:
    date = format_timestamp(_now(now))
    return f"""
🚀 **Deployment Triggered** for the **`{stage}`** stage.

| **Key**           | **Value**                                      |
|-------------------|------------------------------------------------|
| **Stage**         | {stage}                                       |
| **Console URL**   | {console_url(workspace)} |
| **Updated at**    | {date} (UTC)                                  |

> The deployment is in progress. The URLs will be updated here once available.
"""


def _status_icon(url: str | None) -> str:
    return "✅" if url else "⏺️"


def _link(url: str | None) -> str:
    return f"[Visit Deployment]({url})" if url else "Deployment Not Available"


def render_success(stage: str, urls: Mapping[str, str | None]) -> str:
    """One table row per output; outputs without a URL render as pending."""
    rows = "\n".join(f"| **{name}** | {_status_icon(url)} | {_link(url)} |" for name, url in urls.items())
    return f"""
✅ **Deployment Successful** for the **`{stage}`** stage.

| **Name**              |  **Status**    |  **Value**         |
|-----------------------|----------------|--------------------|
{rows}
"""


def render_failure(stage: str, logs_url: str, workspace: str, now: datetime | None = None) -> str:
    date = format_timestamp(_now(now))
    return f"""
❌ **Deployment Failed** for the **`{stage}`** stage.

| **Key**           | **Value**                                      |
|-------------------|------------------------------------------------|
| **View Logs**     | [Github Actions]({logs_url})                   |
| **Console URL**   | {console_url(workspace)} |
| **Updated at**    | {date} (UTC)                                  |

> The deployment process failed. Please check the logs for more information.
"""
