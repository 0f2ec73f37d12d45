"""Find this app's status comment and in-progress check run.

There is no local state: "where is this stage at" is recovered from what the
app left on GitHub. Both lookups read a single page (see PAGE_SIZE in the
GitHub adapter); on a PR with more comments than that, an older status
comment beyond the first page is not seen. When several candidates match,
the oldest wins so repeated deliveries converge on the same object.
"""

from datetime import datetime, timezone

from stagebot.adapters.base import ControlPlaneAdapter
from stagebot.models import AppIdentity, CheckRun, Comment, RepoRef

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def find_status_comment(
    adapter: ControlPlaneAdapter,
    repo: RepoRef,
    pr_number: int,
    identity: AppIdentity,
) -> Comment | None:
    """Oldest comment on the PR posted via this app, or None."""
    own = [c for c in adapter.list_issue_comments(repo, pr_number) if c.app_id == identity.app_id]
    if not own:
        return None
    return min(own, key=lambda c: (c.created_at, c.id))


def find_in_progress_check_run(
    adapter: ControlPlaneAdapter,
    repo: RepoRef,
    sha: str,
    identity: AppIdentity,
) -> CheckRun | None:
    """Oldest in-progress check run of this app on the commit, or None."""
    runs = [r for r in adapter.list_check_runs_for_ref(repo, sha, app_id=identity.app_id) if r.in_progress]
    if not runs:
        return None
    return min(runs, key=lambda r: (r.started_at or _EPOCH, r.id))
