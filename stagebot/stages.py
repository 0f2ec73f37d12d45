"""Stage naming: ephemeral per-PR stages and branch refs."""

import re

PR_STAGE_PREFIX = "pr-"
BRANCH_REF_PREFIX = "refs/heads/"

_PR_STAGE_RE = re.compile(r"^pr-(\d+)$")


def pr_stage(pr_number: int) -> str:
    """Ephemeral stage name for a pull request (e.g. 7 -> pr-7)."""
    return f"{PR_STAGE_PREFIX}{pr_number}"


def is_pr_stage(stage: str) -> bool:
    return stage.startswith(PR_STAGE_PREFIX)


def pr_number_from_stage(stage: str) -> int | None:
    """PR number of an ephemeral stage, or None if the stage is not pr-<n>."""
    match = _PR_STAGE_RE.match(stage)
    if match:
        return int(match.group(1))
    return None


def branch_from_ref(ref: str) -> str:
    """Branch name from a push ref (refs/heads/main -> main)."""
    if ref.startswith(BRANCH_REF_PREFIX):
        return ref[len(BRANCH_REF_PREFIX) :]
    return ref


def check_run_name(stage: str) -> str:
    return f"SST - {stage}"
