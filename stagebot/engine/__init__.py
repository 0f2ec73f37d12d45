"""Reconciliation engine: plan actions from event + remote state, then apply them."""

from stagebot.engine.executor import ExecutionResult, execute_plan
from stagebot.engine.planner import Plan
from stagebot.engine.reconciler import (
    reconcile_deployment_status,
    reconcile_pull_request_closed,
    reconcile_pull_request_opened,
    reconcile_push,
)

__all__ = [
    "ExecutionResult",
    "Plan",
    "execute_plan",
    "reconcile_deployment_status",
    "reconcile_pull_request_closed",
    "reconcile_pull_request_opened",
    "reconcile_push",
]
