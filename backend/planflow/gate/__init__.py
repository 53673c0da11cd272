"""
Workflow Gate package.
"""

from .decision import Allowed, Blocked, GateDecision, Skipped
from .engine import StepStatus, WorkflowGate, WorkflowStatus, can_run

__all__ = [
    # Decisions
    "GateDecision",
    "Allowed",
    "Blocked",
    "Skipped",
    # Gate
    "WorkflowGate",
    "WorkflowStatus",
    "StepStatus",
    "can_run",
]
