"""
Planflow: document-driven gate for the product-planning workflow.

This package decides whether a planning step (vision, roadmap, data model,
design, architecture, export) may run given the planning documents that
already exist and the chosen target platform.
"""

from .errors import (
    PlanflowError,
    UnknownStepError,
    UnknownPlatformError,
    WorkflowConfigError,
)
from .models import (
    Platform,
    PLATFORM_GROUPS,
    StepDefinition,
    WorkflowDefinition,
)
from .loader import default_workflow, load_workflow
from .gate import (
    GateDecision,
    Allowed,
    Blocked,
    Skipped,
    WorkflowGate,
    WorkflowStatus,
    StepStatus,
    can_run,
)

__version__ = "1.0.0"
__all__ = [
    "PlanflowError",
    "UnknownStepError",
    "UnknownPlatformError",
    "WorkflowConfigError",
    "Platform",
    "PLATFORM_GROUPS",
    "StepDefinition",
    "WorkflowDefinition",
    "default_workflow",
    "load_workflow",
    "GateDecision",
    "Allowed",
    "Blocked",
    "Skipped",
    "WorkflowGate",
    "WorkflowStatus",
    "StepStatus",
    "can_run",
]
