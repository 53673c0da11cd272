"""
Planflow exceptions.
"""

from __future__ import annotations

from typing import Iterable, List


class PlanflowError(Exception):
    """Base class for all planflow errors."""


class UnknownStepError(PlanflowError, KeyError):
    """Raised when a step identifier is not defined by the workflow."""

    def __init__(self, step: str, known_steps: Iterable[str] = ()):
        self.step = step
        self.known_steps: List[str] = list(known_steps)
        super().__init__(step)

    def __str__(self) -> str:
        message = f"Unknown step: {self.step}"
        if self.known_steps:
            message += f" (known steps: {', '.join(self.known_steps)})"
        return message


class UnknownPlatformError(PlanflowError, ValueError):
    """Raised when a platform value cannot be parsed."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Unknown platform: {value}")


class WorkflowConfigError(PlanflowError):
    """Raised when a workflow definition cannot be loaded or is invalid."""
