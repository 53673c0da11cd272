"""
Gate decisions.

Every gate call classifies a proposed step as exactly one of Allowed,
Blocked or Skipped. Decisions are frozen values and compare structurally.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Tuple


@dataclass(frozen=True)
class GateDecision:
    """Base class for gate decisions."""

    status: ClassVar[str] = ""

    @property
    def allowed(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status}


@dataclass(frozen=True)
class Allowed(GateDecision):
    """All prerequisites are present and the step applies to the platform."""

    status: ClassVar[str] = "allowed"

    @property
    def allowed(self) -> bool:
        return True

    def __str__(self) -> str:
        return "Allowed"


@dataclass(frozen=True)
class Blocked(GateDecision):
    """
    One or more prerequisites are missing.

    Attributes:
        missing: Every missing prerequisite path, in declared order.
    """

    missing: Tuple[str, ...] = ()

    status: ClassVar[str] = "blocked"

    def __post_init__(self) -> None:
        object.__setattr__(self, "missing", tuple(self.missing))

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "missing": list(self.missing)}

    def __str__(self) -> str:
        return f"Blocked (missing: {', '.join(self.missing)})"


@dataclass(frozen=True)
class Skipped(GateDecision):
    """The step does not apply to the chosen platform."""

    reason: str = ""

    status: ClassVar[str] = "skipped"

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "reason": self.reason}

    def __str__(self) -> str:
        return f"Skipped ({self.reason})"
