"""
Workflow Gate.

Classifies a proposed planning step against the documents that already exist
and the chosen platform. The gate performs no I/O: callers supply the
document snapshot on every call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Union

from ..loader import default_workflow
from ..models import Platform, StepDefinition, WorkflowDefinition
from ..paths import (
    Bindings,
    expand_template,
    is_present,
    is_template,
    normalize_documents,
    normalize_path,
    paths_overlap,
)
from .decision import Allowed, Blocked, GateDecision, Skipped

PlatformLike = Union[Platform, str, None]


@dataclass
class StepStatus:
    """Gate decision for one step plus whether its outputs already exist."""

    step_id: str
    title: str
    decision: GateDecision
    complete: bool
    outputs: List[str] = field(default_factory=list)

    @property
    def label(self) -> str:
        if self.complete and not isinstance(self.decision, Skipped):
            return "done"
        if self.decision.allowed:
            return "ready"
        return self.decision.status

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": self.step_id,
            "title": self.title,
            "label": self.label,
            "complete": self.complete,
            "decision": self.decision.to_dict(),
            "outputs": self.outputs,
        }


@dataclass
class WorkflowStatus:
    """Gate decisions for every step of a workflow, in declared order."""

    workflow: str
    platform: Platform
    steps: List[StepStatus] = field(default_factory=list)

    @property
    def next_steps(self) -> List[str]:
        """Steps that may run and have not produced their outputs yet."""
        return [s.step_id for s in self.steps if s.decision.allowed and not s.complete]

    @property
    def completed_steps(self) -> List[str]:
        return [s.step_id for s in self.steps if s.label == "done"]

    def get(self, step_id: str) -> Optional[StepStatus]:
        for status in self.steps:
            if status.step_id == step_id:
                return status
        return None

    def summary(self) -> str:
        """Generate a human-readable status report."""
        lines = [f"Workflow {self.workflow} (platform: {self.platform.value})"]
        for status in self.steps:
            line = f"  [{status.label}] {status.step_id}"
            decision = status.decision
            if status.label == "blocked" and isinstance(decision, Blocked):
                line += f": missing {', '.join(decision.missing)}"
            elif isinstance(decision, Skipped):
                line += f": {decision.reason}"
            lines.append(line)
        next_steps = ", ".join(self.next_steps) or "none"
        lines.append(f"Next steps: {next_steps}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "workflow": self.workflow,
            "platform": self.platform.value,
            "next_steps": self.next_steps,
            "completed_steps": self.completed_steps,
            "steps": [s.to_dict() for s in self.steps],
        }


class WorkflowGate:
    """
    Decision table for the planning workflow.

    The gate holds only the immutable workflow definition; the platform,
    the existing documents and any placeholder bindings are passed in on
    every call, so identical inputs always produce equal decisions.
    """

    def __init__(self, workflow: Optional[WorkflowDefinition] = None):
        """
        Initialize the gate.

        Args:
            workflow: Workflow definition; defaults to the bundled one.
        """
        self.workflow = workflow if workflow is not None else default_workflow()

    def can_run(
        self,
        step: str,
        existing_documents: Iterable[str],
        platform: PlatformLike = None,
        bindings: Optional[Bindings] = None,
    ) -> GateDecision:
        """
        Decide whether a step may run.

        Args:
            step: Step identifier.
            existing_documents: Project-relative paths of existing documents.
            platform: Chosen platform, or None/"unset" before the vision step.
            bindings: Values for path placeholders, e.g. {"id": ["billing"]}.

        Returns:
            Skipped if the step does not apply to the platform, Blocked with
            every missing prerequisite in declared order, otherwise Allowed.

        Raises:
            UnknownStepError: If the step is not defined.
            UnknownPlatformError: If the platform cannot be parsed.
            TypeError: If a binding value is a string instead of a list.
        """
        definition = self.workflow.get_step(step)
        target = Platform.parse(platform)

        if not definition.applies_to(target):
            return Skipped(f"{definition.id} does not apply to platform {target.value}")

        documents = normalize_documents(existing_documents)
        missing = _missing_paths(definition.prerequisites, documents, bindings)
        if missing:
            return Blocked(missing)
        return Allowed()

    def is_complete(
        self,
        step: str,
        existing_documents: Iterable[str],
        bindings: Optional[Bindings] = None,
    ) -> bool:
        """Whether every output of the step already exists."""
        definition = self.workflow.get_step(step)
        documents = normalize_documents(existing_documents)
        return not _missing_outputs(definition, documents, bindings)

    def expected_outputs(self, step: str, bindings: Optional[Bindings] = None) -> List[str]:
        """
        Output paths the step must produce.

        Templated outputs are expanded where bindings are given and returned
        as templates otherwise.
        """
        definition = self.workflow.get_step(step)
        outputs: List[str] = []
        for output in definition.outputs:
            expanded = expand_template(output, bindings)
            for path in expanded if expanded is not None else [output]:
                if path not in outputs:
                    outputs.append(path)
        return outputs

    def producers_of(self, paths: Iterable[str]) -> List[str]:
        """Identifiers of the steps whose outputs produce any of the paths."""
        wanted = [normalize_path(p) for p in paths]
        return [
            step.id
            for step in self.workflow.steps
            if any(paths_overlap(path, output) for path in wanted for output in step.outputs)
        ]

    def evaluate(
        self,
        existing_documents: Iterable[str],
        platform: PlatformLike = None,
        bindings: Optional[Bindings] = None,
    ) -> WorkflowStatus:
        """Run the gate for every step of the workflow."""
        target = Platform.parse(platform)
        documents = normalize_documents(existing_documents)
        status = WorkflowStatus(workflow=self.workflow.name, platform=target)
        for step in self.workflow.steps:
            status.steps.append(StepStatus(
                step_id=step.id,
                title=step.title,
                decision=self.can_run(step.id, documents, target, bindings),
                complete=not _missing_outputs(step, documents, bindings),
                outputs=self.expected_outputs(step.id, bindings),
            ))
        return status

    def next_steps(
        self,
        existing_documents: Iterable[str],
        platform: PlatformLike = None,
        bindings: Optional[Bindings] = None,
    ) -> List[str]:
        """Steps that may run now and have not produced their outputs yet."""
        return self.evaluate(existing_documents, platform, bindings).next_steps

    def applicable_steps(self, platform: PlatformLike = None) -> List[StepDefinition]:
        target = Platform.parse(platform)
        return [step for step in self.workflow.steps if step.applies_to(target)]


def _missing_paths(
    paths: Iterable[str],
    documents: FrozenSet[str],
    bindings: Optional[Bindings],
    exclude: FrozenSet[str] = frozenset(),
) -> List[str]:
    """
    Paths not found among the documents, in declared order.

    A template with bound placeholders is checked value by value; an unbound
    template is satisfied by any matching document outside ``exclude`` and is
    reported as the template itself when nothing matches.
    """
    missing: List[str] = []
    for path in paths:
        expanded = expand_template(path, bindings)
        if expanded is None:
            candidates = [] if is_present(path, documents - exclude) else [path]
        else:
            candidates = [p for p in expanded if not is_present(p, documents)]
        for candidate in candidates:
            if candidate not in missing:
                missing.append(candidate)
    return missing


def _missing_outputs(
    step: StepDefinition,
    documents: FrozenSet[str],
    bindings: Optional[Bindings],
) -> List[str]:
    # overview.md must not satisfy [domain].md for the same step
    concrete = frozenset(path for path in step.outputs if not is_template(path))
    return _missing_paths(step.outputs, documents, bindings, exclude=concrete)


@lru_cache(maxsize=1)
def _default_gate() -> WorkflowGate:
    return WorkflowGate()


def can_run(
    step: str,
    existing_documents: Iterable[str],
    platform: PlatformLike = None,
    bindings: Optional[Bindings] = None,
) -> GateDecision:
    """
    Convenience function running the bundled workflow's gate.

    Example:
        >>> can_run("data-model", set(), "web")
        Blocked(missing=('product/product-roadmap.md',))
    """
    return _default_gate().can_run(step, existing_documents, platform, bindings)
