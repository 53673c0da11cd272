"""
Workflow Consistency Validation.

Validates that a workflow definition hangs together:
- Every prerequisite is produced by some step
- No step depends on its own output
- Step dependencies are acyclic
- At least one step can start from nothing
- Platform applicability does not strand a step without its producers
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Set

from ..models import Platform, StepDefinition, WorkflowDefinition
from ..paths import paths_overlap


@dataclass
class ConsistencyIssue:
    """Represents a consistency issue in the workflow definition."""

    category: str
    source: str
    target: str
    description: str
    severity: str = "error"

    def __str__(self) -> str:
        return f"[{self.severity.upper()}] {self.category}: {self.source} -> {self.target}: {self.description}"


@dataclass
class ConsistencyValidationResult:
    """Result of consistency validation."""

    valid: bool
    issues: List[ConsistencyIssue] = field(default_factory=list)
    orphans: List[str] = field(default_factory=list)

    def add_issue(
        self,
        category: str,
        source: str,
        target: str,
        description: str,
        severity: str = "error"
    ) -> None:
        """Add a consistency issue."""
        self.issues.append(ConsistencyIssue(
            category=category,
            source=source,
            target=target,
            description=description,
            severity=severity
        ))
        if severity == "error":
            self.valid = False

    def add_orphan(self, item: str) -> None:
        """Add an output no step consumes."""
        self.orphans.append(item)

    @property
    def errors(self) -> List[ConsistencyIssue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> List[ConsistencyIssue]:
        return [i for i in self.issues if i.severity == "warning"]

    def summary(self) -> str:
        """Generate a summary of validation results."""
        status = "PASSED" if self.valid else "FAILED"
        lines = [
            f"Consistency {status}",
            f"  Errors: {len(self.errors)}",
            f"  Warnings: {len(self.warnings)}",
        ]
        for issue in self.issues:
            lines.append(f"  {issue}")
        if self.orphans:
            lines.append(f"  Unconsumed outputs: {', '.join(self.orphans)}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "valid": self.valid,
            "issues": [
                {
                    "category": i.category,
                    "source": i.source,
                    "target": i.target,
                    "description": i.description,
                    "severity": i.severity,
                }
                for i in self.issues
            ],
            "orphans": self.orphans,
        }


class ConsistencyValidator:
    """
    Validates consistency across the steps of a workflow.

    Checks:
    - Prerequisites map to some step's outputs
    - Steps do not require their own outputs
    - The step dependency graph has no cycles
    - There is an entry step without prerequisites
    - Platform applicability of dependent steps lines up
    """

    def validate(self, workflow: WorkflowDefinition) -> ConsistencyValidationResult:
        """
        Validate workflow consistency.

        Args:
            workflow: The workflow definition.

        Returns:
            ConsistencyValidationResult with validation status and issues.
        """
        result = ConsistencyValidationResult(valid=True)

        self._validate_entry_step(workflow, result)
        self._validate_prerequisites(workflow, result)
        self._validate_acyclic(workflow, result)
        self._validate_platform_gaps(workflow, result)
        self._find_orphans(workflow, result)

        return result

    def _validate_entry_step(
        self,
        workflow: WorkflowDefinition,
        result: ConsistencyValidationResult
    ) -> None:
        if not any(not step.prerequisites for step in workflow.steps):
            result.add_issue(
                category="no_entry_step",
                source=workflow.name,
                target="steps",
                description="No step can run without prerequisites",
            )

    def _validate_prerequisites(
        self,
        workflow: WorkflowDefinition,
        result: ConsistencyValidationResult
    ) -> None:
        for step in workflow.steps:
            for prerequisite in step.prerequisites:
                if any(paths_overlap(prerequisite, output) for output in step.outputs):
                    result.add_issue(
                        category="self_dependency",
                        source=step.id,
                        target=prerequisite,
                        description="Step requires a document it produces itself",
                    )
                    continue

                if not _producers(workflow, prerequisite, exclude=step.id):
                    result.add_issue(
                        category="unproduced_prerequisite",
                        source=step.id,
                        target=prerequisite,
                        description="Prerequisite is not produced by any step",
                    )

    def _validate_acyclic(
        self,
        workflow: WorkflowDefinition,
        result: ConsistencyValidationResult
    ) -> None:
        graph = dependency_graph(workflow)
        visiting: Set[str] = set()
        done: Set[str] = set()
        reported: Set[str] = set()

        def visit(step_id: str, trail: List[str]) -> None:
            if step_id in done:
                return
            if step_id in visiting:
                cycle = trail[trail.index(step_id):] + [step_id]
                key = " -> ".join(sorted(set(cycle)))
                if key not in reported:
                    reported.add(key)
                    result.add_issue(
                        category="cycle",
                        source=cycle[0],
                        target=cycle[-2],
                        description=f"Dependency cycle: {' -> '.join(cycle)}",
                    )
                return
            visiting.add(step_id)
            for dependency in graph[step_id]:
                visit(dependency, trail + [step_id])
            visiting.discard(step_id)
            done.add(step_id)

        for step_id in graph:
            visit(step_id, [])

    def _validate_platform_gaps(
        self,
        workflow: WorkflowDefinition,
        result: ConsistencyValidationResult
    ) -> None:
        for step in workflow.steps:
            for prerequisite in step.prerequisites:
                producers = _producers(workflow, prerequisite, exclude=step.id)
                if not producers:
                    continue
                covered: Set[Platform] = set()
                for producer in producers:
                    covered.update(producer.platforms)
                for platform in sorted(step.platforms - covered, key=lambda p: p.value):
                    result.add_issue(
                        category="platform_gap",
                        source=step.id,
                        target=prerequisite,
                        description=(
                            f"No step produces this prerequisite on platform {platform.value}"
                        ),
                        severity="warning",
                    )

    def _find_orphans(
        self,
        workflow: WorkflowDefinition,
        result: ConsistencyValidationResult
    ) -> None:
        # The final step's outputs are the workflow deliverable
        final = workflow.steps[-1].id
        for step in workflow.steps:
            if step.id == final:
                continue
            for output in step.outputs:
                consumed = any(
                    paths_overlap(prerequisite, output)
                    for other in workflow.steps
                    if other.id != step.id
                    for prerequisite in other.prerequisites
                )
                if not consumed:
                    result.add_orphan(f"{step.id}: {output}")


def _producers(
    workflow: WorkflowDefinition,
    path: str,
    exclude: str = "",
) -> List[StepDefinition]:
    return [
        step for step in workflow.steps
        if step.id != exclude and any(paths_overlap(path, output) for output in step.outputs)
    ]


def dependency_graph(workflow: WorkflowDefinition) -> Dict[str, List[str]]:
    """Map each step id to the ids of the steps producing its prerequisites."""
    graph: Dict[str, List[str]] = {}
    for step in workflow.steps:
        dependencies: List[str] = []
        for prerequisite in step.prerequisites:
            for producer in _producers(workflow, prerequisite, exclude=step.id):
                if producer.id not in dependencies:
                    dependencies.append(producer.id)
        graph[step.id] = dependencies
    return graph
