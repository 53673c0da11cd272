"""
Workflow definition loading.

Workflow definitions are YAML documents with a ``workflow`` header and a
``steps`` list, validated into WorkflowDefinition models.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from .errors import WorkflowConfigError
from .models import WorkflowDefinition

logger = logging.getLogger(__name__)

DEFAULT_WORKFLOW_PATH = Path(__file__).parent / "workflow.yaml"


def workflow_from_dict(data: Dict[str, Any]) -> WorkflowDefinition:
    """
    Build a workflow definition from parsed YAML data.

    Raises:
        WorkflowConfigError: If the data does not describe a valid workflow.
    """
    if not isinstance(data, dict):
        raise WorkflowConfigError(
            f"Workflow definition must be a mapping, got {type(data).__name__}"
        )

    header = data.get("workflow") or {}
    if not isinstance(header, dict):
        raise WorkflowConfigError("'workflow' section must be a mapping")

    fields = {k: v for k, v in header.items() if k in ("name", "version", "description")}
    fields["steps"] = data.get("steps") or []

    try:
        return WorkflowDefinition.model_validate(fields)
    except ValidationError as e:
        raise WorkflowConfigError(f"Invalid workflow definition:\n{e}") from e


def workflow_from_yaml(yaml_content: str) -> WorkflowDefinition:
    """Load a workflow definition from YAML content."""
    try:
        data = yaml.safe_load(yaml_content)
    except yaml.YAMLError as e:
        raise WorkflowConfigError(f"YAML parse error: {e}") from e

    if data is None:
        raise WorkflowConfigError("Workflow definition is empty")

    return workflow_from_dict(data)


def load_workflow(path: Union[str, Path]) -> WorkflowDefinition:
    """
    Load a workflow definition from a YAML file.

    Args:
        path: Path to the workflow YAML file.

    Returns:
        The validated workflow definition.

    Raises:
        WorkflowConfigError: If the file is missing, unparseable or invalid.
    """
    path = Path(path)
    if not path.exists():
        raise WorkflowConfigError(f"Workflow file not found: {path}")

    logger.debug("Loading workflow definition from %s", path)
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    try:
        workflow = workflow_from_yaml(content)
    except WorkflowConfigError as e:
        raise WorkflowConfigError(f"{path}: {e}") from e

    logger.debug("Loaded workflow %s with %d steps", workflow.name, len(workflow.steps))
    return workflow


@lru_cache(maxsize=1)
def default_workflow() -> WorkflowDefinition:
    """The bundled product-planning workflow."""
    return load_workflow(DEFAULT_WORKFLOW_PATH)


def resolve_workflow(path: Optional[Union[str, Path]] = None) -> WorkflowDefinition:
    """Load the workflow at path, or the bundled one if no path is given."""
    if path is None:
        return default_workflow()
    return load_workflow(path)
