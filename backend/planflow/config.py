"""Configuration management for planflow."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv


@dataclass
class GateSettings:
    """Planflow settings loaded from environment variables."""

    # Directory holding the planning documents (product/, product-plan/)
    project_root: Path = field(default_factory=Path.cwd)

    # Workflow definition file; None uses the bundled workflow
    workflow_path: Optional[Path] = None

    # Chosen platform; None means detect it from the product overview
    platform: Optional[str] = None

    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, dotenv_path: Optional[Union[str, Path]] = None) -> "GateSettings":
        """Load settings from environment variables.

        Args:
            dotenv_path: Optional path to .env file. If not provided,
                         will look for .env in current directory.

        Returns:
            GateSettings instance with values from environment.
        """
        if dotenv_path:
            load_dotenv(dotenv_path)
        else:
            load_dotenv()

        root = os.getenv("PLANFLOW_ROOT")
        workflow = os.getenv("PLANFLOW_WORKFLOW")
        return cls(
            project_root=Path(root) if root else Path.cwd(),
            workflow_path=Path(workflow) if workflow else None,
            platform=os.getenv("PLANFLOW_PLATFORM") or None,
            log_level=os.getenv("PLANFLOW_LOG_LEVEL", "WARNING").upper(),
        )
