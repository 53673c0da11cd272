"""
Planflow workflow models.

Pydantic models describing the planning workflow: the target platforms and
the steps with their prerequisite and output documents.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .errors import UnknownPlatformError, UnknownStepError
from .paths import normalize_path


STEP_ID_PATTERN = re.compile(r"^[a-z][a-z0-9]*(-[a-z0-9]+)*$")
SEMVER_PATTERN = re.compile(r"^\d+\.\d+\.\d+$")


class Platform(str, Enum):
    """Target environment chosen once by the vision step."""

    WEB = "web"
    MACOS = "macOS"
    IOS = "iOS"
    DESKTOP = "cross-platform-desktop"
    MOBILE = "mobile-cross-platform"
    CLI = "CLI"
    API = "API"
    TUI = "TUI"
    UNSET = "unset"

    def __str__(self) -> str:
        return self.value

    @property
    def is_set(self) -> bool:
        return self is not Platform.UNSET

    @classmethod
    def concrete(cls) -> FrozenSet["Platform"]:
        """All platforms a workflow can target."""
        return frozenset(p for p in cls if p is not cls.UNSET)

    @classmethod
    def parse(cls, value: Union["Platform", str, None]) -> "Platform":
        """
        Parse a platform from its value or a known alias (case-insensitive).

        None and the empty string mean the platform has not been chosen.

        Raises:
            UnknownPlatformError: If the value is not recognized.
        """
        if value is None:
            return cls.UNSET
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        if not key:
            return cls.UNSET
        platform = _PLATFORM_ALIASES.get(key)
        if platform is None:
            raise UnknownPlatformError(str(value))
        return platform


_PLATFORM_ALIASES: Dict[str, Platform] = {p.value.lower(): p for p in Platform}
_PLATFORM_ALIASES.update({
    "macos-native": Platform.MACOS,
    "ios-native": Platform.IOS,
    "desktop": Platform.DESKTOP,
    "mobile": Platform.MOBILE,
    "api/backend": Platform.API,
    "backend": Platform.API,
})

# Groups usable in workflow configuration in place of platform values.
PLATFORM_GROUPS: Dict[str, FrozenSet[Platform]] = {
    "all": Platform.concrete(),
    "ui": Platform.concrete() - {Platform.CLI, Platform.API},
}


def _validate_document_path(value: str) -> str:
    path = normalize_path(value)
    if not path:
        raise ValueError("document path must not be empty")
    if path.startswith("/"):
        raise ValueError(f"document path must be relative: {value}")
    if ".." in path.split("/"):
        raise ValueError(f"document path must not contain '..': {value}")
    return path


class StepDefinition(BaseModel):
    """One named phase of the planning workflow."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    description: str = ""
    prerequisites: List[str] = Field(default_factory=list)
    outputs: List[str] = Field(min_length=1)
    platforms: FrozenSet[Platform] = Field(default_factory=Platform.concrete)

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        if not STEP_ID_PATTERN.match(v):
            raise ValueError(f"step id must be kebab-case: {v}")
        return v

    @field_validator("prerequisites", "outputs")
    @classmethod
    def validate_paths(cls, v: List[str]) -> List[str]:
        return [_validate_document_path(p) for p in v]

    @field_validator("platforms", mode="before")
    @classmethod
    def expand_platforms(cls, v: Any) -> Any:
        if v is None:
            return Platform.concrete()
        if isinstance(v, (str, Platform)):
            v = [v]
        expanded = set()
        for item in v:
            if isinstance(item, str) and item.strip().lower() in PLATFORM_GROUPS:
                expanded.update(PLATFORM_GROUPS[item.strip().lower()])
                continue
            try:
                platform = Platform.parse(item)
            except UnknownPlatformError as e:
                raise ValueError(str(e)) from e
            if not platform.is_set:
                raise ValueError("'unset' is not a valid step platform")
            expanded.add(platform)
        if not expanded:
            raise ValueError("step must apply to at least one platform")
        return frozenset(expanded)

    def applies_to(self, platform: Platform) -> bool:
        """Whether the step applies; every step applies while the platform is unset."""
        if not platform.is_set:
            return True
        return platform in self.platforms


class WorkflowDefinition(BaseModel):
    """The ordered set of steps making up a planning workflow."""

    model_config = ConfigDict(frozen=True)

    name: str = "product-planning"
    version: str = "1.0.0"
    description: str = ""
    steps: List[StepDefinition] = Field(min_length=1)

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        if not SEMVER_PATTERN.match(v):
            raise ValueError(f"version must be semver (x.y.z): {v}")
        return v

    @model_validator(mode="after")
    def check_unique_step_ids(self) -> "WorkflowDefinition":
        seen = set()
        for step in self.steps:
            if step.id in seen:
                raise ValueError(f"duplicate step id: {step.id}")
            seen.add(step.id)
        return self

    @property
    def step_ids(self) -> List[str]:
        return [step.id for step in self.steps]

    def __contains__(self, step_id: object) -> bool:
        return any(step.id == step_id for step in self.steps)

    def find_step(self, step_id: str) -> Optional[StepDefinition]:
        for step in self.steps:
            if step.id == step_id:
                return step
        return None

    def get_step(self, step_id: str) -> StepDefinition:
        """
        Look up a step by identifier.

        Raises:
            UnknownStepError: If no step has this identifier.
        """
        step = self.find_step(step_id)
        if step is None:
            raise UnknownStepError(step_id, self.step_ids)
        return step
