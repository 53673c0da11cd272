"""
Project document inventory.

Takes a snapshot of the planning documents under a project root so it can
be handed to the gate, and reads the platform recorded by the vision step.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Union

from .errors import UnknownPlatformError
from .models import Platform
from .paths import normalize_documents

logger = logging.getLogger(__name__)

PRODUCT_OVERVIEW = "product/product-overview.md"

# Matches "Platform: iOS", "**Platform:** iOS", "- **Platform**: web", "## Platform: CLI"
PLATFORM_LINE_PATTERN = re.compile(
    r"^[ \t]*(?:[-*+][ \t]+|#+[ \t]*)?[*_]*[ \t]*(?:target[ \t]+)?platform[ \t]*[*_]*[ \t]*:"
    r"[ \t]*[*_]*[ \t]*(?P<value>[^*_\n]+?)[ \t]*[*_]*[ \t]*$",
    re.IGNORECASE | re.MULTILINE,
)

SECTION_SPEC_PATTERN = re.compile(r"^product/sections/(?P<id>[^/]+)/spec\.md$")
ARCHITECTURE_DOC_PATTERN = re.compile(r"^product/architecture/(?P<domain>[^/]+)\.md$")


def scan_documents(root: Union[str, Path]) -> FrozenSet[str]:
    """
    Snapshot the documents under a project root.

    Every file is listed by its root-relative POSIX path and every directory
    as ``dir/``. Hidden files and directories are skipped.

    Args:
        root: Project root directory.

    Returns:
        Frozen set of normalized relative paths; empty if root is missing.
    """
    root = Path(root)
    if not root.is_dir():
        logger.debug("Project root %s does not exist, no documents", root)
        return frozenset()

    found: List[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        base = Path(dirpath)
        for dirname in dirnames:
            found.append((base / dirname).relative_to(root).as_posix() + "/")
        for filename in filenames:
            if filename.startswith("."):
                continue
            found.append((base / filename).relative_to(root).as_posix())

    documents = normalize_documents(found)
    logger.debug("Found %d documents under %s", len(documents), root)
    return documents


def parse_platform(text: str) -> Platform:
    """
    Read the platform recorded in product overview text.

    Returns:
        The first recognized platform, or Platform.UNSET if none is recorded.
    """
    for match in PLATFORM_LINE_PATTERN.finditer(text):
        value = match.group("value").strip().strip("`")
        try:
            return Platform.parse(value)
        except UnknownPlatformError:
            logger.warning("Unrecognized platform in product overview: %s", value)
    return Platform.UNSET


def detect_platform(root: Union[str, Path]) -> Platform:
    """Platform recorded in the project's product overview, if any."""
    overview = Path(root) / PRODUCT_OVERVIEW
    if not overview.is_file():
        return Platform.UNSET
    with open(overview, "r", encoding="utf-8") as f:
        return parse_platform(f.read())


def discover_bindings(documents: Iterable[str]) -> Dict[str, List[str]]:
    """
    Derive placeholder bindings from existing documents.

    ``id`` lists the sections that have a spec and ``domain`` the
    architecture documents other than the overview, both sorted.
    """
    sections = set()
    domains = set()
    for document in normalize_documents(documents):
        section = SECTION_SPEC_PATTERN.match(document)
        if section:
            sections.add(section.group("id"))
            continue
        architecture = ARCHITECTURE_DOC_PATTERN.match(document)
        if architecture and architecture.group("domain") != "overview":
            domains.add(architecture.group("domain"))
    return {"id": sorted(sections), "domain": sorted(domains)}
