"""
Document path helpers.

Planning documents are identified by project-relative POSIX paths. Paths may
carry ``[name]`` placeholders (``product/sections/[id]/spec.md``) which are
either expanded from caller-supplied bindings or matched against existing
documents. A path ending in ``/`` names a directory.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import FrozenSet, Iterable, List, Mapping, Optional, Pattern, Sequence

PLACEHOLDER_PATTERN = re.compile(r"\[([A-Za-z][A-Za-z0-9_-]*)\]")

Bindings = Mapping[str, Sequence[str]]


def normalize_path(path: str) -> str:
    """Normalize separators and drop a leading ``./``."""
    text = str(path).strip().replace("\\", "/")
    text = re.sub(r"/{2,}", "/", text)
    while text.startswith("./"):
        text = text[2:]
    return text


def normalize_documents(documents: Optional[Iterable[str]]) -> FrozenSet[str]:
    if not documents:
        return frozenset()
    return frozenset(p for p in (normalize_path(d) for d in documents) if p)


def placeholders(path: str) -> List[str]:
    """Placeholder names in order of first appearance."""
    names: List[str] = []
    for name in PLACEHOLDER_PATTERN.findall(path):
        if name not in names:
            names.append(name)
    return names


def is_template(path: str) -> bool:
    return PLACEHOLDER_PATTERN.search(path) is not None


def is_directory(path: str) -> bool:
    return path.endswith("/")


def canonical_template(path: str) -> str:
    """Template with placeholder names erased, for comparing templates."""
    return PLACEHOLDER_PATTERN.sub("[]", path)


@lru_cache(maxsize=256)
def template_to_regex(template: str) -> Pattern[str]:
    """
    Compile a template into a regex.

    Each placeholder matches exactly one path segment. Directory templates
    match the directory and anything beneath it.
    """
    parts = []
    last = 0
    for match in PLACEHOLDER_PATTERN.finditer(template):
        parts.append(re.escape(template[last:match.start()]))
        parts.append(r"[^/]+")
        last = match.end()
    parts.append(re.escape(template[last:]))
    suffix = "" if is_directory(template) else "$"
    return re.compile("^" + "".join(parts) + suffix)


def expand_template(template: str, bindings: Optional[Bindings]) -> Optional[List[str]]:
    """
    Expand a template into concrete paths using bindings.

    Values are substituted in binding order; with several placeholders the
    expansion is their cartesian product. A concrete path expands to itself.

    Returns:
        The expanded paths, or None if any placeholder has no binding.

    Raises:
        TypeError: If a binding value is a string rather than a list of values.
    """
    names = placeholders(template)
    if not names:
        return [template]
    bindings = bindings or {}
    if any(name not in bindings for name in names):
        return None
    for name in names:
        if isinstance(bindings[name], str):
            raise TypeError(
                f"Binding for '{name}' must be a list of values, not a string: {bindings[name]!r}"
            )

    results = [template]
    for name in names:
        token = f"[{name}]"
        results = [
            partial.replace(token, str(value))
            for partial in results
            for value in bindings[name]
        ]
    return [normalize_path(r) for r in results]


def matching_documents(path: str, documents: Iterable[str]) -> List[str]:
    """Existing documents matched by a path or template, sorted."""
    if is_template(path):
        regex = template_to_regex(path)
        return sorted(doc for doc in documents if regex.match(doc))
    if is_directory(path):
        return sorted(doc for doc in documents if doc == path or doc.startswith(path))
    return [path] if path in documents else []


def is_present(path: str, documents: FrozenSet[str]) -> bool:
    """Presence check for a single path, template or directory."""
    if not is_template(path) and not is_directory(path):
        return path in documents
    return bool(matching_documents(path, documents))


def paths_overlap(required: str, produced: str) -> bool:
    """Whether a produced path (or template) can satisfy a required one."""
    if canonical_template(required) == canonical_template(produced):
        return True
    required_template = is_template(required)
    produced_template = is_template(produced)
    if produced_template and not required_template:
        return template_to_regex(produced).match(required) is not None
    if required_template and not produced_template:
        return template_to_regex(required).match(produced) is not None
    if is_directory(produced) and not required_template:
        return required.startswith(produced)
    return False
