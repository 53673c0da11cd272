"""
Planflow workflow validation.
"""

from .consistency import (
    ConsistencyIssue,
    ConsistencyValidationResult,
    ConsistencyValidator,
    dependency_graph,
)

__all__ = [
    "ConsistencyIssue",
    "ConsistencyValidationResult",
    "ConsistencyValidator",
    "dependency_graph",
]
