"""Job correlator construction.

The correlator identifies one job of one workflow (and one combination of its
matrix values) across runs, so the dependency graph submitted for it replaces
the previous snapshot of the same job instead of accumulating next to it.
"""
from __future__ import annotations

import json
import re
from typing import Any

from dependency_graph.context import JobContext
from dependency_graph.workflow_commands import debug

# Hyphen last so it is a literal, not a range.
_DISALLOWED_CHARACTERS = re.compile(r"[^a-zA-Z0-9_\s-]")
_WHITESPACE = re.compile(r"\s+")


# Canonical non-negative integer keys below 2**32 - 1.
_ARRAY_INDEX_KEY = re.compile(r"0|[1-9][0-9]*")
_MAX_ARRAY_INDEX = 2**32 - 2


def _is_array_index(key: str) -> bool:
    return bool(_ARRAY_INDEX_KEY.fullmatch(key)) and int(key) <= _MAX_ARRAY_INDEX


def _ordered_values(matrix: dict[str, Any]) -> list[Any]:
    index_keys = sorted((key for key in matrix if _is_array_index(key)), key=int)
    other_keys = [key for key in matrix if not _is_array_index(key)]
    return [matrix[key] for key in index_keys + other_keys]


def _describe_value(value: Any) -> str:
    """Render one matrix value; nested objects collapse to a fixed placeholder."""

    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    if isinstance(value, list):
        return ",".join(_describe_value(item) for item in value)
    if isinstance(value, dict):
        return "[object Object]"
    return str(value)


def describe_matrix(matrix_json: str) -> str:
    """Join the matrix values with ``-``.

    Array index keys (``"0"``, ``"1"``, ...) come first in ascending order,
    followed by the remaining keys in document order. A top-level string
    contributes its characters.
    """

    debug(f"Got matrix json: {matrix_json}")
    matrix = json.loads(matrix_json)
    if isinstance(matrix, dict):
        values = _ordered_values(matrix)
    elif isinstance(matrix, list):
        values = matrix
    elif isinstance(matrix, str):
        values = list(matrix)
    else:
        return ""
    return "-".join(_describe_value(value) for value in values)


def sanitize(value: str) -> str:
    value = _DISALLOWED_CHARACTERS.sub("", value)
    value = _WHITESPACE.sub("_", value)
    return value.lower()


def construct_job_correlator(workflow: str, job_id: str, matrix_json: str) -> str:
    matrix_string = describe_matrix(matrix_json)
    if matrix_string:
        label = f"{workflow}-{job_id}-{matrix_string}"
    else:
        label = f"{workflow}-{job_id}"
    return sanitize(label)


def get_job_correlator(context: JobContext, matrix_json: str) -> str:
    return construct_job_correlator(context.workflow, context.job, matrix_json)
