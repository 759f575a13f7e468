from __future__ import annotations

from enum import Enum

from dependency_graph.errors import InvalidModeError
from dependency_graph.workflow_commands import get_input


class DependencyGraphMode(Enum):
    DISABLED = "disabled"
    GENERATE = "generate"
    GENERATE_AND_SUBMIT = "generate-and-submit"
    DOWNLOAD_AND_SUBMIT = "download-and-submit"


def parse_dependency_graph_mode(raw_value: str) -> DependencyGraphMode:
    candidate = raw_value.strip().lower()
    if not candidate:
        return DependencyGraphMode.DISABLED
    try:
        return DependencyGraphMode(candidate)
    except ValueError:
        raise InvalidModeError(raw_value) from None


def get_dependency_graph_mode() -> DependencyGraphMode:
    return parse_dependency_graph_mode(get_input("dependency-graph", default="disabled"))


def get_github_token() -> str:
    return get_input("github-token", required=True)


def get_job_matrix() -> str:
    """Return the ``workflow-job-context`` input: the job matrix as JSON."""

    return get_input("workflow-job-context", default="null")
