from __future__ import annotations

from pathlib import Path

from dependency_graph.github_path_resolver import PathLike

REPORTS_DIRECTORY_NAME = "dependency-graph-reports"


def find_dependency_graph_files(directory: PathLike) -> list[Path]:
    """Return the absolute paths of ``dependency-graph-reports/*.json`` under *directory*.

    A missing reports directory yields an empty list.
    """

    reports_dir = Path(directory).resolve(strict=False) / REPORTS_DIRECTORY_NAME
    if not reports_dir.is_dir():
        return []
    return sorted(path for path in reports_dir.glob("*.json") if path.is_file())
