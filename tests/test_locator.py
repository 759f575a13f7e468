from __future__ import annotations

from pathlib import Path

from dependency_graph.locator import find_dependency_graph_files
from tests.fakes import write_graph


def test_find_dependency_graph_files_missing_directory(tmp_path: Path) -> None:
    assert find_dependency_graph_files(tmp_path) == []


def test_find_dependency_graph_files_empty_directory(tmp_path: Path) -> None:
    (tmp_path / "dependency-graph-reports").mkdir()

    assert find_dependency_graph_files(tmp_path) == []


def test_find_dependency_graph_files_matches_json_reports(tmp_path: Path) -> None:
    second = write_graph(tmp_path, "b.json")
    first = write_graph(tmp_path, "a.json")
    write_graph(tmp_path, "notes.txt")
    write_graph(tmp_path / "dependency-graph-reports" / "nested", "c.json")

    found = find_dependency_graph_files(tmp_path)

    assert found == [first.resolve(), second.resolve()]
    assert all(path.is_absolute() for path in found)
