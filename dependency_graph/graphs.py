"""Upload, retrieve and submit dependency graph files."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Iterable

from dependency_graph.artifact_store import ArtifactStore, extract_zip
from dependency_graph.context import JobContext, RunIdentity
from dependency_graph.errors import ArtifactNotFoundError, MalformedGraphError
from dependency_graph.github_api import GitHubClient
from dependency_graph.github_path_resolver import relative_to_workspace, workspace_directory
from dependency_graph.locator import find_dependency_graph_files
from dependency_graph.workflow_commands import info, notice, warning

DEPENDENCY_GRAPH_ARTIFACT = "dependency-graph"
DOWNLOAD_ZIP_NAME = "dependency-graph.zip"
DOWNLOAD_DIRECTORY_NAME = "dependency-graph"


def upload_dependency_graphs(store: ArtifactStore) -> list[Path]:
    workspace = workspace_directory()
    graph_files = find_dependency_graph_files(workspace)
    if not graph_files:
        warning("No dependency graph files found. Nothing to upload.")
        return []

    relative_graph_files = ", ".join(relative_to_workspace(path) for path in graph_files)
    info(f"Uploading dependency graph files: {relative_graph_files}")

    store.upload_artifact(DEPENDENCY_GRAPH_ARTIFACT, graph_files, workspace)
    return graph_files


def retrieve_dependency_graphs(
    context: JobContext, client: GitHubClient, store_factory: Callable[[], ArtifactStore]
) -> list[Path]:
    workspace = workspace_directory()
    if context.workflow_run_id is not None:
        return retrieve_dependency_graphs_for_workflow_run(
            context.identity, context.workflow_run_id, client, workspace
        )
    return retrieve_dependency_graphs_for_current_workflow(store_factory(), workspace)


def retrieve_dependency_graphs_for_workflow_run(
    identity: RunIdentity, run_id: int, client: GitHubClient, workspace: Path
) -> list[Path]:
    artifacts = client.list_workflow_run_artifacts(identity.owner, identity.repo, run_id)
    match = next(
        (candidate for candidate in artifacts if candidate.get("name") == DEPENDENCY_GRAPH_ARTIFACT),
        None,
    )
    if match is None:
        raise ArtifactNotFoundError(DEPENDENCY_GRAPH_ARTIFACT, run_id)

    content = client.download_artifact(identity.owner, identity.repo, int(match["id"]))
    download_zip = workspace / DOWNLOAD_ZIP_NAME
    download_zip.write_bytes(content)

    extracted = extract_zip(download_zip, workspace / DOWNLOAD_DIRECTORY_NAME)
    entries = ", ".join(sorted(entry.name for entry in extracted.iterdir()))
    info(f"Extracted dependency graph artifacts to {extracted.as_posix()}: {entries}")

    return find_dependency_graph_files(extracted)


def retrieve_dependency_graphs_for_current_workflow(store: ArtifactStore, workspace: Path) -> list[Path]:
    download_path = store.download_artifact(
        DEPENDENCY_GRAPH_ARTIFACT, workspace / DOWNLOAD_DIRECTORY_NAME
    )
    return find_dependency_graph_files(download_path)


def submit_dependency_graphs(
    graph_files: Iterable[Path], identity: RunIdentity, client: GitHubClient
) -> None:
    for json_file in graph_files:
        with Path(json_file).open("r", encoding="utf-8") as stream:
            snapshot = json.load(stream)
        if not isinstance(snapshot, dict):
            raise MalformedGraphError(relative_to_workspace(json_file))
        snapshot["owner"] = identity.owner
        snapshot["repo"] = identity.repo

        response = client.submit_snapshot(identity.owner, identity.repo, snapshot)
        notice(f"Submitted {relative_to_workspace(json_file)}: {response.get('message', '')}")
