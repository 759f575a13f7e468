"""Job start and job end handling for each dependency graph mode.

``setup`` prepares the environment read by the build tool, ``complete``
uploads, retrieves and submits the graph files the mode asks for.
Collaborators are built through factories so that modes which never touch
the artifact service or the GitHub API never require their credentials.
"""
from __future__ import annotations

from typing import Callable, Mapping

from dependency_graph import graphs
from dependency_graph.artifact_store import ArtifactStore
from dependency_graph.context import JobContext
from dependency_graph.correlator import get_job_correlator
from dependency_graph.github_api import GitHubClient
from dependency_graph.github_path_resolver import workspace_directory
from dependency_graph.inputs import DependencyGraphMode, get_github_token
from dependency_graph.locator import REPORTS_DIRECTORY_NAME
from dependency_graph.workflow_commands import export_variable, info

StoreFactory = Callable[[], ArtifactStore]
ClientFactory = Callable[[], GitHubClient]


def default_client() -> GitHubClient:
    return GitHubClient(get_github_token())


def setup(mode: DependencyGraphMode, context: JobContext, matrix_json: str) -> None:
    if mode in (DependencyGraphMode.DISABLED, DependencyGraphMode.DOWNLOAD_AND_SUBMIT):
        return

    info("Enabling dependency graph generation")
    job_correlator = get_job_correlator(context, matrix_json)
    export_variable("GITHUB_DEPENDENCY_GRAPH_ENABLED", "true")
    export_variable("GITHUB_DEPENDENCY_GRAPH_JOB_CORRELATOR", job_correlator)
    export_variable("GITHUB_DEPENDENCY_GRAPH_JOB_ID", context.run_id)
    export_variable(
        "GITHUB_DEPENDENCY_GRAPH_REPORT_DIR",
        str(workspace_directory() / REPORTS_DIRECTORY_NAME),
    )


def _disabled(context: JobContext, store_factory: StoreFactory, client_factory: ClientFactory) -> None:
    return None


def _generate(context: JobContext, store_factory: StoreFactory, client_factory: ClientFactory) -> None:
    graphs.upload_dependency_graphs(store_factory())


def _generate_and_submit(
    context: JobContext, store_factory: StoreFactory, client_factory: ClientFactory
) -> None:
    client = client_factory()
    graph_files = graphs.upload_dependency_graphs(store_factory())
    graphs.submit_dependency_graphs(graph_files, context.identity, client)


def _download_and_submit(
    context: JobContext, store_factory: StoreFactory, client_factory: ClientFactory
) -> None:
    client = client_factory()
    graph_files = graphs.retrieve_dependency_graphs(context, client, store_factory)
    graphs.submit_dependency_graphs(graph_files, context.identity, client)


_COMPLETE_HANDLERS: Mapping[
    DependencyGraphMode, Callable[[JobContext, StoreFactory, ClientFactory], None]
] = {
    DependencyGraphMode.DISABLED: _disabled,
    DependencyGraphMode.GENERATE: _generate,
    DependencyGraphMode.GENERATE_AND_SUBMIT: _generate_and_submit,
    DependencyGraphMode.DOWNLOAD_AND_SUBMIT: _download_and_submit,
}


def complete(
    mode: DependencyGraphMode,
    context: JobContext,
    *,
    store_factory: StoreFactory = ArtifactStore,
    client_factory: ClientFactory = default_client,
) -> None:
    _COMPLETE_HANDLERS[mode](context, store_factory, client_factory)
