from __future__ import annotations

import json
from pathlib import Path

import pytest

from dependency_graph import graphs
from dependency_graph.context import JobContext, RunIdentity
from dependency_graph.errors import ArtifactNotFoundError, GitHubApiError, MalformedGraphError
from tests.fakes import FakeArtifactStore, FakeGitHubClient, make_zip, write_graph


def unexpected_store() -> FakeArtifactStore:
    raise AssertionError("artifact store must not be used")


def test_upload_dependency_graphs(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    first = write_graph(workspace, "build.json")
    second = write_graph(workspace, "test.json")
    store = FakeArtifactStore()

    uploaded = graphs.upload_dependency_graphs(store)  # type: ignore[arg-type]

    assert uploaded == [first, second]
    assert store.uploads == [("dependency-graph", [first, second], workspace)]
    assert (
        "Uploading dependency graph files: "
        "dependency-graph-reports/build.json, dependency-graph-reports/test.json"
    ) in capsys.readouterr().out


def test_upload_dependency_graphs_without_reports(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    store = FakeArtifactStore()

    assert graphs.upload_dependency_graphs(store) == []  # type: ignore[arg-type]
    assert store.uploads == []
    assert "::warning::No dependency graph files found" in capsys.readouterr().err


def test_submit_dependency_graphs_injects_repository(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    graph = write_graph(workspace, "build.json", '{"version": "1", "owner": "someone", "repo": "else"}')
    client = FakeGitHubClient()

    graphs.submit_dependency_graphs([graph], RunIdentity(owner="o", repo="r"), client)  # type: ignore[arg-type]

    assert client.submitted == [{"version": "1", "owner": "o", "repo": "r"}]
    assert (
        "::notice::Submitted dependency-graph-reports/build.json: "
        "Dependency results for the repo have been successfully updated."
    ) in capsys.readouterr().out


def test_submit_dependency_graphs_stops_at_malformed_file(
    workspace: Path, identity: RunIdentity
) -> None:
    broken = write_graph(workspace, "a.json", '{"version": ')
    valid = write_graph(workspace, "b.json")
    client = FakeGitHubClient()

    with pytest.raises(json.JSONDecodeError):
        graphs.submit_dependency_graphs([broken, valid], identity, client)  # type: ignore[arg-type]

    assert client.submitted == []


@pytest.mark.parametrize("content", ["[]", '"x"', "null", "1"])
def test_submit_dependency_graphs_rejects_non_object_json(
    workspace: Path, identity: RunIdentity, content: str
) -> None:
    graph = write_graph(workspace, "a.json", content)
    client = FakeGitHubClient()

    with pytest.raises(MalformedGraphError) as excinfo:
        graphs.submit_dependency_graphs([graph], identity, client)  # type: ignore[arg-type]

    assert "dependency-graph-reports/a.json" in str(excinfo.value)
    assert client.submitted == []


def test_submit_dependency_graphs_propagates_api_errors(
    workspace: Path, identity: RunIdentity
) -> None:
    graph = write_graph(workspace, "a.json")
    client = FakeGitHubClient(fail_on_submit=GitHubApiError(403, "Resource not accessible"))

    with pytest.raises(GitHubApiError):
        graphs.submit_dependency_graphs([graph], identity, client)  # type: ignore[arg-type]


def test_retrieve_for_current_workflow(workspace: Path, job_context: JobContext) -> None:
    store = FakeArtifactStore({"dependency-graph-reports/build.json": '{"version": 0}'})
    client = FakeGitHubClient()

    found = graphs.retrieve_dependency_graphs(job_context, client, lambda: store)  # type: ignore[arg-type]

    download_dir = workspace / "dependency-graph"
    assert store.download_calls == [("dependency-graph", download_dir)]
    assert found == [download_dir / "dependency-graph-reports" / "build.json"]
    assert client.listed == []


def test_retrieve_for_workflow_run(
    workspace: Path, job_context: JobContext, capsys: pytest.CaptureFixture[str]
) -> None:
    context = JobContext(
        identity=job_context.identity,
        workflow=job_context.workflow,
        job=job_context.job,
        run_id=job_context.run_id,
        workflow_run_id=123,
    )
    archive = make_zip(
        {
            "dependency-graph-reports/build.json": '{"version": 0}',
            "dependency-graph-reports/test.json": '{"version": 0}',
        }
    )
    client = FakeGitHubClient(
        artifacts=[
            {"id": 5, "name": "test-results"},
            {"id": 9, "name": "dependency-graph"},
        ],
        archive=archive,
    )

    found = graphs.retrieve_dependency_graphs(context, client, unexpected_store)  # type: ignore[arg-type]

    extract_dir = workspace / "dependency-graph"
    assert client.listed == [("octo", "widgets", 123)]
    assert client.downloaded == [9]
    assert (workspace / "dependency-graph.zip").read_bytes() == archive
    assert found == [
        extract_dir / "dependency-graph-reports" / "build.json",
        extract_dir / "dependency-graph-reports" / "test.json",
    ]
    assert (
        f"Extracted dependency graph artifacts to {extract_dir.as_posix()}: dependency-graph-reports"
        in capsys.readouterr().out
    )


def test_retrieve_for_workflow_run_without_artifact(
    workspace: Path, identity: RunIdentity
) -> None:
    client = FakeGitHubClient(artifacts=[{"id": 5, "name": "dependency-graph-old"}])

    with pytest.raises(ArtifactNotFoundError) as excinfo:
        graphs.retrieve_dependency_graphs_for_workflow_run(identity, 8675309, client, workspace)  # type: ignore[arg-type]

    assert "'8675309'" in str(excinfo.value)
    assert client.downloaded == []
    assert not (workspace / "dependency-graph.zip").exists()
