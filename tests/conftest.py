from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator

import pytest

from dependency_graph.context import JobContext, RunIdentity

_RUNNER_PREFIXES = ("GITHUB_", "INPUT_", "ACTIONS_")


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    saved = dict(os.environ)
    for name in list(os.environ):
        if name.startswith(_RUNNER_PREFIXES):
            monkeypatch.delenv(name)
    yield
    os.environ.clear()
    os.environ.update(saved)


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    root = tmp_path.resolve()
    monkeypatch.setenv("GITHUB_WORKSPACE", str(root))
    return root


@pytest.fixture
def identity() -> RunIdentity:
    return RunIdentity(owner="octo", repo="widgets")


@pytest.fixture
def job_context(identity: RunIdentity) -> JobContext:
    return JobContext(identity=identity, workflow="CI", job="build", run_id="42")
