"""Workflow run and job identity, read once from the runner environment."""
from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from dependency_graph.errors import MissingEnvironmentVariableError
from dependency_graph.workflow_commands import normalise_optional_string, warning


@dataclass(frozen=True)
class RunIdentity:
    owner: str
    repo: str

    @classmethod
    def from_repository(cls, repository: str) -> "RunIdentity":
        owner, _, repo = repository.partition("/")
        if not owner or not repo:
            raise MissingEnvironmentVariableError("GITHUB_REPOSITORY")
        return cls(owner=owner, repo=repo)


@dataclass(frozen=True)
class JobContext:
    identity: RunIdentity
    workflow: str
    job: str
    run_id: str
    workflow_run_id: int | None = None


def _env(name: str) -> str:
    value = normalise_optional_string(os.getenv(name))
    if not value:
        raise MissingEnvironmentVariableError(name)
    return value


def _load_event_payload() -> dict[str, Any] | None:
    raw_path = normalise_optional_string(os.getenv("GITHUB_EVENT_PATH"))
    if not raw_path:
        return None
    path = Path(raw_path)
    if not path.is_file():
        warning(f"GitHub event payload {path.as_posix()} does not exist.")
        return None
    try:
        with path.open("r", encoding="utf-8") as stream:
            data = json.load(stream)
    except (OSError, json.JSONDecodeError) as exc:
        warning(f"Unable to read GitHub event payload: {exc}")
        return None
    if isinstance(data, dict):
        return data
    return None


def _extract_workflow_run_id(payload: Mapping[str, object] | None) -> int | None:
    if not isinstance(payload, Mapping):
        return None
    workflow_run = payload.get("workflow_run")
    if not isinstance(workflow_run, Mapping):
        return None
    run_id = workflow_run.get("id")
    # bool is an int subclass
    if isinstance(run_id, bool) or not isinstance(run_id, int):
        return None
    return run_id


def load_job_context() -> JobContext:
    return JobContext(
        identity=RunIdentity.from_repository(_env("GITHUB_REPOSITORY")),
        workflow=_env("GITHUB_WORKFLOW"),
        job=_env("GITHUB_JOB"),
        run_id=_env("GITHUB_RUN_ID"),
        workflow_run_id=_extract_workflow_run_id(_load_event_payload()),
    )
