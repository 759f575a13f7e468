"""Named artifact upload and download against the Actions artifact service.

The runner exposes the service through ``ACTIONS_RESULTS_URL`` and authorises
calls with ``ACTIONS_RUNTIME_TOKEN``. The token's ``scp`` claim carries the
backend ids of the current workflow run and job, which scope every call.
"""
from __future__ import annotations

import base64
import binascii
import hashlib
import io
import json
import os
import zipfile
from pathlib import Path
from typing import Any, BinaryIO, Iterable

import requests

from dependency_graph.errors import (
    ArtifactNotFoundError,
    DependencyGraphError,
    GitHubApiError,
    MissingEnvironmentVariableError,
)
from dependency_graph.github_api import new_session
from dependency_graph.github_path_resolver import PathLike
from dependency_graph.workflow_commands import normalise_optional_string

_SERVICE_PATH = "twirp/github.actions.results.api.v1.ArtifactService"
_SCOPE_PREFIX = "Actions.Results:"
_ARTIFACT_VERSION = 4
_REQUEST_TIMEOUT = 30
_TRANSFER_TIMEOUT = 300


def _env(name: str) -> str:
    value = normalise_optional_string(os.getenv(name))
    if not value:
        raise MissingEnvironmentVariableError(name)
    return value


def backend_ids_from_token(token: str) -> tuple[str, str]:
    """Return ``(workflow_run_backend_id, workflow_job_run_backend_id)`` from *token*."""

    parts = token.split(".")
    if len(parts) != 3:
        raise GitHubApiError(None, "ACTIONS_RUNTIME_TOKEN is not a JWT")
    encoded = parts[1] + "=" * (-len(parts[1]) % 4)
    try:
        claims = json.loads(base64.urlsafe_b64decode(encoded))
    except (binascii.Error, ValueError) as exc:
        raise GitHubApiError(None, "ACTIONS_RUNTIME_TOKEN payload is not valid JSON", exc) from exc

    scopes = claims.get("scp", "") if isinstance(claims, dict) else ""
    for scope in str(scopes).split(" "):
        if not scope.startswith(_SCOPE_PREFIX):
            continue
        ids = scope[len(_SCOPE_PREFIX):].split(":")
        if len(ids) == 2 and all(ids):
            return ids[0], ids[1]
    raise GitHubApiError(None, "ACTIONS_RUNTIME_TOKEN does not carry workflow run backend ids")


def extract_zip(archive: PathLike | BinaryIO, destination: PathLike) -> Path:
    """Extract *archive* into *destination*, refusing members that escape it."""

    target = Path(destination).resolve(strict=False)
    target.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(archive) as bundle:
        for member in bundle.namelist():
            member_path = (target / member).resolve(strict=False)
            if member_path != target and target not in member_path.parents:
                raise DependencyGraphError(f"Archive member {member!r} escapes {target.as_posix()}")
        bundle.extractall(target)
    return target


def _zip_files(files: Iterable[Path], root_directory: Path) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as bundle:
        for path in files:
            bundle.write(path, path.resolve(strict=False).relative_to(root_directory).as_posix())
    return buffer.getvalue()


class ArtifactStore:
    def __init__(
        self,
        *,
        results_url: str | None = None,
        runtime_token: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.results_url = (results_url or _env("ACTIONS_RESULTS_URL")).rstrip("/")
        token = runtime_token or _env("ACTIONS_RUNTIME_TOKEN")
        self.run_backend_id, self.job_backend_id = backend_ids_from_token(token)
        self.session = session if session is not None else new_session()
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "User-Agent": "dependency-graph-action",
        }

    def _call(self, method: str, body: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.results_url}/{_SERVICE_PATH}/{method}"
        payload = dict(
            body,
            workflowRunBackendId=self.run_backend_id,
            workflowJobRunBackendId=self.job_backend_id,
        )
        try:
            response = self.session.post(
                url, json=payload, headers=self.headers, timeout=_REQUEST_TIMEOUT
            )
        except requests.exceptions.RequestException as exc:
            raise GitHubApiError(None, f"Artifact service {method} failed: {exc}", exc) from exc
        if response.status_code >= 400:
            detail = (response.text or "").strip() or response.reason or ""
            raise GitHubApiError(
                response.status_code,
                f"Artifact service {method} failed: HTTP {response.status_code}: {detail}",
            )
        data = response.json()
        return data if isinstance(data, dict) else {}

    def _transfer(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        try:
            response = self.session.request(method, url, timeout=_TRANSFER_TIMEOUT, **kwargs)
        except requests.exceptions.RequestException as exc:
            raise GitHubApiError(None, f"Artifact transfer failed: {exc}", exc) from exc
        if response.status_code >= 400:
            raise GitHubApiError(
                response.status_code,
                f"Artifact transfer failed: HTTP {response.status_code}: {response.reason or ''}",
            )
        return response

    def upload_artifact(self, name: str, files: Iterable[PathLike], root_directory: PathLike) -> int:
        """Upload *files* as the artifact *name*; archive paths are relative to *root_directory*.

        Returns the artifact id assigned by the service.
        """

        root = Path(root_directory).resolve(strict=False)
        content = _zip_files((Path(path) for path in files), root)

        created = self._call("CreateArtifact", {"name": name, "version": _ARTIFACT_VERSION})
        upload_url = created.get("signedUploadUrl")
        if not created.get("ok") or not upload_url:
            raise GitHubApiError(None, f"Artifact service refused to create artifact '{name}'")

        self._transfer(
            "PUT",
            upload_url,
            data=content,
            headers={"x-ms-blob-type": "BlockBlob", "Content-Type": "application/zip"},
        )

        finalized = self._call(
            "FinalizeArtifact",
            {
                "name": name,
                "size": str(len(content)),
                "hash": {"value": f"sha256:{hashlib.sha256(content).hexdigest()}"},
            },
        )
        if not finalized.get("ok"):
            raise GitHubApiError(None, f"Artifact service refused to finalize artifact '{name}'")
        return int(finalized.get("artifactId") or 0)

    def download_artifact(self, name: str, destination: PathLike) -> Path:
        """Download the artifact *name* of the current run and extract it into *destination*."""

        listed = self._call("ListArtifacts", {"nameFilter": {"value": name}})
        if not any(item.get("name") == name for item in listed.get("artifacts") or []):
            raise ArtifactNotFoundError(name)

        signed = self._call("GetSignedArtifactURL", {"name": name})
        download_url = signed.get("signedUrl")
        if not download_url:
            raise GitHubApiError(None, f"Artifact service returned no download URL for '{name}'")

        response = self._transfer("GET", download_url)
        return extract_zip(io.BytesIO(response.content), destination)
