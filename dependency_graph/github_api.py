"""REST calls against the GitHub API used for dependency graphs."""
from __future__ import annotations

import os
from typing import Any, Mapping
from urllib.parse import quote, urlparse

import requests

from dependency_graph.errors import GitHubApiError
from dependency_graph.workflow_commands import normalise_optional_string

_DEFAULT_API_URL = "https://api.github.com"
_DEFAULT_API_VERSION = "2022-11-28"
_REQUEST_TIMEOUT = 30
_ARTIFACTS_PER_PAGE = 100


def api_base_url() -> str:
    api_url = normalise_optional_string(os.getenv("GITHUB_API_URL")) or _DEFAULT_API_URL
    return api_url.rstrip("/")


def _validate_base_url(url: str) -> None:
    parsed = urlparse(url)
    if parsed.scheme != "https" or not parsed.hostname:
        raise GitHubApiError(None, "GitHub API requests are only allowed over HTTPS")
    if parsed.username or parsed.password:
        raise GitHubApiError(None, "GitHub API URL must not contain credentials")


def _response_detail(response: requests.Response) -> str:
    text = (response.text or "").strip()
    return text or response.reason or ""


def new_session() -> requests.Session:
    session = requests.Session()
    session.trust_env = False
    session.proxies = {}
    session.verify = True
    return session


class GitHubClient:
    def __init__(
        self,
        token: str,
        *,
        base_url: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = (base_url or api_base_url()).rstrip("/")
        _validate_base_url(self.base_url)
        self.session = session if session is not None else new_session()
        self.headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": os.getenv("GITHUB_API_VERSION", _DEFAULT_API_VERSION),
            "User-Agent": "dependency-graph-action",
            "Authorization": f"Bearer {token}",
        }

    def _repo_url(self, owner: str, repo: str, path: str) -> str:
        return f"{self.base_url}/repos/{quote(owner, safe='')}/{quote(repo, safe='')}/{path}"

    def _request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_body: Any = None,
        allow_redirects: bool = False,
    ) -> requests.Response:
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=self.headers,
                timeout=_REQUEST_TIMEOUT,
                allow_redirects=allow_redirects,
            )
        except requests.exceptions.RequestException as exc:
            message = str(exc).strip() or exc.__class__.__name__
            raise GitHubApiError(None, f"{method} {url} failed: {message}", exc) from exc

        status_code = int(response.status_code)
        if status_code >= 400 or (300 <= status_code < 400 and not allow_redirects):
            raise GitHubApiError(
                status_code,
                f"{method} {url} failed: HTTP {status_code}: {_response_detail(response)}",
            )
        return response

    def list_workflow_run_artifacts(self, owner: str, repo: str, run_id: int) -> list[dict[str, Any]]:
        url = self._repo_url(owner, repo, f"actions/runs/{run_id}/artifacts")
        artifacts: list[dict[str, Any]] = []
        page = 1
        while True:
            response = self._request(
                "GET", url, params={"per_page": _ARTIFACTS_PER_PAGE, "page": page}
            )
            batch = response.json().get("artifacts") or []
            artifacts.extend(batch)
            if len(batch) < _ARTIFACTS_PER_PAGE:
                return artifacts
            page += 1

    def download_artifact(self, owner: str, repo: str, artifact_id: int) -> bytes:
        """Return the zip archive of the artifact *artifact_id*."""

        url = self._repo_url(owner, repo, f"actions/artifacts/{artifact_id}/zip")
        response = self._request("GET", url, allow_redirects=True)
        return response.content

    def submit_snapshot(self, owner: str, repo: str, snapshot: Mapping[str, Any]) -> dict[str, Any]:
        url = self._repo_url(owner, repo, "dependency-graph/snapshots")
        response = self._request("POST", url, json_body=snapshot)
        data = response.json()
        if isinstance(data, dict):
            return data
        return {}
