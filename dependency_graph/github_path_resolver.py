from __future__ import annotations

import os
from pathlib import Path
from typing import Union

PathLike = Union[str, os.PathLike[str]]


def workspace_directory() -> Path:
    """Return the job workspace, falling back to the current directory."""

    workspace = os.getenv("GITHUB_WORKSPACE")
    if workspace:
        return Path(workspace).resolve(strict=False)
    return Path.cwd().resolve(strict=False)


def relative_to_workspace(path: PathLike) -> str:
    """Return *path* relative to the workspace as a loggable POSIX string.

    Paths outside of the workspace are returned unchanged.
    """

    resolved = Path(path).resolve(strict=False)
    try:
        text = resolved.relative_to(workspace_directory()).as_posix()
    except ValueError:
        text = resolved.as_posix()
    return text.replace("\n", " ").replace("\r", " ")
