"""Minimal GitHub Actions workflow command helpers."""
from __future__ import annotations

import os
import sys
import uuid
from pathlib import Path

from dependency_graph.errors import MissingInputError

_NULL_STRINGS = {"null", "none", "undefined", '""', "''"}


def normalise_optional_string(value: str | None) -> str:
    if not value:
        return ""
    candidate = value.strip()
    if candidate.lower() in _NULL_STRINGS:
        return ""
    return candidate


def _escape_data(message: str) -> str:
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def info(message: str) -> None:
    print(message, flush=True)


def debug(message: str) -> None:
    print(f"::debug::{_escape_data(message)}", flush=True)


def notice(message: str) -> None:
    print(f"::notice::{_escape_data(message)}", flush=True)


def warning(message: str) -> None:
    print(f"::warning::{_escape_data(message)}", file=sys.stderr)


def error(message: str) -> None:
    print(f"::error::{_escape_data(message)}", file=sys.stderr)


def get_input(name: str, *, required: bool = False, default: str = "") -> str:
    """Return the action input *name* as exposed by the runner.

    Inputs arrive as ``INPUT_<NAME>`` variables with the name upper-cased and
    spaces replaced by underscores. Null-like sentinels count as empty.
    """

    key = f"INPUT_{name.replace(' ', '_').upper()}"
    value = normalise_optional_string(os.getenv(key))
    if not value:
        if required:
            raise MissingInputError(name)
        return default
    return value


def export_variable(name: str, value: str) -> None:
    """Set *name* for this process and for every later step of the job."""

    os.environ[name] = value
    env_file = os.getenv("GITHUB_ENV")
    if not env_file:
        return
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    with Path(env_file).open("a", encoding="utf-8") as handle:
        handle.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
