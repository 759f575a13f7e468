#!/usr/bin/env python3
"""Run the job start (``setup``) or job end (``complete``) step."""
from __future__ import annotations

import argparse
import sys
from typing import Sequence

from dependency_graph import controller
from dependency_graph.context import load_job_context
from dependency_graph.errors import DependencyGraphError
from dependency_graph.inputs import DependencyGraphMode, get_dependency_graph_mode, get_job_matrix
from dependency_graph.workflow_commands import error


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dependency-graph",
        description="Manage dependency graph artifacts for the current GitHub Actions job.",
    )
    parser.add_argument("step", choices=("setup", "complete"))
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        mode = get_dependency_graph_mode()
        if mode is DependencyGraphMode.DISABLED:
            return 0
        context = load_job_context()
        if args.step == "setup":
            controller.setup(mode, context, get_job_matrix())
        else:
            controller.complete(mode, context)
    except (DependencyGraphError, ValueError, OSError) as exc:
        error(str(exc).strip() or exc.__class__.__name__)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
