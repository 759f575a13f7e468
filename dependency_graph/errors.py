from __future__ import annotations


class DependencyGraphError(RuntimeError):
    """Base class for failures reported to the workflow."""


class MissingInputError(DependencyGraphError):
    """Raised when a required action input is missing."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Input required and not supplied: {name}")
        self.name = name


class InvalidModeError(DependencyGraphError):
    def __init__(self, value: str) -> None:
        super().__init__(
            f"The value '{value}' is not valid for 'dependency-graph'. Valid values are: "
            "[disabled, generate, generate-and-submit, download-and-submit]. "
            "The default value is 'disabled'."
        )
        self.value = value


class MissingEnvironmentVariableError(DependencyGraphError):
    """Raised when a required GitHub environment variable is missing."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Missing required environment variable: {name}")
        self.name = name


class ArtifactNotFoundError(DependencyGraphError):
    def __init__(self, name: str, run_id: int | None = None) -> None:
        if run_id is None:
            message = f"Artifact '{name}' not found in the current workflow run."
        else:
            message = (
                f"Dependency graph artifact not found. "
                f"Has it been generated by workflow run '{run_id}'?"
            )
        super().__init__(message)
        self.name = name
        self.run_id = run_id


class GitHubApiError(DependencyGraphError):
    """Raised when GitHub rejects a request or cannot be reached."""

    def __init__(self, status_code: int | None, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.status_code = status_code
        if cause is not None:
            self.__cause__ = cause


class MalformedGraphError(DependencyGraphError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Dependency graph file {path} does not contain a JSON object")
        self.path = path
