"""Unified exception hierarchy for flowbox.

All custom exceptions inherit from FlowboxError for consistent error handling.
CLI catches these and converts to user-friendly messages via click.ClickException.

Dependency direction:
    This module has NO internal dependencies (leaf module).
    It may be imported by: all other flowbox modules.
    It should NOT import from any other flowbox modules.
"""

from __future__ import annotations

from collections.abc import Sequence


def _format_command(command: Sequence[str]) -> str:
    return "[" + " ".join(command) + "]"


class FlowboxError(Exception):
    """Base exception for all flowbox errors.

    All flowbox-specific exceptions should inherit from this class.
    This enables consistent error handling at the CLI layer.
    """


class PathError(FlowboxError):
    """Path resolution and host directory errors."""


class PathResolutionError(PathError):
    """Raised when the current working directory cannot be determined."""

    def __init__(self, path: str, cause: BaseException | None = None) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"error getting current directory {cause}")


class DirectoryCreationError(PathError):
    """Raised when the project directory cannot be created on the host."""

    def __init__(self, path: str, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"error creating project directory {path}: {cause}")


class DockerError(FlowboxError):
    """Docker operation errors.

    Base class for transport failures: the container could not be
    launched or the docker CLI misbehaved. Never raised for a tool
    that ran and exited non-zero.
    """


class DockerNotFoundError(DockerError):
    """Raised when Docker is not installed or not in PATH."""


class DockerTimeoutError(DockerError):
    """Raised when a Docker operation times out."""


class ImageBuildError(DockerError):
    """Raised when the tool image cannot be built."""


class ContainerCommandError(FlowboxError):
    """Errors from running a command inside the tool container."""


class SubInvocationError(ContainerCommandError):
    """Raised when a nested config query could not be launched."""

    def __init__(self, command: Sequence[str], key: str, cause: BaseException) -> None:
        self.command = list(command)
        self.key = key
        self.cause = cause
        super().__init__(f"error running {_format_command(self.command)}: {cause}")


class DispatchError(ContainerCommandError):
    """Raised when the requested operation could not be launched."""

    def __init__(self, command: Sequence[str], cause: BaseException) -> None:
        self.command = list(command)
        self.cause = cause
        super().__init__(f"error running {_format_command(self.command)}: {cause}")


class NonZeroExitError(ContainerCommandError):
    """Raised when the tool exits with a non-zero code.

    The numeric code is kept on the instance for diagnostics. When the
    failing run was a nested config query, ``command`` names it.
    """

    def __init__(self, code: int, command: Sequence[str] | None = None) -> None:
        self.code = code
        self.command = list(command) if command is not None else None
        message = f"docker command has returned a non-zero exit code:{code}"
        if self.command is not None:
            message += f" (running {_format_command(self.command)})"
        super().__init__(message)


class OutputDecodeError(ContainerCommandError):
    """Raised when captured output of a config query cannot be decoded."""

    def __init__(self, key: str, cause: BaseException) -> None:
        self.key = key
        self.cause = cause
        super().__init__(f"error reading value of config key {key}: {cause}")


class ValidationError(FlowboxError):
    """Input validation errors."""


class MissingArgumentError(ValidationError):
    """Raised when a required positional argument was not given."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"argument not set:{name}")


class FatalDispatchError(RuntimeError):
    """Unrecoverable failure while rendering help inside the container.

    Not part of the FlowboxError tree: the CLI layer never converts it
    into an error message, so it propagates and aborts the process.
    """
