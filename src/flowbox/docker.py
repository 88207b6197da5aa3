"""Docker CLI wrappers for flowbox.

Thin layer over ``subprocess`` that turns launch problems into
DockerError subclasses. Callers decide what a non-zero exit code means.
"""

from __future__ import annotations

import subprocess
from typing import TYPE_CHECKING, Any

from .constants import DOCKER_COMMAND_TIMEOUT
from .errors import DockerError, DockerNotFoundError, DockerTimeoutError
from .logging import get_logger

logger = get_logger(__name__)

if TYPE_CHECKING:
    from collections.abc import Sequence

__all__ = [
    "safe_docker_run",
    "check_docker_status",
    "image_exists",
    "list_image_tags",
]


def safe_docker_run(
    cmd: Sequence[str],
    *,
    timeout: int | None = DOCKER_COMMAND_TIMEOUT,
    capture_output: bool = True,
    capture_stdout: bool = False,
    text: bool = True,
) -> subprocess.CompletedProcess[Any]:
    """Run a Docker command with consistent error handling.

    Args:
        cmd: Command to run (should start with 'docker').
        timeout: Command timeout in seconds, None to wait indefinitely.
        capture_output: Capture stdout/stderr if True, otherwise stream them.
        capture_stdout: Capture stdout only and let stderr reach the
            terminal. Ignored when capture_output is True.
        text: Decode captured output as text. Pass False to get raw bytes.

    Returns:
        CompletedProcess with command result. A non-zero return code is
        not an error at this level.

    Raises:
        DockerNotFoundError: If docker command is not found.
        DockerTimeoutError: If command times out.
        DockerError: If the process cannot be started for another OS reason.
    """
    cmd_str = " ".join(cmd[:4]) + ("..." if len(cmd) > 4 else "")
    logger.debug("Running Docker command: %s", cmd_str)
    stdout = subprocess.PIPE if capture_stdout and not capture_output else None
    try:
        result = subprocess.run(
            list(cmd),
            capture_output=capture_output,
            stdout=stdout,
            text=text,
            check=False,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        logger.error("Docker not found in PATH: %s", cmd_str)
        raise DockerNotFoundError(f"Docker not found in PATH. Command: {cmd_str}") from e
    except subprocess.TimeoutExpired as e:
        logger.error("Docker command timed out after %ss: %s", timeout, cmd_str)
        raise DockerTimeoutError(
            f"Docker command timed out after {timeout}s. Command: {cmd_str}"
        ) from e
    except OSError as e:
        raise DockerError(f"Cannot start docker: {e}. Command: {cmd_str}") from e

    logger.debug("Docker command completed: exit=%d", result.returncode)
    return result


def check_docker_status() -> bool:
    """Check if Docker daemon is responsive."""
    try:
        return safe_docker_run(["docker", "info"]).returncode == 0
    except DockerError:
        return False


def image_exists(image: str) -> bool:
    """Check if a Docker image is present locally."""
    try:
        return safe_docker_run(["docker", "image", "inspect", image]).returncode == 0
    except DockerError:
        return False


def list_image_tags(repository: str) -> list[str]:
    """Tags of a local image repository, most recently created first.

    Untagged images are skipped. Returns an empty list when docker is
    unavailable.
    """
    try:
        result = safe_docker_run(["docker", "images", "--format", "{{.Tag}}", repository])
    except DockerError:
        return []
    if result.returncode != 0:
        return []
    return [tag for tag in (result.stdout or "").split() if tag != "<none>"]
