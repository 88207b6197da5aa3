"""Running the SQL workflow CLI inside a container.

The Executor protocol is the seam between orchestration and Docker:
composition and dispatch only ever call ``execute`` and look at the exit
code and captured output. DockerExecutor is the production implementation;
tests pass their own.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol

from .config import Settings, load_settings
from .docker import safe_docker_run
from .image import ensure_image
from .logging import get_logger
from .paths import resolve_for_docker

logger = get_logger(__name__)


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of one container run.

    ``output`` holds the raw stdout bytes when output was captured and
    is None when it was streamed to the terminal.
    """

    exit_code: int
    output: bytes | None = None


class Executor(Protocol):
    """Anything that can run a tool command in a container."""

    def execute(
        self,
        command: Sequence[str],
        args: Sequence[str],
        flags: Mapping[str, str],
        mount_dirs: Sequence[str],
        *,
        capture_output: bool = False,
    ) -> ExecutionResult:
        """Run the tool.

        Raises:
            DockerError: If the container cannot be launched.
        """
        ...


def decode_output(output: bytes | None) -> str:
    """Decode captured tool output.

    Raises:
        ValueError: If nothing was captured or the bytes are not UTF-8.
    """
    if output is None:
        raise ValueError("no output was captured")
    return output.decode("utf-8")


def get_tool_argv(
    command: Sequence[str], args: Sequence[str], flags: Mapping[str, str]
) -> list[str]:
    """Arguments handed to the tool entrypoint: command, positionals, flags."""
    argv = [*command, *args]
    for name, value in flags.items():
        argv.extend([f"--{name}", value])
    return argv


def get_docker_run_cmd(
    image: str,
    command: Sequence[str],
    args: Sequence[str],
    flags: Mapping[str, str],
    mount_dirs: Sequence[str],
    *,
    interactive: bool = False,
    tty: bool = False,
) -> list[str]:
    """Build the ``docker run`` command line.

    Each mount directory is bound read/write at the same path inside the
    container. Argument and flag values naming a mounted directory are
    rewritten to that in-container path, so they resolve on both sides.
    """
    cmd = ["docker", "run", "--rm"]
    if interactive:
        cmd.append("-i")
    if tty:
        cmd.append("-t")

    docker_paths: dict[str, str] = {}
    for mount_dir in mount_dirs:
        docker_path = resolve_for_docker(mount_dir)
        docker_paths[mount_dir] = docker_path
        cmd.extend(["-v", f"{docker_path}:{docker_path}"])

    container_args = [docker_paths.get(arg, arg) for arg in args]
    container_flags = {name: docker_paths.get(value, value) for name, value in flags.items()}

    cmd.append(image)
    cmd.extend(get_tool_argv(command, container_args, container_flags))
    return cmd


class DockerExecutor:
    """Executor backed by the local docker CLI."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings if settings is not None else load_settings()
        self._image: str | None = None

    @property
    def image(self) -> str:
        """Tag of the tool image, built on first access."""
        if self._image is None:
            self._image = ensure_image(self.settings)
        return self._image

    def execute(
        self,
        command: Sequence[str],
        args: Sequence[str],
        flags: Mapping[str, str],
        mount_dirs: Sequence[str],
        *,
        capture_output: bool = False,
    ) -> ExecutionResult:
        """Run the tool once in a fresh container.

        With capture_output only stdout is captured; stderr always goes
        to the terminal.

        Raises:
            DockerError: If the image cannot be prepared or docker fails to start.
        """
        streamed = not capture_output
        cmd = get_docker_run_cmd(
            self.image,
            command,
            args,
            flags,
            mount_dirs,
            interactive=streamed and sys.stdin.isatty(),
            tty=streamed and sys.stdout.isatty(),
        )
        result = safe_docker_run(
            cmd,
            timeout=None,
            capture_output=False,
            capture_stdout=capture_output,
            text=False,
        )
        return ExecutionResult(
            exit_code=result.returncode,
            output=result.stdout if capture_output else None,
        )
