"""Host path handling for container bind mounts.

Every directory that ends up in a flag value or a bind mount passes through
resolve_path, so all of them are absolute. base_mount_dirs starts the mount
list with the project directory, creating it first if needed.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

from .constants import PROJECT_DIR_MODE
from .errors import DirectoryCreationError, PathResolutionError
from .logging import get_logger

logger = get_logger(__name__)

_WINDOWS_DRIVE = re.compile(r"^([A-Za-z]):[/\\]*(.*)$")


def resolve_path(path: str) -> str:
    """Turn a possibly relative or empty path into an absolute one.

    Absolute paths come back untouched. Anything else (including ``""``
    and ``"."``) is joined onto the current working directory.

    Args:
        path: Path given on the command line.

    Returns:
        Absolute path string.

    Raises:
        PathResolutionError: If the working directory cannot be read.

    Examples:
        >>> resolve_path("/srv/project")
        '/srv/project'
    """
    if path and path != "." and os.path.isabs(path):
        return path

    try:
        cwd = os.getcwd()
    except OSError as e:
        raise PathResolutionError(path, e) from e
    return os.path.normpath(os.path.join(cwd, path))


def ensure_project_dir(project_dir: str) -> str:
    """Resolve the project directory and create it (with parents) if absent.

    Raises:
        PathResolutionError: If the working directory cannot be read.
        DirectoryCreationError: If the directory cannot be created.
    """
    resolved = resolve_path(project_dir)
    try:
        Path(resolved).mkdir(mode=PROJECT_DIR_MODE, parents=True, exist_ok=True)
    except OSError as e:
        logger.debug("Cannot create project directory %s: %s", resolved, e)
        raise DirectoryCreationError(resolved, e) from e
    return resolved


def base_mount_dirs(project_dir: str) -> list[str]:
    """Start a mount list holding only the resolved project directory.

    Callers append to the returned list; element 0 stays the project
    directory for the rest of the invocation.
    """
    return [ensure_project_dir(project_dir)]


def resolve_for_docker(path: str | Path) -> str:
    """Convert a host path to the form docker expects in ``-v`` specs.

    Docker Desktop on Windows takes ``/c/Users/...`` rather than
    ``C:\\Users\\...``. POSIX paths are returned unchanged.

    Examples:
        >>> resolve_for_docker("C:\\\\work\\\\proj")
        '/c/work/proj'
        >>> resolve_for_docker("/home/user/proj")
        '/home/user/proj'
    """
    path_str = str(path)
    match = _WINDOWS_DRIVE.match(path_str)
    if not match:
        return path_str

    drive = match.group(1).lower()
    rest = re.sub(r"[/\\]+", "/", match.group(2)).rstrip("/")
    return f"/{drive}/{rest}" if rest else f"/{drive}"
