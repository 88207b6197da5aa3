"""Flag and mount composition.

Works out, for one operation, which host directories get bind-mounted and
which ``--flag value`` pairs get forwarded to the tool. Some directories are
only known to the tool itself (its global configuration), so they are
discovered by running ``config <key>`` in a container first.

Order matters:
    1. project directory is created and becomes mount 0
    2. ``project-dir`` flag, when the operation takes one
    3. global config directories, one nested query per key, in order
    4. local directory flags given on the command line
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from .constants import (
    CONFIG_COMMAND,
    FLAG_AIRFLOW_DAGS_FOLDER,
    FLAG_AIRFLOW_HOME,
    FLAG_DATA_DIR,
    FLAG_PROJECT_DIR,
    GLOBAL_CONFIG_KEYS,
)
from .errors import DockerError, NonZeroExitError, OutputDecodeError, SubInvocationError
from .executor import Executor, decode_output
from .logging import get_logger
from .operation import MountRequirements, Operation
from .paths import base_mount_dirs, resolve_path

logger = get_logger(__name__)

Decoder = Callable[[bytes | None], str]


@dataclass
class ComposedInvocation:
    """Flags and mounts for one container run."""

    flags: dict[str, str] = field(default_factory=dict)
    mount_dirs: list[str] = field(default_factory=list)

    @property
    def project_dir(self) -> str:
        """Resolved project directory (always the first mount)."""
        return self.mount_dirs[0]


def query_global_key(
    key: str,
    flags: Mapping[str, str],
    mount_dirs: list[str],
    *,
    executor: Executor,
    decoder: Decoder = decode_output,
) -> list[str]:
    """Ask the tool for the directory behind a global config key.

    Runs ``config <key>`` with the given flags and mounts, captures the
    output and appends the stripped value to ``mount_dirs``.

    Args:
        key: Global configuration key, e.g. ``airflow_home``.
        flags: Flags for the query (the project directory).
        mount_dirs: Mount list to extend; it is also what the query sees.
        executor: Runs the container.
        decoder: Turns captured output into text.

    Returns:
        The same list, with the discovered directory appended.

    Raises:
        SubInvocationError: If the query container could not be launched.
        NonZeroExitError: If the query exited non-zero.
        OutputDecodeError: If the captured output could not be decoded.
    """
    command = [*CONFIG_COMMAND, key]
    logger.debug("Querying global config key %s", key)
    try:
        result = executor.execute(
            CONFIG_COMMAND, [key], dict(flags), list(mount_dirs), capture_output=True
        )
    except DockerError as e:
        raise SubInvocationError(command, key, e) from e

    if result.exit_code != 0:
        raise NonZeroExitError(result.exit_code, command=command)

    try:
        value = decoder(result.output)
    except ValueError as e:
        raise OutputDecodeError(key, e) from e

    value = value.strip()
    logger.debug("Global config key %s -> %s", key, value)
    mount_dirs.append(value)
    return mount_dirs


def compose_flags_and_mounts(
    project_dir: str,
    requirements: MountRequirements,
    *,
    executor: Executor,
    airflow_home: str = "",
    airflow_dags_folder: str = "",
    data_dir: str = "",
    decoder: Decoder = decode_output,
) -> ComposedInvocation:
    """Build the flag map and mount list for an operation.

    Any failure propagates immediately; nothing partial is returned.

    Raises:
        PathError: If a path cannot be resolved or the project directory
            cannot be created.
        ContainerCommandError: If a global config query fails.
    """
    composed = ComposedInvocation(mount_dirs=base_mount_dirs(project_dir))

    if requirements.project_dir_flag:
        composed.flags[FLAG_PROJECT_DIR] = resolve_path(project_dir)

    if requirements.global_mount:
        query_flags = {FLAG_PROJECT_DIR: composed.project_dir}
        for key in GLOBAL_CONFIG_KEYS:
            query_global_key(
                key,
                query_flags,
                composed.mount_dirs,
                executor=executor,
                decoder=decoder,
            )

    local_dirs = (
        (requirements.airflow_home, FLAG_AIRFLOW_HOME, airflow_home),
        (requirements.airflow_dags_folder, FLAG_AIRFLOW_DAGS_FOLDER, airflow_dags_folder),
        (requirements.data_dir, FLAG_DATA_DIR, data_dir),
    )
    for wanted, flag, value in local_dirs:
        if not wanted or not value:
            continue
        resolved = resolve_path(value)
        composed.flags[flag] = resolved
        composed.mount_dirs.append(resolved)

    logger.debug("Composed flags=%s mounts=%s", composed.flags, composed.mount_dirs)
    return composed


def compose_for_operation(
    operation: Operation,
    *,
    executor: Executor,
    decoder: Decoder = decode_output,
) -> ComposedInvocation:
    """compose_flags_and_mounts with the operation's table row and options."""
    return compose_flags_and_mounts(
        operation.project_dir,
        operation.requirements,
        executor=executor,
        airflow_home=operation.airflow_home,
        airflow_dags_folder=operation.airflow_dags_folder,
        data_dir=operation.data_dir,
        decoder=decoder,
    )
