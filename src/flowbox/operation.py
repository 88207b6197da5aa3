"""Operation descriptor for flowbox.

Bundles the sub-command name and its CLI arguments into a single immutable
object that is built once per invocation and passed down explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass

from .constants import DEFAULT_ENVIRONMENT, DEFAULT_PROJECT_DIR


@dataclass(frozen=True)
class MountRequirements:
    """Which directories and flags an operation needs."""

    project_dir_flag: bool = False
    airflow_home: bool = False
    airflow_dags_folder: bool = False
    data_dir: bool = False
    global_mount: bool = False


# One row per sub-command; every call site goes through this table
OPERATION_REQUIREMENTS: dict[str, MountRequirements] = {
    "about": MountRequirements(),
    "version": MountRequirements(),
    "init": MountRequirements(airflow_home=True, airflow_dags_folder=True, data_dir=True),
    "config": MountRequirements(project_dir_flag=True),
    "validate": MountRequirements(),
    "generate": MountRequirements(project_dir_flag=True, global_mount=True),
    "run": MountRequirements(project_dir_flag=True, global_mount=True),
}

# Sub-commands exposing --project-dir and --env (both carry defaults)
_PROJECT_DIR_OPTION = frozenset({"config", "generate", "run"})
_ENV_OPTION = frozenset({"config", "validate", "generate", "run"})


@dataclass(frozen=True)
class Operation:
    """A single sub-command invocation.

    Immutable dataclass bundling all CLI arguments for one sub-command.
    Use frozen=True so composition can never alter what the user asked for.
    """

    name: str
    args: tuple[str, ...] = ()

    # Project directory ("" means the working directory)
    project_dir: str = ""

    # Local directories, init only
    airflow_home: str = ""
    airflow_dags_folder: str = ""
    data_dir: str = ""

    # Forwarded options
    env: str = ""
    connection: str = ""
    verbose: bool = False
    generate_tasks: bool = False
    no_generate_tasks: bool = False

    # Group-level --debug
    debug: bool = False

    @property
    def requirements(self) -> MountRequirements:
        """Row of OPERATION_REQUIREMENTS for this operation."""
        return OPERATION_REQUIREMENTS[self.name]

    @classmethod
    def from_cli(
        cls,
        name: str,
        *,
        args: tuple[str, ...] | list[str] = (),
        project_dir: str | None = None,
        airflow_home: str | None = None,
        airflow_dags_folder: str | None = None,
        data_dir: str | None = None,
        env: str | None = None,
        connection: str | None = None,
        verbose: bool = False,
        generate_tasks: bool = False,
        no_generate_tasks: bool = False,
        debug: bool = False,
    ) -> Operation:
        """Create an Operation from CLI arguments.

        Unset options become empty strings. ``env`` and ``project_dir``
        are only defaulted for sub-commands that expose them.

        Raises:
            KeyError: If ``name`` is not a known sub-command.
        """
        if name not in OPERATION_REQUIREMENTS:
            raise KeyError(name)
        if project_dir is None and name in _PROJECT_DIR_OPTION:
            project_dir = DEFAULT_PROJECT_DIR
        if env is None and name in _ENV_OPTION:
            env = DEFAULT_ENVIRONMENT
        return cls(
            name=name,
            args=tuple(args),
            project_dir=project_dir or "",
            airflow_home=airflow_home or "",
            airflow_dags_folder=airflow_dags_folder or "",
            data_dir=data_dir or "",
            env=env or "",
            connection=connection or "",
            verbose=verbose,
            generate_tasks=generate_tasks,
            no_generate_tasks=no_generate_tasks,
            debug=debug,
        )
