"""Dispatching operations to the tool container.

dispatch runs the command the user asked for, with output streamed to the
terminal. execute_operation shapes the positional arguments and forwarded
options for each sub-command before dispatching. dispatch_help is the only
place where a failure becomes fatal instead of a regular error.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import replace

from .compose import compose_for_operation
from .constants import FLAG_CONNECTION, FLAG_ENV
from .errors import (
    DispatchError,
    DockerError,
    FatalDispatchError,
    FlowboxError,
    MissingArgumentError,
    NonZeroExitError,
)
from .executor import Executor
from .logging import get_logger
from .operation import Operation

logger = get_logger(__name__)

# Sub-commands whose first positional argument is mandatory
REQUIRED_ARGUMENTS: dict[str, str] = {
    "config": "key",
    "generate": "workflow_name",
    "run": "workflow_name",
}

# Sub-commands whose optional positional argument is the project directory
PROJECT_DIR_ARGUMENT = frozenset({"init", "validate"})


def _run_in_container(
    command: Sequence[str],
    args: Sequence[str],
    flags: Mapping[str, str],
    mount_dirs: Sequence[str],
    *,
    executor: Executor,
) -> None:
    try:
        result = executor.execute(command, args, flags, mount_dirs, capture_output=False)
    except DockerError as e:
        raise DispatchError(command, e) from e

    if result.exit_code != 0:
        logger.debug("%s exited with %d", list(command), result.exit_code)
        raise NonZeroExitError(result.exit_code)


def dispatch(
    operation_name: str,
    args: Sequence[str],
    flags: Mapping[str, str],
    mount_dirs: Sequence[str],
    *,
    debug: bool = False,
    executor: Executor,
) -> None:
    """Run a sub-command of the tool with output streamed to the terminal.

    Args:
        operation_name: Tool sub-command, e.g. ``run``.
        args: Positional arguments and bare flag tokens.
        flags: ``--name value`` pairs.
        mount_dirs: Host directories to bind-mount.
        debug: Prefix the command with the tool's ``--debug``.
        executor: Runs the container.

    Raises:
        DispatchError: If the container could not be launched.
        NonZeroExitError: If the tool exited non-zero.
    """
    command = ["--debug", operation_name] if debug else [operation_name]
    _run_in_container(command, args, flags, mount_dirs, executor=executor)


def dispatch_help(command: Sequence[str], *, executor: Executor) -> None:
    """Let the tool render help for ``command``; abort on any failure.

    Help is printed from an eager click callback that has no way to hand
    an error back, so failures are raised as FatalDispatchError.

    Raises:
        FatalDispatchError: If the help run failed for any reason.
    """
    try:
        _run_in_container(command, [], {}, [], executor=executor)
    except FlowboxError as e:
        raise FatalDispatchError(str(e)) from e


def check_required_arguments(operation: Operation) -> None:
    """Fail early when a mandatory positional argument is missing.

    Raises:
        MissingArgumentError: Naming the missing argument.
    """
    required = REQUIRED_ARGUMENTS.get(operation.name)
    if required and not operation.args:
        raise MissingArgumentError(required)


def _task_generation_tokens(operation: Operation) -> list[str]:
    if operation.generate_tasks:
        return ["--generate-tasks"]
    if operation.no_generate_tasks:
        return ["--no-generate-tasks"]
    return []


def execute_operation(operation: Operation, *, executor: Executor) -> None:
    """Compose mounts and flags for an operation and dispatch it.

    Raises:
        FlowboxError: On the first failure of any step.
    """
    check_required_arguments(operation)

    if operation.name in PROJECT_DIR_ARGUMENT and operation.args:
        operation = replace(operation, project_dir=operation.args[0])

    composed = compose_for_operation(operation, executor=executor)
    flags = composed.flags
    args = list(operation.args)

    if operation.name in PROJECT_DIR_ARGUMENT:
        args = [composed.project_dir]

    if operation.env:
        flags[FLAG_ENV] = operation.env

    if operation.name == "validate":
        if operation.connection:
            flags[FLAG_CONNECTION] = operation.connection
        if operation.verbose:
            args.append("--verbose")
    elif operation.name == "generate":
        args.extend(_task_generation_tokens(operation))
        if operation.verbose:
            args.append("--verbose")
    elif operation.name == "run":
        if operation.verbose:
            args.append("--verbose")
        args.extend(_task_generation_tokens(operation))

    logger.debug("Dispatching %s args=%s", operation.name, args)
    dispatch(
        operation.name,
        args,
        flags,
        composed.mount_dirs,
        debug=operation.debug,
        executor=executor,
    )
