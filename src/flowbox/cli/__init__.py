"""CLI package for flowbox.

This package contains the CLI commands and supporting modules:
- commands: Click command definitions (this module)
- utils: Console, error display, executor lookup, tool-rendered help

Every sub-command builds an Operation from its arguments and hands it to
flowbox.dispatch.execute_operation. Help for any command (and the bare
``flowbox`` command) is rendered by the containerized tool itself.
"""

from __future__ import annotations

import sys

# Configure UTF-8 encoding for Windows console output
if sys.platform == "win32":
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    if hasattr(sys.stderr, "reconfigure"):
        sys.stderr.reconfigure(encoding="utf-8", errors="replace")

import click

from .. import __version__
from ..constants import DEFAULT_ENVIRONMENT, DEFAULT_PROJECT_DIR
from ..dispatch import dispatch_help, execute_operation
from ..errors import FlowboxError
from ..logging import get_logger, set_debug
from ..operation import Operation
from .utils import DEBUG_META_KEY, FlowboxCLIError, ToolGroup, get_executor, is_debug

logger = get_logger(__name__)

__all__ = ["cli"]


def _execute(ctx: click.Context, name: str, **options: object) -> None:
    """Build the Operation for a sub-command and run it."""
    operation = Operation.from_cli(name, debug=is_debug(ctx), **options)  # type: ignore[arg-type]
    logger.debug("Operation: %s", operation)
    try:
        execute_operation(operation, executor=get_executor(ctx))
    except FlowboxError as e:
        raise FlowboxCLIError(e) from e


def _optional_arg(value: str | None) -> tuple[str, ...]:
    return (value,) if value else ()


def _check_task_generation(generate_tasks: bool, no_generate_tasks: bool) -> None:
    if generate_tasks and no_generate_tasks:
        raise click.UsageError(
            "--generate-tasks and --no-generate-tasks are mutually exclusive"
        )


env_option = click.option(
    "--env", default=DEFAULT_ENVIRONMENT, show_default=True, help="Environment to use"
)
project_dir_option = click.option(
    "--project-dir", default=DEFAULT_PROJECT_DIR, show_default=True, help="Project directory"
)
verbose_option = click.option("--verbose", is_flag=True, help="Verbose tool output")
generate_tasks_option = click.option(
    "--generate-tasks", is_flag=True, help="Generate one Airflow task per SQL statement"
)
no_generate_tasks_option = click.option(
    "--no-generate-tasks", is_flag=True, help="Generate a single Airflow task per workflow"
)


def _enable_debug(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    if value:
        ctx.meta[DEBUG_META_KEY] = True
        set_debug(True)


# --debug is accepted after the sub-command as well
debug_option = click.option(
    "--debug",
    is_flag=True,
    expose_value=False,
    callback=_enable_debug,
    help="Debug mode (tool debug output + flowbox logs)",
)


@click.group(cls=ToolGroup, invoke_without_command=True)
@click.option("--debug", is_flag=True, help="Debug mode (tool debug output + flowbox logs)")
@click.pass_context
@click.version_option(version=__version__, prog_name="flowbox")
def cli(ctx: click.Context, debug: bool) -> None:
    """flowbox - Run SQL workflow commands in isolated Docker containers."""
    if debug:
        set_debug(True)

    if ctx.invoked_subcommand is None:
        dispatch_help([], executor=get_executor(ctx))


@cli.command()
@click.argument("arg", required=False)
@debug_option
@click.pass_context
def version(ctx: click.Context, arg: str | None) -> None:
    """Show the version of the SQL workflow tool."""
    _execute(ctx, "version", args=_optional_arg(arg))


@cli.command()
@click.argument("arg", required=False)
@debug_option
@click.pass_context
def about(ctx: click.Context, arg: str | None) -> None:
    """Show information about the SQL workflow tool."""
    _execute(ctx, "about", args=_optional_arg(arg))


@cli.command()
@click.argument("project_dir", required=False)
@debug_option
@click.option("--airflow-home", help="Airflow home directory")
@click.option("--airflow-dags-folder", help="Airflow DAGs folder")
@click.option("--data-dir", help="Directory for local data files")
@click.pass_context
def init(
    ctx: click.Context,
    project_dir: str | None,
    airflow_home: str | None,
    airflow_dags_folder: str | None,
    data_dir: str | None,
) -> None:
    """Initialise a project (default: current directory)."""
    _execute(
        ctx,
        "init",
        args=_optional_arg(project_dir),
        airflow_home=airflow_home,
        airflow_dags_folder=airflow_dags_folder,
        data_dir=data_dir,
    )


@cli.command()
@click.argument("key", required=False)
@debug_option
@project_dir_option
@env_option
@click.pass_context
def config(ctx: click.Context, key: str | None, project_dir: str, env: str) -> None:
    """Print the value of a project configuration KEY."""
    _execute(ctx, "config", args=_optional_arg(key), project_dir=project_dir, env=env)


@cli.command()
@click.argument("project_dir", required=False)
@debug_option
@env_option
@click.option("--connection", help="Only validate this connection")
@verbose_option
@click.pass_context
def validate(
    ctx: click.Context,
    project_dir: str | None,
    env: str,
    connection: str | None,
    verbose: bool,
) -> None:
    """Validate the project's database connections."""
    _execute(
        ctx,
        "validate",
        args=_optional_arg(project_dir),
        env=env,
        connection=connection,
        verbose=verbose,
    )


@cli.command()
@click.argument("workflow_name", required=False)
@debug_option
@generate_tasks_option
@no_generate_tasks_option
@env_option
@project_dir_option
@verbose_option
@click.pass_context
def generate(
    ctx: click.Context,
    workflow_name: str | None,
    generate_tasks: bool,
    no_generate_tasks: bool,
    env: str,
    project_dir: str,
    verbose: bool,
) -> None:
    """Generate an Airflow DAG from WORKFLOW_NAME."""
    _check_task_generation(generate_tasks, no_generate_tasks)
    _execute(
        ctx,
        "generate",
        args=_optional_arg(workflow_name),
        generate_tasks=generate_tasks,
        no_generate_tasks=no_generate_tasks,
        env=env,
        project_dir=project_dir,
        verbose=verbose,
    )


@cli.command()
@click.argument("workflow_name", required=False)
@debug_option
@generate_tasks_option
@no_generate_tasks_option
@env_option
@project_dir_option
@verbose_option
@click.pass_context
def run(
    ctx: click.Context,
    workflow_name: str | None,
    generate_tasks: bool,
    no_generate_tasks: bool,
    env: str,
    project_dir: str,
    verbose: bool,
) -> None:
    """Run WORKFLOW_NAME locally as an Airflow DAG."""
    _check_task_generation(generate_tasks, no_generate_tasks)
    _execute(
        ctx,
        "run",
        args=_optional_arg(workflow_name),
        generate_tasks=generate_tasks,
        no_generate_tasks=no_generate_tasks,
        env=env,
        project_dir=project_dir,
        verbose=verbose,
    )


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
