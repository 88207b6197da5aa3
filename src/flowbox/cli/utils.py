"""CLI utilities for flowbox.

Console setup, error display, executor lookup and the help option that
hands help rendering to the containerized tool.
"""

from __future__ import annotations

from typing import IO, Any

import click
from rich.console import Console
from rich.markup import escape

from ..dispatch import dispatch_help
from ..errors import FlowboxError
from ..executor import DockerExecutor, Executor

err_console = Console(stderr=True, highlight=False)

# Set by a sub-command level --debug; ctx.meta is shared by the whole context chain
DEBUG_META_KEY = "flowbox.debug"


class FlowboxCLIError(click.ClickException):
    """ClickException that renders flowbox errors with rich."""

    def __init__(self, error: FlowboxError) -> None:
        super().__init__(str(error))
        self.error = error

    def show(self, file: IO[Any] | None = None) -> None:
        err_console.print(f"[red]Error: {escape(self.format_message())}[/red]", soft_wrap=True)


def get_executor(ctx: click.Context) -> Executor:
    """Executor for this invocation.

    Uses the object passed to the root context (tests inject a fake this
    way), otherwise creates a DockerExecutor on first use.
    """
    root = ctx.find_root()
    if root.obj is None:
        root.obj = DockerExecutor()
    executor: Executor = root.obj
    return executor


def is_debug(ctx: click.Context) -> bool:
    """Whether --debug was given before or after the sub-command."""
    return bool(ctx.find_root().params.get("debug", False) or ctx.meta.get(DEBUG_META_KEY, False))


def help_command(ctx: click.Context) -> list[str]:
    """Tool command that prints help for the command of ``ctx``."""
    names: list[str] = []
    while ctx.parent is not None:
        names.append(ctx.info_name or "")
        ctx = ctx.parent
    return [*reversed(names), "--help"]


def _show_tool_help(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    dispatch_help(help_command(ctx), executor=get_executor(ctx))
    ctx.exit()


class ToolHelpMixin:
    """Replace click's --help with the tool's own help, run in a container."""

    def get_help_option(self, ctx: click.Context) -> click.Option | None:
        names = self.get_help_option_names(ctx)  # type: ignore[attr-defined]
        if not names or not self.add_help_option:  # type: ignore[attr-defined]
            return None
        return click.Option(
            names,
            is_flag=True,
            is_eager=True,
            expose_value=False,
            callback=_show_tool_help,
            help="Show the tool's help message and exit.",
        )


class ToolCommand(ToolHelpMixin, click.Command):
    """Sub-command whose help comes from the containerized tool."""


class ToolGroup(ToolHelpMixin, click.Group):
    """Command group whose help comes from the containerized tool."""

    command_class = ToolCommand
