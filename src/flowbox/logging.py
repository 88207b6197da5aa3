"""Logging setup for flowbox.

User-facing messages go through rich consoles; this module covers the
diagnostic side. Everything logs under the ``flowbox`` namespace to stderr,
so it never mixes with the tool output streamed from the container.

Usage:
    from flowbox.logging import get_logger
    logger = get_logger(__name__)
    logger.debug("Composing mounts for %s", operation.name)

Debug output is enabled by ``flowbox --debug`` or ``FLOWBOX_DEBUG=1``.
"""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "flowbox"
DEBUG_ENV_VAR = "FLOWBOX_DEBUG"
_TRUTHY = frozenset({"1", "true", "yes"})

_configured = False


def _get_log_level() -> int:
    """Log level requested through the environment."""
    if os.environ.get(DEBUG_ENV_VAR, "").strip().lower() in _TRUTHY:
        return logging.DEBUG
    return logging.WARNING


def _make_handler(level: int) -> logging.Handler:
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=level == logging.DEBUG,
        rich_tracebacks=False,
        markup=False,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    return handler


def _configure() -> None:
    global _configured
    if _configured:
        return

    level = _get_log_level()
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    root.propagate = False
    if not root.handlers:
        root.addHandler(_make_handler(level))

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger inside the flowbox namespace.

    Args:
        name: Module name, usually ``__name__``.
    """
    _configure()
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def set_debug(enabled: bool = True) -> None:
    """Switch the flowbox loggers between DEBUG and WARNING."""
    _configure()
    level = logging.DEBUG if enabled else logging.WARNING
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    for handler in root.handlers:
        handler.setLevel(level)
