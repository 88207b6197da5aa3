"""Pytest configuration and fixtures for flowbox tests.

This module ensures the flowbox package is importable during tests
without requiring installation, and provides a recording executor that
stands in for Docker.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

import pytest

# Add src directory to path for development testing
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from flowbox.executor import ExecutionResult  # noqa: E402


@dataclass
class Call:
    """One recorded execute() call."""

    command: list[str]
    args: list[str]
    flags: dict[str, str]
    mount_dirs: list[str]
    capture_output: bool


class FakeExecutor:
    """Executor that records calls and replays canned responses.

    Responses are consumed in order; an exception instance is raised
    instead of returned. Once they run out, ``default`` is returned.
    """

    def __init__(
        self,
        *responses: ExecutionResult | BaseException,
        default: ExecutionResult | None = None,
    ) -> None:
        self.calls: list[Call] = []
        self._responses = list(responses)
        self._default = default if default is not None else ExecutionResult(exit_code=0)

    def execute(
        self,
        command: Sequence[str],
        args: Sequence[str],
        flags: Mapping[str, str],
        mount_dirs: Sequence[str],
        *,
        capture_output: bool = False,
    ) -> ExecutionResult:
        self.calls.append(
            Call(list(command), list(args), dict(flags), list(mount_dirs), capture_output)
        )
        response = self._responses.pop(0) if self._responses else self._default
        if isinstance(response, BaseException):
            raise response
        return response


def ok(output: bytes | None = None) -> ExecutionResult:
    """Successful run, optionally with captured output."""
    return ExecutionResult(exit_code=0, output=output)


@pytest.fixture
def make_executor() -> type[FakeExecutor]:
    """The FakeExecutor class, for tests that need canned responses."""
    return FakeExecutor


@pytest.fixture
def fake_executor() -> FakeExecutor:
    """FakeExecutor whose runs all succeed."""
    return FakeExecutor()


@pytest.fixture
def global_dirs_executor() -> FakeExecutor:
    """FakeExecutor answering the three global config queries with /a, /b, /c."""
    return FakeExecutor(ok(b"/a\n"), ok(b"  /b"), ok(b"/c\n"))


@pytest.fixture
def in_tmp_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test with tmp_path as working directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path
