"""Protocols for dependency injection."""

from __future__ import annotations

from concurrent.futures import Future
from typing import Any, Protocol

from pygit_push.models import CommandResult, GenerateResult, WorkingContext


class CommandRunner(Protocol):
    """Protocol for running external commands"""

    def run(self, context: WorkingContext, program: str, *args: str) -> CommandResult: ...


class OutputHandler(Protocol):
    """Protocol for handling output"""

    def info(self, message: str, indent: int = 0) -> None: ...
    def step(self, message: str, indent: int = 0) -> None: ...
    def success(self, message: str, indent: int = 0) -> None: ...
    def warning(self, message: str, indent: int = 0) -> None: ...
    def error(self, message: str, indent: int = 0) -> None: ...
    def section(self, title: str) -> None: ...
    def debug(self, message: str) -> None: ...
    def command(self, args: list[str]) -> None: ...


class MessageGenerator(Protocol):
    """Protocol for commit message generation"""

    def generate(self, context: WorkingContext, diff: str) -> str: ...
    def generate_async(self, context: WorkingContext, diff: str) -> Future[GenerateResult]: ...


class RepositoryHost(Protocol):
    """Protocol for the remote repository host API"""

    def ensure_repository_exists(self, context: WorkingContext, name: str, private: bool) -> None: ...
    def create_pull_request(self, context: WorkingContext, name: str, title: str, body: str,
                            head: str, base: str) -> dict[str, Any]: ...
    def get_pull_request(self, context: WorkingContext, name: str, number: int) -> dict[str, Any]: ...
    def list_pull_requests(self, context: WorkingContext, name: str) -> list[dict[str, Any]]: ...
    def merge_pull_request(self, context: WorkingContext, name: str, number: int) -> dict[str, Any]: ...


class GitInvoker(Protocol):
    """Callable that runs one git subcommand for the current invocation"""

    def __call__(self, *args: str, mutating: bool = False) -> CommandResult: ...
