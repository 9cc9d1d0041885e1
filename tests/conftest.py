"""Shared fakes for engine and orchestrator tests."""

from concurrent.futures import Future
from pathlib import Path

import pytest

from pygit_push import (
    CommandFailedError,
    CommandResult,
    Credentials,
    GenerateResult,
    SyncConfig,
    WorkingContext,
)


class Fail:
    """Scripted failure for FakeCommandRunner."""

    def __init__(self, output: str = "", status: int = 1):
        self.output = output
        self.status = status


class FakeCommandRunner:
    """Answers git commands from a script keyed by argument prefix.

    Each prefix maps to a list of outcomes consumed in order; the last one
    repeats. An outcome is stdout text (success) or a Fail. Unscripted
    commands succeed with empty output.
    """

    def __init__(self):
        self.script: dict[tuple[str, ...], list] = {}
        self.calls: list[tuple[str, ...]] = []

    def when(self, *prefix: str, outcomes: list) -> "FakeCommandRunner":
        self.script[prefix] = list(outcomes)
        return self

    def run(self, context: WorkingContext, program: str, *args: str) -> CommandResult:
        self.calls.append(args)
        outcome = ""
        for prefix in sorted(self.script, key=len, reverse=True):
            if args[:len(prefix)] == prefix:
                queue = self.script[prefix]
                outcome = queue.pop(0) if len(queue) > 1 else queue[0]
                break
        argv = [program, *args]
        if isinstance(outcome, Fail):
            raise CommandFailedError(argv, outcome.status, outcome.output)
        return CommandResult(tuple(argv), True, 0, outcome, 0.0, outcome)

    def called(self, *prefix: str) -> list[tuple[str, ...]]:
        return [call for call in self.calls if call[:len(prefix)] == prefix]


class StubGenerator:
    """MessageGenerator whose futures complete immediately, or never."""

    def __init__(self, message: str = "fix bug", error=None, complete: bool = True):
        self.message = message
        self.error = error
        self.complete = complete
        self.diffs: list[str] = []

    def generate(self, context: WorkingContext, diff: str) -> str:
        self.diffs.append(diff)
        if self.error is not None:
            raise self.error
        return self.message

    def generate_async(self, context: WorkingContext, diff: str) -> Future:
        self.diffs.append(diff)
        future: Future = Future()
        if self.complete:
            future.set_result(GenerateResult(message=self.message, error=self.error))
        return future


class SleepRecorder:
    def __init__(self):
        self.delays: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    """Working directory that already has a .git metadata directory."""
    (tmp_path / ".git").mkdir()
    return tmp_path


@pytest.fixture
def context(workdir: Path) -> WorkingContext:
    return WorkingContext.create(workdir, timeout=30)


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(github_token="ghp_secret", github_username="octocat", openai_api_key="sk-secret")


@pytest.fixture
def config() -> SyncConfig:
    return SyncConfig(repo_name="demo")


@pytest.fixture
def runner() -> FakeCommandRunner:
    return FakeCommandRunner()


@pytest.fixture
def sleep() -> SleepRecorder:
    return SleepRecorder()
