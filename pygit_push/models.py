"""Domain models: enums, dataclasses, and configuration."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from pathlib import Path
from typing import Any

from pygit_push.errors import PyGitPushError

DEFAULT_TIMEOUT = 120.0
BRANCH_PREFIX = "update"


class SyncState(Enum):
    """States of one synchronization run, in order"""
    UNINITIALIZED = auto()
    INITIALIZED = auto()
    USER_CONFIGURED = auto()
    REMOTE_CONFIGURED = auto()
    STAGED = auto()
    MESSAGE_RESOLVED = auto()
    COMMITTED = auto()
    PUSHED = auto()
    FAILED = auto()


class PushOutcome(Enum):
    """How a push attempt ended successfully"""
    PUSHED = auto()
    UP_TO_DATE = auto()
    FORCE_PUSHED = auto()


@dataclass(frozen=True)
class WorkingContext:
    """Per-invocation working directory, verbosity, and deadline"""
    working_dir: Path
    verbose: bool = False
    deadline: float = field(default_factory=lambda: time.monotonic() + DEFAULT_TIMEOUT)

    @classmethod
    def create(cls, working_dir: Path | str, timeout: float = DEFAULT_TIMEOUT,
               verbose: bool = False) -> WorkingContext:
        """Build a context whose deadline is `timeout` seconds from now."""
        return cls(Path(working_dir).resolve(), verbose, time.monotonic() + timeout)

    def remaining(self) -> float:
        """Seconds left before the deadline (never negative)."""
        return max(0.0, self.deadline - time.monotonic())

    @property
    def expired(self) -> bool:
        return time.monotonic() >= self.deadline


@dataclass(frozen=True)
class CommandResult:
    """Result of a single external command"""
    args: tuple[str, ...]
    success: bool
    status: int | None
    output: str
    duration: float = 0.0
    stdout: str = ""


@dataclass
class RepoInfo:
    """Cached repository metadata"""
    name: str
    path: str
    remote: str = ""
    branch: str = ""
    updated_at: float = 0.0


@dataclass(frozen=True)
class GenerateResult:
    """Outcome of one commit message generation request"""
    message: str = ""
    error: PyGitPushError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class Credentials:
    """Secrets read from the environment"""
    github_token: str
    github_username: str
    openai_api_key: str

    def __repr__(self) -> str:
        return f"Credentials(github_username={self.github_username!r}, github_token='***', openai_api_key='***')"


@dataclass(frozen=True)
class SyncConfig:
    """Configuration for one invocation"""
    repo_name: str = ""
    remote_name: str = 'origin'
    branch: str = 'main'
    base_branch: str = 'main'
    private: bool = False
    timeout: float = DEFAULT_TIMEOUT
    verbose: bool = False
    json_output: bool = False
    push_attempts: int = 3
    retry_delay: float = 2.0
    remote_host: str = 'github.com'
    remote_url: str | None = None
    model: str = 'gpt-4o-mini'
    max_tokens: int = 10
    temperature: float = 0.7

    def with_updates(self, **kwargs) -> SyncConfig:
        """Return a new SyncConfig with the given fields replaced."""
        current = {f.name: getattr(self, f.name) for f in self.__dataclass_fields__.values()}
        current.update(kwargs)
        return SyncConfig(**current)


@dataclass
class SyncResult:
    """Mutable result accumulator for one run"""
    state: SyncState = SyncState.UNINITIALIZED
    branch: str = ""
    commit_message: str = ""
    push_outcome: PushOutcome | None = None
    push_attempts: int = 0
    nothing_to_commit: bool = False
    pull_request_number: int | None = None
    pull_request_url: str = ""
    error: PyGitPushError | None = None
    started_at: datetime = field(default_factory=datetime.now)

    def record(self, state: SyncState) -> None:
        """Advance to the given state."""
        self.state = state

    def fail(self, error: PyGitPushError) -> None:
        """Record a terminal failure."""
        self.error = error
        self.state = SyncState.FAILED

    def succeeded(self) -> bool:
        """Return True if the run pushed or was a no-op."""
        return self.error is None and (self.state == SyncState.PUSHED or self.nothing_to_commit)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict for JSON output."""
        return {
            'state': self.state.name,
            'branch': self.branch,
            'commit_message': self.commit_message,
            'push_outcome': self.push_outcome.name if self.push_outcome else None,
            'push_attempts': self.push_attempts,
            'nothing_to_commit': self.nothing_to_commit,
            'pull_request': (
                {'number': self.pull_request_number, 'url': self.pull_request_url}
                if self.pull_request_number is not None else None
            ),
            'error': (
                {'kind': self.error.kind.name, 'message': str(self.error)}
                if self.error else None
            ),
            'started_at': self.started_at.isoformat(),
            'succeeded': self.succeeded(),
        }


def make_branch_name(now: float | None = None) -> str:
    """Return `update-<unix seconds>`; second granularity, so names may collide."""
    seconds = int(time.time() if now is None else now)
    return f"{BRANCH_PREFIX}-{seconds}"
