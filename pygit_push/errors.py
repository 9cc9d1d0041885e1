"""Error taxonomy for pygit-push.

Every failure is assigned an ErrorKind where it is first detected, so callers
branch on types rather than on the text of captured git output.

    PyGitPushError
    ├── CommandFailedError
    ├── NotARepositoryError
    ├── LockCleanupFailedError
    ├── StagingFailedError
    ├── NothingToCommitError      (recoverable)
    ├── DiffUnavailableError
    ├── GenerationFailedError
    │   └── NoMessageGeneratedError
    ├── CommitFailedError
    ├── PushFailedError
    ├── RemoteProbeFailedError
    ├── SyncTimeoutError
    ├── ConfigurationMissingError
    └── RemoteAPIError
"""

from __future__ import annotations

from enum import Enum, auto


class ErrorKind(Enum):
    """Type-safe error categories"""
    COMMAND_FAILED = auto()
    NOT_A_REPOSITORY = auto()
    LOCK_CLEANUP_FAILED = auto()
    STAGING_FAILED = auto()
    NOTHING_TO_COMMIT = auto()
    DIFF_UNAVAILABLE = auto()
    GENERATION_FAILED = auto()
    COMMIT_FAILED = auto()
    PUSH_FAILED = auto()
    REMOTE_PROBE_FAILED = auto()
    TIMEOUT = auto()
    CONFIGURATION_MISSING = auto()
    REMOTE_API_ERROR = auto()


class PyGitPushError(Exception):
    """Base exception for all pygit-push errors.

    Attributes:
        message: Human-readable error message
        step: Name of the step that failed, if known
        output: Captured output of the failing external command, if any
        context: Additional keyword context
    """

    kind = ErrorKind.COMMAND_FAILED
    recoverable = False

    def __init__(self, message: str, *, step: str | None = None, output: str = "", **context: object):
        super().__init__(message)
        self.message = message
        self.step = step
        self.output = output
        self.context = context

    def __str__(self) -> str:
        text = self.message
        if self.step:
            text = f"{self.step}: {text}"
        if self.output:
            text = f"{text}\n{self.output.rstrip()}"
        return text


class CommandFailedError(PyGitPushError):
    """An external command exited non-zero (or could not be started)."""

    kind = ErrorKind.COMMAND_FAILED

    def __init__(self, args: list[str], status: int | None, output: str = ""):
        command = " ".join(args)
        if status is None:
            message = f"'{command}' could not be executed"
        else:
            message = f"'{command}' exited with status {status}"
        super().__init__(message, output=output, status=status)
        self.args_list = list(args)
        self.status = status


class NotARepositoryError(PyGitPushError):
    kind = ErrorKind.NOT_A_REPOSITORY

    def __init__(self, path: object, **context: object):
        super().__init__(
            f"not a git repository: {path} - please run this command from within a git repository",
            path=str(path),
            **context,
        )


class LockCleanupFailedError(PyGitPushError):
    kind = ErrorKind.LOCK_CLEANUP_FAILED


class StagingFailedError(PyGitPushError):
    kind = ErrorKind.STAGING_FAILED


class NothingToCommitError(PyGitPushError):
    """The working tree has no changes. Callers may treat this as a no-op."""

    kind = ErrorKind.NOTHING_TO_COMMIT
    recoverable = True

    def __init__(self, message: str = "no changes to commit", **context: object):
        super().__init__(message, **context)


class DiffUnavailableError(PyGitPushError):
    kind = ErrorKind.DIFF_UNAVAILABLE


class GenerationFailedError(PyGitPushError):
    kind = ErrorKind.GENERATION_FAILED


class NoMessageGeneratedError(GenerationFailedError):
    """The completion API answered without a usable message."""

    def __init__(self, message: str = "no commit message generated", **context: object):
        super().__init__(message, **context)


class CommitFailedError(PyGitPushError):
    kind = ErrorKind.COMMIT_FAILED


class PushFailedError(PyGitPushError):
    kind = ErrorKind.PUSH_FAILED


class RemoteProbeFailedError(PyGitPushError):
    kind = ErrorKind.REMOTE_PROBE_FAILED


class SyncTimeoutError(PyGitPushError):
    """The invocation deadline elapsed."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, message: str = "operation timed out", **context: object):
        super().__init__(message, **context)


class ConfigurationMissingError(PyGitPushError):
    kind = ErrorKind.CONFIGURATION_MISSING

    def __init__(self, variable: str):
        super().__init__(f"{variable} environment variable is required", variable=variable)
        self.variable = variable


class RemoteAPIError(PyGitPushError):
    """A repository host API call failed."""

    kind = ErrorKind.REMOTE_API_ERROR

    def __init__(self, message: str, status_code: int | None = None, **context: object):
        super().__init__(message, status_code=status_code, **context)
        self.status_code = status_code
