"""Push recovery strategies: one class per remote state after a rejected push."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pygit_push.errors import CommandFailedError, PushFailedError
from pygit_push.models import PushOutcome, SyncConfig
from pygit_push.protocols import GitInvoker, OutputHandler


class PushRecoveryStrategy(ABC):
    """Abstract strategy for handling a failed push."""

    def __init__(self, git: GitInvoker, output: OutputHandler, config: SyncConfig):
        """Initialize with a git invoker, output handler, and configuration."""
        self.git = git
        self.output = output
        self.config = config

    @abstractmethod
    def can_handle(self, diverged: bool) -> bool:
        """Return True if this strategy applies given whether local commits are unpushed."""
        pass

    @abstractmethod
    def recover(self, remote: str, branch: str, failure: CommandFailedError) -> PushOutcome:
        """Resolve the failed push or raise PushFailedError."""
        pass


class AlreadyUpToDateStrategy(PushRecoveryStrategy):
    """The remote already has every local commit; the failure is benign."""

    def can_handle(self, diverged: bool) -> bool:
        return not diverged

    def recover(self, remote: str, branch: str, failure: CommandFailedError) -> PushOutcome:
        self.output.success("Already up to date")
        return PushOutcome.UP_TO_DATE


class ForcePushStrategy(PushRecoveryStrategy):
    """Local commits are missing on the remote: overwrite it with exactly one forced push."""

    def can_handle(self, diverged: bool) -> bool:
        return diverged

    def recover(self, remote: str, branch: str, failure: CommandFailedError) -> PushOutcome:
        self.output.step("Retrying push with force...")
        try:
            self.git('push', '-u', '-f', remote, branch, mutating=True)
        except CommandFailedError as e:
            self.output.error("Failed to push changes")
            raise PushFailedError("failed to push", step="force push", output=e.output) from e
        return PushOutcome.FORCE_PUSHED
