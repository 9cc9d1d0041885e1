"""Tests for push recovery strategy classes."""

import pytest

from pygit_push import (
    AlreadyUpToDateStrategy,
    CommandFailedError,
    CommandResult,
    ForcePushStrategy,
    NullOutputHandler,
    PushFailedError,
    PushOutcome,
    SyncConfig,
)

FAILURE = CommandFailedError(["git", "push", "-u", "origin", "main"], 1, "rejected")


class FakeGit:
    """Records git invocations; optionally fails every call."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[tuple[tuple[str, ...], bool]] = []

    def __call__(self, *args: str, mutating: bool = False) -> CommandResult:
        self.calls.append((args, mutating))
        if self.fail:
            raise CommandFailedError(["git", *args], 1, "remote rejected")
        return CommandResult(("git", *args), True, 0, "")


def _make(cls, git=None):
    git = git or FakeGit()
    return cls(git, NullOutputHandler(), SyncConfig()), git


class TestAlreadyUpToDateStrategy:
    def test_handles_only_when_not_diverged(self):
        strategy, _ = _make(AlreadyUpToDateStrategy)
        assert strategy.can_handle(False) is True
        assert strategy.can_handle(True) is False

    def test_recover_runs_nothing(self):
        strategy, git = _make(AlreadyUpToDateStrategy)
        assert strategy.recover("origin", "main", FAILURE) is PushOutcome.UP_TO_DATE
        assert git.calls == []


class TestForcePushStrategy:
    def test_handles_only_when_diverged(self):
        strategy, _ = _make(ForcePushStrategy)
        assert strategy.can_handle(True) is True
        assert strategy.can_handle(False) is False

    def test_recover_forces_once(self):
        strategy, git = _make(ForcePushStrategy)
        assert strategy.recover("origin", "dev", FAILURE) is PushOutcome.FORCE_PUSHED
        assert git.calls == [(("push", "-u", "-f", "origin", "dev"), True)]

    def test_forced_push_failure(self):
        strategy, git = _make(ForcePushStrategy, FakeGit(fail=True))
        with pytest.raises(PushFailedError) as excinfo:
            strategy.recover("origin", "main", FAILURE)
        assert excinfo.value.step == "force push"
        assert "remote rejected" in excinfo.value.output
        assert len(git.calls) == 1


def test_strategies_are_exclusive():
    up_to_date, _ = _make(AlreadyUpToDateStrategy)
    force, _ = _make(ForcePushStrategy)
    for diverged in (True, False):
        assert up_to_date.can_handle(diverged) != force.can_handle(diverged)
