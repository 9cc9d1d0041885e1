"""Repository state probe: read-only questions about the working directory."""

from __future__ import annotations

import logging
from pathlib import Path

from pygit_push.errors import (
    CommandFailedError,
    NotARepositoryError,
    PyGitPushError,
    RemoteProbeFailedError,
)
from pygit_push.models import WorkingContext
from pygit_push.output import NullOutputHandler
from pygit_push.protocols import CommandRunner, OutputHandler

# git's wording when a ref is absent, for `fetch` and `rev-list` respectively
_MISSING_REF_MARKERS = (
    "couldn't find remote ref",
    "unknown revision",
    "bad revision",
    "ambiguous argument",
)


def _is_missing_ref(error: CommandFailedError) -> bool:
    text = error.output.lower()
    return any(marker in text for marker in _MISSING_REF_MARKERS)


class RepositoryProbe:
    """Answers questions about the repository at the context's working directory"""

    def __init__(self, runner: CommandRunner, context: WorkingContext, output: OutputHandler | None = None):
        self.runner = runner
        self.context = context
        self.output = output or NullOutputHandler()
        self._logger = logging.getLogger(__name__)

    @property
    def path(self) -> Path:
        """Working directory being probed."""
        return self.context.working_dir

    def is_repository(self) -> bool:
        """Return True if the working directory is inside a git work tree."""
        try:
            self.runner.run(self.context, 'git', 'rev-parse', '--git-dir')
        except CommandFailedError:
            return False
        return True

    def require_repository(self) -> None:
        """Raise NotARepositoryError unless the working directory is a repository."""
        if not self.is_repository():
            raise NotARepositoryError(self.path)

    def git_dir(self) -> Path:
        """Absolute path of the repository metadata directory."""
        try:
            result = self.runner.run(self.context, 'git', 'rev-parse', '--git-dir')
        except CommandFailedError as e:
            raise NotARepositoryError(self.path, output=e.output) from e
        return (self.path / result.stdout.strip()).resolve()

    def current_branch(self) -> str:
        """Name of the checked-out branch ('HEAD' when detached)."""
        try:
            result = self.runner.run(self.context, 'git', 'rev-parse', '--abbrev-ref', 'HEAD')
        except CommandFailedError as e:
            self.output.error("Failed to get current branch")
            raise PyGitPushError("failed to get current branch", step="current branch", output=e.output) from e
        return result.stdout.strip()

    def has_unpushed_commits(self, remote: str, branch: str) -> bool:
        """Fetch remote/branch and report whether HEAD has commits it lacks.

        A remote branch that does not exist yet means everything is unpushed.

        Raises:
            RemoteProbeFailedError: fetch or rev-list failed for another reason
        """
        self.output.step("Checking for unpushed changes...")
        try:
            self.runner.run(self.context, 'git', 'fetch', remote, branch)
        except CommandFailedError as e:
            if _is_missing_ref(e):
                self.output.debug("Remote branch doesn't exist yet")
                return True
            self.output.error("Failed to fetch remote changes")
            raise RemoteProbeFailedError("failed to fetch", step="fetch", output=e.output) from e

        try:
            result = self.runner.run(self.context, 'git', 'rev-list', 'HEAD', f'^{remote}/{branch}', '--count')
        except CommandFailedError as e:
            if _is_missing_ref(e):
                self.output.debug("Remote branch doesn't exist yet")
                return True
            self.output.error("Failed to check for unpushed commits")
            raise RemoteProbeFailedError(
                "failed to check unpushed commits", step="rev-list", output=e.output
            ) from e

        count = result.stdout.strip()
        try:
            ahead = int(count)
        except ValueError as e:
            raise RemoteProbeFailedError(
                f"unexpected rev-list output: {count!r}", step="rev-list", output=result.output
            ) from e

        if ahead == 0:
            self.output.info("Repository is up to date with remote")
        else:
            self.output.debug(f"Found {ahead} unpushed commit(s)")
        self._logger.debug("%s/%s: %d unpushed commit(s)", remote, branch, ahead)
        return ahead > 0
