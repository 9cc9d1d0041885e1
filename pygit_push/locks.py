"""Lock sanitizer: removes stale git lock files before mutating commands."""

from __future__ import annotations

import logging
from pathlib import Path

from pygit_push.errors import LockCleanupFailedError
from pygit_push.output import NullOutputHandler
from pygit_push.protocols import OutputHandler

LOCK_FILES = ('index.lock', 'HEAD.lock')


class LockSanitizer:
    """Deletes `index.lock` and `HEAD.lock` left behind by interrupted git processes.

    A lock may in principle belong to a git process that is still running;
    pygit-push assumes one invocation at a time per working directory.
    """

    def __init__(self, output: OutputHandler | None = None):
        self.output = output or NullOutputHandler()
        self._logger = logging.getLogger(__name__)

    def sanitize(self, git_dir: Path) -> list[Path]:
        """Remove stale lock files under git_dir. Returns the removed paths.

        Raises:
            LockCleanupFailedError: a lock file exists but cannot be deleted
        """
        removed = []
        for name in LOCK_FILES:
            lock_file = Path(git_dir) / name
            if not lock_file.exists():
                continue
            self.output.warning(f"Found stale lock file: {lock_file}")
            self._logger.warning("removing stale lock file %s", lock_file)
            try:
                lock_file.unlink()
            except OSError as e:
                self.output.error(f"Failed to remove lock file: {lock_file}")
                raise LockCleanupFailedError(
                    f"failed to remove lock file {lock_file}: {e}",
                    step="lock cleanup",
                    path=str(lock_file),
                ) from e
            self.output.success(f"Removed stale lock file: {lock_file}")
            removed.append(lock_file)
        return removed
