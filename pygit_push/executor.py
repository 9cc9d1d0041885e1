"""Process executor: runs external commands bound to a WorkingContext."""

from __future__ import annotations

import logging
import time

from git.cmd import Git
from git.exc import GitCommandNotFound
from git.util import remove_password_if_present

from pygit_push.errors import CommandFailedError, SyncTimeoutError
from pygit_push.models import CommandResult, WorkingContext
from pygit_push.output import NullOutputHandler
from pygit_push.protocols import OutputHandler


class ProcessExecutor:
    """Runs commands through GitPython's process layer.

    The child runs in the context's working directory and is killed once the
    context deadline passes. No retries are performed here.
    """

    def __init__(self, output: OutputHandler | None = None):
        self.output = output or NullOutputHandler()
        self._logger = logging.getLogger(__name__)

    def run(self, context: WorkingContext, program: str, *args: str) -> CommandResult:
        """Run `program args...` and return its result.

        Raises:
            SyncTimeoutError: the deadline elapsed before or during the run
            CommandFailedError: non-zero exit, or the program is missing
        """
        argv = [program, *args]
        shown = remove_password_if_present(argv)
        if context.expired:
            raise SyncTimeoutError(f"deadline elapsed before '{' '.join(shown)}'")

        self.output.command(shown)
        self._logger.debug("running %s in %s", shown, context.working_dir)

        started = time.monotonic()
        try:
            status, stdout, stderr = Git(context.working_dir).execute(
                argv,
                with_extended_output=True,
                with_exceptions=False,
                kill_after_timeout=context.remaining(),
                stdout_as_string=True,
            )
        except GitCommandNotFound as e:
            raise CommandFailedError(shown, None, str(e)) from e
        duration = time.monotonic() - started

        output = "\n".join(part for part in (stdout, stderr) if part)
        if output:
            self.output.debug(f"Command output: {output}")

        if status != 0:
            if context.expired:
                raise SyncTimeoutError(f"'{' '.join(shown)}' did not finish before the deadline", output=output)
            raise CommandFailedError(shown, status, output)

        return CommandResult(tuple(shown), True, status, output, duration, stdout)
