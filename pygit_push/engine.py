"""SyncEngine: takes a working directory from dirty to committed and pushed."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path

from pygit_push.errors import (
    CommandFailedError,
    CommitFailedError,
    DiffUnavailableError,
    NotARepositoryError,
    NothingToCommitError,
    PushFailedError,
    PyGitPushError,
    RemoteProbeFailedError,
    StagingFailedError,
    SyncTimeoutError,
)
from pygit_push.executor import ProcessExecutor
from pygit_push.locks import LockSanitizer
from pygit_push.models import (
    CommandResult,
    Credentials,
    PushOutcome,
    SyncConfig,
    SyncResult,
    SyncState,
    WorkingContext,
    make_branch_name,
)
from pygit_push.output import NullOutputHandler
from pygit_push.protocols import CommandRunner, MessageGenerator, OutputHandler
from pygit_push.repository import RepositoryProbe
from pygit_push.strategies import (
    AlreadyUpToDateStrategy,
    ForcePushStrategy,
    PushRecoveryStrategy,
)

DEFAULT_MESSAGE = "update"


def build_remote_url(config: SyncConfig, credentials: Credentials) -> str:
    """Credential-bearing remote URL. Computed on demand, never stored or logged."""
    if config.remote_url:
        return config.remote_url
    user = credentials.github_username
    return f"https://{user}:{credentials.github_token}@{config.remote_host}/{user}/{config.repo_name}.git"


def public_remote_url(config: SyncConfig, credentials: Credentials) -> str:
    """Remote URL without credentials, safe to display and cache."""
    if config.remote_url:
        return config.remote_url
    user = credentials.github_username
    return f"https://{config.remote_host}/{user}/{config.repo_name}.git"


class SyncEngine:
    """Runs the git steps of one invocation, strictly in sequence"""

    def __init__(
        self,
        context: WorkingContext,
        config: SyncConfig,
        credentials: Credentials,
        *,
        runner: CommandRunner | None = None,
        generator: MessageGenerator | None = None,
        output: OutputHandler | None = None,
        sanitizer: LockSanitizer | None = None,
        sleep: Callable[[float], None] | None = None,
    ):
        """Create an engine bound to one WorkingContext."""
        self.context = context
        self.config = config
        self.credentials = credentials
        self.output = output or NullOutputHandler()
        self.runner = runner or ProcessExecutor(self.output)
        self.generator = generator
        self.sanitizer = sanitizer or LockSanitizer(self.output)
        self.probe = RepositoryProbe(self.runner, context, self.output)
        self._sleep = sleep or time.sleep
        self._logger = logging.getLogger(__name__)

        self.strategies: list[PushRecoveryStrategy] = [
            AlreadyUpToDateStrategy(self.git, self.output, config),
            ForcePushStrategy(self.git, self.output, config),
        ]

    @property
    def git_dir(self) -> Path:
        """Repository metadata directory of the working directory."""
        return self.context.working_dir / '.git'

    def git(self, *args: str, mutating: bool = False) -> CommandResult:
        """Run one git subcommand, clearing stale locks first when it mutates the repository."""
        if mutating:
            self.sanitizer.sanitize(self.git_dir)
        return self.runner.run(self.context, 'git', *args)

    # -- setup ---------------------------------------------------------------

    def ensure_git_setup(self, result: SyncResult | None = None) -> None:
        """Init the repository if needed, set the git user, and point the remote at the host.

        Safe to repeat: a second call only rewrites the remote URL.
        """
        result = result if result is not None else SyncResult()

        if not self.git_dir.exists():
            self.output.step("Initializing git repository...")
            try:
                self.git('init')
            except CommandFailedError as e:
                self.output.error("Failed to initialize git repository")
                raise PyGitPushError("failed to initialize git repository", step="init", output=e.output) from e
            self.output.success("Git repository initialized")
        else:
            self.output.info("Git repository already initialized")
        result.record(SyncState.INITIALIZED)

        self.output.step("Configuring git user...")
        try:
            self.git('config', '--global', 'user.name', self.credentials.github_username)
        except CommandFailedError as e:
            self.output.error("Failed to set git username")
            raise PyGitPushError("failed to set git user.name", step="configure user", output=e.output) from e
        self.output.success("Git user configured")
        result.record(SyncState.USER_CONFIGURED)

        self.output.step("Checking remote configuration...")
        remote = self.config.remote_name
        try:
            self.git('remote', 'get-url', remote)
            has_remote = True
        except CommandFailedError:
            has_remote = False

        action, verb = ('set-url', "Updating") if has_remote else ('add', "Adding")
        self.output.step(f"{verb} remote {remote}...")
        try:
            self.git('remote', action, remote, build_remote_url(self.config, self.credentials), mutating=True)
        except CommandFailedError as e:
            self.output.error(f"Failed to configure remote {remote}")
            raise PyGitPushError(f"failed to configure remote {remote}", step="configure remote", output=e.output) from e
        self.output.success(f"Remote {remote} {'updated' if has_remote else 'added'}")
        result.record(SyncState.REMOTE_CONFIGURED)

    # -- staging and messages ------------------------------------------------

    def stage_all(self) -> str:
        """Stage every change and return `status --porcelain` output.

        Raises:
            NothingToCommitError: the working tree is clean
            StagingFailedError: both staging methods failed, or status failed
        """
        self.output.step("Staging all changes...")
        try:
            self.git('add', '-A', mutating=True)
        except CommandFailedError:
            self.output.warning("Failed to stage with -A flag, trying alternative method...")
            try:
                self.git('add', str(self.context.working_dir), mutating=True)
            except CommandFailedError as e:
                self.output.error("Failed to stage changes")
                raise StagingFailedError("failed to stage files", step="stage", output=e.output) from e

        try:
            status = self.git('status', '--porcelain')
        except CommandFailedError as e:
            self.output.error("Failed to check git status")
            raise StagingFailedError("failed to check git status", step="status", output=e.output) from e

        if not status.stdout.strip():
            self.output.warning("No changes to stage")
            raise NothingToCommitError(step="stage")

        self.output.success("Changes staged")
        self.output.debug(f"Staged files:\n{status.stdout}")
        return status.stdout

    def get_diff(self) -> str:
        """Return the staged diff, or the unstaged diff if that cannot be read."""
        self.output.step("Getting changes...")
        try:
            diff = self.git('diff', '--cached').stdout
        except CommandFailedError:
            self.output.debug("No staged changes, checking unstaged changes...")
            try:
                diff = self.git('diff').stdout
            except CommandFailedError as e:
                self.output.error("Failed to get changes")
                raise DiffUnavailableError("failed to get diff", step="diff", output=e.output) from e

        if diff.strip():
            self.output.success("Changes detected")
        else:
            self.output.warning("No changes detected")
        return diff

    def resolve_message(self, explicit: str | None = None, fallback: str = DEFAULT_MESSAGE) -> str:
        """Use the explicit message, or generate one from the staged diff.

        Generation runs on its own thread; this waits for it or for the
        deadline, whichever comes first. A blank result becomes `fallback`.

        Raises:
            SyncTimeoutError: the deadline elapsed first
            GenerationFailedError: the generator reported an error
        """
        if explicit:
            return explicit
        if self.generator is None:
            self.output.warning(f"No commit message generator configured, using '{fallback}'")
            return fallback

        diff = self.get_diff()
        self.output.step("Generating commit message...")
        pending = self.generator.generate_async(self.context, diff)
        try:
            generated = pending.result(timeout=self.context.remaining())
        except FutureTimeoutError as e:
            self.output.error("Operation timed out")
            raise SyncTimeoutError("timed out waiting for a commit message", step="generate") from e

        if not generated.ok:
            self.output.error("Failed to generate commit message")
            raise generated.error

        message = generated.message.strip() or fallback
        self.output.success(f"Commit message generated: {message}")
        return message

    def commit(self, message: str) -> None:
        """Commit the staged changes."""
        self.output.step("Committing changes...")
        try:
            self.git('commit', '-m', message, mutating=True)
        except CommandFailedError as e:
            self.output.error("Failed to commit changes")
            raise CommitFailedError("failed to commit", step="commit", output=e.output) from e
        self.output.success("Changes committed")

    # -- branches and pushing ------------------------------------------------

    def create_branch(self, base_branch: str) -> str:
        """Create and switch to `update-<timestamp>` based on the fetched remote base."""
        try:
            self.probe.require_repository()
        except NotARepositoryError:
            self.output.error("Not in a git repository")
            raise

        remote = self.config.remote_name
        branch = make_branch_name()

        self.output.step("Fetching latest changes...")
        try:
            self.git('fetch', remote, base_branch, mutating=True)
        except CommandFailedError as e:
            self.output.error("Failed to fetch changes")
            raise PyGitPushError("failed to fetch changes", step="fetch", output=e.output) from e

        self.output.step(f"Creating new branch: {branch}")
        try:
            self.git('checkout', '-b', branch, f'{remote}/{base_branch}', mutating=True)
        except CommandFailedError as e:
            self.output.error("Failed to create branch")
            raise PyGitPushError("failed to create branch", step="create branch", output=e.output) from e
        self.output.success("Created and switched to new branch")
        return branch

    def push(self, remote: str, branch: str) -> PushOutcome:
        """Push once; on rejection ask the probe and let a recovery strategy decide.

        Raises:
            RemoteProbeFailedError: divergence could not be determined
            PushFailedError: the forced push also failed
        """
        self.output.step(f"Pushing to {remote}/{branch}...")
        try:
            self.git('push', '-u', remote, branch, mutating=True)
        except CommandFailedError as failure:
            self._logger.debug("push rejected: %s", failure)
            self.sanitizer.sanitize(self.git_dir)
            diverged = self.probe.has_unpushed_commits(remote, branch)
            for strategy in self.strategies:
                if strategy.can_handle(diverged):
                    outcome = strategy.recover(remote, branch, failure)
                    break
            else:
                raise PushFailedError("failed to push", step="push", output=failure.output) from failure
        else:
            outcome = PushOutcome.PUSHED

        if outcome is not PushOutcome.UP_TO_DATE:
            self.output.success("Changes pushed successfully")
        return outcome

    def push_with_retry(self, remote: str, branch: str, result: SyncResult | None = None) -> PushOutcome:
        """Push with up to `push_attempts` attempts and a fixed delay between them.

        The deadline is checked before every retry.
        """
        attempts = max(1, self.config.push_attempts)
        last_error: PyGitPushError | None = None
        for attempt in range(1, attempts + 1):
            if attempt > 1:
                if self.context.expired:
                    self.output.error("Operation timed out")
                    raise SyncTimeoutError(
                        f"operation timed out after {self.config.timeout:g}s", step="push"
                    ) from last_error
                self.output.warning(f"Retrying push (attempt {attempt}/{attempts})...")
                self._sleep(min(self.config.retry_delay, self.context.remaining()))

            if result is not None:
                result.push_attempts = attempt
            try:
                return self.push(remote, branch)
            except (PushFailedError, RemoteProbeFailedError) as e:
                self._logger.warning("push attempt %d/%d failed: %s", attempt, attempts, e.message)
                last_error = e

        raise PushFailedError(
            f"failed to push after {attempts} attempts",
            step="push",
            output=last_error.output if last_error else "",
        ) from last_error

    # -- flows ---------------------------------------------------------------

    def sync(self, message: str | None = None, result: SyncResult | None = None) -> SyncResult:
        """Push flow: setup, stage, resolve message, commit, push to remote/branch.

        A clean working tree ends the flow early with `nothing_to_commit` set.
        """
        result = result if result is not None else SyncResult()
        result.branch = self.config.branch
        try:
            self.ensure_git_setup(result)
            try:
                self.stage_all()
            except NothingToCommitError:
                self.output.warning("No changes to commit")
                result.nothing_to_commit = True
                return result
            result.record(SyncState.STAGED)

            result.commit_message = self.resolve_message(message, fallback=DEFAULT_MESSAGE)
            result.record(SyncState.MESSAGE_RESOLVED)

            self.commit(result.commit_message)
            result.record(SyncState.COMMITTED)

            result.push_outcome = self.push_with_retry(self.config.remote_name, self.config.branch, result)
            result.record(SyncState.PUSHED)
        except PyGitPushError as e:
            result.fail(e)
            raise
        return result

    def sync_branch(self, message: str | None = None, result: SyncResult | None = None) -> SyncResult:
        """Pull-request flow: new branch from the remote base, stage, commit, push the branch.

        Raises NothingToCommitError when there is nothing to put in a pull request.
        """
        result = result if result is not None else SyncResult()
        try:
            result.branch = self.create_branch(self.config.base_branch)
            self.stage_all()
            result.record(SyncState.STAGED)

            result.commit_message = self.resolve_message(message, fallback=DEFAULT_MESSAGE)
            result.record(SyncState.MESSAGE_RESOLVED)

            self.commit(result.commit_message)
            result.record(SyncState.COMMITTED)

            result.push_outcome = self.push_with_retry(self.config.remote_name, result.branch, result)
            result.record(SyncState.PUSHED)
        except PyGitPushError as e:
            result.fail(e)
            raise
        return result
