"""SyncOrchestrator: coordinates the host API, the sync engine, and the repo cache."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pygit_push.cache import RepoCache
from pygit_push.engine import SyncEngine, public_remote_url
from pygit_push.errors import NothingToCommitError, PyGitPushError
from pygit_push.models import Credentials, RepoInfo, SyncConfig, SyncResult, SyncState, WorkingContext
from pygit_push.protocols import CommandRunner, MessageGenerator, OutputHandler, RepositoryHost

DEFAULT_PR_BODY = "Created with pygit-push"

PullRequestSelector = Callable[[list[dict[str, Any]]], int]


class SyncOrchestrator:
    """Main orchestrator - runs the push, pull request, and merge workflows"""

    def __init__(
        self,
        config: SyncConfig,
        credentials: Credentials,
        output: OutputHandler,
        host: RepositoryHost,
        *,
        generator: MessageGenerator | None = None,
        runner: CommandRunner | None = None,
        cache: RepoCache | None = None,
        sleep: Callable[[float], None] | None = None,
    ):
        """Create an orchestrator; `cache` may be shared by several orchestrators."""
        self.config = config
        self.credentials = credentials
        self.output = output
        self.host = host
        self.generator = generator
        self.runner = runner
        self.cache = cache if cache is not None else RepoCache()
        self._sleep = sleep

    def _engine(self, context: WorkingContext) -> SyncEngine:
        return SyncEngine(
            context, self.config, self.credentials,
            runner=self.runner, generator=self.generator, output=self.output, sleep=self._sleep,
        )

    def _remember(self, context: WorkingContext, branch: str) -> None:
        self.cache.set(str(context.working_dir), RepoInfo(
            name=self.config.repo_name,
            path=str(context.working_dir),
            remote=public_remote_url(self.config, self.credentials),
            branch=branch,
        ))

    def push(self, context: WorkingContext, message: str | None = None) -> SyncResult:
        """Make sure the remote repository exists, then commit and push all changes."""
        result = SyncResult()
        cached = self.cache.get(str(context.working_dir))
        if cached is not None and cached.name == self.config.repo_name:
            self.output.debug(f"Repository {cached.name} verified recently, skipping host check")
        else:
            try:
                self.host.ensure_repository_exists(context, self.config.repo_name, self.config.private)
            except PyGitPushError as e:
                result.fail(e)
                raise

        engine = self._engine(context)
        engine.sync(message, result)
        if result.succeeded():
            self._remember(context, result.branch)
        if result.state is SyncState.PUSHED:
            self.output.success("🚀 Successfully pushed changes to GitHub!")
        return result

    def create_pull_request(
        self,
        context: WorkingContext,
        title: str = "",
        body: str = "",
        message: str | None = None,
    ) -> SyncResult:
        """Branch from the remote base, commit and push all changes, and open a pull request.

        Without a title the commit message becomes the title.
        """
        result = SyncResult()
        engine = self._engine(context)
        try:
            engine.sync_branch(message, result)
        except NothingToCommitError as e:
            self.output.warning("No changes to commit")
            error = PyGitPushError("no changes to create PR from", step="stage")
            result.fail(error)
            raise error from e

        self.output.step("Creating pull request...")
        try:
            pr = self.host.create_pull_request(
                context,
                self.config.repo_name,
                title or result.commit_message,
                body or DEFAULT_PR_BODY,
                result.branch,
                self.config.base_branch,
            )
        except PyGitPushError as e:
            self.output.error("Failed to create pull request")
            result.fail(e)
            raise

        result.pull_request_number = pr.get("number")
        result.pull_request_url = pr.get("html_url", "")
        self._remember(context, result.branch)
        self.output.success(f"🚀 Pull request #{result.pull_request_number} created successfully!")
        self.output.info(f"View it here: {result.pull_request_url}")
        return result

    def merge_pull_request(
        self,
        context: WorkingContext,
        number: int = 0,
        select: PullRequestSelector | None = None,
    ) -> int:
        """Merge pull request `number`, or pick one of the open pull requests.

        A single open pull request is chosen automatically; with several,
        `select` receives them (newest first) and returns the chosen number.
        Returns the merged pull request number.
        """
        name = self.config.repo_name
        if not number:
            self.output.step("Fetching open pull requests...")
            try:
                prs = self.host.list_pull_requests(context, name)
            except PyGitPushError:
                self.output.error("Failed to list pull requests")
                raise
            if not prs:
                self.output.error("No open pull requests found")
                raise PyGitPushError("no open pull requests found", step="merge")
            if len(prs) == 1:
                number = prs[0]["number"]
                self.output.info(f"Found single PR #{number}: {prs[0].get('title', '')}")
            elif select is None:
                raise PyGitPushError(
                    f"{len(prs)} open pull requests found, specify one with --number", step="merge"
                )
            else:
                number = select(prs)

        self.output.step(f"Checking pull request #{number}...")
        try:
            pr = self.host.get_pull_request(context, name, number)
        except PyGitPushError:
            self.output.error(f"Failed to get pull request #{number}")
            raise
        if pr.get("mergeable") is False:
            self.output.error(f"Pull request #{number} cannot be merged")
            raise PyGitPushError("pull request is not mergeable", step="merge", number=number)

        self.output.step(f"Merging pull request #{number}...")
        try:
            self.host.merge_pull_request(context, name, number)
        except PyGitPushError:
            self.output.error(f"Failed to merge pull request #{number}")
            raise
        self.output.success(f"🎉 Pull request #{number} merged successfully!")
        return number
