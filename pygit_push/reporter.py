"""SummaryReporter: generates and displays the final report."""

from __future__ import annotations

from pygit_push.models import PushOutcome, SyncConfig, SyncResult
from pygit_push.output import SECTION_WIDTH
from pygit_push.protocols import OutputHandler

_OUTCOME_TEXT = {
    PushOutcome.PUSHED: "pushed",
    PushOutcome.UP_TO_DATE: "already up to date",
    PushOutcome.FORCE_PUSHED: "force-pushed (remote history overwritten)",
}


class SummaryReporter:
    """Generates and displays summary reports"""

    def __init__(self, output: OutputHandler):
        """Create a reporter that writes to the given output handler."""
        self.output = output

    def print_summary(self, result: SyncResult, config: SyncConfig):
        """Print the final summary of one run."""
        self.output.section("SUMMARY")
        self.output.info(f"Repository: {config.repo_name}")

        if result.nothing_to_commit:
            self.output.info("Nothing to commit, working tree clean")
        else:
            self._print_details(result, config)

        if result.error is not None:
            self.output.error(f"Failed at {result.error.step or result.state.name.lower()}: {result.error.message}")
        self.output.info("=" * SECTION_WIDTH)

    def _print_details(self, result: SyncResult, config: SyncConfig):
        if result.branch:
            self.output.info(f"Branch: {config.remote_name}/{result.branch}")
        if result.commit_message:
            self.output.info(f"Commit: {result.commit_message}")
        if result.push_outcome is not None:
            attempts = f" after {result.push_attempts} attempts" if result.push_attempts > 1 else ""
            self.output.info(f"Push: {_OUTCOME_TEXT[result.push_outcome]}{attempts}")
            if result.push_outcome is PushOutcome.FORCE_PUSHED:
                self.output.warning("Remote-only commits were discarded by the forced push")
        if result.pull_request_number is not None:
            self.output.info(f"Pull request: #{result.pull_request_number} {result.pull_request_url}")
