"""CLI entry point: main() function."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

from pygit_push.config import create_argument_parser, load_config_file, load_credentials
from pygit_push.errors import ConfigurationMissingError, PyGitPushError
from pygit_push.generator import CommitMessageGenerator
from pygit_push.github_api import GitHubClient
from pygit_push.models import DEFAULT_TIMEOUT, SyncConfig, WorkingContext
from pygit_push.orchestrator import SyncOrchestrator
from pygit_push.output import ConsoleOutputHandler, NullOutputHandler
from pygit_push.protocols import OutputHandler
from pygit_push.reporter import SummaryReporter


def build_config(args, file_config: dict[str, Any], working_dir: Path) -> SyncConfig:
    """Merge CLI flags over config file values over defaults."""
    defaults = SyncConfig()

    def effective(value, toml_key: str, default):
        if value is not None:
            return value
        return file_config.get(toml_key, default)

    return SyncConfig(
        repo_name=args.repo_name or file_config.get('repo_name') or working_dir.name,
        remote_name=file_config.get('remote_name', defaults.remote_name),
        branch=effective(getattr(args, 'branch', None), 'branch', defaults.branch),
        base_branch=effective(getattr(args, 'base_branch', None), 'base_branch', defaults.base_branch),
        private=effective(getattr(args, 'private', None), 'private', defaults.private),
        timeout=float(effective(args.timeout, 'timeout', DEFAULT_TIMEOUT)),
        verbose=bool(effective(args.verbose, 'verbose', False)),
        json_output=bool(effective(args.json_output, 'json_output', False)),
        push_attempts=int(file_config.get('push_attempts', defaults.push_attempts)),
        retry_delay=float(file_config.get('retry_delay', defaults.retry_delay)),
        remote_host=file_config.get('remote_host', defaults.remote_host),
        remote_url=file_config.get('remote_url', defaults.remote_url),
        model=file_config.get('model', defaults.model),
        max_tokens=int(file_config.get('max_tokens', defaults.max_tokens)),
        temperature=float(file_config.get('temperature', defaults.temperature)),
    )


def prompt_for_pull_request(output: OutputHandler):
    """Return a selector that asks the user to pick one of several pull requests."""
    def select(prs: list[dict[str, Any]]) -> int:
        output.info("Select a pull request to merge:")
        for i, pr in enumerate(prs, start=1):
            output.info(f"{i}. #{pr['number']}: {pr.get('title', '')}")
        try:
            choice = int(input(f"Enter number (1-{len(prs)}): ").strip())
        except (EOFError, ValueError):
            choice = 0
        if not 1 <= choice <= len(prs):
            output.error("Invalid selection")
            raise PyGitPushError("invalid selection", step="merge")
        return prs[choice - 1]["number"]
    return select


def main(argv: list[str] | None = None):
    """Main entry point"""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    working_dir = Path.cwd().resolve()
    file_config = load_config_file(working_dir, args.config)
    config = build_config(args, file_config, working_dir)

    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    output = NullOutputHandler() if config.json_output else ConsoleOutputHandler(verbose=config.verbose)

    output.step("Loading configuration...")
    try:
        credentials = load_credentials()
    except ConfigurationMissingError as e:
        if config.json_output:
            print(json.dumps({'error': {'kind': e.kind.name, 'message': str(e)}}, indent=2))
        else:
            output.error(f"Failed to load configuration: {e}")
        sys.exit(1)
    output.success("Configuration loaded")
    if not args.repo_name and 'repo_name' not in file_config:
        output.info(f"Using current directory name as repository name: {config.repo_name}")

    context = WorkingContext.create(working_dir, config.timeout, config.verbose)
    host = GitHubClient(credentials.github_token, credentials.github_username, output=output)
    generator = CommitMessageGenerator(
        credentials.openai_api_key,
        model=config.model,
        max_tokens=config.max_tokens,
        temperature=config.temperature,
    )
    orchestrator = SyncOrchestrator(config, credentials, output, host, generator=generator)

    try:
        if args.command == 'push':
            result = orchestrator.push(context, args.message)
        elif args.pr_command == 'create':
            result = orchestrator.create_pull_request(context, args.title, args.body, args.message)
        else:
            select = None if config.json_output else prompt_for_pull_request(output)
            number = orchestrator.merge_pull_request(context, args.number, select)
            if config.json_output:
                print(json.dumps({'merged': number}, indent=2))
            sys.exit(0)

        if config.json_output:
            print(json.dumps(result.to_dict(), indent=2))
        else:
            SummaryReporter(output).print_summary(result, config)
        sys.exit(0 if result.succeeded() else 1)

    except KeyboardInterrupt:
        if not config.json_output:
            output.warning("\n\nInterrupted by user")
        sys.exit(130)
    except PyGitPushError as e:
        if config.json_output:
            print(json.dumps({'error': {'kind': e.kind.name, 'message': str(e)}}, indent=2))
        else:
            output.error(str(e))
            if config.verbose:
                import traceback
                traceback.print_exc()
        sys.exit(1)
    finally:
        host.close()
