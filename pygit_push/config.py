"""Configuration: argument parser, config file loader, and environment credentials."""

from __future__ import annotations

import argparse
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pygit_push.errors import ConfigurationMissingError
from pygit_push.models import DEFAULT_TIMEOUT, Credentials

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

CONFIG_FILE_NAME = '.pygitpushrc.toml'

ENV_GITHUB_TOKEN = 'GITHUB_TOKEN'
ENV_GITHUB_USERNAME = 'GITHUB_USERNAME'
ENV_OPENAI_API_KEY = 'OPENAI_API_KEY'


def load_credentials(environ: Mapping[str, str] | None = None) -> Credentials:
    """Read the three required secrets from the environment.

    Raises:
        ConfigurationMissingError: naming the first variable that is unset or empty
    """
    environ = os.environ if environ is None else environ
    values = {}
    for variable in (ENV_GITHUB_TOKEN, ENV_GITHUB_USERNAME, ENV_OPENAI_API_KEY):
        value = environ.get(variable, '').strip()
        if not value:
            raise ConfigurationMissingError(variable)
        values[variable] = value
    return Credentials(
        github_token=values[ENV_GITHUB_TOKEN],
        github_username=values[ENV_GITHUB_USERNAME],
        openai_api_key=values[ENV_OPENAI_API_KEY],
    )


def _shared_options() -> argparse.ArgumentParser:
    shared = argparse.ArgumentParser(add_help=False)
    shared.add_argument('--name', dest='repo_name', default='',
                        help='Repository name (default: current directory name)')
    shared.add_argument('--debug', '--verbose', dest='verbose', action='store_true', default=None,
                        help='Show executed commands and their output')
    shared.add_argument('--timeout', type=float, default=None,
                        help=f'Timeout for the whole operation in seconds (default: {DEFAULT_TIMEOUT:g})')
    shared.add_argument('--json', dest='json_output', action='store_true', default=None,
                        help='Output results as JSON (suppresses normal output)')
    shared.add_argument('--config', type=str, default=None,
                        help=f'Path to config file (default: {CONFIG_FILE_NAME} in working dir or home)')
    return shared


def create_argument_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser with all pygit-push subcommands."""
    # Lazy import to avoid circular dependency with __init__.py
    from pygit_push import __version__

    parser = argparse.ArgumentParser(
        prog='pygit-push',
        description="Stage, commit, and push to GitHub with generated commit messages",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s push                          # Generated commit message
  %(prog)s push --commitmsg "fix"        # Custom commit message
  %(prog)s push --private                # Create the repository as private
  %(prog)s pr create                     # New branch, commit, and pull request
  %(prog)s pr create --base develop      # Pull request against develop
  %(prog)s pr merge                      # Pick an open pull request to merge
  %(prog)s pr merge --number 123         # Merge a specific pull request
        """
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    shared = _shared_options()
    commands = parser.add_subparsers(dest='command', required=True)

    push = commands.add_parser('push', parents=[shared], help='Commit all changes and push them')
    push.add_argument('start', nargs='?', choices=['start'],
                      help='Generate the commit message (the default when --commitmsg is absent)')
    push.add_argument('--commitmsg', dest='message', default=None, help='Commit message')
    push.add_argument('--private', action='store_true', default=None,
                      help='Create the repository as private')
    push.add_argument('--branch', default=None, help='Branch to push (default: main)')

    pr = commands.add_parser('pr', help='Manage pull requests')
    pr_commands = pr.add_subparsers(dest='pr_command', required=True)

    create = pr_commands.add_parser('create', parents=[shared], help='Create a pull request')
    create.add_argument('--title', default='', help='Pull request title (default: the commit message)')
    create.add_argument('--body', default='', help='Pull request body')
    create.add_argument('--base', dest='base_branch', default=None,
                        help='Base branch to create the pull request against (default: main)')
    create.add_argument('--commitmsg', dest='message', default=None, help='Commit message')

    merge = pr_commands.add_parser('merge', parents=[shared], help='Merge a pull request')
    merge.add_argument('--number', type=int, default=0, help='Pull request number to merge')

    return parser


def load_config_file(search_dir: Path, config_path: str | None = None) -> dict[str, Any]:
    """Load .pygitpushrc.toml from explicit path, search dir, or home dir.

    Returns empty dict if not found or unreadable.
    """
    candidates = [Path(config_path)] if config_path else [search_dir / CONFIG_FILE_NAME, Path.home() / CONFIG_FILE_NAME]
    for path in candidates:
        if path.is_file():
            try:
                with open(path, 'rb') as f:
                    return tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as e:
                print(f"Warning: Failed to parse {path}: {e}")
                return {}
    if config_path:
        print(f"Warning: Config file '{config_path}' not found. Ignoring.")
    return {}
