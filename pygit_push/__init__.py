"""
pygit-push: Git Push Automation Tool

Stages working-tree changes, generates a commit message, commits, and pushes
to GitHub, with branch and pull request workflows.
"""

from colorama import init as colorama_init

colorama_init(autoreset=True)

__version__ = "1.0.0"

# Re-export public API so `from pygit_push import X` keeps working.
from pygit_push.cache import CACHE_TTL, ReadWriteLock, RepoCache  # noqa: E402
from pygit_push.cli import main  # noqa: E402
from pygit_push.config import create_argument_parser, load_config_file, load_credentials  # noqa: E402
from pygit_push.engine import SyncEngine, build_remote_url, public_remote_url  # noqa: E402
from pygit_push.errors import (  # noqa: E402
    CommandFailedError,
    CommitFailedError,
    ConfigurationMissingError,
    DiffUnavailableError,
    ErrorKind,
    GenerationFailedError,
    LockCleanupFailedError,
    NoMessageGeneratedError,
    NotARepositoryError,
    NothingToCommitError,
    PushFailedError,
    PyGitPushError,
    RemoteAPIError,
    RemoteProbeFailedError,
    StagingFailedError,
    SyncTimeoutError,
)
from pygit_push.executor import ProcessExecutor  # noqa: E402
from pygit_push.generator import CommitMessageGenerator  # noqa: E402
from pygit_push.github_api import GitHubClient  # noqa: E402
from pygit_push.locks import LockSanitizer  # noqa: E402
from pygit_push.models import (  # noqa: E402
    CommandResult,
    Credentials,
    GenerateResult,
    PushOutcome,
    RepoInfo,
    SyncConfig,
    SyncResult,
    SyncState,
    WorkingContext,
    make_branch_name,
)
from pygit_push.orchestrator import SyncOrchestrator  # noqa: E402
from pygit_push.output import SECTION_WIDTH, ConsoleOutputHandler, NullOutputHandler  # noqa: E402
from pygit_push.protocols import (  # noqa: E402
    CommandRunner,
    GitInvoker,
    MessageGenerator,
    OutputHandler,
    RepositoryHost,
)
from pygit_push.reporter import SummaryReporter  # noqa: E402
from pygit_push.repository import RepositoryProbe  # noqa: E402
from pygit_push.strategies import (  # noqa: E402
    AlreadyUpToDateStrategy,
    ForcePushStrategy,
    PushRecoveryStrategy,
)

__all__ = [
    "__version__",
    # Models
    "CommandResult",
    "Credentials",
    "GenerateResult",
    "PushOutcome",
    "RepoInfo",
    "SyncConfig",
    "SyncResult",
    "SyncState",
    "WorkingContext",
    "make_branch_name",
    # Errors
    "CommandFailedError",
    "CommitFailedError",
    "ConfigurationMissingError",
    "DiffUnavailableError",
    "ErrorKind",
    "GenerationFailedError",
    "LockCleanupFailedError",
    "NoMessageGeneratedError",
    "NotARepositoryError",
    "NothingToCommitError",
    "PushFailedError",
    "PyGitPushError",
    "RemoteAPIError",
    "RemoteProbeFailedError",
    "StagingFailedError",
    "SyncTimeoutError",
    # Protocols
    "CommandRunner",
    "GitInvoker",
    "MessageGenerator",
    "OutputHandler",
    "RepositoryHost",
    # Implementations
    "ConsoleOutputHandler",
    "NullOutputHandler",
    "SECTION_WIDTH",
    "ProcessExecutor",
    "LockSanitizer",
    "RepositoryProbe",
    "CommitMessageGenerator",
    "GitHubClient",
    "CACHE_TTL",
    "ReadWriteLock",
    "RepoCache",
    # Strategies
    "AlreadyUpToDateStrategy",
    "ForcePushStrategy",
    "PushRecoveryStrategy",
    # Services
    "SyncEngine",
    "SyncOrchestrator",
    "SummaryReporter",
    "build_remote_url",
    "public_remote_url",
    # Config / CLI
    "create_argument_parser",
    "load_config_file",
    "load_credentials",
    "main",
]
