"""Output handler implementations: console and null."""

from __future__ import annotations

import sys

from colorama import Fore, Style
from tqdm import tqdm

SECTION_WIDTH = 50


class ConsoleOutputHandler:
    """Console output with colors. Errors go to stderr."""

    def __init__(self, verbose: bool = False):
        """Create a console handler. Set verbose=True to enable debug output."""
        self.verbose = verbose

    def info(self, message: str, indent: int = 0) -> None:
        """Print an informational message."""
        tqdm.write("  " * indent + message)

    def step(self, message: str, indent: int = 0) -> None:
        """Print a cyan progress message before a step runs."""
        tqdm.write("  " * indent + f"{Fore.CYAN}➡ {message}{Style.RESET_ALL}")

    def success(self, message: str, indent: int = 0) -> None:
        """Print a green success message."""
        tqdm.write("  " * indent + f"{Fore.GREEN}✓ {message}{Style.RESET_ALL}")

    def warning(self, message: str, indent: int = 0) -> None:
        """Print a yellow warning message."""
        tqdm.write("  " * indent + f"{Fore.YELLOW}⚠ {message}{Style.RESET_ALL}")

    def error(self, message: str, indent: int = 0) -> None:
        """Print a red error message to stderr."""
        tqdm.write("  " * indent + f"{Fore.RED}✗ {message}{Style.RESET_ALL}", file=sys.stderr)

    def section(self, title: str) -> None:
        """Print a section header with a divider line."""
        tqdm.write("")
        tqdm.write(title)
        tqdm.write("-" * SECTION_WIDTH)

    def debug(self, message: str) -> None:
        """Print a magenta debug message (only when verbose is enabled)."""
        if self.verbose:
            tqdm.write(f"{Fore.MAGENTA}[DEBUG] {message}{Style.RESET_ALL}")

    def command(self, args: list[str]) -> None:
        """Echo an external command line (only when verbose is enabled)."""
        if self.verbose:
            tqdm.write(f"{Fore.MAGENTA}$ {' '.join(args)}{Style.RESET_ALL}")


class NullOutputHandler:
    """Silent output handler for testing and JSON mode."""

    def info(self, message: str, indent: int = 0) -> None:
        pass

    def step(self, message: str, indent: int = 0) -> None:
        pass

    def success(self, message: str, indent: int = 0) -> None:
        pass

    def warning(self, message: str, indent: int = 0) -> None:
        pass

    def error(self, message: str, indent: int = 0) -> None:
        pass

    def section(self, title: str) -> None:
        pass

    def debug(self, message: str) -> None:
        pass

    def command(self, args: list[str]) -> None:
        pass
