"""Commit message generation backed by the OpenAI chat completions API."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future

from openai import OpenAI, OpenAIError

from pygit_push.errors import (
    GenerationFailedError,
    NoMessageGeneratedError,
    PyGitPushError,
    SyncTimeoutError,
)
from pygit_push.models import GenerateResult, WorkingContext

MAX_WORDS = 3

SYSTEM_PROMPT = """You write git commit messages. Reply with a message of one to three words.
Rules:
1. Name the core change and nothing else
2. No filler words
3. No emojis, quotes or special characters
4. No conventional commit prefixes (feat:, fix:, etc.)

Examples:
- "fix memory leak"
- "add user auth"
- "optimize queries"
- "drop legacy code"
- "add tests"
"""


def clean_message(text: str | None) -> str:
    """Reduce a completion to a single line of at most MAX_WORDS words."""
    if not text:
        return ""
    lines = [line for line in text.strip().splitlines() if line.strip()]
    if not lines:
        return ""
    line = lines[0].strip().strip('"\'`').strip()
    if line.startswith("- "):
        line = line[2:]
    words = line.rstrip(".").split()
    return " ".join(words[:MAX_WORDS])


class CommitMessageGenerator:
    """Generates short commit messages from a diff"""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        client: OpenAI | None = None,
        model: str = 'gpt-4o-mini',
        max_tokens: int = 10,
        temperature: float = 0.7,
    ):
        """Create a generator. Pass `client` to reuse or substitute an OpenAI client."""
        self.client = client if client is not None else OpenAI(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._logger = logging.getLogger(__name__)

    def generate(self, context: WorkingContext, diff: str) -> str:
        """Request one message for the diff.

        Raises:
            SyncTimeoutError: the deadline elapsed before or during the request
            NoMessageGeneratedError: the API returned no usable message
            GenerationFailedError: the API call failed
        """
        if context.expired:
            raise SyncTimeoutError("deadline elapsed before generating a commit message")

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": f"Generate a commit message for this diff:\n\n{diff}"},
                ],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                timeout=context.remaining(),
            )
        except OpenAIError as e:
            self._logger.debug("completion request failed: %s", e)
            if context.expired:
                raise SyncTimeoutError("commit message generation timed out") from e
            raise GenerationFailedError(f"failed to generate commit message: {e}", step="generate") from e

        if not response.choices:
            raise NoMessageGeneratedError(step="generate")

        message = clean_message(response.choices[0].message.content)
        if not message:
            raise NoMessageGeneratedError(step="generate")
        self._logger.debug("generated commit message %r", message)
        return message

    def generate_async(self, context: WorkingContext, diff: str) -> Future[GenerateResult]:
        """Start generation on a worker thread.

        The returned future is completed exactly once with a GenerateResult and
        never raises. Callers that stop waiting simply drop the future; the
        request in flight is not cancelled.
        """
        future: Future[GenerateResult] = Future()
        future.set_running_or_notify_cancel()

        def work() -> None:
            try:
                message = self.generate(context, diff)
            except PyGitPushError as e:
                future.set_result(GenerateResult(error=e))
            except Exception as e:
                self._logger.exception("unexpected error generating commit message")
                future.set_result(GenerateResult(
                    error=GenerationFailedError(f"failed to generate commit message: {e}", step="generate")
                ))
            else:
                future.set_result(GenerateResult(message=message))

        threading.Thread(target=work, name="commit-message", daemon=True).start()
        return future
