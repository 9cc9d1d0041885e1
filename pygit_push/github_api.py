"""GitHub REST client: repositories and pull requests."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from pygit_push.errors import RemoteAPIError, SyncTimeoutError
from pygit_push.models import WorkingContext
from pygit_push.output import NullOutputHandler
from pygit_push.protocols import OutputHandler

API_URL = "https://api.github.com"


class GitHubClient:
    """Thin wrapper over the GitHub REST API for the authenticated user's repositories.

    Every request is bound to the WorkingContext deadline. HTTP failures raise
    RemoteAPIError carrying the status code; an elapsed deadline raises
    SyncTimeoutError.
    """

    def __init__(
        self,
        token: str,
        username: str,
        *,
        base_url: str = API_URL,
        transport: httpx.BaseTransport | None = None,
        output: OutputHandler | None = None,
    ):
        self.username = username
        self.output = output or NullOutputHandler()
        self._logger = logging.getLogger(__name__)
        self._client = httpx.Client(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            transport=transport,
            follow_redirects=True,
        )

    def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        self._client.close()

    def _request(self, context: WorkingContext, method: str, path: str, **kwargs: Any) -> httpx.Response:
        if context.expired:
            raise SyncTimeoutError(f"deadline elapsed before {method} {path}")
        self._logger.debug("%s %s", method, path)
        try:
            response = self._client.request(method, path, timeout=context.remaining(), **kwargs)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise SyncTimeoutError(f"{method} {path} timed out") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise RemoteAPIError(
                f"HTTP {status} from GitHub API for {method} {path}",
                status_code=status,
                output=e.response.text,
            ) from e
        except httpx.RequestError as e:
            raise RemoteAPIError(f"network error calling GitHub API: {e}") from e
        return response

    def _repo_path(self, name: str) -> str:
        return f"/repos/{self.username}/{name}"

    # -- repositories --------------------------------------------------------

    def get_repository(self, context: WorkingContext, name: str) -> dict[str, Any]:
        return self._request(context, "GET", self._repo_path(name)).json()

    def create_repository(self, context: WorkingContext, name: str, private: bool) -> dict[str, Any]:
        payload = {"name": name, "private": private, "auto_init": False}
        return self._request(context, "POST", "/user/repos", json=payload).json()

    def set_repository_visibility(self, context: WorkingContext, name: str, private: bool) -> dict[str, Any]:
        return self._request(context, "PATCH", self._repo_path(name), json={"private": private}).json()

    def ensure_repository_exists(self, context: WorkingContext, name: str, private: bool) -> None:
        """Create the repository if GET answers 404; align its visibility otherwise."""
        self.output.step("Checking if repository exists...")
        try:
            repo = self.get_repository(context, name)
        except RemoteAPIError as e:
            if e.status_code != 404:
                self.output.error("Failed to check repository")
                raise
            self.output.step(f"Repository doesn't exist, creating new repository: {name}")
            try:
                self.create_repository(context, name, private)
            except RemoteAPIError:
                self.output.error("Failed to create repository")
                raise
            self.output.success("Repository created successfully")
            return

        self.output.info("Repository exists, will append changes")
        if bool(repo.get("private")) != private:
            self.output.step("Updating repository visibility...")
            try:
                self.set_repository_visibility(context, name, private)
            except RemoteAPIError:
                self.output.error("Failed to update repository visibility")
                raise
            self.output.success("Repository visibility updated")

    # -- pull requests -------------------------------------------------------

    def create_pull_request(self, context: WorkingContext, name: str, title: str, body: str,
                            head: str, base: str) -> dict[str, Any]:
        payload = {"title": title, "body": body, "head": head, "base": base}
        return self._request(context, "POST", f"{self._repo_path(name)}/pulls", json=payload).json()

    def get_pull_request(self, context: WorkingContext, name: str, number: int) -> dict[str, Any]:
        return self._request(context, "GET", f"{self._repo_path(name)}/pulls/{number}").json()

    def list_pull_requests(self, context: WorkingContext, name: str) -> list[dict[str, Any]]:
        """Open pull requests, newest first."""
        params = {"state": "open", "sort": "created", "direction": "desc"}
        return self._request(context, "GET", f"{self._repo_path(name)}/pulls", params=params).json()

    def merge_pull_request(self, context: WorkingContext, name: str, number: int) -> dict[str, Any]:
        return self._request(
            context, "PUT", f"{self._repo_path(name)}/pulls/{number}/merge",
            json={"merge_method": "merge"},
        ).json()
