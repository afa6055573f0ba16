"""
GitHub REST client.

Wraps the single pull request endpoint the branch guard needs behind an
``httpx.AsyncClient``. Failures surface as ``RemoteOperationError``; nothing
is retried.
"""

import time
from typing import Any, Dict, Optional

import httpx

from branch_guard.errors import RemoteOperationError
from branch_guard.utils.logging import get_logger, log_api_call

logger = get_logger(__name__)

GITHUB_API_VERSION = "2022-11-28"
USER_AGENT = "branch-guard"


class GitHubClient:
    """Minimal async GitHub client used to rewrite pull request base branches."""

    def __init__(
        self,
        token: Optional[str] = None,
        api_url: str = "https://api.github.com",
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the client.

        Args:
            token: Token supplied by the CI platform (GITHUB_TOKEN)
            api_url: Base URL of the GitHub REST API
            timeout: Request timeout in seconds
            http_client: Preconfigured client, mainly for tests; it is not
                closed by ``aclose``
        """
        self.api_url = api_url.rstrip("/")
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "User-Agent": USER_AGENT,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._headers = headers

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def update_pull_request(
        self,
        owner: str,
        repo: str,
        pull_number: int,
        **fields: Any,
    ) -> Dict[str, Any]:
        """
        Update a pull request (``PATCH /repos/{owner}/{repo}/pulls/{pull_number}``).

        Args:
            owner: Repository owner
            repo: Repository name
            pull_number: Pull request number
            **fields: Fields to change, e.g. ``base="develop"``

        Returns:
            Decoded pull request returned by GitHub

        Raises:
            RemoteOperationError: On transport errors or a non-2xx response
        """
        endpoint = f"/repos/{owner}/{repo}/pulls/{pull_number}"
        start_time = time.monotonic()

        try:
            response = await self._client.patch(
                f"{self.api_url}{endpoint}",
                json=fields,
                headers=self._headers,
            )
        except httpx.HTTPError as e:
            duration_ms = (time.monotonic() - start_time) * 1000
            log_api_call(logger, "github", endpoint, "PATCH", duration_ms=duration_ms, error=str(e))
            raise RemoteOperationError(f"Request to GitHub failed: {e}") from e

        duration_ms = (time.monotonic() - start_time) * 1000

        if response.is_error:
            detail = self._format_error(response)
            log_api_call(
                logger,
                "github",
                endpoint,
                "PATCH",
                status_code=response.status_code,
                duration_ms=duration_ms,
                error=detail,
            )
            raise RemoteOperationError(
                f"GitHub rejected the pull request update ({response.status_code}): {detail}",
                status_code=response.status_code,
            )

        log_api_call(
            logger,
            "github",
            endpoint,
            "PATCH",
            status_code=response.status_code,
            duration_ms=duration_ms,
        )
        return response.json() if response.content else {}

    @staticmethod
    def _format_error(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text
        if isinstance(body, dict) and "message" in body:
            return str(body["message"])
        return response.text
