# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
GitHub API Client

The backend capability behind every tool: one generic REST invocation.
The dispatcher only depends on the Backend protocol, so tests substitute
any object with a matching invoke() coroutine.
"""

import logging
from typing import Any, Dict, Optional, Protocol

import httpx

from github_mcp.core.errors import BackendError

logger = logging.getLogger(__name__)

USER_AGENT = "MCP-GitHub-Server/1.0"


class Backend(Protocol):
    """Anything that can execute a backend request"""

    async def invoke(
        self,
        endpoint: str,
        method: str = "GET",
        body: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Any:
        ...


class GitHubClient:
    """
    GitHub REST API client.

    Wraps a shared httpx.AsyncClient. Non-2xx responses and transport faults
    surface as BackendError; nothing is retried.
    """

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        """
        Initialize GitHub client.

        Args:
            token: Personal access token
            base_url: API root
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.headers = {
            "Authorization": f"token {token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": USER_AGENT
        }
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=timeout,
            transport=transport
        )
        logger.info(f"GitHubClient initialized for {self.base_url}")

    async def invoke(
        self,
        endpoint: str,
        method: str = "GET",
        body: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Any:
        """
        Execute one REST request.

        Args:
            endpoint: Path plus query string, e.g. "/repos/acme/widgets"
            method: HTTP method
            body: JSON body (omitted when None)
            headers: Extra headers for this request only

        Returns:
            Decoded JSON payload ({} for empty responses)

        Raises:
            BackendError: On non-2xx status or network fault
        """
        logger.debug(f"GitHub {method} {endpoint}")

        try:
            response = await self._client.request(
                method.upper(),
                endpoint,
                json=body,
                headers=headers
            )
        except httpx.HTTPError as e:
            raise BackendError(f"GitHub API request failed: {e}")

        if not response.is_success:
            raise BackendError(
                f"GitHub API error: {response.status_code} {response.reason_phrase}",
                status=response.status_code,
                details={"endpoint": endpoint, "method": method.upper()}
            )

        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise BackendError(
                f"GitHub API returned invalid JSON: {e}",
                status=response.status_code
            )

    async def close(self):
        """Clean up resources"""
        await self._client.aclose()
