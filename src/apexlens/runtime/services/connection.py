"""
Org connections for the telemetry endpoint.

The runtime data service only needs ``request``; anything with that
coroutine (a test double, an SDK wrapper) can stand in for an org connection.
"""

from typing import Any, Dict, Optional, Protocol

import httpx

from apexlens.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class Connection(Protocol):
    """Authenticated transport to an org."""

    async def request(
        self,
        method: str,
        url: str,
        body: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """Send a request and return the decoded JSON response; raise on transport errors."""
        ...


class HttpxConnection:
    """Connection over httpx with bearer-token authentication."""

    def __init__(self, instance_url: str, access_token: str, timeout_seconds: float = 30.0):
        if not instance_url:
            raise ValueError("instance_url is required")
        if not access_token:
            raise ValueError("access_token is required")

        self.instance_url = instance_url.rstrip("/")
        self._access_token = access_token
        self._timeout_seconds = timeout_seconds

    async def request(
        self,
        method: str,
        url: str,
        body: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        request_headers = {
            "Authorization": f"Bearer {self._access_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        request_headers.update(headers or {})

        target = url if url.startswith("http") else f"{self.instance_url}{url}"
        async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
            response = await client.request(method, target, content=body, headers=request_headers)
            response.raise_for_status()
            result = response.json()

        logger.debug("org_request_completed", method=method, url=url, status_code=response.status_code)
        return result
