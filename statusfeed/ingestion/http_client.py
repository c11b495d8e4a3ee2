"""
HTTP infrastructure layer for talking to the status service.

Provides:
- Credential: Opaque username/password pair sent as Basic auth
- HTTPClient: Async HTTP client with a per-request timeout that maps
  every httpx failure onto TransportFailure

This layer separates HTTP concerns (auth, timeouts, error mapping) from
domain logic (decoding statuses) in StatusClient. There is no automatic
retry: a failed request fails the fetch job that issued it.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any

import httpx

from statusfeed.timeline.errors import TransportFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credential:
    """
    Credential attached uniformly to every outbound request.

    Example:
        credential = Credential("alice", "secret")
        async with HTTPClient(credential=credential) as client:
            ...
    """

    username: str
    password: str = field(repr=False)

    @classmethod
    def from_values(
        cls,
        username: str | None,
        password: str | None,
    ) -> "Credential | None":
        """
        Create a credential from optional settings values.

        Returns:
            Credential instance or None if no username is provided
        """
        if not username:
            return None
        return cls(username=username, password=password or "")

    @property
    def auth(self) -> httpx.BasicAuth:
        return httpx.BasicAuth(self.username, self.password)


class HTTPClient:
    """
    Async HTTP client for the status service.

    Features:
    - Credential sent as Basic auth on every request
    - Explicit timeout per request
    - httpx errors and HTTP error statuses raised as TransportFailure,
      with the response body kept for error-payload decoding
    - Context manager for proper resource cleanup

    Example:
        async with HTTPClient(credential=credential, timeout=10.0) as client:
            response = await client.get(
                "https://twitter.com/statuses/friends_timeline.json",
            )
    """

    def __init__(
        self,
        credential: Credential | None = None,
        timeout: float = 30.0,
        user_agent: str = "statusfeed/0.1.0",
    ):
        """
        Initialize HTTP client.

        Args:
            credential: Credential to attach to each request
            timeout: Request timeout in seconds
            user_agent: User-Agent header value
        """
        self.credential = credential
        self.timeout = timeout
        self.user_agent = user_agent
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "HTTPClient":
        """Enter async context manager, create client."""
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            auth=self.credential.auth if self.credential else None,
            headers={"User-Agent": self.user_agent},
        )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager, close client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """
        Perform GET request.

        Args:
            url: Request URL
            params: Query parameters

        Returns:
            httpx.Response on success (status < 400)

        Raises:
            TransportFailure: On network error, timeout, or error status
        """
        return await self._request("GET", url, params=params)

    async def post(
        self,
        url: str,
        data: dict[str, str] | None = None,
    ) -> httpx.Response:
        """
        Perform form-encoded POST request.

        Args:
            url: Request URL
            data: Form fields

        Returns:
            httpx.Response on success (status < 400)

        Raises:
            TransportFailure: On network error, timeout, or error status
        """
        return await self._request("POST", url, data=data)

    async def _request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        data: dict[str, str] | None = None,
    ) -> httpx.Response:
        if not self._client:
            raise RuntimeError("HTTPClient must be used as async context manager")

        start = time.monotonic()
        try:
            response = await self._client.request(
                method,
                url,
                params=params or None,
                data=data,
            )
        except httpx.TimeoutException as e:
            raise TransportFailure(
                f"{method} {url} timed out after {self.timeout:.1f}s",
                url=url,
            ) from e
        except httpx.HTTPError as e:
            raise TransportFailure(
                f"{method} {url} failed: {type(e).__name__}: {e}",
                url=url,
            ) from e

        logger.debug(
            f"{method} {url} -> {response.status_code} "
            f"in {time.monotonic() - start:.2f}s"
        )

        if response.status_code >= 400:
            raise TransportFailure(
                f"Request failed with status {response.status_code}",
                url=url,
                status_code=response.status_code,
                response_body=response.text,
            )

        return response
