"""HTTP client service with retry logic and rate limiting."""

import asyncio
import time
from typing import Any

import httpx
import structlog

log = structlog.stdlib.get_logger()


class HttpClientService:
    """Async HTTP client used for the repository APIs.

    Wraps a shared ``httpx.AsyncClient`` with a minimum delay between
    requests and bounded exponential backoff for transient failures.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        rate_limit_delay: float = 0.5,
        verify_ssl: bool = True
    ) -> None:
        """Initialize the HTTP client service.

        Args:
            timeout: Request timeout in seconds
            max_retries: Maximum number of retry attempts
            base_delay: Base delay for exponential backoff in seconds
            max_delay: Maximum delay between retries in seconds
            rate_limit_delay: Minimum delay between requests in seconds
            verify_ssl: Whether to verify SSL certificates
        """
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.rate_limit_delay = rate_limit_delay
        self._last_request_time: float = 0.0

        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={
                "User-Agent": "neko-companion/0.1",
                "Accept": "application/json",
            },
            follow_redirects=True,
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
            verify=verify_ssl
        )

        log.info(
            "HTTP client service initialized",
            timeout=timeout,
            max_retries=max_retries,
            rate_limit_delay=rate_limit_delay
        )

    async def get(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None
    ) -> httpx.Response:
        """Make a GET request with retry logic and rate limiting.

        Client errors (4xx other than 429) are raised immediately; server
        errors and transport failures are retried with backoff.

        Raises:
            httpx.HTTPStatusError: On a non-retryable status or after all retries
            httpx.RequestError: If the transport keeps failing
        """
        for attempt in range(self.max_retries + 1):
            await self._enforce_rate_limit()
            try:
                log.debug("HTTP GET", url=url, attempt=attempt + 1)
                response = await self._client.get(url, headers=headers, params=params)
                response.raise_for_status()
                log.debug(
                    "HTTP GET succeeded",
                    url=url,
                    status_code=response.status_code,
                    content_length=len(response.content)
                )
                return response

            except (httpx.HTTPStatusError, httpx.RequestError) as e:
                log.warning(
                    "HTTP GET failed",
                    url=url,
                    attempt=attempt + 1,
                    error=str(e),
                    error_type=type(e).__name__
                )

                delay = self._retry_delay(e, attempt)
                if delay is None or attempt == self.max_retries:
                    raise

                log.info("Retrying after delay", url=url, delay=delay)
                await asyncio.sleep(delay)

        raise RuntimeError("Unexpected end of retry loop")

    async def get_json(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None
    ) -> Any:
        """GET a URL and decode the JSON body."""
        response = await self.get(url, headers=headers, params=params)
        return response.json()

    async def get_bytes(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None
    ) -> bytes:
        """GET a URL and return the raw body."""
        response = await self.get(url, headers=headers, params=params)
        return response.content

    def _retry_delay(self, error: httpx.HTTPError, attempt: int) -> float | None:
        """Seconds to wait before the next attempt, or None to give up."""
        if isinstance(error, httpx.HTTPStatusError):
            status = error.response.status_code
            if status == 429:
                retry_after = error.response.headers.get("retry-after")
                if retry_after:
                    try:
                        return min(float(retry_after), self.max_delay)
                    except ValueError:
                        pass
            elif 400 <= status < 500:
                return None
        return min(self.base_delay * (2 ** attempt), self.max_delay)

    async def _enforce_rate_limit(self) -> None:
        """Enforce rate limiting between requests."""
        elapsed = time.monotonic() - self._last_request_time
        if elapsed < self.rate_limit_delay:
            await asyncio.sleep(self.rate_limit_delay - elapsed)
        self._last_request_time = time.monotonic()

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        await self._client.aclose()
        log.debug("HTTP client closed")

    async def __aenter__(self) -> "HttpClientService":
        return self

    async def __aexit__(self, exc_type: type[Exception] | None, exc_val: Exception | None, exc_tb: Any) -> None:
        await self.close()
