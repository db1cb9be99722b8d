"""
HTTP Retry Client

Thin async wrapper around a ``requests.Session`` that retries on
rate-limit responses (HTTP 429) only, waiting a delay computed by an
injected BackoffPolicy. After the last retry the final response is
returned as-is; callers inspect the status themselves.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Literal, Optional

import requests
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

RATE_LIMITED = 429

SleepFn = Callable[[float], Awaitable[None]]


def parse_retry_after(response: Optional[requests.Response]) -> Optional[float]:
    """Read a numeric Retry-After header (seconds), if any"""
    if response is None:
        return None
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return max(float(value), 0.0)
    except (TypeError, ValueError):
        return None


class BackoffPolicy(BaseModel):
    """
    Delay schedule between rate-limited attempts.

    Strategies (attempt index n starts at 0):
    - fixed:       base
    - linear:      (n + 1) * base
    - exponential: 2**n * base
    - header:      Retry-After from the response, else exponential

    Every delay is capped at ``max_delay``.
    """

    strategy: Literal["fixed", "linear", "exponential", "header"] = "exponential"
    base_delay: float = Field(default=3.0, ge=0)
    max_delay: float = Field(default=60.0, ge=0)

    def delay_for(self, attempt: int, response: Optional[requests.Response] = None) -> float:
        if self.strategy == "fixed":
            delay = self.base_delay
        elif self.strategy == "linear":
            delay = (attempt + 1) * self.base_delay
        elif self.strategy == "header":
            header_delay = parse_retry_after(response)
            delay = header_delay if header_delay is not None else (2 ** attempt) * self.base_delay
        else:
            delay = (2 ** attempt) * self.base_delay
        return min(delay, self.max_delay)


class RetryClient:
    """
    GET with bounded backoff on HTTP 429.

    Blocking ``requests`` calls run in a worker thread so the event loop
    stays free for other pending work.

    Example:
        client = RetryClient(policy=BackoffPolicy(base_delay=3.0), max_retries=4)
        response = await client.fetch_with_retry(url, {"X-Figma-Token": token})
        if response.status_code == 429:
            ...
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        policy: Optional[BackoffPolicy] = None,
        max_retries: int = 4,
        timeout: float = 30.0,
        sleep: SleepFn = asyncio.sleep
    ):
        """
        Initialize retry client.

        Args:
            session: HTTP session to issue requests on (new one by default)
            policy: Backoff schedule (exponential, 3s base by default)
            max_retries: Retries after the first attempt on HTTP 429
            timeout: Per-request transport timeout in seconds
            sleep: Awaitable used for backoff waits (injectable for tests)
        """
        self.session = session or requests.Session()
        self.policy = policy or BackoffPolicy()
        self.max_retries = max_retries
        self.timeout = timeout
        self._sleep = sleep

    async def fetch_with_retry(
        self,
        url: str,
        headers: Optional[dict] = None,
        max_retries: Optional[int] = None
    ) -> requests.Response:
        """
        Issue a GET, retrying with identical inputs while rate limited.

        Args:
            url: Request URL
            headers: Request headers
            max_retries: Override the client's retry budget

        Returns:
            The first non-429 response, or the last 429 once retries run out

        Raises:
            requests.RequestException: On transport failure (not retried)
        """
        retries = self.max_retries if max_retries is None else max_retries
        attempt = 0
        while True:
            response = await asyncio.to_thread(
                self.session.get, url, headers=headers or {}, timeout=self.timeout
            )
            if response.status_code != RATE_LIMITED:
                return response
            if attempt >= retries:
                logger.error("Rate limit exceeded after %d retries: %s", retries, _short(url))
                return response

            wait = self.policy.delay_for(attempt, response)
            logger.warning(
                "Rate limited (429). Waiting %.1fs (attempt %d/%d)",
                wait, attempt + 1, retries
            )
            await self._sleep(wait)
            attempt += 1

    async def head(self, url: str) -> requests.Response:
        """Single HEAD request, no retry"""
        return await asyncio.to_thread(
            self.session.head, url, allow_redirects=True, timeout=self.timeout
        )


def _short(url: str) -> str:
    return url if len(url) <= 100 else url[:97] + "..."
