"""
The HTTP contract the orchestrator consumes, plus a default implementation.

Hosts normally inject their own fetch: any awaitable callable
`fetch(url, headers) -> response` where the response has `ok`, `status`,
`url` (final URL after redirects) and `text()`. Timeouts, retries and
cancellation are the transport's business, never the orchestrator's.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Protocol

import httpx

from .exceptions import TransportFailure
from .logger import get_module_logger

logger = get_module_logger("transport")

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)


class Response(Protocol):
    """What the orchestrator reads from a fetch result."""

    @property
    def ok(self) -> bool: ...

    @property
    def status(self) -> int: ...

    @property
    def url(self) -> str: ...

    def text(self): ...


Fetch = Callable[[str, Optional[dict[str, str]]], Awaitable[Response]]


@dataclass(frozen=True)
class HttpResponse:
    """Plain response value; what HttpxTransport returns."""
    status: int
    url: str
    body: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self) -> str:
        return self.body


class HttpxTransport:
    """
    fetch() backed by an httpx.AsyncClient.

    Redirects are followed, so HttpResponse.url is the final location.
    Transport-level errors (DNS, refused connections, timeouts) surface as
    TransportFailure with no status; HTTP error statuses are returned as
    normal responses with ok=False.
    """

    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.client = client or httpx.AsyncClient(
            follow_redirects=True,
            timeout=timeout,
            headers={"User-Agent": user_agent},
        )

    async def __call__(self, url: str, headers: Optional[dict[str, str]] = None) -> HttpResponse:
        logger.debug(f"GET {url}")
        try:
            response = await self.client.get(url, headers=headers)
        except httpx.HTTPError as e:
            raise TransportFailure(f"Request to {url} failed: {e}", url=url) from e

        return HttpResponse(status=response.status_code, url=str(response.url), body=response.text)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
