from __future__ import annotations

from typing import Optional, Union

import pytest

from reading_sources.transport import HttpResponse

Page = Union[str, tuple[int, str]]


class FakeFetch:
    """In-memory fetch: URL → body (status 200) or (status, body); anything else is a 404."""

    def __init__(self, pages: Optional[dict[str, Page]] = None) -> None:
        self.pages = dict(pages or {})
        self.calls: list[tuple[str, dict]] = []

    async def __call__(self, url: str, headers: Optional[dict[str, str]] = None) -> HttpResponse:
        self.calls.append((url, dict(headers or {})))
        page = self.pages.get(url)
        if page is None:
            return HttpResponse(status=404, url=url, body="Not Found")
        if isinstance(page, tuple):
            status, body = page
            return HttpResponse(status=status, url=url, body=body)
        return HttpResponse(status=200, url=url, body=page)

    @property
    def urls(self) -> list[str]:
        return [url for url, _ in self.calls]


@pytest.fixture
def fake_fetch():
    def _build(pages: Optional[dict[str, Page]] = None) -> FakeFetch:
        return FakeFetch(pages)

    return _build
