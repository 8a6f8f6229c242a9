"""
HTTP page fetcher for the item crawler.

This module wraps an httpx async client that sends browser-like headers
and returns the status code together with the full response body.
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import httpx
from loguru import logger

from config.settings import CrawlerConfig


@dataclass
class FetchResponse:
    """Status code and decoded body of a page fetch."""

    status_code: int
    body: str


class PageFetcher:
    """
    Single-request page fetcher.

    @description Issues one GET per call with the configured browser headers.
    There is no retry, redirects are not followed, and no timeout applies
    unless one is configured.
    """

    allowed_schemes = {"http", "https"}

    def __init__(
        self,
        config: CrawlerConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the fetcher.

        @param config: Crawler configuration providing headers and timeout
        @param transport: Optional httpx transport, used to fake the site in tests
        """
        self.config = config
        self.client = httpx.AsyncClient(
            headers=config.get_headers(),
            timeout=config.timeout,
            follow_redirects=False,
            transport=transport,
        )

    def validate_url(self, url: str) -> None:
        """
        Ensure a URL can be fetched.

        @param url: URL to check
        @throws ValueError: If the URL is not absolute http(s) with a host
        """
        parsed = urlparse(url or "")
        if parsed.scheme.lower() not in self.allowed_schemes or not parsed.netloc:
            raise ValueError(f"Invalid URL: {url!r}")

    async def fetch(self, url: str) -> FetchResponse:
        """
        Fetch a page and read its whole body.

        @description Performs a single GET request and buffers the response
        @param url: Absolute http or https URL
        @returns: FetchResponse with status code and body text
        @throws ValueError: If the URL is not fetchable
        @throws httpx.HTTPError: On any transport failure

        @example
        async with PageFetcher(settings.crawler) as fetcher:
            response = await fetcher.fetch("https://tlidb.com/en/Inventory")
            print(response.status_code, len(response.body))
        """
        self.validate_url(url)

        response = await self.client.get(url)
        logger.debug(f"GET {url} -> {response.status_code}")
        return FetchResponse(status_code=response.status_code, body=response.text)

    async def close(self) -> None:
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
