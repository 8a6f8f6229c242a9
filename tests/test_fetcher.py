"""Tests for the page fetcher."""

import httpx
import pytest

from crawler.fetcher import FetchResponse, PageFetcher

from conftest import site_transport

URL = "https://tlidb.com/en/Inventory"


async def test_returns_status_and_body(settings):
    transport = site_transport({URL: (200, "<html>inventory</html>")})

    async with PageFetcher(settings.crawler, transport=transport) as fetcher:
        response = await fetcher.fetch(URL)

    assert response == FetchResponse(status_code=200, body="<html>inventory</html>")


async def test_sends_browser_headers(settings):
    requests = []
    transport = site_transport({URL: (200, "")}, requests)

    async with PageFetcher(settings.crawler, transport=transport) as fetcher:
        await fetcher.fetch(URL)

    headers = requests[0].headers
    assert headers["User-Agent"].startswith("Mozilla/5.0 (Windows NT 10.0; Win64; x64)")
    assert headers["Accept"].startswith("text/html,application/xhtml+xml")
    assert headers["Accept-Language"] == "en-US,en;q=0.9"


async def test_non_200_is_returned_not_raised(settings):
    async with PageFetcher(settings.crawler, transport=site_transport({})) as fetcher:
        response = await fetcher.fetch("https://tlidb.com/en/Missing_Item")

    assert response.status_code == 404


async def test_redirects_are_not_followed(settings):
    def handler(request):
        return httpx.Response(302, headers={"Location": "https://tlidb.com/en/Other"})

    async with PageFetcher(settings.crawler, transport=httpx.MockTransport(handler)) as fetcher:
        response = await fetcher.fetch(URL)

    assert response.status_code == 302


@pytest.mark.parametrize("url", ["/en/Inventory", "ftp://tlidb.com/en/Inventory", "", "https://"])
async def test_rejects_non_http_urls(settings, url):
    async with PageFetcher(settings.crawler, transport=site_transport({})) as fetcher:
        with pytest.raises(ValueError):
            await fetcher.fetch(url)


async def test_transport_errors_propagate(settings):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with PageFetcher(settings.crawler, transport=httpx.MockTransport(handler)) as fetcher:
        with pytest.raises(httpx.ConnectError):
            await fetcher.fetch(URL)
