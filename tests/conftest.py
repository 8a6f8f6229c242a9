"""
Shared fixtures for the tlidb sync tests.

HTTP traffic is served by httpx.MockTransport so no test touches the network.
"""

from typing import Callable, Dict, List, Tuple

import httpx
import pytest
from loguru import logger

from config.settings import EnvironmentType, Settings

BASE_URL = "https://tlidb.com"
SUPABASE_URL = "https://project.supabase.co"


@pytest.fixture
def settings() -> Settings:
    """Testing settings with zero delays and a fake Supabase project."""
    config = Settings(environment=EnvironmentType.TESTING)
    config.crawler.base_url = BASE_URL
    config.supabase.url = SUPABASE_URL
    config.supabase.anon_key = "test-anon-key"
    return config


@pytest.fixture
def log_records():
    """Capture loguru records emitted during a test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


def site_transport(pages: Dict[str, Tuple[int, str]], requests: List[httpx.Request] = None):
    """
    Build a transport serving fixed pages.

    @param pages: Map of absolute URL to (status, body); unknown URLs answer 404
    @param requests: Optional list every received request is appended to
    """

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        status, body = pages.get(str(request.url), (404, "Not Found"))
        return httpx.Response(status, text=body)

    return httpx.MockTransport(handler)


def api_transport(respond: Callable[[httpx.Request], httpx.Response], requests: List[httpx.Request]):
    """Build a transport for the REST API that records every request."""

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return respond(request)

    return httpx.MockTransport(handler)


def item_page(game_id: int, name: str, icon: str = None) -> str:
    icon_tag = f'<img src="{icon}">' if icon else ""
    return f"""
    <html>
      <head><title>{name} | Torchlight Infinite Database</title></head>
      <body>
        <h1 class="item-name">{name}</h1>
        {icon_tag}
        <p>An ember-crafting material found in the Netherrealm.</p>
        <script>window.item = {{id: {game_id}, name: "{name}"}}</script>
      </body>
    </html>
    """
