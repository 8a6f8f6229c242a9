"""
Supabase REST client for the item table.

This module upserts scraped items into the remote item table through the
PostgREST API, merging on the unique game id instead of rejecting duplicates.
"""

from dataclasses import dataclass
from typing import Optional

import httpx
from loguru import logger

from config.settings import SupabaseConfig
from crawler.extractors import ItemRecord


@dataclass
class SyncResponse:
    """Status code and body returned by an upsert."""

    status_code: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class SupabaseItemSync:
    """
    Item table writer.

    @description Sends one upsert per item. Re-sending an item is idempotent
    because the server merges rows that collide on the conflict column.
    """

    def __init__(
        self,
        config: SupabaseConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the writer.

        @param config: Supabase configuration with endpoint, key and table
        @param transport: Optional httpx transport, used to fake the API in tests
        """
        self.config = config
        if not config.anon_key:
            logger.warning("SUPABASE_ANON_KEY is not set, upserts will be rejected")

        self.client = httpx.AsyncClient(transport=transport)

    def _get_headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "apikey": self.config.anon_key,
            "Authorization": f"Bearer {self.config.anon_key}",
            "Prefer": "resolution=merge-duplicates",
        }

    async def upsert_item(self, item: ItemRecord) -> SyncResponse:
        """
        Insert or update one item row.

        @description POSTs the reduced item payload to the table endpoint with
        the on_conflict parameter and the merge-duplicates preference. The
        description is never sent.
        @param item: Item to write
        @returns: SyncResponse with the status code and body; non-2xx is not raised
        @throws httpx.HTTPError: On any transport failure

        @example
        response = await syncer.upsert_item(item)
        if not response.ok:
            logger.warning(f"{item.game_id}: status {response.status_code}")
        """
        response = await self.client.post(
            self.config.get_rest_url(),
            params={"on_conflict": self.config.conflict_column},
            headers=self._get_headers(),
            json=item.to_payload(),
        )
        logger.debug(f"Upsert {item.game_id} -> {response.status_code}")
        return SyncResponse(status_code=response.status_code, body=response.text)

    async def close(self) -> None:
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
