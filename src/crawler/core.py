"""
Item sync pipeline.

This module drives the whole run: it scans the category pages for item links,
scrapes every linked item page, deduplicates by game id and upserts the
collected items into the Supabase item table one at a time.
"""

import asyncio
from typing import Any, Dict, List, Optional

from loguru import logger

from config.settings import Settings
from crawler.extractors import ItemRecord, extract_item_links, parse_item_page
from crawler.fetcher import PageFetcher
from database.supabase import SupabaseItemSync


class ItemSyncPipeline:
    """
    Sequential crawl-and-sync driver.

    @description Fetches category pages, visits up to the configured number of
    item links per category with a fixed delay, keeps the first record seen
    for each game id, then syncs every record with a shorter delay. Only one
    request is ever in flight.
    """

    def __init__(
        self,
        settings: Settings,
        fetcher: Optional[PageFetcher] = None,
        syncer: Optional[SupabaseItemSync] = None,
    ):
        """
        Initialize the pipeline.

        @description Builds the fetcher and syncer from settings unless they are
        supplied, which lets tests plug in fake transports
        @param settings: Explicit configuration for this run
        @param fetcher: Optional page fetcher
        @param syncer: Optional item table writer
        """
        self.settings = settings
        self.fetcher = fetcher or PageFetcher(settings.crawler)
        self.syncer = syncer or SupabaseItemSync(settings.supabase)

        self.stats = {
            "categories_processed": 0,
            "links_found": 0,
            "pages_fetched": 0,
            "pages_skipped": 0,
            "items_collected": 0,
            "duplicates_skipped": 0,
            "items_synced": 0,
            "sync_failures": 0,
        }

    async def collect_category_links(self, category_path: str) -> List[str]:
        """
        Collect item links from one category page.

        @description A category that cannot be fetched, or answers with a
        status other than 200, contributes no links
        @param category_path: Site-relative category path, e.g. "/en/Inventory"
        @returns: Absolute item URLs, capped per category
        """
        config = self.settings.crawler
        url = config.base_url + category_path
        logger.info(f"Loading category: {url}")

        try:
            response = await self.fetcher.fetch(url)
        except Exception as e:
            logger.error(f"Category fetch failed for {url}: {str(e)}")
            return []

        if response.status_code != 200:
            logger.warning(f"Category {url} returned status {response.status_code}")
            return []

        links = extract_item_links(
            response.body,
            config.base_url,
            link_prefix=config.link_prefix,
            excluded_sections=config.excluded_sections,
            min_length=config.min_link_length,
        )
        logger.info(f"Found {len(links)} links in {category_path}")
        self.stats["links_found"] += len(links)

        return links[: config.max_links_per_category]

    async def crawl_item(self, url: str) -> Optional[ItemRecord]:
        """
        Fetch one item page and extract its record.

        @param url: Absolute item page URL
        @returns: ItemRecord, or None if the fetch failed or the page is not an item
        """
        try:
            response = await self.fetcher.fetch(url)
        except Exception as e:
            logger.error(f"Item fetch failed for {url}: {str(e)}")
            self.stats["pages_skipped"] += 1
            return None

        self.stats["pages_fetched"] += 1
        item = parse_item_page(response.status_code, response.body, url)
        if item is None:
            self.stats["pages_skipped"] += 1
        return item

    async def collect_items(self) -> List[ItemRecord]:
        """
        Crawl every configured category and gather unique items.

        @description Categories and links are visited in order, waiting the
        request delay before each item page. Later records whose game id was
        already seen are dropped.
        @returns: Items in first-seen order
        """
        items: List[ItemRecord] = []
        seen_ids = set()

        for category_path in self.settings.crawler.categories:
            links = await self.collect_category_links(category_path)
            self.stats["categories_processed"] += 1

            for link in links:
                await asyncio.sleep(self.settings.crawler.request_delay)

                item = await self.crawl_item(link)
                if item is None:
                    continue
                if item.game_id in seen_ids:
                    self.stats["duplicates_skipped"] += 1
                    continue

                seen_ids.add(item.game_id)
                items.append(item)
                logger.info(f"Collected {item.game_id}: {item.name_en}")

        self.stats["items_collected"] = len(items)
        logger.info(f"Collected {len(items)} items with a game id")
        return items

    async def sync_items(self, items: List[ItemRecord]) -> int:
        """
        Upsert items into the item table one by one.

        @description A failed upsert is logged and does not stop the remaining
        items. Only 2xx responses count as synced.
        @param items: Items to write
        @returns: Number of items the server accepted
        """
        synced = 0

        for item in items:
            try:
                response = await self.syncer.upsert_item(item)
                if response.ok:
                    synced += 1
                    logger.info(f"Synced {item.game_id}: {item.name_en}")
                else:
                    self.stats["sync_failures"] += 1
                    logger.warning(
                        f"Sync of {item.game_id} returned status {response.status_code}"
                    )
            except Exception as e:
                self.stats["sync_failures"] += 1
                logger.error(f"Sync of {item.game_id} failed: {str(e)}")

            await asyncio.sleep(self.settings.supabase.sync_delay)

        self.stats["items_synced"] = synced
        return synced

    async def run(self) -> int:
        """
        Run one full crawl and sync.

        @returns: Number of items successfully upserted

        @example
        async with ItemSyncPipeline(get_settings()) as pipeline:
            updated = await pipeline.run()
        """
        items = await self.collect_items()

        logger.info(f"Syncing {len(items)} items to {self.settings.supabase.table}")
        synced = await self.sync_items(items)

        logger.info(f"Updated {synced} items")
        return synced

    def get_stats(self) -> Dict[str, Any]:
        """
        Get pipeline statistics.

        @returns: Counters for the current run plus a settings summary
        """
        return {
            **self.stats,
            "settings_summary": {
                "categories": list(self.settings.crawler.categories),
                "max_links_per_category": self.settings.crawler.max_links_per_category,
                "request_delay": self.settings.crawler.request_delay,
                "sync_delay": self.settings.supabase.sync_delay,
            },
        }

    async def close(self) -> None:
        """
        Clean up pipeline resources.

        @description Closes the HTTP clients of the fetcher and the syncer
        """
        logger.debug("Closing pipeline resources")
        await self.fetcher.close()
        await self.syncer.close()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
