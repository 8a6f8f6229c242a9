"""
Command entry point for the tlidb item sync.

This module configures logging, runs one crawl-and-sync pass against
tlidb.com and the Supabase item table, and exits.
"""

import asyncio
import sys

from loguru import logger

from config.settings import Settings, get_settings
from crawler.core import ItemSyncPipeline


def configure_logging(settings: Settings) -> None:
    """
    Configure loguru sinks.

    @description Logs to stdout, and to a rotating file when log_file is set
    @param settings: Application settings holding level, format and file path
    """
    handlers = [
        {
            "sink": sys.stdout,
            "format": settings.log_format,
            "level": settings.log_level,
        },
    ]
    if settings.log_file:
        handlers.append(
            {
                "sink": settings.log_file,
                "format": settings.log_format,
                "level": settings.log_level,
                "rotation": "100 MB",
                "retention": "1 week",
            }
        )

    logger.configure(handlers=handlers)


async def main(settings: Settings) -> int:
    """
    Run the sync once.

    @param settings: Configuration for this run
    @returns: Number of items upserted
    """
    logger.info("TLI database sync")
    logger.info(f"Environment: {settings.environment.value}")
    logger.info(f"Syncing {settings.crawler.base_url} -> {settings.supabase.get_rest_url()}")

    async with ItemSyncPipeline(settings) as pipeline:
        updated = await pipeline.run()
        logger.debug(f"Run stats: {pipeline.get_stats()}")

    return updated


def run() -> None:
    """
    Console script entry point.

    @description Any error escaping the pipeline is logged with its traceback
    and ends the process with exit status 1
    """
    settings = get_settings()
    configure_logging(settings)

    try:
        asyncio.run(main(settings))
    except Exception:
        logger.exception("Sync aborted")
        sys.exit(1)


if __name__ == "__main__":
    run()
