"""Page fetching, field extraction and the crawl-and-sync pipeline."""
