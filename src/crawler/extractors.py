"""
Field extractors for tlidb item and category pages.

This module provides pure functions that pull item identifiers, icons, names,
descriptions and item links out of raw page HTML. Every extractor tolerates
missing markup and degrades to None instead of raising.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from loguru import logger

ICON_URL_PREFIX = "https://cdn.tlidb.com/UI/Textures"
ICON_EXTENSION = ".webp"

DESCRIPTION_NOUNS = ("material", "currency", "item", "resource")

_GAME_ID_PATTERN = re.compile(r"id:\s*(\d+)", re.IGNORECASE)
_DESCRIPTION_PATTERN = re.compile(
    r"An\s+[^<]+(?:%s)[^<]*" % "|".join(DESCRIPTION_NOUNS), re.IGNORECASE
)


@dataclass
class ItemRecord:
    """
    Data class representing one item scraped from an item page.

    @description Holds the identifier and metadata extracted from a single page;
    only the identifier, English name and icon are synced to the item table
    """

    game_id: int
    name_en: str
    source_url: str
    icon_url: Optional[str] = None
    description: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        """
        Build the JSON body sent to the item table.

        @returns: Dictionary with exactly the game_id, name_en and icon_url keys
        """
        return {
            "game_id": self.game_id,
            "name_en": self.name_en,
            "icon_url": self.icon_url,
        }


def extract_game_id(html: str) -> Optional[int]:
    """
    Extract the numeric item identifier from page HTML.

    @description Finds the first "id:" token followed by digits anywhere in the
    page, which is where the embedded item data carries its key
    @param html: Raw page HTML
    @returns: Integer identifier of the first match, or None

    @example
    extract_game_id('{name: "Flame Elementium", ID:  100300}')
    # Returns: 100300
    """
    if not html:
        return None

    match = _GAME_ID_PATTERN.search(html)
    return int(match.group(1)) if match else None


def extract_icon(
    html: str, prefix: str = ICON_URL_PREFIX, extension: str = ICON_EXTENSION
) -> Optional[str]:
    """
    Extract the item icon URL from page HTML.

    @description Returns the first texture URL on the asset host; the site logo
    and other images live outside the texture path and are never matched
    @param html: Raw page HTML
    @param prefix: Asset host and path every icon URL starts with
    @param extension: Image extension every icon URL ends with
    @returns: First matching icon URL in document order, or None
    """
    if not html:
        return None

    pattern = re.escape(prefix) + r"[^\"'\s]+" + re.escape(extension)
    match = re.search(pattern, html, re.IGNORECASE)
    return match.group(0) if match else None


def extract_description(html: str) -> Optional[str]:
    """
    Extract a short item description from page HTML.

    @description Heuristic match on a sentence opening with "An" and naming one
    of the item category nouns before the next tag. It misses descriptions
    phrased differently and can pick up unrelated prose.
    @param html: Raw page HTML
    @returns: Trimmed description text, or None
    """
    if not html:
        return None

    match = _DESCRIPTION_PATTERN.search(html)
    return match.group(0).strip() if match else None


def _slug_from_url(url: str) -> str:
    path = urlparse(url).path if "://" in url else url
    return path.rstrip("/").split("/")[-1].replace("_", " ")


def extract_name(html: str, url: str) -> str:
    """
    Resolve the English item name.

    @description Uses the first h1 heading with text, then the part of the page title
    before the first "|", then the last URL path segment with underscores
    turned into spaces
    @param html: Raw page HTML
    @param url: Page URL, used for the final fallback
    @returns: Non-empty item name whenever the URL has a final segment
    """
    soup = BeautifulSoup(html or "", "lxml")

    for heading in soup.find_all("h1"):
        name = heading.get_text().strip()
        if name:
            return name

    title = soup.find("title")
    if title:
        name = title.get_text().split("|")[0].strip()
        if name:
            return name

    return _slug_from_url(url)


def extract_item_links(
    html: str,
    base_url: str,
    link_prefix: str = "/en/",
    excluded_sections: Iterable[str] = ("/Hero", "/Talent", "/Skill", "/Craft"),
    min_length: int = 5,
) -> List[str]:
    """
    Scan a category page for item page links.

    @description Keeps site-relative anchor targets under the locale prefix,
    drops navigation sections and very short paths, and deduplicates while
    preserving first-seen order
    @param html: Raw category page HTML
    @param base_url: Site root the relative paths are appended to
    @param link_prefix: Prefix an href must start with
    @param excluded_sections: Path fragments that mark navigation links
    @param min_length: An href must be strictly longer than this
    @returns: Absolute item URLs

    @example
    extract_item_links('<a href="/en/Flame_Elementium">', "https://tlidb.com")
    # Returns: ["https://tlidb.com/en/Flame_Elementium"]
    """
    soup = BeautifulSoup(html or "", "lxml")
    excluded = tuple(excluded_sections)
    base = base_url.rstrip("/")

    links: List[str] = []
    seen = set()
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"]
        if not href.startswith(link_prefix):
            continue
        if any(section in href for section in excluded):
            continue
        if len(href) <= min_length:
            continue

        url = base + href
        if url not in seen:
            seen.add(url)
            links.append(url)

    logger.debug(f"Found {len(links)} item links")
    return links


def parse_item_page(status_code: int, html: str, url: str) -> Optional[ItemRecord]:
    """
    Assemble an ItemRecord from a fetched item page.

    @description A page only yields a record when it was fetched with status
    200 and carries a non-zero identifier; every other field is optional
    @param status_code: HTTP status of the page fetch
    @param html: Page body
    @param url: Absolute page URL
    @returns: ItemRecord, or None when the page is not a valid item
    """
    if status_code != 200:
        logger.debug(f"Skipping {url}: status {status_code}")
        return None

    game_id = extract_game_id(html)
    if not game_id:
        logger.debug(f"No game id on {url}")
        return None

    return ItemRecord(
        game_id=game_id,
        name_en=extract_name(html, url),
        icon_url=extract_icon(html),
        description=extract_description(html),
        source_url=url,
    )
