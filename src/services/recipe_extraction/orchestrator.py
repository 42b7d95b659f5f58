"""
Recipe import orchestration.

This module wires site-type detection, parser-config selection, the page
fetch and the strategy selector into one entry point.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from config import settings
from services.recipe_extraction.fetcher import FetchError, PageFetcher
from services.recipe_extraction.fingerprint import extract_html_pattern
from services.recipe_extraction.models import ImportOutcome, SiteType
from services.recipe_extraction.parser_config import get_parser_config
from services.recipe_extraction.pattern_store import PatternRecorder, PatternStore
from services.recipe_extraction.sandbox import RenderingSandbox, ScreenshotReader
from services.recipe_extraction.site_types import detect_site_type
from services.recipe_extraction.strategy_selector import StrategySelector

logger = logging.getLogger(__name__)

SOCIAL_DATA_MARKERS = {
    SiteType.TIKTOK: re.compile(r"SIGI_STATE|__UNIVERSAL_DATA_FOR_REHYDRATION__|__NEXT_DATA__|og:description"),
    SiteType.INSTAGRAM: re.compile(r"_sharedData|edge_media_to_caption|og:description"),
}


class RecipeImporter:
    def __init__(
        self,
        store: Optional[PatternStore] = None,
        fetcher: Optional[PageFetcher] = None,
        sandbox: Optional[RenderingSandbox] = None,
        screenshot_reader: Optional[ScreenshotReader] = None,
        recorder: Optional[PatternRecorder] = None,
    ):
        self.fetcher = fetcher or PageFetcher()
        self.recorder = recorder or PatternRecorder(store)
        self.selector = StrategySelector(
            self.recorder,
            fetcher=self.fetcher,
            sandbox=sandbox,
            screenshot_reader=screenshot_reader,
        )

    async def import_recipe(self, url: str, html: Optional[str] = None) -> ImportOutcome:
        """Import a recipe from a URL.

        Steps:
        1. Classify the URL (known hosts plus discovered recipe sites)
        2. Pick the active parser config for that site type
        3. Fetch the page markup unless the caller supplied it
        4. Run the strategy selector and return its result with context
        """
        discovered = await self.recorder.known_recipe_hosts()
        site_type = detect_site_type(url, discovered)
        config = get_parser_config(site_type)
        logger.info(f"Importing {url} as {site_type.value} with parser {config.version}")

        markup = html if html is not None else await self.fetch_markup(url, site_type)
        result, tried = await self.selector.execute_traced(url, site_type, markup, config)
        return ImportOutcome(
            url=url,
            site_type=site_type,
            parser_version=config.version,
            html_pattern=extract_html_pattern(markup, site_type),
            result=result,
            tried=tried,
        )

    async def fetch_markup(self, url: str, site_type: SiteType) -> str:
        """Desktop fetch, retried with the mobile user agent when social data is missing."""
        markup = ""
        try:
            markup = await self.fetcher.fetch_text(url, user_agent=settings.desktop_user_agent)
        except FetchError as e:
            logger.info(f"Desktop fetch failed for {url}: {e}")

        marker = SOCIAL_DATA_MARKERS.get(site_type)
        if marker is None or (markup and marker.search(markup)):
            return markup
        try:
            mobile = await self.fetcher.fetch_text(url, user_agent=settings.mobile_user_agent)
        except FetchError as e:
            logger.info(f"Mobile fetch failed for {url}: {e}")
            return markup
        return mobile if marker.search(mobile) or not markup else markup

    async def close(self) -> None:
        await self.recorder.drain()
