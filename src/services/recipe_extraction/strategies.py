"""
Named extraction strategies.

Each strategy reads one carrier (or calls a site parser, the sandbox, the OCR
reader or the oEmbed API) and turns what it found into an ExtractionResult.
Strategies report their own failures as failure results; exceptions that do
escape are normalized by the strategy selector.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cached_property
from typing import Awaitable, Callable, Dict, Optional
from urllib.parse import quote

from config import settings
from services.recipe_extraction.caption_parser import parse_caption
from services.recipe_extraction.carriers import (
    best_candidate,
    challenge,
    read_carriers,
    read_embedded_state,
    read_framework_data,
    read_meta_tags,
    read_structured_data,
)
from services.recipe_extraction.config import HIGH_CONFIDENCE_MIN_INGREDIENTS, TITLE_PLACEHOLDER
from services.recipe_extraction.fetcher import PageFetcher
from services.recipe_extraction.models import (
    CONFIDENCE_SCORES,
    CarrierReading,
    Confidence,
    ExtractionResult,
    ParsedRecipe,
    SiteType,
    StrategyName,
)
from services.recipe_extraction.page import PageSurface
from services.recipe_extraction.sandbox import RenderingSandbox, SandboxError, SandboxTimeout, ScreenshotReader
from services.recipe_extraction.site_parsers import parse_recipe_markup, site_parser_for
from services.recipe_extraction.site_types import hostname
from services.recipe_extraction.title_extractor import clean_title, extract_title, is_valid_title

logger = logging.getLogger(__name__)

TIKTOK_OEMBED_URL = "https://www.tiktok.com/oembed?url={url}"

DiscoveryHook = Callable[[str, str], None]


@dataclass
class StrategyContext:
    url: str
    site_type: SiteType
    markup: str
    fetcher: PageFetcher
    sandbox: Optional[RenderingSandbox] = None
    screenshot_reader: Optional[ScreenshotReader] = None
    on_recipe_site_discovered: Optional[DiscoveryHook] = None

    @cached_property
    def page(self) -> PageSurface:
        return PageSurface(self.markup, self.url)


Strategy = Callable[[StrategyContext], Awaitable[ExtractionResult]]


def caption_confidence(ingredients_count: int, steps_count: int) -> Confidence:
    if ingredients_count >= HIGH_CONFIDENCE_MIN_INGREDIENTS and steps_count:
        return Confidence.HIGH
    if ingredients_count >= HIGH_CONFIDENCE_MIN_INGREDIENTS or steps_count:
        return Confidence.MEDIUM
    return Confidence.LOW


def _cap(confidence: Confidence, ceiling: Optional[Confidence]) -> Confidence:
    if ceiling is not None and CONFIDENCE_SCORES[confidence] > CONFIDENCE_SCORES[ceiling]:
        return ceiling
    return confidence


def caption_result(
    strategy: StrategyName,
    caption: str,
    image: Optional[str] = None,
    fallback_title: Optional[str] = None,
    ceiling: Optional[Confidence] = None,
) -> ExtractionResult:
    ingredients, steps = parse_caption(caption)
    if not ingredients:
        return ExtractionResult.failure(strategy, "No ingredients found in caption")

    title = extract_title(caption)
    if title == TITLE_PLACEHOLDER and fallback_title:
        cleaned = clean_title(fallback_title)
        if is_valid_title(cleaned):
            title = cleaned
    return ExtractionResult(
        success=True,
        strategy_used=strategy,
        confidence=_cap(caption_confidence(len(ingredients), len(steps)), ceiling),
        title=title,
        ingredients=tuple(ingredients),
        steps=tuple(steps),
        image=image,
    )


def reading_result(
    strategy: StrategyName,
    reading: CarrierReading,
    image: Optional[str] = None,
    fallback_title: Optional[str] = None,
    ceiling: Optional[Confidence] = None,
) -> ExtractionResult:
    """Parse the caption alone, then caption plus annotations."""
    if reading.is_empty:
        return ExtractionResult.failure(strategy, f"No {strategy.value} content found")
    result = caption_result(strategy, reading.caption, image, fallback_title, ceiling)
    if result.success or not reading.annotations:
        return result
    combined = "\n\n".join(part for part in (reading.caption, *reading.annotations) if part)
    return caption_result(strategy, combined, image, fallback_title, ceiling)


def recipe_result(strategy: StrategyName, parsed: Optional[ParsedRecipe]) -> ExtractionResult:
    if parsed is None or not parsed.has_recipe_data:
        return ExtractionResult.failure(strategy, "No structured recipe found")
    confidence = Confidence.HIGH if parsed.ingredients and parsed.steps else Confidence.MEDIUM
    return ExtractionResult(
        success=True,
        strategy_used=strategy,
        confidence=confidence,
        title=parsed.title,
        ingredients=parsed.ingredients,
        steps=parsed.steps,
        image=parsed.image,
    )


def _og_image(page: PageSurface) -> Optional[str]:
    return page.meta("og:image", "twitter:image")


async def embedded_state(ctx: StrategyContext) -> ExtractionResult:
    return reading_result(StrategyName.EMBEDDED_STATE, read_embedded_state(ctx.page), _og_image(ctx.page))


async def framework_data(ctx: StrategyContext) -> ExtractionResult:
    return reading_result(StrategyName.FRAMEWORK_DATA, read_framework_data(ctx.page), _og_image(ctx.page))


async def structured_data(ctx: StrategyContext) -> ExtractionResult:
    strategy = StrategyName.STRUCTURED_DATA
    parser = site_parser_for(ctx.site_type, ctx.fetcher)
    if parser is not None:
        return recipe_result(strategy, await parser.parse(ctx.url, ctx.markup or None))

    parsed = parse_recipe_markup(ctx.markup, ctx.url)
    if parsed is not None and parsed.has_recipe_data:
        if ctx.on_recipe_site_discovered and ctx.site_type == SiteType.GENERIC:
            ctx.on_recipe_site_discovered(hostname(ctx.url), parsed.source)
        return recipe_result(strategy, parsed)
    return reading_result(strategy, read_structured_data(ctx.page), _og_image(ctx.page))


async def meta_tags(ctx: StrategyContext) -> ExtractionResult:
    return reading_result(
        StrategyName.META_TAGS,
        read_meta_tags(ctx.page),
        _og_image(ctx.page),
        fallback_title=ctx.page.meta("og:title", "twitter:title"),
    )


async def sandbox_dom(ctx: StrategyContext) -> ExtractionResult:
    strategy = StrategyName.SANDBOX_DOM
    if ctx.sandbox is None:
        return ExtractionResult.failure(strategy, "No rendering sandbox available")

    sandbox_page = await ctx.sandbox.open(ctx.url, user_agent=settings.mobile_user_agent)
    try:
        first = PageSurface(await sandbox_page.snapshot(settings.sandbox_settle_ms), ctx.url)
        chosen = best_candidate(await read_carriers(first))
        try:
            later = await sandbox_page.snapshot(settings.sandbox_challenger_settle_ms)
            chosen = await challenge(chosen, PageSurface(later, ctx.url))
        except (SandboxTimeout, SandboxError) as e:
            logger.info(f"Challenger snapshot failed for {ctx.url}, keeping first read: {e!r}")
    finally:
        await sandbox_page.close()

    if chosen is None:
        return ExtractionResult.failure(strategy, "All carriers were empty")
    logger.debug(f"DOM carrier {chosen.key} chosen for {ctx.url} (score {chosen.score:.1f})")
    reading = CarrierReading(caption=chosen.caption, annotations=chosen.annotations)
    return reading_result(strategy, reading, _og_image(first))


async def ocr_screenshot(ctx: StrategyContext) -> ExtractionResult:
    strategy = StrategyName.OCR_SCREENSHOT
    if ctx.screenshot_reader is None:
        return ExtractionResult.failure(strategy, "No screenshot reader available")
    text = await ctx.screenshot_reader.read_text(ctx.url)
    return reading_result(strategy, CarrierReading(caption=text or ""), ceiling=Confidence.MEDIUM)


async def oembed(ctx: StrategyContext) -> ExtractionResult:
    strategy = StrategyName.OEMBED
    if ctx.site_type != SiteType.TIKTOK:
        return ExtractionResult.failure(strategy, f"oEmbed not available for {ctx.site_type.value}")
    data = await ctx.fetcher.fetch_json(TIKTOK_OEMBED_URL.format(url=quote(ctx.url, safe="")))
    if not isinstance(data, dict):
        return ExtractionResult.failure(strategy, "Unexpected oEmbed payload")
    caption = data.get("title") if isinstance(data.get("title"), str) else ""
    image = data.get("thumbnail_url") if isinstance(data.get("thumbnail_url"), str) else None
    return reading_result(strategy, CarrierReading(caption=caption), image)


STRATEGIES: Dict[StrategyName, Strategy] = {
    StrategyName.EMBEDDED_STATE: embedded_state,
    StrategyName.FRAMEWORK_DATA: framework_data,
    StrategyName.STRUCTURED_DATA: structured_data,
    StrategyName.META_TAGS: meta_tags,
    StrategyName.SANDBOX_DOM: sandbox_dom,
    StrategyName.OCR_SCREENSHOT: ocr_screenshot,
    StrategyName.OEMBED: oembed,
}
