"""
Strategy selector: runs an ordered list of strategies until one succeeds.

States: not started -> trying(strategy_i)* -> succeeded | exhausted.
The first successful strategy ends the attempt; its result is returned as is
so every field comes from a single strategy. Each execution (success or
failure) is recorded in the pattern store in the background.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from config import settings
from services.recipe_extraction.fetcher import PageFetcher
from services.recipe_extraction.fingerprint import extract_html_pattern
from services.recipe_extraction.models import (
    ExtractionAttempt,
    ExtractionResult,
    ParserConfig,
    SiteType,
    StrategyName,
)
from services.recipe_extraction.pattern_store import PatternRecorder
from services.recipe_extraction.sandbox import RenderingSandbox, ScreenshotReader
from services.recipe_extraction.strategies import STRATEGIES, Strategy, StrategyContext

logger = logging.getLogger(__name__)

ALL_STRATEGIES_FAILED = "All extraction strategies failed"
DEFAULT_STRATEGY = StrategyName.META_TAGS


def reorder_strategies(
    strategies: Iterable[StrategyName],
    preferred: Optional[StrategyName],
) -> List[StrategyName]:
    """Move preferred to the front; everything else keeps its relative order."""
    ordered = list(strategies)
    if preferred is None or preferred not in ordered:
        return ordered
    return [preferred] + [strategy for strategy in ordered if strategy != preferred]


class StrategySelector:
    def __init__(
        self,
        recorder: PatternRecorder,
        fetcher: Optional[PageFetcher] = None,
        sandbox: Optional[RenderingSandbox] = None,
        screenshot_reader: Optional[ScreenshotReader] = None,
        strategies: Optional[Dict[StrategyName, Strategy]] = None,
        strategy_timeout: Optional[float] = None,
    ):
        self.recorder = recorder
        self.fetcher = fetcher or PageFetcher()
        self.sandbox = sandbox
        self.screenshot_reader = screenshot_reader
        self.strategies = strategies if strategies is not None else STRATEGIES
        self.strategy_timeout = strategy_timeout or settings.strategy_timeout_seconds

    async def plan(
        self,
        site_type: SiteType,
        page_markup: str,
        config: ParserConfig,
    ) -> Tuple[str, List[StrategyName]]:
        html_pattern = extract_html_pattern(page_markup, site_type)
        preferred = await self.recorder.best_method(site_type, html_pattern)
        ordered = reorder_strategies(config.strategies, preferred)
        if preferred is not None:
            logger.info(f"Learned strategy {preferred.value} first for {site_type.value}/{html_pattern}")
        return html_pattern, ordered

    async def execute(
        self,
        url: str,
        site_type: SiteType,
        page_markup: Optional[str],
        config: ParserConfig,
    ) -> ExtractionResult:
        """Run the configured strategies for one URL.

        Never raises for strategy faults: exceptions and timeouts become
        failure results, and exhausting the list yields a low-confidence
        failure attributed to the last strategy tried. Cancellation of the
        caller propagates and no result is produced.
        """
        result, _ = await self.execute_traced(url, site_type, page_markup, config)
        return result

    async def execute_traced(
        self,
        url: str,
        site_type: SiteType,
        page_markup: Optional[str],
        config: ParserConfig,
    ) -> Tuple[ExtractionResult, Tuple[StrategyName, ...]]:
        markup = page_markup or ""
        html_pattern, ordered = await self.plan(site_type, markup, config)
        context = StrategyContext(
            url=url,
            site_type=site_type,
            markup=markup,
            fetcher=self.fetcher,
            sandbox=self.sandbox,
            screenshot_reader=self.screenshot_reader,
            on_recipe_site_discovered=self.recorder.record_discovery,
        )

        tried: List[StrategyName] = []
        for strategy in ordered:
            tried.append(strategy)
            result = await self._run(strategy, context)
            self.recorder.record(self._attempt(url, site_type, config, html_pattern, markup, result))
            if result.success:
                logger.info(f"Extracted {url} with {strategy.value} ({result.confidence.value})")
                return result, tuple(tried)
            logger.info(f"Strategy {strategy.value} failed for {url}: {result.error}")

        last = tried[-1] if tried else (config.strategies[-1] if config.strategies else DEFAULT_STRATEGY)
        return ExtractionResult.failure(last, ALL_STRATEGIES_FAILED), tuple(tried)

    async def _run(self, strategy: StrategyName, context: StrategyContext) -> ExtractionResult:
        runner = self.strategies.get(strategy)
        if runner is None:
            return ExtractionResult.failure(strategy, f"Strategy {strategy.value} is not implemented")
        try:
            result = await asyncio.wait_for(runner(context), self.strategy_timeout)
        except asyncio.TimeoutError:
            return ExtractionResult.failure(strategy, f"Timed out after {self.strategy_timeout:.1f}s")
        except Exception as e:
            logger.warning(f"Strategy {strategy.value} raised for {context.url}: {e!r}")
            return ExtractionResult.failure(strategy, f"{type(e).__name__}: {e}")
        if not isinstance(result, ExtractionResult):
            return ExtractionResult.failure(strategy, "Strategy returned no result")
        return result.attributed_to(strategy)

    @staticmethod
    def _attempt(
        url: str,
        site_type: SiteType,
        config: ParserConfig,
        html_pattern: str,
        markup: str,
        result: ExtractionResult,
    ) -> ExtractionAttempt:
        return ExtractionAttempt(
            url=url,
            site_type=site_type,
            parser_version=config.version,
            strategy_used=result.strategy_used,
            success=result.success,
            html_pattern=html_pattern,
            confidence=result.confidence if result.success else None,
            ingredients_count=len(result.ingredients),
            steps_count=len(result.steps),
            error_message=result.error,
            raw_html_sample=None if result.success else markup[: settings.raw_html_sample_chars] or None,
        )
