"""Versioned per-site-type strategy orderings."""

import logging
from typing import Dict, List

from services.recipe_extraction.models import ParserConfig, SiteType, StrategyName

logger = logging.getLogger(__name__)

S = StrategyName

DEFAULT_CONFIGS: Dict[SiteType, List[ParserConfig]] = {
    SiteType.TIKTOK: [
        ParserConfig(
            version="v1",
            strategies=(
                S.EMBEDDED_STATE,
                S.FRAMEWORK_DATA,
                S.META_TAGS,
                S.OEMBED,
                S.SANDBOX_DOM,
                S.OCR_SCREENSHOT,
            ),
        ),
        ParserConfig(
            version="v2",
            strategies=(S.EMBEDDED_STATE, S.STRUCTURED_DATA, S.OEMBED, S.OCR_SCREENSHOT),
            rollout_percentage=0,
            enabled=False,
        ),
    ],
    SiteType.INSTAGRAM: [
        ParserConfig(
            version="v1",
            strategies=(
                S.META_TAGS,
                S.STRUCTURED_DATA,
                S.EMBEDDED_STATE,
                S.SANDBOX_DOM,
                S.OCR_SCREENSHOT,
            ),
        ),
    ],
    SiteType.FACEBOOK: [
        ParserConfig(version="v1", strategies=(S.META_TAGS, S.SANDBOX_DOM, S.OCR_SCREENSHOT)),
    ],
    SiteType.RECIPE_SITE: [
        ParserConfig(version="v1", strategies=(S.STRUCTURED_DATA, S.META_TAGS)),
    ],
    SiteType.GENERIC: [
        ParserConfig(
            version="v1",
            strategies=(S.STRUCTURED_DATA, S.META_TAGS, S.OCR_SCREENSHOT),
        ),
    ],
}


def get_parser_config(site_type: SiteType) -> ParserConfig:
    """Enabled config with the highest rollout, falling back to the first (v1)."""
    configs = DEFAULT_CONFIGS.get(site_type) or DEFAULT_CONFIGS[SiteType.GENERIC]
    enabled = [config for config in configs if config.enabled]
    if not enabled:
        logger.warning(f"No enabled parser config for {site_type.value}, using {configs[0].version}")
        return configs[0]
    return max(enabled, key=lambda config: config.rollout_percentage)
