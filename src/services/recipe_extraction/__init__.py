"""
Recipe extraction package.

Recovers a structured recipe (title, ingredients, steps, image) from social
and recipe-publisher pages by running an adaptive, ordered list of extraction
strategies. The most commonly used functions are re-exported here.
"""

# Scoring and titles
from services.recipe_extraction.content_scorer import filter_by_score, score_content
from services.recipe_extraction.title_extractor import (
    clean_title,
    extract_title,
    is_valid_title,
    strip_boilerplate,
)
from services.recipe_extraction.caption_parser import parse_caption

# Page readers
from services.recipe_extraction.carriers import (
    CARRIER_READERS,
    challenge,
    pack_candidate,
    rank_candidates,
    read_carriers,
)
from services.recipe_extraction.fingerprint import extract_html_pattern
from services.recipe_extraction.site_parsers import RecipePublisherParser, parse_recipe_markup
from services.recipe_extraction.site_types import detect_site_type

# Models
from services.recipe_extraction.models import (
    Confidence,
    ExtractionAttempt,
    ExtractionResult,
    ImportOutcome,
    ParserConfig,
    SiteType,
    SourceCandidate,
    StrategyName,
)

# Pipeline
from services.recipe_extraction.parser_config import DEFAULT_CONFIGS, get_parser_config
from services.recipe_extraction.pattern_store import PatternRecorder, PatternStore, SqlPatternStore
from services.recipe_extraction.strategy_selector import StrategySelector, reorder_strategies
from services.recipe_extraction.orchestrator import RecipeImporter

__all__ = [
    # Scoring and titles
    "score_content",
    "filter_by_score",
    "extract_title",
    "clean_title",
    "is_valid_title",
    "strip_boilerplate",
    "parse_caption",
    # Page readers
    "CARRIER_READERS",
    "read_carriers",
    "pack_candidate",
    "rank_candidates",
    "challenge",
    "extract_html_pattern",
    "RecipePublisherParser",
    "parse_recipe_markup",
    "detect_site_type",
    # Models
    "Confidence",
    "ExtractionAttempt",
    "ExtractionResult",
    "ImportOutcome",
    "ParserConfig",
    "SiteType",
    "SourceCandidate",
    "StrategyName",
    # Pipeline
    "DEFAULT_CONFIGS",
    "get_parser_config",
    "PatternRecorder",
    "PatternStore",
    "SqlPatternStore",
    "StrategySelector",
    "reorder_strategies",
    "RecipeImporter",
]
