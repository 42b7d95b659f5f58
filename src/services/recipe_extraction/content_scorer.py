"""Heuristic scoring of how recipe-like a piece of text is."""

from typing import Iterable, List, Optional

from constants.text_patterns import (
    BULLET_LINE,
    FRACTION_OR_DIGIT,
    INGREDIENTS_MARKER,
    NUMBERED_LINE,
    PROMO_PHRASES,
    RECIPE_MARKERS,
    STEPS_MARKER,
    UNIT_TOKEN,
)
from services.recipe_extraction.config import ScoringWeights

DEFAULT_WEIGHTS = ScoringWeights.default()


def score_content(text: Optional[str], weights: ScoringWeights = DEFAULT_WEIGHTS) -> float:
    """Score text for recipe-ness.

    Weighted additive heuristic: structural markers (ingredient/step headers,
    measurement units, list lines) add to the score, hashtag-heavy and
    promotional text subtracts, and a capped length bonus rewards substance.
    Always returns a finite float; empty or missing text scores 0.
    """
    if not text:
        return 0.0

    score = 0.0
    if INGREDIENTS_MARKER.search(text):
        score += weights.ingredients_marker
    if STEPS_MARKER.search(text):
        score += weights.steps_marker
    score += weights.per_unit * len(UNIT_TOKEN.findall(text))
    if FRACTION_OR_DIGIT.search(text):
        score += weights.digit_or_fraction
    if BULLET_LINE.search(text):
        score += weights.bullet_line
    if NUMBERED_LINE.search(text):
        score += weights.numbered_line
    if any(marker in text for marker in RECIPE_MARKERS):
        score += weights.recipe_marker
    if _hashtag_density(text) > weights.hashtag_density_limit:
        score += weights.hashtag_penalty
    if PROMO_PHRASES.search(text):
        score += weights.promo_penalty
    score += min(len(text), weights.length_cap) / weights.length_divisor
    return score


def filter_by_score(
    texts: Iterable[str],
    threshold: float,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> List[str]:
    """Keep only texts scoring at or above the threshold, in input order."""
    return [text for text in texts if text and score_content(text, weights) >= threshold]


def _hashtag_density(text: str) -> float:
    return text.count("#") / max(1, len(text))
