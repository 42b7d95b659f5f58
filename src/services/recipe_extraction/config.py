"""
Tunable constants for recipe extraction.

Scoring weights, carrier thresholds and title confidences live here so they
can be adjusted without touching the pipeline code. Numeric thresholds can be
overridden through the environment.
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class ScoringWeights:
    ingredients_marker: float
    steps_marker: float
    per_unit: float
    digit_or_fraction: float
    bullet_line: float
    numbered_line: float
    recipe_marker: float
    hashtag_penalty: float
    promo_penalty: float
    hashtag_density_limit: float
    length_cap: int
    length_divisor: float

    @classmethod
    def default(cls) -> "ScoringWeights":
        return cls(
            ingredients_marker=500.0,
            steps_marker=360.0,
            per_unit=70.0,
            digit_or_fraction=80.0,
            bullet_line=80.0,
            numbered_line=90.0,
            recipe_marker=40.0,
            hashtag_penalty=-60.0,
            promo_penalty=-120.0,
            hashtag_density_limit=0.02,
            length_cap=1600,
            length_divisor=8.0,
        )


# Carrier readers
ANNOTATION_MIN_SCORE = float(os.getenv("ANNOTATION_MIN_SCORE", "140"))
ALT_TEXT_MIN_SCORE = float(os.getenv("ALT_TEXT_MIN_SCORE", "140"))
ALT_TEXT_MAX_ANNOTATIONS = 8
VIDEO_ALT_TEXT_WEIGHT = 0.5
PHOTO_ALT_TEXT_WEIGHT = 1.0

# Title extractor
TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 72
TITLE_PLACEHOLDER = "Recipe"
TITLE_CONFIDENCE_MARGIN = 0.15

# Strategy outcomes
HIGH_CONFIDENCE_MIN_INGREDIENTS = 3
