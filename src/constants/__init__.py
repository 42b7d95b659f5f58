from constants.recipe_sites import AMP_RECIPE_SITES, KNOWN_RECIPE_SITES, SITE_DISPLAY_NAMES
from constants.text_patterns import (
    BULLET_LINE,
    FOOD_WORDS,
    FRACTION_OR_DIGIT,
    INGREDIENTS_MARKER,
    NUMBERED_LINE,
    PLATFORM_NAMES,
    PROMO_PHRASES,
    RECIPE_MARKERS,
    RECIPE_WORD,
    SECTION_HEADER,
    STEPS_MARKER,
    UNIT_TOKEN,
    WEAK_TITLES,
)

__all__ = [
    "AMP_RECIPE_SITES",
    "KNOWN_RECIPE_SITES",
    "SITE_DISPLAY_NAMES",
    "BULLET_LINE",
    "FOOD_WORDS",
    "FRACTION_OR_DIGIT",
    "INGREDIENTS_MARKER",
    "NUMBERED_LINE",
    "PLATFORM_NAMES",
    "PROMO_PHRASES",
    "RECIPE_MARKERS",
    "RECIPE_WORD",
    "SECTION_HEADER",
    "STEPS_MARKER",
    "UNIT_TOKEN",
    "WEAK_TITLES",
]
