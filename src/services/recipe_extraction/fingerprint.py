"""Structural fingerprint of page markup used to key learned patterns."""

import re
from typing import List, Optional

from services.recipe_extraction.models import SiteType

MIN_MARKUP_LENGTH = 100
TOO_SHORT = "too-short"
GENERIC = "generic"

_FEATURES = [
    ("has-jsonld", re.compile(r"application/ld\+json", re.IGNORECASE)),
    ("has-jsonld-recipe", re.compile(r"\"@type\"\s*:\s*(?:\[[^\]]*)?\"Recipe\"")),
    ("has-microdata", re.compile(r"itemtype=[\"']https?://schema\.org/Recipe", re.IGNORECASE)),
    ("has-next-data", re.compile(r"id=[\"']__NEXT_DATA__[\"']")),
    ("has-og-description", re.compile(r"property=[\"']og:description[\"']", re.IGNORECASE)),
    ("has-amp", re.compile(r"rel=[\"']amphtml[\"']", re.IGNORECASE)),
]

_SITE_FEATURES = {
    SiteType.TIKTOK: [
        ("has-sigi", re.compile(r"SIGI_STATE")),
        ("has-item-module", re.compile(r"ItemModule")),
        ("has-universal-data", re.compile(r"__UNIVERSAL_DATA_FOR_REHYDRATION__")),
    ],
    SiteType.INSTAGRAM: [
        ("has-shared-data", re.compile(r"_sharedData")),
        ("has-edge-media", re.compile(r"edge_media_to_caption")),
    ],
}

_CONTENT_FEATURES = [
    ("mentions-ingredients", re.compile(r"ingredients?", re.IGNORECASE)),
    ("mentions-steps", re.compile(r"instructions|directions|steps", re.IGNORECASE)),
    ("has-recipe-keyword", re.compile(r"recipe", re.IGNORECASE)),
]


def extract_html_pattern(markup: Optional[str], site_type: SiteType) -> str:
    """Return a '|'-joined list of structural features present in markup.

    Only presence of features matters, so whitespace, ids and copy changes do
    not move a page to a different fingerprint while a redesign that drops or
    adds a data carrier does.
    """
    if not markup or len(markup) < MIN_MARKUP_LENGTH:
        return TOO_SHORT

    features: List[str] = []
    for name, pattern in _FEATURES + _SITE_FEATURES.get(site_type, []) + _CONTENT_FEATURES:
        if pattern.search(markup):
            features.append(name)
    return "|".join(features) if features else GENERIC
