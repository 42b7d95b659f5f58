"""Split free-form captions into ingredient lines and step lines."""

from __future__ import annotations

import re
from typing import Iterable, List, Tuple

from constants.text_patterns import SECTION_HEADER

_LINK = re.compile(r"https?://\S+", re.IGNORECASE)
_HASHTAG = re.compile(r"#[\w]+")
_INLINE_SPACE = re.compile(r"[ \t ]+")

_SECTIONS = re.compile(
    r"(?:^[ \t]*ingredients?\b[ \t]*:?|\bingredients?[ \t]*:)\s*(?P<ingredients>.*?)"
    r"(?:\b(?:directions?|steps?|method|instructions?)\b\s*:?\s*(?P<steps>.*))?\Z",
    re.IGNORECASE | re.DOTALL | re.MULTILINE,
)
_STEPS_WORD_TAIL = re.compile(r"\b(?:directions?|steps?|method|instructions?)\b.*$", re.IGNORECASE | re.DOTALL)
_INGREDIENT_SPLIT = re.compile(r"\n|;|\||(?<!\w)-\s|[•·▪▫►▶]")
_COMMA_OUTSIDE_PARENS = re.compile(r",(?![^()]*\))")
_LEADING_BULLET = re.compile(r"^[\s\-–•·>.*]+")
_SENTENCE_BREAK = re.compile(r"[.!?]\s*[A-Z]")
_JUNK_WORDS = re.compile(r"^(?:and|or|with|plus)$", re.IGNORECASE)

_NUMBERED_SPLIT = re.compile(r"\s*\b(?:\d+\s*[.)]|step\s*\d+\s*[.):]?)\s*", re.IGNORECASE)
_LOOSE_SPLIT = re.compile(r"\n|[•\-–]|(?<=\.)\s+")
_COOKING_VERB = re.compile(
    r"\b(?:preheat|heat|mix|stir|combine|whisk|bake|sear|cook|transfer|add|pour|let|rest|"
    r"serve|season|fold|press|slice|cut|boil|simmer|broil|grill|cool|melt|chop|toss|blend)\b",
    re.IGNORECASE,
)
_DURATION = re.compile(r"\d+\s*(?:-|–|—|to)\s*\d+\s*(?:min|minutes|secs|seconds|hours?)", re.IGNORECASE)

_FOODISH = re.compile(
    r"\b(?:salt|pepper|flour|sugar|butter|oil|garlic|onion|egg|eggs|cheese|cream|milk|vanilla|"
    r"baking|chicken|beef|pork|shrimp|tomato|lemon|lime|rice|pasta|oregano|seasoning|powder|"
    r"broth|buttermilk|honey|soy sauce|parsley|basil)\b",
    re.IGNORECASE,
)
_UNITISH = re.compile(
    r"\b(?:cups?|tsps?|tbsps?|teaspoons?|tablespoons?|oz|ounces?|lbs?|g|kg|ml|l)\b|\d/\d|\d|[½¼¾]",
    re.IGNORECASE,
)
_CHUNK_SPLIT = re.compile(r"\n|[•·;]| - ")

MAX_INGREDIENT_LENGTH = 120
MAX_INFERRED_INGREDIENT_LENGTH = 90
MIN_STEP_LENGTH = 6
MIN_SECTIONED_INGREDIENTS = 2


def parse_caption(caption: str) -> Tuple[List[str], List[str]]:
    """Return (ingredients, steps) read out of a caption.

    Captions with an explicit ingredients header are split by section; others
    fall back to reading short food-like chunks as ingredients until the first
    instruction-like chunk.
    """
    if not caption:
        return [], []
    text = _prepare(caption)

    sections = _SECTIONS.search(text)
    if sections:
        ingredients = clean_ingredient_block(sections.group("ingredients") or "")
        steps = split_directions(sections.group("steps") or "")
        if len(ingredients) >= MIN_SECTIONED_INGREDIENTS:
            return ingredients, steps

    chunks = [chunk.strip() for chunk in _CHUNK_SPLIT.split(text) if chunk.strip()]
    return infer_ingredients_then_steps(chunks)


def _prepare(caption: str) -> str:
    text = caption.replace("\r", "")
    text = _LINK.sub(" ", text)
    text = _HASHTAG.sub(" ", text)
    lines = [_INLINE_SPACE.sub(" ", line).strip() for line in text.split("\n")]
    return "\n".join(line for line in lines if line)


def clean_ingredient_block(block: str) -> List[str]:
    block = _STEPS_WORD_TAIL.sub("", block).strip()
    if not block:
        return []

    rough = [_LEADING_BULLET.sub("", part).strip() for part in _INGREDIENT_SPLIT.split(block)]
    rough = [part for part in rough if part]
    if len(rough) < 2:
        rough = [part.strip() for part in _COMMA_OUTSIDE_PARENS.split(block)]

    lines = [
        line
        for line in rough
        if line
        and not line.lower().startswith("http")
        and not line.startswith("@")
        and len(line) <= MAX_INGREDIENT_LENGTH
        and not _SENTENCE_BREAK.search(line)
        and not _JUNK_WORDS.match(line)
        and not SECTION_HEADER.match(line)
    ]
    return normalize_ingredient_lines(merge_salt_pepper(lines))


def merge_salt_pepper(lines: List[str]) -> List[str]:
    merged: List[str] = []
    index = 0
    while index < len(lines):
        current = lines[index]
        following = lines[index + 1] if index + 1 < len(lines) else ""
        if re.fullmatch(r"salt", current, re.IGNORECASE) and re.match(r"pepper\b", following, re.IGNORECASE):
            merged.append("Salt and pepper to taste")
            index += 2
            continue
        merged.append(current)
        index += 1
    return merged


def split_directions(text: str) -> List[str]:
    if not text:
        return []
    cleaned = _HASHTAG.sub(" ", _LINK.sub(" ", text)).strip()

    numbered = [part.strip() for part in _NUMBERED_SPLIT.split(cleaned) if part.strip()]
    if len(numbered) > 1 or (numbered and _NUMBERED_SPLIT.match(cleaned)):
        return [_trim_trailing_punct(part) for part in numbered]

    loose = [part.strip() for part in _LOOSE_SPLIT.split(cleaned) if part and part.strip()]
    steps = [
        part
        for part in loose
        if len(part) >= MIN_STEP_LENGTH and (_COOKING_VERB.search(part) or _DURATION.search(part))
    ]
    return [_trim_trailing_punct(step) for step in steps]


def infer_ingredients_then_steps(chunks: Iterable[str]) -> Tuple[List[str], List[str]]:
    ingredients: List[str] = []
    steps: List[str] = []
    in_ingredients = True
    for chunk in chunks:
        has_verb = bool(_COOKING_VERB.search(chunk))
        looks_like_ingredient = (
            bool(_FOODISH.search(chunk) or _UNITISH.search(chunk))
            and len(chunk) <= MAX_INFERRED_INGREDIENT_LENGTH
            and not _SENTENCE_BREAK.search(chunk)
        )
        if in_ingredients and looks_like_ingredient and not has_verb:
            ingredients.append(_LEADING_BULLET.sub("", chunk))
            continue
        in_ingredients = False
        if len(chunk) >= MIN_STEP_LENGTH:
            steps.append(_trim_trailing_punct(chunk))
    return normalize_ingredient_lines(ingredients), steps


def normalize_ingredient_lines(lines: Iterable[str]) -> List[str]:
    """Tidy bullets and whitespace, drop empties and case-insensitive duplicates."""
    seen = set()
    normalized = []
    for line in lines:
        tidy = _trim_trailing_punct(" ".join(_LEADING_BULLET.sub("", line or "").split()))
        key = tidy.lower()
        if not tidy or key in seen:
            continue
        seen.add(key)
        normalized.append(tidy)
    return normalized


def _trim_trailing_punct(text: str) -> str:
    return re.sub(r"[\s.,;:]+$", "", text).strip()
