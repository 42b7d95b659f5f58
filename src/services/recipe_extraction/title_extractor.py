"""
Display-title extraction from free-form captions.

Candidates are tried in tiers, most specific first: recipe-shaped phrases,
quoted substrings, recipe-worded lines, Title-Case phrases and finally any
line that passes the generic validity check. Every candidate is cleaned and
validated; the first tier that yields a valid candidate wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

from constants.text_patterns import (
    FOOD_WORDS,
    MEASUREMENT_UNITS,
    PLATFORM_NAMES,
    RECIPE_WORD,
    SECTION_HEADER,
    WEAK_TITLES,
)
from services.recipe_extraction.config import (
    TITLE_CONFIDENCE_MARGIN,
    TITLE_MAX_LENGTH,
    TITLE_MIN_LENGTH,
    TITLE_PLACEHOLDER,
)

_PLATFORMS = "|".join(PLATFORM_NAMES)

_COUNTER_PREFIX = re.compile(
    r"^\s*[\d.,]+[KkMmBb]?\s+likes?,?\s*[\d.,]+[KkMmBb]?\s+comments?\s*[-–—]\s*[^:\n]+:\s*",
    re.IGNORECASE | re.MULTILINE,
)
_COUNTER_LINE = re.compile(
    r"^\s*[\d.,]+[KkMmBb]?\s+(?:likes?|comments?|views?|shares?)\b[^\n]*$",
    re.IGNORECASE | re.MULTILINE,
)
_SLOGAN = re.compile(r"tiktok\s*[-–—|]\s*make your day", re.IGNORECASE)
_PLATFORM_SUFFIX = re.compile(
    rf"\s*[|•\-–—]\s*(?:{_PLATFORMS})\s*$",
    re.IGNORECASE | re.MULTILINE,
)

_NAME_CHARS = r"[^.,!?\n@#:]"
_FOOD = "|".join(FOOD_WORDS)

# (pattern, confidence) for recipe-shaped phrases; group 1 is the candidate.
_RECIPE_PHRASES = [
    (re.compile(rf"\brecipe\s+for\s+({_NAME_CHARS}{{3,60}})", re.IGNORECASE), 0.9),
    (re.compile(rf"({_NAME_CHARS}{{3,60}}?)\s+recipe\b", re.IGNORECASE), 0.85),
    (re.compile(rf"\bhow\s+to\s+make\s+({_NAME_CHARS}{{3,60}})", re.IGNORECASE), 0.8),
    (
        re.compile(
            rf"\b(?:this|delicious|homemade|easy)\s+({_NAME_CHARS}{{0,50}}?\b(?:{_FOOD})\b)",
            re.IGNORECASE,
        ),
        0.7,
    ),
]

# Phrase captures that stop on a determiner ("check out my recipe") are filler.
_DETERMINER_TAIL = re.compile(r"\b(?:my|our|your|his|her|their|its|this|that|the|a|an)$", re.IGNORECASE)
_FILLER_WORDS = frozenset(
    "a an the my our your his her their its this that these here is it's it to of for and "
    "with check out try i we you me us new".split()
)

_QUOTED = re.compile(r"[\"“”]([^\"“”\n]{3,80})[\"“”]")
_LINE_SPLIT = re.compile(r"\s*[~|\n•]\s*")
_TITLE_CASE_PHRASE = re.compile(r"\b([A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+){1,4})\b")

_LEADING_HANDLES = re.compile(r"^(?:[#@][\w.\-]+[\s,:\-]*){1,4}")
_INTRO_VERBS = re.compile(
    r"^(?:made|making|try|trying|tried|cook|cooking|baking|how\s+to\s+make)\s+",
    re.IGNORECASE,
)
_QUOTE_CHARS = re.compile(r"[\"“”]")
_EDGE_EMOJI = re.compile(r"^[\U0001F000-\U0001FAFF☀-➿️\s]+|[\U0001F000-\U0001FAFF☀-➿️\s]+$")
_TRAILING_PUNCT = re.compile(r"[\s.,!?;:\-–—~|'‘’]+$")
_LEADING_PUNCT = re.compile(r"^[\s\-–—~|:•'‘’]+")

_ONLY_HANDLES = re.compile(r"(?:[@#][\w.\-]+\s*)+")
_ONLY_DIGITS = re.compile(r"[\d\s.,/]+")
_LEADING_SECTION = re.compile(
    r"^\s*(?:ingredients?|steps?|directions?|method|instructions?)\s*:", re.IGNORECASE
)
_BARE_MEASUREMENT = re.compile(
    r"^[\d¼-¾⅐-⅞/.\s]+(?:" + "|".join(MEASUREMENT_UNITS) + r")\b",
    re.IGNORECASE,
)
_HAS_LETTER = re.compile(r"[^\W\d_]")


@dataclass(frozen=True)
class TitleCandidate:
    text: str
    confidence: float


def strip_boilerplate(text: Optional[str]) -> str:
    """Remove platform counters, slogans and trailing platform suffixes.

    Applied until nothing changes, so stripping already-stripped text is a
    no-op.
    """
    current = text or ""
    while True:
        stripped = _strip_once(current)
        if stripped == current:
            return stripped
        current = stripped


def _strip_once(text: str) -> str:
    text = _COUNTER_PREFIX.sub("", text)
    text = _COUNTER_LINE.sub("", text)
    text = _SLOGAN.sub("", text)
    text = _PLATFORM_SUFFIX.sub("", text)
    text = "\n".join(line.rstrip() for line in text.split("\n"))
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def clean_title(raw: Optional[str]) -> str:
    """Normalize a raw candidate into display form."""
    title = _QUOTE_CHARS.sub("", raw or "")
    title = " ".join(title.split())
    title = _LEADING_HANDLES.sub("", title)
    title = _INTRO_VERBS.sub("", title)
    title = _EDGE_EMOJI.sub("", title)
    title = _LEADING_PUNCT.sub("", title)
    title = _TRAILING_PUNCT.sub("", title)
    return title.strip()


def is_valid_title(title: Optional[str]) -> bool:
    if not title:
        return False
    title = title.strip()
    if not TITLE_MIN_LENGTH <= len(title) <= TITLE_MAX_LENGTH:
        return False
    if title.lower() in WEAK_TITLES:
        return False
    if _ONLY_HANDLES.fullmatch(title) or _ONLY_DIGITS.fullmatch(title):
        return False
    if SECTION_HEADER.match(title) or _LEADING_SECTION.match(title):
        return False
    if _BARE_MEASUREMENT.match(title):
        return False
    return bool(_HAS_LETTER.search(title))


def extract_title(text: Optional[str]) -> str:
    """Derive a short display title; never empty, never longer than the cap."""
    cleaned = strip_boilerplate(text)
    if not cleaned:
        return TITLE_PLACEHOLDER

    for tier in (_recipe_phrase_candidates, _quoted_candidates):
        chosen = _choose(tier(cleaned))
        if chosen:
            return chosen.text

    for finder in (_recipe_line, _title_case_phrase, _generic_line):
        found = finder(cleaned)
        if found:
            return found

    return TITLE_PLACEHOLDER


def _recipe_phrase_candidates(text: str) -> List[TitleCandidate]:
    candidates = []
    for pattern, confidence in _RECIPE_PHRASES:
        for match in pattern.finditer(text):
            title = clean_title(match.group(1))
            if is_valid_title(title) and not _is_filler(title):
                candidates.append(TitleCandidate(title, confidence))
                break
    return candidates


def _is_filler(title: str) -> bool:
    if _DETERMINER_TAIL.search(title):
        return True
    words = title.lower().split()
    return sum(word in _FILLER_WORDS for word in words) * 2 > len(words)


def _quoted_candidates(text: str) -> List[TitleCandidate]:
    candidates = []
    for match in _QUOTED.finditer(text):
        title = clean_title(match.group(1))
        if is_valid_title(title):
            candidates.append(TitleCandidate(title, 0.6))
    return candidates


def _choose(candidates: Iterable[TitleCandidate]) -> Optional[TitleCandidate]:
    """Longest candidate among those within the confidence margin of the best."""
    candidates = list(candidates)
    if not candidates:
        return None
    top = max(candidate.confidence for candidate in candidates)
    eligible = [c for c in candidates if top - c.confidence <= TITLE_CONFIDENCE_MARGIN]
    return max(eligible, key=lambda c: len(c.text))


def _lines(text: str) -> List[str]:
    return [line for line in _LINE_SPLIT.split(text) if line.strip()]


def _recipe_line(text: str) -> Optional[str]:
    for line in _lines(text):
        title = clean_title(line)
        if is_valid_title(title) and RECIPE_WORD.search(title):
            return title
    return None


def _title_case_phrase(text: str) -> Optional[str]:
    for match in _TITLE_CASE_PHRASE.finditer(text):
        title = clean_title(match.group(1))
        if is_valid_title(title):
            return title
    return None


def _generic_line(text: str) -> Optional[str]:
    for line in _lines(text):
        title = clean_title(line)
        if is_valid_title(title):
            return title
    return None
