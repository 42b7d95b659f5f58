"""
Carrier readers: independent best-effort readers over one page snapshot.

Each reader pulls a caption and an annotation list (comments, alt texts) from
one surface of the page. Readers never raise; any failure yields an empty
reading. Readings are packed into scored SourceCandidates and ranked by
(score desc, raw length desc).
"""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from services.recipe_extraction.config import (
    ALT_TEXT_MAX_ANNOTATIONS,
    ALT_TEXT_MIN_SCORE,
    ANNOTATION_MIN_SCORE,
    PHOTO_ALT_TEXT_WEIGHT,
    VIDEO_ALT_TEXT_WEIGHT,
)
from services.recipe_extraction.content_scorer import filter_by_score, score_content
from services.recipe_extraction.json_paths import (
    find_first_key,
    first_str,
    get_at_path,
    get_str_at_path,
    iter_values,
)
from services.recipe_extraction.models import CarrierReading, SourceCandidate
from services.recipe_extraction.page import PageSurface

logger = logging.getLogger(__name__)

Reader = Callable[[PageSurface], CarrierReading]

EMBEDDED_STATE = "embedded-state"
FRAMEWORK_DATA = "framework-data"
STRUCTURED_DATA = "structured-data"
META_TAGS = "meta-tags"
VISIBLE_TEXT = "visible-text"
ALT_TEXT = "alt-text"

DESCRIPTION_SELECTORS = [
    '[data-e2e="browse-video-desc"]',
    '[data-e2e="video-desc"]',
    '[data-e2e="aweme-desc"]',
    '[data-testid="post-caption"]',
    'article h1',
]
FALLBACK_TEXT_TAGS = ["strong", "p", "h1", "h2", "h3"]
COMMENT_SELECTORS = [
    '[data-e2e="comment-level-1"]',
    '[data-e2e="comment-item"]',
    '[data-e2e="comment-text"]',
    'li[role="listitem"]',
]
CAPTIONED_LD_TYPES = {
    "VideoObject",
    "SocialMediaPosting",
    "ImageObject",
    "Recipe",
    "Article",
    "BlogPosting",
    "NewsArticle",
    "WebPage",
    "CreativeWork",
}
COMMENT_TEXT_KEYS = ("text", "content", "comment")


def best_effort(reader: Reader) -> Reader:
    @functools.wraps(reader)
    def wrapper(page: PageSurface) -> CarrierReading:
        try:
            return reader(page)
        except Exception as exc:
            logger.debug(f"Carrier {reader.__name__} found nothing usable: {exc}")
            return CarrierReading()

    return wrapper


def _reading(caption: Optional[str], annotations: Iterable[Optional[str]] = ()) -> CarrierReading:
    cleaned = tuple(text.strip() for text in annotations if isinstance(text, str) and text.strip())
    return CarrierReading(caption=(caption or "").strip(), annotations=cleaned)


def _comment_texts(collection: Any) -> List[str]:
    texts = []
    for item in iter_values(collection):
        if isinstance(item, dict):
            text = first_str(item, *[(key,) for key in COMMENT_TEXT_KEYS])
            if text:
                texts.append(text)
        elif isinstance(item, str) and item.strip():
            texts.append(item.strip())
    return texts


@best_effort
def read_embedded_state(page: PageSurface) -> CarrierReading:
    state = page.script_json("SIGI_STATE") or page.assigned_json("SIGI_STATE")
    if isinstance(state, dict):
        items = state.get("ItemModule") or {}
        caption = None
        for item in iter_values(items):
            caption = get_str_at_path(item, ["desc"])
            if caption:
                break
        comments: List[str] = []
        for key in ("Comment", "Comments", "CommentModule"):
            comments.extend(_comment_texts(state.get(key)))
        return _reading(caption or find_first_key(state, "desc"), comments)

    shared = page.assigned_json("_sharedData")
    if isinstance(shared, dict):
        media = get_at_path(shared, ["entry_data", "PostPage", 0, "graphql", "shortcode_media"])
        caption = get_str_at_path(media, ["edge_media_to_caption", "edges", 0, "node", "text"])
        edges = get_at_path(media, ["edge_media_to_parent_comment", "edges"]) or get_at_path(
            media, ["edge_media_to_comment", "edges"]
        )
        comments = [get_str_at_path(edge, ["node", "text"]) for edge in iter_values(edges)]
        return _reading(caption, comments)

    return CarrierReading()


@best_effort
def read_framework_data(page: PageSurface) -> CarrierReading:
    next_data = page.script_json("__NEXT_DATA__")
    if isinstance(next_data, dict):
        caption = first_str(
            next_data,
            ["props", "pageProps", "itemInfo", "itemStruct", "desc"],
            ["props", "pageProps", "itemDetail", "itemInfo", "itemStruct", "desc"],
        )
        comments = _comment_texts(get_at_path(next_data, ["props", "pageProps", "comments"]))
        if caption or comments:
            return _reading(caption, comments)

    universal = page.script_json("__UNIVERSAL_DATA_FOR_REHYDRATION__")
    if isinstance(universal, dict):
        caption = first_str(
            universal,
            ["__DEFAULT_SCOPE__", "webapp.video-detail", "itemInfo", "itemStruct", "desc"],
            ["__DEFAULT_SCOPE__", "webapp.video-detail", "shareMeta", "desc"],
        )
        return _reading(caption)

    return CarrierReading()


def ld_nodes(blocks: Sequence[Any]) -> List[dict]:
    """Flatten JSON-LD blocks (lists and @graph containers) into objects."""
    nodes: List[dict] = []
    pending = list(blocks)
    while pending:
        block = pending.pop(0)
        if isinstance(block, list):
            pending.extend(block)
        elif isinstance(block, dict):
            nodes.append(block)
            graph = block.get("@graph")
            if isinstance(graph, list):
                pending.extend(graph)
    return nodes


def ld_types(node: dict) -> List[str]:
    raw = node.get("@type")
    if isinstance(raw, str):
        return [raw]
    if isinstance(raw, list):
        return [item for item in raw if isinstance(item, str)]
    return []


@best_effort
def read_structured_data(page: PageSurface) -> CarrierReading:
    for node in ld_nodes(page.ld_json_blocks()):
        if not CAPTIONED_LD_TYPES.intersection(ld_types(node)):
            continue
        caption = first_str(node, ["description"], ["caption"], ["articleBody"])
        if caption:
            return _reading(caption, _comment_texts(node.get("comment")))
    return CarrierReading()


@best_effort
def read_meta_tags(page: PageSurface) -> CarrierReading:
    return _reading(page.meta("og:description", "twitter:description", "description"))


@best_effort
def read_visible_text(page: PageSurface) -> CarrierReading:
    soup = page.soup
    caption = None
    for selector in DESCRIPTION_SELECTORS:
        node = soup.select_one(selector)
        text = node.get_text("\n", strip=True) if node else ""
        if text:
            caption = text
            break
    if caption is None:
        texts = [node.get_text(" ", strip=True) for node in soup.find_all(FALLBACK_TEXT_TAGS)]
        caption = max(texts, key=len, default="")

    comments: List[str] = []
    for selector in COMMENT_SELECTORS:
        comments.extend(node.get_text(" ", strip=True) for node in soup.select(selector))
    return _reading(caption, filter_by_score(_unique(comments), ANNOTATION_MIN_SCORE))


@best_effort
def read_alt_text(page: PageSurface) -> CarrierReading:
    soup = page.soup
    texts = [img.get("alt", "") for img in soup.find_all("img")]
    texts.extend(node.get("aria-label", "") for node in soup.select('[role="img"][aria-label]'))
    texts.extend(node.get_text(" ", strip=True) for node in soup.select("figure figcaption"))
    texts.append(page.meta("og:image:alt", "twitter:image:alt") or "")

    kept = filter_by_score(_unique(texts), ALT_TEXT_MIN_SCORE)[:ALT_TEXT_MAX_ANNOTATIONS]
    return _reading("\n".join(kept))


def _unique(texts: Iterable[Any]) -> List[str]:
    seen = set()
    unique = []
    for text in texts:
        if not isinstance(text, str):
            continue
        text = text.strip()
        if text and text not in seen:
            seen.add(text)
            unique.append(text)
    return unique


CARRIER_READERS: Dict[str, Reader] = {
    EMBEDDED_STATE: read_embedded_state,
    FRAMEWORK_DATA: read_framework_data,
    STRUCTURED_DATA: read_structured_data,
    META_TAGS: read_meta_tags,
    VISIBLE_TEXT: read_visible_text,
    ALT_TEXT: read_alt_text,
}

CHALLENGER_KEYS = (VISIBLE_TEXT, ALT_TEXT)


def carrier_weight(key: str, page: PageSurface) -> float:
    if key != ALT_TEXT:
        return 1.0
    return PHOTO_ALT_TEXT_WEIGHT if page.is_photo_post else VIDEO_ALT_TEXT_WEIGHT


def pack_candidate(key: str, reading: CarrierReading, weight: float = 1.0) -> SourceCandidate:
    text = "\n\n".join(part for part in (reading.caption, *reading.annotations) if part)
    raw_length = len(reading.caption) + sum(len(note) for note in reading.annotations)
    return SourceCandidate(
        key=key,
        caption=reading.caption,
        annotations=reading.annotations,
        raw_length=raw_length,
        score=score_content(text) * weight,
    )


def rank_candidates(candidates: Iterable[SourceCandidate]) -> List[SourceCandidate]:
    return sorted(candidates, key=lambda c: (-c.score, -c.raw_length))


async def read_carriers(
    page: PageSurface,
    keys: Sequence[str] = tuple(CARRIER_READERS),
) -> List[SourceCandidate]:
    """Read the given carriers concurrently and return them ranked."""
    page.soup  # parse once before readers share the snapshot across threads
    readings = await asyncio.gather(
        *(asyncio.to_thread(CARRIER_READERS[key], page) for key in keys)
    )
    return rank_candidates(
        pack_candidate(key, reading, carrier_weight(key, page))
        for key, reading in zip(keys, readings)
    )


def best_candidate(candidates: Sequence[SourceCandidate]) -> Optional[SourceCandidate]:
    for candidate in candidates:
        if candidate.caption or candidate.annotations:
            return candidate
    return None


async def challenge(current: Optional[SourceCandidate], later: PageSurface) -> Optional[SourceCandidate]:
    """Re-read the DOM carriers of a later snapshot; promote on a strictly higher score."""
    challenger = best_candidate(await read_carriers(later, CHALLENGER_KEYS))
    if challenger is None:
        return current
    if current is None or challenger.score > current.score:
        logger.debug(
            f"Challenger {challenger.key} promoted ({challenger.score:.1f} > "
            f"{current.score if current else 0:.1f})"
        )
        return challenger
    return current
