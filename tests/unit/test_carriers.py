import json

import pytest

from services.recipe_extraction.carriers import (
    ALT_TEXT,
    META_TAGS,
    VISIBLE_TEXT,
    best_candidate,
    challenge,
    pack_candidate,
    rank_candidates,
    read_alt_text,
    read_carriers,
    read_embedded_state,
    read_framework_data,
    read_meta_tags,
    read_structured_data,
    read_visible_text,
)
from services.recipe_extraction.models import CarrierReading, SourceCandidate
from services.recipe_extraction.page import PageSurface, balanced_object

RECIPE_TEXT = "Ingredients: 2 cups flour, 1 cup sugar, 2 eggs. Steps: 1) Mix 2) Bake"
VIDEO_URL = "https://www.tiktok.com/@cook/video/123"
PHOTO_URL = "https://www.tiktok.com/@cook/photo/123"


def _html(body: str = "", head: str = "") -> str:
    return f"<html><head>{head}</head><body>{body}</body></html>"


def _script(element_id: str, data) -> str:
    return f'<script id="{element_id}" type="application/json">{json.dumps(data)}</script>'


def test_embedded_state_reads_caption_and_comments():
    state = {
        "ItemModule": {"123": {"desc": "Garlic noodles recipe"}},
        "Comment": {"c1": {"text": "Ingredients please!"}, "c2": {"text": "  "}},
    }
    reading = read_embedded_state(PageSurface(_html(_script("SIGI_STATE", state)), VIDEO_URL))
    assert reading.caption == "Garlic noodles recipe"
    assert reading.annotations == ("Ingredients please!",)


def test_embedded_state_reads_assigned_instagram_payload():
    shared = {
        "entry_data": {
            "PostPage": [
                {
                    "graphql": {
                        "shortcode_media": {
                            "edge_media_to_caption": {"edges": [{"node": {"text": "Pesto pasta {quick}"}}]},
                            "edge_media_to_parent_comment": {"edges": [{"node": {"text": "yum"}}]},
                        }
                    }
                }
            ]
        }
    }
    markup = _html(f"<script>window._sharedData = {json.dumps(shared)};</script>")
    reading = read_embedded_state(PageSurface(markup, "https://www.instagram.com/p/abc/"))
    assert reading.caption == "Pesto pasta {quick}"
    assert reading.annotations == ("yum",)


def test_malformed_embedded_state_yields_empty_reading():
    markup = _html('<script id="SIGI_STATE">{"ItemModule": {broken</script>')
    assert read_embedded_state(PageSurface(markup)).is_empty


def test_framework_data_reads_next_data_caption():
    data = {"props": {"pageProps": {"itemInfo": {"itemStruct": {"desc": RECIPE_TEXT}}}}}
    reading = read_framework_data(PageSurface(_html(_script("__NEXT_DATA__", data))))
    assert reading.caption == RECIPE_TEXT


def test_framework_data_reads_universal_rehydration_payload():
    data = {"__DEFAULT_SCOPE__": {"webapp.video-detail": {"shareMeta": {"desc": "Lemon cake"}}}}
    reading = read_framework_data(PageSurface(_html(_script("__UNIVERSAL_DATA_FOR_REHYDRATION__", data))))
    assert reading.caption == "Lemon cake"


def test_structured_data_reads_video_object_description_in_graph():
    block = {"@graph": [{"@type": "Organization", "name": "x"}, {"@type": "VideoObject", "description": "Taco night"}]}
    markup = _html(head=f'<script type="application/ld+json">{json.dumps(block)}</script>')
    assert read_structured_data(PageSurface(markup)).caption == "Taco night"


def test_meta_tags_prefers_og_description():
    head = (
        '<meta name="description" content="plain">'
        '<meta property="og:description" content="  Open graph caption ">'
    )
    assert read_meta_tags(PageSurface(_html(head=head))).caption == "Open graph caption"


def test_visible_text_uses_description_selector_and_scored_comments():
    body = (
        f'<div data-e2e="browse-video-desc">{RECIPE_TEXT}</div>'
        '<div data-e2e="comment-level-1">so cute</div>'
        '<div data-e2e="comment-level-1">Ingredients: 1 cup rice, 2 cups water, 1 tsp salt</div>'
    )
    reading = read_visible_text(PageSurface(_html(body)))
    assert reading.caption == RECIPE_TEXT
    assert reading.annotations == ("Ingredients: 1 cup rice, 2 cups water, 1 tsp salt",)


def test_visible_text_falls_back_to_longest_text_block():
    body = "<h1>Dinner</h1><p>short</p><p>A much longer paragraph about dinner</p>"
    assert read_visible_text(PageSurface(_html(body))).caption == "A much longer paragraph about dinner"


def test_alt_text_keeps_only_recipe_like_texts():
    body = f'<img alt="{RECIPE_TEXT}"><img alt="profile picture"><img alt="{RECIPE_TEXT}">'
    reading = read_alt_text(PageSurface(_html(body)))
    assert reading.caption == RECIPE_TEXT
    assert reading.annotations == ()


def test_pack_candidate_counts_raw_length():
    candidate = pack_candidate(META_TAGS, CarrierReading(caption="abc", annotations=("de",)))
    assert candidate.raw_length == 5
    assert candidate.text == "abc\n\nde"


def test_rank_candidates_orders_by_score_then_length():
    low = SourceCandidate("a", "hello", (), raw_length=5, score=10.0)
    tie_short = SourceCandidate("b", "hi", (), raw_length=2, score=50.0)
    tie_long = SourceCandidate("c", "hello there", (), raw_length=11, score=50.0)
    ranked = rank_candidates([low, tie_short, tie_long])
    assert [candidate.key for candidate in ranked] == ["c", "b", "a"]


@pytest.mark.asyncio
async def test_alt_text_weight_depends_on_post_type():
    markup = _html(f'<img alt="{RECIPE_TEXT}">')
    video = await read_carriers(PageSurface(markup, VIDEO_URL), (ALT_TEXT,))
    photo = await read_carriers(PageSurface(markup, PHOTO_URL), (ALT_TEXT,))
    assert photo[0].score == pytest.approx(video[0].score * 2)


@pytest.mark.asyncio
async def test_read_carriers_ranks_all_readers():
    head = '<meta property="og:description" content="just vibes">'
    body = f'<div data-e2e="video-desc">{RECIPE_TEXT}</div>'
    candidates = await read_carriers(PageSurface(_html(body, head), VIDEO_URL))
    assert len(candidates) == 6
    assert candidates[0].key == VISIBLE_TEXT
    assert [c.score for c in candidates] == sorted((c.score for c in candidates), reverse=True)


@pytest.mark.asyncio
async def test_all_carriers_empty_gives_no_candidate():
    candidates = await read_carriers(PageSurface(_html(), VIDEO_URL))
    assert best_candidate(candidates) is None


@pytest.mark.asyncio
async def test_challenger_promoted_on_strictly_higher_score():
    current = pack_candidate(META_TAGS, CarrierReading(caption="nice video"))
    later = PageSurface(_html(f'<div data-e2e="video-desc">{RECIPE_TEXT}</div>'), VIDEO_URL)
    chosen = await challenge(current, later)
    assert chosen.key == VISIBLE_TEXT


@pytest.mark.asyncio
async def test_challenger_loses_to_better_current():
    current = pack_candidate(META_TAGS, CarrierReading(caption=RECIPE_TEXT))
    later = PageSurface(_html("<p>nice video</p>"), VIDEO_URL)
    assert await challenge(current, later) is current


def test_balanced_object_handles_braces_in_strings():
    text = 'x = {"a": "}{", "b": {"c": 1}}; rest'
    assert json.loads(balanced_object(text, 0)) == {"a": "}{", "b": {"c": 1}}
