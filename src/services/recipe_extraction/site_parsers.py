"""
Site parsers for conventional recipe publishers.

Publishers embed a schema.org Recipe object, so these parsers skip caption
heuristics and read name, image, ingredients and instructions directly. When
the page cannot be fetched (bot walls, access denied) they retry AMP variants,
an optional proxy and a text mirror before giving up.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Tuple, Type
from urllib.parse import parse_qsl, quote, urlencode, urljoin, urlparse, urlunparse

from config import settings
from constants.recipe_sites import AMP_RECIPE_SITES, SITE_DISPLAY_NAMES
from services.recipe_extraction.carriers import ld_nodes, ld_types
from services.recipe_extraction.caption_parser import normalize_ingredient_lines
from services.recipe_extraction.fetcher import FetchError, PageFetcher
from services.recipe_extraction.models import ParsedRecipe, SiteType
from services.recipe_extraction.page import PageSurface
from services.recipe_extraction.site_types import host_matches, hostname

logger = logging.getLogger(__name__)

TITLE_SEPARATORS = [" | ", " - ", " – ", " — ", " • "]
ACCESS_DENIED = re.compile(r"access denied", re.IGNORECASE)
SOURCE_JSONLD = "jsonld"
SOURCE_MICRODATA = "microdata"
SOURCE_META = "meta"


def absolutize_url(candidate: Optional[str], base: str) -> Optional[str]:
    if not candidate or not candidate.strip():
        return None
    try:
        resolved = urljoin(base, candidate.strip())
    except ValueError:
        return None
    return resolved if urlparse(resolved).scheme in ("http", "https") else None


def _site_names(url: str) -> List[str]:
    host = hostname(url)
    names = [host, host.split(".")[0]] if host else []
    for domain, display in SITE_DISPLAY_NAMES.items():
        if host and host_matches(host, domain):
            names.append(display)
    return [_squash(name) for name in names]


def _squash(text: str) -> str:
    return re.sub(r"[^a-z0-9]", "", text.lower())


def clean_site_title(raw: Optional[str], url: str) -> Optional[str]:
    """Drop a trailing ' | Site Name' style suffix naming the publisher."""
    if not raw:
        return None
    title = " ".join(raw.split())
    names = _site_names(url)
    for separator in TITLE_SEPARATORS:
        while separator in title:
            head, _, tail = title.rpartition(separator)
            squashed = _squash(tail)
            if not squashed or not any(len(name) >= 4 and name in squashed for name in names):
                break
            title = head.strip()
    return title or None


def amp_candidates(url: str) -> List[str]:
    """AMP renditions of a publisher URL: ?ref=amp and the .amp path variant."""
    if "://" not in url:
        url = f"https://{url}"
    parsed = urlparse(url)
    query = dict(parse_qsl(parsed.query))
    query["ref"] = "amp"
    candidates = [urlunparse(parsed._replace(query=urlencode(query)))]

    path = parsed.path
    if path.endswith(".html"):
        path = path[: -len(".html")] + ".amp"
    elif not path.endswith(".amp") and not re.search(r"\.[a-z]{2,5}$", path, re.IGNORECASE):
        path = path.rstrip("/") + ".amp"
    if path != parsed.path:
        candidates.append(urlunparse(parsed._replace(path=path)))
    return candidates


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, dict):
        for key in ("text", "name"):
            if isinstance(value.get(key), str) and value[key].strip():
                return value[key].strip()
    return None


def instruction_texts(raw: Any) -> List[str]:
    """Flatten recipeInstructions: strings, HowToStep objects and HowToSection lists."""
    if isinstance(raw, str):
        return [line.strip() for line in re.split(r"\n+", raw) if line.strip()]
    if isinstance(raw, dict):
        if "HowToSection" in ld_types(raw) or "itemListElement" in raw:
            return instruction_texts(raw.get("itemListElement"))
        text = _text(raw)
        return [text] if text else []
    if isinstance(raw, list):
        steps: List[str] = []
        for item in raw:
            steps.extend(instruction_texts(item))
        return steps
    return []


def image_url(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        for item in value:
            found = image_url(item)
            if found:
                return found
        return None
    if isinstance(value, dict):
        for key in ("url", "contentUrl", "@id"):
            if isinstance(value.get(key), str):
                return value[key]
    return None


def parse_recipe_json_ld(page: PageSurface) -> Optional[ParsedRecipe]:
    for node in ld_nodes(page.ld_json_blocks()):
        if "Recipe" not in ld_types(node):
            continue
        ingredients = node.get("recipeIngredient") or node.get("ingredients") or []
        if isinstance(ingredients, str):
            ingredients = [ingredients]
        return ParsedRecipe(
            title=clean_site_title(_text(node.get("name")) or _text(node.get("headline")), page.url),
            ingredients=tuple(normalize_ingredient_lines(i for i in ingredients if isinstance(i, str))),
            steps=tuple(instruction_texts(node.get("recipeInstructions"))),
            image=absolutize_url(image_url(node.get("image")), page.url),
            source=SOURCE_JSONLD,
        )
    return None


def parse_recipe_microdata(page: PageSurface) -> Optional[ParsedRecipe]:
    scope = page.soup.find(attrs={"itemtype": re.compile(r"schema\.org/Recipe", re.IGNORECASE)})
    if scope is None:
        return None

    def props(name: str) -> List[str]:
        values = []
        for node in scope.find_all(attrs={"itemprop": name}):
            value = node.get("content") or node.get_text(" ", strip=True)
            if value:
                values.append(value.strip())
        return values

    image_node = scope.find(attrs={"itemprop": "image"})
    image = None
    if image_node is not None:
        image = image_node.get("src") or image_node.get("content") or image_node.get("href")
    names = props("name")
    return ParsedRecipe(
        title=clean_site_title(names[0] if names else None, page.url),
        ingredients=tuple(normalize_ingredient_lines(props("recipeIngredient") or props("ingredients"))),
        steps=tuple(props("recipeInstructions")),
        image=absolutize_url(image, page.url),
        source=SOURCE_MICRODATA,
    )


def parse_meta_recipe(page: PageSurface) -> Optional[ParsedRecipe]:
    title = clean_site_title(page.meta("og:title", "twitter:title"), page.url)
    if not title and page.soup.title is not None:
        title = clean_site_title(page.soup.title.get_text(" ", strip=True), page.url)
    image = absolutize_url(page.meta("og:image", "twitter:image"), page.url)
    if not title and not image:
        return None
    return ParsedRecipe(title=title, image=image, source=SOURCE_META)


def parse_recipe_markup(markup: Optional[str], url: str) -> Optional[ParsedRecipe]:
    """Structured recipe first, microdata second, meta title/image last."""
    if not markup:
        return None
    page = PageSurface(markup, url)
    for parser in (parse_recipe_json_ld, parse_recipe_microdata):
        parsed = parser(page)
        if parsed is not None and parsed.has_recipe_data:
            return parsed
    return parse_meta_recipe(page)


class RecipePublisherParser:
    """Fetches a publisher page (with fallbacks) and parses its recipe markup."""

    def __init__(
        self,
        fetcher: PageFetcher,
        proxy_url: Optional[str] = None,
        mirror_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.fetcher = fetcher
        self.proxy_url = proxy_url if proxy_url is not None else settings.recipe_proxy_url
        self.mirror_url = mirror_url if mirror_url is not None else settings.recipe_mirror_url
        self.timeout = timeout or settings.fetch_timeout_seconds

    async def parse(self, url: str, markup: Optional[str] = None) -> Optional[ParsedRecipe]:
        parsed = parse_recipe_markup(markup, url)
        if parsed is not None and parsed.has_recipe_data:
            return parsed

        fetched = await self.fetch_markup(url, skip_original=bool(markup))
        if fetched is None:
            return parsed
        html, source = fetched
        refetched = parse_recipe_markup(html, url)
        if refetched is not None and refetched.has_recipe_data:
            logger.info(f"Recipe markup for {url} recovered via {source}")
            return refetched
        return parsed or refetched

    def candidate_urls(self, url: str, skip_original: bool = False) -> List[str]:
        urls = [] if skip_original else [url]
        if any(host_matches(hostname(url), domain) for domain in AMP_RECIPE_SITES):
            urls.extend(amp_candidates(url))
        return urls

    async def fetch_markup(self, url: str, skip_original: bool = False) -> Optional[Tuple[str, str]]:
        tries = self.candidate_urls(url, skip_original)
        for href in tries:
            html = await self._try_fetch(href)
            if html:
                return html, href

        if self.proxy_url:
            for href in tries or [url]:
                html = await self._try_fetch(f"{self.proxy_url}?url={quote(href, safe='')}")
                if html:
                    return html, "proxy"

        if self.mirror_url:
            html = await self._try_fetch(f"{self.mirror_url.rstrip('/')}/{url}")
            if html:
                return html, "mirror"
        return None

    async def _try_fetch(self, href: str) -> Optional[str]:
        try:
            html = await self.fetcher.fetch_text(href, timeout=self.timeout)
        except FetchError:
            return None
        if not html or ACCESS_DENIED.search(html[:5000]):
            logger.info(f"Publisher fetch blocked for {href}")
            return None
        return html


SITE_PARSERS: Dict[SiteType, Type[RecipePublisherParser]] = {
    SiteType.RECIPE_SITE: RecipePublisherParser,
}


def site_parser_for(site_type: SiteType, fetcher: PageFetcher) -> Optional[RecipePublisherParser]:
    parser_cls = SITE_PARSERS.get(site_type)
    return parser_cls(fetcher) if parser_cls else None
