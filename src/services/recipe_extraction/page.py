"""Parsed view over a page's markup shared by the carrier readers."""

from __future__ import annotations

import re
from functools import cached_property
from typing import Any, List, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from services.recipe_extraction.json_paths import loads_or_none

_ASSIGNMENT = r"(?:window\[['\"]{name}['\"]\]|window\.{name}|{name})\s*=\s*"


class PageSurface:
    """Read-only accessors over one snapshot of a page."""

    def __init__(self, markup: Optional[str], url: str = ""):
        self.markup = markup or ""
        self.url = url

    @cached_property
    def soup(self) -> BeautifulSoup:
        return BeautifulSoup(self.markup, "html.parser")

    @property
    def is_photo_post(self) -> bool:
        return "/photo/" in urlparse(self.url).path

    def meta(self, *names: str) -> Optional[str]:
        for name in names:
            tag = self.soup.find("meta", attrs={"property": name}) or self.soup.find(
                "meta", attrs={"name": name}
            )
            content = tag.get("content") if tag else None
            if isinstance(content, str) and content.strip():
                return content.strip()
        return None

    def script_json(self, element_id: str) -> Any:
        tag = self.soup.find("script", id=element_id)
        if tag is None:
            return None
        return loads_or_none(tag.string or tag.get_text())

    def ld_json_blocks(self) -> List[Any]:
        blocks = []
        for tag in self.soup.find_all("script", attrs={"type": "application/ld+json"}):
            data = loads_or_none(tag.string or tag.get_text())
            if data is not None:
                blocks.append(data)
        return blocks

    def assigned_json(self, name: str) -> Any:
        """Parse a JSON object assigned to a global, e.g. window['SIGI_STATE'] = {...}."""
        pattern = re.compile(_ASSIGNMENT.format(name=re.escape(name)))
        match = pattern.search(self.markup)
        if not match:
            return None
        return loads_or_none(balanced_object(self.markup, match.end()))


def balanced_object(text: str, start: int) -> Optional[str]:
    """Return the brace-balanced JSON object beginning at or after start."""
    begin = text.find("{", start)
    if begin < 0:
        return None
    depth = 0
    in_string = False
    escaped = False
    for index in range(begin, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[begin:index + 1]
    return None
