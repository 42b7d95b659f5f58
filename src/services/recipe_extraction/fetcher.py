import json
import logging
from typing import Any, Dict, Optional

import httpx

from config import settings

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


class FetchError(Exception):
    """A page or API fetch failed (network error, HTTP error or bad payload)."""


class PageFetcher:
    """Text/JSON fetches with a per-call timeout and user-agent substitution."""

    def __init__(
        self,
        default_timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.default_timeout = default_timeout or settings.fetch_timeout_seconds
        self.user_agent = user_agent or settings.desktop_user_agent
        self._transport = transport

    def _timeout(self, seconds: Optional[float]) -> httpx.Timeout:
        total = seconds or self.default_timeout
        return httpx.Timeout(total, connect=min(10.0, total))

    async def fetch_text(
        self,
        url: str,
        *,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> str:
        request_headers = {**BROWSER_HEADERS, "User-Agent": user_agent or self.user_agent}
        if headers:
            request_headers.update(headers)

        async with httpx.AsyncClient(
            timeout=self._timeout(timeout),
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            try:
                response = await client.get(url, headers=request_headers)
                response.raise_for_status()
                return response.text
            except httpx.HTTPError as e:
                logger.info(f"Fetch failed for {url}: {e!r}")
                raise FetchError(f"Fetch failed for {url}: {e}") from e

    async def fetch_json(
        self,
        url: str,
        *,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
    ) -> Any:
        body = await self.fetch_text(
            url,
            timeout=timeout,
            user_agent=user_agent,
            headers={"Accept": "application/json"},
        )
        try:
            return json.loads(body)
        except ValueError as e:
            raise FetchError(f"Invalid JSON from {url}: {e}") from e
