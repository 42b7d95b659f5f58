"""
Rendering sandbox and screenshot interfaces.

The sandbox loads a page, waits for it to settle and hands back the rendered
markup. Browser-backed implementations inject READINESS_SCRIPT and receive a
single terminal message through a ScriptResultChannel. StaticSandbox serves
server-rendered pages over plain HTTP.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Protocol

from config import settings
from services.recipe_extraction.fetcher import PageFetcher

logger = logging.getLogger(__name__)

# Contract for browser-backed sandboxes: inject with `READINESS_SCRIPT % {"settle_ms": n}`
# and feed every posted message to a ScriptResultChannel. It posts
# {"type": "done", "html": ...} once the document is interactive, loaded, two
# animation frames have run and the settle delay has elapsed.
READINESS_SCRIPT = """
(function () {
  var settle = %(settle_ms)d;
  function post(msg) { window.ReactNativeWebView ? window.ReactNativeWebView.postMessage(JSON.stringify(msg)) : window.parent.postMessage(msg, '*'); }
  function done() {
    requestAnimationFrame(function () {
      requestAnimationFrame(function () {
        setTimeout(function () {
          post({ type: 'done', html: document.documentElement.outerHTML, url: location.href });
        }, settle);
      });
    });
  }
  function whenLoaded() {
    if (document.readyState === 'complete') { done(); }
    else { window.addEventListener('load', done, { once: true }); }
  }
  if (document.readyState === 'loading') {
    document.addEventListener('DOMContentLoaded', whenLoaded, { once: true });
  } else {
    whenLoaded();
  }
})();
"""


class SandboxTimeout(Exception):
    """The sandbox did not deliver its terminal message in time."""


class SandboxError(Exception):
    """The sandbox reported a failure instead of a rendered page."""


class ScriptResultChannel:
    """One-shot future for the terminal message of an injected script.

    Log messages are ignored; the first terminal message resolves the
    channel and anything after it is dropped.
    """

    def __init__(self) -> None:
        self._future: Optional[asyncio.Future] = None

    def _ensure_future(self) -> asyncio.Future:
        if self._future is None:
            self._future = asyncio.get_running_loop().create_future()
        return self._future

    @property
    def resolved(self) -> bool:
        return self._future is not None and self._future.done()

    def post(self, message: Dict[str, Any]) -> bool:
        if message.get("type") == "log":
            logger.debug(f"Sandbox log: {message.get('message')}")
            return False
        future = self._ensure_future()
        if future.done():
            logger.debug(f"Dropping extra sandbox message of type {message.get('type')}")
            return False
        if message.get("type") == "error":
            future.set_exception(SandboxError(str(message.get("message") or "sandbox error")))
        else:
            future.set_result(message)
        return True

    async def wait(self, timeout: Optional[float] = None) -> Dict[str, Any]:
        if timeout is None:
            timeout = settings.sandbox_timeout_seconds
        try:
            return await asyncio.wait_for(self._ensure_future(), timeout)
        except asyncio.TimeoutError as e:
            raise SandboxTimeout(f"No sandbox result within {timeout:.1f}s") from e


class SandboxPage(Protocol):
    url: str

    async def snapshot(self, settle_ms: int) -> str:
        """Wait for readiness plus settle_ms and return the rendered markup."""
        ...

    async def close(self) -> None:
        ...


class RenderingSandbox(Protocol):
    async def open(self, url: str, *, user_agent: Optional[str] = None) -> SandboxPage:
        ...


class ScreenshotReader(Protocol):
    async def read_text(self, url: str) -> str:
        """Capture the page and return its OCR'd text."""
        ...


class StaticSandboxPage:
    def __init__(self, url: str, markup: str):
        self.url = url
        self._markup = markup

    async def snapshot(self, settle_ms: int) -> str:
        # Server-rendered markup has no scripts to wait on; only the settle delay applies.
        await asyncio.sleep(max(settle_ms, 0) / 1000)
        return self._markup

    async def close(self) -> None:
        self._markup = ""


class StaticSandbox:
    """Sandbox for pages whose content is present in the server response."""

    def __init__(self, fetcher: PageFetcher):
        self.fetcher = fetcher

    async def open(self, url: str, *, user_agent: Optional[str] = None) -> StaticSandboxPage:
        markup = await self.fetcher.fetch_text(url, user_agent=user_agent or settings.mobile_user_agent)
        return StaticSandboxPage(url, markup)
