import pytest

from config import settings
from services.recipe_extraction.sandbox import (
    READINESS_SCRIPT,
    SandboxError,
    SandboxTimeout,
    ScriptResultChannel,
    StaticSandbox,
)


@pytest.mark.asyncio
async def test_channel_resolves_with_first_terminal_message():
    channel = ScriptResultChannel()
    assert channel.post({"type": "log", "message": "loading"}) is False
    assert channel.post({"type": "done", "html": "<p>first</p>"}) is True
    assert channel.post({"type": "done", "html": "<p>second</p>"}) is False
    assert channel.resolved
    message = await channel.wait(1.0)
    assert message["html"] == "<p>first</p>"


@pytest.mark.asyncio
async def test_channel_times_out_without_terminal_message():
    channel = ScriptResultChannel()
    channel.post({"type": "log", "message": "still loading"})
    with pytest.raises(SandboxTimeout):
        await channel.wait(0.01)


@pytest.mark.asyncio
async def test_channel_error_message_raises():
    channel = ScriptResultChannel()
    channel.post({"type": "error", "message": "navigation blocked"})
    with pytest.raises(SandboxError, match="navigation blocked"):
        await channel.wait(1.0)


def test_readiness_script_takes_settle_delay():
    script = READINESS_SCRIPT % {"settle_ms": 300}
    assert "var settle = 300;" in script
    assert "requestAnimationFrame" in script


@pytest.mark.asyncio
async def test_static_sandbox_serves_fetched_markup(make_fetcher):
    url = "https://www.facebook.com/reel/1"
    fetcher = make_fetcher({url: "<p>rendered</p>"})
    page = await StaticSandbox(fetcher).open(url)
    assert await page.snapshot(0) == "<p>rendered</p>"
    await page.close()
    assert "iPhone" in fetcher.calls[0][1]


@pytest.mark.asyncio
async def test_channel_wait_defaults_to_configured_timeout(monkeypatch):
    monkeypatch.setattr(settings, "sandbox_timeout_seconds", 0.01)
    with pytest.raises(SandboxTimeout, match="0.0s"):
        await ScriptResultChannel().wait()
