import asyncio

import pytest

from services.recipe_extraction.models import (
    Confidence,
    ExtractionResult,
    ParserConfig,
    SiteType,
    StrategyName,
)
from services.recipe_extraction.pattern_store import PatternRecorder
from services.recipe_extraction.strategy_selector import (
    ALL_STRATEGIES_FAILED,
    StrategySelector,
    reorder_strategies,
)

A = StrategyName.EMBEDDED_STATE
B = StrategyName.FRAMEWORK_DATA
X = StrategyName.META_TAGS
C = StrategyName.OEMBED

URL = "https://www.tiktok.com/@cook/video/1"
MARKUP = '<html><head><meta property="og:description" content="Ingredients: rice"></head>' + "<p>x</p>" * 20 + "</html>"


def _ok(strategy):
    return ExtractionResult(
        success=True,
        strategy_used=strategy,
        confidence=Confidence.MEDIUM,
        title="Rice",
        ingredients=("1 cup rice",),
    )


class ScriptedStrategies(dict):
    """Strategy table whose entries succeed, fail or raise on demand."""

    def __init__(self, succeed=(), fail=(), raise_=(), hang=()):
        super().__init__()
        self.calls = []
        for strategy in succeed:
            self[strategy] = self._make(strategy, "succeed")
        for strategy in fail:
            self[strategy] = self._make(strategy, "fail")
        for strategy in raise_:
            self[strategy] = self._make(strategy, "raise")
        for strategy in hang:
            self[strategy] = self._make(strategy, "hang")

    def _make(self, strategy, behaviour):
        async def run(ctx):
            self.calls.append(strategy)
            if behaviour == "succeed":
                return _ok(strategy)
            if behaviour == "fail":
                return ExtractionResult.failure(strategy, "nothing here")
            if behaviour == "raise":
                raise ValueError("boom")
            await asyncio.sleep(10)

        return run


def _selector(store, strategies, timeout=5.0):
    return StrategySelector(PatternRecorder(store), fetcher=object(), strategies=strategies, strategy_timeout=timeout)


def _config(*strategies):
    return ParserConfig(version="v1", strategies=tuple(strategies))


def test_reorder_moves_preferred_to_front_keeping_relative_order():
    assert reorder_strategies([A, B, X, C], X) == [X, A, B, C]
    assert reorder_strategies([A, B, X, C], A) == [A, B, X, C]


def test_reorder_without_usable_preference_is_identity():
    assert reorder_strategies([A, B], None) == [A, B]
    assert reorder_strategies([A, B], X) == [A, B]


@pytest.mark.asyncio
async def test_first_success_short_circuits(memory_store):
    strategies = ScriptedStrategies(succeed=(B, X), fail=(A,))
    selector = _selector(memory_store, strategies)
    result = await selector.execute(URL, SiteType.TIKTOK, MARKUP, _config(A, B, X))
    await selector.recorder.drain()
    assert result.success
    assert result.strategy_used == B
    assert strategies.calls == [A, B]


@pytest.mark.asyncio
async def test_raising_strategy_becomes_failure_and_next_runs(memory_store):
    strategies = ScriptedStrategies(raise_=(A,), succeed=(X,))
    selector = _selector(memory_store, strategies)
    result, tried = await selector.execute_traced(URL, SiteType.TIKTOK, MARKUP, _config(A, X))
    await selector.recorder.drain()
    assert result.strategy_used == X
    assert tried == (A, X)
    failed = next(attempt for attempt in memory_store.attempts if not attempt.success)
    assert not failed.success
    assert "boom" in failed.error_message


@pytest.mark.asyncio
async def test_all_failures_attribute_to_last_strategy(memory_store):
    strategies = ScriptedStrategies(raise_=(A,), fail=(B, X))
    selector = _selector(memory_store, strategies)
    result = await selector.execute(URL, SiteType.TIKTOK, MARKUP, _config(A, B, X))
    await selector.recorder.drain()
    assert not result.success
    assert result.strategy_used == X
    assert result.confidence == Confidence.LOW
    assert result.error == ALL_STRATEGIES_FAILED


@pytest.mark.asyncio
async def test_empty_config_still_returns_failure(memory_store):
    selector = _selector(memory_store, ScriptedStrategies())
    result = await selector.execute(URL, SiteType.TIKTOK, MARKUP, _config())
    await selector.recorder.drain()
    assert not result.success
    assert result.error == ALL_STRATEGIES_FAILED


@pytest.mark.asyncio
async def test_unregistered_strategy_fails_closed(memory_store):
    selector = _selector(memory_store, ScriptedStrategies(succeed=(X,)))
    result, tried = await selector.execute_traced(URL, SiteType.TIKTOK, MARKUP, _config(C, X))
    await selector.recorder.drain()
    assert result.strategy_used == X
    assert tried == (C, X)


@pytest.mark.asyncio
async def test_slow_strategy_times_out(memory_store):
    strategies = ScriptedStrategies(hang=(A,), succeed=(X,))
    selector = _selector(memory_store, strategies, timeout=0.05)
    result = await selector.execute(URL, SiteType.TIKTOK, MARKUP, _config(A, X))
    await selector.recorder.drain()
    assert result.strategy_used == X
    timed_out = next(attempt for attempt in memory_store.attempts if not attempt.success)
    assert "Timed out" in timed_out.error_message


@pytest.mark.asyncio
async def test_result_is_attributed_to_the_strategy_that_ran(memory_store):
    async def mislabelled(ctx):
        return _ok(C)

    selector = _selector(memory_store, {A: mislabelled})
    result = await selector.execute(URL, SiteType.TIKTOK, MARKUP, _config(A))
    await selector.recorder.drain()
    assert result.strategy_used == A


@pytest.mark.asyncio
async def test_store_failures_are_swallowed(make_store):
    store = make_store(fail_with=RuntimeError("store down"))
    selector = _selector(store, ScriptedStrategies(fail=(A,), succeed=(X,)))
    result = await selector.execute(URL, SiteType.TIKTOK, MARKUP, _config(A, X))
    await selector.recorder.drain()
    assert result.success


@pytest.mark.asyncio
async def test_attempts_are_logged_with_samples_only_on_failure(memory_store):
    selector = _selector(memory_store, ScriptedStrategies(fail=(A,), succeed=(X,)))
    await selector.execute(URL, SiteType.TIKTOK, MARKUP, _config(A, X))
    await selector.recorder.drain()
    failed, succeeded = sorted(memory_store.attempts, key=lambda attempt: attempt.success)
    assert failed.raw_html_sample == MARKUP
    assert succeeded.raw_html_sample is None
    assert succeeded.confidence == Confidence.MEDIUM
    assert succeeded.ingredients_count == 1
    assert {attempt.parser_version for attempt in memory_store.attempts} == {"v1"}


@pytest.mark.asyncio
async def test_learned_strategy_is_tried_first(memory_store):
    config = _config(A, B, X, C)
    strategies = ScriptedStrategies(fail=(A, B), succeed=(X, C))
    selector = _selector(memory_store, strategies)

    for _ in range(3):
        _, tried = await selector.execute_traced(URL, SiteType.TIKTOK, MARKUP, config)
        await selector.recorder.drain()
        assert tried == (A, B, X)

    _, tried = await selector.execute_traced(URL, SiteType.TIKTOK, MARKUP, config)
    await selector.recorder.drain()
    assert tried == (X,)


@pytest.mark.asyncio
async def test_caller_cancellation_propagates(memory_store):
    selector = _selector(memory_store, ScriptedStrategies(hang=(A,)))
    task = asyncio.create_task(selector.execute(URL, SiteType.TIKTOK, MARKUP, _config(A)))
    await asyncio.sleep(0.05)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert memory_store.attempts == []
