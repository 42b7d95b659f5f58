"""
Pattern store: learned strategy success rates and the attempt log.

Pattern rows are keyed counters. Every observation is a single additive
upsert (success/failure/sample counters incremented and the rate recomputed
from them in the same statement), so concurrent imports never lose updates.
PatternRecorder wraps a store for the pipeline: lookups are bounded by a
timeout and writes are fire-and-forget background tasks whose failures are
logged and dropped.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from contextlib import nullcontext
from typing import Callable, List, Optional, Protocol, Set

from sqlalchemy import Float, cast, func, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from config import settings
from models import DiscoveredRecipeSite, RecipeExtractionPattern, RecipeImportAttempt, SessionLocal
from models.db_retry import run_with_retry
from services.recipe_extraction.models import ExtractionAttempt, SiteType, StrategyName

logger = logging.getLogger(__name__)

UPSERT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": postgresql_insert,
}
MAX_PATTERN_LENGTH = 255


class PatternStore(Protocol):
    def get_best_extraction_method(self, site_type: SiteType, html_pattern: str) -> Optional[StrategyName]:
        ...

    def update_extraction_pattern(
        self,
        site_type: SiteType,
        html_pattern: str,
        strategy: StrategyName,
        parser_version: str,
        success: bool,
    ) -> None:
        ...

    def log_import_attempt(self, attempt: ExtractionAttempt) -> Optional[int]:
        ...

    def record_discovered_site(self, host: str, detection_method: str) -> None:
        ...

    def discovered_hosts(self) -> List[str]:
        ...


class SqlPatternStore:
    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        min_success_rate: Optional[float] = None,
        min_samples: Optional[int] = None,
        raw_html_sample_chars: Optional[int] = None,
    ):
        self.session_factory = session_factory
        self.min_success_rate = (
            settings.pattern_min_success_rate if min_success_rate is None else min_success_rate
        )
        self.min_samples = settings.pattern_min_samples if min_samples is None else min_samples
        self.raw_html_sample_chars = raw_html_sample_chars or settings.raw_html_sample_chars

    def get_best_extraction_method(self, site_type: SiteType, html_pattern: str) -> Optional[StrategyName]:
        """Most successful trusted strategy for this page shape, if any."""
        pattern = RecipeExtractionPattern
        stmt = (
            select(pattern.extraction_method)
            .where(
                pattern.site_type == site_type.value,
                pattern.html_pattern == html_pattern[:MAX_PATTERN_LENGTH],
                pattern.sample_count >= self.min_samples,
                pattern.success_rate >= self.min_success_rate,
            )
            .order_by(
                pattern.success_rate.desc(),
                pattern.sample_count.desc(),
                pattern.last_seen_at.desc(),
            )
            .limit(1)
        )
        with self.session_factory() as session:
            method = session.execute(stmt).scalar_one_or_none()
        if method is None:
            return None
        try:
            return StrategyName(method)
        except ValueError:
            logger.warning(f"Ignoring unknown learned strategy '{method}' for {site_type.value}")
            return None

    def update_extraction_pattern(
        self,
        site_type: SiteType,
        html_pattern: str,
        strategy: StrategyName,
        parser_version: str,
        success: bool,
    ) -> None:
        hit = 1 if success else 0
        key = {
            "site_type": site_type.value,
            "html_pattern": html_pattern[:MAX_PATTERN_LENGTH],
            "extraction_method": strategy.value,
            "parser_version": parser_version,
        }
        with self.session_factory() as session:
            run_with_retry(session, lambda db: self._accumulate(db, key, hit))

    def _accumulate(self, session: Session, key: dict, hit: int) -> None:
        pattern = RecipeExtractionPattern
        increments = {
            "success_count": pattern.success_count + hit,
            "failure_count": pattern.failure_count + (1 - hit),
            "sample_count": pattern.sample_count + 1,
            "success_rate": cast(pattern.success_count + hit, Float) / (pattern.sample_count + 1),
            "last_seen_at": func.now(),
        }
        insert = UPSERT_INSERTS.get(session.get_bind().dialect.name)
        if insert is not None:
            stmt = insert(pattern).values(
                **key,
                success_count=hit,
                failure_count=1 - hit,
                sample_count=1,
                success_rate=float(hit),
            )
            stmt = stmt.on_conflict_do_update(index_elements=list(key), set_=increments)
            session.execute(stmt)
            return

        result = session.execute(
            update(pattern).where(*(getattr(pattern, name) == value for name, value in key.items())).values(**increments)
        )
        if result.rowcount == 0:
            session.add(
                pattern(**key, success_count=hit, failure_count=1 - hit, sample_count=1, success_rate=float(hit))
            )

    def log_import_attempt(self, attempt: ExtractionAttempt) -> Optional[int]:
        sample = attempt.raw_html_sample[: self.raw_html_sample_chars] if attempt.raw_html_sample else None
        row = RecipeImportAttempt(
            url=attempt.url,
            site_type=attempt.site_type.value,
            parser_version=attempt.parser_version,
            strategy_used=attempt.strategy_used.value,
            success=attempt.success,
            html_pattern=attempt.html_pattern[:MAX_PATTERN_LENGTH],
            confidence_score=attempt.confidence.value if attempt.confidence else None,
            ingredients_count=attempt.ingredients_count,
            steps_count=attempt.steps_count,
            error_message=attempt.error_message,
            raw_html_sample=sample,
        )
        with self.session_factory() as session:

            def work(db: Session) -> int:
                db.add(row)
                db.flush()
                return row.id

            return run_with_retry(session, work)

    def record_discovered_site(self, host: str, detection_method: str) -> None:
        if not host:
            return
        site = DiscoveredRecipeSite
        with self.session_factory() as session:

            def work(db: Session) -> None:
                insert = UPSERT_INSERTS.get(db.get_bind().dialect.name)
                if insert is not None:
                    stmt = insert(site).values(hostname=host, detection_method=detection_method, discovery_count=1)
                    stmt = stmt.on_conflict_do_update(
                        index_elements=[site.hostname],
                        set_={"discovery_count": site.discovery_count + 1, "last_seen_at": func.now()},
                    )
                    db.execute(stmt)
                    return
                result = db.execute(
                    update(site)
                    .where(site.hostname == host)
                    .values(discovery_count=site.discovery_count + 1, last_seen_at=func.now())
                )
                if result.rowcount == 0:
                    db.add(site(hostname=host, detection_method=detection_method, discovery_count=1))

            run_with_retry(session, work)

    def discovered_hosts(self) -> List[str]:
        with self.session_factory() as session:
            return list(session.execute(select(DiscoveredRecipeSite.hostname)).scalars())

    @property
    def single_connection(self) -> bool:
        with self.session_factory() as session:
            return isinstance(session.get_bind().pool, StaticPool)


class PatternRecorder:
    """Pipeline-side client of a pattern store: bounded reads, fire-and-forget writes."""

    def __init__(self, store: Optional[PatternStore], lookup_timeout: float = 2.0):
        self.store = store
        self.lookup_timeout = lookup_timeout
        self._tasks: Set[asyncio.Task] = set()
        # An in-memory engine hands every thread the same connection.
        self._store_lock = threading.Lock() if getattr(store, "single_connection", False) else nullcontext()

    def _locked(self, fn: Callable, *args):
        with self._store_lock:
            return fn(*args)

    async def best_method(self, site_type: SiteType, html_pattern: str) -> Optional[StrategyName]:
        if self.store is None:
            return None
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self._locked, self.store.get_best_extraction_method, site_type, html_pattern),
                self.lookup_timeout,
            )
        except Exception as e:
            logger.warning(f"Pattern lookup failed for {site_type.value}/{html_pattern}: {e!r}")
            return None

    async def known_recipe_hosts(self) -> List[str]:
        if self.store is None:
            return []
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self._locked, self.store.discovered_hosts),
                self.lookup_timeout,
            )
        except Exception as e:
            logger.warning(f"Discovered-site lookup failed: {e!r}")
            return []

    def record(self, attempt: ExtractionAttempt) -> None:
        if self.store is not None:
            self._schedule(self._write_attempt, attempt)

    def record_discovery(self, host: str, detection_method: str) -> None:
        if self.store is not None:
            self._schedule(self.store.record_discovered_site, host, detection_method)

    def _write_attempt(self, attempt: ExtractionAttempt) -> None:
        try:
            self.store.log_import_attempt(attempt)
        except Exception as e:
            logger.warning(f"Failed to log import attempt for {attempt.url}: {e!r}")
        self.store.update_extraction_pattern(
            attempt.site_type,
            attempt.html_pattern,
            attempt.strategy_used,
            attempt.parser_version,
            attempt.success,
        )

    def _schedule(self, fn: Callable, *args) -> None:
        task = asyncio.get_running_loop().create_task(asyncio.to_thread(self._locked, fn, *args))
        self._tasks.add(task)
        task.add_done_callback(self._finished)

    def _finished(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(f"Pattern store write failed: {exc!r}")

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for in-flight writes; used at shutdown and in tests."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
