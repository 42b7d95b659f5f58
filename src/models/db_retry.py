import logging
import time
from typing import Callable, TypeVar

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_locked_error(exc: OperationalError) -> bool:
    message = str(getattr(exc, "orig", exc)).lower()
    return "database is locked" in message or "database is busy" in message


def run_with_retry(
    session: Session,
    work: Callable[[Session], T],
    retries: int = 3,
    delay: float = 0.1,
) -> T:
    """Run work and commit, rolling back and retrying while SQLite reports a lock.

    work must be safe to repeat: each retry replays it in a fresh transaction.
    """
    for attempt in range(retries):
        try:
            result = work(session)
            session.commit()
            return result
        except OperationalError as exc:
            session.rollback()
            if not is_locked_error(exc) or attempt == retries - 1:
                raise
            logger.debug(f"Database locked, retrying ({attempt + 1}/{retries})")
            time.sleep(delay * (attempt + 1))
    raise RuntimeError("run_with_retry called with retries < 1")
