import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from metrics.metrics import (
    AttemptOutcome,
    average_confidence_score,
    confidence_label,
    failure_groups,
    group_success,
    success_rate,
)
from models import RecipeExtractionPattern, RecipeImportAttempt

logger = logging.getLogger(__name__)


def _outcomes(
    db: Session,
    site_type: Optional[str] = None,
    parser_version: Optional[str] = None,
    days: Optional[int] = None,
) -> List[AttemptOutcome]:
    query = db.query(RecipeImportAttempt)
    if site_type:
        query = query.filter(RecipeImportAttempt.site_type == site_type)
    if parser_version:
        query = query.filter(RecipeImportAttempt.parser_version == parser_version)
    if days:
        since = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(days=days)
        query = query.filter(RecipeImportAttempt.created_at >= since)
    return [
        AttemptOutcome(
            site_type=row.site_type,
            strategy=row.strategy_used,
            success=row.success,
            confidence=row.confidence_score,
            error_message=row.error_message,
        )
        for row in query.order_by(RecipeImportAttempt.id.desc()).all()
    ]


def overall_stats(db: Session) -> Dict:
    outcomes = _outcomes(db)
    unique_urls = db.execute(select(func.count(func.distinct(RecipeImportAttempt.url)))).scalar_one()
    patterns = db.execute(select(func.count(RecipeExtractionPattern.id))).scalar_one()
    return {
        "total_attempts": len(outcomes),
        "successful_attempts": sum(1 for o in outcomes if o.success),
        "success_rate": success_rate(outcomes),
        "unique_urls": unique_urls,
        "patterns_learned": patterns,
    }


def success_by_site_type(db: Session) -> List[Dict]:
    return group_success(_outcomes(db), "site_type")


def strategy_performance(db: Session) -> List[Dict]:
    return group_success(_outcomes(db), "strategy")


def learned_patterns(db: Session, limit: int = 20) -> List[RecipeExtractionPattern]:
    return (
        db.query(RecipeExtractionPattern)
        .order_by(RecipeExtractionPattern.sample_count.desc(), RecipeExtractionPattern.success_rate.desc())
        .limit(limit)
        .all()
    )


def failure_patterns(db: Session, limit: int = 10) -> List[Dict]:
    return failure_groups(_outcomes(db), limit=limit)


def parser_stats(
    db: Session,
    site_type: str,
    parser_version: Optional[str] = None,
    days: int = 30,
) -> Dict:
    outcomes = _outcomes(db, site_type=site_type, parser_version=parser_version, days=days)
    average = average_confidence_score(outcomes)
    return {
        "site_type": site_type,
        "parser_version": parser_version,
        "days": days,
        "total": len(outcomes),
        "successful": sum(1 for o in outcomes if o.success),
        "success_rate": success_rate(outcomes),
        "average_confidence_score": average,
        "average_confidence": confidence_label(average),
    }
