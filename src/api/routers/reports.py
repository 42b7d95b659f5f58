from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from models import get_db
from models.schemas import (
    ExtractionPatternResponse,
    FailurePatternResponse,
    OverallStatsResponse,
    ParserStatsResponse,
    SiteTypeStats,
    StrategyStats,
)
from services import extraction_reports
from services.recipe_extraction.models import SiteType

router = APIRouter()


@router.get("/summary", response_model=OverallStatsResponse)
async def summary(db: Session = Depends(get_db)) -> OverallStatsResponse:
    return OverallStatsResponse(**extraction_reports.overall_stats(db))


@router.get("/sites", response_model=List[SiteTypeStats])
async def success_by_site(db: Session = Depends(get_db)) -> List[SiteTypeStats]:
    return [SiteTypeStats(**row) for row in extraction_reports.success_by_site_type(db)]


@router.get("/strategies", response_model=List[StrategyStats])
async def strategy_performance(db: Session = Depends(get_db)) -> List[StrategyStats]:
    return [StrategyStats(**row) for row in extraction_reports.strategy_performance(db)]


@router.get("/patterns", response_model=List[ExtractionPatternResponse])
async def learned_patterns(
    limit: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
) -> List[ExtractionPatternResponse]:
    patterns = extraction_reports.learned_patterns(db, limit=limit)
    return [ExtractionPatternResponse.model_validate(pattern) for pattern in patterns]


@router.get("/failures", response_model=List[FailurePatternResponse])
async def failure_patterns(
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
) -> List[FailurePatternResponse]:
    return [FailurePatternResponse(**row) for row in extraction_reports.failure_patterns(db, limit=limit)]


@router.get("/parsers/{site_type}", response_model=ParserStatsResponse)
async def parser_stats(
    site_type: str,
    version: Optional[str] = None,
    days: int = Query(30, ge=1, le=365),
    db: Session = Depends(get_db),
) -> ParserStatsResponse:
    if site_type not in {member.value for member in SiteType}:
        raise HTTPException(status_code=404, detail=f"Unknown site type {site_type}")
    return ParserStatsResponse(**extraction_reports.parser_stats(db, site_type, version, days))
