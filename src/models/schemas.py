from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ImportRequest(BaseModel):
    url: str = Field(..., min_length=4, max_length=2048)
    html: Optional[str] = Field(
        default=None,
        description="Already-fetched page markup; the page is fetched when omitted",
    )


class ExtractionResultResponse(BaseModel):
    success: bool
    strategy_used: str
    confidence: str
    title: Optional[str] = None
    ingredients: List[str] = Field(default_factory=list)
    steps: List[str] = Field(default_factory=list)
    image: Optional[str] = None
    error: Optional[str] = None


class ImportResponse(BaseModel):
    url: str
    site_type: str
    parser_version: str
    html_pattern: str
    strategies_tried: List[str]
    result: ExtractionResultResponse


class SiteTypeResponse(BaseModel):
    url: str
    site_type: str
    parser_version: str
    strategies: List[str]


class OverallStatsResponse(BaseModel):
    total_attempts: int
    successful_attempts: int
    success_rate: float
    unique_urls: int
    patterns_learned: int


class SiteTypeStats(BaseModel):
    site_type: str
    attempts: int
    successes: int
    success_rate: float


class StrategyStats(BaseModel):
    strategy: str
    attempts: int
    successes: int
    success_rate: float


class ExtractionPatternResponse(BaseModel):
    id: int
    site_type: str
    html_pattern: str
    extraction_method: str
    parser_version: str
    success_count: int
    failure_count: int
    sample_count: int
    success_rate: float
    last_seen_at: datetime

    model_config = {"from_attributes": True}


class FailurePatternResponse(BaseModel):
    site_type: str
    strategy: str
    failures: int
    sample_error: Optional[str] = None


class ParserStatsResponse(BaseModel):
    site_type: str
    parser_version: Optional[str]
    days: int
    total: int
    successful: int
    success_rate: float
    average_confidence_score: Optional[float]
    average_confidence: str
