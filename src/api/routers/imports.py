import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from models.schemas import ExtractionResultResponse, ImportRequest, ImportResponse, SiteTypeResponse
from services.recipe_extraction import RecipeImporter, SqlPatternStore, detect_site_type, get_parser_config
from services.recipe_extraction.fetcher import PageFetcher
from services.recipe_extraction.models import ImportOutcome
from services.recipe_extraction.sandbox import StaticSandbox

logger = logging.getLogger(__name__)

router = APIRouter()

_importer: Optional[RecipeImporter] = None


def get_importer() -> RecipeImporter:
    global _importer
    if _importer is None:
        fetcher = PageFetcher()
        _importer = RecipeImporter(store=SqlPatternStore(), fetcher=fetcher, sandbox=StaticSandbox(fetcher))
    return _importer


async def shutdown_importer() -> None:
    if _importer is not None:
        await _importer.close()


def _to_response(outcome: ImportOutcome) -> ImportResponse:
    result = outcome.result
    return ImportResponse(
        url=outcome.url,
        site_type=outcome.site_type.value,
        parser_version=outcome.parser_version,
        html_pattern=outcome.html_pattern,
        strategies_tried=[strategy.value for strategy in outcome.tried],
        result=ExtractionResultResponse(
            success=result.success,
            strategy_used=result.strategy_used.value,
            confidence=result.confidence.value,
            title=result.title,
            ingredients=list(result.ingredients),
            steps=list(result.steps),
            image=result.image,
            error=result.error,
        ),
    )


@router.post("", response_model=ImportResponse)
async def import_recipe(
    payload: ImportRequest,
    importer: RecipeImporter = Depends(get_importer),
) -> ImportResponse:
    """Extract a recipe from a URL. Failures come back as success=false, never as errors."""
    outcome = await importer.import_recipe(payload.url, html=payload.html)
    return _to_response(outcome)


@router.get("/site-type", response_model=SiteTypeResponse)
async def classify_url(
    url: str = Query(..., min_length=4),
    importer: RecipeImporter = Depends(get_importer),
) -> SiteTypeResponse:
    """Site type and active parser config for a URL."""
    site_type = detect_site_type(url, await importer.recorder.known_recipe_hosts())
    config = get_parser_config(site_type)
    return SiteTypeResponse(
        url=url,
        site_type=site_type.value,
        parser_version=config.version,
        strategies=[strategy.value for strategy in config.strategies],
    )
