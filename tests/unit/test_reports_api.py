import pytest

from services.recipe_extraction.models import Confidence, ExtractionAttempt, SiteType, StrategyName

PATTERN = "has-sigi|has-item-module"


def _attempt(site_type, strategy, success, url="https://www.tiktok.com/@a/video/1", **fields):
    return ExtractionAttempt(
        url=url,
        site_type=site_type,
        parser_version="v1",
        strategy_used=strategy,
        success=success,
        html_pattern=PATTERN,
        **fields,
    )


@pytest.fixture
def seeded(sql_store):
    attempts = [
        _attempt(SiteType.TIKTOK, StrategyName.EMBEDDED_STATE, False, error_message="No ingredients found in caption"),
        _attempt(SiteType.TIKTOK, StrategyName.META_TAGS, True, confidence=Confidence.MEDIUM),
        _attempt(SiteType.TIKTOK, StrategyName.EMBEDDED_STATE, False, url="https://www.tiktok.com/@a/video/2"),
        _attempt(
            SiteType.RECIPE_SITE,
            StrategyName.STRUCTURED_DATA,
            True,
            url="https://www.allrecipes.com/recipe/1/",
            confidence=Confidence.HIGH,
        ),
    ]
    for attempt in attempts:
        sql_store.log_import_attempt(attempt)
        sql_store.update_extraction_pattern(
            attempt.site_type, attempt.html_pattern, attempt.strategy_used, attempt.parser_version, attempt.success
        )
    return sql_store


def test_summary(client, seeded):
    response = client.get("/api/v1/reports/summary")

    assert response.status_code == 200
    assert response.json() == {
        "total_attempts": 4,
        "successful_attempts": 2,
        "success_rate": 0.5,
        "unique_urls": 3,
        "patterns_learned": 3,
    }


def test_summary_on_empty_store(client):
    body = client.get("/api/v1/reports/summary").json()
    assert body["total_attempts"] == 0
    assert body["success_rate"] == 0.0


def test_success_by_site(client, seeded):
    rows = client.get("/api/v1/reports/sites").json()
    assert rows[0]["site_type"] == "tiktok"
    assert rows[0]["attempts"] == 3
    assert rows[0]["successes"] == 1


def test_strategy_performance(client, seeded):
    rows = {row["strategy"]: row for row in client.get("/api/v1/reports/strategies").json()}
    assert rows["embedded-state"]["success_rate"] == 0.0
    assert rows["structured-data"]["success_rate"] == 1.0


def test_learned_patterns(client, seeded):
    rows = client.get("/api/v1/reports/patterns", params={"limit": 1}).json()
    assert len(rows) == 1
    assert rows[0]["extraction_method"] == "embedded-state"
    assert rows[0]["sample_count"] == 2
    assert rows[0]["success_rate"] == 0.0


def test_failure_patterns(client, seeded):
    rows = client.get("/api/v1/reports/failures").json()
    assert rows == [
        {
            "site_type": "tiktok",
            "strategy": "embedded-state",
            "failures": 2,
            "sample_error": "No ingredients found in caption",
        }
    ]


def test_parser_stats(client, seeded):
    body = client.get("/api/v1/reports/parsers/tiktok", params={"version": "v1"}).json()
    assert body["total"] == 3
    assert body["successful"] == 1
    assert body["average_confidence"] == "medium"
    assert body["average_confidence_score"] == 2.0


def test_parser_stats_unknown_site_type(client):
    response = client.get("/api/v1/reports/parsers/myspace")
    assert response.status_code == 404
