from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

CONFIDENCE_POINTS = {"low": 1, "medium": 2, "high": 3}
HIGH_CONFIDENCE_AVERAGE = 2.5
MEDIUM_CONFIDENCE_AVERAGE = 1.5


@dataclass(frozen=True)
class AttemptOutcome:
    site_type: str
    strategy: str
    success: bool
    confidence: Optional[str] = None
    error_message: Optional[str] = None


def success_rate(outcomes: Iterable[AttemptOutcome]) -> float:
    outcome_list = list(outcomes)
    if not outcome_list:
        return 0.0
    return sum(1 for o in outcome_list if o.success) / len(outcome_list)


def average_confidence_score(outcomes: Iterable[AttemptOutcome]) -> Optional[float]:
    points = [CONFIDENCE_POINTS[o.confidence] for o in outcomes if o.success and o.confidence in CONFIDENCE_POINTS]
    if not points:
        return None
    return sum(points) / len(points)


def confidence_label(average: Optional[float]) -> str:
    if average is None:
        return "low"
    if average >= HIGH_CONFIDENCE_AVERAGE:
        return "high"
    if average >= MEDIUM_CONFIDENCE_AVERAGE:
        return "medium"
    return "low"


def group_success(outcomes: Iterable[AttemptOutcome], key: str) -> List[Dict]:
    """Attempts, successes and rate per value of key ('site_type' or 'strategy')."""
    groups: Dict[str, List[AttemptOutcome]] = {}
    for outcome in outcomes:
        groups.setdefault(getattr(outcome, key), []).append(outcome)
    rows = [
        {
            key: name,
            "attempts": len(members),
            "successes": sum(1 for m in members if m.success),
            "success_rate": success_rate(members),
        }
        for name, members in groups.items()
    ]
    return sorted(rows, key=lambda row: (-row["attempts"], row[key]))


def failure_groups(outcomes: Iterable[AttemptOutcome], limit: int = 10) -> List[Dict]:
    """Failures grouped by 'site - strategy', most frequent first."""
    groups: Dict[str, Dict] = {}
    for outcome in outcomes:
        if outcome.success:
            continue
        label = f"{outcome.site_type} - {outcome.strategy}"
        group = groups.setdefault(
            label,
            {"site_type": outcome.site_type, "strategy": outcome.strategy, "failures": 0, "sample_error": None},
        )
        group["failures"] += 1
        if outcome.error_message and group["sample_error"] is None:
            group["sample_error"] = outcome.error_message
    return sorted(groups.values(), key=lambda g: -g["failures"])[:limit]
