"""Print what the import pipeline has learned: success rates, top patterns and failures."""

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / "src"))

from models import SessionLocal
from services import extraction_reports

logging.basicConfig(level=logging.WARNING)
logger = logging.getLogger(__name__)


def _pct(rate: float) -> str:
    return f"{rate * 100:.1f}%"


def print_report(pattern_limit: int, failure_limit: int) -> None:
    with SessionLocal() as db:
        stats = extraction_reports.overall_stats(db)
        print("Overall")
        print(f"  attempts:         {stats['total_attempts']}")
        print(f"  successful:       {stats['successful_attempts']} ({_pct(stats['success_rate'])})")
        print(f"  unique URLs:      {stats['unique_urls']}")
        print(f"  patterns learned: {stats['patterns_learned']}")

        print("\nSuccess by site type")
        for row in extraction_reports.success_by_site_type(db):
            print(f"  {row['site_type']:<12} {row['successes']:>5}/{row['attempts']:<5} {_pct(row['success_rate'])}")

        print("\nStrategy performance")
        for row in extraction_reports.strategy_performance(db):
            print(f"  {row['strategy']:<16} {row['successes']:>5}/{row['attempts']:<5} {_pct(row['success_rate'])}")

        print(f"\nTop {pattern_limit} learned patterns")
        for pattern in extraction_reports.learned_patterns(db, limit=pattern_limit):
            print(
                f"  {pattern.site_type:<12} {pattern.extraction_method:<16} "
                f"{pattern.parser_version:<4} {_pct(pattern.success_rate):>7} "
                f"n={pattern.sample_count:<5} {pattern.html_pattern}"
            )

        print("\nFailure patterns")
        failures = extraction_reports.failure_patterns(db, limit=failure_limit)
        if not failures:
            print("  none recorded")
        for row in failures:
            print(f"  {row['site_type']} - {row['strategy']}: {row['failures']} ({row['sample_error'] or 'no message'})")


def main() -> None:
    parser = argparse.ArgumentParser(description="Analyze learned extraction patterns")
    parser.add_argument("--patterns", type=int, default=20, help="Number of top patterns to show")
    parser.add_argument("--failures", type=int, default=10, help="Number of failure groups to show")
    args = parser.parse_args()
    print_report(args.patterns, args.failures)


if __name__ == "__main__":
    main()
