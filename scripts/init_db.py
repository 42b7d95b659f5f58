"""Create the pattern store tables."""

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / "src"))

from config import settings
from models import init_db
from models.migrations import upgrade_db

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the recipe import tables")
    parser.add_argument(
        "--migrate",
        action="store_true",
        help="Apply Alembic migrations instead of create_all",
    )
    args = parser.parse_args()

    logger.info(f"Initializing {settings.database_url}")
    if args.migrate:
        upgrade_db()
    else:
        init_db()
    logger.info("Database tables ready")


if __name__ == "__main__":
    main()
