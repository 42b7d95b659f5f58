from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.util.exc import CommandError

from config import settings

ALEMBIC_INI = Path(__file__).resolve().parents[2] / "alembic.ini"


def alembic_config(database_url: str | None = None) -> Config:
    config = Config(str(ALEMBIC_INI))
    config.set_main_option("script_location", str(ALEMBIC_INI.parent / "alembic"))
    config.set_main_option("sqlalchemy.url", database_url or settings.database_url)
    return config


def upgrade_db(revision: str = "head", database_url: str | None = None) -> None:
    try:
        command.upgrade(alembic_config(database_url), revision)
    except CommandError as exc:
        message = (
            "Pattern store migration failed. "
            "The database may be stamped with a revision that is missing in this repo. "
            f"Original error: {exc}"
        )
        raise RuntimeError(message) from exc
