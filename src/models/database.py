from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from config import settings
from models.sqlite_config import apply_sqlite_pragmas, is_memory_url, is_sqlite_url, sqlite_connect_args


class Base(DeclarativeBase):
    pass


def create_db_engine(url: str):
    args = {
        "connect_args": sqlite_connect_args(url),
        "echo": settings.debug,
    }
    if is_memory_url(url):
        args["poolclass"] = StaticPool
    db_engine = create_engine(url, **args)
    if is_sqlite_url(url) and not is_memory_url(url):
        event.listen(db_engine, "connect", lambda connection, _record: apply_sqlite_pragmas(connection))
    return db_engine


engine = create_db_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
