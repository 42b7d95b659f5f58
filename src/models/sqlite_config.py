def is_sqlite_url(url: str) -> bool:
    return url.startswith("sqlite://")


def is_memory_url(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:")


def sqlite_connect_args(url: str) -> dict:
    if not is_sqlite_url(url):
        return {}
    return {"check_same_thread": False, "timeout": 30}


def apply_sqlite_pragmas(connection) -> None:
    """Pattern updates arrive from concurrent imports; WAL keeps readers unblocked."""
    cursor = connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()
