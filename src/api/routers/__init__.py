"""API routers."""

try:
    from api.routers import imports, reports
except ImportError:
    from src.api.routers import imports, reports

__all__ = ["imports", "reports"]
