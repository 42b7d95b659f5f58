"""HTTP surface for recipe imports and extraction reports."""

try:
    from api.app import app
except ImportError:
    # Running from the repository root rather than src/
    from src.api.app import app

__all__ = ["app"]
