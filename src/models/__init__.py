from models.database import Base, SessionLocal, get_db, init_db
from models.domain import DiscoveredRecipeSite, RecipeExtractionPattern, RecipeImportAttempt

__all__ = [
    "Base",
    "SessionLocal",
    "get_db",
    "init_db",
    "RecipeImportAttempt",
    "RecipeExtractionPattern",
    "DiscoveredRecipeSite",
]
