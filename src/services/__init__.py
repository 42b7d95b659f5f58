from .recipe_extraction import RecipeImporter, SqlPatternStore

__all__ = [
    "RecipeImporter",
    "SqlPatternStore",
]
