import re

INGREDIENTS_MARKER = re.compile(r"\bingredients?\b", re.IGNORECASE)
STEPS_MARKER = re.compile(r"\b(?:steps?|directions?|method|instructions?)\b", re.IGNORECASE)

MEASUREMENT_UNITS = [
    r"cups?",
    r"tsp",
    r"tbsp",
    r"teaspoons?",
    r"tablespoons?",
    r"oz",
    r"ounces?",
    r"lbs?",
    r"pounds?",
    r"g",
    r"grams?",
    r"kg",
    r"ml",
    r"l",
    r"lit(?:er|re)s?",
    r"cloves?",
    r"eggs?",
    r"sticks?",
    r"pinch(?:es)?",
]

UNIT_TOKEN = re.compile(r"\b(?:" + "|".join(MEASUREMENT_UNITS) + r")\b", re.IGNORECASE)

FRACTION_OR_DIGIT = re.compile(r"[0-9¼-¾⅐-⅞]")
BULLET_LINE = re.compile(r"^\s*[-*•▪●–]\s*\S", re.MULTILINE)
NUMBERED_LINE = re.compile(r"^\s*\d+\s*[.)]\s*\S", re.MULTILINE)

RECIPE_MARKERS = ["\U0001f6d2", "\U0001f4dd", "\U0001f37d", "⏰", "⏲", "➡"]

PROMO_PHRASES = re.compile(
    r"\b(?:tour|tickets?|anniversary|merch|follow|subscribe)\b|link\s+in\s+bio",
    re.IGNORECASE,
)

FOOD_WORDS = [
    "recipe", "pasta", "bread", "sauce", "chicken", "beef", "pork", "fish",
    "soup", "salad", "sandwich", "cake", "cookies", "cookie", "curry", "stew",
    "tacos", "noodles", "rice", "pie", "brownies", "muffins", "pancakes",
    "shrimp", "salmon", "dip", "bowl", "wings", "burger", "pizza", "chili",
    "lasagna", "casserole", "smoothie",
]

RECIPE_WORD = re.compile(
    r"\b(?:" + "|".join(FOOD_WORDS) + r"|bake|baked|roast(?:ed)?|grill(?:ed)?|"
    r"fried|stir[- ]fry|dessert|breakfast|dinner|lunch)\b",
    re.IGNORECASE,
)

PLATFORM_NAMES = ["tiktok", "instagram", "facebook", "youtube", "pinterest", "reels"]

WEAK_TITLES = {
    "recipe", "recipes", "food", "yummy", "delicious", "tasty", "homemade",
    "amazing", "good", "so good", "easy", "dinner", "lunch", "breakfast",
    "food network", "allrecipes", "new post", "original sound",
    *PLATFORM_NAMES,
}

SECTION_HEADER = re.compile(
    r"^\s*(?:ingredients?|steps?|directions?|method|instructions?)\s*:?\s*$",
    re.IGNORECASE,
)
