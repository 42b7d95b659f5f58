KNOWN_RECIPE_SITES = [
    "allrecipes.com",
    "food.com",
    "foodnetwork.com",
    "epicurious.com",
    "bonappetit.com",
    "seriouseats.com",
    "simplyrecipes.com",
    "delish.com",
    "tasty.co",
    "tasteofhome.com",
    "bbcgoodfood.com",
    "cooking.nytimes.com",
    "thekitchn.com",
    "budgetbytes.com",
    "minimalistbaker.com",
    "halfbakedharvest.com",
    "pinchofyum.com",
    "smittenkitchen.com",
    "cookieandkate.com",
    "loveandlemons.com",
    "recipetineats.com",
    "sallysbakingaddiction.com",
    "thepioneerwoman.com",
    "eatingwell.com",
    "myrecipes.com",
    "marthastewart.com",
    "jamieoliver.com",
    "kingarthurbaking.com",
]

# Hosts that publish an AMP rendition reachable by URL rewriting.
AMP_RECIPE_SITES = ["foodnetwork.com"]

SITE_DISPLAY_NAMES = {
    "allrecipes.com": "Allrecipes",
    "foodnetwork.com": "Food Network",
    "bonappetit.com": "Bon Appétit",
    "seriouseats.com": "Serious Eats",
    "tasteofhome.com": "Taste of Home",
    "bbcgoodfood.com": "BBC Good Food",
    "thepioneerwoman.com": "The Pioneer Woman",
    "kingarthurbaking.com": "King Arthur Baking",
}
