import pytest

from services.recipe_extraction.models import SiteType
from services.recipe_extraction.site_types import detect_site_type, host_matches, hostname


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://www.tiktok.com/@cook/video/1", SiteType.TIKTOK),
        ("https://vm.tiktok.com/ZMabc/", SiteType.TIKTOK),
        ("https://www.instagram.com/p/abc/", SiteType.INSTAGRAM),
        ("https://m.facebook.com/watch?v=1", SiteType.FACEBOOK),
        ("https://fb.watch/abc", SiteType.FACEBOOK),
        ("https://www.allrecipes.com/recipe/1/soup/", SiteType.RECIPE_SITE),
        ("https://www.foodnetwork.com/recipes/soup", SiteType.RECIPE_SITE),
        ("https://example.com/blog", SiteType.GENERIC),
        ("not a url", SiteType.GENERIC),
        ("", SiteType.GENERIC),
    ],
)
def test_detect_site_type(url, expected):
    assert detect_site_type(url) == expected


def test_discovered_hosts_count_as_recipe_sites():
    assert detect_site_type("https://www.grandmas-kitchen.net/pie", ["grandmas-kitchen.net"]) == SiteType.RECIPE_SITE


def test_lookalike_domains_do_not_match():
    assert not host_matches("nottiktok.com", "tiktok.com")
    assert detect_site_type("https://nottiktok.com/x") == SiteType.GENERIC


def test_hostname_strips_www_and_adds_scheme():
    assert hostname("WWW.Example.com/path") == "example.com"
