"""Site-type classification of import URLs."""

from typing import Iterable, Optional
from urllib.parse import urlparse

from constants.recipe_sites import KNOWN_RECIPE_SITES
from services.recipe_extraction.models import SiteType

SOCIAL_HOSTS = {
    "tiktok.com": SiteType.TIKTOK,
    "instagram.com": SiteType.INSTAGRAM,
    "facebook.com": SiteType.FACEBOOK,
    "fb.com": SiteType.FACEBOOK,
    "fb.watch": SiteType.FACEBOOK,
}


def hostname(url: str) -> str:
    try:
        host = urlparse(url if "://" in url else f"https://{url}").hostname or ""
    except ValueError:
        return ""
    host = host.lower()
    return host[4:] if host.startswith("www.") else host


def host_matches(host: str, domain: str) -> bool:
    return host == domain or host.endswith(f".{domain}")


def detect_site_type(url: str, discovered_hosts: Optional[Iterable[str]] = None) -> SiteType:
    host = hostname(url)
    if not host:
        return SiteType.GENERIC
    for domain, site_type in SOCIAL_HOSTS.items():
        if host_matches(host, domain):
            return site_type
    for domain in KNOWN_RECIPE_SITES:
        if host_matches(host, domain):
            return SiteType.RECIPE_SITE
    if discovered_hosts and host in set(discovered_hosts):
        return SiteType.RECIPE_SITE
    return SiteType.GENERIC
