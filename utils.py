# utils.py
import math
import random
import time
import uuid
from typing import Optional
from urllib.parse import urlparse


TREE_TYPES = [
    'row-1-column-1', 'row-1-column-2', 'row-1-column-3', 'row-1-column-4',
    'row-1-column-5', 'row-1-column-6', 'row-1-column-7',
    'row-3-column-2', 'row-3-column-3', 'row-4-column-1'
]


def generate_id() -> str:
    """Returns a unique, time-prefixed identifier."""
    return f"{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def distance(x1: float, y1: float, x2: float, y2: float) -> float:
    return math.hypot(x2 - x1, y2 - y1)


def random_between(rng: random.Random, low: float, high: float) -> float:
    return rng.random() * (high - low) + low


def random_tree_type(rng: random.Random) -> str:
    return rng.choice(TREE_TYPES)


def extract_domain(url: str) -> Optional[str]:
    """
    Returns the hostname of a URL with any leading 'www.' removed.
    Returns None when the URL cannot be parsed into a hostname.
    """
    if not url:
        return None
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return None
    if not hostname:
        return None
    if hostname.startswith("www."):
        hostname = hostname[4:]
    return hostname


def url_path(url: str) -> str:
    """Path of a URL, or '' when it cannot be parsed."""
    try:
        return urlparse(url or "").path
    except ValueError:
        return ""


def domain_matches(hostname: Optional[str], domain: str) -> bool:
    """True for the domain itself or any of its subdomains ('m.youtube.com' for 'youtube.com')."""
    if not hostname:
        return False
    hostname = hostname.lower()
    return hostname == domain or hostname.endswith('.' + domain)


def pattern_matches(pattern: str, hostname: str, path: str = "") -> bool:
    """
    Matches one classification rule pattern against a hostname and URL path.

    'google.com/docs'  domain plus path prefix
    'docs.'            leading hostname label
    'github.com'       domain or subdomain
    'coursera'         keyword anywhere in the hostname
    """
    hostname = hostname.lower()
    if '/' in pattern:
        domain, _, prefix = pattern.partition('/')
        return domain_matches(hostname, domain) and path.lower().lstrip('/').startswith(prefix)
    if pattern.endswith('.'):
        return hostname.startswith(pattern) or ('.' + pattern) in hostname
    if '.' in pattern:
        return domain_matches(hostname, pattern)
    return pattern in hostname


def format_duration(seconds: float) -> str:
    """Formats a duration as HH:MM:SS."""
    seconds = int(max(0, seconds))
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_minutes(minutes: int) -> str:
    hours, mins = divmod(int(minutes), 60)
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"
