import pytest

from utils import domain_matches, extract_domain, pattern_matches, url_path


def test_extract_domain():
    assert extract_domain("https://www.github.com/x") == "github.com"
    assert extract_domain("not a url") is None
    assert extract_domain("") is None


def test_url_path():
    assert url_path("https://google.com/search?q=1") == "/search"
    assert url_path("") == ""


@pytest.mark.parametrize("hostname, domain, expected", [
    ("x.com", "x.com", True),
    ("mobile.x.com", "x.com", True),
    ("dropbox.com", "x.com", False),
    ("M.YouTube.com", "youtube.com", True),
    (None, "x.com", False),
])
def test_domain_matches(hostname, domain, expected):
    assert domain_matches(hostname, domain) is expected


@pytest.mark.parametrize("pattern, hostname, path, expected", [
    ("google.com/docs", "google.com", "/docs/d/1", True),
    ("google.com/docs", "google.com", "/search", False),
    ("google.com/search", "notgoogle.com", "/search", False),
    ("docs.", "docs.python.org", "", True),
    ("docs.", "api.docs.example.com", "", True),
    ("docs.", "mydocs.com", "", False),
    ("github.com", "gist.github.com", "", True),
    ("x.com", "fedex.com", "", False),
    ("coursera", "www-coursera.org", "", True),
])
def test_pattern_matches(pattern, hostname, path, expected):
    assert pattern_matches(pattern, hostname, path) is expected
