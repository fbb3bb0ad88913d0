"""
Unit tests for URL and domain normalisation
"""
import pytest

from siteprobe.probes.url_utils import (
    InvalidTargetError,
    hostname_of,
    normalize_domain,
    normalize_url,
    site_root,
)


class TestNormalizeUrl:
    @pytest.mark.parametrize("raw,expected", [
        ("example.com", "https://example.com"),
        ("  example.com/path?q=1  ", "https://example.com/path?q=1"),
        ("http://example.com", "http://example.com"),
        ("HTTPS://Example.com/", "HTTPS://Example.com/"),
        ("localhost:8080", "https://localhost:8080"),
    ])
    def test_valid(self, raw, expected):
        assert normalize_url(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", 42, "ftp://example.com", "https://", "exa mple.com"])
    def test_invalid(self, raw):
        with pytest.raises(InvalidTargetError):
            normalize_url(raw)

    def test_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            normalize_url("")


class TestNormalizeDomain:
    @pytest.mark.parametrize("raw,expected", [
        ("example.com", "example.com"),
        ("https://www.Example.com/path", "example.com"),
        ("http://sub.example.co.uk:8443/?x=1", "sub.example.co.uk"),
        ("WWW.EXAMPLE.ORG", "example.org"),
    ])
    def test_valid(self, raw, expected):
        assert normalize_domain(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "localhost", "https://", "bad domain.com"])
    def test_invalid(self, raw):
        with pytest.raises(InvalidTargetError):
            normalize_domain(raw)


def test_hostname_of():
    assert hostname_of("https://Sub.Example.com:8080/x") == "sub.example.com"
    with pytest.raises(InvalidTargetError):
        hostname_of("/relative/path")


def test_site_root():
    assert site_root("https://example.com/a/b?c=d") == "https://example.com/"
