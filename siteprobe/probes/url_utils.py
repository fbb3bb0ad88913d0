"""
URL and domain normalisation shared by every entry point.

Normalisation happens once, at the edge (API handler, CLI, scan service),
before any probe is invoked.
"""
from __future__ import annotations

import re
from urllib.parse import urljoin, urlparse

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://")
_HTTP_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


class InvalidTargetError(ValueError):
    """Raised when a URL or domain is missing or malformed."""
    pass


def normalize_url(raw: str) -> str:
    """
    Normalise user input to an absolute http(s) URL.

    A bare input without a scheme is assumed to be ``https://``.

    Args:
        raw: URL or bare host as typed by the user

    Returns:
        Absolute URL string

    Raises:
        InvalidTargetError: If the input is empty, uses a non-http scheme or
            has no host
    """
    if raw is None or not isinstance(raw, str) or not raw.strip():
        raise InvalidTargetError("Please provide a URL")

    url = raw.strip()
    if not _HTTP_SCHEME_RE.match(url):
        if _SCHEME_RE.match(url):
            raise InvalidTargetError(f"Unsupported URL scheme: {url}")
        url = "https://" + url

    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError as e:
        raise InvalidTargetError(f"Invalid URL: {url}") from e

    if not hostname or any(c.isspace() for c in url):
        raise InvalidTargetError(f"Invalid URL: {url}")

    return url


def hostname_of(url: str) -> str:
    """Return the lower-cased host name of an absolute URL."""
    hostname = urlparse(url).hostname
    if not hostname:
        raise InvalidTargetError(f"Invalid URL: {url}")
    return hostname.lower()


def normalize_domain(raw: str) -> str:
    """
    Reduce a URL or host to the bare registrable-looking domain used for
    WHOIS lookups: lower-case, no scheme, no path, no leading ``www.``.
    """
    if raw is None or not isinstance(raw, str) or not raw.strip():
        raise InvalidTargetError("Please provide a domain")

    domain = raw.strip().lower()
    domain = _HTTP_SCHEME_RE.sub("", domain)
    domain = domain.split("/")[0]
    domain = domain.split("?")[0].split("#")[0]
    domain = domain.split(":")[0]
    if domain.startswith("www."):
        domain = domain[4:]

    if not domain or "." not in domain or any(c.isspace() for c in domain):
        raise InvalidTargetError(f"Invalid domain: {raw}")

    return domain


def site_root(url: str) -> str:
    """Return ``scheme://host[:port]/`` for an absolute URL."""
    return urljoin(url, "/")
