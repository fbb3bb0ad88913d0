"""
Link Extractor

Parses a page's HTML, collects anchor targets, resolves them to absolute URLs
and deduplicates them. Only one page deep: links are never followed here.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from .schemas import LinkCandidate

logger = logging.getLogger(__name__)

MAX_ANCHOR_TEXT = 50

# Targets that cannot be fetched with an HTTP existence check
SKIPPED_PREFIXES = ("mailto:", "tel:", "javascript:", "#")


def _is_skipped(href: str) -> bool:
    return href.lower().startswith(SKIPPED_PREFIXES)


def _resolve(base_url: str, href: str) -> Optional[str]:
    """Resolve ``href`` against ``base_url``; None if unparseable or not http(s)."""
    try:
        absolute = urljoin(base_url, href)
        parsed = urlparse(absolute)
        # Accessing .port validates the netloc
        parsed.port
    except ValueError:
        return None

    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return None
    return absolute


def extract_links(base_url: str, html: str) -> List[LinkCandidate]:
    """
    Extract distinct hyperlinks from ``html``.

    Args:
        base_url: URL the page was fetched from; relative targets resolve against it
        html: Page markup

    Returns:
        Candidates in document order, unique by absolute URL (first-seen
        anchor text wins)
    """
    soup = BeautifulSoup(html or "", "html.parser")
    links: Dict[str, LinkCandidate] = {}

    for anchor in soup.find_all("a", href=True):
        href = anchor["href"]
        if isinstance(href, list):
            href = " ".join(href)
        href = href.strip()
        if not href or _is_skipped(href):
            continue

        absolute = _resolve(base_url, href)
        if absolute is None:
            logger.debug(f"Skipping unresolvable link {href!r} on {base_url}")
            continue

        if absolute not in links:
            text = anchor.get_text().strip()[:MAX_ANCHOR_TEXT]
            links[absolute] = LinkCandidate(absolute_url=absolute, anchor_text=text)

    logger.debug(f"Extracted {len(links)} distinct link(s) from {base_url}")
    return list(links.values())
