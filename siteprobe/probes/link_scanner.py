"""
Link Scanner

Fetches one page, extracts its links and validates them. Backs both the
single-page broken-link scan (capped) and the full website link scan.
"""

import logging
from typing import Optional

import httpx

from .http_client import ProbeConfig
from .link_extractor import extract_links
from .link_validator import LinkValidator, partition
from .schemas import LinkScanReport

logger = logging.getLogger(__name__)


class LinkScanner:
    """Page fetch + link extraction + link validation."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        config: ProbeConfig,
        validator: Optional[LinkValidator] = None,
    ):
        self.client = client
        self.config = config
        self.validator = validator or LinkValidator(client, config)

    async def scan_page(self, url: str) -> LinkScanReport:
        """Broken-link scan limited to ``config.page_link_limit`` links."""
        return await self.scan(url, limit=self.config.page_link_limit)

    async def scan_website(self, url: str) -> LinkScanReport:
        """Link scan over every link on the page (or ``website_link_limit``)."""
        return await self.scan(url, limit=self.config.website_link_limit)

    async def scan(self, url: str, limit: Optional[int] = None) -> LinkScanReport:
        """
        Scan ``url`` for broken links.

        Args:
            url: Absolute, already normalised page URL
            limit: Maximum number of distinct links to check (None = all)

        Returns:
            LinkScanReport; page-level failures are reported in ``error``
        """
        try:
            response = await self.client.get(
                url,
                follow_redirects=True,
                timeout=self.config.timeout,
            )
        except Exception as e:
            logger.warning(f"Could not fetch {url} for link scan: {e}")
            return LinkScanReport(url=url, error=str(e) or type(e).__name__)

        if not response.is_success:
            return LinkScanReport(
                url=url,
                error=f"Main page returned {response.status_code}",
            )

        # Relative links resolve against the page actually served
        base_url = str(response.url)
        candidates = extract_links(base_url, response.text)
        to_check = candidates[:limit] if limit is not None else candidates

        results = await self.validator.validate_all(to_check)
        working, broken = partition(results)

        logger.info(
            f"Link scan of {url}: {len(candidates)} found, {len(to_check)} checked, "
            f"{len(broken)} broken"
        )
        return LinkScanReport(
            url=url,
            total_links=len(candidates),
            checked_links=len(to_check),
            broken_links=broken,
            working_links=working,
        )
