"""
Robots Validator

Fetches ``/robots.txt`` from a site root and checks that it is served.
"""

import logging
from urllib.parse import urljoin

import httpx

from .http_client import ProbeConfig
from .schemas import RobotsResult

logger = logging.getLogger(__name__)


class RobotsValidator:
    """robots.txt existence and reachability check."""

    def __init__(self, client: httpx.AsyncClient, config: ProbeConfig):
        self.client = client
        self.config = config

    async def check(self, base_url: str) -> RobotsResult:
        """
        Validate ``/robots.txt`` for the site hosting ``base_url``.

        Valid iff the response status is exactly 200.
        """
        robots_url = urljoin(base_url, "/robots.txt")
        try:
            response = await self.client.get(
                robots_url,
                follow_redirects=True,
                timeout=self.config.timeout,
            )
        except Exception as e:
            logger.warning(f"robots.txt fetch failed for {robots_url}: {e}")
            return RobotsResult(
                url=robots_url,
                is_valid=False,
                status=0,
                issues=[str(e) or type(e).__name__],
            )

        is_valid = response.status_code == 200
        logger.info(f"robots.txt at {robots_url} returned {response.status_code}")
        return RobotsResult(
            url=robots_url,
            content=response.text if is_valid else None,
            is_valid=is_valid,
            status=response.status_code,
            issues=[] if is_valid else [f"Returned status {response.status_code}"],
        )
