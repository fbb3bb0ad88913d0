"""
Redirect Tracer

Follows a redirect chain hop by hop, recording the status and headers of
every response. Redirect following is disabled on the transport so each hop
is observed individually rather than as one collapsed final response.
"""

import asyncio
import logging
from typing import List
from urllib.parse import urljoin

import httpx

from .http_client import ProbeConfig
from .schemas import Hop, RedirectTrace

logger = logging.getLogger(__name__)


class RedirectTracer:
    """Hop-by-hop redirect chain tracer with a hop bound."""

    def __init__(self, client: httpx.AsyncClient, config: ProbeConfig):
        """
        Initialize redirect tracer.

        Args:
            client: Shared async HTTP client
            config: Probe configuration (hop bound and timeout)
        """
        self.client = client
        self.config = config
        self.max_redirects = config.max_redirects

    async def trace(self, url: str) -> RedirectTrace:
        """
        Trace the redirect chain starting at ``url``.

        Never raises: a transport failure is recorded as a final hop with
        status 0 and an error message. Hitting the hop bound simply ends the
        trace; callers may infer a loop from the hop count.

        Args:
            url: Absolute, already normalised URL

        Returns:
            RedirectTrace with at least one hop
        """
        hops: List[Hop] = []
        current_url = url
        count = 0

        try:
            while count < self.max_redirects:
                hop = await self._request(current_url)
                hops.append(hop)

                if not hop.is_redirect:
                    break

                location = hop.location
                if not location:
                    # A 3xx without Location is a legitimate end of chain
                    break

                current_url = urljoin(current_url, location)
                count += 1

        except Exception as e:
            logger.warning(f"Redirect trace for {url} failed at {current_url}: {e}")
            hops.append(Hop(url=current_url, status=0, error=str(e) or type(e).__name__))

        logger.info(f"Traced {url}: {len(hops)} hop(s)")
        return RedirectTrace(requested_url=url, hops=hops)

    async def trace_many(self, urls: List[str]) -> List[RedirectTrace]:
        """
        Trace several URLs concurrently.

        Traces are independent: one URL's failure never affects the others.
        Results keep the input order.
        """
        return list(await asyncio.gather(*(self.trace(url) for url in urls)))

    async def _request(self, url: str) -> Hop:
        """Issue one GET without following redirects; the body is never read."""
        async with self.client.stream(
            "GET",
            url,
            follow_redirects=False,
            timeout=self.config.timeout,
        ) as response:
            return Hop(
                url=url,
                status=response.status_code,
                headers={k.lower(): v for k, v in response.headers.items()},
            )
