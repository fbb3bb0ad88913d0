"""
Link Validator

Concurrent existence checks (HEAD) for a set of links. Fan-out is bounded by
a semaphore sized from ``ProbeConfig.max_concurrency``; every check carries
its own hard timeout.
"""

import asyncio
import logging
from typing import Iterable, List, Optional, Tuple, Union

import httpx

from .http_client import ProbeConfig
from .schemas import LinkCandidate, LinkCheckResult

logger = logging.getLogger(__name__)


def is_working_status(status: int) -> bool:
    """2xx and 3xx count as working; 0 (transport failure) and >= 400 are broken."""
    return 200 <= status < 400


def partition(
    results: Iterable[LinkCheckResult],
) -> Tuple[List[LinkCheckResult], List[LinkCheckResult]]:
    """Split results into ``(working, broken)``."""
    working: List[LinkCheckResult] = []
    broken: List[LinkCheckResult] = []
    for result in results:
        (working if result.ok else broken).append(result)
    return working, broken


class LinkValidator:
    """Bounded concurrent link checker."""

    def __init__(self, client: httpx.AsyncClient, config: ProbeConfig):
        """
        Initialize link validator.

        Args:
            client: Shared async HTTP client
            config: Probe configuration (link timeout, concurrency bound)
        """
        self.client = client
        self.config = config
        self.timeout = config.link_timeout
        self.max_concurrency = config.max_concurrency

    async def check_url(self, url: str, anchor_text: Optional[str] = None) -> LinkCheckResult:
        """
        Check a single URL with a HEAD request.

        Never raises; a transport failure yields ``status=0, ok=False``.
        """
        try:
            # wait_for bounds the whole exchange; httpx timeouts are per phase
            response = await asyncio.wait_for(
                self.client.head(url, follow_redirects=True, timeout=self.timeout),
                timeout=self.timeout,
            )
            status = response.status_code
            return LinkCheckResult(
                url=url,
                status=status,
                ok=is_working_status(status),
                anchor_text=anchor_text or None,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.debug(f"Link check timed out for {url}: {e}")
            return LinkCheckResult(
                url=url,
                status=0,
                ok=False,
                anchor_text=anchor_text or None,
                error=str(e) or f"Timed out after {self.timeout}s",
            )
        except Exception as e:
            logger.debug(f"Link check failed for {url}: {e}")
            return LinkCheckResult(
                url=url,
                status=0,
                ok=False,
                anchor_text=anchor_text or None,
                error=str(e) or type(e).__name__,
            )

    async def validate_all(
        self,
        links: Iterable[Union[LinkCandidate, str]],
    ) -> List[LinkCheckResult]:
        """
        Check every link concurrently.

        Args:
            links: Link candidates or plain URLs

        Returns:
            Exactly one result per input link
        """
        candidates = [
            link if isinstance(link, LinkCandidate) else LinkCandidate(absolute_url=link)
            for link in links
        ]
        if not candidates:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _bounded(candidate: LinkCandidate) -> LinkCheckResult:
            async with semaphore:
                return await self.check_url(candidate.absolute_url, candidate.anchor_text)

        logger.info(
            f"Checking {len(candidates)} link(s) "
            f"(concurrency={self.max_concurrency}, timeout={self.timeout}s)"
        )
        results = await asyncio.gather(*(_bounded(c) for c in candidates))

        broken = sum(1 for r in results if not r.ok)
        logger.info(f"Link check complete: {len(results) - broken} working, {broken} broken")
        return list(results)
