"""
HTTP Probe Client

Shared outbound transport for every probe: one ``httpx.AsyncClient`` with an
explicit timeout, a custom User-Agent and redirect following disabled (the
redirect tracer must observe each hop itself). Components that want the
collapsed final response pass ``follow_redirects=True`` per request.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; SiteProbe/1.0)"


# ---------------------------------------------------------------------------
# ProbeConfig
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ProbeConfig:
    """
    Configuration shared by all probe components.

    Passed explicitly to each component's constructor.
    """

    timeout: float = 10.0                 # per-request timeout (seconds)
    link_timeout: float = 3.0             # link existence checks (seconds)
    max_redirects: int = 10               # redirect tracer hop bound
    max_concurrency: int = 10             # parallel link checks
    page_link_limit: Optional[int] = 20   # single-page broken-link scan cap
    website_link_limit: Optional[int] = None  # full website scan cap (None = all)
    user_agent: str = DEFAULT_USER_AGENT
    rdap_base_url: str = "https://rdap.org"

    def __post_init__(self):
        if self.timeout <= 0 or self.link_timeout <= 0:
            raise ValueError("timeouts must be > 0")
        if self.max_redirects < 1:
            raise ValueError("max_redirects must be >= 1")
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")


def build_client(
    config: ProbeConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Create the shared async HTTP client for a :class:`ProbeConfig`.

    Args:
        config: Probe configuration
        transport: Optional transport override (tests pass ``httpx.MockTransport``)

    Returns:
        Configured ``httpx.AsyncClient``; the caller owns and closes it
    """
    logger.debug(f"Building probe client (timeout={config.timeout}s)")
    return httpx.AsyncClient(
        timeout=httpx.Timeout(config.timeout),
        headers={"User-Agent": config.user_agent},
        follow_redirects=False,
        transport=transport,
    )
