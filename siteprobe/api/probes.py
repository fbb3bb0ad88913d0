"""
Probe API Endpoints

One endpoint per probe. Each handler normalises its input, invokes the probe
and returns the probe's result structure as JSON. Probes never raise for
network failures; those come back inside the result.

  - POST /api/redirect-check      → RedirectTracer.trace_many()
  - POST /api/link-check          → LinkValidator.check_url()
  - POST /api/broken-links        → LinkScanner.scan_page()
  - POST /api/website-link-check  → LinkScanner.scan_website()
  - POST /api/security-check      → SecurityHeaderAuditor.audit()
  - POST /api/robots-check        → RobotsValidator.check()
  - POST /api/whois-check         → WhoisResolver.lookup()
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from siteprobe.api.deps import ProbesDep, require_domain, require_url
from siteprobe.probes.schemas import (
    Hop,
    LinkCheckResult,
    LinkScanReport,
    RobotsResult,
    SecurityAudit,
    WhoisLookup,
)
from siteprobe.probes.url_utils import InvalidTargetError, normalize_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Probes"])

MAX_REDIRECT_BATCH = 50


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------

class UrlRequest(BaseModel):
    url: Optional[Any] = Field(None, description="URL or bare domain")


class UrlsRequest(BaseModel):
    urls: Optional[Any] = Field(None, description="URLs or bare domains")


class DomainRequest(BaseModel):
    domain: Optional[Any] = Field(None, description="Domain name (URLs are reduced to their host)")


class RedirectCheckResult(BaseModel):
    url: str
    hops: List[Hop] = Field(default_factory=list)
    error: Optional[str] = None


# ---------------------------------------------------------------------------
# Redirects
# ---------------------------------------------------------------------------

@router.post("/redirect-check", response_model=List[RedirectCheckResult])
async def redirect_check(request: UrlsRequest, probes: ProbesDep):
    """
    Trace the redirect chain of every URL in the batch.

    Invalid entries are reported per item; they never abort the batch.
    """
    urls = request.urls
    if not isinstance(urls, list) or not urls:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please provide an array of URLs",
        )
    if len(urls) > MAX_REDIRECT_BATCH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"At most {MAX_REDIRECT_BATCH} URLs per request",
        )

    results: List[Optional[RedirectCheckResult]] = [None] * len(urls)
    valid: List[str] = []
    positions: List[int] = []
    for index, raw in enumerate(urls):
        try:
            valid.append(normalize_url(raw))
            positions.append(index)
        except InvalidTargetError as e:
            results[index] = RedirectCheckResult(url=str(raw), error=str(e))

    traces = await probes.tracer.trace_many(valid)
    for index, trace in zip(positions, traces):
        results[index] = RedirectCheckResult(url=trace.requested_url, hops=trace.hops)

    logger.info(f"Redirect check: {len(valid)} traced, {len(urls) - len(valid)} rejected")
    return results


# ---------------------------------------------------------------------------
# Links
# ---------------------------------------------------------------------------

@router.post("/link-check", response_model=LinkCheckResult)
async def link_check(request: UrlRequest, probes: ProbesDep):
    """Existence check for a single URL."""
    url = require_url(request.url)
    return await probes.link_validator.check_url(url)


@router.post("/broken-links", response_model=LinkScanReport)
async def broken_links(request: UrlRequest, probes: ProbesDep):
    """Broken-link scan of one page, capped at the configured link limit."""
    url = require_url(request.url)
    return await probes.link_scanner.scan_page(url)


@router.post("/website-link-check", response_model=LinkScanReport)
async def website_link_check(request: UrlRequest, probes: ProbesDep):
    """Link scan over every distinct link found on the page."""
    url = require_url(request.url)
    return await probes.link_scanner.scan_website(url)


# ---------------------------------------------------------------------------
# Headers / robots.txt / WHOIS
# ---------------------------------------------------------------------------

@router.post("/security-check", response_model=SecurityAudit)
async def security_check(request: UrlRequest, probes: ProbesDep):
    url = require_url(request.url)
    findings = await probes.security.audit(url)
    return SecurityAudit(url=url, headers=findings)


@router.post("/robots-check", response_model=RobotsResult)
async def robots_check(request: UrlRequest, probes: ProbesDep):
    url = require_url(request.url)
    return await probes.robots.check(url)


@router.post("/whois-check", response_model=WhoisLookup, response_model_exclude_none=True)
async def whois_check(request: DomainRequest, probes: ProbesDep):
    """WHOIS lookup with RDAP fallback plus a plain-text rendering."""
    domain = require_domain(request.domain)
    return await probes.whois.lookup(domain)
