"""
Security Header Auditor

Checks one response for the presence of six well-known hardening headers.
"""

import logging
from typing import List

import httpx

from .http_client import ProbeConfig
from .schemas import SecurityHeaderFinding

logger = logging.getLogger(__name__)

# Declaration order is the output order
SECURITY_HEADERS = (
    "Strict-Transport-Security",
    "Content-Security-Policy",
    "X-Frame-Options",
    "X-Content-Type-Options",
    "Referrer-Policy",
    "Permissions-Policy",
)


class SecurityHeaderAuditor:
    """Single-request security header presence check."""

    def __init__(self, client: httpx.AsyncClient, config: ProbeConfig):
        self.client = client
        self.config = config

    async def audit(self, url: str) -> List[SecurityHeaderFinding]:
        """
        Audit the hardening headers served at ``url``.

        Args:
            url: Absolute, already normalised URL

        Returns:
            One finding per header in declaration order, or a single error
            finding when the request itself fails
        """
        try:
            response = await self.client.head(
                url,
                follow_redirects=True,
                timeout=self.config.timeout,
            )
        except Exception as e:
            logger.warning(f"Security header audit failed for {url}: {e}")
            return [
                SecurityHeaderFinding(
                    header_name="Error",
                    present=False,
                    error=str(e) or type(e).__name__,
                )
            ]

        findings = audit_headers(response.headers)
        present = sum(1 for f in findings if f.present)
        logger.info(f"Security headers for {url}: {present}/{len(findings)} present")
        return findings


def audit_headers(headers: httpx.Headers) -> List[SecurityHeaderFinding]:
    """Build findings from a response's headers (lookups are case-insensitive)."""
    findings = []
    for name in SECURITY_HEADERS:
        value = headers.get(name)
        findings.append(
            SecurityHeaderFinding(
                header_name=name,
                value=value or None,
                present=bool(value),
            )
        )
    return findings
