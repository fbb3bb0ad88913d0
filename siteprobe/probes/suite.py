"""
Probe Suite

Builds every probe component from one shared client and configuration so the
application (and the CLI) wires them in a single place.
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from .http_client import ProbeConfig
from .link_scanner import LinkScanner
from .link_validator import LinkValidator
from .redirect_tracer import RedirectTracer
from .robots import RobotsValidator
from .security_headers import SecurityHeaderAuditor
from .summary import SummaryProvider
from .whois_resolver import WhoisResolver


@dataclass
class ProbeSuite:
    """All probe components sharing one client and config."""

    config: ProbeConfig
    tracer: RedirectTracer
    link_validator: LinkValidator
    link_scanner: LinkScanner
    security: SecurityHeaderAuditor
    robots: RobotsValidator
    whois: WhoisResolver
    summary: SummaryProvider

    @classmethod
    def build(
        cls,
        client: httpx.AsyncClient,
        config: ProbeConfig,
        summary: Optional[SummaryProvider] = None,
        whois_resolver: Optional[WhoisResolver] = None,
    ) -> "ProbeSuite":
        validator = LinkValidator(client, config)
        return cls(
            config=config,
            tracer=RedirectTracer(client, config),
            link_validator=validator,
            link_scanner=LinkScanner(client, config, validator=validator),
            security=SecurityHeaderAuditor(client, config),
            robots=RobotsValidator(client, config),
            whois=whois_resolver or WhoisResolver(client, config),
            summary=summary or SummaryProvider(),
        )
