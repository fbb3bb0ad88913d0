"""
Probing engine.

Each probe is a small component constructed with the shared HTTP client and a
ProbeConfig:
- Redirect tracing (hop by hop, bounded)
- Link extraction and concurrent link validation
- Security header audit
- robots.txt validation
- WHOIS lookup with RDAP fallback
"""

from .http_client import ProbeConfig, build_client
from .redirect_tracer import RedirectTracer
from .link_extractor import extract_links
from .link_validator import LinkValidator, partition
from .link_scanner import LinkScanner
from .security_headers import SecurityHeaderAuditor, SECURITY_HEADERS
from .robots import RobotsValidator
from .whois_resolver import WhoisResolver, is_soft_failure, format_whois_text
from .summary import SummaryProvider
from .url_utils import InvalidTargetError, normalize_url, normalize_domain
from .schemas import (
    Hop,
    RedirectTrace,
    LinkCandidate,
    LinkCheckResult,
    LinkScanReport,
    SecurityHeaderFinding,
    SecurityAudit,
    RobotsResult,
    WhoisRecord,
    WhoisLookup,
    ScanTool,
)

__all__ = [
    'ProbeConfig',
    'build_client',
    'RedirectTracer',
    'extract_links',
    'LinkValidator',
    'partition',
    'LinkScanner',
    'SecurityHeaderAuditor',
    'SECURITY_HEADERS',
    'RobotsValidator',
    'WhoisResolver',
    'is_soft_failure',
    'format_whois_text',
    'SummaryProvider',
    'InvalidTargetError',
    'normalize_url',
    'normalize_domain',
    'Hop',
    'RedirectTrace',
    'LinkCandidate',
    'LinkCheckResult',
    'LinkScanReport',
    'SecurityHeaderFinding',
    'SecurityAudit',
    'RobotsResult',
    'WhoisRecord',
    'WhoisLookup',
    'ScanTool',
]
