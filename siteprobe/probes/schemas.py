"""
Probe Schemas

Pydantic models for every probe result. Field names double as JSON keys in
API responses and in the persisted scan snapshot.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ScanTool(str, Enum):
    """Probes that can be combined into one scan"""
    REDIRECT = "redirect"
    BROKEN_LINKS = "broken_links"
    SECURITY = "security"
    ROBOTS = "robots"
    AI = "ai"
    WHOIS = "whois"


# ---------------------------------------------------------------------------
# Redirects
# ---------------------------------------------------------------------------

class Hop(BaseModel):
    """One request/response pair in a redirect chain"""
    model_config = ConfigDict(frozen=True)

    url: str
    status: int
    headers: Dict[str, str] = Field(default_factory=dict)
    error: Optional[str] = None

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status < 400

    @property
    def location(self) -> Optional[str]:
        return self.headers.get("location")


class RedirectTrace(BaseModel):
    """Ordered redirect chain for one requested URL"""
    requested_url: str
    hops: List[Hop] = Field(default_factory=list)

    @property
    def final_url(self) -> Optional[str]:
        return self.hops[-1].url if self.hops else None

    @property
    def redirect_count(self) -> int:
        return sum(1 for hop in self.hops if hop.is_redirect)

    @property
    def failed(self) -> bool:
        return bool(self.hops) and self.hops[-1].error is not None


# ---------------------------------------------------------------------------
# Links
# ---------------------------------------------------------------------------

class LinkCandidate(BaseModel):
    """An anchor resolved to an absolute URL"""
    model_config = ConfigDict(frozen=True)

    absolute_url: str
    anchor_text: str = Field(default="", max_length=50)


class LinkCheckResult(BaseModel):
    """Existence check outcome for one link"""
    url: str
    status: int
    ok: bool
    anchor_text: Optional[str] = None
    error: Optional[str] = None


class LinkScanReport(BaseModel):
    """Broken-link scan of one page"""
    url: str
    total_links: int = 0
    checked_links: int = 0
    broken_links: List[LinkCheckResult] = Field(default_factory=list)
    working_links: List[LinkCheckResult] = Field(default_factory=list)
    error: Optional[str] = None


# ---------------------------------------------------------------------------
# Security headers / robots.txt
# ---------------------------------------------------------------------------

class SecurityHeaderFinding(BaseModel):
    """Presence of one hardening header"""
    header_name: str
    value: Optional[str] = None
    present: bool = False
    error: Optional[str] = None


class SecurityAudit(BaseModel):
    url: str
    headers: List[SecurityHeaderFinding] = Field(default_factory=list)


class RobotsResult(BaseModel):
    """robots.txt validation outcome"""
    url: str
    content: Optional[str] = None
    is_valid: bool = False
    status: int = 0
    issues: List[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# WHOIS
# ---------------------------------------------------------------------------

class WhoisSource(str, Enum):
    WHOIS = "whois"
    RDAP = "rdap"


class WhoisRecord(BaseModel):
    """
    Normalised registration data.

    Both upstream sources are mapped onto this fixed set of canonical keys;
    anything else is dropped. Every field is optional.
    """
    model_config = ConfigDict(extra="ignore")

    domain_name: Optional[str] = None
    registrar: Optional[str] = None
    registrar_iana_id: Optional[str] = None
    registrar_url: Optional[str] = None
    whois_server: Optional[str] = None
    status: Optional[Union[str, List[str]]] = None
    creation_date: Optional[str] = None
    updated_date: Optional[str] = None
    expiration_date: Optional[str] = None
    registrant_name: Optional[str] = None
    registrant_organization: Optional[str] = None
    registrant_email: Optional[str] = None
    registrant_country: Optional[str] = None
    tech_name: Optional[str] = None
    tech_organization: Optional[str] = None
    tech_email: Optional[str] = None
    admin_name: Optional[str] = None
    admin_organization: Optional[str] = None
    admin_email: Optional[str] = None
    name_servers: Optional[List[str]] = None
    dnssec: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Populated canonical fields only."""
        return self.model_dump(exclude_none=True)

    def is_empty(self) -> bool:
        return not self.to_dict()


CANONICAL_WHOIS_FIELDS = tuple(WhoisRecord.model_fields)


class WhoisLookup(BaseModel):
    """WHOIS lookup envelope returned to callers"""
    domain: str
    data: WhoisRecord = Field(default_factory=WhoisRecord)
    source: Optional[WhoisSource] = None
    raw_text: str = ""


# ---------------------------------------------------------------------------
# Scan
# ---------------------------------------------------------------------------

class ScanRequest(BaseModel):
    """Combined scan request"""
    url: str = Field(..., min_length=1, description="URL or bare domain to scan")
    tools: List[ScanTool] = Field(..., min_length=1, description="Probes to run")


class DomainScanRecord(BaseModel):
    """Persisted per-domain snapshot; each slot holds one probe's raw JSON"""
    model_config = ConfigDict(from_attributes=True)

    domain: str
    redirect_data: Optional[Any] = None
    broken_links_data: Optional[Any] = None
    security_data: Optional[Any] = None
    robots_data: Optional[Any] = None
    ai_data: Optional[Any] = None
    whois_data: Optional[Any] = None
    last_scanned_at: Optional[datetime] = None
