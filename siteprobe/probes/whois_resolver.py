"""
WHOIS/RDAP Resolver

Looks a domain up with python-whois and falls back to RDAP when the WHOIS
answer is missing, degenerate or carries a provider soft-failure message.
Both sources are normalised onto the canonical :class:`WhoisRecord` keys.
"""

import asyncio
import json
import logging
import re
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import httpx
import whois

from .http_client import ProbeConfig
from .schemas import WhoisLookup, WhoisRecord, WhoisSource

logger = logging.getLogger(__name__)

# Provider-specific wording seen in otherwise successful WHOIS answers. This is
# a best-effort heuristic; the phrases are not a documented contract.
SOFT_FAILURE_PHRASES = (
    "rate limit exceeded",
    "retired",
    "use our rdap service",
)

# Native WHOIS key (snake_cased) -> canonical key
WHOIS_FIELD_ALIASES: Dict[str, str] = {
    "domain_name": "domain_name",
    "domain": "domain_name",
    "registrar": "registrar",
    "registrar_name": "registrar",
    "registrar_iana_id": "registrar_iana_id",
    "registrar_id": "registrar_iana_id",
    "registrar_url": "registrar_url",
    "whois_server": "whois_server",
    "registrar_whois_server": "whois_server",
    "status": "status",
    "domain_status": "status",
    "creation_date": "creation_date",
    "created_date": "creation_date",
    "created": "creation_date",
    "updated_date": "updated_date",
    "last_updated": "updated_date",
    "expiration_date": "expiration_date",
    "registry_expiry_date": "expiration_date",
    "expiry_date": "expiration_date",
    "name": "registrant_name",
    "registrant": "registrant_name",
    "registrant_name": "registrant_name",
    "org": "registrant_organization",
    "registrant_org": "registrant_organization",
    "registrant_organization": "registrant_organization",
    "registrant_email": "registrant_email",
    "country": "registrant_country",
    "registrant_country": "registrant_country",
    "tech_name": "tech_name",
    "tech_org": "tech_organization",
    "tech_organization": "tech_organization",
    "tech_email": "tech_email",
    "admin_name": "admin_name",
    "admin_org": "admin_organization",
    "admin_organization": "admin_organization",
    "admin_email": "admin_email",
    "name_servers": "name_servers",
    "name_server": "name_servers",
    "nameservers": "name_servers",
    "dnssec": "dnssec",
}

DATE_FIELDS = ("creation_date", "updated_date", "expiration_date")

_CAMEL_RE = re.compile(r"(?<=[a-z0-9])([A-Z])")


# ---------------------------------------------------------------------------
# Soft-failure detection
# ---------------------------------------------------------------------------

def _is_populated(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (str, list, tuple, dict, set)):
        return len(value) > 0
    return True


def count_populated(raw: Mapping[str, Any]) -> int:
    return sum(1 for value in raw.values() if _is_populated(value))


def is_soft_failure(raw: Optional[Mapping[str, Any]], raw_text: Optional[str] = None) -> bool:
    """
    True when a WHOIS answer must be rejected in favour of RDAP.

    Rejects empty/degenerate answers (at most one populated field) and
    answers containing a provider soft-failure phrase, either in the parsed
    fields or in the raw server response (``raw_text``). python-whois keeps
    the latter as the ``text`` attribute, outside the mapping.
    """
    if not raw:
        return True
    if count_populated(raw) <= 1:
        return True
    text = json.dumps(dict(raw), default=str).lower() + "\n" + (raw_text or "").lower()
    return any(phrase in text for phrase in SOFT_FAILURE_PHRASES)


# ---------------------------------------------------------------------------
# Normalisation
# ---------------------------------------------------------------------------

def _snake(key: str) -> str:
    return _CAMEL_RE.sub(r"_\1", key).lower().replace(" ", "_").replace("-", "_")


def _parse_date(date_value: Any) -> Optional[str]:
    """Parse a WHOIS date value (datetime, string or list of either) to a string."""
    if isinstance(date_value, (list, tuple)):
        date_value = date_value[0] if date_value else None
    if not date_value:
        return None
    if isinstance(date_value, datetime):
        return date_value.isoformat()
    return str(date_value)


def _first(value: Any) -> Optional[str]:
    if isinstance(value, (list, tuple)):
        value = next((v for v in value if _is_populated(v)), None)
    if not _is_populated(value):
        return None
    return str(value)


def _unique(values: List[str]) -> List[str]:
    seen = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


def _name_servers(value: Any) -> Optional[List[str]]:
    if isinstance(value, str):
        value = [value]
    if not value:
        return None
    servers = _unique([str(ns).strip().lower().rstrip(".") for ns in value if ns])
    return servers or None


def _status(value: Any) -> Optional[Any]:
    if isinstance(value, (list, tuple)):
        statuses = _unique([str(s).strip() for s in value if s])
        if not statuses:
            return None
        return statuses[0] if len(statuses) == 1 else statuses
    return _first(value)


def normalize_whois(raw: Mapping[str, Any]) -> WhoisRecord:
    """
    Map a native WHOIS answer onto the canonical record.

    Keys are snake_cased and looked up in :data:`WHOIS_FIELD_ALIASES`; the
    first populated alias wins and unknown keys are dropped.
    """
    fields: Dict[str, Any] = {}
    for key, value in raw.items():
        canonical = WHOIS_FIELD_ALIASES.get(_snake(str(key)))
        if canonical is None or canonical in fields or not _is_populated(value):
            continue

        if canonical in DATE_FIELDS:
            parsed = _parse_date(value)
        elif canonical == "name_servers":
            parsed = _name_servers(value)
        elif canonical == "status":
            parsed = _status(value)
        elif canonical == "domain_name":
            parsed = _first(value)
            parsed = parsed.lower() if parsed else None
        else:
            parsed = _first(value)

        if parsed is not None:
            fields[canonical] = parsed

    return WhoisRecord(**fields)


def _vcard_value(entity: Optional[Mapping[str, Any]], field: str) -> Optional[str]:
    """Read one property (``fn``, ``org`` …) from an RDAP entity's jCard."""
    if not entity:
        return None
    vcard = entity.get("vcardArray") or []
    properties = vcard[1] if len(vcard) > 1 and isinstance(vcard[1], list) else []
    for prop in properties:
        if isinstance(prop, list) and len(prop) > 3 and prop[0] == field:
            value = prop[3]
            if isinstance(value, list):
                value = " ".join(str(v) for v in value if v)
            return value or None
    return None


def _entity_with_role(data: Mapping[str, Any], role: str) -> Optional[Mapping[str, Any]]:
    for entity in data.get("entities") or []:
        if role in (entity.get("roles") or []):
            return entity
    return None


def _event_date(data: Mapping[str, Any], action: str) -> Optional[str]:
    for event in data.get("events") or []:
        if event.get("eventAction") == action:
            return event.get("eventDate")
    return None


def normalize_rdap(data: Mapping[str, Any]) -> WhoisRecord:
    """Map an RDAP domain object onto the canonical record."""
    registrar = _entity_with_role(data, "registrar")
    registrant = _entity_with_role(data, "registrant")
    statuses = data.get("status") or []
    nameservers = [
        ns.get("ldhName") for ns in data.get("nameservers") or [] if ns.get("ldhName")
    ]
    domain_name = data.get("ldhName")

    return WhoisRecord(
        domain_name=domain_name.lower() if domain_name else None,
        registrar=_vcard_value(registrar, "fn"),
        creation_date=_event_date(data, "registration"),
        expiration_date=_event_date(data, "expiration"),
        updated_date=_event_date(data, "last changed"),
        status=statuses[0] if statuses else None,
        name_servers=_name_servers(nameservers),
        registrant_name=_vcard_value(registrant, "fn"),
        registrant_organization=_vcard_value(registrant, "org"),
    )


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class WhoisResolver:
    """WHOIS lookup with RDAP fallback and canonical field normalisation."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        config: ProbeConfig,
        whois_lookup: Callable[[str], Any] = whois.whois,
    ):
        """
        Initialize WHOIS resolver.

        Args:
            client: Shared async HTTP client (RDAP queries)
            config: Probe configuration (timeout, RDAP base URL)
            whois_lookup: Blocking WHOIS query function
        """
        self.client = client
        self.config = config
        self.timeout = config.timeout
        self.rdap_base_url = config.rdap_base_url.rstrip("/")
        self._whois_lookup = whois_lookup

    async def resolve(self, domain: str) -> WhoisRecord:
        """Best-effort canonical record for ``domain``; never raises."""
        record, _ = await self._resolve(domain)
        return record

    async def lookup(self, domain: str) -> WhoisLookup:
        """Resolve ``domain`` and render the plain-text WHOIS view."""
        record, source = await self._resolve(domain)
        return WhoisLookup(
            domain=domain,
            data=record,
            source=source,
            raw_text=format_whois_text(domain, record),
        )

    async def _resolve(self, domain: str) -> Tuple[WhoisRecord, Optional[WhoisSource]]:
        try:
            raw, raw_text = await self._query_whois(domain)
            if is_soft_failure(raw, raw_text):
                raise ValueError("WHOIS rate limit or empty response")
            record = normalize_whois(raw)
            logger.info(f"WHOIS lookup successful for {domain}")
            return record, WhoisSource.WHOIS
        except Exception as e:
            logger.warning(f"WHOIS failed for {domain} ({e}), trying RDAP fallback...")

        try:
            data = await self._query_rdap(domain)
        except Exception as e:
            logger.error(f"RDAP lookup failed for {domain}: {e}")
            return WhoisRecord(), None

        if not data:
            logger.info(f"RDAP returned nothing for {domain}")
            return WhoisRecord(), None

        logger.info(f"RDAP lookup successful for {domain}")
        return normalize_rdap(data), WhoisSource.RDAP

    async def _query_whois(self, domain: str) -> Tuple[Optional[Mapping[str, Any]], str]:
        """
        Run the blocking WHOIS query in an executor, bounded by the timeout.

        Returns:
            ``(parsed_fields, raw_response_text)``
        """
        loop = asyncio.get_event_loop()
        result = await asyncio.wait_for(
            loop.run_in_executor(None, self._whois_lookup, domain),
            timeout=self.timeout,
        )
        if result is None:
            return None, ""
        return dict(result), getattr(result, "text", None) or ""

    async def _query_rdap(self, domain: str) -> Optional[Dict[str, Any]]:
        """Fetch the RDAP domain object; None when the registry has no record."""
        url = f"{self.rdap_base_url}/domain/{domain}"
        response = await self.client.get(
            url,
            headers={"Accept": "application/rdap+json, application/json"},
            follow_redirects=True,
            timeout=self.timeout,
        )
        if response.status_code == 404:
            return None
        response.raise_for_status()
        data = response.json()
        return data if isinstance(data, dict) and data else None


# ---------------------------------------------------------------------------
# Plain-text rendering
# ---------------------------------------------------------------------------

_LABEL_WIDTH = 33

_TEXT_SECTIONS = (
    (
        ("Domain Name:", "domain_name"),
        ("Registrar ID:", "registrar_iana_id"),
        ("Registrar Name:", "registrar"),
        ("Status:", "status"),
        ("Creation Date:", "creation_date"),
        ("Updated Date:", "updated_date"),
        ("Expiration Date:", "expiration_date"),
    ),
    (
        ("Registrant Name:", "registrant_name"),
        ("Registrant Organization:", "registrant_organization"),
        ("Registrant Email:", "registrant_email"),
        ("Registrant Country:", "registrant_country"),
    ),
    (
        ("Tech Name:", "tech_name"),
        ("Tech Organization:", "tech_organization"),
        ("Tech Email:", "tech_email"),
    ),
    (
        ("Admin Name:", "admin_name"),
        ("Admin Organization:", "admin_organization"),
        ("Admin Email:", "admin_email"),
    ),
    (
        ("Name Server:", "name_servers"),
        ("DNSSEC:", "dnssec"),
    ),
)


def format_whois_text(domain: str, record: WhoisRecord) -> str:
    """Render a record as WHOIS-style ``Label:   value`` lines."""
    lines = [f"WHOIS Information for {domain}"]
    for index, section in enumerate(_TEXT_SECTIONS):
        if index:
            lines.append("")
        for label, field in section:
            value = getattr(record, field)
            if not _is_populated(value):
                continue
            values = value if isinstance(value, list) else [value]
            lines.extend(f"{label.ljust(_LABEL_WIDTH)}{v}" for v in values)
    return "\n".join(lines)
