"""
Pytest configuration

Probe tests never touch the network: every component is built around an
``httpx.AsyncClient`` whose transport is an ``httpx.MockTransport`` driven by
a per-test handler function.
"""
from typing import Callable

import httpx
import pytest

from siteprobe.probes.http_client import ProbeConfig, build_client


@pytest.fixture
def probe_config() -> ProbeConfig:
    """Short timeouts so a misbehaving test fails fast."""
    return ProbeConfig(timeout=2.0, link_timeout=1.0, max_redirects=10, max_concurrency=5)


@pytest.fixture
def make_client(probe_config) -> Callable[..., httpx.AsyncClient]:
    """
    Factory: ``make_client(handler)`` returns a probe client whose requests
    are answered by ``handler(request) -> httpx.Response``.
    """
    def _factory(handler, config: ProbeConfig = None) -> httpx.AsyncClient:
        return build_client(config or probe_config, transport=httpx.MockTransport(handler))

    return _factory


@pytest.fixture
def whois_answer():
    """A realistic python-whois answer for example.com."""
    return {
        "domain_name": ["EXAMPLE.COM", "example.com"],
        "registrar": "RESERVED-Internet Assigned Numbers Authority",
        "whois_server": "whois.iana.org",
        "updated_date": "2024-08-14T07:01:34",
        "creation_date": ["1995-08-14T04:00:00", "1995-08-14T04:00:00"],
        "expiration_date": "2025-08-13T04:00:00",
        "name_servers": ["A.IANA-SERVERS.NET", "B.IANA-SERVERS.NET", "a.iana-servers.net"],
        "status": [
            "clientDeleteProhibited https://icann.org/epp#clientDeleteProhibited",
            "clientTransferProhibited https://icann.org/epp#clientTransferProhibited",
        ],
        "emails": None,
        "dnssec": "signedDelegation",
        "referral_url": None,
    }


@pytest.fixture
def rdap_answer():
    """Minimal RDAP domain object as served by rdap.org."""
    return {
        "objectClassName": "domain",
        "ldhName": "EXAMPLE.ORG",
        "status": ["client transfer prohibited", "server delete prohibited"],
        "events": [
            {"eventAction": "registration", "eventDate": "1995-04-30T04:00:00Z"},
            {"eventAction": "expiration", "eventDate": "2026-04-29T04:00:00Z"},
            {"eventAction": "last changed", "eventDate": "2024-04-02T10:05:14Z"},
        ],
        "nameservers": [
            {"objectClassName": "nameserver", "ldhName": "A.IANA-SERVERS.NET."},
            {"objectClassName": "nameserver", "ldhName": "b.iana-servers.net"},
        ],
        "entities": [
            {
                "objectClassName": "entity",
                "roles": ["registrar"],
                "vcardArray": [
                    "vcard",
                    [
                        ["version", {}, "text", "4.0"],
                        ["fn", {}, "text", "Example Registrar, Inc."],
                    ],
                ],
            },
            {
                "objectClassName": "entity",
                "roles": ["registrant"],
                "vcardArray": [
                    "vcard",
                    [
                        ["version", {}, "text", "4.0"],
                        ["fn", {}, "text", "Domain Administrator"],
                        ["org", {}, "text", "Example Org"],
                    ],
                ],
            },
        ],
    }
