"""
Unit tests for WhoisResolver

The blocking WHOIS function is injected through the constructor and RDAP is
served by an httpx.MockTransport, so no test performs a real lookup.
"""
import json
from datetime import datetime
from unittest.mock import MagicMock

import httpx
import pytest
from whois.parser import WhoisEntry

from siteprobe.probes.schemas import WhoisRecord, WhoisSource
from siteprobe.probes.whois_resolver import (
    WhoisResolver,
    count_populated,
    format_whois_text,
    is_soft_failure,
    normalize_rdap,
    normalize_whois,
)


def _rdap_handler(payload=None, status=200, seen=None):
    def handler(request):
        if seen is not None:
            seen.append(str(request.url))
        if payload is None:
            return httpx.Response(status)
        return httpx.Response(status, json=payload)
    return handler


# ===========================================================================
# Soft-failure predicate
# ===========================================================================

class TestSoftFailure:
    def test_empty_answers(self):
        assert is_soft_failure(None)
        assert is_soft_failure({})

    def test_single_populated_field_is_degenerate(self):
        assert is_soft_failure({"domain_name": "example.com", "registrar": None, "emails": []})

    @pytest.mark.parametrize("text", [
        "Rate limit exceeded. Try again later.",
        "This service has been RETIRED",
        "Please use our RDAP service instead",
    ])
    def test_provider_phrases(self, text):
        raw = {"domain_name": "example.com", "registrar": "Example"}
        assert is_soft_failure(raw, raw_text=text)

    def test_phrase_in_parsed_fields(self):
        raw = {"domain_name": "example.com", "registrar": "Rate limit exceeded"}
        assert is_soft_failure(raw)

    def test_clean_raw_text_is_accepted(self):
        raw = {"domain_name": "example.com", "registrar": "Example"}
        assert not is_soft_failure(raw, raw_text="Domain Name: EXAMPLE.COM\nRegistrar: Example\n")

    def test_regular_answer_is_accepted(self, whois_answer):
        assert not is_soft_failure(whois_answer)

    def test_count_populated(self):
        assert count_populated({"a": "x", "b": "", "c": None, "d": [], "e": 0}) == 2


# ===========================================================================
# Normalisation
# ===========================================================================

class TestNormalizeWhois:
    def test_canonical_fields(self, whois_answer):
        record = normalize_whois(whois_answer)
        assert record.domain_name == "example.com"
        assert record.registrar == "RESERVED-Internet Assigned Numbers Authority"
        assert record.creation_date == "1995-08-14T04:00:00"
        assert record.name_servers == ["a.iana-servers.net", "b.iana-servers.net"]
        assert isinstance(record.status, list) and len(record.status) == 2
        assert record.dnssec == "signedDelegation"

    def test_unknown_keys_are_dropped(self):
        record = normalize_whois({"registrar": "R", "referral_url": "x", "favourite_colour": "blue"})
        assert record.to_dict() == {"registrar": "R"}

    def test_aliases_and_camel_case(self):
        record = normalize_whois({
            "registrarName": "Alias Registrar",
            "registryExpiryDate": datetime(2030, 1, 2, 3, 4, 5),
            "org": "Acme",
            "nameServer": "NS1.ACME.TEST.",
            "domain_status": "ok",
        })
        assert record.registrar == "Alias Registrar"
        assert record.expiration_date == "2030-01-02T03:04:05"
        assert record.registrant_organization == "Acme"
        assert record.name_servers == ["ns1.acme.test"]
        assert record.status == "ok"

    def test_first_populated_alias_wins(self):
        record = normalize_whois({"registrar": "First", "registrar_name": "Second"})
        assert record.registrar == "First"


class TestNormalizeRdap:
    def test_rdap_object(self, rdap_answer):
        record = normalize_rdap(rdap_answer)
        assert record.domain_name == "example.org"
        assert record.registrar == "Example Registrar, Inc."
        assert record.creation_date == "1995-04-30T04:00:00Z"
        assert record.expiration_date == "2026-04-29T04:00:00Z"
        assert record.updated_date == "2024-04-02T10:05:14Z"
        assert record.status == "client transfer prohibited"
        assert record.name_servers == ["a.iana-servers.net", "b.iana-servers.net"]
        assert record.registrant_name == "Domain Administrator"
        assert record.registrant_organization == "Example Org"

    def test_sparse_rdap_object(self):
        record = normalize_rdap({"ldhName": "bare.test"})
        assert record.to_dict() == {"domain_name": "bare.test"}


# ===========================================================================
# Resolver
# ===========================================================================

class TestWhoisResolver:
    @pytest.mark.asyncio
    async def test_whois_answer_used_directly(self, make_client, probe_config, whois_answer):
        seen = []
        lookup = MagicMock(return_value=whois_answer)

        async with make_client(_rdap_handler(seen=seen)) as client:
            resolver = WhoisResolver(client, probe_config, whois_lookup=lookup)
            result = await resolver.lookup("example.com")

        lookup.assert_called_once_with("example.com")
        assert seen == []
        assert result.source is WhoisSource.WHOIS
        assert result.data.registrar == "RESERVED-Internet Assigned Numbers Authority"

    @pytest.mark.asyncio
    async def test_empty_whois_then_rdap_nothing_gives_empty_record(self, make_client, probe_config):
        seen = []
        lookup = MagicMock(return_value={})

        async with make_client(_rdap_handler(status=404, seen=seen)) as client:
            resolver = WhoisResolver(client, probe_config, whois_lookup=lookup)
            record = await resolver.resolve("example.com")

        assert seen == ["https://rdap.org/domain/example.com"]
        assert isinstance(record, WhoisRecord)
        assert record.is_empty()

    @pytest.mark.asyncio
    async def test_soft_failure_falls_back_to_rdap(self, make_client, probe_config, rdap_answer):
        lookup = MagicMock(return_value={
            "domain_name": "example.org",
            "registrar": "x",
            "text": "Rate limit exceeded",
        })

        async with make_client(_rdap_handler(payload=rdap_answer)) as client:
            resolver = WhoisResolver(client, probe_config, whois_lookup=lookup)
            result = await resolver.lookup("example.org")

        assert result.source is WhoisSource.RDAP
        assert result.data.registrar == "Example Registrar, Inc."
        assert "Registrar Name:" in result.raw_text

    @pytest.mark.asyncio
    async def test_retired_notice_in_raw_response_falls_back_to_rdap(
        self, make_client, probe_config, rdap_answer
    ):
        entry = WhoisEntry.load(
            "example.com",
            "Domain Name: EXAMPLE.COM\n"
            "Registrar: Example Registrar\n"
            "Creation Date: 1995-08-14T04:00:00Z\n"
            "NOTICE: This WHOIS service is retired. Please use our RDAP service.\n",
        )
        lookup = MagicMock(return_value=entry)
        seen = []

        async with make_client(_rdap_handler(payload=rdap_answer, seen=seen)) as client:
            resolver = WhoisResolver(client, probe_config, whois_lookup=lookup)
            result = await resolver.lookup("example.com")

        assert seen == ["https://rdap.org/domain/example.com"]
        assert result.source is WhoisSource.RDAP

    @pytest.mark.asyncio
    async def test_whois_exception_falls_back_to_rdap(self, make_client, probe_config, rdap_answer):
        lookup = MagicMock(side_effect=ConnectionResetError("whois server hung up"))

        async with make_client(_rdap_handler(payload=rdap_answer)) as client:
            resolver = WhoisResolver(client, probe_config, whois_lookup=lookup)
            record = await resolver.resolve("example.org")

        assert record.domain_name == "example.org"

    @pytest.mark.asyncio
    async def test_both_sources_failing_never_raises(self, make_client, probe_config):
        lookup = MagicMock(return_value=None)

        def handler(request):
            raise httpx.ConnectError("rdap down", request=request)

        async with make_client(handler) as client:
            resolver = WhoisResolver(client, probe_config, whois_lookup=lookup)
            result = await resolver.lookup("example.com")

        assert result.source is None
        assert result.data.is_empty()
        assert result.raw_text == "WHOIS Information for example.com\n\n\n\n"

    @pytest.mark.asyncio
    async def test_rdap_server_error_gives_empty_record(self, make_client, probe_config):
        lookup = MagicMock(return_value={})

        async with make_client(_rdap_handler(payload={"errorCode": 500}, status=500)) as client:
            record = await WhoisResolver(client, probe_config, whois_lookup=lookup).resolve("example.com")

        assert record.is_empty()


# ===========================================================================
# Text rendering
# ===========================================================================

class TestFormatWhoisText:
    def test_labels_and_multi_values(self):
        record = WhoisRecord(
            domain_name="example.com",
            registrar="Example Registrar",
            status=["ok", "clientHold"],
            registrant_email="owner@example.com",
            name_servers=["ns1.example.com", "ns2.example.com"],
        )
        text = format_whois_text("example.com", record)
        lines = text.split("\n")

        assert lines[0] == "WHOIS Information for example.com"
        assert "Domain Name:".ljust(33) + "example.com" in lines
        assert "Registrar Name:".ljust(33) + "Example Registrar" in lines
        assert lines.count("Status:".ljust(33) + "ok") == 1
        assert "Status:".ljust(33) + "clientHold" in lines
        assert "Registrant Email:".ljust(33) + "owner@example.com" in lines
        assert [l for l in lines if l.startswith("Name Server:")] == [
            "Name Server:".ljust(33) + "ns1.example.com",
            "Name Server:".ljust(33) + "ns2.example.com",
        ]
        assert not any(l.startswith("Tech") for l in lines)

    def test_record_serialises_to_json(self, whois_answer):
        record = normalize_whois(whois_answer)
        assert json.loads(json.dumps(record.to_dict()))["domain_name"] == "example.com"
