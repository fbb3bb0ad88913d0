"""
Scan Service
Runs the probes selected for a scan concurrently and stores the merged
snapshot through DomainsRepository.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Dict, List, Sequence

from siteprobe.db.repositories.domains_repo import DomainsRepository
from siteprobe.probes.schemas import DomainScanRecord, ScanTool
from siteprobe.probes.suite import ProbeSuite
from siteprobe.probes.url_utils import hostname_of, normalize_domain, normalize_url

logger = logging.getLogger(__name__)

# Scan tool -> storage slot
TOOL_SLOTS: Dict[ScanTool, str] = {
    ScanTool.REDIRECT: "redirect_data",
    ScanTool.BROKEN_LINKS: "broken_links_data",
    ScanTool.SECURITY: "security_data",
    ScanTool.ROBOTS: "robots_data",
    ScanTool.AI: "ai_data",
    ScanTool.WHOIS: "whois_data",
}


class ScanService:
    """Business-logic layer for combined scans."""

    def __init__(self, probes: ProbeSuite, db: Any) -> None:
        self.probes = probes
        self.domains = DomainsRepository(db)

    # ------------------------------------------------------------------
    # Probes
    # ------------------------------------------------------------------

    async def _redirect(self, url: str) -> List[Dict[str, Any]]:
        trace = await self.probes.tracer.trace(url)
        return [hop.model_dump(mode="json") for hop in trace.hops]

    async def _broken_links(self, url: str) -> Dict[str, Any]:
        report = await self.probes.link_scanner.scan_page(url)
        return report.model_dump(mode="json")

    async def _security(self, url: str) -> List[Dict[str, Any]]:
        findings = await self.probes.security.audit(url)
        return [finding.model_dump(mode="json") for finding in findings]

    async def _robots(self, url: str) -> Dict[str, Any]:
        result = await self.probes.robots.check(url)
        return result.model_dump(mode="json")

    async def _ai(self, url: str) -> Dict[str, Any]:
        return await self.probes.summary.summarize(url)

    async def _whois(self, hostname: str) -> Dict[str, Any]:
        domain = normalize_domain(hostname)
        record = await self.probes.whois.resolve(domain)
        return {"domain": domain, "data": record.to_dict()}

    async def run_probes(self, url: str, tools: Sequence[ScanTool]) -> Dict[str, Any]:
        """
        Run the selected probes against an already normalised URL.

        Probes run concurrently; one probe failing never aborts the others.

        Returns:
            ``{slot_name: probe_output}`` for every selected tool
        """
        hostname = hostname_of(url)
        selected = list(dict.fromkeys(ScanTool(t) for t in tools))

        calls: Dict[ScanTool, Awaitable[Any]] = {}
        for tool in selected:
            target = hostname if tool is ScanTool.WHOIS else url
            calls[tool] = getattr(self, f"_{tool.value}")(target)

        outputs = await asyncio.gather(*calls.values(), return_exceptions=True)

        results: Dict[str, Any] = {}
        for tool, output in zip(calls, outputs):
            if isinstance(output, Exception):
                logger.error(f"Probe {tool.value} failed for {url}: {output}")
                output = {"error": str(output)}
                if tool is ScanTool.WHOIS:
                    output["domain"] = hostname
            results[TOOL_SLOTS[tool]] = output
        return results

    # ------------------------------------------------------------------
    # Scan lifecycle
    # ------------------------------------------------------------------

    async def scan(self, raw_url: str, tools: Sequence[ScanTool]) -> DomainScanRecord:
        """
        Normalise ``raw_url``, run the selected probes and store the snapshot.

        Raises:
            InvalidTargetError: If ``raw_url`` is not a usable URL
        """
        url = normalize_url(raw_url)
        domain = hostname_of(url)
        logger.info(f"Starting scan of {url} with tools: {', '.join(ScanTool(t).value for t in tools)}")

        slots = await self.run_probes(url, tools)
        record = await self.domains.upsert(domain, **slots)
        logger.info(f"Scan of {domain} stored")
        return DomainScanRecord.model_validate(record)

    async def get_domain(self, domain: str) -> DomainScanRecord | None:
        record = await self.domains.get_by_domain(domain.strip().lower())
        return DomainScanRecord.model_validate(record) if record is not None else None

    async def recent_domains(self, limit: int = 10) -> List[DomainScanRecord]:
        records = await self.domains.get_recent(limit)
        return [DomainScanRecord.model_validate(r) for r in records]
