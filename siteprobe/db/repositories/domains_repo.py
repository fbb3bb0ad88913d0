"""
Domain Repository
Stores one scan snapshot per domain, merged on every scan.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from siteprobe.db.repositories.base import BaseRepository

if TYPE_CHECKING:
    from prisma.models import Domain

logger = logging.getLogger(__name__)

# One JSON slot per probe type
SCAN_SLOTS = (
    "redirect_data",
    "broken_links_data",
    "security_data",
    "robots_data",
    "ai_data",
    "whois_data",
)


class DomainsRepository(BaseRepository):
    """Repository for per-domain scan snapshots."""

    model_name = "domain"

    @staticmethod
    def _wrap_json(value: Any) -> Any:
        """Wrap plain data for a Prisma ``Json`` column."""
        from prisma import Json

        return Json(value)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_domain(self, domain: str) -> Optional[Domain]:
        """Return the snapshot for *domain*, or *None* if never scanned."""
        return await self.model.find_unique(where={"domain": domain})

    async def get_recent(self, limit: int = 10) -> List[Domain]:
        """Return up to *limit* snapshots, most recently scanned first."""
        return await self.model.find_many(
            take=limit,
            order={"last_scanned_at": "desc"},
        )

    # ------------------------------------------------------------------
    # Upsert
    # ------------------------------------------------------------------

    async def upsert(self, domain: str, **slots: Any) -> Domain:
        """
        Insert a snapshot or merge into the existing one.

        Only the slots passed (and not *None*) are written, so probes that
        were not part of this scan keep their previous output.
        ``last_scanned_at`` is refreshed on every call.

        Args:
            domain: Domain name (unique key).
            **slots: Any of :data:`SCAN_SLOTS` mapped to JSON-serialisable data.

        Returns:
            The stored Domain record.
        """
        unknown = set(slots) - set(SCAN_SLOTS)
        if unknown:
            raise ValueError(f"Unknown scan slot(s): {', '.join(sorted(unknown))}")

        data: Dict[str, Any] = {
            slot: self._wrap_json(value)
            for slot, value in self._strip_none(slots).items()
        }
        data["last_scanned_at"] = datetime.now(timezone.utc)

        record = await self.model.upsert(
            where={"domain": domain},
            data={
                "create": {"domain": domain, **data},
                "update": data,
            },
        )
        logger.info("Upserted scan snapshot for %s (%s)", domain, ", ".join(sorted(slots)) or "no slots")
        return record
