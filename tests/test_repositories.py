"""
Unit Tests for the Repository Layer

These tests use MagicMock to replace the Prisma client so no live database
connection is required.  They verify that:
  - Each repository method calls the correct Prisma model accessor
  - Only the slots passed to an upsert are written
  - Helper utilities (strip_none) work as expected
"""
import pytest
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch

from siteprobe.db.repositories.base import BaseRepository
from siteprobe.db.repositories.domains_repo import SCAN_SLOTS, DomainsRepository


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_db() -> MagicMock:
    """Return a MagicMock Prisma client with async accessors pre-configured."""
    db = MagicMock()
    mock_model = MagicMock()
    for method in ("find_unique", "find_many", "upsert"):
        setattr(mock_model, method, AsyncMock())
    db.domain = mock_model
    return db


@pytest.fixture
def plain_json():
    """Store plain values instead of prisma.Json wrappers."""
    with patch.object(DomainsRepository, "_wrap_json", side_effect=lambda v: v):
        yield


# ===========================================================================
# BaseRepository
# ===========================================================================

class TestBaseRepository:
    def test_strip_none_removes_none_values(self):
        data = {"a": 1, "b": None, "c": "x", "d": None}
        assert BaseRepository._strip_none(data) == {"a": 1, "c": "x"}

    def test_strip_none_keeps_falsy_values(self):
        data = {"a": 0, "b": "", "c": [], "d": False}
        assert BaseRepository._strip_none(data) == data

    def test_model_requires_model_name(self):
        with pytest.raises(NotImplementedError):
            BaseRepository(MagicMock()).model

    def test_model_resolves_accessor(self):
        db = _make_db()
        assert DomainsRepository(db).model is db.domain


# ===========================================================================
# DomainsRepository
# ===========================================================================

class TestDomainsRepository:
    @pytest.mark.asyncio
    async def test_get_by_domain(self):
        db = _make_db()
        record = MagicMock(domain="example.com")
        db.domain.find_unique.return_value = record

        repo = DomainsRepository(db)
        result = await repo.get_by_domain("example.com")

        assert result is record
        db.domain.find_unique.assert_awaited_once_with(where={"domain": "example.com"})

    @pytest.mark.asyncio
    async def test_get_by_domain_missing(self):
        db = _make_db()
        db.domain.find_unique.return_value = None
        assert await DomainsRepository(db).get_by_domain("nope.test") is None

    @pytest.mark.asyncio
    async def test_get_recent_orders_by_scan_time(self):
        db = _make_db()
        db.domain.find_many.return_value = []

        await DomainsRepository(db).get_recent(limit=5)

        db.domain.find_many.assert_awaited_once_with(
            take=5,
            order={"last_scanned_at": "desc"},
        )

    @pytest.mark.asyncio
    async def test_upsert_writes_only_given_slots(self, plain_json):
        db = _make_db()
        db.domain.upsert.return_value = MagicMock(domain="example.com")

        repo = DomainsRepository(db)
        await repo.upsert(
            "example.com",
            security_data=[{"header_name": "X-Frame-Options", "present": False}],
            robots_data=None,
        )

        kwargs = db.domain.upsert.await_args.kwargs
        assert kwargs["where"] == {"domain": "example.com"}
        create = kwargs["data"]["create"]
        update = kwargs["data"]["update"]
        assert create["domain"] == "example.com"
        assert create["security_data"] == [{"header_name": "X-Frame-Options", "present": False}]
        assert "robots_data" not in update
        assert "redirect_data" not in update
        assert set(update) == {"security_data", "last_scanned_at"}
        assert isinstance(update["last_scanned_at"], datetime)
        assert update["last_scanned_at"].tzinfo is not None

    @pytest.mark.asyncio
    async def test_upsert_with_no_slots_refreshes_timestamp(self, plain_json):
        db = _make_db()
        await DomainsRepository(db).upsert("example.com")

        update = db.domain.upsert.await_args.kwargs["data"]["update"]
        assert list(update) == ["last_scanned_at"]

    @pytest.mark.asyncio
    async def test_upsert_rejects_unknown_slot(self, plain_json):
        db = _make_db()
        with pytest.raises(ValueError, match="Unknown scan slot"):
            await DomainsRepository(db).upsert("example.com", dns_data={})
        db.domain.upsert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_upsert_wraps_json_values(self):
        db = _make_db()
        with patch.object(DomainsRepository, "_wrap_json", side_effect=lambda v: ("json", v)) as wrap:
            await DomainsRepository(db).upsert("example.com", ai_data={"summary": "x"})

        wrap.assert_called_once_with({"summary": "x"})
        update = db.domain.upsert.await_args.kwargs["data"]["update"]
        assert update["ai_data"] == ("json", {"summary": "x"})

    def test_slot_names(self):
        assert SCAN_SLOTS == (
            "redirect_data",
            "broken_links_data",
            "security_data",
            "robots_data",
            "ai_data",
            "whois_data",
        )
