"""
Repository package for database access layer.
"""
from siteprobe.db.repositories.base import BaseRepository
from siteprobe.db.repositories.domains_repo import DomainsRepository, SCAN_SLOTS

__all__ = [
    "BaseRepository",
    "DomainsRepository",
    "SCAN_SLOTS",
]
