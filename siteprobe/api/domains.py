"""
Domain Report Endpoints

  - GET /api/domains          → most recently scanned domains
  - GET /api/domains/{domain} → stored snapshot for one domain
"""
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status

from siteprobe.api.deps import ScanServiceDep, SettingsDep
from siteprobe.probes.schemas import DomainScanRecord

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/domains", tags=["Domains"])


@router.get("", response_model=List[DomainScanRecord])
async def list_domains(
    service: ScanServiceDep,
    settings: SettingsDep,
    limit: Optional[int] = Query(None, ge=1, le=100),
):
    """Recently scanned domains, newest first."""
    return await service.recent_domains(limit or settings.RECENT_DOMAINS_LIMIT)


@router.get("/{domain}", response_model=DomainScanRecord)
async def get_domain(domain: str, service: ScanServiceDep):
    record = await service.get_domain(domain)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Domain report not found",
        )
    return record
