"""
Scan API Endpoint

  - POST /api/scan → ScanService.scan()

Runs the selected probes against one URL and stores the merged snapshot for
its domain.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from siteprobe.api.deps import ScanServiceDep
from siteprobe.probes.schemas import DomainScanRecord, ScanRequest
from siteprobe.probes.url_utils import InvalidTargetError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Scan"])


@router.post("/scan", response_model=DomainScanRecord)
async def scan(request: ScanRequest, service: ScanServiceDep):
    """
    Scan a URL with the requested tools.

    Probe failures are recorded inside their slot; only invalid input or a
    storage failure fails the request.
    """
    try:
        return await service.scan(request.url, request.tools)
    except InvalidTargetError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
