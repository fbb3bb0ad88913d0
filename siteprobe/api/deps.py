"""
deps.py – shared FastAPI dependencies
"""
from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request, status

from siteprobe.core.config import Settings, get_settings
from siteprobe.db.prisma_client import get_prisma
from siteprobe.probes.suite import ProbeSuite
from siteprobe.probes.url_utils import InvalidTargetError, normalize_domain, normalize_url
from siteprobe.services.scan_service import ScanService


async def get_probes(request: Request) -> ProbeSuite:
    """FastAPI dependency – the probe suite built at startup."""
    probes = getattr(request.app.state, "probes", None)
    if probes is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Probes are not initialised",
        )
    return probes


async def get_scan_service(
    probes: Annotated[ProbeSuite, Depends(get_probes)],
    db: Annotated[Any, Depends(get_prisma)],
) -> ScanService:
    """FastAPI dependency – builds a ScanService backed by the Prisma DB."""
    return ScanService(probes, db)


def settings_dependency(request: Request) -> Settings:
    """FastAPI dependency – the settings the app was created with."""
    return getattr(request.app.state, "settings", None) or get_settings()


ProbesDep = Annotated[ProbeSuite, Depends(get_probes)]
ScanServiceDep = Annotated[ScanService, Depends(get_scan_service)]
SettingsDep = Annotated[Settings, Depends(settings_dependency)]


def require_url(raw: Any) -> str:
    """Normalise a URL from a request body or reject it with 400."""
    try:
        return normalize_url(raw)
    except InvalidTargetError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def require_domain(raw: Any) -> str:
    """Normalise a domain from a request body or reject it with 400."""
    try:
        return normalize_domain(raw)
    except InvalidTargetError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
