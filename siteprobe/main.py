"""FastAPI application factory.

Lifespan
--------
On startup the app builds one shared ``httpx.AsyncClient`` and the probe
suite around it (``request.app.state.probes``). When ``DATABASE_URL`` is set
it also connects the Prisma client (``request.app.state.prisma``); without it
the probe endpoints still work and the storage endpoints answer 503.

Routers
-------
    /api/*-check, /api/broken-links  -> individual probes
    /api/scan                        -> combined scan stored per domain
    /api/domains                     -> stored domain reports
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from siteprobe import __version__
from siteprobe.api import domains as domains_router
from siteprobe.api import probes as probes_router
from siteprobe.api import scan as scan_router
from siteprobe.core.config import Settings, get_settings
from siteprobe.db.prisma_client import connect_prisma, disconnect_prisma
from siteprobe.middleware import setup_middleware
from siteprobe.probes.http_client import build_client
from siteprobe.probes.suite import ProbeSuite
from siteprobe.probes.summary import SummaryProvider

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logging.basicConfig(
            level=getattr(logging, settings.LOG_LEVEL),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
        config = settings.probe_config()
        client = build_client(config)
        app.state.probes = ProbeSuite.build(
            client,
            config,
            summary=SummaryProvider(
                api_key=settings.OPENAI_API_KEY,
                model=settings.OPENAI_MODEL,
                base_url=settings.OPENAI_BASE_URL,
            ),
        )

        app.state.prisma = None
        if settings.DATABASE_URL:
            app.state.prisma = await connect_prisma()
        else:
            logger.warning("DATABASE_URL not set; scan storage endpoints are disabled")

        logger.info("SiteProbe API started")
        try:
            yield
        finally:
            await client.aclose()
            await disconnect_prisma(app.state.prisma)
            logger.info("SiteProbe API stopped")

    app = FastAPI(
        title="SiteProbe API",
        description=(
            "Website health checks: redirect chains, broken links, security "
            "headers, robots.txt, WHOIS/RDAP and an optional AI summary, "
            "plus combined scans stored per domain."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Allow browser frontends on any origin (tighten for production).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_middleware(
        app,
        rate_limit_calls=settings.RATE_LIMIT_CALLS,
        rate_limit_period=settings.RATE_LIMIT_PERIOD,
    )

    app.include_router(probes_router.router)
    app.include_router(scan_router.router)
    app.include_router(domains_router.router)

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok", "version": __version__}

    return app


# Module-level instance used by uvicorn:
#   uvicorn siteprobe.main:app --reload
app = create_app()
