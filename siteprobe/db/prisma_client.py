"""
Async Prisma Client
Connects the Prisma client at application startup and exposes it to request
handlers through ``app.state``.
"""
import logging
from typing import Any

from fastapi import HTTPException, Request, status

logger = logging.getLogger(__name__)


async def connect_prisma() -> Any:
    """
    Create and connect a Prisma client.

    Called once from the application lifespan; the caller owns the client.
    """
    from prisma import Prisma  # lazy – only needs generated client at call time

    client = Prisma()
    await client.connect()
    logger.info("Prisma client connected")
    return client


async def disconnect_prisma(client: Any) -> None:
    """Disconnect a Prisma client (call on application shutdown)."""
    if client is not None and client.is_connected():
        await client.disconnect()
        logger.info("Prisma client disconnected")


async def get_prisma(request: Request) -> Any:
    """
    FastAPI dependency returning the connected Prisma client.

    Usage::

        @router.get("/")
        async def handler(db = Depends(get_prisma)):
            ...
    """
    client = getattr(request.app.state, "prisma", None)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Storage is not configured",
        )
    return client
