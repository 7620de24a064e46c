import logging
from datetime import datetime, timezone

import httpx
from fastapi import APIRouter
from fastapi.concurrency import run_in_threadpool

from config.settings import settings
from database import db_ping
from utils import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/status", tags=["System Status"])


async def check_frontend(url: str) -> str:
    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(url, timeout=10.0)
    except (httpx.HTTPError, httpx.InvalidURL):
        return "Unreachable"
    return "Operational" if response.status_code == 200 else "Degraded"


@router.get("")
async def get_system_status():
    """
    Checks the live status of the backend, its database and the frontend.
    """
    backend_status = "Operational"

    try:
        await run_in_threadpool(db_ping)
        db_status = "Connected"
    except Exception as exc:
        logger.error("Database ping failed: %s", exc)
        db_status = "Unreachable"
        backend_status = "Degraded"

    frontend_status = await check_frontend(settings.FRONTEND_URL)

    return success_response(
        {
            "backend_service": {
                "status": backend_status,
                "database": db_status,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
            "frontend_service": {
                "status": frontend_status,
                "url": settings.FRONTEND_URL,
            },
        },
        "System status retrieved",
    )
