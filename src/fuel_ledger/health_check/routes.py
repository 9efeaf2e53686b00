import logging
from http import HTTPStatus

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from src.fuel_ledger.cache.redis import redis_manager
from src.fuel_ledger.database.database import db

logger = logging.getLogger(__name__)

health_router = APIRouter(prefix="/health", tags=["Health Check"])


@health_router.get("")
async def health_check():
    """Report liveness plus the state of the database and cache connections."""
    logger.info("Health check requested")
    return JSONResponse(
        status_code=HTTPStatus.OK,
        content={
            "status": "ok",
            "database": "connected" if db.is_connected else "disconnected",
            "cache": "connected" if redis_manager.redis_client else "disabled",
        },
    )
