import logging
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.dates import to_iso, utcnow
from app.database import db as database
from app.schemas.health import HealthOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])

STARTED_AT = time.monotonic()


@router.get("", response_model=HealthOut, responses={503: {"model": HealthOut}})
def health():
    try:
        database.ping()
    except SQLAlchemyError as exc:
        logger.error("Health check failed: %s", exc)
        return JSONResponse(status_code=503, content={"status": "ERROR", "database": "disconnected"})
    return {
        "status": "OK",
        "database": "connected",
        "uptime": int(time.monotonic() - STARTED_AT),
        "timestamp": to_iso(utcnow()),
        "environment": settings.ENVIRONMENT,
    }
