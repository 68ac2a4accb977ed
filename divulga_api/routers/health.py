from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from ..db import check_db_health
from ..redis_client import get_redis_client
from ..settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/ready")
def ready() -> dict[str, object]:
    checks = {"db": "ok", "redis": "ok"}
    try:
        check_db_health()
    except SQLAlchemyError as exc:
        logger.warning("readiness: database check failed: %s", exc)
        checks["db"] = "down"
    try:
        get_redis_client().ping()
    except RedisError as exc:
        logger.warning("readiness: redis check failed: %s", exc)
        checks["redis"] = "down"
    if checks["db"] != "ok" or checks["redis"] != "ok":
        raise HTTPException(status_code=503, detail={"status": "not_ready", "env": settings.app_env, "checks": checks})
    return {"status": "ready", "env": settings.app_env, "checks": checks}
