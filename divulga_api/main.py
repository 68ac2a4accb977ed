import logging
import uuid

from fastapi import FastAPI
from starlette.requests import Request
from starlette.responses import Response

from .logging_setup import setup_logging
from .routers.admin_applications import router as admin_applications_router
from .routers.admins import router as admins_router
from .routers.audit import router as audit_router
from .routers.campaigns import router as campaigns_router
from .routers.health import router as health_router
from .routers.organizations import router as organizations_router
from .routers.promoters import router as promoters_router
from .routers.rejection_reasons import router as rejection_reasons_router

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Divulga Admin API", version="0.1.0")


@app.middleware("http")
async def request_id_middleware(request: Request, call_next) -> Response:  # type: ignore[override]
    request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-Id"] = request_id
    if response.status_code >= 500:
        logger.error("%s %s failed with %s (request %s)", request.method, request.url.path, response.status_code, request_id)
    return response


app.include_router(health_router)
app.include_router(organizations_router)
app.include_router(campaigns_router)
app.include_router(promoters_router)
app.include_router(admins_router)
app.include_router(admin_applications_router)
app.include_router(rejection_reasons_router)
app.include_router(audit_router)
