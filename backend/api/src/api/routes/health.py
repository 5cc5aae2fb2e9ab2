"""Liveness and readiness endpoints.

- GET /        liveness for the hosting platform
- GET /health  liveness with process uptime
- GET /ready   readiness; 503 while the database does not answer
"""

import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.status import HTTP_200_OK, HTTP_503_SERVICE_UNAVAILABLE

from api.dependencies import get_database
from shared.services.database import DatabaseService

SERVICE_NAME = "LaybackGarments API"

router = APIRouter(tags=["health"])


class StatusResponse(BaseModel):
    status: str
    service: str


class HealthResponse(BaseModel):
    status: str
    uptime: str


class ReadinessResponse(BaseModel):
    database: str


@router.get("/", response_model=StatusResponse)
async def root() -> StatusResponse:
    return StatusResponse(status="ok", service=SERVICE_NAME)


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    started_at: float = request.app.state.started_at
    minutes = (time.monotonic() - started_at) / 60
    return HealthResponse(status="ok", uptime=f"{minutes:.1f} min")


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Database unreachable", "model": ReadinessResponse}},
)
def ready(db: DatabaseService = Depends(get_database)) -> JSONResponse:
    """Report whether the database answers a trivial query."""
    if db.ping():
        return JSONResponse(status_code=HTTP_200_OK, content={"database": "connected"})
    return JSONResponse(status_code=HTTP_503_SERVICE_UNAVAILABLE, content={"database": "disconnected"})
