"""FastAPI 主应用：行程时间线调度接口"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from itinerary_engine.adapters.location import StaticLocationLookup
from itinerary_engine.adapters.route.mock import estimated_route
from itinerary_engine.api.schemas import (
    ConflictsRequest,
    ErrorResponse,
    HealthResponse,
    RouteProxyRequest,
    ScheduleRequest,
    ScheduleResponse,
)
from itinerary_engine.application import ReorderCoordinator
from itinerary_engine.config.settings import EngineSettings, load_settings
from itinerary_engine.domain.exceptions import DomainError, UnknownActivity
from itinerary_engine.domain.models import ConflictReport
from itinerary_engine.domain.planning.conflicts import detect_conflicts
from itinerary_engine.planner.routing_provider import build_routing_client
from itinerary_engine.security.redact import redact_sensitive
from itinerary_engine.shared.exceptions import ToolError
from itinerary_engine.tools.interfaces import LocationLookup, RouteRequest, RouteResult

_api_logger = logging.getLogger("itinerary-engine.api")

load_dotenv()  # 自动加载 .env 文件

app = FastAPI(
    title="itinerary-engine",
    version="0.1.0",
    docs_url="/docs" if os.getenv("ENABLE_DOCS", "false").lower() == "true" else None,
    redoc_url=None,
)


@app.exception_handler(DomainError)
async def _domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status = 404 if isinstance(exc, UnknownActivity) else 400
    return JSONResponse(
        status_code=status,
        content=ErrorResponse(code=exc.code, message=str(exc)).model_dump(),
    )


def _location_lookup(req: ScheduleRequest, settings: EngineSettings) -> LocationLookup | None:
    if req.locations:
        return StaticLocationLookup(req.locations)
    if settings.location_data_file:
        return StaticLocationLookup.from_file(settings.location_data_file)
    return None


@app.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok", routing_provider=load_settings().effective_routing_provider())


@app.post("/v1/routing/route", response_model=RouteResult)
async def route(req: RouteProxyRequest):
    """路由代理：上游不可用时返回直线估算，isEstimated=true"""
    settings = load_settings()
    request = RouteRequest(
        origin=req.origin,
        destination=req.destination,
        mode=req.mode,
        departure_time=req.departure_time,
        timezone=req.timezone or settings.default_timezone,
    )
    client = build_routing_client(settings)
    try:
        return await client.route(request)
    except ToolError as exc:
        _safe_log_exception("routing proxy fallback", exc)
        return estimated_route(request)


_ERROR_RESPONSES = {400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}


@app.post("/v1/days/schedule", response_model=ScheduleResponse, responses=_ERROR_RESPONSES)
async def schedule(req: ScheduleRequest):
    """按给定顺序重排一天，等待所有路段结算后返回时间表与冲突"""
    settings = load_settings()
    coordinator = ReorderCoordinator(
        build_routing_client(settings),
        locations=_location_lookup(req, settings),
        settings=settings,
    )
    order = req.order if req.order is not None else req.day.activity_ids
    try:
        coordinator.on_sequence_change(req.day, order)
        day = await coordinator.settle(req.day.id)
        report = coordinator.conflicts(req.day.id)
    finally:
        coordinator.close()
    return ScheduleResponse(day=day.model_dump(mode="json", by_alias=True), conflicts=report)


@app.post("/v1/days/conflicts", response_model=ConflictReport)
def conflicts(req: ConflictsRequest):
    """对已排好时间的一天只跑冲突检测"""
    return detect_conflicts(req.day)


def _safe_log_exception(context: str, exc: Exception) -> None:
    """脱敏后记录异常日志"""
    _api_logger.warning(f"{context}: {redact_sensitive(str(exc))}")
