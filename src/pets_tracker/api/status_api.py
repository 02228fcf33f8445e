# -*- coding: utf-8 -*-
"""Read-only HTTP status endpoint serving the recent trade history."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Optional

import structlog
from aiohttp import web

if TYPE_CHECKING:
    from pets_tracker.config import Settings
    from pets_tracker.persistence.repositories import ITradeHistoryRepository


class StatusAPI:
    """Handlers for the status endpoint. All routes are GET only."""

    def __init__(
        self,
        history: ITradeHistoryRepository,
        *,
        capacity: int,
        service_name: str = "pets-tracker",
    ) -> None:
        self._history = history
        self._capacity = capacity
        self._service_name = service_name

    async def get_transactions(self, request: web.Request) -> web.Response:
        """
        GET /api/transactions?limit=N

        Most recent records first. ``limit`` defaults to and is capped at the
        history capacity.
        """
        raw_limit = request.query.get("limit")
        limit = self._capacity
        if raw_limit is not None:
            try:
                limit = int(raw_limit)
            except ValueError:
                return web.json_response(
                    {"error": "limit must be an integer", "limit": raw_limit}, status=400
                )
            if limit < 0:
                return web.json_response(
                    {"error": "limit must be >= 0", "limit": raw_limit}, status=400
                )
        limit = min(limit, self._capacity)
        records = await self._history.recent(limit)
        return web.json_response([record.to_dict() for record in records])

    async def health(self, request: web.Request) -> web.Response:
        """GET /health"""
        return web.json_response(
            {
                "status": "ok",
                "timestamp": datetime.now(UTC).isoformat(),
                "service": self._service_name,
                "recorded": self._history.count(),
            }
        )


@web.middleware
async def cors_middleware(request: web.Request, handler: Any) -> web.StreamResponse:
    """Allow browser dashboards on other origins to poll the endpoint."""
    if request.method == "OPTIONS":
        response: web.StreamResponse = web.Response(status=204)
    else:
        try:
            response = await handler(request)
        except web.HTTPException as ex:
            _allow_origin(ex)
            raise
    _allow_origin(response)
    return response


def _allow_origin(response: web.StreamResponse) -> None:
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Methods"] = "GET,OPTIONS"


def create_status_app(
    history: ITradeHistoryRepository,
    *,
    capacity: int,
    service_name: str = "pets-tracker",
) -> web.Application:
    """Create the status aiohttp Application with its routes configured."""
    api = StatusAPI(history, capacity=capacity, service_name=service_name)
    app = web.Application(middlewares=[cors_middleware])
    app.router.add_get("/api/transactions", api.get_transactions)
    app.router.add_get("/health", api.health)
    return app


class StatusServer:
    """Run the status Application on settings.status_api.host:port."""

    def __init__(
        self,
        settings: Settings,
        history: ITradeHistoryRepository,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._host = settings.status_api.host
        self._port = settings.status_api.port
        self._app = create_status_app(
            history,
            capacity=settings.history.capacity,
            service_name=settings.app.service_name or settings.app.app_name,
        )
        self._runner: web.AppRunner | None = None
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def app(self) -> web.Application:
        return self._app

    @property
    def is_running(self) -> bool:
        return self._runner is not None

    async def start(self) -> None:
        if self._runner is not None:
            return
        runner = web.AppRunner(self._app)
        await runner.setup()
        site = web.TCPSite(runner, self._host, self._port)
        await site.start()
        self._runner = runner
        self._logger.info("status_server_started", host=self._host, port=self._port)

    async def stop(self) -> None:
        if self._runner is None:
            return
        await self._runner.cleanup()
        self._runner = None
        self._logger.info("status_server_stopped")
