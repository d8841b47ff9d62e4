#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LifeRPG Dashboard - FastAPI Application
JSON API над состоянием героя: статистика, журнал, кампании, испытания

Версия: 1.0.0
Дата: 2026-10-19
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from liferpg import __version__
from liferpg.config import config
from liferpg.core.database import NotFoundError, StateStore, StorageError
from liferpg.core.models import ValidationError
from liferpg.services.ai_service import AdviceService
from liferpg.utils.logger import configure_logging
from .api import routers
from .schemas import HealthCheck

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Управление жизненным циклом приложения"""
    logger.info("🚀 Запуск LifeRPG Dashboard...")
    app.state.start_time = time.time()

    if app.state.store is None:
        try:
            app.state.store = StateStore()
        except StorageError as e:
            logger.error(f"❌ Ошибка инициализации хранилища: {e}")

    if app.state.store is not None:
        logger.info(f"📝 Задач в каталоге: {len(app.state.store.tasks)}")
    logger.info("✅ Dashboard готов к работе")

    yield

    logger.info("🛑 Остановка Dashboard...")
    if app.state.timer is not None:
        await app.state.timer.cleanup_all()

def create_app(store: Optional[StateStore] = None, advice: Optional[AdviceService] = None) -> FastAPI:
    """Создание FastAPI приложения"""
    app = FastAPI(
        title="LifeRPG Dashboard",
        description="API геймифицированного трекера привычек",
        version=__version__,
        docs_url="/api/docs" if config.server.debug_mode else None,
        redoc_url=None,
        lifespan=lifespan
    )
    app.state.store = store
    app.state.advice = advice
    app.state.timer = None
    app.state.start_time = time.time()

    # ===== MIDDLEWARE =====

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Middleware для логирования запросов"""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        logger.info(
            f"{request.method} {request.url.path} "
            f"- {response.status_code} "
            f"- {process_time:.3f}s"
        )
        response.headers["X-Process-Time"] = str(process_time)
        return response

    # ===== ОБРАБОТЧИКИ ОШИБОК =====

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"detail": "Некорректный запрос", "errors": jsonable_errors(exc)}
        )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content={"detail": str(exc), "path": str(request.url.path)}
        )

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error(f"❌ Ошибка хранилища: {exc}")
        return JSONResponse(status_code=500, content={"detail": "Ошибка хранилища"})

    # ===== МАРШРУТЫ =====

    for router in routers:
        app.include_router(router)

    @app.get("/health", response_model=HealthCheck)
    async def health_check():
        """Health check для мониторинга"""
        store = app.state.store
        if store is None:
            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "service": "dashboard",
                    "error": "Хранилище не инициализировано",
                    "timestamp": time.time()
                }
            )

        data = store.get_health_status()
        data["uptime_seconds"] = time.time() - app.state.start_time
        data["config"] = config.to_dict()
        return HealthCheck(
            status="healthy",
            service="dashboard",
            version=__version__,
            timestamp=time.time(),
            data=data
        )

    @app.get("/ping")
    async def ping():
        """Простой ping endpoint"""
        return {
            "message": "pong",
            "timestamp": time.time(),
            "service": "dashboard"
        }

    return app

def jsonable_errors(exc: RequestValidationError):
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]

def run_dashboard(host: Optional[str] = None, port: Optional[int] = None):
    """Запуск дашборда через uvicorn"""
    configure_logging(config)
    host = host or config.server.host
    port = port or config.server.port

    logger.info(f"🌐 Dashboard доступен на: http://{host}:{port}")
    uvicorn.run(
        create_app(),
        host=host,
        port=port,
        log_level="debug" if config.server.debug_mode else "info"
    )

if __name__ == "__main__":
    run_dashboard()
