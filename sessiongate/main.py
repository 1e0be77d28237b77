#!/usr/bin/env python3
"""
Sessiongate - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Initializes modules
3. Runs the API server

All business logic is in the modules, following black box principles.
"""

import logging
import logging.config as log_config
from contextlib import asynccontextmanager
from typing import Optional

import redis.asyncio as redis
import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from sessiongate import __version__
from sessiongate.config.provider import ConfigProvider, EnvConfigProvider
from sessiongate.errors import SessionGateError
from sessiongate.logging_config import get_logging_config

# Import modules through their black box interfaces
from sessiongate.modules.api import create_session_router
from sessiongate.modules.auth import AuthFactory
from sessiongate.modules.config import ConfigModule, get_config
from sessiongate.modules.engine import RemoteSessionEngine
from sessiongate.modules.notify import WebhookNotifySink, build_stores
from sessiongate.modules.session import SessionCoordinator, SessionReclaimer

# Get configuration
config = get_config()

log_config.dictConfig(get_logging_config(config.get("log_level")))
logger = logging.getLogger(__name__)

# Credential provider (API keys)
config_provider: ConfigProvider = EnvConfigProvider()


async def get_redis_client() -> redis.Redis:
    """Create Redis client from configuration."""
    redis_url = f"redis://{config.get('redis_host')}:{config.get('redis_port')}/{config.get('redis_db')}"

    return redis.from_url(
        redis_url,
        password=config.get("redis_password"),
        encoding="utf-8",
        decode_responses=True,
    )


def build_coordinator(cfg: ConfigModule, redis_client: Optional[redis.Redis] = None) -> SessionCoordinator:
    """
    Wire the engine, stores and notify sink into a session coordinator.

    Every setting comes from the config module; the caller closes
    coordinator.engine and coordinator.notify_sink on shutdown.
    """
    engine = RemoteSessionEngine(cfg.get("engine_url"), timeout=cfg.get("engine_timeout"))
    logger.info(f"Session engine at {engine.base_url}")

    qr_store, webhook_registry = build_stores(
        cfg.get("store_backend"), redis_client, qr_ttl=cfg.get("qr_ttl")
    )
    notify_sink = WebhookNotifySink(
        qr_store,
        webhook_registry,
        webhook_url=cfg.get("webhook_url"),
        timeout=cfg.get("webhook_timeout"),
    )
    if cfg.get("webhook_url"):
        logger.info("QR webhook configured")

    return SessionCoordinator(
        engine,
        reclaimer=SessionReclaimer(engine, settle_delay=cfg.get("reclaim_settle_delay")),
        notify_sink=notify_sink,
        qr_store=qr_store,
        webhook_registry=webhook_registry,
        start_timeout=cfg.get("start_timeout"),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle - initialize and cleanup resources.

    Services already placed on app.state (e.g. by tests) are left alone.
    """
    if getattr(app.state, "coordinator", None) is not None:
        yield
        return

    logger.info("Starting Sessiongate API...")

    redis_client: Optional[redis.Redis] = None
    if config.get("store_backend") == "redis":
        redis_client = await get_redis_client()

    app.state.auth_service = AuthFactory.build(config_provider, redis_client)
    coordinator = app.state.coordinator = build_coordinator(config, redis_client)

    logger.info("Sessiongate API started successfully")

    yield

    # Shutdown
    logger.info("Shutting down Sessiongate API...")
    await coordinator.engine.close()
    await coordinator.notify_sink.close()
    if redis_client:
        await redis_client.close()
    app.state.coordinator = None
    logger.info("Sessiongate API shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Sessiongate API",
    description="Start messaging sessions, hand out pairing QR codes, log sessions out",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(create_session_router())


# Health Endpoints


@app.get("/healthz")
async def healthz():
    """
    Minimal health check endpoint for readiness/liveness probes.

    This endpoint is unauthenticated and returns a simple OK response.

    Returns:
        200: Service is running
    """
    return {"status": "ok"}


# Error handlers


@app.exception_handler(SessionGateError)
async def session_error_handler(request, exc: SessionGateError):
    """Render session errors with their status and code."""
    if exc.status_code >= 500:
        logger.error(f"Error handling {request.url.path}: {exc.message}")
    else:
        logger.info(f"Rejected {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request, exc: StarletteHTTPException):
    """Keep plain HTTP errors in the same shape as session errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "http_error", "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def run() -> None:
    """Run the API server with uvicorn."""
    uvicorn.run(
        "sessiongate.main:app",
        host=config.get("host"),
        port=config.get("port"),
        log_level=config.get("log_level").lower(),
        reload=config.get("debug"),
        log_config=get_logging_config(config.get("log_level")),
    )


if __name__ == "__main__":
    run()
