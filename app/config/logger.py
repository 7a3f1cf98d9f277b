"""Loguru configuration shared by the API and the services."""

from __future__ import annotations

import sys

from fastapi import Request
from loguru import logger

from app.config.settings import settings


logger.remove()
logger.add(
    sys.stderr,
    level=settings.log_level.upper(),
    format=(
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level> | {extra}"
    ),
)

app_logger = logger.bind(component="api")


def log_request_start(request: Request) -> None:
    client = request.client.host if request.client else None
    app_logger.bind(client=client).info(f"--> {request.method} {request.url.path}")


def log_request_end(request: Request, status_code: int, process_time: float) -> None:
    app_logger.bind(duration_seconds=round(process_time, 4)).info(
        f"<-- {request.method} {request.url.path} {status_code}"
    )


def log_request_error(request: Request, error: Exception, process_time: float) -> None:
    app_logger.bind(duration_seconds=round(process_time, 4)).error(
        f"<-- {request.method} {request.url.path} failed: {error!r}"
    )
