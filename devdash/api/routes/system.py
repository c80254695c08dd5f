"""System API Routes для DevDash.

Health check и остановка локального сервера.
"""

import asyncio
import os
import signal
import time

from fastapi import APIRouter

from devdash.api.dependencies import TaskManagerDep
from devdash.api.schemas.responses import HealthResponse, ShutdownResponse
from devdash.core.constants import SHUTDOWN_DELAY_SECONDS
from devdash.models.task import utc_now
from devdash.shared.logging import get_logger

logger = get_logger()

router = APIRouter(tags=["system"])

_started_at = time.monotonic()


def schedule_shutdown(delay: float = SHUTDOWN_DELAY_SECONDS) -> None:
    """Отправить процессу SIGTERM после задержки.

    Uvicorn обрабатывает SIGTERM штатно: lifespan shutdown
    отменяет активные задачи.
    """
    loop = asyncio.get_running_loop()
    loop.call_later(delay, os.kill, os.getpid(), signal.SIGTERM)


@router.get("/health", summary="Health check")
async def health_check(task_manager: TaskManagerDep) -> HealthResponse:
    """Health check сервера."""
    return HealthResponse(
        timestamp=utc_now(),
        uptime=round(time.monotonic() - _started_at, 3),
        running_tasks=task_manager.get_running_count(),
        pending_tasks=task_manager.get_pending_count(),
    )


@router.post("/shutdown", summary="Остановить сервер")
async def shutdown() -> ShutdownResponse:
    """Остановить сервер после отправки ответа."""
    logger.info("Запрошена остановка сервера через API")
    schedule_shutdown()
    return ShutdownResponse(message="Server shutting down...")
