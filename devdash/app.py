"""DevDash - FastAPI Application.

Главное приложение: сборка сервисов, движка задач и роутеров.
"""

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import partial
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from devdash import __version__
from devdash.api import router as api_router
from devdash.api import websocket_router
from devdash.core.config import Settings, settings
from devdash.services.dowork_service import DoWorkService
from devdash.services.event_bus import EventBus
from devdash.services.git_service import GitService
from devdash.services.history_service import HistoryService
from devdash.services.process_supervisor import spawn_worker
from devdash.services.project_creator import ProjectCreator
from devdash.services.project_service import ProjectService
from devdash.services.settings_service import SettingsService
from devdash.services.task_manager import TaskManager, WorkerSpawner
from devdash.shared.errors import setup_exception_handlers
from devdash.shared.errors.context import get_trace_id, trace_context
from devdash.shared.logging import get_logger, setup_logger

logger = get_logger()


class TraceContextMiddleware:
    """Устанавливает trace_id на время HTTP запроса или WebSocket соединения."""

    def __init__(self, app: Any) -> None:
        """Инициализация middleware.

        Args:
            app: ASGI приложение.

        """
        self.app = app

    async def __call__(self, scope: dict, receive: Any, send: Any) -> None:
        """Обработка запроса с установкой trace_id.

        Args:
            scope: ASGI scope.
            receive: ASGI receive callable.
            send: ASGI send callable.

        """
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        incoming = headers.get(b"x-trace-id", b"").decode("latin-1")

        with trace_context(incoming or None):
            await self.app(scope, receive, send)


def build_services(app: FastAPI, config: Settings, spawner: WorkerSpawner | None = None) -> TaskManager:
    """Создать сервисы и движок задач в app.state.

    Args:
        app: FastAPI приложение
        config: Настройки
        spawner: Фабрика воркеров (по умолчанию - реальный CLI)

    Returns:
        Созданный TaskManager

    """
    data_dir = Path(config.data.dir)

    project_service = ProjectService(data_dir / config.data.inventory_file)
    history_service = HistoryService(data_dir / config.data.history_file, limit=config.data.history_limit)
    settings_service = SettingsService(
        data_dir / config.data.settings_file,
        env_projects_root=config.projects_root,
    )
    git_service = GitService(timeout=config.worker.git_timeout)
    event_bus = EventBus()

    task_manager = TaskManager(
        project_lookup=project_service,
        history=history_service,
        event_bus=event_bus,
        spawner=spawner or partial(spawn_worker, executable=config.worker.executable),
        max_concurrent=config.tasks.max_concurrent,
        max_retries=config.tasks.max_retries,
        default_budget=config.tasks.default_budget,
        shutdown_timeout=config.worker.shutdown_timeout,
    )

    app.state.project_service = project_service
    app.state.history_service = history_service
    app.state.settings_service = settings_service
    app.state.git_service = git_service
    app.state.project_creator = ProjectCreator(
        project_service=project_service,
        settings_service=settings_service,
        git_service=git_service,
        template_dir=config.creator.template_dir,
        executable=config.worker.executable,
        init_timeout=config.creator.init_timeout,
    )
    app.state.dowork_service = DoWorkService()
    app.state.event_bus = event_bus
    app.state.task_manager = task_manager

    return task_manager


def create_app(config: Settings | None = None, spawner: WorkerSpawner | None = None) -> FastAPI:
    """Создание и настройка FastAPI приложения.

    Args:
        config: Настройки (по умолчанию глобальный settings)
        spawner: Фабрика воркеров (подменяется в тестах)

    Returns:
        Настроенный экземпляр FastAPI приложения.

    """
    config = config or settings

    setup_logger(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(f"Запуск {config.app_name}...", environment=config.environment, debug=config.debug)

        task_manager = build_services(app, config, spawner)

        logger.info(
            f"{config.app_name} готов",
            data_dir=config.data.dir,
            executable=config.worker.executable,
            max_concurrent=config.tasks.max_concurrent,
        )

        yield

        logger.info(f"{config.app_name} останавливается")
        await task_manager.shutdown()
        logger.success("Завершение работы выполнено")

    app = FastAPI(
        title=config.app_name,
        description="Локальный dashboard для запуска coding-assistant CLI по проектам",
        version=__version__,
        lifespan=lifespan,
        debug=config.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def timing_middleware(request: Request, call_next: Any) -> Any:
        """Middleware для измерения времени выполнения запросов.

        Args:
            request: Входящий HTTP запрос.
            call_next: Следующий обработчик в цепочке.

        Returns:
            HTTP ответ с добавленными заголовками.

        """
        start_time = time.time()
        trace_id = get_trace_id()

        response = await call_next(request)

        duration_ms = round((time.time() - start_time) * 1000, 2)
        response.headers["X-Trace-Id"] = trace_id
        response.headers["X-Duration-Ms"] = str(duration_ms)

        logger.debug(
            f"{request.method} {request.url.path} - {response.status_code}",
            duration_ms=duration_ms,
            status_code=response.status_code,
        )
        return response

    # Внешний слой: trace_id должен быть установлен до остальных middleware
    app.add_middleware(TraceContextMiddleware)

    setup_exception_handlers(app)

    app.include_router(api_router)
    app.include_router(websocket_router)

    return app
