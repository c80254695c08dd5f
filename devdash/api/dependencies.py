"""DevDash - Dependencies.

Dependency Injection для FastAPI. Сервисы создаются в lifespan
и хранятся в app.state.
"""

from typing import Annotated

from fastapi import Depends, Request

from devdash.core.config import Settings, settings
from devdash.services.dowork_service import DoWorkService
from devdash.services.event_bus import EventBus
from devdash.services.git_service import GitService
from devdash.services.history_service import HistoryService
from devdash.services.project_creator import ProjectCreator
from devdash.services.project_service import ProjectService
from devdash.services.settings_service import SettingsService
from devdash.services.task_manager import TaskManager

# ==================== Service Dependencies ====================


def get_task_manager(request: Request) -> TaskManager:
    """Предоставляет TaskManager instance.

    Args:
        request: HTTP запрос FastAPI.

    Returns:
        TaskManager из состояния приложения.

    """
    return request.app.state.task_manager


def get_event_bus(request: Request) -> EventBus:
    """Предоставляет шину событий задач."""
    return request.app.state.event_bus


def get_project_service(request: Request) -> ProjectService:
    """Предоставляет Project Service."""
    return request.app.state.project_service


def get_history_service(request: Request) -> HistoryService:
    """Предоставляет History Service."""
    return request.app.state.history_service


def get_settings_service(request: Request) -> SettingsService:
    """Предоставляет Settings Service."""
    return request.app.state.settings_service


def get_git_service(request: Request) -> GitService:
    """Предоставляет Git Service."""
    return request.app.state.git_service


def get_dowork_service(request: Request) -> DoWorkService:
    """Предоставляет Do-Work Service."""
    return request.app.state.dowork_service


def get_project_creator(request: Request) -> ProjectCreator:
    """Предоставляет Project Creator."""
    return request.app.state.project_creator


# ==================== Configuration Dependencies ====================


def get_settings() -> Settings:
    """Предоставляет application settings.

    Returns:
        Settings instance.

    """
    return settings


# ==================== Type Aliases ====================
# Используются для более чистого кода в route handlers

TaskManagerDep = Annotated[TaskManager, Depends(get_task_manager)]
EventBusDep = Annotated[EventBus, Depends(get_event_bus)]
ProjectServiceDep = Annotated[ProjectService, Depends(get_project_service)]
HistoryServiceDep = Annotated[HistoryService, Depends(get_history_service)]
SettingsServiceDep = Annotated[SettingsService, Depends(get_settings_service)]
GitServiceDep = Annotated[GitService, Depends(get_git_service)]
DoWorkServiceDep = Annotated[DoWorkService, Depends(get_dowork_service)]
ProjectCreatorDep = Annotated[ProjectCreator, Depends(get_project_creator)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
