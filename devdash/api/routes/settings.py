"""Settings API Routes для DevDash.

Endpoints для корневой директории проектов.
"""

from pathlib import Path

from fastapi import APIRouter

from devdash.api.dependencies import ProjectServiceDep, SettingsServiceDep
from devdash.api.schemas.requests import UpdateSettingsRequest
from devdash.core.enums import ProjectsRootSource
from devdash.models.project import Project
from devdash.models.workspace import ProjectsRootInfo
from devdash.services.project_service import ProjectService
from devdash.shared.errors import (
    BadRequestError,
    InventoryUnavailableError,
    ValidationError,
    openapi_responses,
)
from devdash.shared.logging import get_logger

logger = get_logger()

router = APIRouter(prefix="/settings", tags=["settings"])


async def _projects_for_inference(project_service: ProjectService) -> list[Project]:
    try:
        return await project_service.get_all_projects()
    except InventoryUnavailableError as e:
        logger.debug("Inventory недоступен, корень проектов не выводится", error=e.message)
        return []


@router.get(
    "",
    summary="Настройки",
    description="Сохранённые настройки, эффективный корень проектов и его источник",
)
async def get_settings(
    settings_service: SettingsServiceDep,
    project_service: ProjectServiceDep,
) -> ProjectsRootInfo:
    """Текущие настройки."""
    projects: list[Project] = []
    if await settings_service.get_projects_root_source() is ProjectsRootSource.NONE:
        projects = await _projects_for_inference(project_service)

    return await settings_service.get_projects_root_info(projects)


@router.put(
    "",
    summary="Обновить настройки",
    responses=openapi_responses(BadRequestError, ValidationError),
)
async def update_settings(
    request: UpdateSettingsRequest,
    settings_service: SettingsServiceDep,
) -> ProjectsRootInfo:
    """Сохранить корень проектов.

    Raises:
        BadRequestError: Директория не существует

    """
    if not Path(request.projects_root).is_dir():
        raise BadRequestError(
            message=f"Directory does not exist: {request.projects_root}",
            details={"projects_root": request.projects_root},
        )

    await settings_service.set_projects_root(request.projects_root)
    return await settings_service.get_projects_root_info()
