"""Projects API Routes для DevDash.

Endpoints для inventory проектов, git статуса и do-work очередей.
Git данные собираются best-effort: недоступный репозиторий
не ломает ответ.
"""

import asyncio

from fastapi import APIRouter, status

from devdash.api.dependencies import (
    DoWorkServiceDep,
    GitServiceDep,
    ProjectCreatorDep,
    ProjectServiceDep,
)
from devdash.api.schemas.requests import CreateProjectRequest
from devdash.api.schemas.responses import ProjectDetails, ProjectSummary
from devdash.models.project import Project
from devdash.services.git_service import GitService
from devdash.shared.errors import (
    ProjectAlreadyExistsError,
    ProjectCreationError,
    ProjectNotFoundError,
    ValidationError,
    openapi_responses,
)

router = APIRouter(prefix="/projects", tags=["projects"])


async def _summarize(project: Project, git_service: GitService) -> ProjectSummary:
    git_service.schedule_fetch(project.path)

    git, commits = await asyncio.gather(
        git_service.get_status_or_default(project.path),
        git_service.get_commits_or_empty(project.path, 1),
    )
    latest = commits[0] if commits else None

    return ProjectSummary(
        id=project.id,
        name=project.name,
        status=project.status,
        last_modified=project.metadata.last_modified,
        git_branch=git.local_branch,
        is_clean=git.is_clean,
        ahead=git.ahead,
        behind=git.behind,
        uncommitted_changes=git.uncommitted_changes,
        last_commit_message=latest.message if latest else "",
        last_commit_date=latest.date if latest else "",
    )


@router.get(
    "",
    summary="Все проекты",
    response_model_by_alias=False,
)
async def list_projects(project_service: ProjectServiceDep) -> list[Project]:
    """Все проекты из inventory."""
    return await project_service.get_all_projects()


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Создать проект",
    description="Копирует шаблон в корень проектов, инициализирует git и добавляет проект в inventory",
    response_model_by_alias=False,
    responses=openapi_responses(ProjectCreationError, ProjectAlreadyExistsError, ValidationError),
)
async def create_project(request: CreateProjectRequest, project_creator: ProjectCreatorDep) -> Project:
    """Создать проект из шаблона.

    Raises:
        ProjectCreationError: Корень проектов не настроен или нет шаблона
        ProjectAlreadyExistsError: Директория или ID уже заняты

    """
    return await project_creator.create_project(request.name, request.description)


@router.get(
    "/summary",
    summary="Сводка по проектам",
    description="Проекты с git веткой, статусом рабочей копии и последним коммитом",
)
async def get_projects_summary(
    project_service: ProjectServiceDep,
    git_service: GitServiceDep,
) -> list[ProjectSummary]:
    """Сводка по всем проектам."""
    projects = await project_service.get_all_projects()
    return list(await asyncio.gather(*(_summarize(project, git_service) for project in projects)))


@router.get(
    "/{project_id}",
    summary="Получить проект",
    response_model_by_alias=False,
    responses=openapi_responses(ProjectNotFoundError),
)
async def get_project(project_id: str, project_service: ProjectServiceDep) -> Project:
    """Получить проект по ID.

    Raises:
        ProjectNotFoundError: Проект не найден

    """
    project = await project_service.get_project_by_id(project_id)
    if project is None:
        raise ProjectNotFoundError(project_id)
    return project


@router.get(
    "/{project_id}/details",
    summary="Подробности проекта",
    description="Проект, git статус, последние 10 коммитов и do-work очередь",
    response_model_by_alias=False,
    responses=openapi_responses(ProjectNotFoundError),
)
async def get_project_details(
    project_id: str,
    project_service: ProjectServiceDep,
    git_service: GitServiceDep,
    dowork_service: DoWorkServiceDep,
) -> ProjectDetails:
    """Подробная информация о проекте.

    Raises:
        ProjectNotFoundError: Проект не найден

    """
    project = await project_service.get_project_by_id(project_id)
    if project is None:
        raise ProjectNotFoundError(project_id)

    git_service.schedule_fetch(project.path)

    git, recent_commits, do_work = await asyncio.gather(
        git_service.get_status_or_default(project.path),
        git_service.get_commits_or_empty(project.path),
        dowork_service.get_do_work_queue(project.path),
    )

    return ProjectDetails(
        project=project,
        git=git,
        recent_commits=recent_commits,
        do_work=do_work,
    )
