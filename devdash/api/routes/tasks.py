"""Tasks API Routes для DevDash.

Endpoints для запуска, мониторинга и отмены задач воркера.
"""

from fastapi import APIRouter, status

from devdash.api.dependencies import HistoryServiceDep, TaskManagerDep
from devdash.api.schemas.requests import CreateTaskRequest
from devdash.api.schemas.responses import CancelTaskResponse
from devdash.models.task import Task
from devdash.shared.errors import (
    ProjectNotFoundError,
    TaskNotFoundError,
    ValidationError,
    openapi_responses,
)
from devdash.shared.logging import get_logger

logger = get_logger()

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Создать задачу",
    description="Ставит задачу в очередь и сразу запускает её, если есть свободный слот",
    responses={
        201: {"description": "Задача создана"},
        **openapi_responses(ProjectNotFoundError, ValidationError),
    },
)
async def create_task(request: CreateTaskRequest, task_manager: TaskManagerDep) -> Task:
    """Создать задачу.

    Args:
        request: Параметры задачи
        task_manager: Движок задач

    Returns:
        Созданная задача

    """
    task = await task_manager.create_task(
        project_id=request.project_id,
        prompt=request.prompt,
        max_budget=request.max_budget,
    )
    return task


@router.get(
    "",
    summary="Активные задачи",
    description="Running задачи, затем pending в порядке очереди",
)
async def list_tasks(task_manager: TaskManagerDep) -> list[Task]:
    """Активные задачи."""
    return task_manager.get_active_tasks()


@router.get(
    "/history",
    summary="История задач",
    description="Завершённые задачи из истории (последние 100)",
)
async def get_task_history(history_service: HistoryServiceDep) -> list[Task]:
    """Завершённые задачи."""
    return await history_service.get_completed_tasks()


@router.get(
    "/{task_id}",
    summary="Получить активную задачу",
    responses=openapi_responses(TaskNotFoundError),
)
async def get_task(task_id: str, task_manager: TaskManagerDep) -> Task:
    """Получить активную задачу.

    Raises:
        TaskNotFoundError: Задача не активна или не существует

    """
    task = task_manager.get_task(task_id)
    if task is None:
        raise TaskNotFoundError(task_id)
    return task


@router.delete(
    "/{task_id}",
    summary="Отменить задачу",
    responses=openapi_responses(TaskNotFoundError),
)
async def cancel_task(task_id: str, task_manager: TaskManagerDep) -> CancelTaskResponse:
    """Отменить pending или running задачу.

    Raises:
        TaskNotFoundError: Задача не активна или не существует

    """
    if not await task_manager.cancel_task(task_id):
        raise TaskNotFoundError(task_id)

    logger.info("Задача отменена через API", task_id=task_id)
    return CancelTaskResponse(success=True)
