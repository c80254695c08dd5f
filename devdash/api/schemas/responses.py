"""Response Schemas для DevDash API.

Pydantic models для API responses.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from devdash.core.enums import ProjectStatus
from devdash.models.project import Project
from devdash.models.workspace import DoWorkQueue, GitCommit, GitStatus


class CancelTaskResponse(BaseModel):
    """Ответ на отмену задачи."""

    success: bool = Field(description="Задача отменена")


class HealthResponse(BaseModel):
    """Ответ health check."""

    status: Literal["ok"] = Field(default="ok", description="Статус сервиса")

    timestamp: datetime = Field(description="Текущее время сервера")

    uptime: float = Field(description="Время работы процесса в секундах")

    running_tasks: int = Field(default=0, description="Задач в работе")

    pending_tasks: int = Field(default=0, description="Задач в очереди")


class ShutdownResponse(BaseModel):
    """Ответ на запрос остановки."""

    message: str = Field(default="Shutting down", description="Сообщение")


class ProjectSummary(BaseModel):
    """Проект с кратким git статусом (строка списка в dashboard)."""

    id: str

    name: str

    status: ProjectStatus

    last_modified: datetime | None = None

    git_branch: str = Field(description="Текущая ветка (unknown если git недоступен)")

    is_clean: bool

    ahead: int

    behind: int

    uncommitted_changes: int

    last_commit_message: str = ""

    last_commit_date: str = ""


class ProjectDetails(BaseModel):
    """Подробная информация о проекте."""

    project: Project

    git: GitStatus

    recent_commits: list[GitCommit] = Field(default_factory=list)

    do_work: DoWorkQueue | None = Field(
        default=None,
        description="Do-work очередь (None если у проекта её нет)",
    )
