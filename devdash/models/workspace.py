"""Модели состояния рабочей копии проекта: git и do-work очередь."""

from pydantic import BaseModel, Field

from devdash.core.enums import ProjectsRootSource


class GitStatus(BaseModel):
    """Состояние git репозитория."""

    local_branch: str = "unknown"
    remote_branch: str | None = None
    is_clean: bool = True
    ahead: int = 0
    behind: int = 0
    uncommitted_changes: int = 0


class GitCommit(BaseModel):
    """Коммит из git log."""

    hash: str
    message: str
    date: str
    author: str


class DoWorkRequest(BaseModel):
    """Запрос из do-work очереди (markdown с YAML frontmatter)."""

    id: str
    title: str
    status: str | None = None
    created_at: str | None = None
    claimed_at: str | None = None
    completed_at: str | None = None


class DoWorkQueue(BaseModel):
    """Снимок do-work очереди проекта."""

    pending: list[DoWorkRequest] = Field(default_factory=list)
    working: list[DoWorkRequest] = Field(default_factory=list)
    recent_archive: list[DoWorkRequest] = Field(default_factory=list)


class AppSettings(BaseModel):
    """Пользовательские настройки из data/settings.json."""

    projects_root: str | None = None


class ProjectsRootInfo(BaseModel):
    """Эффективный корень проектов и его источник."""

    settings: AppSettings
    effective_projects_root: str | None = None
    projects_root_source: ProjectsRootSource = ProjectsRootSource.NONE
    inferred_projects_root: str | None = None
