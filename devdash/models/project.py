"""Модели inventory проектов.

Inventory хранится в JSON с camelCase ключами, поэтому модели
принимают и alias, и snake_case имена.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from devdash.core.enums import ProjectStatus, ProjectType, RelationshipType


class InventoryModel(BaseModel):
    """База для моделей inventory (camelCase на диске)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class ProjectRelationship(InventoryModel):
    """Связь с другим проектом."""

    type: RelationshipType
    target_project: str
    description: str | None = None


class ProjectMetadata(InventoryModel):
    """Метаданные сканирования проекта."""

    has_claude_md: bool = False
    claude_md_hash: str | None = None
    last_scanned: datetime | None = None
    last_modified: datetime | None = None


class Project(InventoryModel):
    """Запись о проекте.

    Движку задач нужны только `id` и `path` (рабочая директория воркера),
    остальные поля отображаются в dashboard как есть.
    """

    id: str
    name: str
    path: str
    description: str = ""
    project_type: ProjectType | None = None
    status: ProjectStatus = ProjectStatus.ACTIVE

    technology: dict[str, Any] | None = None
    git: dict[str, Any] | None = None
    configuration: dict[str, Any] | None = None
    constraints: dict[str, Any] | None = None
    relationships: list[ProjectRelationship] = Field(default_factory=list)

    metadata: ProjectMetadata = Field(default_factory=ProjectMetadata)


class ProjectInventory(InventoryModel):
    """Корневой документ inventory.json."""

    version: str = "1.0"
    last_updated: datetime | None = None
    projects: list[Project] = Field(default_factory=list)
