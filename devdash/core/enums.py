"""Enums для DevDash.

Централизованное хранилище всех enum'ов проекта.
"""

from enum import Enum


class TaskStatus(str, Enum):
    """Статус задачи."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        """Терминальный статус - переходов из него нет."""
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED, TaskStatus.CANCELLED)


class TaskEventType(str, Enum):
    """Тип события жизненного цикла задачи."""

    CREATED = "task:created"
    STARTED = "task:started"
    OUTPUT = "task:output"
    COMPLETED = "task:completed"
    FAILED = "task:failed"
    CANCELLED = "task:cancelled"
    RETRYING = "task:retrying"


class ProjectType(str, Enum):
    """Тип проекта в inventory."""

    EMBEDDED = "embedded"
    PYTHON = "python"
    NODEJS = "nodejs"
    DOCUMENTATION = "documentation"
    UTILITY = "utility"


class ProjectStatus(str, Enum):
    """Статус проекта в inventory."""

    ACTIVE = "active"
    DESIGN = "design"
    STABLE = "stable"
    ARCHIVED = "archived"


class RelationshipType(str, Enum):
    """Тип связи между проектами."""

    DEPENDS_ON = "depends-on"
    RELATED_TO = "related-to"
    PART_OF = "part-of"


class ProjectsRootSource(str, Enum):
    """Откуда взят корень проектов."""

    ENV = "env"  # Переменная окружения PROJECTS_ROOT
    SETTINGS = "settings"  # data/settings.json
    NONE = "none"
