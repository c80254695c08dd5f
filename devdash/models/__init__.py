"""Доменные модели DevDash."""

from devdash.models.events import (
    TaskCancelledEvent,
    TaskCompletedEvent,
    TaskCreatedEvent,
    TaskEvent,
    TaskFailedEvent,
    TaskOutputEvent,
    TaskRetryingEvent,
    TaskStartedEvent,
    event_task_id,
    task_event_adapter,
)
from devdash.models.project import Project, ProjectInventory, ProjectMetadata, ProjectRelationship
from devdash.models.task import Task, TaskHistory
from devdash.models.workspace import (
    AppSettings,
    DoWorkQueue,
    DoWorkRequest,
    GitCommit,
    GitStatus,
    ProjectsRootInfo,
)

__all__ = [
    "AppSettings",
    "DoWorkQueue",
    "DoWorkRequest",
    "GitCommit",
    "GitStatus",
    "Project",
    "ProjectInventory",
    "ProjectMetadata",
    "ProjectRelationship",
    "ProjectsRootInfo",
    "Task",
    "TaskCancelledEvent",
    "TaskCompletedEvent",
    "TaskCreatedEvent",
    "TaskEvent",
    "TaskFailedEvent",
    "TaskHistory",
    "TaskOutputEvent",
    "TaskRetryingEvent",
    "TaskStartedEvent",
    "event_task_id",
    "task_event_adapter",
]
