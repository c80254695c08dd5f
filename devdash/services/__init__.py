"""Сервисы DevDash."""

from devdash.services.dowork_service import DoWorkService
from devdash.services.event_bus import EventBus
from devdash.services.git_service import GitService
from devdash.services.history_service import HistoryService
from devdash.services.project_creator import ProjectCreator
from devdash.services.process_supervisor import WorkerCallbacks, WorkerProcess, spawn_worker
from devdash.services.project_service import ProjectService
from devdash.services.settings_service import SettingsService
from devdash.services.task_manager import TaskManager

__all__ = [
    "DoWorkService",
    "EventBus",
    "GitService",
    "HistoryService",
    "ProjectCreator",
    "ProjectService",
    "SettingsService",
    "TaskManager",
    "WorkerCallbacks",
    "WorkerProcess",
    "spawn_worker",
]
