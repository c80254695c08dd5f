"""Pytest configuration для unit тестов."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import orjson
import pytest

from devdash.core.config import DataSettings, LogSettings, Settings, WorkerSettings
from devdash.models.project import Project
from devdash.services.event_bus import EventBus
from devdash.services.process_supervisor import WorkerCallbacks, build_worker_args


class FakeWorkerProcess:
    """Управляемый из теста процесс воркера.

    Ничего не запускает: тест сам генерирует события
    через emit_output / emit_error / exit.
    """

    def __init__(
        self,
        cwd: str,
        prompt: str,
        max_budget: float | None = None,
        callbacks: WorkerCallbacks | None = None,
    ) -> None:
        self.cwd = cwd
        self.prompt = prompt
        self.max_budget = max_budget
        self.callbacks = callbacks or WorkerCallbacks()
        self.killed = False
        self.running = True
        self.signals: list[str] = []
        self.ignore_sigterm = False
        self._exited = asyncio.Event()

    @property
    def args(self) -> list[str]:
        return ["claude", *build_worker_args(self.prompt, self.max_budget)]

    def kill(self, force: bool = False) -> None:
        self.killed = True
        self.signals.append("SIGKILL" if force else "SIGTERM")
        if force or not self.ignore_sigterm:
            self.running = False
            self._exited.set()

    def is_running(self) -> bool:
        return self.running

    async def emit_output(self, chunk: str) -> None:
        await self.callbacks.on_output(chunk)

    async def emit_error(self, chunk: str) -> None:
        await self.callbacks.on_error(chunk)

    async def wait(self) -> None:
        await self._exited.wait()

    async def exit(self, code: int | None, signal_name: str | None = None) -> None:
        self.running = False
        self._exited.set()
        await self.callbacks.on_exit(code, signal_name)


class FakeSpawner:
    """Фабрика FakeWorkerProcess, запоминающая все запуски."""

    def __init__(self) -> None:
        self.processes: list[FakeWorkerProcess] = []

    def __call__(
        self,
        cwd: str,
        prompt: str,
        max_budget: float | None = None,
        callbacks: WorkerCallbacks | None = None,
    ) -> FakeWorkerProcess:
        process = FakeWorkerProcess(cwd, prompt, max_budget, callbacks)
        self.processes.append(process)
        return process

    @property
    def last(self) -> FakeWorkerProcess:
        return self.processes[-1]


def make_project(project_id: str = "proj-1", path: str = "/work/proj-1", **overrides: object) -> Project:
    """Создать проект для тестов."""
    return Project(id=project_id, name=overrides.pop("name", project_id), path=path, **overrides)


def write_inventory(path: Path, projects: list[Project]) -> None:
    """Записать inventory.json в camelCase формате."""
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "version": "1.0",
        "projects": [p.model_dump(mode="json", by_alias=True, exclude_none=True) for p in projects],
    }
    path.write_bytes(orjson.dumps(payload))


@pytest.fixture
def spawner() -> FakeSpawner:
    """Fake spawner воркеров."""
    return FakeSpawner()


@pytest.fixture
def projects() -> dict[str, Project]:
    """Проекты, известные mock_project_lookup."""
    return {
        "proj-1": make_project("proj-1", "/work/proj-1"),
        "proj-2": make_project("proj-2", "/work/proj-2"),
    }


@pytest.fixture
def mock_project_lookup(projects: dict[str, Project]) -> MagicMock:
    """Mock ProjectLookup поверх словаря projects."""
    lookup = MagicMock()

    async def get_project_by_id(project_id: str) -> Project | None:
        return projects.get(project_id)

    lookup.get_project_by_id = AsyncMock(side_effect=get_project_by_id)
    return lookup


@pytest.fixture
def mock_history() -> MagicMock:
    """Mock HistorySink."""
    history = MagicMock()
    history.add_task_to_history = AsyncMock()
    return history


@pytest.fixture
def event_bus() -> EventBus:
    """Шина событий."""
    return EventBus()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Настройки с данными во временной директории и без файлового лога."""
    return Settings(
        projects_root=None,
        data=DataSettings(dir=str(tmp_path / "data")),
        log=LogSettings(level="DEBUG", file_path=None),
        worker=WorkerSettings(executable="/nonexistent/devdash-test-cli"),
    )
