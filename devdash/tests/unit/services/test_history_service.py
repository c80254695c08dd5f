"""Unit тесты для services/history_service.py."""

from pathlib import Path

import orjson
import pytest

from devdash.core.enums import TaskStatus
from devdash.models.task import Task
from devdash.services.history_service import HistoryService


def make_task(status: TaskStatus = TaskStatus.COMPLETED, **fields: object) -> Task:
    """Создать задачу в заданном статусе."""
    fields.setdefault("prompt", "Fix bug")
    return Task(project_id="proj-1", status=status, **fields)


@pytest.fixture
def history_path(tmp_path: Path) -> Path:
    """Путь к файлу истории (директория ещё не существует)."""
    return tmp_path / "data" / "task-history.json"


class TestHistoryService:
    """Тесты для HistoryService."""

    @pytest.mark.asyncio
    async def test_load_missing_file(self, history_path: Path) -> None:
        """Нет файла - пустая история."""
        service = HistoryService(history_path)

        history = await service.load_history()

        assert history.tasks == []

    @pytest.mark.asyncio
    async def test_load_corrupted_file(self, history_path: Path) -> None:
        """Повреждённый файл - пустая история."""
        history_path.parent.mkdir(parents=True)
        history_path.write_text("{not json")
        service = HistoryService(history_path)

        history = await service.load_history()

        assert history.tasks == []

    @pytest.mark.asyncio
    async def test_add_creates_file(self, history_path: Path) -> None:
        """Первая запись создаёт директорию и файл."""
        service = HistoryService(history_path)
        task = make_task(output="ab")

        await service.add_task_to_history(task)

        data = orjson.loads(history_path.read_bytes())
        assert [t["id"] for t in data["tasks"]] == [task.id]
        assert data["tasks"][0]["output"] == "ab"
        assert data["tasks"][0]["status"] == "completed"
        assert "last_updated" in data

    @pytest.mark.asyncio
    async def test_add_replaces_by_id(self, history_path: Path) -> None:
        """Повторная запись той же задачи заменяет её."""
        service = HistoryService(history_path)
        task = make_task(status=TaskStatus.FAILED)
        other = make_task()

        await service.add_task_to_history(task)
        await service.add_task_to_history(other)
        task.error = "updated"
        await service.add_task_to_history(task)

        history = await service.load_history()
        assert [t.id for t in history.tasks] == [task.id, other.id]
        assert history.tasks[0].error == "updated"

    @pytest.mark.asyncio
    async def test_keeps_last_entries(self, history_path: Path) -> None:
        """Хранятся только последние limit задач."""
        service = HistoryService(history_path, limit=3)
        tasks = [make_task(prompt=f"task {i}") for i in range(5)]

        for task in tasks:
            await service.add_task_to_history(task)

        history = await service.load_history()
        assert [t.id for t in history.tasks] == [t.id for t in tasks[-3:]]

    @pytest.mark.asyncio
    async def test_default_limit_is_100(self, history_path: Path) -> None:
        """По умолчанию хранится 100 задач."""
        service = HistoryService(history_path)

        for i in range(102):
            await service.add_task_to_history(make_task(prompt=f"task {i}"))

        history = await service.load_history()
        assert len(history.tasks) == 100
        assert history.tasks[0].prompt == "task 2"

    @pytest.mark.asyncio
    async def test_get_completed_tasks_filters_terminal(self, history_path: Path) -> None:
        """get_completed_tasks возвращает только терминальные статусы."""
        service = HistoryService(history_path)
        for status in TaskStatus:
            await service.add_task_to_history(make_task(status=status))

        completed = await service.get_completed_tasks()

        assert {t.status for t in completed} == {
            TaskStatus.COMPLETED,
            TaskStatus.FAILED,
            TaskStatus.CANCELLED,
        }
