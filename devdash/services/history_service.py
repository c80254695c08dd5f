"""History Service - хранилище завершённых задач.

JSON файл с последними N задачами. Запись по ID идемпотентна:
повторное сохранение той же задачи заменяет запись.
"""

import asyncio
from pathlib import Path

import orjson
from pydantic import ValidationError as PydanticValidationError

from devdash.core.constants import DEFAULT_HISTORY_LIMIT
from devdash.models.task import Task, TaskHistory, utc_now
from devdash.shared.logging import get_logger

logger = get_logger()


class HistoryService:
    """Файловая история задач."""

    def __init__(self, path: Path | str, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        """Инициализировать History Service.

        Args:
            path: Путь к файлу истории
            limit: Сколько последних задач хранить

        """
        self.path = Path(path)
        self.limit = limit
        self._lock = asyncio.Lock()

    async def load_history(self) -> TaskHistory:
        """Загрузить историю (пустая, если файла нет или он повреждён)."""
        return await asyncio.to_thread(self._load_sync)

    async def save_history(self, history: TaskHistory) -> None:
        """Сохранить историю, обновив last_updated."""
        history.last_updated = utc_now()
        await asyncio.to_thread(self._save_sync, history)

    async def add_task_to_history(self, task: Task) -> None:
        """Добавить или заменить задачу в истории.

        Args:
            task: Задача (обычно в терминальном статусе)

        """
        async with self._lock:
            history = await self.load_history()

            for index, existing in enumerate(history.tasks):
                if existing.id == task.id:
                    history.tasks[index] = task
                    break
            else:
                history.tasks.append(task)

            if len(history.tasks) > self.limit:
                history.tasks = history.tasks[-self.limit :]

            await self.save_history(history)

        logger.debug("Задача сохранена в историю", task_id=task.id, status=task.status.value)

    async def get_completed_tasks(self) -> list[Task]:
        """Задачи в терминальном статусе."""
        history = await self.load_history()
        return [task for task in history.tasks if task.status.is_terminal]

    def _load_sync(self) -> TaskHistory:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return TaskHistory()

        try:
            return TaskHistory.model_validate(orjson.loads(raw))
        except (orjson.JSONDecodeError, PydanticValidationError) as e:
            logger.warning("Файл истории повреждён, начинаем с пустой", path=str(self.path), error=str(e))
            return TaskHistory()

    def _save_sync(self, history: TaskHistory) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_bytes(
            orjson.dumps(history.model_dump(mode="json"), option=orjson.OPT_INDENT_2),
        )
