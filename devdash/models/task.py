"""Модели задач.

Task - единица работы: один запуск внешнего CLI воркера
в директории проекта с заданным промптом.
"""

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import BaseModel, Field

from devdash.core.enums import TaskStatus


def utc_now() -> datetime:
    """Текущее время в UTC."""
    return datetime.now(UTC)


class Task(BaseModel):
    """Задача для внешнего воркера.

    Мутируется только TaskManager. Вывод накапливается
    append-only пока задача выполняется.
    """

    id: str = Field(default_factory=lambda: str(uuid4()), description="Уникальный ID задачи")
    project_id: str = Field(description="ID проекта из inventory")
    prompt: str = Field(description="Промпт для воркера")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Статус задачи")
    max_budget: float | None = Field(default=None, gt=0, description="Бюджет шагов воркера")
    retry_count: int = Field(default=0, ge=0, description="Количество выполненных повторов")
    created_at: datetime = Field(default_factory=utc_now, description="Время создания")
    started_at: datetime | None = Field(default=None, description="Время запуска")
    completed_at: datetime | None = Field(default=None, description="Время завершения")
    cost_usd: float | None = Field(default=None, description="Стоимость выполнения")
    duration_ms: int | None = Field(default=None, description="Длительность в мс")
    output: str = Field(default="", description="Накопленный stdout воркера")
    error: str | None = Field(default=None, description="Накопленный stderr или сообщение об ошибке")

    def mark_finished(self, status: TaskStatus) -> None:
        """Перевести задачу в терминальный статус и посчитать длительность.

        Args:
            status: Терминальный статус (completed, failed, cancelled)

        """
        self.status = status
        self.completed_at = utc_now()
        if self.started_at is not None:
            delta = self.completed_at - self.started_at
            self.duration_ms = int(delta.total_seconds() * 1000)


class TaskHistory(BaseModel):
    """Содержимое файла истории задач."""

    tasks: list[Task] = Field(default_factory=list)
    last_updated: datetime = Field(default_factory=utc_now)
