"""События жизненного цикла задач.

Закрытый tagged union по полю `type`. События неизменяемы: задачи
внутри - снимки на момент публикации.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from devdash.core.enums import TaskEventType
from devdash.models.task import Task


class _TaskEventBase(BaseModel):
    model_config = ConfigDict(frozen=True)


class TaskCreatedEvent(_TaskEventBase):
    """Задача создана и поставлена в очередь."""

    type: Literal[TaskEventType.CREATED] = TaskEventType.CREATED
    task: Task


class TaskStartedEvent(_TaskEventBase):
    """Запущен процесс воркера для задачи."""

    type: Literal[TaskEventType.STARTED] = TaskEventType.STARTED
    task: Task


class TaskOutputEvent(_TaskEventBase):
    """Новый фрагмент stdout воркера (только дельта)."""

    type: Literal[TaskEventType.OUTPUT] = TaskEventType.OUTPUT
    task_id: str
    output: str


class TaskCompletedEvent(_TaskEventBase):
    """Воркер завершился с кодом 0."""

    type: Literal[TaskEventType.COMPLETED] = TaskEventType.COMPLETED
    task: Task


class TaskFailedEvent(_TaskEventBase):
    """Задача завершилась ошибкой."""

    type: Literal[TaskEventType.FAILED] = TaskEventType.FAILED
    task: Task


class TaskCancelledEvent(_TaskEventBase):
    """Задача отменена пользователем."""

    type: Literal[TaskEventType.CANCELLED] = TaskEventType.CANCELLED
    task: Task


class TaskRetryingEvent(_TaskEventBase):
    """Воркер превысил бюджет, задача перезапускается с удвоенным бюджетом."""

    type: Literal[TaskEventType.RETRYING] = TaskEventType.RETRYING
    task: Task


TaskEvent = Annotated[
    TaskCreatedEvent
    | TaskStartedEvent
    | TaskOutputEvent
    | TaskCompletedEvent
    | TaskFailedEvent
    | TaskCancelledEvent
    | TaskRetryingEvent,
    Field(discriminator="type"),
]

task_event_adapter: TypeAdapter[TaskEvent] = TypeAdapter(TaskEvent)


def event_task_id(event: TaskEvent) -> str:
    """ID задачи, к которой относится событие."""
    if isinstance(event, TaskOutputEvent):
        return event.task_id
    return event.task.id
