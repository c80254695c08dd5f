"""Event Fan-out для событий задач.

Single-producer / multi-consumer рассылка TaskEvent подписчикам.
Каждый подписчик получает собственную asyncio.Queue; публикация
не блокирует движок (put_nowait), переполненная очередь теряет событие.
Replay буфера нет - новый подписчик сам запрашивает снимок активных задач.
"""

import asyncio

from devdash.core.constants import SUBSCRIBER_QUEUE_SIZE
from devdash.models.events import TaskEvent, event_task_id
from devdash.shared.logging import get_logger

logger = get_logger()


class EventBus:
    """Менеджер подписок на события задач."""

    def __init__(self, queue_size: int = SUBSCRIBER_QUEUE_SIZE) -> None:
        """Инициализировать шину событий.

        Args:
            queue_size: Размер очереди каждого подписчика

        """
        self.queue_size = queue_size
        self._subscribers: set[asyncio.Queue[TaskEvent]] = set()

    def subscribe(self) -> "asyncio.Queue[TaskEvent]":
        """Подписка на события задач.

        Returns:
            Очередь для получения событий.

        """
        queue: asyncio.Queue[TaskEvent] = asyncio.Queue(maxsize=self.queue_size)
        self._subscribers.add(queue)
        logger.info("Подписчик добавлен", subscribers=len(self._subscribers))
        return queue

    def unsubscribe(self, queue: "asyncio.Queue[TaskEvent]") -> None:
        """Отписка от событий.

        Args:
            queue: Очередь, полученная из subscribe().

        """
        self._subscribers.discard(queue)
        logger.info("Подписчик удалён", subscribers=len(self._subscribers))

    def publish(self, event: TaskEvent) -> None:
        """Разослать событие всем подписчикам (fire-and-forget).

        Args:
            event: Событие задачи.

        """
        for queue in tuple(self._subscribers):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning(
                    "Очередь подписчика переполнена, событие пропущено",
                    event_type=event.type.value,
                    task_id=event_task_id(event),
                )

    @property
    def subscriber_count(self) -> int:
        """Количество активных подписчиков."""
        return len(self._subscribers)
