"""Unit тесты для services/event_bus.py."""

import pytest

from devdash.models.events import TaskCreatedEvent, TaskOutputEvent
from devdash.models.task import Task
from devdash.services.event_bus import EventBus


class TestEventBus:
    """Тесты для EventBus."""

    def test_publish_to_all_subscribers(self) -> None:
        """Каждый подписчик получает событие."""
        bus = EventBus()
        first = bus.subscribe()
        second = bus.subscribe()
        event = TaskOutputEvent(task_id="t-1", output="hello")

        bus.publish(event)

        assert first.get_nowait() is event
        assert second.get_nowait() is event
        assert bus.subscriber_count == 2

    def test_unsubscribe_stops_delivery(self) -> None:
        """После отписки события не приходят."""
        bus = EventBus()
        queue = bus.subscribe()

        bus.unsubscribe(queue)
        bus.publish(TaskOutputEvent(task_id="t-1", output="hello"))

        assert queue.empty()
        assert bus.subscriber_count == 0

    def test_unsubscribe_unknown_queue(self) -> None:
        """Отписка неизвестной очереди - no-op."""
        bus = EventBus()
        other = EventBus().subscribe()

        bus.unsubscribe(other)

        assert bus.subscriber_count == 0

    def test_full_queue_drops_event(self) -> None:
        """Переполненная очередь теряет событие, остальные получают."""
        bus = EventBus(queue_size=1)
        slow = bus.subscribe()
        bus.publish(TaskOutputEvent(task_id="t-1", output="first"))
        fast = bus.subscribe()

        bus.publish(TaskOutputEvent(task_id="t-1", output="second"))

        assert slow.qsize() == 1
        assert slow.get_nowait().output == "first"
        assert fast.get_nowait().output == "second"

    def test_publish_without_subscribers(self) -> None:
        """Публикация без подписчиков ничего не делает."""
        bus = EventBus()

        bus.publish(TaskCreatedEvent(task=Task(project_id="p", prompt="x")))

        assert bus.subscriber_count == 0

    @pytest.mark.asyncio
    async def test_subscriber_awaits_event(self) -> None:
        """Подписчик может ждать событие через await queue.get()."""
        bus = EventBus()
        queue = bus.subscribe()

        bus.publish(TaskOutputEvent(task_id="t-1", output="chunk"))
        event = await queue.get()

        assert event.output == "chunk"
