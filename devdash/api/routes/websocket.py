"""WebSocket API Routes для DevDash.

Real-time поток событий задач для dashboard.

Протокол:
    Server -> Client (при подключении):
        {"type": "initial", "tasks": [...активные задачи...]}

    Server -> Client (далее):
        TaskEvent как есть, например
        {"type": "task:output", "task_id": "...", "output": "..."}

    Client -> Server:
        {"type": "ping"}  ->  {"type": "pong"}
"""

import asyncio
from typing import Any

import orjson
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from devdash.core.constants import WEBSOCKET_PATH
from devdash.models.events import TaskEvent
from devdash.services.event_bus import EventBus
from devdash.services.task_manager import TaskManager
from devdash.shared.logging import get_logger

logger = get_logger()

router = APIRouter(tags=["websocket"])


async def _send(websocket: WebSocket, payload: dict[str, Any]) -> None:
    await websocket.send_text(orjson.dumps(payload).decode("utf-8"))


async def _forward_events(websocket: WebSocket, queue: "asyncio.Queue[TaskEvent]") -> None:
    """Пересылать события из очереди подписчика клиенту."""
    while True:
        event = await queue.get()
        await _send(websocket, event.model_dump(mode="json"))


async def _handle_message(websocket: WebSocket, message: str) -> None:
    try:
        data = orjson.loads(message)
    except orjson.JSONDecodeError:
        logger.warning("Невалидный JSON от WebSocket клиента", message=message[:200])
        return

    if isinstance(data, dict) and data.get("type") == "ping":
        await _send(websocket, {"type": "pong"})


@router.websocket(WEBSOCKET_PATH)
async def websocket_endpoint(websocket: WebSocket) -> None:
    """WebSocket endpoint для событий задач.

    Args:
        websocket: WebSocket соединение

    """
    task_manager: TaskManager = websocket.app.state.task_manager
    event_bus: EventBus = websocket.app.state.event_bus

    await websocket.accept()
    logger.info("WebSocket подключен", client=str(websocket.client))

    # Подписка до снимка: события после снимка не теряются
    queue = event_bus.subscribe()
    forward_task: asyncio.Task[None] | None = None

    try:
        await _send(
            websocket,
            {
                "type": "initial",
                "tasks": [task.model_dump(mode="json") for task in task_manager.get_active_tasks()],
            },
        )

        forward_task = asyncio.create_task(_forward_events(websocket, queue))

        while True:
            message = await websocket.receive_text()
            await _handle_message(websocket, message)

    except WebSocketDisconnect:
        logger.info("WebSocket отключен", client=str(websocket.client))
    except Exception as e:
        logger.exception("Ошибка WebSocket соединения", error=str(e))
    finally:
        if forward_task is not None:
            forward_task.cancel()
            try:
                await forward_task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.debug("Пересылка событий прервана", error=str(e))
        event_bus.unsubscribe(queue)
