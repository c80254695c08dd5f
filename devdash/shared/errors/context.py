"""Trace context.

trace_id живёт в ContextVar: его читают логгер (patcher), обработчики
ошибок и middleware. Область действия - один HTTP запрос или одно
WebSocket соединение.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from uuid import uuid4

trace_id_var: ContextVar[str] = ContextVar("trace_id", default="")


def new_trace_id() -> str:
    """Сгенерировать новый trace_id."""
    return uuid4().hex


def get_trace_id() -> str:
    """Текущий trace_id; вне запроса генерируется и запоминается новый.

    Returns:
        Строка trace_id.

    """
    trace_id = trace_id_var.get()
    if not trace_id:
        trace_id = new_trace_id()
        trace_id_var.set(trace_id)
    return trace_id


def set_trace_id(trace_id: str) -> Token[str]:
    """Установить trace_id в контекст.

    Args:
        trace_id: Идентификатор трассировки.

    Returns:
        Token для восстановления предыдущего значения.

    """
    return trace_id_var.set(trace_id)


@contextmanager
def trace_context(trace_id: str | None = None) -> Iterator[str]:
    """Выполнить блок с заданным (или новым) trace_id.

    Args:
        trace_id: Входящий trace_id (например, из заголовка X-Trace-Id).

    Yields:
        Действующий trace_id.

    """
    trace_id = trace_id or new_trace_id()
    token = trace_id_var.set(trace_id)
    try:
        yield trace_id
    finally:
        trace_id_var.reset(token)
