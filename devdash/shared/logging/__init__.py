"""Модуль структурированного логирования.

Основное использование:
    >>> from devdash.shared.logging import setup_logger, get_logger
    >>> setup_logger()  # Вызвать один раз при старте
    >>> logger = get_logger()
    >>> logger.info("Задача создана", task_id="...")
"""

from devdash.shared.logging.config import (
    InterceptHandler,
    configure_third_party_loggers,
    get_logger,
    setup_logger,
    trace_id_patcher,
)
from devdash.shared.logging.formatters import build_log_entry, json_formatter

__all__ = [
    "InterceptHandler",
    "build_log_entry",
    "configure_third_party_loggers",
    "get_logger",
    "json_formatter",
    "setup_logger",
    "trace_id_patcher",
]
