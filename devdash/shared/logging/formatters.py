"""Форматтеры логов для Loguru.

Предоставляет форматтеры для структурированного логирования:
- JSON формат для файла и prod окружения
- Human-readable формат для локальной разработки
"""

from typing import Any

import orjson

TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "trace_id=<yellow>{extra[trace_id]}</yellow> | "
    "<level>{message}</level>"
)


def build_log_entry(record: dict[str, Any]) -> dict[str, Any]:
    """Собрать словарь JSON записи из Loguru record.

    Args:
        record: Loguru record dictionary

    Returns:
        Словарь с полями timestamp, level, logger, message и extra полями
    """
    log_entry: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
        "message": record["message"],
    }

    # Все поля из logger.bind() или logger.info(..., key=value)
    for key, value in record["extra"].items():
        if key != "serialized":
            log_entry[key] = value

    if record["exception"] is not None:
        exception_info = record["exception"]
        log_entry["exception"] = {
            "type": exception_info.type.__name__ if exception_info.type else None,
            "value": str(exception_info.value) if exception_info.value else None,
        }

    return log_entry


def json_formatter(record: dict[str, Any]) -> str:
    """JSON форматтер для structured logging.

    Loguru ожидает от format-функции шаблон, поэтому готовый JSON
    кладётся в extra и подставляется через {extra[serialized]}.

    Args:
        record: Loguru record dictionary

    Returns:
        Шаблон строки для Loguru
    """
    record["extra"]["serialized"] = orjson.dumps(
        build_log_entry(record),
        default=str,
    ).decode("utf-8")
    return "{extra[serialized]}\n"
