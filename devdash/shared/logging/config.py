"""Настройка loguru для DevDash.

stdout - текст или JSON, файл - всегда JSON с ротацией. Логи uvicorn
перенаправляются в loguru, чтобы запросы и события задач шли одним потоком
с общим trace_id.
"""

import logging
import sys
from pathlib import Path
from typing import Any

from loguru import logger

from devdash.core.config import Settings, settings
from devdash.shared.errors.context import trace_id_var
from devdash.shared.logging.formatters import TEXT_FORMAT, json_formatter

# Логгеры stdlib, которые уходят в loguru
STDLIB_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi", "asyncio")


class InterceptHandler(logging.Handler):
    """Мост stdlib logging -> loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        """Переслать запись в loguru с исходным уровнем и местом вызова.

        Args:
            record: Запись stdlib logging.

        """
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Пропустить кадры самого logging, чтобы loguru показал вызывающий код
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def trace_id_patcher(record: Any) -> None:
    """Проставить trace_id текущего запроса, если он не передан явно."""
    record["extra"].setdefault("trace_id", trace_id_var.get() or "no-trace")


def setup_logger(config: Settings | None = None) -> None:
    """Переконфигурировать loguru по настройкам.

    Вызывается из create_app; повторный вызов заменяет все sinks.

    Args:
        config: Настройки (по умолчанию глобальный settings).

    """
    config = config or settings
    is_json = config.log.format == "json"

    logger.remove()
    logger.configure(patcher=trace_id_patcher)

    logger.add(
        sys.stdout,
        format=json_formatter if is_json else TEXT_FORMAT,
        level=config.log.level,
        colorize=not is_json,
        backtrace=True,
        diagnose=config.debug,
    )

    if config.log.file_path:
        log_path = Path(config.log.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            str(log_path),
            format=json_formatter,
            level=config.log.level,
            rotation=config.log.rotation,
            retention=config.log.retention,
            compression="zip",
            backtrace=True,
            diagnose=config.debug,
        )

    configure_third_party_loggers(access_log=config.debug)

    logger.debug(
        "Логирование настроено",
        level=config.log.level,
        format=config.log.format,
        file=config.log.file_path,
    )


def configure_third_party_loggers(access_log: bool = False) -> None:
    """Перенаправить логгеры uvicorn/fastapi в loguru.

    Args:
        access_log: Писать access log uvicorn (по умолчанию только WARNING+,
            dashboard опрашивает API каждые несколько секунд).

    """
    for name in STDLIB_LOGGERS:
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.handlers = [InterceptHandler()]
        stdlib_logger.propagate = False

    logging.getLogger("uvicorn.access").setLevel(logging.INFO if access_log else logging.WARNING)


def get_logger(name: str | None = None) -> Any:
    """Logger модуля.

    Args:
        name: Имя, добавляемое в extra (обычно __name__)

    Returns:
        loguru logger, при необходимости с привязанным именем

    """
    return logger.bind(name=name) if name else logger
