"""Базовое исключение приложения.

Код ошибки выводится из имени класса, сообщение по умолчанию - из
первой строки docstring. Уровень логирования зависит от HTTP статуса:
ошибки клиента (4xx) - WARNING, ошибки сервера и внешних команд - ERROR.
"""

import re
from typing import Any

from devdash.shared.errors.context import get_trace_id
from devdash.shared.errors.schemas import ErrorResponse

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def error_code_for(class_name: str) -> str:
    """UPPER_SNAKE код из имени класса без суффикса Error/Exception.

    Example:
        >>> error_code_for("ProjectNotFoundError")
        'PROJECT_NOT_FOUND'

    """
    for suffix in ("Exception", "Error"):
        if class_name.endswith(suffix) and class_name != suffix:
            class_name = class_name[: -len(suffix)]
            break
    return _CAMEL_BOUNDARY.sub("_", class_name).upper()


class AppException(Exception):
    """Базовый класс для всех ошибок DevDash, отдаваемых через API."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    default_message: str = "Внутренняя ошибка сервера"

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        """Инициализация исключения.

        Args:
            message: Сообщение об ошибке.
            details: Дополнительные детали (ID задачи, проекта, команда git).
            status_code: HTTP статус код.
            code: Код ошибки.

        """
        self.message = message or self.default_message
        self.details: dict[str, Any] = dict(details) if details else {}

        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code

        super().__init__(self.message)

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)

        if "code" not in cls.__dict__:
            cls.code = error_code_for(cls.__name__)

        if "default_message" not in cls.__dict__ and cls.__doc__:
            cls.default_message = cls.__doc__.strip().split("\n")[0]

    @property
    def log_level(self) -> str:
        """Уровень логирования для обработчика."""
        return "ERROR" if self.status_code >= 500 else "WARNING"

    def headers(self) -> dict[str, str]:
        """HTTP заголовки ответа с ошибкой."""
        return {"X-Error-Code": self.code, "X-Trace-Id": get_trace_id()}

    def to_response(self) -> ErrorResponse:
        """Сериализация в ErrorResponse с текущим trace_id."""
        return ErrorResponse(
            error=self.code,
            message=self.message,
            details=self.details,
            trace_id=get_trace_id(),
        )


def openapi_responses(*errors: type[AppException]) -> dict[int | str, dict[str, Any]]:
    """Описание ошибок для параметра `responses` у роутов.

    Несколько ошибок с одним статусом объединяются в одну запись.

    Args:
        *errors: Классы ошибок, которые может вернуть роут.

    Returns:
        Словарь status_code -> OpenAPI описание ответа.

    """
    responses: dict[int | str, dict[str, Any]] = {}
    for error in errors:
        entry = responses.setdefault(
            error.status_code,
            {
                "model": ErrorResponse,
                "description": error.default_message,
                "content": {"application/json": {"examples": {}}},
            },
        )
        entry["content"]["application/json"]["examples"][error.code] = {
            "summary": error.default_message,
            "value": {
                "error": error.code,
                "message": error.default_message,
                "details": {},
                "trace_id": "example-trace-id",
            },
        }
        if error.default_message not in entry["description"]:
            entry["description"] = f"{entry['description']} / {error.default_message}"
    return responses
