"""Domain errors.

Доменные исключения приложения.
"""

from devdash.shared.errors.base import AppException


class NotFoundError(AppException):
    """Ресурс не найден."""

    status_code = 404
    code = "NOT_FOUND"


class BadRequestError(AppException):
    """Некорректный запрос."""

    status_code = 400
    code = "BAD_REQUEST"


class ValidationError(AppException):
    """Ошибка валидации данных."""

    status_code = 422
    code = "VALIDATION_ERROR"


class ServiceUnavailableError(AppException):
    """Сервис недоступен."""

    status_code = 503
    code = "SERVICE_UNAVAILABLE"


class ProjectNotFoundError(NotFoundError):
    """Проект не найден."""

    code = "PROJECT_NOT_FOUND"

    def __init__(self, project_id: str) -> None:
        """Инициализация исключения.

        Args:
            project_id: Идентификатор проекта.

        """
        super().__init__(
            message=f"Project not found: {project_id}",
            details={"project_id": project_id},
        )
        self.project_id = project_id


class TaskNotFoundError(NotFoundError):
    """Задача не найдена."""

    code = "TASK_NOT_FOUND"

    def __init__(self, task_id: str) -> None:
        """Инициализация исключения.

        Args:
            task_id: Идентификатор задачи.

        """
        super().__init__(
            message=f"Задача с ID '{task_id}' не найдена или уже завершена",
            details={"task_id": task_id},
        )


class InventoryUnavailableError(ServiceUnavailableError):
    """Inventory проектов недоступен."""

    code = "INVENTORY_UNAVAILABLE"

    def __init__(self, path: str, reason: str) -> None:
        """Инициализация исключения.

        Args:
            path: Путь к файлу inventory.
            reason: Причина недоступности.

        """
        super().__init__(
            message=f"Не удалось прочитать inventory '{path}': {reason}",
            details={"path": path, "reason": reason},
        )


class GitCommandError(AppException):
    """Ошибка выполнения git команды."""

    status_code = 502

    def __init__(self, command: str, stderr: str) -> None:
        """Инициализация исключения.

        Args:
            command: Выполняемая git команда.
            stderr: Вывод ошибки git.

        """
        super().__init__(
            message=stderr.strip() or f"git {command} завершился с ошибкой",
            details={"command": command},
        )


class ProjectAlreadyExistsError(BadRequestError):
    """Проект уже существует."""

    code = "PROJECT_ALREADY_EXISTS"

    def __init__(self, project_id: str, path: str | None = None) -> None:
        """Инициализация исключения.

        Args:
            project_id: ID проекта.
            path: Директория проекта, если конфликт по ней.

        """
        message = (
            f"Project directory already exists: {path}" if path else f"Project already exists: {project_id}"
        )
        details = {"project_id": project_id}
        if path:
            details["path"] = path
        super().__init__(message=message, details=details)


class ProjectCreationError(BadRequestError):
    """Не удалось создать проект."""

    code = "PROJECT_CREATION_FAILED"
