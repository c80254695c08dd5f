"""Тесты для доменных исключений."""

import pytest

from devdash.shared.errors import (
    AppException,
    BadRequestError,
    GitCommandError,
    InventoryUnavailableError,
    NotFoundError,
    ProjectNotFoundError,
    TaskNotFoundError,
    ValidationError,
)


class TestDomainErrors:
    """Тесты кодов и статусов доменных ошибок."""

    @pytest.mark.parametrize(
        ("error", "status_code", "code"),
        [
            (ProjectNotFoundError("p-1"), 404, "PROJECT_NOT_FOUND"),
            (TaskNotFoundError("t-1"), 404, "TASK_NOT_FOUND"),
            (BadRequestError(), 400, "BAD_REQUEST"),
            (ValidationError(), 422, "VALIDATION_ERROR"),
            (InventoryUnavailableError("/data/inventory.json", "missing"), 503, "INVENTORY_UNAVAILABLE"),
            (GitCommandError("status", "fatal: not a git repository"), 502, "GIT_COMMAND"),
        ],
    )
    def test_status_and_code(self, error: AppException, status_code: int, code: str) -> None:
        """HTTP статус и код ошибки."""
        assert error.status_code == status_code
        assert error.code == code

    def test_project_not_found(self) -> None:
        """ProjectNotFoundError несёт ID проекта."""
        error = ProjectNotFoundError("p-1")

        assert isinstance(error, NotFoundError)
        assert error.project_id == "p-1"
        assert error.message == "Project not found: p-1"
        assert error.details == {"project_id": "p-1"}

    def test_git_command_error_message(self) -> None:
        """Сообщение - stderr git, либо описание команды."""
        assert GitCommandError("status", "fatal: boom\n").message == "fatal: boom"
        assert GitCommandError("fetch", "").message == "git fetch завершился с ошибкой"
