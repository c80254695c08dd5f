"""Shared errors module.

Система обработки ошибок приложения.
"""

from devdash.shared.errors.base import AppException, error_code_for, openapi_responses
from devdash.shared.errors.context import (
    get_trace_id,
    new_trace_id,
    set_trace_id,
    trace_context,
    trace_id_var,
)
from devdash.shared.errors.domain_errors import (
    BadRequestError,
    GitCommandError,
    InventoryUnavailableError,
    NotFoundError,
    ProjectAlreadyExistsError,
    ProjectCreationError,
    ProjectNotFoundError,
    ServiceUnavailableError,
    TaskNotFoundError,
    ValidationError,
)
from devdash.shared.errors.handlers import setup_exception_handlers
from devdash.shared.errors.schemas import ErrorResponse

__all__ = [
    # Base
    "AppException",
    "error_code_for",
    "openapi_responses",
    # Context
    "trace_id_var",
    "get_trace_id",
    "set_trace_id",
    "new_trace_id",
    "trace_context",
    # Domain errors
    "NotFoundError",
    "BadRequestError",
    "ValidationError",
    "ServiceUnavailableError",
    "ProjectNotFoundError",
    "ProjectAlreadyExistsError",
    "ProjectCreationError",
    "TaskNotFoundError",
    "InventoryUnavailableError",
    "GitCommandError",
    # Handlers
    "setup_exception_handlers",
    # Schemas
    "ErrorResponse",
]
