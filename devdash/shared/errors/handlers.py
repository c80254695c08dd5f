"""FastAPI обработчики исключений.

Все три обработчика сводят ошибку к AppException и отдают ErrorResponse
с заголовками X-Error-Code и X-Trace-Id.
"""

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from devdash.shared.errors.base import AppException
from devdash.shared.errors.domain_errors import ValidationError


def render_error(exc: AppException) -> JSONResponse:
    """JSON ответ для AppException."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(),
        headers=exc.headers(),
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Обработчик ошибок приложения (ProjectNotFound, GitCommand, ...)."""
    logger.log(
        exc.log_level,
        f"{request.method} {request.url.path}: {exc.code}",
        error_code=exc.code,
        message=exc.message,
        details=exc.details,
    )
    return render_error(exc)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Ошибка валидации тела или параметров запроса -> 422."""
    errors = jsonable_encoder(exc.errors())
    logger.warning("Невалидный запрос", path=request.url.path, errors=errors)

    return render_error(ValidationError(details={"errors": errors}))


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Непредвиденная ошибка -> 500 без деталей реализации в ответе."""
    logger.opt(exception=exc).error(
        f"Необработанное исключение: {type(exc).__name__}",
        path=request.url.path,
    )
    return render_error(AppException(code="INTERNAL_SERVER_ERROR"))


def setup_exception_handlers(app: FastAPI) -> None:
    """Зарегистрировать обработчики исключений в FastAPI.

    Args:
        app: Экземпляр FastAPI приложения.

    """
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)
