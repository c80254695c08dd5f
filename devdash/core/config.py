"""DevDash - Configuration.

Настройки DevDash: сервер, файлы данных, внешний CLI воркер, движок задач
и логирование. Источники: переменные окружения DEVDASH__*, .env и
PROJECTS_ROOT для корня проектов.
"""

from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from devdash.core.constants import (
    DEFAULT_BUDGET,
    DEFAULT_DATA_DIR,
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_SERVER_HOST,
    DEFAULT_SERVER_PORT,
    DEFAULT_WORKER_EXECUTABLE,
    MAX_CONCURRENT_TASKS,
    MAX_TASK_RETRIES,
    PROJECT_INIT_TIMEOUT,
    PROJECT_TEMPLATE_DIR,
    WORKER_SHUTDOWN_TIMEOUT,
)


class ServerSettings(BaseModel):
    """Настройки сервера (Uvicorn)."""

    host: str = Field(default=DEFAULT_SERVER_HOST, description="Хост")
    port: int = Field(default=DEFAULT_SERVER_PORT, description="Порт")
    reload: bool = Field(default=False, description="Режим автоперезагрузки")

    @field_validator("port")
    @classmethod
    def validate_port(cls, value: int) -> int:
        """Валидация порта.

        Args:
            value: Номер порта для проверки.

        Returns:
            Проверенное значение порта.

        Raises:
            ValueError: Если порт вне допустимого диапазона.

        """
        if not 1 <= value <= 65535:
            msg = f"Порт ({value}) должен быть в диапазоне 1-65535"
            raise ValueError(msg)
        return value


class DataSettings(BaseModel):
    """Настройки файлового хранилища (inventory, history, settings)."""

    dir: str = Field(default=DEFAULT_DATA_DIR, description="Директория данных")
    inventory_file: str = Field(default="inventory.json", description="Файл inventory")
    history_file: str = Field(default="task-history.json", description="Файл истории задач")
    settings_file: str = Field(default="settings.json", description="Файл пользовательских настроек")
    history_limit: int = Field(
        default=DEFAULT_HISTORY_LIMIT,
        ge=1,
        description="Сколько последних задач хранить в истории",
    )


class WorkerSettings(BaseModel):
    """Настройки внешнего CLI воркера."""

    executable: str = Field(
        default=DEFAULT_WORKER_EXECUTABLE,
        description="Исполняемый файл coding-assistant CLI",
    )
    git_timeout: float = Field(default=10.0, gt=0, description="Таймаут git команд в секундах")
    shutdown_timeout: float = Field(
        default=WORKER_SHUTDOWN_TIMEOUT,
        gt=0,
        description="Ожидание завершения воркеров при остановке, секунды",
    )


class TaskSettings(BaseModel):
    """Настройки движка задач."""

    max_concurrent: int = Field(
        default=MAX_CONCURRENT_TASKS,
        ge=1,
        description="Максимум одновременно запущенных воркеров",
    )
    max_retries: int = Field(
        default=MAX_TASK_RETRIES,
        ge=0,
        description="Максимум повторов при превышении бюджета",
    )
    default_budget: float = Field(
        default=DEFAULT_BUDGET,
        gt=0,
        description="Бюджет по умолчанию для задач из API",
    )


class CreatorSettings(BaseModel):
    """Настройки создания проектов из шаблона."""

    template_dir: str = Field(
        default=PROJECT_TEMPLATE_DIR,
        description="Директория шаблона внутри корня проектов",
    )
    init_timeout: float = Field(
        default=PROJECT_INIT_TIMEOUT,
        gt=0,
        description="Таймаут `claude -p /init` в новом проекте, секунды",
    )


class LogSettings(BaseModel):
    """Настройки логирования."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Уровень логирования",
    )
    format: Literal["json", "text"] = Field(
        default="text",
        description="Формат логов",
    )
    file_path: str | None = Field(
        default="logs/devdash.log",
        description="Путь к файлу логов (None - без файла)",
    )
    rotation: str = Field(default="10 MB", description="Ротация логов")
    retention: str = Field(default="10 days", description="Время хранения логов")


class Settings(BaseSettings):
    """Главные настройки приложения.

    Все настройки загружаются из переменных окружения с префиксом DEVDASH__.
    Пример: DEVDASH__SERVER__PORT=3000
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        env_prefix="DEVDASH__",
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = Field(default="DevDash", description="Название приложения")
    environment: Literal["local", "dev", "prod"] = Field(
        default="local",
        description="Окружение",
    )
    debug: bool = Field(default=False, description="Режим отладки")

    # PROJECTS_ROOT приоритетнее значения из data/settings.json
    projects_root: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PROJECTS_ROOT", "DEVDASH__PROJECTS_ROOT"),
        description="Корневая директория проектов (override)",
    )

    server: ServerSettings = Field(default_factory=ServerSettings)
    data: DataSettings = Field(default_factory=DataSettings)
    worker: WorkerSettings = Field(default_factory=WorkerSettings)
    tasks: TaskSettings = Field(default_factory=TaskSettings)
    creator: CreatorSettings = Field(default_factory=CreatorSettings)
    log: LogSettings = Field(default_factory=LogSettings)


# Глобальный объект настроек (singleton)
settings = Settings()
