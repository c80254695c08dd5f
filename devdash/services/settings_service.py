"""Settings Service - пользовательские настройки dashboard.

Корень проектов определяется по приоритету:
переменная окружения PROJECTS_ROOT, затем data/settings.json.
"""

import asyncio
import os
from collections.abc import Iterable
from pathlib import Path

import orjson
from pydantic import ValidationError as PydanticValidationError

from devdash.core.enums import ProjectsRootSource
from devdash.models.project import Project
from devdash.models.workspace import AppSettings, ProjectsRootInfo
from devdash.shared.logging import get_logger

logger = get_logger()


def infer_projects_root(projects: Iterable[Project]) -> str | None:
    """Общая родительская директория всех проектов.

    Args:
        projects: Проекты из inventory

    Returns:
        Общий префикс родительских директорий или None

    """
    dirs = [os.path.dirname(project.path) for project in projects]
    if not dirs:
        return None
    if len(dirs) == 1:
        return dirs[0]

    split_dirs = [d.split(os.sep) for d in dirs]
    common: list[str] = []
    for segments in zip(*split_dirs):
        if any(segment != segments[0] for segment in segments):
            break
        common.append(segments[0])

    return os.sep.join(common) or None


class SettingsService:
    """Доступ к data/settings.json."""

    def __init__(self, path: Path | str, env_projects_root: str | None = None) -> None:
        """Инициализировать Settings Service.

        Args:
            path: Путь к файлу настроек
            env_projects_root: Значение PROJECTS_ROOT (override)

        """
        self.path = Path(path)
        self.env_projects_root = env_projects_root

    async def load_settings(self) -> AppSettings:
        """Загрузить настройки (пустые, если файла нет или он повреждён)."""
        return await asyncio.to_thread(self._load_sync)

    async def save_settings(self, app_settings: AppSettings) -> None:
        """Сохранить настройки."""
        await asyncio.to_thread(self._save_sync, app_settings)

    async def get_projects_root(self) -> str | None:
        """Эффективный корень проектов."""
        if self.env_projects_root:
            return self.env_projects_root
        app_settings = await self.load_settings()
        return app_settings.projects_root

    async def get_projects_root_source(self) -> ProjectsRootSource:
        """Источник эффективного корня проектов."""
        if self.env_projects_root:
            return ProjectsRootSource.ENV
        app_settings = await self.load_settings()
        if app_settings.projects_root:
            return ProjectsRootSource.SETTINGS
        return ProjectsRootSource.NONE

    async def set_projects_root(self, projects_root: str) -> AppSettings:
        """Сохранить корень проектов в settings.json.

        Args:
            projects_root: Путь к существующей директории

        Returns:
            Обновлённые настройки

        """
        app_settings = await self.load_settings()
        app_settings.projects_root = projects_root
        await self.save_settings(app_settings)

        logger.info("Корень проектов обновлён", projects_root=projects_root)
        return app_settings

    async def get_projects_root_info(self, projects: Iterable[Project] = ()) -> ProjectsRootInfo:
        """Снимок настроек для API.

        Args:
            projects: Проекты для вывода корня, если он не задан

        """
        app_settings = await self.load_settings()
        source = await self.get_projects_root_source()

        return ProjectsRootInfo(
            settings=app_settings,
            effective_projects_root=await self.get_projects_root(),
            projects_root_source=source,
            inferred_projects_root=(
                infer_projects_root(projects) if source is ProjectsRootSource.NONE else None
            ),
        )

    def _load_sync(self) -> AppSettings:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return AppSettings()

        try:
            data = orjson.loads(raw)
            return AppSettings(projects_root=data.get("projectsRoot"))
        except (orjson.JSONDecodeError, AttributeError, PydanticValidationError) as e:
            logger.warning("Файл настроек повреждён, используются значения по умолчанию", error=str(e))
            return AppSettings()

    def _save_sync(self, app_settings: AppSettings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"projectsRoot": app_settings.projects_root} if app_settings.projects_root else {}
        self.path.write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2))
