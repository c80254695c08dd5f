"""Unit тесты для services/settings_service.py."""

from pathlib import Path

import orjson
import pytest

from devdash.core.enums import ProjectsRootSource
from devdash.services.settings_service import SettingsService, infer_projects_root
from devdash.tests.unit.conftest import make_project


@pytest.fixture
def settings_path(tmp_path: Path) -> Path:
    """Путь к settings.json."""
    return tmp_path / "data" / "settings.json"


class TestInferProjectsRoot:
    """Тесты вывода корня проектов."""

    def test_no_projects(self) -> None:
        """Нет проектов - None."""
        assert infer_projects_root([]) is None

    def test_single_project(self) -> None:
        """Один проект - его родительская директория."""
        assert infer_projects_root([make_project("a", "/home/me/src/a")]) == "/home/me/src"

    def test_common_parent(self) -> None:
        """Общий префикс родительских директорий."""
        projects = [
            make_project("a", "/home/me/src/a"),
            make_project("b", "/home/me/src/b"),
            make_project("c", "/home/me/src/group/c"),
        ]

        assert infer_projects_root(projects) == "/home/me/src"

    def test_only_root_in_common(self) -> None:
        """Общий только корень файловой системы - None."""
        projects = [make_project("a", "/opt/a"), make_project("b", "/srv/b")]

        assert infer_projects_root(projects) is None


class TestSettingsService:
    """Тесты для SettingsService."""

    @pytest.mark.asyncio
    async def test_defaults_without_file(self, settings_path: Path) -> None:
        """Нет файла и env - источник none."""
        service = SettingsService(settings_path)

        assert (await service.load_settings()).projects_root is None
        assert await service.get_projects_root() is None
        assert await service.get_projects_root_source() == ProjectsRootSource.NONE

    @pytest.mark.asyncio
    async def test_set_projects_root(self, settings_path: Path) -> None:
        """Сохранённый корень читается обратно, источник settings."""
        service = SettingsService(settings_path)

        await service.set_projects_root("/home/me/src")

        assert orjson.loads(settings_path.read_bytes()) == {"projectsRoot": "/home/me/src"}
        assert await service.get_projects_root() == "/home/me/src"
        assert await service.get_projects_root_source() == ProjectsRootSource.SETTINGS

    @pytest.mark.asyncio
    async def test_env_overrides_settings(self, settings_path: Path) -> None:
        """PROJECTS_ROOT приоритетнее settings.json."""
        service = SettingsService(settings_path, env_projects_root="/env/root")
        await service.set_projects_root("/home/me/src")

        assert await service.get_projects_root() == "/env/root"
        assert await service.get_projects_root_source() == ProjectsRootSource.ENV

    @pytest.mark.asyncio
    async def test_corrupted_file(self, settings_path: Path) -> None:
        """Повреждённый файл - пустые настройки."""
        settings_path.parent.mkdir(parents=True)
        settings_path.write_text("not json")
        service = SettingsService(settings_path)

        assert (await service.load_settings()).projects_root is None

    @pytest.mark.asyncio
    async def test_info_infers_only_without_source(self, settings_path: Path) -> None:
        """inferred_projects_root заполняется только при источнике none."""
        projects = [make_project("a", "/home/me/src/a"), make_project("b", "/home/me/src/b")]
        service = SettingsService(settings_path)

        info = await service.get_projects_root_info(projects)
        assert info.projects_root_source == ProjectsRootSource.NONE
        assert info.inferred_projects_root == "/home/me/src"
        assert info.effective_projects_root is None

        await service.set_projects_root("/custom")
        info = await service.get_projects_root_info(projects)
        assert info.projects_root_source == ProjectsRootSource.SETTINGS
        assert info.effective_projects_root == "/custom"
        assert info.inferred_projects_root is None
        assert info.settings.projects_root == "/custom"
