"""Unit тесты для services/project_service.py."""

from pathlib import Path

import orjson
import pytest

from devdash.core.enums import ProjectStatus, ProjectType
from devdash.services.project_service import ProjectService
from devdash.shared.errors import InventoryUnavailableError, ProjectAlreadyExistsError
from devdash.tests.unit.conftest import make_project, write_inventory


@pytest.fixture
def inventory_path(tmp_path: Path) -> Path:
    """inventory.json с двумя проектами."""
    path = tmp_path / "data" / "inventory.json"
    write_inventory(path, [make_project("alpha", "/src/alpha"), make_project("beta", "/src/beta")])
    return path


class TestProjectService:
    """Тесты для ProjectService."""

    @pytest.mark.asyncio
    async def test_get_all_projects(self, inventory_path: Path) -> None:
        """Все проекты из inventory."""
        service = ProjectService(inventory_path)

        projects = await service.get_all_projects()

        assert [p.id for p in projects] == ["alpha", "beta"]

    @pytest.mark.asyncio
    async def test_get_project_by_id(self, inventory_path: Path) -> None:
        """Поиск по ID."""
        service = ProjectService(inventory_path)

        project = await service.get_project_by_id("beta")

        assert project is not None
        assert project.path == "/src/beta"
        assert await service.get_project_by_id("gamma") is None

    @pytest.mark.asyncio
    async def test_reads_camel_case(self, tmp_path: Path) -> None:
        """Inventory с camelCase ключами читается в snake_case модели."""
        path = tmp_path / "inventory.json"
        path.write_bytes(
            orjson.dumps(
                {
                    "version": "1.0",
                    "lastUpdated": "2024-05-01T10:00:00Z",
                    "projects": [
                        {
                            "id": "fw",
                            "name": "Firmware",
                            "path": "/src/fw",
                            "projectType": "embedded",
                            "status": "stable",
                            "metadata": {"hasClaudeMd": True, "lastScanned": "2024-05-01T10:00:00Z"},
                        }
                    ],
                }
            )
        )
        service = ProjectService(path)

        project = await service.get_project_by_id("fw")

        assert project.project_type == ProjectType.EMBEDDED
        assert project.status == ProjectStatus.STABLE
        assert project.metadata.has_claude_md is True

    @pytest.mark.asyncio
    async def test_missing_inventory(self, tmp_path: Path) -> None:
        """Нет файла - InventoryUnavailableError."""
        service = ProjectService(tmp_path / "missing.json")

        with pytest.raises(InventoryUnavailableError) as exc_info:
            await service.get_all_projects()

        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_invalid_inventory(self, tmp_path: Path) -> None:
        """Невалидный JSON - InventoryUnavailableError."""
        path = tmp_path / "inventory.json"
        path.write_text("[1, 2")
        service = ProjectService(path)

        with pytest.raises(InventoryUnavailableError):
            await service.get_project_by_id("alpha")

    @pytest.mark.asyncio
    async def test_add_project(self, inventory_path: Path) -> None:
        """Добавленный проект сохраняется в camelCase."""
        service = ProjectService(inventory_path)

        await service.add_project(make_project("gamma", "/src/gamma", project_type=ProjectType.PYTHON))

        assert [p.id for p in await service.get_all_projects()] == ["alpha", "beta", "gamma"]
        data = orjson.loads(inventory_path.read_bytes())
        assert data["projects"][2]["projectType"] == "python"
        assert "lastUpdated" in data

    @pytest.mark.asyncio
    async def test_add_duplicate_project(self, inventory_path: Path) -> None:
        """Проект с существующим ID не добавляется."""
        service = ProjectService(inventory_path)

        with pytest.raises(ProjectAlreadyExistsError):
            await service.add_project(make_project("alpha", "/elsewhere/alpha"))

        projects = await service.get_all_projects()
        assert [p.path for p in projects if p.id == "alpha"] == ["/src/alpha"]
