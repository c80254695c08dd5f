"""Project Service - inventory проектов.

Inventory читается с диска при каждом обращении: файл может
редактироваться вручную, пока dashboard запущен.
"""

import asyncio
from pathlib import Path

import orjson
from pydantic import ValidationError as PydanticValidationError

from devdash.models.project import Project, ProjectInventory
from devdash.models.task import utc_now
from devdash.shared.errors import InventoryUnavailableError, ProjectAlreadyExistsError
from devdash.shared.logging import get_logger

logger = get_logger()


class ProjectService:
    """Доступ к data/inventory.json."""

    def __init__(self, inventory_path: Path | str) -> None:
        """Инициализировать Project Service.

        Args:
            inventory_path: Путь к файлу inventory

        """
        self.inventory_path = Path(inventory_path)
        self._lock = asyncio.Lock()

    async def load_inventory(self) -> ProjectInventory:
        """Прочитать inventory.

        Raises:
            InventoryUnavailableError: Файл отсутствует или невалиден

        """
        return await asyncio.to_thread(self._load_sync)

    async def save_inventory(self, inventory: ProjectInventory) -> None:
        """Записать inventory (camelCase ключи)."""
        inventory.last_updated = utc_now()
        await asyncio.to_thread(self._save_sync, inventory)

    async def get_all_projects(self) -> list[Project]:
        """Все проекты."""
        inventory = await self.load_inventory()
        return inventory.projects

    async def get_project_by_id(self, project_id: str) -> Project | None:
        """Найти проект по ID.

        Args:
            project_id: ID проекта

        Returns:
            Проект или None

        """
        inventory = await self.load_inventory()
        return next((p for p in inventory.projects if p.id == project_id), None)

    async def add_project(self, project: Project) -> None:
        """Добавить проект в inventory.

        Raises:
            ProjectAlreadyExistsError: Проект с таким ID уже есть

        """
        async with self._lock:
            inventory = await self.load_inventory()
            if any(existing.id == project.id for existing in inventory.projects):
                raise ProjectAlreadyExistsError(project.id)
            inventory.projects.append(project)
            await self.save_inventory(inventory)

        logger.info("Проект добавлен", project_id=project.id, path=project.path)

    def _load_sync(self) -> ProjectInventory:
        try:
            raw = self.inventory_path.read_bytes()
            return ProjectInventory.model_validate(orjson.loads(raw))
        except FileNotFoundError as e:
            raise InventoryUnavailableError(str(self.inventory_path), "file not found") from e
        except (orjson.JSONDecodeError, PydanticValidationError) as e:
            raise InventoryUnavailableError(str(self.inventory_path), str(e)) from e

    def _save_sync(self, inventory: ProjectInventory) -> None:
        self.inventory_path.parent.mkdir(parents=True, exist_ok=True)
        payload = inventory.model_dump(mode="json", by_alias=True, exclude_none=True)
        self.inventory_path.write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2))
