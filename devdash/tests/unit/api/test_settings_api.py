"""Unit тесты для api/routes/settings.py."""

from pathlib import Path

import pytest
from httpx import AsyncClient


class TestSettingsApi:
    """Тесты для /api/settings."""

    @pytest.mark.asyncio
    async def test_get_settings_infers_root(self, client: AsyncClient, projects_dir: Path) -> None:
        """Без настроек источник none и корень выводится из inventory."""
        response = await client.get("/api/settings")

        assert response.status_code == 200
        data = response.json()
        assert data["settings"] == {"projects_root": None}
        assert data["effective_projects_root"] is None
        assert data["projects_root_source"] == "none"
        assert data["inferred_projects_root"] == str(projects_dir)

    @pytest.mark.asyncio
    async def test_update_settings(self, client: AsyncClient, projects_dir: Path) -> None:
        """Существующая директория сохраняется."""
        response = await client.put("/api/settings", json={"projects_root": str(projects_dir)})

        assert response.status_code == 200
        data = response.json()
        assert data["effective_projects_root"] == str(projects_dir)
        assert data["projects_root_source"] == "settings"

        data = (await client.get("/api/settings")).json()
        assert data["settings"]["projects_root"] == str(projects_dir)
        assert data["inferred_projects_root"] is None

    @pytest.mark.asyncio
    async def test_update_settings_missing_dir(self, client: AsyncClient, tmp_path: Path) -> None:
        """Несуществующая директория - 400."""
        missing = tmp_path / "missing"

        response = await client.put("/api/settings", json={"projects_root": str(missing)})

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "BAD_REQUEST"
        assert data["message"] == f"Directory does not exist: {missing}"

    @pytest.mark.asyncio
    async def test_update_settings_empty(self, client: AsyncClient) -> None:
        """Пустой путь - 422."""
        response = await client.put("/api/settings", json={"projects_root": ""})

        assert response.status_code == 422
