"""Фикстуры для API тестов."""

from collections.abc import AsyncIterator
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from devdash.app import create_app
from devdash.core.config import Settings
from devdash.models.workspace import GitCommit, GitStatus
from devdash.tests.unit.conftest import FakeSpawner, make_project, write_inventory


@pytest.fixture
def projects_dir(tmp_path: Path) -> Path:
    """Директория с проектами alpha и beta."""
    root = tmp_path / "projects"
    (root / "alpha").mkdir(parents=True)
    (root / "beta").mkdir(parents=True)
    return root


@pytest.fixture
def app(test_settings: Settings, spawner: FakeSpawner, projects_dir: Path) -> FastAPI:
    """Приложение с fake воркерами и временным inventory."""
    write_inventory(
        Path(test_settings.data.dir) / test_settings.data.inventory_file,
        [
            make_project("alpha", str(projects_dir / "alpha"), name="Alpha"),
            make_project("beta", str(projects_dir / "beta"), name="Beta"),
        ],
    )
    return create_app(test_settings, spawner=spawner)


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Test client для FastAPI приложения (с lifespan)."""
    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac


@pytest.fixture
def mock_git_service(app: FastAPI, client: AsyncClient) -> MagicMock:
    """Mock GitService в app.state (после старта lifespan)."""
    git_service = MagicMock()
    git_service.schedule_fetch = MagicMock()
    git_service.get_status_or_default = AsyncMock(
        return_value=GitStatus(local_branch="main", remote_branch="origin/main", ahead=1, behind=2)
    )
    git_service.get_commits_or_empty = AsyncMock(
        return_value=[GitCommit(hash="abc", message="Initial commit", date="2024-05-01T10:00:00Z", author="Alice")]
    )
    app.state.git_service = git_service
    return git_service
