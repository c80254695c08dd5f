"""Project Creator - новый проект из шаблона.

Шаблон (по умолчанию `<projects_root>/CCSTARTUP`) копируется в
`<projects_root>/<name>`, получает свежий git репозиторий и
`.project-info.json`, затем в нём запускается `claude -p /init`.
Если /init не отработал, создаётся минимальный CLAUDE.md.
Проект добавляется в inventory последним шагом.
"""

import asyncio
import os
import re
import shutil
from pathlib import Path

import orjson

from devdash.core.constants import (
    DEFAULT_WORKER_EXECUTABLE,
    PROJECT_INFO_FILE,
    PROJECT_INIT_TIMEOUT,
    PROJECT_TEMPLATE_DIR,
)
from devdash.core.enums import ProjectStatus, ProjectType, RelationshipType
from devdash.models.project import Project, ProjectMetadata, ProjectRelationship
from devdash.models.task import utc_now
from devdash.services.git_service import GitService
from devdash.services.project_service import ProjectService
from devdash.services.settings_service import SettingsService
from devdash.shared.errors import (
    BadRequestError,
    GitCommandError,
    ProjectAlreadyExistsError,
    ProjectCreationError,
)
from devdash.shared.logging import get_logger

logger = get_logger()

_NON_SLUG = re.compile(r"[^a-z0-9]+")

MINIMAL_CLAUDE_MD = """# CLAUDE.md

## Project Overview

**Name**: {name}
**Description**: {description}

This project was created from the {template} template. The full initialization
did not complete, so this is a minimal CLAUDE.md file.

## Getting Started

Run the `/init` command to complete project setup:
- Detect project type
- Generate a complete CLAUDE.md
- Configure MCP servers
- Set up GitHub repository

## Notes

- This is a placeholder CLAUDE.md
- Run `/init` to generate a project-specific version
- Check `{info_file}` for project metadata
"""


def slugify(name: str) -> str:
    """ID проекта из имени: lower-case, всё кроме [a-z0-9] -> '-'.

    Example:
        >>> slugify("My Cool Project!")
        'my-cool-project'

    """
    return _NON_SLUG.sub("-", name.lower()).strip("-")


def validate_project_name(name: str) -> str:
    """Проверить имя проекта и вернуть его slug.

    Имя становится именем директории, поэтому разделители пути
    и `.`/`..` запрещены.

    Raises:
        BadRequestError: Имя не годится для директории или ID

    """
    if name != name.strip() or name in (".", "..") or "/" in name or "\\" in name or "\0" in name:
        raise BadRequestError(f"Invalid project name: {name!r}", details={"name": name})

    project_id = slugify(name)
    if not project_id:
        raise BadRequestError(
            f"Project name must contain latin letters or digits: {name!r}",
            details={"name": name},
        )
    return project_id


class ProjectCreator:
    """Создание проекта из шаблона и регистрация в inventory."""

    def __init__(
        self,
        project_service: ProjectService,
        settings_service: SettingsService,
        git_service: GitService,
        template_dir: str = PROJECT_TEMPLATE_DIR,
        executable: str = DEFAULT_WORKER_EXECUTABLE,
        init_timeout: float = PROJECT_INIT_TIMEOUT,
    ) -> None:
        """Инициализировать Project Creator.

        Args:
            project_service: Inventory проектов
            settings_service: Источник корня проектов
            git_service: Выполнение git команд
            template_dir: Имя директории шаблона в корне проектов
            executable: CLI для `/init`
            init_timeout: Таймаут `/init` в секундах

        """
        self.project_service = project_service
        self.settings_service = settings_service
        self.git_service = git_service
        self.template_dir = template_dir
        self.executable = executable
        self.init_timeout = init_timeout
        self._lock = asyncio.Lock()

    async def create_project(self, name: str, description: str) -> Project:
        """Создать проект.

        Args:
            name: Имя проекта (и имя директории)
            description: Описание

        Returns:
            Запись проекта, добавленная в inventory

        Raises:
            BadRequestError: Некорректное имя
            ProjectAlreadyExistsError: Директория или ID уже заняты
            ProjectCreationError: Корень не настроен, нет шаблона или сбой копирования

        """
        project_id = validate_project_name(name)

        projects_root = await self.settings_service.get_projects_root()
        if not projects_root:
            raise ProjectCreationError(
                "Projects root directory is not configured. Please set it in Settings."
            )

        root = Path(projects_root)
        project_path = root / name
        template_path = root / self.template_dir

        async with self._lock:
            if await asyncio.to_thread(project_path.exists):
                raise ProjectAlreadyExistsError(project_id, str(project_path))
            if await self.project_service.get_project_by_id(project_id) is not None:
                raise ProjectAlreadyExistsError(project_id)
            if not await asyncio.to_thread(template_path.is_dir):
                raise ProjectCreationError(
                    f"Template not found at: {template_path}",
                    details={"template": str(template_path)},
                )

            logger.info("Создание проекта", project_id=project_id, path=str(project_path))

            try:
                await asyncio.to_thread(self._copy_template, template_path, project_path, name, description)
            except OSError as e:
                await asyncio.to_thread(shutil.rmtree, project_path, True)
                raise ProjectCreationError(str(e), details={"path": str(project_path)}) from e

            await self._init_repository(project_path)
            await self._run_init(project_path, name, description)
            await self._ensure_minimal_setup(project_path, name, description)

            project = self._build_project(project_id, name, description, project_path)
            await self.project_service.add_project(project)

        logger.success("Проект создан", project_id=project_id, path=str(project_path))
        return project

    def _copy_template(self, template_path: Path, project_path: Path, name: str, description: str) -> None:
        shutil.copytree(template_path, project_path, symlinks=True)
        shutil.rmtree(project_path / ".git", ignore_errors=True)

        info = {
            "name": name,
            "description": description,
            "createdAt": utc_now().isoformat(),
            "createdBy": "DevDash",
        }
        (project_path / PROJECT_INFO_FILE).write_bytes(orjson.dumps(info, option=orjson.OPT_INDENT_2))

    async def _init_repository(self, project_path: Path) -> bool:
        """git init + initial commit. Ошибки git не прерывают создание."""
        try:
            await self.git_service.run(str(project_path), "init")
            await self.git_service.run(str(project_path), "add", "-A")
            await self.git_service.run(
                str(project_path),
                "commit",
                "-m",
                f"Initial commit from {self.template_dir} template",
            )
        except GitCommandError as e:
            logger.warning("Инициализация git не завершена", path=str(project_path), error=e.message)
            return False
        return True

    async def _run_init(self, project_path: Path, name: str, description: str) -> bool:
        """`claude -p /init` в новом проекте. Сбой или таймаут только логируются."""
        env = {**os.environ, "PROJECT_NAME": name, "PROJECT_DESCRIPTION": description}
        try:
            process = await asyncio.create_subprocess_exec(
                self.executable,
                "-p",
                "/init",
                "--dangerously-skip-permissions",
                cwd=str(project_path),
                env=env,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.warning("Не удалось запустить /init", executable=self.executable, error=str(e))
            return False

        try:
            _, stderr = await asyncio.wait_for(process.communicate(), timeout=self.init_timeout)
        except TimeoutError:
            process.terminate()
            await process.wait()
            logger.warning("/init не уложился в таймаут", path=str(project_path), timeout=self.init_timeout)
            return False

        if process.returncode != 0:
            logger.warning(
                "/init завершился с ошибкой",
                path=str(project_path),
                code=process.returncode,
                error=stderr.decode("utf-8", errors="replace")[-2000:],
            )
            return False
        return True

    async def _ensure_minimal_setup(self, project_path: Path, name: str, description: str) -> None:
        """Гарантировать git репозиторий и CLAUDE.md."""
        if not await asyncio.to_thread((project_path / ".git").is_dir):
            await self._init_repository(project_path)

        claude_md = project_path / "CLAUDE.md"
        if await asyncio.to_thread(claude_md.exists):
            return

        content = MINIMAL_CLAUDE_MD.format(
            name=name,
            description=description,
            template=self.template_dir,
            info_file=PROJECT_INFO_FILE,
        )
        await asyncio.to_thread(claude_md.write_text, content, "utf-8")

        try:
            await self.git_service.run(str(project_path), "add", "CLAUDE.md")
            await self.git_service.run(str(project_path), "commit", "-m", "Add minimal CLAUDE.md")
        except GitCommandError as e:
            logger.debug("CLAUDE.md не закоммичен", path=str(project_path), error=e.message)

    def _build_project(self, project_id: str, name: str, description: str, project_path: Path) -> Project:
        now = utc_now()
        return Project(
            id=project_id,
            name=name,
            path=str(project_path),
            description=description,
            project_type=ProjectType.UTILITY,
            status=ProjectStatus.ACTIVE,
            technology={"primaryLanguage": "python", "buildSystem": "scripts"},
            git={"initialized": True, "defaultBranch": "master"},
            configuration={
                "files": {"claudeMd": True, "mcpJson": True, "gitignore": True, "readme": False},
                "directories": {"src": False, "docs": False, "tests": False, "background": False},
            },
            relationships=[
                ProjectRelationship(
                    type=RelationshipType.PART_OF,
                    target_project=slugify(self.template_dir),
                    description=f"Instance of {self.template_dir} template",
                )
            ],
            metadata=ProjectMetadata(has_claude_md=True, last_scanned=now, last_modified=now),
        )
