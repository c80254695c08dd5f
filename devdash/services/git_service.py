"""Git Service - состояние рабочей копии проекта.

Тонкая обёртка над git CLI: ветка, upstream, ahead/behind,
незакоммиченные изменения и последние коммиты.
"""

import asyncio

from devdash.core.constants import GIT_LOG_FORMAT, RECENT_COMMITS_LIMIT
from devdash.models.workspace import GitCommit, GitStatus
from devdash.shared.errors import GitCommandError
from devdash.shared.logging import get_logger

logger = get_logger()

DEFAULT_GIT_TIMEOUT = 10.0


async def run_git_command(project_path: str, *args: str, timeout: float = DEFAULT_GIT_TIMEOUT) -> str:
    """Выполнить git команду в директории проекта.

    Args:
        project_path: Рабочая директория
        *args: Аргументы git
        timeout: Таймаут в секундах

    Returns:
        stdout без пробелов по краям

    Raises:
        GitCommandError: Ненулевой код возврата, таймаут или git не найден

    """
    command = " ".join(args)
    try:
        process = await asyncio.create_subprocess_exec(
            "git",
            *args,
            cwd=project_path,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise GitCommandError(command, str(e)) from e

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except TimeoutError as e:
        process.kill()
        await process.wait()
        raise GitCommandError(command, f"git {command} timed out after {timeout}s") from e

    if process.returncode != 0:
        raise GitCommandError(command, stderr.decode("utf-8", errors="replace"))

    return stdout.decode("utf-8", errors="replace").strip()


class GitService:
    """Чтение git состояния проектов."""

    def __init__(self, timeout: float = DEFAULT_GIT_TIMEOUT) -> None:
        """Инициализировать Git Service.

        Args:
            timeout: Таймаут одной git команды в секундах

        """
        self.timeout = timeout
        self._background: set[asyncio.Task[None]] = set()

    async def run(self, project_path: str, *args: str) -> str:
        """Выполнить git команду с таймаутом сервиса."""
        return await run_git_command(project_path, *args, timeout=self.timeout)

    async def get_git_status(self, project_path: str) -> GitStatus:
        """Статус репозитория.

        Args:
            project_path: Путь к проекту

        Returns:
            GitStatus

        Raises:
            GitCommandError: Директория не является git репозиторием

        """
        local_branch = await self.run(project_path, "rev-parse", "--abbrev-ref", "HEAD")

        remote_branch: str | None = None
        try:
            remote_branch = await self.run(
                project_path, "rev-parse", "--abbrev-ref", f"{local_branch}@{{upstream}}"
            )
        except GitCommandError:
            # upstream не настроен
            pass

        status_output = await self.run(project_path, "status", "--porcelain")
        uncommitted_changes = len([line for line in status_output.splitlines() if line.strip()])

        ahead = behind = 0
        if remote_branch:
            try:
                counts = await self.run(
                    project_path, "rev-list", "--left-right", "--count", f"{local_branch}...{remote_branch}"
                )
                ahead, behind = _parse_ahead_behind(counts)
            except GitCommandError as e:
                logger.debug("Не удалось получить ahead/behind", path=project_path, error=e.message)

        return GitStatus(
            local_branch=local_branch,
            remote_branch=remote_branch,
            is_clean=uncommitted_changes == 0,
            ahead=ahead,
            behind=behind,
            uncommitted_changes=uncommitted_changes,
        )

    async def get_recent_commits(self, project_path: str, count: int = RECENT_COMMITS_LIMIT) -> list[GitCommit]:
        """Последние коммиты текущей ветки."""
        output = await self.run(project_path, "log", f"--format={GIT_LOG_FORMAT}", "-n", str(count))
        return parse_git_log(output)

    async def fetch_remote(self, project_path: str) -> None:
        """git fetch (ошибки игнорируются: remote может отсутствовать)."""
        try:
            await self.run(project_path, "fetch", "--quiet")
        except GitCommandError as e:
            logger.debug("git fetch не удался", path=project_path, error=e.message)

    def schedule_fetch(self, project_path: str) -> None:
        """Запустить fetch_remote в фоне, не дожидаясь результата."""
        task = asyncio.get_running_loop().create_task(self.fetch_remote(project_path))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def get_status_or_default(self, project_path: str) -> GitStatus:
        """Статус репозитория или пустой GitStatus, если git недоступен."""
        try:
            return await self.get_git_status(project_path)
        except GitCommandError as e:
            logger.debug("Git статус недоступен", path=project_path, error=e.message)
            return GitStatus()

    async def get_commits_or_empty(self, project_path: str, count: int = RECENT_COMMITS_LIMIT) -> list[GitCommit]:
        """Последние коммиты или пустой список, если git недоступен."""
        try:
            return await self.get_recent_commits(project_path, count)
        except GitCommandError as e:
            logger.debug("Git log недоступен", path=project_path, error=e.message)
            return []


def _parse_ahead_behind(output: str) -> tuple[int, int]:
    parts = output.split()
    values = []
    for index in range(2):
        try:
            values.append(int(parts[index]))
        except (IndexError, ValueError):
            values.append(0)
    return values[0], values[1]


def parse_git_log(output: str) -> list[GitCommit]:
    """Разобрать вывод git log в формате `%H|%s|%aI|%an`.

    Args:
        output: Вывод git log

    Returns:
        Список коммитов (пустой для пустого вывода)

    """
    commits = []
    for line in output.splitlines():
        if not line.strip():
            continue
        commit_hash, _, rest = line.partition("|")
        # Сообщение коммита может содержать "|"
        parts = rest.rsplit("|", 2)
        parts += [""] * (3 - len(parts))
        message, date, author = parts
        commits.append(GitCommit(hash=commit_hash, message=message, date=date, author=author))
    return commits
