"""Do-Work Service - файловая очередь запросов проекта.

Структура `<project>/do-work/`:
    *.md            - pending запросы
    working/*.md    - запросы в работе
    archive/*.md    - выполненные запросы

Каждый файл - markdown с опциональным YAML frontmatter
(title, status, created/createdAt, claimed/claimedAt, completed/completedAt).
"""

import asyncio
import re
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import yaml

from devdash.core.constants import DOWORK_ARCHIVE_LIMIT, DOWORK_DIR
from devdash.models.workspace import DoWorkQueue, DoWorkRequest
from devdash.shared.logging import get_logger

logger = get_logger()

FRONTMATTER_RE = re.compile(r"\A---\r?\n(.*?)\r?\n---", re.DOTALL)


def _frontmatter_value(frontmatter: dict[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = frontmatter.get(key)
        if value is None or value == "":
            continue
        if isinstance(value, datetime):
            return value.isoformat()
        return str(value).strip()
    return None


def parse_frontmatter(content: str) -> dict[str, Any]:
    """Извлечь YAML frontmatter из markdown.

    Args:
        content: Содержимое файла

    Returns:
        Словарь полей (пустой, если frontmatter нет или он невалиден)

    """
    match = FRONTMATTER_RE.match(content)
    if not match:
        return {}

    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        logger.debug("Невалидный frontmatter", error=str(e))
        return {}

    return data if isinstance(data, dict) else {}


def parse_request_file(path: Path) -> DoWorkRequest | None:
    """Прочитать один файл запроса.

    Args:
        path: Путь к .md файлу

    Returns:
        DoWorkRequest или None, если файл не читается

    """
    try:
        content = path.read_text(encoding="utf-8")
        stat = path.stat()
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Не удалось прочитать do-work запрос", path=str(path), error=str(e))
        return None

    frontmatter = parse_frontmatter(content)

    created_at = _frontmatter_value(frontmatter, "created", "createdAt")
    if created_at is None:
        # st_birthtime есть не на всех платформах
        timestamp = getattr(stat, "st_birthtime", stat.st_mtime)
        created_at = datetime.fromtimestamp(timestamp, UTC).isoformat()

    return DoWorkRequest(
        id=path.stem,
        title=_frontmatter_value(frontmatter, "title") or path.stem,
        status=_frontmatter_value(frontmatter, "status"),
        created_at=created_at,
        claimed_at=_frontmatter_value(frontmatter, "claimed", "claimedAt"),
        completed_at=_frontmatter_value(frontmatter, "completed", "completedAt"),
    )


def read_requests(directory: Path) -> list[DoWorkRequest]:
    """Все запросы директории (скрытые и не-.md файлы пропускаются)."""
    if not directory.is_dir():
        return []

    requests = []
    for path in sorted(directory.iterdir()):
        if path.name.startswith(".") or path.suffix != ".md" or not path.is_file():
            continue
        request = parse_request_file(path)
        if request is not None:
            requests.append(request)
    return requests


def _completed_timestamp(request: DoWorkRequest) -> float:
    if not request.completed_at:
        return 0.0
    try:
        completed = datetime.fromisoformat(request.completed_at)
    except ValueError:
        return 0.0
    if completed.tzinfo is None:
        completed = completed.replace(tzinfo=UTC)
    return completed.timestamp()


def load_do_work_queue(project_path: str | Path) -> DoWorkQueue | None:
    """Синхронно прочитать do-work очередь проекта.

    Args:
        project_path: Путь к проекту

    Returns:
        DoWorkQueue или None, если у проекта нет do-work директории

    """
    root = Path(project_path) / DOWORK_DIR
    if not root.is_dir():
        return None

    archive = read_requests(root / "archive")
    archive.sort(key=_completed_timestamp, reverse=True)

    return DoWorkQueue(
        pending=read_requests(root),
        working=read_requests(root / "working"),
        recent_archive=archive[:DOWORK_ARCHIVE_LIMIT],
    )


class DoWorkService:
    """Чтение do-work очередей проектов."""

    async def get_do_work_queue(self, project_path: str) -> DoWorkQueue | None:
        """Do-work очередь проекта (None, если её нет или она не читается)."""
        try:
            return await asyncio.to_thread(load_do_work_queue, project_path)
        except OSError as e:
            logger.warning("Не удалось прочитать do-work очередь", path=project_path, error=str(e))
            return None
