"""Unit тесты для services/dowork_service.py."""

from pathlib import Path

import pytest

from devdash.services.dowork_service import DoWorkService, parse_frontmatter, parse_request_file


def write_request(path: Path, frontmatter: str | None = None, body: str = "Do the thing\n") -> Path:
    """Записать markdown запрос с опциональным frontmatter."""
    path.parent.mkdir(parents=True, exist_ok=True)
    content = f"---\n{frontmatter}\n---\n{body}" if frontmatter is not None else body
    path.write_text(content, encoding="utf-8")
    return path


class TestFrontmatter:
    """Тесты разбора frontmatter."""

    def test_parse_fields(self) -> None:
        """Поля YAML frontmatter."""
        data = parse_frontmatter('---\ntitle: "Add login"\nstatus: pending\n---\nbody')

        assert data == {"title": "Add login", "status": "pending"}

    def test_no_frontmatter(self) -> None:
        """Без frontmatter - пустой словарь."""
        assert parse_frontmatter("# Just markdown") == {}

    def test_invalid_yaml(self) -> None:
        """Невалидный YAML - пустой словарь."""
        assert parse_frontmatter("---\ntitle: [unclosed\n---\n") == {}

    def test_request_uses_file_name_as_fallback(self, tmp_path: Path) -> None:
        """Без frontmatter id и title - имя файла, created_at - время файла."""
        request = parse_request_file(write_request(tmp_path / "REQ-001-login.md"))

        assert request.id == "REQ-001-login"
        assert request.title == "REQ-001-login"
        assert request.created_at is not None

    def test_request_alias_fields(self, tmp_path: Path) -> None:
        """created/createdAt, claimed/claimedAt, completed/completedAt."""
        request = parse_request_file(
            write_request(
                tmp_path / "REQ-002.md",
                "title: Fix crash\nstatus: done\ncreatedAt: 2024-05-01T10:00:00Z\n"
                "claimed: 2024-05-02\ncompletedAt: '2024-05-03T12:00:00Z'",
            )
        )

        assert request.title == "Fix crash"
        assert request.status == "done"
        assert request.created_at.startswith("2024-05-01T10:00:00")
        assert request.claimed_at == "2024-05-02"
        assert request.completed_at == "2024-05-03T12:00:00Z"


class TestDoWorkService:
    """Тесты для DoWorkService."""

    @pytest.mark.asyncio
    async def test_no_do_work_dir(self, tmp_path: Path) -> None:
        """Нет do-work директории - None."""
        assert await DoWorkService().get_do_work_queue(str(tmp_path)) is None

    @pytest.mark.asyncio
    async def test_queue_sections(self, tmp_path: Path) -> None:
        """pending, working и archive читаются из своих директорий."""
        root = tmp_path / "do-work"
        write_request(root / "REQ-003.md", "title: Pending one")
        write_request(root / "working" / "REQ-002.md", "title: In progress")
        write_request(root / "archive" / "REQ-001.md", "title: Done\ncompleted: 2024-05-01T10:00:00Z")
        write_request(root / ".hidden.md", "title: Hidden")
        (root / "notes.txt").write_text("not a request")

        queue = await DoWorkService().get_do_work_queue(str(tmp_path))

        assert [r.title for r in queue.pending] == ["Pending one"]
        assert [r.title for r in queue.working] == ["In progress"]
        assert [r.title for r in queue.recent_archive] == ["Done"]

    @pytest.mark.asyncio
    async def test_archive_sorted_and_limited(self, tmp_path: Path) -> None:
        """Архив: по completed_at по убыванию, не больше 10."""
        archive = tmp_path / "do-work" / "archive"
        for day in range(1, 13):
            write_request(archive / f"REQ-{day:03d}.md", f"completed: '2024-05-{day:02d}T10:00:00Z'")
        write_request(archive / "REQ-undated.md", "title: Undated")

        queue = await DoWorkService().get_do_work_queue(str(tmp_path))

        assert len(queue.recent_archive) == 10
        assert queue.recent_archive[0].id == "REQ-012"
        assert queue.recent_archive[-1].id == "REQ-003"
        assert queue.pending == []
        assert queue.working == []
