"""Tests for the filename/frontmatter sync orchestrator."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from datemirror.config import Settings
from datemirror.core.frontmatter import read_frontmatter
from datemirror.sync import FRONTMATTER_CHANGED, RENAMED, DateMirror, sync_vault
from datemirror.vault import Document


class MockLogger:
    """Logger that records messages per level."""

    def __init__(self) -> None:
        self.messages: dict[str, list[str]] = {
            "debug": [],
            "info": [],
            "warning": [],
            "error": [],
        }

    def debug(self, msg: str) -> None:
        self.messages["debug"].append(msg)

    def info(self, msg: str) -> None:
        self.messages["info"].append(msg)

    def warning(self, msg: str) -> None:
        self.messages["warning"].append(msg)

    def error(self, msg: str) -> None:
        self.messages["error"].append(msg)


def make_mirror(vault: Path, **settings: object) -> DateMirror:
    options: dict[str, object] = {"date_property": "date", "debounce_seconds": 0.01}
    options.update(settings)
    return DateMirror(Settings(**options), MockLogger(), vault_root=vault)


def write_note(path: Path, frontmatter: str, body: str = "Body\n") -> Path:
    path.write_text(f"---\n{frontmatter}---\n{body}", encoding="utf-8")
    return path


class TestUpdateFilename:
    """Test renaming files when the frontmatter date changes."""

    @pytest.mark.asyncio
    async def test_renames_to_frontmatter_date(self, tmp_path: Path) -> None:
        """Test renames to frontmatter date."""
        note = write_note(tmp_path / "Meeting 2023-05-01 notes.md", "date: 2024-11-30\n")
        mirror = make_mirror(tmp_path)

        new_path = await mirror.update_filename(Document(note))

        assert new_path == tmp_path / "Meeting 2024-11-30 notes.md"
        assert new_path.exists()
        assert not note.exists()

    @pytest.mark.asyncio
    async def test_no_date_in_filename(self, tmp_path: Path) -> None:
        """Test no date in filename."""
        note = write_note(tmp_path / "Shopping list.md", "date: 2024-11-30\n")
        mirror = make_mirror(tmp_path)

        assert await mirror.update_filename(Document(note)) is None
        assert note.exists()

    @pytest.mark.asyncio
    async def test_date_already_matches(self, tmp_path: Path) -> None:
        """Test date already matches."""
        note = write_note(tmp_path / "Daily 2024-11-30.md", "date: 2024-11-30\n")
        mirror = make_mirror(tmp_path)

        assert await mirror.update_filename(Document(note)) is None
        assert note.exists()

    @pytest.mark.asyncio
    async def test_missing_or_empty_property(self, tmp_path: Path) -> None:
        """Test missing or empty property."""
        missing = write_note(tmp_path / "Daily 2024-11-30.md", "title: x\n")
        empty = write_note(tmp_path / "Daily 2024-12-01.md", "date: ''\n")
        mirror = make_mirror(tmp_path)

        assert await mirror.update_filename(Document(missing)) is None
        assert await mirror.update_filename(Document(empty)) is None

    @pytest.mark.asyncio
    async def test_unparseable_property(self, tmp_path: Path) -> None:
        """Test unparseable property."""
        note = write_note(tmp_path / "Daily 2024-11-30.md", "date: someday\n")
        mirror = make_mirror(tmp_path)

        assert await mirror.update_filename(Document(note)) is None
        assert mirror.logger.messages["debug"]

    @pytest.mark.asyncio
    async def test_unconfigured_property_is_ignored(self, tmp_path: Path) -> None:
        """Test unconfigured property is ignored."""
        # The sentinel must never be treated as a real key
        note = write_note(tmp_path / "Daily 2024-11-30.md", "DEFAULT: 2025-01-01\n")
        mirror = make_mirror(tmp_path, date_property="DEFAULT")

        assert await mirror.update_filename(Document(note)) is None
        assert note.exists()

    @pytest.mark.asyncio
    async def test_non_note_files_are_ignored(self, tmp_path: Path) -> None:
        """Test non note files are ignored."""
        note = write_note(tmp_path / "Daily 2024-11-30.txt", "date: 2025-01-01\n")
        mirror = make_mirror(tmp_path)

        assert await mirror.update_filename(Document(note)) is None
        assert note.exists()

    @pytest.mark.asyncio
    async def test_integer_frontmatter_date(self, tmp_path: Path) -> None:
        """Test integer frontmatter date."""
        note = write_note(tmp_path / "Log 20231231.md", "date: 20240105\n")
        mirror = make_mirror(tmp_path, date_format="YYYYMMDD")

        new_path = await mirror.update_filename(Document(note))

        assert new_path == tmp_path / "Log 20240105.md"

    @pytest.mark.asyncio
    async def test_rename_conflict_propagates(self, tmp_path: Path) -> None:
        """Test rename conflict propagates."""
        note = write_note(tmp_path / "Daily 2024-11-30.md", "date: 2025-01-02\n")
        existing = tmp_path / "Daily 2025-01-02.md"
        existing.write_text("taken")
        mirror = make_mirror(tmp_path)

        with pytest.raises(FileExistsError):
            await mirror.update_filename(Document(note))

        assert note.exists()
        assert existing.read_text() == "taken"

    @pytest.mark.asyncio
    async def test_dry_run(self, tmp_path: Path) -> None:
        """Test dry-run does not rename."""
        note = write_note(tmp_path / "Daily 2024-11-30.md", "date: 2025-01-02\n")
        mirror = make_mirror(tmp_path)
        mirror.dry_run = True

        new_path = await mirror.update_filename(Document(note))

        assert new_path == tmp_path / "Daily 2025-01-02.md"
        assert note.exists()
        assert not new_path.exists()
        assert any("[DRY RUN]" in m for m in mirror.logger.messages["info"])


class TestUpdateFrontmatter:
    """Test writing the frontmatter date when a file is renamed."""

    @pytest.mark.asyncio
    async def test_updates_changed_date(self, tmp_path: Path) -> None:
        """Test updates changed date."""
        note = write_note(tmp_path / "Daily 2025-01-02.md", "date: '2024-11-30'\n")
        mirror = make_mirror(tmp_path)

        assert await mirror.update_frontmatter(Document(note)) is True
        assert read_frontmatter(note) == {"date": "2025-01-02"}

    @pytest.mark.asyncio
    async def test_unchanged_date_is_not_written(self, tmp_path: Path) -> None:
        """Test unchanged date is not written."""
        note = write_note(tmp_path / "Daily 2025-01-02.md", "date: '2025-01-02'\n")
        original = note.read_text()
        mirror = make_mirror(tmp_path)

        assert await mirror.update_frontmatter(Document(note)) is False
        assert note.read_text() == original

    @pytest.mark.asyncio
    async def test_yaml_date_counts_as_unchanged(self, tmp_path: Path) -> None:
        """Test YAML date counts as unchanged."""
        note = write_note(tmp_path / "Daily 2025-01-02.md", "date: 2025-01-02\n")
        original = note.read_text()
        mirror = make_mirror(tmp_path)

        assert await mirror.update_frontmatter(Document(note)) is False
        assert note.read_text() == original

    @pytest.mark.asyncio
    async def test_all_digit_format_stores_integer(self, tmp_path: Path) -> None:
        """Test all digit format stores integer."""
        note = write_note(tmp_path / "Daily 20240105.md", "title: Daily\n")
        mirror = make_mirror(tmp_path, date_format="YYYYMMDD")

        assert await mirror.update_frontmatter(Document(note)) is True
        frontmatter = read_frontmatter(note)
        assert frontmatter == {"title": "Daily", "date": 20240105}
        assert isinstance(frontmatter["date"], int)

    @pytest.mark.asyncio
    async def test_no_date_in_filename(self, tmp_path: Path) -> None:
        """Test no date in filename."""
        note = write_note(tmp_path / "Shopping list.md", "date: '2024-11-30'\n")
        mirror = make_mirror(tmp_path)

        assert await mirror.update_frontmatter(Document(note)) is False

    @pytest.mark.asyncio
    async def test_invalid_date_in_filename(self, tmp_path: Path) -> None:
        """Test invalid date in filename."""
        note = write_note(tmp_path / "Report 2024-13-45.md", "date: '2024-11-30'\n")
        mirror = make_mirror(tmp_path)

        assert await mirror.update_frontmatter(Document(note)) is False
        assert read_frontmatter(note) == {"date": "2024-11-30"}

    @pytest.mark.asyncio
    async def test_unconfigured_property_is_ignored(self, tmp_path: Path) -> None:
        """Test unconfigured property is ignored."""
        note = write_note(tmp_path / "Daily 2025-01-02.md", "title: x\n")
        mirror = make_mirror(tmp_path, date_property="DEFAULT")

        assert await mirror.update_frontmatter(Document(note)) is False
        assert read_frontmatter(note) == {"title": "x"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("date_format", ["", "note"])
    async def test_format_without_tokens_keeps_date(
        self, tmp_path: Path, date_format: str
    ) -> None:
        """Test format without tokens keeps date."""
        note = write_note(tmp_path / "Daily note.md", "date: '2024-11-30'\n")
        original = note.read_text()
        mirror = make_mirror(tmp_path, date_format=date_format)

        assert await mirror.update_frontmatter(Document(note)) is False
        assert await mirror.update_filename(Document(note)) is None
        assert note.read_text() == original

    @pytest.mark.asyncio
    async def test_byte_order_mark_note(self, tmp_path: Path) -> None:
        """Test byte order mark note."""
        note = tmp_path / "Daily 2025-01-02.md"
        note.write_text("\ufeff---\ndate: '2024-11-30'\n---\nBody\n", encoding="utf-8")
        mirror = make_mirror(tmp_path)

        assert await mirror.update_frontmatter(Document(note)) is True
        text = note.read_text(encoding="utf-8")
        assert text == "\ufeff---\ndate: '2025-01-02'\n---\nBody\n"
        assert await mirror.update_frontmatter(Document(note)) is False

    @pytest.mark.asyncio
    async def test_dry_run(self, tmp_path: Path) -> None:
        """Test dry-run does not write frontmatter."""
        note = write_note(tmp_path / "Daily 2025-01-02.md", "date: '2024-11-30'\n")
        original = note.read_text()
        mirror = make_mirror(tmp_path)
        mirror.dry_run = True

        assert await mirror.update_frontmatter(Document(note)) is True
        assert note.read_text() == original


class TestNoOscillation:
    """Test that each handler's output settles the other handler."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "date_format,old_name,value",
        [
            ("YYYY-MM-DD", "Daily 2023-05-01", "2024-11-30"),
            ("YYYYMMDD", "Daily 20230501", "20241130"),
            ("DD.MM.YYYY", "Daily 01.05.2023", "'30.11.2024'"),
        ],
    )
    async def test_rename_then_frontmatter_is_stable(
        self, tmp_path: Path, date_format: str, old_name: str, value: str
    ) -> None:
        """Test rename then frontmatter is stable."""
        note = write_note(tmp_path / f"{old_name}.md", f"date: {value}\n")
        mirror = make_mirror(tmp_path, date_format=date_format)

        new_path = await mirror.update_filename(Document(note))
        assert new_path is not None
        content = new_path.read_text()

        assert await mirror.update_frontmatter(Document(new_path)) is False
        assert new_path.read_text() == content
        assert await mirror.update_filename(Document(new_path)) is None

    @pytest.mark.asyncio
    async def test_frontmatter_then_rename_is_stable(self, tmp_path: Path) -> None:
        """Test frontmatter then rename is stable."""
        note = write_note(tmp_path / "Daily 20240105.md", "title: x\n")
        mirror = make_mirror(tmp_path, date_format="YYYYMMDD")

        assert await mirror.update_frontmatter(Document(note)) is True
        assert await mirror.update_filename(Document(note)) is None
        assert await mirror.update_frontmatter(Document(note)) is False


class TestUpdateSettings:
    """Test changing settings through the orchestrator."""

    def test_persists_and_applies(self, tmp_path: Path) -> None:
        """Test persists and applies."""
        saved: list[Settings] = []
        mirror = DateMirror(Settings(), MockLogger(), settings_saver=saved.append)

        settings = mirror.update_settings(date_property="date", date_format="YYYYMMDD")

        assert saved == [settings]
        assert mirror.settings.date_property == "date"
        assert mirror.settings.date_format == "YYYYMMDD"

    @pytest.mark.asyncio
    async def test_new_format_is_used(self, tmp_path: Path) -> None:
        """Test new format is used."""
        note = write_note(tmp_path / "Daily 20250102.md", "title: x\n")
        mirror = make_mirror(tmp_path)
        assert await mirror.update_frontmatter(Document(note)) is False

        mirror.update_settings(date_format="YYYYMMDD")

        assert await mirror.update_frontmatter(Document(note)) is True
        assert read_frontmatter(note) == {"title": "x", "date": 20250102}

    def test_unknown_setting(self) -> None:
        """Test unknown setting."""
        mirror = DateMirror(Settings(), MockLogger())
        with pytest.raises(ValueError):
            mirror.update_settings(colour="blue")


class TestSchedule:
    """Test per-document debouncing."""

    @pytest.mark.asyncio
    async def test_replaces_pending_timer(self, tmp_path: Path) -> None:
        """Test replaces pending timer."""
        note = write_note(tmp_path / "Daily 2024-11-30.md", "date: 2024-11-30\n")
        mirror = make_mirror(tmp_path)
        mirror.update_frontmatter = AsyncMock(return_value=True)  # type: ignore[method-assign]

        mirror.schedule(note, RENAMED)
        mirror.schedule(note, RENAMED)
        assert mirror.pending(note)

        await asyncio.sleep(0.1)

        assert mirror.update_frontmatter.await_count == 1
        assert not mirror.pending(note)

    @pytest.mark.asyncio
    async def test_rename_survives_later_modification(self, tmp_path: Path) -> None:
        """Test rename survives later modification."""
        note = write_note(tmp_path / "Daily 2024-11-30.md", "date: 2024-11-30\n")
        mirror = make_mirror(tmp_path)
        mirror.update_frontmatter = AsyncMock(return_value=True)  # type: ignore[method-assign]
        mirror.update_filename = AsyncMock(return_value=None)  # type: ignore[method-assign]

        mirror.schedule(note, RENAMED)
        mirror.schedule(note, FRONTMATTER_CHANGED)
        await asyncio.sleep(0.1)

        assert mirror.update_frontmatter.await_count == 1
        assert mirror.update_filename.await_count == 0

    @pytest.mark.asyncio
    async def test_rename_replaces_earlier_modification(self, tmp_path: Path) -> None:
        """Test rename replaces earlier modification."""
        note = write_note(tmp_path / "Daily 2024-11-30.md", "date: 2024-11-30\n")
        mirror = make_mirror(tmp_path)
        mirror.update_frontmatter = AsyncMock(return_value=True)  # type: ignore[method-assign]
        mirror.update_filename = AsyncMock(return_value=None)  # type: ignore[method-assign]

        mirror.schedule(note, FRONTMATTER_CHANGED)
        mirror.schedule(note, RENAMED)
        await asyncio.sleep(0.1)

        assert mirror.update_frontmatter.await_count == 1
        assert mirror.update_filename.await_count == 0

    @pytest.mark.asyncio
    async def test_user_rename_is_kept(self, tmp_path: Path) -> None:
        """Test user rename is kept."""
        note = write_note(tmp_path / "Daily 2025-01-02.md", "date: '2024-11-30'\n")
        mirror = make_mirror(tmp_path)

        mirror.schedule(note, RENAMED)
        mirror.schedule(note, FRONTMATTER_CHANGED)
        await asyncio.sleep(0.2)

        assert note.exists()
        assert not (tmp_path / "Daily 2024-11-30.md").exists()
        assert read_frontmatter(note) == {"date": "2025-01-02"}

    @pytest.mark.asyncio
    async def test_locks_released_after_run(self, tmp_path: Path) -> None:
        """Test locks released after run."""
        notes = [
            write_note(tmp_path / f"Daily 2024-11-0{day}.md", f"date: 2024-11-0{day}\n")
            for day in range(1, 6)
        ]
        mirror = make_mirror(tmp_path)

        for note in notes:
            mirror.schedule(note, RENAMED)
            mirror.schedule(note, FRONTMATTER_CHANGED)
        await asyncio.sleep(0.2)

        assert not mirror._locks
        assert not mirror._lock_users

    @pytest.mark.asyncio
    async def test_documents_are_independent(self, tmp_path: Path) -> None:
        """Test documents are independent."""
        first = write_note(tmp_path / "Daily 2024-11-30.md", "date: 2024-11-30\n")
        second = write_note(tmp_path / "Daily 2024-12-01.md", "date: 2024-12-01\n")
        mirror = make_mirror(tmp_path)
        mirror.update_frontmatter = AsyncMock(return_value=True)  # type: ignore[method-assign]

        mirror.schedule(first, RENAMED)
        mirror.schedule(second, RENAMED)
        await asyncio.sleep(0.1)

        assert mirror.update_frontmatter.await_count == 2

    @pytest.mark.asyncio
    async def test_runs_real_handler(self, tmp_path: Path) -> None:
        """Test runs real handler."""
        note = write_note(tmp_path / "Daily 2025-01-02.md", "date: '2024-11-30'\n")
        mirror = make_mirror(tmp_path)

        mirror.schedule(note, RENAMED)
        await asyncio.sleep(0.2)

        assert read_frontmatter(note) == {"date": "2025-01-02"}

    @pytest.mark.asyncio
    async def test_handler_errors_are_logged(self, tmp_path: Path) -> None:
        """Test handler errors are logged."""
        note = write_note(tmp_path / "Daily 2024-11-30.md", "date: 2025-01-02\n")
        mirror = make_mirror(tmp_path)
        mirror.update_filename = AsyncMock(  # type: ignore[method-assign]
            side_effect=FileExistsError("Daily 2025-01-02.md already exists")
        )

        mirror.schedule(note, FRONTMATTER_CHANGED)
        await asyncio.sleep(0.1)

        assert any("Rename conflict" in m for m in mirror.logger.messages["error"])

    @pytest.mark.asyncio
    async def test_deleted_file_is_skipped(self, tmp_path: Path) -> None:
        """Test deleted file is skipped."""
        note = write_note(tmp_path / "Daily 2024-11-30.md", "date: 2024-11-30\n")
        mirror = make_mirror(tmp_path)
        mirror.update_filename = AsyncMock(return_value=None)  # type: ignore[method-assign]

        mirror.schedule(note, FRONTMATTER_CHANGED)
        note.unlink()
        await asyncio.sleep(0.1)

        assert mirror.update_filename.await_count == 0

    @pytest.mark.asyncio
    async def test_shutdown_cancels_pending(self, tmp_path: Path) -> None:
        """Test shutdown cancels pending."""
        note = write_note(tmp_path / "Daily 2024-11-30.md", "date: 2024-11-30\n")
        mirror = make_mirror(tmp_path, debounce_seconds=0.05)
        mirror.update_frontmatter = AsyncMock(return_value=True)  # type: ignore[method-assign]

        mirror.schedule(note, RENAMED)
        await mirror.shutdown()
        assert not mirror.pending(note)

        mirror.schedule(note, RENAMED)
        await asyncio.sleep(0.1)

        assert mirror.update_frontmatter.await_count == 0

    def test_unknown_trigger(self, tmp_path: Path) -> None:
        """Test unknown trigger."""
        mirror = make_mirror(tmp_path)
        with pytest.raises(ValueError):
            mirror.schedule(tmp_path / "a.md", "deleted")


class TestSyncVault:
    """Test the one-shot vault pass."""

    @pytest.mark.asyncio
    async def test_frontmatter_direction(self, tmp_path: Path) -> None:
        """Test frontmatter direction."""
        changed = write_note(tmp_path / "Daily 2025-01-02.md", "date: '2024-11-30'\n")
        write_note(tmp_path / "Daily 2025-01-03.md", "date: '2025-01-03'\n")
        write_note(tmp_path / "Shopping list.md", "title: x\n")
        mirror = make_mirror(tmp_path)

        stats = await sync_vault(mirror, tmp_path, "frontmatter")

        assert stats == {"processed": 3, "renamed": 0, "updated": 1, "errors": 0}
        assert read_frontmatter(changed) == {"date": "2025-01-02"}

    @pytest.mark.asyncio
    async def test_filename_direction_counts_conflicts(self, tmp_path: Path) -> None:
        """Test filename direction counts conflicts."""
        write_note(tmp_path / "A 2024-01-01.md", "date: 2024-02-02\n")
        write_note(tmp_path / "B 2024-01-01.md", "date: 2024-03-03\n")
        (tmp_path / "B 2024-03-03.md").write_text("taken")
        mirror = make_mirror(tmp_path)

        stats = await sync_vault(mirror, tmp_path, "filename")

        assert stats["renamed"] == 1
        assert stats["errors"] == 1
        assert (tmp_path / "A 2024-02-02.md").exists()
        assert (tmp_path / "B 2024-01-01.md").exists()

    @pytest.mark.asyncio
    async def test_unknown_direction(self, tmp_path: Path) -> None:
        """Test unknown direction."""
        mirror = make_mirror(tmp_path)
        with pytest.raises(ValueError):
            await sync_vault(mirror, tmp_path, "sideways")
