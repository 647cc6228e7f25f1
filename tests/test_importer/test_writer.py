"""Tests for the writer and front matter rendering."""

from datetime import datetime, timezone

import pytest
import yaml

from content_importer.core.errors import PathConflictError
from content_importer.importer.directories import DirectoryManager
from content_importer.importer.policy import SkipPolicy
from content_importer.importer.writer import Writer, entry_to_front_matter, render_document
from content_importer.models import SKIP, ContentType, EntryStatus
from tests.fixtures.importer import RecordingPersist


def _split(document: str) -> tuple[dict, str]:
    _, front_matter, body = document.split("---\n", 2)
    return yaml.safe_load(front_matter), body


@pytest.fixture
def build_writer(fake_persist):
    def factory(safe_mode=True, allow_drafts=False, dry_run=False, persist=fake_persist):
        manager = DirectoryManager()
        manager.set_dry_run(dry_run)
        return Writer(
            skip_policy=SkipPolicy(safe_mode, allow_drafts),
            directory_manager=manager,
            persist_manager=persist,
            dry_run=dry_run,
            verbose=False,
        )

    return factory


def _resolved(make_entry, path, **kwargs):
    entry = make_entry(content_type=ContentType.MARKDOWN, content="Hello\n", **kwargs)
    entry.assign_file_path(str(path))
    return entry


class TestFrontMatter:
    """Test cases for front matter serialization."""

    def test_should_serialize_entry_fields(self, make_entry):
        entry = make_entry(
            title="Hello: world",
            authors=[{"name": "Zach", "url": "https://example.com/"}],
            date=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
            uuid="urn:1",
            tags=["Web Development", "Python"],
            metadata={"media": {"featuredImage": "assets/a.png"}},
        )

        data = yaml.safe_load(entry_to_front_matter(entry))

        assert data["title"] == "Hello: world"
        assert data["authors"] == [{"name": "Zach", "url": "https://example.com/"}]
        assert data["date"] == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert data["metadata"] == {
            "media": {"featuredImage": "assets/a.png"},
            "uuid": "urn:1",
            "type": "post",
            "url": "https://example.com/2024/hello-world/",
        }
        assert data["tags"] == ["web-development", "python"]
        assert "draft" not in data

    def test_should_mark_drafts(self, make_entry):
        data = yaml.safe_load(entry_to_front_matter(make_entry(status=EntryStatus.DRAFT)))

        assert data["draft"] is True

    def test_should_accept_a_single_tag(self, make_entry):
        data = yaml.safe_load(entry_to_front_matter(make_entry(tags="Release Notes")))

        assert data["tags"] == ["release-notes"]

    def test_should_keep_title_first(self, make_entry):
        assert entry_to_front_matter(make_entry()).startswith("title: Hello world\n")

    def test_should_fence_front_matter(self, make_entry):
        document = render_document(make_entry(content="Body\n"))

        assert document.startswith("---\ntitle:")
        assert document.endswith("---\nBody\n")


class TestWriter:
    """Test cases for Writer.write."""

    @pytest.mark.asyncio
    async def test_should_write_documents(self, build_writer, make_entry, tmp_path):
        entry = _resolved(make_entry, tmp_path / "out" / "2024" / "post.md")

        counts = await build_writer().write([entry])

        assert counts.files == 1
        data, body = _split((tmp_path / "out" / "2024" / "post.md").read_text())
        assert data["title"] == "Hello world"
        assert body == "Hello\n"

    @pytest.mark.asyncio
    async def test_should_not_write_skipped_entries(self, build_writer, make_entry):
        entry = make_entry()
        entry.assign_file_path(SKIP)

        counts = await build_writer().write([entry])

        assert counts.files == 0

    @pytest.mark.asyncio
    async def test_should_not_write_unresolved_entries(self, build_writer, make_entry):
        counts = await build_writer().write([make_entry()])

        assert counts.files == 0

    @pytest.mark.asyncio
    async def test_should_raise_on_path_conflict(self, build_writer, make_entry, tmp_path):
        path = tmp_path / "post.md"
        first = _resolved(make_entry, path, url="https://a.example/post")
        second = _resolved(make_entry, path, url="https://b.example/post")

        with pytest.raises(PathConflictError) as exc_info:
            await build_writer().write([first, second])

        assert exc_info.value.first_url == "https://a.example/post"
        assert exc_info.value.second_url == "https://b.example/post"
        # The first claimant stays on disk, never silently overwritten
        assert "https://a.example/post" in path.read_text()

    @pytest.mark.asyncio
    async def test_should_keep_files_written_before_a_conflict(
        self, build_writer, make_entry, tmp_path
    ):
        entries = [
            _resolved(make_entry, tmp_path / "one.md", url="https://example.com/one"),
            _resolved(make_entry, tmp_path / "two.md", url="https://example.com/two"),
            _resolved(make_entry, tmp_path / "two.md", url="https://example.com/dupe"),
            _resolved(make_entry, tmp_path / "three.md", url="https://example.com/three"),
        ]

        with pytest.raises(PathConflictError):
            await build_writer().write(entries)

        assert (tmp_path / "one.md").exists()
        assert (tmp_path / "two.md").exists()
        assert not (tmp_path / "three.md").exists()

    @pytest.mark.asyncio
    async def test_should_raise_on_conflict_even_when_skipped(
        self, build_writer, make_entry, tmp_path
    ):
        path = tmp_path / "post.md"
        path.write_text("existing")
        entries = [
            _resolved(make_entry, path, url="https://a.example/post"),
            _resolved(make_entry, path, url="https://b.example/post"),
        ]

        with pytest.raises(PathConflictError):
            await build_writer(safe_mode=True).write(entries)

    @pytest.mark.asyncio
    async def test_should_keep_existing_files_in_safe_mode(
        self, build_writer, make_entry, tmp_path
    ):
        path = tmp_path / "post.md"
        path.write_text("existing")

        counts = await build_writer(safe_mode=True).write([_resolved(make_entry, path)])

        assert counts.files == 0
        assert path.read_text() == "existing"

    @pytest.mark.asyncio
    async def test_should_overwrite_without_safe_mode(
        self, build_writer, make_entry, tmp_path
    ):
        path = tmp_path / "post.md"
        path.write_text("existing")

        counts = await build_writer(safe_mode=False).write([_resolved(make_entry, path)])

        assert counts.files == 1
        assert path.read_text().startswith("---\n")

    @pytest.mark.asyncio
    async def test_should_overwrite_drafts_when_allowed(
        self, build_writer, make_entry, tmp_path
    ):
        path = tmp_path / "draft.md"
        path.write_text("existing")
        entry = _resolved(make_entry, path, status=EntryStatus.DRAFT)

        counts = await build_writer(safe_mode=True, allow_drafts=True).write([entry])

        assert counts.files == 1
        data, _ = _split(path.read_text())
        assert data["draft"] is True

    @pytest.mark.asyncio
    async def test_should_not_write_on_dry_run(self, build_writer, make_entry, tmp_path):
        path = tmp_path / "dry" / "post.md"

        counts = await build_writer(dry_run=True).write([_resolved(make_entry, path)])

        assert counts.files == 0
        assert not path.parent.exists()

    @pytest.mark.asyncio
    async def test_should_persist_published_documents(
        self, build_writer, make_entry, fake_persist, tmp_path
    ):
        path = tmp_path / "post.md"

        await build_writer().write([_resolved(make_entry, path)])

        assert len(fake_persist.files) == 1
        persisted_path, content, metadata = fake_persist.files[0]
        assert persisted_path == str(path)
        assert content == path.read_text()
        assert metadata == {"url": "https://example.com/2024/hello-world/", "type": "post"}

    @pytest.mark.asyncio
    async def test_should_persist_even_on_dry_run(
        self, build_writer, make_entry, fake_persist, tmp_path
    ):
        path = tmp_path / "post.md"

        await build_writer(dry_run=True).write([_resolved(make_entry, path)])

        assert not path.exists()
        assert [f[0] for f in fake_persist.files] == [str(path)]

    @pytest.mark.asyncio
    async def test_should_never_persist_drafts(
        self, build_writer, make_entry, fake_persist, tmp_path
    ):
        entry = _resolved(make_entry, tmp_path / "draft.md", status=EntryStatus.DRAFT)

        await build_writer().write([entry])

        assert fake_persist.files == []

    @pytest.mark.asyncio
    async def test_should_not_persist_when_disabled(
        self, build_writer, make_entry, tmp_path
    ):
        persist = RecordingPersist(enabled=False)

        await build_writer(persist=persist).write(
            [_resolved(make_entry, tmp_path / "post.md")]
        )

        assert persist.files == []
