"""Tests for the overwrite policy."""

import pytest

from content_importer.importer.policy import SkipPolicy
from content_importer.models import SKIP, EntryStatus


@pytest.fixture
def existing_file(tmp_path):
    path = tmp_path / "post.md"
    path.write_text("already here")
    return str(path)


class TestSkipPolicy:
    """Test cases for SkipPolicy."""

    def test_should_skip_entries_marked_skip(self, make_entry):
        entry = make_entry()
        entry.assign_file_path(SKIP)

        assert SkipPolicy(safe_mode=False).should_skip(entry) is True

    def test_should_skip_unresolved_entries(self, make_entry):
        assert SkipPolicy().should_skip(make_entry()) is True

    def test_should_write_new_files(self, make_entry, tmp_path):
        entry = make_entry()
        entry.assign_file_path(str(tmp_path / "new.md"))

        assert SkipPolicy().should_skip(entry) is False

    def test_should_skip_existing_files_in_safe_mode(self, make_entry, existing_file):
        entry = make_entry()
        entry.assign_file_path(existing_file)

        assert SkipPolicy(safe_mode=True).should_skip(entry) is True

    def test_should_overwrite_existing_files_without_safe_mode(
        self, make_entry, existing_file
    ):
        entry = make_entry()
        entry.assign_file_path(existing_file)

        assert SkipPolicy(safe_mode=False).should_skip(entry) is False

    def test_should_skip_existing_drafts_unless_allowed(self, make_entry, existing_file):
        entry = make_entry(status=EntryStatus.DRAFT)
        entry.assign_file_path(existing_file)

        assert SkipPolicy(safe_mode=True).should_skip(entry) is True
        assert (
            SkipPolicy(safe_mode=True, allow_drafts_to_overwrite=True).should_skip(entry)
            is False
        )

    def test_should_not_let_published_entries_use_draft_allowance(
        self, make_entry, existing_file
    ):
        entry = make_entry()
        entry.assign_file_path(existing_file)

        policy = SkipPolicy(safe_mode=True, allow_drafts_to_overwrite=True)
        assert policy.should_skip(entry) is True
