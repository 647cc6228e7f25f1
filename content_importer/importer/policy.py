"""Overwrite rules shared by the pipeline and the writer."""

import os

from content_importer.models import Entry


class SkipPolicy:
    """Decides whether an entry must be left unwritten."""

    def __init__(self, safe_mode: bool = True, allow_drafts_to_overwrite: bool = False):
        self.safe_mode = safe_mode
        self.allow_drafts_to_overwrite = allow_drafts_to_overwrite

    def should_skip(self, entry: Entry) -> bool:
        if entry.is_skipped or entry.file_path is None:
            return True

        if self.safe_mode and os.path.exists(entry.file_path):
            # Drafts only overwrite when explicitly allowed
            if not entry.is_draft or not self.allow_drafts_to_overwrite:
                return True

        return False
