"""Importer models package."""

from .counts import RunCounts
from .entry import SKIP, Author, ContentType, Entry, EntryStatus, FilePath

__all__ = [
    "SKIP",
    "Author",
    "ContentType",
    "Entry",
    "EntryStatus",
    "FilePath",
    "RunCounts",
]
