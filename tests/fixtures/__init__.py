"""Test fixture package for content-importer.

Contains fixtures for:
- Sources yielding fixed entries
- Entry factories
- Importer collaborators (fetcher, markdown service, persist)
"""

from .importer import fake_persist, fetcher, markdown_service
from .sources import make_entry, static_source

__all__ = [
    # Sources
    "make_entry",
    "static_source",
    # Collaborators
    "fake_persist",
    "fetcher",
    "markdown_service",
]
