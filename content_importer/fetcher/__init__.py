"""Fetching of remote documents and assets.

Public API:
- Fetcher: cached document fetches and asset downloads
- ResponseCache: on-disk cache of fetched documents
- with_fetch_retry: retry decorator for network coroutines
"""

from content_importer.fetcher.cache import ResponseCache
from content_importer.fetcher.client import ASSET_FETCHES, Fetcher
from content_importer.fetcher.retry import with_fetch_retry

__all__ = [
    "ASSET_FETCHES",
    "Fetcher",
    "ResponseCache",
    "with_fetch_retry",
]
