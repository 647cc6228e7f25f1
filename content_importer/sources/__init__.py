"""Content sources.

Public API:
- DataSource: Base class for all sources
- SOURCE_TYPES: Registry of source types by name
- get_source_class: Resolve a type name or DataSource subclass
"""

from content_importer.core.errors import ConfigurationError
from content_importer.sources.base import DataSource, FilepathFormat
from content_importer.sources.feed import (
    Atom,
    BlueskyUser,
    FediverseUser,
    FeedSource,
    Rss,
    YouTubeUser,
)
from content_importer.sources.wordpress import WordPressApi

SOURCE_TYPES: dict[str, type[DataSource]] = {
    source.TYPE: source
    for source in (Rss, Atom, YouTubeUser, WordPressApi, BlueskyUser, FediverseUser)
}


def get_source_class(source_type: str | type[DataSource]) -> type[DataSource]:
    """Resolve a registry name (case insensitive) or pass a subclass through.

    Raises:
        ConfigurationError: If the type is not a supported source
    """
    if isinstance(source_type, type):
        if issubclass(source_type, DataSource):
            return source_type
        raise ConfigurationError(
            f"{source_type.__name__} is not a supported source type. "
            "Requires a type name or a DataSource subclass."
        )

    cls = SOURCE_TYPES.get(str(source_type).lower())
    if cls is None:
        raise ConfigurationError(
            f"{source_type} is not a supported source type. "
            f"Supported types: {', '.join(sorted(SOURCE_TYPES))}"
        )
    return cls


__all__ = [
    "Atom",
    "BlueskyUser",
    "DataSource",
    "FediverseUser",
    "FeedSource",
    "FilepathFormat",
    "Rss",
    "SOURCE_TYPES",
    "WordPressApi",
    "YouTubeUser",
    "get_source_class",
]
