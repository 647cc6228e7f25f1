"""Source and entry fixtures for tests."""

import copy
import dataclasses
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import pytest

from content_importer.models import ContentType, Entry, EntryStatus
from content_importer.sources import DataSource


class StaticSource(DataSource):
    """Source yielding a fixed list of entries."""

    TYPE = "static"
    TYPE_FRIENDLY = "Static"

    def __init__(self, identifier: str = "static", entries: list[Entry] | None = None):
        super().__init__(identifier)
        self.entries = entries or []
        self.enumerations = 0

    async def get_raw_entries(self) -> list[Any]:
        self.enumerations += 1
        return list(self.entries)

    def clean_entry(self, raw: Any) -> Entry:
        # Fresh copy per enumeration, paths are assigned once per entry
        return dataclasses.replace(raw, metadata=copy.deepcopy(raw.metadata))


class QueryStringSource(StaticSource):
    """Source whose URLs only differ by query string."""

    TYPE = "querystring"


class SlugSource(StaticSource):
    """Source with a static fallback path function."""

    TYPE = "slug"

    @staticmethod
    def get_file_path(url: str) -> str:
        return "/posts/" + url.rstrip("/").rsplit("/", 1)[-1] + "/"


EntryFactory = Callable[..., Entry]


@pytest.fixture
def make_entry() -> EntryFactory:
    """Build entries with sensible defaults."""

    def factory(
        url: str = "https://example.com/2024/hello-world/",
        content: str = "<p>Hello world</p>",
        content_type: ContentType = ContentType.HTML,
        date: datetime | None = None,
        status: EntryStatus = EntryStatus.PUBLISHED,
        **kwargs: Any,
    ) -> Entry:
        return Entry(
            url=url,
            content=content,
            content_type=content_type,
            title=kwargs.pop("title", "Hello world"),
            authors=kwargs.pop("authors", [{"name": "Zach"}]),
            date=date or datetime(2024, 1, 1, tzinfo=timezone.utc),
            uuid=kwargs.pop("uuid", url),
            type=kwargs.pop("type", "post"),
            status=status,
            **kwargs,
        )

    return factory


@pytest.fixture
def static_source() -> Callable[..., StaticSource]:
    """Build a StaticSource for a list of entries."""

    def factory(*entries: Entry, cls: type[StaticSource] = StaticSource) -> StaticSource:
        return cls(entries=list(entries))

    return factory
