"""Entry model shared by sources, the pipeline and the writer."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Final, TypedDict, Union

from content_importer.core.errors import ImporterError

if TYPE_CHECKING:
    from content_importer.sources.base import DataSource


class ContentType(str, Enum):
    """Body format of an entry."""

    HTML = "html"
    TEXT = "text"
    MARKDOWN = "markdown"


class EntryStatus(str, Enum):
    """Publication status of an entry."""

    PUBLISHED = "published"
    DRAFT = "draft"


class Author(TypedDict, total=False):
    """Author of an entry."""

    name: str
    url: str
    avatar_url: str


class _Skip:
    """Sentinel type for entries that must never be written."""

    _instance: "_Skip | None" = None

    def __new__(cls) -> "_Skip":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SKIP"

    def __bool__(self) -> bool:
        return False


SKIP: Final = _Skip()

FilePath = Union[str, _Skip]


@dataclass(eq=False)
class Entry:
    """One content item produced by a source adapter."""

    url: str
    content: str
    content_type: ContentType
    title: str = ""
    authors: list[Author] = field(default_factory=list)
    date: datetime | None = None
    tags: list[str] | str | None = None
    uuid: str = ""
    type: str = ""
    status: EntryStatus = EntryStatus.PUBLISHED
    metadata: dict[str, Any] = field(default_factory=dict)
    source: "DataSource | None" = field(default=None, repr=False)
    _file_path: FilePath | None = field(default=None, init=False, repr=False)

    @property
    def file_path(self) -> FilePath | None:
        """Resolved output path, ``SKIP``, or None before resolution."""
        return self._file_path

    def assign_file_path(self, file_path: FilePath) -> None:
        """Assign the output path. A path can only be assigned once.

        Raises:
            ImporterError: If the path was already assigned
        """
        if self._file_path is not None:
            raise ImporterError(
                f"File path for {self.url} already resolved to {self._file_path!r}"
            )
        self._file_path = file_path

    @property
    def is_skipped(self) -> bool:
        return self._file_path is SKIP

    @property
    def is_draft(self) -> bool:
        return self.status == EntryStatus.DRAFT

    @property
    def is_html(self) -> bool:
        return self.content_type == ContentType.HTML

    @property
    def is_text(self) -> bool:
        return self.content_type == ContentType.TEXT

    @property
    def media(self) -> dict[str, str] | None:
        """Related media urls keyed by media type, if any."""
        media = self.metadata.get("media") if self.metadata else None
        return media or None
