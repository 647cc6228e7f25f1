"""Base class for content sources."""

from collections.abc import AsyncIterator, Callable
from datetime import datetime, timedelta, timezone
from typing import Any, ClassVar, Union

from structlog.stdlib import BoundLogger

from content_importer.core.durations import parse_duration
from content_importer.core.errors import ConfigurationError
from content_importer.core.logging import get_source_logger
from content_importer.fetcher import Fetcher
from content_importer.models import ContentType, Entry, EntryStatus

# (url, fallback_path) -> path, or False to skip the entry
FilepathFormat = Callable[[str, str], Union[str, bool]]

# Entry fields a data override may replace; other keys go to metadata
_OVERRIDABLE_FIELDS = frozenset(
    {"title", "authors", "date", "tags", "status", "content", "content_type"}
)


def _coerce_override(key: str, value: Any) -> Any:
    try:
        if key == "date" and isinstance(value, str):
            date = datetime.fromisoformat(value)
            return date if date.tzinfo else date.replace(tzinfo=timezone.utc)
        if key == "status":
            return EntryStatus(value)
        if key == "content_type":
            return ContentType(value)
    except ValueError as e:
        raise ConfigurationError(f"Invalid data override for {key}: {value!r}") from e
    if key == "date" and not (value is None or isinstance(value, datetime)):
        raise ConfigurationError(f"Invalid data override for date: {value!r}")
    return value


class DataSource:
    """Base class for implementing sources.

    Subclasses set ``TYPE`` (registry key) and ``TYPE_FRIENDLY`` (display
    name) and implement ``get_raw_entries`` and ``clean_entry``. A subclass
    may define a static ``get_file_path(url)`` to control the fallback
    output path of its entries.
    """

    TYPE: ClassVar[str] = ""
    TYPE_FRIENDLY: ClassVar[str] = ""

    def __init__(self, identifier: str) -> None:
        """Initialize source.

        Args:
            identifier: URL, account or channel id of the source
        """
        self.identifier = identifier
        self.label: str | None = None
        self.filepath_format: FilepathFormat | None = None
        self.verbose = True
        self.output_folder = "."
        self.within: timedelta | None = None
        self._fetcher: Fetcher | None = None
        self._data_overrides: dict[str, dict[str, Any]] = {}

    @property
    def logger(self) -> BoundLogger:
        return get_source_logger(self.TYPE, self.label)

    @property
    def fetcher(self) -> Fetcher:
        if self._fetcher is None:
            raise RuntimeError(f"{type(self).__name__} has no fetcher configured")
        return self._fetcher

    def set_fetcher(self, fetcher: Fetcher) -> None:
        self._fetcher = fetcher

    def set_verbose(self, verbose: bool) -> None:
        self.verbose = bool(verbose)

    def set_label(self, label: str) -> None:
        self.label = label

    def set_output_folder(self, folder: str) -> None:
        self.output_folder = folder

    def set_filepath_format_function(self, fn: FilepathFormat) -> None:
        self.filepath_format = fn

    def set_data_override(self, url: str, data: dict[str, Any]) -> None:
        """Replace fields of the entry with ``url`` when it is enumerated.

        ``date`` may be given as an ISO 8601 string, ``status`` and
        ``content_type`` by their enum values.

        Raises:
            ConfigurationError: If a typed field cannot be converted
        """
        self._data_overrides[url] = {
            key: _coerce_override(key, value) for key, value in data.items()
        }

    def set_within(self, within: str | timedelta | None) -> None:
        """Only yield entries newer than ``within`` (e.g. ``30d``)."""
        if isinstance(within, str):
            within = parse_duration(within) if within.strip() else None
        self.within = within

    def is_within(self, date: datetime | None) -> bool:
        if self.within is None or date is None:
            return True
        if date.tzinfo is None:
            date = date.replace(tzinfo=timezone.utc)
        return date >= datetime.now(timezone.utc) - self.within

    def get_url(self) -> str:
        """URL the source is read from."""
        return self.identifier

    async def get_raw_entries(self) -> list[Any]:
        """Fetch the raw records of this source.

        Must be implemented by subclasses.
        """
        raise NotImplementedError("Subclasses must implement get_raw_entries()")

    def clean_entry(self, raw: Any) -> Entry:
        """Convert one raw record to an Entry.

        Must be implemented by subclasses.
        """
        raise NotImplementedError("Subclasses must implement clean_entry()")

    def _apply_override(self, entry: Entry) -> None:
        override = self._data_overrides.get(entry.url)
        if not override:
            return
        for key, value in override.items():
            if key in _OVERRIDABLE_FIELDS:
                setattr(entry, key, value)
            else:
                entry.metadata[key] = value

    async def get_entries(self) -> AsyncIterator[Entry]:
        """Yield the entries of this source inside the ``within`` window."""
        raw_entries = await self.get_raw_entries()
        if self.verbose:
            self.logger.info("source_entries", url=self.get_url(), count=len(raw_entries))

        for raw in raw_entries:
            entry = self.clean_entry(raw)
            entry.source = self
            self._apply_override(entry)

            if not self.is_within(entry.date):
                continue

            yield entry
