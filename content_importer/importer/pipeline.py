"""Collects entries from sources and transforms them concurrently."""

import asyncio
from collections.abc import Iterable
from datetime import datetime, timezone

from content_importer.core.errors import ConfigurationError
from content_importer.core.logging import get_logger
from content_importer.fetcher import Fetcher
from content_importer.importer.paths import PathResolver
from content_importer.importer.policy import SkipPolicy
from content_importer.importer.transform import ContentTransformer
from content_importer.markdown import MarkdownService
from content_importer.models import ContentType, Entry, RunCounts
from content_importer.sources import DataSource

logger = get_logger(__name__)

OUTPUT_FORMATS = ("markdown", "html")

# Sort key for entries without a date, they go last
_NO_DATE = datetime.min.replace(tzinfo=timezone.utc)


def _sort_key(entry: Entry) -> datetime:
    if entry.date is None:
        return _NO_DATE
    if entry.date.tzinfo is None:
        return entry.date.replace(tzinfo=timezone.utc)
    return entry.date


class EntryPipeline:
    """Gathers, resolves, filters, transforms and sorts entries."""

    def __init__(
        self,
        path_resolver: PathResolver,
        transformer: ContentTransformer,
        skip_policy: SkipPolicy,
        markdown_service: MarkdownService,
        fetcher: Fetcher,
        dry_run: bool = False,
    ) -> None:
        self.path_resolver = path_resolver
        self.transformer = transformer
        self.skip_policy = skip_policy
        self.markdown_service = markdown_service
        self.fetcher = fetcher
        self.dry_run = dry_run

    @staticmethod
    def get_content_type(entry: Entry, to_markdown: bool) -> ContentType:
        """Content type used for the output file extension."""
        if to_markdown and (entry.is_html or entry.is_text):
            return ContentType.MARKDOWN
        return entry.content_type

    async def gather(
        self, sources: Iterable[DataSource], to_markdown: bool, for_write: bool
    ) -> list[Entry]:
        """Drain every source, one after the other, resolving output paths."""
        entries: list[Entry] = []

        for source in sources:
            async for entry in source.get_entries():
                content_type = self.get_content_type(entry, to_markdown)
                entry.assign_file_path(self.path_resolver.resolve(entry, content_type))

                # Avoid fetching assets for entries that will not be written
                if for_write and self.skip_policy.should_skip(entry):
                    continue

                entries.append(entry)

        return entries

    async def collect(
        self,
        sources: Iterable[DataSource],
        target_format: str = "markdown",
        within: str | None = None,
        for_write: bool = False,
    ) -> tuple[list[Entry], RunCounts]:
        """Collect entries ready to be written, newest first.

        Args:
            sources: Configured sources, drained sequentially
            target_format: ``markdown`` or ``html``
            within: Optional duration window (e.g. ``30d``) passed to sources
            for_write: Apply the skip policy before transforming

        Returns:
            Tuple of (sorted entries, counts for this stage)

        Raises:
            ConfigurationError: If the output format is not supported
        """
        if target_format not in OUTPUT_FORMATS:
            raise ConfigurationError(
                f"Invalid output format {target_format!r}, expected markdown or html"
            )
        to_markdown = target_format == "markdown"
        sources = list(sources)

        for source in sources:
            source.set_within(within)

        entries = await self.gather(sources, to_markdown, for_write)

        # Settle all: one failing entry never cancels the others
        results = await asyncio.gather(
            *(self.transformer.apply(entry, to_markdown) for entry in entries),
            return_exceptions=True,
        )

        counts = RunCounts()
        transformed: list[Entry] = []
        for entry, result in zip(entries, results):
            if isinstance(result, Exception):
                counts.errors += 1
                logger.error(
                    "entry_failed",
                    url=entry.url,
                    path=str(entry.file_path),
                    error=str(result),
                    exc_info=result,
                )
                continue
            if isinstance(result, BaseException):
                raise result
            transformed.append(result)

        self.fetcher.clean_unused(transformed)

        if not self.dry_run:
            self.markdown_service.cleanup()

        return sorted(transformed, key=_sort_key, reverse=True), counts
