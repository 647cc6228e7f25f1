"""Importer: wires sources, the entry pipeline and the writer together."""

import time
from typing import Any

from content_importer import __version__
from content_importer.core.config import settings
from content_importer.core.errors import ConfigurationError
from content_importer.core.logging import get_logger
from content_importer.fetcher import Fetcher
from content_importer.importer.directories import DirectoryManager
from content_importer.importer.paths import PathResolver
from content_importer.importer.pipeline import EntryPipeline
from content_importer.importer.policy import SkipPolicy
from content_importer.importer.transform import ContentTransformer
from content_importer.importer.writer import Writer
from content_importer.markdown import MarkdownService
from content_importer.models import Entry, RunCounts
from content_importer.persist import Persist
from content_importer.sources import DataSource, get_source_class

logger = get_logger(__name__)

ASSET_REFERENCE_TYPES = ("relative", "absolute", "colocate", "disabled")


def plural(count: int, word: str) -> str:
    return word if count == 1 else f"{word}s"


class Importer:
    """Imports entries from configured sources into local files."""

    def __init__(
        self,
        fetcher: Fetcher | None = None,
        markdown_service: MarkdownService | None = None,
        persist_manager: Persist | None = None,
    ) -> None:
        self.start_time = time.monotonic()
        self.sources: list[DataSource] = []
        self.verbose = True
        self.dry_run = False
        self.safe_mode = True
        self.allow_drafts_to_overwrite = False
        self.counts = RunCounts()

        self.output_folder = settings.OUTPUT_FOLDER
        self.drafts_folder = settings.DRAFTS_FOLDER
        self.asset_reference_type = "relative"

        self.fetcher = fetcher or Fetcher()
        self.markdown_service = markdown_service or MarkdownService()
        self.persist_manager = persist_manager or Persist()
        self.directory_manager = DirectoryManager()

        self.fetcher.set_directory_manager(self.directory_manager)
        self.fetcher.set_persist_manager(self.persist_manager)
        self.fetcher.set_output_folder(self.output_folder)

    # CSS selectors to preserve on markdown conversion
    def add_preserved(self, selectors: str) -> None:
        for selector in (selectors or "").split(","):
            self.markdown_service.add_preserved_selector(selector)

    def set_overwrite_allow(self, overwrite: str = "") -> None:
        """Exceptions to safe mode, e.g. ``drafts``."""
        allowed = [item.strip() for item in (overwrite or "").split(",")]
        if "drafts" in allowed:
            self.allow_drafts_to_overwrite = True

    def set_safe_mode(self, safe_mode: bool) -> None:
        self.safe_mode = bool(safe_mode)
        self.fetcher.set_safe_mode(safe_mode)

    def set_dry_run(self, dry_run: bool) -> None:
        self.dry_run = bool(dry_run)
        self.fetcher.set_dry_run(dry_run)
        self.directory_manager.set_dry_run(dry_run)

    def set_verbose(self, verbose: bool) -> None:
        self.verbose = bool(verbose)
        self.fetcher.set_verbose(verbose)
        self.markdown_service.set_verbose(verbose)
        self.persist_manager.set_verbose(verbose)
        for source in self.sources:
            source.set_verbose(verbose)

    def set_assets_folder(self, folder: str) -> None:
        self.fetcher.set_assets_folder(folder)

    def is_assets_colocated(self) -> bool:
        return self.asset_reference_type == "colocate"

    def set_asset_reference_type(self, ref_type: str) -> None:
        """Choose how rewritten asset URLs are expressed.

        Raises:
            ConfigurationError: If the type is not one of ASSET_REFERENCE_TYPES
        """
        if ref_type not in ASSET_REFERENCE_TYPES:
            raise ConfigurationError(
                "Invalid value for --assetrefs, must be one of: relative, colocate, "
                f"absolute, or disabled. Received: {ref_type!r}"
            )

        if ref_type == "colocate":
            # Assets sit next to the document, no subfolder
            self.set_assets_folder("")

        self.fetcher.set_download_assets(ref_type != "disabled")
        if ref_type == "absolute":
            self.fetcher.set_use_relative_asset_paths(False)
        elif ref_type in ("relative", "colocate"):
            self.fetcher.set_use_relative_asset_paths(True)

        self.asset_reference_type = ref_type

    def set_drafts_folder(self, folder: str) -> None:
        self.drafts_folder = folder

    def set_output_folder(self, folder: str) -> None:
        self.output_folder = folder
        self.fetcher.set_output_folder(folder)
        for source in self.sources:
            source.set_output_folder(folder)

    def set_cache_duration(self, duration: str) -> None:
        if duration:
            self.fetcher.set_cache_duration(duration)

    def set_persist_target(self, target: str) -> None:
        self.persist_manager.set_target(target)

    def add_source(
        self, source_type: str | type[DataSource], options: str | dict[str, Any]
    ) -> DataSource:
        """Register a source by type name (or class) and identifier.

        ``options`` is the identifier itself or a dict with ``url`` or ``id``
        and optional ``label`` and ``filepath_format``.

        Raises:
            ConfigurationError: If the source type is not supported
        """
        cls = get_source_class(source_type)

        label = None
        filepath_format = None
        if isinstance(options, str):
            identifier = options
        else:
            identifier = options.get("url") or options.get("id") or ""
            label = options.get("label")
            filepath_format = options.get("filepath_format")

        source = cls(identifier)
        source.set_fetcher(self.fetcher)
        source.set_verbose(self.verbose)
        if self.output_folder:
            source.set_output_folder(self.output_folder)
        if label:
            source.set_label(label)
        if filepath_format:
            source.set_filepath_format_function(filepath_format)

        self.sources.append(source)
        return source

    def get_sources_for_type(self, source_type: str) -> list[DataSource]:
        return [source for source in self.sources if source.TYPE == source_type]

    def add_data_override(self, source_type: str, url: str, data: dict[str, Any]) -> None:
        """Override fields of one entry of every source of ``source_type``.

        Raises:
            ConfigurationError: If no source of that type was added
        """
        sources = self.get_sources_for_type(source_type)
        if not sources:
            raise ConfigurationError(f"add_data_override: no source of type {source_type}")
        for source in sources:
            source.set_data_override(url, data)

    def _build_pipeline(self) -> EntryPipeline:
        return EntryPipeline(
            path_resolver=PathResolver(
                output_folder=self.output_folder,
                drafts_folder=self.drafts_folder,
                colocate=self.is_assets_colocated(),
            ),
            transformer=ContentTransformer(self.fetcher, self.markdown_service),
            skip_policy=self.skip_policy,
            markdown_service=self.markdown_service,
            fetcher=self.fetcher,
            dry_run=self.dry_run,
        )

    @property
    def skip_policy(self) -> SkipPolicy:
        return SkipPolicy(
            safe_mode=self.safe_mode,
            allow_drafts_to_overwrite=self.allow_drafts_to_overwrite,
        )

    async def get_entries(
        self,
        content_type: str = "markdown",
        within: str | None = None,
        target: str | None = None,
    ) -> list[Entry]:
        """Collect transformed entries, newest first.

        Args:
            content_type: Output format, ``markdown`` or ``html``
            within: Optional duration window such as ``30d``
            target: ``fs`` when the entries are going to be written to disk
        """
        entries, counts = await self._build_pipeline().collect(
            self.sources,
            target_format=content_type,
            within=within,
            for_write=target == "fs",
        )
        self.counts += counts
        return entries

    async def to_files(self, entries: list[Entry]) -> None:
        """Write entries to disk.

        Raises:
            PathConflictError: If two entries resolve to the same path
        """
        writer = Writer(
            skip_policy=self.skip_policy,
            directory_manager=self.directory_manager,
            persist_manager=self.persist_manager,
            dry_run=self.dry_run,
            verbose=self.verbose,
        )
        self.counts += await writer.write(entries)

    def get_counts(self) -> RunCounts:
        fetcher = self.fetcher.get_counts()
        markdown = self.markdown_service.get_counts()
        persist = self.persist_manager.get_counts()
        return self.counts + RunCounts(
            assets=fetcher.get("assets", 0),
            cleaned=fetcher.get("cleaned", 0),
            conversions=markdown.get("conversions", 0),
            persist=persist.get("persist", 0),
        )

    def get_summary(self) -> str:
        counts = self.get_counts()
        sources = ", ".join(
            source.TYPE_FRIENDLY or source.TYPE for source in self.sources
        )
        assets = counts.assets - counts.cleaned

        parts = [
            f"Wrote {counts.files} {plural(counts.files, 'document')}",
            f"and {assets} {plural(assets, 'asset')}",
        ]
        if counts.cleaned:
            parts.append(f"({counts.cleaned} cleaned, unused)")
        parts.append(f"from {sources}")
        if counts.persist:
            parts.append(f"({counts.persist} persisted)")
        parts.append(f"({counts.errors} {plural(counts.errors, 'error')})")
        parts.append(f"in {time.monotonic() - self.start_time:.2f}s")
        parts.append(f"(v{__version__})")
        return " ".join(parts)

    def log_results(self) -> None:
        counts = self.get_counts()
        logger.info(self.get_summary(), **counts.as_dict())

    async def aclose(self) -> None:
        await self.fetcher.aclose()
        await self.persist_manager.aclose()
