"""Emits transformed entries as files with YAML front matter."""

from typing import Any

import yaml
from prometheus_client import Counter
from slugify import slugify

from content_importer.core.errors import PathConflictError
from content_importer.core.logging import get_logger
from content_importer.importer.directories import DirectoryManager
from content_importer.importer.policy import SkipPolicy
from content_importer.models import Entry, RunCounts
from content_importer.persist import Persist

logger = get_logger(__name__)

# Prometheus metrics
DOCUMENTS = Counter(
    "importer_documents_total", "Total number of documents handled", ["status"]
)


def entry_to_front_matter(entry: Entry) -> str:
    """Serialize an entry's fields as a YAML front matter block (no fences)."""
    data: dict[str, Any] = {
        "title": entry.title,
        "authors": [dict(author) for author in entry.authors],
        "date": entry.date,
        "metadata": {
            **(entry.metadata or {}),
            "uuid": entry.uuid,
            "type": entry.type,
            "url": entry.url,
        },
    }

    if entry.is_draft:
        data["draft"] = True

    if entry.tags:
        tags = entry.tags if isinstance(entry.tags, list) else [entry.tags]
        data["tags"] = [slugify(str(tag)) for tag in tags]

    return yaml.safe_dump(
        data, sort_keys=False, allow_unicode=True, default_flow_style=False
    )


def render_document(entry: Entry) -> str:
    return f"---\n{entry_to_front_matter(entry)}---\n{entry.content}"


class Writer:
    """Writes an ordered list of entries, refusing conflicting paths."""

    def __init__(
        self,
        skip_policy: SkipPolicy,
        directory_manager: DirectoryManager,
        persist_manager: Persist | None = None,
        dry_run: bool = False,
        verbose: bool = True,
    ) -> None:
        self.skip_policy = skip_policy
        self.directory_manager = directory_manager
        self.persist_manager = persist_manager
        self.dry_run = dry_run
        self.verbose = verbose

    async def write(self, entries: list[Entry]) -> RunCounts:
        """Write every entry that passes the skip policy.

        Files written before a conflict is found stay on disk.

        Raises:
            PathConflictError: If two entries resolve to the same path
            OSError: If a file cannot be written
        """
        counts = RunCounts()
        claimed: dict[str, str] = {}

        for entry in entries:
            pathname = entry.file_path
            # SKIP or unresolved
            if not isinstance(pathname, str):
                continue

            if pathname in claimed:
                raise PathConflictError(pathname, claimed[pathname], entry.url)
            claimed[pathname] = entry.url

            document = render_document(entry)

            if self.skip_policy.should_skip(entry):
                DOCUMENTS.labels(status="skipped").inc()
                if self.verbose:
                    logger.info("skipping", kind="post", path=pathname, url=entry.url)
                continue

            if self.verbose:
                logger.info(
                    "importing",
                    kind="post",
                    path=pathname,
                    url=entry.url,
                    size=len(document),
                    dry_run=self.dry_run,
                )

            if not self.dry_run:
                self.directory_manager.create_directory_for_path(pathname)
                with open(pathname, "w", encoding="utf-8") as f:
                    f.write(document)
                counts.files += 1
                DOCUMENTS.labels(status="written").inc()

            # Independent of dry run; drafts are never persisted
            if (
                not entry.is_draft
                and self.persist_manager is not None
                and self.persist_manager.can_persist()
            ):
                await self.persist_manager.persist_file(
                    pathname, document, {"url": entry.url, "type": "post"}
                )

        return counts
