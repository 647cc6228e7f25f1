"""Network fetcher for source documents and content assets."""

import asyncio
import hashlib
import json
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

import httpx
from prometheus_client import Counter

from content_importer.core.config import settings
from content_importer.core.durations import parse_duration
from content_importer.core.errors import AssetFetchError
from content_importer.core.logging import get_logger
from content_importer.fetcher.cache import ResponseCache
from content_importer.fetcher.retry import with_fetch_retry
from content_importer.models import SKIP, Entry

if TYPE_CHECKING:
    from content_importer.importer.directories import DirectoryManager
    from content_importer.persist import Persist

logger = get_logger(__name__)

# Prometheus metrics
ASSET_FETCHES = Counter(
    "importer_assets_total", "Total number of asset fetch attempts", ["status"]
)

# Length of the hashes used for asset and fallback file names
HASH_LENGTH = 20

# Extensions kept verbatim from the asset URL
KNOWN_ASSET_EXTENSIONS = frozenset(
    {
        ".avif", ".gif", ".jpeg", ".jpg", ".png", ".svg", ".webp", ".ico",
        ".mp4", ".webm", ".mov", ".mp3", ".m4a", ".ogg", ".wav", ".flac",
        ".vtt", ".srt", ".css", ".js", ".pdf",
    }
)  # fmt: skip


@dataclass
class _DownloadedAsset:
    """An asset file written during this run."""

    reference: str
    file_path: Path
    requested_by: set[str] = field(default_factory=set)


class Fetcher:
    """Fetches remote documents (cached) and downloads assets to local files."""

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self.safe_mode = True
        self.dry_run = False
        self.verbose = True
        self.output_folder = settings.OUTPUT_FOLDER
        self.assets_folder = settings.ASSETS_FOLDER
        self.download_assets = True
        self.use_relative_asset_paths = True
        self.cache_duration = parse_duration(settings.CACHE_DURATION)
        self.counts = {"assets": 0, "cleaned": 0}

        self._client = client
        self._semaphore = asyncio.Semaphore(settings.FETCH_CONCURRENCY)
        self._pending: dict[tuple[str, Path], asyncio.Task[str]] = {}
        self._downloaded: dict[Path, _DownloadedAsset] = {}
        self._directory_manager: "DirectoryManager | None" = None
        self._persist_manager: "Persist | None" = None

    @staticmethod
    def create_hash(value: str, length: int = HASH_LENGTH) -> str:
        """Content-addressed name for a URL."""
        return hashlib.sha256(value.encode("utf-8")).hexdigest()[:length]

    def set_safe_mode(self, safe_mode: bool) -> None:
        self.safe_mode = bool(safe_mode)

    def set_dry_run(self, dry_run: bool) -> None:
        self.dry_run = bool(dry_run)

    def set_verbose(self, verbose: bool) -> None:
        self.verbose = bool(verbose)

    def set_output_folder(self, folder: str) -> None:
        self.output_folder = folder

    def set_assets_folder(self, folder: str) -> None:
        self.assets_folder = folder

    def set_cache_duration(self, duration: str) -> None:
        self.cache_duration = parse_duration(duration)

    def set_download_assets(self, download: bool) -> None:
        self.download_assets = bool(download)

    def set_use_relative_asset_paths(self, use_relative: bool) -> None:
        self.use_relative_asset_paths = bool(use_relative)

    def set_directory_manager(self, manager: "DirectoryManager") -> None:
        self._directory_manager = manager

    def set_persist_manager(self, manager: "Persist") -> None:
        self._persist_manager = manager

    def get_counts(self) -> dict[str, int]:
        return dict(self.counts)

    @property
    def cache(self) -> ResponseCache:
        return ResponseCache(Path(settings.CACHE_DIRECTORY), self.cache_duration)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"User-Agent": settings.USER_AGENT},
                timeout=settings.FETCH_TIMEOUT,
                follow_redirects=True,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @with_fetch_retry(max_retries=settings.FETCH_RETRIES)
    async def _get(self, url: str) -> httpx.Response:
        async with self._semaphore:
            response = await self._get_client().get(url)
        response.raise_for_status()
        return response

    async def fetch_text(self, url: str) -> str:
        """Fetch a remote document, using the disk cache when fresh.

        Raises:
            httpx.HTTPError: If the request fails after retries
        """
        cache = self.cache
        cached = cache.get(url)
        if cached is not None:
            return cached

        if self.verbose:
            logger.info("fetching", url=url)

        response = await self._get(url)
        body = response.text
        cache.set(url, body)
        return body

    async def fetch_json(self, url: str) -> Any:
        return json.loads(await self.fetch_text(url))

    def get_asset_directory(self, entry: Entry) -> tuple[Path, str]:
        """Directory an entry's assets are written to and the URL prefix used.

        Returns:
            Tuple of (directory on disk, reference prefix)
        """
        assets = PurePosixPath(self.assets_folder) if self.assets_folder else None

        if not self.use_relative_asset_paths:
            directory = Path(self.output_folder)
            if assets:
                directory = directory / assets
            return directory, f"/{assets}/" if assets else "/"

        if isinstance(entry.file_path, str):
            base = Path(entry.file_path).parent
        else:
            base = Path(self.output_folder)

        if assets:
            return base / assets, f"{assets}/"
        return base, ""

    async def fetch_asset(self, url: str, entry: Entry) -> str:
        """Download an asset and return the local reference to use instead.

        Fails open: when the asset cannot be fetched the original URL is
        returned so the content keeps pointing at the remote copy.
        """
        if not self.download_assets:
            return url

        scheme = urlparse(url).scheme
        if scheme not in ("http", "https"):
            return url

        directory, prefix = self.get_asset_directory(entry)
        key = (url, directory)

        # Share one download between every entry asking for the same asset
        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(self._download(url, directory, prefix, entry))
            self._pending[key] = task

        try:
            reference = await task
        except (AssetFetchError, httpx.HTTPError, OSError) as e:
            ASSET_FETCHES.labels(status="failed").inc()
            logger.warning("asset_fetch_failed", url=url, entry=entry.url, error=str(e))
            return url

        asset = self._downloaded.get(directory / PurePosixPath(reference).name)
        if asset is not None:
            asset.requested_by.add(entry.url)
        return reference

    async def _download(
        self, url: str, directory: Path, prefix: str, entry: Entry
    ) -> str:
        stem = self.create_hash(url)

        # Already on disk from a previous run, only refetched when overwriting
        if self.safe_mode and directory.exists():
            existing = sorted(directory.glob(f"{stem}*"))
            if existing:
                return f"{prefix}{existing[0].name}"

        try:
            response = await self._get(url)
        except httpx.HTTPStatusError as e:
            raise AssetFetchError(url, f"HTTP {e.response.status_code}") from e

        extension = self._get_extension(url, response.headers.get("content-type"))
        file_path = directory / f"{stem}{extension}"
        reference = f"{prefix}{file_path.name}"

        if self.verbose:
            logger.info(
                "importing_asset",
                path=str(file_path),
                url=url,
                size=len(response.content),
                dry_run=self.dry_run,
            )

        if not self.dry_run:
            if self._directory_manager is not None:
                self._directory_manager.create_directory_for_path(str(file_path))
            else:
                file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_bytes(response.content)

        self.counts["assets"] += 1
        ASSET_FETCHES.labels(status="fetched").inc()
        self._downloaded[file_path] = _DownloadedAsset(
            reference=reference, file_path=file_path, requested_by={entry.url}
        )

        if (
            not entry.is_draft
            and self._persist_manager is not None
            and self._persist_manager.can_persist()
        ):
            await self._persist_manager.persist_file(
                str(file_path), response.content, {"url": url, "type": "asset"}
            )

        return reference

    @staticmethod
    def _get_extension(url: str, content_type: str | None) -> str:
        suffix = PurePosixPath(urlparse(url).path).suffix.lower()
        if suffix in KNOWN_ASSET_EXTENSIONS:
            return suffix

        if content_type:
            mime = content_type.split(";")[0].strip()
            guessed = mimetypes.guess_extension(mime)
            if guessed:
                return guessed

        return suffix or ""

    def clean_unused(self, entries: list[Entry]) -> int:
        """Remove assets downloaded this run that no surviving entry references.

        Returns:
            Number of assets cleaned
        """
        by_url = {entry.url: entry for entry in entries}
        cleaned = 0

        for asset in list(self._downloaded.values()):
            still_used = False
            for entry_url in asset.requested_by:
                entry = by_url.get(entry_url)
                if entry is None or entry.file_path is SKIP:
                    continue
                media = (entry.media or {}).values()
                if asset.reference in entry.content or asset.reference in media:
                    still_used = True
                    break

            if still_used:
                continue

            if not self.dry_run and asset.file_path.exists():
                asset.file_path.unlink()
            del self._downloaded[asset.file_path]
            cleaned += 1

        self.counts["cleaned"] += cleaned
        return cleaned
