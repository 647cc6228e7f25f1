"""Deterministic output paths for imported entries."""

import posixpath
from urllib.parse import urlparse

from content_importer.fetcher import Fetcher
from content_importer.models import SKIP, ContentType, Entry, FilePath


def _relative(pathname: str) -> str:
    """Normalize ``pathname`` and keep it inside the folder it is joined to."""
    normalized = posixpath.normpath(pathname).lstrip("/")
    parts = normalized.split("/")
    while parts and parts[0] in ("..", "."):
        parts.pop(0)
    return "/".join(parts)


def _join(*parts: str) -> str:
    return posixpath.normpath(posixpath.join(*[p for p in parts if p]))


class PathResolver:
    """Computes where an entry is written.

    Precedence:

    1. A per-source ``filepath_format`` override. It receives the URL and the
       fallback path; ``False`` means the entry is never written, anything
       else is used as-is (it must carry its own extension).
    2. The fallback path: the source type's ``get_file_path(url)`` when
       defined, otherwise the URL path. A bare ``/`` (query-string-only URLs
       such as WordPress drafts) is replaced by a hash of the full URL.
    3. ``[output]/[drafts]/<fallback>.<md|html>``, or
       ``[output]/[drafts]/<fallback>/index.<md|html>`` when assets are
       colocated with the document.
    """

    def __init__(
        self,
        output_folder: str = ".",
        drafts_folder: str = "drafts",
        colocate: bool = False,
    ) -> None:
        self.output_folder = output_folder
        self.drafts_folder = drafts_folder
        self.colocate = colocate

    @staticmethod
    def get_fallback_path(entry: Entry) -> str:
        source_type = type(entry.source) if entry.source is not None else None
        get_file_path = getattr(source_type, "get_file_path", None)
        if callable(get_file_path):
            return get_file_path(entry.url)
        return urlparse(entry.url).path or "/"

    def resolve(self, entry: Entry, content_type: ContentType) -> FilePath:
        fallback_path = self.get_fallback_path(entry)

        # Data source specific override
        override = getattr(entry.source, "filepath_format", None)
        if callable(override):
            pathname = override(entry.url, fallback_path)
            if pathname is False:
                return SKIP
            return _join(self.output_folder, _relative(pathname))

        if fallback_path == "/":
            fallback_path = Fetcher.create_hash(entry.url)

        subdirs = [self.output_folder]
        if self.drafts_folder and entry.is_draft:
            subdirs.append(self.drafts_folder)

        # normpath drops the trailing separator of directory-like URLs,
        # /2024/my-post/ becomes 2024/my-post
        pathname = _join(*subdirs, _relative(fallback_path.replace("\\", "/")))
        extension = ".md" if content_type == ContentType.MARKDOWN else ".html"

        if self.colocate:
            return posixpath.join(pathname, f"index{extension}")
        return f"{pathname}{extension}"
