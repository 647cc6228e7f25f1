"""WordPress REST API source."""

from datetime import datetime, timezone
from typing import Any

import httpx

from content_importer.models import Author, ContentType, Entry, EntryStatus
from content_importer.sources.base import DataSource

# Maximum page size accepted by the WordPress REST API
PER_PAGE = 100

# Guard against sites that ignore the page parameter
MAX_PAGES = 100


class WordPressApi(DataSource):
    """Posts of a WordPress site, read from ``/wp-json/wp/v2/posts``."""

    TYPE = "wordpress"
    TYPE_FRIENDLY = "WordPress"

    def get_url(self) -> str:
        return self.get_page_url(1)

    def get_page_url(self, page: int) -> str:
        base = self.identifier.rstrip("/")
        return f"{base}/wp-json/wp/v2/posts?per_page={PER_PAGE}&page={page}&_embed"

    async def get_raw_entries(self) -> list[dict[str, Any]]:
        posts: list[dict[str, Any]] = []

        for page in range(1, MAX_PAGES + 1):
            try:
                batch = await self.fetcher.fetch_json(self.get_page_url(page))
            except httpx.HTTPStatusError as e:
                # WordPress answers 400 once past the last page
                if e.response.status_code == 400 and page > 1:
                    break
                raise

            if not isinstance(batch, list):
                raise ValueError(f"Unexpected WordPress response from {self.get_page_url(page)}")

            posts.extend(batch)
            if len(batch) < PER_PAGE:
                break

        return posts

    @staticmethod
    def _parse_date(post: dict[str, Any]) -> datetime | None:
        value = post.get("date_gmt") or post.get("date")
        if not value:
            return None
        return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)

    @staticmethod
    def _parse_authors(post: dict[str, Any]) -> list[Author]:
        authors: list[Author] = []
        for author in post.get("_embedded", {}).get("author", []):
            if not author.get("name"):
                continue
            item: Author = {"name": author["name"]}
            if author.get("link"):
                item["url"] = author["link"]
            avatars = author.get("avatar_urls") or {}
            if avatars:
                # Largest size has the highest key
                item["avatar_url"] = avatars[max(avatars, key=int)]
            authors.append(item)
        return authors

    @staticmethod
    def _parse_terms(post: dict[str, Any]) -> list[str]:
        names: list[str] = []
        for taxonomy in post.get("_embedded", {}).get("wp:term", []):
            for term in taxonomy:
                if term.get("taxonomy") in ("category", "post_tag") and term.get("name"):
                    names.append(term["name"])
        return names

    def clean_entry(self, raw: dict[str, Any]) -> Entry:
        metadata: dict[str, Any] = {}
        featured = raw.get("_embedded", {}).get("wp:featuredmedia") or []
        if featured and featured[0].get("source_url"):
            metadata["media"] = {"featuredImage": featured[0]["source_url"]}

        status = EntryStatus.DRAFT if raw.get("status") == "draft" else EntryStatus.PUBLISHED

        return Entry(
            url=raw.get("link", ""),
            content=(raw.get("content") or {}).get("rendered", ""),
            content_type=ContentType.HTML,
            title=(raw.get("title") or {}).get("rendered", ""),
            authors=self._parse_authors(raw),
            date=self._parse_date(raw),
            tags=self._parse_terms(raw) or None,
            uuid=(raw.get("guid") or {}).get("rendered", "") or str(raw.get("id", "")),
            type="post",
            status=status,
            metadata=metadata,
        )
