"""Feed based sources: RSS, Atom, YouTube, Bluesky and Fediverse."""

import calendar
from datetime import datetime, timezone
from typing import Any
from urllib.parse import parse_qs, urlparse

import feedparser

from content_importer.core.errors import ConfigurationError
from content_importer.models import Author, ContentType, Entry, EntryStatus
from content_importer.sources.base import DataSource


def _parse_date(raw: Any) -> datetime | None:
    """Published (or updated) date of a feedparser entry, in UTC."""
    parsed = raw.get("published_parsed") or raw.get("updated_parsed")
    if not parsed:
        return None
    return datetime.fromtimestamp(calendar.timegm(parsed), tz=timezone.utc)


def _parse_authors(raw: Any) -> list[Author]:
    authors: list[Author] = []
    for author in raw.get("authors") or []:
        name = author.get("name")
        if not name:
            continue
        item: Author = {"name": name}
        if author.get("href"):
            item["url"] = author["href"]
        authors.append(item)

    if not authors and raw.get("author"):
        authors.append({"name": raw["author"]})
    return authors


class FeedSource(DataSource):
    """Shared parsing for sources read through feedparser."""

    ENTRY_TYPE = "post"

    async def get_raw_entries(self) -> list[Any]:
        body = await self.fetcher.fetch_text(self.get_url())
        feed = feedparser.parse(body)
        if feed.bozo and not feed.entries:
            raise ValueError(f"Unable to parse feed {self.get_url()}: {feed.bozo_exception}")
        return list(feed.entries)

    def get_content(self, raw: Any) -> tuple[str, ContentType]:
        contents = raw.get("content") or []
        if contents:
            value = contents[0]
            mime = value.get("type", "text/html")
        else:
            value = raw.get("summary_detail") or {"value": raw.get("summary", "")}
            mime = value.get("type", "text/html")

        content_type = ContentType.TEXT if mime == "text/plain" else ContentType.HTML
        return value.get("value", ""), content_type

    def get_media(self, raw: Any) -> dict[str, str]:
        media: dict[str, str] = {}
        thumbnails = raw.get("media_thumbnail") or []
        if thumbnails and thumbnails[0].get("url"):
            media["featuredImage"] = thumbnails[0]["url"]

        for enclosure in raw.get("enclosures") or []:
            mime = enclosure.get("type", "")
            if mime.startswith("image/") and "featuredImage" not in media:
                media["featuredImage"] = enclosure.get("href", "")
            elif mime.startswith("audio/") and "audio" not in media:
                media["audio"] = enclosure.get("href", "")
        return {key: url for key, url in media.items() if url}

    def clean_entry(self, raw: Any) -> Entry:
        content, content_type = self.get_content(raw)
        url = raw.get("link", "")
        metadata: dict[str, Any] = {}
        media = self.get_media(raw)
        if media:
            metadata["media"] = media

        tags = [tag.get("term") for tag in raw.get("tags") or [] if tag.get("term")]

        return Entry(
            url=url,
            content=content,
            content_type=content_type,
            title=raw.get("title", ""),
            authors=_parse_authors(raw),
            date=_parse_date(raw),
            tags=tags or None,
            uuid=raw.get("id") or url,
            type=self.ENTRY_TYPE,
            status=EntryStatus.PUBLISHED,
            metadata=metadata,
        )


class Rss(FeedSource):
    TYPE = "rss"
    TYPE_FRIENDLY = "RSS"


class Atom(FeedSource):
    TYPE = "atom"
    TYPE_FRIENDLY = "Atom"


class YouTubeUser(FeedSource):
    """Videos of a YouTube channel, by channel id."""

    TYPE = "youtubeuser"
    TYPE_FRIENDLY = "YouTube"
    ENTRY_TYPE = "video"

    @staticmethod
    def get_file_path(url: str) -> str:
        # Every video lives at /watch, the id is in the query string
        video_id = parse_qs(urlparse(url).query).get("v", [""])[0]
        if not video_id:
            return urlparse(url).path
        return f"/{video_id}/"

    def get_url(self) -> str:
        return f"https://www.youtube.com/feeds/videos.xml?channel_id={self.identifier}"

    def get_content(self, raw: Any) -> tuple[str, ContentType]:
        return raw.get("media_description") or raw.get("summary", ""), ContentType.TEXT


class BlueskyUser(FeedSource):
    """Posts of a Bluesky account, through its profile RSS feed."""

    TYPE = "bluesky"
    TYPE_FRIENDLY = "Bluesky"
    ENTRY_TYPE = "social"

    def get_url(self) -> str:
        handle = self.identifier.lstrip("@")
        return f"https://bsky.app/profile/{handle}/rss"

    def get_content(self, raw: Any) -> tuple[str, ContentType]:
        return raw.get("summary", ""), ContentType.TEXT


class FediverseUser(FeedSource):
    """Posts of a Mastodon compatible account, e.g. ``@user@instance.social``."""

    TYPE = "fediverse"
    TYPE_FRIENDLY = "Fediverse"
    ENTRY_TYPE = "social"

    def __init__(self, identifier: str) -> None:
        super().__init__(identifier)
        if not identifier.startswith(("http://", "https://")):
            _, _, host = identifier.lstrip("@").partition("@")
            if not host:
                raise ConfigurationError(
                    f"Expected a fediverse account as @user@host, received {identifier!r}"
                )

    def get_url(self) -> str:
        if self.identifier.startswith(("http://", "https://")):
            return self.identifier
        username, _, host = self.identifier.lstrip("@").partition("@")
        return f"https://{host}/@{username}.rss"
