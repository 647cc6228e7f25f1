"""Content transformation: asset rewriting and markdown conversion."""

import html
import re

from bs4 import BeautifulSoup, Tag

from content_importer.fetcher import Fetcher
from content_importer.markdown import MarkdownService
from content_importer.models import ContentType, Entry

# URL attributes rewritten to local copies, per tag
ASSET_ATTRIBUTES: dict[str, tuple[str, ...]] = {
    "img": ("src", "srcset"),
    "video": ("src", "poster"),
    "source": ("src", "srcset"),
    "link": ("href",),
    "script": ("src",),
    "track": ("src",),
}

# Podcast episodes linked from anchors
AUDIO_URL_PATTERN = re.compile(r"\.(mp3|m4a|ogg|wav|flac)(\?.*)?$", re.IGNORECASE)

# Literal encoded newline found in text feeds
ENCODED_NEWLINE = "&#xA;"


class HtmlTransformer:
    """Rewrites asset URLs in an HTML document through the fetcher."""

    def __init__(self, fetcher: Fetcher) -> None:
        self.fetcher = fetcher

    async def _rewrite_srcset(self, value: str, entry: Entry) -> str:
        candidates = []
        for candidate in value.split(","):
            parts = candidate.strip().split(maxsplit=1)
            if not parts:
                continue
            url = await self.fetcher.fetch_asset(parts[0], entry)
            candidates.append(" ".join([url, *parts[1:]]))
        return ", ".join(candidates)

    async def transform(self, content: str, entry: Entry) -> str:
        soup = BeautifulSoup(content, "html.parser")

        for tag in soup.find_all(True):
            if not isinstance(tag, Tag):
                continue

            if tag.name == "a":
                href = tag.get("href")
                if isinstance(href, str) and AUDIO_URL_PATTERN.search(href):
                    tag["href"] = await self.fetcher.fetch_asset(href, entry)
                continue

            for attribute in ASSET_ATTRIBUTES.get(tag.name, ()):
                value = tag.get(attribute)
                if not isinstance(value, str) or not value.strip():
                    continue
                if attribute == "srcset":
                    tag[attribute] = await self._rewrite_srcset(value, entry)
                else:
                    tag[attribute] = await self.fetcher.fetch_asset(value.strip(), entry)

        return str(soup)


class ContentTransformer:
    """Produces the final body of a single entry."""

    def __init__(
        self,
        fetcher: Fetcher,
        markdown_service: MarkdownService,
        html_transformer: HtmlTransformer | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.markdown_service = markdown_service
        self.html_transformer = html_transformer or HtmlTransformer(fetcher)

    async def fetch_related_media(self, entry: Entry) -> None:
        """Replace every related media URL with its local reference."""
        media = entry.media
        if not media:
            return

        # Sequential per entry; entries themselves run concurrently
        for media_type, raw_url in list(media.items()):
            media[media_type] = await self.fetcher.fetch_asset(raw_url, entry)

    async def transform(self, entry: Entry, to_markdown: bool) -> str:
        content = entry.content

        if entry.is_html:
            transformed = content
            if not to_markdown:
                # Markdown conversion decodes entities on its own
                transformed = html.unescape(content)

            if not self.fetcher.download_assets:
                content = transformed
            else:
                content = await self.html_transformer.transform(transformed, entry)

        if to_markdown:
            if entry.is_text:
                content = content.replace(ENCODED_NEWLINE, "\n")

            if entry.is_html:
                await self.markdown_service.async_init()
                content = await self.markdown_service.to_markdown(content, entry)

        return content

    async def apply(self, entry: Entry, to_markdown: bool) -> Entry:
        """Resolve media and transform the body of ``entry`` in place."""
        await self.fetch_related_media(entry)

        entry.content = await self.transform(entry, to_markdown)
        if to_markdown and entry.is_html:
            entry.content_type = ContentType.MARKDOWN

        return entry
