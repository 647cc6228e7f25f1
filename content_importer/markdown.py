"""HTML to markdown conversion."""

from bs4 import BeautifulSoup, Tag
from markdownify import MarkdownConverter

from content_importer.core.logging import get_logger
from content_importer.models import Entry

logger = get_logger(__name__)

# Placeholder for preserved HTML; letters and digits only so the converter
# leaves it unescaped
_PLACEHOLDER = "CONTENTIMPORTERPRESERVED{index}X"


class MarkdownService:
    """Converts HTML bodies to markdown, passing preserved selectors through."""

    def __init__(self) -> None:
        self.verbose = True
        self.preserved_selectors: list[str] = []
        self.counts = {"conversions": 0}
        self._converter: MarkdownConverter | None = None

    def set_verbose(self, verbose: bool) -> None:
        self.verbose = bool(verbose)

    def add_preserved_selector(self, selector: str) -> None:
        """Keep the HTML of elements matching a CSS selector unconverted."""
        selector = selector.strip()
        if selector and selector not in self.preserved_selectors:
            self.preserved_selectors.append(selector)

    def get_counts(self) -> dict[str, int]:
        return dict(self.counts)

    async def async_init(self) -> MarkdownConverter:
        """Create the shared converter. Safe to call for every entry."""
        if self._converter is None:
            self._converter = MarkdownConverter(
                heading_style="ATX",
                bullets="-",
                code_language="",
                escape_misc=False,
            )
        return self._converter

    def _preserve(self, soup: BeautifulSoup) -> dict[str, str]:
        preserved: dict[str, str] = {}
        replaced: set[int] = set()

        for selector in self.preserved_selectors:
            for element in soup.select(selector):
                # Already kept as part of a preserved ancestor
                if any(id(parent) in replaced for parent in element.parents):
                    continue
                if not isinstance(element, Tag) or element.parent is None:
                    continue

                token = _PLACEHOLDER.format(index=len(preserved))
                preserved[token] = str(element)
                replaced.add(id(element))
                element.replace_with(token)

        return preserved

    async def to_markdown(self, content: str, entry: Entry) -> str:
        converter = await self.async_init()

        soup = BeautifulSoup(content, "html.parser")
        preserved = self._preserve(soup)

        markdown = converter.convert_soup(soup)
        for token, html in preserved.items():
            markdown = markdown.replace(token, html)

        self.counts["conversions"] += 1
        if self.verbose:
            logger.debug("converted_to_markdown", url=entry.url, preserved=len(preserved))

        return markdown.strip() + "\n"

    def cleanup(self) -> None:
        """Release the shared converter."""
        self._converter = None
