"""Importer exceptions."""


class ImporterError(Exception):
    """Base class for errors raised by the importer."""


class ConfigurationError(ImporterError):
    """Raised at setup time for unsupported options."""


class PathConflictError(ImporterError):
    """Raised when two entries resolve to the same output path."""

    def __init__(self, path: str, first_url: str, second_url: str) -> None:
        self.path = path
        self.first_url = first_url
        self.second_url = second_url
        super().__init__(
            f"Multiple entries attempted to write to the same place: {path} "
            f"(originally via {first_url}, conflicting with {second_url})"
        )


class AssetFetchError(ImporterError):
    """Raised by the fetcher when an asset cannot be downloaded."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Unable to fetch asset {url}: {reason}")
