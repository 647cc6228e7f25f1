"""Import remote content into local markdown or html files."""

__version__ = "0.1.0"
