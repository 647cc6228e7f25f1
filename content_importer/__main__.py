"""Main entry point for running the importer as a module."""

from content_importer.cli import main

if __name__ == "__main__":
    main()
