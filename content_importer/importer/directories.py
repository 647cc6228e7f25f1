"""Run-scoped cache of created output directories."""

import os


class DirectoryManager:
    """Creates parent directories for output files at most once per run."""

    @staticmethod
    def get_directory(pathname: str) -> str:
        """Parent directory of ``pathname``, or ``""`` for the filesystem root."""
        directory = os.path.dirname(pathname)
        if directory in ("/", "\\"):
            return ""
        return directory

    def __init__(self) -> None:
        self.created: set[str] = set()
        self.dry_run = False

    def set_dry_run(self, dry_run: bool) -> None:
        self.dry_run = bool(dry_run)

    def create_directory_for_path(self, pathname: str) -> None:
        if self.dry_run:
            return

        directory = self.get_directory(pathname)
        if directory and directory not in self.created:
            os.makedirs(directory, exist_ok=True)
            self.created.add(directory)
