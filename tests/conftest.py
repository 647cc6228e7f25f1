"""Test configuration."""

from collections.abc import Generator
from pathlib import Path
from typing import List

import pytest
from pytest import Config

from content_importer.core.config import settings
from content_importer.core.logging import configure_logging

fixture = pytest.fixture


@fixture(scope="session")
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


pytest_plugins: List[str] = [
    "tests.fixtures.sources",
    "tests.fixtures.importer",
]


@fixture(autouse=True)
def isolated_cache(tmp_path: Path) -> Generator[Path, None, None]:
    """Keep the fetch cache of every test in its own temporary directory."""
    cache_dir = tmp_path / ".cache"
    original = settings.CACHE_DIRECTORY
    settings.CACHE_DIRECTORY = str(cache_dir)

    yield cache_dir

    settings.CACHE_DIRECTORY = original


@fixture
def output_dir(tmp_path: Path) -> Path:
    """Output folder for written documents."""
    path = tmp_path / "out"
    path.mkdir()
    return path


def pytest_configure(config: Config) -> None:
    """Configure pytest.

    Args:
        config: Pytest configuration object
    """
    # Configure logging for test environment
    configure_logging(testing=True)
