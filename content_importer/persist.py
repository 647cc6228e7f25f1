"""Secondary persistence of imported files to a GitHub repository."""

import base64
import posixpath
import re
from dataclasses import dataclass
from typing import Any

import httpx

from content_importer.core.config import settings
from content_importer.core.errors import ConfigurationError
from content_importer.core.logging import get_logger

logger = get_logger(__name__)

_TARGET_PATTERN = re.compile(
    r"^github:(?P<owner>[\w.-]+)/(?P<repo>[\w.-]+)(?:#(?P<branch>[\w./-]+))?$"
)


@dataclass(frozen=True)
class PersistTarget:
    """Repository files are committed to."""

    owner: str
    repo: str
    branch: str | None = None

    @classmethod
    def parse(cls, value: str) -> "PersistTarget":
        """Parse ``github:owner/repo`` with an optional ``#branch``.

        Raises:
            ConfigurationError: If the target is not a supported persist target
        """
        match = _TARGET_PATTERN.match(value.strip())
        if not match:
            raise ConfigurationError(
                f"Invalid persist target: {value!r}. Expected github:owner/repo "
                "or github:owner/repo#branch"
            )
        return cls(
            owner=match.group("owner"),
            repo=match.group("repo"),
            branch=match.group("branch"),
        )


class Persist:
    """Commits written documents and assets through the GitHub contents API."""

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self.verbose = True
        self.target: PersistTarget | None = None
        self.token = settings.GITHUB_TOKEN
        self.counts = {"persist": 0}
        self._client = client

    def set_verbose(self, verbose: bool) -> None:
        self.verbose = bool(verbose)

    def set_target(self, target: str) -> None:
        self.target = PersistTarget.parse(target)

    def can_persist(self) -> bool:
        return self.target is not None and bool(self.token)

    def get_counts(self) -> dict[str, int]:
        return dict(self.counts)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=settings.GITHUB_API_URL,
                headers={
                    "Accept": "application/vnd.github+json",
                    "Authorization": f"Bearer {self.token}",
                    "User-Agent": settings.app_name,
                },
                timeout=settings.FETCH_TIMEOUT,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _get_existing_sha(
        self, target: PersistTarget, endpoint: str
    ) -> str | None:
        params = {"ref": target.branch} if target.branch else None
        response = await self._get_client().get(endpoint, params=params)
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.json().get("sha")

    async def persist_file(
        self, path: str, content: str | bytes, metadata: dict[str, Any]
    ) -> None:
        """Create or update ``path`` in the target repository.

        Raises:
            httpx.HTTPError: If the GitHub API rejects the request
        """
        target = self.target
        if target is None or not self.can_persist():
            return

        repo_path = posixpath.normpath(path).lstrip("/")
        endpoint = f"/repos/{target.owner}/{target.repo}/contents/{repo_path}"

        raw = content.encode("utf-8") if isinstance(content, str) else content
        payload: dict[str, Any] = {
            "message": f"Import {metadata.get('type', 'file')}: {metadata.get('url', repo_path)}",
            "content": base64.b64encode(raw).decode("ascii"),
        }
        if target.branch:
            payload["branch"] = target.branch

        sha = await self._get_existing_sha(target, endpoint)
        if sha:
            payload["sha"] = sha

        response = await self._get_client().put(endpoint, json=payload)
        response.raise_for_status()

        self.counts["persist"] += 1
        if self.verbose:
            logger.info(
                "persisted",
                path=repo_path,
                url=metadata.get("url"),
                repo=f"{target.owner}/{target.repo}",
            )
