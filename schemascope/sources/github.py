"""Repository source backed by the GitHub REST API."""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any, Callable, List, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from ..logging import get_logger
from ..models import TreeEntry
from .base import SourceError

DEFAULT_API_URL = "https://api.github.com"

_ENTRY_TYPES = {"blob": "file", "tree": "dir"}


class GitHubRepositorySource:
    """Reads a repository through the Trees and Contents endpoints.

    One HTTP request is issued per fetched file, which is why callers bound
    the number of fetched paths.
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        *,
        branch: str = "main",
        token: Optional[str] = None,
        api_url: str = DEFAULT_API_URL,
        request_timeout: float = 30.0,
        opener: Callable[..., Any] | None = None,
    ) -> None:
        self.owner = owner
        self.repo = repo
        self.branch = branch
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.request_timeout = request_timeout
        self._opener = opener or urlopen
        self.logger = get_logger("sources.github")

    @classmethod
    def from_slug(cls, slug: str, **kwargs: Any) -> "GitHubRepositorySource":
        """Build a source from ``owner/repo``."""
        owner, sep, repo = slug.strip().strip("/").partition("/")
        if not sep or not owner or not repo or "/" in repo:
            raise ValueError(f"Expected OWNER/REPO, got '{slug}'")
        return cls(owner, repo, **kwargs)

    @property
    def identity(self) -> str:
        return f"{self.owner}/{self.repo}@{self.branch}"

    def list_tree(self) -> List[TreeEntry]:
        url = (
            f"{self.api_url}/repos/{self.owner}/{self.repo}/git/trees/"
            f"{quote(self.branch, safe='')}?recursive=1"
        )
        try:
            payload = self._get_json(url)
        except HTTPError as exc:
            raise SourceError(f"GitHub API error: {exc.code}") from exc
        except URLError as exc:
            raise SourceError(f"GitHub API unreachable: {exc.reason}") from exc
        except (OSError, ValueError) as exc:
            raise SourceError(f"GitHub tree request failed: {exc}") from exc

        if not isinstance(payload, dict):
            raise SourceError("GitHub API returned an unexpected tree payload")
        if payload.get("truncated"):
            self.logger.warning("Tree listing for %s was truncated by GitHub", self.identity)

        entries: List[TreeEntry] = []
        for item in payload.get("tree") or []:
            if not isinstance(item, dict):
                continue
            path = item.get("path")
            entry_type = _ENTRY_TYPES.get(str(item.get("type")))
            if isinstance(path, str) and entry_type:
                entries.append(TreeEntry(path=path, entry_type=entry_type))
        return entries

    def fetch(self, path: str) -> str:
        url = (
            f"{self.api_url}/repos/{self.owner}/{self.repo}/contents/"
            f"{quote(path)}?ref={quote(self.branch, safe='')}"
        )
        try:
            payload = self._get_json(url)
        except (OSError, ValueError) as exc:
            self.logger.debug("Failed to fetch %s: %s", path, exc)
            return ""
        return decode_content(payload)

    def _get_json(self, url: str) -> Any:
        headers = {"Accept": "application/vnd.github.v3+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        request = Request(url, headers=headers, method="GET")
        with self._opener(request, timeout=self.request_timeout) as response:
            raw = response.read()
        return json.loads(raw.decode("utf-8"))


def decode_content(payload: Any) -> str:
    """Decode a Contents API payload; anything unexpected yields ``""``."""
    if not isinstance(payload, dict):
        return ""
    content = payload.get("content")
    if payload.get("encoding") != "base64" or not isinstance(content, str) or not content:
        return ""
    try:
        return base64.b64decode(content).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return ""


__all__ = ["DEFAULT_API_URL", "GitHubRepositorySource", "decode_content"]
