"""Repository tree and content providers."""

from .base import RepositorySource, SourceError
from .github import GitHubRepositorySource
from .local import LocalRepositorySource

__all__ = [
    "GitHubRepositorySource",
    "LocalRepositorySource",
    "RepositorySource",
    "SourceError",
]
