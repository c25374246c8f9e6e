"""Repository source backed by a directory on disk."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, List, Optional

from ..models import TreeEntry
from .base import SourceError

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    ".next",
    "node_modules",
    "__pycache__",
    "bower_components",
}


@dataclass(frozen=True)
class _IgnorePattern:
    glob: str
    negated: bool
    dir_only: bool
    # Patterns containing a slash match the whole relative path, others only the entry name.
    rooted: bool

    @classmethod
    def parse(cls, line: str) -> Optional["_IgnorePattern"]:
        line = line.strip()
        if not line or line.startswith("#"):
            return None
        negated = line.startswith("!")
        if negated:
            line = line[1:]
        dir_only = line.endswith("/")
        line = line.rstrip("/")
        rooted = "/" in line
        line = line.lstrip("/")
        if not line:
            return None
        return cls(glob=line, negated=negated, dir_only=dir_only, rooted=rooted)

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if self.dir_only and not is_dir:
            return False
        target = rel_path if self.rooted else rel_path.rsplit("/", 1)[-1]
        return fnmatchcase(target, self.glob)


class IgnoreRules:
    """A subset of .gitignore semantics; the last matching pattern decides.

    Ignored directories are expected to be pruned by the caller, so their
    contents are never tested.
    """

    def __init__(self, lines: Iterable[str] = ()) -> None:
        self._patterns = [
            pattern for pattern in map(_IgnorePattern.parse, lines) if pattern is not None
        ]

    @classmethod
    def for_root(cls, root: Path, extra: Iterable[str] = ()) -> "IgnoreRules":
        """Read ``root/.gitignore`` (if readable) followed by ``extra`` patterns."""
        try:
            lines = (root / ".gitignore").read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError):
            lines = []
        return cls([*lines, *extra])

    def ignores(self, rel_path: str, is_dir: bool) -> bool:
        ignored = False
        for pattern in self._patterns:
            if pattern.matches(rel_path, is_dir):
                ignored = not pattern.negated
        return ignored


class LocalRepositorySource:
    """Lists and reads files of a local checkout, honouring .gitignore."""

    def __init__(self, root: str | Path, *, exclude_paths: Iterable[str] = ()) -> None:
        self.root = Path(root).expanduser().resolve()
        self._extra_excludes = list(exclude_paths)

    @property
    def identity(self) -> str:
        return str(self.root)

    def list_tree(self) -> List[TreeEntry]:
        """Return directories and files in deterministic walk order."""
        if not self.root.exists():
            raise SourceError(f"Repository path not found: {self.root}")
        if not self.root.is_dir():
            raise SourceError(f"Repository path is not a directory: {self.root}")

        rules = IgnoreRules.for_root(self.root, self._extra_excludes)
        entries: List[TreeEntry] = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            rel_dir = Path(dirpath).relative_to(self.root).as_posix()
            prefix = "" if rel_dir == "." else f"{rel_dir}/"

            kept_dirs = []
            for name in sorted(dirnames):
                rel_path = prefix + name
                if name in _EXCLUDED_DIRS or rules.ignores(rel_path, True):
                    continue
                kept_dirs.append(name)
                entries.append(TreeEntry(path=rel_path, entry_type="dir"))
            dirnames[:] = kept_dirs

            entries.extend(
                TreeEntry(path=prefix + name, entry_type="file")
                for name in sorted(filenames)
                if not rules.ignores(prefix + name, False)
            )
        return entries

    def fetch(self, path: str) -> str:
        """Return UTF-8 content for ``path``; unreadable or binary files yield ``""``."""
        target = (self.root / path).resolve()
        if not target.is_relative_to(self.root) or not target.is_file():
            return ""
        try:
            return target.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError):
            return ""


__all__ = ["IgnoreRules", "LocalRepositorySource"]
