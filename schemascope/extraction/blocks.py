"""Schema block discovery and top-level entry splitting.

Every helper is a single linear pass. The input is untrusted source text, so
nothing recurses and nothing raises on unbalanced brackets.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterator, List

# Type arguments such as <IUser> or <IUser, Model<IUser>>, bounded in length.
GENERIC_ARGS = r"(?:<(?:[^<>]|<[^<>]{0,100}>){0,200}>)?"

SCHEMA_CONSTRUCTOR = re.compile(
    r"\bnew\s+(?:mongoose\.)?Schema\s*" + GENERIC_ARGS + r"\s*\(\s*\{"
)

_BRACES = re.compile(r"[{}]")
_OPENERS = "{[("
_CLOSERS = "}])"


@dataclass(frozen=True)
class SchemaBlock:
    """Object literal passed to a schema constructor."""

    start: int
    text: str

    @property
    def body(self) -> str:
        """Contents between the outer braces."""
        return self.text[1:-1]


def brace_pairs(text: str, start: int = 0) -> Dict[int, int]:
    """Map the index of every balanced ``{`` from ``start`` to its closing ``}``.

    Openers that are never closed are left out; stray closers are ignored.
    """
    pairs: Dict[int, int] = {}
    stack: List[int] = []
    for match in _BRACES.finditer(text, start):
        if match.group() == "{":
            stack.append(match.start())
        elif stack:
            pairs[stack.pop()] = match.start()
    return pairs


def match_braces(text: str, open_index: int) -> int:
    """Return the index of the ``}`` closing the ``{`` at ``open_index``, or -1."""
    return brace_pairs(text, open_index).get(open_index, -1)


def iter_schema_blocks(content: str) -> Iterator[SchemaBlock]:
    """Yield every balanced ``new Schema({...})`` object literal in order."""
    pairs: Dict[int, int] | None = None
    for match in SCHEMA_CONSTRUCTOR.finditer(content):
        if pairs is None:
            pairs = brace_pairs(content)
        brace_start = match.end() - 1
        brace_end = pairs.get(brace_start)
        if brace_end is None:
            continue
        yield SchemaBlock(start=match.start(), text=content[brace_start : brace_end + 1])


def split_top_level(body: str) -> List[str]:
    """Split ``body`` on commas that sit outside any bracket, brace or paren."""
    entries: List[str] = []
    depth = 0
    current: List[str] = []
    for char in body:
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth -= 1
        elif char == "," and depth == 0:
            entries.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    tail = "".join(current).strip()
    if tail:
        entries.append(tail)
    return entries


__all__ = [
    "GENERIC_ARGS",
    "SCHEMA_CONSTRUCTOR",
    "SchemaBlock",
    "brace_pairs",
    "iter_schema_blocks",
    "match_braces",
    "split_top_level",
]
