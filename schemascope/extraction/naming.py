"""Model name resolution for schema blocks.

Names come from three sources, in decreasing order of confidence: an explicit
``model('Name', schemaVar)`` registration, the ``fooSchema`` naming
convention of the binding variable, and finally the file name. All of it is
regex-based and best effort.
"""

from __future__ import annotations

import re
from typing import Dict, Optional

from .blocks import GENERIC_ARGS

_REGISTRATION = re.compile(
    r"\b(?:mongoose\.)?model\s*" + GENERIC_ARGS
    + r"\s*\(\s*['\"]([^'\"]+)['\"]\s*,\s*(\w+)"
)
_ASSIGNMENT = re.compile(
    r"\b(?:const|let|var|export)\s+(\w+)\s*=\s*(?:mongoose\.)?model\s*" + GENERIC_ARGS
    + r"\s*\(\s*['\"]([^'\"]+)['\"]"
)
_BINDING = re.compile(
    r"\b(?:const|let|var|export\s+(?:const|let|var)?)\s+(\w+)"
    r"(?:\s*:\s*[\w.<>\[\]|, ]+?)?\s*=\s*$"
)
_SCHEMA_SUFFIX = re.compile(r"schema$", re.IGNORECASE)
_SOURCE_EXTENSION = re.compile(r"\.(?:ts|js|tsx|jsx|mjs|cjs)$")

DEFAULT_LOOKBACK = 200


def index_declarations(content: str) -> Dict[str, str]:
    """Map schema or model variable identifiers to registered model names.

    Later declarations overwrite earlier ones for the same identifier.
    """
    declarations: Dict[str, str] = {}
    for match in _REGISTRATION.finditer(content):
        declarations[match.group(2)] = match.group(1)
    for match in _ASSIGNMENT.finditer(content):
        declarations[match.group(1)] = match.group(2)
    return declarations


def find_binding(content: str, block_start: int, lookback: int = DEFAULT_LOOKBACK) -> Optional[str]:
    """Return the variable bound to the expression starting at ``block_start``."""
    window = content[max(0, block_start - lookback) : block_start]
    match = _BINDING.search(window)
    return match.group(1) if match else None


def _capitalize(value: str) -> str:
    return value[:1].upper() + value[1:]


def name_from_variable(variable: str) -> Optional[str]:
    """``userSchema`` becomes ``User``; a bare ``schema`` yields None."""
    stem = _SCHEMA_SUFFIX.sub("", variable)
    return _capitalize(stem) if stem else None


def name_from_path(path: str) -> str:
    base = path.rsplit("/", 1)[-1]
    return _capitalize(_SOURCE_EXTENSION.sub("", base))


def resolve_model_name(
    content: str,
    block_start: int,
    declarations: Dict[str, str],
    path: str,
    *,
    lookback: int = DEFAULT_LOOKBACK,
) -> str:
    variable = find_binding(content, block_start, lookback)
    if variable:
        if variable in declarations:
            return declarations[variable]
        derived = name_from_variable(variable)
        if derived:
            return derived
    return name_from_path(path)


__all__ = [
    "DEFAULT_LOOKBACK",
    "find_binding",
    "index_declarations",
    "name_from_path",
    "name_from_variable",
    "resolve_model_name",
]
