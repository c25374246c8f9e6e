"""Field parsing for schema object literals."""

from __future__ import annotations

import re
from typing import List, Optional

from ..models import Field, FieldType
from .blocks import split_top_level

_ENTRY = re.compile(r"^['\"]?(\w+)['\"]?\s*:\s*(.+)$", re.DOTALL)
_LEADING_COMMENTS = re.compile(r"^(?:\s*(?://[^\n]*|/\*.*?\*/))+\s*", re.DOTALL)

_TYPE_ATTR = re.compile(r"\btype\s*:\s*\[?\s*(\w+(?:\.\w+){0,3})")
_ARRAY_TYPE_ATTR = re.compile(r"\btype\s*:\s*\[")
_REF_ATTR = re.compile(r"\bref\s*:\s*['\"]([^'\"]+)['\"]")
_REQUIRED_ATTR = re.compile(r"\brequired\s*:\s*\[?\s*true\b")
_DEFAULT_ATTR = re.compile(r"\bdefault\s*:\s*(?:['\"]([^'\"]*)['\"]|(-?\w[\w.]*))")
_ENUM_ATTR = re.compile(r"\benum\s*:\s*\[([^\]]+)\]")


def parse_fields(body: str) -> List[Field]:
    """Parse the top-level ``key: value`` entries of an object literal body."""
    fields: List[Field] = []
    for entry in split_top_level(body):
        entry = _LEADING_COMMENTS.sub("", entry)
        match = _ENTRY.match(entry)
        if not match:
            continue
        field = parse_field_value(match.group(2))
        field.name = match.group(1)
        fields.append(field)
    return fields


def parse_field_value(value: str) -> Field:
    """Classify a field value; unknown shapes fall back to ``Mixed``."""
    trimmed = _strip_trailing_comment(value.strip())

    known = FieldType.lookup(trimmed)
    if known is not None:
        return Field(name="", type=known)

    if trimmed.startswith("[") and trimmed.endswith("]"):
        inner = trimmed[1:-1].strip()
        inner_type = FieldType.lookup(inner)
        if inner_type is not None:
            return Field(name="", type=inner_type, is_array=True)
        if inner.startswith("{"):
            field = parse_field_object(inner)
            field.is_array = True
            return field
        return Field(name="", is_array=True)

    if trimmed.startswith("{"):
        return parse_field_object(trimmed)

    return Field(name="")


def parse_field_object(text: str) -> Field:
    """Inspect an object-literal field definition for its attributes.

    Each attribute pattern runs independently over the whole literal, so attributes of a
    nested object surface on the field itself rather than being expanded.
    """
    field = Field(name="")

    type_match = _TYPE_ATTR.search(text)
    if type_match:
        field.type = FieldType.coerce(type_match.group(1))
    if _ARRAY_TYPE_ATTR.search(text):
        field.is_array = True

    ref_match = _REF_ATTR.search(text)
    if ref_match:
        field.ref = ref_match.group(1)
        if type_match is None:
            field.type = FieldType.OBJECT_ID

    if _REQUIRED_ATTR.search(text):
        field.required = True

    default_match = _DEFAULT_ATTR.search(text)
    if default_match:
        quoted, bare = default_match.groups()
        field.default_value = quoted if quoted is not None else bare

    field.enum_values = _parse_enum(text)
    return field


def _strip_trailing_comment(value: str) -> str:
    """Drop a ``//`` comment on the last line unless it sits inside a string literal."""
    line_start = value.rfind("\n") + 1
    last_line = value[line_start:]
    quote: Optional[str] = None
    escaped = False
    for index, char in enumerate(last_line):
        if quote is not None:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = None
        elif char in "'\"`":
            quote = char
        elif last_line.startswith("//", index):
            return (value[:line_start] + last_line[:index]).rstrip()
    return value


def _parse_enum(text: str) -> Optional[List[str]]:
    match = _ENUM_ATTR.search(text)
    if not match:
        return None
    values = [item.strip().strip("'\"").strip() for item in match.group(1).split(",")]
    return [item for item in values if item]


__all__ = ["parse_field_object", "parse_field_value", "parse_fields"]
