"""Heuristic extraction of Mongoose-style schema declarations."""

from .engine import NameRegistry, SchemaExtractor, extract_models
from .fields import parse_field_value, parse_fields

__all__ = [
    "NameRegistry",
    "SchemaExtractor",
    "extract_models",
    "parse_field_value",
    "parse_fields",
]
