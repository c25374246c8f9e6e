"""Infer Mongoose model graphs from repository sources."""

from .extraction import NameRegistry, SchemaExtractor, extract_models
from .models import Field, FieldType, Model, ScanResult, SourceFile, TreeEntry
from .pipeline import ScanPipeline
from .selector import CandidateSelector, Selection, has_schema_content

__all__ = [
    "CandidateSelector",
    "Field",
    "FieldType",
    "Model",
    "NameRegistry",
    "ScanPipeline",
    "ScanResult",
    "SchemaExtractor",
    "Selection",
    "SourceFile",
    "TreeEntry",
    "extract_models",
    "has_schema_content",
]
