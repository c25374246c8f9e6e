"""Persistence helpers for schemascope."""

from .diagram_store import DiagramNotFoundError, DiagramRecord, DiagramStore

__all__ = ["DiagramNotFoundError", "DiagramRecord", "DiagramStore"]
