"""Renderer-facing graph of extracted models."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from .models import Model

CARD_WIDTH = 280
FIELD_HEIGHT = 32
HEADER_HEIGHT = 44
PADDING = 8
GAP_X = 120
GAP_Y = 60


@dataclass(frozen=True)
class Edge:
    """Relationship from a model field to the model it references."""

    source: str
    target: str
    field: str

    @property
    def id(self) -> str:
        return f"{self.source}-{self.field}-{self.target}"


def layout_nodes(models: Sequence[Model]) -> List[Dict[str, Any]]:
    """Place one node per model on a square-ish grid."""
    columns = max(1, math.ceil(math.sqrt(len(models))))
    nodes: List[Dict[str, Any]] = []
    for index, model in enumerate(models):
        column = index % columns
        row = index // columns
        height = HEADER_HEIGHT + len(model.fields) * FIELD_HEIGHT + PADDING
        nodes.append(
            {
                "id": model.name,
                "type": "model",
                "position": {
                    "x": column * (CARD_WIDTH + GAP_X),
                    "y": row * (height + GAP_Y),
                },
                "data": {
                    "label": model.name,
                    "filePath": model.file_path,
                    "fields": [field.to_dict() for field in model.fields],
                },
            }
        )
    return nodes


def build_edges(models: Sequence[Model]) -> List[Edge]:
    """Return edges for refs that name a model in the same collection."""
    names = {model.name for model in models}
    edges: List[Edge] = []
    for model in models:
        for field in model.fields:
            if field.ref and field.ref in names:
                edges.append(Edge(source=model.name, target=field.ref, field=field.name))
    return edges


def build_graph(models: Sequence[Model]) -> Dict[str, List[Dict[str, Any]]]:
    return {
        "nodes": layout_nodes(models),
        "edges": [
            {"id": edge.id, "source": edge.source, "target": edge.target, "label": edge.field}
            for edge in build_edges(models)
        ],
    }


__all__ = ["Edge", "build_edges", "build_graph", "layout_nodes"]
