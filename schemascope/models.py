"""Core data models shared across schemascope components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

_TYPE_PREFIXES = (
    "mongoose.Schema.Types.",
    "mongoose.Types.",
    "mongoose.",
    "Schema.Types.",
    "Schema.",
    "Types.",
)


class FieldType(str, Enum):
    """Schema type tags understood by the extractor."""

    STRING = "String"
    NUMBER = "Number"
    BOOLEAN = "Boolean"
    DATE = "Date"
    BUFFER = "Buffer"
    OBJECT_ID = "ObjectId"
    MIXED = "Mixed"
    MAP = "Map"
    DECIMAL128 = "Decimal128"
    UUID = "UUID"
    BIG_INT = "BigInt"

    @staticmethod
    def normalize(raw: str) -> str:
        """Strip namespace prefixes such as ``Schema.Types.``."""
        value = raw.strip()
        for prefix in _TYPE_PREFIXES:
            if value.startswith(prefix):
                return value[len(prefix):]
        return value

    @classmethod
    def lookup(cls, raw: str) -> Optional["FieldType"]:
        """Return the tag for ``raw`` or None when it is not a known spelling."""
        try:
            return cls(cls.normalize(raw))
        except ValueError:
            return None

    @classmethod
    def coerce(cls, raw: str) -> "FieldType":
        """Return the tag for ``raw``, falling back to ``Mixed``."""
        return cls.lookup(raw) or cls.MIXED


@dataclass(frozen=True)
class SourceFile:
    """A file path with its decoded text content."""

    path: str
    content: str

    @property
    def base_name(self) -> str:
        return self.path.rsplit("/", 1)[-1]


@dataclass(frozen=True)
class TreeEntry:
    """One entry of a repository tree listing."""

    path: str
    entry_type: str = "file"

    @property
    def is_file(self) -> bool:
        return self.entry_type == "file"


@dataclass
class Field:
    """One named, typed attribute of a model."""

    name: str
    type: FieldType = FieldType.MIXED
    required: bool = False
    is_array: bool = False
    ref: Optional[str] = None
    default_value: Optional[str] = None
    enum_values: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "type": self.type.value,
            "required": self.required,
            "isArray": self.is_array,
        }
        if self.ref is not None:
            data["ref"] = self.ref
        if self.default_value is not None:
            data["defaultValue"] = self.default_value
        if self.enum_values is not None:
            data["enumValues"] = list(self.enum_values)
        return data

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Field":
        enum_values = payload.get("enumValues")
        return cls(
            name=str(payload.get("name", "")),
            type=FieldType.coerce(str(payload.get("type", ""))),
            required=bool(payload.get("required", False)),
            is_array=bool(payload.get("isArray", False)),
            ref=payload.get("ref"),
            default_value=payload.get("defaultValue"),
            enum_values=list(enum_values) if isinstance(enum_values, list) else None,
        )


@dataclass
class Model:
    """A named entity with an ordered list of fields."""

    name: str
    file_path: str
    fields: List[Field] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "filePath": self.file_path,
            "fields": [item.to_dict() for item in self.fields],
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Model":
        raw_fields = payload.get("fields")
        fields = [
            Field.from_dict(item)
            for item in (raw_fields if isinstance(raw_fields, list) else [])
            if isinstance(item, Mapping)
        ]
        return cls(
            name=str(payload.get("name", "")),
            file_path=str(payload.get("filePath", "")),
            fields=fields,
        )


@dataclass
class ScanResult:
    """Outcome of one repository scan."""

    supported: bool
    models: List[Model] = field(default_factory=list)
    message: Optional[str] = None

    @property
    def found(self) -> bool:
        return bool(self.models)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "supported": self.supported,
            "models": [model.to_dict() for model in self.models],
        }
        if self.message:
            data["message"] = self.message
        return data


__all__ = [
    "Field",
    "FieldType",
    "Model",
    "ScanResult",
    "SourceFile",
    "TreeEntry",
]
