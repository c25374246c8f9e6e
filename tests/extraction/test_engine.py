"""Tests for per-file extraction and cross-file merging."""

from __future__ import annotations

import time

from schemascope.extraction import NameRegistry, SchemaExtractor, extract_models
from schemascope.models import FieldType, SourceFile

DIAGRAM_MODEL = """
import mongoose, { Schema, Document, Model } from 'mongoose';

export interface IFieldDef {
    name: string;
    type: string;
}

const FieldDefSchema = new Schema<IFieldDef>(
    {
        name: { type: String, required: true },
        type: { type: String, required: true },
        required: { type: Boolean, default: false },
        ref: { type: String },
        enumValues: [{ type: String }],
    },
    { _id: false }
);

const DiagramSchema = new Schema<IDiagram>(
    {
        repositoryId: {
            type: Schema.Types.ObjectId,
            ref: 'Repository',
            required: true,
            index: true,
        },
        models: [FieldDefSchema],
    },
    { timestamps: true }
);

const Diagram: Model<IDiagram> =
    mongoose.models.Diagram ||
    mongoose.model<IDiagram>('Diagram', DiagramSchema);

export default Diagram;
"""


def test_extracts_multiple_models_from_one_file() -> None:
    models = extract_models([SourceFile(path="lib/models/Diagram.ts", content=DIAGRAM_MODEL)])

    assert [model.name for model in models] == ["FieldDef", "Diagram"]
    field_def, diagram = models
    assert [field.name for field in field_def.fields] == [
        "name",
        "type",
        "required",
        "ref",
        "enumValues",
    ]
    assert field_def.fields[2].default_value == "false"
    assert field_def.fields[4].is_array is True

    repository_id, nested = diagram.fields
    assert repository_id.type is FieldType.OBJECT_ID
    assert repository_id.ref == "Repository"
    assert repository_id.required is True
    assert nested.is_array is True
    assert nested.type is FieldType.MIXED
    assert diagram.file_path == "lib/models/Diagram.ts"


def test_files_without_schema_token_are_skipped() -> None:
    extractor = SchemaExtractor()

    assert extractor.extract_file(SourceFile(path="a.js", content="const x = { a: String };")) == []
    assert extractor.extract_file(SourceFile(path="b.js", content="")) == []


def test_blocks_without_fields_are_not_emitted() -> None:
    content = """
        const emptySchema = new Schema({});
        const spreadSchema = new Schema({ ...base });
        const realSchema = new Schema({ title: String });
    """

    models = extract_models([SourceFile(path="models/x.js", content=content)])

    assert [model.name for model in models] == ["Real"]


def test_unbalanced_block_yields_nothing() -> None:
    models = extract_models([SourceFile(path="models/x.js", content="new Schema({ foo: String")])

    assert models == []


def test_colliding_names_are_suffixed_in_file_order() -> None:
    order = "const orderSchema = new Schema({ total: Number });"
    files = [
        SourceFile(path="services/a/models/order.js", content=order),
        SourceFile(path="services/b/models/order.ts", content=order),
        SourceFile(path="services/c/models/order.ts", content=order),
    ]

    models = extract_models(files)

    assert [model.name for model in models] == ["Order", "Order_order.ts", "Order_order.ts_2"]
    assert [model.file_path for model in models] == [file.path for file in files]


def test_extraction_is_deterministic() -> None:
    files = [
        SourceFile(path="models/user.js", content=DIAGRAM_MODEL),
        SourceFile(path="models/other.js", content=DIAGRAM_MODEL),
    ]

    first = [model.to_dict() for model in extract_models(files)]
    second = [model.to_dict() for model in extract_models(files)]

    assert first == second
    assert [entry["name"] for entry in first] == [
        "FieldDef",
        "Diagram",
        "FieldDef_other.js",
        "Diagram_other.js",
    ]


def test_registry_can_be_shared_across_batches() -> None:
    registry = NameRegistry()
    content = "const userSchema = new Schema({ email: String });"

    first = extract_models([SourceFile(path="a/user.js", content=content)], registry)
    second = extract_models([SourceFile(path="b/user.js", content=content)], registry)

    assert first[0].name == "User"
    assert second[0].name == "User_user.js"
    assert "User" in registry
    assert len(registry) == 2


def test_adversarial_input_finishes_quickly() -> None:
    content = "Schema " + "new Schema({ a: { " * 1000 + "new Schema<" * 2000 + "(" * 5000

    started = time.perf_counter()
    models = extract_models([SourceFile(path="x.js", content=content)])
    elapsed = time.perf_counter() - started

    assert models == []
    assert elapsed < 10.0


def test_many_unterminated_constructors_scale_linearly() -> None:
    content = "Schema " + "new Schema({ a: String, " * 20000

    started = time.perf_counter()
    models = extract_models([SourceFile(path="models/x.js", content=content)])
    elapsed = time.perf_counter() - started

    assert models == []
    assert elapsed < 5.0


def test_many_small_schemas_in_one_file() -> None:
    content = "".join(f"const m{i}Schema = new Schema({{ v: Number }});\n" for i in range(3000))

    models = extract_models([SourceFile(path="models/bulk.js", content=content)])

    assert len(models) == 3000
    assert models[0].name == "M0"
    assert models[-1].name == "M2999"
