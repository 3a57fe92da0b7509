"""
Pydantic 模型定义
"""
from schemagraph.schemas.schema import (
    ColumnSchema,
    RelationshipSchema,
    TableSchema,
    SchemaMetadata,
    SchemaInput,
    load_schema,
)

__all__ = [
    "ColumnSchema",
    "RelationshipSchema",
    "TableSchema",
    "SchemaMetadata",
    "SchemaInput",
    "load_schema",
]
