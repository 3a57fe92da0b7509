"""
数据库 Schema 数据模型

定义表结构、列信息和表关系的 Pydantic 模型，是布局引擎和分析引擎共同的输入。
兼容各类导入器（SQL / JSON / CSV / 纯文本解析器）输出的 camelCase 字段名。
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

logger = logging.getLogger(__name__)

ONE = "1"
MANY = "many"

# relation_type -> (from_cardinality, to_cardinality)
RELATION_TYPE_CARDINALITY = {
    "ONE_TO_ONE": (ONE, ONE),
    "ONE_TO_MANY": (ONE, MANY),
    "MANY_TO_ONE": (MANY, ONE),
    "MANY_TO_MANY": (MANY, MANY),
}


def _blank_to_false(value: Any) -> Any:
    return False if value is None else value


class ColumnSchema(BaseModel):
    """列信息模型"""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field("", description="Column name")
    data_type: str = Field(
        "",
        validation_alias=AliasChoices("data_type", "type", "dataType"),
        description="Data type, e.g., 'varchar', 'int'"
    )
    comment: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("comment", "description"),
        description="Column description or comment"
    )
    is_primary_key: bool = Field(
        False,
        validation_alias=AliasChoices("is_primary_key", "isPrimary", "isPrimaryKey", "primary_key"),
        description="Whether this column is part of the primary key"
    )
    is_foreign_key: bool = Field(
        False,
        validation_alias=AliasChoices("is_foreign_key", "isForeign", "isForeignKey", "foreign_key"),
        description="Whether this column is a foreign key"
    )
    required: bool = Field(
        False,
        validation_alias=AliasChoices("required", "notNull", "not_null"),
        description="NOT NULL constraint"
    )
    nullable: Optional[bool] = Field(None, description="Explicit nullability, False implies required")
    unique: bool = Field(False, description="UNIQUE constraint")
    indexed: bool = Field(False, description="Whether the column is covered by an index")
    check: Optional[Union[bool, str]] = Field(None, description="CHECK constraint flag or expression")
    default_value: Optional[Any] = Field(
        None,
        validation_alias=AliasChoices("default_value", "defaultValue", "default")
    )
    constraints: List[str] = Field(default_factory=list, description="Raw constraint keywords")
    sample_values: Optional[List[str]] = Field(default=None, description="Sample values or enum options")

    @model_validator(mode="before")
    @classmethod
    def _parse_shorthand(cls, data: Any) -> Any:
        # "column_name TYPE ..." 简写形式
        if isinstance(data, str):
            parts = data.strip().split()
            return {
                "name": parts[0] if parts else "",
                "type": parts[1] if len(parts) > 1 else "",
                "constraints": [" ".join(parts[2:])] if len(parts) > 2 else [],
            }
        return data

    @field_validator("is_primary_key", "is_foreign_key", "required", "unique", "indexed", mode="before")
    @classmethod
    def _none_is_false(cls, value: Any) -> Any:
        return _blank_to_false(value)

    @field_validator("name", mode="before")
    @classmethod
    def _name_to_str(cls, value: Any) -> Any:
        # CSV 表头等来源可能给出数字列名
        return "" if value is None else str(value).strip()

    @field_validator("data_type", mode="before")
    @classmethod
    def _type_to_str(cls, value: Any) -> Any:
        return "" if value is None else str(value)

    @field_validator("constraints", mode="before")
    @classmethod
    def _constraints_to_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    @model_validator(mode="after")
    def _apply_constraints(self) -> "ColumnSchema":
        if not self.constraints:
            return self
        text = " ".join(self.constraints).upper()
        if "PRIMARY KEY" in text:
            self.is_primary_key = True
        if "FOREIGN KEY" in text or "REFERENCES" in text:
            self.is_foreign_key = True
        if "NOT NULL" in text:
            self.required = True
        if "UNIQUE" in text:
            self.unique = True
        if "INDEX" in text:
            self.indexed = True
        if "CHECK" in text and not self.check:
            self.check = True
        return self

    @property
    def is_required(self) -> bool:
        return self.required or self.nullable is False

    @property
    def has_check(self) -> bool:
        return bool(self.check)

    @property
    def has_constraint(self) -> bool:
        return (
            self.is_primary_key or self.is_foreign_key or self.unique
            or self.is_required or self.has_check
        )


class RelationshipSchema(BaseModel):
    """
    表关系模型

    有向边 source_table -> target_table。字段名同时兼容
    sourceTable/fromTable、sourceColumn/fromColumn、fromCardinality 等写法。
    """
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, description="Relationship id")
    name: Optional[str] = Field(None, description="Constraint name")
    source_table: str = Field(
        "",
        validation_alias=AliasChoices("source_table", "sourceTable", "from_table", "fromTable"),
        description="Source (referencing) table name"
    )
    target_table: str = Field(
        "",
        validation_alias=AliasChoices("target_table", "targetTable", "to_table", "toTable"),
        description="Target (referenced) table name"
    )
    source_column: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("source_column", "sourceColumn", "from_column", "fromColumn")
    )
    target_column: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("target_column", "targetColumn", "to_column", "toColumn")
    )
    source_columns: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("source_columns", "sourceColumns", "from_columns", "fromColumns"),
        description="Composite key columns on the source side"
    )
    target_columns: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("target_columns", "targetColumns", "to_columns", "toColumns")
    )
    from_cardinality: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("from_cardinality", "fromCardinality", "source_cardinality")
    )
    to_cardinality: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("to_cardinality", "toCardinality", "target_cardinality")
    )
    relation_type: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("relation_type", "relationType", "type"),
        description="Relationship type: MANY_TO_ONE, ONE_TO_MANY, ONE_TO_ONE, MANY_TO_MANY"
    )

    @model_validator(mode="before")
    @classmethod
    def _unpack_endpoints(cls, data: Any) -> Any:
        # {"from": {"table": ..., "column": ...}, "to": {...}} 形式
        if isinstance(data, Mapping) and isinstance(data.get("from"), Mapping):
            data = dict(data)
            src = data.pop("from")
            dst = data.pop("to", None) or {}
            data.setdefault("source_table", src.get("table", ""))
            data.setdefault("source_column", src.get("column"))
            data.setdefault("target_table", dst.get("table", ""))
            data.setdefault("target_column", dst.get("column"))
        return data

    @field_validator("source_table", "target_table", mode="before")
    @classmethod
    def _table_to_str(cls, value: Any) -> Any:
        return "" if value is None else str(value)

    @field_validator("from_cardinality", "to_cardinality", mode="before")
    @classmethod
    def _cardinality_to_str(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        return str(value).strip()

    @field_validator("source_columns", "target_columns", mode="before")
    @classmethod
    def _columns_to_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [c.strip() for c in value.split(",") if c.strip()]
        return value

    @model_validator(mode="after")
    def _derive_cardinality(self) -> "RelationshipSchema":
        if self.from_cardinality is None and self.to_cardinality is None and self.relation_type:
            key = self.relation_type.strip().upper().replace("-", "_").replace(" ", "_")
            pair = RELATION_TYPE_CARDINALITY.get(key)
            if pair:
                self.from_cardinality, self.to_cardinality = pair
        return self

    @property
    def is_self_referencing(self) -> bool:
        return self.source_table == self.target_table

    @property
    def has_cardinality(self) -> bool:
        return bool(self.from_cardinality) and bool(self.to_cardinality)

    @property
    def key_columns(self) -> List[str]:
        """源端列（复合键优先）"""
        if self.source_columns:
            return list(self.source_columns)
        return [self.source_column] if self.source_column else []

    @property
    def referenced_columns(self) -> List[str]:
        if self.target_columns:
            return list(self.target_columns)
        return [self.target_column] if self.target_column else []

    @property
    def label(self) -> str:
        return f"{self.source_table} -> {self.target_table}"


class TableSchema(BaseModel):
    """表结构模型"""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(description="Table name")
    comment: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("comment", "description"),
        description="Table description"
    )
    display_name: Optional[str] = Field(None, validation_alias=AliasChoices("display_name", "displayName"))
    columns: List[ColumnSchema] = Field(default_factory=list, description="List of columns")
    relationships: List[RelationshipSchema] = Field(
        default_factory=list,
        description="Foreign key relationships declared on this table (source table implied)"
    )
    x: Optional[float] = Field(None, description="Position assigned by the layout engine")
    y: Optional[float] = Field(None, description="Position assigned by the layout engine")

    @field_validator("name", mode="before")
    @classmethod
    def _name_to_str(cls, value: Any) -> Any:
        return "" if value is None else str(value).strip()

    @field_validator("columns", mode="before")
    @classmethod
    def _drop_invalid_columns(cls, value: Any) -> Any:
        # 单列不合法只丢弃该列，不能连带丢掉整张表
        columns, _ = _validate_entries(ColumnSchema, value, "column")
        return columns

    @field_validator("relationships", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @model_validator(mode="after")
    def _fill_relationship_source(self) -> "TableSchema":
        for rel in self.relationships:
            if not rel.source_table:
                rel.source_table = self.name
        return self

    @property
    def primary_keys(self) -> List[ColumnSchema]:
        return [c for c in self.columns if c.is_primary_key]

    @property
    def foreign_keys(self) -> List[ColumnSchema]:
        return [c for c in self.columns if c.is_foreign_key]


class SchemaMetadata(BaseModel):
    """
    数据库 Schema 元数据

    表上声明的 relationships 在构造时会合并到顶层 relationships 列表中。
    """
    tables: List[TableSchema] = Field(default_factory=list, description="List of all tables in the schema")
    relationships: List[RelationshipSchema] = Field(default_factory=list, description="All relationships")
    database_name: str = Field("", description="Database name")
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("tables", "relationships", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @model_validator(mode="after")
    def _hoist_table_relationships(self) -> "SchemaMetadata":
        for table in self.tables:
            if table.relationships:
                self.relationships.extend(table.relationships)
                table.relationships = []
        return self

    def get_table(self, name: str) -> Optional[TableSchema]:
        for table in self.tables:
            if table.name == name:
                return table
        return None

    @property
    def table_names(self) -> List[str]:
        return [t.name for t in self.tables]


SchemaInput = Union[SchemaMetadata, Mapping[str, Any], None]


def _validate_entries(model, entries: Any, kind: str) -> Tuple[list, int]:
    valid = []
    dropped = 0
    if entries is None:
        return valid, dropped
    if not isinstance(entries, (list, tuple)):
        logger.warning(f"[load_schema] '{kind}' is not a list, ignored")
        return valid, dropped
    for index, entry in enumerate(entries):
        try:
            valid.append(model.model_validate(entry))
        except ValidationError as e:
            dropped += 1
            logger.warning(f"[load_schema] Invalid {kind} entry #{index} dropped: {e.error_count()} error(s)")
    return valid, dropped


def load_schema(data: SchemaInput) -> SchemaMetadata:
    """
    把导入器输出的原始结构转换为 SchemaMetadata（尽力而为，不抛异常）

    - None / 缺失数组 视为空
    - 无表名的表、缺少源表或目标表的关系会被丢弃并记录 warning
    - 不合法的列只丢弃该列，表本身保留
    - 重名表只保留第一次出现的定义

    Args:
        data: SchemaMetadata、dict 或 None

    Returns:
        SchemaMetadata
    """
    if data is None:
        return SchemaMetadata()
    if isinstance(data, SchemaMetadata):
        return data
    if not isinstance(data, Mapping):
        logger.warning(f"[load_schema] Unsupported schema input type: {type(data).__name__}")
        return SchemaMetadata()

    tables, _ = _validate_entries(TableSchema, data.get("tables"), "table")
    relationships, _ = _validate_entries(RelationshipSchema, data.get("relationships"), "relationship")

    unique_tables: List[TableSchema] = []
    seen = set()
    for table in tables:
        if not table.name:
            logger.warning("[load_schema] Table without name dropped")
            continue
        if table.name in seen:
            logger.warning(f"[load_schema] Duplicate table '{table.name}' ignored")
            continue
        seen.add(table.name)
        unique_tables.append(table)

    kept_relationships = []
    for rel in relationships:
        if not rel.source_table or not rel.target_table:
            logger.warning("[load_schema] Relationship without source/target table dropped")
            continue
        kept_relationships.append(rel)

    return SchemaMetadata(
        tables=unique_tables,
        relationships=kept_relationships,
        database_name=str(data.get("database_name") or data.get("databaseName") or ""),
        metadata=dict(data.get("metadata") or {}),
    )
