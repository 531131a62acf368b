# descriptor/models.py
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class KeyKind(str, Enum):
    NONE = "NONE"
    INDEXED = "INDEXED"
    UNIQUE = "UNIQUE"
    PRIMARY = "PRIMARY"


class ColumnSpec(BaseModel):
    """Expected column: name, semantic base type and optional constraints."""

    model_config = ConfigDict(frozen=True)

    name: str
    expected_type: str
    nullable: Optional[bool] = None
    key_kind: Optional[KeyKind] = None

    @field_validator("expected_type")
    @classmethod
    def _lower_type(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("expected_type must not be empty")
        return v


class TableSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    columns: List[ColumnSpec]

    @model_validator(mode="after")
    def _unique_columns(self) -> "TableSpec":
        seen = set()
        for col in self.columns:
            if col.name in seen:
                raise ValueError(f"duplicate column '{col.name}' in table '{self.name}'")
            seen.add(col.name)
        return self

    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]


class SchemaDescriptor(BaseModel):
    """
    Expected schema: table name -> TableSpec.

    Iteration order is declaration order; validation reports and repair
    follow it.
    """

    model_config = ConfigDict(frozen=True)

    tables: Dict[str, TableSpec]

    @model_validator(mode="after")
    def _keys_match_names(self) -> "SchemaDescriptor":
        for key, spec in self.tables.items():
            if key != spec.name:
                raise ValueError(f"table key '{key}' does not match spec name '{spec.name}'")
        return self

    @classmethod
    def from_tables(cls, *tables: TableSpec) -> "SchemaDescriptor":
        return cls(tables={t.name: t for t in tables})

    def table_names(self) -> List[str]:
        return list(self.tables.keys())

    def specs(self) -> List[TableSpec]:
        return list(self.tables.values())
