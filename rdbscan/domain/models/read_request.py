from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple, Union

from pydantic import Field, field_validator, model_validator

from rdbscan.domain.models.base import BaseModel
from rdbscan.domain.models.connection import ConnectionParams

Watermark = Union[datetime, date, int, float, str]


class WatermarkComparison(str, Enum):
    STRICT = "strict"
    INCLUSIVE = "inclusive"

    @property
    def operator(self) -> str:
        return ">" if self == WatermarkComparison.STRICT else ">="


class ColumnSpec(BaseModel):
    name: str
    type: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _check_name(cls, name: str) -> str:
        name = name.strip()
        if not name:
            raise ValueError("Column name cannot be empty")
        if name == "*":
            raise ValueError("'*' is not supported, list the columns explicitly")
        return name

    @classmethod
    def build(cls, value) -> "ColumnSpec":
        if isinstance(value, ColumnSpec):
            return value
        if isinstance(value, str):
            return cls(name=value)
        if isinstance(value, dict):
            return cls(**value)
        raise ValueError(f"Cannot build a column from {value!r}")

    def with_type(self, type_: str) -> "ColumnSpec":
        return self.model_copy(update={"type": type_})


class ReadRequest(BaseModel):
    source_kind: str
    table: str
    columns: Tuple[ColumnSpec, ...]
    connection: Optional[ConnectionParams] = None
    where: str = ""
    parallelism: int = Field(default=1, ge=1)
    split_key: Optional[str] = None
    incremental_column: Optional[str] = None
    start_location: Optional[Watermark] = None
    watermark_comparison: WatermarkComparison = WatermarkComparison.STRICT
    fetch_size: int = Field(default=0, ge=0)
    query_timeout: int = Field(default=0, ge=0)

    @field_validator("source_kind", "table")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Value cannot be empty")
        return value

    @field_validator("columns", mode="before")
    @classmethod
    def _build_columns(cls, columns):
        if isinstance(columns, (str, dict)):
            columns = [columns]
        return tuple(ColumnSpec.build(column) for column in columns)

    @field_validator("where", mode="before")
    @classmethod
    def _normalize_where(cls, where):
        return (where or "").strip()

    @field_validator("incremental_column", mode="before")
    @classmethod
    def _normalize_incremental_column(cls, column):
        if column is not None:
            column = column.strip()
        return column or None

    @model_validator(mode="after")
    def _check_columns(self):
        if not self.columns:
            raise ValueError("At least one column must be selected")

        seen = set()
        for column in self.columns:
            if column.name in seen:
                raise ValueError(f"Column '{column.name}' is selected more than once")
            seen.add(column.name)
        return self

    def __repr__(self):
        return f'<ReadRequest source_kind="{self.source_kind}" table="{self.table}">'

    def __str__(self):
        return repr(self)
