import re
from typing import Optional, Sequence

from rdbscan.domain.models import (
    ColumnSpec,
    Dialect,
    ResolvedIncrementalColumn,
    WatermarkComparison,
)

_FILTER_TOKENS = re.compile(r"'(?:[^']|'')*'|\"[^\"]*\"|\(|\)|\bOR\b", re.IGNORECASE)


def _has_top_level_or(where: str) -> bool:
    depth = 0
    for match in _FILTER_TOKENS.finditer(where):
        token = match.group(0)
        if token == "(":
            depth += 1
        elif token == ")":
            depth -= 1
        elif token.upper() == "OR" and depth == 0:
            return True
    return False


class QueryBuilder:
    def __init__(self, dialect: Dialect):
        self.dialect = dialect

    def incremental_predicate(
        self,
        incremental_column: Optional[ResolvedIncrementalColumn],
        start_location,
        comparison: WatermarkComparison = WatermarkComparison.STRICT,
    ) -> str:
        """`<column> > <watermark>`, or `>=` for inclusive comparison. Without watermark there is no lower bound."""
        if incremental_column is None or start_location is None:
            return ""
        return self.dialect.incremental_predicate(
            incremental_column.name,
            incremental_column.native_type,
            start_location,
            WatermarkComparison(comparison).operator,
        )

    def build(
        self,
        projection: Sequence[ColumnSpec],
        table: str,
        where: str = "",
        incremental_predicate: str = "",
        split_predicate: str = "",
    ) -> str:
        columns = ", ".join(
            self.dialect.quote_identifier(column.name) for column in projection
        )
        sql = f"SELECT {columns} FROM {self.dialect.quote_table(table)}"

        where = (where or "").strip()
        if where and _has_top_level_or(where) and (incremental_predicate or split_predicate):
            where = f"({where})"

        clauses = [
            clause
            for clause in (where, incremental_predicate, split_predicate)
            if clause
        ]
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        return sql
