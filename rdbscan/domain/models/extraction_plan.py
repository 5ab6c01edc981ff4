from typing import Optional, Tuple

from rdbscan.domain.models.base import BaseModel
from rdbscan.domain.models.connection import ConnectionParams
from rdbscan.domain.models.dialect import Dialect
from rdbscan.domain.models.incremental import ResolvedIncrementalColumn
from rdbscan.domain.models.read_request import ColumnSpec
from rdbscan.domain.models.split_plan import SplitPlan


class ExtractionPlan(BaseModel):
    """Everything an executor needs to run one read request.

    `query` holds named bind parameters for the split predicate when the scan is
    partitioned; every partition carries the values for those parameters and the
    statement with the values filled in.
    """

    query: str
    fetch_size: int
    query_timeout: int
    projection: Tuple[ColumnSpec, ...]
    split_plan: SplitPlan
    dialect: Dialect
    connection: Optional[ConnectionParams] = None
    incremental_column: Optional[ResolvedIncrementalColumn] = None

    @property
    def driver(self) -> str:
        return self.dialect.driver

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(column.name for column in self.projection)

    @property
    def partitions(self):
        return self.split_plan.partitions

    def preview_sql(self, limit: int = 10) -> str:
        return self.dialect.limit(self.partitions[0].sql, limit)

    def __repr__(self):
        return f'<ExtractionPlan dialect="{self.dialect.name}" partitions={self.split_plan.num_partitions}>'

    def __str__(self):
        return repr(self)
